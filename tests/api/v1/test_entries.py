"""
Test entry and ledger endpoints end to end
"""
import pytest


def _entry_payload(members, amount=90, description="Groceries"):
    return {
        "date": "2024-05-01T18:30:00Z",
        "description": description,
        "amount": amount,
        "selected_members": [m.user_id for m in members]
    }


async def _create(client, headers_for, payer, members, **kwargs):
    response = await client.post(
        "/api/v1/entries",
        json=_entry_payload(members, **kwargs),
        headers=headers_for(payer)
    )
    assert response.status_code == 201
    return response.json()


async def _ledger(client, headers_for, user):
    response = await client.get("/api/v1/ledger", headers=headers_for(user))
    assert response.status_code == 200
    return response.json()


def _row(view, user):
    return next(r for r in view["members"] if r["user_id"] == user.user_id)


@pytest.mark.asyncio
async def test_entry_endpoints_require_auth(client):
    """Test requests without a valid token are refused"""
    response = await client.get(
        "/api/v1/entries",
        headers={"Authorization": "Bearer garbage"}
    )
    assert response.status_code == 401
    
    response = await client.get("/api/v1/ledger")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_create_entry_updates_ledgers(client, headers_for, alice, bob, charlie):
    """Test creating an entry charges every selected member one share"""
    entry = await _create(client, headers_for, alice, [bob, charlie])
    
    assert entry["share"] == 30
    assert entry["paid_by"] == alice.user_id
    assert len(entry["members"]) == 3
    
    alice_view = await _ledger(client, headers_for, alice)
    bob_view = await _ledger(client, headers_for, bob)
    
    assert _row(alice_view, bob)["receivable"] == 30
    assert _row(alice_view, charlie)["receivable"] == 30
    assert alice_view["total_receivable"] == 60
    assert alice_view["net"] == 60
    assert _row(bob_view, alice)["payable"] == 30
    assert _row(bob_view, charlie) == {
        "user_id": charlie.user_id,
        "user_name": "Charlie",
        "payable": 0,
        "receivable": 0
    }


@pytest.mark.asyncio
async def test_create_entry_rejects_bad_input(client, headers_for, alice, bob):
    """Test invalid entries are rejected before anything is written"""
    response = await client.post(
        "/api/v1/entries",
        json=_entry_payload([bob], amount=0),
        headers=headers_for(alice)
    )
    assert response.status_code == 422
    
    response = await client.post(
        "/api/v1/entries",
        json=_entry_payload([alice]),
        headers=headers_for(alice)
    )
    assert response.status_code == 400
    
    response = await client.post(
        "/api/v1/entries",
        json={**_entry_payload([bob]), "selected_members": ["nonsense"]},
        headers=headers_for(alice)
    )
    assert response.status_code == 400
    
    listing = await client.get("/api/v1/entries", headers=headers_for(alice))
    assert listing.json()["pagination"]["total_entries"] == 0


@pytest.mark.asyncio
async def test_settle_and_double_settle(client, headers_for, alice, bob, charlie):
    """Test a member settles once and a second attempt conflicts"""
    entry = await _create(client, headers_for, alice, [bob, charlie])
    
    response = await client.post(
        f"/api/v1/entries/{entry['id']}/settle",
        headers=headers_for(bob)
    )
    assert response.status_code == 200
    bob_member = next(m for m in response.json()["members"] if m["user_id"] == bob.user_id)
    assert bob_member["paid_status"] is True
    
    again = await client.post(
        f"/api/v1/entries/{entry['id']}/settle",
        headers=headers_for(bob)
    )
    assert again.status_code == 409
    
    alice_view = await _ledger(client, headers_for, alice)
    assert _row(alice_view, bob)["receivable"] == 0
    assert _row(alice_view, charlie)["receivable"] == 30


@pytest.mark.asyncio
async def test_payer_cannot_settle_own_entry(client, headers_for, alice, bob):
    """Test the payer has nothing to settle"""
    entry = await _create(client, headers_for, alice, [bob])
    
    response = await client.post(
        f"/api/v1/entries/{entry['id']}/settle",
        headers=headers_for(alice)
    )
    
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_settle_unknown_entry(client, headers_for, bob):
    """Test settling an entry that does not exist"""
    response = await client.post(
        "/api/v1/entries/507f1f77bcf86cd799439011/settle",
        headers=headers_for(bob)
    )
    
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_request_and_confirm_payment(client, headers_for, alice, bob, charlie):
    """Test the pending confirmation flow"""
    entry = await _create(client, headers_for, alice, [bob, charlie])
    
    response = await client.post(
        f"/api/v1/entries/{entry['id']}/request-confirmation",
        headers=headers_for(bob)
    )
    assert response.status_code == 200
    
    pending = await client.get("/api/v1/entries/pending", headers=headers_for(alice))
    assert [e["id"] for e in pending.json()] == [entry["id"]]
    
    # Only the payer confirms
    response = await client.post(
        f"/api/v1/entries/{entry['id']}/members/{bob.user_id}/confirm",
        headers=headers_for(charlie)
    )
    assert response.status_code == 403
    
    response = await client.post(
        f"/api/v1/entries/{entry['id']}/members/{bob.user_id}/confirm",
        headers=headers_for(alice)
    )
    assert response.status_code == 200
    bob_member = next(m for m in response.json()["members"] if m["user_id"] == bob.user_id)
    assert bob_member["paid_status"] is True
    assert bob_member["is_pending"] is False
    
    pending = await client.get("/api/v1/entries/pending", headers=headers_for(alice))
    assert pending.json() == []
    
    bob_view = await _ledger(client, headers_for, bob)
    assert _row(bob_view, alice)["payable"] == 0


@pytest.mark.asyncio
async def test_delete_entry_restores_ledgers(client, headers_for, alice, bob, charlie):
    """Test deleting an entry takes back every outstanding share"""
    first = await _create(client, headers_for, alice, [bob, charlie], amount=100)
    await _create(client, headers_for, bob, [alice], amount=40, description="Takeaway")
    
    forbidden = await client.delete(
        f"/api/v1/entries/{first['id']}",
        headers=headers_for(bob)
    )
    assert forbidden.status_code == 403
    
    response = await client.delete(
        f"/api/v1/entries/{first['id']}",
        headers=headers_for(alice)
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    
    alice_view = await _ledger(client, headers_for, alice)
    assert _row(alice_view, bob) == {
        "user_id": bob.user_id,
        "user_name": "Bob",
        "payable": 20,
        "receivable": 0
    }
    assert _row(alice_view, charlie)["receivable"] == 0
    
    missing = await client.delete(
        f"/api/v1/entries/{first['id']}",
        headers=headers_for(alice)
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_entry_listing_pages(client, headers_for, alice, bob, charlie):
    """Test room and personal listings with pagination"""
    for day in range(1, 4):
        await client.post(
            "/api/v1/entries",
            json={**_entry_payload([bob]), "date": f"2024-05-0{day}T12:00:00Z", "description": f"Day {day}"},
            headers=headers_for(alice)
        )
    await _create(client, headers_for, charlie, [alice], description="Bread")
    
    response = await client.get("/api/v1/entries?page=1&limit=2", headers=headers_for(bob))
    data = response.json()
    assert data["pagination"] == {"page": 1, "limit": 2, "total_pages": 2, "total_entries": 4}
    assert [e["description"] for e in data["entries"]] == ["Day 3", "Day 2"]
    
    mine = await client.get("/api/v1/entries/mine", headers=headers_for(charlie))
    assert [e["description"] for e in mine.json()["entries"]] == ["Bread"]
    
    too_big = await client.get("/api/v1/entries?limit=500", headers=headers_for(bob))
    assert too_big.status_code == 422
