from redweb.store import BLOOD_REQUESTS, DONATION_DRIVES, DONATION_HISTORY, NOTIFICATIONS


def _create(client, account, **fields):
    payload = {"bloodType": "A+", "units": 2, "hospital": "City General", "urgency": "HIGH"}
    payload.update(fields)
    resp = client.post("/api/blood-requests", headers=account["headers"], json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()


def test_create_request_stamps_owner_and_defaults(client, alice):
    created = _create(client, alice, status="fulfilled", responses=[{"userId": "x"}])

    assert created["id"]
    assert created["requesterId"] == alice["id"]
    assert created["userId"] == alice["id"]
    assert created["status"] == "pending"
    assert created["responses"] == []
    assert created["hospital"] == "City General"
    assert created["createdAt"] == created["updatedAt"]


def test_create_request_validates(client, alice):
    assert client.post("/api/blood-requests", headers=alice["headers"], json={}).status_code == 400
    bad_type = client.post("/api/blood-requests", headers=alice["headers"], json={"bloodType": "Z+"})
    assert bad_type.status_code == 400
    bad_units = client.post(
        "/api/blood-requests", headers=alice["headers"], json={"bloodType": "A+", "units": 0},
    )
    assert bad_units.status_code == 400


def test_urgency_aliases_are_canonicalized(client, alice):
    assert _create(client, alice, urgency="urgent")["urgency"] == "HIGH"
    assert _create(client, alice, urgency="emergency")["urgency"] == "CRITICAL"
    assert _create(client, alice, urgency=None)["urgency"] == "NORMAL"

    resp = client.post(
        "/api/blood-requests", headers=alice["headers"], json={"bloodType": "A+", "urgency": "soon"},
    )
    assert resp.status_code == 400


def test_requests_require_a_token(client):
    assert client.get("/api/blood-requests").status_code == 401


def test_list_get_and_my_requests(client, alice, bob):
    mine = _create(client, alice)
    _create(client, bob)

    everything = client.get("/api/blood-requests", headers=bob["headers"]).get_json()
    assert len(everything) == 2

    own = client.get("/api/blood-requests/my", headers=alice["headers"]).get_json()
    assert [r["id"] for r in own] == [mine["id"]]

    one = client.get(f"/api/blood-requests/{mine['id']}", headers=bob["headers"])
    assert one.status_code == 200
    assert one.get_json()["id"] == mine["id"]

    missing = client.get("/api/blood-requests/nope", headers=bob["headers"])
    assert missing.status_code == 404
    assert missing.get_json()["message"] == "Blood request not found"


def test_owner_can_update_but_protected_fields_stay(client, alice):
    created = _create(client, alice)

    resp = client.put(f"/api/blood-requests/{created['id']}", headers=alice["headers"], json={
        "units": 3,
        "urgency": "critical",
        "id": "hijacked",
        "requesterId": "someone-else",
        "createdAt": "2000-01-01T00:00:00Z",
    })

    assert resp.status_code == 200
    updated = resp.get_json()
    assert updated["units"] == 3
    assert updated["urgency"] == "CRITICAL"
    assert updated["id"] == created["id"]
    assert updated["requesterId"] == alice["id"]
    assert updated["createdAt"] == created["createdAt"]
    assert updated["updatedAt"] >= created["updatedAt"]


def test_non_owner_cannot_modify(client, alice, bob, store):
    created = _create(client, alice)
    url = f"/api/blood-requests/{created['id']}"

    assert client.put(url, headers=bob["headers"], json={"units": 9}).status_code == 403
    assert client.patch(f"{url}/status", headers=bob["headers"], json={"status": "fulfilled"}).status_code == 403
    assert client.delete(url, headers=bob["headers"]).status_code == 403

    stored = store.load(BLOOD_REQUESTS)[0]
    assert stored["units"] == 2
    assert stored["status"] == "pending"


def test_admin_can_modify_any_request(client, alice, admin):
    created = _create(client, alice)
    url = f"/api/blood-requests/{created['id']}"

    assert client.patch(f"{url}/status", headers=admin["headers"], json={"status": "cancelled"}).status_code == 200
    assert client.delete(url, headers=admin["headers"]).status_code == 200
    assert client.get(url, headers=admin["headers"]).status_code == 404


def test_status_patch_touches_only_status(client, alice):
    created = _create(client, alice)

    resp = client.patch(
        f"/api/blood-requests/{created['id']}/status",
        headers=alice["headers"],
        json={"status": "Canceled", "units": 50},
    )

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "cancelled"
    assert body["units"] == 2

    bad = client.patch(
        f"/api/blood-requests/{created['id']}/status", headers=alice["headers"], json={"status": "done"},
    )
    assert bad.status_code == 400


def test_respond_and_withdraw(client, alice, bob, store):
    created = _create(client, alice)
    url = f"/api/blood-requests/{created['id']}/respond"

    first = client.post(url, headers=bob["headers"])
    assert first.status_code == 200
    assert [r["userId"] for r in first.get_json()["request"]["responses"]] == [bob["id"]]

    again = client.post(url, headers=bob["headers"])
    assert again.status_code == 400
    assert again.get_json()["message"] == "Already responded to this request"

    own = client.post(url, headers=alice["headers"])
    assert own.status_code == 400

    # the owner hears about the response
    notifications = store.load(NOTIFICATIONS)
    assert [n["userId"] for n in notifications] == [alice["id"]]
    assert notifications[0]["type"] == "response"

    withdrawn = client.delete(url, headers=bob["headers"])
    assert withdrawn.status_code == 200
    assert withdrawn.get_json()["request"]["responses"] == []

    assert client.delete(url, headers=bob["headers"]).status_code == 400


def test_cannot_respond_to_closed_request(client, alice, bob):
    created = _create(client, alice)
    client.patch(
        f"/api/blood-requests/{created['id']}/status", headers=alice["headers"], json={"status": "fulfilled"},
    )

    resp = client.post(f"/api/blood-requests/{created['id']}/respond", headers=bob["headers"])
    assert resp.status_code == 400


def test_responders_view_is_owner_only(client, alice, bob, admin, signup):
    carol = signup("carol@example.com", bloodGroup="A+")
    signup("dave@example.com", bloodGroup="B-")
    created = _create(client, alice)
    client.post(f"/api/blood-requests/{created['id']}/respond", headers=bob["headers"])

    url = f"/api/blood-requests/{created['id']}/responders"
    assert client.get(url, headers=bob["headers"]).status_code == 403
    assert client.get(url, headers=admin["headers"]).status_code == 403

    resp = client.get(url, headers=alice["headers"])
    assert resp.status_code == 200
    body = resp.get_json()
    assert [r["id"] for r in body["responders"]] == [bob["id"]]
    assert body["responders"][0]["bloodType"] == "A+"
    assert "passwordHash" not in body["responders"][0]
    assert [p["id"] for p in body["potentialDonors"]] == [carol["id"]]
    assert body["stats"] == {"responded": 1, "potential": 1}


def test_statistics_are_recomputed_from_collections(client, alice, bob, store):
    _create(client, alice, urgency="CRITICAL")
    _create(client, alice, urgency="LOW")
    third = _create(client, bob, urgency="emergency")
    client.patch(
        f"/api/blood-requests/{third['id']}/status", headers=bob["headers"], json={"status": "fulfilled"},
    )

    store.save(DONATION_DRIVES, [
        {"id": "d1", "date": "2999-01-01"},
        {"id": "d2", "date": "2001-01-01"},
    ])
    store.save(DONATION_HISTORY, [{"id": "h1"}, {"id": "h2"}])

    resp = client.get("/api/blood-requests/statistics", headers=alice["headers"])
    assert resp.status_code == 200
    stats = resp.get_json()
    assert stats["total"] == 3
    assert stats["pending"] == 2
    assert stats["fulfilled"] == 1
    assert stats["cancelled"] == 0
    assert stats["byUrgency"] == {"LOW": 1, "NORMAL": 0, "HIGH": 0, "CRITICAL": 2}
    assert stats["activeRequests"] == 2
    assert stats["emergencyRequests"] == 2
    assert stats["upcomingDrives"] == 1
    assert stats["totalDonations"] == 2


def test_legacy_records_count_by_alias(client, alice, store):
    store.save(BLOOD_REQUESTS, [
        {"id": "old", "userId": alice["id"], "bloodType": "O+", "urgency": "urgent", "status": "PENDING"},
    ])

    stats = client.get("/api/blood-requests/statistics", headers=alice["headers"]).get_json()
    assert stats["pending"] == 1
    assert stats["byUrgency"]["HIGH"] == 1

    # userId is accepted as the owner when requesterId is absent
    own = client.get("/api/blood-requests/my", headers=alice["headers"]).get_json()
    assert [r["id"] for r in own] == ["old"]


def test_put_status_is_stored_canonical(client, alice, store):
    created = _create(client, alice)
    url = f"/api/blood-requests/{created['id']}"

    resp = client.put(url, headers=alice["headers"], json={"status": "CANCELED"})
    assert resp.status_code == 200
    assert store.load(BLOOD_REQUESTS)[0]["status"] == "cancelled"

    assert client.put(url, headers=alice["headers"], json={"status": "closed"}).status_code == 400
    stats = client.get("/api/blood-requests/statistics", headers=alice["headers"]).get_json()
    assert stats["cancelled"] == 1


def test_non_object_body_is_a_400(client, alice):
    created = _create(client, alice)

    resp = client.put(f"/api/blood-requests/{created['id']}", headers=alice["headers"], json=["x"])
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Request body must be a JSON object"

    resp = client.post("/api/blood-requests", headers=alice["headers"], json="A+")
    assert resp.status_code == 400
    resp = client.patch(f"/api/blood-requests/{created['id']}/status", headers=alice["headers"], json=[1])
    assert resp.status_code == 400
