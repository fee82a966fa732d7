from redweb.models.message import conversation_key
from redweb.store import MESSAGES


def _send(client, sender, receiver, content="Hello"):
    return client.post("/api/messages/send", headers=sender["headers"], json={
        "receiverId": receiver["id"],
        "content": content,
    })


def test_conversation_key_is_order_independent():
    assert conversation_key("b", "a") == conversation_key("a", "b") == "a-b"


def test_send_message(client, alice, bob):
    resp = _send(client, alice, bob, "  Can you donate?  ")

    assert resp.status_code == 201
    message = resp.get_json()
    assert message["senderId"] == alice["id"]
    assert message["receiverId"] == bob["id"]
    assert message["content"] == "Can you donate?"
    assert message["read"] is False
    assert message["timestamp"]


def test_send_message_validation(client, alice):
    empty = client.post("/api/messages/send", headers=alice["headers"], json={"receiverId": "x", "content": "   "})
    assert empty.status_code == 400
    assert empty.get_json()["message"] == "Receiver ID and content are required"

    to_self = _send(client, alice, alice)
    assert to_self.status_code == 400

    unknown = client.post("/api/messages/send", headers=alice["headers"], json={
        "receiverId": "ghost", "content": "hi",
    })
    assert unknown.status_code == 404
    assert unknown.get_json()["message"] == "Receiver not found"


def test_conversation_thread_is_chronological(client, alice, bob, store):
    store.save(MESSAGES, [
        {"id": "m2", "senderId": bob["id"], "receiverId": alice["id"], "content": "second",
         "timestamp": "2024-01-02T00:00:00.000Z", "read": False},
        {"id": "m1", "senderId": alice["id"], "receiverId": bob["id"], "content": "first",
         "timestamp": "2024-01-01T00:00:00.000Z", "read": False},
        {"id": "m3", "senderId": bob["id"], "receiverId": "someone", "content": "elsewhere",
         "timestamp": "2024-01-03T00:00:00.000Z", "read": False},
    ])

    resp = client.get(f"/api/messages/conversation/{bob['id']}", headers=alice["headers"])
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["conversationId"] == conversation_key(alice["id"], bob["id"])
    assert body["otherUser"]["email"] == "bob@example.com"
    assert "passwordHash" not in body["otherUser"]
    assert [m["id"] for m in body["messages"]] == ["m1", "m2"]


def test_conversations_list_latest_and_unread(client, alice, bob, signup, store):
    carol = signup("carol@example.com", firstName="Carol")

    def message(n, sender, receiver, content, read=False):
        return {
            "id": f"m{n}",
            "senderId": sender["id"],
            "receiverId": receiver["id"],
            "content": content,
            "timestamp": f"2024-01-0{n}T00:00:00.000Z",
            "read": read,
        }

    store.save(MESSAGES, [
        message(1, bob, alice, "one"),
        message(2, alice, bob, "two"),
        message(3, bob, alice, "three"),
        message(4, carol, alice, "from carol"),
        message(5, carol, bob, "not for alice"),
    ])

    conversations = client.get("/api/messages/conversations", headers=alice["headers"]).get_json()
    assert len(conversations) == 2

    by_other = {c["otherUser"]["id"]: c for c in conversations}
    assert by_other[bob["id"]]["lastMessage"]["content"] == "three"
    assert by_other[bob["id"]]["unreadCount"] == 2
    assert by_other[carol["id"]]["unreadCount"] == 1
    assert conversations[0]["otherUser"]["id"] == carol["id"]


def test_mark_read_only_incoming_from_that_user(client, alice, bob, store):
    _send(client, bob, alice, "one")
    _send(client, bob, alice, "two")
    _send(client, alice, bob, "reply")

    resp = client.put(f"/api/messages/mark-read/{bob['id']}", headers=alice["headers"])
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "updated": 2}

    unread = [m for m in store.load(MESSAGES) if not m["read"]]
    assert [m["content"] for m in unread] == ["reply"]


def test_search_users(client, alice, bob, signup):
    signup("bobby@example.com", firstName="Bobby", lastName="Tables")

    assert client.get("/api/messages/search-users?query=b", headers=alice["headers"]).get_json() == []

    found = client.get("/api/messages/search-users?query=BOB", headers=alice["headers"]).get_json()
    assert {u["email"] for u in found} == {"bob@example.com", "bobby@example.com"}
    assert all("passwordHash" not in u for u in found)

    # the caller never finds themselves
    own = client.get("/api/messages/search-users?query=alice", headers=alice["headers"]).get_json()
    assert own == []


def test_search_is_capped(client, alice, signup):
    for n in range(12):
        signup(f"donor{n}@example.com", firstName="Donor")

    found = client.get("/api/messages/search-users?query=donor", headers=alice["headers"]).get_json()
    assert len(found) == 10
