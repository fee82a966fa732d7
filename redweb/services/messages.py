import logging

from redweb.errors import NotFoundError, ValidationError
from redweb.extensions import get_store
from redweb.models import find_by_id
from redweb.models.message import between, build_message, conversation_key, counterpart, involves
from redweb.models.user import display_fields
from redweb.services import save_or_fail
from redweb.store import MESSAGES, USERS
from redweb.utils.time import sort_key

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10
MIN_QUERY_LENGTH = 2


def list_conversations(caller):
    """Latest message per conversation key, newest conversation first."""
    user_id = caller["id"]
    latest = {}
    unread = {}

    for message in get_store().load(MESSAGES):
        if not involves(message, user_id):
            continue
        other_id = counterpart(message, user_id)
        key = conversation_key(user_id, other_id)

        if message.get("receiverId") == user_id and not message.get("read"):
            unread[key] = unread.get(key, 0) + 1

        current = latest.get(key)
        if current is None or sort_key(message.get("timestamp")) > sort_key(current.get("timestamp")):
            latest[key] = message

    users = get_store().load(USERS)
    conversations = []
    for key, message in latest.items():
        other = find_by_id(users, counterpart(message, user_id))
        conversations.append({
            "conversationId": key,
            "otherUser": display_fields(other),
            "lastMessage": {
                "content": message.get("content"),
                "timestamp": message.get("timestamp"),
                "senderId": message.get("senderId"),
            },
            "unreadCount": unread.get(key, 0),
        })

    conversations.sort(key=lambda c: sort_key(c["lastMessage"]["timestamp"]), reverse=True)
    return conversations


def get_conversation(caller, other_user_id):
    messages = [
        m for m in get_store().load(MESSAGES) if between(m, caller["id"], other_user_id)
    ]
    messages.sort(key=lambda m: sort_key(m.get("timestamp")))

    other = find_by_id(get_store().load(USERS), other_user_id)
    return {
        "conversationId": conversation_key(caller["id"], other_user_id),
        "otherUser": display_fields(other),
        "messages": messages,
    }


def send_message(caller, data):
    data = data or {}
    receiver_id = data.get("receiverId")
    content = data.get("content")
    content = content.strip() if isinstance(content, str) else ""

    if not receiver_id or not content:
        raise ValidationError("Receiver ID and content are required")
    if receiver_id == caller["id"]:
        raise ValidationError("You cannot send a message to yourself")

    if not find_by_id(get_store().load(USERS), receiver_id):
        raise NotFoundError("Receiver not found")

    message = build_message(caller["id"], receiver_id, content)
    store = get_store()
    with store.locked(MESSAGES):
        messages = store.load(MESSAGES)
        messages.append(message)
        save_or_fail(store, MESSAGES, messages, "Failed to save message")
    return message


def mark_read(caller, other_user_id):
    """Mark everything ``other_user_id`` sent to the caller as read."""
    store = get_store()
    with store.locked(MESSAGES):
        messages = store.load(MESSAGES)
        updated = 0
        for message in messages:
            if (
                message.get("senderId") == other_user_id
                and message.get("receiverId") == caller["id"]
                and not message.get("read")
            ):
                message["read"] = True
                updated += 1
        if updated:
            save_or_fail(store, MESSAGES, messages, "Failed to update messages")
    return updated


def search_users(caller, query):
    term = (query or "").strip().lower()
    if len(term) < MIN_QUERY_LENGTH:
        return []

    results = []
    for user in get_store().load(USERS):
        if user.get("id") == caller["id"]:
            continue
        full_name = f"{user.get('firstName') or ''} {user.get('lastName') or ''}".lower()
        email = (user.get("email") or "").lower()
        if term in full_name or term in email:
            results.append(display_fields(user))
            if len(results) == SEARCH_LIMIT:
                break
    return results
