from redweb.models import new_id
from redweb.utils.time import now_iso


def conversation_key(user_a, user_b):
    """Sorted pair of participant ids joined with '-'."""
    return "-".join(sorted([str(user_a), str(user_b)]))


def involves(message, user_id):
    return message.get("senderId") == user_id or message.get("receiverId") == user_id


def between(message, user_a, user_b):
    return (
        (message.get("senderId") == user_a and message.get("receiverId") == user_b)
        or (message.get("senderId") == user_b and message.get("receiverId") == user_a)
    )


def counterpart(message, user_id):
    if message.get("senderId") == user_id:
        return message.get("receiverId")
    return message.get("senderId")


def build_message(sender_id, receiver_id, content):
    return {
        "id": new_id(),
        "senderId": sender_id,
        "receiverId": receiver_id,
        "content": content,
        "timestamp": now_iso(),
        "read": False,
    }
