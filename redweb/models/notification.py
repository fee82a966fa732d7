from redweb.models import new_id
from redweb.utils.time import now_iso


def build_notification(user_id, title, message, kind="info", link=None):
    return {
        "id": new_id(),
        "userId": user_id,
        "title": title or "",
        "message": message or "",
        "type": kind,
        "link": link,
        "isRead": False,
        "createdAt": now_iso(),
        "readAt": None,
    }


def is_read(notification):
    # older records used "read" instead of "isRead"
    return bool(notification.get("isRead", notification.get("read", False)))


def mark_read(notification, timestamp=None):
    notification["isRead"] = True
    notification["readAt"] = timestamp or now_iso()
    return notification
