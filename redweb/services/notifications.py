import logging

from redweb.errors import NotFoundError, ValidationError
from redweb.extensions import get_store
from redweb.models import find_by_id, find_index
from redweb.models.notification import build_notification, is_read, mark_read
from redweb.policy import can_access_notification, is_admin, require
from redweb.services import save_or_fail
from redweb.store import NOTIFICATIONS, USERS
from redweb.utils.time import now_iso, sort_key

logger = logging.getLogger(__name__)

NOT_YOURS = "You can only access your own notifications"


def notify(user_id, title, message, kind="info", link=None):
    """Best-effort notification used as a side effect of other actions.

    Returns the notification, or None when it could not be stored. The
    caller's primary write has already happened and is not undone.
    """
    store = get_store()
    notification = build_notification(user_id, title, message, kind=kind, link=link)
    with store.locked(NOTIFICATIONS):
        notifications = store.load(NOTIFICATIONS)
        notifications.append(notification)
        if not store.save(NOTIFICATIONS, notifications):
            logger.error("⚠️ Notification for user %s was not saved", user_id)
            return None
    return notification


def list_notifications(caller):
    notifications = [
        n for n in get_store().load(NOTIFICATIONS) if n.get("userId") == caller["id"]
    ]
    notifications.sort(key=lambda n: sort_key(n.get("createdAt")), reverse=True)
    return notifications


def unread_count(caller):
    return sum(1 for n in list_notifications(caller) if not is_read(n))


def create_notification(caller, data):
    if not data or not (data.get("title") or data.get("message")):
        raise ValidationError("title or message is required")

    recipient = caller["id"]
    target = data.get("userId")
    if target and target != caller["id"]:
        require(is_admin(caller), "Only admins can notify other users")
        if not find_by_id(get_store().load(USERS), target):
            raise NotFoundError("User not found")
        recipient = target

    store = get_store()
    notification = build_notification(
        recipient,
        data.get("title"),
        data.get("message"),
        kind=data.get("type") or "info",
        link=data.get("link"),
    )
    with store.locked(NOTIFICATIONS):
        notifications = store.load(NOTIFICATIONS)
        notifications.append(notification)
        save_or_fail(store, NOTIFICATIONS, notifications, "Failed to save notification")
    return notification


def _load_owned(notifications, caller, notification_id):
    index = find_index(notifications, notification_id)
    if index == -1:
        raise NotFoundError("Notification not found")
    require(can_access_notification(caller, notifications[index]), NOT_YOURS)
    return index


def get_notification(caller, notification_id):
    notifications = get_store().load(NOTIFICATIONS)
    return notifications[_load_owned(notifications, caller, notification_id)]


def mark_notification_read(caller, notification_id):
    store = get_store()
    with store.locked(NOTIFICATIONS):
        notifications = store.load(NOTIFICATIONS)
        index = _load_owned(notifications, caller, notification_id)
        mark_read(notifications[index])
        save_or_fail(store, NOTIFICATIONS, notifications, "Failed to update notification")
    return notifications[index]


def mark_all_read(caller):
    store = get_store()
    timestamp = now_iso()
    with store.locked(NOTIFICATIONS):
        notifications = store.load(NOTIFICATIONS)
        updated = 0
        for notification in notifications:
            if notification.get("userId") == caller["id"] and not is_read(notification):
                mark_read(notification, timestamp)
                updated += 1
        if updated:
            save_or_fail(store, NOTIFICATIONS, notifications, "Failed to update notifications")
    return updated


def delete_notification(caller, notification_id):
    store = get_store()
    with store.locked(NOTIFICATIONS):
        notifications = store.load(NOTIFICATIONS)
        index = _load_owned(notifications, caller, notification_id)
        notifications.pop(index)
        save_or_fail(store, NOTIFICATIONS, notifications, "Failed to delete notification")
    return True
