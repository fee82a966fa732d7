import logging

from redweb.errors import ConflictError, NotFoundError, ValidationError
from redweb.extensions import get_store
from redweb.models import find_by_id, find_index, merge_fields
from redweb.models import blood_request as model
from redweb.models.user import blood_group, is_available
from redweb.policy import can_modify_request, can_view_responders, require
from redweb.services import save_or_fail
from redweb.services.notifications import notify
from redweb.store import BLOOD_REQUESTS, DONATION_DRIVES, DONATION_HISTORY, USERS
from redweb.utils.time import now_iso, parse_datetime, utcnow

logger = logging.getLogger(__name__)

NOT_FOUND = "Blood request not found"


def list_requests():
    return get_store().load(BLOOD_REQUESTS)


def list_my_requests(caller):
    return [
        r for r in get_store().load(BLOOD_REQUESTS)
        if model.owner_id(r) == caller["id"]
    ]


def get_request(request_id):
    blood_request = find_by_id(get_store().load(BLOOD_REQUESTS), request_id)
    if not blood_request:
        raise NotFoundError(NOT_FOUND)
    return blood_request


def create_request(caller, data):
    if not data:
        raise ValidationError("No data provided")

    blood_request = model.build_request(caller["id"], data)
    store = get_store()
    with store.locked(BLOOD_REQUESTS):
        requests = store.load(BLOOD_REQUESTS)
        requests.append(blood_request)
        save_or_fail(store, BLOOD_REQUESTS, requests, "Failed to save blood request")

    logger.info("🩸 Blood request %s created by %s", blood_request["id"], caller["id"])
    return blood_request


def _locate(requests, request_id):
    index = find_index(requests, request_id)
    if index == -1:
        raise NotFoundError(NOT_FOUND)
    return index


def update_request(caller, request_id, data):
    if not data:
        raise ValidationError("No data provided")
    changes = model.normalize_update(data)

    store = get_store()
    with store.locked(BLOOD_REQUESTS):
        requests = store.load(BLOOD_REQUESTS)
        index = _locate(requests, request_id)
        blood_request = requests[index]
        require(can_modify_request(caller, blood_request))

        merge_fields(blood_request, changes, model.PROTECTED_FIELDS)
        blood_request["updatedAt"] = now_iso()
        save_or_fail(store, BLOOD_REQUESTS, requests, "Failed to update blood request")

    return blood_request


def change_status(caller, request_id, status):
    """Touch only ``status`` and ``updatedAt``."""
    status = model.normalize_status(status)

    store = get_store()
    with store.locked(BLOOD_REQUESTS):
        requests = store.load(BLOOD_REQUESTS)
        index = _locate(requests, request_id)
        blood_request = requests[index]
        require(can_modify_request(caller, blood_request))

        blood_request["status"] = status
        blood_request["updatedAt"] = now_iso()
        save_or_fail(store, BLOOD_REQUESTS, requests, "Failed to update blood request")

    return blood_request


def delete_request(caller, request_id):
    store = get_store()
    with store.locked(BLOOD_REQUESTS):
        requests = store.load(BLOOD_REQUESTS)
        index = _locate(requests, request_id)
        require(can_modify_request(caller, requests[index]))

        requests.pop(index)
        save_or_fail(store, BLOOD_REQUESTS, requests, "Failed to delete blood request")
    return True


def respond(caller, request_id):
    store = get_store()
    with store.locked(BLOOD_REQUESTS):
        requests = store.load(BLOOD_REQUESTS)
        index = _locate(requests, request_id)
        blood_request = requests[index]

        if model.owner_id(blood_request) == caller["id"]:
            raise ConflictError("You cannot respond to your own request")
        status = str(blood_request.get("status") or model.STATUS_PENDING).lower()
        if model.STATUS_ALIASES.get(status) != model.STATUS_PENDING:
            raise ConflictError("This blood request is no longer open")
        if caller["id"] in model.responder_ids(blood_request):
            raise ConflictError("Already responded to this request")

        blood_request.setdefault("responses", []).append({
            "userId": caller["id"],
            "responseDate": now_iso(),
        })
        blood_request["updatedAt"] = now_iso()
        save_or_fail(store, BLOOD_REQUESTS, requests, "Failed to save response")

    name = f"{caller.get('firstName') or ''} {caller.get('lastName') or ''}".strip() or "A donor"
    notify(
        model.owner_id(blood_request),
        "New response to your blood request",
        f"{name} offered to donate for your {blood_request.get('bloodType')} request",
        kind="response",
        link=f"/blood-requests/{blood_request['id']}",
    )
    return blood_request


def withdraw_response(caller, request_id):
    store = get_store()
    with store.locked(BLOOD_REQUESTS):
        requests = store.load(BLOOD_REQUESTS)
        index = _locate(requests, request_id)
        blood_request = requests[index]

        responses = blood_request.get("responses") or []
        remaining = [r for r in responses if r.get("userId") != caller["id"]]
        if len(remaining) == len(responses):
            raise ConflictError("You have not responded to this request")

        blood_request["responses"] = remaining
        blood_request["updatedAt"] = now_iso()
        save_or_fail(store, BLOOD_REQUESTS, requests, "Failed to withdraw response")
    return blood_request


def get_responders(caller, request_id):
    blood_request = get_request(request_id)
    require(
        can_view_responders(caller, blood_request),
        "Only the requester can view responders",
    )

    users = get_store().load(USERS)
    responses = blood_request.get("responses") or []
    responded = {r.get("userId") for r in responses}

    responders = []
    for response in responses:
        user = find_by_id(users, response.get("userId"))
        if not user:
            continue
        responders.append({
            "id": user["id"],
            "firstName": user.get("firstName"),
            "lastName": user.get("lastName"),
            "email": user.get("email"),
            "phone": user.get("phone"),
            "bloodType": blood_group(user),
            "responseDate": response.get("responseDate"),
            "lastDonationDate": user.get("lastDonationDate"),
        })

    potential = [
        {
            "id": user["id"],
            "firstName": user.get("firstName"),
            "lastName": user.get("lastName"),
            "bloodType": blood_group(user),
            "lastDonationDate": user.get("lastDonationDate"),
        }
        for user in users
        if user.get("id") != caller["id"]
        and user.get("id") not in responded
        and blood_group(user) == blood_request.get("bloodType")
        and is_available(user)
    ]

    return {
        "request": {
            "id": blood_request["id"],
            "title": blood_request.get("title"),
            "bloodType": blood_request.get("bloodType"),
            "urgency": blood_request.get("urgency"),
            "status": blood_request.get("status"),
            "deadline": blood_request.get("deadline"),
        },
        "responders": responders,
        "potentialDonors": potential,
        "stats": {
            "responded": len(responders),
            "potential": len(potential),
        },
    }


def _is_upcoming(drive, today):
    when = parse_datetime(drive.get("date"))
    return when is None or when.date() >= today


def statistics():
    """Aggregates recomputed from the full collections on every call."""
    store = get_store()
    requests = store.load(BLOOD_REQUESTS)
    drives = store.load(DONATION_DRIVES)
    history = store.load(DONATION_HISTORY)

    by_status = {status: 0 for status in model.STATUSES}
    by_urgency = {level: 0 for level in model.URGENCY_LEVELS}
    for blood_request in requests:
        status = model.STATUS_ALIASES.get(str(blood_request.get("status", "")).lower())
        if status:
            by_status[status] += 1
        urgency = model.URGENCY_ALIASES.get(str(blood_request.get("urgency", "")).upper())
        if urgency:
            by_urgency[urgency] += 1

    today = utcnow().date()
    return {
        "total": len(requests),
        **by_status,
        "byUrgency": by_urgency,
        "activeRequests": by_status[model.STATUS_PENDING],
        "emergencyRequests": sum(1 for r in requests if model.is_emergency(r)),
        "upcomingDrives": sum(1 for d in drives if _is_upcoming(d, today)),
        "totalDonations": len(history),
    }

