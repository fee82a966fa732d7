import logging

from redweb.errors import ConflictError, NotFoundError, ValidationError
from redweb.extensions import get_store
from redweb.models import find_by_id, find_index, merge_fields
from redweb.models import donation_drive as model
from redweb.models.user import blood_group, is_available
from redweb.policy import can_modify_drive, can_view_registrations, require
from redweb.services import save_or_fail
from redweb.services.notifications import notify
from redweb.store import DONATION_DRIVES, USERS
from redweb.utils.time import now_iso

logger = logging.getLogger(__name__)

NOT_FOUND = "Donation drive not found"


def list_drives():
    return get_store().load(DONATION_DRIVES)


def list_my_drives(caller):
    return [
        d for d in get_store().load(DONATION_DRIVES)
        if d.get("organizerId") == caller["id"]
    ]


def get_drive(drive_id):
    drive = find_by_id(get_store().load(DONATION_DRIVES), drive_id)
    if not drive:
        raise NotFoundError(NOT_FOUND)
    return drive


def _locate(drives, drive_id):
    index = find_index(drives, drive_id)
    if index == -1:
        raise NotFoundError(NOT_FOUND)
    return index


def create_drive(caller, data):
    if not data:
        raise ValidationError("No data provided")

    drive = model.build_drive(caller["id"], data)
    store = get_store()
    with store.locked(DONATION_DRIVES):
        drives = store.load(DONATION_DRIVES)
        drives.append(drive)
        save_or_fail(store, DONATION_DRIVES, drives, "Failed to save donation drive")

    logger.info("📅 Donation drive %s created by %s", drive["id"], caller["id"])
    return drive


def update_drive(caller, drive_id, data):
    if not data:
        raise ValidationError("No data provided")
    changes = model.normalize_update(data)

    store = get_store()
    with store.locked(DONATION_DRIVES):
        drives = store.load(DONATION_DRIVES)
        drive = drives[_locate(drives, drive_id)]
        require(can_modify_drive(caller, drive))

        merge_fields(drive, changes, model.PROTECTED_FIELDS)
        drive["updatedAt"] = now_iso()
        save_or_fail(store, DONATION_DRIVES, drives, "Failed to update donation drive")
    return drive


def delete_drive(caller, drive_id):
    store = get_store()
    with store.locked(DONATION_DRIVES):
        drives = store.load(DONATION_DRIVES)
        index = _locate(drives, drive_id)
        require(can_modify_drive(caller, drives[index]))

        drives.pop(index)
        save_or_fail(store, DONATION_DRIVES, drives, "Failed to delete donation drive")
    return True


def register(caller, drive_id):
    store = get_store()
    with store.locked(DONATION_DRIVES):
        drives = store.load(DONATION_DRIVES)
        drive = drives[_locate(drives, drive_id)]

        donors = model.registered_ids(drive)
        if caller["id"] in donors:
            raise ConflictError("Already registered for this drive")
        if model.is_full(drive):
            raise ConflictError("Donation drive is full")

        donors.append(caller["id"])
        drive["registeredDonors"] = donors
        drive.pop("participants", None)
        drive.setdefault("registrations", []).append({
            "userId": caller["id"],
            "registrationDate": now_iso(),
        })
        drive["updatedAt"] = now_iso()
        save_or_fail(store, DONATION_DRIVES, drives, "Failed to register for donation drive")

    if drive.get("organizerId") and drive["organizerId"] != caller["id"]:
        notify(
            drive["organizerId"],
            "New drive registration",
            f"A donor registered for {drive.get('title') or 'your donation drive'}",
            kind="registration",
            link=f"/donation-drives/{drive['id']}/registrations",
        )
    return drive


def unregister(caller, drive_id):
    store = get_store()
    with store.locked(DONATION_DRIVES):
        drives = store.load(DONATION_DRIVES)
        drive = drives[_locate(drives, drive_id)]

        donors = model.registered_ids(drive)
        if caller["id"] not in donors:
            raise ConflictError("User not registered for this drive")

        donors.remove(caller["id"])
        drive["registeredDonors"] = donors
        drive.pop("participants", None)
        drive["registrations"] = [
            r for r in drive.get("registrations") or [] if r.get("userId") != caller["id"]
        ]
        drive["updatedAt"] = now_iso()
        save_or_fail(store, DONATION_DRIVES, drives, "Failed to unregister from donation drive")
    return drive


def get_registrations(caller, drive_id):
    drive = get_drive(drive_id)
    require(
        can_view_registrations(caller, drive),
        "Access denied. Only the drive owner, organizers, and admins can view registrations.",
    )

    users = get_store().load(USERS)
    registration_dates = {
        r.get("userId"): r.get("registrationDate") for r in drive.get("registrations") or []
    }
    donor_ids = model.registered_ids(drive)

    registered = []
    for user_id in donor_ids:
        user = find_by_id(users, user_id)
        if not user:
            continue
        registered.append({
            "id": user["id"],
            "firstName": user.get("firstName"),
            "lastName": user.get("lastName"),
            "email": user.get("email"),
            "phone": user.get("phone"),
            "bloodType": blood_group(user),
            "registrationDate": registration_dates.get(user_id),
        })

    capacity = model.capacity_of(drive)
    wanted = model.accepted_blood_types(drive)
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
        and user.get("id") != drive.get("organizerId")
        and user.get("id") not in donor_ids
        and blood_group(user) in wanted
        and is_available(user)
    ]

    return {
        "drive": model.summary(drive),
        "registeredUsers": registered,
        "potentialDonors": potential,
        "stats": {
            "registered": len(registered),
            "potential": len(potential),
            "capacity": capacity,
            "spotsLeft": max(capacity - len(donor_ids), 0) if capacity else None,
        },
    }
