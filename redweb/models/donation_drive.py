import logging

from redweb.errors import ValidationError
from redweb.models import new_id
from redweb.models.user import BLOOD_GROUPS
from redweb.utils.time import now_iso

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "date", "location")

PROTECTED_FIELDS = (
    "id",
    "organizerId",
    "registeredDonors",
    "participants",
    "registrations",
    "createdAt",
    "updatedAt",
)


def normalize_capacity(value):
    """Positive int, or None for an unlimited drive."""
    if value is None or value == "":
        return None
    try:
        capacity = int(value)
    except (TypeError, ValueError):
        raise ValidationError("capacity must be a whole number")
    if capacity < 1:
        raise ValidationError("capacity must be at least 1")
    return capacity


def normalize_blood_types(value):
    if value is None:
        return []
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",") if part.strip()]
    if not isinstance(value, (list, tuple)):
        raise ValidationError("bloodTypes must be a list")

    blood_types = []
    for blood_type in value:
        if blood_type not in BLOOD_GROUPS:
            raise ValidationError(f"Invalid blood type '{blood_type}'")
        if blood_type not in blood_types:
            blood_types.append(blood_type)
    return blood_types


def registered_ids(drive):
    # "participants" is what some older records call the same list
    donors = drive.get("registeredDonors")
    if donors is None:
        donors = drive.get("participants") or []
    return list(donors)


def accepted_blood_types(drive):
    return drive.get("bloodTypes") or drive.get("bloodTypesNeeded") or []


def capacity_of(drive):
    """Stored capacity as an int; a value that does not parse counts as unlimited."""
    try:
        return normalize_capacity(drive.get("capacity"))
    except ValidationError:
        logger.warning(
            "⚠️ Drive %s has an unreadable capacity %r, treating as unlimited",
            drive.get("id"),
            drive.get("capacity"),
        )
        return None


def is_full(drive):
    capacity = capacity_of(drive)
    return capacity is not None and len(registered_ids(drive)) >= capacity


def build_drive(organizer, data):
    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    timestamp = now_iso()
    drive = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
    drive.update({
        "id": new_id(),
        "organizerId": organizer,
        "capacity": normalize_capacity(data.get("capacity")),
        "bloodTypes": normalize_blood_types(data.get("bloodTypes")),
        "registeredDonors": [],
        "registrations": [],
        "createdAt": timestamp,
        "updatedAt": timestamp,
    })
    return drive


def normalize_update(data):
    cleaned = dict(data)
    if "capacity" in cleaned:
        cleaned["capacity"] = normalize_capacity(cleaned["capacity"])
    if "bloodTypes" in cleaned:
        cleaned["bloodTypes"] = normalize_blood_types(cleaned["bloodTypes"])
    for field in REQUIRED_FIELDS:
        if field in cleaned and not cleaned[field]:
            raise ValidationError(f"{field} cannot be empty")
    return cleaned


def summary(drive):
    return {
        "id": drive.get("id"),
        "title": drive.get("title"),
        "date": drive.get("date"),
        "location": drive.get("location"),
        "capacity": capacity_of(drive),
        "bloodTypes": accepted_blood_types(drive),
    }
