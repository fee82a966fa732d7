from redweb.errors import ValidationError
from redweb.models import new_id
from redweb.models.blood_request import validate_blood_type
from redweb.utils.time import now_iso, parse_datetime

DEFAULT_VOLUME_ML = 450
ELIGIBILITY_DAYS = 56
STREAK_WINDOW_DAYS = 183

REQUIRED_FIELDS = ("donationDate", "location", "bloodType")


def normalize_volume(value):
    if value is None or value == "":
        return DEFAULT_VOLUME_ML
    try:
        volume = int(value)
    except (TypeError, ValueError):
        raise ValidationError("volume must be a whole number of millilitres")
    if volume <= 0:
        raise ValidationError("volume must be positive")
    return volume


def build_donation(user_id, data):
    if any(not data.get(field) for field in REQUIRED_FIELDS):
        raise ValidationError("Donation date, location, and blood type are required")
    if parse_datetime(data["donationDate"]) is None:
        raise ValidationError("donationDate must be an ISO date")

    return {
        "id": new_id(),
        "userId": user_id,
        "donationDate": data["donationDate"],
        "location": data["location"],
        "bloodType": validate_blood_type(data["bloodType"]),
        "volume": normalize_volume(data.get("volume")),
        "notes": data.get("notes") or "",
        "driveId": data.get("driveId") or None,
        "status": "completed",
        "createdAt": now_iso(),
    }


def volume_of(donation):
    return donation.get("volume") or DEFAULT_VOLUME_ML
