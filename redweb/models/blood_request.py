from redweb.errors import ValidationError
from redweb.models import new_id
from redweb.models.user import BLOOD_GROUPS
from redweb.utils.time import now_iso

URGENCY_LEVELS = ("LOW", "NORMAL", "HIGH", "CRITICAL")
DEFAULT_URGENCY = "NORMAL"

# Older clients sent normal/urgent/emergency instead of the four levels
URGENCY_ALIASES = {
    "LOW": "LOW",
    "NORMAL": "NORMAL",
    "HIGH": "HIGH",
    "CRITICAL": "CRITICAL",
    "URGENT": "HIGH",
    "EMERGENCY": "CRITICAL",
}

STATUS_PENDING = "pending"
STATUS_FULFILLED = "fulfilled"
STATUS_CANCELLED = "cancelled"
STATUSES = (STATUS_PENDING, STATUS_FULFILLED, STATUS_CANCELLED)

STATUS_ALIASES = {
    "pending": STATUS_PENDING,
    "fulfilled": STATUS_FULFILLED,
    "cancelled": STATUS_CANCELLED,
    "canceled": STATUS_CANCELLED,
}

PROTECTED_FIELDS = (
    "id",
    "userId",
    "requesterId",
    "responses",
    "createdAt",
    "updatedAt",
)


def normalize_urgency(value, default=DEFAULT_URGENCY):
    if value is None or value == "":
        return default
    urgency = URGENCY_ALIASES.get(str(value).strip().upper())
    if urgency is None:
        raise ValidationError(
            f"Invalid urgency '{value}'. Use one of: {', '.join(URGENCY_LEVELS)}"
        )
    return urgency


def normalize_status(value):
    status = STATUS_ALIASES.get(str(value or "").strip().lower())
    if status is None:
        raise ValidationError(
            f"Invalid status '{value}'. Use one of: {', '.join(STATUSES)}"
        )
    return status


def validate_blood_type(value, field="bloodType"):
    if value not in BLOOD_GROUPS:
        raise ValidationError(f"Invalid {field} '{value}'")
    return value


def normalize_units(value, default=1):
    if value is None or value == "":
        return default
    try:
        units = int(value)
    except (TypeError, ValueError):
        raise ValidationError("units must be a whole number")
    if units < 1:
        raise ValidationError("units must be at least 1")
    return units


def owner_id(blood_request):
    return blood_request.get("requesterId") or blood_request.get("userId")


def responder_ids(blood_request):
    return [r.get("userId") for r in blood_request.get("responses") or []]


def build_request(owner, data):
    if not data.get("bloodType"):
        raise ValidationError("bloodType is required")

    timestamp = now_iso()
    blood_request = {
        key: value for key, value in data.items() if key not in PROTECTED_FIELDS
    }
    blood_request.update({
        "id": new_id(),
        "requesterId": owner,
        "userId": owner,
        "bloodType": validate_blood_type(data["bloodType"]),
        "units": normalize_units(data.get("units")),
        "urgency": normalize_urgency(data.get("urgency")),
        "status": STATUS_PENDING,
        "responses": [],
        "createdAt": timestamp,
        "updatedAt": timestamp,
    })
    return blood_request


def normalize_update(data):
    """Validate the fields of a merge update that carry an enum or number."""
    cleaned = dict(data)
    if "urgency" in cleaned:
        cleaned["urgency"] = normalize_urgency(cleaned["urgency"])
    if "bloodType" in cleaned:
        validate_blood_type(cleaned["bloodType"])
    if "units" in cleaned:
        cleaned["units"] = normalize_units(cleaned["units"])
    # PUT may also carry status; it is stored in the same lowercase form
    # the PATCH path writes, so statistics and respond read one spelling
    if "status" in cleaned:
        cleaned["status"] = normalize_status(cleaned["status"])
    return cleaned


def is_emergency(blood_request):
    return (
        blood_request.get("urgency") == "CRITICAL"
        or blood_request.get("isEmergency") is True
        or str(blood_request.get("priority", "")).lower() == "emergency"
    )
