from redweb.models import new_id
from redweb.utils.time import now_iso

ROLE_USER = "user"
ROLE_ORGANIZER = "organizer"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ORGANIZER, ROLE_ADMIN)

BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")

# Stored password fields; "password" is the legacy key older data files use.
SECRET_FIELDS = ("passwordHash", "password")

SIGNUP_REQUIRED = ("email", "password", "firstName", "lastName")
CONTACT_FIELDS = ("bloodGroup", "phone", "address", "city", "state", "pincode")

# Fields a user may change on their own profile
PROFILE_FIELDS = (
    "firstName",
    "lastName",
    "phone",
    "bloodGroup",
    "address",
    "city",
    "state",
    "pincode",
    "healthConditions",
    "availableForDonation",
)


def build_user(data, password_hash, role=ROLE_USER):
    user = {
        "id": new_id(),
        "email": data["email"],
        "passwordHash": password_hash,
        "firstName": data["firstName"],
        "lastName": data["lastName"],
    }
    for field in CONTACT_FIELDS:
        user[field] = data.get(field) or ""
    user.update({
        "role": role,
        "isActive": True,
        "totalDonations": 0,
        "lastDonationDate": None,
        "createdAt": now_iso(),
    })
    return user


def stored_hash(user):
    return user.get("passwordHash") or user.get("password")


def to_public_dict(user):
    """User record without password fields."""
    if user is None:
        return None
    return {key: value for key, value in user.items() if key not in SECRET_FIELDS}


def display_fields(user):
    """Short form used when joining a user into messages and listings."""
    user = user or {}
    return {
        "id": user.get("id"),
        "firstName": user.get("firstName"),
        "lastName": user.get("lastName"),
        "email": user.get("email"),
    }


def blood_group(user):
    return user.get("bloodGroup") or user.get("bloodType")


def is_available(user):
    return user.get("availableForDonation", True) is not False and user.get("isActive", True)
