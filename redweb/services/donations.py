"""
Donation history.

Recording a donation is two separate writes: the history record first,
then the owner's ``totalDonations``/``lastDonationDate`` counters in the
users collection. There is no transaction across the two files. When the
second write fails the donation stays recorded, the failure is logged and
the response says ``counterUpdate: "pending"``; ``reconcile_counters``
rebuilds every user's counters from the history and repairs the drift.
"""
import logging
from datetime import timedelta

from redweb.extensions import get_store
from redweb.models import find_index
from redweb.models import donation as model
from redweb.services import save_or_fail
from redweb.store import DONATION_HISTORY, USERS
from redweb.utils.time import now_iso, parse_datetime, sort_key, utcnow

logger = logging.getLogger(__name__)


def list_history(caller):
    donations = [
        d for d in get_store().load(DONATION_HISTORY) if d.get("userId") == caller["id"]
    ]
    donations.sort(key=lambda d: sort_key(d.get("donationDate")), reverse=True)
    return donations


def _bump_counters(store, user_id, donation_date):
    with store.locked(USERS):
        users = store.load(USERS)
        index = find_index(users, user_id)
        if index == -1:
            logger.warning("⚠️ Donation recorded for unknown user %s", user_id)
            return False
        user = users[index]
        user["totalDonations"] = (user.get("totalDonations") or 0) + 1
        user["lastDonationDate"] = donation_date
        return store.save(USERS, users)


def add_donation(caller, data):
    donation = model.build_donation(caller["id"], data or {})
    store = get_store()

    # step 1: the record itself
    with store.locked(DONATION_HISTORY):
        donations = store.load(DONATION_HISTORY)
        donations.append(donation)
        save_or_fail(store, DONATION_HISTORY, donations, "Failed to add donation record")

    # step 2: the owner's counters, never rolled back into step 1
    if _bump_counters(store, caller["id"], donation["donationDate"]):
        counter_update = "done"
    else:
        counter_update = "pending"
        logger.error(
            "❌ Donation %s recorded but counters for user %s were not updated; "
            "run `flask reconcile-donations` to repair",
            donation["id"],
            caller["id"],
        )

    return dict(donation, counterUpdate=counter_update)


def statistics(caller, now=None):
    now = now or utcnow()
    donations = list_history(caller)

    last = donations[0] if donations else None
    six_months_ago = now - timedelta(days=model.STREAK_WINDOW_DAYS)

    streak = 0
    for donation in donations:
        when = parse_datetime(donation.get("donationDate"))
        if when is None or when < six_months_ago:
            break
        streak += 1

    eligible = True
    next_eligible = None
    if last:
        last_date = parse_datetime(last.get("donationDate"))
        if last_date is not None:
            next_eligible_at = last_date + timedelta(days=model.ELIGIBILITY_DAYS)
            eligible = now >= next_eligible_at
            next_eligible = next_eligible_at.date().isoformat()

    return {
        "totalDonations": len(donations),
        "totalVolume": sum(model.volume_of(d) for d in donations),
        "lastDonation": last,
        "streak": streak,
        "eligibleForNext": eligible,
        "nextEligibleDate": next_eligible,
    }


def reconcile_counters(store=None, fix=True):
    """Recompute every user's donation counters from the history.

    Returns the list of users whose stored counters disagreed. With
    ``fix`` the corrected values are written back.
    """
    store = store or get_store()
    history = store.load(DONATION_HISTORY)

    totals = {}
    latest = {}
    for donation in history:
        user_id = donation.get("userId")
        totals[user_id] = totals.get(user_id, 0) + 1
        current = latest.get(user_id)
        if current is None or sort_key(donation.get("donationDate")) > sort_key(current):
            latest[user_id] = donation.get("donationDate")

    drift = []
    with store.locked(USERS):
        users = store.load(USERS)
        for user in users:
            expected_total = totals.get(user.get("id"), 0)
            expected_last = latest.get(user.get("id"))
            stored_total = user.get("totalDonations") or 0
            if stored_total == expected_total and user.get("lastDonationDate") == expected_last:
                continue
            drift.append({
                "userId": user.get("id"),
                "email": user.get("email"),
                "storedTotal": stored_total,
                "expectedTotal": expected_total,
                "storedLastDonationDate": user.get("lastDonationDate"),
                "expectedLastDonationDate": expected_last,
            })
            if fix:
                user["totalDonations"] = expected_total
                user["lastDonationDate"] = expected_last
                user["updatedAt"] = now_iso()

        if fix and drift:
            save_or_fail(store, USERS, users, "Failed to reconcile donation counters")

    logger.info("🔁 Reconciled donation counters: %d user(s) out of step", len(drift))
    return drift
