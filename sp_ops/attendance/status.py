"""Derive the day's overall label from the stored request sub-states.

The label depends on which sub-state moved last (``last_transition``) and on
that sub-state's request status. Rejecting a half-day falls back to the
check-in outcome.
"""

PENDING = "Pending"
APPROVED = "Approved"
REJECTED = "Rejected"

ABSENT = "Absent"
PRESENT = "Present"

_LABELS = {
    "check_in": {
        PENDING: "Pending Check-In",
        APPROVED: PRESENT,
        REJECTED: "Rejected",
    },
    "check_out": {
        PENDING: "Pending Check-Out",
        APPROVED: "Checked-Out",
        REJECTED: PRESENT,
    },
    "half_day": {
        PENDING: "Pending Half-Day",
        APPROVED: "Half Day",
    },
    "leave": {
        PENDING: "Pending Leave",
        APPROVED: "On Leave",
        REJECTED: ABSENT,
    },
}


def derive_status(record) -> str:
    transition = record.last_transition or ""
    if transition == "manual":
        return record.manual_status or ABSENT
    if transition not in _LABELS:
        return ABSENT

    sub_status = getattr(record, f"{transition}_status", None)
    if transition == "half_day" and sub_status == REJECTED:
        return PRESENT if record.check_in_status == APPROVED else ABSENT
    return _LABELS[transition].get(sub_status, ABSENT)
