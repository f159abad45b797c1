"""Attendance request intake, admin approvals and manual corrections.

Every write locks the day's row (``select_for_update``) inside a transaction.
Callers pass ``now`` explicitly; the attendance day is the local calendar day
of ``now`` in the configured time zone.
"""

import contextlib
import logging
from datetime import timedelta

from django.db import IntegrityError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from sp_ops.attendance.exceptions import AlreadyCheckedIn
from sp_ops.attendance.exceptions import AlreadyCheckedOut
from sp_ops.attendance.exceptions import NotCheckedIn
from sp_ops.attendance.exceptions import RecordNotFound
from sp_ops.attendance.exceptions import RequestAlreadyPending
from sp_ops.attendance.exceptions import StaleRecord
from sp_ops.attendance.models import AttendanceAction
from sp_ops.attendance.models import AttendanceRecord
from sp_ops.attendance.models import DayStatus
from sp_ops.attendance.models import HalfDayType
from sp_ops.attendance.models import RequestStatus
from sp_ops.attendance.models import Transition
from sp_ops.audit.utils import log_action

logger = logging.getLogger(__name__)

HALF_DAY_MINUTES = 4 * 60
MAX_SHIFT = timedelta(days=1)
MODEL_NAME = "attendance.AttendanceRecord"

ADMIN_ACTIONS = (
    "approve_checkin",
    "reject_checkin",
    "approve_checkout",
    "reject_checkout",
    "approve_halfday",
    "reject_halfday",
    "approve_leave",
    "reject_leave",
)

WORKED_STATUSES = (DayStatus.PRESENT, DayStatus.HALF_DAY, DayStatus.CHECKED_OUT)


def attendance_day(now, tz=None):
    """Local calendar day that keys the attendance record for ``now``."""
    return timezone.localdate(now, tz)


def worked_minutes(check_in_time, check_out_time) -> int:
    """Whole minutes between the two stamps, whichever comes first."""
    seconds = abs((check_out_time - check_in_time).total_seconds())
    return int(seconds // 60)


def _locked_day_record(employee, day, *, create: bool):
    qs = AttendanceRecord.objects.select_for_update()
    record = qs.filter(employee=employee, date=day).first()
    if record is not None or not create:
        return record
    try:
        # A concurrent request may create the same (employee, date) row.
        with transaction.atomic():
            return AttendanceRecord.objects.create(employee=employee, date=day)
    except IntegrityError:
        return qs.get(employee=employee, date=day)


def _locked_record(record_id, expected_version=None):
    record = (
        AttendanceRecord.objects.select_for_update().filter(pk=record_id).first()
    )
    if record is None:
        raise RecordNotFound
    if expected_version is not None and int(expected_version) != record.version:
        logger.warning(
            "Stale write on attendance %s: expected version %s, found %s",
            record.pk,
            expected_version,
            record.version,
        )
        raise StaleRecord(current=record.snapshot())
    return record


def _log_admin_action(record, action, admin, now):
    AttendanceAction.objects.create(
        record=record, action=action, admin=admin, timestamp=now
    )


def _audit(action, admin, record, before, message=""):
    with contextlib.suppress(Exception), transaction.atomic():
        log_action(
            action,
            actor=admin,
            message=message,
            model_name=MODEL_NAME,
            record_id=record.pk,
            before=before,
            after=record.snapshot(),
        )


@transaction.atomic
def request_check_in(employee, *, now, location="", remarks="", tz=None):
    day = attendance_day(now, tz)
    record = _locked_day_record(employee, day, create=True)

    if record.check_in_status == RequestStatus.APPROVED:
        logger.warning("Check-in refused for %s on %s: approved", employee.pk, day)
        raise AlreadyCheckedIn(current=record.snapshot())
    if record.check_in_status == RequestStatus.PENDING:
        logger.warning("Check-in refused for %s on %s: pending", employee.pk, day)
        raise RequestAlreadyPending(
            "Check-In request already pending.",
            current=record.snapshot(),
        )

    record.check_in_time = now
    record.check_in_status = RequestStatus.PENDING
    record.check_in_remarks = remarks or ""
    if location:
        record.location = location
    record.last_transition = Transition.CHECK_IN
    record.save()
    logger.info("Check-in requested: employee=%s date=%s", employee.pk, day)
    return record


@transaction.atomic
def request_check_out(employee, *, now, remarks="", tz=None):
    day = attendance_day(now, tz)
    record = _locked_day_record(employee, day, create=False)

    if record is None or record.check_in_status != RequestStatus.APPROVED:
        logger.warning(
            "Check-out refused for %s on %s: not checked in", employee.pk, day
        )
        raise NotCheckedIn(
            current={
                "found": record is not None,
                "date": day,
                "check_in_status": getattr(record, "check_in_status", None),
            },
        )
    if record.check_out_status == RequestStatus.APPROVED:
        logger.warning("Check-out refused for %s on %s: approved", employee.pk, day)
        raise AlreadyCheckedOut(current=record.snapshot())
    if record.check_out_status == RequestStatus.PENDING:
        logger.warning("Check-out refused for %s on %s: pending", employee.pk, day)
        raise RequestAlreadyPending(
            "Check-Out request already pending.",
            current=record.snapshot(),
        )

    record.check_out_time = now
    record.check_out_status = RequestStatus.PENDING
    record.check_out_remarks = remarks or ""
    record.last_transition = Transition.CHECK_OUT
    record.save()
    logger.info("Check-out requested: employee=%s date=%s", employee.pk, day)
    return record


@transaction.atomic
def request_half_day(  # noqa: PLR0913
    employee,
    *,
    now,
    half_day_type=HalfDayType.FIRST_HALF,
    reason="",
    attachment=None,
    tz=None,
):
    # Overwrites any earlier half-day request for the day, approved or not.
    day = attendance_day(now, tz)
    record = _locked_day_record(employee, day, create=True)

    record.half_day_requested = True
    record.half_day_type = half_day_type or HalfDayType.FIRST_HALF
    record.half_day_reason = reason or ""
    record.half_day_attachment = attachment or ""
    record.half_day_status = RequestStatus.PENDING
    record.last_transition = Transition.HALF_DAY
    record.save()
    logger.info("Half-day requested: employee=%s date=%s", employee.pk, day)
    return record


@transaction.atomic
def request_leave(employee, *, now, reason="", attachment=None, tz=None):
    day = attendance_day(now, tz)
    record = _locked_day_record(employee, day, create=True)

    record.leave_requested = True
    record.leave_reason = reason or ""
    record.leave_attachment = attachment or ""
    record.leave_status = RequestStatus.PENDING
    record.last_transition = Transition.LEAVE
    record.save()
    logger.info("Leave requested: employee=%s date=%s", employee.pk, day)
    return record


def _apply_action(record, action):
    """Mutate sub-state and duration for one admin action.

    Unknown actions leave the record untouched.
    """
    if action not in ADMIN_ACTIONS:
        return
    verb, _, kind = action.partition("_")
    outcome = RequestStatus.APPROVED if verb == "approve" else RequestStatus.REJECTED

    if kind == "checkin":
        record.check_in_status = outcome
        record.last_transition = Transition.CHECK_IN
    elif kind == "checkout":
        record.check_out_status = outcome
        record.last_transition = Transition.CHECK_OUT
        if outcome == RequestStatus.APPROVED and (
            record.check_in_time and record.check_out_time
        ):
            record.duration = worked_minutes(
                record.check_in_time, record.check_out_time
            )
    elif kind == "halfday":
        record.half_day_status = outcome
        record.last_transition = Transition.HALF_DAY
        if outcome == RequestStatus.APPROVED:
            record.duration = HALF_DAY_MINUTES
    elif kind == "leave":
        record.leave_status = outcome
        record.last_transition = Transition.LEAVE
        if outcome == RequestStatus.APPROVED:
            record.duration = 0


@transaction.atomic
def apply_admin_action(  # noqa: PLR0913
    record_id, action, *, admin, now, remarks=None, expected_version=None
):
    record = _locked_record(record_id, expected_version)
    before = record.snapshot()

    if action not in ADMIN_ACTIONS:
        logger.warning("Unknown admin action %r on attendance %s", action, record.pk)
    _apply_action(record, action)
    if remarks:
        record.admin_remarks = remarks
    record.save()
    _log_admin_action(record, action, admin, now)
    _audit(
        f"attendance.{action}",
        admin,
        record,
        before,
        message=f"employee={record.employee_id} date={record.date}",
    )
    logger.info(
        "Admin action %s on attendance %s -> %s", action, record.pk, record.status
    )
    return record


@transaction.atomic
def set_attendance(  # noqa: PLR0913
    record_id,
    *,
    admin,
    now,
    status=None,
    check_in_time=None,
    check_out_time=None,
    remarks=None,
    expected_version=None,
):
    """Admin override of times and status, outside the approval flow."""
    record = _locked_record(record_id, expected_version)
    before = record.snapshot()
    new_in = check_in_time or record.check_in_time
    new_out = check_out_time or record.check_out_time
    if new_in and new_out and abs(new_out - new_in) > MAX_SHIFT:
        logger.warning(
            "Manual update refused on attendance %s: span %s",
            record.pk,
            new_out - new_in,
        )
        raise ValidationError(
            {"check_out_time": "Check-in and check-out must be within one day."}
        )

    if check_in_time:
        record.check_in_time = check_in_time
        record.check_in_status = RequestStatus.APPROVED
    if check_out_time:
        record.check_out_time = check_out_time
        record.check_out_status = RequestStatus.APPROVED
    if remarks:
        record.admin_remarks = remarks
    if record.check_in_time and record.check_out_time:
        record.duration = worked_minutes(record.check_in_time, record.check_out_time)

    if status:
        record.manual_status = status
        record.last_transition = Transition.MANUAL
    elif check_in_time or check_out_time:
        record.last_transition = (
            Transition.CHECK_OUT
            if record.check_out_status == RequestStatus.APPROVED
            else Transition.CHECK_IN
        )
    record.save()
    _log_admin_action(record, AttendanceAction.MANUAL_UPDATE, admin, now)
    _audit("attendance.manual_update", admin, record, before)
    logger.info("Manual update on attendance %s -> %s", record.pk, record.status)
    return record


@transaction.atomic
def delete_record(record_id):
    record = _locked_record(record_id)
    snapshot = record.snapshot()
    record.delete()
    logger.info("Attendance %s deleted", record_id)
    return snapshot


def pending_requests_q() -> Q:
    """Records carrying at least one live pending request."""
    return (
        Q(check_in_status=RequestStatus.PENDING)
        | Q(check_out_status=RequestStatus.PENDING, check_out_time__isnull=False)
        | Q(half_day_status=RequestStatus.PENDING, half_day_requested=True)
        | Q(leave_status=RequestStatus.PENDING, leave_requested=True)
    )


def attendance_stats(*, now, tz=None) -> dict:
    """Today's presence and pending counts plus a 7-day attendance chart."""
    today = attendance_day(now, tz)
    present_today = AttendanceRecord.objects.filter(
        Q(status__in=WORKED_STATUSES) | Q(check_in_status=RequestStatus.APPROVED),
        date=today,
    ).count()
    pending = AttendanceRecord.objects.filter(pending_requests_q()).count()

    chart = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        chart.append(
            {
                "date": day,
                "label": day.strftime("%a"),
                "attendance": AttendanceRecord.objects.filter(
                    date=day, status__in=WORKED_STATUSES
                ).count(),
            },
        )
    return {
        "date": today,
        "present_today": present_today,
        "pending_requests": pending,
        "chart": chart,
    }
