from django.conf import settings
from django.db import models

from sp_ops.attendance.status import derive_status


def request_attachment_upload_to(instance, filename):
    return f"attendance/{instance.employee_id}/{instance.date:%Y-%m-%d}/{filename}"


class RequestStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    APPROVED = "Approved", "Approved"
    REJECTED = "Rejected", "Rejected"


class DayStatus(models.TextChoices):
    ABSENT = "Absent", "Absent"
    PRESENT = "Present", "Present"
    HALF_DAY = "Half Day", "Half Day"
    ON_LEAVE = "On Leave", "On Leave"
    PENDING_CHECK_IN = "Pending Check-In", "Pending Check-In"
    PENDING_CHECK_OUT = "Pending Check-Out", "Pending Check-Out"
    PENDING_HALF_DAY = "Pending Half-Day", "Pending Half-Day"
    PENDING_LEAVE = "Pending Leave", "Pending Leave"
    CHECKED_OUT = "Checked-Out", "Checked-Out"
    REJECTED = "Rejected", "Rejected"
    HOLIDAY = "Holiday", "Holiday"


class HalfDayType(models.TextChoices):
    FIRST_HALF = "First Half", "First Half"
    SECOND_HALF = "Second Half", "Second Half"


class Transition(models.TextChoices):
    NONE = "", "None"
    CHECK_IN = "check_in", "Check-in"
    CHECK_OUT = "check_out", "Check-out"
    HALF_DAY = "half_day", "Half day"
    LEAVE = "leave", "Leave"
    MANUAL = "manual", "Manual"


class AttendanceRecord(models.Model):
    """One employee's attendance for one local calendar day.

    - Four independent request sub-states: check-in, check-out, half-day, leave
    - A null sub-state status means no request was made
    - ``status`` is a cache of ``derive_status`` and is rewritten on every save
    - ``version`` increases on every save and backs compare-and-swap updates
    """

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="attendance_records",
    )
    date = models.DateField()

    check_in_time = models.DateTimeField(null=True, blank=True)
    check_in_status = models.CharField(
        max_length=16, choices=RequestStatus.choices, null=True, blank=True
    )
    check_in_remarks = models.TextField(blank=True)

    check_out_time = models.DateTimeField(null=True, blank=True)
    check_out_status = models.CharField(
        max_length=16, choices=RequestStatus.choices, null=True, blank=True
    )
    check_out_remarks = models.TextField(blank=True)

    half_day_requested = models.BooleanField(default=False)
    half_day_type = models.CharField(
        max_length=16, choices=HalfDayType.choices, blank=True
    )
    half_day_reason = models.TextField(blank=True)
    half_day_attachment = models.FileField(
        upload_to=request_attachment_upload_to, blank=True
    )
    half_day_status = models.CharField(
        max_length=16, choices=RequestStatus.choices, null=True, blank=True
    )

    leave_requested = models.BooleanField(default=False)
    leave_reason = models.TextField(blank=True)
    leave_attachment = models.FileField(
        upload_to=request_attachment_upload_to, blank=True
    )
    leave_status = models.CharField(
        max_length=16, choices=RequestStatus.choices, null=True, blank=True
    )

    status = models.CharField(
        max_length=32, choices=DayStatus.choices, default=DayStatus.ABSENT
    )
    manual_status = models.CharField(
        max_length=32, choices=DayStatus.choices, blank=True
    )
    last_transition = models.CharField(
        max_length=16, choices=Transition.choices, blank=True, default=Transition.NONE
    )
    # Minutes worked.
    duration = models.PositiveIntegerField(default=0)
    location = models.CharField(max_length=255, blank=True)
    admin_remarks = models.TextField(blank=True)
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "date"], name="uniq_attendance_employee_date"
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"AttendanceRecord({self.employee_id}@{self.date})"

    def save(self, *args, **kwargs):
        self.status = derive_status(self)
        self.version = (self.version or 0) + 1
        update_fields = kwargs.get("update_fields")
        if update_fields is not None:
            kwargs["update_fields"] = {*update_fields, "status", "version"}
        super().save(*args, **kwargs)

    def snapshot(self) -> dict:
        """Sub-state summary used in conflict payloads and audit rows."""
        return {
            "status": self.status,
            "check_in_status": self.check_in_status,
            "check_out_status": self.check_out_status,
            "half_day_status": self.half_day_status if self.half_day_requested else None,
            "leave_status": self.leave_status if self.leave_requested else None,
            "duration": self.duration,
            "version": self.version,
        }


class AttendanceAction(models.Model):
    """Append-only log of admin actions taken on a record."""

    MANUAL_UPDATE = "Manual Update"

    record = models.ForeignKey(
        AttendanceRecord, on_delete=models.CASCADE, related_name="action_log"
    )
    action = models.CharField(max_length=64)
    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True
    )
    timestamp = models.DateTimeField()

    class Meta:
        ordering = ["timestamp", "id"]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"AttendanceAction({self.record_id}:{self.action})"
