import datetime as dt

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from sp_ops.attendance.models import AttendanceRecord
from sp_ops.attendance.tests.factories import AttendanceRecordFactory
from sp_ops.audit.models import AuditLog
from sp_ops.employees.tests.factories import EmployeeFactory

pytestmark = pytest.mark.django_db


@pytest.fixture
def employee_client(api_client, employee):
    api_client.force_authenticate(user=employee.user)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


def test_check_in_then_duplicate_is_refused(employee_client, employee):
    url = reverse("api_v1:attendance-check-in")

    res = employee_client.post(url, {"location": "HQ", "remarks": "hi"}, format="json")
    assert res.status_code == status.HTTP_200_OK, res.data
    assert res.data["status"] == "Pending Check-In"
    assert res.data["check_in"]["status"] == "Pending"
    assert res.data["location"] == "HQ"
    assert res.data["date"] == timezone.localdate().isoformat()

    again = employee_client.post(url, {}, format="json")
    assert again.status_code == status.HTTP_400_BAD_REQUEST
    assert again.data["code"] == "request_already_pending"
    assert again.data["current"]["check_in_status"] == "Pending"
    assert AttendanceRecord.objects.filter(employee=employee).count() == 1


def test_check_out_without_check_in_reports_state(employee_client):
    res = employee_client.post(
        reverse("api_v1:attendance-check-out"), {"remarks": "done"}, format="json"
    )

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.data["code"] == "not_checked_in"
    assert res.data["current"]["found"] is False


def test_half_day_accepts_multipart_attachment(employee_client, employee):
    upload = SimpleUploadedFile("note.pdf", b"%PDF-1.4", content_type="application/pdf")

    res = employee_client.post(
        reverse("api_v1:attendance-half-day"),
        {"type": "Second Half", "reason": "clinic", "attachment": upload},
        format="multipart",
    )

    assert res.status_code == status.HTTP_200_OK, res.data
    assert res.data["status"] == "Pending Half-Day"
    assert res.data["half_day"]["type"] == "Second Half"
    assert res.data["half_day"]["attachment"].endswith("note.pdf")
    day = timezone.localdate().isoformat()
    assert f"attendance/{employee.pk}/{day}/" in res.data["half_day"]["attachment"]


def test_leave_request(employee_client):
    res = employee_client.post(
        reverse("api_v1:attendance-leave"), {"reason": "flu"}, format="multipart"
    )

    assert res.status_code == status.HTTP_200_OK, res.data
    assert res.data["leave"] == {
        "is_requested": True,
        "reason": "flu",
        "attachment": None,
        "status": "Pending",
    }


def test_half_day_rejects_unknown_type(employee_client):
    res = employee_client.post(
        reverse("api_v1:attendance-half-day"), {"type": "Third Half"}, format="json"
    )

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert "type" in res.data


def test_admin_action_updates_record_and_audits(admin_client, admin_user):
    record = AttendanceRecordFactory(
        check_in_time=timezone.now(),
        check_in_status="Pending",
        last_transition="check_in",
    )

    res = admin_client.put(
        reverse("api_v1:attendance-admin-action", kwargs={"pk": record.pk}),
        {"action": "approve_checkin", "remarks": "welcome"},
        format="json",
    )

    assert res.status_code == status.HTTP_200_OK, res.data
    assert res.data["status"] == "Present"
    assert res.data["admin_remarks"] == "welcome"
    assert [row["action"] for row in res.data["action_log"]] == ["approve_checkin"]
    audit = AuditLog.objects.get(action="attendance.approve_checkin")
    assert audit.actor == admin_user
    assert audit.before["status"] == "Pending Check-In"
    assert audit.after["status"] == "Present"


def test_admin_action_with_stale_version(admin_client):
    record = AttendanceRecordFactory(checked_in=True)

    res = admin_client.put(
        reverse("api_v1:attendance-admin-action", kwargs={"pk": record.pk}),
        {"action": "reject_checkin", "version": record.version - 1},
        format="json",
    )

    assert res.status_code == status.HTTP_409_CONFLICT
    assert res.data["code"] == "stale_record"


def test_admin_action_on_missing_record(admin_client):
    res = admin_client.put(
        reverse("api_v1:attendance-admin-action", kwargs={"pk": 4040}),
        {"action": "approve_checkin"},
        format="json",
    )

    assert res.status_code == status.HTTP_404_NOT_FOUND


def test_manual_correction(admin_client):
    record = AttendanceRecordFactory()
    check_in = dt.datetime(2026, 1, 15, 9, 0, tzinfo=dt.UTC)
    check_out = dt.datetime(2026, 1, 15, 17, 30, tzinfo=dt.UTC)

    res = admin_client.put(
        reverse("api_v1:attendance-detail", kwargs={"pk": record.pk}),
        {
            "check_in_time": check_in.isoformat(),
            "check_out_time": check_out.isoformat(),
            "remarks": "fixed",
        },
        format="json",
    )

    assert res.status_code == status.HTTP_200_OK, res.data
    assert res.data["duration"] == 510
    assert res.data["status"] == "Checked-Out"
    assert res.data["action_log"][-1]["action"] == "Manual Update"


def test_manual_correction_rejects_multi_day_span(admin_client):
    record = AttendanceRecordFactory(checked_in=True)

    res = admin_client.put(
        reverse("api_v1:attendance-detail", kwargs={"pk": record.pk}),
        {"check_out_time": "3026-01-15T17:30:00Z"},
        format="json",
    )

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert "check_out_time" in res.data
    record.refresh_from_db()
    assert record.check_out_time is None


def test_manual_status_via_patch(admin_client):
    record = AttendanceRecordFactory()

    res = admin_client.patch(
        reverse("api_v1:attendance-detail", kwargs={"pk": record.pk}),
        {"status": "Holiday"},
        format="json",
    )

    assert res.status_code == status.HTTP_200_OK, res.data
    assert res.data["status"] == "Holiday"


def test_delete_record(admin_client):
    record = AttendanceRecordFactory()

    res = admin_client.delete(
        reverse("api_v1:attendance-detail", kwargs={"pk": record.pk})
    )

    assert res.status_code == status.HTTP_200_OK
    assert res.data == {"msg": "Attendance record removed"}
    assert not AttendanceRecord.objects.filter(pk=record.pk).exists()


def test_me_lists_only_own_records_newest_first(employee_client, employee):
    older = AttendanceRecordFactory(employee=employee, date=dt.date(2026, 1, 10))
    newer = AttendanceRecordFactory(employee=employee, date=dt.date(2026, 1, 12))
    AttendanceRecordFactory(employee=EmployeeFactory(), date=dt.date(2026, 1, 11))

    res = employee_client.get(reverse("api_v1:attendance-me"))

    assert res.status_code == status.HTTP_200_OK
    assert [row["id"] for row in res.data] == [newer.pk, older.pk]


def test_admin_list_filters(admin_client):
    target = EmployeeFactory()
    AttendanceRecordFactory(employee=target, date=dt.date(2026, 1, 5))
    AttendanceRecordFactory(employee=target, date=dt.date(2026, 2, 5))
    AttendanceRecordFactory(date=dt.date(2026, 1, 6))

    res = admin_client.get(
        reverse("api_v1:attendance-list"),
        {"employee": target.pk, "start_date": "2026-01-01", "end_date": "2026-01-31"},
    )

    assert res.status_code == status.HTTP_200_OK
    assert len(res.data) == 1
    assert res.data[0]["employee"] == target.pk
    assert res.data[0]["employee_name"] == target.user.name


def test_stats_endpoint(admin_client):
    AttendanceRecordFactory(date=timezone.localdate(), checked_in=True)

    res = admin_client.get(reverse("api_v1:attendance-stats"))

    assert res.status_code == status.HTTP_200_OK
    assert res.data["present_today"] == 1
    assert len(res.data["chart"]) == 7


def test_compat_prefix_routes_to_same_view(employee_client):
    res = employee_client.post("/api/attendance/check-in/", {}, format="json")

    assert res.status_code == status.HTTP_200_OK
