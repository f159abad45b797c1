from django.urls import reverse
from rest_framework import status

from sp_ops.attendance.models import AttendanceRecord
from tests.permissions.mixins import NO_PROFILE
from tests.permissions.mixins import ROLE_ADMIN
from tests.permissions.mixins import ROLE_EMPLOYEE
from tests.permissions.mixins import ROLE_STAFF
from tests.permissions.mixins import RoleAPITestCase


class AttendancePermissionTests(RoleAPITestCase):
    def test_admin_roles_list_every_record(self):
        for role in (ROLE_ADMIN, ROLE_STAFF):
            response = self.get("api_v1:attendance-list", role=role)
            self.assert_http_status(response, status.HTTP_200_OK)
            ids = {row["id"] for row in self.extract_results(response)}
            assert ids == {rec.pk for rec in self.attendance_records.values()}

    def test_employee_cannot_list_all_records(self):
        response = self.get("api_v1:attendance-list", role=ROLE_EMPLOYEE)
        self.assert_denied(response)

    def test_employee_me_is_scoped_to_self(self):
        response = self.get("api_v1:attendance-me", role=ROLE_EMPLOYEE)
        self.assert_http_status(response, status.HTTP_200_OK)
        ids = [row["id"] for row in self.extract_results(response)]
        assert ids == [self.attendance_records["own"].pk]

    def test_employee_cannot_approve(self):
        record = self.attendance_records["own"]
        response = self.put(
            "api_v1:attendance-admin-action",
            role=ROLE_EMPLOYEE,
            reverse_kwargs={"pk": record.pk},
            payload={"action": "approve_checkin"},
        )
        self.assert_denied(response)
        record.refresh_from_db()
        assert record.check_in_status == "Pending"

    def test_group_admin_can_approve(self):
        record = self.attendance_records["other"]
        response = self.put(
            "api_v1:attendance-admin-action",
            role=ROLE_ADMIN,
            reverse_kwargs={"pk": record.pk},
            payload={"action": "approve_checkin"},
        )
        self.assert_http_status(response, status.HTTP_200_OK)
        assert response.data["status"] == "Present"

    def test_employee_cannot_correct_or_delete(self):
        record = self.attendance_records["own"]
        corrected = self.put(
            "api_v1:attendance-detail",
            role=ROLE_EMPLOYEE,
            reverse_kwargs={"pk": record.pk},
            payload={"status": "Present"},
        )
        self.assert_denied(corrected)
        deleted = self.delete(
            "api_v1:attendance-detail",
            role=ROLE_EMPLOYEE,
            reverse_kwargs={"pk": record.pk},
        )
        self.assert_denied(deleted)
        assert AttendanceRecord.objects.filter(pk=record.pk).exists()

    def test_employee_cannot_read_stats(self):
        self.assert_denied(self.get("api_v1:attendance-stats", role=ROLE_EMPLOYEE))
        self.assert_allowed(self.get("api_v1:attendance-stats", role=ROLE_ADMIN))

    def test_requests_need_an_employee_profile(self):
        response = self.post("api_v1:attendance-leave", role=NO_PROFILE)
        self.assert_denied(response)
        response = self.post("api_v1:attendance-check-in", role=ROLE_STAFF)
        self.assert_denied(response)

    def test_employee_reads_only_own_record(self):
        own = self.get(
            "api_v1:attendance-detail",
            role=ROLE_EMPLOYEE,
            reverse_kwargs={"pk": self.attendance_records["own"].pk},
        )
        self.assert_http_status(own, status.HTTP_200_OK)
        other = self.get(
            "api_v1:attendance-detail",
            role=ROLE_EMPLOYEE,
            reverse_kwargs={"pk": self.attendance_records["other"].pk},
        )
        self.assert_denied(other, status.HTTP_404_NOT_FOUND)

    def test_anonymous_is_rejected(self):
        response = self.client.post(reverse("api_v1:attendance-check-in"), {})
        assert response.status_code in (
            status.HTTP_401_UNAUTHORIZED,
            status.HTTP_403_FORBIDDEN,
        )
