import contextlib

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from drf_spectacular.utils import inline_serializer
from rest_framework import mixins
from rest_framework import serializers
from rest_framework.decorators import action
from rest_framework.parsers import FormParser
from rest_framework.parsers import JSONParser
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from sp_ops.attendance import services
from sp_ops.attendance.api.filters import AttendanceRecordFilter
from sp_ops.attendance.api.serializers import AdminActionSerializer
from sp_ops.attendance.api.serializers import AttendanceRecordSerializer
from sp_ops.attendance.api.serializers import AttendanceStatsSerializer
from sp_ops.attendance.api.serializers import CheckInRequestSerializer
from sp_ops.attendance.api.serializers import CheckOutRequestSerializer
from sp_ops.attendance.api.serializers import HalfDayRequestSerializer
from sp_ops.attendance.api.serializers import LeaveRequestSerializer
from sp_ops.attendance.api.serializers import ManualCorrectionSerializer
from sp_ops.attendance.models import AttendanceRecord
from sp_ops.attendance.models import DayStatus
from sp_ops.audit.utils import log_action
from sp_ops.users.api.permissions import HasEmployeeProfile
from sp_ops.users.api.permissions import IsAdmin
from sp_ops.users.api.permissions import employee_for
from sp_ops.users.api.permissions import is_admin

MODEL_NAME = "attendance.AttendanceRecord"

ADMIN_ONLY_ACTIONS = {
    "list",
    "update",
    "partial_update",
    "destroy",
    "admin_action",
    "stats",
}
SELF_SERVICE_ACTIONS = {"check_in", "check_out", "half_day", "leave", "me"}


@extend_schema_view(
    list=extend_schema(
        tags=["Attendance"],
        parameters=[
            OpenApiParameter(
                name="employee",
                type=OpenApiTypes.INT,
                location=OpenApiParameter.QUERY,
                description="Filter by employee id",
            ),
            OpenApiParameter(
                name="date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Exact attendance day",
            ),
            OpenApiParameter(
                name="start_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Filter records from this date (inclusive)",
            ),
            OpenApiParameter(
                name="end_date",
                type=OpenApiTypes.DATE,
                location=OpenApiParameter.QUERY,
                description="Filter records up to this date (inclusive)",
            ),
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                enum=[c for c, _ in DayStatus.choices],
                location=OpenApiParameter.QUERY,
                description="Filter by the day's overall status",
            ),
        ],
    ),
    retrieve=extend_schema(tags=["Attendance"]),
    update=extend_schema(
        tags=["Attendance"],
        request=ManualCorrectionSerializer,
        responses=AttendanceRecordSerializer,
    ),
    partial_update=extend_schema(
        tags=["Attendance"],
        request=ManualCorrectionSerializer,
        responses=AttendanceRecordSerializer,
    ),
    destroy=extend_schema(
        tags=["Attendance"],
        responses=inline_serializer(
            name="AttendanceDeleteResponse", fields={"msg": serializers.CharField()}
        ),
    ),
)
class AttendanceViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.UpdateModelMixin,
    mixins.DestroyModelMixin,
    GenericViewSet,
):
    """Employee requests, admin approvals and manual corrections."""

    queryset = AttendanceRecord.objects.select_related(
        "employee", "employee__user"
    ).prefetch_related("action_log")
    serializer_class = AttendanceRecordSerializer
    permission_classes = [IsAuthenticated]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    filterset_class = AttendanceRecordFilter
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        action_name = getattr(self, "action", None)
        if action_name in ADMIN_ONLY_ACTIONS:
            return [IsAuthenticated(), IsAdmin()]
        if action_name in SELF_SERVICE_ACTIONS:
            return [IsAuthenticated(), HasEmployeeProfile()]
        return super().get_permissions()

    def get_queryset(self):
        qs = super().get_queryset()
        user = getattr(self.request, "user", None)
        if is_admin(user):
            return qs
        employee = employee_for(user)
        if employee is None:
            return qs.none()
        return qs.filter(employee=employee)

    def _payload(self, record):
        return AttendanceRecordSerializer(
            record, context=self.get_serializer_context()
        ).data

    @extend_schema(
        tags=["Attendance"],
        request=CheckInRequestSerializer,
        responses=AttendanceRecordSerializer,
    )
    @action(detail=False, methods=["post"], url_path="check-in")
    def check_in(self, request):
        ser = CheckInRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        record = services.request_check_in(
            employee_for(request.user), now=timezone.now(), **ser.validated_data
        )
        return Response(self._payload(record))

    @extend_schema(
        tags=["Attendance"],
        request=CheckOutRequestSerializer,
        responses=AttendanceRecordSerializer,
    )
    @action(detail=False, methods=["post"], url_path="check-out")
    def check_out(self, request):
        ser = CheckOutRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        record = services.request_check_out(
            employee_for(request.user), now=timezone.now(), **ser.validated_data
        )
        return Response(self._payload(record))

    @extend_schema(
        tags=["Attendance"],
        request={"multipart/form-data": HalfDayRequestSerializer},
        responses=AttendanceRecordSerializer,
    )
    @action(detail=False, methods=["post"], url_path="half-day")
    def half_day(self, request):
        ser = HalfDayRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        record = services.request_half_day(
            employee_for(request.user),
            now=timezone.now(),
            half_day_type=vd["type"],
            reason=vd.get("reason", ""),
            attachment=vd.get("attachment"),
        )
        return Response(self._payload(record))

    @extend_schema(
        tags=["Attendance"],
        request={"multipart/form-data": LeaveRequestSerializer},
        responses=AttendanceRecordSerializer,
    )
    @action(detail=False, methods=["post"], url_path="leave")
    def leave(self, request):
        ser = LeaveRequestSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        record = services.request_leave(
            employee_for(request.user),
            now=timezone.now(),
            reason=vd.get("reason", ""),
            attachment=vd.get("attachment"),
        )
        return Response(self._payload(record))

    @extend_schema(
        tags=["Attendance"],
        request=AdminActionSerializer,
        responses=AttendanceRecordSerializer,
    )
    @action(detail=True, methods=["put"], url_path="action")
    def admin_action(self, request, pk=None):
        """Approve or reject one pending request on the record."""
        ser = AdminActionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        record = services.apply_admin_action(
            pk,
            vd["action"],
            admin=request.user,
            now=timezone.now(),
            remarks=vd.get("remarks"),
            expected_version=vd.get("version"),
        )
        return Response(self._payload(record))

    def update(self, request, *args, **kwargs):
        """Admin manual correction; every field is optional."""
        pk = kwargs.get(self.lookup_field)
        ser = ManualCorrectionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        record = services.set_attendance(
            pk,
            admin=request.user,
            now=timezone.now(),
            status=vd.get("status") or None,
            check_in_time=vd.get("check_in_time"),
            check_out_time=vd.get("check_out_time"),
            remarks=vd.get("remarks"),
            expected_version=vd.get("version"),
        )
        return Response(self._payload(record))

    def destroy(self, request, *args, **kwargs):
        pk = kwargs.get(self.lookup_field)
        snapshot = services.delete_record(pk)
        with contextlib.suppress(Exception):
            log_action(
                "attendance.delete",
                actor=request.user,
                model_name=MODEL_NAME,
                record_id=int(pk),
                before=snapshot,
            )
        return Response({"msg": "Attendance record removed"})

    @extend_schema(tags=["Attendance"], responses=AttendanceRecordSerializer(many=True))
    @action(detail=False, methods=["get"], url_path="me")
    def me(self, request):
        """The caller's own records, newest first."""
        qs = self.get_queryset().filter(employee=employee_for(request.user))
        qs = qs.order_by("-date", "-id")
        return Response(self.get_serializer(qs, many=True).data)

    @extend_schema(tags=["Attendance"], responses=AttendanceStatsSerializer)
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        data = services.attendance_stats(now=timezone.now())
        return Response(AttendanceStatsSerializer(data).data)
