import contextlib

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import OpenApiTypes
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from sp_ops.audit.utils import log_action
from sp_ops.payroll import services
from sp_ops.payroll.api.serializers import GeneratePayrollSerializer
from sp_ops.payroll.api.serializers import MarkPaidSerializer
from sp_ops.payroll.api.serializers import PayrollBreakdownSerializer
from sp_ops.payroll.api.serializers import PayrollRecordSerializer
from sp_ops.payroll.api.serializers import PayrollStatusSerializer
from sp_ops.payroll.api.serializers import PeriodQuerySerializer
from sp_ops.payroll.models import PayrollRecord
from sp_ops.users.api.permissions import IsAdmin
from sp_ops.users.api.permissions import employee_for
from sp_ops.users.api.permissions import is_admin

MODEL_NAME = "payroll.PayrollRecord"

PERIOD_PARAMETERS = [
    OpenApiParameter(
        name="month",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        required=True,
        description="Month number (1-12)",
    ),
    OpenApiParameter(
        name="year",
        type=OpenApiTypes.INT,
        location=OpenApiParameter.QUERY,
        required=True,
        description="Four-digit year",
    ),
]


def _check_admin_or_self(user, employee_id) -> None:
    if is_admin(user):
        return
    own = employee_for(user)
    if own is None or own.pk != int(employee_id):
        raise PermissionDenied("You can only view your own payroll.")


class PayrollViewSet(GenericViewSet):
    """Live salary breakdowns and slip finalization."""

    permission_classes = [IsAuthenticated]
    serializer_class = PayrollRecordSerializer

    def get_permissions(self):
        if getattr(self, "action", None) == "generate":
            return [IsAuthenticated(), IsAdmin()]
        return super().get_permissions()

    def _period(self, request):
        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return query.validated_data["month"], query.validated_data["year"]

    @extend_schema(
        tags=["Payroll"],
        parameters=PERIOD_PARAMETERS,
        responses=PayrollBreakdownSerializer,
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"breakdown/(?P<employee_id>\d+)",
        url_name="breakdown",
    )
    def breakdown(self, request, employee_id=None):
        """Per-day hours and pay computed from live attendance; saves nothing."""
        _check_admin_or_self(request.user, employee_id)
        month, year = self._period(request)
        employee = services.get_employee(employee_id)
        result = services.compute_breakdown(employee, month, year)
        return Response(PayrollBreakdownSerializer(result).data)

    @extend_schema(
        tags=["Payroll"],
        request=GeneratePayrollSerializer,
        responses=PayrollRecordSerializer,
    )
    @action(detail=False, methods=["post"], url_path="generate")
    def generate(self, request):
        ser = GeneratePayrollSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        employee = services.get_employee(vd["employee_id"])
        before = services.get_payroll_record(employee, vd["month"], vd["year"])
        before = before.snapshot() if before else None
        record = services.generate_payroll_record(
            employee,
            vd["month"],
            vd["year"],
            bonus=vd["bonus"],
            deductions=vd["deductions"],
            generated_by=request.user,
            now=timezone.now(),
        )
        with contextlib.suppress(Exception):
            log_action(
                "payroll.generate",
                actor=request.user,
                message=f"employee={employee.pk} period={record.year}-{record.month}",
                model_name=MODEL_NAME,
                record_id=record.pk,
                before=before,
                after=record.snapshot(),
            )
        return Response(PayrollRecordSerializer(record).data)

    @extend_schema(
        tags=["Payroll"],
        parameters=PERIOD_PARAMETERS,
        responses=PayrollStatusSerializer,
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"status/(?P<employee_id>\d+)",
        url_name="status",
    )
    def slip_status(self, request, employee_id=None):
        """Finalized slip for the month, if any; ``record`` is null otherwise."""
        _check_admin_or_self(request.user, employee_id)
        month, year = self._period(request)
        employee = services.get_employee(employee_id)
        record = services.get_payroll_record(employee, month, year)
        return Response(
            PayrollStatusSerializer(
                {"generated": record is not None, "record": record}
            ).data,
        )


@extend_schema_view(
    list=extend_schema(tags=["Payroll"]),
    retrieve=extend_schema(tags=["Payroll"]),
)
class PayrollRecordViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    GenericViewSet,
):
    queryset = PayrollRecord.objects.select_related("employee", "employee__user")
    serializer_class = PayrollRecordSerializer
    permission_classes = [IsAuthenticated, IsAdmin]
    filterset_fields = ["employee", "month", "year", "status"]
    lookup_value_regex = r"\d+"

    @extend_schema(
        tags=["Payroll"],
        request=MarkPaidSerializer,
        responses=PayrollRecordSerializer,
    )
    @action(detail=True, methods=["post"], url_path="mark-paid")
    def mark_paid(self, request, pk=None):
        ser = MarkPaidSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        vd = ser.validated_data
        existing = PayrollRecord.objects.filter(pk=pk).first()
        before = existing.snapshot() if existing else None
        record = services.mark_paid(
            pk,
            payment_method=vd["payment_method"],
            payment_date=vd.get("payment_date"),
            now=timezone.now(),
        )
        with contextlib.suppress(Exception):
            log_action(
                "payroll.mark_paid",
                actor=request.user,
                message=f"method={record.payment_method}",
                model_name=MODEL_NAME,
                record_id=record.pk,
                before=before,
                after=record.snapshot(),
            )
        return Response(PayrollRecordSerializer(record).data)
