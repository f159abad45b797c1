from decimal import Decimal

from rest_framework import serializers

from sp_ops.payroll.models import PayrollRecord


class PeriodQuerySerializer(serializers.Serializer):
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=1900, max_value=9999)


class BreakdownRowSerializer(serializers.Serializer):
    date = serializers.DateField()
    status = serializers.CharField()
    check_in = serializers.DateTimeField(allow_null=True)
    check_out = serializers.DateTimeField(allow_null=True)
    hours = serializers.DecimalField(
        max_digits=8, decimal_places=2, coerce_to_string=False
    )
    daily_pay = serializers.DecimalField(
        max_digits=12, decimal_places=0, coerce_to_string=False
    )


class BreakdownSummarySerializer(serializers.Serializer):
    total_days = serializers.IntegerField()
    present_days = serializers.IntegerField()
    total_hours = serializers.DecimalField(
        max_digits=8, decimal_places=2, coerce_to_string=False
    )
    total_pay = serializers.DecimalField(
        max_digits=12, decimal_places=0, coerce_to_string=False
    )
    net_salary = serializers.DecimalField(
        max_digits=12, decimal_places=0, coerce_to_string=False
    )


class PayrollBreakdownSerializer(serializers.Serializer):
    employee = serializers.IntegerField(source="employee.pk")
    employee_name = serializers.CharField(source="employee.display_name")
    month = serializers.CharField()
    year = serializers.CharField()
    base_salary = serializers.DecimalField(
        max_digits=12, decimal_places=2, coerce_to_string=False
    )
    hourly_rate = serializers.DecimalField(
        max_digits=14, decimal_places=4, coerce_to_string=False
    )
    rows = BreakdownRowSerializer(many=True)
    summary = BreakdownSummarySerializer(source="*")


class GeneratePayrollSerializer(serializers.Serializer):
    employee_id = serializers.IntegerField()
    month = serializers.IntegerField(min_value=1, max_value=12)
    year = serializers.IntegerField(min_value=1900, max_value=9999)
    bonus = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal(0),
        required=False,
        default=Decimal(0),
    )
    deductions = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal(0),
        required=False,
        default=Decimal(0),
    )


class MarkPaidSerializer(serializers.Serializer):
    payment_method = serializers.CharField(max_length=64)
    payment_date = serializers.DateTimeField(required=False)


class PayrollRecordSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(
        source="employee.display_name", read_only=True
    )
    employee_code = serializers.CharField(
        source="employee.employee_id", read_only=True
    )

    class Meta:
        model = PayrollRecord
        fields = [
            "id",
            "employee",
            "employee_name",
            "employee_code",
            "month",
            "year",
            "base_salary",
            "hourly_rate",
            "total_days",
            "present_days",
            "total_hours",
            "calculated_with_hours",
            "bonus",
            "deductions",
            "net_salary",
            "status",
            "generated_by",
            "generated_at",
            "payment_date",
            "payment_method",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PayrollStatusSerializer(serializers.Serializer):
    generated = serializers.BooleanField()
    record = PayrollRecordSerializer(allow_null=True)
