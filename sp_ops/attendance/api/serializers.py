from rest_framework import serializers

from sp_ops.attendance.models import AttendanceAction
from sp_ops.attendance.models import AttendanceRecord
from sp_ops.attendance.models import DayStatus
from sp_ops.attendance.models import HalfDayType


class CheckInStateSerializer(serializers.Serializer):
    time = serializers.DateTimeField(source="check_in_time", read_only=True)
    status = serializers.CharField(source="check_in_status", read_only=True)
    remarks = serializers.CharField(source="check_in_remarks", read_only=True)


class CheckOutStateSerializer(serializers.Serializer):
    time = serializers.DateTimeField(source="check_out_time", read_only=True)
    status = serializers.CharField(source="check_out_status", read_only=True)
    remarks = serializers.CharField(source="check_out_remarks", read_only=True)


class HalfDayStateSerializer(serializers.Serializer):
    is_requested = serializers.BooleanField(source="half_day_requested", read_only=True)
    type = serializers.CharField(source="half_day_type", read_only=True)
    reason = serializers.CharField(source="half_day_reason", read_only=True)
    attachment = serializers.FileField(
        source="half_day_attachment", read_only=True, use_url=True
    )
    status = serializers.CharField(source="half_day_status", read_only=True)


class LeaveStateSerializer(serializers.Serializer):
    is_requested = serializers.BooleanField(source="leave_requested", read_only=True)
    reason = serializers.CharField(source="leave_reason", read_only=True)
    attachment = serializers.FileField(
        source="leave_attachment", read_only=True, use_url=True
    )
    status = serializers.CharField(source="leave_status", read_only=True)


class AttendanceActionSerializer(serializers.ModelSerializer):
    class Meta:
        model = AttendanceAction
        fields = ["id", "action", "admin", "timestamp"]
        read_only_fields = fields


class AttendanceRecordSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(
        source="employee.display_name", read_only=True
    )
    employee_code = serializers.CharField(
        source="employee.employee_id", read_only=True
    )
    check_in = CheckInStateSerializer(source="*", read_only=True)
    check_out = CheckOutStateSerializer(source="*", read_only=True)
    half_day = HalfDayStateSerializer(source="*", read_only=True)
    leave = LeaveStateSerializer(source="*", read_only=True)
    action_log = AttendanceActionSerializer(many=True, read_only=True)

    class Meta:
        model = AttendanceRecord
        fields = [
            "id",
            "employee",
            "employee_name",
            "employee_code",
            "date",
            "check_in",
            "check_out",
            "half_day",
            "leave",
            "status",
            "duration",
            "location",
            "admin_remarks",
            "action_log",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CheckInRequestSerializer(serializers.Serializer):
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    remarks = serializers.CharField(required=False, allow_blank=True)


class CheckOutRequestSerializer(serializers.Serializer):
    remarks = serializers.CharField(required=False, allow_blank=True)


class HalfDayRequestSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=HalfDayType.choices, default=HalfDayType.FIRST_HALF
    )
    reason = serializers.CharField(required=False, allow_blank=True)
    attachment = serializers.FileField(required=False, allow_null=True)


class LeaveRequestSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True)
    attachment = serializers.FileField(required=False, allow_null=True)


class AdminActionSerializer(serializers.Serializer):
    # Free text: unrecognised actions are logged without changing the record.
    action = serializers.CharField(max_length=64)
    remarks = serializers.CharField(required=False, allow_blank=True)
    version = serializers.IntegerField(required=False, min_value=0)


class ManualCorrectionSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=DayStatus.choices, required=False, allow_blank=True
    )
    check_in_time = serializers.DateTimeField(required=False, allow_null=True)
    check_out_time = serializers.DateTimeField(required=False, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True)
    version = serializers.IntegerField(required=False, min_value=0)


class StatsChartRowSerializer(serializers.Serializer):
    date = serializers.DateField()
    label = serializers.CharField()
    attendance = serializers.IntegerField()


class AttendanceStatsSerializer(serializers.Serializer):
    date = serializers.DateField()
    present_today = serializers.IntegerField()
    pending_requests = serializers.IntegerField()
    chart = StatsChartRowSerializer(many=True)
