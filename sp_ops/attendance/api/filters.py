import django_filters

from sp_ops.attendance.models import AttendanceRecord
from sp_ops.attendance.models import DayStatus


class AttendanceRecordFilter(django_filters.FilterSet):
    employee = django_filters.NumberFilter(field_name="employee_id")
    date = django_filters.DateFilter(field_name="date")
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    status = django_filters.ChoiceFilter(choices=DayStatus.choices)

    class Meta:
        model = AttendanceRecord
        fields = ["employee", "date", "start_date", "end_date", "status"]
