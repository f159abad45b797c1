from django.contrib import admin

from sp_ops.payroll import models


@admin.register(models.PayrollRecord)
class PayrollRecordAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "employee",
        "year",
        "month",
        "total_hours",
        "net_salary",
        "status",
        "generated_at",
    ]
    search_fields = ["employee__employee_id", "employee__user__name"]
    list_filter = ["status", "year", "month"]
    list_select_related = ["employee", "employee__user"]
    readonly_fields = [
        "base_salary",
        "hourly_rate",
        "total_days",
        "present_days",
        "total_hours",
        "calculated_with_hours",
        "net_salary",
        "generated_by",
        "generated_at",
        "created_at",
        "updated_at",
    ]
