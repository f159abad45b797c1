from django.contrib import admin

from sp_ops.employees import models


@admin.register(models.Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "employee_id", "title", "base_salary", "is_active"]
    search_fields = [
        "user__username",
        "user__name",
        "employee_id",
        "title",
        "department",
    ]
    list_filter = ["department", "is_active", "join_date", "created_at"]
