from django.contrib import admin

from sp_ops.attendance import models


class AttendanceActionInline(admin.TabularInline):
    model = models.AttendanceAction
    extra = 0
    can_delete = False
    readonly_fields = ["action", "admin", "timestamp"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(models.AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ["id", "employee", "date", "status", "duration", "location"]
    search_fields = [
        "employee__user__username",
        "employee__employee_id",
        "location",
        "admin_remarks",
    ]
    list_filter = ["date", "status", "check_in_status", "check_out_status"]
    readonly_fields = ["status", "version", "created_at", "updated_at"]
    inlines = [AttendanceActionInline]


@admin.register(models.AttendanceAction)
class AttendanceActionAdmin(admin.ModelAdmin):
    list_display = ["id", "record", "action", "admin", "timestamp"]
    search_fields = ["action"]
    list_filter = ["action", "timestamp"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
