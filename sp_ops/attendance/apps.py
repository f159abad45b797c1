from django.apps import AppConfig


class AttendanceConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sp_ops.attendance"
    verbose_name = "Attendance"
