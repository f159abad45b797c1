from django.apps import AppConfig


class PayrollConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sp_ops.payroll"
    verbose_name = "Payroll"
