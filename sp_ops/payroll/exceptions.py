from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import NotFound


class EmployeeNotFound(NotFound):
    default_detail = _("Employee not found.")
    default_code = "employee_not_found"


class PayrollRecordNotFound(NotFound):
    default_detail = _("Payroll record not found.")
    default_code = "record_not_found"
