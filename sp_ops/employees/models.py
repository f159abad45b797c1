from decimal import Decimal

from django.conf import settings
from django.db import models


class Employee(models.Model):
    """Employee profile bound to a login account.

    ``base_salary`` is the monthly figure payroll derives the hourly rate from.
    """

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="employee"
    )
    employee_id = models.CharField(max_length=50, unique=True, blank=True, null=True)
    title = models.CharField(max_length=150, blank=True)
    department = models.CharField(max_length=150, blank=True)
    base_salary = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    join_date = models.DateField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["user__username"]

    def __str__(self):  # pragma: no cover - trivial
        return f"Employee({self.user.username})"

    @property
    def display_name(self) -> str:
        return self.user.display_name
