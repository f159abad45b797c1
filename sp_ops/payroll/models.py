from decimal import Decimal

from django.conf import settings
from django.db import models

ZERO = Decimal("0.00")


class PayrollRecord(models.Model):
    """Frozen monthly salary slip for one employee.

    Written only by the finalizer (upsert per employee/month/year) and by
    payment marking. Numbers are never recomputed from this row.
    """

    class Status(models.TextChoices):
        GENERATED = "Generated", "Generated"
        PAID = "Paid", "Paid"

    employee = models.ForeignKey(
        "employees.Employee",
        on_delete=models.CASCADE,
        related_name="payroll_records",
    )
    # Zero-padded "01".."12" and four-digit year.
    month = models.CharField(max_length=2)
    year = models.CharField(max_length=4)

    base_salary = models.DecimalField(max_digits=12, decimal_places=2)
    hourly_rate = models.DecimalField(max_digits=14, decimal_places=4)
    total_days = models.PositiveIntegerField(default=30)
    present_days = models.PositiveIntegerField(default=0)
    total_hours = models.DecimalField(max_digits=8, decimal_places=2, default=ZERO)

    calculated_with_hours = models.DecimalField(
        max_digits=12, decimal_places=2, default=ZERO
    )
    bonus = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    deductions = models.DecimalField(max_digits=12, decimal_places=2, default=ZERO)
    net_salary = models.DecimalField(max_digits=12, decimal_places=2)

    status = models.CharField(
        max_length=16, choices=Status.choices, default=Status.GENERATED
    )
    generated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="generated_payroll_records",
    )
    generated_at = models.DateTimeField()
    payment_date = models.DateTimeField(null=True, blank=True)
    payment_method = models.CharField(max_length=64, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year", "-month", "employee_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "month", "year"],
                name="uniq_payroll_employee_period",
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover - simple repr
        return f"PayrollRecord({self.employee_id} {self.year}-{self.month})"

    def snapshot(self) -> dict:
        return {
            "status": self.status,
            "total_hours": str(self.total_hours),
            "present_days": self.present_days,
            "bonus": str(self.bonus),
            "deductions": str(self.deductions),
            "net_salary": str(self.net_salary),
        }
