"""Hourly payroll derived from approved attendance.

Model: a month is ``STANDARD_DAYS`` days of ``STANDARD_HOURS`` hours, so
``hourly_rate = base_salary / 30 / 8`` whatever the calendar month length.
All money is rounded half-up to whole units.
"""

import calendar
import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import date
from datetime import datetime
from decimal import ROUND_HALF_UP
from decimal import Decimal

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from sp_ops.attendance.models import AttendanceRecord
from sp_ops.attendance.models import DayStatus
from sp_ops.employees.models import Employee
from sp_ops.payroll.exceptions import EmployeeNotFound
from sp_ops.payroll.exceptions import PayrollRecordNotFound
from sp_ops.payroll.models import PayrollRecord

logger = logging.getLogger(__name__)

STANDARD_DAYS = 30
STANDARD_HOURS = 8
HALF_DAY_HOURS = Decimal(4)
HOLIDAY_HOURS = Decimal(8)

ZERO = Decimal(0)
CENTS = Decimal("0.01")
UNITS = Decimal(1)
RATE_PLACES = Decimal("0.0001")


def round_half_up(value: Decimal, exp: Decimal = UNITS) -> Decimal:
    return Decimal(value).quantize(exp, rounding=ROUND_HALF_UP)


def hourly_rate_for(base_salary) -> Decimal:
    return Decimal(base_salary or 0) / STANDARD_DAYS / STANDARD_HOURS


def hours_for_record(record) -> Decimal:
    """Paid hours for one attendance day.

    Recorded minutes win; otherwise a fixed allowance for half days and
    holidays. A plain ``Present`` day without a closed check-out pays nothing.
    """
    if record.duration > 0:
        return round_half_up(Decimal(record.duration) / 60, CENTS)
    if record.status == DayStatus.HALF_DAY:
        return HALF_DAY_HOURS
    if record.status == DayStatus.HOLIDAY:
        return HOLIDAY_HOURS
    return ZERO


def normalize_period(month, year) -> tuple[str, str]:
    """Return ``("01", "2026")`` style keys, or raise ValidationError."""
    try:
        month_num = int(month)
        year_num = int(year)
    except (TypeError, ValueError):
        raise ValidationError(
            {"detail": "Please provide month (1-12) and year."}
        ) from None
    if not 1 <= month_num <= 12:  # noqa: PLR2004
        raise ValidationError({"month": "Month must be between 1 and 12."})
    if not 1900 <= year_num <= 9999:  # noqa: PLR2004
        raise ValidationError({"year": "Year must be a four-digit year."})
    return f"{month_num:02d}", f"{year_num:04d}"


def month_bounds(month, year) -> tuple[date, date]:
    month_key, year_key = normalize_period(month, year)
    month_num, year_num = int(month_key), int(year_key)
    last_day = calendar.monthrange(year_num, month_num)[1]
    return date(year_num, month_num, 1), date(year_num, month_num, last_day)


@dataclass(frozen=True)
class BreakdownRow:
    date: date
    status: str
    check_in: datetime | None
    check_out: datetime | None
    hours: Decimal
    daily_pay: Decimal


@dataclass(frozen=True)
class PayrollBreakdown:
    employee: Employee
    month: str
    year: str
    base_salary: Decimal
    hourly_rate: Decimal
    rows: list[BreakdownRow] = field(default_factory=list)
    total_days: int = STANDARD_DAYS
    present_days: int = 0
    total_hours: Decimal = ZERO
    total_pay: Decimal = ZERO

    @property
    def net_salary(self) -> Decimal:
        # Bonus and deductions only enter at finalize time.
        return self.total_pay


def get_employee(employee_id) -> Employee:
    employee = (
        Employee.objects.select_related("user").filter(pk=employee_id).first()
    )
    if employee is None:
        raise EmployeeNotFound
    return employee


def compute_breakdown(employee, month, year) -> PayrollBreakdown:
    """Per-day hours and pay for the month. Reads only; writes nothing."""
    month_key, year_key = normalize_period(month, year)
    start, end = month_bounds(month_key, year_key)
    base_salary = Decimal(employee.base_salary or 0)
    rate = hourly_rate_for(base_salary)

    records = AttendanceRecord.objects.filter(
        employee=employee, date__gte=start, date__lte=end
    ).order_by("date", "id")

    rows = []
    present_days = 0
    total_hours = ZERO
    total_pay = ZERO
    for record in records:
        hours = hours_for_record(record)
        daily_pay = round_half_up(hours * rate)
        if hours > 0:
            present_days += 1
            total_hours += hours
            total_pay += daily_pay
        rows.append(
            BreakdownRow(
                date=record.date,
                status=record.status,
                check_in=record.check_in_time,
                check_out=record.check_out_time,
                hours=hours,
                daily_pay=daily_pay,
            ),
        )

    return PayrollBreakdown(
        employee=employee,
        month=month_key,
        year=year_key,
        base_salary=base_salary,
        hourly_rate=rate,
        rows=rows,
        present_days=present_days,
        total_hours=total_hours,
        total_pay=total_pay,
    )


@transaction.atomic
def generate_payroll_record(  # noqa: PLR0913
    employee,
    month,
    year,
    *,
    bonus=None,
    deductions=None,
    generated_by=None,
    now=None,
):
    """Finalize the month into a PayrollRecord, overwriting any earlier slip.

    ``bonus``/``deductions`` of None keep the values of an existing slip
    (zero for a new one). Only computed fields and ``generated_at`` are
    overwritten; status and payment details of an existing slip are kept.
    """
    now = now or timezone.now()
    breakdown = compute_breakdown(employee, month, year)
    existing = (
        PayrollRecord.objects.select_for_update()
        .filter(employee=employee, month=breakdown.month, year=breakdown.year)
        .first()
    )
    if bonus is None:
        bonus = existing.bonus if existing else ZERO
    if deductions is None:
        deductions = existing.deductions if existing else ZERO
    bonus = Decimal(bonus)
    deductions = Decimal(deductions)

    earned = round_half_up(breakdown.total_hours * breakdown.hourly_rate)
    defaults = {
        "base_salary": breakdown.base_salary,
        "hourly_rate": round_half_up(breakdown.hourly_rate, RATE_PLACES),
        "total_days": breakdown.total_days,
        "present_days": breakdown.present_days,
        "total_hours": breakdown.total_hours,
        "calculated_with_hours": earned,
        "bonus": bonus,
        "deductions": deductions,
        "net_salary": earned + bonus - deductions,
        "generated_at": now,
    }
    record, created = PayrollRecord.objects.update_or_create(
        employee=employee,
        month=breakdown.month,
        year=breakdown.year,
        defaults=defaults,
        create_defaults={
            **defaults,
            "status": PayrollRecord.Status.GENERATED,
            "generated_by": generated_by,
        },
    )
    logger.info(
        "Payroll %s for employee=%s %s-%s net=%s",
        "generated" if created else "regenerated",
        employee.pk,
        breakdown.year,
        breakdown.month,
        record.net_salary,
    )
    return record


def get_payroll_record(employee, month, year) -> PayrollRecord | None:
    month_key, year_key = normalize_period(month, year)
    return PayrollRecord.objects.filter(
        employee=employee, month=month_key, year=year_key
    ).first()


@transaction.atomic
def mark_paid(record_id, *, payment_method, payment_date=None, now=None):
    record = PayrollRecord.objects.select_for_update().filter(pk=record_id).first()
    if record is None:
        raise PayrollRecordNotFound
    record.status = PayrollRecord.Status.PAID
    record.payment_method = payment_method
    record.payment_date = payment_date or now or timezone.now()
    record.save(
        update_fields=["status", "payment_method", "payment_date", "updated_at"],
    )
    logger.info("Payroll %s marked paid via %s", record.pk, payment_method)
    return record


def finalize_month(month, year, *, now=None) -> dict:
    """Finalize every active employee's slip for the month."""
    month_key, year_key = normalize_period(month, year)
    generated = 0
    for employee in Employee.objects.filter(is_active=True).iterator():
        generate_payroll_record(employee, month_key, year_key, now=now)
        generated += 1
    return {"month": month_key, "year": year_key, "generated": generated}
