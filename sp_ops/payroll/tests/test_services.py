import datetime as dt
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from sp_ops.attendance import services as attendance
from sp_ops.attendance.models import RequestStatus
from sp_ops.attendance.models import Transition
from sp_ops.attendance.tests.factories import AttendanceRecordFactory
from sp_ops.employees.tests.factories import EmployeeFactory
from sp_ops.payroll import services
from sp_ops.payroll.exceptions import EmployeeNotFound
from sp_ops.payroll.exceptions import PayrollRecordNotFound
from sp_ops.payroll.models import PayrollRecord

pytestmark = pytest.mark.django_db

NINE_AM = dt.datetime(2026, 1, 15, 9, 0, tzinfo=dt.UTC)
HALF_FIVE_PM = dt.datetime(2026, 1, 15, 17, 30, tzinfo=dt.UTC)
FINALIZED_AT = dt.datetime(2026, 2, 1, 8, 0, tzinfo=dt.UTC)


def _work_full_day(employee, admin_user):
    record = attendance.request_check_in(employee, now=NINE_AM)
    attendance.apply_admin_action(
        record.pk, "approve_checkin", admin=admin_user, now=NINE_AM
    )
    attendance.request_check_out(employee, now=HALF_FIVE_PM)
    return attendance.apply_admin_action(
        record.pk, "approve_checkout", admin=admin_user, now=HALF_FIVE_PM
    )


def test_hourly_rate_uses_thirty_eight_hour_days():
    assert services.hourly_rate_for(Decimal("15000")) == Decimal("62.5")
    assert services.hourly_rate_for(None) == Decimal(0)


def test_round_half_up():
    assert services.round_half_up(Decimal("531.25")) == Decimal(531)
    assert services.round_half_up(Decimal("0.5")) == Decimal(1)
    assert services.round_half_up(Decimal("2.5")) == Decimal(3)
    assert services.round_half_up(Decimal("8.505"), services.CENTS) == Decimal("8.51")


@pytest.mark.parametrize(
    ("month", "year", "expected"),
    [
        (1, 2026, ("01", "2026")),
        ("12", "2025", ("12", "2025")),
        ("07", 2026, ("07", "2026")),
    ],
)
def test_normalize_period(month, year, expected):
    assert services.normalize_period(month, year) == expected


@pytest.mark.parametrize(("month", "year"), [(0, 2026), (13, 2026), ("x", 2026)])
def test_normalize_period_rejects_bad_input(month, year):
    with pytest.raises(ValidationError):
        services.normalize_period(month, year)


def test_month_bounds_handles_leap_february():
    assert services.month_bounds(2, 2028) == (dt.date(2028, 2, 1), dt.date(2028, 2, 29))


class TestHoursForRecord:
    def test_duration_wins(self):
        record = AttendanceRecordFactory.build(duration=510)
        assert services.hours_for_record(record) == Decimal("8.50")

    def test_half_day_without_duration(self):
        record = AttendanceRecordFactory(
            half_day_requested=True,
            half_day_status=RequestStatus.APPROVED,
            last_transition=Transition.HALF_DAY,
        )
        assert record.status == "Half Day"
        assert services.hours_for_record(record) == Decimal(4)

    def test_holiday(self):
        record = AttendanceRecordFactory(
            manual_status="Holiday", last_transition=Transition.MANUAL
        )
        assert services.hours_for_record(record) == Decimal(8)

    def test_present_without_check_out_is_unpaid(self):
        record = AttendanceRecordFactory(checked_in=True)
        assert record.status == "Present"
        assert services.hours_for_record(record) == Decimal(0)


class TestComputeBreakdown:
    def test_single_worked_day(self, employee, admin_user):
        record = _work_full_day(employee, admin_user)
        assert record.duration == 510

        result = services.compute_breakdown(employee, 1, 2026)

        assert result.hourly_rate == Decimal("62.5")
        assert result.total_days == 30
        assert result.present_days == 1
        assert result.total_hours == Decimal("8.50")
        assert result.total_pay == Decimal(531)
        assert result.net_salary == Decimal(531)
        assert len(result.rows) == 1
        row = result.rows[0]
        assert row.date == dt.date(2026, 1, 15)
        assert row.status == "Checked-Out"
        assert row.check_in == NINE_AM
        assert row.check_out == HALF_FIVE_PM
        assert row.daily_pay == Decimal(531)

    def test_unpaid_days_are_listed_but_not_counted(self, employee):
        AttendanceRecordFactory(employee=employee, date=dt.date(2026, 1, 5))
        AttendanceRecordFactory(
            employee=employee, date=dt.date(2026, 1, 6), checked_in=True
        )
        AttendanceRecordFactory(
            employee=employee,
            date=dt.date(2026, 1, 7),
            manual_status="Holiday",
            last_transition=Transition.MANUAL,
        )

        result = services.compute_breakdown(employee, 1, 2026)

        assert [row.hours for row in result.rows] == [
            Decimal(0),
            Decimal(0),
            Decimal(8),
        ]
        assert result.present_days == 1
        assert result.total_hours == Decimal(8)
        assert result.total_pay == Decimal(500)

    def test_only_the_requested_month_is_read(self, employee):
        AttendanceRecordFactory(
            employee=employee, date=dt.date(2025, 12, 31), duration=480
        )
        for day in (dt.date(2026, 1, 31), dt.date(2026, 2, 1)):
            AttendanceRecordFactory(employee=employee, date=day, duration=480)
        AttendanceRecordFactory(date=dt.date(2026, 1, 10), duration=480)

        result = services.compute_breakdown(employee, "01", "2026")

        assert [row.date for row in result.rows] == [dt.date(2026, 1, 31)]

    def test_rows_are_ordered_by_date(self, employee):
        for day in (20, 3, 11):
            AttendanceRecordFactory(
                employee=employee, date=dt.date(2026, 1, day), duration=60
            )

        result = services.compute_breakdown(employee, 1, 2026)

        assert [row.date.day for row in result.rows] == [3, 11, 20]

    def test_total_pay_is_sum_of_paid_rows(self, employee):
        employee.base_salary = Decimal("10000")
        employee.save()
        for day, minutes in ((2, 455), (3, 481), (4, 0)):
            AttendanceRecordFactory(
                employee=employee, date=dt.date(2026, 1, day), duration=minutes
            )

        result = services.compute_breakdown(employee, 1, 2026)

        assert result.total_pay == sum(
            row.daily_pay for row in result.rows if row.hours > 0
        )

    def test_is_repeatable_and_writes_nothing(self, employee, admin_user):
        _work_full_day(employee, admin_user)

        first = services.compute_breakdown(employee, 1, 2026)
        second = services.compute_breakdown(employee, 1, 2026)

        assert first == second
        assert not PayrollRecord.objects.exists()

    def test_empty_month(self, employee):
        result = services.compute_breakdown(employee, 3, 2026)

        assert result.rows == []
        assert result.present_days == 0
        assert result.total_pay == Decimal(0)

    def test_missing_base_salary_pays_zero(self):
        employee = EmployeeFactory(base_salary=Decimal(0))
        AttendanceRecordFactory(employee=employee, duration=480)

        result = services.compute_breakdown(employee, 1, 2026)

        assert result.total_hours == Decimal(8)
        assert result.total_pay == Decimal(0)


def test_get_employee_raises_for_unknown_id():
    with pytest.raises(EmployeeNotFound):
        services.get_employee(987654)


class TestGeneratePayrollRecord:
    def test_net_salary_includes_bonus_and_deductions(self, employee, admin_user):
        _work_full_day(employee, admin_user)

        record = services.generate_payroll_record(
            employee,
            1,
            2026,
            bonus=Decimal(1000),
            deductions=Decimal(200),
            generated_by=admin_user,
            now=FINALIZED_AT,
        )

        assert record.month == "01"
        assert record.year == "2026"
        assert record.hourly_rate == Decimal("62.5000")
        assert record.total_hours == Decimal("8.50")
        assert record.present_days == 1
        assert record.calculated_with_hours == Decimal(531)
        assert record.net_salary == Decimal(1331)
        assert record.status == PayrollRecord.Status.GENERATED
        assert record.generated_by == admin_user
        assert record.generated_at == FINALIZED_AT

    def test_is_idempotent(self, employee, admin_user):
        _work_full_day(employee, admin_user)

        first = services.generate_payroll_record(
            employee, "01", "2026", bonus=500, deductions=0, now=FINALIZED_AT
        )
        second = services.generate_payroll_record(
            employee, "01", "2026", bonus=500, deductions=0, now=FINALIZED_AT
        )

        assert PayrollRecord.objects.filter(employee=employee).count() == 1
        assert second.pk == first.pk
        assert second.net_salary == first.net_salary == Decimal(1031)
        assert second.total_hours == first.total_hours
        assert second.present_days == first.present_days

    def test_regenerate_picks_up_new_attendance(self, employee, admin_user):
        first = services.generate_payroll_record(employee, 1, 2026, now=FINALIZED_AT)
        assert first.net_salary == Decimal(0)

        _work_full_day(employee, admin_user)
        later = FINALIZED_AT + dt.timedelta(hours=1)
        second = services.generate_payroll_record(employee, 1, 2026, now=later)

        assert second.pk == first.pk
        assert second.net_salary == Decimal(531)
        assert second.generated_at == later

    def test_regenerate_keeps_original_generator(self, employee, admin_user, user):
        services.generate_payroll_record(
            employee, 1, 2026, generated_by=admin_user, now=FINALIZED_AT
        )
        record = services.generate_payroll_record(
            employee, 1, 2026, generated_by=user, now=FINALIZED_AT
        )

        assert record.generated_by == admin_user

    def test_omitted_adjustments_are_preserved(self, employee):
        services.generate_payroll_record(
            employee, 1, 2026, bonus=300, deductions=50, now=FINALIZED_AT
        )

        record = services.generate_payroll_record(employee, 1, 2026, now=FINALIZED_AT)

        assert record.bonus == Decimal(300)
        assert record.deductions == Decimal(50)
        assert record.net_salary == Decimal(250)

    def test_regenerate_keeps_payment_of_paid_slip(self, employee, admin_user):
        record = services.generate_payroll_record(employee, 1, 2026, now=FINALIZED_AT)
        services.mark_paid(record.pk, payment_method="Bank Transfer", now=FINALIZED_AT)
        _work_full_day(employee, admin_user)

        later = FINALIZED_AT + dt.timedelta(days=1)
        record = services.generate_payroll_record(employee, 1, 2026, now=later)

        record.refresh_from_db()
        assert record.status == PayrollRecord.Status.PAID
        assert record.payment_method == "Bank Transfer"
        assert record.payment_date == FINALIZED_AT
        assert record.net_salary == Decimal(531)
        assert record.generated_at == later


class TestMarkPaid:
    def test_defaults_payment_date_to_now(self, employee):
        record = services.generate_payroll_record(employee, 1, 2026, now=FINALIZED_AT)

        paid = services.mark_paid(record.pk, payment_method="Cash", now=FINALIZED_AT)

        assert paid.status == PayrollRecord.Status.PAID
        assert paid.payment_method == "Cash"
        assert paid.payment_date == FINALIZED_AT

    def test_explicit_payment_date(self, employee):
        record = services.generate_payroll_record(employee, 1, 2026, now=FINALIZED_AT)
        paid_on = dt.datetime(2026, 2, 3, 12, 0, tzinfo=dt.UTC)

        paid = services.mark_paid(
            record.pk, payment_method="Cheque", payment_date=paid_on
        )

        assert paid.payment_date == paid_on

    def test_unknown_record(self):
        with pytest.raises(PayrollRecordNotFound):
            services.mark_paid(4040, payment_method="Cash")


def test_get_payroll_record_returns_none_when_not_generated(employee):
    assert services.get_payroll_record(employee, 1, 2026) is None
