from decimal import Decimal

from sp_ops.employees.tests.factories import EmployeeFactory
from sp_ops.users.tests.factories import UserFactory


def test_display_name_comes_from_user(db):
    employee = EmployeeFactory(user=UserFactory(name="Grace Hopper"))

    assert employee.display_name == "Grace Hopper"


def test_user_reaches_profile_through_reverse_accessor(db):
    employee = EmployeeFactory(base_salary=Decimal("24000.00"))

    assert employee.user.employee == employee
    assert employee.user.employee.base_salary == Decimal("24000.00")
