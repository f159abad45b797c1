import pytest
from rest_framework.test import APIClient

from sp_ops.employees.models import Employee
from sp_ops.employees.tests.factories import EmployeeFactory
from sp_ops.users.models import User
from sp_ops.users.tests.factories import UserFactory


@pytest.fixture(autouse=True)
def _media_storage(settings, tmpdir) -> None:
    settings.MEDIA_ROOT = tmpdir.strpath


@pytest.fixture
def user(db) -> User:
    return UserFactory()


@pytest.fixture
def admin_user(db) -> User:
    return UserFactory(username="ops-admin", is_staff=True)


@pytest.fixture
def employee(db) -> Employee:
    return EmployeeFactory()


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()
