"""
Shared test fixtures and configuration for the employee records service tests.
"""
import os
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["DEBUG"] = "true"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.pop("REDIS_URL", None)

from app.core.cache import InMemoryCache, RegionCache  # noqa: E402
from app.models.employee import Employee  # noqa: E402
from app.services.employees import EmployeeService, WriteResult  # noqa: E402


class FakeEmployeeRepository:
    """
    In-memory stand-in for EmployeeRepository.

    Ids are handed out from a counter and never reused. Every call is
    recorded so tests can assert which store operations ran.
    """

    def __init__(self, employees: Optional[List[Employee]] = None):
        self.rows: dict[int, Employee] = {}
        self.calls: list[tuple] = []
        self.fail_writes = False
        self._next_id = 1
        for employee in employees or []:
            self._store(employee)

    def _store(self, employee: Employee) -> Employee:
        if employee.id is None:
            employee.id = self._next_id
        self._next_id = max(self._next_id, employee.id + 1)
        self.rows[employee.id] = employee
        return employee

    def write_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "save", "delete")]

    async def list_all(self) -> List[Employee]:
        self.calls.append(("list_all",))
        return [self.rows[k] for k in sorted(self.rows)]

    async def list_with_salary_above(self, min_salary: float) -> List[Employee]:
        self.calls.append(("list_with_salary_above", min_salary))
        return [self.rows[k] for k in sorted(self.rows) if self.rows[k].salary > min_salary]

    async def get(self, employee_id: int) -> Optional[Employee]:
        self.calls.append(("get", employee_id))
        return self.rows.get(employee_id)

    async def exists(self, employee_id: int) -> bool:
        self.calls.append(("exists", employee_id))
        return employee_id in self.rows

    async def insert(self, employee: Employee) -> WriteResult:
        self.calls.append(("insert", employee.name))
        if self.fail_writes:
            return WriteResult(committed=False, error="insert rejected")
        return WriteResult(committed=True, employee=self._store(employee))

    async def save(self, employee: Employee) -> WriteResult:
        self.calls.append(("save", employee.id))
        if self.fail_writes:
            return WriteResult(committed=False, error="update rejected")
        self.rows[employee.id] = employee
        return WriteResult(committed=True, employee=employee)

    async def delete(self, employee_id: int) -> WriteResult:
        self.calls.append(("delete", employee_id))
        if self.fail_writes:
            return WriteResult(committed=False, error="delete rejected")
        self.rows.pop(employee_id, None)
        return WriteResult(committed=True)


class RecordingRegionCache(RegionCache):
    """RegionCache over a private InMemoryCache that logs every operation."""

    def __init__(self):
        super().__init__(InMemoryCache(), namespace="test", ttl=None)
        self.ops: list[tuple] = []

    async def get(self, region, key):
        value = await super().get(region, key)
        self.ops.append(("get", region, key, value is not None))
        return value

    async def put(self, region, key, value):
        self.ops.append(("put", region, key))
        await super().put(region, key, value)

    async def evict(self, region, key):
        self.ops.append(("evict", region, key))
        await super().evict(region, key)

    async def evict_region(self, region):
        self.ops.append(("evict_region", region))
        return await super().evict_region(region)

    def writes(self) -> list[tuple]:
        return [op for op in self.ops if op[0] != "get"]


def make_employee(
    id: Optional[int] = None,
    name: str = "Ada Lovelace",
    department: str = "Engineering",
    salary: float = 1050.0,
    email: Optional[str] = "ada@example.com",
) -> Employee:
    return Employee(id=id, name=name, email=email, department=department, salary=salary)


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def sample_employees():
    return [
        make_employee(id=1, name="Ada Lovelace", department="Engineering", salary=1050.0),
        make_employee(id=2, name="Grace Hopper", department="hr", salary=1000.0, email=None),
        make_employee(id=3, name="Alan Turing", department="Sales", salary=1100.0, email="alan@example.com"),
    ]


@pytest.fixture
def fake_repository(sample_employees):
    return FakeEmployeeRepository(sample_employees)


@pytest.fixture
def empty_repository():
    return FakeEmployeeRepository()


@pytest.fixture
def recording_cache():
    return RecordingRegionCache()


@pytest.fixture
def employee_service(fake_repository, recording_cache):
    return EmployeeService(fake_repository, recording_cache)


@pytest.fixture
def mock_producer():
    producer = MagicMock()
    producer.topic = "messages"
    producer.send_message = AsyncMock()
    producer.close = AsyncMock()
    return producer


@pytest.fixture
def mock_request():
    """Create a mock FastAPI request object."""
    request = MagicMock()
    request.client = MagicMock()
    request.client.host = "127.0.0.1"
    request.headers = {}
    request.url = MagicMock()
    request.url.path = "/api/employees"
    request.method = "GET"
    return request


@pytest_asyncio.fixture
async def client(employee_service, mock_producer):
    """HTTP client against the app with the service and producer swapped for test doubles."""
    from app.main import app
    from app.api.deps import get_employee_service, get_message_producer

    app.dependency_overrides[get_employee_service] = lambda: employee_service
    app.dependency_overrides[get_message_producer] = lambda: mock_producer
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
