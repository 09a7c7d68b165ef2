"""
HR Payroll - Test Configuration

Pytest fixtures and configuration.
"""

import os

# Settings are read at import time; point them at SQLite before app imports
os.environ.setdefault("DATABASE_URL_ASYNC", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_async_session
from app.models import Employee, EmployeeStatus, FilingStatus, LeaveRequest, LeaveStatus, LeaveType
from app.services.payroll_engine import working_days_between
from main import app


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# One shared in-memory connection per engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionLocal = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


@pytest.fixture
def now() -> datetime:
    return datetime(2024, 4, 2, 9, 30, tzinfo=timezone.utc)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""

    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_async_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ===========================================
# DATA FIXTURES
# ===========================================

@pytest_asyncio.fixture
async def test_employee(db_session: AsyncSession) -> Employee:
    """Employee on 3000/month, hired in 2020."""
    employee = Employee(
        id=uuid4(),
        employee_number="EMP-0001",
        first_name="Camille",
        last_name="Martin",
        email="camille.martin@example.com",
        position="Accountant",
        department="Finance",
        hire_date=date(2020, 9, 1),
        base_salary=Decimal("3000.00"),
        status=EmployeeStatus.ACTIVE,
        filing_status=FilingStatus.SINGLE,
    )
    db_session.add(employee)
    await db_session.commit()
    await db_session.refresh(employee)
    return employee


@pytest_asyncio.fixture
async def add_leave(db_session: AsyncSession):
    """Factory inserting a leave request straight into the database."""

    async def _add_leave(
        employee: Employee,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        status: LeaveStatus = LeaveStatus.APPROVED,
    ) -> LeaveRequest:
        request = LeaveRequest(
            id=uuid4(),
            employee_id=employee.id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            number_of_days=max(1, working_days_between(start_date, end_date)),
            status=status,
        )
        db_session.add(request)
        await db_session.commit()
        await db_session.refresh(request)
        return request

    return _add_leave


@pytest_asyncio.fixture
async def second_session(db_session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """Independent session on the same database, for concurrent-writer tests."""
    async with TestSessionLocal() as session:
        yield session
        await session.rollback()
