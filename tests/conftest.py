"""
Shared fixtures.

Strategy:
- Every test gets its own in-memory SQLite database (aiosqlite + StaticPool),
  so there is nothing to clean up between tests.
- The app's ``get_db`` and ``get_audit_sink`` dependencies are overridden:
  requests run against the test database and write audit entries into an
  isolated ``InMemoryAuditSink``.
- StaticPool shares one connection. API tests therefore seed and inspect data
  through short-lived sessions (``session_factory``) that are closed before
  the next request; the long-lived ``db`` session is for service-level tests.
"""

from __future__ import annotations

import io
import os
import uuid

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

import openpyxl
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from attendancehub.core.security import hash_password, issue_access_token
from attendancehub.db.models import Base, Employee, User
from attendancehub.db.session import get_db
from attendancehub.main import app
from attendancehub.services.audit import InMemoryAuditSink, get_audit_sink

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _enable_savepoints(engine) -> None:
    # pysqlite's own transaction handling breaks SAVEPOINT; emit BEGIN ourselves
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    _enable_savepoints(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncSession:
    """Long-lived session for service-level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def audit_sink() -> InMemoryAuditSink:
    return InMemoryAuditSink(max_entries=100)


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(session_factory, audit_sink) -> AsyncClient:
    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_audit_sink] = lambda: audit_sink

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Users and tokens
# ---------------------------------------------------------------------------


async def _create_user(
    session_factory,
    role: str,
    password: str = "Secret123!",
    is_active: bool = True,
    employee_id: uuid.UUID | None = None,
) -> User:
    uid_short = uuid.uuid4().hex[:8]
    async with session_factory() as session:
        user = User(
            username=f"qa_{role}_{uid_short}",
            password_hash=hash_password(password),
            role=role,
            full_name=f"QA {role.title()} {uid_short}",
            is_active=is_active,
            employee_id=employee_id,
        )
        session.add(user)
        await session.commit()
        return user


def auth_headers(user: User) -> dict:
    token, _ = issue_access_token(user.id, user.role, user.employee_id)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_user(session_factory) -> User:
    return await _create_user(session_factory, "admin")


@pytest_asyncio.fixture
async def manager_user(session_factory) -> User:
    return await _create_user(session_factory, "manager")


@pytest_asyncio.fixture
async def employee_user(session_factory, employees) -> User:
    """Login account linked to the first sample employee."""
    return await _create_user(session_factory, "employee", employee_id=employees[0].id)


@pytest_asyncio.fixture
async def inactive_user(session_factory) -> User:
    return await _create_user(session_factory, "employee", is_active=False)


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    return auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user: User) -> dict:
    return auth_headers(manager_user)


@pytest.fixture
def employee_headers(employee_user: User) -> dict:
    return auth_headers(employee_user)


# ---------------------------------------------------------------------------
# Sample employees
# ---------------------------------------------------------------------------

SAMPLE_EMPLOYEES = [
    {"document_id": "12345678", "name": "Ana Torres Vega", "department": "Operaciones", "position": "Operario"},
    {"document_id": "87654321", "name": "Luis Pérez Soto", "department": "Operaciones", "position": "Jefe de Operaciones"},
    {"document_id": "11223344", "name": "María Quispe Rojas", "department": "Recursos Humanos", "position": "Analista de RRHH"},
]


@pytest_asyncio.fixture
async def employees(session_factory) -> list[Employee]:
    async with session_factory() as session:
        rows = [Employee(**data, status="active") for data in SAMPLE_EMPLOYEES]
        session.add_all(rows)
        await session.commit()
        return rows


# ---------------------------------------------------------------------------
# Spreadsheets
# ---------------------------------------------------------------------------


def build_report_xlsx(rows: list[list], header: list[str] | None = None, title_rows: int = 0) -> bytes:
    """In-memory .xlsx shaped like a biometric device export."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Asistencia"
    for _ in range(title_rows):
        ws.append(["Reporte de asistencia - Reloj biométrico"])
    ws.append(header or ["DNI", "Nombre", "Fecha", "Entrada", "Salida"])
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


SAMPLE_REPORT_ROWS = [
    ["12345678", "Ana Torres Vega", "2026-01-12", "08:58", "18:02"],
    ["12345678", "Ana Torres Vega", "2026-01-13", "09:20", "18:00"],
    ["12345678", "Ana Torres Vega", "2026-01-14", "-", "-"],
    ["87654321", "Luis Pérez Soto", "2026-01-12", "09:00", "17:30"],
    ["87654321", "Luis Pérez Soto", "2026-01-13", "09:05", "19:00"],
    ["99999999", "Ana Torres Vegas", "2026-01-12", "09:00", "18:00"],
]


@pytest.fixture
def sample_report_xlsx() -> bytes:
    return build_report_xlsx(SAMPLE_REPORT_ROWS, title_rows=1)
