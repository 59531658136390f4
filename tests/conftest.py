"""Pytest configuration and fixtures for the provisioning workflows.

Service and repository tests run against a throwaway SQLite file per test
(sqlite+aiosqlite) with tables created from ORM metadata. HTTP tests use
preschool.main.create_app() over ASGITransport with the same backend.
"""

from collections.abc import AsyncIterator
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from preschool.application.dtos import ApprovalResult, UserProfileResult
from preschool.application.services import (
    ExternalCallPolicy,
    InvitationService,
    MemberAdminService,
    TenantApprovalService,
)
from preschool.application.use_cases import WorkflowApi
from preschool.core.config import get_settings
from preschool.domain.enums import UserRole
from preschool.infrastructure.identity.sql_directory import SqlIdentityDirectory
from preschool.infrastructure.persistence import database
from preschool.infrastructure.persistence.database import (
    build_engine,
    build_session_factory,
    create_tables,
)
from preschool.infrastructure.persistence.repositories import SqlRecordStore
from preschool.infrastructure.security.password import PasswordHasher

SUPERADMIN_PASSWORD = "RootPassword1!"


class RecordingNotifier:
    """INotifier that keeps every message in memory."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, dict[str, Any]]] = []

    async def send(
        self, to_email: str, template_id: str, template_data: dict[str, Any]
    ) -> None:
        self.sent.append((to_email, template_id, dict(template_data)))

    def of(self, template_id: str) -> list[tuple[str, str, dict[str, Any]]]:
        return [m for m in self.sent if m[1] == template_id]


@pytest.fixture
async def engine(tmp_path) -> AsyncIterator[AsyncEngine]:
    eng = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'records.db'}")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest.fixture
def store(session_factory: async_sessionmaker[AsyncSession]) -> SqlRecordStore:
    return SqlRecordStore(session_factory)


@pytest.fixture
def directory(session_factory: async_sessionmaker[AsyncSession]) -> SqlIdentityDirectory:
    return SqlIdentityDirectory(session_factory, hasher=PasswordHasher(rounds=4))


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def policy() -> ExternalCallPolicy:
    return ExternalCallPolicy(timeout_seconds=5.0, max_attempts=3, backoff_seconds=0)


@pytest.fixture
def approvals(
    store: SqlRecordStore,
    directory: SqlIdentityDirectory,
    notifier: RecordingNotifier,
    policy: ExternalCallPolicy,
) -> TenantApprovalService:
    return TenantApprovalService(store, directory, notifier, policy=policy)


@pytest.fixture
def invitations(
    store: SqlRecordStore,
    directory: SqlIdentityDirectory,
    notifier: RecordingNotifier,
    policy: ExternalCallPolicy,
) -> InvitationService:
    return InvitationService(store, directory, notifier, policy=policy)


@pytest.fixture
def members(
    store: SqlRecordStore,
    directory: SqlIdentityDirectory,
    notifier: RecordingNotifier,
    policy: ExternalCallPolicy,
) -> MemberAdminService:
    return MemberAdminService(store, directory, notifier, policy=policy)


@pytest.fixture
def workflow(
    store: SqlRecordStore,
    approvals: TenantApprovalService,
    invitations: InvitationService,
    members: MemberAdminService,
    policy: ExternalCallPolicy,
) -> WorkflowApi:
    return WorkflowApi(store, approvals, invitations, members, policy=policy)


async def make_superadmin(
    store: SqlRecordStore, directory: SqlIdentityDirectory, email: str = "root@platform.test"
) -> UserProfileResult:
    identity = await directory.create_account(email, SUPERADMIN_PASSWORD, True)
    return await store.profiles.create_profile(
        identity_id=identity.id,
        email=identity.email,
        name="Platform Admin",
        role=UserRole.SUPERADMIN,
        tenant_id=None,
    )


@pytest.fixture
async def superadmin(
    store: SqlRecordStore, directory: SqlIdentityDirectory
) -> UserProfileResult:
    return await make_superadmin(store, directory)


@pytest.fixture
async def approved_school(
    workflow: WorkflowApi, superadmin: UserProfileResult
) -> ApprovalResult:
    """Sunshine Prep, approved, with its principal provisioned."""
    request_id = await workflow.request_onboarding(
        tenant_name="Sunshine Prep",
        admin_name="Ada Obi",
        admin_email="ada@sunshine.test",
    )
    return await workflow.approve_onboarding(superadmin.id, request_id)


@pytest.fixture
async def principal(
    store: SqlRecordStore, approved_school: ApprovalResult
) -> UserProfileResult:
    profile = await store.profiles.get_principal_for_tenant(approved_school.tenant_id)
    assert profile is not None
    return profile


class ApiEnv:
    """Handles onto the record store and directory behind the HTTP app."""

    def __init__(
        self,
        store: SqlRecordStore,
        directory: SqlIdentityDirectory,
        notifier: RecordingNotifier,
    ) -> None:
        self.store = store
        self.directory = directory
        self.notifier = notifier


@pytest.fixture
async def api_env(tmp_path, monkeypatch) -> AsyncIterator[ApiEnv]:
    """Point the app's lazily created engine at a fresh SQLite file."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")
    monkeypatch.setenv("EXTERNAL_CALL_BACKOFF_SECONDS", "0")
    get_settings.cache_clear()
    await database.dispose_engine()
    await database.create_tables()
    factory = database.get_session_factory()
    yield ApiEnv(
        SqlRecordStore(factory),
        SqlIdentityDirectory(factory, hasher=PasswordHasher(rounds=4)),
        RecordingNotifier(),
    )
    await database.dispose_engine()
    get_settings.cache_clear()


@pytest.fixture
async def client(api_env: ApiEnv) -> AsyncIterator[AsyncClient]:
    """Async HTTP client against a freshly built app (ASGI). Rate limits are off."""
    from preschool.api.v1.dependencies import get_identity_directory, get_notifier
    from preschool.core.limiter import limiter
    from preschool.main import create_app

    app = create_app()
    app.dependency_overrides[get_identity_directory] = lambda: api_env.directory
    app.dependency_overrides[get_notifier] = lambda: api_env.notifier
    limiter.enabled = False
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    limiter.enabled = True


_SPAN_EXPORTER: InMemorySpanExporter | None = None


@pytest.fixture
def spans() -> InMemorySpanExporter:
    """In-memory exporter behind the process-wide tracer provider, cleared per test."""
    global _SPAN_EXPORTER
    if _SPAN_EXPORTER is None:
        _SPAN_EXPORTER = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(_SPAN_EXPORTER))
        trace.set_tracer_provider(provider)
    _SPAN_EXPORTER.clear()
    return _SPAN_EXPORTER
