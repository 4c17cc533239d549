"""
Pytest fixtures for the purchasing workflow test suite.

Provides:
- A session-scoped database engine with tables created once
- Per-test sessions rolled back at teardown
- A seeded company (roles, users, approval levels, status messages)
- Structured log capture

Environment Variables:
- PURCHASING_TEST_DATABASE_URL: database for the suite.  Defaults to an
  in-memory SQLite database.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from io import StringIO
from typing import Generator
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from purchasing_config.schema import DatabaseSettings, PurchasingSettings
from purchasing_kernel.db.engine import (
    create_tables,
    drop_tables,
    init_engine_from_url,
    reset_engine,
)
from purchasing_kernel.domain.clock import DeterministicClock
from purchasing_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from purchasing_kernel.models.directory import RoleModel, UserModel
from purchasing_kernel.models.inventory import StockLotModel
from purchasing_kernel.models.workflow import StatusMessageModel, WorkflowConfigModel

DEFAULT_TEST_DATABASE_URL = "sqlite://"

PROCESS_NAME = "Purchase Order"
STATUS_CATEGORY = "PURCHASE_ORDER"
SUPER_ADMIN_ROLE = "Super Admin"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture purchasing_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, orchestrator):
            orchestrator.approve(...)
            logs = captured_logs()
            assert any(r["message"] == "approval_recorded" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("purchasing_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Session-scoped DB infrastructure
# =============================================================================


def get_database_url() -> str:
    return os.environ.get("PURCHASING_TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)


@pytest.fixture(scope="session")
def db_engine():
    """Single engine for the entire test session."""
    eng = init_engine_from_url(get_database_url(), echo=False)
    yield eng
    reset_engine()


@pytest.fixture(scope="session")
def db_tables(db_engine):
    """Create all tables once per session, drop once at end."""
    drop_tables()
    create_tables()
    yield
    drop_tables()


@pytest.fixture(scope="function")
def session(db_tables, db_engine) -> Generator[Session, None, None]:
    """Provide a database session for testing.

    Opens a dedicated connection with an outer transaction and a session
    that joins it with ``create_savepoint``.  At teardown the outer
    transaction is rolled back, undoing every write made by the test.
    """
    conn = db_engine.connect()
    trans = conn.begin()
    sess = Session(bind=conn, join_transaction_mode="create_savepoint", expire_on_commit=False)
    yield sess
    try:
        sess.close()
    finally:
        try:
            trans.rollback()
        finally:
            conn.close()


# Clock and settings fixtures


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock()


@pytest.fixture
def settings() -> PurchasingSettings:
    """Default settings pointed at the test database."""
    return PurchasingSettings(database=DatabaseSettings(url=get_database_url()))


# =============================================================================
# Seeded company
# =============================================================================


@dataclass
class SeededCompany:
    """Ids of everything seeded for one company."""

    company_id: UUID
    roles: dict[str, UUID] = field(default_factory=dict)
    users: dict[str, UUID] = field(default_factory=dict)
    levels: list[UUID] = field(default_factory=list)
    statuses: dict[str, UUID] = field(default_factory=dict)

    def level_config(self, level: int) -> UUID:
        return self.levels[level - 1]

    def role_for_level(self, level: int) -> UUID:
        return self.roles[f"Level {level} Approver"]


def _add_role(session, company, clock, name) -> UUID:
    role = RoleModel(id=uuid4(), company_id=company.company_id, role_name=name,
                     is_active=True, created_at=clock.tick())
    session.add(role)
    company.roles[name] = role.id
    return role.id


def _add_user(session, company, clock, key, role_id, first, last, is_active=True) -> UUID:
    user = UserModel(
        id=uuid4(),
        company_id=company.company_id,
        first_name=first,
        last_name=last,
        email=f"{key}@example.com",
        role_id=role_id,
        is_active=is_active,
        created_at=clock.tick(),
    )
    session.add(user)
    company.users[key] = user.id
    return user.id


def seed_company(
    session: Session,
    clock: DeterministicClock,
    level_count: int = 3,
    override_enabled: bool = True,
    per_level_statuses: bool = False,
) -> SeededCompany:
    """Seed one company with a ``level_count``-level purchase order workflow.

    Users: ``creator`` (Buyer), ``admin`` (Super Admin), and for each level
    N ``approverN`` and ``peerN`` holding the Level N Approver role, plus
    an inactive ``retiredN`` in that role.
    """
    company = SeededCompany(company_id=uuid4())

    buyer = _add_role(session, company, clock, "Buyer")
    admin_role = _add_role(session, company, clock, SUPER_ADMIN_ROLE)
    _add_user(session, company, clock, "creator", buyer, "Casey", "Creator")
    _add_user(session, company, clock, "admin", admin_role, "Avery", "Admin")

    for level in range(1, level_count + 1):
        role_id = _add_role(session, company, clock, f"Level {level} Approver")
        _add_user(session, company, clock, f"approver{level}", role_id, "Approver", str(level))
        _add_user(session, company, clock, f"peer{level}", role_id, "Peer", str(level))
        _add_user(session, company, clock, f"retired{level}", role_id, "Retired", str(level),
                  is_active=False)
        config = WorkflowConfigModel(
            id=uuid4(),
            company_id=company.company_id,
            process_name=PROCESS_NAME,
            level=level,
            role_id=role_id,
            override_enabled=override_enabled,
            is_active=True,
            created_at=clock.tick(),
        )
        session.add(config)
        company.levels.append(config.id)

    messages = [
        ("created", "ORDER_CREATED", "Order Created"),
        ("completed", "APPROVER_COMPLETED", "Approved"),
    ]
    if per_level_statuses:
        messages += [
            (f"pending{level}", "APPROVAL_PENDING", f"Pending Level {level} Approval")
            for level in range(1, level_count + 1)
        ]
    else:
        messages.append(("pending", "APPROVAL_PENDING", "Pending Level {@} Approval"))
    for key, sub_category, value in messages:
        row = StatusMessageModel(
            id=uuid4(),
            company_id=company.company_id,
            category_id=STATUS_CATEGORY,
            sub_category_id=sub_category,
            value=value,
            created_at=clock.tick(),
        )
        session.add(row)
        company.statuses[key] = row.id

    session.flush()
    return company


@pytest.fixture
def company(session, deterministic_clock) -> SeededCompany:
    """A company with a three-level workflow, override enabled."""
    return seed_company(session, deterministic_clock)


@pytest.fixture
def make_company(session, deterministic_clock):
    """Factory seeding further companies; takes seed_company keyword options."""

    def _make(**options) -> SeededCompany:
        return seed_company(session, deterministic_clock, **options)

    return _make


@pytest.fixture
def create_lots(session, deterministic_clock):
    """Factory inserting stock lots oldest first; returns their ids."""

    def _create(company_id: UUID, item_id: UUID, store_id: UUID, quantities) -> list[UUID]:
        ids = []
        for qty in quantities:
            lot = StockLotModel(
                id=uuid4(),
                company_id=company_id,
                item_id=item_id,
                store_id=store_id,
                quantity=qty,
                created_at=deterministic_clock.tick(),
            )
            session.add(lot)
            ids.append(lot.id)
        session.flush()
        return ids

    return _create
