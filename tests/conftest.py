"""
Test configuration and fixtures for the A11y Audit AI API.

DATABASE_URL must point at a throwaway database before `app` is imported,
because settings are read at import time.
"""

import os
import tempfile
import uuid
from datetime import datetime, timedelta, timezone
from typing import Generator

test_db_path = tempfile.mktemp(suffix=".db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["OPENROUTER_API_KEY"] = ""
os.environ["BROWSER_REMOTE_URL"] = ""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.features.auth.utils.security import create_access_token
from app.features.reports.services.store import ReportStore
from app.platform.db.session import Database


class TickingClock:
    """Deterministic clock: every call is one minute after the previous one."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(minutes=1)
        return self.current


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'reports.db'}")
    await db.connect()
    await db.create_tables()
    yield db
    await db.close()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def store(database, clock) -> ReportStore:
    return ReportStore(database, clock=clock)


def _make_violation(rule_id: str = "image-alt", impact="critical", node_count: int = 1, tags=None) -> dict:
    return {
        "id": rule_id,
        "impact": impact,
        "description": f"Ensures {rule_id} is satisfied",
        "help": f"Fix {rule_id}",
        "helpUrl": f"https://dequeuniversity.com/rules/axe/4.9/{rule_id}",
        "tags": tags if tags is not None else ["cat.text-alternatives", "wcag2a", "wcag111"],
        "nodes": [
            {
                "html": f'<img src="/img/{i}.png">',
                "target": [f"img:nth-child({i + 1})"],
                "failureSummary": "Fix any of the following: Element does not have an alt attribute",
            }
            for i in range(node_count)
        ],
    }


def _make_axe_results(violations=None, passes: int = 3, incomplete: int = 1, inapplicable: int = 2) -> dict:
    return {
        "violations": violations if violations is not None else [],
        "passes": [{"id": f"pass-{i}", "nodes": []} for i in range(passes)],
        "incomplete": [{"id": f"incomplete-{i}", "nodes": []} for i in range(incomplete)],
        "inapplicable": [{"id": f"inapplicable-{i}", "nodes": []} for i in range(inapplicable)],
    }


@pytest.fixture
def make_violation():
    return _make_violation


@pytest.fixture
def make_axe_results():
    return _make_axe_results


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    A TestClient per test; entering it runs the lifespan, which connects the
    database and creates tables.
    """
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> str:
    # Fresh owner per test keeps tests isolated on the shared database
    return f"user-{uuid.uuid4()}"


@pytest.fixture
def auth_headers(user_id) -> dict:
    token = create_access_token({"sub": user_id})
    return {"Authorization": f"Bearer {token}"}
