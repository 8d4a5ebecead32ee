import sys
from pathlib import Path

import pytest
from starlette.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from flat_ledger_api.app.core.config import settings  # noqa: E402  (import after sys.path tweak)
from flat_ledger_api.app.core.db import init_db  # noqa: E402
from flat_ledger_api.app.core.ledger import MemoryLedger  # noqa: E402
from flat_ledger_api.app.main import app as real_app  # noqa: E402


@pytest.fixture
def ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest.fixture(scope="function")
def temp_db(tmp_path, monkeypatch):
    """Fresh SQLite world state per test."""
    db_path = tmp_path / "ledger.db"
    monkeypatch.setattr(settings, "database_url", str(db_path))
    init_db()
    yield db_path


@pytest.fixture(scope="function")
def client(temp_db):
    with TestClient(real_app) as c:
        yield c
