"""
Shared pytest fixtures.

Settings are read from the environment at import time, so the temp paths are
set here before anything imports ledgerbook. Service tests get a fresh
in-memory database per test; test_api.py drives the app over a temp file DB.
"""
import os
import sys
import tempfile

# Ensure ledgerbook package is importable when running pytest from project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

_tmp_dir = tempfile.mkdtemp(prefix="ledgerbook-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{os.path.join(_tmp_dir, 'api.db')}")
os.environ.setdefault("EXPORT_DIR", os.path.join(_tmp_dir, "exports"))
os.environ.setdefault("LOG_FILE", os.path.join(_tmp_dir, "app.log"))
os.environ.setdefault("AUDIT_LOG_FILE", os.path.join(_tmp_dir, "ledger-audit.log"))
os.environ.setdefault("GST_RATE", "0.18")

import pytest  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

import ledgerbook.models  # noqa: E402,F401 – registers every table
from ledgerbook.services import parties  # noqa: E402


@pytest.fixture
def session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as s:
        yield s
    engine.dispose()


@pytest.fixture
def make_client(session):
    def _make(name="Acme Corp", **extra):
        return parties.create_client(session, {"name": name, **extra})
    return _make


@pytest.fixture
def make_staff(session):
    def _make(name="Ravi", **extra):
        return parties.create_staff(session, {"name": name, **extra})
    return _make
