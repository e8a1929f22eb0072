"""Logging sinks: ledger postings land in the audit file, other records do not."""
import sys

import pytest
from loguru import logger

from ledgerbook.core import logging as app_logging
from ledgerbook.core.config import settings
from ledgerbook.models.ledger import AccountKind, EntryType, RefType
from ledgerbook.services import ledger


@pytest.fixture
def log_files(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "LOG_FILE", str(tmp_path / "app.log"))
    monkeypatch.setattr(settings, "AUDIT_LOG_FILE", str(tmp_path / "audit.log"))
    app_logging.setup_logging()
    yield tmp_path
    logger.remove()
    logger.add(sys.stderr)


def test_posting_is_written_to_audit_file(session, make_client, log_files):
    c = make_client()
    with ledger.posting(session, AccountKind.CLIENT, c.id):
        ledger.append(session, AccountKind.CLIENT, c.id, EntryType.DEBIT, 1180, RefType.INVOICE, ref_id=42)
    logger.info("unrelated application message")
    logger.remove()

    audit = (log_files / "audit.log").read_text().splitlines()
    assert len(audit) == 1
    assert f"CLIENT#{c.id}" in audit[0]
    assert "seq=1 DEBIT 1180.00 INVOICE ref=42 balance=1180.00" in audit[0]

    app_log = (log_files / "app.log").read_text()
    assert "unrelated application message" in app_log
    assert "INVOICE ref=42" in app_log


def test_audit_filter_only_accepts_bound_records():
    assert app_logging.is_audit({"extra": {"audit": True, "account": "STAFF#1"}})
    assert not app_logging.is_audit({"extra": {}})
