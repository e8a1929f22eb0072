"""Loguru sinks: console, application log and the ledger audit trail."""
import sys
from loguru import logger
from ledgerbook.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# One line per posted ledger entry
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[account]} | {message}"


def is_audit(record) -> bool:
    return bool(record["extra"].get("audit"))


def audit_logger(account: str):
    """Logger whose records land in the audit sink, tagged with ``account``."""
    return logger.bind(audit=True, account=account)


def setup_logging() -> None:
    """Console and rotating app log for everything; ledger postings also go to the audit file."""
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL, format=CONSOLE_FORMAT, colorize=True)
    logger.add(
        settings.LOG_FILE,
        level=settings.LOG_LEVEL,
        rotation="10 MB",
        retention="30 days",
        compression="zip",
    )
    # Always INFO, whatever LOG_LEVEL is
    logger.add(
        settings.AUDIT_LOG_FILE,
        level="INFO",
        format=AUDIT_FORMAT,
        filter=is_audit,
        rotation="10 MB",
        retention="365 days",
        compression="zip",
    )
