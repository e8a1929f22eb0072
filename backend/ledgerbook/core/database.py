"""SQLModel database engine and session management."""
from sqlmodel import SQLModel, create_engine, Session
from ledgerbook.core.config import settings

# Import models so SQLModel.metadata knows about all tables
import ledgerbook.models.party  # noqa: F401
import ledgerbook.models.ledger  # noqa: F401
import ledgerbook.models.billing  # noqa: F401
import ledgerbook.models.payroll  # noqa: F401
import ledgerbook.models.counter  # noqa: F401
import ledgerbook.models.meeting  # noqa: F401

# check_same_thread=False: FastAPI serves sync routes from a thread pool
engine = create_engine(
    settings.DATABASE_URL,
    connect_args={"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {},
    echo=False,
)


def create_db_and_tables() -> None:
    """Create all tables defined in SQLModel models."""
    SQLModel.metadata.create_all(engine)


def get_session():
    """FastAPI dependency: yields a SQLModel session."""
    with Session(engine) as session:
        yield session
