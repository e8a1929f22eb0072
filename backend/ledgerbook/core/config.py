"""Application configuration loaded from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings:
    # SQLite DB URL
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'ledgerbook.db'}"
    )

    # API server
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # Default GST rate as a fraction (0.18 = 18%), used when a document omits one
    GST_RATE: float = float(os.getenv("GST_RATE", "0.18"))

    # Organisation shown on statements and exports
    ORG_NAME: str = os.getenv("ORG_NAME", "Ledgerbook")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", "logs/app.log")
    # Every posted ledger entry, one line each
    AUDIT_LOG_FILE: str = os.getenv("AUDIT_LOG_FILE", "logs/ledger-audit.log")

    # CORS
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
        ).split(",")
    ]

    # Directory where invoice document snapshots are published
    EXPORT_DIR: Path = Path(os.getenv("EXPORT_DIR", str(BASE_DIR / "data" / "exports")))

    def __init__(self):
        # Ensure directories exist
        self.EXPORT_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
