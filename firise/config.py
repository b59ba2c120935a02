import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Storage ---
# "memory" keeps everything in process; "sql" persists through SQLAlchemy.
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory").strip().lower()

# Default to local SQLite when the sql backend is selected
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/firise.db")

# Fix for common SQLAlchemy issues with postgres:// vs postgresql://
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

SEED_DEMO_DATA = _flag("SEED_DEMO_DATA", "true")

# --- Demo user ---
# There is no login; every request acts on behalf of this user.
DEMO_USER_ID = int(os.getenv("DEMO_USER_ID", "1"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# --- HTTP ---
API_PREFIX = os.getenv("API_PREFIX", "/api").rstrip("/")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
