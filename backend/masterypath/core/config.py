import os
from dotenv import load_dotenv

# Load .env from the backend directory
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", ".env"))

SECRET_KEY: str = os.getenv("SECRET_KEY", "mastery-path-dev-secret-change-in-prod")
ALGORITHM: str = "HS256"

# Database — stored in backend/data/
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.abspath(os.path.join(BASE_DIR, "..", ".."))

DATABASE_PATH: str = os.getenv(
    "DATABASE_PATH",
    os.path.join(BACKEND_DIR, "data", "mastery.db"),
)
MIGRATIONS_DIR: str = os.path.join(BACKEND_DIR, "migrations")

# Optional JSON seed for the prerequisite graph, ingested on startup
CONCEPT_GRAPH_PATH: str = os.getenv("CONCEPT_GRAPH_PATH", "")

# Canonical mastery gate, fractional scale [0, 1]. Used by every call site.
MASTERY_THRESHOLD: float = float(os.getenv("MASTERY_THRESHOLD", "0.75"))
SCORE_MIN: float = 0.0
SCORE_MAX: float = 1.0

if not (SCORE_MIN < MASTERY_THRESHOLD <= SCORE_MAX):
    raise ValueError(
        f"MASTERY_THRESHOLD must be in ({SCORE_MIN}, {SCORE_MAX}], got {MASTERY_THRESHOLD}"
    )

# Store boundary retry policy for transient SQLite lock errors
STORE_RETRY_ATTEMPTS: int = int(os.getenv("STORE_RETRY_ATTEMPTS", "5"))
STORE_RETRY_BACKOFF_SECONDS: float = float(os.getenv("STORE_RETRY_BACKOFF_SECONDS", "0.05"))
SQLITE_BUSY_TIMEOUT_SECONDS: float = float(os.getenv("SQLITE_BUSY_TIMEOUT_SECONDS", "5"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")  # text | json
