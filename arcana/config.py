import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file at the repository root
load_dotenv(Path(__file__).resolve().parents[1] / ".env")

DEFAULT_VARIANT = os.getenv("ARCANA_DEFAULT_VARIANT", "camoin-jodorowsky")
DEFAULT_SPREAD = os.getenv("ARCANA_DEFAULT_SPREAD", "linear-three")
HISTORY_LIMIT = int(os.getenv("ARCANA_HISTORY_LIMIT", "7"))
LOG_LEVEL = os.getenv("ARCANA_LOG_LEVEL", "INFO").upper()
MAX_SESSIONS = int(os.getenv("ARCANA_MAX_SESSIONS", "1000"))
