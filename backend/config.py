"""BoroughWatch Backend: Configuration & Constants"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from project root (one level up from backend/)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path)

_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

# ── Upstream (data.police.uk) ──
POLICE_API_BASE = os.environ.get("POLICE_API_BASE", "https://data.police.uk/api").rstrip("/")
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "15"))
DEFAULT_CATEGORY = os.environ.get("DEFAULT_CATEGORY", "all-crime")

# ── Borough topology ──
TOPOLOGY_PATH = os.environ.get("TOPOLOGY_PATH", str(_DATA_DIR / "london-topojson.json"))
TOPOLOGY_OBJECT = os.environ.get("TOPOLOGY_OBJECT", "london_geo")
MAX_POLY_POINTS = int(os.environ.get("MAX_POLY_POINTS", "35"))  # keeps poly= well under 4KB

# ── Persistent store (empty path disables it) ──
CRIME_DB_PATH = os.environ.get("CRIME_DB_PATH", "")

# ── Cache lifetimes (seconds) ──
MEMORY_CACHE_TTL = int(os.environ.get("MEMORY_CACHE_TTL", "900"))   # 15 min
STORE_TTL = int(os.environ.get("STORE_TTL", "21600"))               # 6 hours, "latest" rows only
MEMORY_CACHE_SIZE = int(os.environ.get("MEMORY_CACHE_SIZE", "2000"))

DEFAULT_TREND_MONTHS = 12
