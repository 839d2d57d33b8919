"""Environment configuration for the Plates answer engine."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (parent of plates_search/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
SEARCH_ENGINE_ID = os.getenv("SEARCH_ENGINE_ID", "")
GOOGLE_SEARCH_URL = os.getenv("GOOGLE_SEARCH_URL", "https://www.googleapis.com/customsearch/v1")
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
GEMINI_API_URL = os.getenv(
    "GEMINI_API_URL",
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-2.0-flash:generateContent",
)
IS_DEV = os.getenv("NODE_ENV", "") == "development" or os.getenv("IS_DEV", "") == "1"
SEARCH_TIMEOUT = float(os.getenv("SEARCH_TIMEOUT", "15"))
GENERATION_TIMEOUT = float(os.getenv("GENERATION_TIMEOUT", "60"))
# Empty = service endpoints are open
PLATES_API_KEY = os.getenv("PLATES_API_KEY", "")
PLATES_BACKEND_PORT = int(os.getenv("PLATES_BACKEND_PORT", "8093"))

print(
    f"[CONFIG] gemini_url={GEMINI_API_URL} search_url={GOOGLE_SEARCH_URL} dev={IS_DEV} "
    f"search_timeout={SEARCH_TIMEOUT} generation_timeout={GENERATION_TIMEOUT} "
    f"backend_port={PLATES_BACKEND_PORT}"
)
print(
    f"[CONFIG] api_keys: gemini={'SET' if GEMINI_API_KEY else 'MISSING'} "
    f"google={'SET' if GOOGLE_API_KEY else 'MISSING'} "
    f"engine_id={'SET' if SEARCH_ENGINE_ID else 'MISSING'}"
)
