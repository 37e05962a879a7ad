# quiz_gateway/config.py
import os
from typing import List

# Read variables from environment, defaults are for local development
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
GEMINI_MODEL_NAME = os.environ.get("GEMINI_MODEL_NAME", "gemini-2.5-flash")
GEMINI_API_URL = os.environ.get("GEMINI_API_URL", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT = float(os.environ.get("GEMINI_TIMEOUT", "60"))
GEMINI_TEMPERATURE = float(os.environ.get("GEMINI_TEMPERATURE", "0.7"))

FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:5173")
ALLOWED_ORIGINS = os.environ.get("ALLOWED_ORIGINS", "")

PORT = int(os.environ.get("PORT", "3001"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
ALLOWED_MIME_TYPES = (
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
)
IMAGE_MIME_TYPES = tuple(m for m in ALLOWED_MIME_TYPES if m.startswith("image/"))

DEFAULT_DIFFICULTY = "Medium"
DEFAULT_QUESTION_COUNT = 10


def cors_origins() -> List[str]:
    """Origins allowed for browser callers. ALLOWED_ORIGINS (comma separated) wins when set."""
    if ALLOWED_ORIGINS.strip():
        return [o.strip() for o in ALLOWED_ORIGINS.split(",") if o.strip()]
    origins = [FRONTEND_URL, "http://127.0.0.1:5173", "http://localhost:5173"]
    # keep order, drop duplicates
    return list(dict.fromkeys(origins))


def api_key_fingerprint(key: str) -> str:
    """Return a safe fingerprint of an API key for logging (never the full key)."""
    if not isinstance(key, str) or not key:
        return "<empty>"
    tail = key[-4:] if len(key) >= 4 else key
    return f"len={len(key)} tail=***{tail}"
