"""
speakcoach — Configuration
All environment variables and constants. Single source of truth.
No other file reads os.environ directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# ─── Paths ───────────────────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# Load .env file if present (real environment wins)
load_dotenv(BASE_DIR / ".env", override=False)

# ─── Gemini API ──────────────────────────────────────────────────────────────
GEMINI_BASE_URL = os.getenv(
    "GEMINI_BASE_URL",
    "https://generativelanguage.googleapis.com/v1beta/models",
).rstrip("/")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-pro")
# Optional. When set, the service is initialized at startup; otherwise the UI
# must call /initialize with a key first.
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")

# ─── CORS ────────────────────────────────────────────────────────────────────
# Tauri dev server
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:1420").split(",")

# ─── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
