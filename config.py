"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "invoice_me")
DB_USER: str = os.getenv("DB_USER", "invoice_me")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "5"))

# ── Scheduling ────────────────────────────────────────────
# Shared secret expected as "Authorization: Bearer <secret>" on the cron endpoint.
CRON_SECRET: str = os.getenv("CRON_SECRET", "")
# When true an external cron hits the HTTP trigger and the in-process timer stays off.
EXTERNAL_CRON: bool = _env_bool("EXTERNAL_CRON", False)
SCHEDULER_INTERVAL_SECONDS: int = int(os.getenv("SCHEDULER_INTERVAL_SECONDS", "3600"))
SEND_PACING_SECONDS: float = float(os.getenv("SEND_PACING_SECONDS", "2"))
REFERENCE_TIMEZONE: str = os.getenv("REFERENCE_TIMEZONE", "America/Bogota")

# ── Email (Resend) ────────────────────────────────────────
RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
RESEND_API_URL: str = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
EMAIL_FROM: str = os.getenv("EMAIL_FROM", "onboarding@resend.dev")
EMAIL_TIMEOUT_SECONDS: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "15"))
SIMULATED_SEND_DELAY_SECONDS: float = float(os.getenv("SIMULATED_SEND_DELAY_SECONDS", "1"))

# ── Invoice issuer (printed on every PDF) ─────────────────
ISSUER_NAME: str = os.getenv("ISSUER_NAME", "Invoice Me")
ISSUER_FULL_NAME: str = os.getenv("ISSUER_FULL_NAME", "")
ISSUER_ID: str = os.getenv("ISSUER_ID", "")
ISSUER_ADDRESS: str = os.getenv("ISSUER_ADDRESS", "")
ISSUER_CITY: str = os.getenv("ISSUER_CITY", "Cali, Colombia")

# ── Currency ──────────────────────────────────────────────
CURRENCY: str = "COP"

# ── HTTP API ──────────────────────────────────────────────
API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
API_PORT: int = int(os.getenv("API_PORT", "8000"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Telegram operator console ─────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── Gemini AI ─────────────────────────────────────────────
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

# ── Security ──────────────────────────────────────────────
_raw_ids = os.getenv("ALLOWED_USER_IDS", "")
ALLOWED_USER_IDS: list[int] = (
    [int(uid.strip()) for uid in _raw_ids.split(",") if uid.strip()]
    if _raw_ids
    else []
)

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))
