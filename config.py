"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants.
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _id_list(raw: str) -> list[int]:
    """Parse a comma separated list of Telegram ids."""
    return [int(uid.strip()) for uid in raw.split(",") if uid.strip()] if raw else []


# ── Telegram ──────────────────────────────────────────────
TELEGRAM_BOT_TOKEN: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

# ── PostgreSQL ────────────────────────────────────────────
DB_HOST: str = os.getenv("DB_HOST", "localhost")
DB_PORT: int = int(os.getenv("DB_PORT", "5432"))
DB_NAME: str = os.getenv("DB_NAME", "finance_ledger")
DB_USER: str = os.getenv("DB_USER", "ledger_user")
DB_PASS: str = os.getenv("DB_PASS", "")

DATABASE_URL: str = os.getenv(
    "DATABASE_URL",
    f"postgresql://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)

# ── Security ──────────────────────────────────────────────
ALLOWED_USER_IDS: list[int] = _id_list(os.getenv("ALLOWED_USER_IDS", ""))
ADMIN_USER_IDS: list[int] = _id_list(os.getenv("ADMIN_USER_IDS", ""))

# ── Rate Limiting ─────────────────────────────────────────
RATE_LIMIT_MESSAGES: int = int(os.getenv("RATE_LIMIT_MESSAGES", "30"))
RATE_LIMIT_WINDOW_SECONDS: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

# ── Currency ──────────────────────────────────────────────
DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "EUR").upper()
EXCHANGE_RATE_API_KEY: str = os.getenv("EXCHANGE_RATE_API_KEY", "")
EXCHANGE_RATE_API_URL: str = os.getenv(
    "EXCHANGE_RATE_API_URL", "https://v6.exchangerate-api.com/v6"
)
EXCHANGE_RATE_TIMEOUT: float = float(os.getenv("EXCHANGE_RATE_TIMEOUT", "10"))

# ── Recurring transactions ────────────────────────────────
# Weekday follows date.weekday(): Monday = 0 ... Sunday = 6
RECURRING_RUN_HOUR: int = int(os.getenv("RECURRING_RUN_HOUR", "0"))
RECURRING_WEEKDAY: int = int(os.getenv("RECURRING_WEEKDAY", "6"))
RECURRING_MONTH_DAY: int = int(os.getenv("RECURRING_MONTH_DAY", "1"))

# ── Budgets ───────────────────────────────────────────────
BUDGET_WARNING_PERCENT: float = float(os.getenv("BUDGET_WARNING_PERCENT", "80"))

# ── Logging ───────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILE: str = os.getenv("LOG_FILE", "")
LOG_MAX_BYTES: int = int(os.getenv("LOG_MAX_BYTES", str(5 * 1024 * 1024)))
LOG_BACKUP_COUNT: int = int(os.getenv("LOG_BACKUP_COUNT", "3"))
