"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import get_connection, release_connection
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- Equality operators in GiST, needed by the budget window exclusion
CREATE EXTENSION IF NOT EXISTS btree_gist;

-- Users: Telegram identities, their role and display currency
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    telegram_id     BIGINT UNIQUE NOT NULL,
    first_name      VARCHAR(100),
    role            VARCHAR(10) NOT NULL DEFAULT 'user' CHECK (role IN ('user', 'admin')),
    currency        VARCHAR(3) NOT NULL DEFAULT 'EUR',
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Accounts: the cached running balance lives in `amount`
CREATE TABLE IF NOT EXISTS accounts (
    id              SERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    grp             VARCHAR(10) NOT NULL CHECK (grp IN ('cash', 'bank', 'card', 'savings')),
    name            VARCHAR(50) NOT NULL,
    amount          NUMERIC(14,2) NOT NULL DEFAULT 0,
    base_currency   VARCHAR(3) NOT NULL,
    description     VARCHAR(500),
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Categories: typed labels, unique per (user, type, name)
CREATE TABLE IF NOT EXISTS categories (
    id              SERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    type            VARCHAR(10) NOT NULL CHECK (type IN ('income', 'expense')),
    name            VARCHAR(50) NOT NULL,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    UNIQUE(user_id, type, name)
);

-- Ledger entries: income and expense records, one signed effect each
CREATE TABLE IF NOT EXISTS ledger_entries (
    id                  SERIAL PRIMARY KEY,
    user_id             BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    type                VARCHAR(10) NOT NULL CHECK (type IN ('income', 'expense')),
    date                DATE NOT NULL DEFAULT CURRENT_DATE,
    amount              NUMERIC(14,2) NOT NULL CHECK (amount >= 0.01),
    category_id         INT NOT NULL REFERENCES categories(id),
    account_id          INT NOT NULL REFERENCES accounts(id) ON DELETE CASCADE,
    label               VARCHAR(100),
    description         VARCHAR(500),
    is_recurring        BOOLEAN NOT NULL DEFAULT FALSE,
    recurring_pattern   VARCHAR(10) CHECK (recurring_pattern IN ('daily', 'weekly', 'monthly')),
    end_date            DATE,
    source_id           INT REFERENCES ledger_entries(id) ON DELETE SET NULL,
    last_generated_on   DATE,
    created_at          TIMESTAMPTZ DEFAULT NOW()
);

-- Transfers: immutable two-account moves
CREATE TABLE IF NOT EXISTS transfers (
    id                  SERIAL PRIMARY KEY,
    user_id             BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    date                DATE NOT NULL DEFAULT CURRENT_DATE,
    amount              NUMERIC(14,2) NOT NULL CHECK (amount >= 0.01),
    from_account_id     INT NOT NULL REFERENCES accounts(id) ON DELETE NO ACTION,
    to_account_id       INT NOT NULL REFERENCES accounts(id) ON DELETE NO ACTION,
    description         VARCHAR(500),
    created_at          TIMESTAMPTZ DEFAULT NOW(),
    CHECK (from_account_id <> to_account_id)
);

-- Budgets: spending caps per expense category over an inclusive window
CREATE TABLE IF NOT EXISTS budgets (
    id              SERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    category_id     INT NOT NULL REFERENCES categories(id),
    amount          NUMERIC(14,2) NOT NULL CHECK (amount >= 0.01),
    date_from       DATE NOT NULL,
    date_to         DATE NOT NULL,
    description     VARCHAR(500),
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    CHECK (date_from <= date_to),
    EXCLUDE USING gist (
        user_id WITH =,
        category_id WITH =,
        daterange(date_from, date_to, '[]') WITH &&
    )
);

-- Savings goals: targets tracked independently of account balances
CREATE TABLE IF NOT EXISTS savings_goals (
    id              SERIAL PRIMARY KEY,
    user_id         BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    name            VARCHAR(50) NOT NULL,
    amount          NUMERIC(14,2) NOT NULL CHECK (amount >= 0.01),
    current_amount  NUMERIC(14,2) NOT NULL DEFAULT 0,
    target_date     DATE NOT NULL,
    description     VARCHAR(500),
    status          VARCHAR(20) NOT NULL DEFAULT 'In Progress'
                    CHECK (status IN ('In Progress', 'Completed', 'Abandoned')),
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_accounts_user ON accounts(user_id);
CREATE INDEX IF NOT EXISTS idx_entries_user_date ON ledger_entries(user_id, date);
CREATE INDEX IF NOT EXISTS idx_entries_category_date ON ledger_entries(category_id, date);
CREATE INDEX IF NOT EXISTS idx_entries_recurring ON ledger_entries(recurring_pattern) WHERE is_recurring = TRUE;
CREATE INDEX IF NOT EXISTS idx_transfers_user_date ON transfers(user_id, date);
CREATE INDEX IF NOT EXISTS idx_budgets_category ON budgets(user_id, category_id, date_from, date_to);
"""


def create_tables() -> None:
    """
    Execute the schema SQL to create all tables.
    Safe to call multiple times (uses IF NOT EXISTS).
    """
    conn = get_connection()
    try:
        with conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
        conn.commit()
        logger.info("Database schema initialized successfully.")
    except Exception as e:
        conn.rollback()
        logger.error(f"Failed to initialize schema: {e}")
        raise
    finally:
        release_connection(conn)


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("Database schema created successfully.")
