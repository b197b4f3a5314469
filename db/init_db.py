"""
db/init_db.py
-------------
Creates the invoice schema if it does not already exist.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- gen_random_uuid() on PostgreSQL < 13
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Scheduled invoices: recurring definitions (active) and historical sends (inactive)
CREATE TABLE IF NOT EXISTS scheduled_invoices (
    id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    recipient_email VARCHAR(320) NOT NULL,
    amount          BIGINT NOT NULL CHECK (amount > 0),
    cadence         VARCHAR(10) NOT NULL CHECK (cadence IN ('monthly', 'biweekly')),
    cut_off_day     SMALLINT NOT NULL,
    concept         TEXT NOT NULL,
    active          BOOLEAN NOT NULL DEFAULT TRUE,
    status          VARCHAR(10) NOT NULL CHECK (status IN ('Scheduled', 'Pending', 'Paid')),
    next_send_date  DATE,
    last_sent       TIMESTAMPTZ,
    created_at      TIMESTAMPTZ DEFAULT NOW(),
    CONSTRAINT cut_off_day_matches_cadence CHECK (
        (cadence = 'monthly' AND cut_off_day BETWEEN 1 AND 31)
        OR (cadence = 'biweekly' AND cut_off_day IN (1, 16))
    ),
    CONSTRAINT active_is_scheduled CHECK (
        (active AND status = 'Scheduled' AND next_send_date IS NOT NULL)
        OR (NOT active AND status IN ('Pending', 'Paid'))
    )
);

-- Email logs: one row per delivery attempt, never updated
CREATE TABLE IF NOT EXISTS email_logs (
    id                   SERIAL PRIMARY KEY,
    scheduled_invoice_id UUID NOT NULL REFERENCES scheduled_invoices(id) ON DELETE CASCADE,
    recipient_email      VARCHAR(320) NOT NULL,
    outcome              VARCHAR(10) NOT NULL CHECK (outcome IN ('success', 'failed')),
    error_message        TEXT,
    sent_at              TIMESTAMPTZ DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_invoices_due ON scheduled_invoices(next_send_date) WHERE active = TRUE;
CREATE INDEX IF NOT EXISTS idx_invoices_created ON scheduled_invoices(created_at);
CREATE INDEX IF NOT EXISTS idx_email_logs_invoice ON email_logs(scheduled_invoice_id, sent_at);
"""


def create_tables() -> None:
    """
    Execute the schema SQL. Safe to call on every startup (IF NOT EXISTS).
    """
    try:
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(SCHEMA_SQL)
        logger.info("Invoice schema initialized successfully.")
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise


if __name__ == "__main__":
    from db.connection import init_pool
    init_pool()
    create_tables()
    print("✅ Invoice schema created successfully.")
