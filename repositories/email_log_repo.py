"""
repositories/email_log_repo.py
------------------------------
Data access layer for the email delivery audit trail (`email_logs` table).
"""

from typing import Optional

from db.connection import transaction
from models.email_log import EmailLog
from utils.logger import get_logger

logger = get_logger(__name__)


class EmailLogRepository:
    """Append-only access to email_logs."""

    def append(
        self,
        invoice_id: str,
        recipient: str,
        outcome: str,
        error_message: Optional[str] = None,
    ) -> None:
        """
        Record one delivery attempt.

        The log is secondary: a failure here is logged and swallowed so it
        never changes the outcome of the delivery it describes.
        """
        query = """
            INSERT INTO email_logs (scheduled_invoice_id, recipient_email, outcome, error_message)
            VALUES (%s, %s, %s, %s);
        """
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (invoice_id, recipient, outcome, error_message))
        except Exception as e:
            logger.error(f"Failed to write email log for invoice #{invoice_id}: {e}")

    def list_for_invoice(self, invoice_id: str) -> list[EmailLog]:
        """All attempts for an invoice, newest first."""
        query = """
            SELECT id, scheduled_invoice_id, recipient_email, outcome, error_message, sent_at
            FROM email_logs
            WHERE scheduled_invoice_id = %s
            ORDER BY sent_at DESC;
        """
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (invoice_id,))
                return [
                    EmailLog(
                        id=r[0],
                        invoice_id=str(r[1]),
                        recipient=r[2],
                        outcome=r[3],
                        error_message=r[4],
                        sent_at=r[5],
                    )
                    for r in cur.fetchall()
                ]
