"""
repositories/invoice_repo.py
----------------------------
Data access layer for scheduled invoices.
All SQL queries related to the `scheduled_invoices` table live here.
"""

from datetime import date
from typing import Optional

from psycopg2 import sql

from db.connection import transaction
from models.invoice import ScheduledInvoice
from utils.logger import get_logger

logger = get_logger(__name__)

_COLUMNS = (
    "id, recipient_email, amount, cadence, cut_off_day, concept, "
    "active, status, next_send_date, last_sent, created_at"
)

# Model attribute -> column, for fields that may change after creation.
_UPDATABLE = {
    "recipient": "recipient_email",
    "amount": "amount",
    "concept": "concept",
    "active": "active",
    "status": "status",
    "next_send_date": "next_send_date",
    "last_sent": "last_sent",
}


class InvoiceRepository:
    """Repository for CRUD operations on the scheduled_invoices table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, invoice: ScheduledInvoice) -> ScheduledInvoice:
        """
        Insert a new invoice record.

        Args:
            invoice: The ScheduledInvoice to persist.

        Returns:
            The same object with its `id` and `created_at` populated.
        """
        query = """
            INSERT INTO scheduled_invoices
                (recipient_email, amount, cadence, cut_off_day, concept,
                 active, status, next_send_date, last_sent, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, COALESCE(%s, NOW()))
            RETURNING id, created_at;
        """
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (
                        invoice.recipient, invoice.amount, invoice.cadence,
                        invoice.cut_off_day, invoice.concept, invoice.active,
                        invoice.status, invoice.next_send_date, invoice.last_sent,
                        invoice.created_at,
                    ))
                    row = cur.fetchone()
            invoice.id = str(row[0])
            invoice.created_at = row[1]
            logger.info(f"Added invoice '{invoice.concept}' #{invoice.id} ({invoice.status})")
            return invoice
        except Exception as e:
            logger.error(f"Failed to add invoice: {e}")
            raise

    # ── READ ──────────────────────────────────────────────

    def get_by_id(self, invoice_id: str) -> Optional[ScheduledInvoice]:
        """Fetch a single invoice by ID."""
        query = f"SELECT {_COLUMNS} FROM scheduled_invoices WHERE id = %s;"
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (invoice_id,))
                row = cur.fetchone()
        return self._row_to_invoice(row) if row else None

    def list_active_due_by(self, day: date) -> list[ScheduledInvoice]:
        """
        Get all active invoices whose next send date is on or before `day`.
        Used by the due-invoice sweep.

        Returns:
            Invoices ordered by next_send_date ascending.
        """
        query = f"""
            SELECT {_COLUMNS} FROM scheduled_invoices
            WHERE active = TRUE AND next_send_date <= %s
            ORDER BY next_send_date ASC, created_at ASC;
        """
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (day,))
                return [self._row_to_invoice(r) for r in cur.fetchall()]

    def list_active(self) -> list[ScheduledInvoice]:
        """Recurring definitions, soonest first."""
        query = f"""
            SELECT {_COLUMNS} FROM scheduled_invoices
            WHERE active = TRUE
            ORDER BY next_send_date ASC;
        """
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(query)
                return [self._row_to_invoice(r) for r in cur.fetchall()]

    def list_history(self) -> list[ScheduledInvoice]:
        """Historical and one-time records, newest first."""
        query = f"""
            SELECT {_COLUMNS} FROM scheduled_invoices
            WHERE active = FALSE
            ORDER BY next_send_date DESC, created_at DESC;
        """
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(query)
                return [self._row_to_invoice(r) for r in cur.fetchall()]

    def list_all(self) -> list[ScheduledInvoice]:
        """Every record, newest first."""
        query = f"SELECT {_COLUMNS} FROM scheduled_invoices ORDER BY created_at DESC;"
        with transaction() as conn:
            with conn.cursor() as cur:
                cur.execute(query)
                return [self._row_to_invoice(r) for r in cur.fetchall()]

    # ── UPDATE ────────────────────────────────────────────

    def update(self, invoice_id: str, **fields) -> bool:
        """
        Update selected fields of an invoice.

        Args:
            invoice_id: The invoice to update.
            **fields: Model attribute names (e.g. last_sent, next_send_date, status).

        Returns:
            True if a row was updated.

        Raises:
            ValueError: If a field is unknown or not updatable.
        """
        if not fields:
            return False
        unknown = set(fields) - set(_UPDATABLE)
        if unknown:
            raise ValueError(f"Cannot update invoice fields: {sorted(unknown)}")

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(_UPDATABLE[name])) for name in fields
        )
        query = sql.SQL("UPDATE scheduled_invoices SET {} WHERE id = %s;").format(assignments)
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (*fields.values(), invoice_id))
                    updated = cur.rowcount > 0
            if updated:
                logger.info(f"Updated invoice #{invoice_id}: {', '.join(fields)}")
            return updated
        except Exception as e:
            logger.error(f"Failed to update invoice #{invoice_id}: {e}")
            raise

    # ── DELETE ────────────────────────────────────────────

    def delete(self, invoice_id: str) -> bool:
        """Hard-delete an invoice. Only used to roll back a failed historical send."""
        query = "DELETE FROM scheduled_invoices WHERE id = %s;"
        try:
            with transaction() as conn:
                with conn.cursor() as cur:
                    cur.execute(query, (invoice_id,))
                    deleted = cur.rowcount > 0
            if deleted:
                logger.info(f"Deleted invoice #{invoice_id}")
            return deleted
        except Exception as e:
            logger.error(f"Failed to delete invoice #{invoice_id}: {e}")
            raise

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_invoice(row: tuple) -> ScheduledInvoice:
        """Convert a database row tuple to a ScheduledInvoice domain object."""
        return ScheduledInvoice(
            id=str(row[0]),
            recipient=row[1],
            amount=int(row[2]),
            cadence=row[3],
            cut_off_day=int(row[4]),
            concept=row[5],
            active=bool(row[6]),
            status=row[7],
            next_send_date=row[8],
            last_sent=row[9],
            created_at=row[10],
        )
