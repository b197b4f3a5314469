import asyncio
from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from conftest import ScriptedGateway, bogota, make_invoice
from services.invoice_service import InvoiceNotFoundError, InvoiceService
from services.invoice_status import InvalidStatusTransition
from services.validation import InvoiceValidationError, validate_invoice_request


@pytest.fixture()
def service(invoice_repo, log_repo, gateway) -> InvoiceService:
    return InvoiceService(invoice_repo=invoice_repo, log_repo=log_repo, gateway=gateway)


def _request(**overrides):
    fields = dict(
        recipient="ana@correo.com",
        amount=1_200_000,
        cadence="monthly",
        cut_off_day=31,
        concept="Arriendo",
    )
    fields.update(overrides)
    return validate_invoice_request(**fields)


class TestSchedule:
    def test_creates_active_scheduled_record(self, service, invoice_repo):
        invoice = service.schedule(_request(), now=bogota(2024, 1, 20))

        stored = invoice_repo.get_by_id(invoice.id)
        assert stored.active is True
        assert stored.status == "Scheduled"
        assert stored.next_send_date == date(2024, 2, 29)
        assert stored.last_sent is None

    def test_schedule_from_text_uses_parser(self, service):
        parsed = {
            "recipient": "pagos@empresa.co",
            "amount": 800000,
            "cadence": "biweekly",
            "cut_off_day": 16,
            "concept": "Honorarios",
        }
        with patch("services.invoice_service.parse_invoice_request", return_value=parsed):
            result = service.schedule_from_text("honorarios quincenales", now=bogota(2024, 3, 1))

        assert result["success"] is True
        assert result["invoice"].next_send_date == date(2024, 4, 16)

    def test_schedule_from_text_reports_parser_question(self, service, invoice_repo):
        unclear = {"error": "unclear", "question": "¿A qué correo envío la factura?"}
        with patch("services.invoice_service.parse_invoice_request", return_value=unclear):
            result = service.schedule_from_text("cobrar arriendo")

        assert result == {"success": False, "question": "¿A qué correo envío la factura?"}
        assert invoice_repo.list_all() == []

    def test_schedule_from_text_validates_parsed_fields(self, service, invoice_repo):
        parsed = {"recipient": "pagos@empresa.co", "amount": 800000, "cadence": "biweekly",
                  "cut_off_day": 10, "concept": "Honorarios"}
        with patch("services.invoice_service.parse_invoice_request", return_value=parsed):
            result = service.schedule_from_text("honorarios")

        assert result["success"] is False
        assert "quincenal" in result["question"]
        assert invoice_repo.list_all() == []


class TestSendNow:
    def test_success_records_pending_invoice_and_log(self, service, invoice_repo, log_repo, gateway):
        now = bogota(2024, 3, 12, 15)

        result = asyncio.run(service.send_now(_request(cut_off_day=5), now=now))

        assert result.success is True
        stored = invoice_repo.get_by_id(result.invoice.id)
        assert stored.active is False
        assert stored.status == "Pending"
        assert stored.next_send_date == date(2024, 3, 12)
        assert stored.last_sent == now
        assert gateway.delivered[0].id == stored.id
        assert [e.outcome for e in log_repo.entries] == ["success"]

    def test_failure_keeps_record_and_logs_error(self, invoice_repo, log_repo):
        gateway = ScriptedGateway(fail_for={"ana@correo.com"})
        service = InvoiceService(invoice_repo=invoice_repo, log_repo=log_repo, gateway=gateway)

        result = asyncio.run(service.send_now(_request(), now=bogota(2024, 3, 12)))

        assert result.success is False
        assert result.error == "Mailbox unavailable"
        stored = invoice_repo.get_by_id(result.invoice.id)
        assert stored is not None
        assert stored.last_sent is None
        assert log_repo.entries[0].outcome == "failed"

    def test_one_time_invoice_is_never_swept(self, service, invoice_repo):
        asyncio.run(service.send_now(_request(), now=bogota(2024, 3, 12)))
        assert invoice_repo.list_active_due_by(date(2030, 1, 1)) == []

    def test_log_store_outage_still_reports_delivery(self, invoice_repo, gateway):
        log_repo = MagicMock()
        log_repo.append.side_effect = RuntimeError("email_logs unavailable")
        service = InvoiceService(invoice_repo=invoice_repo, log_repo=log_repo, gateway=gateway)
        now = bogota(2024, 3, 12)

        result = asyncio.run(service.send_now(_request(), now=now))

        assert result.success is True
        assert invoice_repo.get_by_id(result.invoice.id).last_sent == now
        log_repo.append.assert_called_once()


class TestToggleStatus:
    def test_toggles_pending_and_paid(self, service, invoice_repo):
        invoice = invoice_repo.add(make_invoice(active=False, status="Pending"))

        assert service.toggle_status(invoice.id).status == "Paid"
        assert invoice_repo.get_by_id(invoice.id).status == "Paid"
        assert service.toggle_status(invoice.id).status == "Pending"

    def test_scheduled_invoice_cannot_be_paid(self, service, invoice_repo):
        invoice = invoice_repo.add(make_invoice())

        with pytest.raises(InvalidStatusTransition):
            service.toggle_status(invoice.id)
        assert invoice_repo.get_by_id(invoice.id).status == "Scheduled"

    def test_unknown_invoice(self, service):
        with pytest.raises(InvoiceNotFoundError):
            service.toggle_status("00000000-0000-0000-0000-000000000000")


class TestRetroactiveRecord:
    def test_files_pending_copy_at_noon(self, service, invoice_repo):
        definition = invoice_repo.add(make_invoice(next_send_date=date(2024, 6, 5)))

        history = service.record_retroactive(definition.id, date(2024, 5, 5), now=bogota(2024, 5, 20))

        assert history.active is False
        assert history.status == "Pending"
        assert history.next_send_date == date(2024, 5, 5)
        assert history.last_sent.hour == 12
        assert history.last_sent.date() == date(2024, 5, 5)
        assert invoice_repo.get_by_id(definition.id).next_send_date == date(2024, 6, 5)

    def test_rejects_future_dates(self, service, invoice_repo):
        definition = invoice_repo.add(make_invoice())

        with pytest.raises(InvoiceValidationError):
            service.record_retroactive(definition.id, date(2024, 6, 1), now=bogota(2024, 5, 20))

    def test_rejects_historical_records(self, service, invoice_repo):
        history = invoice_repo.add(make_invoice(active=False, status="Pending"))

        with pytest.raises(InvoiceValidationError):
            service.record_retroactive(history.id, date(2024, 5, 1), now=bogota(2024, 5, 20))


class TestReads:
    def test_email_logs_for_unknown_invoice(self, service):
        with pytest.raises(InvoiceNotFoundError):
            service.email_logs("missing")

    def test_lists_split_active_and_history(self, service, invoice_repo):
        active = invoice_repo.add(make_invoice())
        sent = invoice_repo.add(make_invoice(active=False, status="Paid"))

        assert [i.id for i in service.list_active()] == [active.id]
        assert [i.id for i in service.list_history()] == [sent.id]
        assert {i.id for i in service.list_all()} == {active.id, sent.id}
