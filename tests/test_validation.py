import pytest

from services.validation import InvoiceValidationError, validate_invoice_request


def _valid(**overrides):
    fields = dict(
        recipient="ana@correo.com",
        amount=1_200_000,
        cadence="monthly",
        cut_off_day=5,
        concept="Arriendo",
    )
    fields.update(overrides)
    return fields


class TestValidRequests:
    def test_normalizes_fields(self):
        request = validate_invoice_request(**_valid(
            recipient="  ana@correo.com ",
            cadence="Monthly",
            cut_off_day="5",
            concept="  Arriendo  ",
        ))
        assert request.recipient == "ana@correo.com"
        assert request.cadence == "monthly"
        assert request.cut_off_day == 5
        assert request.concept == "Arriendo"

    @pytest.mark.parametrize("raw,expected", [
        ("1.200.000", 1_200_000),
        ("1,200,000", 1_200_000),
        ("$ 350 000", 350_000),
        (800000.0, 800_000),
        ("42", 42),
    ])
    def test_amount_formats(self, raw, expected):
        assert validate_invoice_request(**_valid(amount=raw)).amount == expected

    def test_biweekly_days(self):
        assert validate_invoice_request(**_valid(cadence="biweekly", cut_off_day=16)).cut_off_day == 16

    def test_missing_day_defaults_when_not_required(self):
        request = validate_invoice_request(**_valid(cut_off_day=None), require_cut_off_day=False)
        assert request.cut_off_day == 1


class TestInvalidRequests:
    @pytest.mark.parametrize("overrides,field", [
        ({"recipient": ""}, "recipient"),
        ({"recipient": "not-an-email"}, "recipient"),
        ({"recipient": "ana@correo"}, "recipient"),
        ({"amount": None}, "amount"),
        ({"amount": 0}, "amount"),
        ({"amount": -5}, "amount"),
        ({"amount": 10.5}, "amount"),
        ({"amount": True}, "amount"),
        ({"amount": "mil"}, "amount"),
        ({"cadence": "weekly"}, "cadence"),
        ({"cadence": None}, "cadence"),
        ({"cut_off_day": None}, "cut_off_day"),
        ({"cut_off_day": "cinco"}, "cut_off_day"),
        ({"cut_off_day": 0}, "cut_off_day"),
        ({"cut_off_day": 32}, "cut_off_day"),
        ({"cadence": "biweekly", "cut_off_day": 15}, "cut_off_day"),
        ({"concept": "   "}, "concept"),
        ({"concept": "x" * 501}, "concept"),
    ])
    def test_reports_the_offending_field(self, overrides, field):
        with pytest.raises(InvoiceValidationError) as exc_info:
            validate_invoice_request(**_valid(**overrides))
        assert exc_info.value.field == field

    @pytest.mark.parametrize("raw", ["1200.50", "1,5", "$ 99.9"])
    def test_fractional_amount_strings_are_rejected(self, raw):
        with pytest.raises(InvoiceValidationError) as exc_info:
            validate_invoice_request(**_valid(amount=raw))
        assert exc_info.value.field == "amount"
        assert exc_info.value.message == "El monto no puede tener decimales"

    @pytest.mark.parametrize("raw", ["1.200,000", "12.00.000", "1 2 0 0"])
    def test_malformed_grouping_is_rejected(self, raw):
        with pytest.raises(InvoiceValidationError) as exc_info:
            validate_invoice_request(**_valid(amount=raw))
        assert exc_info.value.field == "amount"

    def test_error_payload(self):
        with pytest.raises(InvoiceValidationError) as exc_info:
            validate_invoice_request(**_valid(recipient="nope"))
        assert exc_info.value.to_dict() == {"error": "Formato de email inválido", "field": "recipient"}
