"""Tests for payment request validation and normalization."""

import json
from datetime import date
from decimal import Decimal

import pytest

from easypay.error_handler import PaymentValidationError
from easypay.integrations.contracts.interfaces import PaymentMethod
from easypay.integrations.contracts.payments import (
    PaymentRequest,
    build_payment_record,
    format_amount,
    generate_reference,
    validate_payment_request,
)


def test_valid_telebirr_request_has_no_errors():
    req = PaymentRequest(mobile="0912345678", amount=500, payment_type="telebirr")
    assert validate_payment_request(req) == {}


@pytest.mark.parametrize("mobile", ["251912345678", "0912345678", "912345678"])
def test_telebirr_accepts_local_and_international_numbers(mobile):
    req = PaymentRequest(mobile=mobile, amount=10, payment_type="telebirr")
    assert validate_payment_request(req) == {}


def test_telebirr_refinement_rejects_safaricom_number():
    """0712... passes the generic shape but not the telebirr pattern."""
    req = PaymentRequest(mobile="0712345678", amount=10, payment_type="telebirr")
    errors = validate_payment_request(req)
    assert errors["mobile"] == ["Please enter a valid Telebirr Phone Number."]


def test_mpesa_refinement_rejects_ethio_telecom_number():
    req = PaymentRequest(mobile="0900123456", amount=300, payment_type="mpesa")
    errors = validate_payment_request(req)
    assert errors["mobile"] == ["Please enter a valid Mpesa Phone Number."]


def test_mpesa_accepts_07_prefix():
    req = PaymentRequest(mobile="251712345678", amount=300, payment_type="mpesa")
    assert validate_payment_request(req) == {}


def test_cbebirr_only_needs_generic_shape():
    req = PaymentRequest(mobile="0712345678", amount=10, payment_type="cbebirr")
    assert validate_payment_request(req) == {}


def test_every_violation_is_reported():
    req = PaymentRequest(mobile="12", amount=0, payment_type="telebirr", tx_ref="ab", email="not-an-email")
    errors = validate_payment_request(req)
    assert set(errors) == {"mobile", "amount", "tx_ref", "email"}
    # generic shape and telebirr refinement both fail
    assert len(errors["mobile"]) == 2
    assert "at least 1" in errors["amount"][0]
    assert "at least 3" in errors["tx_ref"][0]


@pytest.mark.parametrize("amount", ["500", None, True, float("nan")])
def test_non_numeric_amount_is_rejected(amount):
    req = PaymentRequest(mobile="0912345678", amount=amount)
    errors = validate_payment_request(req)
    assert errors["amount"] == ["Amount must be a number"]


def test_unknown_payment_method_is_rejected():
    req = PaymentRequest(mobile="0912345678", amount=10, payment_type="paypal")
    errors = validate_payment_request(req)
    assert "payment_type" in errors


def test_method_outside_allowed_options_is_rejected():
    req = PaymentRequest(mobile="0912345678", amount=10, payment_type="chapa")
    errors = validate_payment_request(req, allowed_methods=[PaymentMethod.TELEBIRR])
    assert "not enabled" in errors["payment_type"][0]


def test_customization_logo_must_be_url():
    req = PaymentRequest(mobile="0912345678", amount=10, customization={"logo": "logo.png"})
    errors = validate_payment_request(req)
    assert "customization.logo" in errors


def test_build_record_defaults_method_reference_and_currency():
    req = PaymentRequest(mobile="0912345678", amount=500)
    record = build_payment_record(req, generate_ref_id=lambda: "GEN-REF-1")
    assert record.payment_method is PaymentMethod.TELEBIRR
    assert record.tx_ref == "GEN-REF-1"
    assert record.currency == "ETB"
    assert record.amount == "500"


def test_build_record_keeps_caller_reference():
    req = PaymentRequest(mobile="0912345678", amount=500, tx_ref="ORDER-77")
    record = build_payment_record(req, generate_ref_id=lambda: pytest.fail("generator should not be called"))
    assert record.tx_ref == "ORDER-77"


def test_build_record_raises_with_all_field_errors():
    req = PaymentRequest(mobile="bad", amount=-5)
    with pytest.raises(PaymentValidationError) as exc_info:
        build_payment_record(req)
    err = exc_info.value
    assert set(err.field_errors) == {"mobile", "amount"}
    assert err.message.startswith("Payment validation failed:")
    assert err.error_type == "ValidationError"


def test_default_generator_gives_fresh_ten_char_references():
    req = PaymentRequest(mobile="0912345678", amount=5)
    refs = {build_payment_record(req).tx_ref for _ in range(20)}
    assert len(refs) == 20
    assert all(len(r) == 10 for r in refs)


@pytest.mark.parametrize("value, expected", [(500, "500"), (300.5, "300.5"), (300.0, "300"), (1e3, "1000")])
def test_amount_wire_form(value, expected):
    assert format_amount(Decimal(str(value))) == expected


def test_from_dict_accepts_camel_case_keys():
    req = PaymentRequest.from_dict({"mobile": "0912345678", "amount": 5, "paymentType": "ebirr", "txRef": "abc", "extra": 1})
    assert req.payment_type == "ebirr"
    assert req.tx_ref == "abc"


def test_form_fields_drop_none_and_json_encode_objects():
    req = PaymentRequest(
        mobile="0912345678",
        amount=100,
        payment_type="telebirr",
        email="buyer@example.com",
        customization={"title": "Shop"},
        meta={"order": 7, "items": ["a", "b"]},
    )
    fields = build_payment_record(req, generate_ref_id=lambda: "REF-1").to_form_fields()
    assert fields["payment_method"] == "telebirr"
    assert fields["amount"] == "100"
    assert "first_name" not in fields
    assert json.loads(fields["customization"]) == {"title": "Shop"}
    assert json.loads(fields["meta"]) == {"order": 7, "items": ["a", "b"]}


def test_enum_member_is_accepted_as_payment_type():
    req = PaymentRequest(mobile="0712345678", amount=10, payment_type=PaymentMethod.MPESA)
    assert validate_payment_request(req, allowed_methods=list(PaymentMethod)) == {}
    assert build_payment_record(req).payment_method is PaymentMethod.MPESA


@pytest.mark.parametrize(
    "field, value",
    [
        ("meta", {"when": date(2026, 1, 1)}),
        ("meta", {"price": Decimal("1.5")}),
        ("customization", {"title": object()}),
    ],
)
def test_objects_that_cannot_be_json_encoded_are_rejected(field, value):
    req = PaymentRequest(mobile="0912345678", amount=10, **{field: value})
    errors = validate_payment_request(req)
    assert list(errors) == [field]
    assert "JSON serializable" in errors[field][0]


@pytest.mark.parametrize("size", [10, 21, 40, 64])
def test_generated_reference_honours_any_size(size):
    assert len(generate_reference(size)) == size
