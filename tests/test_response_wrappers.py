import pytest

from easypay.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    normalize_charge_response,
    normalize_hosted_response,
    normalize_verification_response,
)


def test_charge_response_extracts_provider_reference():
    out = normalize_charge_response({"status": "SUCCESS", "message": "ok", "data": {"meta": {"ref_id": "ABC"}}})
    assert out.status == "success"
    assert out.ref_id == "ABC"


def test_charge_response_without_meta():
    out = normalize_charge_response({"status": "failed", "message": "nope", "data": None})
    assert out.ref_id is None
    assert out.message == "nope"


def test_field_level_provider_messages_are_flattened():
    out = normalize_hosted_response({"status": "failed", "message": {"email": ["is invalid"], "amount": "too low"}})
    assert out.message == "email: is invalid; amount: too low"
    assert out.checkout_url is None


def test_verification_response_reads_nested_data():
    raw = {
        "status": "failed",
        "message": "pending",
        "trx_ref": "R1",
        "data": {"status": "Pending", "amount": 300, "created_at": "2026-01-01"},
    }
    out = normalize_verification_response(raw, fallback_reference="X")
    assert out.data_status == "pending"
    assert out.reference == "R1"
    assert out.amount == "300"


def test_verification_reference_falls_back_to_nested_then_caller():
    out = normalize_verification_response({"status": "success", "data": {"tx_ref": "N1"}}, fallback_reference="X")
    assert out.reference == "N1"
    out = normalize_verification_response({"status": "success"}, fallback_reference="X")
    assert out.reference == "X"
    assert out.message == "No message returned by provider"


@pytest.mark.parametrize("raw", [None, "OK", ["status", "success"]])
def test_non_object_bodies_are_rejected(raw):
    with pytest.raises(IntegrationResponseError):
        normalize_charge_response(raw)
