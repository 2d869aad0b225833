from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from easypay.error_handler import TransportError

STATUS_SUCCESS = "success"
STATUS_PENDING = "pending"
STATUS_FAILED = "failed"


class IntegrationResponseError(TransportError):
    """Provider body could not be interpreted at all (not a JSON object)."""


class ChargeResponseModel(BaseModel):
    status: str
    message: str
    ref_id: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class HostedCheckoutResponseModel(BaseModel):
    status: str
    message: str
    checkout_url: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


class VerificationResponseModel(BaseModel):
    status: str
    message: str
    data_status: Optional[str] = None
    reference: Optional[str] = None
    amount: Optional[str] = None
    created_at: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_charge_response(raw: Any) -> ChargeResponseModel:
    data = _require_object(raw)
    return _build_model(
        ChargeResponseModel,
        {
            "status": _status(data.get("status")),
            "message": _message(data),
            "ref_id": _optional_str(_dig(data, "data", "meta", "ref_id")),
            "raw": data,
        },
        data,
    )


def normalize_hosted_response(raw: Any) -> HostedCheckoutResponseModel:
    data = _require_object(raw)
    return _build_model(
        HostedCheckoutResponseModel,
        {
            "status": _status(data.get("status")),
            "message": _message(data),
            "checkout_url": _optional_str(_dig(data, "data", "checkout_url")),
            "raw": data,
        },
        data,
    )


def normalize_verification_response(raw: Any, *, fallback_reference: str) -> VerificationResponseModel:
    """Shared by the inline validate endpoint and the transaction lookup endpoint."""
    data = _require_object(raw)
    payload = data.get("data") if isinstance(data.get("data"), dict) else {}
    reference = _first_non_empty(data, "trx_ref", "tx_ref", "reference") or _first_non_empty(
        payload, "tx_ref", "trx_ref", "reference", default=fallback_reference
    )
    return _build_model(
        VerificationResponseModel,
        {
            "status": _status(data.get("status")),
            "message": _message(data),
            "data_status": _status(payload.get("status")) or None,
            "reference": str(reference),
            "amount": _optional_str(payload.get("amount")),
            "created_at": _optional_str(_first_non_empty(payload, "created_at", "updated_at")),
            "raw": data,
        },
        data,
    )


def _require_object(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise IntegrationResponseError(f"Unexpected response body: {raw!r}")
    return raw


def _dig(data: Dict[str, Any], *path: str) -> Any:
    node: Any = data
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return default


def _status(value: Any) -> str:
    return str(value or "").strip().lower()


def _message(data: Dict[str, Any]) -> str:
    message = _first_non_empty(data, "message", "detail", "error", default="No message returned by provider")
    if isinstance(message, dict):
        # Field-level provider errors, e.g. {"email": ["is invalid"]}
        parts = []
        for key, value in message.items():
            text = ", ".join(str(v) for v in value) if isinstance(value, list) else str(value)
            parts.append(f"{key}: {text}")
        return "; ".join(parts)
    return str(message)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
