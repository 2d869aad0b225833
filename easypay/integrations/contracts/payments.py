"""
Payment contract: the caller-facing request and its normalization into a
provider-agnostic `PaymentRecord`.

Validation collects every violation per field (nothing short-circuits), so
the caller sees the full list in one failure Result.
"""

from __future__ import annotations

import json
import re
import secrets
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from easypay.error_handler import PaymentValidationError
from easypay.integrations.contracts.interfaces import (
    CURRENCY,
    DEFAULT_PAYMENT_METHOD,
    Customization,
    PaymentMethod,
    PaymentRecord,
)

_MOBILE_RE = re.compile(r"^(251\d{9}|0\d{9}|9\d{8}|7\d{8})$")
_METHOD_MOBILE_RE = {
    PaymentMethod.TELEBIRR: (re.compile(r"^(2519\d{8}|09\d{8}|9\d{8})$"), "Please enter a valid Telebirr Phone Number."),
    PaymentMethod.MPESA: (re.compile(r"^(2517\d{8}|07\d{8}|7\d{8})$"), "Please enter a valid Mpesa Phone Number."),
}
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

MIN_AMOUNT = 1
MIN_TX_REF_LENGTH = 3


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------

@dataclass
class PaymentRequest:
    mobile: Optional[str] = None
    amount: Any = None
    payment_type: Union[str, PaymentMethod, None] = None
    tx_ref: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    customization: Optional[Mapping[str, Any]] = None
    meta: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "PaymentRequest":
        """Build from a mapping; `paymentType`/`txRef` spellings are accepted."""
        data = dict(payload)
        if "paymentType" in data:
            data.setdefault("payment_type", data.pop("paymentType"))
        if "txRef" in data:
            data.setdefault("tx_ref", data.pop("txRef"))
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def add_error(errors: Dict[str, List[str]], field: str, message: str) -> None:
    errors.setdefault(field, []).append(message)


def resolve_method(value: Any) -> Optional[PaymentMethod]:
    if value is None or value == "":
        return DEFAULT_PAYMENT_METHOD
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(str(value).strip().lower())
    except ValueError:
        return None


def validate_mobile(mobile: Any, method: Optional[PaymentMethod], errors: Dict[str, List[str]]) -> None:
    value = "" if mobile is None else str(mobile).strip()
    if not _MOBILE_RE.match(value):
        add_error(errors, "mobile", "Please enter a valid Phone Number.")
    refinement = _METHOD_MOBILE_RE.get(method) if method else None
    if refinement and not refinement[0].match(value):
        add_error(errors, "mobile", refinement[1])


def parse_amount(amount: Any, errors: Dict[str, List[str]]) -> Optional[Decimal]:
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        add_error(errors, "amount", "Amount must be a number")
        return None
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        value = Decimal("NaN")
    if not value.is_finite():
        add_error(errors, "amount", "Amount must be a number")
        return None
    if value < MIN_AMOUNT:
        add_error(errors, "amount", f"Minimum amount must be at least {MIN_AMOUNT}")
    return value


def validate_payment_request(
    request: PaymentRequest,
    allowed_methods: Optional[Iterable[PaymentMethod]] = None,
) -> Dict[str, List[str]]:
    """
    Return field -> messages for every violation.
    Empty dict means the request is valid.
    """
    errors: Dict[str, List[str]] = {}

    method = resolve_method(request.payment_type)
    if method is None:
        add_error(errors, "payment_type", f"Unsupported payment method '{request.payment_type}'")
    elif request.payment_type and allowed_methods is not None and method not in set(allowed_methods):
        add_error(errors, "payment_type", f"Payment method '{method.value}' is not enabled for this client")

    validate_mobile(request.mobile, method, errors)
    parse_amount(request.amount, errors)

    if request.tx_ref is not None and len(str(request.tx_ref)) < MIN_TX_REF_LENGTH:
        add_error(errors, "tx_ref", f"txRef must be at least {MIN_TX_REF_LENGTH} characters long")

    if request.email is not None and not _EMAIL_RE.match(str(request.email).strip()):
        add_error(errors, "email", "Email is not valid")

    if request.customization is not None:
        if not isinstance(request.customization, Mapping):
            add_error(errors, "customization", "customization must be an object")
        else:
            logo = request.customization.get("logo")
            if logo is not None and not _URL_RE.match(str(logo)):
                add_error(errors, "customization.logo", "logo must be a valid URL")
            validate_json_object(request.customization, "customization", errors)

    if request.meta is not None:
        if not isinstance(request.meta, Mapping):
            add_error(errors, "meta", "meta must be an object")
        else:
            validate_json_object(request.meta, "meta", errors)

    return errors


def validate_json_object(value: Mapping[str, Any], field: str, errors: Dict[str, List[str]]) -> None:
    # Objects travel as JSON strings in the form body
    try:
        json.dumps(dict(value))
    except (TypeError, ValueError) as e:
        add_error(errors, field, f"{field} must be JSON serializable ({e})")


def format_amount(value: Decimal) -> str:
    """Wire form of an amount: plain decimal string without exponent."""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def generate_reference(size: int = 10) -> str:
    return secrets.token_hex((size + 1) // 2)[:size]


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def build_payment_record(
    request: PaymentRequest,
    generate_ref_id: Callable[[], str] = generate_reference,
    allowed_methods: Optional[Iterable[PaymentMethod]] = None,
) -> PaymentRecord:
    errors = validate_payment_request(request, allowed_methods)
    if errors:
        raise PaymentValidationError(errors)

    customization = None
    if request.customization is not None:
        customization = Customization(
            logo=request.customization.get("logo"),
            title=request.customization.get("title"),
            description=request.customization.get("description"),
        )

    return PaymentRecord(
        amount=format_amount(Decimal(str(request.amount))),
        mobile=str(request.mobile).strip(),
        payment_method=resolve_method(request.payment_type),
        tx_ref=str(request.tx_ref) if request.tx_ref is not None else generate_ref_id(),
        currency=CURRENCY,
        email=request.email,
        first_name=request.first_name,
        last_name=request.last_name,
        customization=customization,
        meta=dict(request.meta) if request.meta is not None else None,
    )
