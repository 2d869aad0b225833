import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PaymentMethod(str, Enum):
    TELEBIRR = "telebirr"
    CBEBIRR = "cbebirr"
    EBIRR = "ebirr"
    MPESA = "mpesa"
    CHAPA = "chapa"


class VerificationState(str, Enum):
    POLLING = "polling"
    VERIFIED = "verified"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


HOSTED_METHODS: FrozenSet[PaymentMethod] = frozenset({PaymentMethod.CHAPA})
INLINE_METHODS: FrozenSet[PaymentMethod] = frozenset(
    {PaymentMethod.TELEBIRR, PaymentMethod.CBEBIRR, PaymentMethod.EBIRR, PaymentMethod.MPESA}
)

DEFAULT_PAYMENT_METHOD = PaymentMethod.TELEBIRR
CURRENCY = "ETB"


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass
class Customization:
    logo: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass
class PaymentRecord:
    """Provider-agnostic payment, built once per create_payment call."""

    amount: str                          # decimal string, e.g. "500" or "300.5"
    mobile: str
    payment_method: PaymentMethod
    tx_ref: str
    currency: str = CURRENCY
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    customization: Optional[Customization] = None
    meta: Optional[Dict[str, Any]] = None

    def to_form_fields(self) -> Dict[str, str]:
        """Flatten into form fields: None dropped, objects JSON-encoded."""
        fields: Dict[str, str] = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            if key == "customization":
                value = {k: v for k, v in value.items() if v is not None}
            if isinstance(value, Enum):
                value = value.value
            if isinstance(value, (dict, list, tuple)):
                fields[key] = json.dumps(value)
            else:
                fields[key] = str(value)
        return fields


@dataclass
class VerificationOutcome:
    state: VerificationState
    reference: str
    attempts: int = 0
    amount: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    message: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)
    unexpected: bool = False             # failed on a status the client does not know

    @property
    def is_terminal(self) -> bool:
        return self.state is not VerificationState.POLLING

    def to_data(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "tx_ref": self.reference,
            "status": self.status,
            "created_at": self.created_at,
        }


@dataclass
class Result:
    """Uniform return value of every public operation."""

    success: bool
    message: str
    data: Optional[Dict[str, Any]] = None
    error_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
