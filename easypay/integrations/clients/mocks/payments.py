"""
Mock Payments Client.

⚠️  Development/testing stand-in for RealPaymentsClient. Makes no network
    calls. Each endpoint replays a queue of scripted JSON bodies (the last one
    repeats once the queue runs dry) and every call is recorded so tests can
    assert on request counts and outbound fields.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Iterable, List, Optional, Union

from easypay.error_handler import TransportError

logger = logging.getLogger(__name__)

Scripted = Union[Dict[str, Any], Exception]


@dataclass
class RecordedCall:
    operation: str
    token: str
    fields: Dict[str, str] = field(default_factory=dict)
    reference: Optional[str] = None


def pending_verification(reference: str = "REF-MOCK") -> Dict[str, Any]:
    return {
        "message": "Payment is pending",
        "trx_ref": reference,
        "processor_id": None,
        "status": "pending",
        "data": {"amount": None, "charge": None, "status": "pending", "created_at": None},
    }


def successful_verification(reference: str = "REF-MOCK", amount: str = "100.00") -> Dict[str, Any]:
    return {
        "message": "Payment successfully verified",
        "trx_ref": reference,
        "processor_id": "PROC-MOCK",
        "status": "success",
        "data": {
            "amount": amount,
            "charge": "0.00",
            "status": "success",
            "created_at": "2026-01-01T10:00:00.000000Z",
        },
    }


def accepted_charge(ref_id: str = "REF-MOCK", method: str = "telebirr") -> Dict[str, Any]:
    return {
        "message": "Charge initiated",
        "status": "success",
        "data": {
            "auth_type": "ussd",
            "requestID": "REQ-MOCK",
            "meta": {
                "message": f"Payment successfully initiated with {method}",
                "status": "success",
                "ref_id": ref_id,
                "payment_status": "PENDING",
            },
            "mode": "test",
        },
    }


class MockPaymentsClient:
    def __init__(
        self,
        charge: Iterable[Scripted] = (),
        verify: Iterable[Scripted] = (),
        hosted: Iterable[Scripted] = (),
        lookup: Iterable[Scripted] = (),
    ) -> None:
        self._scripts: Dict[str, Deque[Scripted]] = {
            "charge": deque(charge),
            "verify": deque(verify),
            "hosted": deque(hosted),
            "lookup": deque(lookup),
        }
        self.calls: List[RecordedCall] = []
        logger.info("[PAYMENTS MOCK] Client initialised")

    def calls_for(self, operation: str) -> List[RecordedCall]:
        return [c for c in self.calls if c.operation == operation]

    async def initiate_charge(self, fields: Dict[str, str], token: str) -> Dict[str, Any]:
        self.calls.append(RecordedCall("charge", token, dict(fields), fields.get("tx_ref")))
        return self._next("charge")

    async def verify_charge(self, reference: str, payment_method: str, token: str) -> Dict[str, Any]:
        fields = {"reference": reference, "payment_method": payment_method}
        self.calls.append(RecordedCall("verify", token, fields, reference))
        return self._next("verify")

    async def initialize_hosted(self, fields: Dict[str, str], token: str) -> Dict[str, Any]:
        self.calls.append(RecordedCall("hosted", token, dict(fields), fields.get("tx_ref")))
        return self._next("hosted")

    async def lookup_transaction(self, reference: str, token: str) -> Dict[str, Any]:
        self.calls.append(RecordedCall("lookup", token, {}, reference))
        return self._next("lookup")

    def _next(self, operation: str) -> Dict[str, Any]:
        script = self._scripts[operation]
        if not script:
            raise TransportError(f"[PAYMENTS MOCK] No scripted response for '{operation}'")
        item = script.popleft() if len(script) > 1 else script[0]
        logger.info("[PAYMENTS MOCK] %s -> %s", operation, item if isinstance(item, Exception) else item.get("status"))
        if isinstance(item, Exception):
            raise item
        return dict(item)
