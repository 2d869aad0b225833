"""
Verification state machine.

Two adapters produce the same `VerificationOutcome`:

- `poll_verification`: inline charges, polled with the public key until a
  terminal state or until the retry budget runs out;
- `lookup_transaction`: a single direct lookup (hosted checkout payments)
  with the secret key.

States: polling -> verified | failed | timed_out. Only a nested `pending`
data status keeps the loop polling; any other non-success status ends it
on the spot, even on the first attempt.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from easypay.error_handler import (
    EasyPayError,
    ProviderRejection,
    UnexpectedProviderState,
    VerificationTimeout,
)
from easypay.integrations.contracts.interfaces import VerificationOutcome, VerificationState
from easypay.integrations.policy.response_wrappers import (
    STATUS_FAILED,
    STATUS_PENDING,
    STATUS_SUCCESS,
    VerificationResponseModel,
    normalize_verification_response,
)

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

TIMEOUT_MESSAGE = "Payment verification timed out"


def _verified(response: VerificationResponseModel, attempts: int) -> VerificationOutcome:
    return VerificationOutcome(
        state=VerificationState.VERIFIED,
        reference=response.reference,
        attempts=attempts,
        amount=response.amount,
        status=response.data_status or response.status,
        created_at=response.created_at,
        message=response.message,
        raw=response.raw,
    )


def _failed(response: VerificationResponseModel, attempts: int, message: str, unexpected: bool = False) -> VerificationOutcome:
    return VerificationOutcome(
        state=VerificationState.FAILED,
        reference=response.reference,
        attempts=attempts,
        status=response.status,
        message=message,
        raw=response.raw,
        unexpected=unexpected,
    )


async def poll_verification(
    client,
    reference: str,
    payment_method: str,
    token: str,
    *,
    max_retry: int = 3,
    retry_delay: float = 3,
    sleep: Sleep = asyncio.sleep,
) -> VerificationOutcome:
    attempts = 0
    while attempts < max_retry:
        raw = await client.verify_charge(reference, payment_method, token)
        attempts += 1
        response = normalize_verification_response(raw, fallback_reference=reference)

        if response.status == STATUS_SUCCESS:
            logger.info("[EASYPAY] Payment %s verified after %d attempt(s)", reference, attempts)
            return _verified(response, attempts)

        if response.data_status != STATUS_PENDING:
            logger.info("[EASYPAY] Payment %s failed verification: %s", reference, response.message)
            return _failed(response, attempts, f"Payment verification failed: {response.message}")

        logger.debug("Payment %s still pending (attempt %d/%d)", reference, attempts, max_retry)
        if attempts < max_retry:
            await sleep(retry_delay)

    logger.info("[EASYPAY] Payment %s still pending after %d attempt(s)", reference, attempts)
    return VerificationOutcome(
        state=VerificationState.TIMED_OUT,
        reference=reference,
        attempts=attempts,
        status=STATUS_PENDING,
        message=TIMEOUT_MESSAGE,
    )


async def lookup_transaction(client, reference: str, token: str) -> VerificationOutcome:
    raw = await client.lookup_transaction(reference, token)
    response = normalize_verification_response(raw, fallback_reference=reference)

    if response.status == STATUS_SUCCESS:
        logger.info("[EASYPAY] Transaction %s verified", reference)
        return _verified(response, 1)
    if response.status == STATUS_FAILED:
        return _failed(response, 1, f"Transaction verification failed: {response.message}")
    return _failed(
        response,
        1,
        f"Unexpected transaction status '{response.status or 'missing'}': {response.message}",
        unexpected=True,
    )


def raise_for_outcome(outcome: VerificationOutcome) -> None:
    """Raise the taxonomy error matching a non-verified terminal outcome."""
    if outcome.state is VerificationState.VERIFIED:
        return
    if outcome.state is VerificationState.TIMED_OUT:
        raise VerificationTimeout(outcome.message)
    if outcome.state is VerificationState.FAILED:
        error_type = UnexpectedProviderState if outcome.unexpected else ProviderRejection
        raise error_type(outcome.message, payload=outcome.raw)
    raise EasyPayError(f"Verification stopped in non-terminal state '{outcome.state.value}'")
