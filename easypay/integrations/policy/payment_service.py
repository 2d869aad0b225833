"""
Payment submission: routes a normalized PaymentRecord to the hosted-redirect
checkout or to the inline mobile-money charge, and turns the outcome into a
Result.

Hosted checkouts return a checkout URL and are confirmed later through a
direct transaction lookup. Inline charges are polled until a terminal
verification state before anything is returned to the caller.
"""

import asyncio
import logging
from enum import Enum
from typing import Dict

from easypay.error_handler import (
    ConfigurationError,
    EasyPayError,
    ErrorHandler,
    ProviderRejection,
    TransportError,
)
from easypay.integrations.contracts.interfaces import (
    HOSTED_METHODS,
    PaymentMethod,
    PaymentRecord,
    Result,
    VerificationOutcome,
)
from easypay.integrations.policy.response_wrappers import (
    STATUS_SUCCESS,
    normalize_charge_response,
    normalize_hosted_response,
)
from easypay.integrations.policy.verification_service import Sleep, poll_verification, raise_for_outcome
from easypay.utils.config_loader import ClientConfig

logger = logging.getLogger(__name__)

MISSING_SECRET_MESSAGE = (
    "Cannot initiate Chapa payment: Secret key is missing. Please provide your Chapa secret key."
)
MISSING_SECRET_LOOKUP_MESSAGE = (
    "Cannot verify Chapa transaction: Secret key is missing. Please provide your Chapa secret key."
)
VERIFIED_MESSAGE = "Payment verified successfully"
TRANSACTION_CONTEXT = "Error during transaction"
VERIFICATION_CONTEXT = "Error during payment verification"


class SubmissionStrategy(str, Enum):
    HOSTED_REDIRECT = "hosted_redirect"
    INLINE_MOBILE_MONEY = "inline_mobile_money"


def select_strategy(method: PaymentMethod) -> SubmissionStrategy:
    if method in HOSTED_METHODS:
        return SubmissionStrategy.HOSTED_REDIRECT
    return SubmissionStrategy.INLINE_MOBILE_MONEY


def require_secret_key(config: ClientConfig, message: str = MISSING_SECRET_MESSAGE) -> str:
    if not config.secret_key:
        raise ConfigurationError(message)
    return config.secret_key


def verified_result(handler: ErrorHandler, outcome: VerificationOutcome, message: str = VERIFIED_MESSAGE) -> Result:
    return handler.success(
        message,
        data=outcome.to_data(),
        info={"amount": outcome.amount, "tx_ref": outcome.reference, "created_at": outcome.created_at},
    )


class PaymentService:
    def __init__(self, client, config: ClientConfig, handler: ErrorHandler, sleep: Sleep = asyncio.sleep) -> None:
        self.client = client
        self.config = config
        self.handler = handler
        self.sleep = sleep

    async def submit(self, record: PaymentRecord) -> Result:
        strategy = select_strategy(record.payment_method)
        logger.info(
            "[EASYPAY] Submitting %s payment ref=%s amount=%s %s via %s",
            record.payment_method.value, record.tx_ref, record.amount, record.currency, strategy.value,
        )
        try:
            if strategy is SubmissionStrategy.HOSTED_REDIRECT:
                return await self.submit_hosted(record)
            return await self.submit_inline(record)
        except TransportError as e:
            return self.handler.failure(e, context=TRANSACTION_CONTEXT)
        except EasyPayError as e:
            return self.handler.failure(e)

    # ------------------------------------------------------------------
    # Hosted redirect
    # ------------------------------------------------------------------

    def hosted_fields(self, record: PaymentRecord) -> Dict[str, str]:
        fields = {
            "public_key": self.config.public_key,
            "tx_ref": record.tx_ref,
            "amount": record.amount,
            "currency": record.currency,
            "first_name": record.first_name or "",
            "last_name": record.last_name or "",
            "email": record.email or "",
            "phone_number": record.mobile,
        }
        if self.config.callback_url:
            fields["callback_url"] = self.config.callback_url
        if self.config.return_url:
            fields["return_url"] = self.config.return_url
        outbound = record.to_form_fields()
        for key in ("customization", "meta"):
            if key in outbound:
                fields[key] = outbound[key]
        return fields

    async def submit_hosted(self, record: PaymentRecord) -> Result:
        secret_key = require_secret_key(self.config)
        raw = await self.client.initialize_hosted(self.hosted_fields(record), secret_key)
        response = normalize_hosted_response(raw)

        if response.status != STATUS_SUCCESS:
            raise ProviderRejection(f"Chapa payment initiation failed: {response.message}", payload=response.raw)
        if not response.checkout_url:
            raise ProviderRejection("Chapa payment initiation failed: no checkout URL returned", payload=response.raw)

        return self.handler.success(
            response.message,
            data={"checkout_url": response.checkout_url, "tx_ref": record.tx_ref, "status": response.status},
            info={
                "message": response.message,
                "status": response.status,
                "data": {"checkout_url": response.checkout_url},
            },
        )

    # ------------------------------------------------------------------
    # Inline mobile money
    # ------------------------------------------------------------------

    async def submit_inline(self, record: PaymentRecord) -> Result:
        fields = record.to_form_fields()
        raw = await self.client.initiate_charge(fields, self.config.public_key)
        response = normalize_charge_response(raw)

        if response.status != STATUS_SUCCESS:
            raise ProviderRejection(f"Transaction initiation failed: {response.message}", payload=response.raw)

        reference = response.ref_id or record.tx_ref
        logger.info("[EASYPAY] Charge accepted ref=%s, verifying", reference)
        try:
            outcome = await poll_verification(
                self.client,
                reference,
                record.payment_method.value,
                self.config.public_key,
                max_retry=self.config.max_retry,
                retry_delay=self.config.retry_delay,
                sleep=self.sleep,
            )
        except TransportError as e:
            return self.handler.failure(e, context=VERIFICATION_CONTEXT)
        raise_for_outcome(outcome)
        return verified_result(self.handler, outcome)
