"""
EasyPay client.

Public surface of the package: create a payment (validated, routed, and for
inline methods verified before returning), verify an inline payment by
polling, or look up a hosted checkout transaction. Every operation returns a
`Result`; no exception escapes a public method.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping, Optional, Union

from easypay.error_handler import (
    EasyPayError,
    ErrorHandler,
    PaymentValidationError,
    TransportError,
)
from easypay.integrations.clients.real_http.payments import RealPaymentsClient
from easypay.integrations.contracts.interfaces import PaymentMethod, Result
from easypay.integrations.contracts.payments import (
    PaymentRequest,
    build_payment_record,
    generate_reference,
    resolve_method,
)
from easypay.integrations.policy.payment_service import (
    MISSING_SECRET_LOOKUP_MESSAGE,
    TRANSACTION_CONTEXT,
    VERIFICATION_CONTEXT,
    PaymentService,
    require_secret_key,
    verified_result,
)
from easypay.integrations.policy.verification_service import (
    Sleep,
    lookup_transaction,
    poll_verification,
    raise_for_outcome,
)
from easypay.utils.config_loader import ClientConfig

logger = logging.getLogger(__name__)


class EasyPay:
    """
    Parameters
    ----------
    config : ClientConfig or mapping, optional
        Client configuration. Keyword options are merged on top of a mapping,
        or used alone when `config` is omitted.
    http_client : object, optional
        Anything exposing the RealPaymentsClient coroutine methods, e.g.
        MockPaymentsClient. Defaults to a RealPaymentsClient.
    transport : httpx.AsyncBaseTransport, optional
        Passed to the default RealPaymentsClient.
    sleep : coroutine function, optional
        Used for the delay between verification polls. Default asyncio.sleep.
    """

    def __init__(
        self,
        config: Union[ClientConfig, Mapping[str, Any], None] = None,
        *,
        http_client=None,
        transport=None,
        sleep: Sleep = asyncio.sleep,
        **options: Any,
    ) -> None:
        if isinstance(config, ClientConfig):
            self.config = ClientConfig(**{**config.model_dump(), **options}) if options else config
        else:
            self.config = ClientConfig(**{**dict(config or {}), **options})

        self.http_client = http_client or RealPaymentsClient(
            endpoints=self.config.endpoints,
            timeout_seconds=self.config.timeout_seconds,
            transport=transport,
        )
        self.handler = ErrorHandler(on_success=self.config.on_success, on_failure=self.config.on_failure)
        self.sleep = sleep
        self.payments = PaymentService(self.http_client, self.config, self.handler, sleep=sleep)
        self._last_error: Optional[str] = None

        logger.info(
            "[EASYPAY] Client initialised (methods=%s, max_retry=%d, retry_delay=%ss)",
            [m.value for m in self.config.payment_options],
            self.config.max_retry,
            self.config.retry_delay,
        )

    @property
    def last_error(self) -> Optional[str]:
        """Message of the most recent failed operation; None after a success."""
        return self._last_error

    def generate_ref_id(self, size: Optional[int] = None) -> str:
        if size is None:
            return self.config.generate_ref_id()
        return generate_reference(size)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def create_payment(
        self,
        request: Union[PaymentRequest, Mapping[str, Any], None] = None,
        **fields: Any,
    ) -> Result:
        try:
            if isinstance(request, PaymentRequest):
                payment_request = request
            else:
                payment_request = PaymentRequest.from_dict({**dict(request or {}), **fields})
            record = build_payment_record(
                payment_request,
                generate_ref_id=self.config.generate_ref_id,
                allowed_methods=self.config.payment_options,
            )
        except PaymentValidationError as e:
            return self._finish(self.handler.failure(e))
        except Exception as e:
            return self._finish(self.handler.handle_exception(e, "Error while creating payment"))

        try:
            result = await self.payments.submit(record)
        except Exception as e:
            result = self.handler.handle_exception(e, TRANSACTION_CONTEXT)
        return self._finish(result)

    async def verify_payment(self, reference: str, payment_method: Union[str, PaymentMethod]) -> Result:
        context = VERIFICATION_CONTEXT
        try:
            method = resolve_method(payment_method) if payment_method else None
            errors = {}
            if not reference:
                errors["reference"] = ["reference is required"]
            if method is None:
                errors["payment_method"] = [f"Unsupported payment method '{payment_method}'"]
            if errors:
                raise PaymentValidationError(errors, message="Verification request is invalid")

            outcome = await poll_verification(
                self.http_client,
                reference,
                method.value,
                self.config.public_key,
                max_retry=self.config.max_retry,
                retry_delay=self.config.retry_delay,
                sleep=self.sleep,
            )
            raise_for_outcome(outcome)
            result = verified_result(self.handler, outcome)
        except TransportError as e:
            result = self.handler.failure(e, context=context)
        except EasyPayError as e:
            result = self.handler.failure(e)
        except Exception as e:
            result = self.handler.handle_exception(e, context)
        return self._finish(result)

    async def verify_transaction(self, reference: str) -> Result:
        context = "Error during transaction verification"
        try:
            if not reference:
                raise PaymentValidationError({"reference": ["reference is required"]}, message="Verification request is invalid")
            secret_key = require_secret_key(self.config, MISSING_SECRET_LOOKUP_MESSAGE)
            outcome = await lookup_transaction(self.http_client, reference, secret_key)
            raise_for_outcome(outcome)
            result = verified_result(self.handler, outcome, message="Transaction verified successfully")
        except TransportError as e:
            result = self.handler.failure(e, context=context)
        except EasyPayError as e:
            result = self.handler.failure(e)
        except Exception as e:
            result = self.handler.handle_exception(e, context)
        return self._finish(result)

    def _finish(self, result: Result) -> Result:
        self._last_error = None if result.success else result.message
        return result
