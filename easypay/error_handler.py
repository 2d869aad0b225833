"""Error taxonomy and result normalization for the payment client.

Internal layers raise the exceptions below. Each public operation hands the
terminal outcome to `ErrorHandler`, which builds the `Result`, fires the
configured notification hook once and logs the event.
"""
from typing import Any, Callable, Dict, List, Optional
import logging

from easypay.integrations.contracts.interfaces import Result

logger = logging.getLogger(__name__)


class EasyPayError(Exception):
    """Base class; `message` is what callers see in the failure Result."""

    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload or {}

    @property
    def error_type(self) -> str:
        return type(self).__name__


class PaymentValidationError(EasyPayError):
    """Request failed shape/semantic checks. Raised before any network call."""

    def __init__(self, field_errors: Dict[str, List[str]], message: str = "Payment validation failed") -> None:
        self.field_errors = field_errors
        super().__init__(f"{message}: {self.describe(field_errors)}")

    @property
    def error_type(self) -> str:
        return "ValidationError"

    @staticmethod
    def describe(field_errors: Dict[str, List[str]]) -> str:
        return "; ".join(f"{field}: {msg}" for field, messages in field_errors.items() for msg in messages)


class ConfigurationError(EasyPayError):
    """A credential required by the selected provider is missing."""


class ProviderRejection(EasyPayError):
    """The provider answered with a non-success status."""


class UnexpectedProviderState(ProviderRejection):
    """The provider answered with a status the client does not recognise."""


class TransportError(EasyPayError):
    """Network failure, or a response without a parseable JSON body."""


class VerificationTimeout(EasyPayError):
    """Retry budget exhausted while the payment was still pending."""


def _noop(*_args: Any) -> None:
    return None


class ErrorHandler:
    def __init__(
        self,
        on_success: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_failure: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.on_success = on_success or _noop
        self.on_failure = on_failure or _noop

    def success(self, message: str, data: Dict[str, Any], info: Dict[str, Any]) -> Result:
        logger.info("[EASYPAY] %s", message)
        self._notify(self.on_success, info)
        return Result(success=True, message=message, data=data)

    def failure(self, exc: EasyPayError, context: Optional[str] = None) -> Result:
        message = f"{context}: {exc.message}" if context else exc.message
        logger.warning("[EASYPAY] %s (%s)", message, exc.error_type)
        self._notify(self.on_failure, message)
        return Result(success=False, message=message, data=None, error_type=exc.error_type)

    def handle_exception(self, exc: Exception, context: str) -> Result:
        """Classify an unexpected exception as a transport failure."""
        logger.error("Unhandled exception in payment client: %s", exc, exc_info=True)
        return self.failure(TransportError(str(exc) or type(exc).__name__), context=context)

    @staticmethod
    def _notify(hook: Callable[..., None], argument: Any) -> None:
        # Hooks are fire-and-forget; a failing hook never alters the Result.
        try:
            hook(argument)
        except Exception:
            logger.exception("Notification hook %r raised", hook)
