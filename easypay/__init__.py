"""
easypay: one async client for the hosted Chapa checkout and the inline
mobile-money channels (telebirr, cbebirr, ebirr, mpesa).

    from easypay import EasyPay

    client = EasyPay(public_key="CHAPUBK-...", secret_key="CHASECK-...")
    result = await client.create_payment(mobile="0900123456", amount=500, payment_type="telebirr")
"""

from .client import EasyPay
from .error_handler import (
    ConfigurationError,
    EasyPayError,
    PaymentValidationError,
    ProviderRejection,
    TransportError,
    UnexpectedProviderState,
    VerificationTimeout,
)
from .integrations.contracts.interfaces import (
    PaymentMethod,
    PaymentRecord,
    Result,
    VerificationOutcome,
    VerificationState,
)
from .integrations.contracts.payments import PaymentRequest
from .utils.config_loader import ClientConfig, load_client_config

__all__ = [
    "EasyPay", "ClientConfig", "load_client_config",
    # contracts
    "PaymentMethod", "PaymentRecord", "PaymentRequest", "Result",
    "VerificationOutcome", "VerificationState",
    # errors
    "EasyPayError", "PaymentValidationError", "ConfigurationError", "ProviderRejection",
    "UnexpectedProviderState", "TransportError", "VerificationTimeout",
]
