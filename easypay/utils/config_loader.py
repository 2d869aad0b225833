"""
Configuration loader for the payment client
"""

import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from easypay.integrations.clients.real_http.payments import Endpoints
from easypay.integrations.contracts.interfaces import PaymentMethod
from easypay.integrations.contracts.payments import generate_reference

logger = logging.getLogger(__name__)

_URL_RE = re.compile(r"^https?://[^\s/$.?#][^\s]*$", re.IGNORECASE)

ENV_PREFIX = "EASYPAY_"


def _noop(*_args: Any) -> None:
    return None


class ClientConfig(BaseModel):
    """Per-client configuration. The secret key is only checked when used."""

    model_config = ConfigDict(extra="forbid")

    public_key: str = Field(min_length=8)
    secret_key: Optional[str] = Field(default=None, min_length=8)
    payment_options: List[PaymentMethod] = Field(default_factory=lambda: list(PaymentMethod), min_length=1)
    generate_ref_id: Callable[[], str] = generate_reference
    callback_url: Optional[str] = None
    return_url: Optional[str] = None
    on_success: Callable[[Dict[str, Any]], None] = _noop
    on_failure: Callable[[str], None] = _noop
    max_retry: int = Field(default=3, ge=1, le=100)
    retry_delay: float = Field(default=3, ge=0.0)
    timeout_seconds: float = Field(default=20.0, gt=0.0)
    endpoints: Endpoints = Field(default_factory=Endpoints)

    @field_validator("public_key")
    @classmethod
    def check_public_key(cls, value: str) -> str:
        if not value.startswith("CHAPUBK"):
            raise ValueError("String must start with 'CHAPUBK'")
        return value

    @field_validator("secret_key")
    @classmethod
    def check_secret_key(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.startswith("CHASECK"):
            raise ValueError("String must start with 'CHASECK'")
        return value

    @field_validator("callback_url", "return_url")
    @classmethod
    def check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _URL_RE.match(value):
            raise ValueError("must be a valid http(s) URL")
        return value


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for key in ("public_key", "secret_key", "callback_url", "return_url", "max_retry", "retry_delay", "timeout_seconds"):
        value = environ.get(f"{ENV_PREFIX}{key.upper()}")
        if value:
            overrides[key] = value
    options = environ.get(f"{ENV_PREFIX}PAYMENT_OPTIONS")
    if options:
        overrides["payment_options"] = [o.strip().lower() for o in options.split(",") if o.strip()]
    return overrides


def load_client_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> ClientConfig:
    """
    Build a validated ClientConfig from a YAML file, the environment and keyword overrides

    Args:
        config_path: Optional YAML file with ClientConfig fields (hooks excluded)
        environ: Mapping to read EASYPAY_* variables from. Defaults to os.environ
            after loading a .env file
        **overrides: Highest-priority values, e.g. on_success/on_failure hooks

    Returns:
        Validated ClientConfig object

    Raises:
        FileNotFoundError: If config_path is given but doesn't exist
        ValidationError: If the merged config doesn't match the schema
    """
    config_data: Dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    if environ is None:
        load_dotenv()
        environ = os.environ

    config_data.update(_env_overrides(environ))
    config_data.update(overrides)

    try:
        config = ClientConfig(**config_data)
        logger.info("Loaded payment client config (methods=%s)", [m.value for m in config.payment_options])
        return config
    except ValidationError as e:
        logger.error(f"Config validation failed: {e}")
        raise
