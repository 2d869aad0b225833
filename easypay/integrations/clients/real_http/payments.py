"""
Real Payments HTTP Client.

Talks to the four gateway endpoints. Every POST is form-encoded; every body
is expected to be a JSON object carrying at least a `status` field.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from easypay.error_handler import TransportError

logger = logging.getLogger(__name__)


class Endpoints(BaseModel):
    inline_charge: str = "https://inline.chapaservices.net/v1/inline/charge"
    inline_verify: str = "https://inline.chapaservices.net/v1/inline/validate"
    hosted_initialize: str = "https://api.chapa.co/v1/transaction/initialize"
    transaction_verify: str = "https://api.chapa.co/v1/transaction/verify"


class RealPaymentsClient:
    def __init__(
        self,
        endpoints: Optional[Endpoints] = None,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.endpoints = endpoints or Endpoints()
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    async def initiate_charge(self, fields: Dict[str, str], token: str) -> Dict[str, Any]:
        return await self._request("POST", self.endpoints.inline_charge, token, data=fields)

    async def verify_charge(self, reference: str, payment_method: str, token: str) -> Dict[str, Any]:
        fields = {"reference": reference, "payment_method": payment_method}
        return await self._request("POST", self.endpoints.inline_verify, token, data=fields)

    async def initialize_hosted(self, fields: Dict[str, str], token: str) -> Dict[str, Any]:
        return await self._request("POST", self.endpoints.hosted_initialize, token, data=fields)

    async def lookup_transaction(self, reference: str, token: str) -> Dict[str, Any]:
        url = f"{self.endpoints.transaction_verify.rstrip('/')}/{reference}"
        return await self._request("GET", url, token)

    async def _request(
        self,
        method: str,
        url: str,
        token: str,
        data: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        logger.debug("%s %s fields=%s", method, url, sorted(data or {}))
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
                response = await client.request(method, url, data=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Request error connecting to payment gateway {url}: {e}")
            raise TransportError(str(e) or type(e).__name__) from e

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None

        if body is None:
            if response.is_success:
                raise TransportError(f"Empty or non-JSON response from {url} (HTTP {response.status_code})")
            logger.error(f"HTTP error from payment gateway: {response.status_code} {response.text}")
            raise TransportError(f"Request failed with status code {response.status_code}")

        if not response.is_success:
            # Gateways report rejections as 4xx with a JSON status/message body.
            logger.info("Gateway answered HTTP %s with a JSON body", response.status_code)
        return body
