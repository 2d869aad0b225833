"""Pytest fixtures for the payment client tests."""

import pytest

from easypay import EasyPay
from easypay.integrations.clients.mocks.payments import MockPaymentsClient

PUBLIC_KEY = "CHAPUBK_TEST-abc123"
SECRET_KEY = "CHASECK_TEST-xyz789"


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers every requested delay."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


class HookRecorder:
    def __init__(self):
        self.successes = []
        self.failures = []

    def on_success(self, info):
        self.successes.append(info)

    def on_failure(self, message):
        self.failures.append(message)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def hooks():
    return HookRecorder()


@pytest.fixture
def make_client(sleep, hooks):
    """Build an EasyPay wired to a scripted MockPaymentsClient."""

    def _make(mock=None, **options):
        mock = mock or MockPaymentsClient()
        options.setdefault("public_key", PUBLIC_KEY)
        options.setdefault("on_success", hooks.on_success)
        options.setdefault("on_failure", hooks.on_failure)
        return EasyPay(http_client=mock, sleep=sleep, **options), mock

    return _make
