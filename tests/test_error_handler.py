from easypay.error_handler import (
    ConfigurationError,
    ErrorHandler,
    PaymentValidationError,
    ProviderRejection,
    UnexpectedProviderState,
)


def test_failure_builds_result_and_fires_hook_once():
    seen = []
    eh = ErrorHandler(on_failure=seen.append)
    out = eh.failure(ProviderRejection("declined"))
    assert out.success is False
    assert out.data is None
    assert out.message == "declined"
    assert out.error_type == "ProviderRejection"
    assert seen == ["declined"]


def test_failure_context_prefixes_message():
    eh = ErrorHandler()
    out = eh.failure(ConfigurationError("no key"), context="Error during transaction")
    assert out.message == "Error during transaction: no key"


def test_success_fires_success_hook_with_info():
    seen = []
    failures = []
    eh = ErrorHandler(on_success=seen.append, on_failure=failures.append)
    out = eh.success("done", data={"amount": "1"}, info={"amount": "1", "tx_ref": "r", "created_at": None})
    assert out.success is True
    assert out.error_type is None
    assert seen == [{"amount": "1", "tx_ref": "r", "created_at": None}]
    assert failures == []


def test_handle_exception_classifies_as_transport_error():
    eh = ErrorHandler()
    out = eh.handle_exception(Exception("boom"), context="Error during payment verification")
    assert out.error_type == "TransportError"
    assert out.message == "Error during payment verification: boom"


def test_validation_error_describes_every_field():
    err = PaymentValidationError({"mobile": ["bad", "worse"], "amount": ["low"]})
    assert err.message == "Payment validation failed: mobile: bad; mobile: worse; amount: low"
    assert err.error_type == "ValidationError"


def test_unexpected_state_is_a_provider_rejection():
    err = UnexpectedProviderState("odd")
    assert isinstance(err, ProviderRejection)
    assert err.error_type == "UnexpectedProviderState"


def test_raising_hook_is_logged_not_propagated(caplog):
    def explode(_message):
        raise RuntimeError("hook down")

    eh = ErrorHandler(on_failure=explode)
    out = eh.failure(ProviderRejection("declined"))
    assert out.message == "declined"
    assert "Notification hook" in caplog.text
