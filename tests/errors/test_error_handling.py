"""
Error handling tests for the SpaceX data agent.

Tests cover the error classification system and how each kind of failure
surfaces at the call boundary.
"""

from decimal import Decimal

import pytest

from spacex_agent.config.validation import ValidationError
from spacex_agent.errors import (
    ConfigurationError,
    DuplicateEntrypointError,
    EntrypointError,
    EntrypointNotFoundError,
    HandlerError,
    InvalidInputError,
    LedgerStorageError,
    PaymentRequiredError,
    SystemFailureError,
    UpstreamError,
)


class TestErrorClassification:
    """Test error classification system."""

    def test_call_error_hierarchy(self):
        """Test that call errors are recoverable entrypoint errors."""
        base_error = EntrypointError("base error")
        assert base_error.recoverable is True
        assert base_error.context == {}

        for error in (
            EntrypointNotFoundError("x"),
            InvalidInputError("bad"),
            PaymentRequiredError("pay"),
            UpstreamError("down", status=503),
            HandlerError("boom"),
        ):
            assert isinstance(error, EntrypointError)
            assert error.recoverable is True

    def test_kinds(self):
        """Test that each error reports its kind."""
        assert EntrypointNotFoundError("x").kind == "NotFound"
        assert InvalidInputError("bad").kind == "InvalidInput"
        assert PaymentRequiredError("pay").kind == "PaymentRequired"
        assert UpstreamError("down").kind == "UpstreamError"
        assert HandlerError("boom").kind == "HandlerError"

    def test_system_failure_hierarchy(self):
        """Test that system failures are not recoverable."""
        ledger_error = LedgerStorageError("disk", operation="append", target="ledger.db")
        assert isinstance(ledger_error, SystemFailureError)
        assert ledger_error.recoverable is False
        assert ledger_error.operation == "append"

        config_error = ConfigurationError("bad config", errors=["x"])
        assert isinstance(config_error, SystemFailureError)
        assert config_error.errors == ["x"]

    def test_system_failures_are_not_call_errors(self):
        """Test that system failures cannot be mistaken for call errors."""
        assert not isinstance(LedgerStorageError("disk"), EntrypointError)
        assert not issubclass(DuplicateEntrypointError, EntrypointError)


class TestErrorPayloads:
    """Test structured error payloads."""

    def test_invalid_input_details(self):
        """Test that field errors are listed in details."""
        error = InvalidInputError(
            "Invalid input: query (Required)",
            field_errors=[ValidationError(field="query", message="Required", value=None)]
        )
        assert error.fields == ["query"]
        assert error.to_dict() == {
            "kind": "InvalidInput",
            "message": "Invalid input: query (Required)",
            "details": {"fields": [{"field": "query", "reason": "Required"}]},
        }

    def test_payment_required_details(self):
        """Test that the price is rendered as a decimal string."""
        error = PaymentRequiredError("pay", price=Decimal("0.005"), entrypoint_key="full-report")
        assert error.details() == {"price": "0.005", "entrypoint_key": "full-report"}

    def test_upstream_details(self):
        """Test that upstream status and URL are reported."""
        error = UpstreamError("API error: 500", status=500, url="https://api/x")
        assert error.details() == {"status": 500, "url": "https://api/x"}

    def test_context_merged_into_details(self):
        """Test that context is carried into details."""
        error = HandlerError("boom", entrypoint_key="rockets", context={"attempt": 1})
        assert error.details() == {"attempt": 1, "entrypoint_key": "rockets"}


class TestErrorsAtCallBoundary:
    """Test how failures surface through the agent."""

    def test_handler_failure_is_structured(self, agent, upstream_responses):
        """Test that malformed upstream data becomes a HandlerError result."""
        responses = dict(upstream_responses)
        responses["rockets"] = None  # not a list
        agent.fetcher.responses = responses

        result = agent.call("rockets", {})
        assert result["error"]["kind"] == "HandlerError"
        assert result["error"]["details"]["entrypoint_key"] == "rockets"

    def test_ledger_failure_propagates(self, agent, monkeypatch):
        """Test that a ledger failure is not converted into a call result."""
        def fail(*args, **kwargs):
            raise LedgerStorageError("disk full", operation="append")

        monkeypatch.setattr(agent.tracker, "record", fail)

        with pytest.raises(LedgerStorageError):
            agent.call("rockets", {})

    def test_failed_call_leaves_ledger_untouched(self, agent):
        """Test that rejected calls do not record transactions."""
        agent.call("launch-lookup", {})
        agent.call("missing")

        assert len(agent.tracker) == 0
        assert list(agent.tracker.all_since()) == []

    def test_expense_validation(self, agent):
        """Test that invalid expenses are refused."""
        with pytest.raises(ValueError):
            agent.record_expense("-1", "upstream")
        with pytest.raises(TypeError):
            agent.record_expense(0.5, "upstream")
        assert len(agent.tracker) == 0
