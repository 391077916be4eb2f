"""Unit tests for the entrypoint registry and dispatch pipeline."""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from spacex_agent.errors import (
    DuplicateEntrypointError,
    EntrypointNotFoundError,
    HandlerError,
    InvalidInputError,
    LedgerStorageError,
    PaymentRequiredError,
    UpstreamError,
)
from spacex_agent.ledger.models import Direction
from spacex_agent.payments.base import PaymentResult, PaymentStatus, PaymentVerifier
from spacex_agent.registry import CallResult, EntrypointDefinition, EntrypointRegistry
from spacex_agent.validation.contract import FieldSpec, contract


class ShortPayingVerifier(PaymentVerifier):
    """Verifies every charge but reports a smaller amount."""

    def __init__(self):
        super().__init__("short")

    def _verify(self, charge):
        return PaymentResult(status=PaymentStatus.VERIFIED, amount=Decimal("0.0001"))


def _echo(params):
    return {"echo": params}


class TestEntrypointDefinition:
    """Test EntrypointDefinition."""

    def test_free_definition(self):
        """Entrypoints without a price are free."""
        definition = EntrypointDefinition(key="free", description="", handler=_echo)
        assert not definition.is_paid
        assert definition.price_amount is None

    def test_zero_price_is_paid(self):
        """A price of zero still goes through payment."""
        definition = EntrypointDefinition(key="zero", description="", handler=_echo, price="0")
        assert definition.is_paid
        assert definition.price_amount == Decimal("0")

    def test_invalid_price_rejected(self):
        """Prices must be non-negative decimal strings."""
        with pytest.raises(ValueError):
            EntrypointDefinition(key="bad", description="", handler=_echo, price="-1")

    def test_empty_key_rejected(self):
        """Keys must be non-empty."""
        with pytest.raises(ValueError):
            EntrypointDefinition(key="", description="", handler=_echo)


class TestRegistration:
    """Test registering and looking up entrypoints."""

    def test_register_and_get(self, tracker):
        """Registered definitions are found by key."""
        registry = EntrypointRegistry(tracker=tracker)
        definition = EntrypointDefinition(key="echo", description="Echo", handler=_echo)
        registry.register(definition)

        assert registry.get("echo") is definition
        assert "echo" in registry
        assert len(registry) == 1
        assert registry.keys() == ["echo"]

    def test_duplicate_key_rejected(self, tracker):
        """Registering the same key twice fails."""
        registry = EntrypointRegistry(tracker=tracker)
        registry.register(EntrypointDefinition(key="echo", description="", handler=_echo))

        with pytest.raises(DuplicateEntrypointError):
            registry.register(EntrypointDefinition(key="echo", description="", handler=_echo))

    def test_unknown_key(self, tracker):
        """Unknown keys raise EntrypointNotFoundError."""
        registry = EntrypointRegistry(tracker=tracker)
        with pytest.raises(EntrypointNotFoundError) as exc_info:
            registry.get("missing")
        assert exc_info.value.kind == "NotFound"

    def test_list_entrypoints_in_registration_order(self, tracker):
        """Listing preserves registration order."""
        registry = EntrypointRegistry(tracker=tracker)
        for key in ("b", "a", "c"):
            registry.register(EntrypointDefinition(key=key, description=key, handler=_echo))

        assert [entry["key"] for entry in registry.list_entrypoints()] == ["b", "a", "c"]


class TestDispatch:
    """Test the dispatch pipeline."""

    def setup_method(self):
        self.handler = Mock(return_value={"ok": True})
        self.paid = EntrypointDefinition(
            key="paid",
            description="Paid",
            handler=self.handler,
            input_contract=contract(FieldSpec("query", "string", required=True)),
            price="0.001",
        )

    def test_invalid_input_names_field(self, tracker, approving_verifier):
        """Contract failures name the field and skip payment and handler."""
        registry = EntrypointRegistry(tracker=tracker, verifier=approving_verifier)
        registry.register(self.paid)

        with pytest.raises(InvalidInputError) as exc_info:
            registry.dispatch("paid", {})

        assert exc_info.value.fields == ["query"]
        assert "query" in exc_info.value.message
        self.handler.assert_not_called()
        assert len(tracker) == 0

    def test_paid_call_records_incoming(self, tracker, approving_verifier):
        """Verified charges are recorded before the handler runs."""
        registry = EntrypointRegistry(tracker=tracker, verifier=approving_verifier)
        registry.register(self.paid)

        output = registry.dispatch("paid", {"query": "x"}, payment_proof="proof-1")

        assert output == {"ok": True}
        self.handler.assert_called_once_with({"query": "x"})
        record = tracker.get(0)
        assert record.direction == Direction.INCOMING
        assert record.amount == Decimal("0.001")
        assert record.entrypoint_key == "paid"
        assert record.metadata["verifier"] == "static"
        assert record.metadata["reference"] == "proof-1"

    def test_rejected_payment(self, tracker, rejecting_verifier):
        """Rejected charges raise PaymentRequired and record nothing."""
        registry = EntrypointRegistry(tracker=tracker, verifier=rejecting_verifier)
        registry.register(self.paid)

        with pytest.raises(PaymentRequiredError) as exc_info:
            registry.dispatch("paid", {"query": "x"})

        assert exc_info.value.price == Decimal("0.001")
        self.handler.assert_not_called()
        assert len(tracker) == 0

    def test_no_verifier_configured(self, tracker):
        """Priced entrypoints need a verifier."""
        registry = EntrypointRegistry(tracker=tracker)
        registry.register(self.paid)

        with pytest.raises(PaymentRequiredError):
            registry.dispatch("paid", {"query": "x"})

    def test_amount_mismatch_rejected(self, tracker):
        """A verified payment for the wrong amount is not accepted."""
        registry = EntrypointRegistry(tracker=tracker, verifier=ShortPayingVerifier())
        registry.register(self.paid)

        with pytest.raises(PaymentRequiredError):
            registry.dispatch("paid", {"query": "x"})
        assert len(tracker) == 0

    def test_free_call_skips_payment(self, tracker):
        """Free entrypoints run without a verifier and record nothing."""
        registry = EntrypointRegistry(tracker=tracker)
        registry.register(EntrypointDefinition(key="free", description="", handler=_echo))

        assert registry.dispatch("free") == {"echo": {}}
        assert len(tracker) == 0

    def test_handler_exception_wrapped(self, tracker):
        """Unexpected handler exceptions become HandlerError."""
        def broken(params):
            raise KeyError("boom")

        registry = EntrypointRegistry(tracker=tracker)
        registry.register(EntrypointDefinition(key="broken", description="", handler=broken))

        with pytest.raises(HandlerError) as exc_info:
            registry.dispatch("broken")
        assert exc_info.value.entrypoint_key == "broken"
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_upstream_error_passes_through(self, tracker):
        """Upstream errors keep their kind and status."""
        def upstream(params):
            raise UpstreamError("API error: 503", status=503)

        registry = EntrypointRegistry(tracker=tracker)
        registry.register(EntrypointDefinition(key="up", description="", handler=upstream))

        with pytest.raises(UpstreamError) as exc_info:
            registry.dispatch("up")
        assert exc_info.value.status == 503

    def test_charge_kept_when_handler_fails(self, tracker, approving_verifier):
        """A verified payment stays in the ledger even if the handler fails."""
        failing = EntrypointDefinition(
            key="failing",
            description="",
            handler=Mock(side_effect=UpstreamError("API error: 500", status=500)),
            price="0.002",
        )
        registry = EntrypointRegistry(tracker=tracker, verifier=approving_verifier)
        registry.register(failing)

        with pytest.raises(UpstreamError):
            registry.dispatch("failing")
        assert len(tracker) == 1


class TestCall:
    """Test the structured call boundary."""

    def test_success_result(self, tracker):
        """Successful calls carry output only."""
        registry = EntrypointRegistry(tracker=tracker)
        registry.register(EntrypointDefinition(key="echo", description="", handler=_echo))

        result = registry.call("echo", {"a": 1})
        assert isinstance(result, CallResult)
        assert result.ok
        assert result.to_dict() == {"output": {"echo": {}}}

    def test_error_result(self, tracker):
        """Call errors become structured error payloads."""
        registry = EntrypointRegistry(tracker=tracker)
        result = registry.call("missing")

        assert not result.ok
        assert result.to_dict()["error"]["kind"] == "NotFound"
        assert result.error["details"]["key"] == "missing"

    def test_system_failure_propagates(self, tracker):
        """System failures are not turned into results."""
        def fatal(params):
            raise LedgerStorageError("disk gone", operation="append")

        registry = EntrypointRegistry(tracker=tracker)
        registry.register(EntrypointDefinition(key="fatal", description="", handler=fatal))

        with pytest.raises(LedgerStorageError):
            registry.call("fatal")
