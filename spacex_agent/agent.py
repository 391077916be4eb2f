"""
SpaceX data agent coordinator.

Wires configuration, the upstream fetcher, the payment verifier, the
transaction ledger and the entrypoint registry into one callable agent.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Union

import structlog

from .analytics.entrypoints import build_analytics_entrypoints
from .config.defaults import DefaultConfig
from .config.loader import load_config
from .ledger.models import Direction, TransactionRecord
from .ledger.store import TransactionStore
from .ledger.tracker import TransactionTracker
from .payments import PaymentVerifier, create_payment_verifier
from .registry.models import CallResult
from .registry.registry import EntrypointRegistry
from .spacex.entrypoints import build_spacex_entrypoints
from .spacex.handlers import SpaceXHandlers
from .upstream.fetcher import UpstreamFetcher
from .utils.time import utc_now

logger = structlog.get_logger(__name__)

ERC8004_TYPE = "https://eips.ethereum.org/EIPS/eip-8004#registration-v1"
A2A_PROTOCOL_VERSION = "0.3.0"


class SpaceXDataAgent:
    """
    Main coordinator for the SpaceX data agent.

    Every call goes through the registry:
    Input Contract → Payment → Ledger → Handler → Upstream API
    """

    def __init__(
        self,
        config: Optional[DefaultConfig] = None,
        fetcher: Optional[UpstreamFetcher] = None,
        verifier: Optional[PaymentVerifier] = None,
        tracker: Optional[TransactionTracker] = None,
        clock: Callable[[], datetime] = utc_now
    ) -> None:
        """Initialize the agent, building any collaborator not supplied."""
        self.logger = logger
        self.config = config if config is not None else load_config()

        self.fetcher = fetcher if fetcher is not None else UpstreamFetcher(self.config.upstream)
        self.verifier = verifier if verifier is not None else create_payment_verifier(
            self.config.payments,
            resource_base_url=self.config.server.base_url
        )

        if tracker is None:
            store = None
            if self.config.ledger.db_path:
                store = TransactionStore(self.config.ledger.db_path)
            tracker = TransactionTracker(store=store, clock=clock)
        self.tracker = tracker

        self.registry = EntrypointRegistry(tracker=self.tracker, verifier=self.verifier)

        data_entrypoints = build_spacex_entrypoints(SpaceXHandlers(self.fetcher, clock=clock))
        self.data_keys = [definition.key for definition in data_entrypoints]

        definitions = data_entrypoints + build_analytics_entrypoints(
            self.tracker,
            default_limit=self.config.analytics.default_transaction_limit
        )
        for definition in definitions:
            self.registry.register(definition)

        self.logger.info(
            "SpaceX data agent initialized",
            agent=self.config.agent.name,
            entrypoints=len(self.registry),
            payment_method=self.verifier.name,
            persistent_ledger=bool(self.config.ledger.db_path)
        )

    def call(
        self,
        key: str,
        raw_input: Any = None,
        payment_proof: Optional[str] = None
    ) -> dict[str, Any]:
        """
        Structured call boundary for the routing layer.

        Args:
            key: Entrypoint key
            raw_input: Untyped input object
            payment_proof: Payment header value for priced entrypoints

        Returns:
            ``{"output": ...}`` or ``{"error": {"kind", "message", "details"}}``
        """
        return self.invoke(key, raw_input, payment_proof).to_dict()

    def invoke(
        self,
        key: str,
        raw_input: Any = None,
        payment_proof: Optional[str] = None
    ) -> CallResult:
        """Same as ``call`` but returns the CallResult object."""
        return self.registry.call(key, raw_input, payment_proof)

    def record_expense(
        self,
        amount: Union[Decimal, str],
        entrypoint_key: str,
        metadata: Optional[dict[str, Any]] = None
    ) -> TransactionRecord:
        """Record a payment the agent itself made (an outgoing expense)."""
        return self.tracker.record(
            direction=Direction.OUTGOING,
            amount=amount,
            entrypoint_key=entrypoint_key,
            metadata=metadata
        )

    def manifest(self) -> dict[str, Any]:
        """Agent card: identity plus every entrypoint with price and input."""
        agent = self.config.agent
        return {
            "name": agent.name,
            "version": agent.version,
            "description": agent.description,
            "url": self.config.server.base_url,
            "payments": {
                "method": self.config.payments.method,
                "network": self.config.payments.network,
                "payTo": self.config.payments.pay_to or None,
            },
            "entrypoints": self.registry.list_entrypoints(),
        }

    def registration_document(self) -> dict[str, Any]:
        """ERC-8004 registration document served under /.well-known/erc8004.json."""
        base_url = self.config.server.base_url.rstrip("/")
        data = [self.registry.get(key) for key in self.data_keys]
        paid = sum(1 for definition in data if definition.is_paid)
        free = len(data) - paid

        return {
            "type": ERC8004_TYPE,
            "name": self.config.agent.name,
            "description": (
                "Real-time SpaceX launch data, rocket specs, and Starlink satellite tracking. "
                f"{free} free + {paid} paid endpoints via x402."
            ),
            "image": f"{base_url}/icon.png",
            "services": [
                {"name": "web", "endpoint": base_url},
                {
                    "name": "A2A",
                    "endpoint": f"{base_url}/.well-known/agent.json",
                    "version": A2A_PROTOCOL_VERSION,
                },
            ],
            "x402Support": True,
            "active": True,
            "registrations": [],
            "supportedTrust": ["reputation"],
        }
