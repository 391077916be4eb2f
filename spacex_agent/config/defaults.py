"""Default configuration parameters for the SpaceX data agent."""

from dataclasses import dataclass


@dataclass(frozen=True)
class AgentParams:
    """Agent identity published in the manifest."""
    name: str = "spacex-data"
    version: str = "1.0.0"
    description: str = (
        "Real-time SpaceX launch data, rocket specs, and Starlink satellite "
        "tracking for AI agents. Free overview, paid deep data."
    )


@dataclass(frozen=True)
class UpstreamParams:
    """Upstream SpaceX API parameters."""
    base_url: str = "https://api.spacexdata.com/v4"
    timeout_seconds: float = 30.0                    # Per-request timeout
    max_parallel_fetches: int = 5                    # Worker threads for fetch_all
    user_agent: str = "spacex-data-agent/1.0"


@dataclass(frozen=True)
class PaymentParams:
    """Payment verification parameters."""
    method: str = "static"                           # static | facilitator
    static_approve: bool = False                     # Static verifier decision
    facilitator_url: str = "https://facilitator.daydreams.systems"
    pay_to: str = ""                                 # Receivable address
    network: str = "base"
    timeout_seconds: float = 15.0


@dataclass(frozen=True)
class LedgerParams:
    """Transaction ledger parameters."""
    db_path: str = ""                                # Empty keeps the ledger in memory


@dataclass(frozen=True)
class AnalyticsParams:
    """Analytics query parameters."""
    default_transaction_limit: int = 50


@dataclass(frozen=True)
class ServerParams:
    """Parameters the external HTTP layer reads."""
    port: int = 3000
    base_url: str = "https://spacex-data-production.up.railway.app"


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    agent: AgentParams
    upstream: UpstreamParams
    payments: PaymentParams
    ledger: LedgerParams
    analytics: AnalyticsParams
    server: ServerParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        agent=AgentParams(),
        upstream=UpstreamParams(),
        payments=PaymentParams(),
        ledger=LedgerParams(),
        analytics=AnalyticsParams(),
        server=ServerParams(),
    )


def config_from_dict(data: dict) -> DefaultConfig:
    """Build a typed configuration from a merged configuration dictionary."""
    return DefaultConfig(
        agent=AgentParams(**data.get("agent", {})),
        upstream=UpstreamParams(**data.get("upstream", {})),
        payments=PaymentParams(**data.get("payments", {})),
        ledger=LedgerParams(**data.get("ledger", {})),
        analytics=AnalyticsParams(**data.get("analytics", {})),
        server=ServerParams(**data.get("server", {})),
    )
