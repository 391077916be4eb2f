"""Free analytics entrypoints over the payment ledger."""

from typing import Any

from ..ledger.tracker import TransactionTracker
from ..registry.models import EntrypointDefinition
from ..validation.contract import FieldSpec, contract
from .aggregator import export_csv, list_transactions, summarize


def _window_field() -> FieldSpec:
    return FieldSpec("windowMs", "integer", minimum=0, description="Time window in ms")


def build_analytics_entrypoints(
    tracker: TransactionTracker,
    default_limit: int = 50
) -> list[EntrypointDefinition]:
    """Summary, transaction listing and CSV export entrypoints."""

    def analytics(params: dict[str, Any]) -> dict[str, Any]:
        return summarize(tracker, params["windowMs"]).to_dict()

    def analytics_transactions(params: dict[str, Any]) -> dict[str, Any]:
        records = list_transactions(tracker, params["windowMs"], params["limit"])
        return {"transactions": [record.to_dict() for record in records]}

    def analytics_csv(params: dict[str, Any]) -> dict[str, Any]:
        return {"csv": export_csv(tracker, params["windowMs"])}

    return [
        EntrypointDefinition(
            key="analytics",
            description="Payment analytics summary",
            handler=analytics,
            input_contract=contract(_window_field()),
        ),
        EntrypointDefinition(
            key="analytics-transactions",
            description="Recent payment transactions",
            handler=analytics_transactions,
            input_contract=contract(
                _window_field(),
                FieldSpec("limit", "integer", default=default_limit, minimum=0),
            ),
        ),
        EntrypointDefinition(
            key="analytics-csv",
            description="Export payment data as CSV",
            handler=analytics_csv,
            input_contract=contract(_window_field()),
        ),
    ]
