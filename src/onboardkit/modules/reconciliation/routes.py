"""Reconciliation API routes."""

from typing import Any

from onboardkit.api.dependencies import Context
from onboardkit.core.auth.dependencies import Operator
from onboardkit.modules.reconciliation import router
from onboardkit.modules.reconciliation.services import ReconciliationSweep


@router.get(
    "/report",
    summary="Run the reconciliation sweep",
    description="Read-only report of orphaned tenants, broken identity links, "
    "placeholder emails and stale pending records.",
)
async def reconciliation_report(
    ctx: Context,
    _operator: Operator,
) -> dict[str, Any]:
    """Compute a fresh report."""
    report = await ReconciliationSweep.from_context(ctx).run(include_timestamp=True)
    return report.to_json_dict()
