"""Build the full dashboard report from raw policy rows.

The rows are validated and their pets normalized once; every aggregate then
runs on the same normalized list and none reads another's output.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from policy_dashboard.aggregate.categories import (
    city_distribution,
    plan_distribution,
    species_distribution,
)
from policy_dashboard.aggregate.revenue import monthly_revenue, revenue_breakdown
from policy_dashboard.aggregate.summary import summarize
from policy_dashboard.aggregate.time_buckets import monthly_counts
from policy_dashboard.clean.normalize import normalize_policies
from policy_dashboard.clean.validate import validate_policies
from policy_dashboard.config import ReportOptions
from policy_dashboard.models import DashboardReport, Policy

log = logging.getLogger(__name__)


def build_report(
    records: Iterable[dict[str, Any] | Policy],
    options: ReportOptions | None = None,
) -> DashboardReport:
    """Return every dashboard aggregate for a list of policy rows.

    Args:
        records: Raw rows (dicts using upstream or snake_case names) or
            already validated `Policy` models.
        options: Timezone, top-N and isolation settings; defaults to UTC,
            10 cities and the skip policy.

    Returns:
        `DashboardReport`.

    Raises:
        ValidationError, ParseError, MissingPricingError: only when
            `options.isolation` is ABORT.
    """
    opts = options or ReportOptions()

    policies, bad_rows = validate_policies(records, opts.isolation)
    normalized = normalize_policies(policies, opts.isolation)

    species = species_distribution(normalized, opts.isolation)
    revenue = revenue_breakdown(normalized, opts.isolation)

    report = DashboardReport(
        monthly_counts=monthly_counts(normalized, opts.timezone),
        monthly_revenue=monthly_revenue(normalized, opts.timezone, opts.isolation),
        cities=city_distribution(normalized, opts.top_cities),
        species=species,
        plans=plan_distribution(normalized, opts.isolation),
        summary=summarize(
            normalized,
            species,
            revenue.total,
            failed_policies=bad_rows + revenue.failed,
        ),
    )

    log.info(
        "Report built: policies=%d dropped_rows=%d failed=%d revenue=%.2f",
        report.summary.total_policies,
        bad_rows,
        report.summary.failed_policies,
        report.summary.total_revenue,
    )
    return report
