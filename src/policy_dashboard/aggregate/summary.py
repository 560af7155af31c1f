"""Scalar KPIs for the dashboard cards."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

import numpy as np

from policy_dashboard.clean.normalize import NormalizedPolicy
from policy_dashboard.models import CategoryShare, DashboardSummary


def safe_ratio(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """Return numerator / denominator, or `fallback` when it is not finite."""
    if denominator == 0:
        return fallback
    value = numerator / denominator
    return float(value) if np.isfinite(value) else fallback


def round_half_up(value: float, digits: int = 1) -> float:
    """Round with exact halves going away from zero (6.25 -> 6.3)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> float:
    """Return `part` as a percentage of `whole`, rounded half-up to one decimal."""
    return round_half_up(safe_ratio(part * 100.0, whole), 1)


def summarize(
    policies: Sequence[NormalizedPolicy],
    species: Sequence[CategoryShare],
    total_revenue: float,
    failed_policies: int = 0,
) -> DashboardSummary:
    """Derive the KPI block from the policies and the species counts.

    Args:
        policies: Normalized policies.
        species: Output of `species_distribution`; its counts give the number
            of pets.
        total_revenue: Output of `total_revenue`.
        failed_policies: Number of policies isolated during the run.

    Returns:
        `DashboardSummary`. Every ratio is 0.0 on an empty input.
    """
    total = len(policies)
    annual = sum(1 for p in policies if p.policy.is_annual_plan)
    non_annual = total - annual
    total_pets = int(sum(s.value for s in species))

    return DashboardSummary(
        total_policies=total,
        annual_policies=annual,
        non_annual_policies=non_annual,
        annual_percentage=percentage(annual, total),
        monthly_percentage=percentage(non_annual, total),
        total_pets=total_pets,
        pet_policy_ratio=safe_ratio(total_pets, total),
        total_revenue=float(total_revenue),
        failed_policies=failed_policies,
    )
