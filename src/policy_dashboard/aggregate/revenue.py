"""Premium computation and revenue aggregates.

Premiums are annualized so annual and monthly policies share one axis: a
monthly price is multiplied by 12, an annual price is taken as is. The
liability add-on (`rc`) switches to the `*_rc` price pair.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Sequence

import pandas as pd
from pydantic import ValidationError

from policy_dashboard.aggregate.time_buckets import UTC, month_key
from policy_dashboard.clean.normalize import NormalizedPolicy
from policy_dashboard.errors import IsolationPolicy, MissingPricingError, PolicyDataError, isolate
from policy_dashboard.models import MonthlyRevenue, Pet, PetPricing

log = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12
PRICE_FIELDS = ("annual", "monthly", "annual_rc", "monthly_rc")


@dataclass(frozen=True)
class RevenueBreakdown:
    """Per-policy revenues of one run and how many policies were zeroed.

    Attributes:
        revenues: Revenue of each policy, in input order.
        failed: Policies whose pets or pricing could not be read.
    """
    revenues: list[float]
    failed: int

    @property
    def total(self) -> float:
        return float(sum(self.revenues))


def pricing_of(pet: Pet) -> PetPricing:
    """Return the validated price block of a pet.

    Raises:
        MissingPricingError: if the block is absent, not an object, holds a
            non-numeric price, or lacks one of the four price fields.
    """
    label = f"pet {pet.species!r} on plan {pet.plan!r}"
    raw = pet.pricing
    if raw is None:
        raise MissingPricingError(f"{label} has no pricing")
    if isinstance(raw, PetPricing):
        pricing = raw
    elif isinstance(raw, dict):
        try:
            pricing = PetPricing.model_validate(raw)
        except ValidationError as e:
            bad = ", ".join(str(err["loc"][0]) for err in e.errors())
            raise MissingPricingError(f"{label} has non-numeric prices: {bad}") from e
    else:
        raise MissingPricingError(f"{label} has a {type(raw).__name__} price block")

    missing = [name for name in PRICE_FIELDS if getattr(pricing, name) is None]
    if missing:
        raise MissingPricingError(f"{label} lacks {', '.join(missing)}")
    return pricing


def pet_premium(pet: Pet, is_annual: bool) -> float:
    """Return the annualized premium of one pet.

    Args:
        pet: Pet with a complete pricing block.
        is_annual: Payment frequency of the owning policy.

    Returns:
        Annual price, or monthly price times 12, from the add-on pair when
        `pet.rc` is set.

    Raises:
        MissingPricingError: if the pricing block is missing or malformed.
    """
    pricing = pricing_of(pet)
    if pet.rc:
        return pricing.annual_rc if is_annual else pricing.monthly_rc * MONTHS_PER_YEAR
    return pricing.annual if is_annual else pricing.monthly * MONTHS_PER_YEAR


def policy_revenue(normalized: NormalizedPolicy) -> float:
    """Return the sum of a policy's pet premiums.

    Raises:
        ParseError: if the policy's pets could not be resolved.
        MissingPricingError: if any pet lacks pricing.
    """
    if normalized.error is not None:
        raise normalized.error
    is_annual = normalized.policy.is_annual_plan
    return float(sum(pet_premium(pet, is_annual) for pet in normalized.pets))


def revenue_breakdown(
    policies: Sequence[NormalizedPolicy],
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> RevenueBreakdown:
    """Compute every policy's revenue, zero for isolated failures.

    Args:
        policies: Normalized policies.
        isolation: SKIP counts a failing policy as zero, ABORT re-raises.
    """
    out: list[float] = []
    failed = 0
    for idx, p in enumerate(policies):
        try:
            out.append(policy_revenue(p))
        except PolicyDataError as e:
            level = logging.DEBUG if e is p.error else logging.WARNING
            isolate(e, isolation, log, f"revenue of policy #{idx}", level)
            out.append(0.0)
            failed += 1
    return RevenueBreakdown(revenues=out, failed=failed)


def total_revenue(
    policies: Sequence[NormalizedPolicy],
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> float:
    """Return the sum of every policy's revenue.

    Args:
        policies: Normalized policies.
        isolation: SKIP counts a failing policy as zero, ABORT re-raises.
    """
    return revenue_breakdown(policies, isolation).total


def monthly_revenue(
    policies: Sequence[NormalizedPolicy],
    tz: tzinfo = UTC,
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> list[MonthlyRevenue]:
    """Return revenue per creation month, sorted ascending by month.

    A month appears as soon as one policy was created in it, even when every
    policy of that month was isolated (its revenue is then 0).

    Args:
        policies: Normalized policies.
        tz: Reporting timezone for month keys.
        isolation: SKIP counts a failing policy as zero, ABORT re-raises.

    Returns:
        List of `MonthlyRevenue`.
    """
    if not policies:
        return []

    df = pd.DataFrame(
        {
            "month": [month_key(p.policy.created_at, tz) for p in policies],
            "revenue": revenue_breakdown(policies, isolation).revenues,
        }
    )
    grouped = df.groupby("month", sort=True)["revenue"].sum().reset_index()

    return [
        MonthlyRevenue(month=row.month, revenue=float(row.revenue))
        for row in grouped.itertuples(index=False)
    ]
