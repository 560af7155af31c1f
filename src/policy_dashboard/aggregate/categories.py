"""Categorical distributions: policies by city, pets by species and by plan."""
from __future__ import annotations

import logging
from typing import Sequence

import pandas as pd

from policy_dashboard.clean.normalize import NormalizedPolicy
from policy_dashboard.config import DEFAULT_TOP_CITIES
from policy_dashboard.errors import IsolationPolicy, isolate
from policy_dashboard.models import CategoryShare, Pet

log = logging.getLogger(__name__)

UNKNOWN_CITY = "Unknown"


def _readable_pets(
    policies: Sequence[NormalizedPolicy],
    isolation: IsolationPolicy,
    what: str,
) -> list[Pet]:
    """Flatten the pets of every policy, applying `isolation` to failures."""
    pets: list[Pet] = []
    for idx, p in enumerate(policies):
        if p.error is not None:
            # already reported by normalize_policies
            isolate(p.error, isolation, log, f"{what} of policy #{idx}", logging.DEBUG)
            continue
        pets.extend(p.pets)
    return pets


def _shares(counts: pd.Series) -> list[CategoryShare]:
    return [CategoryShare(name=str(name), value=float(v)) for name, v in counts.items()]


def city_distribution(
    policies: Sequence[NormalizedPolicy],
    top_n: int = DEFAULT_TOP_CITIES,
) -> list[CategoryShare]:
    """Return the `top_n` cities by number of policies.

    Absent or blank cities are counted as "Unknown". Ties keep the order in
    which the cities first appear.

    Args:
        policies: Normalized policies (pets failures do not matter here).
        top_n: Number of cities to keep (default 10).

    Returns:
        List of `CategoryShare` with raw counts, largest first.
    """
    if not policies:
        return []

    cities = pd.Series(
        [(p.policy.city or "").strip() or UNKNOWN_CITY for p in policies],
        dtype="object",
    )
    counts = cities.groupby(cities, sort=False).size()
    counts = counts.sort_values(ascending=False, kind="stable").head(top_n)
    return _shares(counts)


def species_distribution(
    policies: Sequence[NormalizedPolicy],
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> list[CategoryShare]:
    """Return the number of pets per species, case-insensitively.

    Species are lowercased before counting; every species is kept, in order
    of first appearance.

    Args:
        policies: Normalized policies.
        isolation: SKIP ignores policies with unreadable pets, ABORT re-raises.

    Returns:
        List of `CategoryShare` with raw counts.
    """
    pets = _readable_pets(policies, isolation, "species")
    if not pets:
        return []

    species = pd.Series([pet.species for pet in pets], dtype="object").str.lower()
    return _shares(species.groupby(species, sort=False).size())


def plan_distribution(
    policies: Sequence[NormalizedPolicy],
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> list[CategoryShare]:
    """Return each plan's share of all pet-plan assignments, in percent.

    The denominator is the number of pets across all readable policies, not
    the number of policies, so the values sum to 100.

    Args:
        policies: Normalized policies.
        isolation: SKIP ignores policies with unreadable pets, ABORT re-raises.

    Returns:
        List of `CategoryShare` with percentages, largest first.
    """
    pets = _readable_pets(policies, isolation, "plans")
    if not pets:
        return []

    plans = pd.Series([pet.plan for pet in pets], dtype="object")
    counts = plans.groupby(plans, sort=False).size()
    pct = (counts / counts.sum() * 100.0).sort_values(ascending=False, kind="stable")
    return _shares(pct)
