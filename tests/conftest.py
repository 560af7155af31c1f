from __future__ import annotations

from typing import Any, Callable

import pytest

from policy_dashboard.clean.normalize import NormalizedPolicy, normalize_policies
from policy_dashboard.clean.validate import validate_policies


def pet_row(
    species: str = "Dog",
    plan: str = "Basic",
    rc: bool | None = False,
    annual: float = 1000,
    monthly: float = 100,
    annual_rc: float = 1300,
    monthly_rc: float = 130,
) -> dict[str, Any]:
    return {
        "specie": species,
        "plan": plan,
        "rc": rc,
        "pricesOfPlans": {
            "plan": plan,
            "pricePlanAnual": annual,
            "pricePlanMonthly": monthly,
            "pricePlanAnualRc": annual_rc,
            "pricePlanMonthlyRc": monthly_rc,
        },
    }


def policy_row(
    created_at: str = "2024-03-15T12:00:00+00:00",
    annual: bool | None = True,
    city: str | None = "Bogota",
    pets: Any = None,
) -> dict[str, Any]:
    return {
        "created_at": created_at,
        "isAnualPlan": annual,
        "share_data": {"canal": "web", "aliance": "bivett", "numCotization": "1"},
        "ciudad": city,
        "lista_mascotas": [pet_row()] if pets is None else pets,
    }


@pytest.fixture
def make_pet() -> Callable[..., dict[str, Any]]:
    return pet_row


@pytest.fixture
def make_policy() -> Callable[..., dict[str, Any]]:
    return policy_row


@pytest.fixture
def normalize() -> Callable[[list[dict[str, Any]]], list[NormalizedPolicy]]:
    def _normalize(rows: list[dict[str, Any]]) -> list[NormalizedPolicy]:
        policies, _ = validate_policies(rows)
        return normalize_policies(policies)

    return _normalize
