from __future__ import annotations

import pytest

from policy_dashboard.aggregate.revenue import (
    monthly_revenue,
    pet_premium,
    policy_revenue,
    pricing_of,
    revenue_breakdown,
    total_revenue,
)
from policy_dashboard.errors import IsolationPolicy, MissingPricingError, ParseError
from policy_dashboard.models import Pet


def test_annual_policy_uses_annual_price(make_pet, make_policy, normalize) -> None:
    [p] = normalize([make_policy(annual=True, pets=[make_pet(annual=1000)])])
    assert policy_revenue(p) == 1000


def test_monthly_policy_is_annualized(make_pet, make_policy, normalize) -> None:
    [p] = normalize([make_policy(annual=False, pets=[make_pet(monthly=100)])])
    assert policy_revenue(p) == 1200


def test_rc_switches_to_addon_prices(make_pet) -> None:
    pet = Pet.model_validate(make_pet(rc=True, annual_rc=1500, monthly_rc=140))
    assert pet_premium(pet, is_annual=True) == 1500
    assert pet_premium(pet, is_annual=False) == 1680


def test_policy_revenue_sums_pets(make_pet, make_policy, normalize) -> None:
    pets = [make_pet(annual=1000), make_pet(rc=True, annual_rc=1300)]
    [p] = normalize([make_policy(annual=True, pets=pets)])
    assert policy_revenue(p) == 2300


def test_missing_pricing_raises(make_pet) -> None:
    no_block = Pet.model_validate({"specie": "dog", "plan": "Basic"})
    with pytest.raises(MissingPricingError):
        pet_premium(no_block, is_annual=True)

    row = make_pet()
    del row["pricesOfPlans"]["pricePlanMonthlyRc"]
    partial = Pet.model_validate(row)
    with pytest.raises(MissingPricingError, match="monthly_rc"):
        pet_premium(partial, is_annual=True)


def test_malformed_policy_contributes_zero(make_pet, make_policy, normalize) -> None:
    rows = [
        make_policy(annual=True, pets=[make_pet(annual=1000)]),
        make_policy(annual=True, pets='[{"specie": "dog",'),
    ]
    assert total_revenue(normalize(rows)) == 1000


def test_missing_pricing_policy_contributes_zero(make_pet, make_policy, normalize) -> None:
    broken = make_pet()
    broken["pricesOfPlans"] = None
    rows = [
        make_policy(annual=False, pets=[make_pet(monthly=50)]),
        make_policy(annual=False, pets=[make_pet(monthly=50), broken]),
    ]
    assert total_revenue(normalize(rows)) == 600


def test_abort_policy_propagates(make_policy, normalize) -> None:
    policies = normalize([make_policy(pets="nope")])
    with pytest.raises(ParseError):
        total_revenue(policies, IsolationPolicy.ABORT)


def test_monthly_revenue_buckets(make_pet, make_policy, normalize) -> None:
    rows = [
        make_policy("2024-04-02T10:00:00+00:00", annual=True, pets=[make_pet(annual=800)]),
        make_policy("2024-03-09T10:00:00+00:00", annual=False, pets=[make_pet(monthly=10)]),
        make_policy("2024-04-20T10:00:00+00:00", annual=True, pets=[make_pet(annual=200)]),
        make_policy("2024-05-01T10:00:00+00:00", annual=True, pets="not json"),
    ]
    out = monthly_revenue(normalize(rows))
    assert [(m.month, m.revenue) for m in out] == [
        ("2024-03", 120.0),
        ("2024-04", 1000.0),
        ("2024-05", 0.0),
    ]


def test_revenue_of_empty_input() -> None:
    assert total_revenue([]) == 0.0
    assert monthly_revenue([]) == []


def test_pricing_is_coerced_when_premium_is_computed(make_pet) -> None:
    row = make_pet(annual="1000", monthly="90")
    pricing = pricing_of(Pet.model_validate(row))
    assert (pricing.annual, pricing.monthly) == (1000.0, 90.0)


@pytest.mark.parametrize("block", ["{}", [1, 2], {"pricePlanAnual": "n/a"}])
def test_malformed_pricing_raises_missing_pricing(make_pet, block) -> None:
    row = make_pet()
    row["pricesOfPlans"] = block
    with pytest.raises(MissingPricingError):
        pet_premium(Pet.model_validate(row), is_annual=True)


def test_non_numeric_price_zeroes_revenue_only(make_pet, make_policy, normalize) -> None:
    cat = make_pet("Cat")
    cat["pricesOfPlans"]["pricePlanAnual"] = "n/a"
    policies = normalize([make_policy(annual=True, pets=[make_pet("Dog"), cat])])

    assert policies[0].ok
    breakdown = revenue_breakdown(policies)
    assert breakdown.revenues == [0.0]
    assert breakdown.failed == 1
    with pytest.raises(MissingPricingError):
        total_revenue(policies, IsolationPolicy.ABORT)
