from __future__ import annotations

import pytest
from pydantic import ValidationError

from policy_dashboard.models import MonthlyCount, Pet, Policy


def test_policy_accepts_upstream_column_names(make_policy) -> None:
    p = Policy.model_validate(make_policy(city="Cali"))
    assert p.is_annual_plan is True
    assert p.city == "Cali"
    assert isinstance(p.pets, list)
    assert p.created_at.year == 2024


def test_policy_accepts_snake_case_and_null_flags() -> None:
    p = Policy.model_validate(
        {"created_at": "2024-01-02T00:00:00Z", "isAnnualPlan": None, "pets": "[]"}
    )
    assert p.is_annual_plan is False
    assert p.city is None
    assert p.pets == "[]"


def test_policy_requires_created_at() -> None:
    with pytest.raises(ValidationError):
        Policy.model_validate({"isAnualPlan": True, "lista_mascotas": []})


def test_pet_keeps_raw_pricing_and_null_rc(make_pet) -> None:
    pet = Pet.model_validate(make_pet(rc=None, monthly=90))
    assert pet.rc is False
    assert pet.species == "Dog"
    assert pet.pricing["pricePlanMonthly"] == 90


def test_pet_with_unreadable_prices_still_validates(make_pet) -> None:
    row = make_pet("Cat")
    row["pricesOfPlans"]["pricePlanAnual"] = "n/a"
    assert Pet.model_validate(row).species == "Cat"
    assert Pet.model_validate({**row, "pricesOfPlans": "{}"}).plan == "Basic"


def test_output_models_dump_camel_case() -> None:
    m = MonthlyCount(month="2024-03", annual=1, non_annual=2, total=3)
    assert m.model_dump(by_alias=True) == {
        "month": "2024-03",
        "annual": 1,
        "nonAnnual": 2,
        "total": 3,
    }
