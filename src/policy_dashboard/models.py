"""Pydantic models for policy records and the dashboard outputs.

Input models accept both the column names of the upstream `full_query_polizas`
view (`isAnualPlan`, `ciudad`, `lista_mascotas`, `specie`, `pricesOfPlans`)
and plain snake_case names. Output models dump with camelCase aliases, which
is the shape the rendering layer consumes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class PetPricing(BaseModel):
    """Price block of a pet's plan. Each field may be missing at parse time."""
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)
    plan: str | None = None
    annual: float | None = Field(None, validation_alias=AliasChoices("annual", "pricePlanAnual"))
    monthly: float | None = Field(None, validation_alias=AliasChoices("monthly", "pricePlanMonthly"))
    annual_rc: float | None = Field(
        None, validation_alias=AliasChoices("annual_rc", "pricePlanAnualRc")
    )
    monthly_rc: float | None = Field(
        None, validation_alias=AliasChoices("monthly_rc", "pricePlanMonthlyRc")
    )


class Pet(BaseModel):
    """One insured pet inside a policy.

    Attributes:
        species: Species as captured upstream (case is not normalized here).
        plan: Coverage plan name.
        rc: Liability add-on flag; selects the `*_rc` price pair.
        pricing: Raw price block, read by the revenue calculator only. Kept
            untyped so a malformed price never hides the pet from the
            species and plan counts.
    """
    model_config = ConfigDict(extra="ignore")
    species: str = Field(validation_alias=AliasChoices("species", "specie"))
    plan: str
    rc: bool = False
    pricing: Any = Field(None, validation_alias=AliasChoices("pricing", "pricesOfPlans"))

    @field_validator("rc", mode="before")
    @classmethod
    def rc_none_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class Policy(BaseModel):
    """A single policy row as returned by the data store.

    `pets` is kept raw (a list or a JSON string); it is resolved by
    `policy_dashboard.clean.normalize`.
    """
    model_config = ConfigDict(extra="ignore")
    created_at: datetime
    is_annual_plan: bool = Field(
        False,
        validation_alias=AliasChoices("is_annual_plan", "isAnnualPlan", "isAnualPlan"),
    )
    city: str | None = Field(None, validation_alias=AliasChoices("city", "ciudad"))
    pets: list[Any] | str | None = Field(
        default_factory=list,
        validation_alias=AliasChoices("pets", "lista_mascotas"),
    )

    @field_validator("is_annual_plan", mode="before")
    @classmethod
    def annual_none_is_false(cls, v: Any) -> Any:
        return False if v is None else v


class _Output(BaseModel):
    model_config = ConfigDict(extra="forbid", alias_generator=to_camel, populate_by_name=True)


class MonthlyCount(_Output):
    """Policies created in one month, split by payment frequency."""
    month: str
    annual: int = Field(..., ge=0)
    non_annual: int = Field(..., ge=0)
    total: int = Field(..., ge=0)


class MonthlyRevenue(_Output):
    """Annualized premiums of the policies created in one month."""
    month: str
    revenue: float


class CategoryShare(_Output):
    """A named slice of a distribution (a count or a percentage)."""
    name: str
    value: float


class DashboardSummary(_Output):
    """Scalar KPIs shown on the dashboard cards.

    Attributes:
        total_policies: Number of input policies.
        annual_policies: Policies paid yearly.
        non_annual_policies: Policies paid monthly.
        annual_percentage: Share of annual policies, one decimal.
        monthly_percentage: Share of monthly policies, one decimal.
        total_pets: Sum of the species counts.
        pet_policy_ratio: Pets per policy.
        total_revenue: Sum of annualized premiums.
        failed_policies: Rows dropped at validation plus policies whose
            revenue was zeroed because their pets or pricing were malformed.
    """
    total_policies: int = Field(..., ge=0)
    annual_policies: int = Field(..., ge=0)
    non_annual_policies: int = Field(..., ge=0)
    annual_percentage: float
    monthly_percentage: float
    total_pets: int = Field(..., ge=0)
    pet_policy_ratio: float
    total_revenue: float
    failed_policies: int = Field(0, ge=0)


class DashboardReport(_Output):
    """Every aggregate needed to render the dashboard."""
    monthly_counts: list[MonthlyCount]
    monthly_revenue: list[MonthlyRevenue]
    cities: list[CategoryShare]
    species: list[CategoryShare]
    plans: list[CategoryShare]
    summary: DashboardSummary
