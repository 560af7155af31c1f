from __future__ import annotations

import time

import altair as alt
import pandas as pd
import requests
import streamlit as st

from policy_dashboard.aggregate.build_report import build_report
from policy_dashboard.config import get_settings
from policy_dashboard.errors import PolicyDataError
from policy_dashboard.ingest.fetch_policies import fetch_policies, load_policies_json
from policy_dashboard.logging_config import configure_logging
from policy_dashboard.models import CategoryShare, DashboardReport
from policy_dashboard.theme import DEFAULT_PALETTE, Palette

SESSION_TTL_SECONDS = 3600
CACHE_TTL_SECONDS = 600

# =====================================================
# Page config
# =====================================================
st.set_page_config(page_title="Insurance Sales Dashboard", layout="wide")
configure_logging()

try:
    settings = get_settings()
except RuntimeError as exc:
    st.error(f"Invalid configuration: {exc}")
    st.stop()

palette: Palette = DEFAULT_PALETTE

# =====================================================
# Access gate (shared secret, one hour per login)
# =====================================================
def is_authenticated() -> bool:
    """Return True while the current session holds a non-expired login."""
    logged_at = st.session_state.get("auth_at")
    return logged_at is not None and time.time() - logged_at < SESSION_TTL_SECONDS


if not settings.dashboard_password:
    st.error("Missing `DASHBOARD_PASSWORD` in `.env`. The dashboard stays locked.")
    st.stop()

if not is_authenticated():
    st.title("Dashboard login")
    with st.form("login"):
        secret = st.text_input("Secret word", type="password")
        submitted = st.form_submit_button("Enter")
    if submitted:
        if secret == settings.dashboard_password:
            st.session_state["auth_at"] = time.time()
            st.rerun()
        else:
            st.error("Wrong secret word")
    st.stop()

# =====================================================
# Data
# =====================================================
@st.cache_data(ttl=CACHE_TTL_SECONDS, show_spinner="Loading policies...")
def load_report() -> dict:
    """Fetch the policy rows and return the report as a camelCase dict."""
    if settings.policies_file is not None:
        records = load_policies_json(settings.policies_file)
    else:
        records = fetch_policies(settings)
    return build_report(records, settings.report_options()).model_dump(by_alias=True)


try:
    report = DashboardReport.model_validate(load_report())
except (requests.RequestException, RuntimeError, ValueError, PolicyDataError) as exc:
    st.error(f"Unable to load policies: {exc}")
    st.stop()


def shares_frame(shares: list[CategoryShare]) -> pd.DataFrame:
    """Return a (name, value) frame for a categorical distribution."""
    return pd.DataFrame([s.model_dump() for s in shares], columns=["name", "value"])


def pie(df: pd.DataFrame, title: str) -> alt.Chart:
    """Pie chart of a (name, value) frame coloured with the palette cycle."""
    names = df["name"].tolist()
    return (
        alt.Chart(df, title=title)
        .mark_arc(outerRadius=110)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color(
                "name:N",
                scale=alt.Scale(domain=names, range=palette.colors_for(len(names))),
                title=None,
            ),
            tooltip=["name:N", "value:Q"],
        )
        .properties(height=300)
    )


# =====================================================
# KPIs
# =====================================================
st.title("Bivett and partners production")
summary = report.summary

c1, c2, c3, c4, c5 = st.columns(5)
with c1:
    st.metric("Total policies", summary.total_policies)
with c2:
    st.metric("Annual payment", summary.annual_policies)
    st.caption(f"{summary.annual_percentage}% of total")
with c3:
    st.metric("Monthly payment", summary.non_annual_policies)
    st.caption(f"{summary.monthly_percentage}% of total")
with c4:
    st.metric("Pets per policy", f"{summary.pet_policy_ratio:.2f}")
with c5:
    st.metric("Premiums", f"${summary.total_revenue:,.0f}")

if summary.failed_policies:
    st.caption(f"{summary.failed_policies} policies with unreadable pets or pricing were counted as zero.")

st.divider()

# =====================================================
# Plan distribution
# =====================================================
df_plans = shares_frame(report.plans)
if df_plans.empty:
    st.info("No plan data available.")
else:
    plans_chart = (
        alt.Chart(df_plans, title="Plan distribution")
        .mark_bar(color=palette.accent_green)
        .encode(
            x=alt.X("value:Q", title="%", scale=alt.Scale(domain=[0, 100])),
            y=alt.Y("name:N", sort="-x", title=None),
            tooltip=["name:N", alt.Tooltip("value:Q", format=".2f")],
        )
        .properties(height=150)
    )
    st.altair_chart(plans_chart, width="stretch")

# =====================================================
# Monthly series
# =====================================================
left, right = st.columns(2)

df_counts = pd.DataFrame([m.model_dump() for m in report.monthly_counts])
with left:
    if df_counts.empty:
        st.info("No policies to chart.")
    else:
        long = df_counts.melt(
            id_vars=["month", "total"],
            value_vars=["annual", "non_annual"],
            var_name="frequency",
            value_name="policies",
        )
        long["frequency"] = long["frequency"].map({"annual": "Annual", "non_annual": "Monthly"})
        counts_chart = (
            alt.Chart(long, title="Policies per month")
            .mark_bar()
            .encode(
                x=alt.X("month:O", title=None),
                y=alt.Y("policies:Q", stack="zero", title="Policies"),
                color=alt.Color(
                    "frequency:N",
                    scale=alt.Scale(
                        domain=["Annual", "Monthly"],
                        range=[palette.primary_blue, palette.accent_green],
                    ),
                    title=None,
                ),
                tooltip=["month:O", "frequency:N", "policies:Q", "total:Q"],
            )
            .properties(height=400)
        )
        st.altair_chart(counts_chart, width="stretch")

df_revenue = pd.DataFrame([m.model_dump() for m in report.monthly_revenue])
with right:
    if df_revenue.empty:
        st.info("No premiums to chart.")
    else:
        revenue_chart = (
            alt.Chart(df_revenue, title="Premiums per month")
            .mark_bar(color=palette.accent_green)
            .encode(
                x=alt.X("month:O", title=None),
                y=alt.Y("revenue:Q", title="Premiums", axis=alt.Axis(format="$,.0f")),
                tooltip=["month:O", alt.Tooltip("revenue:Q", format="$,.0f")],
            )
            .properties(height=400)
        )
        st.altair_chart(revenue_chart, width="stretch")

# =====================================================
# Distributions
# =====================================================
left, right = st.columns(2)

df_cities = shares_frame(report.cities)
with left:
    if df_cities.empty:
        st.info("No city data available.")
    else:
        st.altair_chart(pie(df_cities, "By city"), width="stretch")

df_species = shares_frame(report.species)
with right:
    if df_species.empty:
        st.info("No species data available.")
    else:
        st.altair_chart(pie(df_species, "By species"), width="stretch")

st.caption(f"Month buckets use the {settings.report_timezone} calendar.")
