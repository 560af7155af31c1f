"""Configuration helpers and Settings container.

This module provides a frozen `Settings` dataclass and `get_settings`, which
reads the environment (and the project `.env`) and checks that the report
options are usable before anything is fetched.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from policy_dashboard.errors import IsolationPolicy

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

DEFAULT_TOP_CITIES = 10


@dataclass(frozen=True)
class ReportOptions:
    """Knobs shared by every aggregate of one report run.

    Attributes:
        timezone: Calendar used to derive month keys from `created_at`.
        top_cities: Number of cities kept in the city distribution.
        isolation: What happens when a single policy is malformed.
    """
    timezone: ZoneInfo = ZoneInfo("UTC")
    top_cities: int = DEFAULT_TOP_CITIES
    isolation: IsolationPolicy = IsolationPolicy.SKIP


@dataclass(frozen=True)
class Settings:
    """Container for dashboard configuration read from the environment.

    Attributes:
        supabase_url: Base URL of the Supabase project.
        supabase_key: API key sent as `apikey` and bearer token.
        policies_table: Table or view holding the policy rows.
        alliance: Alliance tag used to filter `share_data` upstream.
        report_timezone: IANA timezone name used for month keys.
        top_cities: Number of cities kept in the city chart.
        isolation: Isolation policy for malformed policies.
        dashboard_password: Shared secret required by the Streamlit app.
        policies_file: Optional local JSON export used instead of Supabase.
        data_dir: Folder where fetched exports are written.
    """
    supabase_url: str
    supabase_key: str
    policies_table: str
    alliance: str
    report_timezone: str
    top_cities: int
    isolation: IsolationPolicy
    dashboard_password: str
    policies_file: Path | None
    data_dir: Path

    def report_options(self) -> ReportOptions:
        """Return the `ReportOptions` described by these settings."""
        return ReportOptions(
            timezone=ZoneInfo(self.report_timezone),
            top_cities=self.top_cities,
            isolation=self.isolation,
        )


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if `REPORT_TIMEZONE`, `TOP_CITIES` or `ISOLATION_POLICY`
            hold values the report cannot use.
    """
    report_timezone = os.getenv("REPORT_TIMEZONE", "UTC").strip() or "UTC"
    try:
        ZoneInfo(report_timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RuntimeError(f"REPORT_TIMEZONE is not a known timezone: {report_timezone!r}") from e

    raw_top = os.getenv("TOP_CITIES", str(DEFAULT_TOP_CITIES)).strip()
    try:
        top_cities = int(raw_top)
    except ValueError as e:
        raise RuntimeError(f"TOP_CITIES must be an integer, got {raw_top!r}") from e
    if top_cities < 1:
        raise RuntimeError(f"TOP_CITIES must be at least 1, got {top_cities}")

    raw_isolation = os.getenv("ISOLATION_POLICY", IsolationPolicy.SKIP.value).strip().lower()
    try:
        isolation = IsolationPolicy(raw_isolation)
    except ValueError as e:
        raise RuntimeError(
            f"ISOLATION_POLICY must be 'skip' or 'abort', got {raw_isolation!r}"
        ) from e

    policies_file = os.getenv("POLICIES_FILE", "").strip()

    return Settings(
        supabase_url=os.getenv("SUPABASE_URL", "").strip().rstrip("/"),
        supabase_key=os.getenv("SUPABASE_KEY", "").strip(),
        policies_table=os.getenv("POLICIES_TABLE", "full_query_polizas"),
        alliance=os.getenv("ALLIANCE", "bivett"),
        report_timezone=report_timezone,
        top_cities=top_cities,
        isolation=isolation,
        dashboard_password=os.getenv("DASHBOARD_PASSWORD", ""),
        policies_file=Path(policies_file) if policies_file else None,
        data_dir=Path(os.getenv("DATA_DIR", "data")),
    )
