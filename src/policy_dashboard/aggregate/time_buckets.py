"""Month bucketing of policies by creation timestamp.

Month keys are "YYYY-MM" strings, so string order is chronological order.
Timezone convention: aware timestamps are converted to the reporting
timezone before the calendar fields are read; naive timestamps are taken to
already be in that timezone.
"""
from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Sequence
from zoneinfo import ZoneInfo

import pandas as pd

from policy_dashboard.clean.normalize import NormalizedPolicy
from policy_dashboard.models import MonthlyCount

UTC = ZoneInfo("UTC")


def month_key(ts: datetime, tz: tzinfo = UTC) -> str:
    """Return the zero-padded "YYYY-MM" bucket of a timestamp.

    Args:
        ts: Policy creation timestamp.
        tz: Reporting timezone used for aware timestamps.

    Returns:
        Month key such as "2024-03".
    """
    if ts.tzinfo is not None:
        ts = ts.astimezone(tz)
    return f"{ts.year:04d}-{ts.month:02d}"


def monthly_counts(policies: Sequence[NormalizedPolicy], tz: tzinfo = UTC) -> list[MonthlyCount]:
    """Return policy counts per month split by payment frequency.

    Only months with at least one policy appear; the list is sorted
    ascending by month.

    Args:
        policies: Normalized policies (pets failures do not matter here).
        tz: Reporting timezone for month keys.

    Returns:
        List of `MonthlyCount`.
    """
    if not policies:
        return []

    df = pd.DataFrame(
        {
            "month": [month_key(p.policy.created_at, tz) for p in policies],
            "annual": [bool(p.policy.is_annual_plan) for p in policies],
        }
    )
    grouped = (
        df.groupby("month")["annual"]
        .agg(annual="sum", total="size")
        .reset_index()
        .sort_values("month")
    )

    return [
        MonthlyCount(
            month=row.month,
            annual=int(row.annual),
            non_annual=int(row.total - row.annual),
            total=int(row.total),
        )
        for row in grouped.itertuples(index=False)
    ]
