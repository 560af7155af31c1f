"""Validation of raw policy rows against the `Policy` model."""
from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from policy_dashboard.errors import IsolationPolicy, isolate
from policy_dashboard.models import Policy

log = logging.getLogger(__name__)


def validate_policies(
    records: Iterable[dict[str, Any] | Policy],
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> tuple[list[Policy], int]:
    """Validate raw rows into `Policy` models.

    Rows that are already `Policy` instances pass through untouched.

    Args:
        records: Raw rows from the data store or a JSON export.
        isolation: SKIP drops invalid rows (counted as bad), ABORT re-raises
            the first `ValidationError`.

    Returns:
        A tuple of (validated_policies, bad_count).
    """
    good: list[Policy] = []
    bad = 0

    for idx, rec in enumerate(records):
        if isinstance(rec, Policy):
            good.append(rec)
            continue
        try:
            good.append(Policy.model_validate(rec))
        except ValidationError as e:
            bad += 1
            isolate(e, isolation, log, f"policy row #{idx}")

    if bad:
        log.warning("Dropped %d invalid policy rows out of %d", bad, len(good) + bad)
    return good, bad
