"""Error types raised while reading policy records, and the isolation policy.

A single malformed policy can either be isolated (it contributes nothing to
the aggregate that failed on it) or abort the whole run. The choice is made
once per report through `IsolationPolicy` and applied to every aggregate.
"""

from __future__ import annotations

import logging
from enum import Enum


class PolicyDataError(ValueError):
    """Base class for problems found in a single policy record."""


class ParseError(PolicyDataError):
    """The pets field is not valid JSON, not an array, or holds a non-pet entry."""


class MissingPricingError(PolicyDataError):
    """A pet lacks its pricing block or one of the four price fields."""


class IsolationPolicy(str, Enum):
    """How a failing policy is treated by validation and the aggregates.

    SKIP: log a warning, the policy contributes zero to the failing aggregate.
    ABORT: re-raise, the whole report fails.
    """

    SKIP = "skip"
    ABORT = "abort"


def isolate(
    error: Exception,
    isolation: IsolationPolicy,
    logger: logging.Logger,
    context: str,
    level: int = logging.WARNING,
) -> None:
    """Apply `isolation` to an error raised for one policy.

    Args:
        error: The exception raised for the policy.
        isolation: Active isolation policy.
        logger: Logger of the calling module.
        context: Short description of the step and policy (used in the log).
        level: Log level used when the error is skipped.

    Raises:
        The original exception when `isolation` is ABORT.
    """
    if isolation is IsolationPolicy.ABORT:
        raise error
    logger.log(level, "Skipping %s: %s", context, error)
