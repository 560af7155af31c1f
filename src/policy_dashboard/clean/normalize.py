"""Resolve the polymorphic pets field of a policy.

Upstream stores `lista_mascotas` either as a JSON array or as a string
holding that array. `normalize_pets` accepts both and returns typed `Pet`
models; `normalize_policy` wraps the outcome in a `NormalizedPolicy` result
so downstream aggregates can decide what to do with a failure.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable

from pydantic import ValidationError

from policy_dashboard.errors import IsolationPolicy, ParseError, PolicyDataError, isolate
from policy_dashboard.models import Pet, Policy

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedPolicy:
    """A policy together with its resolved pets, or the reason they failed.

    Attributes:
        policy: The validated policy record.
        pets: Resolved pets, empty when `error` is set.
        error: ParseError raised while resolving the pets field, if any.
    """
    policy: Policy
    pets: tuple[Pet, ...] = ()
    error: PolicyDataError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def normalize_pets(field: Any) -> tuple[Pet, ...]:
    """Return the pets held in a policy's pets field.

    Args:
        field: A list of pet dicts (or `Pet` models), or a JSON string
            encoding such a list.

    Returns:
        Tuple of `Pet` in the original order.

    Raises:
        ParseError: if the string is not valid JSON, does not decode to an
            array, an entry is not a pet object, or the field has any other
            type.
    """
    if isinstance(field, str):
        try:
            field = json.loads(field)
        except json.JSONDecodeError as e:
            raise ParseError(f"pets field is not valid JSON: {e.msg}") from e
        if not isinstance(field, list):
            raise ParseError(f"pets field decodes to {type(field).__name__}, expected an array")
    elif not isinstance(field, (list, tuple)):
        raise ParseError(f"pets field has unsupported type {type(field).__name__}")

    pets: list[Pet] = []
    for i, item in enumerate(field):
        if isinstance(item, Pet):
            pets.append(item)
            continue
        if not isinstance(item, dict):
            raise ParseError(f"pet #{i} is a {type(item).__name__}, expected an object")
        try:
            pets.append(Pet.model_validate(item))
        except ValidationError as e:
            raise ParseError(f"pet #{i} is malformed: {e.error_count()} validation error(s)") from e
    return tuple(pets)


def normalize_policy(policy: Policy) -> NormalizedPolicy:
    """Resolve one policy's pets without raising."""
    try:
        return NormalizedPolicy(policy=policy, pets=normalize_pets(policy.pets))
    except ParseError as e:
        return NormalizedPolicy(policy=policy, error=e)


def normalize_policies(
    policies: Iterable[Policy],
    isolation: IsolationPolicy = IsolationPolicy.SKIP,
) -> list[NormalizedPolicy]:
    """Resolve the pets of every policy.

    With `IsolationPolicy.SKIP` failing policies are kept as error results
    (they still count as policies but contribute no pets or revenue). With
    `IsolationPolicy.ABORT` the first ParseError propagates.

    Args:
        policies: Validated policies.
        isolation: Isolation policy for malformed pets fields.

    Returns:
        One `NormalizedPolicy` per input policy, in input order.
    """
    out: list[NormalizedPolicy] = []
    failed = 0
    for idx, policy in enumerate(policies):
        result = normalize_policy(policy)
        if result.error is not None:
            failed += 1
            isolate(result.error, isolation, log, f"pets of policy #{idx}")
        out.append(result)

    if failed:
        log.info("Normalized %d policies (%d with unreadable pets)", len(out), failed)
    return out
