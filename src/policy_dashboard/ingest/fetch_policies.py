"""Fetch policy rows from Supabase, or read/write them as JSON exports.

The upstream view is filtered by alliance tag on the server side (PostgREST
`cs` containment on the `share_data` JSON column); the aggregation code
never filters by tenant itself.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests  # type: ignore[import-untyped]

from policy_dashboard.config import Settings

log = logging.getLogger(__name__)

POLICY_COLUMNS = ("created_at", "isAnualPlan", "share_data", "ciudad", "lista_mascotas")


def policies_url(base_url: str, table: str) -> str:
    """Return the PostgREST endpoint of a Supabase table or view.

    Args:
        base_url: Supabase project URL (e.g. https://xyz.supabase.co).
        table: Table or view name.
    """
    return f"{base_url.rstrip('/')}/rest/v1/{table}"


def alliance_filter(alliance: str) -> str:
    """Return the PostgREST containment filter for `share_data.aliance`."""
    return "cs." + json.dumps({"aliance": alliance}, separators=(",", ":"))


def fetch_policies(
    settings: Settings,
    alliance: str | None = None,
    timeout: float = 60.0,
) -> list[dict[str, Any]]:
    """Download the policy rows of one alliance.

    Args:
        settings: Settings holding the Supabase URL, key and table.
        alliance: Alliance tag to filter on (defaults to `settings.alliance`).
        timeout: Request timeout in seconds.

    Returns:
        List of raw policy dicts as returned by PostgREST.

    Raises:
        RuntimeError: if Supabase credentials are not configured or the
            response is not a JSON array.
        requests.HTTPError: if the remote request fails (non-2xx status).
    """
    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_KEY are required to fetch policies. "
            "Set them in .env or pass --input with a JSON export."
        )

    url = policies_url(settings.supabase_url, settings.policies_table)
    tag = alliance or settings.alliance
    params = {
        "select": ",".join(POLICY_COLUMNS),
        "share_data": alliance_filter(tag),
    }
    headers = {
        "apikey": settings.supabase_key,
        "Authorization": f"Bearer {settings.supabase_key}",
        "Accept": "application/json",
    }

    log.info("Fetching policies from %s (alliance=%s)", url, tag)
    r = requests.get(url, params=params, headers=headers, timeout=timeout)
    r.raise_for_status()

    data = r.json()
    if not isinstance(data, list):
        raise RuntimeError(f"Unexpected response from {url}: expected a JSON array")

    log.info("Fetched %d policies", len(data))
    return data


def load_policies_json(path: Path) -> list[dict[str, Any]]:
    """Read a JSON export holding an array of policy rows.

    Raises:
        ValueError: if the file does not hold a JSON array.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a JSON array of policies")
    log.info("Loaded %d policies from %s", len(data), path)
    return data


def save_policies_json(records: list[dict[str, Any]], path: Path) -> Path:
    """Write policy rows to `path` as UTF-8 JSON and return the path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
    log.info("Saved %d policies to %s", len(records), path)
    return path
