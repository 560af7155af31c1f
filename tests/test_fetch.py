from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

import pytest

from policy_dashboard.config import get_settings
from policy_dashboard.ingest import fetch_policies as fetch_mod
from policy_dashboard.ingest.fetch_policies import (
    alliance_filter,
    fetch_policies,
    load_policies_json,
    policies_url,
    save_policies_json,
)


class FakeResponse:
    def __init__(self, payload: Any) -> None:
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> Any:
        return self._payload


def _settings():
    return replace(
        get_settings(),
        supabase_url="https://demo.supabase.co",
        supabase_key="anon-key",
        policies_table="full_query_polizas",
        alliance="bivett",
    )


def test_policies_url_and_filter() -> None:
    assert policies_url("https://demo.supabase.co/", "t") == "https://demo.supabase.co/rest/v1/t"
    assert alliance_filter("bivett") == 'cs.{"aliance":"bivett"}'


def test_fetch_sends_filter_and_key(monkeypatch, make_policy) -> None:
    calls: dict[str, Any] = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.update(url=url, params=params, headers=headers, timeout=timeout)
        return FakeResponse([make_policy()])

    monkeypatch.setattr(fetch_mod.requests, "get", fake_get)
    rows = fetch_policies(_settings(), alliance="partner")

    assert len(rows) == 1
    assert calls["url"] == "https://demo.supabase.co/rest/v1/full_query_polizas"
    assert calls["params"]["share_data"] == 'cs.{"aliance":"partner"}'
    assert "lista_mascotas" in calls["params"]["select"]
    assert calls["headers"]["apikey"] == "anon-key"
    assert calls["headers"]["Authorization"] == "Bearer anon-key"


def test_fetch_rejects_non_array(monkeypatch) -> None:
    monkeypatch.setattr(fetch_mod.requests, "get", lambda *a, **kw: FakeResponse({"message": "x"}))
    with pytest.raises(RuntimeError):
        fetch_policies(_settings())


def test_fetch_requires_credentials() -> None:
    s = replace(_settings(), supabase_key="")
    with pytest.raises(RuntimeError, match="SUPABASE_URL and SUPABASE_KEY"):
        fetch_policies(s)


def test_json_export_round_trip(tmp_path: Path, make_policy) -> None:
    rows = [make_policy(city="Bogotá")]
    path = save_policies_json(rows, tmp_path / "nested" / "policies.json")
    assert load_policies_json(path) == rows


def test_load_rejects_non_array(tmp_path: Path) -> None:
    path = tmp_path / "policies.json"
    path.write_text(json.dumps({"rows": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_policies_json(path)
