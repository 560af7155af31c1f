"""Command-line interface for the policy dashboard.

Provides subcommands `fetch` (download the policy rows to a JSON export) and
`report` (compute every dashboard aggregate and print it as JSON). Each
command is implemented as a `cmd_*` function that accepts an argparse
namespace.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from policy_dashboard.aggregate.build_report import build_report
from policy_dashboard.config import ReportOptions, Settings, get_settings
from policy_dashboard.errors import IsolationPolicy
from policy_dashboard.ingest.fetch_policies import (
    fetch_policies,
    load_policies_json,
    save_policies_json,
)
from policy_dashboard.logging_config import configure_logging

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _load_records(args: argparse.Namespace, s: Settings) -> list[dict[str, Any]]:
    """Return policy rows from `--input`, `POLICIES_FILE`, or Supabase."""
    source = args.input or s.policies_file
    if source is not None:
        return load_policies_json(Path(source))
    return fetch_policies(s)


def _report_options(args: argparse.Namespace, s: Settings) -> ReportOptions:
    """Return the settings' report options overridden by CLI flags."""
    opts = s.report_options()
    if args.timezone:
        try:
            opts = replace(opts, timezone=ZoneInfo(args.timezone))
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise SystemExit(f"Unknown timezone: {args.timezone}") from e
    if args.top_cities is not None:
        opts = replace(opts, top_cities=args.top_cities)
    if args.isolation:
        opts = replace(opts, isolation=IsolationPolicy(args.isolation))
    return opts


# --------------------------------------------------
# FETCH
# --------------------------------------------------
def cmd_fetch(args: argparse.Namespace) -> None:
    """Download the alliance's policy rows and save them as a JSON export.

    Args:
        args: argparse namespace with `out` and `alliance`.
    """
    s = get_settings()
    records = fetch_policies(s, alliance=args.alliance)
    out = Path(args.out) if args.out else s.data_dir / "policies.json"
    save_policies_json(records, out)


# --------------------------------------------------
# REPORT
# --------------------------------------------------
def cmd_report(args: argparse.Namespace) -> None:
    """Build the dashboard report and print it (or write it to `--out`).

    Args:
        args: argparse namespace with `input`, `out`, `timezone`,
            `top_cities` and `isolation`.
    """
    s = get_settings()
    records = _load_records(args, s)
    report = build_report(records, _report_options(args, s))

    payload = report.model_dump_json(by_alias=True, indent=2)
    if args.out:
        out = Path(args.out)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(payload, encoding="utf-8")
        log.info("Report written to %s", out)
    else:
        print(payload)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser with `fetch` and `report`
        subcommands.
    """
    p = argparse.ArgumentParser(prog="policy_dashboard")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_fetch = sub.add_parser("fetch")
    p_fetch.add_argument("--out", default=None)
    p_fetch.add_argument("--alliance", default=None)

    p_report = sub.add_parser("report")
    p_report.add_argument("--input", default=None)
    p_report.add_argument("--out", default=None)
    p_report.add_argument("--timezone", default=None)
    p_report.add_argument("--top-cities", type=int, default=None)
    p_report.add_argument(
        "--isolation",
        choices=[i.value for i in IsolationPolicy],
        default=None,
    )

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    # stdout carries the report JSON
    configure_logging(Path("logs/policy_dashboard.log"), stream=sys.stderr)

    args = build_parser().parse_args(argv)

    if args.cmd == "fetch":
        cmd_fetch(args)
    elif args.cmd == "report":
        cmd_report(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
