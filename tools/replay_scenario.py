#!/usr/bin/env python3
"""Replay a ledger scenario (YAML) against in-memory collaborators and print a JSON report."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import yaml

from lockwrap.integration.scenario import load_scenario, run_scenario


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("scenario", type=Path, help="scenario YAML file")
    ap.add_argument("--strict", action="store_true", help="exit 1 if any step was rejected")
    ap.add_argument("-v", "--verbose", action="store_true", help="log ledger commits and aborts")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        report = run_scenario(load_scenario(args.scenario))
    except (OSError, yaml.YAMLError, TypeError, ValueError) as exc:
        print(f"replay_scenario error: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    if args.strict and not report.ok:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
