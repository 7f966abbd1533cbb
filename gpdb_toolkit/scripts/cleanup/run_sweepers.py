#!/usr/bin/env python3
"""
Sweeper harness entry point.
Runs registered sweepers for the selected regions.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

from gpdb_toolkit.common.cli_utils import add_region_args, configure_logging
from gpdb_toolkit.common.settings import get_sweep_regions
from gpdb_toolkit.sweeper_registry import SweeperRegistry, build_default_registry, run_sweepers


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run resource sweepers.")
    add_region_args(parser, "Region to sweep (repeatable; default: GPDB_SWEEP_REGIONS or ALICLOUD_REGION).")
    parser.add_argument(
        "--sweep-run",
        help="Comma-separated sweeper names to run (default: all registered).",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None, registry: Optional[SweeperRegistry] = None) -> int:
    """Run the sweepers; returns 1 when any of them failed."""
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)
    registry = registry or build_default_registry()
    regions = args.regions or get_sweep_regions()
    names = [name.strip() for name in args.sweep_run.split(",") if name.strip()] if args.sweep_run else None

    try:
        failures = run_sweepers(registry, regions, names)
    except ValueError as exc:
        print(f"❌ {exc}")
        return 1

    if failures:
        print(f"\n❌ {len(failures)} sweeper run(s) failed:")
        for failure in failures:
            print(f"  {failure.name} ({failure.region}): {failure.error}")
        return 1
    print("\n✅ All sweepers completed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
