#!/usr/bin/env python3
"""
GPDB Elastic Instance Sweeper
Deletes AnalyticDB for PostgreSQL instances left behind by acceptance runs.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException

from gpdb_toolkit.common import waiter_utils
from gpdb_toolkit.common.acs_client_factory import create_client
from gpdb_toolkit.common.cli_utils import add_region_args, configure_logging, confirm_action
from gpdb_toolkit.common.exceptions import ClientSetupError, SweepListingError
from gpdb_toolkit.common.settings import PAGE_SIZE_LARGE, SETTLE_DELAY_SECONDS, get_sweep_regions
from gpdb_toolkit.common.sweep_constants import SWEEP_PREFIXES, has_sweep_prefix
from gpdb_toolkit.scripts.gpdb_operations import GpdbService, RemoteResourceRecord
from gpdb_toolkit.scripts.vpc_operations import NetworkVerdict, VpcService

SWEEPER_NAME = "alicloud_gpdb_elastic_instance"


class SweepFilter:
    """Ordered, case-insensitive description prefixes marking test-created instances."""

    def __init__(self, prefixes: Iterable[str] = SWEEP_PREFIXES):
        self.prefixes = tuple(prefixes)

    def matches(self, description: str) -> bool:
        return has_sweep_prefix(description, self.prefixes)


@dataclass
class SweepReport:
    """What a sweep did with each instance it listed."""

    region: str
    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    undetermined: list[str] = field(default_factory=list)
    eligible: list[str] = field(default_factory=list)

    @property
    def swept(self) -> bool:
        """True when at least one deletion succeeded."""
        return bool(self.deleted)


def _unique_records(records: Iterable[RemoteResourceRecord]) -> list[RemoteResourceRecord]:
    """Drop repeated instance ids; pages can shift while listing."""
    seen = set()
    unique = []
    for record in records:
        if record.instance_id in seen:
            logging.debug("Ignoring repeated listing of %s", record.instance_id)
            continue
        seen.add(record.instance_id)
        unique.append(record)
    return unique


def _is_eligible(record: RemoteResourceRecord, sweep_filter: SweepFilter, vpc_service: VpcService, report: SweepReport) -> bool:
    if sweep_filter.matches(record.description):
        return True
    # Instances whose description never got set are matched by their network instead
    verdict = vpc_service.need_sweep_vpc(record.vpc_id, record.vswitch_id)
    if verdict is NetworkVerdict.SWEEP:
        return True
    if verdict is NetworkVerdict.UNKNOWN:
        report.undetermined.append(record.instance_id)
    logging.info("Skipping GPDB instance: %s (%s)", record.description, record.instance_id)
    report.skipped.append(record.instance_id)
    return False


def _delete_instance(service: GpdbService, record: RemoteResourceRecord, report: SweepReport) -> None:
    print(f"🗑️  Deleting GPDB instance: {record.instance_id} ({record.description})")
    try:
        service.delete_db_instance(record.instance_id)
    except (ServerException, ClientException, ValueError) as exc:
        logging.error("Failed to delete GPDB instance %s: %s", record.instance_id, exc)
        print(f"  ❌ Failed to delete {record.instance_id}: {exc}")
        report.failed.append(record.instance_id)
        return
    print(f"  ✅ Deletion initiated for {record.instance_id}")
    report.deleted.append(record.instance_id)


def sweep_gpdb_elastic_instances(
    region: str,
    *,
    client_factory: Callable = create_client,
    prefixes: Iterable[str] = SWEEP_PREFIXES,
    settle_delay: int = SETTLE_DELAY_SECONDS,
    page_size: int = PAGE_SIZE_LARGE,
    dry_run: bool = False,
) -> SweepReport:
    """
    Delete every test-created GPDB instance in a region.

    Args:
        region: Region id to sweep
        client_factory: Callable building an API client for a region
        prefixes: Description prefixes marking test-created instances
        settle_delay: Seconds to wait after deleting anything
        page_size: Page size of the list calls
        dry_run: Classify only; nothing is deleted

    Returns:
        SweepReport: Per-instance outcome

    Raises:
        ClientSetupError: If the client cannot be built
        SweepListingError: If listing instances fails
    """
    try:
        client = client_factory(region)
    except (ValueError, OSError, ClientException) as exc:
        raise ClientSetupError(region, exc) from exc

    service = GpdbService(client, region)
    vpc_service = VpcService(client, prefixes)
    sweep_filter = SweepFilter(prefixes)
    report = SweepReport(region=region)

    try:
        records = service.list_db_instances(page_size)
    except (ServerException, ClientException, ValueError, KeyError) as exc:
        raise SweepListingError("DescribeDBInstances", exc) from exc
    logging.info("Found %d GPDB instance(s) in %s", len(records), region)

    for record in _unique_records(records):
        if not _is_eligible(record, sweep_filter, vpc_service, report):
            continue
        report.eligible.append(record.instance_id)
        if dry_run:
            print(f"  Would delete GPDB instance: {record.instance_id} ({record.description})")
            continue
        _delete_instance(service, record, report)

    if report.swept:
        waiter_utils.settle(settle_delay)
    return report


def _print_summary(reports: list[SweepReport], dry_run: bool) -> None:
    print("\n" + "=" * 50)
    print("GPDB ELASTIC INSTANCE SWEEP SUMMARY:")
    for report in reports:
        if dry_run:
            print(f"• {report.region}: {len(report.eligible)} eligible, {len(report.skipped)} skipped")
        else:
            print(
                f"• {report.region}: {len(report.deleted)} deleted, {len(report.failed)} failed, "
                f"{len(report.skipped)} skipped"
            )
        if report.undetermined:
            print(f"  ⚠️  Could not check network of: {', '.join(report.undetermined)}")


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Delete GPDB elastic instances left behind by acceptance runs."
    )
    add_region_args(parser, "Region to sweep (repeatable; default: GPDB_SWEEP_REGIONS or ALICLOUD_REGION).")
    parser.add_argument(
        "--prefix",
        action="append",
        dest="prefixes",
        help=f"Description prefix to sweep (repeatable; default: {', '.join(SWEEP_PREFIXES)}).",
    )
    parser.add_argument("--dry-run", action="store_true", help="List eligible instances without deleting.")
    parser.add_argument("--yes", action="store_true", help="Skip the confirmation prompt.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Sweep the selected regions. Returns a process exit code."""
    args = _parse_args(argv if argv is not None else sys.argv[1:])
    configure_logging(args.verbose)
    regions = args.regions or get_sweep_regions()
    prefixes = tuple(args.prefixes or SWEEP_PREFIXES)

    print("GPDB Elastic Instance Sweeper")
    print("=" * 50)
    if not args.dry_run and not confirm_action(
        f"Delete GPDB instances matching {', '.join(prefixes)} in {', '.join(regions)}? [y/N] ",
        skip_prompt=args.yes,
    ):
        print("❌ Sweep cancelled")
        return 0

    reports = []
    for region in regions:
        print(f"\n=== Sweeping {region} ===")
        try:
            reports.append(sweep_gpdb_elastic_instances(region, prefixes=prefixes, dry_run=args.dry_run))
        except (ClientSetupError, SweepListingError) as exc:
            logging.error("Sweep of %s failed: %s", region, exc)
            print(f"❌ {exc}")
            return 1

    _print_summary(reports, args.dry_run)
    if any(report.failed or report.undetermined for report in reports):
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
