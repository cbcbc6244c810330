"""
Audit CLI

Run an app and device audit against a captured device snapshot.
Usage: appaudit --snapshot device.yaml [--device SERIAL] [--mode full] [--output FILE]
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import AuditConfig, VALID_LOCALES, VALID_MODES, VALID_POLICIES, set_config
from .exceptions import AuditError
from .reconnaissance import ADBConnection, ADBDeviceSettings, DeviceSnapshot
from .report import generate_report, write_json
from .scanner import AuditScanner
from .scanning import LocalReferenceDatabase, load_default
from .utils import format_timestamp

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="appaudit", description="Audit installed Android apps and device security")
    parser.add_argument("--snapshot", required=True, help="YAML inventory of the device")
    parser.add_argument("--device", help="Read security settings live from this ADB serial")
    parser.add_argument("--mode", choices=VALID_MODES, help="quick (default) or full (with archive checks)")
    parser.add_argument("--policy", choices=VALID_POLICIES, help="Scoring policy")
    parser.add_argument("--reference-db", help="Reference database file (YAML or JSON)")
    parser.add_argument("--workers", type=int, help="Maximum concurrent package audits")
    parser.add_argument("--locale", choices=VALID_LOCALES, help="Report language")
    parser.add_argument("--output", help="Output file for JSON report")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def build_config(args: argparse.Namespace) -> AuditConfig:
    """Environment configuration with command line overrides."""
    base = AuditConfig.from_env()
    return AuditConfig(
        max_workers=args.workers if args.workers is not None else base.max_workers,
        mode=args.mode or base.mode,
        scoring_policy=args.policy or base.scoring_policy,
        score_aggregation=base.score_aggregation,
        reference_db_path=Path(args.reference_db) if args.reference_db else base.reference_db_path,
        locale=args.locale or base.locale,
        log_level="DEBUG" if args.verbose else base.log_level,
        output_dir=base.output_dir,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except AuditError as e:
        print(f"[!] {e.message}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    set_config(config)

    try:
        snapshot = DeviceSnapshot.from_file(args.snapshot)
        if config.reference_db_path:
            reference_db = LocalReferenceDatabase.from_file(config.reference_db_path)
        else:
            reference_db = load_default()
    except AuditError as e:
        logger.error(e.message)
        return 1

    if args.device:
        adb = ADBConnection(device_id=args.device)
        if not adb.is_connected():
            logger.error(f"Could not connect to device {args.device}")
            return 1
        settings = ADBDeviceSettings(adb)
    else:
        settings = snapshot.settings_provider()

    scanner = AuditScanner(snapshot.package_provider(), settings, reference_db, config)
    report = scanner.scan(config.mode)

    print(f"\n{generate_report(report, config.locale)}")

    output = args.output
    if not output and config.output_dir:
        config.ensure_directories()
        output = config.output_dir / f"audit_{format_timestamp()}.json"
    if output:
        path = write_json(report, output)
        print(f"\n[✓] Report saved to {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
