"""Command-line entry point for the build reporter."""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .build.metadata import BuildRun, ProcessEnvironment, extract
from .build.tags import build_tags
from .config.loader import ConfigLoader
from .config.models import DEFAULT_BASE_URL, ReporterConfig
from .config.settings import Settings
from .credentials import EnvCredentialStore, StaticCredentialStore
from .payloads import build_event, build_metric, build_service_check
from .reporter import BuildReporter
from .transport.errors import ReporterError
from .transport.validator import CredentialValidator
from .utils.logger import setup_logger


def load_config(config_path: Optional[str], logger: logging.Logger) -> ReporterConfig:
    """
    Load configuration from a YAML file, or from the environment if no file is given.

    Raises:
        SystemExit: If configuration is missing or invalid
    """
    try:
        if config_path:
            logger.info(f"Loading configuration from {config_path}")
            return ConfigLoader.load_from_file(config_path)
        logger.info("Loading configuration from environment")
        return ConfigLoader.load_from_env()

    except FileNotFoundError:
        logger.error(
            f"Configuration file not found: {config_path}\n"
            "Please create one from config/config.yaml"
        )
        sys.exit(1)

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}", exc_info=True)
        sys.exit(1)


def run_report(args: argparse.Namespace, config: ReporterConfig, logger: logging.Logger) -> int:
    """
    Report one completed build.

    Returns:
        int: Exit code (non-zero only with --strict)
    """
    if args.sequential:
        config.reporting.concurrent = False

    build = BuildRun(
        start_time_millis=args.start_ms,
        duration_millis=args.duration_ms,
        result=args.result,
        number=args.number,
        job_display_name=args.job_name
    )
    environment = ProcessEnvironment()

    if args.dry_run:
        try:
            metadata = extract(build, environment)
        except ReporterError as e:
            logger.error(f"Build report aborted: {e}")
            return 1 if args.strict else 0

        tags = build_tags(metadata)
        logger.info("DRY RUN - payload preview:")
        logger.info(build_metric(
            config.reporting.duration_metric, "duration", metadata, tags
        ).model_dump_json())
        if metadata.hostname is not None:
            logger.info(build_event(metadata, tags).model_dump_json())
        logger.info(build_service_check(
            config.reporting.status_check, metadata, tags
        ).model_dump_json())
        return 0

    credentials = (
        EnvCredentialStore() if args.api_key_from_env
        else StaticCredentialStore(config.datadog)
    )
    reporter = BuildReporter(config, credentials=credentials, logger=logger)
    summary = asyncio.run(reporter.on_completed(build, environment))

    if args.strict and (summary is None or not summary.all_succeeded):
        return 1
    return 0


def run_validate(args: argparse.Namespace, config: ReporterConfig, logger: logging.Logger) -> int:
    """
    Validate an API key.

    Returns:
        int: 0 if the key is valid, 1 otherwise
    """
    candidate = args.api_key or config.datadog.api_key.get_secret_value()
    validator = CredentialValidator(config.datadog, logger=logger)
    result = asyncio.run(validator.validate(candidate))
    print(result.message)
    return 0 if result.valid else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='build-reporter',
        description='Report build results to the monitoring API as a metric, an event and a service check',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report a build, reading HOSTNAME, NODE_NAME, GIT_BRANCH from the environment
  build-reporter report --job-name build-x --number 42 --result SUCCESS \\
      --start-ms 1000000 --duration-ms 2500

  # Preview payloads without sending
  build-reporter report --dry-run ...

  # Check an API key
  build-reporter validate-key --api-key <key>
        """
    )

    parser.add_argument(
        '--config',
        default=None,
        help='Path to configuration file (default: configure from environment)'
    )

    parser.add_argument(
        '--log-level',
        default=os.getenv('LOG_LEVEL'),
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: configured level or LOG_LEVEL env var)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    report = subparsers.add_parser('report', help='Report a completed build')
    report.add_argument('--job-name', required=True, help='Job display name')
    report.add_argument('--number', type=int, required=True, help='Build number')
    report.add_argument('--result', required=True, help='Build result, e.g. SUCCESS or FAILURE')
    report.add_argument('--start-ms', type=int, required=True, help='Build start, ms since epoch')
    report.add_argument('--duration-ms', type=int, required=True, help='Build duration in ms')
    report.add_argument(
        '--dry-run',
        action='store_true',
        help='Log the payloads instead of sending them'
    )
    report.add_argument(
        '--sequential',
        action='store_true',
        help='Send the three payloads one after another'
    )
    report.add_argument(
        '--strict',
        action='store_true',
        help='Exit non-zero if any call fails'
    )
    report.add_argument(
        '--api-key-from-env',
        action='store_true',
        help='Re-read DATADOG_API_KEY from the environment for every call'
    )

    validate = subparsers.add_parser('validate-key', help='Validate an API key')
    validate.add_argument('--api-key', default=None, help='Key to check (default: configured key)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Parses command-line arguments and runs the selected command.
    """
    args = build_parser().parse_args(argv)

    bootstrap_logger = setup_logger("build_reporter", args.log_level or "INFO")
    if args.command == 'validate-key' and args.api_key and not args.config:
        config = ReporterConfig(datadog={
            "api_key": args.api_key,
            "base_url": Settings.get("DATADOG_BASE_URL", DEFAULT_BASE_URL),
        })
    else:
        config = load_config(args.config, bootstrap_logger)
    logger = setup_logger("build_reporter", args.log_level or config.logging.level)

    if args.command == 'report':
        return run_report(args, config, logger)
    return run_validate(args, config, logger)


if __name__ == '__main__':
    sys.exit(main())
