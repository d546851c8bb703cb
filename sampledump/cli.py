"""CLI entry point for the sample data dump tool."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sampledump.config import DumpSettings, get_settings, load_table_configurations
from sampledump.exceptions import ConfigurationError, SafetyViolationError, SampleDumpError
from sampledump.gateway import PostgresGateway
from sampledump.logging_utils import RunIdFilter, get_logger, setup_logging
from sampledump.models import Result, TableConfiguration
from sampledump.transport import PostgresTransport

logger = get_logger(__name__)

COMMANDS = ("dump", "load", "validate", "reset-sequence", "wipe")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="sampledump",
        description="Dump, mask and reload bounded samples of PostgreSQL tables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  sampledump validate
  sampledump dump --table public.users
  sampledump load --table public.users --table public.orders
  sampledump --check-db
        """,
    )

    parser.add_argument("command", nargs="?", choices=COMMANDS, help="Operation to run for each table")
    parser.add_argument(
        "--table",
        action="append",
        default=[],
        metavar="SCHEMA.TABLE",
        help="Only run for this table (repeatable)",
    )
    parser.add_argument("--config-file", type=str, default=None, help="Override table configurations file")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None)
    parser.add_argument("--log-format", choices=["json", "text"], default="json")
    parser.add_argument("--check-db", action="store_true", help="Check database connectivity and exit")

    parsed = parser.parse_args(argv)

    if not parsed.check_db and parsed.command is None:
        parser.error("a command is required unless --check-db is given")

    return parsed


def select_tables(
    configurations: list[TableConfiguration],
    requested: list[str],
) -> list[TableConfiguration]:
    if not requested:
        return configurations

    by_name = {config.qualified_table_name: config for config in configurations}
    unknown = [name for name in requested if name not in by_name]
    if unknown:
        raise ConfigurationError("Requested tables are not configured", details={"tables": unknown})
    return [by_name[name] for name in requested]


def run_command(gateway: PostgresGateway, command: str, table_configuration: TableConfiguration) -> Result:
    """Run one command for one table."""
    if command == "dump":
        validation = gateway.is_valid(table_configuration)
        if validation.is_failure:
            return validation
        return gateway.dump_to_local_file(table_configuration)
    if command == "load":
        return gateway.load_dump_file(table_configuration)
    if command == "validate":
        return gateway.is_valid(table_configuration)
    if command == "reset-sequence":
        return gateway.reset_sequence(table_configuration)
    if command == "wipe":
        return gateway.wipe_table(table_configuration)
    raise ValueError(f"Unknown command: {command}")


def run_all(
    gateway: PostgresGateway,
    command: str,
    configurations: list[TableConfiguration],
) -> int:
    """Run ``command`` for every table; returns the number of failures."""
    failures = 0
    for table_configuration in configurations:
        table = table_configuration.qualified_table_name
        result = run_command(gateway, command, table_configuration)
        if result.is_failure:
            failures += 1
            logger.error(f"{command} failed", extra={"table": table, "reason": str(result.error)})
        else:
            logger.info(f"{command} succeeded", extra={"table": table, "result": str(result.value)})
    return failures


def _load_settings(args: argparse.Namespace) -> DumpSettings:
    settings = get_settings()
    if args.config_file:
        settings.table_configurations_file = Path(args.config_file)
    return settings


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI execution."""
    args = parse_args(argv)
    setup_logging(level=args.log_level or "INFO", json_format=(args.log_format == "json"))
    RunIdFilter.new_run_id()

    try:
        settings = _load_settings(args)
        if args.log_level is None:
            setup_logging(level=settings.log_level, json_format=(args.log_format == "json"))

        with PostgresTransport(settings) as transport:
            if args.check_db:
                healthy = transport.ping()
                logger.info("Database health check " + ("passed" if healthy else "failed"))
                return 0 if healthy else 1

            configurations = select_tables(
                load_table_configurations(settings.table_configurations_file),
                args.table,
            )
            gateway = PostgresGateway(transport, settings)
            failures = run_all(gateway, args.command, configurations)

        logger.info(
            f"{args.command} finished",
            extra={"tables": len(configurations), "failures": failures},
        )
        return 0 if failures == 0 else 1

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except SafetyViolationError as e:
        logger.critical(f"Refusing to run: {e}")
        return 1
    except SampleDumpError as e:
        logger.error(f"Sample dump failed: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 130
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
