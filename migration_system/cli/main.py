#!/usr/bin/env python3
"""
Migration System CLI

Main command-line interface for the migration lifecycle controller.
"""

import argparse
import logging
import os
import sys
from typing import Optional

from ..config import ConfigurationManager, PipelineSettings
from ..error_handling import ConfigurationError, MigrationSystemError
from ..lifecycle import migration_output
from .commands import MigrationCLI
from .utils import CLIUtils

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--environment",
        "-e",
        help="ASP.NET Core environment used for migrations (default: Development)",
    )
    common.add_argument("--migrations-folder", help="Project containing the migrations")
    common.add_argument("--home", help="Home directory used as working directory")
    common.add_argument("--dotnet-root", help="Value for DOTNET_ROOT")
    common.add_argument(
        "--use-global-tool",
        action="store_true",
        default=None,
        help="Use a globally installed dotnet-ef instead of a local tool manifest",
    )
    common.add_argument(
        "--timeout", type=float, help="Deadline in seconds for each external command"
    )
    common.add_argument("--config", help="Path to a pipeline config YAML file")
    common.add_argument(
        "--config-dir",
        default="config",
        help="Directory searched for pipeline-config.yaml (default: config)",
    )
    common.add_argument("--report-file", help="Write a JSON error report to this file")
    common.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    parser = argparse.ArgumentParser(
        description="EF Core Migration Lifecycle CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    list_parser = subparsers.add_parser(
        "list", parents=[common], help="List migrations and their status"
    )
    list_parser.add_argument(
        "--format",
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )

    subparsers.add_parser(
        "status", parents=[common], help="Show baseline and current migration"
    )

    migrate_parser = subparsers.add_parser(
        "migrate", parents=[common], help="Capture the baseline and apply migrations"
    )
    migrate_parser.add_argument(
        "--skip-migrations", action="store_true", help="Do not touch the database"
    )

    test_parser = subparsers.add_parser(
        "test",
        parents=[common],
        help="Apply migrations, run tests and roll back on failure",
    )
    test_parser.add_argument("--test-folder", help="Test project folder")
    test_parser.add_argument(
        "--tests-environment", help="DOTNET_ENVIRONMENT for the test run"
    )
    test_parser.add_argument("--output-folder", help="Folder for test result files")
    test_parser.add_argument("--test-format", help="Test logger format (e.g. trx)")
    test_parser.add_argument("--test-verbosity", help="dotnet test verbosity")
    test_parser.add_argument(
        "--rollback-on-test-failure",
        action="store_true",
        default=None,
        help="Roll back to the baseline migration when tests fail",
    )
    test_parser.add_argument(
        "--skip-migrations", action="store_true", help="Run tests only"
    )
    test_parser.add_argument(
        "--upload-results",
        action="store_true",
        default=None,
        help="Copy the test result file into the artifacts directory",
    )
    test_parser.add_argument("--artifacts-dir", help="Artifacts directory")

    rollback_parser = subparsers.add_parser(
        "rollback", parents=[common], help="Move the database to a named migration"
    )
    rollback_parser.add_argument(
        "--target", required=True, help="Migration name, or 0 to revert everything"
    )

    return parser


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from --verbose or LOG_LEVEL."""
    level_name = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_settings(args) -> PipelineSettings:
    """Layer command-line flags over file and INPUT_* configuration."""
    manager = ConfigurationManager(config_dir=args.config_dir, config_file=args.config)

    overrides = {
        "migrations_folder": args.migrations_folder,
        "home_directory": args.home,
        "dotnet_root": args.dotnet_root,
        "use_global_dotnet_ef": args.use_global_tool,
        "command_timeout": args.timeout,
        "report_file": args.report_file,
        "run_migrations": False if getattr(args, "skip_migrations", False) else None,
        "rollback_migrations_on_test_failed": getattr(
            args, "rollback_on_test_failure", None
        ),
        "test_folder": getattr(args, "test_folder", None),
        "tests_env_name": getattr(args, "tests_environment", None),
        "test_output_folder": getattr(args, "output_folder", None),
        "test_format": getattr(args, "test_format", None),
        "test_verbosity": getattr(args, "test_verbosity", None),
        "upload_tests_results": getattr(args, "upload_results", None),
        "artifacts_dir": getattr(args, "artifacts_dir", None),
    }

    return manager.load_validated_settings(
        environment=args.environment,
        overrides=overrides,
        require_tests=args.command == "test",
    )


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    try:
        settings = load_settings(args)
    except ConfigurationError as e:
        print(f"✗ {e.message}", file=sys.stderr)
        for problem in e.problems:
            print(f"  - {problem}", file=sys.stderr)
        return 1

    cli = MigrationCLI(settings)
    try:
        return execute_command(cli, args)
    except MigrationSystemError as e:
        print(cli.report_failure(e, args.command), file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def execute_command(cli: MigrationCLI, args) -> int:
    """Execute the specified command."""

    if args.command == "list":
        return cmd_list(cli, args)
    elif args.command == "status":
        return cmd_status(cli, args)
    elif args.command == "migrate":
        return cmd_migrate(cli, args)
    elif args.command == "test":
        return cmd_test(cli, args)
    elif args.command == "rollback":
        return cmd_rollback(cli, args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


def cmd_list(cli: MigrationCLI, args) -> int:
    """Execute list command."""
    listing = cli.list_migrations()

    if args.format == "json":
        print(CLIUtils.format_json(listing))
        return 0

    migrations = listing["migrations"]
    print(f"Found {len(migrations)} migrations:\n")
    CLIUtils.print_table(
        ["Migration", "Status"],
        [[m["name"], m["status"]] for m in migrations],
    )
    return 0


def cmd_status(cli: MigrationCLI, args) -> int:
    """Execute status command."""
    status = cli.get_status()

    print("Migration Status:")
    print(f"  Environment: {status['environment']}")
    print(f"  Project: {status['migrations_folder']}")
    print(f"  Total migrations: {status['total']}")
    print(f"  Applied: {status['applied']}")
    print(f"  Pending: {status['pending']}")
    print(f"  Last non-pending migration: {status['last_non_pending']}")
    print(f"  Current applied migration: {status['current_applied']}")
    return 0


def cmd_migrate(cli: MigrationCLI, args) -> int:
    """Execute migrate command."""
    start_time = cli.timestamp()
    result = cli.migrate()
    end_time = cli.timestamp()

    if result["skipped"]:
        print("Migrations skipped")
    elif result["new_migration"]:
        print(f"✓ Applied migration: {result['new_migration']}")
    else:
        print("✓ No new migrations were applied")

    CLIUtils.write_outputs(
        {
            "baseline_migration": result["baseline_migration"],
            "new_migration": result["new_migration"],
            "start_time": start_time,
            "end_time": end_time,
        }
    )
    return 0


def cmd_test(cli: MigrationCLI, args) -> int:
    """Execute test command."""
    start_time = cli.timestamp()
    try:
        run = cli.run_tests()
    except MigrationSystemError as e:
        info = e.context.additional_info or {}
        run_data = info.get("lifecycle_run") or {}
        CLIUtils.write_outputs(_run_outputs(run_data, start_time, cli.timestamp()))
        if run_data.get("state") == "rolled_back":
            print(f"Rolled back to migration: {run_data['baseline']}", file=sys.stderr)
        elif run_data.get("state") == "rollback_failed":
            print("✗ Rollback failed; see log for details", file=sys.stderr)
        raise

    CLIUtils.write_outputs(_run_outputs(run.to_dict(), start_time, cli.timestamp()))
    if run.new_migration:
        print(f"✓ Applied migration: {run.new_migration}")
    print("✓ Tests passed")
    return 0


def cmd_rollback(cli: MigrationCLI, args) -> int:
    """Execute rollback command."""
    print(f"Rolling back to migration: {args.target}")
    cli.rollback(args.target)
    print("✓ Rollback completed")
    return 0


def _run_outputs(run_data: dict, start_time: str, end_time: str) -> dict:
    return {
        "baseline_migration": run_data.get("baseline", ""),
        "new_migration": migration_output(run_data.get("applied")),
        "rolled_back": bool(run_data.get("rolled_back")),
        "start_time": start_time,
        "end_time": end_time,
    }


if __name__ == "__main__":
    sys.exit(main())
