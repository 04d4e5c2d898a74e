"""
Error Report CLI Commands

Inspects JSON error reports written by ``migration-system --report-file``.
"""

import json
from pathlib import Path

import click

DEFAULT_REPORT_FILE = "migration-report.json"


def _load_report(report_file: str) -> dict:
    path = Path(report_file)
    if not path.exists():
        raise click.ClickException(f"Report file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid report file {path}: {e}") from e


report_file_option = click.option(
    "--file",
    "report_file",
    type=click.Path(dir_okay=False),
    default=DEFAULT_REPORT_FILE,
    envvar="MIGRATION_REPORT_FILE",
    show_default=True,
    help="Error report to read",
)


@click.group()
def report():
    """Migration error report commands."""
    pass


@report.command()
@report_file_option
@click.option(
    "--format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
def show(report_file: str, format: str):
    """Show every error in a report."""
    data = _load_report(report_file)
    errors = data.get("errors", [])

    if format == "json":
        click.echo(json.dumps(errors, indent=2))
        return

    if not errors:
        click.echo("No errors recorded")
        return

    for i, error_info in enumerate(errors, 1):
        code = error_info.get("error_code") or error_info.get("error_type")
        click.echo(f"{i}. [{code}] {error_info.get('error_message')}")
        if error_info.get("operation"):
            click.echo(f"   Operation: {error_info['operation']}")
        context = error_info.get("context") or {}
        if context.get("environment"):
            click.echo(f"   Environment: {context['environment']}")
        if context.get("target_migration"):
            click.echo(f"   Target migration: {context['target_migration']}")
        if error_info.get("remediation"):
            click.echo(f"   Solution: {error_info['remediation']}")
        click.echo()


@report.command()
@report_file_option
@click.option(
    "--format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.option("--limit", type=int, default=10, help="Number of recent errors to show")
def summary(report_file: str, format: str, limit: int):
    """Show error counts and recent errors."""
    data = _load_report(report_file)
    summary_data = data.get("summary", {})

    if format == "json":
        click.echo(json.dumps(summary_data, indent=2))
        return

    click.echo("=" * 50)
    click.echo("MIGRATION ERROR SUMMARY")
    click.echo("=" * 50)
    if data.get("generated_at"):
        click.echo(f"Generated: {data['generated_at']}")
    click.echo(f"Total Errors: {summary_data.get('total_errors', 0)}")

    if summary_data.get("by_category"):
        click.echo("\nBy Category:")
        for category, count in summary_data["by_category"].items():
            click.echo(f"  {category}: {count}")

    if summary_data.get("by_severity"):
        click.echo("\nBy Severity:")
        for severity, count in summary_data["by_severity"].items():
            click.echo(f"  {severity}: {count}")

    recent = summary_data.get("recent_errors") or []
    if recent:
        click.echo(f"\nRecent Errors (last {limit}):")
        for error_info in recent[-limit:]:
            click.echo(f"  [{error_info['timestamp']}] {error_info['error']}")


if __name__ == "__main__":
    report()
