"""CLI interface for bagcheck using Typer framework."""

import json as jsonlib
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bagcheck import __description__, __version__
from bagcheck.config import BagcheckConfig, load_config
from bagcheck.engine import DepositType, RuleEvaluationStatus, ValidationLevel
from bagcheck.exceptions import BagcheckError, BagNotFoundError, RuleEngineConfigurationError
from bagcheck.report import ValidationReport
from bagcheck.service import RuleEngineService, ValidationRequest, build_service

app = typer.Typer(
    name="bagcheck",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()

LOG_LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

STATUS_STYLES = {
    RuleEvaluationStatus.SUCCESS: "green",
    RuleEvaluationStatus.FAILURE: "red",
    RuleEvaluationStatus.SKIPPED: "dim",
}


class PackageType(str, Enum):
    DEPOSIT = "DEPOSIT"
    MIGRATION = "MIGRATION"


class ReportFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def setup_logging(level: str) -> None:
    """Configure root logging for the CLI and the API server."""
    logging.basicConfig(
        level=LOG_LEVELS.get(level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"bagcheck version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """bagcheck - Rule based validator for DANS deposit bags."""


def _load(config: Path | None, preload_schemas: bool = False) -> tuple[BagcheckConfig, RuleEngineService]:
    """Load configuration and build the service, exiting with code 2 on failure."""
    try:
        bagcheck_config = load_config(config)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    setup_logging(bagcheck_config.logging.level)

    try:
        return bagcheck_config, build_service(bagcheck_config, preload_schemas=preload_schemas)
    except RuleEngineConfigurationError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)


def _print_report(report: ValidationReport) -> None:
    table = Table(title=f"{report.name} ({report.info_package_type.value}, profile {report.profile_version})")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Message", style="white")

    for evaluation in report.evaluations:
        style = STATUS_STYLES[evaluation.status]
        table.add_row(
            evaluation.number,
            f"[{style}]{evaluation.status.value}[/{style}]",
            escape(evaluation.message or ""),
        )

    console.print(table)

    summary = (
        f"{report.count(RuleEvaluationStatus.SUCCESS)} succeeded, "
        f"{report.count(RuleEvaluationStatus.FAILURE)} failed, "
        f"{report.count(RuleEvaluationStatus.SKIPPED)} skipped"
    )
    if report.is_compliant:
        console.print(f"[green]✓ Bag is compliant[/green] [dim]({summary})[/dim]")
    else:
        console.print(f"[red]✗ Bag is not compliant[/red] [dim]({summary})[/dim]")


@app.command()
def validate(
    path: Annotated[
        Path,
        typer.Argument(help="Path to the bag directory")
    ],
    package_type: Annotated[
        PackageType,
        typer.Option("--package-type", "-t", case_sensitive=False, help="Kind of package to validate")
    ] = PackageType.DEPOSIT,
    level: Annotated[
        ValidationLevel,
        typer.Option("--level", "-l", case_sensitive=False, help="Validate stand-alone or against the data station")
    ] = ValidationLevel.STAND_ALONE,
    output_format: Annotated[
        ReportFormat,
        typer.Option("--format", "-f", case_sensitive=False, help="Output format")
    ] = ReportFormat.TABLE,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .bagcheck.json)")
    ] = None,
) -> None:
    """Validate a bag against the DANS bag profile.

    Exits with 0 when the bag is compliant, 1 when it is not and 2 when the
    bag or the configuration cannot be used.
    """
    _, service = _load(config)
    request = ValidationRequest(path, DepositType(package_type.value), level)

    try:
        report = service.validate_bag(request)
    except BagNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(2)
    except BagcheckError as e:
        console.print(f"[red]Internal error:[/red] {escape(str(e))}")
        raise typer.Exit(3)

    if output_format == ReportFormat.JSON:
        print(jsonlib.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_report(report)

    raise typer.Exit(0 if report.is_compliant else 1)


@app.command()
def rules(
    package_type: Annotated[
        PackageType | None,
        typer.Option("--package-type", "-t", case_sensitive=False, help="Only show rules for this package type")
    ] = None,
    level: Annotated[
        ValidationLevel | None,
        typer.Option("--level", "-l", case_sensitive=False, help="Only show rules for this validation level")
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .bagcheck.json)")
    ] = None,
) -> None:
    """List the rule catalog."""
    _, service = _load(config)

    catalog = list(service.rules)
    if package_type is not None or level is not None:
        catalog = service.active_rules(
            DepositType(package_type.value) if package_type else DepositType.DEPOSIT,
            level or ValidationLevel.STAND_ALONE,
        )

    table = Table(title=f"Rules ({len(catalog)} found)")
    table.add_column("Number", style="cyan", no_wrap=True)
    table.add_column("Depends on", style="white")
    table.add_column("Package type", style="magenta")
    table.add_column("Context", style="dim")

    for rule in catalog:
        table.add_row(rule.number, ", ".join(rule.dependencies), rule.deposit_type.value, rule.context.value)

    console.print(table)


@app.command()
def serve(
    config: Annotated[
        Path | None,
        typer.Option("-c", "--config", help="Configuration file path (default: search for .bagcheck.json)")
    ] = None,
    port: Annotated[int | None, typer.Option("--port", help="Override port from config")] = None,
) -> None:
    """Start the bagcheck HTTP API on localhost."""
    from bagcheck.api import ApiError, start_api_server

    bagcheck_config, service = _load(config, preload_schemas=True)
    if port is not None:
        bagcheck_config.api.port = port

    try:
        server = start_api_server(bagcheck_config, service)
    except ApiError as e:
        console.print(f"[red]API Error:[/red] {e.detail}")
        raise typer.Exit(1)

    console.print(f"[green]bagcheck API listening on port {server.actual_port}[/green]")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutting down API server...[/yellow]")
        server.stop()


if __name__ == "__main__":
    app()
