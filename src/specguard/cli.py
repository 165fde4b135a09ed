"""SpecGuard CLI - Command-line interface.

Usage:
    specguard match <expected> <actual>
    specguard verify --spec <path> --routes <module:attribute>
"""

import importlib
import json
import logging
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from specguard.errors import SpecGuardError
from specguard.modules.routing import Route
from specguard.types import AnalyzerConfig

console = Console()
app = typer.Typer(
    name="specguard",
    help="Validate OpenAPI specifications against the routes that serve them",
    no_args_is_help=True,
)

logger = logging.getLogger("specguard.cli")


def setup_logging(verbose: bool = False) -> None:
    """Set up logging with rich handler."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_time=False, show_path=False)],
    )

    logging.getLogger("specguard").setLevel(level)


@app.command()
def match(
    expected: Path = typer.Argument(
        ...,
        help="OpenAPI spec file the code is expected to satisfy",
        exists=True,
    ),
    actual: Path = typer.Argument(
        ...,
        help="OpenAPI spec file describing the actual API",
        exists=True,
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Also report paths, operations and parameters missing from the expected spec",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output results as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Compare two OpenAPI spec files."""
    from specguard.modules.matcher import match_documents
    from specguard.modules.openapi_reader import load_document_from_file

    setup_logging(verbose=verbose)

    try:
        expected_doc = load_document_from_file(str(expected))
        actual_doc = load_document_from_file(str(actual))
    except (SpecGuardError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    discrepancies = match_documents(expected_doc, actual_doc, strict=strict)
    _report(discrepancies, output_json)


@app.command()
def verify(
    spec: Path = typer.Option(
        ...,
        "--spec",
        "-s",
        help="Path to OpenAPI spec file (YAML or JSON)",
        exists=True,
    ),
    routes: str = typer.Option(
        ...,
        "--routes",
        "-r",
        help="Routing tree to analyze, as module:attribute (a Routing or a factory returning one)",
    ),
    base_paths: list[str] = typer.Option(
        None,
        "--base-path",
        "-b",
        help="Only analyze routes under this path (repeatable)",
    ),
    content_type: str = typer.Option(
        "application/json",
        "--content-type",
        help="Content type of bodies that declare none",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Also report paths, operations and parameters missing from the OpenAPI document",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output results as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Verify that an OpenAPI spec matches the routes of an application."""
    from specguard.modules.analyzer import analyze_routes
    from specguard.modules.matcher import match_documents
    from specguard.modules.openapi_reader import load_document_from_file

    setup_logging(verbose=verbose)

    try:
        routing = _load_routing(routes)
        config = AnalyzerConfig(base_paths=base_paths or [""], default_content_type=content_type)
        actual_doc = analyze_routes(routing, config)
        expected_doc = load_document_from_file(str(spec))
    except (SpecGuardError, ImportError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    logger.debug(f"Analyzed {len(actual_doc.paths)} paths from {routes}")
    discrepancies = match_documents(expected_doc, actual_doc, strict=strict)
    _report(discrepancies, output_json)


@app.command()
def version() -> None:
    """Show version information."""
    from specguard import __version__
    console.print(f"specguard version {__version__}")


def _load_routing(reference: str) -> Route:
    """Import a routing tree from a ``module:attribute`` reference."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ImportError(f"Expected module:attribute, got {reference!r}")

    module = importlib.import_module(module_name)
    try:
        target: Any = getattr(module, attribute)
    except AttributeError:
        raise ImportError(f"Module {module_name} has no attribute {attribute}") from None

    if not isinstance(target, Route) and callable(target):
        target = target()
    if not isinstance(target, Route):
        raise ImportError(f"{reference} is not a routing tree")
    return target


def _report(discrepancies: list[str], output_json: bool) -> None:
    """Print discrepancies and exit with 1 when there are any."""
    if output_json:
        print(json.dumps({"discrepancies": discrepancies}, indent=2))
    else:
        _output_rich(discrepancies)

    if discrepancies:
        raise typer.Exit(1)


def _output_rich(discrepancies: list[str]) -> None:
    """Output discrepancies with rich formatting."""
    if not discrepancies:
        console.print(Panel(
            "[green]✓ No discrepancies[/green]\n\n"
            "The API matches the OpenAPI specification.",
            title="Result",
            border_style="green",
        ))
        return

    table = Table(title=f"Discrepancies ({len(discrepancies)})")
    table.add_column("#", justify="right")
    table.add_column("Discrepancy")

    for index, discrepancy in enumerate(discrepancies, 1):
        table.add_row(str(index), discrepancy)

    console.print(table)


if __name__ == "__main__":
    app()
