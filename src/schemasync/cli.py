"""
Command-line interface for schemasync.
"""

import logging
import sys
from functools import wraps
from logging.handlers import RotatingFileHandler
from typing import List, Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import LoggingConfig, SchemaSyncConfig
from .context import PreviewFeature, SqlFamily
from .datamodel.serialization import dump_datamodel, load_column_pairs, load_datamodel
from .dialects.factory import FlavourFactory
from .exceptions import ConfigurationError, SchemaSyncError
from .schema.column_differ import diff_column
from .schema.reconciler import reconcile as reconcile_datamodels
from .schema.warnings import ReconciliationWarning


console = Console()
err_console = Console(stderr=True)


def handle_errors(func):
    """Decorator to handle errors gracefully in CLI commands."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SchemaSyncError as e:
            console.print(f"[red]Error:[/red] {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted by user[/yellow]")
            sys.exit(0)
        except Exception as e:
            console.print(f"[red]Unexpected error:[/red] {e}")
            if "--debug" in sys.argv:
                import traceback
                traceback.print_exc()
            sys.exit(1)
    return wrapper


def _setup_logging(config: LoggingConfig, debug: bool) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if config.file:
        handlers.append(
            RotatingFileHandler(
                config.file, maxBytes=config.max_size, backupCount=config.backup_count
            )
        )
    logging.basicConfig(
        level=logging.DEBUG if debug else getattr(logging, config.level),
        format=config.format,
        handlers=handlers,
        force=True,
    )


def _load_config(
    config_path: Optional[str],
    family: Optional[str],
    named_constraints: bool,
    debug: bool,
) -> SchemaSyncConfig:
    """Load the configuration file and apply command-line overrides."""
    config = SchemaSyncConfig.from_yaml(config_path) if config_path else SchemaSyncConfig()

    if family:
        config.reconciliation.sql_family = SqlFamily(family)
    if named_constraints and not config.reconciliation.named_constraints:
        config.reconciliation.preview_features.append(PreviewFeature.NAMED_CONSTRAINTS.value)

    _setup_logging(config.logging, debug or config.debug)
    return config


config_option = click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Configuration file path",
)
family_option = click.option(
    "--family",
    type=click.Choice([f.value for f in SqlFamily]),
    help="SQL family (overrides config)",
)
named_constraints_option = click.option(
    "--named-constraints",
    is_flag=True,
    help="Enable the namedConstraints preview feature",
)


@click.group()
@click.version_option(__version__)
@click.option(
    "--debug", is_flag=True, help="Enable debug mode"
)
@click.pass_context
def main(ctx, debug):
    """schemasync: keep authored schemas in sync with re-introspected databases."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@main.command()
@click.argument("old_schema", type=click.Path(exists=True))
@click.argument("new_schema", type=click.Path(exists=True))
@config_option
@family_option
@named_constraints_option
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    help="Write the reconciled schema to this file instead of stdout",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    help="Output format (overrides config)",
)
@click.pass_context
@handle_errors
def reconcile(
    ctx,
    old_schema: str,
    new_schema: str,
    config: Optional[str],
    family: Optional[str],
    named_constraints: bool,
    output: Optional[str],
    fmt: Optional[str],
):
    """Recover names and customizations of OLD_SCHEMA in NEW_SCHEMA."""
    schemasync_config = _load_config(config, family, named_constraints, ctx.obj["debug"])

    old = load_datamodel(old_schema)
    new = load_datamodel(new_schema)

    warnings = reconcile_datamodels(old, new, schemasync_config.reconciliation.to_context())
    _display_warnings(warnings)

    text = dump_datamodel(new, output, fmt or schemasync_config.output.format)
    if output:
        console.print(f"[green]✓[/green] Reconciled schema written to {output}")
    else:
        click.echo(text)


@main.command("diff-columns")
@click.argument("pairs_file", type=click.Path(exists=True))
@config_option
@family_option
@named_constraints_option
@click.pass_context
@handle_errors
def diff_columns(
    ctx,
    pairs_file: str,
    config: Optional[str],
    family: Optional[str],
    named_constraints: bool,
):
    """Classify the changes of each column pair in PAIRS_FILE."""
    schemasync_config = _load_config(config, family, named_constraints, ctx.obj["debug"])
    flavour = FlavourFactory.from_context(schemasync_config.reconciliation.to_context())

    table = Table(title=f"Column changes ({flavour.family.value})")
    table.add_column("Previous", style="cyan")
    table.add_column("Next", style="cyan")
    table.add_column("Changes", style="yellow")
    table.add_column("Type change", style="magenta")

    for pair in load_column_pairs(pairs_file):
        changes = diff_column(pair, flavour)
        table.add_row(
            pair.previous.name,
            pair.next.name,
            ", ".join(change.value for change in changes) or "-",
            changes.type_change.value if changes.type_change else "-",
        )

    console.print(table)


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    required=True,
    help="Configuration file path",
)
@handle_errors
def validate_config(config: str):
    """Validate configuration file."""
    console.print(f"Validating configuration: {config}")

    try:
        schemasync_config = SchemaSyncConfig.from_yaml(config)
        schemasync_config.validate_config()
    except ConfigurationError as e:
        console.print(f"[red]✗[/red] Configuration error: {e}")
        sys.exit(1)

    console.print("[green]✓[/green] Configuration is valid")
    reconciliation = schemasync_config.reconciliation
    console.print(f"  SQL family: {reconciliation.sql_family.value}")
    console.print(
        f"  Preview features: {', '.join(reconciliation.preview_features) or 'none'}"
    )


def _display_warnings(warnings: List[ReconciliationWarning]) -> None:
    if not warnings:
        err_console.print("[green]✓[/green] Nothing recovered from the previous schema")
        return

    table = Table(title="Recovered from the previous schema")
    table.add_column("Code", style="cyan")
    table.add_column("Category", style="yellow")
    table.add_column("Affected")

    for warning in warnings:
        affected = ", ".join(
            ".".join(entity.to_dict().values()) for entity in warning.affected
        )
        table.add_row(str(warning.code), warning.category.value, affected)

    err_console.print(table)


if __name__ == "__main__":
    main()
