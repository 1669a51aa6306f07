"""idlgen CLI — generate, inspect and validate program IDL documents."""

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from idlgen import __version__
from idlgen.errors import ExpansionFailure, IdlGenError
from idlgen.utils.writer import FORMATS

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(error: IdlGenError) -> None:
    """Report a fatal pipeline error and exit non-zero."""
    if isinstance(error, ExpansionFailure) and error.stderr:
        err_console.print(error.stderr, markup=False, highlight=False)
    err_console.print(f"[red]Error:[/] {escape(str(error))}", highlight=False, soft_wrap=True)
    sys.exit(1)


def _make_generator(manifest_path: str, expanded: str | None, cargo: str, strict_accounts: bool):
    from idlgen.generators.idl_generator import IdlGenerator
    from idlgen.idl.extractors import has_account_marker, is_account_record
    from idlgen.utils.expander import CargoExpander, FileExpander

    expander = FileExpander(expanded) if expanded else CargoExpander(cargo=cargo)
    return IdlGenerator(
        manifest_path,
        expander=expander,
        is_account=has_account_marker if strict_accounts else is_account_record,
    )


@click.group()
@click.version_option(version=__version__)
def main():
    """idlgen — IDL generator for macro-expanded Rust programs.

    Expands a crate with cargo-expand, parses the result, and writes a JSON
    catalogue of its instructions, accounts and types for client generators.
    """


# ── Generate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("manifest_path", type=click.Path(dir_okay=False))
@click.option("--output", "-o", default="idl.json", help="Output path for the generated IDL file")
@click.option(
    "--format", "fmt", default="json", type=click.Choice(FORMATS), help="Output format"
)
@click.option(
    "--expanded",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Read already-expanded source from this file instead of running cargo expand",
)
@click.option("--cargo", default="cargo", help="Cargo executable used for expansion")
@click.option(
    "--strict-accounts", is_flag=True, help="Only treat #[account] structs as accounts"
)
@click.option("--verbose", "-v", is_flag=True, help="Log each pipeline step")
def generate(
    manifest_path: str,
    output: str,
    fmt: str,
    expanded: str | None,
    cargo: str,
    strict_accounts: bool,
    verbose: bool,
):
    """Generate the IDL for the crate at MANIFEST_PATH (its Cargo.toml)."""
    _configure_logging(verbose)
    generator = _make_generator(manifest_path, expanded, cargo, strict_accounts)

    try:
        path = generator.generate_to(output, fmt)
    except IdlGenError as e:
        _fail(e)

    console.print(f"IDL generated at {path}", markup=False, highlight=False, soft_wrap=True)


# ── Inspect ──────────────────────────────────────────────────────────


@main.command()
@click.argument("manifest_path", type=click.Path(dir_okay=False))
@click.option(
    "--expanded",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Read already-expanded source from this file instead of running cargo expand",
)
@click.option("--cargo", default="cargo", help="Cargo executable used for expansion")
@click.option(
    "--strict-accounts", is_flag=True, help="Only treat #[account] structs as accounts"
)
@click.option("--verbose", "-v", is_flag=True, help="Log each pipeline step")
def inspect(manifest_path: str, expanded: str | None, cargo: str, strict_accounts: bool, verbose: bool):
    """Show what would be extracted from MANIFEST_PATH, without writing anything."""
    _configure_logging(verbose)
    generator = _make_generator(manifest_path, expanded, cargo, strict_accounts)

    try:
        document = generator.generate()
    except IdlGenError as e:
        _fail(e)

    console.print(f"\n[bold blue]idlgen[/] — {escape(document.name)} (IDL v{document.version})\n")

    if not (document.instructions or document.accounts or document.types):
        console.print("[yellow]Nothing to extract.[/]")
        return

    table = Table(title=f"Instructions ({len(document.instructions)})")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments")
    for ix in document.instructions:
        table.add_row(ix.name, escape(", ".join(f"{a.name}: {a.type_name}" for a in ix.args)))
    console.print(table)

    table = Table(title=f"Accounts ({len(document.accounts)})")
    table.add_column("Name", style="cyan")
    table.add_column("Fields")
    for acc in document.accounts:
        table.add_row(acc.name, escape(", ".join(f"{f.name}: {f.type_name}" for f in acc.fields)))
    console.print(table)

    table = Table(title=f"Types ({len(document.types)})")
    table.add_column("Name", style="cyan")
    table.add_column("Definition")
    for ty in document.types:
        table.add_row(ty.name, escape(ty.type_def))
    console.print(table)


# ── Validate ─────────────────────────────────────────────────────────


@main.command()
@click.argument("idl_path", type=click.Path(dir_okay=False))
def validate(idl_path: str):
    """Check an IDL document (JSON or YAML) against the IDL schema."""
    import json

    import yaml

    from idlgen.idl.schema_validator import validate_document

    try:
        with open(idl_path, encoding="utf-8") as f:
            data = json.load(f) if idl_path.endswith(".json") else yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        err_console.print(f"[red]Failed to parse:[/] {escape(str(e))}", highlight=False, soft_wrap=True)
        sys.exit(1)

    if not isinstance(data, dict):
        err_console.print("[red]x[/] /: expected an object at the top level")
        sys.exit(1)

    issues = validate_document(data)
    if issues:
        console.print("[red]IDL validation FAILED:[/]")
        for issue in issues:
            console.print(f"  [red]x[/] {escape(issue)}", highlight=False, soft_wrap=True)
        sys.exit(1)

    console.print("[green]Valid![/]")


# ── Schema ───────────────────────────────────────────────────────────


@main.command(name="schema")
def dump_schema():
    """Print the JSON Schema for IDL documents."""
    import json

    from idlgen.idl.schema import get_schema

    click.echo(json.dumps(get_schema(), indent=2))


if __name__ == "__main__":
    main()
