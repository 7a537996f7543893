"""CLI for inspecting form mappings and binding parameter sets."""

import importlib
import json
import logging
from pathlib import Path
from typing import Annotated, Any

import jsonschema
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.tree import Tree

from form_bind import __version__
from form_bind.errors import BindingError, MappingConfigurationError
from form_bind.io import bind_report, load_params, params_from_record, read_jsonl, write_jsonl
from form_bind.mapping import FormMapping, MappingBuilder
from form_bind.security import TokenError

app = typer.Typer(
    name="form-bind",
    help="Bind flat form parameters to typed objects.",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"form-bind version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log binding details"),
    ] = False,
) -> None:
    """form-bind: bidirectional mapping of form parameters and objects."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def load_mapping(target: str) -> FormMapping:
    """Resolve ``module:attribute`` to a mapping, building builders.

    Raises:
        typer.BadParameter: If the target cannot be resolved.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"Expected MODULE:ATTRIBUTE, got {target!r}")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import module {module_name}: {e}") from e
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise typer.BadParameter(f"{module_name} has no attribute {attr_path}") from e
    if isinstance(obj, MappingBuilder):
        obj = obj.build()
    if not isinstance(obj, FormMapping):
        raise typer.BadParameter(f"{target} is not a form mapping")
    return obj


def mapping_tree(mapping: FormMapping, tree: Tree | None = None) -> Tree:
    """Rich tree of a mapping with its fields and nested mappings."""
    kind = "list of " if mapping.is_list else ""
    label = f"[bold]{mapping.path}[/bold] : {kind}{mapping.data_class.__name__}"
    if mapping.secured:
        label += " [yellow](secured)[/yellow]"
    node = tree.add(label) if tree is not None else Tree(label)
    for field in mapping.fields.values():
        required = " [red]*[/red]" if field.required else ""
        node.add(f"{field.name} [dim]{field.type or ''}[/dim]{required}")
    for nested in mapping.nested.values():
        mapping_tree(nested, node)
    return node


def messages_table(report: dict[str, Any]) -> Table:
    table = Table(title="Validation messages")
    table.add_column("Field")
    table.add_column("Severity")
    table.add_column("Message")
    for msg in report["global_messages"]:
        table.add_row("[dim](global)[/dim]", msg["severity"], msg["text"])
    for path, msgs in report["field_messages"].items():
        for msg in msgs:
            table.add_row(path, msg["severity"], msg["text"])
    return table


@app.command()
def describe(
    target: Annotated[str, typer.Argument(help="Mapping as MODULE:ATTRIBUTE")],
) -> None:
    """Print the tree of a form mapping."""
    console.print(mapping_tree(load_mapping(target)))


@app.command()
def bind(
    target: Annotated[str, typer.Argument(help="Mapping as MODULE:ATTRIBUTE")],
    params_path: Annotated[
        Path,
        typer.Option("--params", "-p", help="JSON file with request parameters"),
    ],
    locale: Annotated[
        str | None,
        typer.Option("--locale", "-l", help="Locale for parsing values"),
    ] = None,
) -> None:
    """Bind one parameter set and print the bound data and messages."""
    if not params_path.exists():
        console.print(f"[red]Error:[/red] Parameters file not found: {params_path}")
        raise typer.Exit(1)
    mapping = load_mapping(target)
    try:
        params = load_params(params_path)
    except (json.JSONDecodeError, jsonschema.ValidationError) as e:
        console.print(f"[red]Invalid parameters:[/red] {getattr(e, 'message', e)}")
        raise typer.Exit(1)

    try:
        report = bind_report(mapping.bind(params, locale=locale))
    except (TokenError, BindingError, MappingConfigurationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print_json(data=report["data"])
    if report["field_messages"] or report["global_messages"]:
        console.print(messages_table(report))
    if not report["success"]:
        raise typer.Exit(1)
    console.print("[green]Valid[/green]")


@app.command("bind-batch")
def bind_batch(
    target: Annotated[str, typer.Argument(help="Mapping as MODULE:ATTRIBUTE")],
    input_path: Annotated[
        Path,
        typer.Option("--in", "-i", help="Input JSONL file with parameter sets"),
    ],
    output_path: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output JSONL file with bind reports"),
    ],
    locale: Annotated[
        str | None,
        typer.Option("--locale", "-l", help="Locale for parsing values"),
    ] = None,
) -> None:
    """Bind every parameter set of a JSONL file and write one report per line."""
    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(1)
    mapping = load_mapping(target)

    valid_count = 0
    invalid_count = 0
    reports = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Binding parameter sets...", total=None)
        try:
            for line_num, record in read_jsonl(input_path):
                try:
                    params = params_from_record(record)
                except jsonschema.ValidationError as e:
                    console.print(f"\n[yellow]Warning:[/yellow] Invalid parameters on line {line_num}: {e.message}")
                    invalid_count += 1
                    continue
                report = bind_report(mapping.bind(params, locale=locale))
                if report["success"]:
                    valid_count += 1
                else:
                    invalid_count += 1
                reports.append(report)
                progress.update(task, description=f"Bound {line_num} parameter sets...")
        except (ValueError, TokenError, BindingError, MappingConfigurationError) as e:
            console.print(f"\n[red]Error:[/red] {e}")
            raise typer.Exit(1)

    written = write_jsonl(output_path, reports)
    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  Reports written: {written}")
    console.print(f"  [green]Valid:[/green] {valid_count}")
    if invalid_count:
        console.print(f"  [red]Invalid:[/red] {invalid_count}")


if __name__ == "__main__":
    app()
