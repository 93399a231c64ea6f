import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from lsp2gxl import __version__
from lsp2gxl.diagnostics import DiagnosticLog
from lsp2gxl.exceptions import ConfigError, Lsp2GxlError
from lsp2gxl.logging_config import logger, reset_logging, setup_logging
from lsp2gxl.pipeline import run_index
from lsp2gxl.schemas import IndexSummary

app = typer.Typer(help="Export language server symbols and references as a GXL dependency graph.")
console = Console()


def _print_summary(summary: IndexSummary) -> None:
    table = Table(title=f"Graph for '{escape(summary.root_path)}'")
    table.add_column("Kind", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Count", justify="right", style="green")

    for node_type, count in sorted(summary.nodes_by_type.items()):
        table.add_row("node", node_type, str(count))
    for edge_type, count in sorted(summary.edges_by_type.items()):
        table.add_row("edge", edge_type, str(count))
    for code, count in sorted(summary.diagnostics.items()):
        table.add_row("diagnostic", code, str(count))

    console.print(table)
    console.print(
        f"Indexed [bold blue]{summary.total_files}[/bold blue] files into "
        f"[bold green]{summary.total_nodes}[/bold green] nodes and "
        f"[bold green]{summary.total_edges}[/bold green] edges "
        f"in [bold yellow]{summary.duration:.2f}s[/bold yellow]."
    )
    console.print(f"Wrote [bold]{escape(summary.out_file)}[/bold]")


@app.command()
def version():
    """
    Prints the current version of lsp2gxl.
    """
    typer.echo(f"lsp2gxl v{__version__}")


@app.command(
    context_settings={"allow_interspersed_args": False, "ignore_unknown_options": True},
)
def index(
    command: Optional[List[str]] = typer.Argument(
        None, help="The language server command to run, e.g. 'pylsp' or 'typescript-language-server --stdio'."
    ),
    root_path: Path = typer.Option(
        ..., "--root-path", help="The workspace root passed to the language server in the initialize request.",
        exists=True, file_okay=False, readable=True,
    ),
    file_pattern: Optional[str] = typer.Option(
        None, "--file-pattern", help="Glob selecting the files to collect symbols from, relative to the root (e.g. '**/*.py')."
    ),
    out_file: Path = typer.Option(
        ..., "--out-file", help="Path of the GXL file to write.", dir_okay=False,
    ),
    no_references: bool = typer.Option(
        False, "--no-references", help="Only export the containment hierarchy, without references."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every provider request and resolution miss."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Output the run summary as JSON."
    ),
):
    """
    Indexes a workspace with a language server and writes a GXL dependency graph.

    Example: lsp2gxl index --root-path ~/git/flask --file-pattern '**/*.py' --out-file flask.gxl pylsp
    """
    if verbose:
        reset_logging()
        setup_logging(level="DEBUG")

    if not command:
        console.print("[bold red]No language server command given[/bold red]")
        raise typer.Exit(code=1)
    if not file_pattern:
        console.print("[bold red]No file pattern provided[/bold red]")
        raise typer.Exit(code=1)

    logger.info(f"Running language server: {' '.join(command)}")
    diagnostics = DiagnosticLog()
    try:
        summary = asyncio.run(
            run_index(
                command,
                root_path,
                file_pattern,
                out_file,
                include_references=not no_references,
                diagnostics=diagnostics,
            )
        )
    except ConfigError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except (Lsp2GxlError, OSError) as e:
        logger.error(f"Indexing failed: {e}")
        console.print(f"[bold red]Indexing failed:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    if json_output:
        typer.echo(json.dumps(summary.model_dump(), indent=2))
        return
    _print_summary(summary)


if __name__ == "__main__":
    app()
