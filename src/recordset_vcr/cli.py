"""recordset-vcr CLI for inspecting, loading and serving recordsets."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.json import JSON
from rich.logging import RichHandler
from rich.table import Table

from recordset_vcr import __version__
from recordset_vcr.controller import Command, ModeController
from recordset_vcr.core.context import RecordsetContext
from recordset_vcr.core.errors import RecordsetError
from recordset_vcr.recorder import InMemoryRecorder
from recordset_vcr.server import CommandServer
from recordset_vcr.store import RecordsetStore

console = Console()


def build_stack(folder: str) -> tuple[RecordsetStore, InMemoryRecorder]:
    """Wire a context, a store and an in-memory recorder for ``folder``."""
    context = RecordsetContext.for_folder(folder)
    recorder = InMemoryRecorder()
    store = RecordsetStore(context, recorder)
    store.subscribe(recorder)
    return store, recorder


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--folder",
    "-f",
    envvar="RECORDSET_VCR_FOLDER",
    default="recordsets",
    show_default=True,
    type=click.Path(file_okay=False),
    help="Storage root holding one folder per recordset",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, folder: str, verbose: bool) -> None:
    """Recordset VCR - persist and replay captured HTTP exchanges."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True))],
        )
    ctx.obj = {"folder": folder}


@cli.command("list")
@click.pass_context
def list_cmd(ctx: click.Context) -> None:
    """List recordsets found in the storage root."""
    store, _ = build_stack(ctx.obj["folder"])
    root = store.context.config.storage_root
    if not root.is_dir():
        raise click.ClickException(f"Storage root not found: {root}")

    names = sorted(p.name for p in root.iterdir() if p.is_dir() and store.exists(p.name))
    if not names:
        console.print("[yellow]No recordsets found.[/yellow]")
        return
    for name in names:
        console.print(f"  [cyan]{name}[/cyan]")


@cli.command()
@click.argument("name")
@click.option(
    "--format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format for inspection",
)
@click.pass_context
def inspect(ctx: click.Context, name: str, format: str) -> None:
    """Show the exchanges of a recordset.

    Example:
        recordset-vcr --folder recordsets inspect session1
        recordset-vcr inspect session1 --format json
    """
    store, _ = build_stack(ctx.obj["folder"])
    try:
        count = store.load(name)
    except RecordsetError as e:
        raise click.ClickException(str(e))

    recordset = store.get(name)
    if format == "json":
        console.print(JSON(store.codec.dumps(recordset)))
        return

    console.print(f"[bold green]Recordset[/bold green]: {name}")
    console.print(f"  Exchanges: {count}")
    console.print(f"  Plugins: {', '.join(sorted(recordset.defaults)) or '-'}")
    console.print()

    table = Table(title="Exchanges")
    table.add_column("#", style="cyan")
    table.add_column("Method", style="magenta")
    table.add_column("URL", style="green")
    table.add_column("Status")
    table.add_column("Content-Type")
    table.add_column("Body", justify="right")

    for index, exchange in enumerate(recordset.exchanges):
        table.add_row(
            str(index),
            exchange.request.method,
            exchange.request.url,
            str(exchange.response.status),
            exchange.response.content_type or "-",
            f"{len(exchange.response.body or b'')} B",
        )
    console.print(table)


@cli.command("load-all")
@click.pass_context
def load_all(ctx: click.Context) -> None:
    """Load every recordset and report the totals."""
    store, recorder = build_stack(ctx.obj["folder"])
    controller = ModeController(store, recorder)
    try:
        result = controller.dispatch(Command.LOAD_ALL)
    except RecordsetError as e:
        raise click.ClickException(str(e))
    console.print(f"[bold green]{result.message}[/bold green]")


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Host to bind")
@click.option("--port", default=3200, show_default=True, type=int, help="Port to bind")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Serve the host commands over HTTP."""
    store, recorder = build_stack(ctx.obj["folder"])
    server = CommandServer(ModeController(store, recorder))

    console.print("[bold cyan]Starting command server[/bold cyan]")
    console.print(f"  URL: http://{host}:{port}/commands/<COMMAND>")
    console.print(f"  Storage: {store.context.config.storage_root}")
    console.print("[yellow]Press Ctrl+C to stop[/yellow]")
    try:
        asyncio.run(server.serve(host, port))
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped[/yellow]")
        sys.exit(0)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
