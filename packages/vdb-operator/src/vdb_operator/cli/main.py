"""vdb-operator CLI - reconcile VerticaDB clusters toward their spec.

Commands:
- reconcile: Run one reconciliation pass per VerticaDB
- facts: Probe every member and show the PodFacts snapshot
- run: Resync continuously until interrupted

VerticaDBs are named either by manifest files (--spec) or, with the
kubernetes runner, by custom object name (--name) in the configured
namespace. Runner backend, credentials and log level come from
VDB_OPERATOR_* environment variables (see vdb_operator.config.Settings).
"""

import asyncio
import json
import logging
from dataclasses import asdict
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vdb_operator.cli.factory import create_backend, create_reconciler, create_source
from vdb_operator.config import Settings
from vdb_operator.exceptions import OperatorError, SpecLoadError
from vdb_operator.loop import ResyncLoop
from vdb_operator.podfacts import collect_pod_facts
from vdb_operator.vdb import load_vdb
from vdb_protocols import MemberIdentity

app = typer.Typer(
    name="vdb-operator",
    help="Reconcile VerticaDB clusters toward their spec",
    no_args_is_help=True,
)

console = Console()

SPEC_OPTION = typer.Option(None, "--spec", "-f", help="VerticaDB manifest (YAML); repeatable")
NAME_OPTION = typer.Option(
    None, "--name", "-n", help="VerticaDB object name in the configured namespace; repeatable"
)


def _setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _requests(settings: Settings, spec: list[Path], name: list[str]) -> list[MemberIdentity]:
    """Identities of the VerticaDBs named on the command line."""
    try:
        requests = [load_vdb(p).identity for p in spec]
    except SpecLoadError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    requests += [MemberIdentity(settings.namespace, n) for n in name]
    if not requests:
        console.print("[red]Error:[/red] give at least one --spec or --name")
        raise typer.Exit(1)
    return requests


@app.command("reconcile")
def reconcile(spec: list[Path] = SPEC_OPTION, name: list[str] = NAME_OPTION) -> None:
    """Run one reconciliation pass for each VerticaDB."""
    settings = Settings()
    _setup_logging(settings)
    spec = spec or []
    requests = _requests(settings, spec, name or [])

    async def _reconcile() -> int:
        reconciler = create_reconciler(settings, spec)
        failures = 0
        for request in requests:
            try:
                res = await reconciler.reconcile(request)
            except OperatorError as e:
                console.print(f"[red]{request}: failed[/red] {e}")
                failures += 1
                continue
            if res.is_done:
                console.print(f"[green]{request}: done[/green]")
            elif res.requeue_after:
                console.print(f"[yellow]{request}: requeue after {res.requeue_after}s[/yellow]")
            else:
                console.print(f"[yellow]{request}: requeue[/yellow]")
        return failures

    try:
        failures = asyncio.run(_reconcile())
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    if failures:
        raise typer.Exit(1)


@app.command("facts")
def facts(
    spec: list[Path] = SPEC_OPTION,
    name: list[str] = NAME_OPTION,
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """Probe every expected member and print its observed state."""
    settings = Settings()
    _setup_logging(settings)
    spec = spec or []
    requests = _requests(settings, spec, name or [])

    async def _facts() -> None:
        runner, _, _ = create_backend(settings)
        source = create_source(settings, spec)
        for request in requests:
            vdb = await source.get(request)
            if vdb is None:
                console.print(f"[yellow]VerticaDB {request} not found[/yellow]")
                continue
            pfacts = await collect_pod_facts(vdb, runner, settings.server_container)

            if json_output:
                data = [asdict(pf) | {"name": str(pf.name)} for pf in pfacts]
                print(json.dumps(data, indent=2, default=str))
                continue

            table = Table(title=f"Pod facts: {vdb.identity}")
            table.add_column("Pod", style="cyan")
            table.add_column("Subcluster")
            table.add_column("Node")
            table.add_column("DB exists", justify="center")
            table.add_column("Agent", justify="center")
            table.add_column("IP")

            for _, member in vdb.iter_pods():
                pf = pfacts.get(member)
                if pf is None:
                    table.add_row(member.name, "-", "-", "[red]not probed[/red]", "-", "-")
                    continue
                table.add_row(
                    member.name,
                    pf.subcluster,
                    pf.compat21_node_name or "-",
                    pf.db_exists.value,
                    pf.agent_running.value,
                    f"{pf.pod_ip} ({pf.ip_family.value})" if pf.pod_ip else "-",
                )
            console.print(table)

    try:
        asyncio.run(_facts())
    except (ValueError, OperatorError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command("run")
def run(
    spec: list[Path] = SPEC_OPTION,
    name: list[str] = NAME_OPTION,
    interval: float = typer.Option(
        None, "--interval", "-i", help="Resync interval in seconds (default from settings)"
    ),
) -> None:
    """
    Resync continuously.

    Reconciles every VerticaDB at the given interval, sooner when a pass
    asks for a requeue. Runs until interrupted with Ctrl+C.
    """
    settings = Settings()
    _setup_logging(settings)
    spec = spec or []
    requests = _requests(settings, spec, name or [])

    async def _run() -> None:
        loop = ResyncLoop(
            create_reconciler(settings, spec),
            requests,
            interval_seconds=interval or settings.resync_interval_seconds,
            requeue_delay_seconds=settings.requeue_delay_seconds,
        )
        await loop.run()

    try:
        asyncio.run(_run())
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
