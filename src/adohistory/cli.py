# src/adohistory/cli.py
"""
adohistory Command Line Interface (CLI).

This module implements the user-facing terminal interface using `typer` and `rich`.

Features
--------
- **Interactive run**: prompts for any missing PAT, organization and output
  folder, and offers to remember each of them for the next run.
- **Tracking mode**: ``--track FIELD`` reports only the first and last value
  of a single field across the whole history.
- **Detail dump**: ``--details`` writes every field of every revision to
  ``{id}-{rev}_Details.txt`` next to the report.
- **Stored values**: ``clear [org|pat|loc]`` forgets one or all saved values.

Usage
-----
    # Interactive run (prompts for whatever is not configured yet)
    $ adohistory

    # Non-interactive run for item 3421, tracking the state field
    $ ADO_PAT=... ADO_ORG=contoso adohistory --id 3421 --track System.State

    # Forget the stored PAT
    $ adohistory clear pat
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, Prompt

from adohistory import __version__
from adohistory.ado.client import WorkItemClient
from adohistory.core.config_store import ConfigStore, StoreKey
from adohistory.core.settings import Settings, get_logger, load_settings
from adohistory.pipelines.history_report import run_history_report

# Env vars (ADO_PAT, ADO_ORG...) must be visible before settings are read.
load_dotenv()

app = typer.Typer(
    help="DevOps History Reporter: write the change log of an Azure DevOps work item.",
    rich_markup_mode="markdown",
    add_completion=False,
)
console = Console()
logger = get_logger("adohistory.cli")

ID_GUIDANCE = "A valid ADO work item ID (e.g. 3421) is required to continue."

HELP_LINES = (
    "Supported Parameters:",
    "",
    "?/help:       show this message",
    "clear:        clear some or all saved values",
    "              (e.g. clear, clear org, clear pat, clear loc)",
    "--id N:       work item to report on (prompted for when omitted)",
    "--track F:    report only the first and last value of field F",
    "--details:    also write every field of every revision to detail files",
    "-" * 59,
    "You need to supply a Personal Access Token (PAT) the first time",
    "you use the utility. The PAT is saved locally for subsequent runs",
    "unless you opt out of storing it, in which case you are asked for",
    "it on each run.",
)


# --------------------------------------------------------------------------- #
# Helpers: Messages & exits
# --------------------------------------------------------------------------- #


def _banner() -> None:
    console.print(
        Panel.fit(
            f"[bold cyan]DevOps History Reporter[/bold cyan] v{__version__}",
            border_style="cyan",
        )
    )


def _fail(message: str, settings: Settings, guidance: str | None = None) -> NoReturn:
    """Print a fatal error (plus optional guidance) and exit with code 1."""
    console.print(f"[bold red]❌ {escape(message)}[/bold red]")
    if guidance:
        console.print(guidance)
    if settings.pause_on_error:
        console.input("Press ENTER to exit.")
    raise typer.Exit(code=1)


# --------------------------------------------------------------------------- #
# Helpers: Value resolution (env → stored → prompt)
# --------------------------------------------------------------------------- #


def _resolve_value(
    *,
    configured: str | None,
    store: ConfigStore,
    key: StoreKey,
    prompt: str,
    label: str,
    settings: Settings,
    password: bool = False,
) -> str:
    """Return a required value from settings, the store, or an interactive prompt.

    Prompted values are persisted only if the user confirms.
    """
    if configured:
        return configured

    stored = store.get(key)
    if stored:
        return stored

    value = Prompt.ask(prompt, console=console, password=password).strip()
    if not value:
        _fail(f"A value for the {label} is required.", settings)

    if Confirm.ask(f"Remember your {label}?", console=console, default=False):
        store.remember(key, value)
        logger.debug("Stored %s in %s", key, store.path)
    return value


def _ensure_output_dir(path: Path, settings: Settings) -> Path:
    """Create the output folder if needed; a failure is fatal."""
    path = path.expanduser()
    if path.is_dir():
        return path
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        _fail(f"Error while attempting to create output folder '{path}': {e}", settings)
    console.print(f"[dim]New directory '{path.resolve()}' has been created.[/dim]")
    return path


def _parse_work_item_id(raw: str | None, settings: Settings) -> int:
    """Validate the work item ID typed by the user."""
    text = (raw or "").strip()
    if not text:
        _fail("No work item ID was entered.", settings, ID_GUIDANCE)
    try:
        work_item_id = int(text)
    except ValueError:
        _fail(
            f"Error while validating Work Item ID: '{text}' is not a number.",
            settings,
            ID_GUIDANCE,
        )
    if work_item_id <= 0:
        _fail(
            f"Error while validating Work Item ID: {work_item_id} is not positive.",
            settings,
            ID_GUIDANCE,
        )
    return work_item_id


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.callback(invoke_without_command=True)  # type: ignore[misc]
def main(
    ctx: typer.Context,
    work_item_id: Annotated[
        int | None,
        typer.Option(
            "--id",
            "-i",
            help="ID of the work item to report on (prompted for when omitted).",
        ),
    ] = None,
    track: Annotated[
        str | None,
        typer.Option(
            "--track",
            "-t",
            help="Only report the first and last value of this field (e.g. 'System.State').",
        ),
    ] = None,
    details: Annotated[
        bool,
        typer.Option(
            "--details/--no-details",
            "-d",
            help="Also write every field of every revision to detail files.",
        ),
    ] = False,
    page_size: Annotated[
        int | None,
        typer.Option(
            "--page-size",
            min=1,
            help="Revisions per page; inferred from the first response when omitted.",
        ),
    ] = None,
) -> None:
    """
    Retrieve the full revision history of a work item and write its change log.

    Missing configuration (PAT, organization, output folder) is prompted for
    interactively and can be remembered for later runs.
    """
    if ctx.invoked_subcommand is not None:
        return

    _banner()
    settings = load_settings()
    store = ConfigStore(settings.config_file)

    pat = _resolve_value(
        configured=settings.personal_access_token,
        store=store,
        key="pat",
        prompt="Enter your Personal Access Token (PAT)",
        label="PAT",
        settings=settings,
        password=True,
    )
    org = _resolve_value(
        configured=settings.organization,
        store=store,
        key="org",
        prompt="Enter your organization ID",
        label="organization",
        settings=settings,
    )
    folder = _resolve_value(
        configured=str(settings.output_dir) if settings.output_dir else None,
        store=store,
        key="loc",
        prompt="Enter the full path to the folder where the history file should be stored",
        label="folder location",
        settings=settings,
    )
    output_dir = _ensure_output_dir(Path(folder), settings)

    if work_item_id is None:
        raw_id = Prompt.ask(
            "Enter the ID of the ADO Work Item to retrieve (e.g. 3421)", console=console
        )
    else:
        raw_id = str(work_item_id)
    item_id = _parse_work_item_id(raw_id, settings)

    client = WorkItemClient.from_settings(settings, organization=org, personal_access_token=pat)

    start_time = time.time()
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"[cyan]Retrieving full history for item {item_id}...", total=None)
            report = run_history_report(
                client,
                item_id,
                output_dir,
                track_field=track,
                detail_dir=output_dir if details else None,
                page_size=page_size or settings.page_size,
            )
    except OSError as e:
        _fail(f"Could not write the history file: {e}", settings)

    duration = time.time() - start_time
    revisions = report["revision_count"]
    console.print(
        f"[bold green]✅ Evaluated {revisions} revisions to item {item_id}.[/bold green]"
        f" (took {duration:.1f}s)"
    )
    if revisions == 0:
        console.print("[yellow]⚠️ No revisions were retrieved; see the log for details.[/yellow]")
    if report["detail_paths"]:
        console.print(f"[dim]Wrote {len(report['detail_paths'])} revision detail file(s).[/dim]")

    console.print(
        Panel(
            f"Output saved in file: {report['report_path']}",
            title="Change Log",
            border_style="green",
        )
    )


@app.command("help")  # type: ignore[misc]
def show_help() -> None:
    """Show the supported parameters."""
    _banner()
    for line in HELP_LINES:
        console.print(line, markup=False, highlight=False)


@app.command("?", hidden=True)  # type: ignore[misc]
def show_help_short() -> None:
    """Alias of `help`."""
    show_help()


@app.command()  # type: ignore[misc]
def clear(
    target: Annotated[
        str | None,
        typer.Argument(help="Which saved value to clear: org, pat or loc (default: all)."),
    ] = None,
) -> None:
    """Clear some or all saved values."""
    settings = load_settings()
    store = ConfigStore(settings.config_file)
    try:
        cleared = store.clear(*([target] if target else []))
    except ValueError as e:
        _fail(str(e), settings)
    console.print(f"[green]Cleared saved value(s): {', '.join(cleared)}[/green]")


if __name__ == "__main__":
    app()
