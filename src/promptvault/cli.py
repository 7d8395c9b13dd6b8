# src/promptvault/cli.py
"""
Prompt Vault Command Line Interface (CLI).

This module is the human-in-the-loop layer on top of the backup engine and
the version store, built with `typer` and `rich`.

Features
--------
- **Export**: write an integrity-checked archive of the whole library.
- **Inspect**: authenticate an archive and show what it contains.
- **Restore**: preview the merge (or replace-all) report, confirm, commit.
- **Versions**: list, commit, compare, restore and delete prompt versions.

Nothing is written to the library unless the user confirms (or passes
``--yes``), and a rejected archive never touches it.

Usage
-----
    $ promptvault export -o my-library.json
    $ promptvault inspect my-library.json
    $ promptvault restore my-library.json --mode merge
    $ promptvault versions show <prompt-id> <snapshot-id>
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table
from rich.text import Text

from promptvault.core.backup.codec import export_archive, import_archive, summarize
from promptvault.core.backup.errors import ArchiveImportError, IntegrityCheckFailed
from promptvault.core.backup.merge import merge_backup_data, replace_backup_data
from promptvault.core.contracts.report import RestoreReport
from promptvault.core.library.state import LibraryState
from promptvault.core.library.storage import LibraryFileError, LibraryStorage
from promptvault.core.settings import load_settings
from promptvault.core.versions.errors import VersionError, VersionNotFound
from promptvault.core.versions.store import VersionComparison, VersionStore

# Pick up PROMPTVAULT_* variables from a local .env before settings are read.
load_dotenv()

app = typer.Typer(
    help="Prompt Vault: integrity-checked backups and version history for a prompt library.",
    rich_markup_mode="markdown",
)
versions_app = typer.Typer(help="Inspect and manage the version history of a prompt.")
app.add_typer(versions_app, name="versions")

console = Console()


class RestoreModeChoice(str, Enum):
    merge = "merge"
    replace = "replace"


# --------------------------------------------------------------------------- #
# Helpers: Rendering & I/O
# --------------------------------------------------------------------------- #


def _fail(error: Exception, title: str = "Error") -> NoReturn:
    """Print ``error`` in a red panel and exit with code 1."""
    body = escape(str(error))
    if isinstance(error, IntegrityCheckFailed):
        body += f"\n\nexpected: [bold]{error.expected}[/bold]\nactual:   [bold]{error.actual}[/bold]"
    console.print(Panel(body, title=f"❌ {title}", border_style="red"))
    raise typer.Exit(code=1)


def _load(storage: LibraryStorage) -> LibraryState:
    try:
        return storage.load_state()
    except LibraryFileError as e:
        _fail(e, "Library Error")


def _render_counts(counts: dict[str, int]) -> None:
    table = Table(title="Archive contents")
    table.add_column("Collection", style="cyan")
    table.add_column("Entries", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


def _render_report(report: RestoreReport) -> None:
    """Show the per-collection change report of a pending restore."""
    table = Table(title=f"Restore preview ({report.mode})")
    table.add_column("Collection", style="cyan")
    table.add_column("Added", justify="right", style="green")
    table.add_column("Replaced", justify="right", style="yellow")
    for name, added, replaced in report.rows():
        table.add_row(name, str(added), str(replaced))
    table.add_row("folders", str(report.folders.added), "-")
    console.print(table)


def _render_comparison(comparison: VersionComparison) -> None:
    """Render a snapshot-vs-current diff with added/removed highlighting."""
    snap = comparison.snapshot
    console.rule(f"[bold]{snap.label}[/bold] → current")
    if snap.commit_message:
        console.print(f'[dim italic]"{snap.commit_message}"[/dim italic]')

    text = Text()
    for span in comparison.spans:
        if span.tag == "added":
            text.append(span.text, style="green")
        elif span.tag == "removed":
            text.append(span.text, style="red strike")
        else:
            text.append(span.text)
    console.print(Panel(text, title="Content", border_style="dim"))

    if comparison.metadata_changes:
        console.print("[bold]Metadata changes[/bold]")
        for change in comparison.metadata_changes:
            console.print(
                f" {change.name.title()}: [red strike]{change.snapshot_value}[/red strike] "
                f"[green]{change.current_value}[/green]"
            )
    if comparison.variable_values:
        console.print("[bold]Saved variable values[/bold]")
        for key, value in comparison.variable_values.items():
            console.print(f" [cyan]{key}[/cyan]: {value or '[dim italic]empty[/dim italic]'}")

    if comparison.can_restore:
        console.print("[dim]Content differs from current; this version can be restored.[/dim]")
    else:
        console.print("[dim]Content is identical to the current prompt.[/dim]")


def _confirm(question: str, yes: bool) -> bool:
    return yes or Confirm.ask(question, default=False)


# --------------------------------------------------------------------------- #
# Backup commands
# --------------------------------------------------------------------------- #


@app.command()  # type: ignore[misc]
def export(
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Archive path. Defaults to a timestamped file in the backup directory.",
        ),
    ] = None,
) -> None:
    """Export the whole library as an integrity-checked JSON archive."""
    storage = LibraryStorage()
    state = _load(storage)
    text = export_archive(state.snapshot(), indent=load_settings().archive_indent)
    path = storage.write_archive(text, output)
    console.print(
        Panel(
            f"Saved to: [link=file://{path.resolve()}]{path}[/link]",
            title="Backup exported",
            border_style="green",
        )
    )


@app.command()  # type: ignore[misc]
def inspect(
    file: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True,
                       help="Archive file to check."),
    ],
) -> None:
    """Authenticate an archive and summarize its contents without importing it."""
    result = import_archive(file.read_bytes())
    if result.is_err():
        _fail(result.unwrap_err(), "Invalid backup")
    snapshot = result.unwrap()
    console.print(f"[bold green]✅ {summarize(snapshot)}[/bold green]")
    _render_counts(snapshot.counts())


@app.command()  # type: ignore[misc]
def restore(
    file: Annotated[
        Path,
        typer.Argument(exists=True, file_okay=True, dir_okay=False, readable=True,
                       help="Archive file to restore from."),
    ],
    mode: Annotated[
        RestoreModeChoice,
        typer.Option(
            "--mode",
            "-m",
            case_sensitive=False,
            help="`merge` keeps local items and updates matching ids; "
            "`replace` discards the local library.",
        ),
    ] = RestoreModeChoice.merge,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")
    ] = False,
) -> None:
    """Restore an archive into the library after showing what will change."""
    result = import_archive(file.read_bytes())
    if result.is_err():
        error: ArchiveImportError = result.unwrap_err()
        _fail(error, "Restore aborted, library unchanged")
    incoming = result.unwrap()

    storage = LibraryStorage()
    state = _load(storage)
    base_revision = state.revision
    if mode is RestoreModeChoice.replace:
        merged, report = replace_backup_data(incoming)
        question = "This will overwrite your entire library with the backup contents. Continue?"
    else:
        merged, report = merge_backup_data(state.snapshot(), incoming)
        question = "Matching ids will be updated and new items added. Continue?"

    _render_report(report)
    if not _confirm(question, yes):
        console.print("[yellow]Restore cancelled; library unchanged.[/yellow]")
        return

    state.commit(merged, note=f"{report.mode} {file.name}", expect_revision=base_revision)
    storage.save(state.snapshot())
    console.print(
        f"[bold green]✅ Restored[/bold green] ({report.total_added} added, "
        f"{report.total_replaced} replaced, {report.folders.added} new folders)"
    )


# --------------------------------------------------------------------------- #
# Version commands
# --------------------------------------------------------------------------- #

PromptArg = Annotated[str, typer.Argument(help="Id of the prompt.")]
SnapshotArg = Annotated[str, typer.Argument(help="Id of the version snapshot.")]


def _store() -> tuple[LibraryStorage, VersionStore]:
    storage = LibraryStorage()
    return storage, VersionStore(_load(storage))


@versions_app.command("list")  # type: ignore[misc]
def list_versions(prompt_id: PromptArg) -> None:
    """List a prompt's versions, baseline first."""
    _, store = _store()
    result = store.history(prompt_id)
    if result.is_err():
        _fail(result.unwrap_err(), "Version Error")
    snapshots = result.unwrap()
    if not snapshots:
        console.print("[dim]No version history yet.[/dim]")
        return

    table = Table(title=f"Versions of {prompt_id}")
    table.add_column("Version", style="cyan")
    table.add_column("Message")
    table.add_column("Created", style="dim")
    table.add_column("Snapshot id", style="dim")
    for snap in snapshots:
        created = datetime.fromtimestamp(snap.created_at / 1000).strftime("%Y-%m-%d %H:%M")
        label = snap.label + (" (latest)" if snap is snapshots[-1] else "")
        table.add_row(label, snap.commit_message, created, snap.id)
    console.print(table)


@versions_app.command("commit")  # type: ignore[misc]
def commit_version(
    prompt_id: PromptArg,
    content_file: Annotated[
        Path | None,
        typer.Option("--content-file", "-f", exists=True, dir_okay=False, readable=True,
                     help="File holding the new content. Defaults to the current content."),
    ] = None,
    name: Annotated[str | None, typer.Option("--name", "-n", help="Version name.")] = None,
    message: Annotated[
        str | None, typer.Option("--message", "-m", help="Commit message.")
    ] = None,
) -> None:
    """Save the prompt (optionally with new content) as a new version."""
    storage, store = _store()
    baseline = store.ensure_baseline(prompt_id)
    if baseline.is_err():
        _fail(baseline.unwrap_err(), "Version Error")

    current = store.state.snapshot().find_prompt(prompt_id)
    if current is None:
        _fail(VersionNotFound(f"No prompt with id {prompt_id!r}."), "Version Error")
    content = content_file.read_text(encoding="utf-8") if content_file else current.content

    result = store.commit_version(prompt_id, content, name=name, message=message)
    if result.is_err():
        _fail(result.unwrap_err(), "Version Error")
    storage.save(store.state.snapshot())
    console.print(f"[bold green]✅ Saved version[/bold green] {result.unwrap()}")


@versions_app.command("show")  # type: ignore[misc]
def show_version(prompt_id: PromptArg, snapshot_id: SnapshotArg) -> None:
    """Compare a version with the current prompt."""
    _, store = _store()
    result = store.compare(prompt_id, snapshot_id)
    if result.is_err():
        _fail(result.unwrap_err(), "Version Error")
    _render_comparison(result.unwrap())


@versions_app.command("restore")  # type: ignore[misc]
def restore_version(
    prompt_id: PromptArg,
    snapshot_id: SnapshotArg,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
) -> None:
    """Copy a version's content and metadata back onto the current prompt."""
    storage, store = _store()
    comparison = store.compare(prompt_id, snapshot_id)
    if comparison.is_err():
        _fail(comparison.unwrap_err(), "Version Error")
    if not comparison.unwrap().can_restore:
        console.print("[dim]Content is identical to the current prompt; nothing to restore.[/dim]")
        return
    if not _confirm("Restore this version onto the current prompt?", yes):
        console.print("[yellow]Cancelled.[/yellow]")
        return

    result = store.restore_version(prompt_id, snapshot_id)
    if result.is_err():
        _fail(result.unwrap_err(), "Version Error")
    storage.save(store.state.snapshot())
    console.print(f"[bold green]✅ Restored[/bold green] {result.unwrap().title}")


@versions_app.command("delete")  # type: ignore[misc]
def delete_version(
    prompt_id: PromptArg,
    snapshot_id: SnapshotArg,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
) -> None:
    """Delete a version permanently (the baseline cannot be deleted)."""
    storage, store = _store()
    if not _confirm("Delete this version permanently?", yes):
        console.print("[yellow]Cancelled.[/yellow]")
        return
    result = store.delete_version(prompt_id, snapshot_id)
    if result.is_err():
        error: VersionError = result.unwrap_err()
        _fail(error, "Version Error")
    storage.save(store.state.snapshot())
    console.print("[bold green]✅ Version deleted[/bold green]")


if __name__ == "__main__":
    app()
