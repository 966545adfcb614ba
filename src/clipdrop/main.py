# ABOUTME: clipdrop command line interface built on asyncclick
# ABOUTME: Provides commands to extract the clipboard into a fresh directory and manage tracked directories

from pathlib import Path

import anyio
import asyncclick as click
from rich.console import Console
from rich.prompt import Confirm

from clipdrop.clipboard import StaticClipboardSnapshot, SystemClipboardReader
from clipdrop.config import get_config
from clipdrop.extraction.models import ExtractionRequest
from clipdrop.extraction.orchestrator import ClipboardExtractor
from clipdrop.persistence import DirectoryTracker
from clipdrop.utils.logging import LoggingMode, configure_logging, get_logging_status, with_extraction_context
from clipdrop.utils.rich_tables import (
    create_directories_table,
    create_items_table,
    create_logging_status_table,
    create_outcome_table,
    print_rich_table,
)

console = Console()


def _confirm_large_drop(file_count: int) -> bool:
    return Confirm.ask(
        f"There are {file_count} files in total (including those in subdirectories). "
        "Do you want to proceed with copying them?",
        console=console,
        default=False,
    )


def _failure_bell() -> None:
    console.bell()


def _build_snapshot(
    text: str | None,
    html_file: Path | None,
    csv_file: Path | None,
    wav_file: Path | None,
    image_file: Path | None,
    files: tuple[Path, ...],
) -> StaticClipboardSnapshot:
    """Assemble a snapshot from command line options, reading referenced files."""
    return StaticClipboardSnapshot(
        unicode_text=text,
        html=html_file.read_text(encoding="utf-8") if html_file else None,
        csv=csv_file.read_text(encoding="utf-8") if csv_file else None,
        wave_audio=wav_file.read_bytes() if wav_file else None,
        image=StaticClipboardSnapshot.load_image(image_file.read_bytes()) if image_file else None,
        file_drop=list(files),
    )


@click.command()
@click.option("--text", help="Text to treat as the clipboard's unicode text")
@click.option("--html-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="HTML fragment file")
@click.option("--csv-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="CSV file")
@click.option("--wav-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Wave audio file")
@click.option("--image-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Image file")
@click.option(
    "--file", "files", multiple=True, type=click.Path(exists=True, path_type=Path), help="File or directory to drop"
)
@click.option("--system", is_flag=True, help="Read the live desktop clipboard instead of the options above")
@click.option("--open", "open_directory", is_flag=True, help="Open the new directory in the file manager")
@click.pass_context
async def extract(
    ctx,
    text: str | None,
    html_file: Path | None,
    csv_file: Path | None,
    wav_file: Path | None,
    image_file: Path | None,
    files: tuple[Path, ...],
    system: bool,
    open_directory: bool,
):
    """
    📋 Extract the clipboard into a fresh working directory.

    Every representation on the clipboard (text, files, HTML, CSV, audio,
    images) is written as files; URLs and HTML images are downloaded.
    """
    json_output = ctx.obj["json_output"]

    if system:
        snapshot = await anyio.to_thread.run_sync(SystemClipboardReader().capture)
    else:
        snapshot = _build_snapshot(text, html_file, csv_file, wav_file, image_file, files)

    tracker = DirectoryTracker()
    directory = tracker.create_directory()
    if open_directory:
        click.launch(str(directory))

    with with_extraction_context(directory, source="system" if system else "options") as logger:
        logger.info("Starting clipboard extraction")

        async with ClipboardExtractor(
            confirm_large_drop=None if json_output else _confirm_large_drop,
            failure_signal=None if json_output else _failure_bell,
        ) as extractor:
            outcome = await extractor.extract(snapshot, ExtractionRequest(target_directory=directory))

    if json_output:
        click.echo(outcome.model_dump_json(indent=2))
        return

    print_rich_table(console, create_outcome_table(outcome))
    if outcome.items:
        print_rich_table(console, create_items_table(outcome))


@click.command()
def directories():
    """
    📂 List working directories that are still tracked.
    """
    tracker = DirectoryTracker()
    print_rich_table(console, create_directories_table(tracker.prune()))


@click.command()
def flush():
    """
    🧹 Delete every tracked working directory.
    """
    tracker = DirectoryTracker()
    remaining = tracker.flush()
    if remaining:
        console.print(f"[yellow]⚠️ {len(remaining)} directories could not be deleted and stay tracked.[/yellow]")
        print_rich_table(console, create_directories_table(remaining))
    else:
        console.print("[green]✅ All working directories deleted[/green]")


def _setup_logging(json_output: bool, log_level: str | None, log_file: str | None) -> None:
    """JSON output implies production logging; unset options fall back to config."""
    config = get_config()
    if log_file is None and config.log_file is not None:
        log_file = str(config.log_file)
    configure_logging(
        mode=LoggingMode.PRODUCTION if json_output else config.log_mode,
        log_level=log_level or config.log_level,
        log_file=log_file,
    )


@click.command(name="logging-status")
def logging_status():
    """
    📊 Show where logs are written and which libraries are quieted.
    """
    print_rich_table(console, create_logging_status_table(get_logging_status()))


@click.group(invoke_without_command=True)
@click.option("--json", "json_output", is_flag=True, help="Output structured JSON instead of rich tables")
@click.option("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ERROR)")
@click.option("--log-file", help="Custom log file path")
@click.pass_context
def app(ctx, json_output: bool, log_level: str | None, log_file: str | None):
    """
    📎 Clipdrop - drop the clipboard into a folder

    Turns whatever is on the clipboard into real files in a fresh working
    directory: classified text, copied files, downloads, and images.
    """
    ctx.ensure_object(dict)
    ctx.obj["json_output"] = json_output

    _setup_logging(json_output, log_level, log_file)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


app.add_command(extract)
app.add_command(directories)
app.add_command(flush)
app.add_command(logging_status)


if __name__ == "__main__":
    app()
