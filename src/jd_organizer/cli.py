"""Command line interface for the JD file organizer."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from .core.batch import BatchCoordinator
from .core.mover import FileMover
from .core.path_resolver import PathResolver
from .core.rename_engine import BatchRenamer, generate_preview, read_directory_files
from .core.rollback import RollbackService
from .core.unique_names import UniqueNameGenerator
from .exceptions import OrganizerError
from .infrastructure.adapters.filesystem_adapter import FilesystemAdapter
from .infrastructure.repositories.file_based_repository import JsonFileKeyValueStore
from .infrastructure.repositories.sqlite_repository import SQLiteOrganizerStore
from .infrastructure.repositories.undo_log_repository import UndoLogRepository
from .models.config import Config, create_default_config, load_config
from .models.operations import (
    ConflictStrategy,
    DriveInfo,
    FolderInfo,
    MoveRequest,
    MoveStatus,
    ProgressInfo,
    RecordStatus,
)
from .models.rename import CaseType, NumberPosition, RenameOptions, RenamePreviewItem

console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(error) -> None:
    console.print(f"\n[red]Error: {error}[/red]")
    sys.exit(1)


def _open_store(cfg: Config) -> SQLiteOrganizerStore:
    return SQLiteOrganizerStore(cfg.database_path)


def _build_mover(cfg: Config, store: SQLiteOrganizerStore) -> FileMover:
    fs = FilesystemAdapter()
    return FileMover(
        resolver=PathResolver(store, store, fs),
        ledger=store,
        fs=fs,
        unique_names=UniqueNameGenerator(fs, cfg.move.max_unique_name_attempts),
        verify_checksum=cfg.move.verify_checksum,
    )


def _build_renamer(cfg: Config) -> BatchRenamer:
    undo_logs = UndoLogRepository(
        JsonFileKeyValueStore(cfg.undo_log_path),
        max_logs=cfg.rename.max_undo_logs,
    )
    return BatchRenamer(undo_logs)


@click.group()
@click.version_option()
@click.option(
    '--config',
    'config_path',
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar='JD_ORGANIZER_CONFIG',
    help='Configuration file path'
)
@click.option('--verbose', is_flag=True, help='Verbose output')
@click.pass_context
def cli(ctx, config_path: Optional[Path], verbose: bool):
    """Move and rename files into a Johnny Decimal folder structure."""
    _setup_logging(verbose)
    try:
        ctx.obj = load_config(config_path) if config_path else Config.default()
    except OrganizerError as e:
        _fail(e)


@cli.command()
@click.argument('sources', nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option('--folder', '-f', required=True, help='Target folder number, e.g. 11.01')
@click.option(
    '--strategy',
    type=click.Choice([s.value for s in ConflictStrategy]),
    default=None,
    help='What to do when the destination name is taken'
)
@click.option('--drive', default=None, help='Drive id (default drive when omitted)')
@click.option('--stop-on-error', is_flag=True, help='Stop at the first failure')
@click.pass_obj
def move(cfg: Config, sources: Tuple[Path, ...], folder: str, strategy: Optional[str],
         drive: Optional[str], stop_on_error: bool):
    """Move SOURCES into a JD folder."""
    strategy = ConflictStrategy(strategy) if strategy else cfg.move.conflict_strategy
    stop_on_error = stop_on_error or cfg.move.stop_on_error

    requests = [MoveRequest(source, folder, strategy, drive) for source in sources]
    coordinator = BatchCoordinator(_build_mover(cfg, _open_store(cfg)))

    try:
        with Progress(
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            console=console,
            transient=True,
        ) as progress:
            task = progress.add_task("Moving files...", total=len(requests))

            def on_progress(info: ProgressInfo):
                progress.update(task, completed=info.current - 1,
                                description=f"Moving {Path(info.current_file).name}")

            results = asyncio.run(coordinator.batch_move(
                requests, on_progress=on_progress, stop_on_error=stop_on_error
            ))
            progress.update(task, completed=len(results.operations))
    finally:
        coordinator.close()

    results_table = Table(title="Move Results")
    results_table.add_column("File", style="cyan")
    results_table.add_column("Status")
    results_table.add_column("Destination / Reason")
    results_table.add_column("Record", justify="right")

    colors = {MoveStatus.SUCCESS: "green", MoveStatus.SKIPPED: "yellow", MoveStatus.FAILED: "red"}
    for op in results.operations:
        color = colors[op.status]
        detail = str(op.destination_path) if op.status is MoveStatus.SUCCESS else (op.reason or "")
        results_table.add_row(
            op.source_path.name,
            f"[{color}]{op.status.value}[/{color}]",
            detail,
            str(op.record_id or ""),
        )

    console.print(results_table)
    console.print(
        f"\nMoved: {results.success}  Skipped: {results.skipped}  "
        f"Failed: {results.failed}  Total: {results.total}"
    )
    if results.failed:
        sys.exit(1)


@cli.command()
@click.argument('sources', nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option('--folder', '-f', required=True, help='Target folder number, e.g. 11.01')
@click.option('--drive', default=None, help='Drive id (default drive when omitted)')
@click.pass_obj
def preview(cfg: Config, sources: Tuple[Path, ...], folder: str, drive: Optional[str]):
    """Show where SOURCES would be moved without touching anything."""
    mover = _build_mover(cfg, _open_store(cfg))
    previews = mover.preview_operations([MoveRequest(s, folder, drive_id=drive) for s in sources])

    preview_table = Table(title="Move Preview")
    preview_table.add_column("File", style="cyan")
    preview_table.add_column("Destination")
    preview_table.add_column("Note")

    for item in previews:
        if item.error:
            note = f"[red]{item.error}[/red]"
        elif not item.source_exists:
            note = "[red]source missing[/red]"
        elif item.would_conflict:
            note = "[yellow]name taken[/yellow]"
        else:
            note = "[green]ok[/green]"
        preview_table.add_row(item.request.source_path.name, str(item.destination_path or ""), note)

    console.print(preview_table)


@cli.command()
@click.argument('record_ids', nargs=-1, required=True, type=int)
@click.pass_obj
def rollback(cfg: Config, record_ids: Tuple[int, ...]):
    """Move files recorded under RECORD_IDS back to where they came from."""
    store = _open_store(cfg)
    service = RollbackService(store, _build_mover(cfg, store))
    try:
        results = asyncio.run(service.batch_rollback(list(record_ids)))
    finally:
        service.close()

    for item in results.operations:
        if item.success:
            console.print(f"[green]✓[/green] #{item.record_id} restored to {item.result.original_path}")
        else:
            console.print(f"[red]✗[/red] #{item.record_id}: {item.error}")

    console.print(f"\nRestored: {results.success}  Failed: {results.failed}  Total: {results.total}")
    if results.failed:
        sys.exit(1)


@cli.command()
@click.option('--limit', default=20, show_default=True, help='Number of records to show')
@click.option('--moved-only', is_flag=True, help='Only records that can still be rolled back')
@click.pass_obj
def history(cfg: Config, limit: int, moved_only: bool):
    """List recent moves from the ledger."""
    records = _open_store(cfg).list_records(
        status=RecordStatus.MOVED if moved_only else None, limit=limit
    )
    if not records:
        console.print("[yellow]No recorded moves[/yellow]")
        return

    history_table = Table(title="Organized Files")
    history_table.add_column("ID", justify="right")
    history_table.add_column("File", style="cyan")
    history_table.add_column("Folder")
    history_table.add_column("Status")
    history_table.add_column("From")

    for record in records:
        history_table.add_row(
            str(record.id), record.filename, record.folder_number or "",
            record.status.value, str(record.original_path),
        )
    console.print(history_table)


@cli.command('init-config')
@click.argument('path', type=click.Path(path_type=Path))
@click.option('--force', is_flag=True, help='Overwrite an existing file')
def init_config(path: Path, force: bool):
    """Write a default configuration file to PATH."""
    if path.exists() and not force:
        _fail(f"{path} already exists (use --force to overwrite)")
    create_default_config(path)
    console.print(f"[green]Created configuration at {path}[/green]")


@cli.group()
def folders():
    """Manage JD folders."""
    pass


@folders.command('add')
@click.argument('number')
@click.argument('name')
@click.option('--category', default=None, help='Category name')
@click.option('--area', default=None, help='Area name')
@click.pass_obj
def folders_add(cfg: Config, number: str, name: str, category: Optional[str], area: Optional[str]):
    """Register folder NUMBER called NAME."""
    _open_store(cfg).add_folder(FolderInfo(number, name, category_name=category, area_name=area))
    console.print(f"[green]Added folder {number} {name}[/green]")


@cli.group()
def drives():
    """Manage storage drives."""
    pass


@drives.command('add')
@click.argument('drive_id')
@click.argument('base_path', type=click.Path(file_okay=False, path_type=Path))
@click.option('--jd-root', type=click.Path(file_okay=False, path_type=Path), default=None,
              help='JD root inside the drive, used instead of BASE_PATH')
@click.option('--name', default='', help='Display name')
@click.option('--default', 'is_default', is_flag=True, help='Make this the default drive')
@click.pass_obj
def drives_add(cfg: Config, drive_id: str, base_path: Path, jd_root: Optional[Path],
               name: str, is_default: bool):
    """Register drive DRIVE_ID rooted at BASE_PATH."""
    _open_store(cfg).add_drive(DriveInfo(
        id=drive_id,
        base_path=base_path.expanduser().absolute(),
        jd_root_path=jd_root.expanduser().absolute() if jd_root else None,
        name=name,
        is_default=is_default,
    ))
    console.print(f"[green]Added drive {drive_id}{' (default)' if is_default else ''}[/green]")


def rename_options(fn):
    """Shared pattern options for the rename commands."""
    options = [
        click.option('--find', default=None, help='Text to find in the base name'),
        click.option('--replace', default='', help='Replacement text'),
        click.option('--replace-all', is_flag=True, help='Replace every occurrence'),
        click.option('--case', 'case_type', type=click.Choice([c.value for c in CaseType]),
                     default=None, help='Change case'),
        click.option('--prefix', default=None, help='Text to prepend'),
        click.option('--suffix', default=None, help='Text to append to the base name'),
        click.option('--number', 'add_number', is_flag=True, help='Add a sequential number'),
        click.option('--start', 'start_number', default=1, show_default=True, help='First number'),
        click.option('--digits', default=3, show_default=True, help='Zero-padded width'),
        click.option('--number-position', type=click.Choice([p.value for p in NumberPosition]),
                     default=NumberPosition.SUFFIX.value, show_default=True),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _build_rename_options(find, replace, replace_all, case_type, prefix, suffix,
                          add_number, start_number, digits, number_position) -> RenameOptions:
    return RenameOptions(
        find_replace=bool(find),
        find=find or '',
        replace=replace,
        replace_all=replace_all,
        change_case=case_type is not None,
        case_type=case_type,
        add_prefix=bool(prefix),
        prefix=prefix or '',
        add_suffix=bool(suffix),
        suffix=suffix or '',
        add_number=add_number,
        start_number=start_number,
        digits=digits,
        number_position=number_position,
    )


def _rename_preview(directory: Path, pattern: dict) -> List[RenamePreviewItem]:
    options = _build_rename_options(**pattern)
    return generate_preview(read_directory_files(directory), options)


def _print_rename_preview(items: List[RenamePreviewItem]) -> None:
    preview_table = Table(title="Rename Preview")
    preview_table.add_column("Original", style="cyan")
    preview_table.add_column("New name")
    preview_table.add_column("Note")

    for item in items:
        if item.conflict:
            note = f"[red]{item.conflict.value}[/red]"
        elif item.will_change:
            note = "[green]rename[/green]"
        else:
            note = "[dim]unchanged[/dim]"
        preview_table.add_row(item.original, item.new_name, note)

    console.print(preview_table)


@cli.group()
def rename():
    """Pattern-based batch renaming with undo."""
    pass


@rename.command('preview')
@click.argument('directory', type=click.Path(exists=True, file_okay=False, path_type=Path))
@rename_options
def rename_preview(directory: Path, **pattern):
    """Show how files in DIRECTORY would be renamed."""
    try:
        items = _rename_preview(directory, pattern)
    except OrganizerError as e:
        _fail(e)
    _print_rename_preview(items)


@rename.command('apply')
@click.argument('directory', type=click.Path(exists=True, file_okay=False, path_type=Path))
@rename_options
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_obj
def rename_apply(cfg: Config, directory: Path, yes: bool, **pattern):
    """Rename files in DIRECTORY."""
    try:
        items = _rename_preview(directory, pattern)
    except OrganizerError as e:
        _fail(e)

    _print_rename_preview(items)
    actionable = [item for item in items if item.actionable]
    if not actionable:
        console.print("[yellow]Nothing to rename[/yellow]")
        return

    if not yes and not click.confirm(f"\nRename {len(actionable)} file(s)?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    renamer = _build_renamer(cfg)
    try:
        result = asyncio.run(renamer.execute_batch_rename(items))
    finally:
        renamer.close()

    for error in result.errors:
        console.print(f"[red]✗[/red] {error.file}: {error.error}")
    console.print(f"\nRenamed {result.count} of {result.total} file(s)")
    if result.undo_id:
        console.print(f"Undo with: [bold]jd-organizer rename undo {result.undo_id}[/bold]")
    if not result.success:
        sys.exit(1)


@rename.command('undo')
@click.argument('undo_id', required=False)
@click.pass_obj
def rename_undo(cfg: Config, undo_id: Optional[str]):
    """Reverse rename batch UNDO_ID (the most recent one by default)."""
    renamer = _build_renamer(cfg)
    try:
        if undo_id is None:
            latest = renamer.get_most_recent_undo_log()
            if latest is None:
                console.print("[yellow]Nothing to undo[/yellow]")
                return
            undo_id = latest.undo_id

        result = asyncio.run(renamer.undo_batch_rename(undo_id))
    except OrganizerError as e:
        _fail(e)
    finally:
        renamer.close()

    for error in result.errors:
        console.print(f"[red]✗[/red] {error.file}: {error.error}")
    console.print(f"\nRestored {result.count} of {result.total} file(s)")
    if not result.success:
        sys.exit(1)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == '__main__':
    main()
