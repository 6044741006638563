#!/usr/bin/env python3
"""
Command-line interface for bulk inventory maintenance.

Parses a catalog file, shows how its columns were understood, and pushes the
records to a store in chunks with a live progress bar.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn
from rich.table import Table

from .core.config import settings
from .core.logging_config import configure_logging
from .domain.ingestion import IngestionError, IngestionResult, parse_delete_file, parse_inventory_file
from .domain.uploads.orchestrator import bulk_delete_inventory, upload_inventory
from .domain.uploads.outcome import BatchOutcome, BulkDeleteOutcome, UploadOutcome
from .integrations.inventory_api import InventoryApiClient
from .schemas import DeleteItem, InventoryRecord

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ITEMS_FAILED = 1
EXIT_FATAL = 2

PREVIEW_COLUMNS = (
    ("serial_no", "S.No"),
    ("product_name", "Product"),
    ("company", "Company"),
    ("pack_size", "Pack"),
    ("inventory_qty", "Qty"),
    ("inventory_type", "Type"),
    ("mrp", "MRP"),
    ("selling_price", "Price"),
)


class InventoryConsole:
    """Renders ingestion and upload results for a terminal."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def print_mapping(self, result: IngestionResult) -> None:
        table = Table(title=f"Column mapping ({result.dialect.describe()})")
        table.add_column("Field", style="cyan", no_wrap=True)
        table.add_column("Source column", style="white")
        for canonical, header in result.mapped_columns.items():
            table.add_row(canonical, header)
        self.console.print(table)

    def print_stats(self, result: IngestionResult) -> None:
        stats = result.stats
        lines = [
            f"[green]{stats.records_produced}[/green] records from {stats.rows_read} data rows",
        ]
        if stats.rows_skipped:
            lines.append(
                f"[yellow]{stats.rows_skipped} skipped[/yellow]: {stats.blank_rows} blank, "
                f"{stats.rows_missing_product_name} without product name, {stats.rows_with_errors} with errors"
            )
        if stats.error_rows:
            lines.append(f"[dim]Rows with errors: {', '.join(str(row) for row in stats.error_rows[:20])}[/dim]")
        self.console.print(Panel("\n".join(lines), title=result.file_name or "input", border_style="blue"))

    def print_preview(self, records: Sequence[InventoryRecord], limit: int) -> None:
        if limit <= 0 or not records:
            return
        table = Table(title=f"Preview (first {min(limit, len(records))} of {len(records)})")
        for _, label in PREVIEW_COLUMNS:
            table.add_column(label)
        for record in records[:limit]:
            table.add_row(*[
                "" if getattr(record, attr) is None else str(getattr(record, attr))
                for attr, _ in PREVIEW_COLUMNS
            ])
        self.console.print(table)

    def print_delete_preview(self, items: Sequence[DeleteItem], limit: int) -> None:
        if limit <= 0 or not items:
            return
        table = Table(title=f"Delete list (first {min(limit, len(items))} of {len(items)})")
        table.add_column("Product")
        table.add_column("Medicine ID")
        for item in items[:limit]:
            table.add_row(item.product_name or "", item.medicine_id or "")
        self.console.print(table)

    def print_upload_outcome(self, outcome: UploadOutcome) -> None:
        table = Table(title="Upload result")
        table.add_column("Metric", style="cyan")
        table.add_column("Count", justify="right")
        table.add_row("Total items", str(outcome.total_items))
        table.add_row("New medicines", str(outcome.new_medicines_added))
        table.add_row("Medicines updated", str(outcome.existing_medicines_updated))
        table.add_row("Inventory rows created", str(outcome.inventory_items_created))
        table.add_row("Inventory rows updated", str(outcome.inventory_items_updated))
        table.add_row("Failed", str(outcome.failed_items), style="red" if outcome.failed_items else None)
        table.add_row("Chunks failed", f"{outcome.chunks_failed}/{outcome.chunks_total}")
        self.console.print(table)
        self._print_errors([
            (error.serial_no, error.product_name, error.error_message) for error in outcome.errors
        ])
        self._print_summary(outcome)

    def print_delete_outcome(self, outcome: BulkDeleteOutcome) -> None:
        table = Table(title="Delete result")
        table.add_column("Metric", style="cyan")
        table.add_column("Count", justify="right")
        table.add_row("Total items", str(outcome.total_items))
        table.add_row("Deleted", str(outcome.successful_deletes))
        table.add_row("Not found", str(outcome.not_found_items))
        table.add_row("Failed", str(outcome.failed_deletes), style="red" if outcome.failed_deletes else None)
        table.add_row("Chunks failed", f"{outcome.chunks_failed}/{outcome.chunks_total}")
        self.console.print(table)
        self._print_errors([
            (error.medicine_id, error.product_name, error.error) for error in outcome.errors
        ])
        self._print_summary(outcome)

    def _print_errors(self, rows: List[tuple], limit: int = 25) -> None:
        if not rows:
            return
        table = Table(title=f"Errors ({len(rows)})", border_style="red")
        table.add_column("Ref")
        table.add_column("Product")
        table.add_column("Error", style="red")
        for ref, product, message in rows[:limit]:
            table.add_row("" if ref is None else str(ref), product or "", message)
        if len(rows) > limit:
            table.caption = f"{len(rows) - limit} more not shown"
        self.console.print(table)

    def _print_summary(self, outcome: BatchOutcome) -> None:
        if outcome.success:
            self.console.print(f"[green]✅ {outcome.message}[/green]")
        else:
            self.console.print(f"[red]❌ {outcome.message}[/red]")

    def print_fatal(self, error: Exception) -> None:
        self.console.print(Panel(f"[red]{error}[/red]", title="Error", border_style="red"))


def _progress() -> Progress:
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
    )


async def _run_with_progress(runner, items, store_id: str, *, client, chunk_size: Optional[int], description: str):
    """Run an orchestrator coroutine, driving a progress bar and Ctrl+C cancellation."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
    except (NotImplementedError, RuntimeError):
        # Not available on every platform/thread; Ctrl+C then aborts as usual.
        pass

    try:
        with _progress() as progress:
            task_id = progress.add_task(description, total=len(items))

            def on_progress(completed: int, total: int, chunk: int, total_chunks: int) -> None:
                progress.update(
                    task_id,
                    completed=completed,
                    description=f"{description} (chunk {chunk}/{total_chunks})",
                )

            return await runner(
                items,
                store_id,
                client=client,
                chunk_size=chunk_size,
                on_progress=on_progress,
                cancel_event=cancel_event,
            )
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass


def _read_file(path: str) -> bytes:
    return Path(path).read_bytes()


def cmd_upload(args: argparse.Namespace, ui: InventoryConsole) -> int:
    try:
        result = parse_inventory_file(_read_file(args.file), Path(args.file).name)
    except (IngestionError, OSError) as e:
        logger.error(f"Could not read {args.file}: {e}")
        ui.print_fatal(e)
        return EXIT_FATAL

    ui.print_mapping(result)
    ui.print_stats(result)
    ui.print_preview(result.records, args.preview)

    if args.dry_run:
        ui.console.print("[dim]Dry run: nothing was sent.[/dim]")
        return EXIT_OK
    if not result.records:
        ui.console.print("[yellow]No records to upload.[/yellow]")
        return EXIT_OK

    with InventoryApiClient(args.api_url) as client:
        outcome = asyncio.run(
            _run_with_progress(
                upload_inventory,
                result.records,
                args.store,
                client=client,
                chunk_size=args.chunk_size,
                description="Uploading",
            )
        )
    ui.print_upload_outcome(outcome)
    return EXIT_OK if outcome.success else EXIT_ITEMS_FAILED


def cmd_delete(args: argparse.Namespace, ui: InventoryConsole) -> int:
    try:
        items = parse_delete_file(_read_file(args.file), Path(args.file).name)
    except (IngestionError, OSError) as e:
        logger.error(f"Could not read {args.file}: {e}")
        ui.print_fatal(e)
        return EXIT_FATAL

    ui.console.print(f"[green]{len(items)}[/green] items to delete from store {args.store}")
    ui.print_delete_preview(items, args.preview)

    if args.dry_run:
        ui.console.print("[dim]Dry run: nothing was sent.[/dim]")
        return EXIT_OK
    if not items:
        ui.console.print("[yellow]No items to delete.[/yellow]")
        return EXIT_OK

    with InventoryApiClient(args.api_url) as client:
        outcome = asyncio.run(
            _run_with_progress(
                bulk_delete_inventory,
                items,
                args.store,
                client=client,
                chunk_size=args.chunk_size,
                description="Deleting",
            )
        )
    ui.print_delete_outcome(outcome)
    return EXIT_OK if outcome.success else EXIT_ITEMS_FAILED


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pharmadmin",
        description="Bulk inventory upload and delete for pharmacy stores",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s upload stock.xlsx --store 42               # Upload a catalog
  %(prog)s upload stock.csv --store 42 --dry-run      # Only show what would be sent
  %(prog)s delete discontinued.csv --store 42         # Remove products from a store
        """
    )
    parser.add_argument("--api-url", default=None, help=f"Backend base URL (default: {settings.api_base_url})")
    parser.add_argument("--log-level", default=None, help=f"Log level (default: {settings.log_level})")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, help_text, handler in (
        ("upload", "Upload an inventory file to a store", cmd_upload),
        ("delete", "Delete the products listed in a file from a store", cmd_delete),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("file", help="Spreadsheet (.xlsx) or delimited text (.csv, .tsv, .txt)")
        sub.add_argument("--store", required=True, help="Target store id")
        sub.add_argument("--chunk-size", type=_positive_int, default=None, help="Items per request")
        sub.add_argument("--dry-run", action="store_true", help="Parse and preview only")
        sub.add_argument("--preview", type=int, default=10, help="Rows to preview (default: 10, 0 to hide)")
        sub.set_defaults(handler=handler)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return args.handler(args, InventoryConsole())


if __name__ == "__main__":
    sys.exit(main())
