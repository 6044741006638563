"""
Batch upload orchestration.

Records are split into contiguous chunks and sent one chunk at a time: the
next request only starts after the previous one has settled. A failed chunk is
recorded (every item in it counts as failed) and the run moves on; nothing is
retried and network errors never abort the run. The blocking HTTP call runs in
the loop's default executor so the event loop stays responsive while a chunk
is in flight.
"""

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, TypeVar

from pharmadmin.core.config import settings
from pharmadmin.integrations.inventory_api import InventoryApiError
from pharmadmin.schemas import DeleteItem, InventoryRecord
from .outcome import BatchOutcome, BulkDeleteOutcome, ChunkResult, UploadOutcome

logger = logging.getLogger(__name__)

T = TypeVar("T")
OutcomeT = TypeVar("OutcomeT", bound=BatchOutcome)

# (completed_items, total_items, current_chunk, total_chunks)
ProgressCallback = Callable[[int, int, int, int], None]
ChunkSubmitter = Callable[[List[Any]], Dict[str, Any]]


class CancelSignal(Protocol):
    """Anything with ``is_set()``: asyncio.Event, threading.Event, ..."""

    def is_set(self) -> bool: ...


class InventoryClient(Protocol):
    def upload_inventory_chunk(self, store_id: str, records: List[InventoryRecord]) -> Dict[str, Any]: ...

    def bulk_delete_chunk(self, store_id: str, items: List[DeleteItem]) -> Dict[str, Any]: ...


def partition(items: Sequence[T], chunk_size: int) -> List[List[T]]:
    """
    Split items into contiguous chunks of ``chunk_size`` (the last may be shorter).

    Raises:
        ValueError: If chunk_size is smaller than 1
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    return [list(items[start:start + chunk_size]) for start in range(0, len(items), chunk_size)]


async def _submit(submit: ChunkSubmitter, chunk: List[Any]) -> Dict[str, Any]:
    if inspect.iscoroutinefunction(submit):
        return await submit(chunk)
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, submit, chunk)


async def run_chunked(
    items: Sequence[T],
    *,
    submit: ChunkSubmitter,
    outcome: OutcomeT,
    chunk_size: int,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[CancelSignal] = None,
    label: str = "upload",
) -> OutcomeT:
    """
    Drive a chunked run to completion and return the folded outcome.

    Args:
        items: Everything to send, in order
        submit: Sends one chunk and returns the decoded response; may be a plain
            function (run in the default executor) or a coroutine function
        outcome: Empty accumulator owned by this run
        chunk_size: Maximum items per request
        on_progress: Called after every chunk, then once more with
            completed == total when the run ends
        cancel_event: Checked before each chunk; once set, no further chunk is
            sent and every unsent item is counted as failed
        label: Used in log lines only

    Returns:
        The outcome, fully populated
    """
    chunks = partition(items, chunk_size)
    total_items = len(items)
    total_chunks = len(chunks)
    outcome.total_items = total_items
    outcome.chunks_total = total_chunks

    logger.info(f"Starting {label} of {total_items} items in {total_chunks} chunks of up to {chunk_size}")
    run_start = time.time()
    completed = 0

    for chunk_index, chunk in enumerate(chunks, start=1):
        if cancel_event is not None and cancel_event.is_set():
            logger.warning(f"{label.capitalize()} cancelled before chunk {chunk_index}/{total_chunks}")
            outcome.apply_cancellation(total_items - completed, chunk_index)
            completed = total_items
            break

        start = completed
        logger.info(f"Sending chunk {chunk_index}/{total_chunks} (items {start}-{start + len(chunk)})")
        chunk_start = time.time()
        try:
            response = await _submit(submit, chunk)
            result = ChunkResult(chunk_index, total_chunks, len(chunk), response=response)
        except InventoryApiError as e:
            logger.error(f"Chunk {chunk_index}/{total_chunks} failed: {e}")
            result = ChunkResult(chunk_index, total_chunks, len(chunk), error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error sending chunk {chunk_index}/{total_chunks}")
            result = ChunkResult(chunk_index, total_chunks, len(chunk), error=f"{type(e).__name__}: {e}")

        outcome.apply(result)
        completed += len(chunk)
        if result.ok:
            logger.info(f"Chunk {chunk_index}/{total_chunks} done in {time.time() - chunk_start:.2f}s")
        if on_progress is not None:
            on_progress(completed, total_items, chunk_index, total_chunks)

    if on_progress is not None:
        on_progress(total_items, total_items, total_chunks, total_chunks)

    logger.info(
        f"Finished {label} in {time.time() - run_start:.2f}s: "
        f"{outcome.failed_count} failed items, {outcome.chunks_failed}/{total_chunks} failed chunks"
    )
    return outcome


async def upload_inventory(
    records: Sequence[InventoryRecord],
    store_id: str,
    *,
    client: InventoryClient,
    chunk_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[CancelSignal] = None,
) -> UploadOutcome:
    """
    Upload canonical records to a store in sequential chunks.

    The returned outcome is always complete: chunk failures are counted in
    ``failed_items`` with one synthetic error each, and ``success`` is True only
    when nothing failed.
    """
    return await run_chunked(
        records,
        submit=functools.partial(client.upload_inventory_chunk, store_id),
        outcome=UploadOutcome(),
        chunk_size=settings.upload_chunk_size if chunk_size is None else chunk_size,
        on_progress=on_progress,
        cancel_event=cancel_event,
        label="upload",
    )


async def bulk_delete_inventory(
    items: Sequence[DeleteItem],
    store_id: str,
    *,
    client: InventoryClient,
    chunk_size: Optional[int] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[CancelSignal] = None,
) -> BulkDeleteOutcome:
    """Remove products from a store in sequential chunks."""
    return await run_chunked(
        items,
        submit=functools.partial(client.bulk_delete_chunk, store_id),
        outcome=BulkDeleteOutcome(),
        chunk_size=settings.delete_chunk_size if chunk_size is None else chunk_size,
        on_progress=on_progress,
        cancel_event=cancel_event,
        label="bulk delete",
    )
