"""
Run-level accumulators for chunked uploads.

An outcome is created empty when a run starts, folded over one ChunkResult per
chunk in submission order, and handed to the caller only once the run ends.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Optional

from pharmadmin.schemas import BulkDeleteError, UploadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkResult:
    """What happened to one chunk: the server response, or why it failed."""
    index: int  # 1-based
    total_chunks: int
    size: int
    response: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def describe_failure(self) -> str:
        return f"Chunk {self.index}/{self.total_chunks} failed ({self.size} items): {self.error}"


def _count(payload: Dict[str, Any], key: str) -> int:
    """Read an integer counter from a response, treating junk as 0."""
    value = payload.get(key)
    if isinstance(value, bool) or value is None:
        return 0
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric '{key}' in response: {value!r}")
        return 0


def _error_entries(payload: Dict[str, Any]) -> List[Any]:
    entries = payload.get("errors")
    return entries if isinstance(entries, list) else []


@dataclass
class BatchOutcome(ABC):
    """Chunk bookkeeping shared by every chunked operation."""
    total_items: int = 0
    chunks_total: int = 0
    chunks_failed: int = 0
    cancelled: bool = False

    @property
    @abstractmethod
    def failed_count(self) -> int:
        ...

    @property
    def success(self) -> bool:
        return self.failed_count == 0

    def apply(self, result: ChunkResult) -> None:
        """Fold one chunk result into the running totals."""
        if result.ok:
            self._apply_response(result.response or {})
        else:
            self.chunks_failed += 1
            self._apply_chunk_failure(result.size, result.describe_failure())

    def apply_cancellation(self, unsent_items: int, next_chunk: int) -> None:
        """Count everything not yet sent as failed and note why."""
        self.cancelled = True
        if unsent_items <= 0:
            return
        self._apply_chunk_failure(
            unsent_items,
            f"Cancelled before chunk {next_chunk}/{self.chunks_total}; {unsent_items} items were not sent",
        )

    @abstractmethod
    def _apply_response(self, response: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def _apply_chunk_failure(self, item_count: int, message: str) -> None:
        ...


@dataclass
class UploadOutcome(BatchOutcome):
    """Aggregated result of uploading a record list to one store."""
    new_medicines_added: int = 0
    existing_medicines_updated: int = 0
    inventory_items_created: int = 0
    inventory_items_updated: int = 0
    failed_items: int = 0
    errors: List[UploadError] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return self.failed_items

    @property
    def message(self) -> str:
        parts = [
            f"{self.new_medicines_added} new medicines",
            f"{self.existing_medicines_updated} medicines updated",
            f"{self.inventory_items_created} inventory rows created",
            f"{self.inventory_items_updated} inventory rows updated",
        ]
        if self.failed_items:
            parts.append(f"{self.failed_items} failed")
        prefix = "Upload cancelled" if self.cancelled else "Upload completed"
        return f"{prefix}. " + ", ".join(parts)

    def _apply_response(self, response: Dict[str, Any]) -> None:
        self.new_medicines_added += _count(response, "newMedicinesAdded")
        self.existing_medicines_updated += _count(response, "existingMedicinesUpdated")
        self.inventory_items_created += _count(response, "inventoryItemsCreated")
        self.inventory_items_updated += _count(response, "inventoryItemsUpdated")
        self.failed_items += _count(response, "failedItems")
        self.errors.extend(UploadError.from_response(entry) for entry in _error_entries(response))

    def _apply_chunk_failure(self, item_count: int, message: str) -> None:
        self.failed_items += item_count
        self.errors.append(UploadError(error_message=message))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the backend's camelCase response vocabulary."""
        return {
            "success": self.success,
            "message": self.message,
            "totalItems": self.total_items,
            "newMedicinesAdded": self.new_medicines_added,
            "existingMedicinesUpdated": self.existing_medicines_updated,
            "inventoryItemsCreated": self.inventory_items_created,
            "inventoryItemsUpdated": self.inventory_items_updated,
            "failedItems": self.failed_items,
            "errors": [error.model_dump(by_alias=True) for error in self.errors],
            "chunksTotal": self.chunks_total,
            "chunksFailed": self.chunks_failed,
            "cancelled": self.cancelled,
        }


@dataclass
class BulkDeleteOutcome(BatchOutcome):
    """Aggregated result of a bulk delete against one store."""
    successful_deletes: int = 0
    not_found_items: int = 0
    failed_deletes: int = 0
    errors: List[BulkDeleteError] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return self.failed_deletes

    @property
    def message(self) -> str:
        prefix = "Delete cancelled" if self.cancelled else "Delete completed"
        text = f"{prefix}. {self.successful_deletes} deleted, {self.not_found_items} not found"
        if self.failed_deletes:
            text += f", {self.failed_deletes} failed"
        return text

    def _apply_response(self, response: Dict[str, Any]) -> None:
        self.successful_deletes += _count(response, "successfulDeletes")
        self.not_found_items += _count(response, "notFoundItems")
        self.failed_deletes += _count(response, "failedDeletes")
        self.errors.extend(BulkDeleteError.from_response(entry) for entry in _error_entries(response))

    def _apply_chunk_failure(self, item_count: int, message: str) -> None:
        self.failed_deletes += item_count
        self.errors.append(BulkDeleteError(error=message))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "totalItems": self.total_items,
            "successfulDeletes": self.successful_deletes,
            "notFoundItems": self.not_found_items,
            "failedDeletes": self.failed_deletes,
            "errors": [error.model_dump(by_alias=True) for error in self.errors],
            "chunksTotal": self.chunks_total,
            "chunksFailed": self.chunks_failed,
            "cancelled": self.cancelled,
        }
