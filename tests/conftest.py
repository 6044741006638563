"""
Pytest configuration and fixtures for pharmadmin tests.

Nothing here touches the network: spreadsheets are built in memory with
pandas and the backend is replaced by an in-process fake client.
"""

import io
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

import pandas as pd
import pytest

from pharmadmin.integrations.inventory_api import InventoryApiError


def build_workbook(sheets: Dict[str, Sequence[Sequence[Any]]]) -> bytes:
    """Write {sheet_name: rows} to an in-memory .xlsx; row 1 of each sheet is written as-is."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(list(rows)).to_excel(writer, sheet_name=sheet_name, index=False, header=False)
    return buffer.getvalue()


@pytest.fixture
def workbook_bytes() -> Callable[..., bytes]:
    return build_workbook


class FakeInventoryClient:
    """
    Stand-in for InventoryApiClient.

    Every chunk is acknowledged as fully created unless its 1-based index is in
    ``failing_chunks``, in which case it raises InventoryApiError. A custom
    ``responder(chunk_index, items)`` can return any response dict instead.
    """

    def __init__(
        self,
        failing_chunks: Sequence[int] = (),
        responder: Optional[Callable[[int, List[Any]], Dict[str, Any]]] = None,
        after_chunk: Optional[Callable[[int], None]] = None,
    ):
        self.failing_chunks = set(failing_chunks)
        self.responder = responder
        self.after_chunk = after_chunk
        self.calls: List[tuple] = []
        self.closed = False
        self._lock = threading.Lock()
        self._in_flight = 0
        self.max_in_flight = 0

    def _handle(self, kind: str, store_id: str, items: List[Any]) -> Dict[str, Any]:
        with self._lock:
            self._in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self._in_flight)
            self.calls.append((kind, store_id, list(items)))
            chunk_index = len(self.calls)
        try:
            if chunk_index in self.failing_chunks:
                raise InventoryApiError("Request failed with status 503", status_code=503)
            if self.responder is not None:
                return self.responder(chunk_index, list(items))
            if kind == "upload":
                return {
                    "success": True,
                    "totalItems": len(items),
                    "newMedicinesAdded": len(items),
                    "existingMedicinesUpdated": 0,
                    "inventoryItemsCreated": len(items),
                    "inventoryItemsUpdated": 0,
                    "failedItems": 0,
                    "errors": [],
                }
            return {"successfulDeletes": len(items), "notFoundItems": 0, "failedDeletes": 0, "errors": []}
        finally:
            with self._lock:
                self._in_flight -= 1
            if self.after_chunk is not None:
                self.after_chunk(chunk_index)

    def upload_inventory_chunk(self, store_id, records):
        return self._handle("upload", store_id, records)

    def bulk_delete_chunk(self, store_id, items):
        return self._handle("delete", store_id, items)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


@pytest.fixture
def fake_client() -> FakeInventoryClient:
    return FakeInventoryClient()
