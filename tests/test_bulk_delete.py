import pytest

from pharmadmin.domain.uploads.orchestrator import bulk_delete_inventory
from pharmadmin.schemas import DeleteItem

from conftest import FakeInventoryClient


def _items(count):
    return [DeleteItem(product_name=f"Medicine {i}") for i in range(count)]


@pytest.mark.asyncio
async def test_bulk_delete_uses_configured_chunk_size(monkeypatch):
    from pharmadmin.core.config import settings

    monkeypatch.setattr(settings, "delete_chunk_size", 4)
    client = FakeInventoryClient()

    outcome = await bulk_delete_inventory(_items(10), "store-9", client=client)

    assert [len(items) for kind, _, items in client.calls] == [4, 4, 2]
    assert all(kind == "delete" for kind, _, _ in client.calls)
    assert outcome.successful_deletes == 10
    assert outcome.success is True
    assert outcome.message == "Delete completed. 10 deleted, 0 not found"


@pytest.mark.asyncio
async def test_bulk_delete_partial_failure():
    client = FakeInventoryClient(failing_chunks=[1])

    outcome = await bulk_delete_inventory(_items(5), "store-9", client=client, chunk_size=3)

    assert outcome.failed_deletes == 3
    assert outcome.successful_deletes == 2
    assert outcome.chunks_failed == 1
    assert outcome.errors[0].error.startswith("Chunk 1/2 failed (3 items)")
    assert outcome.success is False


@pytest.mark.asyncio
async def test_bulk_delete_not_found_items_are_not_failures():
    def responder(chunk_index, items):
        return {
            "successfulDeletes": 1,
            "notFoundItems": len(items) - 1,
            "failedDeletes": 0,
            "errors": [{"productName": items[-1].product_name, "error": "Not found in store"}],
        }

    outcome = await bulk_delete_inventory(_items(3), "store-9", client=FakeInventoryClient(responder=responder))

    assert outcome.not_found_items == 2
    assert outcome.success is True
    assert outcome.errors[0].error == "Not found in store"
    assert outcome.to_dict()["notFoundItems"] == 2
