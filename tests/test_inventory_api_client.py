"""
InventoryApiClient request building and error translation, using a fake session.
"""
import pytest
import requests

from pharmadmin.integrations.inventory_api import BULK_DELETE_PATH, UPLOAD_PATH, InventoryApiClient, InventoryApiError
from pharmadmin.schemas import DeleteItem, InventoryRecord


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.requests.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


def _client(session):
    return InventoryApiClient("http://backend/api/", session=session, request_timeout=5, upload_timeout=60)


def test_upload_chunk_posts_store_and_items():
    session = FakeSession(FakeResponse(payload={"success": True, "inventoryItemsCreated": 1}))
    record = InventoryRecord(product_name="Crocin", mrp="30")

    response = _client(session).upload_inventory_chunk("store-1", [record])

    assert response["inventoryItemsCreated"] == 1
    sent = session.requests[0]
    assert sent["url"] == f"http://backend/api{UPLOAD_PATH}"
    assert sent["timeout"] == 60
    assert sent["json"]["storeId"] == "store-1"
    assert sent["json"]["items"][0]["productName"] == "Crocin"
    assert sent["json"]["items"][0]["mrp"] == 30.0


def test_bulk_delete_chunk_omits_missing_identifiers():
    session = FakeSession(FakeResponse(payload={"successfulDeletes": 1}))

    _client(session).bulk_delete_chunk("store-1", [DeleteItem(medicine_id="m-1")])

    sent = session.requests[0]
    assert sent["url"].endswith(BULK_DELETE_PATH)
    assert sent["json"] == {"storeId": "store-1", "items": [{"medicineId": "m-1"}]}


def test_non_2xx_uses_server_error_message():
    session = FakeSession(FakeResponse(status_code=400, payload={"error": "Store not found"}))

    with pytest.raises(InventoryApiError) as excinfo:
        _client(session).post_json(UPLOAD_PATH, {})

    assert excinfo.value.status_code == 400
    assert str(excinfo.value) == "Store not found"


def test_non_2xx_without_json_falls_back_to_status_and_text():
    session = FakeSession(FakeResponse(status_code=502, text="Bad Gateway"))

    with pytest.raises(InventoryApiError) as excinfo:
        _client(session).post_json(UPLOAD_PATH, {})

    assert str(excinfo.value) == "Request failed with status 502: Bad Gateway"


def test_timeout_is_translated():
    session = FakeSession(error=requests.Timeout("read timed out"))

    with pytest.raises(InventoryApiError) as excinfo:
        _client(session).post_json(UPLOAD_PATH, {})

    assert "timed out" in str(excinfo.value)
    assert excinfo.value.status_code is None


def test_connection_error_is_translated():
    session = FakeSession(error=requests.ConnectionError("refused"))

    with pytest.raises(InventoryApiError, match="Network error"):
        _client(session).post_json(UPLOAD_PATH, {})


def test_invalid_json_body_is_an_error():
    session = FakeSession(FakeResponse(status_code=200))

    with pytest.raises(InventoryApiError, match="not valid JSON"):
        _client(session).post_json(UPLOAD_PATH, {})


def test_non_object_json_body_is_an_error():
    session = FakeSession(FakeResponse(payload=[1, 2, 3]))

    with pytest.raises(InventoryApiError, match="Unexpected response payload type"):
        _client(session).post_json(UPLOAD_PATH, {})


def test_context_manager_closes_session():
    session = FakeSession()

    with _client(session):
        pass

    assert session.closed is True
