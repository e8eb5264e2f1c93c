from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from api.middleware.store import get_item_store
from core.error_handlers import register_exception_handlers
from main import app

URL = "/api/inventory"


def create(client, **payload):
    return client.post(URL, params={"action": "create"}, json=payload)


def test_create_returns_assigned_id(client):
    resp = create(client, barcode="X1", name="Widget", condition="new", location="A1")

    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert isinstance(data["id"], int)
    assert data["item"]["barcode"] == "X1"
    assert data["item"]["condition"] == "new"


def test_create_accepts_legacy_condition_key(client):
    resp = create(client, barcode="X1", name="Widget", item_condition="used")

    assert resp.status_code == 200
    assert resp.json()["item"]["condition"] == "used"


def test_full_lifecycle(client):
    created = create(client, barcode="X1", name="Widget").json()

    resp = client.get(URL, params={"action": "getByBarcode", "barcode": "X1"})
    assert resp.status_code == 200
    record = resp.json()
    assert record["id"] == created["id"]
    assert record["name"] == "Widget"

    resp = client.put(
        URL,
        params={"action": "update", "barcode": "X1"},
        json={"name": "Widget2", "condition": "used", "location": "A1"},
    )
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["id"] == created["id"]
    assert updated["barcode"] == "X1"
    assert updated["name"] == "Widget2"
    assert updated["condition"] == "used"
    assert updated["location"] == "A1"
    assert updated["created_at"] == record["created_at"]
    assert updated["updated_at"] >= record["updated_at"]

    resp = client.delete(URL, params={"action": "delete", "barcode": "X1"})
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Item deleted successfully", "count": 1}

    resp = client.get(URL, params={"action": "getByBarcode", "barcode": "X1"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "Item not found"


def test_duplicate_create_conflicts(client):
    assert create(client, barcode="X1", name="Widget").status_code == 200

    resp = create(client, barcode="X1", name="Impostor")
    assert resp.status_code == 409
    assert resp.json()["error"] == "Item with this barcode already exists"
    assert resp.json()["error_code"] == "CONFLICT"

    items = client.get(URL, params={"action": "getAll"}).json()
    assert [(item["barcode"], item["name"]) for item in items] == [("X1", "Widget")]


def test_create_rejects_malformed_json(client):
    resp = client.post(
        URL,
        params={"action": "create"},
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON data"


def test_create_rejects_missing_body(client):
    resp = client.post(URL, params={"action": "create"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON data"


def test_create_requires_barcode_and_name(client):
    resp = create(client, barcode="X1")

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"] == "Barcode and name are required"
    assert body["details"][0]["loc"] == ["name"]


def test_create_rejects_blank_name(client):
    resp = create(client, barcode="X1", name="   ")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Name cannot be empty"


def test_get_all_empty(client):
    resp = client.get(URL, params={"action": "getAll"})

    assert resp.status_code == 200
    assert resp.json() == []


def test_get_by_barcode_requires_parameter(client):
    resp = client.get(URL, params={"action": "getByBarcode"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Barcode parameter is required"


def test_get_by_barcode_never_created(client):
    resp = client.get(URL, params={"action": "getByBarcode", "barcode": "ghost"})

    assert resp.status_code == 404
    assert resp.json()["error_code"] == "NOT_FOUND"


def test_update_requires_all_fields(client):
    create(client, barcode="X1", name="Widget")

    resp = client.put(URL, params={"action": "update", "barcode": "X1"}, json={"name": "Widget2"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required fields"


def test_update_unknown_barcode(client):
    resp = client.put(
        URL,
        params={"action": "update", "barcode": "ghost"},
        json={"name": "Widget", "condition": None, "location": None},
    )

    assert resp.status_code == 404


def test_update_requires_barcode_parameter(client):
    resp = client.put(
        URL,
        params={"action": "update"},
        json={"name": "Widget", "condition": None, "location": None},
    )

    assert resp.status_code == 400


def test_delete_unknown_barcode(client):
    resp = client.delete(URL, params={"action": "delete", "barcode": "ghost"})

    assert resp.status_code == 404


def test_delete_multiple_reports_actual_count(client):
    for code in ("A", "B", "C"):
        create(client, barcode=code, name=f"Item {code}")

    resp = client.request(
        "DELETE", URL, params={"action": "deleteMultiple"}, json={"barcodes": ["A", "C", "nope"]}
    )

    assert resp.status_code == 200
    assert resp.json()["count"] == 2
    remaining = client.get(URL, params={"action": "getAll"}).json()
    assert [item["barcode"] for item in remaining] == ["B"]


def test_delete_multiple_rejects_empty_list(client):
    resp = client.request("DELETE", URL, params={"action": "deleteMultiple"}, json={"barcodes": []})

    assert resp.status_code == 400
    assert resp.json()["error"] == "At least one barcode is required"


def test_delete_multiple_rejects_missing_list(client):
    resp = client.request("DELETE", URL, params={"action": "deleteMultiple"}, json={})

    assert resp.status_code == 400
    assert resp.json()["error"] == "No barcodes provided"


def test_search(client):
    create(client, barcode="ABC123", name="Desk Lamp")
    create(client, barcode="QQQ111", name="Stool")

    for term in ("abc", "lamp"):
        resp = client.get(URL, params={"action": "search", "term": term})
        assert resp.status_code == 200
        assert [item["barcode"] for item in resp.json()] == ["ABC123"]

    assert client.get(URL, params={"action": "search", "term": "sofa"}).json() == []


def test_search_without_term_matches_get_all(client):
    create(client, barcode="A", name="First")
    create(client, barcode="B", name="Second")

    everything = client.get(URL, params={"action": "getAll"}).json()
    assert client.get(URL, params={"action": "search", "term": ""}).json() == everything
    assert client.get(URL, params={"action": "search"}).json() == everything


def test_invalid_action(client):
    resp = client.get(URL, params={"action": "explode"})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid action"


def test_missing_action(client):
    resp = client.get(URL)

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid action"


def test_wrong_verb_for_action(client):
    resp = client.get(URL, params={"action": "create"})

    assert resp.status_code == 405
    assert resp.json()["error_code"] == "METHOD_NOT_ALLOWED"


def test_storage_failure_is_masked(client):
    class BrokenStore:
        def get_all(self):
            raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    app.dependency_overrides[get_item_store] = lambda: BrokenStore()

    resp = client.get(URL, params={"action": "getAll"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Database error"
    assert "disk" not in resp.text


def test_health(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json()["database"] == "connected"


def test_health_reports_unreachable_database(client):
    class DeadStore:
        def ping(self):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    app.dependency_overrides[get_item_store] = lambda: DeadStore()

    resp = client.get("/health")

    assert resp.status_code == 503
    assert resp.json()["error"] == "Database connection is not active"


def test_unknown_route_is_json(client):
    resp = client.get("/nowhere")

    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_unmapped_http_errors_keep_a_request_error_code():
    error_app = FastAPI()
    register_exception_handlers(error_app)

    @error_app.get("/too-large")
    async def too_large():
        raise HTTPException(status_code=413, detail="Payload too large")

    @error_app.get("/not-implemented")
    async def not_implemented():
        raise HTTPException(status_code=501, detail="Not implemented")

    local = TestClient(error_app)

    resp = local.get("/too-large")
    assert resp.status_code == 413
    assert resp.json()["error_code"] == "REQUEST_ERROR"

    resp = local.get("/not-implemented")
    assert resp.status_code == 501
    assert resp.json()["error_code"] == "INTERNAL_ERROR"
