import struct

import pytest
from flask import Flask

from fixparts.barcode import BarcodeService
from fixparts.database import connect, create_schema
from fixparts.item_api import create_blueprint
from fixparts.items import ItemRepository, ItemService

BASE = "/api/inventory/items"


@pytest.fixture
def connection():
    conn = connect(":memory:")
    create_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def client(connection):
    app = Flask(__name__)
    service = ItemService(ItemRepository(connection))
    app.register_blueprint(
        create_blueprint(service, BarcodeService()), url_prefix="/api/inventory"
    )
    return app.test_client()


def _payload(**overrides):
    data = {
        "part_number": "BRK-100",
        "description": "Front brake pad",
        "buy_price": 10.0,
        "sell_price": 15.0,
        "current_stock": 4,
        "minimum_stock": 2,
        "is_active": True,
    }
    data.update(overrides)
    return data


def test_create_then_fetch(client):
    created = client.post(BASE, json=_payload())
    assert created.status_code == 201
    item_id = created.get_json()["item_id"]
    fetched = client.get(f"{BASE}/{item_id}")
    assert fetched.status_code == 200
    body = fetched.get_json()
    assert body["part_number"] == "BRK-100"
    assert body["description"] == "Front brake pad"


def test_create_generates_barcode(client):
    created = client.post(BASE, json=_payload())
    assert created.get_json()["barcode"].startswith("C000-S000-")


def test_duplicate_part_number_conflicts(client):
    client.post(BASE, json=_payload())
    again = client.post(BASE, json=_payload(barcode="OTHER-1"))
    assert again.status_code == 409
    assert again.get_json()["message"] == "part number already exists"


def test_duplicate_barcode_conflicts(client):
    client.post(BASE, json=_payload(barcode="BC-1"))
    again = client.post(BASE, json=_payload(part_number="BRK-200", barcode="BC-1"))
    assert again.status_code == 409
    assert again.get_json()["message"] == "barcode already exists"


def test_invalid_and_missing_ids(client):
    bad = client.get(f"{BASE}/abc")
    assert bad.status_code == 400
    assert bad.get_json()["message"] == "invalid item ID"
    missing = client.get(f"{BASE}/999")
    assert missing.status_code == 404
    assert missing.get_json()["message"] == "item not found"


def test_lookup_by_barcode(client):
    client.post(BASE, json=_payload(barcode="ABC-123"))
    found = client.get(f"{BASE}/barcode/ABC-123")
    assert found.status_code == 200
    assert found.get_json()["part_number"] == "BRK-100"
    assert client.get(f"{BASE}/barcode/NOPE").status_code == 404


def test_barcode_image_is_png_of_fixed_size(client):
    response = client.get(f"{BASE}/barcode/HELLO/image")
    assert response.status_code == 200
    assert response.mimetype == "image/png"
    data = response.data
    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    assert struct.unpack(">II", data[16:24]) == (300, 100)


def test_barcode_image_rejects_unencodable_text(client):
    response = client.get(f"{BASE}/barcode/\u00e9t\u00e9/image")
    assert response.status_code == 500


def test_low_stock_listing(client):
    client.post(BASE, json=_payload(part_number="LOW-1", current_stock=1, minimum_stock=5))
    client.post(BASE, json=_payload(part_number="OK-1", current_stock=9, minimum_stock=5))
    response = client.get(f"{BASE}/low-stock")
    assert response.status_code == 200
    assert [item["part_number"] for item in response.get_json()] == ["LOW-1"]


def test_search_filter(client):
    client.post(BASE, json=_payload(part_number="BRK-1", description="Brake disc"))
    client.post(BASE, json=_payload(part_number="FLT-1", description="Oil filter"))
    response = client.get(f"{BASE}?search=filter")
    assert [item["part_number"] for item in response.get_json()] == ["FLT-1"]
    everything = client.get(BASE)
    assert len(everything.get_json()) == 2


def test_update_item(client):
    item_id = client.post(BASE, json=_payload()).get_json()["item_id"]
    updated = client.put(f"{BASE}/{item_id}", json=_payload(description="Rear brake pad"))
    assert updated.status_code == 200
    assert client.get(f"{BASE}/{item_id}").get_json()["description"] == "Rear brake pad"


def test_update_missing_item(client):
    response = client.put(f"{BASE}/999", json=_payload())
    assert response.status_code == 404


def test_update_to_taken_part_number_conflicts(client):
    client.post(BASE, json=_payload(part_number="A-1", barcode="BC-A"))
    second = client.post(BASE, json=_payload(part_number="B-1", barcode="BC-B"))
    item_id = second.get_json()["item_id"]
    response = client.put(f"{BASE}/{item_id}", json=_payload(part_number="A-1", barcode="BC-B"))
    assert response.status_code == 409


def test_delete_item(client):
    item_id = client.post(BASE, json=_payload()).get_json()["item_id"]
    assert client.delete(f"{BASE}/{item_id}").status_code == 204
    assert client.get(f"{BASE}/{item_id}").status_code == 404
    assert client.delete(f"{BASE}/{item_id}").status_code == 404


def test_malformed_body_is_bad_request(client):
    response = client.post(BASE, data="{not json", content_type="application/json")
    assert response.status_code == 400