import pytest
from flask import Flask

from fixparts.compatibility import CompatibilityRepository, CompatibilityService
from fixparts.compatibility_api import create_blueprint
from fixparts.database import connect, create_schema
from fixparts.items import ItemRepository

BASE = "/api/inventory"


@pytest.fixture
def connection():
    conn = connect(":memory:")
    create_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def client(connection):
    app = Flask(__name__)
    service = CompatibilityService(
        CompatibilityRepository(connection), ItemRepository(connection)
    )
    app.register_blueprint(create_blueprint(service), url_prefix=BASE)
    return app.test_client()


def _add_vehicle(conn, make, model, submodel):
    make_id = conn.execute(
        "INSERT INTO vehicle_makes (make_name) VALUES (?)", (make,)
    ).lastrowid
    model_id = conn.execute(
        "INSERT INTO vehicle_models (make_id, model_name) VALUES (?, ?)", (make_id, model)
    ).lastrowid
    return conn.execute(
        "INSERT INTO vehicle_submodels (model_id, submodel_name) VALUES (?, ?)",
        (model_id, submodel),
    ).lastrowid


def _add_item(conn, part_number):
    return conn.execute(
        "INSERT INTO items (part_number, description, buy_price, sell_price) "
        "VALUES (?, ?, 1, 2)",
        (part_number, part_number),
    ).lastrowid


def _link(client, item_id, submodel_id):
    return client.post(
        f"{BASE}/items/{item_id}/compatibilities",
        json={"item_id": item_id, "submodel_id": submodel_id},
    )


def test_add_and_list(client, connection):
    item_id = _add_item(connection, "BRK-1")
    submodel_id = _add_vehicle(connection, "Acme", "Roadster", "Base")
    created = _link(client, item_id, submodel_id)
    assert created.status_code == 201
    assert created.get_json()["compat_id"] > 0
    listed = client.get(f"{BASE}/items/{item_id}/compatibilities").get_json()
    assert len(listed) == 1
    assert listed[0]["make_name"] == "Acme"
    assert listed[0]["submodel_id"] == submodel_id


def test_duplicate_link_conflicts(client, connection):
    item_id = _add_item(connection, "BRK-1")
    submodel_id = _add_vehicle(connection, "Acme", "Roadster", "Base")
    _link(client, item_id, submodel_id)
    again = _link(client, item_id, submodel_id)
    assert again.status_code == 409
    assert again.get_json()["message"] == "compatibility already exists"


def test_missing_item(client, connection):
    submodel_id = _add_vehicle(connection, "Acme", "Roadster", "Base")
    response = _link(client, 999, submodel_id)
    assert response.status_code == 404
    assert response.get_json()["message"] == "item not found"


def test_remove_link(client, connection):
    item_id = _add_item(connection, "BRK-1")
    submodel_id = _add_vehicle(connection, "Acme", "Roadster", "Base")
    _link(client, item_id, submodel_id)
    path = f"{BASE}/items/{item_id}/compatibilities/{submodel_id}"
    assert client.delete(path).status_code == 204
    again = client.delete(path)
    assert again.status_code == 404
    assert again.get_json()["message"] == "compatibility not found"


def test_unparsable_ids(client):
    bad_item = client.get(f"{BASE}/items/x/compatibilities")
    assert bad_item.status_code == 400
    assert bad_item.get_json()["message"] == "invalid item ID"
    bad_sub = client.delete(f"{BASE}/items/1/compatibilities/y")
    assert bad_sub.get_json()["message"] == "invalid submodel ID"
    bad_lookup = client.get(f"{BASE}/submodels/z/compatible-items")
    assert bad_lookup.status_code == 400


def test_non_positive_item_id_is_server_error(client):
    response = client.get(f"{BASE}/items/0/compatibilities")
    assert response.status_code == 500
    assert response.get_json()["message"] == "invalid item ID"


def test_compatible_items(client, connection):
    fits = _add_item(connection, "FITS-1")
    _add_item(connection, "OTHER-1")
    submodel_id = _add_vehicle(connection, "Acme", "Roadster", "Base")
    _link(client, fits, submodel_id)
    response = client.get(f"{BASE}/submodels/{submodel_id}/compatible-items")
    assert response.status_code == 200
    assert [item["part_number"] for item in response.get_json()] == ["FITS-1"]