import sqlite3

import pytest

from fixparts.database import connect, create_schema


@pytest.fixture
def connection():
    conn = connect(":memory:")
    yield conn
    conn.close()


def _tables(conn):
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
    return {row["name"] for row in rows}


def test_create_schema_creates_application_tables(connection):
    create_schema(connection)
    expected = {
        "categories",
        "suppliers",
        "items",
        "vehicle_makes",
        "vehicle_models",
        "vehicle_submodels",
        "compatibility",
        "purchases",
        "sales",
    }
    assert expected <= _tables(connection)


def test_create_schema_is_idempotent(connection):
    create_schema(connection)
    connection.execute("INSERT INTO suppliers (name) VALUES ('Parts Depot')")
    create_schema(connection)
    count = connection.execute("SELECT COUNT(*) AS n FROM suppliers").fetchone()["n"]
    assert count == 1


def test_connect_enables_foreign_keys(connection):
    assert connection.execute("PRAGMA foreign_keys").fetchone()[0] == 1


def test_foreign_key_violation_is_rejected(connection):
    create_schema(connection)
    with pytest.raises(sqlite3.IntegrityError):
        connection.execute(
            "INSERT INTO items (part_number, category_id) VALUES ('X-1', 999)"
        )


def test_part_number_is_unique(connection):
    create_schema(connection)
    connection.execute("INSERT INTO items (part_number) VALUES ('P-1')")
    with pytest.raises(sqlite3.IntegrityError):
        connection.execute("INSERT INTO items (part_number) VALUES ('P-1')")


def test_rows_are_accessible_by_column_name(connection):
    create_schema(connection)
    connection.execute("INSERT INTO suppliers (name) VALUES ('Acme')")
    row = connection.execute("SELECT supplier_id, name FROM suppliers").fetchone()
    assert row["name"] == "Acme"
    assert row["supplier_id"] >= 1


def test_autocommit_makes_writes_visible_to_other_connections(tmp_path):
    path = tmp_path / "parts.db"
    writer = connect(path)
    create_schema(writer)
    writer.execute("INSERT INTO suppliers (name) VALUES ('Acme')")
    reader = connect(path)
    names = [row["name"] for row in reader.execute("SELECT name FROM suppliers")]
    writer.close()
    reader.close()
    assert names == ["Acme"]