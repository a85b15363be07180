"""SQLite storage for the parts inventory."""

from __future__ import annotations

import os
import sqlite3

_SCHEMA = """
CREATE TABLE IF NOT EXISTS categories (
    category_id INTEGER PRIMARY KEY AUTOINCREMENT,
    category_name TEXT NOT NULL,
    description TEXT,
    parent_category_id INTEGER REFERENCES categories(category_id),
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS suppliers (
    supplier_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    contact_name TEXT,
    phone TEXT,
    email TEXT,
    address TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS items (
    item_id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_name TEXT NOT NULL DEFAULT '',
    part_number TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL DEFAULT '',
    category_id INTEGER REFERENCES categories(category_id),
    buy_price REAL NOT NULL DEFAULT 0,
    sell_price REAL NOT NULL DEFAULT 0,
    current_stock INTEGER NOT NULL DEFAULT 0,
    minimum_stock INTEGER NOT NULL DEFAULT 0,
    barcode TEXT UNIQUE,
    supplier_id INTEGER REFERENCES suppliers(supplier_id),
    location_aisle TEXT,
    location_shelf TEXT,
    location_bin TEXT,
    weight_kg REAL,
    dimensions_cm TEXT,
    warranty_period TEXT,
    image_url TEXT,
    is_active INTEGER NOT NULL DEFAULT 1,
    notes TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS vehicle_makes (
    make_id INTEGER PRIMARY KEY AUTOINCREMENT,
    make_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS vehicle_models (
    model_id INTEGER PRIMARY KEY AUTOINCREMENT,
    make_id INTEGER NOT NULL REFERENCES vehicle_makes(make_id),
    model_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS vehicle_submodels (
    submodel_id INTEGER PRIMARY KEY AUTOINCREMENT,
    model_id INTEGER NOT NULL REFERENCES vehicle_models(model_id),
    submodel_name TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS compatibility (
    compat_id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id INTEGER NOT NULL REFERENCES items(item_id) ON DELETE CASCADE,
    submodel_id INTEGER NOT NULL REFERENCES vehicle_submodels(submodel_id),
    notes TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (item_id, submodel_id)
);

CREATE TABLE IF NOT EXISTS purchases (
    purchase_id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    supplier_id INTEGER NOT NULL REFERENCES suppliers(supplier_id),
    item_id INTEGER NOT NULL REFERENCES items(item_id),
    quantity INTEGER NOT NULL,
    cost_per_unit REAL NOT NULL,
    total_cost REAL NOT NULL,
    invoice_number TEXT,
    received_by TEXT,
    notes TEXT,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS sales (
    sale_id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
    item_id INTEGER NOT NULL REFERENCES items(item_id),
    customer_name TEXT NOT NULL DEFAULT '',
    quantity INTEGER NOT NULL DEFAULT 1,
    price_per_unit REAL NOT NULL DEFAULT 0,
    total_price REAL NOT NULL DEFAULT 0,
    created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);

CREATE TRIGGER IF NOT EXISTS categories_touch AFTER UPDATE ON categories
FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
BEGIN
    UPDATE categories SET updated_at = CURRENT_TIMESTAMP
    WHERE category_id = NEW.category_id;
END;

CREATE TRIGGER IF NOT EXISTS items_touch AFTER UPDATE ON items
FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
BEGIN
    UPDATE items SET updated_at = CURRENT_TIMESTAMP WHERE item_id = NEW.item_id;
END;

CREATE TRIGGER IF NOT EXISTS purchases_touch AFTER UPDATE ON purchases
FOR EACH ROW WHEN NEW.updated_at = OLD.updated_at
BEGIN
    UPDATE purchases SET updated_at = CURRENT_TIMESTAMP
    WHERE purchase_id = NEW.purchase_id;
END;
"""


def connect(path: str | os.PathLike[str]) -> sqlite3.Connection:
    """Open the database at *path* with autocommit, row access by name and foreign keys."""
    connection = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
    connection.row_factory = sqlite3.Row
    connection.execute("PRAGMA foreign_keys = ON")
    return connection


def create_schema(connection: sqlite3.Connection) -> None:
    """Create every table the application uses, leaving existing ones untouched."""
    connection.executescript(_SCHEMA)