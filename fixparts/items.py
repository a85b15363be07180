"""Inventory items: model, SQLite repository and business rules."""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Protocol

from fixparts.barcode import BarcodeService

_ZERO_TIME = "0001-01-01T00:00:00Z"


class ItemError(Exception):
    """Base class for item errors."""

    message = "item error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class ItemNotFoundError(ItemError):
    message = "item not found"


class DuplicatePartNumberError(ItemError):
    message = "part number already exists"


class DuplicateBarcodeError(ItemError):
    message = "barcode already exists"


class InvalidItemIDError(ItemError):
    message = "invalid item ID"


class ItemValidationError(ItemError):
    message = "invalid item"


def _format_time(value: datetime | None) -> str:
    if value is None:
        return _ZERO_TIME
    return value.isoformat().replace("+00:00", "Z")


def _parse_time(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError("timestamp must be a string")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    if parsed.year == 1 and parsed.month == 1 and parsed.day == 1:
        return None
    return parsed


def _int(data: Mapping[str, Any], key: str, default: int | None) -> int | None:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    return value


def _float(data: Mapping[str, Any], key: str, default: float | None) -> float | None:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _str(data: Mapping[str, Any], key: str, default: str | None) -> str | None:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _bool(data: Mapping[str, Any], key: str, default: bool) -> bool:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean")
    return value


@dataclass
class Item:
    """A part held in stock."""

    item_id: int = 0
    item_name: str = ""
    part_number: str = ""
    description: str = ""
    category_id: int | None = None
    buy_price: float = 0.0
    sell_price: float = 0.0
    current_stock: int = 0
    minimum_stock: int = 0
    barcode: str | None = None
    supplier_id: int | None = None
    location_aisle: str | None = None
    location_shelf: str | None = None
    location_bin: str | None = None
    weight_kg: float | None = None
    dimensions_cm: str | None = None
    warranty_period: str | None = None
    image_url: str | None = None
    is_active: bool = False
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    category_name: str | None = None
    supplier_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out optional fields that are unset."""
        result: dict[str, Any] = {
            "item_id": self.item_id,
            "item_name": self.item_name,
            "part_number": self.part_number,
            "description": self.description,
            "category_id": self.category_id,
            "buy_price": self.buy_price,
            "sell_price": self.sell_price,
            "current_stock": self.current_stock,
            "minimum_stock": self.minimum_stock,
            "barcode": self.barcode,
            "supplier_id": self.supplier_id,
            "location_aisle": self.location_aisle,
            "location_shelf": self.location_shelf,
            "location_bin": self.location_bin,
            "weight_kg": self.weight_kg,
            "dimensions_cm": self.dimensions_cm,
            "warranty_period": self.warranty_period,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "notes": self.notes,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "category_name": self.category_name,
            "supplier_name": self.supplier_name,
        }
        return {key: value for key, value in result.items() if value is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Item:
        """Build an item from its JSON form; raise ValueError on wrong types."""
        if not isinstance(data, Mapping):
            raise ValueError("item must be a JSON object")
        return cls(
            item_id=_int(data, "item_id", 0),
            item_name=_str(data, "item_name", ""),
            part_number=_str(data, "part_number", ""),
            description=_str(data, "description", ""),
            category_id=_int(data, "category_id", None),
            buy_price=_float(data, "buy_price", 0.0),
            sell_price=_float(data, "sell_price", 0.0),
            current_stock=_int(data, "current_stock", 0),
            minimum_stock=_int(data, "minimum_stock", 0),
            barcode=_str(data, "barcode", None),
            supplier_id=_int(data, "supplier_id", None),
            location_aisle=_str(data, "location_aisle", None),
            location_shelf=_str(data, "location_shelf", None),
            location_bin=_str(data, "location_bin", None),
            weight_kg=_float(data, "weight_kg", None),
            dimensions_cm=_str(data, "dimensions_cm", None),
            warranty_period=_str(data, "warranty_period", None),
            image_url=_str(data, "image_url", None),
            is_active=_bool(data, "is_active", False),
            notes=_str(data, "notes", None),
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
            category_name=_str(data, "category_name", None),
            supplier_name=_str(data, "supplier_name", None),
        )


@dataclass
class ItemFilter:
    """Optional criteria for listing items."""

    category_id: int | None = None
    supplier_id: int | None = None
    part_number: str | None = None
    search_term: str | None = None
    low_stock: bool | None = None
    make_id: int | None = None
    model_id: int | None = None
    submodel_id: int | None = None
    is_active: bool | None = None


_SELECT = """
    SELECT
        i.item_id, i.item_name, i.part_number, i.description, i.category_id,
        i.buy_price, i.sell_price, i.current_stock, i.minimum_stock, i.barcode,
        i.supplier_id, i.location_aisle, i.location_shelf, i.location_bin,
        i.weight_kg, i.dimensions_cm, i.warranty_period, i.image_url,
        i.is_active, i.notes, i.created_at, i.updated_at,
        c.category_name, s.name AS supplier_name
    FROM items i
    LEFT JOIN categories c ON i.category_id = c.category_id
    LEFT JOIN suppliers s ON i.supplier_id = s.supplier_id
"""


def _row_to_item(row: sqlite3.Row) -> Item:
    weight = row["weight_kg"]
    return Item(
        item_id=row["item_id"],
        item_name=row["item_name"],
        part_number=row["part_number"],
        description=row["description"],
        category_id=row["category_id"],
        buy_price=float(row["buy_price"]),
        sell_price=float(row["sell_price"]),
        current_stock=row["current_stock"],
        minimum_stock=row["minimum_stock"],
        barcode=row["barcode"],
        supplier_id=row["supplier_id"],
        location_aisle=row["location_aisle"],
        location_shelf=row["location_shelf"],
        location_bin=row["location_bin"],
        weight_kg=None if weight is None else float(weight),
        dimensions_cm=row["dimensions_cm"],
        warranty_period=row["warranty_period"],
        image_url=row["image_url"],
        is_active=bool(row["is_active"]),
        notes=row["notes"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
        category_name=row["category_name"],
        supplier_name=row["supplier_name"],
    )


class ItemRepository:
    """Stores items in an SQLite database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def _fetch_one(self, where: str, value: Any) -> Item | None:
        row = self._connection.execute(f"{_SELECT} WHERE {where}", (value,)).fetchone()
        return None if row is None else _row_to_item(row)

    def get_items(self, item_filter: ItemFilter | None = None) -> list[Item]:
        """Return items matching the filter, ordered by part number."""
        conditions: list[str] = []
        params: list[Any] = []
        if item_filter is not None:
            if item_filter.category_id is not None:
                conditions.append("i.category_id = ?")
                params.append(item_filter.category_id)
            if item_filter.supplier_id is not None:
                conditions.append("i.supplier_id = ?")
                params.append(item_filter.supplier_id)
            if item_filter.part_number is not None:
                conditions.append("i.part_number LIKE ?")
                params.append(f"%{item_filter.part_number}%")
            if item_filter.search_term is not None:
                conditions.append("(i.part_number LIKE ? OR i.description LIKE ?)")
                pattern = f"%{item_filter.search_term}%"
                params.extend((pattern, pattern))
            if item_filter.low_stock:
                conditions.append("i.current_stock <= i.minimum_stock")
            if item_filter.is_active is not None:
                conditions.append("i.is_active = ?")
                params.append(item_filter.is_active)

        query = f"{_SELECT} WHERE 1=1"
        if conditions:
            query += " AND " + " AND ".join(conditions)
        query += " ORDER BY i.part_number"
        return [_row_to_item(row) for row in self._connection.execute(query, params)]

    def get_item_by_id(self, item_id: int) -> Item | None:
        return self._fetch_one("i.item_id = ?", item_id)

    def get_item_by_part_number(self, part_number: str) -> Item | None:
        return self._fetch_one("i.part_number = ?", part_number)

    def get_item_by_barcode(self, barcode: str) -> Item | None:
        return self._fetch_one("i.barcode = ?", barcode)

    def create_item(self, item: Item) -> int:
        """Insert the item and return its new id."""
        cursor = self._connection.execute(
            """
            INSERT INTO items (
                part_number, item_name, description, category_id, buy_price,
                sell_price, current_stock, minimum_stock, barcode, supplier_id,
                location_aisle, location_shelf, location_bin, weight_kg,
                dimensions_cm, warranty_period, image_url, is_active, notes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                item.part_number, item.item_name, item.description, item.category_id,
                item.buy_price, item.sell_price, item.current_stock, item.minimum_stock,
                item.barcode, item.supplier_id, item.location_aisle, item.location_shelf,
                item.location_bin, item.weight_kg, item.dimensions_cm,
                item.warranty_period, item.image_url, item.is_active, item.notes,
            ),
        )
        return cursor.lastrowid

    def update_item(self, item: Item) -> None:
        """Overwrite the stored item; raise ItemNotFoundError if it is missing."""
        cursor = self._connection.execute(
            """
            UPDATE items SET
                part_number = ?, description = ?, category_id = ?,
                buy_price = ?, sell_price = ?, current_stock = ?,
                minimum_stock = ?, barcode = ?, supplier_id = ?,
                location_aisle = ?, location_shelf = ?, location_bin = ?,
                weight_kg = ?, dimensions_cm = ?, warranty_period = ?,
                image_url = ?, is_active = ?, notes = ?
            WHERE item_id = ?
            """,
            (
                item.part_number, item.description, item.category_id,
                item.buy_price, item.sell_price, item.current_stock,
                item.minimum_stock, item.barcode, item.supplier_id,
                item.location_aisle, item.location_shelf, item.location_bin,
                item.weight_kg, item.dimensions_cm, item.warranty_period,
                item.image_url, item.is_active, item.notes, item.item_id,
            ),
        )
        if cursor.rowcount == 0:
            raise ItemNotFoundError()

    def delete_item(self, item_id: int) -> None:
        cursor = self._connection.execute("DELETE FROM items WHERE item_id = ?", (item_id,))
        if cursor.rowcount == 0:
            raise ItemNotFoundError()

    def get_low_stock_items(self) -> list[Item]:
        """Return active items at or below their minimum stock, lowest first."""
        query = (
            f"{_SELECT} WHERE i.current_stock <= i.minimum_stock AND i.is_active = 1 "
            "ORDER BY i.current_stock ASC, i.part_number"
        )
        return [_row_to_item(row) for row in self._connection.execute(query)]


class _BarcodeGenerator(Protocol):
    def generate_barcode(self, category_id: int, supplier_id: int) -> str: ...


class ItemService:
    """Validates items and enforces unique part numbers and barcodes."""

    def __init__(
        self,
        repository: ItemRepository,
        barcode_service: _BarcodeGenerator | None = None,
    ) -> None:
        self._repo = repository
        self._barcodes = barcode_service if barcode_service is not None else BarcodeService()

    def get_items(self, item_filter: ItemFilter | None = None) -> list[Item]:
        return self._repo.get_items(item_filter)

    def get_item_by_id(self, item_id: int) -> Item:
        if item_id <= 0:
            raise InvalidItemIDError()
        item = self._repo.get_item_by_id(item_id)
        if item is None:
            raise ItemNotFoundError()
        return item

    def get_item_by_part_number(self, part_number: str) -> Item | None:
        if not part_number:
            raise ItemValidationError("part number is required")
        return self._repo.get_item_by_part_number(part_number)

    def get_item_by_barcode(self, barcode: str) -> Item | None:
        if not barcode:
            raise ItemValidationError("barcode is required")
        return self._repo.get_item_by_barcode(barcode)

    def create_item(self, item: Item) -> int:
        """Validate and store a new item, generating a barcode when none is given."""
        self._validate(item)

        if not item.barcode:
            item.barcode = self._barcodes.generate_barcode(
                item.category_id or 0, item.supplier_id or 0
            )

        if self._repo.get_item_by_part_number(item.part_number) is not None:
            raise DuplicatePartNumberError()
        if self._repo.get_item_by_barcode(item.barcode) is not None:
            raise DuplicateBarcodeError()

        return self._repo.create_item(item)

    def update_item(self, item: Item) -> None:
        if item.item_id <= 0:
            raise InvalidItemIDError()
        self._validate(item)

        existing = self._repo.get_item_by_id(item.item_id)
        if existing is None:
            raise ItemNotFoundError()

        if item.part_number != existing.part_number:
            other = self._repo.get_item_by_part_number(item.part_number)
            if other is not None and other.item_id != item.item_id:
                raise DuplicatePartNumberError()

        if item.barcode and item.barcode != existing.barcode:
            other = self._repo.get_item_by_barcode(item.barcode)
            if other is not None and other.item_id != item.item_id:
                raise DuplicateBarcodeError()

        self._repo.update_item(item)

    def delete_item(self, item_id: int) -> None:
        if item_id <= 0:
            raise InvalidItemIDError()
        if self._repo.get_item_by_id(item_id) is None:
            raise ItemNotFoundError()
        self._repo.delete_item(item_id)

    def get_low_stock_items(self) -> list[Item]:
        return self._repo.get_low_stock_items()

    @staticmethod
    def _validate(item: Item) -> None:
        if not item.part_number:
            raise ItemValidationError("part number is required")
        if not item.description:
            raise ItemValidationError("description is required")
        if item.buy_price <= 0:
            raise ItemValidationError("buy price must be greater than 0")
        if item.sell_price <= 0:
            raise ItemValidationError("sell price must be greater than 0")
        if item.current_stock < 0:
            raise ItemValidationError("current stock cannot be negative")
        if item.minimum_stock < 0:
            raise ItemValidationError("minimum stock cannot be negative")