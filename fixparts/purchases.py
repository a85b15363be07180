"""Stock purchases from suppliers: model, SQLite repository and business rules."""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from fixparts.items import _float, _format_time, _int, _parse_time, _str

_ZERO_DB_TIME = "0001-01-01 00:00:00.000000"


class PurchaseError(Exception):
    """Base class for purchase errors."""

    message = "purchase error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class PurchaseNotFoundError(PurchaseError):
    message = "purchase not found"


class InvalidPurchaseIDError(PurchaseError):
    message = "invalid purchase ID"


class InvalidSupplierIDError(PurchaseError):
    message = "invalid supplier ID"


class InvalidItemIDError(PurchaseError):
    message = "invalid item ID"


class InvalidQuantityError(PurchaseError):
    message = "quantity must be greater than 0"


class InvalidCostPerUnitError(PurchaseError):
    message = "cost per unit must be greater than 0"


class DuplicateInvoiceNumberError(PurchaseError):
    message = "invoice number already exists"


class InvalidDateError(PurchaseError):
    message = "purchase date cannot be in the future"


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _db_time(value: datetime | None) -> str:
    if value is None:
        return _ZERO_DB_TIME
    return _as_utc(value).strftime("%Y-%m-%d %H:%M:%S.%f")


@dataclass
class Purchase:
    """A delivery of an item bought from a supplier."""

    purchase_id: int = 0
    date: datetime | None = None
    supplier_id: int = 0
    item_id: int = 0
    quantity: int = 0
    cost_per_unit: float = 0.0
    total_cost: float = 0.0
    invoice_number: str | None = None
    received_by: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    supplier_name: str = ""
    item_part_number: str = ""
    item_description: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out unset optional fields."""
        result: dict[str, Any] = {
            "purchase_id": self.purchase_id,
            "date": _format_time(self.date),
            "supplier_id": self.supplier_id,
            "item_id": self.item_id,
            "quantity": self.quantity,
            "cost_per_unit": self.cost_per_unit,
            "total_cost": self.total_cost,
        }
        for key in ("invoice_number", "received_by", "notes"):
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        result["created_at"] = _format_time(self.created_at)
        result["updated_at"] = _format_time(self.updated_at)
        for key in ("supplier_name", "item_part_number", "item_description"):
            value = getattr(self, key)
            if value:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Purchase:
        """Build a purchase from its JSON form; raise ValueError on wrong types."""
        if not isinstance(data, Mapping):
            raise ValueError("purchase must be a JSON object")
        return cls(
            purchase_id=_int(data, "purchase_id", 0),
            date=_parse_time(data.get("date")),
            supplier_id=_int(data, "supplier_id", 0),
            item_id=_int(data, "item_id", 0),
            quantity=_int(data, "quantity", 0),
            cost_per_unit=_float(data, "cost_per_unit", 0.0),
            total_cost=_float(data, "total_cost", 0.0),
            invoice_number=_str(data, "invoice_number", None),
            received_by=_str(data, "received_by", None),
            notes=_str(data, "notes", None),
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
            supplier_name=_str(data, "supplier_name", ""),
            item_part_number=_str(data, "item_part_number", ""),
            item_description=_str(data, "item_description", ""),
        )


@dataclass
class PurchaseFilter:
    """Optional criteria for listing purchases."""

    supplier_id: int | None = None
    item_id: int | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    invoice_number: str | None = None


_SELECT = """
    SELECT
        p.purchase_id, p.date, p.supplier_id, p.item_id,
        p.quantity, p.cost_per_unit, p.total_cost,
        p.invoice_number, p.received_by, p.notes,
        p.created_at, p.updated_at,
        s.name AS supplier_name,
        i.part_number AS item_part_number,
        i.description AS item_description
    FROM purchases p
    JOIN suppliers s ON p.supplier_id = s.supplier_id
    JOIN items i ON p.item_id = i.item_id
"""


def _row_to_purchase(row: sqlite3.Row) -> Purchase:
    return Purchase(
        purchase_id=row["purchase_id"],
        date=_parse_time(row["date"]),
        supplier_id=row["supplier_id"],
        item_id=row["item_id"],
        quantity=row["quantity"],
        cost_per_unit=float(row["cost_per_unit"]),
        total_cost=float(row["total_cost"]),
        invoice_number=row["invoice_number"],
        received_by=row["received_by"],
        notes=row["notes"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
        supplier_name=row["supplier_name"] or "",
        item_part_number=row["item_part_number"] or "",
        item_description=row["item_description"] or "",
    )


class PurchaseRepository:
    """Stores purchases in an SQLite database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def _fetch_one(self, where: str, value: Any) -> Purchase | None:
        row = self._connection.execute(f"{_SELECT} WHERE {where}", (value,)).fetchone()
        return None if row is None else _row_to_purchase(row)

    def get_all(self, purchase_filter: PurchaseFilter | None = None) -> list[Purchase]:
        """Return purchases matching the filter, newest first."""
        conditions: list[str] = []
        params: list[Any] = []
        if purchase_filter is not None:
            if purchase_filter.supplier_id is not None:
                conditions.append("p.supplier_id = ?")
                params.append(purchase_filter.supplier_id)
            if purchase_filter.item_id is not None:
                conditions.append("p.item_id = ?")
                params.append(purchase_filter.item_id)
            if purchase_filter.start_date is not None:
                conditions.append("p.date >= ?")
                params.append(_db_time(purchase_filter.start_date))
            if purchase_filter.end_date is not None:
                conditions.append("p.date <= ?")
                params.append(_db_time(purchase_filter.end_date))
            if purchase_filter.invoice_number is not None:
                conditions.append("p.invoice_number LIKE ?")
                params.append(f"%{purchase_filter.invoice_number}%")

        query = f"{_SELECT} WHERE 1=1"
        if conditions:
            query += " AND " + " AND ".join(conditions)
        query += " ORDER BY p.date DESC"
        return [_row_to_purchase(row) for row in self._connection.execute(query, params)]

    def get_by_id(self, purchase_id: int) -> Purchase | None:
        return self._fetch_one("p.purchase_id = ?", purchase_id)

    def create(self, purchase: Purchase) -> int:
        """Insert the purchase and return its new id."""
        cursor = self._connection.execute(
            """
            INSERT INTO purchases (
                date, supplier_id, item_id, quantity,
                cost_per_unit, total_cost, invoice_number,
                received_by, notes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                _db_time(purchase.date), purchase.supplier_id, purchase.item_id,
                purchase.quantity, purchase.cost_per_unit, purchase.total_cost,
                purchase.invoice_number, purchase.received_by, purchase.notes,
            ),
        )
        return cursor.lastrowid

    def update(self, purchase: Purchase) -> None:
        """Overwrite the stored purchase; raise PurchaseNotFoundError if it is missing."""
        cursor = self._connection.execute(
            """
            UPDATE purchases SET
                date = ?, supplier_id = ?, item_id = ?, quantity = ?,
                cost_per_unit = ?, total_cost = ?, invoice_number = ?,
                received_by = ?, notes = ?
            WHERE purchase_id = ?
            """,
            (
                _db_time(purchase.date), purchase.supplier_id, purchase.item_id,
                purchase.quantity, purchase.cost_per_unit, purchase.total_cost,
                purchase.invoice_number, purchase.received_by, purchase.notes,
                purchase.purchase_id,
            ),
        )
        if cursor.rowcount == 0:
            raise PurchaseNotFoundError()

    def delete(self, purchase_id: int) -> None:
        cursor = self._connection.execute(
            "DELETE FROM purchases WHERE purchase_id = ?", (purchase_id,)
        )
        if cursor.rowcount == 0:
            raise PurchaseNotFoundError()

    def get_by_invoice_number(self, invoice_number: str) -> Purchase | None:
        return self._fetch_one("p.invoice_number = ?", invoice_number)

    def get_supplier_purchases(self, supplier_id: int) -> list[Purchase]:
        return self.get_all(PurchaseFilter(supplier_id=supplier_id))

    def get_item_purchases(self, item_id: int) -> list[Purchase]:
        return self.get_all(PurchaseFilter(item_id=item_id))


class PurchaseService:
    """Validates purchases, keeps invoice numbers unique and fills in totals."""

    def __init__(self, repository: PurchaseRepository) -> None:
        self._repo = repository

    def get_all(self, purchase_filter: PurchaseFilter | None = None) -> list[Purchase]:
        return self._repo.get_all(purchase_filter)

    def get_by_id(self, purchase_id: int) -> Purchase:
        if purchase_id <= 0:
            raise InvalidPurchaseIDError()
        purchase = self._repo.get_by_id(purchase_id)
        if purchase is None:
            raise PurchaseNotFoundError()
        return purchase

    def create(self, purchase: Purchase) -> int:
        """Validate and store a new purchase, defaulting its date and total cost."""
        self._validate(purchase)

        if purchase.invoice_number:
            if self._repo.get_by_invoice_number(purchase.invoice_number) is not None:
                raise DuplicateInvoiceNumberError()

        if purchase.date is None:
            purchase.date = datetime.now(timezone.utc)

        if purchase.total_cost == 0:
            purchase.total_cost = purchase.quantity * purchase.cost_per_unit

        return self._repo.create(purchase)

    def update(self, purchase: Purchase) -> None:
        """Validate and store changes, recalculating the total cost."""
        if purchase.purchase_id <= 0:
            raise InvalidPurchaseIDError()
        self._validate(purchase)

        existing = self._repo.get_by_id(purchase.purchase_id)
        if existing is None:
            raise PurchaseNotFoundError()

        if purchase.invoice_number and purchase.invoice_number != existing.invoice_number:
            other = self._repo.get_by_invoice_number(purchase.invoice_number)
            if other is not None and other.purchase_id != purchase.purchase_id:
                raise DuplicateInvoiceNumberError()

        purchase.total_cost = purchase.quantity * purchase.cost_per_unit
        self._repo.update(purchase)

    def delete(self, purchase_id: int) -> None:
        if purchase_id <= 0:
            raise InvalidPurchaseIDError()
        if self._repo.get_by_id(purchase_id) is None:
            raise PurchaseNotFoundError()
        self._repo.delete(purchase_id)

    def get_supplier_purchases(self, supplier_id: int) -> list[Purchase]:
        if supplier_id <= 0:
            raise InvalidSupplierIDError()
        return self._repo.get_supplier_purchases(supplier_id)

    def get_item_purchases(self, item_id: int) -> list[Purchase]:
        if item_id <= 0:
            raise InvalidItemIDError()
        return self._repo.get_item_purchases(item_id)

    @staticmethod
    def _validate(purchase: Purchase) -> None:
        if purchase.supplier_id <= 0:
            raise InvalidSupplierIDError()
        if purchase.item_id <= 0:
            raise InvalidItemIDError()
        if purchase.quantity <= 0:
            raise InvalidQuantityError()
        if purchase.cost_per_unit <= 0:
            raise InvalidCostPerUnitError()
        if purchase.date is not None and _as_utc(purchase.date) > datetime.now(timezone.utc):
            raise InvalidDateError()