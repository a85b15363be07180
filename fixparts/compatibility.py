"""Vehicle compatibility of parts: model, SQLite repository and business rules."""

from __future__ import annotations

import sqlite3
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from fixparts.items import (
    _SELECT as _ITEM_SELECT,
    Item,
    ItemRepository,
    _format_time,
    _int,
    _parse_time,
    _row_to_item,
    _str,
)


class CompatibilityError(Exception):
    """Base class for compatibility errors."""

    message = "compatibility error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class ItemNotFoundError(CompatibilityError):
    message = "item not found"


class InvalidItemIDError(CompatibilityError):
    message = "invalid item ID"


class InvalidSubmodelIDError(CompatibilityError):
    message = "invalid submodel ID"


class CompatibilityExistsError(CompatibilityError):
    message = "compatibility already exists"


class CompatibilityNotFoundError(CompatibilityError):
    message = "compatibility not found"


@dataclass
class Compatibility:
    """A link stating that an item fits a vehicle submodel."""

    compat_id: int = 0
    item_id: int = 0
    submodel_id: int = 0
    notes: str | None = None
    created_at: datetime | None = None
    model_name: str = ""
    make_name: str = ""
    submodel_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out unset optional fields."""
        result: dict[str, Any] = {
            "compat_id": self.compat_id,
            "item_id": self.item_id,
            "submodel_id": self.submodel_id,
        }
        if self.notes is not None:
            result["notes"] = self.notes
        result["created_at"] = _format_time(self.created_at)
        for key in ("model_name", "make_name", "submodel_name"):
            value = getattr(self, key)
            if value:
                result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Compatibility:
        """Build a compatibility from its JSON form; raise ValueError on wrong types."""
        if not isinstance(data, Mapping):
            raise ValueError("compatibility must be a JSON object")
        return cls(
            compat_id=_int(data, "compat_id", 0),
            item_id=_int(data, "item_id", 0),
            submodel_id=_int(data, "submodel_id", 0),
            notes=_str(data, "notes", None),
            created_at=_parse_time(data.get("created_at")),
            model_name=_str(data, "model_name", ""),
            make_name=_str(data, "make_name", ""),
            submodel_name=_str(data, "submodel_name", ""),
        )


def _row_to_compatibility(row: sqlite3.Row) -> Compatibility:
    return Compatibility(
        compat_id=row["compat_id"],
        item_id=row["item_id"],
        submodel_id=row["submodel_id"],
        notes=row["notes"],
        created_at=_parse_time(row["created_at"]),
        model_name=row["model_name"],
        make_name=row["make_name"],
        submodel_name=row["submodel_name"],
    )


class CompatibilityRepository:
    """Stores compatibility links in an SQLite database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def get_compatibilities(self, item_id: int) -> list[Compatibility]:
        """Return the vehicles an item fits, ordered by make, model and submodel."""
        rows = self._connection.execute(
            """
            SELECT
                c.compat_id, c.item_id, c.submodel_id, c.notes, c.created_at,
                m.model_name, mk.make_name, s.submodel_name
            FROM compatibility c
            JOIN vehicle_submodels s ON c.submodel_id = s.submodel_id
            JOIN vehicle_models m ON s.model_id = m.model_id
            JOIN vehicle_makes mk ON m.make_id = mk.make_id
            WHERE c.item_id = ?
            ORDER BY mk.make_name, m.model_name, s.submodel_name
            """,
            (item_id,),
        )
        return [_row_to_compatibility(row) for row in rows]

    def add_compatibility(self, compatibility: Compatibility) -> int:
        """Insert the link and return its new id."""
        cursor = self._connection.execute(
            "INSERT INTO compatibility (item_id, submodel_id, notes) VALUES (?, ?, ?)",
            (compatibility.item_id, compatibility.submodel_id, compatibility.notes),
        )
        return cursor.lastrowid

    def remove_compatibility(self, item_id: int, submodel_id: int) -> None:
        cursor = self._connection.execute(
            "DELETE FROM compatibility WHERE item_id = ? AND submodel_id = ?",
            (item_id, submodel_id),
        )
        if cursor.rowcount == 0:
            raise CompatibilityNotFoundError()

    def get_compatible_items(self, submodel_id: int) -> list[Item]:
        """Return active items that fit the submodel, ordered by part number."""
        query = (
            f"{_ITEM_SELECT} JOIN compatibility comp ON i.item_id = comp.item_id "
            "WHERE comp.submodel_id = ? AND i.is_active = 1 ORDER BY i.part_number"
        )
        rows = self._connection.execute(query, (submodel_id,))
        return [_row_to_item(row) for row in rows]

    def get_low_stock_items(self) -> list[Item]:
        return ItemRepository(self._connection).get_low_stock_items()


class CompatibilityService:
    """Validates ids and prevents duplicate compatibility links."""

    def __init__(
        self, repository: CompatibilityRepository, item_repository: ItemRepository
    ) -> None:
        self._repo = repository
        self._items = item_repository

    def get_compatibilities(self, item_id: int) -> list[Compatibility]:
        if item_id <= 0:
            raise InvalidItemIDError()
        return self._repo.get_compatibilities(item_id)

    def add_compatibility(self, compatibility: Compatibility) -> int:
        if compatibility.item_id <= 0:
            raise InvalidItemIDError()
        if compatibility.submodel_id <= 0:
            raise InvalidSubmodelIDError()
        if self._items.get_item_by_id(compatibility.item_id) is None:
            raise ItemNotFoundError()
        existing = self._repo.get_compatibilities(compatibility.item_id)
        if any(c.submodel_id == compatibility.submodel_id for c in existing):
            raise CompatibilityExistsError()
        return self._repo.add_compatibility(compatibility)

    def remove_compatibility(self, item_id: int, submodel_id: int) -> None:
        if item_id <= 0:
            raise InvalidItemIDError()
        if submodel_id <= 0:
            raise InvalidSubmodelIDError()
        self._repo.remove_compatibility(item_id, submodel_id)

    def get_compatible_items(self, submodel_id: int) -> list[Item]:
        if submodel_id <= 0:
            raise InvalidSubmodelIDError()
        return self._repo.get_compatible_items(submodel_id)