"""Part categories: model, hierarchy, SQLite repository and business rules."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from fixparts.items import _format_time, _int, _parse_time, _str


class CategoryError(Exception):
    """Base class for category errors."""

    message = "category error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class CategoryNotFoundError(CategoryError):
    message = "category not found"


class ParentCategoryNotFoundError(CategoryError):
    message = "parent category not found"


class CategoryHasSubcategoriesError(CategoryError):
    message = "category has subcategories and cannot be deleted"


class CircularReferenceError(CategoryError):
    message = "circular reference detected: a category cannot be its own parent"


@dataclass
class Category:
    """A category of parts, optionally nested under a parent."""

    category_id: int = 0
    category_name: str = ""
    description: str | None = None
    parent_category_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    subcategories: list[Category] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form, leaving out unset optional fields."""
        result: dict[str, Any] = {
            "category_id": self.category_id,
            "category_name": self.category_name,
        }
        if self.description is not None:
            result["description"] = self.description
        if self.parent_category_id is not None:
            result["parent_category_id"] = self.parent_category_id
        result["created_at"] = _format_time(self.created_at)
        result["updated_at"] = _format_time(self.updated_at)
        if self.subcategories:
            result["subcategories"] = [sub.to_dict() for sub in self.subcategories]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Category:
        """Build a category from its JSON form; raise ValueError on wrong types."""
        if not isinstance(data, Mapping):
            raise ValueError("category must be a JSON object")
        subcategories = data.get("subcategories") or []
        if not isinstance(subcategories, list):
            raise ValueError("subcategories must be a list")
        return cls(
            category_id=_int(data, "category_id", 0),
            category_name=_str(data, "category_name", ""),
            description=_str(data, "description", None),
            parent_category_id=_int(data, "parent_category_id", None),
            created_at=_parse_time(data.get("created_at")),
            updated_at=_parse_time(data.get("updated_at")),
            subcategories=[cls.from_dict(sub) for sub in subcategories],
        )


@dataclass
class CategoryTreeNode:
    """A category together with the nodes of its children."""

    category: Category
    subcategories: list[CategoryTreeNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"category": self.category.to_dict()}
        if self.subcategories:
            result["subcategories"] = [node.to_dict() for node in self.subcategories]
        return result


def build_category_tree(categories: Iterable[Category]) -> list[CategoryTreeNode]:
    """Arrange categories into trees rooted at those without a parent, keeping input order."""
    all_categories = list(categories)

    def subtree(category: Category) -> CategoryTreeNode:
        return CategoryTreeNode(
            category=category,
            subcategories=[
                subtree(child)
                for child in all_categories
                if child.parent_category_id is not None
                and child.parent_category_id == category.category_id
            ],
        )

    return [subtree(c) for c in all_categories if c.parent_category_id is None]


_SELECT = """
    SELECT category_id, category_name, description, parent_category_id,
           created_at, updated_at
    FROM categories
"""


def _row_to_category(row: sqlite3.Row) -> Category:
    return Category(
        category_id=row["category_id"],
        category_name=row["category_name"],
        description=row["description"],
        parent_category_id=row["parent_category_id"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
    )


class CategoryRepository:
    """Stores categories in an SQLite database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def get_all(self) -> list[Category]:
        """Return every category ordered by name."""
        rows = self._connection.execute(f"{_SELECT} ORDER BY category_name")
        return [_row_to_category(row) for row in rows]

    def get_by_id(self, category_id: int) -> Category | None:
        row = self._connection.execute(
            f"{_SELECT} WHERE category_id = ?", (category_id,)
        ).fetchone()
        return None if row is None else _row_to_category(row)

    def get_subcategories(self, parent_id: int) -> list[Category]:
        """Return the direct children of a category ordered by name."""
        rows = self._connection.execute(
            f"{_SELECT} WHERE parent_category_id = ? ORDER BY category_name",
            (parent_id,),
        )
        return [_row_to_category(row) for row in rows]

    def create(self, category: Category) -> int:
        """Insert the category and return its new id."""
        cursor = self._connection.execute(
            "INSERT INTO categories (category_name, description, parent_category_id) "
            "VALUES (?, ?, ?)",
            (category.category_name, category.description, category.parent_category_id),
        )
        return cursor.lastrowid

    def update(self, category: Category) -> None:
        self._connection.execute(
            "UPDATE categories SET category_name = ?, description = ?, "
            "parent_category_id = ? WHERE category_id = ?",
            (
                category.category_name,
                category.description,
                category.parent_category_id,
                category.category_id,
            ),
        )

    def delete(self, category_id: int) -> None:
        self._connection.execute(
            "DELETE FROM categories WHERE category_id = ?", (category_id,)
        )

    def get_category_tree(self) -> list[CategoryTreeNode]:
        return build_category_tree(self.get_all())


class CategoryService:
    """Checks parents, cycles and children before changing categories."""

    def __init__(self, repository: CategoryRepository) -> None:
        self._repo = repository

    def get_all_categories(self) -> list[Category]:
        return self._repo.get_all()

    def get_category_by_id(self, category_id: int) -> Category | None:
        """Return the category with its direct children, or None if it does not exist."""
        category = self._repo.get_by_id(category_id)
        if category is not None:
            category.subcategories = self._repo.get_subcategories(category.category_id)
        return category

    def get_subcategories(self, parent_id: int) -> list[Category]:
        return self._repo.get_subcategories(parent_id)

    def create_category(self, category: Category) -> int:
        if category.parent_category_id is not None:
            if self._repo.get_by_id(category.parent_category_id) is None:
                raise ParentCategoryNotFoundError()
        return self._repo.create(category)

    def update_category(self, category: Category) -> None:
        if self._repo.get_by_id(category.category_id) is None:
            raise CategoryNotFoundError()
        if category.parent_category_id is not None:
            if self._repo.get_by_id(category.parent_category_id) is None:
                raise ParentCategoryNotFoundError()
            if category.parent_category_id == category.category_id:
                raise CircularReferenceError()
        self._repo.update(category)

    def delete_category(self, category_id: int) -> None:
        if self._repo.get_by_id(category_id) is None:
            raise CategoryNotFoundError()
        if self._repo.get_subcategories(category_id):
            raise CategoryHasSubcategoriesError()
        self._repo.delete(category_id)

    def get_category_tree(self) -> list[CategoryTreeNode]:
        return self._repo.get_category_tree()