"""JSON endpoints for part categories."""

from __future__ import annotations

import json
import re
from typing import Any

from flask import Blueprint, Response, jsonify, request

from fixparts.categories import (
    Category,
    CategoryHasSubcategoriesError,
    CategoryNotFoundError,
    CategoryService,
    CircularReferenceError,
    ParentCategoryNotFoundError,
)

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INVALID_ID = "Invalid category ID"

Reply = tuple[Response, int]


def _error(status: int, message: str) -> Reply:
    return jsonify(message=message), status


def _parse_id(raw: str) -> int | None:
    if not _ID_PATTERN.fullmatch(raw):
        return None
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _read_category() -> Category:
    """Parse the request body as a category; an empty body gives an empty category."""
    raw = request.get_data()
    if not raw:
        return Category()
    data: Any = json.loads(raw)
    return Category.from_dict(data)


class CategoryHandler:
    """Serves category requests from a CategoryService."""

    def __init__(self, service: CategoryService) -> None:
        self._service = service

    def get_all_categories(self) -> Reply:
        try:
            categories = self._service.get_all_categories()
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([category.to_dict() for category in categories]), 200

    def get_category_by_id(self, category_id: str) -> Reply:
        parsed = _parse_id(category_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            category = self._service.get_category_by_id(parsed)
        except Exception as exc:
            return _error(500, str(exc))
        if category is None:
            return _error(404, "Category not found")
        return jsonify(category.to_dict()), 200

    def get_subcategories(self, category_id: str) -> Reply:
        parsed = _parse_id(category_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            subcategories = self._service.get_subcategories(parsed)
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([category.to_dict() for category in subcategories]), 200

    def create_category(self) -> Reply:
        try:
            category = _read_category()
        except ValueError as exc:
            return _error(400, str(exc))
        try:
            new_id = self._service.create_category(category)
        except ParentCategoryNotFoundError as exc:
            return _error(400, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        category.category_id = new_id
        return jsonify(category.to_dict()), 201

    def update_category(self, category_id: str) -> Reply:
        parsed = _parse_id(category_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            category = _read_category()
        except ValueError as exc:
            return _error(400, str(exc))
        category.category_id = parsed
        try:
            self._service.update_category(category)
        except CategoryNotFoundError as exc:
            return _error(404, str(exc))
        except (ParentCategoryNotFoundError, CircularReferenceError) as exc:
            return _error(400, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify(category.to_dict()), 200

    def delete_category(self, category_id: str) -> Reply | tuple[str, int]:
        parsed = _parse_id(category_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            self._service.delete_category(parsed)
        except CategoryNotFoundError as exc:
            return _error(404, str(exc))
        except CategoryHasSubcategoriesError as exc:
            return _error(400, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return "", 204

    def get_category_tree(self) -> Reply:
        try:
            tree = self._service.get_category_tree()
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([node.to_dict() for node in tree]), 200


def create_blueprint(service: CategoryService) -> Blueprint:
    """Return the category routes, relative to the inventory API prefix."""
    handler = CategoryHandler(service)
    blueprint = Blueprint("categories", __name__)
    routes = (
        ("/categories", handler.get_all_categories, "GET"),
        ("/categories/<category_id>", handler.get_category_by_id, "GET"),
        ("/categories/<category_id>/subcategories", handler.get_subcategories, "GET"),
        ("/categories", handler.create_category, "POST"),
        ("/categories/<category_id>", handler.update_category, "PUT"),
        ("/categories/<category_id>", handler.delete_category, "DELETE"),
        ("/categories/tree", handler.get_category_tree, "GET"),
    )
    for rule, view, method in routes:
        blueprint.add_url_rule(rule, view.__name__, view, methods=[method])
    return blueprint