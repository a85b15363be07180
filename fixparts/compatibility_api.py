"""JSON endpoints linking items to the vehicles they fit."""

from __future__ import annotations

import json
from typing import Any

from flask import Blueprint, jsonify, request

from fixparts.category_api import Reply, _error, _parse_id
from fixparts.compatibility import (
    Compatibility,
    CompatibilityExistsError,
    CompatibilityNotFoundError,
    CompatibilityService,
    ItemNotFoundError,
)

_INVALID_ITEM_ID = "invalid item ID"
_INVALID_SUBMODEL_ID = "invalid submodel ID"


def _read_compatibility() -> Compatibility:
    raw = request.get_data()
    if not raw:
        return Compatibility()
    data: Any = json.loads(raw)
    return Compatibility.from_dict(data)


class CompatibilityHandler:
    """Serves compatibility requests from a CompatibilityService."""

    def __init__(self, service: CompatibilityService) -> None:
        self._service = service

    def get_compatibilities(self, item_id: str) -> Reply:
        parsed = _parse_id(item_id)
        if parsed is None:
            return _error(400, _INVALID_ITEM_ID)
        try:
            compatibilities = self._service.get_compatibilities(parsed)
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([c.to_dict() for c in compatibilities]), 200

    def add_compatibility(self, item_id: str) -> Reply:
        """Store the link described by the body; the item and submodel ids come from it."""
        try:
            compatibility = _read_compatibility()
        except ValueError as exc:
            return _error(400, str(exc))
        try:
            new_id = self._service.add_compatibility(compatibility)
        except ItemNotFoundError as exc:
            return _error(404, str(exc))
        except CompatibilityExistsError as exc:
            return _error(409, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        compatibility.compat_id = new_id
        return jsonify(compatibility.to_dict()), 201

    def remove_compatibility(self, item_id: str, submodel_id: str) -> Reply | tuple[str, int]:
        parsed_item = _parse_id(item_id)
        if parsed_item is None:
            return _error(400, _INVALID_ITEM_ID)
        parsed_submodel = _parse_id(submodel_id)
        if parsed_submodel is None:
            return _error(400, _INVALID_SUBMODEL_ID)
        try:
            self._service.remove_compatibility(parsed_item, parsed_submodel)
        except CompatibilityNotFoundError as exc:
            return _error(404, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return "", 204

    def get_compatible_items(self, submodel_id: str) -> Reply:
        parsed = _parse_id(submodel_id)
        if parsed is None:
            return _error(400, _INVALID_SUBMODEL_ID)
        try:
            items = self._service.get_compatible_items(parsed)
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([item.to_dict() for item in items]), 200


def create_blueprint(service: CompatibilityService) -> Blueprint:
    """Return the compatibility routes, relative to the inventory API prefix."""
    handler = CompatibilityHandler(service)
    blueprint = Blueprint("compatibility", __name__)
    routes = (
        ("/items/<item_id>/compatibilities", handler.get_compatibilities, "GET"),
        ("/items/<item_id>/compatibilities", handler.add_compatibility, "POST"),
        (
            "/items/<item_id>/compatibilities/<submodel_id>",
            handler.remove_compatibility,
            "DELETE",
        ),
        ("/submodels/<submodel_id>/compatible-items", handler.get_compatible_items, "GET"),
    )
    for rule, view, method in routes:
        blueprint.add_url_rule(rule, view.__name__, view, methods=[method])
    return blueprint