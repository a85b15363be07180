"""JSON endpoints for inventory items and their barcode images."""

from __future__ import annotations

import json
from typing import Any

from flask import Blueprint, Response, jsonify, request

from fixparts.barcode import BarcodeService
from fixparts.category_api import Reply, _error, _parse_id
from fixparts.items import (
    DuplicateBarcodeError,
    DuplicatePartNumberError,
    Item,
    ItemFilter,
    ItemNotFoundError,
    ItemService,
)

_INVALID_ID = "invalid item ID"
_BARCODE_REQUIRED = "barcode is required"


def _read_item() -> Item:
    """Parse the request body as an item; an empty body gives an empty item."""
    raw = request.get_data()
    if not raw:
        return Item()
    data: Any = json.loads(raw)
    return Item.from_dict(data)


def _filter_from_query() -> ItemFilter:
    args = request.args
    criteria: dict[str, Any] = {}
    for key in ("category_id", "supplier_id"):
        raw = args.get(key, "")
        if raw and (value := _parse_id(raw)) is not None:
            criteria[key] = value
    if part_number := args.get("part_number", ""):
        criteria["part_number"] = part_number
    if search := args.get("search", ""):
        criteria["search_term"] = search
    if args.get("low_stock", "") == "true":
        criteria["low_stock"] = True
    if is_active := args.get("is_active", ""):
        criteria["is_active"] = is_active == "true"
    return ItemFilter(**criteria)


class ItemHandler:
    """Serves item requests from an ItemService."""

    def __init__(self, service: ItemService, barcode_service: BarcodeService) -> None:
        self._service = service
        self._barcodes = barcode_service

    def get_items(self) -> Reply:
        """List items, narrowed by the query parameters that parse."""
        try:
            items = self._service.get_items(_filter_from_query())
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([item.to_dict() for item in items]), 200

    def get_low_stock_items(self) -> Reply:
        try:
            items = self._service.get_low_stock_items()
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([item.to_dict() for item in items]), 200

    def get_item_by_id(self, item_id: str) -> Reply:
        parsed = _parse_id(item_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            item = self._service.get_item_by_id(parsed)
        except ItemNotFoundError as exc:
            return _error(404, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify(item.to_dict()), 200

    def get_item_by_barcode(self, barcode: str) -> Reply:
        if not barcode:
            return _error(400, _BARCODE_REQUIRED)
        try:
            item = self._service.get_item_by_barcode(barcode)
        except Exception as exc:
            return _error(500, str(exc))
        if item is None:
            return _error(404, "item not found")
        return jsonify(item.to_dict()), 200

    def create_item(self) -> Reply:
        try:
            item = _read_item()
        except ValueError as exc:
            return _error(400, str(exc))
        try:
            new_id = self._service.create_item(item)
        except (DuplicatePartNumberError, DuplicateBarcodeError) as exc:
            return _error(409, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        item.item_id = new_id
        return jsonify(item.to_dict()), 201

    def update_item(self, item_id: str) -> Reply:
        parsed = _parse_id(item_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            item = _read_item()
        except ValueError as exc:
            return _error(400, str(exc))
        item.item_id = parsed
        try:
            self._service.update_item(item)
        except ItemNotFoundError as exc:
            return _error(404, str(exc))
        except (DuplicatePartNumberError, DuplicateBarcodeError) as exc:
            return _error(409, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify(item.to_dict()), 200

    def delete_item(self, item_id: str) -> Reply | tuple[str, int]:
        parsed = _parse_id(item_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            self._service.delete_item(parsed)
        except ItemNotFoundError as exc:
            return _error(404, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return "", 204

    def get_barcode_image(self, barcode: str) -> Reply | Response:
        """Return the barcode rendered as a PNG image."""
        if not barcode:
            return _error(400, _BARCODE_REQUIRED)
        try:
            image = self._barcodes.generate_barcode_image(barcode)
        except Exception as exc:
            return _error(500, str(exc))
        return Response(image, status=200, mimetype="image/png")


def create_blueprint(service: ItemService, barcode_service: BarcodeService) -> Blueprint:
    """Return the item routes, relative to the inventory API prefix."""
    handler = ItemHandler(service, barcode_service)
    blueprint = Blueprint("items", __name__)
    routes = (
        ("/items", handler.get_items, "GET"),
        ("/items/low-stock", handler.get_low_stock_items, "GET"),
        ("/items/<item_id>", handler.get_item_by_id, "GET"),
        ("/items/barcode/<barcode>", handler.get_item_by_barcode, "GET"),
        ("/items", handler.create_item, "POST"),
        ("/items/<item_id>", handler.update_item, "PUT"),
        ("/items/<item_id>", handler.delete_item, "DELETE"),
        ("/items/barcode/<barcode>/image", handler.get_barcode_image, "GET"),
    )
    for rule, view, method in routes:
        blueprint.add_url_rule(rule, view.__name__, view, methods=[method])
    return blueprint