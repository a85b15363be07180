"""JSON endpoints for stock purchases."""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any

from flask import Blueprint, jsonify, request

from fixparts.category_api import Reply, _error, _parse_id
from fixparts.purchases import (
    DuplicateInvoiceNumberError,
    InvalidCostPerUnitError,
    InvalidDateError,
    InvalidItemIDError,
    InvalidQuantityError,
    InvalidSupplierIDError,
    Purchase,
    PurchaseFilter,
    PurchaseNotFoundError,
    PurchaseService,
)

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)

_BAD_REQUEST_ERRORS = (
    InvalidSupplierIDError,
    InvalidItemIDError,
    InvalidQuantityError,
    InvalidCostPerUnitError,
    InvalidDateError,
)

_INVALID_ID = "invalid purchase ID"


def _parse_rfc3339(text: str) -> datetime | None:
    match = _RFC3339.fullmatch(text)
    if match is None:
        return None
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "")[:6].ljust(6, "0"))
    if zone == "Z":
        tz = timezone.utc
    else:
        sign = -1 if zone[0] == "-" else 1
        offset = timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6]))
        try:
            tz = timezone(sign * offset)
        except ValueError:
            return None
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tz
        )
    except ValueError:
        return None


def _filter_from_query() -> PurchaseFilter:
    args = request.args
    criteria: dict[str, Any] = {}
    for key in ("supplier_id", "item_id"):
        raw = args.get(key, "")
        if raw and (value := _parse_id(raw)) is not None:
            criteria[key] = value
    for key in ("start_date", "end_date"):
        raw = args.get(key, "")
        if raw and (moment := _parse_rfc3339(raw)) is not None:
            criteria[key] = moment
    if invoice := args.get("invoice_number", ""):
        criteria["invoice_number"] = invoice
    return PurchaseFilter(**criteria)


def _read_purchase() -> Purchase:
    raw = request.get_data()
    if not raw:
        return Purchase()
    data: Any = json.loads(raw)
    return Purchase.from_dict(data)


class PurchaseHandler:
    """Serves purchase requests from a PurchaseService."""

    def __init__(self, service: PurchaseService) -> None:
        self._service = service

    def get_purchases(self) -> Reply:
        """List purchases, narrowed by the query parameters that parse."""
        try:
            purchases = self._service.get_all(_filter_from_query())
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([p.to_dict() for p in purchases]), 200

    def get_purchase_by_id(self, purchase_id: str) -> Reply:
        parsed = _parse_id(purchase_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            purchase = self._service.get_by_id(parsed)
        except PurchaseNotFoundError as exc:
            return _error(404, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify(purchase.to_dict()), 200

    def create_purchase(self) -> Reply:
        try:
            purchase = _read_purchase()
        except ValueError as exc:
            return _error(400, str(exc))
        try:
            new_id = self._service.create(purchase)
        except _BAD_REQUEST_ERRORS as exc:
            return _error(400, str(exc))
        except DuplicateInvoiceNumberError as exc:
            return _error(409, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        purchase.purchase_id = new_id
        return jsonify(purchase.to_dict()), 201

    def update_purchase(self, purchase_id: str) -> Reply:
        parsed = _parse_id(purchase_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            purchase = _read_purchase()
        except ValueError as exc:
            return _error(400, str(exc))
        purchase.purchase_id = parsed
        try:
            self._service.update(purchase)
        except PurchaseNotFoundError as exc:
            return _error(404, str(exc))
        except _BAD_REQUEST_ERRORS as exc:
            return _error(400, str(exc))
        except DuplicateInvoiceNumberError as exc:
            return _error(409, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify(purchase.to_dict()), 200

    def delete_purchase(self, purchase_id: str) -> Reply | tuple[str, int]:
        parsed = _parse_id(purchase_id)
        if parsed is None:
            return _error(400, _INVALID_ID)
        try:
            self._service.delete(parsed)
        except PurchaseNotFoundError as exc:
            return _error(404, str(exc))
        except Exception as exc:
            return _error(500, str(exc))
        return "", 204

    def get_supplier_purchases(self, supplier_id: str) -> Reply:
        parsed = _parse_id(supplier_id)
        if parsed is None:
            return _error(400, "invalid supplier ID")
        try:
            purchases = self._service.get_supplier_purchases(parsed)
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([p.to_dict() for p in purchases]), 200

    def get_item_purchases(self, item_id: str) -> Reply:
        parsed = _parse_id(item_id)
        if parsed is None:
            return _error(400, "invalid item ID")
        try:
            purchases = self._service.get_item_purchases(parsed)
        except Exception as exc:
            return _error(500, str(exc))
        return jsonify([p.to_dict() for p in purchases]), 200


def create_blueprint(service: PurchaseService) -> Blueprint:
    """Return the purchase routes, relative to the API prefix."""
    handler = PurchaseHandler(service)
    blueprint = Blueprint("purchases", __name__)
    routes = (
        ("/purchases", handler.get_purchases, "GET"),
        ("/purchases/<purchase_id>", handler.get_purchase_by_id, "GET"),
        ("/purchases", handler.create_purchase, "POST"),
        ("/purchases/<purchase_id>", handler.update_purchase, "PUT"),
        ("/purchases/<purchase_id>", handler.delete_purchase, "DELETE"),
        ("/suppliers/<supplier_id>/purchases", handler.get_supplier_purchases, "GET"),
        ("/items/<item_id>/purchases", handler.get_item_purchases, "GET"),
    )
    for rule, view, method in routes:
        blueprint.add_url_rule(rule, view.__name__, view, methods=[method])
    return blueprint