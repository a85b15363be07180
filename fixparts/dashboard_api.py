"""HTML fragments for the dashboard widgets."""

from __future__ import annotations

from collections.abc import Iterable
from html import escape
from typing import Any

from flask import Blueprint

from fixparts.dashboard import DashboardService

_TABLE_HEAD = "<table class='min-w-full'><thead><tr>"


def _error(message: str) -> tuple[str, int]:
    return f"<div class='text-red-600'>{message}</div>", 500


def _empty(message: str) -> tuple[str, int]:
    return f"<div class='text-gray-500'>{message}</div>", 200


def _cell(value: Any) -> str:
    if isinstance(value, float):
        text = f"{value:.2f}"
    elif isinstance(value, int):
        text = str(value)
    else:
        text = escape(str(value))
    return f"<td>{text}</td>"


def _table(headers: Iterable[str], rows: Iterable[Iterable[Any]]) -> tuple[str, int]:
    head = "".join(f"<th>{header}</th>" for header in headers)
    body = "".join(
        "<tr>" + "".join(_cell(value) for value in row) + "</tr>" for row in rows
    )
    return f"{_TABLE_HEAD}{head}</tr></thead><tbody>{body}</tbody></table>", 200


class DashboardAPIHandler:
    """Renders dashboard figures as small HTML fragments."""

    def __init__(self, service: DashboardService) -> None:
        self._service = service

    def get_low_stock_count(self) -> tuple[str, int]:
        try:
            count = self._service.get_low_stock_count()
        except Exception:
            return _error("Düşük stok sayısı alınamadı")
        return f"<div>{count}</div>", 200

    def get_today_sales(self) -> tuple[str, int]:
        try:
            sales = self._service.get_today_sales()
        except Exception:
            return _error("Bugünkü satışlar alınamadı")
        return f"<div>{sales:.2f}</div>", 200

    def get_total_inventory_count(self) -> tuple[str, int]:
        try:
            count = self._service.get_total_inventory_count()
        except Exception:
            return _error("Envanter sayısı alınamadı")
        return f"<div>{count}</div>", 200

    def get_vehicle_count(self) -> tuple[str, int]:
        try:
            count = self._service.get_vehicle_count()
        except Exception:
            return _error("Araç sayısı alınamadı")
        return f"<div>{count}</div>", 200

    def get_low_stock_items(self) -> tuple[str, int]:
        try:
            items = self._service.get_low_stock_items()
        except Exception:
            return _error("Düşük stoklu ürünler alınamadı")
        if not items:
            return _empty("Düşük stoklu ürün bulunamadı")
        return _table(
            ("Parça Numarası", "İsim", "Mevcut Stok", "Minimum Stok"),
            ((i.part_number, i.name, i.current, i.minimum) for i in items),
        )

    def get_recent_sales(self) -> tuple[str, int]:
        try:
            sales = self._service.get_recent_sales()
        except Exception:
            return _error("Son satışlar alınamadı")
        if not sales:
            return _empty("Son satış bulunamadı")
        return _table(
            ("Tarih", "Parça", "Müşteri", "Toplam"),
            ((s.date, s.part, s.customer, float(s.total)) for s in sales),
        )

    def get_top_sellers(self) -> tuple[str, int]:
        try:
            sellers = self._service.get_top_sellers()
        except Exception:
            return _error("En çok satanlar alınamadı")
        if not sellers:
            return _empty("En çok satan ürün bulunamadı")
        return _table(
            ("Parça Numarası", "İsim", "Satılan", "Gelir"),
            ((s.part_number, s.name, s.sold, float(s.revenue)) for s in sellers),
        )

    def get_recent_purchases(self) -> tuple[str, int]:
        try:
            purchases = self._service.get_recent_purchases()
        except Exception:
            return _error("Son alımlar alınamadı")
        if not purchases:
            return _empty("Son alım bulunamadı")
        return _table(
            ("Tarih", "Parça Numarası", "Tedarikçi", "Maliyet"),
            ((p.date, p.part_number, p.supplier, float(p.cost)) for p in purchases),
        )


def create_blueprint(service: DashboardService) -> Blueprint:
    """Return the dashboard widget routes, relative to the API prefix."""
    handler = DashboardAPIHandler(service)
    blueprint = Blueprint("dashboard", __name__)
    routes = (
        ("/inventory/low-stock-count", handler.get_low_stock_count),
        ("/sales/today", handler.get_today_sales),
        ("/inventory/total-count", handler.get_total_inventory_count),
        ("/compatibility/vehicle-count", handler.get_vehicle_count),
        ("/inventory/low-stock", handler.get_low_stock_items),
        ("/sales/recent", handler.get_recent_sales),
        ("/sales/top-sellers", handler.get_top_sellers),
        ("/purchases/recent", handler.get_recent_purchases),
    )
    for rule, view in routes:
        blueprint.add_url_rule(rule, view.__name__, view, methods=["GET"])
    return blueprint