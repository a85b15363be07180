"""Dashboard figures: summary counts and short recent-activity lists."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

_LIST_LIMIT = 10


@dataclass
class LowStockItem:
    """An item whose stock has fallen below its minimum."""

    part_number: str
    name: str
    current: int
    minimum: int


@dataclass
class RecentSale:
    """A sale as shown on the dashboard, with its date as DD/MM/YYYY."""

    date: str
    part: str
    customer: str
    total: float


@dataclass
class TopSeller:
    """A part with the number of sales and the revenue over the last 30 days."""

    part_number: str
    name: str
    sold: int
    revenue: float


@dataclass
class RecentPurchase:
    """A purchase as shown on the dashboard, with its date as DD/MM/YYYY."""

    date: str
    part_number: str
    supplier: str
    cost: float


class DashboardRepository:
    """Reads dashboard figures from an SQLite database."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection

    def _scalar(self, query: str) -> Any:
        return self._connection.execute(query).fetchone()[0]

    def get_low_stock_count(self) -> int:
        """Count items whose current stock is below their minimum."""
        return self._scalar(
            "SELECT COUNT(*) FROM items WHERE current_stock < minimum_stock"
        )

    def get_today_sales(self) -> float:
        """Sum the totals of sales recorded today."""
        return float(
            self._scalar(
                "SELECT COALESCE(SUM(total_price), 0) FROM sales "
                "WHERE DATE(created_at) = CURRENT_DATE"
            )
        )

    def get_total_inventory_count(self) -> int:
        """Count active items."""
        return self._scalar("SELECT COUNT(*) FROM items WHERE is_active = 1")

    def get_vehicle_count(self) -> int:
        """Count the distinct vehicle submodels that some part fits."""
        return self._scalar("SELECT COUNT(DISTINCT submodel_id) FROM compatibility")

    def get_low_stock_items(self) -> list[LowStockItem]:
        """Return up to ten items below minimum stock, lowest stock first."""
        rows = self._connection.execute(
            """
            SELECT part_number, item_name, current_stock, minimum_stock
            FROM items
            WHERE current_stock < minimum_stock
            ORDER BY current_stock ASC
            LIMIT ?
            """,
            (_LIST_LIMIT,),
        )
        return [
            LowStockItem(part_number, name, current, minimum)
            for part_number, name, current, minimum in rows
        ]

    def get_recent_sales(self) -> list[RecentSale]:
        """Return up to ten of the latest sales, newest first."""
        rows = self._connection.execute(
            """
            SELECT
                strftime('%d/%m/%Y', s.date) AS date,
                i.item_name AS part,
                s.customer_name AS customer,
                s.total_price AS total
            FROM sales s
            JOIN items i ON s.item_id = i.item_id
            ORDER BY s.date DESC
            LIMIT ?
            """,
            (_LIST_LIMIT,),
        )
        return [
            RecentSale(date, part, customer, float(total))
            for date, part, customer, total in rows
        ]

    def get_top_sellers(self) -> list[TopSeller]:
        """Return up to ten parts sold most often in the last 30 days."""
        rows = self._connection.execute(
            """
            SELECT
                i.part_number,
                i.item_name AS name,
                COUNT(*) AS sold,
                SUM(s.total_price) AS revenue
            FROM sales s
            JOIN items i ON s.item_id = i.item_id
            WHERE s.date >= DATE('now', '-30 days')
            GROUP BY i.part_number, i.item_name
            ORDER BY sold DESC
            LIMIT ?
            """,
            (_LIST_LIMIT,),
        )
        return [
            TopSeller(part_number, name, sold, float(revenue))
            for part_number, name, sold, revenue in rows
        ]

    def get_recent_purchases(self) -> list[RecentPurchase]:
        """Return up to ten of the latest purchases, newest first."""
        rows = self._connection.execute(
            """
            SELECT
                strftime('%d/%m/%Y', p.date) AS date,
                i.part_number,
                s.name AS supplier,
                p.total_cost
            FROM purchases p
            JOIN items i ON p.item_id = i.item_id
            JOIN suppliers s ON p.supplier_id = s.supplier_id
            ORDER BY p.date DESC
            LIMIT ?
            """,
            (_LIST_LIMIT,),
        )
        return [
            RecentPurchase(date, part_number, supplier, float(cost))
            for date, part_number, supplier, cost in rows
        ]


class DashboardService:
    """Supplies the figures shown on the dashboard."""

    def __init__(self, repository: DashboardRepository) -> None:
        self._repo = repository

    def get_low_stock_count(self) -> int:
        return self._repo.get_low_stock_count()

    def get_today_sales(self) -> float:
        return self._repo.get_today_sales()

    def get_total_inventory_count(self) -> int:
        return self._repo.get_total_inventory_count()

    def get_vehicle_count(self) -> int:
        return self._repo.get_vehicle_count()

    def get_low_stock_items(self) -> list[LowStockItem]:
        return self._repo.get_low_stock_items()

    def get_recent_sales(self) -> list[RecentSale]:
        return self._repo.get_recent_sales()

    def get_top_sellers(self) -> list[TopSeller]:
        return self._repo.get_top_sellers()

    def get_recent_purchases(self) -> list[RecentPurchase]:
        return self._repo.get_recent_purchases()