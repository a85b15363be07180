"""Flask web service for an auto-parts shop: items, categories, vehicle compatibility, purchases and dashboard, stored in SQLite."""

__version__ = "0.1.0"