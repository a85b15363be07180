"""The web application and the command that serves it."""

from __future__ import annotations

import argparse
import os
import sqlite3
import sys
from collections.abc import Sequence
from contextlib import closing

from flask import Flask

from fixparts import category_api, compatibility_api, dashboard_api, item_api, purchase_api
from fixparts.barcode import BarcodeService
from fixparts.categories import CategoryRepository, CategoryService
from fixparts.compatibility import CompatibilityRepository, CompatibilityService
from fixparts.dashboard import DashboardRepository, DashboardService
from fixparts.database import connect, create_schema
from fixparts.items import ItemRepository, ItemService
from fixparts.purchases import PurchaseRepository, PurchaseService

API_PREFIX = "/api"
INVENTORY_PREFIX = f"{API_PREFIX}/inventory"


def create_app(connection: sqlite3.Connection) -> Flask:
    """Build the application with every module's routes backed by *connection*."""
    app = Flask(__name__)
    item_repository = ItemRepository(connection)

    app.register_blueprint(
        dashboard_api.create_blueprint(DashboardService(DashboardRepository(connection))),
        url_prefix=API_PREFIX,
    )
    app.register_blueprint(
        category_api.create_blueprint(CategoryService(CategoryRepository(connection))),
        url_prefix=INVENTORY_PREFIX,
    )
    app.register_blueprint(
        item_api.create_blueprint(ItemService(item_repository), BarcodeService()),
        url_prefix=INVENTORY_PREFIX,
    )
    app.register_blueprint(
        compatibility_api.create_blueprint(
            CompatibilityService(CompatibilityRepository(connection), item_repository)
        ),
        url_prefix=INVENTORY_PREFIX,
    )
    app.register_blueprint(
        purchase_api.create_blueprint(PurchaseService(PurchaseRepository(connection))),
        url_prefix=API_PREFIX,
    )
    return app


def main(argv: Sequence[str] | None = None) -> int:
    """Open the database and serve the application until interrupted."""
    parser = argparse.ArgumentParser(prog="fixparts", description="Parts inventory server.")
    parser.add_argument(
        "--database",
        default=os.environ.get("FIXPARTS_DATABASE", "fixparts.db"),
        help="path of the SQLite database file",
    )
    parser.add_argument("--host", default="127.0.0.1", help="address to listen on")
    parser.add_argument("--port", type=int, default=8080, help="port to listen on")
    args = parser.parse_args(argv)

    try:
        connection = connect(args.database)
    except sqlite3.Error as exc:
        print(f"Failed to connect to database: {exc}", file=sys.stderr)
        return 1

    with closing(connection):
        try:
            create_schema(connection)
        except sqlite3.Error as exc:
            print(f"Failed to connect to database: {exc}", file=sys.stderr)
            return 1
        create_app(connection).run(host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())