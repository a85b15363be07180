import pytest

from fixparts.dashboard import (
    DashboardRepository,
    DashboardService,
    LowStockItem,
    RecentPurchase,
)
from fixparts.database import connect, create_schema


@pytest.fixture
def connection():
    conn = connect(":memory:")
    create_schema(conn)
    yield conn
    conn.close()


def add_item(conn, part_number, name="Part", current=0, minimum=0, active=True):
    return conn.execute(
        "INSERT INTO items (part_number, item_name, description, current_stock, "
        "minimum_stock, is_active) VALUES (?, ?, ?, ?, ?, ?)",
        (part_number, name, "desc", current, minimum, active),
    ).lastrowid


def add_sale(conn, item_id, total, customer="Customer", date=None, created_at=None):
    columns = ["item_id", "customer_name", "total_price"]
    values = [item_id, customer, total]
    if date is not None:
        columns.append("date")
        values.append(date)
    if created_at is not None:
        columns.append("created_at")
        values.append(created_at)
    placeholders = ", ".join("?" for _ in values)
    conn.execute(
        f"INSERT INTO sales ({', '.join(columns)}) VALUES ({placeholders})", values
    )


def add_submodel(conn, name):
    make_id = conn.execute(
        "INSERT INTO vehicle_makes (make_name) VALUES (?)", ("Make",)
    ).lastrowid
    model_id = conn.execute(
        "INSERT INTO vehicle_models (make_id, model_name) VALUES (?, ?)",
        (make_id, "Model"),
    ).lastrowid
    return conn.execute(
        "INSERT INTO vehicle_submodels (model_id, submodel_name) VALUES (?, ?)",
        (model_id, name),
    ).lastrowid


def test_low_stock_count_uses_strict_comparison(connection):
    add_item(connection, "A", current=1, minimum=5)
    add_item(connection, "B", current=5, minimum=5)
    add_item(connection, "C", current=10, minimum=2)
    assert DashboardRepository(connection).get_low_stock_count() == 1


def test_total_inventory_count_counts_active_only(connection):
    add_item(connection, "A", active=True)
    add_item(connection, "B", active=True)
    add_item(connection, "C", active=False)
    assert DashboardRepository(connection).get_total_inventory_count() == 2


def test_vehicle_count_counts_distinct_submodels(connection):
    first = add_item(connection, "A")
    second = add_item(connection, "B")
    sub_one = add_submodel(connection, "One")
    sub_two = add_submodel(connection, "Two")
    for item_id, sub_id in ((first, sub_one), (second, sub_one), (second, sub_two)):
        connection.execute(
            "INSERT INTO compatibility (item_id, submodel_id) VALUES (?, ?)",
            (item_id, sub_id),
        )
    assert DashboardRepository(connection).get_vehicle_count() == 2


def test_today_sales_is_zero_without_sales(connection):
    assert DashboardRepository(connection).get_today_sales() == 0.0


def test_today_sales_sums_only_today(connection):
    item_id = add_item(connection, "A")
    add_sale(connection, item_id, 10.5)
    add_sale(connection, item_id, 4.5)
    add_sale(connection, item_id, 100.0, created_at="2000-01-01 12:00:00")
    assert DashboardRepository(connection).get_today_sales() == pytest.approx(10.5 + 4.5)


def test_low_stock_items_sorted_and_limited(connection):
    for index in range(12):
        add_item(connection, f"P{index}", name=f"N{index}", current=11 - index, minimum=20)
    add_item(connection, "OK", current=50, minimum=1)
    items = DashboardRepository(connection).get_low_stock_items()
    assert len(items) == 10
    currents = [item.current for item in items]
    assert currents == sorted(currents)
    assert items[0] == LowStockItem("P11", "N11", 0, 20)
    assert all(item.part_number != "OK" for item in items)


def test_low_stock_items_empty(connection):
    assert DashboardRepository(connection).get_low_stock_items() == []


def test_recent_sales_format_and_order(connection):
    item_id = add_item(connection, "A", name="Brake Pad")
    for day in range(1, 13):
        add_sale(connection, item_id, float(day), date=f"2024-01-{day:02d} 10:00:00")
    sales = DashboardRepository(connection).get_recent_sales()
    assert len(sales) == 10
    assert sales[0].date == "12/01/2024"
    assert sales[0].part == "Brake Pad"
    assert sales[0].customer == "Customer"
    assert sales[0].total == 12.0
    assert [sale.total for sale in sales] == sorted(
        (sale.total for sale in sales), reverse=True
    )


def test_top_sellers_counts_recent_sales(connection):
    popular = add_item(connection, "POP", name="Popular")
    rare = add_item(connection, "RARE", name="Rare")
    add_sale(connection, popular, 20.0)
    add_sale(connection, popular, 30.0)
    add_sale(connection, rare, 5.0)
    add_sale(connection, rare, 7.0, date="2000-01-01 00:00:00")
    add_sale(connection, rare, 7.0, date="2000-01-02 00:00:00")
    sellers = DashboardRepository(connection).get_top_sellers()
    assert [seller.part_number for seller in sellers] == ["POP", "RARE"]
    assert sellers[0].sold == 2
    assert sellers[0].revenue == pytest.approx(20.0 + 30.0)
    assert sellers[1].sold == 1


def test_recent_purchases(connection):
    item_id = add_item(connection, "PN-1")
    supplier_id = connection.execute(
        "INSERT INTO suppliers (name) VALUES (?)", ("Acme Parts",)
    ).lastrowid
    for date, cost in (("2024-03-05 10:00:00.000000", 40.0), ("2024-02-01 09:00:00", 15.0)):
        connection.execute(
            "INSERT INTO purchases (date, supplier_id, item_id, quantity, "
            "cost_per_unit, total_cost) VALUES (?, ?, ?, ?, ?, ?)",
            (date, supplier_id, item_id, 1, cost, cost),
        )
    purchases = DashboardRepository(connection).get_recent_purchases()
    assert purchases == [
        RecentPurchase("05/03/2024", "PN-1", "Acme Parts", 40.0),
        RecentPurchase("01/02/2024", "PN-1", "Acme Parts", 15.0),
    ]


def test_service_returns_repository_figures(connection):
    add_item(connection, "A", current=0, minimum=3)
    repository = DashboardRepository(connection)
    service = DashboardService(repository)
    assert service.get_low_stock_count() == repository.get_low_stock_count() == 1
    assert service.get_total_inventory_count() == 1
    assert service.get_low_stock_items() == repository.get_low_stock_items()
    assert service.get_today_sales() == 0.0
    assert service.get_vehicle_count() == 0
    assert service.get_recent_sales() == []
    assert service.get_top_sellers() == []
    assert service.get_recent_purchases() == []