# Dashboard aggregation: counts, revenue/profit, low stock, recent, top sellers.

from decimal import Decimal

import pytest

from tests.conftest import data_of, make_item, make_transaction


def money(value) -> Decimal:
    return Decimal(str(value))


@pytest.fixture
def trading_day(admin_client):
    """
    Kopi 20,000 (cost 12,000) x10, Teh 5,000 (cost 2,000) x20, Roti 15,000 (cost 9,000) x3.

    - sale: 2 Kopi + 3 Teh
    - sale: 1 Teh with a 1,000 discount
    - draft: 1 Kopi
    - refunded: 1 Roti
    """
    kopi = make_item(admin_client, name="Kopi", price=20000, buy_price=12000, stock=10)
    teh = make_item(admin_client, name="Teh", price=5000, buy_price=2000, stock=20)
    roti = make_item(admin_client, name="Roti", price=15000, buy_price=9000, stock=3)

    make_transaction(
        admin_client,
        status="completed",
        items=[{"item_id": kopi["id"], "quantity": 2}, {"item_id": teh["id"], "quantity": 3}],
        payment=55000,
    )
    make_transaction(
        admin_client,
        status="completed",
        items=[{"item_id": teh["id"], "quantity": 1}],
        discount=1000,
        payment=5000,
    )
    draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
    refunded = make_transaction(
        admin_client,
        status="completed",
        items=[{"item_id": roti["id"], "quantity": 1}],
        payment=15000,
    )
    admin_client.post(f"/api/transactions/{refunded['transaction']['id']}/refund")
    return {"kopi": kopi, "teh": teh, "roti": roti, "draft": draft, "refunded": refunded}


class TestDashboard:

    def test_counts(self, admin_client, trading_day):
        dashboard = data_of(admin_client.get("/api/dashboard"))
        assert dashboard["total_items"] == 3
        assert dashboard["total_transactions"] == 4
        assert dashboard["draft"] == 1
        assert dashboard["completed"] == 2
        assert dashboard["refunded"] == 1

    def test_revenue_and_profit_cover_completed_only(self, admin_client, trading_day):
        """
        SCENARIO: Two completed sales, one draft, one refund
        EXPECTED: revenue = line subtotals 55,000 + 5,000; profit = 25,000 + 3,000
        """
        dashboard = data_of(admin_client.get("/api/dashboard"))
        assert money(dashboard["total_revenue"]) == Decimal("60000")
        assert money(dashboard["total_profit"]) == Decimal("28000")
        assert money(dashboard["today_profit"]) == Decimal("28000")

    def test_date_window_narrows_revenue_only(self, admin_client, trading_day):
        dashboard = data_of(
            admin_client.get("/api/dashboard", params={"from_date": "2000-01-01", "to_date": "2000-01-02"})
        )
        assert money(dashboard["total_revenue"]) == Decimal("0")
        assert money(dashboard["total_profit"]) == Decimal("0")
        assert money(dashboard["today_profit"]) == Decimal("28000")
        assert dashboard["total_transactions"] == 4

    def test_deleted_items_are_not_counted(self, admin_client, trading_day):
        admin_client.delete(f"/api/items/{trading_day['roti']['id']}")
        dashboard = data_of(admin_client.get("/api/dashboard"))
        assert dashboard["total_items"] == 2

    def test_low_stock(self, admin_client, trading_day):
        assert data_of(admin_client.get("/api/dashboard"))["low_stock"] == 1

    def test_recent_transactions(self, admin_client, trading_day):
        recent = data_of(admin_client.get("/api/dashboard"))["recent_transactions"]
        assert len(recent) == 3
        assert recent[0]["id"] == trading_day["refunded"]["transaction"]["id"]
        assert recent[0]["status"] == "refunded"
        assert recent[1]["id"] == trading_day["draft"]["transaction"]["id"]
        assert recent[1]["items"][0]["name"] == "Kopi"

    def test_top_selling_items(self, admin_client, trading_day):
        top = data_of(admin_client.get("/api/dashboard"))["top_selling_items"]
        assert [(row["name"], row["quantity"]) for row in top] == [("Teh", 4), ("Kopi", 2)]

    def test_empty_store(self, cashier_client):
        dashboard = data_of(cashier_client.get("/api/dashboard"))
        assert dashboard["total_items"] == 0
        assert money(dashboard["total_revenue"]) == Decimal("0")
        assert dashboard["recent_transactions"] == []
        assert dashboard["top_selling_items"] == []

    def test_requires_login(self, client):
        assert client.get("/api/dashboard").status_code == 401
