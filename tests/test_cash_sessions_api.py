# Cash drawer sessions: open, current, close with reconciliation, history.

from decimal import Decimal

from tests.conftest import data_of, make_item, make_transaction


def money(value) -> Decimal:
    return Decimal(str(value))


class TestOpenCashSession:

    def test_open_and_current(self, cashier_client):
        response = cashier_client.post("/api/cash-sessions", json={"opening_cash": 100000})
        assert response.status_code == 201, response.text
        opened = data_of(response)
        assert opened["status"] == "open"
        assert money(opened["opening_cash"]) == Decimal("100000")
        assert opened["closed_at"] is None

        current = data_of(cashier_client.get("/api/cash-sessions/current"))
        assert current["id"] == opened["id"]

    def test_second_open_rejected(self, cashier_client):
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 100000})
        response = cashier_client.post("/api/cash-sessions", json={"opening_cash": 50000})
        assert response.status_code == 400
        assert response.json()["detail"] == "A cash session is already open"

    def test_sessions_are_per_user(self, admin_client, cashier_client):
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 100000})
        assert admin_client.get("/api/cash-sessions/current").status_code == 404
        assert admin_client.post("/api/cash-sessions", json={"opening_cash": 1}).status_code == 201

    def test_negative_opening_cash_rejected(self, cashier_client):
        response = cashier_client.post("/api/cash-sessions", json={"opening_cash": -1})
        assert response.status_code == 400

    def test_no_current_session(self, cashier_client):
        assert cashier_client.get("/api/cash-sessions/current").status_code == 404


class TestCloseCashSession:

    def test_reconciles_cash_sales(self, admin_client, cashier_client):
        """
        SCENARIO: Open with 100,000; one cash sale paid 60,000 with 10,000 change;
                  close declaring 150,000
        EXPECTED: cash in 60,000, change 10,000, expected 150,000, difference 0
        """
        nasi = make_item(admin_client, name="Nasi Goreng", price=50000, buy_price=30000, stock=10)
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 100000})
        make_transaction(
            cashier_client,
            status="completed",
            items=[{"item_id": nasi["id"], "quantity": 1}],
            payment=60000,
            payment_type="cash",
        )

        response = cashier_client.post(
            "/api/cash-sessions/close", json={"closing_cash": 150000, "note": "all good"}
        )
        assert response.status_code == 200, response.text
        closed = data_of(response)
        assert closed["status"] == "closed"
        assert money(closed["total_cash_in"]) == Decimal("60000")
        assert money(closed["total_change"]) == Decimal("10000")
        assert money(closed["expected_cash"]) == Decimal("150000")
        assert money(closed["difference"]) == Decimal("0")
        assert closed["note"] == "all good"
        assert closed["closed_at"] is not None

    def test_ignores_non_cash_and_unfinished(self, admin_client, cashier_client):
        """
        SCENARIO: QRIS sale, draft and refunded cash sale during the session
        EXPECTED: None of them count; a short drawer shows a negative difference
        """
        nasi = make_item(admin_client, name="Nasi Goreng", price=50000, buy_price=30000, stock=10)
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 100000})
        line = [{"item_id": nasi["id"], "quantity": 1}]
        make_transaction(cashier_client, status="completed", items=line, payment=50000, payment_type="qris")
        make_transaction(cashier_client, items=line)
        refunded = make_transaction(
            cashier_client, status="completed", items=line, payment=100000, payment_type="cash"
        )
        cashier_client.post(f"/api/transactions/{refunded['transaction']['id']}/refund")

        closed = data_of(cashier_client.post("/api/cash-sessions/close", json={"closing_cash": 90000}))
        assert money(closed["total_cash_in"]) == Decimal("0")
        assert money(closed["expected_cash"]) == Decimal("100000")
        assert money(closed["difference"]) == Decimal("-10000")

    def test_sale_before_open_is_excluded(self, admin_client, cashier_client):
        """
        SCENARIO: A 50,000 cash sale happens, then a session opens with 100
        EXPECTED: The earlier sale is outside the window; expected cash is 100
        """
        nasi = make_item(admin_client, name="Nasi Goreng", price=50000, buy_price=30000, stock=10)
        make_transaction(
            cashier_client,
            status="completed",
            items=[{"item_id": nasi["id"], "quantity": 1}],
            payment=50000,
            payment_type="cash",
        )
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 100})

        closed = data_of(cashier_client.post("/api/cash-sessions/close", json={"closing_cash": 100}))
        assert money(closed["total_cash_in"]) == Decimal("0")
        assert money(closed["total_change"]) == Decimal("0")
        assert money(closed["expected_cash"]) == Decimal("100")
        assert money(closed["difference"]) == Decimal("0")

    def test_close_without_open_session(self, cashier_client):
        response = cashier_client.post("/api/cash-sessions/close", json={"closing_cash": 0})
        assert response.status_code == 400
        assert response.json()["detail"] == "No open cash session to close"

    def test_can_reopen_after_close(self, cashier_client):
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 100000})
        cashier_client.post("/api/cash-sessions/close", json={"closing_cash": 100000})
        assert cashier_client.get("/api/cash-sessions/current").status_code == 404
        assert cashier_client.post("/api/cash-sessions", json={"opening_cash": 0}).status_code == 201


class TestCashSessionHistory:

    def test_newest_first_and_date_filter(self, cashier_client):
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 1000})
        cashier_client.post("/api/cash-sessions/close", json={"closing_cash": 1000})
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 2000})

        history = data_of(cashier_client.get("/api/cash-sessions/history"))
        assert history["total"] == 2
        assert [money(s["opening_cash"]) for s in history["items"]] == [
            Decimal("2000"),
            Decimal("1000"),
        ]

        old = data_of(
            cashier_client.get(
                "/api/cash-sessions/history",
                params={"start_date": "2000-01-01", "end_date": "2000-01-31"},
            )
        )
        assert old["total"] == 0

    def test_only_own_sessions(self, admin_client, cashier_client):
        cashier_client.post("/api/cash-sessions", json={"opening_cash": 1000})
        assert data_of(admin_client.get("/api/cash-sessions/history"))["total"] == 0
