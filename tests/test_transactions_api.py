# Transaction engine: create, checkout, refund, update, delete, reads.

from decimal import Decimal

import pytest

from pos_api.core.config import config
from tests.conftest import data_of, make_item, make_transaction


def money(value) -> Decimal:
    return Decimal(str(value))


def stock_of(client, item_id: int) -> int:
    return data_of(client.get(f"/api/items/{item_id}"))["stock"]


@pytest.fixture
def kopi(admin_client):
    return make_item(admin_client, name="Kopi", price=20000, buy_price=12000, stock=10)


@pytest.fixture
def roti(admin_client):
    return make_item(admin_client, name="Roti", price=15000, buy_price=9000, stock=5)


class TestCreateTransaction:

    def test_draft_leaves_stock_alone(self, admin_client, kopi):
        """
        SCENARIO: Create a draft with 2 x Kopi
        EXPECTED: HTTP 201, total 40,000, stock unchanged, no payment
        """
        result = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 2}])
        tx = result["transaction"]
        assert tx["status"] == "draft"
        assert money(tx["total"]) == Decimal("40000")
        assert tx["payment"] is None
        assert tx["payment_type"] == "cash"
        assert tx["transaction_type"] == "onsite"
        assert result["warnings"] == []
        assert stock_of(admin_client, kopi["id"]) == 10

    def test_completed_takes_stock_and_records_change(self, admin_client, kopi, roti):
        """
        SCENARIO: Completed sale of 2 Kopi + 1 Roti, discount 5,000, paid 60,000
        EXPECTED: total = 55,000 - 5,000 = 50,000, change 10,000, stock decremented
        """
        result = make_transaction(
            admin_client,
            status="completed",
            items=[
                {"item_id": kopi["id"], "quantity": 2},
                {"item_id": roti["id"], "quantity": 1},
            ],
            discount=5000,
            payment=60000,
            payment_type="cash",
        )
        tx = result["transaction"]
        assert tx["status"] == "completed"
        assert money(tx["total"]) == Decimal("50000")
        assert money(tx["discount"]) == Decimal("5000")
        assert money(tx["change"]) == Decimal("10000")

        line_sum = sum(money(line["subtotal"]) for line in tx["items"])
        assert max(Decimal("0"), line_sum - money(tx["discount"])) == money(tx["total"])

        assert stock_of(admin_client, kopi["id"]) == 8
        assert stock_of(admin_client, roti["id"]) == 4

    def test_custom_price_is_snapshotted(self, admin_client, kopi):
        result = make_transaction(
            admin_client,
            items=[{"item_id": kopi["id"], "quantity": 1, "custom_price": 18000}],
        )
        line = result["transaction"]["items"][0]
        assert money(line["price"]) == Decimal("18000")
        assert line["item"]["name"] == "Kopi"

        admin_client.put(f"/api/items/{kopi['id']}", json={"name": "Kopi", "price": 25000, "stock": 10})
        again = data_of(admin_client.get(f"/api/transactions/{result['transaction']['id']}"))
        assert money(again["items"][0]["price"]) == Decimal("18000")

    def test_discount_cannot_make_total_negative(self, admin_client, kopi):
        result = make_transaction(
            admin_client, items=[{"item_id": kopi["id"], "quantity": 1}], discount=999999
        )
        assert money(result["transaction"]["total"]) == Decimal("0")

    def test_short_payment_rejected_and_nothing_saved(self, admin_client, kopi):
        """
        SCENARIO: Completed sale with payment below the total
        EXPECTED: HTTP 400 "Payment not enough"; stock and history untouched
        """
        response = admin_client.post(
            "/api/transactions",
            json={
                "status": "completed",
                "items": [{"item_id": kopi["id"], "quantity": 1}],
                "payment": 19999,
            },
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Payment not enough"
        assert stock_of(admin_client, kopi["id"]) == 10
        assert data_of(admin_client.get("/api/transactions"))["total"] == 0

    @pytest.mark.parametrize(
        "payload",
        [
            {"status": "refunded", "items": [{"item_id": 1, "quantity": 1}]},
            {"status": "draft", "items": []},
        ],
    )
    def test_invalid_payloads_are_400(self, admin_client, kopi, payload):
        assert admin_client.post("/api/transactions", json=payload).status_code == 400

    def test_non_positive_quantity_is_400(self, admin_client, kopi):
        response = admin_client.post(
            "/api/transactions", json={"items": [{"item_id": kopi["id"], "quantity": 0}]}
        )
        assert response.status_code == 400

    def test_unknown_item_is_404(self, admin_client):
        response = admin_client.post(
            "/api/transactions", json={"items": [{"item_id": 4242, "quantity": 1}]}
        )
        assert response.status_code == 404


class TestStockUnderflow:

    def _oversell(self, client, item):
        return client.post(
            "/api/transactions",
            json={
                "status": "completed",
                "items": [{"item_id": item["id"], "quantity": 7}],
                "payment": 1000000,
            },
        )

    def test_clamp_is_default(self, admin_client, roti):
        """
        SCENARIO: Sell 7 with 5 in stock under the default policy
        EXPECTED: Sale succeeds, stock clamped to 0, warning returned
        """
        response = self._oversell(admin_client, roti)
        assert response.status_code == 201
        assert len(data_of(response)["warnings"]) == 1
        assert stock_of(admin_client, roti["id"]) == 0

    def test_allow_goes_negative(self, admin_client, roti, monkeypatch):
        monkeypatch.setattr(config, "stock_underflow_policy", "allow")
        response = self._oversell(admin_client, roti)
        assert response.status_code == 201
        assert data_of(response)["warnings"]
        assert stock_of(admin_client, roti["id"]) == -2

    def test_block_rejects(self, admin_client, roti, monkeypatch):
        monkeypatch.setattr(config, "stock_underflow_policy", "block")
        response = self._oversell(admin_client, roti)
        assert response.status_code == 400
        assert stock_of(admin_client, roti["id"]) == 5

    def test_block_on_second_line_rolls_back_everything(self, admin_client, roti, monkeypatch):
        """
        SCENARIO: Block policy; two lines of 3 against 5 in stock
        EXPECTED: HTTP 400, stock still 5, no transaction and no audit row
        """
        monkeypatch.setattr(config, "stock_underflow_policy", "block")
        response = admin_client.post(
            "/api/transactions",
            json={
                "status": "completed",
                "items": [
                    {"item_id": roti["id"], "quantity": 3},
                    {"item_id": roti["id"], "quantity": 3},
                ],
                "payment": 1000000,
            },
        )
        assert response.status_code == 400
        assert stock_of(admin_client, roti["id"]) == 5
        assert data_of(admin_client.get("/api/transactions"))["total"] == 0
        logs = data_of(admin_client.get("/api/audit-logs", params={"entity_type": "transaction"}))
        assert logs["total"] == 0


class TestCheckout:

    def test_checkout_completes_draft(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 3}])
        tx_id = draft["transaction"]["id"]

        response = admin_client.post(
            f"/api/transactions/{tx_id}/checkout", json={"payment": 100000, "payment_type": "qris"}
        )
        assert response.status_code == 200, response.text
        tx = data_of(response)["transaction"]
        assert tx["status"] == "completed"
        assert tx["payment_type"] == "qris"
        assert money(tx["change"]) == Decimal("40000")
        assert stock_of(admin_client, kopi["id"]) == 7

    def test_short_payment_rejected(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
        tx_id = draft["transaction"]["id"]

        response = admin_client.post(f"/api/transactions/{tx_id}/checkout", json={"payment": 100})
        assert response.status_code == 400
        assert data_of(admin_client.get(f"/api/transactions/{tx_id}"))["status"] == "draft"
        assert stock_of(admin_client, kopi["id"]) == 10

    def test_cannot_checkout_twice(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
        tx_id = draft["transaction"]["id"]
        admin_client.post(f"/api/transactions/{tx_id}/checkout", json={"payment": 20000})

        again = admin_client.post(f"/api/transactions/{tx_id}/checkout", json={"payment": 20000})
        assert again.status_code == 400
        assert stock_of(admin_client, kopi["id"]) == 9


class TestRefund:

    def test_refund_restores_stock_and_clears_payment(self, admin_client, kopi, roti):
        """
        SCENARIO: Refund a completed sale of 2 Kopi + 3 Roti
        EXPECTED: status refunded, payment/change null, stock back to start
        """
        sale = make_transaction(
            admin_client,
            status="completed",
            items=[
                {"item_id": kopi["id"], "quantity": 2},
                {"item_id": roti["id"], "quantity": 3},
            ],
            payment=100000,
        )
        tx_id = sale["transaction"]["id"]

        response = admin_client.post(f"/api/transactions/{tx_id}/refund")
        assert response.status_code == 200, response.text
        tx = data_of(response)["transaction"]
        assert tx["status"] == "refunded"
        assert tx["payment"] is None
        assert tx["change"] is None
        assert stock_of(admin_client, kopi["id"]) == 10
        assert stock_of(admin_client, roti["id"]) == 5

    def test_refund_of_draft_rejected(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
        response = admin_client.post(f"/api/transactions/{draft['transaction']['id']}/refund")
        assert response.status_code == 400

    def test_refund_twice_rejected(self, admin_client, kopi):
        sale = make_transaction(
            admin_client,
            status="completed",
            items=[{"item_id": kopi["id"], "quantity": 1}],
            payment=20000,
        )
        tx_id = sale["transaction"]["id"]
        assert admin_client.post(f"/api/transactions/{tx_id}/refund").status_code == 200
        assert admin_client.post(f"/api/transactions/{tx_id}/refund").status_code == 400
        assert stock_of(admin_client, kopi["id"]) == 10


class TestDelete:

    def test_only_drafts_can_be_deleted(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
        sale = make_transaction(
            admin_client,
            status="completed",
            items=[{"item_id": kopi["id"], "quantity": 1}],
            payment=20000,
        )

        assert admin_client.delete(f"/api/transactions/{sale['transaction']['id']}").status_code == 400

        draft_id = draft["transaction"]["id"]
        assert admin_client.delete(f"/api/transactions/{draft_id}").status_code == 200
        assert admin_client.get(f"/api/transactions/{draft_id}").status_code == 404


class TestUpdate:

    def test_discount_on_draft_recomputes_total(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 2}])
        tx_id = draft["transaction"]["id"]

        response = admin_client.patch(
            f"/api/transactions/{tx_id}", json={"discount": 5000, "note": "member", "transaction_type": "takeaway"}
        )
        assert response.status_code == 200, response.text
        tx = data_of(response)["transaction"]
        assert money(tx["total"]) == Decimal("35000")
        assert tx["note"] == "member"
        assert tx["transaction_type"] == "takeaway"

    def test_discount_on_completed_rejected(self, admin_client, kopi):
        sale = make_transaction(
            admin_client,
            status="completed",
            items=[{"item_id": kopi["id"], "quantity": 1}],
            payment=20000,
        )
        response = admin_client.patch(
            f"/api/transactions/{sale['transaction']['id']}", json={"discount": 1000}
        )
        assert response.status_code == 400

    def test_note_on_completed_allowed(self, admin_client, kopi):
        sale = make_transaction(
            admin_client,
            status="completed",
            items=[{"item_id": kopi["id"], "quantity": 1}],
            payment=20000,
        )
        response = admin_client.patch(
            f"/api/transactions/{sale['transaction']['id']}", json={"note": "receipt reprinted"}
        )
        assert response.status_code == 200
        assert data_of(response)["transaction"]["note"] == "receipt reprinted"

    def test_status_change_must_use_checkout(self, admin_client, kopi):
        """
        SCENARIO: PATCH status=completed on a draft
        EXPECTED: HTTP 400, draft untouched, stock untouched
        """
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
        tx_id = draft["transaction"]["id"]

        response = admin_client.patch(f"/api/transactions/{tx_id}", json={"status": "completed"})
        assert response.status_code == 400
        assert data_of(admin_client.get(f"/api/transactions/{tx_id}"))["status"] == "draft"

        restate = admin_client.patch(f"/api/transactions/{tx_id}", json={"status": "draft"})
        assert restate.status_code == 200


class TestReads:

    def _seed(self, client, item):
        make_transaction(client, items=[{"item_id": item["id"], "quantity": 1}])
        sale = make_transaction(
            client, status="completed", items=[{"item_id": item["id"], "quantity": 1}], payment=20000
        )
        refunded = make_transaction(
            client, status="completed", items=[{"item_id": item["id"], "quantity": 1}], payment=20000
        )
        client.post(f"/api/transactions/{refunded['transaction']['id']}/refund")
        return sale

    def test_list_is_newest_first(self, admin_client, kopi):
        self._seed(admin_client, kopi)
        page = data_of(admin_client.get("/api/transactions"))
        assert page["total"] == 3
        ids = [tx["id"] for tx in page["items"]]
        assert ids == sorted(ids, reverse=True)

    def test_history_has_completed_and_refunded(self, admin_client, kopi):
        self._seed(admin_client, kopi)
        page = data_of(admin_client.get("/api/transactions/history"))
        assert page["total"] == 2
        assert {tx["status"] for tx in page["items"]} == {"completed", "refunded"}

    def test_drafts(self, admin_client, kopi):
        self._seed(admin_client, kopi)
        drafts = data_of(admin_client.get("/api/transactions/drafts"))
        assert drafts["total"] == 1
        assert drafts["items"][0]["status"] == "draft"

        refunded = data_of(admin_client.get("/api/transactions/drafts", params={"status": "refunded"}))
        assert refunded["total"] == 1

    def test_date_filter(self, admin_client, kopi):
        self._seed(admin_client, kopi)
        assert data_of(admin_client.get("/api/transactions", params={"date": "2000-01-01"}))["total"] == 0

    def test_cashier_can_sell(self, admin_client, cashier_client, kopi):
        result = make_transaction(
            cashier_client,
            status="completed",
            items=[{"item_id": kopi["id"], "quantity": 1}],
            payment=20000,
        )
        assert result["transaction"]["user_id"] is not None


class TestTransactionAudit:

    def test_lifecycle_is_audited(self, admin_client, kopi):
        draft = make_transaction(admin_client, items=[{"item_id": kopi["id"], "quantity": 1}])
        tx_id = draft["transaction"]["id"]
        admin_client.patch(f"/api/transactions/{tx_id}", json={"note": "table 4"})
        admin_client.post(f"/api/transactions/{tx_id}/checkout", json={"payment": 20000})
        admin_client.post(f"/api/transactions/{tx_id}/refund")

        logs = data_of(
            admin_client.get(
                "/api/audit-logs", params={"entity_type": "transaction", "entity_id": tx_id}
            )
        )
        actions = {row["action"] for row in logs["items"]}
        assert actions == {"create", "update", "checkout", "refund"}

        update = next(row for row in logs["items"] if row["action"] == "update")
        assert update["changes"] == {"note": {"old": None, "new": "table 4"}}
