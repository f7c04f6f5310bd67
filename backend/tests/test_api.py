# Overview: Pytest coverage for the JSON API routes behind an unlocked gate.

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from phoneledger.extensions import db
from phoneledger.models import Debt, Product
from phoneledger.services import (
    accessories_service,
    debts_service,
    products_service,
    sales_service,
)
from phoneledger.services.accounting import current_month_year


class TestProductRoutes:

    def test_create_list_update_delete(self, client, unlocked_headers):
        resp = client.post(
            "/api/products",
            headers=unlocked_headers,
            json={"name": "Pixel 7", "purchase_price_cents": 60000, "quantity": 2},
        )
        assert resp.status_code == 201
        created = resp.get_json()
        assert created["code"].startswith(f"AOGZ-{current_month_year().replace('-', '')}-")
        assert created["month_year"] == current_month_year()

        listed = client.get("/api/products?is_sold=false", headers=unlocked_headers).get_json()
        assert listed["count"] == 1

        resp = client.put(
            f"/api/products/{created['id']}", headers=unlocked_headers, json={"quantity": 0}
        )
        assert resp.status_code == 200
        assert resp.get_json()["is_sold"] is True

        resp = client.delete(f"/api/products/{created['id']}", headers=unlocked_headers)
        assert resp.status_code == 200
        resp = client.get(f"/api/products/{created['id']}", headers=unlocked_headers)
        assert resp.status_code == 404

    @pytest.mark.parametrize("payload", [
        {"purchase_price_cents": 100},
        {"name": "X"},
        {"name": "X", "purchase_price_cents": -1},
        {"name": "X", "purchase_price_cents": 10.5},
        {"name": "X", "purchase_price_cents": 100, "quantity": 0},
        {"name": "X", "purchase_price_cents": 100, "code": "MINE"},
        {"name": "   ", "purchase_price_cents": 100},
    ])
    def test_create_rejects_bad_input(self, client, unlocked_headers, payload):
        resp = client.post("/api/products", headers=unlocked_headers, json=payload)
        assert resp.status_code == 400
        assert db.session.query(Product).count() == 0

    def test_bad_filters(self, client, unlocked_headers):
        assert client.get("/api/products?is_sold=maybe", headers=unlocked_headers).status_code == 400
        assert client.get("/api/products?month_year=2024-13", headers=unlocked_headers).status_code == 400


class TestSaleRoutes:

    def test_record_sale(self, client, unlocked_headers, phone, case):
        resp = client.post("/api/sales", headers=unlocked_headers, json={
            "product_id": phone.id,
            "customer_name": "Ayse",
            "sale_price_cents": 150000,
            "cost_cents": 5000,
            "sale_date": "2024-05-14",
            "imei": "356938035643809",
            "accessories": [{"accessory_id": case.id, "quantity": 1}],
        })
        assert resp.status_code == 201
        sale = resp.get_json()["sale"]
        assert sale["net_profit_cents"] == 42500
        assert sale["product_name"] == "iPhone 13 128GB"
        assert sale["sale_date"] == "2024-05-14"

        product = client.get(f"/api/products/{phone.id}", headers=unlocked_headers).get_json()
        assert product["quantity"] == 1

    def test_insufficient_stock(self, client, unlocked_headers, phone):
        resp = client.post("/api/sales", headers=unlocked_headers, json={
            "product_id": phone.id, "customer_name": "A", "sale_price_cents": 1, "quantity": 5,
        })
        assert resp.status_code == 400
        assert resp.get_json()["details"]["on_hand"] == 2

    def test_unknown_product(self, client, unlocked_headers):
        resp = client.post("/api/sales", headers=unlocked_headers, json={
            "product_id": 4242, "customer_name": "A", "sale_price_cents": 1,
        })
        assert resp.status_code == 404

    def test_sold_product(self, client, unlocked_headers, make_product):
        p = make_product(quantity=0, is_sold=True)
        resp = client.post("/api/sales", headers=unlocked_headers, json={
            "product_id": p.id, "customer_name": "A", "sale_price_cents": 1,
        })
        assert resp.status_code == 409

    def test_accessories_must_be_list(self, client, unlocked_headers, phone):
        resp = client.post("/api/sales", headers=unlocked_headers, json={
            "product_id": phone.id, "customer_name": "A", "sale_price_cents": 1,
            "accessories": {"accessory_id": 1},
        })
        assert resp.status_code == 400

    @pytest.mark.parametrize("entry", [5, "case", None, [1, 1]])
    def test_accessory_entries_must_be_objects(self, client, unlocked_headers, phone, entry):
        resp = client.post("/api/sales", headers=unlocked_headers, json={
            "product_id": phone.id, "customer_name": "A", "sale_price_cents": 1,
            "accessories": [entry],
        })
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "each accessory must be an object"
        db.session.refresh(phone)
        assert phone.quantity == 2

    def test_edit_and_delete(self, client, unlocked_headers, phone):
        sale = sales_service.record_sale(
            product_id=phone.id, customer_name="A", sale_price_cents=150000, cost_cents=5000
        )

        resp = client.put(f"/api/sales/{sale.id}", headers=unlocked_headers,
                          json={"sale_price_cents": 110000})
        assert resp.status_code == 200
        assert resp.get_json()["sale"]["net_profit_cents"] == 5000

        resp = client.put(f"/api/sales/{sale.id}", headers=unlocked_headers, json={"quantity": 2})
        assert resp.status_code == 400

        assert client.delete(f"/api/sales/{sale.id}", headers=unlocked_headers).status_code == 200
        assert client.get(f"/api/sales/{sale.id}", headers=unlocked_headers).status_code == 404


class TestAccessoryAndDebtRoutes:

    def test_accessory_crud(self, client, unlocked_headers):
        resp = client.post("/api/accessories", headers=unlocked_headers, json={
            "name": "Tempered glass", "type": "screen-protector", "quantity": 10, "price_cents": 300,
        })
        assert resp.status_code == 201
        acc = resp.get_json()

        listed = client.get("/api/accessories?type=screen-protector", headers=unlocked_headers).get_json()
        assert listed["count"] == 1
        assert listed["total_value_cents"] == 3000

        resp = client.put(f"/api/accessories/{acc['id']}", headers=unlocked_headers, json={"quantity": 4})
        assert resp.get_json()["quantity"] == 4

        assert client.delete(f"/api/accessories/{acc['id']}", headers=unlocked_headers).status_code == 200

    def test_accessory_type_checked(self, client, unlocked_headers):
        resp = client.post("/api/accessories", headers=unlocked_headers, json={
            "name": "Charger", "type": "charger", "quantity": 1, "price_cents": 300,
        })
        assert resp.status_code == 400
        assert client.get("/api/accessories?type=charger", headers=unlocked_headers).status_code == 400

    def test_debts(self, client, unlocked_headers):
        resp = client.post("/api/debts", headers=unlocked_headers,
                           json={"description": "Rent", "amount_cents": 50000, "date": "2024-05-01"})
        assert resp.status_code == 201
        resp = client.post("/api/debts", headers=unlocked_headers,
                           json={"description": "Supplier", "amount_cents": 20000})
        assert resp.status_code == 201
        assert resp.get_json()["date"] is not None

        listed = client.get("/api/debts", headers=unlocked_headers).get_json()
        assert listed["count"] == 2
        assert listed["total_cents"] == 70000

    def test_debt_amount_positive(self, client, unlocked_headers):
        resp = client.post("/api/debts", headers=unlocked_headers,
                           json={"description": "Nothing", "amount_cents": 0})
        assert resp.status_code == 400
        assert db.session.query(Debt).count() == 0


class TestPeriodRoutes:

    def test_rollover_requires_confirm(self, client, unlocked_headers, make_product):
        make_product()
        resp = client.post("/api/periods/rollover", headers=unlocked_headers,
                           json={"current_month": "2024-05"})
        assert resp.status_code == 400

    def test_preview_then_rollover(self, client, unlocked_headers, make_product):
        p = make_product()

        preview = client.get("/api/periods/rollover?current_month=2024-05",
                             headers=unlocked_headers).get_json()
        assert preview["unsold_count"] == 1

        resp = client.post("/api/periods/rollover", headers=unlocked_headers,
                           json={"confirm": True, "current_month": "2024-05"})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["performed"] is True
        assert body["rolled_count"] == 1

        db.session.refresh(p)
        assert p.month_year == "2024-06"

        periods = client.get("/api/periods", headers=unlocked_headers).get_json()
        assert periods["active"]["month_year"] == "2024-06"

    def test_nothing_to_roll_over(self, client, unlocked_headers):
        resp = client.post("/api/periods/rollover", headers=unlocked_headers, json={"confirm": True})
        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Nothing to roll over"


class TestDashboard:

    def test_figures(self, client, unlocked_headers, phone, case, make_product):
        make_product(name="sold-out", price=70000, quantity=0, is_sold=True)
        sales_service.record_sale(
            product_id=phone.id, customer_name="A", sale_price_cents=150000,
            cost_cents=5000, sale_date=date(2024, 5, 14),
        )
        sales_service.record_sale(
            product_id=phone.id, customer_name="B", sale_price_cents=110000,
            sale_date=date(2024, 4, 30),
        )
        db.session.add(Debt(description="Rent", amount_cents=12345, date=date(2024, 5, 1)))
        db.session.commit()

        stats = client.get("/api/dashboard?month=2024-05", headers=unlocked_headers).get_json()

        assert stats["total_products"] == 2
        assert stats["sold_products"] == 2
        assert stats["stock_value_cents"] == 0
        assert stats["total_profit_cents"] == 45000 + 10000
        assert stats["monthly_profit_cents"] == 45000
        assert stats["accessory_stock_value_cents"] == 5 * 2500
        assert stats["total_debt_cents"] == 12345
        assert [s["customer_name"] for s in stats["recent_sales"]] == ["A", "B"]

    def test_stock_value(self, client, unlocked_headers, phone):
        stats = client.get("/api/dashboard", headers=unlocked_headers).get_json()
        assert stats["stock_value_cents"] == 2 * 100000

    def test_bad_month(self, client, unlocked_headers):
        assert client.get("/api/dashboard?month=may", headers=unlocked_headers).status_code == 400


class TestBackupRoutes:

    def test_export_then_import(self, client, unlocked_headers, phone):
        doc = client.get("/api/backup/export", headers=unlocked_headers).get_json()
        assert doc["version"] == "2.0"

        resp = client.post("/api/backup/import", headers=unlocked_headers, json={"backup": doc})
        assert resp.status_code == 400

        resp = client.post("/api/backup/import", headers=unlocked_headers,
                           json={"confirm": True, "backup": doc})
        assert resp.status_code == 200
        assert resp.get_json()["counts"]["products"] == 1

    def test_import_rejects_invalid(self, client, unlocked_headers, phone):
        resp = client.post("/api/backup/import", headers=unlocked_headers,
                           json={"confirm": True, "backup": {"products": []}})
        assert resp.status_code == 400
        assert db.session.query(Product).count() == 1

    def test_import_rejects_rule_violations(self, client, unlocked_headers, phone):
        doc = client.get("/api/backup/export", headers=unlocked_headers).get_json()
        doc["products"][0]["quantity"] = -3

        resp = client.post("/api/backup/import", headers=unlocked_headers,
                           json={"confirm": True, "backup": doc})
        assert resp.status_code == 400
        assert "quantity" in resp.get_json()["error"]
        db.session.refresh(phone)
        assert phone.quantity == 2


class TestStorageFailures:

    @pytest.mark.parametrize("method,path,service,name", [
        ("put", "/api/products/1", products_service, "update_product"),
        ("delete", "/api/products/1", products_service, "delete_product"),
        ("put", "/api/accessories/1", accessories_service, "update_accessory"),
        ("delete", "/api/accessories/1", accessories_service, "delete_accessory"),
        ("put", "/api/debts/1", debts_service, "update_debt"),
        ("delete", "/api/debts/1", debts_service, "delete_debt"),
        ("put", "/api/sales/1", sales_service, "update_sale"),
        ("delete", "/api/sales/1", sales_service, "delete_sale"),
    ])
    def test_json_500(self, client, unlocked_headers, monkeypatch, method, path, service, name):
        def broken(**kwargs):
            raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

        monkeypatch.setattr(service, name, broken)

        resp = getattr(client, method)(path, headers=unlocked_headers, json={})
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "Internal server error"}


class TestPayloadCoercion:

    def test_non_writable_flag_rejected(self, client, unlocked_headers):
        resp = client.post("/api/products", headers=unlocked_headers,
                           json={"name": "X", "purchase_price_cents": 100, "is_sold": True})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Field not allowed: is_sold"

    @pytest.mark.parametrize("value", ["yesterday", "2024-02-30", 20240501])
    def test_bad_date(self, client, unlocked_headers, value):
        resp = client.post("/api/debts", headers=unlocked_headers,
                           json={"description": "Rent", "amount_cents": 100, "date": value})
        assert resp.status_code == 400
        assert "date" in resp.get_json()["error"]
