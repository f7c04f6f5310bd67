# Overview: Pytest coverage for product intake, code allocation and edits.

import pytest

from phoneledger.extensions import db
from phoneledger.models import Product, ProductCodeSequence
from phoneledger.services import products_service, sales_service
from phoneledger.services.code_service import next_product_code
from phoneledger.validation import NotFoundError


def _create(name="Galaxy S21", price=80000, quantity=None, month_year="2024-05"):
    patch = {"name": name, "purchase_price_cents": price}
    if quantity is not None:
        patch["quantity"] = quantity
    return products_service.create_product(patch=patch, month_year=month_year)


class TestProductCodes:

    def test_codes_follow_monthly_sequence(self, db_session):
        first = _create()
        second = _create()
        assert first["code"] == "AOGZ-202405-0001"
        assert second["code"] == "AOGZ-202405-0002"

    def test_sequence_restarts_each_month(self, db_session):
        _create(month_year="2024-05")
        june = _create(month_year="2024-06")
        assert june["code"] == "AOGZ-202406-0001"

    def test_existing_codes_are_skipped(self, make_product):
        make_product(name="restored", code="AOGZ-202405-0001")
        created = _create()
        assert created["code"] == "AOGZ-202405-0002"

    def test_many_codes_are_unique(self, db_session):
        codes = {_create(name=f"p{i}")["code"] for i in range(25)}
        assert len(codes) == 25

    def test_prefix_from_config(self, app, db_session):
        app.config["PRODUCT_CODE_PREFIX"] = "SHOP"
        try:
            code = next_product_code("2024-07")
        finally:
            app.config["PRODUCT_CODE_PREFIX"] = "AOGZ"
            db.session.rollback()
        assert code == "SHOP-202407-0001"

    def test_sequence_row_advances(self, db_session):
        _create()
        _create()
        seq = db.session.query(ProductCodeSequence).filter_by(month_year="2024-05").one()
        assert seq.next_number == 3


class TestCreateProduct:

    def test_defaults(self, db_session):
        created = _create()
        assert created["quantity"] == 1
        assert created["is_sold"] is False
        assert created["month_year"] == "2024-05"
        assert created["purchase_price_cents"] == 80000

    def test_defaults_to_current_month(self, db_session):
        from phoneledger.services.accounting import current_month_year

        created = products_service.create_product(patch={"name": "X", "purchase_price_cents": 1})
        assert created["month_year"] == current_month_year()

    def test_listed_newest_first_with_filters(self, db_session):
        old = _create(name="old", month_year="2024-04")
        new = _create(name="new", month_year="2024-05")

        listed = products_service.list_products()
        assert [p["id"] for p in listed["items"]] == [new["id"], old["id"]]

        may = products_service.list_products(month_year="2024-05")
        assert may["count"] == 1
        assert may["items"][0]["name"] == "new"

        assert products_service.list_products(is_sold=True)["count"] == 0
        assert products_service.list_products(is_sold=False)["count"] == 2


class TestUpdateProduct:

    def test_quantity_zero_marks_sold(self, phone):
        updated = products_service.update_product(product_id=phone.id, patch={"quantity": 0})
        assert updated["is_sold"] is True

    def test_restock_clears_sold(self, make_product):
        p = make_product(quantity=0, is_sold=True)
        updated = products_service.update_product(product_id=p.id, patch={"quantity": 3})
        assert updated["is_sold"] is False
        assert updated["quantity"] == 3

    def test_code_and_month_are_not_editable(self, phone):
        updated = products_service.update_product(
            product_id=phone.id,
            patch={"code": "HACK", "month_year": "2020-01", "name": "iPhone 13 Pro"},
        )
        assert updated["code"] == "AOGZ-202405-0001"
        assert updated["month_year"] == "2024-05"
        assert updated["name"] == "iPhone 13 Pro"

    def test_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            products_service.update_product(product_id=999, patch={"name": "x"})


class TestDeleteProduct:

    def test_hard_delete_keeps_sales(self, phone):
        sale = sales_service.record_sale(
            product_id=phone.id, customer_name="Ali", sale_price_cents=120000
        )
        products_service.delete_product(product_id=phone.id)

        assert db.session.get(Product, phone.id) is None
        listed = sales_service.list_sales()
        assert listed["items"][0]["id"] == sale.id
        assert listed["items"][0]["product_name"] == "Unknown product"

    def test_missing_product(self, db_session):
        with pytest.raises(NotFoundError):
            products_service.delete_product(product_id=999)
