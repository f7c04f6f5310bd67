# Overview: Pytest coverage for whole-store backup export and import.

from datetime import date

import pytest

from phoneledger.extensions import db
from phoneledger.models import Accessory, Debt, MonthlyPeriod, Product, Sale
from phoneledger.services import backup_service, periods_service, sales_service
from phoneledger.services.backup_service import BackupFormatError


@pytest.fixture
def populated(phone, case, db_session):
    sales_service.record_sale(
        product_id=phone.id,
        customer_name="Zeynep",
        sale_price_cents=150000,
        cost_cents=5000,
        sale_date=date(2024, 5, 14),
        accessories=[{"accessory_id": case.id, "quantity": 1}],
    )
    periods_service.ensure_period("2024-05")
    db_session.add(Debt(description="Supplier", amount_cents=30000, date=date(2024, 5, 2)))
    db_session.commit()


class TestExport:

    def test_document_shape(self, populated):
        doc = backup_service.export_backup()

        assert doc["version"] == "2.0"
        assert doc["exportDate"].endswith("Z")
        assert len(doc["products"]) == 1
        assert len(doc["sales"]) == 1
        assert len(doc["monthlyData"]) == 1
        assert len(doc["debts"]) == 1
        assert len(doc["accessories"]) == 1
        assert doc["sales"][0]["accessories"] == [
            {"accessory_id": doc["accessories"][0]["id"], "quantity": 1, "unit_price_cents": 2500}
        ]


class TestImport:

    def test_round_trip_restores_everything(self, populated):
        doc = backup_service.export_backup()

        # Change the store after exporting
        db.session.query(Debt).delete()
        db.session.add(Product(name="extra", code="X-1", purchase_price_cents=1, quantity=1,
                               is_sold=False, month_year="2024-05"))
        db.session.commit()

        counts = backup_service.import_backup(doc)

        assert counts == {"products": 1, "sales": 1, "monthlyData": 1, "debts": 1, "accessories": 1}
        again = backup_service.export_backup()
        for section in ("products", "sales", "monthlyData", "debts", "accessories"):
            assert again[section] == doc[section]

    def test_ids_are_preserved(self, populated):
        doc = backup_service.export_backup()
        sale_id = doc["sales"][0]["id"]
        product_id = doc["products"][0]["id"]

        backup_service.import_backup(doc)

        sale = db.session.get(Sale, sale_id)
        assert sale.product_id == product_id
        assert sale.net_profit_cents == 45000 - 2500

    def test_optional_sections_default_to_empty(self, populated):
        doc = backup_service.export_backup()
        del doc["debts"]
        del doc["accessories"]

        counts = backup_service.import_backup(doc)

        assert counts["debts"] == 0
        assert counts["accessories"] == 0
        assert db.session.query(Debt).count() == 0
        assert db.session.query(Accessory).count() == 0
        assert db.session.query(Product).count() == 1

    @pytest.mark.parametrize("section", ["products", "sales", "monthlyData"])
    def test_missing_required_section_changes_nothing(self, populated, section):
        doc = backup_service.export_backup()
        del doc[section]

        with pytest.raises(BackupFormatError) as exc:
            backup_service.import_backup(doc)
        assert section in str(exc.value)

        assert db.session.query(Product).count() == 1
        assert db.session.query(Sale).count() == 1
        assert db.session.query(MonthlyPeriod).count() == 1
        assert db.session.query(Debt).count() == 1

    def test_malformed_row_changes_nothing(self, populated):
        doc = backup_service.export_backup()
        doc["products"][0]["purchase_price_cents"] = "lots"

        with pytest.raises(BackupFormatError):
            backup_service.import_backup(doc)
        assert db.session.query(Sale).count() == 1

    @pytest.mark.parametrize("section,key,value", [
        ("accessories", "type", "charger"),
        ("accessories", "quantity", -1),
        ("accessories", "price_cents", -100),
        ("accessories", "name", "   "),
        ("products", "month_year", "garbage"),
        ("products", "month_year", "2024-13"),
        ("products", "quantity", -3),
        ("products", "purchase_price_cents", -1),
        ("products", "name", ""),
        ("products", "code", "X" * 40),
        ("monthlyData", "month_year", "May 2024"),
        ("debts", "amount_cents", 0),
        ("debts", "description", " "),
        ("sales", "quantity", 0),
        ("sales", "sale_price_cents", -5),
        ("sales", "customer_name", ""),
    ])
    def test_rule_violations_change_nothing(self, populated, section, key, value):
        doc = backup_service.export_backup()
        doc[section][0][key] = value

        with pytest.raises(BackupFormatError) as exc:
            backup_service.import_backup(doc)
        assert f"{section}[0]" in str(exc.value)

        assert db.session.query(Product).count() == 1
        assert db.session.query(Accessory).one().type == "case"
        assert db.session.query(Debt).count() == 1

    def test_bad_sale_accessory_line(self, populated):
        doc = backup_service.export_backup()
        doc["sales"][0]["accessories"][0]["quantity"] = 0

        with pytest.raises(BackupFormatError) as exc:
            backup_service.import_backup(doc)
        assert "sales[0].accessories[0]" in str(exc.value)
        assert db.session.query(Sale).count() == 1

    def test_duplicate_ids_rejected(self, populated):
        doc = backup_service.export_backup()
        twin = dict(doc["debts"][0], description="Second supplier")
        doc["debts"].append(twin)

        with pytest.raises(BackupFormatError) as exc:
            backup_service.import_backup(doc)
        assert "duplicate id" in str(exc.value)
        assert db.session.query(Debt).count() == 1

    def test_duplicate_product_codes_rejected(self, populated):
        doc = backup_service.export_backup()
        twin = dict(doc["products"][0], id=doc["products"][0]["id"] + 100)
        doc["products"].append(twin)

        with pytest.raises(BackupFormatError) as exc:
            backup_service.import_backup(doc)
        assert "duplicate code" in str(exc.value)
        assert db.session.query(Product).count() == 1

    @pytest.mark.parametrize("document", [None, [], "backup", {"products": {"id": 1}, "sales": [], "monthlyData": []}])
    def test_not_a_backup(self, db_session, document):
        with pytest.raises(BackupFormatError):
            backup_service.parse_backup(document)

    def test_empty_backup_clears_store(self, populated):
        counts = backup_service.import_backup({"products": [], "sales": [], "monthlyData": []})
        assert sum(counts.values()) == 0
        assert db.session.query(Product).count() == 0
        assert db.session.query(Sale).count() == 0
