"""
Pytest fixtures for ledger backend tests.

Provides an in-memory database, a test client and an unlocked gate session.
"""

import pytest

from phoneledger import create_app
from phoneledger.extensions import db
from phoneledger.models import Product, Accessory
from phoneledger.services import auth_service

TEST_PASSWORD = "s3cret-pass"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        # Fast hashing in tests
        'BCRYPT_ROUNDS': 4,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def gate_password(db_session):
    """Set the gate password."""
    auth_service.set_password(TEST_PASSWORD)
    return TEST_PASSWORD


@pytest.fixture(scope='function')
def unlocked_headers(gate_password):
    """Authorization headers for an unlocked session."""
    _, token = auth_service.unlock(gate_password)
    return auth_headers(token)


@pytest.fixture(scope='function')
def phone(db_session):
    """Two identical phones bought at 1000.00 each, in stock for May 2024."""
    product = Product(
        name="iPhone 13 128GB",
        code="AOGZ-202405-0001",
        purchase_price_cents=100000,
        quantity=2,
        is_sold=False,
        month_year="2024-05",
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def case(db_session):
    """Five cases at 25.00 each."""
    accessory = Accessory(name="Clear case", type="case", quantity=5, price_cents=2500)
    db_session.add(accessory)
    db_session.commit()
    return accessory


@pytest.fixture(scope='function')
def cable(db_session):
    accessory = Accessory(name="USB-C cable", type="cable", quantity=1, price_cents=1000)
    db_session.add(accessory)
    db_session.commit()
    return accessory


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory that inserts a product directly."""
    def _make(*, name="Phone", price=50000, quantity=1, month_year="2024-05", code=None, is_sold=False):
        product = Product(
            name=name,
            code=code or f"TEST-{name}-{month_year}",
            purchase_price_cents=price,
            quantity=quantity,
            is_sold=is_sold,
            month_year=month_year,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
