"""
Pytest fixtures for gadgetdesk backend tests.

Provides the test app (in-memory SQLite), a per-test table wipe, a staff
user and ready-made Authorization headers.
"""

import pytest
from datetime import date

from gadgetdesk import create_app
from gadgetdesk.extensions import db
from gadgetdesk.models import InventoryUnit, InventoryAccessory
from gadgetdesk.services.auth_service import create_user

STAFF_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    # Clear all data but keep schema
    meta = db.metadata
    for table in reversed(meta.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()

    yield db.session

    # Cleanup after test
    db.session.rollback()


@pytest.fixture(scope='function')
def staff(db_session):
    """Staff user whose full name is printed on sales."""
    return create_user(
        username="rina",
        email="rina@toko.local",
        password=STAFF_PASSWORD,
        full_name="Rina Kasir",
        rounds=4,
    )


@pytest.fixture(scope='function')
def auth_headers(client, staff):
    token = get_auth_token(client, staff.username, STAFF_PASSWORD)
    assert token, "login failed in fixture"
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def ready_unit(db_session):
    unit = make_unit(serial_number="SN1", imei="350000000000001", cost=8_000_000)
    db_session.add(unit)
    db_session.commit()
    return unit


@pytest.fixture(scope='function')
def case_stock(db_session):
    """Accessory AC1 with five pieces on hand."""
    accessory = make_accessory(sku="AC1", quantity=5, cost=50_000)
    db_session.add(accessory)
    db_session.commit()
    return accessory


def make_unit(**overrides) -> InventoryUnit:
    values = dict(
        product_name="iPhone 13",
        storage="128GB",
        color="Midnight",
        warranty="Resmi iBox",
        origin="ID",
        cost=0,
        intake_date=date(2024, 1, 10),
        status="READY",
    )
    values.update(overrides)
    return InventoryUnit(**values)


def make_accessory(**overrides) -> InventoryAccessory:
    values = dict(
        product_name="Silicone Case",
        color="Black",
        cost=50_000,
        quantity=1,
        intake_date=date(2024, 1, 10),
    )
    values.update(overrides)
    return InventoryAccessory(**values)


def sale_payload(**overrides) -> dict:
    payload = {
        "invoice_id": "INV-001",
        "kind": "UNIT",
        "reference_key": "SN1",
        "sale_date": "2024-02-01",
        "product_name": "iPhone 13",
        "sell_price": 9_000_000,
        "buyer_name": "Budi",
    }
    payload.update(overrides)
    return payload


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None
