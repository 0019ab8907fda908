"""
Pytest configuration and shared fixtures for order engine tests.
"""
import os
import tempfile
from datetime import date
from types import SimpleNamespace

import pytest

from wholesale import create_app
from wholesale.extensions import db
from wholesale.models import (
    Buyer,
    Product,
    ProductionZone,
    ProductVariation,
    ShippingMethod,
    ShippingOrganization,
    ShippingReceptacle,
)

SHIPPING_DATE = date(2026, 11, 2)
MANUFACTURE_DATE = date(2026, 10, 30)
EXPIRATION_DATE = date(2026, 11, 29)


@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp()

    app = create_app({
        'TESTING': True,
        'DATABASE_URL': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()

    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def app_context(app):
    """Provide an application context for tests that need it."""
    with app.app_context():
        yield


@pytest.fixture
def reference_data(app_context):
    """One buyer, carrier, receptacle, product and variation with round-number rates."""
    buyer = Buyer(
        name='Harbor Market',
        handle='harbor',
        handling_cost=2.0,
        optional_cost=1.0,
        daily_cost=0.0,
        commission_percentage=0.1,
    )
    organization = ShippingOrganization(name='Coastal Freight', handle='coastal')
    method = ShippingMethod(
        shipping_organization=organization,
        name='Coastal Ground',
        handle='ground',
        per_shipping_receptacle_cost=3.0,
        per_freight_unit_cost=10.0,
    )
    receptacle = ShippingReceptacle(
        name='Standard Crate',
        handle='crate',
        cost=50.0,
        default_freight_bundle_quantity=3,
        interior_height=10, interior_width=10, interior_depth=10,
        exterior_height=12, exterior_width=12, exterior_depth=12,
    )
    product = Product(name='Sea Salt', units='g', exterior_height=2, exterior_width=2, exterior_depth=2)
    zone = ProductionZone(name='North Kitchen')
    variation = ProductVariation(
        product=product,
        default_shipping_receptacle=receptacle,
        name='Jar',
        handle='salt-jar',
        primary_content_volume=250.0,
        shelf_life=30,
        production_zones=[zone],
    )
    db.session.add_all([buyer, organization, method, receptacle, product, zone, variation])
    db.session.commit()

    return SimpleNamespace(
        buyer=buyer,
        shipping_method=method,
        receptacle=receptacle,
        product=product,
        zone=zone,
        variation=variation,
    )


@pytest.fixture
def order_attributes(reference_data):
    """Factory for valid order attributes; keyword arguments override the defaults."""
    def _build(**overrides):
        attributes = {
            'buyer_id': reference_data.buyer.id,
            'product_variation_id': reference_data.variation.id,
            'shipping_receptacle_id': reference_data.receptacle.id,
            'shipping_method_id': reference_data.shipping_method.id,
            'item_quantity': 100,
            'receptacle_quantity': 10,
            'freight_quantity': 1,
            'sale_price_per_item': 4.0,
            'arrival_date': date(2026, 11, 4),
            'shipping_date': SHIPPING_DATE,
            'manufacture_date': MANUFACTURE_DATE,
            'expiration_date': EXPIRATION_DATE,
        }
        attributes.update(overrides)
        return attributes

    return _build
