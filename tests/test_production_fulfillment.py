from datetime import date

import pytest

from wholesale.extensions import db
from wholesale.models import Product, ProductInventory, ProductionRequest, ProductVariation
from wholesale.models.types import ProductionRequestStatus
from wholesale.services.errors import ProductionRequestValidationError
from wholesale.services.inventory_buckets import acquire_bucket
from wholesale.services.order_lifecycle import create_order, update_order
from wholesale.services.production_fulfillment import (
    already_requested,
    convert_outstanding_for_date,
    convert_outstanding_orders_to_requests,
    create_production_request,
    destroy_production_request,
    outstanding_order_demand,
    update_production_request,
)

MADE = date(2026, 10, 30)
EXPIRES = date(2026, 11, 29)


def _empty_bucket(reference_data):
    bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
    db.session.commit()
    return bucket


class TestProductionRequests:
    def test_defaults_come_from_the_bucket_variation(self, reference_data):
        bucket = _empty_bucket(reference_data)
        production_request = create_production_request({'product_inventory_id': bucket.id, 'request_quantity': 40})

        assert production_request.product_variation_id == reference_data.variation.id
        assert production_request.production_zone_id == reference_data.zone.id
        assert production_request.shipping_receptacle_id == reference_data.receptacle.id
        assert production_request.status == ProductionRequestStatus.PENDING
        assert production_request.quantity == -40

    def test_can_target_a_key_instead_of_a_bucket(self, reference_data):
        production_request = create_production_request({
            'product_variation_id': reference_data.variation.id,
            'manufacture_date': '2026-10-30',
            'expiration_date': '2026-11-29',
            'request_quantity': 12,
        })
        assert production_request.product_inventory.manufacture_date == MADE

    def test_fulfilment_moves_bucket_stock(self, reference_data):
        bucket = _empty_bucket(reference_data)
        production_request = create_production_request({'product_inventory_id': bucket.id, 'request_quantity': 30})
        assert db.session.get(ProductInventory, bucket.id).quantity == 0

        update_production_request(production_request, {'fulfilled_quantity': 30, 'status': 'completed'})
        assert db.session.get(ProductInventory, bucket.id).quantity == 30

        update_production_request(production_request, {'fulfilled_quantity': 24})
        assert db.session.get(ProductInventory, bucket.id).quantity == 24

    def test_created_fulfilled_adds_stock(self, reference_data):
        bucket = _empty_bucket(reference_data)
        create_production_request({'product_inventory_id': bucket.id, 'request_quantity': 10, 'fulfilled_quantity': 10})
        assert db.session.get(ProductInventory, bucket.id).quantity == 10

    def test_fulfilment_cannot_be_negative(self, reference_data):
        bucket = _empty_bucket(reference_data)
        production_request = create_production_request({'product_inventory_id': bucket.id, 'request_quantity': 10})

        with pytest.raises(ProductionRequestValidationError) as excinfo:
            update_production_request(production_request, {'fulfilled_quantity': -1})
        assert 'fulfilled_quantity' in excinfo.value.errors

    def test_bucket_cannot_be_reassigned(self, reference_data):
        bucket = _empty_bucket(reference_data)
        production_request = create_production_request({'product_inventory_id': bucket.id, 'request_quantity': 10})

        with pytest.raises(ProductionRequestValidationError) as excinfo:
            update_production_request(production_request, {'product_inventory_id': 5})
        assert 'product_inventory_id' in excinfo.value.errors

    def test_variation_must_match_bucket(self, reference_data):
        other = ProductVariation(
            product=Product(name='Pepper'),
            default_shipping_receptacle=reference_data.receptacle,
            name='Tin',
            handle='pepper-tin',
            primary_content_volume=100.0,
        )
        db.session.add(other)
        db.session.commit()
        bucket = _empty_bucket(reference_data)

        with pytest.raises(ProductionRequestValidationError) as excinfo:
            create_production_request({
                'product_inventory_id': bucket.id,
                'product_variation_id': other.id,
                'request_quantity': 10,
            })
        assert 'product_variation_id' in excinfo.value.errors
        assert ProductionRequest.query.count() == 0

    def test_bucket_or_key_is_required(self, reference_data):
        with pytest.raises(ProductionRequestValidationError) as excinfo:
            create_production_request({'request_quantity': 10})
        assert 'product_inventory_id' in excinfo.value.errors

    def test_destroy_keeps_stock_and_releases_orphan(self, reference_data):
        bucket = _empty_bucket(reference_data)
        bucket_id = bucket.id
        production_request = create_production_request({
            'product_inventory_id': bucket_id, 'request_quantity': 10, 'fulfilled_quantity': 10,
        })

        snapshot = destroy_production_request(production_request)

        assert snapshot['fulfilled_quantity'] == 10
        assert db.session.get(ProductInventory, bucket_id) is None

    def test_destroy_keeps_bucket_with_orders(self, reference_data, order_attributes):
        order = create_order(order_attributes())
        production_request = create_production_request({
            'product_inventory_id': order.product_inventory_id, 'request_quantity': 10, 'fulfilled_quantity': 10,
        })

        destroy_production_request(production_request)

        bucket = db.session.get(ProductInventory, order.product_inventory_id)
        assert bucket.quantity == 10


class TestConvertOutstandingOrders:
    def test_requests_uncovered_demand(self, order_attributes):
        first = create_order(order_attributes(item_quantity=20, receptacle_quantity=2))
        create_order(order_attributes(item_quantity=15, receptacle_quantity=3))
        bucket = first.product_inventory
        create_production_request({'product_inventory_id': bucket.id, 'request_quantity': 25})

        production_request = convert_outstanding_orders_to_requests(bucket)

        assert production_request.request_quantity == 10
        assert production_request.product_inventory_id == bucket.id
        assert ProductionRequest.query.count() == 2

    def test_covered_demand_creates_nothing(self, order_attributes):
        order = create_order(order_attributes(item_quantity=20, receptacle_quantity=2))
        create_production_request({'product_inventory_id': order.product_inventory_id, 'request_quantity': 20})

        assert convert_outstanding_orders_to_requests(order.product_inventory) is None
        assert ProductionRequest.query.count() == 1

    def test_over_production_becomes_negative_request(self, order_attributes):
        order = create_order(order_attributes(item_quantity=10, receptacle_quantity=1))
        create_production_request({'product_inventory_id': order.product_inventory_id, 'request_quantity': 25})

        production_request = convert_outstanding_orders_to_requests(order.product_inventory)
        assert production_request.request_quantity == -15

    def test_fulfilled_beyond_request_counts(self, order_attributes):
        order = create_order(order_attributes(item_quantity=40, receptacle_quantity=4))
        create_production_request({
            'product_inventory_id': order.product_inventory_id, 'request_quantity': 20, 'fulfilled_quantity': 30,
        })
        assert already_requested(order.product_inventory) == 30
        assert convert_outstanding_orders_to_requests(order.product_inventory).request_quantity == 10

    def test_shipped_template_and_completed_are_ignored(self, order_attributes):
        order = create_order(order_attributes(item_quantity=20, receptacle_quantity=2))
        bucket = order.product_inventory
        create_order(order_attributes(item_quantity=50, receptacle_quantity=5, is_order_template=True))
        shipped = create_order(order_attributes(item_quantity=5, receptacle_quantity=1))
        create_production_request({
            'product_inventory_id': bucket.id, 'request_quantity': 5, 'fulfilled_quantity': 5, 'status': 'completed',
        })
        update_order(shipped, {'status': 'shipped'})

        assert outstanding_order_demand(bucket) == 20
        assert already_requested(bucket) == 0

    def test_convert_for_date(self, reference_data, order_attributes):
        create_order(order_attributes(item_quantity=20, receptacle_quantity=2))
        create_order(order_attributes(
            item_quantity=30, receptacle_quantity=3,
            manufacture_date=date(2026, 10, 31), expiration_date=date(2026, 11, 30),
        ))
        create_order(order_attributes(
            item_quantity=7, receptacle_quantity=1, shipping_date=date(2026, 11, 3),
            manufacture_date=date(2026, 11, 1), expiration_date=date(2026, 12, 1),
        ))

        created = convert_outstanding_for_date(date(2026, 11, 2))

        assert sorted(production_request.request_quantity for production_request in created) == [20, 30]
        assert convert_outstanding_for_date(date(2026, 11, 2)) == []

    def test_convert_for_date_filters_by_product(self, reference_data, order_attributes):
        create_order(order_attributes(item_quantity=20, receptacle_quantity=2))
        assert convert_outstanding_for_date(date(2026, 11, 2), product_id=reference_data.product.id + 1) == []
        assert len(convert_outstanding_for_date(date(2026, 11, 2), product_id=reference_data.product.id)) == 1
