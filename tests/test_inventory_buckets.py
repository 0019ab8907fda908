from datetime import date

import pytest

from wholesale.extensions import db
from wholesale.models import ProductInventory
from wholesale.services.errors import InventoryValidationError
from wholesale.services.inventory_buckets import (
    acquire_bucket,
    adjust_quantity,
    audit_buckets,
    find_bucket,
    release_if_orphaned,
    update_bucket,
)
from wholesale.services.order_lifecycle import create_order
from wholesale.services.production_fulfillment import create_production_request

MADE = date(2026, 10, 30)
EXPIRES = date(2026, 11, 29)


def test_acquire_creates_then_reuses(reference_data):
    first = acquire_bucket(reference_data.variation, MADE, EXPIRES)
    db.session.commit()
    second = acquire_bucket(reference_data.variation.id, MADE, EXPIRES)

    assert first.id == second.id
    assert first.quantity == 0
    assert ProductInventory.query.count() == 1


def test_acquire_distinguishes_dates(reference_data):
    first = acquire_bucket(reference_data.variation, MADE, EXPIRES)
    other = acquire_bucket(reference_data.variation, MADE, date(2026, 12, 1))
    assert first.id != other.id


def test_acquire_rejects_inverted_dates(reference_data):
    with pytest.raises(InventoryValidationError) as excinfo:
        acquire_bucket(reference_data.variation, EXPIRES, MADE)
    assert 'expiration_date' in excinfo.value.errors


def test_acquire_requires_dates(reference_data):
    with pytest.raises(InventoryValidationError) as excinfo:
        acquire_bucket(reference_data.variation, None, EXPIRES)
    assert excinfo.value.errors['manufacture_date'] == ["can't be blank"]


def test_adjust_quantity_moves_stock(reference_data):
    bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
    adjust_quantity(bucket, 30, reason='test')
    adjust_quantity(bucket, -12, reason='test')
    db.session.commit()
    assert db.session.get(ProductInventory, bucket.id).quantity == 18


def test_adjust_quantity_refuses_negative_stock(reference_data):
    bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
    adjust_quantity(bucket, 5)
    with pytest.raises(InventoryValidationError) as excinfo:
        adjust_quantity(bucket, -6)
    assert 'quantity' in excinfo.value.errors
    assert bucket.quantity == 5


class TestIdentityIsWriteOnce:
    def test_update_bucket_rejects_identity_change(self, reference_data):
        bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
        db.session.commit()

        with pytest.raises(InventoryValidationError) as excinfo:
            update_bucket(bucket, manufacture_date=date(2026, 10, 1))
        assert 'manufacture_date' in excinfo.value.errors

        db.session.rollback()
        reloaded = db.session.get(ProductInventory, bucket.id)
        assert reloaded.manufacture_date == MADE

    def test_direct_column_write_is_rejected_on_flush(self, reference_data):
        bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
        db.session.commit()

        bucket.expiration_date = date(2026, 12, 31)
        with pytest.raises(InventoryValidationError):
            db.session.flush()
        db.session.rollback()
        assert db.session.get(ProductInventory, bucket.id).expiration_date == EXPIRES

    def test_quantity_recount_is_allowed(self, reference_data):
        bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
        update_bucket(bucket, quantity=40)
        db.session.commit()
        assert db.session.get(ProductInventory, bucket.id).quantity == 40

    def test_unknown_field_is_rejected(self, reference_data):
        bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
        with pytest.raises(InventoryValidationError) as excinfo:
            update_bucket(bucket, color='red')
        assert 'color' in excinfo.value.errors


def test_release_if_orphaned_deletes_unreferenced_bucket(reference_data):
    bucket = acquire_bucket(reference_data.variation, MADE, EXPIRES)
    db.session.commit()

    assert release_if_orphaned(bucket) is True
    db.session.commit()
    assert find_bucket(reference_data.variation.id, MADE, EXPIRES) is None


def test_release_keeps_bucket_referenced_by_order(order_attributes):
    order = create_order(order_attributes())
    assert release_if_orphaned(order.product_inventory) is False


def test_production_request_pins_bucket(reference_data):
    production_request = create_production_request({
        'product_variation_id': reference_data.variation.id,
        'manufacture_date': MADE,
        'expiration_date': EXPIRES,
        'request_quantity': 10,
    })
    assert release_if_orphaned(production_request.product_inventory) is False


def test_audit_reports_orphans(reference_data, order_attributes):
    create_order(order_attributes())
    lonely = acquire_bucket(reference_data.variation, MADE, date(2027, 1, 1))
    db.session.commit()

    report = audit_buckets()
    assert [bucket.id for bucket in report['orphaned']] == [lonely.id]
    assert report['negative'] == []
