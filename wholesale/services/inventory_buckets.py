"""Inventory bucket manager.

Synopsis:
Single entry point for creating, locking, adjusting and garbage-collecting
inventory buckets. Orders and production requests never touch
ProductInventory.quantity directly; they call adjust_quantity here so the
row lock is taken in one place.

Glossary:
- Bucket: ProductInventory row keyed by (product variation, manufacture date, expiration date).
- Orphan: a bucket that no order and no production request references.
- Acquire: find-or-create by key, tolerant of a concurrent create of the same key.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Order, ProductInventory, ProductionRequest
from ..models.inventory import IDENTITY_FIELDS
from .errors import ErrorCollector, InventoryConsistencyError, InventoryValidationError

logger = logging.getLogger(__name__)


def _key_query(product_variation_id: int, manufacture_date: date, expiration_date: date):
    return ProductInventory.query.filter_by(
        product_variation_id=product_variation_id,
        manufacture_date=manufacture_date,
        expiration_date=expiration_date,
    )


def lock_bucket(bucket_id: int) -> Optional[ProductInventory]:
    return (
        ProductInventory.query.filter_by(id=bucket_id)
        .with_for_update()
        .populate_existing()
        .first()
    )


def validate_bucket_key(product_variation_id, manufacture_date, expiration_date) -> None:
    errors = ErrorCollector()
    if not product_variation_id:
        errors.add("product_variation_id", "can't be blank")
    if manufacture_date is None:
        errors.add("manufacture_date", "can't be blank")
    if expiration_date is None:
        errors.add("expiration_date", "can't be blank")
    if manufacture_date is not None and expiration_date is not None and expiration_date <= manufacture_date:
        errors.add("expiration_date", "must be after the manufacture date")
    errors.raise_if_any(InventoryValidationError)


def find_bucket(product_variation_id: int, manufacture_date: date, expiration_date: date) -> Optional[ProductInventory]:
    return _key_query(product_variation_id, manufacture_date, expiration_date).first()


def get_bucket(bucket_id: int) -> Optional[ProductInventory]:
    return db.session.get(ProductInventory, bucket_id)


def acquire_bucket(product_variation, manufacture_date: date, expiration_date: date) -> ProductInventory:
    """Find-or-create the bucket for a key and return it locked.

    A concurrent insert of the same key loses on the unique constraint; the
    loser re-reads the winner's row instead of failing.
    """
    product_variation_id = getattr(product_variation, "id", product_variation)
    validate_bucket_key(product_variation_id, manufacture_date, expiration_date)

    bucket = _key_query(product_variation_id, manufacture_date, expiration_date).with_for_update().first()
    if bucket is not None:
        return bucket

    bucket = ProductInventory(
        product_variation_id=product_variation_id,
        manufacture_date=manufacture_date,
        expiration_date=expiration_date,
        quantity=0,
    )
    try:
        with db.session.begin_nested():
            db.session.add(bucket)
    except IntegrityError:
        logger.info(
            "Bucket key (%s, %s, %s) created concurrently; re-reading",
            product_variation_id, manufacture_date, expiration_date,
        )
        bucket = _key_query(product_variation_id, manufacture_date, expiration_date).with_for_update().first()
        if bucket is None:
            raise InventoryValidationError(
                {"manufacture_date": ["an inventory bucket with these dates could not be created"]}
            )
        return bucket

    logger.info(
        "Created bucket %s for variation %s (%s..%s)",
        bucket.id, product_variation_id, manufacture_date, expiration_date,
    )
    return bucket


def adjust_quantity(bucket: ProductInventory, delta: int, *, reason: str | None = None) -> ProductInventory:
    """Apply ``delta`` to the bucket's on-hand stock under a row lock. Stock never goes below zero."""
    if not delta:
        return bucket

    locked = lock_bucket(bucket.id)
    if locked is None:
        logger.error("Bucket %s disappeared while still referenced (%s)", bucket.id, reason)
        raise InventoryConsistencyError(f"Inventory bucket {bucket.id} no longer exists")

    new_quantity = (locked.quantity or 0) + int(delta)
    if new_quantity < 0:
        logger.warning(
            "Rejected adjustment of bucket %s by %s (%s): on hand %s",
            locked.id, delta, reason, locked.quantity,
        )
        raise InventoryValidationError(
            {"quantity": [f"must be greater than or equal to 0 (adjustment would leave {new_quantity})"]}
        )

    locked.quantity = new_quantity
    logger.debug("Bucket %s %+d -> %s (%s)", locked.id, delta, new_quantity, reason)
    return locked


def reference_counts(bucket: ProductInventory) -> Dict[str, int]:
    return {
        "orders": Order.query.filter(Order.product_inventory_id == bucket.id).count(),
        "production_requests": ProductionRequest.query.filter(
            ProductionRequest.product_inventory_id == bucket.id
        ).count(),
    }


def release_if_orphaned(bucket: Optional[ProductInventory]) -> bool:
    """Delete the bucket when nothing references it. Returns True when deleted.

    Production requests pin a bucket the same way orders do.
    """
    if bucket is None or bucket.id is None:
        return False

    locked = lock_bucket(bucket.id)
    if locked is None:
        return False

    counts = reference_counts(locked)
    if counts["orders"] or counts["production_requests"]:
        return False

    db.session.delete(locked)
    logger.info("Released orphaned bucket %s", locked.id)
    return True


def update_bucket(bucket: ProductInventory, **changes) -> ProductInventory:
    """Change mutable bucket fields. Identity fields are write-once."""
    errors = ErrorCollector()
    for name in IDENTITY_FIELDS:
        if name in changes and changes[name] != getattr(bucket, name):
            errors.add(name, "cannot be changed after the bucket is created")
    unknown = set(changes) - set(IDENTITY_FIELDS) - {"quantity"}
    for name in sorted(unknown):
        errors.add(name, "is not an inventory bucket attribute")
    if "quantity" in changes:
        quantity = changes["quantity"]
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 0:
            errors.add("quantity", "must be an integer greater than or equal to 0")
    if errors:
        logger.warning("Rejected bucket %s update: %s", bucket.id, errors.errors)
    errors.raise_if_any(InventoryValidationError)

    if "quantity" in changes:
        adjust_quantity(bucket, changes["quantity"] - (bucket.quantity or 0), reason="recount")
    return bucket


def audit_buckets() -> Dict[str, List[ProductInventory]]:
    """Buckets nothing references, and buckets holding negative stock."""
    order_refs = db.select(Order.product_inventory_id).where(Order.product_inventory_id.is_not(None))
    request_refs = db.select(ProductionRequest.product_inventory_id)
    orphaned = (
        ProductInventory.query.filter(
            ProductInventory.id.not_in(order_refs),
            ProductInventory.id.not_in(request_refs),
        )
        .order_by(ProductInventory.id)
        .all()
    )
    negative = ProductInventory.query.filter(ProductInventory.quantity < 0).order_by(ProductInventory.id).all()
    return {"orphaned": orphaned, "negative": negative}
