"""Production fulfillment tracker.

Synopsis:
Production requests turn planned production into bucket stock. Every change
to a request's fulfilled quantity moves the bound bucket's on-hand quantity
by the same delta in the same transaction. Outstanding demand (unshipped,
non-template orders) that existing requests do not cover becomes a new request.

Glossary:
- Order demand: summed item quantity of a bucket's unshipped real orders.
- Already requested: summed max(request, fulfilled) of a bucket's open requests.
- Remainder: order demand minus already requested; negative means over-production.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import func

from ..extensions import db
from ..models import (
    Order,
    OrderTemplate,
    ProductInventory,
    ProductionRequest,
    ProductionZone,
    ProductVariation,
    ShippingReceptacle,
)
from ..models.types import OrderStatus, ProductionRequestStatus, coerce_enum
from ..utils.coercion import to_date, to_int
from .errors import ErrorCollector, ProductionRequestValidationError, ValidationFailed
from .inventory_buckets import acquire_bucket, adjust_quantity, get_bucket, lock_bucket, release_if_orphaned

logger = logging.getLogger(__name__)

CREATE_FIELDS = {
    'product_inventory_id', 'product_variation_id', 'production_zone_id', 'shipping_receptacle_id',
    'request_quantity', 'fulfilled_quantity', 'status', 'manufacture_date', 'expiration_date',
}
UPDATE_FIELDS = {'production_zone_id', 'shipping_receptacle_id', 'request_quantity', 'fulfilled_quantity', 'status'}
_DATE_FIELDS = {'manufacture_date', 'expiration_date'}


def coerce_request_attributes(attributes: Mapping[str, Any] | None, allowed) -> Dict[str, Any]:
    errors = ErrorCollector()
    coerced: Dict[str, Any] = {}
    for key, value in (attributes or {}).items():
        if key not in allowed:
            errors.add(key, 'cannot be set on a production request here')
            continue
        try:
            if key == 'status':
                coerced[key] = coerce_enum(ProductionRequestStatus, value) if value is not None else None
            elif key in _DATE_FIELDS:
                coerced[key] = to_date(value)
            else:
                coerced[key] = to_int(value)
        except ValueError as exc:
            if key == 'status':
                errors.add(key, f"must be one of {', '.join(s.name.lower() for s in ProductionRequestStatus)}")
            else:
                errors.add(key, str(exc))
    errors.raise_if_any(ProductionRequestValidationError)
    return coerced


def get_production_request(request_id: int) -> Optional[ProductionRequest]:
    return db.session.get(ProductionRequest, request_id)


def _lock_request(production_request: ProductionRequest) -> ProductionRequest:
    locked = (
        ProductionRequest.query.filter_by(id=production_request.id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if locked is None:
        raise ProductionRequestValidationError({'id': ['production request does not exist']})
    return locked


def derive_defaults(production_request: ProductionRequest, bucket: ProductInventory) -> None:
    """Fill variation, zone and receptacle from the bucket's variation where not given."""
    variation = bucket.product_variation
    if production_request.product_variation_id is None:
        production_request.product_variation_id = bucket.product_variation_id
    if production_request.production_zone_id is None and variation is not None and variation.production_zones:
        production_request.production_zone_id = variation.production_zones[0].id
    if production_request.shipping_receptacle_id is None and variation is not None:
        production_request.shipping_receptacle_id = variation.default_shipping_receptacle_id


def validate_production_request(production_request: ProductionRequest, bucket: ProductInventory) -> None:
    errors = ErrorCollector()
    if production_request.request_quantity is None:
        errors.add('request_quantity', "can't be blank")
    if production_request.fulfilled_quantity is None:
        errors.add('fulfilled_quantity', "can't be blank")
    elif production_request.fulfilled_quantity < 0:
        errors.add('fulfilled_quantity', 'must be greater than or equal to 0')
    if production_request.status is None:
        errors.add('status', "can't be blank")

    if production_request.product_variation_id is None:
        errors.add('product_variation_id', "can't be blank")
    elif production_request.product_variation_id != bucket.product_variation_id:
        errors.add('product_variation_id', "must match the inventory bucket's product variation")
    elif db.session.get(ProductVariation, production_request.product_variation_id) is None:
        errors.add('product_variation_id', 'does not exist')

    if production_request.production_zone_id is None:
        errors.add('production_zone_id', "can't be blank")
    elif db.session.get(ProductionZone, production_request.production_zone_id) is None:
        errors.add('production_zone_id', 'does not exist')

    if (
        production_request.shipping_receptacle_id is not None
        and db.session.get(ShippingReceptacle, production_request.shipping_receptacle_id) is None
    ):
        errors.add('shipping_receptacle_id', 'does not exist')
    errors.raise_if_any(ProductionRequestValidationError)


def _resolve_bucket(data: Dict[str, Any]) -> ProductInventory:
    bucket_id = data.pop('product_inventory_id', None)
    manufacture_date = data.pop('manufacture_date', None)
    expiration_date = data.pop('expiration_date', None)

    if bucket_id is not None:
        bucket = get_bucket(bucket_id)
        if bucket is None:
            raise ProductionRequestValidationError({'product_inventory_id': ['does not exist']})
        return bucket
    if data.get('product_variation_id') is not None and (manufacture_date or expiration_date):
        return acquire_bucket(data['product_variation_id'], manufacture_date, expiration_date)
    raise ProductionRequestValidationError(
        {'product_inventory_id': ["can't be blank without a product variation and dates"]}
    )


def _build_request(bucket: ProductInventory, data: Mapping[str, Any]) -> ProductionRequest:
    production_request = ProductionRequest(
        request_quantity=0,
        fulfilled_quantity=0,
        status=ProductionRequestStatus.PENDING,
    )
    for key, value in data.items():
        setattr(production_request, key, value)
    derive_defaults(production_request, bucket)
    validate_production_request(production_request, bucket)

    production_request.product_inventory = bucket
    db.session.add(production_request)
    db.session.flush()

    if production_request.fulfilled_quantity:
        adjust_quantity(
            bucket,
            production_request.fulfilled_quantity,
            reason=f"production request {production_request.id} created fulfilled",
        )
    logger.info(
        "Created production request %s on bucket %s for %s",
        production_request.id, bucket.id, production_request.request_quantity,
    )
    return production_request


def create_production_request(attributes: Mapping[str, Any]) -> ProductionRequest:
    """Create a request against a bucket id, or against a (variation, dates) key."""
    try:
        data = coerce_request_attributes(attributes, CREATE_FIELDS)
        bucket = _resolve_bucket(data)
        production_request = _build_request(bucket, data)
        db.session.commit()
    except ValidationFailed as exc:
        db.session.rollback()
        logger.warning("Production request create rejected: %s", exc.errors)
        raise
    except Exception:
        db.session.rollback()
        raise
    return production_request


def update_production_request(production_request: ProductionRequest, attributes: Mapping[str, Any]) -> ProductionRequest:
    request_id = production_request.id
    try:
        production_request = _lock_request(production_request)
        previous_fulfilled = production_request.fulfilled_quantity or 0

        data = coerce_request_attributes(attributes, UPDATE_FIELDS)
        for key, value in data.items():
            setattr(production_request, key, value)
        bucket = production_request.product_inventory
        validate_production_request(production_request, bucket)
        db.session.flush()

        difference = (production_request.fulfilled_quantity or 0) - previous_fulfilled
        if difference:
            adjust_quantity(bucket, difference, reason=f"production request {production_request.id} fulfilled")
        db.session.commit()
    except ValidationFailed as exc:
        db.session.rollback()
        logger.warning("Production request %s update rejected: %s", request_id, exc.errors)
        raise
    except Exception:
        db.session.rollback()
        raise

    logger.info("Updated production request %s", production_request.id)
    return production_request


def destroy_production_request(production_request: ProductionRequest) -> Dict[str, Any]:
    """Delete a request. Fulfilled stock stays in the bucket; the bucket is released if orphaned."""
    request_id = production_request.id
    try:
        production_request = _lock_request(production_request)
        snapshot = production_request.to_dict()
        bucket = production_request.product_inventory
        db.session.delete(production_request)
        db.session.flush()
        release_if_orphaned(bucket)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Destroyed production request %s", request_id)
    return snapshot


def outstanding_order_demand(bucket: ProductInventory) -> int:
    template_order_ids = db.select(OrderTemplate.order_id)
    total = (
        db.session.query(func.coalesce(func.sum(Order.item_quantity), 0))
        .filter(
            Order.product_inventory_id == bucket.id,
            Order.status != OrderStatus.SHIPPED,
            Order.id.not_in(template_order_ids),
        )
        .scalar()
    )
    return int(total or 0)


def already_requested(bucket: ProductInventory) -> int:
    open_requests = ProductionRequest.query.filter(
        ProductionRequest.product_inventory_id == bucket.id,
        ProductionRequest.status != ProductionRequestStatus.COMPLETED,
    ).all()
    return sum(
        max(production_request.request_quantity or 0, production_request.fulfilled_quantity or 0)
        for production_request in open_requests
    )


def _convert_bucket(bucket: ProductInventory) -> Optional[ProductionRequest]:
    bucket = lock_bucket(bucket.id) or bucket
    remainder = outstanding_order_demand(bucket) - already_requested(bucket)
    if remainder == 0:
        logger.debug("Bucket %s demand already covered by production requests", bucket.id)
        return None
    return _build_request(bucket, {'request_quantity': remainder})


def convert_outstanding_orders_to_requests(bucket: ProductInventory) -> Optional[ProductionRequest]:
    """Request production for demand on ``bucket`` not yet covered. Returns None when covered."""
    try:
        production_request = _convert_bucket(bucket)
        db.session.commit()
    except ValidationFailed as exc:
        db.session.rollback()
        logger.warning("Converting outstanding orders on bucket %s rejected: %s", bucket.id, exc.errors)
        raise
    except Exception:
        db.session.rollback()
        raise
    return production_request


def convert_outstanding_for_date(shipping_date: date, product_id: int | None = None) -> List[ProductionRequest]:
    """Run the conversion for every bucket referenced by real orders shipping on ``shipping_date``."""
    query = Order.non_template().filter(Order.shipping_date == shipping_date)
    if product_id is not None:
        query = query.join(ProductVariation, Order.product_variation_id == ProductVariation.id).filter(
            ProductVariation.product_id == product_id
        )
    bucket_ids = sorted({order.product_inventory_id for order in query.all()})

    created: List[ProductionRequest] = []
    try:
        for bucket_id in bucket_ids:
            bucket = get_bucket(bucket_id)
            if bucket is None:
                continue
            production_request = _convert_bucket(bucket)
            if production_request is not None:
                created.append(production_request)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Converted outstanding orders for %s: %s buckets, %s new requests",
        shipping_date, len(bucket_ids), len(created),
    )
    return created
