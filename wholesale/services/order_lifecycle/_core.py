"""
Order Lifecycle Core

create_order / update_order / destroy_order are the only writers of Order rows.
Each runs as one transaction:

1. coerce and validate the incoming attributes
2. bind the order to its inventory bucket (find-or-create)
3. recompute shipping and materials cost
4. apply the status transition's stock effect to the bucket(s)
5. keep the template link in step with the template flag
6. release the previous bucket if nothing references it any more
7. commit, then emit the order list notification
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ...extensions import db
from ...models import (
    Buyer,
    Order,
    PaymentReceipt,
    ProductInventory,
    ProductVariation,
    ShippingMethod,
    ShippingReceptacle,
)
from ...models.types import OrderStatus
from .. import costing
from ..errors import ErrorCollector, InventoryConsistencyError, OrderValidationError, ValidationFailed
from ..event_emitter import emit_order_created, emit_order_destroyed, emit_order_updated
from ..inventory_buckets import acquire_bucket, adjust_quantity, get_bucket, release_if_orphaned
from ..order_templates import find_associable_template, sync_template
from ._validation import (
    coerce_order_attributes,
    load_categories,
    validate_bucket_dates,
    validate_costs,
    validate_order_fields,
)
from .transitions import apply_transition, bucket_effects, destruction_delta

logger = logging.getLogger(__name__)

_RELATIONSHIPS = (
    ('buyer', 'buyer_id', Buyer),
    ('product_variation', 'product_variation_id', ProductVariation),
    ('shipping_receptacle', 'shipping_receptacle_id', ShippingReceptacle),
    ('shipping_method', 'shipping_method_id', ShippingMethod),
    ('payment_receipt', 'payment_receipt_id', PaymentReceipt),
    ('bundled_with_order', 'bundled_with_order_id', Order),
)


def get_order(order_id: int) -> Optional[Order]:
    return db.session.get(Order, order_id)


def _lock_order(order: Order) -> Order:
    locked = Order.query.filter_by(id=order.id).with_for_update().populate_existing().first()
    if locked is None:
        raise OrderValidationError({'id': ['order does not exist']})
    return locked


def _assign(order: Order, data: Mapping[str, Any]) -> None:
    for key, value in data.items():
        setattr(order, key, value)


def _resolve_references(order: Order) -> None:
    """Point relationships at the rows named by the id columns so costing sees them."""
    for relationship, column, model in _RELATIONSHIPS:
        value = getattr(order, column)
        setattr(order, relationship, db.session.get(model, value) if value is not None else None)


def recalculate_costs(order: Order) -> None:
    costs = costing.calculate_order_costs(order)
    order.shipping_cost = costs.shipping_cost
    order.materials_cost = costs.materials_cost
    validate_costs(order)


def bind_bucket(order: Order, bucket_id: Optional[int] = None,
                previous_bucket: Optional[ProductInventory] = None) -> ProductInventory:
    """Resolve the order's bucket.

    An explicit bucket id wins. Otherwise the key is the order's variation with
    the dates of the bucket it is already bound to, or the order's own dates
    when it has none yet.
    """
    if bucket_id is not None:
        bucket = get_bucket(bucket_id)
        if bucket is None:
            raise OrderValidationError({'product_inventory_id': ['does not exist']})
        if bucket.product_variation_id != order.product_variation_id:
            raise OrderValidationError({'product_inventory_id': ['belongs to a different product variation']})
        manufacture_date, expiration_date = bucket.manufacture_date, bucket.expiration_date
    elif previous_bucket is not None:
        manufacture_date, expiration_date = previous_bucket.manufacture_date, previous_bucket.expiration_date
    else:
        manufacture_date, expiration_date = order.manufacture_date, order.expiration_date

    bucket = acquire_bucket(order.product_variation_id, manufacture_date, expiration_date)
    order.product_inventory = bucket
    order.manufacture_date = bucket.manufacture_date
    order.expiration_date = bucket.expiration_date
    return bucket


def _unbundle_dependents(order: Order) -> None:
    dependents = Order.query.filter(Order.bundled_with_order_id == order.id).all()
    for dependent in dependents:
        dependent.bundled_with_order = None
        dependent.bundled_with_order_id = None
        recalculate_costs(dependent)
        logger.info("Order %s no longer bundled with destroyed order %s", dependent.id, order.id)
    if dependents:
        db.session.flush()


def create_order(attributes: Mapping[str, Any], *, template_identifier: str | None = None,
                 template_notes: str | None = None) -> Order:
    try:
        data = coerce_order_attributes(attributes)
        is_order_template = bool(data.pop('is_order_template', False))
        category_ids = data.pop('order_category_ids', None)
        bucket_id = data.pop('product_inventory_id', None)

        order = Order(
            status=OrderStatus.ESTIMATE,
            sale_price_per_item=0.0,
            adjustment=0.0,
            add_buyer_optional_cost=False,
            bundled_shipping_receptacle=False,
        )
        _assign(order, data)

        errors = ErrorCollector()
        categories = load_categories(category_ids, errors) if category_ids is not None else []
        validate_order_fields(order, errors)
        if bucket_id is None:
            validate_bucket_dates(order, errors)
        errors.raise_if_any(OrderValidationError)

        # Bind before the order joins the session; acquiring may flush
        bind_bucket(order, bucket_id)
        db.session.add(order)
        _resolve_references(order)
        order.order_categories = categories
        recalculate_costs(order)
        db.session.flush()

        delta = apply_transition(None, order.status, 0, order.item_quantity)
        if delta:
            adjust_quantity(order.product_inventory, delta, reason=f"order {order.id} created {order.status.name}")
        if is_order_template:
            sync_template(order, True, identifier=template_identifier, notes=template_notes)

        db.session.commit()
    except ValidationFailed as exc:
        db.session.rollback()
        logger.warning("Order create rejected: %s", exc.errors)
        raise
    except Exception:
        db.session.rollback()
        raise

    logger.info("Created order %s on bucket %s", order.id, order.product_inventory_id)
    emit_order_created(order.to_dict())
    return order


def update_order(order: Order, attributes: Mapping[str, Any]) -> Order:
    order_id = order.id
    try:
        order = _lock_order(order)
        previous_status = order.status
        previous_quantity = order.item_quantity
        previous_bucket = order.product_inventory

        data = coerce_order_attributes(attributes)
        is_order_template = data.pop('is_order_template', None)
        category_ids = data.pop('order_category_ids', None)
        bucket_id = data.pop('product_inventory_id', None)

        errors = ErrorCollector()
        for field in ('manufacture_date', 'expiration_date'):
            if field not in data:
                continue
            value = data.pop(field)
            if bucket_id is None and previous_bucket is not None and value != getattr(previous_bucket, field):
                errors.add(field, 'comes from the bound inventory bucket; pass product_inventory_id to move the order')

        # Lookups below must not flush the unvalidated row
        with db.session.no_autoflush:
            _assign(order, data)
            if category_ids is not None:
                order.order_categories = load_categories(category_ids, errors)
            validate_order_fields(order, errors)
        errors.raise_if_any(OrderValidationError)

        _resolve_references(order)
        bind_bucket(order, bucket_id, previous_bucket=previous_bucket)
        recalculate_costs(order)
        db.session.flush()

        for bucket, delta in bucket_effects(
            previous_bucket, order.product_inventory,
            previous_status, order.status,
            previous_quantity, order.item_quantity,
        ):
            adjust_quantity(bucket, delta, reason=f"order {order.id} {previous_status.name}->{order.status.name}")

        if is_order_template is not None:
            sync_template(order, is_order_template)

        if previous_bucket is not None and previous_bucket.id != order.product_inventory.id:
            release_if_orphaned(previous_bucket)

        associable = find_associable_template(order)
        associable_id = associable.id if associable is not None else None
        db.session.commit()
    except ValidationFailed as exc:
        db.session.rollback()
        logger.warning("Order %s update rejected: %s", order_id, exc.errors)
        raise
    except Exception:
        db.session.rollback()
        raise

    logger.info("Updated order %s", order.id)
    emit_order_updated(order.to_dict(), associable_id)
    return order


def destroy_order(order: Order) -> Dict[str, Any]:
    """Delete an order, give back its shipped stock and release its bucket.

    Returns the order as it was, since the row is gone afterwards.
    """
    order_id = order.id
    try:
        order = _lock_order(order)
        bucket = order.product_inventory
        if bucket is None:
            logger.error("Order %s has no inventory bucket", order.id)
            raise InventoryConsistencyError(f"Order {order.id} is not bound to an inventory bucket")

        associable = find_associable_template(order)
        stored_template_id = associable.id if associable is not None and associable is not order.order_template else None
        snapshot = order.to_dict()

        delta = destruction_delta(order.status, order.item_quantity)
        if delta:
            adjust_quantity(bucket, delta, reason=f"order {order.id} destroyed")

        _unbundle_dependents(order)
        db.session.delete(order)
        db.session.flush()
        release_if_orphaned(bucket)
        db.session.commit()
    except ValidationFailed as exc:
        db.session.rollback()
        logger.warning("Order %s destroy rejected: %s", order_id, exc.errors)
        raise
    except Exception:
        db.session.rollback()
        raise

    logger.info("Destroyed order %s", order_id)
    emit_order_destroyed(snapshot, stored_template_id)
    return snapshot
