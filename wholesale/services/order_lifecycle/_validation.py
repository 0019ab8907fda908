"""
Order attribute coercion and validation.

Incoming attributes arrive from JSON or from other services; they are coerced
to column types first, then the assembled order is checked as a whole so the
caller gets every field error at once.
"""

import logging
from typing import Any, Dict, Mapping

from flask import current_app, has_app_context

from ...extensions import db
from ...models import (
    Buyer,
    Order,
    OrderCategory,
    PaymentReceipt,
    ProductVariation,
    ShippingMethod,
    ShippingReceptacle,
)
from ...models.types import OrderStatus, coerce_enum
from ...utils.coercion import to_bool, to_date, to_float, to_int
from ..errors import ErrorCollector, OrderValidationError

logger = logging.getLogger(__name__)

DEFAULT_NOTE_MAX_LENGTH = 255

REFERENCE_FIELDS = {
    'buyer_id': Buyer,
    'product_variation_id': ProductVariation,
    'shipping_receptacle_id': ShippingReceptacle,
    'shipping_method_id': ShippingMethod,
}
OPTIONAL_REFERENCE_FIELDS = {
    'payment_receipt_id': PaymentReceipt,
    'bundled_with_order_id': Order,
}
INTEGER_FIELDS = ('item_quantity', 'receptacle_quantity', 'freight_quantity', 'product_inventory_id')
FLOAT_FIELDS = ('sale_price_per_item', 'adjustment')
DATE_FIELDS = ('arrival_date', 'shipping_date', 'manufacture_date', 'expiration_date')
BOOLEAN_FIELDS = ('add_buyer_optional_cost', 'bundled_shipping_receptacle', 'is_order_template')
QUANTITY_FIELDS = ('item_quantity', 'receptacle_quantity', 'freight_quantity')

ACCEPTED_FIELDS = (
    set(REFERENCE_FIELDS)
    | set(OPTIONAL_REFERENCE_FIELDS)
    | set(INTEGER_FIELDS)
    | set(FLOAT_FIELDS)
    | set(DATE_FIELDS)
    | set(BOOLEAN_FIELDS)
    | {'status', 'note', 'order_category_ids'}
)


def coerce_order_attributes(attributes: Mapping[str, Any] | None) -> Dict[str, Any]:
    """Convert raw attributes to column types. Raises OrderValidationError listing every bad field."""
    errors = ErrorCollector()
    coerced: Dict[str, Any] = {}

    for key, value in (attributes or {}).items():
        if key not in ACCEPTED_FIELDS:
            errors.add(key, 'is not an order attribute')
            continue
        try:
            if key in REFERENCE_FIELDS or key in OPTIONAL_REFERENCE_FIELDS or key in INTEGER_FIELDS:
                coerced[key] = to_int(value)
            elif key in FLOAT_FIELDS:
                coerced[key] = to_float(value)
            elif key in DATE_FIELDS:
                coerced[key] = to_date(value)
            elif key in BOOLEAN_FIELDS:
                coerced[key] = to_bool(value)
            elif key == 'status':
                coerced[key] = coerce_enum(OrderStatus, value) if value is not None else None
            elif key == 'note':
                coerced[key] = None if value is None else str(value)
            elif key == 'order_category_ids':
                if value is None:
                    value = []
                if not isinstance(value, (list, tuple)):
                    raise ValueError('must be a list of ids')
                coerced[key] = sorted({to_int(item) for item in value if item not in (None, '')})
        except ValueError as exc:
            message = str(exc)
            if key == 'status':
                message = f"must be one of {', '.join(s.name.lower() for s in OrderStatus)}"
            errors.add(key, message)

    errors.raise_if_any(OrderValidationError)
    return coerced


def note_max_length() -> int:
    if has_app_context():
        return int(current_app.config.get('ORDER_NOTE_MAX_LENGTH', DEFAULT_NOTE_MAX_LENGTH))
    return DEFAULT_NOTE_MAX_LENGTH


def load_categories(category_ids, errors: ErrorCollector):
    if not category_ids:
        return []
    categories = OrderCategory.query.filter(OrderCategory.id.in_(category_ids)).all()
    missing = set(category_ids) - {category.id for category in categories}
    if missing:
        errors.add('order_category_ids', f"unknown categories: {', '.join(str(i) for i in sorted(missing))}")
    return categories


def validate_order_fields(order: Order, errors: ErrorCollector) -> None:
    """Field checks that do not depend on the bound bucket."""
    for field, model in REFERENCE_FIELDS.items():
        value = getattr(order, field)
        if value is None:
            errors.add(field, "can't be blank")
        elif db.session.get(model, value) is None:
            errors.add(field, 'does not exist')

    for field, model in OPTIONAL_REFERENCE_FIELDS.items():
        value = getattr(order, field)
        if value is not None and db.session.get(model, value) is None:
            errors.add(field, 'does not exist')
    if order.bundled_with_order_id is not None and order.id is not None and order.bundled_with_order_id == order.id:
        errors.add('bundled_with_order_id', 'cannot reference the order itself')

    for field in ('arrival_date', 'shipping_date'):
        if getattr(order, field) is None:
            errors.add(field, "can't be blank")

    for field in QUANTITY_FIELDS:
        value = getattr(order, field)
        if value is None:
            errors.add(field, "can't be blank")
        elif value <= 0:
            errors.add(field, 'must be greater than 0')

    for field in FLOAT_FIELDS:
        value = getattr(order, field)
        if value is None:
            errors.add(field, "can't be blank")
        elif value < 0:
            errors.add(field, 'must be greater than or equal to 0')

    if order.status is None:
        errors.add('status', "can't be blank")

    limit = note_max_length()
    if order.note is not None and len(order.note) > limit:
        errors.add('note', f'is too long (maximum is {limit} characters)')


def validate_bucket_dates(order: Order, errors: ErrorCollector) -> None:
    """Dates needed to acquire a bucket when none is bound yet."""
    if order.product_inventory_id is not None or order.product_inventory is not None:
        return
    for field in ('manufacture_date', 'expiration_date'):
        if getattr(order, field) is None:
            errors.add(field, "can't be blank")
    if (
        order.manufacture_date is not None
        and order.expiration_date is not None
        and order.expiration_date <= order.manufacture_date
    ):
        errors.add('expiration_date', 'must be after the manufacture date')


def validate_costs(order: Order) -> None:
    errors = ErrorCollector()
    for field in ('shipping_cost', 'materials_cost'):
        value = getattr(order, field)
        if value is None or value < 0:
            errors.add(field, 'must be greater than or equal to 0')
    if errors:
        logger.warning("Order %s computed negative costs: %s", order.id, errors.errors)
    errors.raise_if_any(OrderValidationError)
