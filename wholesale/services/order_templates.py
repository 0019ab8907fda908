"""Order template materializer.

Synopsis:
Keeps the one-to-one link between a template and the order it wraps, finds
the template a concrete order was stamped from, and stamps new orders out of
templates. Templates wrap a live order; the wrapped order is excluded from
real-order queries and demand totals.

Glossary:
- Wrapped order: the order an OrderTemplate points at.
- Associable template: the order's own template, else a template whose order
  shares its buyer, variation, receptacle and exact category set.
- Offsets: date differences (shipping to arrival, shipping to manufacture,
  manufacture to expiration) carried over when deriving an order.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from ..extensions import db
from ..models import Order, OrderTemplate
from ..models.types import OrderStatus
from .errors import TemplateInvariantError

logger = logging.getLogger(__name__)

COPIED_FIELDS = (
    'buyer_id',
    'product_variation_id',
    'shipping_receptacle_id',
    'shipping_method_id',
    'status',
    'item_quantity',
    'receptacle_quantity',
    'freight_quantity',
    'sale_price_per_item',
    'adjustment',
    'arrival_date',
    'shipping_date',
    'manufacture_date',
    'expiration_date',
    'add_buyer_optional_cost',
    'bundled_with_order_id',
    'bundled_shipping_receptacle',
    'note',
)


def _category_ids(order: Order) -> List[int]:
    return sorted(category.id for category in order.order_categories)


def attach_template(order: Order, identifier: str | None = None, notes: str | None = None) -> OrderTemplate:
    if order is None:
        raise TemplateInvariantError({'order': ["can't be blank"]})
    if order.order_template is not None or (
        order.id is not None and OrderTemplate.query.filter_by(order_id=order.id).first() is not None
    ):
        raise TemplateInvariantError({'order_id': ['already has a template']})

    template = OrderTemplate(order=order, identifier=identifier, notes=notes)
    db.session.add(template)
    logger.info("Attached template to order %s", order.id)
    return template


def detach_template(order: Order) -> None:
    template = order.order_template
    if template is None:
        return
    order.order_template = None
    db.session.delete(template)
    logger.info("Removed template %s from order %s", template.id, order.id)


def sync_template(order: Order, is_order_template: bool, identifier: str | None = None,
                  notes: str | None = None) -> Optional[OrderTemplate]:
    """Create or destroy the order's template so it matches the flag."""
    if is_order_template and order.order_template is None:
        attach_template(order, identifier=identifier, notes=notes)
    elif not is_order_template and order.order_template is not None:
        detach_template(order)
    return order.order_template


def find_associable_template(order: Order) -> Optional[OrderTemplate]:
    if order.order_template is not None:
        return order.order_template

    category_ids = _category_ids(order)
    candidates = (
        OrderTemplate.query.join(Order, OrderTemplate.order_id == Order.id)
        .filter(
            Order.buyer_id == order.buyer_id,
            Order.product_variation_id == order.product_variation_id,
            Order.shipping_receptacle_id == order.shipping_receptacle_id,
        )
        .order_by(OrderTemplate.id)
        .all()
    )
    for template in candidates:
        if template.order_id != order.id and _category_ids(template.order) == category_ids:
            return template
    return None


def list_templates() -> List[OrderTemplate]:
    return (
        OrderTemplate.query.join(Order, OrderTemplate.order_id == Order.id)
        .order_by(OrderTemplate.identifier, OrderTemplate.id)
        .all()
    )


def get_template(template_id: int) -> Optional[OrderTemplate]:
    return db.session.get(OrderTemplate, template_id)


def derive_order_attributes(template: OrderTemplate, overrides: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Attributes for a new concrete order stamped from ``template``.

    ``overrides`` usually carries the shipping date and quantities. Arrival,
    manufacture and expiration dates are always recomputed from the new
    shipping date using the wrapped order's offsets.
    """
    from .order_lifecycle import coerce_order_attributes

    source = template.order
    if source is None:
        raise TemplateInvariantError({'order': ['template has no order']})

    attributes = {field: getattr(source, field) for field in COPIED_FIELDS}
    attributes['status'] = OrderStatus.ESTIMATE
    attributes.update(coerce_order_attributes(overrides or {}))

    shipping_date = attributes['shipping_date']
    manufacture_date = shipping_date + (source.manufacture_date - source.shipping_date)
    attributes['arrival_date'] = shipping_date + (source.arrival_date - source.shipping_date)
    attributes['manufacture_date'] = manufacture_date
    attributes['expiration_date'] = manufacture_date + (source.expiration_date - source.manufacture_date)

    attributes.pop('product_inventory_id', None)
    attributes['bundled_with_order_id'] = None
    attributes['bundled_shipping_receptacle'] = False
    attributes['is_order_template'] = False
    attributes['order_category_ids'] = _category_ids(source)
    return attributes


def create_order_from_template(template: OrderTemplate, overrides: Mapping[str, Any] | None = None) -> Order:
    from .order_lifecycle import create_order

    attributes = derive_order_attributes(template, overrides)
    order = create_order(attributes)
    logger.info("Derived order %s from template %s", order.id, template.id)
    return order


def copy_to_template(order: Order, overrides: Mapping[str, Any] | None = None,
                     identifier: str | None = None, notes: str | None = None) -> OrderTemplate:
    """Save a copy of ``order`` as a new template. Templates never hold stock, so the copy is an estimate."""
    from .order_lifecycle import coerce_order_attributes, create_order

    attributes = {field: getattr(order, field) for field in COPIED_FIELDS}
    attributes['status'] = OrderStatus.ESTIMATE
    attributes.update(coerce_order_attributes(overrides or {}))
    attributes['order_category_ids'] = _category_ids(order)
    attributes['is_order_template'] = True

    template_order = create_order(attributes, template_identifier=identifier, template_notes=notes)
    logger.info("Copied order %s to template %s", order.id, template_order.order_template.id)
    return template_order.order_template


def destroy_template(template: OrderTemplate) -> Dict[str, Any]:
    """Remove a template together with its wrapped order."""
    from .order_lifecycle import destroy_order

    if template.order is None:
        raise TemplateInvariantError({'order': ['template has no order']})
    template_id = template.id
    snapshot = destroy_order(template.order)
    logger.info("Destroyed template %s", template_id)
    return snapshot
