"""
Order Cost Calculation

Shipping and materials cost of an order. Missing references contribute 0.
Bundling shifts cost onto the order this one ships with.
"""

from ._materials import material_cost
from .types import OrderCosts


def shipping_cost(order) -> float:
    # Bundled orders ride on the other order's shipment
    if order.bundled_with_order_id:
        return 0.0

    method = order.shipping_method
    buyer = order.buyer
    per_receptacle_method_cost = (method.per_shipping_receptacle_cost if method else 0) or 0
    per_freight_method_cost = (method.per_freight_unit_cost if method else 0) or 0
    handling_cost = (buyer.handling_cost if buyer else 0) or 0
    optional_cost = (buyer.optional_cost or 0) if (buyer and order.add_buyer_optional_cost) else 0

    receptacle_shipping = (order.receptacle_quantity or 0) * (handling_cost + optional_cost + per_receptacle_method_cost)
    freight_shipping = (order.freight_quantity or 0) * per_freight_method_cost
    return float(receptacle_shipping + freight_shipping)


def receptacle_line_cost(order) -> float:
    if order.bundled_shipping_receptacle:
        return 0.0
    receptacle = order.shipping_receptacle
    return float(((receptacle.cost if receptacle else 0) or 0) * (order.receptacle_quantity or 0))


def product_material_line_cost(order) -> float:
    variation = order.product_variation
    product = variation.product if variation is not None else None
    if product is None:
        return 0.0
    return float(
        material_cost(
            product,
            order.shipping_receptacle,
            item_quantity=order.item_quantity,
            receptacle_quantity=order.receptacle_quantity,
            freight_quantity=order.freight_quantity,
            primary_content_volume=variation.primary_content_volume,
        )
    )


def packaging_line_cost(order) -> float:
    variation = order.product_variation
    packaging_cost = (variation.packaging_cost if variation is not None else 0) or 0
    return float(packaging_cost * (order.item_quantity or 0))


def materials_cost(order) -> float:
    return calculate_order_costs(order).materials_cost


def calculate_order_costs(order) -> OrderCosts:
    receptacle = receptacle_line_cost(order)
    product_materials = product_material_line_cost(order)
    packaging = packaging_line_cost(order)
    return OrderCosts(
        shipping_cost=shipping_cost(order),
        materials_cost=receptacle + product_materials + packaging,
        receptacle_cost=receptacle,
        product_material_cost=product_materials,
        packaging_cost=packaging,
    )
