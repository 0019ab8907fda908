"""
Per-box Resolution

How many items one shipping receptacle holds, either observed from an order's
own quantities or estimated from receptacle and product geometry.
"""

import math

from flask import current_app, has_app_context

DEFAULT_SPACING_VOLUME_ADJUSTMENT = 0.90


def estimate_per_box_quantity(receptacle, product, adjustment=DEFAULT_SPACING_VOLUME_ADJUSTMENT):
    """Items that fit one receptacle, floored to a multiple of 5 and never below 1.

    ``adjustment`` reserves part of the interior for packing material.
    """
    if receptacle is None or product is None:
        return 1
    receptacle_volume = (
        (receptacle.interior_height or 0) * (receptacle.interior_width or 0) * (receptacle.interior_depth or 0)
    ) * adjustment
    product_volume = (product.exterior_height or 0) * (product.exterior_width or 0) * (product.exterior_depth or 0)
    if product_volume <= 0:
        return 1

    estimate = math.floor(receptacle_volume / product_volume) // 5 * 5
    return estimate or 1


def resolve_per_box(item_quantity, receptacle_quantity, receptacle, product,
                    adjustment=DEFAULT_SPACING_VOLUME_ADJUSTMENT):
    """Observed items per receptacle when the order states a receptacle count, else the estimate."""
    if receptacle_quantity and receptacle_quantity > 0:
        per_box = int(item_quantity or 0) // int(receptacle_quantity)
    else:
        per_box = estimate_per_box_quantity(receptacle, product, adjustment)
    return per_box or 1


def configured_spacing_adjustment():
    if has_app_context():
        return float(current_app.config.get('DEFAULT_SPACING_VOLUME_ADJUSTMENT', DEFAULT_SPACING_VOLUME_ADJUSTMENT))
    return DEFAULT_SPACING_VOLUME_ADJUSTMENT


def find_per_box_quantity(variation, default_adjustment=None):
    """A variation's packing count: its explicit default when positive, else the geometric estimate."""
    default = variation.default_per_box
    if default and default > 0:
        return default

    adjustment = variation.spacing_volume_adjustment or default_adjustment or configured_spacing_adjustment()
    return estimate_per_box_quantity(variation.default_shipping_receptacle, variation.product, adjustment)
