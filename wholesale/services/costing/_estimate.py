"""
Production Cost Estimate

Cost of producing ``quantity`` of a variation in a given receptacle, with a
worksheet describing each line for display.
"""

import logging
import math
from typing import Tuple

from ._materials import material_cost
from ._per_box import find_per_box_quantity
from .types import CostWorksheet

logger = logging.getLogger(__name__)


def production_cost_estimate(variation, shipping_receptacle=None, quantity=None) -> Tuple[float, CostWorksheet]:
    """Return ``(total, worksheet)``. ``quantity`` defaults to one receptacle's worth."""
    receptacle = shipping_receptacle or variation.default_shipping_receptacle
    product = variation.product
    per_box = find_per_box_quantity(variation)
    quantity = quantity if quantity is not None else per_box
    per_box = per_box or 1

    worksheet = CostWorksheet(
        title=f"Cost of {variation.name} {product.name} x {quantity} in {receptacle.name} receptacles.",
        per_box=per_box,
        quantity=quantity,
    )

    value = math.ceil(quantity / per_box) * (receptacle.cost or 0)
    worksheet.shipping_receptacle = (
        f"Receptacles: ceil({quantity} / {per_box}) * {float(receptacle.cost or 0)} = {value}"
    )

    packaging_cost = variation.packaging_cost or 0
    value += packaging_cost * quantity
    names = ", ".join(packaging.name for packaging in variation.packagings)
    worksheet.packagings = f"Packagings ({names}): {packaging_cost} * {quantity} = {packaging_cost * quantity}"

    total = material_cost(
        product,
        receptacle,
        item_quantity=quantity,
        primary_content_volume=variation.primary_content_volume,
        init_value=value,
        worksheet=worksheet,
    )
    worksheet.total = total
    logger.debug("Production estimate for variation %s x%s: %s", getattr(variation, 'id', None), quantity, total)
    return total, worksheet
