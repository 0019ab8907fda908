"""
Costing Service Package

Pure cost computations for orders and production:
- Shipping cost (buyer handling, shipping method rates, bundling)
- Materials cost (receptacles, product materials by unit basis, packaging)
- Per-box estimation from receptacle and product geometry
- Production cost estimate with shown work

Nothing here touches the session; the order lifecycle calls in after validation.
"""

from ._estimate import production_cost_estimate
from ._materials import material_cost
from ._order_costs import (
    calculate_order_costs,
    materials_cost,
    packaging_line_cost,
    product_material_line_cost,
    receptacle_line_cost,
    shipping_cost,
)
from ._per_box import (
    DEFAULT_SPACING_VOLUME_ADJUSTMENT,
    estimate_per_box_quantity,
    find_per_box_quantity,
    resolve_per_box,
)
from .types import CostWorksheet, MaterialLine, OrderCosts

__all__ = [
    'production_cost_estimate',
    'material_cost',
    'calculate_order_costs',
    'materials_cost',
    'packaging_line_cost',
    'product_material_line_cost',
    'receptacle_line_cost',
    'shipping_cost',
    'DEFAULT_SPACING_VOLUME_ADJUSTMENT',
    'estimate_per_box_quantity',
    'find_per_box_quantity',
    'resolve_per_box',
    'CostWorksheet',
    'MaterialLine',
    'OrderCosts',
]
