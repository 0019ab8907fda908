"""
Product Material Cost

Accumulates a product's material costs. Each material is charged against one
unit basis (MaterialPer); the basis selects the formula.
"""

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ...models.types import MaterialPer, coerce_enum
from ._per_box import DEFAULT_SPACING_VOLUME_ADJUSTMENT, resolve_per_box
from .types import CostWorksheet, MaterialLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Basis:
    quantity: int
    per_box: int
    per_freight: int
    freight_quantity: Optional[int]
    primary_content_volume: Optional[float]


def _item_line(material, basis: _Basis):
    change = material.cost * basis.quantity
    return change, f"Per item cost: {change}", f"{material.cost} * {basis.quantity}"


def _shipping_receptacle_line(material, basis: _Basis):
    receptacles = math.ceil(basis.quantity / basis.per_box)
    change = material.cost * receptacles
    return (
        change,
        f"Per shipping receptacle cost: {change}",
        f"{material.cost} * ceil({basis.quantity} / {basis.per_box})",
    )


def _freight_line(material, basis: _Basis):
    if basis.freight_quantity:
        freight_units = basis.freight_quantity
    else:
        freight_units = max(basis.quantity // basis.per_box // basis.per_freight, 1)
    change = material.cost * freight_units
    return (
        change,
        f"Per freight unit cost: {change}",
        f"{material.cost} * ({basis.freight_quantity} || max({basis.quantity} / {basis.per_box} / {basis.per_freight}, 1))",
    )


def _supply_type_unit_line(material, basis: _Basis):
    volume = basis.primary_content_volume
    if not volume:
        return 0.0, "Per supply unit cost: 0 (no content volume)", f"{material.cost} / {volume} * {basis.quantity}"
    change = material.cost / volume * basis.quantity
    return change, f"Per supply unit cost: {change}", f"{material.cost} / {volume} * {basis.quantity}"


_LINE_CALCULATORS: Dict[MaterialPer, Callable] = {
    MaterialPer.ITEM: _item_line,
    MaterialPer.SHIPPING_RECEPTACLE: _shipping_receptacle_line,
    MaterialPer.FREIGHT: _freight_line,
    MaterialPer.SUPPLY_TYPE_UNIT: _supply_type_unit_line,
}


def material_cost(
    product,
    receptacle,
    item_quantity: int = 1,
    receptacle_quantity: Optional[int] = None,
    freight_quantity: Optional[int] = None,
    primary_content_volume: Optional[float] = None,
    init_value: float = 0.0,
    worksheet: Optional[CostWorksheet] = None,
    adjustment: float = DEFAULT_SPACING_VOLUME_ADJUSTMENT,
) -> float:
    """Sum of every material attached to ``product`` for the given quantities.

    When ``worksheet`` is given, one MaterialLine per material is appended to it.
    """
    quantity = int(item_quantity or 0)
    per_freight = (receptacle.default_freight_bundle_quantity if receptacle is not None else None) or 1
    basis = _Basis(
        quantity=quantity,
        per_box=resolve_per_box(quantity, receptacle_quantity, receptacle, product, adjustment),
        per_freight=per_freight,
        freight_quantity=freight_quantity,
        primary_content_volume=primary_content_volume,
    )

    total = init_value
    for material in product.materials:
        per = coerce_enum(MaterialPer, material.per)
        change, text, work = _LINE_CALCULATORS[per](material, basis)
        total += change
        if worksheet is not None:
            worksheet.materials.append(
                MaterialLine(
                    name=material.name,
                    per=per.name.lower(),
                    cost=material.cost,
                    quantity=quantity,
                    change=change,
                    text=text,
                    work=work,
                )
            )
    logger.debug("Material cost for %s x%s: %s", getattr(product, 'name', product), quantity, total - init_value)
    return total
