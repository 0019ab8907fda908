"""
Costing Types

Data structures returned by the cost model. Reference records (buyers,
shipping methods, receptacles, products, variations, materials) are read by
attribute only, so ORM rows and plain namespaces work alike.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MaterialLine:
    """One material's contribution to a material cost, with its formula."""
    name: str
    per: str
    cost: float
    quantity: int
    change: float = 0.0
    text: str = ''
    work: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'per': self.per,
            'cost': self.cost,
            'quantity': self.quantity,
            'change': self.change,
            'text': self.text,
            'work': self.work,
        }


@dataclass
class OrderCosts:
    """Shipping and materials cost of an order, as stored on the row."""
    shipping_cost: float
    materials_cost: float
    receptacle_cost: float = 0.0
    product_material_cost: float = 0.0
    packaging_cost: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'shipping_cost': self.shipping_cost,
            'materials_cost': self.materials_cost,
            'receptacle_cost': self.receptacle_cost,
            'product_material_cost': self.product_material_cost,
            'packaging_cost': self.packaging_cost,
        }


@dataclass
class CostWorksheet:
    """Production cost estimate for a variation with the working shown per line."""
    title: str = ''
    shipping_receptacle: str = ''
    packagings: str = ''
    materials: List[MaterialLine] = field(default_factory=list)
    per_box: Optional[int] = None
    quantity: Optional[int] = None
    total: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'shipping_receptacle': self.shipping_receptacle,
            'packagings': self.packagings,
            'materials': {line.name: line.to_dict() for line in self.materials},
            'per_box': self.per_box,
            'quantity': self.quantity,
            'total': self.total,
        }
