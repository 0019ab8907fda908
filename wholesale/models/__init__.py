"""Models package - imports all models for the application"""
from ..extensions import db
from .mixins import ActivatableMixin, TimestampMixin
from .types import MaterialPer, OrderStatus, ProductionRequestStatus

# Import in dependency order for table creation
# 1. Reference data
from .buyer import Buyer, buyer_shipping_method
from .shipping import ShippingMethod, ShippingOrganization, ShippingReceptacle
from .product import (
    Material,
    MaterialCategory,
    Packaging,
    Product,
    ProductionZone,
    ProductVariation,
    product_material,
    product_variation_packaging,
    product_variation_production_zone,
)

# 2. Supply side
from .inventory import ProductInventory
from .production_request import ProductionRequest

# 3. Demand side
from .order import Order, OrderCategory, OrderTemplate, PaymentReceipt, order_order_category
from .domain_event import DomainEvent

__all__ = [
    'db',
    'ActivatableMixin',
    'TimestampMixin',
    'MaterialPer',
    'OrderStatus',
    'ProductionRequestStatus',
    'Buyer',
    'buyer_shipping_method',
    'ShippingMethod',
    'ShippingOrganization',
    'ShippingReceptacle',
    'Material',
    'MaterialCategory',
    'Packaging',
    'Product',
    'ProductionZone',
    'ProductVariation',
    'product_material',
    'product_variation_packaging',
    'product_variation_production_zone',
    'ProductInventory',
    'ProductionRequest',
    'Order',
    'OrderCategory',
    'OrderTemplate',
    'PaymentReceipt',
    'order_order_category',
    'DomainEvent',
]
