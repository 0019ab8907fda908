"""
Order Lifecycle Service - Canonical Entry Point

All order writes go through create_order, update_order and destroy_order.
They bind the order to its inventory bucket, recompute costs, apply the
status transition's stock effect, keep the template link in step and emit
the order list notification after commit.
"""

from ._core import (
    bind_bucket,
    create_order,
    destroy_order,
    get_order,
    recalculate_costs,
    update_order,
)
from ._validation import coerce_order_attributes
from .transitions import apply_transition, bucket_effects, destruction_delta

__all__ = [
    'bind_bucket',
    'create_order',
    'destroy_order',
    'get_order',
    'recalculate_costs',
    'update_order',
    'coerce_order_attributes',
    'apply_transition',
    'bucket_effects',
    'destruction_delta',
]
