"""Order status transitions and their effect on bucket stock.

Only the shipped state holds stock: entering it consumes the item quantity,
leaving it gives the previously shipped quantity back, and an edit while
shipped moves stock by the difference.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ...models.types import OrderStatus, coerce_enum


def _is_shipped(status) -> bool:
    return status is not None and coerce_enum(OrderStatus, status) == OrderStatus.SHIPPED


def apply_transition(previous_status, new_status, previous_quantity: int, new_quantity: int) -> int:
    """Bucket delta for one order moving between statuses on the same bucket.

    ``previous_status`` is None for an order being created.
    """
    was_shipped = _is_shipped(previous_status)
    now_shipped = _is_shipped(new_status)

    if was_shipped and now_shipped:
        return int(previous_quantity or 0) - int(new_quantity or 0)
    if now_shipped:
        return -int(new_quantity or 0)
    if was_shipped:
        return int(previous_quantity or 0)
    return 0


def destruction_delta(status, quantity: int) -> int:
    """Stock a destroyed order gives back to its bucket."""
    return int(quantity or 0) if _is_shipped(status) else 0


def bucket_effects(
    previous_bucket,
    new_bucket,
    previous_status,
    new_status,
    previous_quantity: int,
    new_quantity: int,
) -> List[Tuple[object, int]]:
    """Per-bucket deltas for an update, including a move between buckets.

    On a move the old bucket gets back what it gave and the new bucket pays
    for the order as it stands now.
    """
    if previous_bucket is None or new_bucket is None or _same_bucket(previous_bucket, new_bucket):
        target = new_bucket if new_bucket is not None else previous_bucket
        delta = apply_transition(previous_status, new_status, previous_quantity, new_quantity)
        return [(target, delta)] if delta else []

    effects = []
    give_back = apply_transition(previous_status, None, previous_quantity, 0)
    if give_back:
        effects.append((previous_bucket, give_back))
    take = apply_transition(None, new_status, 0, new_quantity)
    if take:
        effects.append((new_bucket, take))
    return effects


def _same_bucket(left, right) -> bool:
    left_id: Optional[int] = getattr(left, "id", None)
    right_id: Optional[int] = getattr(right, "id", None)
    if left_id is not None and right_id is not None:
        return left_id == right_id
    return left is right
