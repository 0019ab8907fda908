from types import SimpleNamespace

import pytest

from wholesale.models.types import OrderStatus
from wholesale.services.order_lifecycle import apply_transition, bucket_effects, destruction_delta

ESTIMATE = OrderStatus.ESTIMATE
CONFIRMED = OrderStatus.CONFIRMED
SHIPPED = OrderStatus.SHIPPED


@pytest.mark.parametrize(
    'previous, new, previous_qty, new_qty, expected',
    [
        (ESTIMATE, CONFIRMED, 50, 50, 0),
        (CONFIRMED, SHIPPED, 50, 50, -50),
        (ESTIMATE, SHIPPED, 50, 60, -60),
        (SHIPPED, SHIPPED, 50, 40, 10),
        (SHIPPED, SHIPPED, 40, 55, -15),
        (SHIPPED, CONFIRMED, 50, 30, 50),
        (SHIPPED, ESTIMATE, 50, 50, 50),
        (None, ESTIMATE, 0, 20, 0),
        (None, SHIPPED, 0, 20, -20),
    ],
)
def test_apply_transition(previous, new, previous_qty, new_qty, expected):
    assert apply_transition(previous, new, previous_qty, new_qty) == expected


def test_apply_transition_accepts_status_names():
    assert apply_transition('confirmed', 'shipped', 5, 5) == -5


def test_ship_then_unship_conserves_stock():
    shipped = apply_transition(CONFIRMED, SHIPPED, 25, 25)
    returned = apply_transition(SHIPPED, CONFIRMED, 25, 25)
    assert shipped + returned == 0


def test_destruction_delta_only_restores_shipped_stock():
    assert destruction_delta(SHIPPED, 12) == 12
    assert destruction_delta(CONFIRMED, 12) == 0


class TestBucketEffects:
    def test_same_bucket_is_a_single_delta(self):
        bucket = SimpleNamespace(id=1)
        assert bucket_effects(bucket, bucket, SHIPPED, SHIPPED, 50, 40) == [(bucket, 10)]

    def test_no_effect_is_empty(self):
        bucket = SimpleNamespace(id=1)
        assert bucket_effects(bucket, bucket, ESTIMATE, CONFIRMED, 5, 5) == []

    def test_shipped_order_moving_buckets(self):
        old, new = SimpleNamespace(id=1), SimpleNamespace(id=2)
        assert bucket_effects(old, new, SHIPPED, SHIPPED, 30, 20) == [(old, 30), (new, -20)]

    def test_unshipped_order_moving_buckets_is_free(self):
        old, new = SimpleNamespace(id=1), SimpleNamespace(id=2)
        assert bucket_effects(old, new, CONFIRMED, CONFIRMED, 30, 20) == []

    def test_shipping_while_moving_charges_new_bucket_only(self):
        old, new = SimpleNamespace(id=1), SimpleNamespace(id=2)
        assert bucket_effects(old, new, CONFIRMED, SHIPPED, 30, 30) == [(new, -30)]
