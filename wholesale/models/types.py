"""Integer-backed enums for status and per-unit columns."""

from __future__ import annotations

from enum import IntEnum

from sqlalchemy.types import Integer, TypeDecorator


class OrderStatus(IntEnum):
    ESTIMATE = 0
    CONFIRMED = 1
    SHIPPED = 2


class ProductionRequestStatus(IntEnum):
    PENDING = 0
    IN_PROGRESS = 1
    COMPLETED = 2


class MaterialPer(IntEnum):
    """Unit basis a material's cost is charged against."""

    ITEM = 0
    SHIPPING_RECEPTACLE = 1
    FREIGHT = 2
    SUPPLY_TYPE_UNIT = 3


def coerce_enum(enum_cls, value):
    """Accept enum members, their integer values, or their lowercase names."""
    if value is None or isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        if candidate.isdigit():
            return enum_cls(int(candidate))
        try:
            return enum_cls[candidate.upper()]
        except KeyError:
            raise ValueError(f"{candidate!r} is not a valid {enum_cls.__name__}") from None
    return enum_cls(int(value))


class IntEnumType(TypeDecorator):
    """Stores an IntEnum as its integer value and loads it back as the member."""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_cls, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_cls = enum_cls

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(coerce_enum(self.enum_cls, value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_cls(value)
