from datetime import datetime, timezone

from ..extensions import db


def utc_now():
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Adds created_at and updated_at timestamps to models"""
    created_at = db.Column(db.DateTime, default=utc_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=utc_now, onupdate=utc_now, nullable=False)


class ActivatableMixin:
    """Reference data that can be retired without deleting rows orders still point at."""
    active = db.Column(db.Boolean, default=True, nullable=False)

    @classmethod
    def active_records(cls):
        return cls.query.filter(cls.active.is_(True))

    @classmethod
    def inactive_records(cls):
        return cls.query.filter(cls.active.is_(False))
