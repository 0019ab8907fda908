from ..extensions import db
from .mixins import utc_now


class DomainEvent(db.Model):
    """Outbox row for order-list notifications picked up by an external push layer."""

    __tablename__ = "domain_event"

    id = db.Column(db.Integer, primary_key=True)
    event_name = db.Column(db.String(128), nullable=False, index=True)
    occurred_at = db.Column(db.DateTime, default=utc_now, index=True)

    # Stream the push layer fans out on, e.g. "2026-10-19:orders_list"
    channel = db.Column(db.String(128), nullable=True, index=True)
    action = db.Column(db.String(16), nullable=True)

    # Entity context
    entity_type = db.Column(db.String(64), nullable=True, index=True)
    entity_id = db.Column(db.Integer, nullable=True, index=True)

    correlation_id = db.Column(db.String(128), nullable=True, index=True)
    source = db.Column(db.String(64), nullable=True, default="engine")
    schema_version = db.Column(db.Integer, nullable=True, default=1)

    properties = db.Column(db.JSON, nullable=True)

    # Outbox processing fields
    is_processed = db.Column(db.Boolean, default=False, index=True)
    processed_at = db.Column(db.DateTime, nullable=True)
    delivery_attempts = db.Column(db.Integer, default=0)

    created_at = db.Column(db.DateTime, default=utc_now)

    def __repr__(self):
        return f"<DomainEvent {self.event_name} {self.id}>"
