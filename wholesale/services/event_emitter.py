"""Domain event emission helper.

Synopsis:
Writes DomainEvent outbox rows for the order list push layer. Emission runs
after the triggering operation has committed, so a failure here is logged and
rolled back without touching the committed order data.

Glossary:
- Channel: stream key "<shipping date>:orders_list" the push layer fans out on.
- Action: "replace" (re-render a row) or "remove" (drop a row).
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models.domain_event import DomainEvent
from ..models.mixins import utc_now

logger = logging.getLogger(__name__)

ORDERS_LIST = "orders_list"


def orders_channel(shipping_date: date | str | None) -> str:
    if isinstance(shipping_date, date):
        stamp = shipping_date.isoformat()
    else:
        stamp = shipping_date or "undated"
    return f"{stamp}:{ORDERS_LIST}"


def events_enabled() -> bool:
    if has_app_context():
        return bool(current_app.config.get("ORDER_EVENTS_ENABLED", True))
    return False


class EventEmitter:
    """Lightweight event emitter that writes to DomainEvent (outbox style)."""

    @staticmethod
    def emit(
        event_name: str,
        properties: Optional[Dict[str, Any]] = None,
        *,
        channel: Optional[str] = None,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        correlation_id: Optional[str] = None,
        source: str = "engine",
        schema_version: int = 1,
        auto_commit: bool = True,
    ) -> Optional[DomainEvent]:
        if not events_enabled():
            return None
        try:
            event = DomainEvent(
                event_name=event_name,
                occurred_at=utc_now(),
                channel=channel,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                correlation_id=correlation_id or str(uuid.uuid4()),
                source=source,
                schema_version=schema_version,
                properties=dict(properties or {}),
                is_processed=False,
                delivery_attempts=0,
            )
            db.session.add(event)
            if auto_commit:
                db.session.commit()
            return event
        except SQLAlchemyError as exc:
            # The operation that triggered this event has already committed
            logger.error("Failed to emit event %s: %s", event_name, exc)
            db.session.rollback()
            return None


def emit_order_created(snapshot: Dict[str, Any]) -> Optional[DomainEvent]:
    return EventEmitter.emit(
        "order_created",
        snapshot,
        channel=orders_channel(snapshot.get("shipping_date")),
        action="replace",
        entity_type="order",
        entity_id=snapshot.get("id"),
    )


def emit_order_updated(snapshot: Dict[str, Any], associable_template_id: Optional[int]) -> None:
    channel = orders_channel(snapshot.get("shipping_date"))
    correlation_id = str(uuid.uuid4())
    if associable_template_id is not None:
        EventEmitter.emit(
            "order_template_replaced",
            {"order_id": snapshot.get("id"), "order_template_id": associable_template_id},
            channel=channel,
            action="replace",
            entity_type="order_template",
            entity_id=associable_template_id,
            correlation_id=correlation_id,
        )
    EventEmitter.emit(
        "order_updated",
        snapshot,
        channel=channel,
        action="replace",
        entity_type="order",
        entity_id=snapshot.get("id"),
        correlation_id=correlation_id,
    )


def emit_order_destroyed(snapshot: Dict[str, Any], stored_template_id: Optional[int]) -> Optional[DomainEvent]:
    channel = orders_channel(snapshot.get("shipping_date"))
    if stored_template_id is not None:
        return EventEmitter.emit(
            "order_destroyed",
            {**snapshot, "order_template_id": stored_template_id},
            channel=channel,
            action="replace",
            entity_type="order_template",
            entity_id=stored_template_id,
        )
    return EventEmitter.emit(
        "order_destroyed",
        snapshot,
        channel=channel,
        action="remove",
        entity_type="order",
        entity_id=snapshot.get("id"),
    )
