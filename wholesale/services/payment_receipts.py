import logging

from ..extensions import db
from ..models import Order, PaymentReceipt

logger = logging.getLogger(__name__)


def destroy_payment_receipt(receipt: PaymentReceipt) -> int:
    """Delete a receipt and detach its orders. Returns how many orders were detached.

    Detaching has no inventory or cost effect.
    """
    receipt_id = receipt.id
    try:
        detached = (
            Order.query.filter(Order.payment_receipt_id == receipt_id)
            .update({Order.payment_receipt_id: None}, synchronize_session='fetch')
        )
        db.session.delete(receipt)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info("Destroyed payment receipt %s, detached %s orders", receipt_id, detached)
    return detached
