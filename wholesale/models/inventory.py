import logging

from sqlalchemy import event, inspect

from ..extensions import db
from .mixins import TimestampMixin

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ('product_variation_id', 'manufacture_date', 'expiration_date')


class ProductInventory(TimestampMixin, db.Model):
    """Stock bucket shared by every order and production request with the same
    (product variation, manufacture date, expiration date) key.

    Buckets are created and destroyed by services.inventory_buckets; the identity
    columns are write-once.
    """
    __tablename__ = 'product_inventory'

    id = db.Column(db.Integer, primary_key=True)
    product_variation_id = db.Column(db.Integer, db.ForeignKey('product_variation.id'), nullable=False, index=True)
    manufacture_date = db.Column(db.Date, nullable=False)
    expiration_date = db.Column(db.Date, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    product_variation = db.relationship('ProductVariation', back_populates='product_inventories')
    orders = db.relationship('Order', back_populates='product_inventory', lazy='dynamic')
    production_requests = db.relationship('ProductionRequest', back_populates='product_inventory', lazy='dynamic')

    __table_args__ = (
        db.UniqueConstraint(
            'product_variation_id', 'manufacture_date', 'expiration_date',
            name='uq_product_inventory_variation_dates',
        ),
        db.CheckConstraint('quantity >= 0', name='check_inventory_quantity_non_negative'),
        db.CheckConstraint('expiration_date > manufacture_date', name='check_expiration_after_manufacture'),
    )

    @property
    def shelf_life_days(self):
        if not self.manufacture_date or not self.expiration_date:
            return None
        return (self.expiration_date - self.manufacture_date).days

    @property
    def label(self):
        return f'{self.manufacture_date.strftime("%m/%d")} +{self.shelf_life_days}d'

    @property
    def short_label(self):
        return f'+{self.shelf_life_days}d'

    @property
    def freight_quantity(self):
        """Whole freight bundles the on-hand stock fills."""
        variation = self.product_variation
        per_box = variation.find_per_box_quantity() or 1
        bundle = variation.default_shipping_receptacle.default_freight_bundle_quantity or 1
        return (self.quantity or 0) // per_box // bundle

    def to_dict(self):
        return {
            'id': self.id,
            'product_variation_id': self.product_variation_id,
            'manufacture_date': self.manufacture_date.isoformat() if self.manufacture_date else None,
            'expiration_date': self.expiration_date.isoformat() if self.expiration_date else None,
            'quantity': self.quantity,
            'label': self.label,
            'short_label': self.short_label,
        }

    def __str__(self):
        return self.label

    def __repr__(self):
        return f'<ProductInventory {self.product_variation_id} {self.manufacture_date}..{self.expiration_date}>'


@event.listens_for(ProductInventory, 'before_update')
def _reject_identity_changes(mapper, connection, target):
    """Last guard for buckets mutated outside the bucket manager."""
    from ..services.errors import InventoryValidationError

    state = inspect(target)
    changed = [name for name in IDENTITY_FIELDS if state.attrs[name].history.has_changes()]
    if changed:
        logger.warning("Rejected identity change on bucket %s: %s", target.id, ", ".join(changed))
        raise InventoryValidationError(
            {name: ['cannot be changed after the bucket is created'] for name in changed}
        )
