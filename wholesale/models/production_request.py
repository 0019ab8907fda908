from ..extensions import db
from .mixins import TimestampMixin
from .types import IntEnumType, ProductionRequestStatus


class ProductionRequest(TimestampMixin, db.Model):
    """Planned production against a bucket. Fulfilled quantity flows into the bucket's stock."""
    __tablename__ = 'production_request'

    id = db.Column(db.Integer, primary_key=True)
    product_variation_id = db.Column(db.Integer, db.ForeignKey('product_variation.id'), nullable=False)
    product_inventory_id = db.Column(db.Integer, db.ForeignKey('product_inventory.id'), nullable=False, index=True)
    production_zone_id = db.Column(db.Integer, db.ForeignKey('production_zone.id'), nullable=False)
    shipping_receptacle_id = db.Column(db.Integer, db.ForeignKey('shipping_receptacle.id'), nullable=True)

    request_quantity = db.Column(db.Integer, nullable=False, default=0)
    fulfilled_quantity = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(
        IntEnumType(ProductionRequestStatus), nullable=False, default=ProductionRequestStatus.PENDING
    )

    product_variation = db.relationship('ProductVariation')
    product_inventory = db.relationship('ProductInventory', back_populates='production_requests')
    production_zone = db.relationship('ProductionZone')
    shipping_receptacle = db.relationship('ShippingReceptacle')

    @property
    def quantity(self):
        return (self.fulfilled_quantity or 0) - (self.request_quantity or 0)

    @property
    def is_completed(self):
        return self.status == ProductionRequestStatus.COMPLETED

    def to_dict(self):
        return {
            'id': self.id,
            'product_variation_id': self.product_variation_id,
            'product_inventory_id': self.product_inventory_id,
            'production_zone_id': self.production_zone_id,
            'shipping_receptacle_id': self.shipping_receptacle_id,
            'request_quantity': self.request_quantity,
            'fulfilled_quantity': self.fulfilled_quantity,
            'quantity': self.quantity,
            'status': self.status.name.lower() if self.status is not None else None,
        }

    def __repr__(self):
        return f'<ProductionRequest {self.id} bucket={self.product_inventory_id} {self.fulfilled_quantity}/{self.request_quantity}>'
