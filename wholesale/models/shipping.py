from ..extensions import db
from .buyer import buyer_shipping_method
from .mixins import ActivatableMixin, TimestampMixin


class ShippingOrganization(ActivatableMixin, TimestampMixin, db.Model):
    __tablename__ = 'shipping_organization'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    handle = db.Column(db.String(64), nullable=False)

    shipping_methods = db.relationship('ShippingMethod', back_populates='shipping_organization')

    def __repr__(self):
        return f'<ShippingOrganization {self.handle}>'


class ShippingMethod(ActivatableMixin, TimestampMixin, db.Model):
    """Carrier service with its per-receptacle and per-freight-unit rates."""
    __tablename__ = 'shipping_method'

    id = db.Column(db.Integer, primary_key=True)
    shipping_organization_id = db.Column(db.Integer, db.ForeignKey('shipping_organization.id'), nullable=False)
    name = db.Column(db.String(128), nullable=False, unique=True)
    handle = db.Column(db.String(64), nullable=False, unique=True)

    daily_cost = db.Column(db.Float, nullable=False, default=0.0)
    per_shipping_receptacle_cost = db.Column(db.Float, nullable=False, default=0.0)
    per_freight_unit_cost = db.Column(db.Float, nullable=False, default=0.0)

    shipping_organization = db.relationship('ShippingOrganization', back_populates='shipping_methods')
    buyers = db.relationship('Buyer', secondary=buyer_shipping_method, back_populates='shipping_methods')

    __table_args__ = (
        db.CheckConstraint('per_shipping_receptacle_cost >= 0', name='check_per_receptacle_cost_non_negative'),
        db.CheckConstraint('per_freight_unit_cost >= 0', name='check_per_freight_cost_non_negative'),
    )

    def __repr__(self):
        return f'<ShippingMethod {self.handle}>'


class ShippingReceptacle(ActivatableMixin, TimestampMixin, db.Model):
    """Box or crate an order ships in; geometry drives the per-box estimate."""
    __tablename__ = 'shipping_receptacle'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    handle = db.Column(db.String(64), nullable=False)
    cost = db.Column(db.Float, nullable=False, default=0.0)
    default_freight_bundle_quantity = db.Column(db.Integer, nullable=False, default=1)

    interior_height = db.Column(db.Float, nullable=False, default=0.0)
    interior_width = db.Column(db.Float, nullable=False, default=0.0)
    interior_depth = db.Column(db.Float, nullable=False, default=0.0)
    exterior_height = db.Column(db.Float, nullable=False, default=0.0)
    exterior_width = db.Column(db.Float, nullable=False, default=0.0)
    exterior_depth = db.Column(db.Float, nullable=False, default=0.0)

    __table_args__ = (
        db.CheckConstraint('default_freight_bundle_quantity > 0', name='check_freight_bundle_positive'),
    )

    @property
    def interior_volume(self):
        return (self.interior_height or 0) * (self.interior_width or 0) * (self.interior_depth or 0)

    def estimate_per_box_quantity(self, product, adjustment=0.90):
        from ..services.costing import estimate_per_box_quantity
        return estimate_per_box_quantity(self, product, adjustment=adjustment)

    def __repr__(self):
        return f'<ShippingReceptacle {self.handle}>'
