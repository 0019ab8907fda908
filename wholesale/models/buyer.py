from ..extensions import db
from .mixins import ActivatableMixin, TimestampMixin

buyer_shipping_method = db.Table(
    'buyer_shipping_method',
    db.Column('buyer_id', db.Integer, db.ForeignKey('buyer.id'), primary_key=True),
    db.Column('shipping_method_id', db.Integer, db.ForeignKey('shipping_method.id'), primary_key=True),
)


class Buyer(ActivatableMixin, TimestampMixin, db.Model):
    """Wholesale customer; carries the per-receptacle handling rates charged on its orders."""
    __tablename__ = 'buyer'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False, unique=True)
    handle = db.Column(db.String(64), nullable=False, unique=True)

    # Per shipping receptacle
    handling_cost = db.Column(db.Float, nullable=False, default=0.0)
    optional_cost = db.Column(db.Float, nullable=False, default=0.0)
    daily_cost = db.Column(db.Float, nullable=False, default=0.0)
    commission_percentage = db.Column(db.Float, nullable=False, default=0.0)

    color = db.Column(db.String(7), nullable=True)
    representative_phone = db.Column(db.String(32), nullable=True)

    shipping_methods = db.relationship(
        'ShippingMethod', secondary=buyer_shipping_method, back_populates='buyers'
    )
    orders = db.relationship('Order', back_populates='buyer', lazy='dynamic')

    def orders_with_date(self, date):
        return self.orders.filter_by(shipping_date=date)

    def outstanding_payment_orders(self):
        return self.orders.filter_by(payment_receipt_id=None)

    def __repr__(self):
        return f'<Buyer {self.handle}>'
