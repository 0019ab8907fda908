from ..extensions import db
from .mixins import TimestampMixin
from .types import IntEnumType, OrderStatus

order_order_category = db.Table(
    'order_order_category',
    db.Column('order_id', db.Integer, db.ForeignKey('order.id'), primary_key=True),
    db.Column('order_category_id', db.Integer, db.ForeignKey('order_category.id'), primary_key=True),
)


class OrderCategory(TimestampMixin, db.Model):
    __tablename__ = 'order_category'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    color = db.Column(db.String(7), nullable=False, default='#6c757d')

    orders = db.relationship('Order', secondary=order_order_category, back_populates='order_categories')

    def __repr__(self):
        return f'<OrderCategory {self.name}>'


class PaymentReceipt(TimestampMixin, db.Model):
    """Buyer payment that settles a set of orders."""
    __tablename__ = 'payment_receipt'

    id = db.Column(db.Integer, primary_key=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey('buyer.id'), nullable=False)
    total = db.Column(db.Float, nullable=False, default=0.0)
    deposit_total = db.Column(db.Float, nullable=False, default=0.0)
    issue_date = db.Column(db.Date, nullable=True)
    deadline_date = db.Column(db.Date, nullable=True)
    deposit_date = db.Column(db.Date, nullable=True)
    note = db.Column(db.Text, nullable=True)

    buyer = db.relationship('Buyer')
    orders = db.relationship('Order', back_populates='payment_receipt', lazy='dynamic')

    def __repr__(self):
        return f'<PaymentReceipt {self.id} buyer={self.buyer_id}>'


class Order(TimestampMixin, db.Model):
    """Demand-side record bound to exactly one inventory bucket.

    Costs and bucket quantities are maintained by services.order_lifecycle;
    writing the columns directly skips those rules.
    """
    __tablename__ = 'order'

    id = db.Column(db.Integer, primary_key=True)
    buyer_id = db.Column(db.Integer, db.ForeignKey('buyer.id'), nullable=False, index=True)
    product_variation_id = db.Column(db.Integer, db.ForeignKey('product_variation.id'), nullable=False)
    product_inventory_id = db.Column(db.Integer, db.ForeignKey('product_inventory.id'), nullable=False, index=True)
    shipping_receptacle_id = db.Column(db.Integer, db.ForeignKey('shipping_receptacle.id'), nullable=False)
    shipping_method_id = db.Column(db.Integer, db.ForeignKey('shipping_method.id'), nullable=False)
    payment_receipt_id = db.Column(db.Integer, db.ForeignKey('payment_receipt.id'), nullable=True, index=True)
    bundled_with_order_id = db.Column(db.Integer, db.ForeignKey('order.id'), nullable=True)

    status = db.Column(IntEnumType(OrderStatus), nullable=False, default=OrderStatus.ESTIMATE)

    item_quantity = db.Column(db.Integer, nullable=False)
    receptacle_quantity = db.Column(db.Integer, nullable=False)
    freight_quantity = db.Column(db.Integer, nullable=False)

    shipping_cost = db.Column(db.Float, nullable=False, default=0.0)
    materials_cost = db.Column(db.Float, nullable=False, default=0.0)
    sale_price_per_item = db.Column(db.Float, nullable=False, default=0.0)
    adjustment = db.Column(db.Float, nullable=False, default=0.0)

    arrival_date = db.Column(db.Date, nullable=False)
    shipping_date = db.Column(db.Date, nullable=False, index=True)
    # Mirrors of the bound bucket's identity dates
    manufacture_date = db.Column(db.Date, nullable=False)
    expiration_date = db.Column(db.Date, nullable=False)

    add_buyer_optional_cost = db.Column(db.Boolean, nullable=False, default=False)
    bundled_shipping_receptacle = db.Column(db.Boolean, nullable=False, default=False)
    note = db.Column(db.String(255), nullable=True)

    buyer = db.relationship('Buyer', back_populates='orders')
    product_variation = db.relationship('ProductVariation', back_populates='orders')
    product_inventory = db.relationship('ProductInventory', back_populates='orders')
    shipping_receptacle = db.relationship('ShippingReceptacle')
    shipping_method = db.relationship('ShippingMethod')
    payment_receipt = db.relationship('PaymentReceipt', back_populates='orders')
    bundled_with_order = db.relationship('Order', remote_side=[id])
    order_categories = db.relationship('OrderCategory', secondary=order_order_category, back_populates='orders')
    order_template = db.relationship(
        'OrderTemplate', back_populates='order', uselist=False, cascade='all, delete-orphan'
    )

    __table_args__ = (
        db.CheckConstraint(
            'item_quantity > 0 AND receptacle_quantity > 0 AND freight_quantity > 0',
            name='check_order_quantities_positive',
        ),
    )

    # Queries

    @classmethod
    def non_template(cls):
        """Orders wrapped by a template are not real demand."""
        template_order_ids = db.select(OrderTemplate.order_id)
        return cls.query.filter(cls.id.not_in(template_order_ids))

    @classmethod
    def by_order_category(cls, order_category_id, query=None):
        query = query if query is not None else cls.query
        return query.join(order_order_category, order_order_category.c.order_id == cls.id).filter(
            order_order_category.c.order_category_id == order_category_id
        )

    @classmethod
    def payment_orphans(cls, query=None):
        query = query if query is not None else cls.query
        return query.filter(cls.payment_receipt_id.is_(None))

    @classmethod
    def for_shipping_date(cls, shipping_date, query=None):
        query = query if query is not None else cls.query
        return query.filter(cls.shipping_date == shipping_date)

    # State

    @property
    def product(self):
        return self.product_variation.product if self.product_variation else None

    @property
    def is_shipped(self):
        return self.status == OrderStatus.SHIPPED

    @property
    def is_template(self):
        return self.order_template is not None

    @property
    def counts(self):
        return (self.item_quantity, self.receptacle_quantity, self.freight_quantity)

    # Financials

    @property
    def revenue(self):
        return (self.sale_price_per_item or 0) * (self.item_quantity or 0)

    @property
    def revenue_minus_handling(self):
        commission = self.buyer.commission_percentage if self.buyer else 0
        return self.revenue * (commission or 0)

    @property
    def expenses(self):
        return (self.materials_cost or 0) + (self.shipping_cost or 0) - (self.adjustment or 0)

    @property
    def total(self):
        return self.revenue - self.expenses

    def to_dict(self):
        return {
            'id': self.id,
            'buyer_id': self.buyer_id,
            'product_variation_id': self.product_variation_id,
            'product_inventory_id': self.product_inventory_id,
            'shipping_receptacle_id': self.shipping_receptacle_id,
            'shipping_method_id': self.shipping_method_id,
            'payment_receipt_id': self.payment_receipt_id,
            'bundled_with_order_id': self.bundled_with_order_id,
            'status': self.status.name.lower() if self.status is not None else None,
            'item_quantity': self.item_quantity,
            'receptacle_quantity': self.receptacle_quantity,
            'freight_quantity': self.freight_quantity,
            'shipping_cost': self.shipping_cost,
            'materials_cost': self.materials_cost,
            'sale_price_per_item': self.sale_price_per_item,
            'adjustment': self.adjustment,
            'arrival_date': self.arrival_date.isoformat() if self.arrival_date else None,
            'shipping_date': self.shipping_date.isoformat() if self.shipping_date else None,
            'manufacture_date': self.manufacture_date.isoformat() if self.manufacture_date else None,
            'expiration_date': self.expiration_date.isoformat() if self.expiration_date else None,
            'add_buyer_optional_cost': self.add_buyer_optional_cost,
            'bundled_shipping_receptacle': self.bundled_shipping_receptacle,
            'note': self.note,
            'order_category_ids': sorted(category.id for category in self.order_categories),
            'order_template_id': self.order_template.id if self.order_template else None,
        }

    def __str__(self):
        receptacle = self.shipping_receptacle.handle if self.shipping_receptacle else '?'
        buyer = self.buyer.handle if self.buyer else '?'
        return (
            f'{buyer} {self.shipping_date} Order{self.id} - {self.product_variation} * {self.item_quantity} '
            f'[{receptacle}*{self.receptacle_quantity}]'
        )

    def __repr__(self):
        return f'<Order {self.id} status={self.status}>'


class OrderTemplate(TimestampMixin, db.Model):
    """Reusable order shape. Wraps exactly one order, which stops counting as real demand."""
    __tablename__ = 'order_template'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('order.id'), nullable=False, unique=True)
    identifier = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    order = db.relationship('Order', back_populates='order_template')

    @property
    def item_quantity(self):
        return self.order.item_quantity

    @property
    def receptacle_quantity(self):
        return self.order.receptacle_quantity

    @property
    def freight_quantity(self):
        return self.order.freight_quantity

    @property
    def shipping_arrival_difference(self):
        """Days between the wrapped order's shipping and arrival."""
        return (self.order.arrival_date - self.order.shipping_date).days

    def to_dict(self):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'identifier': self.identifier,
            'notes': self.notes,
            'item_quantity': self.item_quantity,
            'receptacle_quantity': self.receptacle_quantity,
            'freight_quantity': self.freight_quantity,
            'shipping_arrival_difference': self.shipping_arrival_difference,
        }

    def __repr__(self):
        return f'<OrderTemplate {self.id} order={self.order_id}>'
