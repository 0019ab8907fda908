from ..extensions import db
from .mixins import ActivatableMixin, TimestampMixin
from .types import IntEnumType, MaterialPer

product_material = db.Table(
    'product_material',
    db.Column('product_id', db.Integer, db.ForeignKey('product.id'), primary_key=True),
    db.Column('material_id', db.Integer, db.ForeignKey('material.id'), primary_key=True),
)

product_variation_packaging = db.Table(
    'product_variation_packaging',
    db.Column('product_variation_id', db.Integer, db.ForeignKey('product_variation.id'), primary_key=True),
    db.Column('packaging_id', db.Integer, db.ForeignKey('packaging.id'), primary_key=True),
)

product_variation_production_zone = db.Table(
    'product_variation_production_zone',
    db.Column('product_variation_id', db.Integer, db.ForeignKey('product_variation.id'), primary_key=True),
    db.Column('production_zone_id', db.Integer, db.ForeignKey('production_zone.id'), primary_key=True),
)


class MaterialCategory(ActivatableMixin, TimestampMixin, db.Model):
    __tablename__ = 'material_category'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)

    materials = db.relationship('Material', back_populates='material_category', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<MaterialCategory {self.name}>'


class Material(ActivatableMixin, TimestampMixin, db.Model):
    """Consumable charged to a product, costed against one unit basis (see MaterialPer)."""
    __tablename__ = 'material'

    id = db.Column(db.Integer, primary_key=True)
    material_category_id = db.Column(db.Integer, db.ForeignKey('material_category.id'), nullable=True)
    name = db.Column(db.String(128), nullable=False)
    cost = db.Column(db.Float, nullable=False, default=0.0)
    per = db.Column(IntEnumType(MaterialPer), nullable=False, default=MaterialPer.ITEM)

    material_category = db.relationship('MaterialCategory', back_populates='materials')
    products = db.relationship('Product', secondary=product_material, back_populates='materials')

    def __repr__(self):
        return f'<Material {self.name} per {self.per.name.lower() if self.per is not None else None}>'


class Product(ActivatableMixin, TimestampMixin, db.Model):
    """Sellable product; its materials and exterior geometry feed the cost model."""
    __tablename__ = 'product'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    units = db.Column(db.String(32), nullable=False, default='pc')

    exterior_height = db.Column(db.Float, nullable=False, default=0.0)
    exterior_width = db.Column(db.Float, nullable=False, default=0.0)
    exterior_depth = db.Column(db.Float, nullable=False, default=0.0)

    materials = db.relationship('Material', secondary=product_material, back_populates='products')
    product_variations = db.relationship('ProductVariation', back_populates='product')
    packagings = db.relationship('Packaging', back_populates='product')

    __table_args__ = (
        db.CheckConstraint(
            'exterior_height >= 0 AND exterior_width >= 0 AND exterior_depth >= 0',
            name='check_product_dimensions_non_negative',
        ),
    )

    @property
    def exterior_volume(self):
        return (self.exterior_height or 0) * (self.exterior_width or 0) * (self.exterior_depth or 0)

    def __str__(self):
        return f'{self.name} ({self.units})'

    def __repr__(self):
        return f'<Product {self.name}>'


class Packaging(ActivatableMixin, TimestampMixin, db.Model):
    """Per-item wrapping. A null product_id marks packaging shared across products."""
    __tablename__ = 'packaging'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=True)
    name = db.Column(db.String(128), nullable=False)
    cost = db.Column(db.Float, nullable=False, default=0.0)

    product = db.relationship('Product', back_populates='packagings')
    product_variations = db.relationship(
        'ProductVariation', secondary=product_variation_packaging, back_populates='packagings'
    )

    @classmethod
    def global_packaging(cls):
        return cls.query.filter(cls.product_id.is_(None))

    def __repr__(self):
        return f'<Packaging {self.name}>'


class ProductionZone(ActivatableMixin, TimestampMixin, db.Model):
    __tablename__ = 'production_zone'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)

    product_variations = db.relationship(
        'ProductVariation', secondary=product_variation_production_zone, back_populates='production_zones'
    )

    def __repr__(self):
        return f'<ProductionZone {self.name}>'


class ProductVariation(ActivatableMixin, TimestampMixin, db.Model):
    """A concrete sellable form of a product: content volume, packing and packaging."""
    __tablename__ = 'product_variation'

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=False)
    default_shipping_receptacle_id = db.Column(
        db.Integer, db.ForeignKey('shipping_receptacle.id'), nullable=False
    )
    name = db.Column(db.String(128), nullable=False)
    handle = db.Column(db.String(64), nullable=False)

    primary_content_volume = db.Column(db.Float, nullable=False, default=1.0)
    default_per_box = db.Column(db.Integer, nullable=True)
    spacing_volume_adjustment = db.Column(db.Float, nullable=True)
    shelf_life = db.Column(db.Integer, nullable=True)  # days

    product = db.relationship('Product', back_populates='product_variations')
    default_shipping_receptacle = db.relationship('ShippingReceptacle')
    packagings = db.relationship(
        'Packaging', secondary=product_variation_packaging, back_populates='product_variations'
    )
    production_zones = db.relationship(
        'ProductionZone', secondary=product_variation_production_zone, back_populates='product_variations'
    )
    product_inventories = db.relationship('ProductInventory', back_populates='product_variation', lazy='dynamic')
    orders = db.relationship('Order', back_populates='product_variation', lazy='dynamic')

    __table_args__ = (
        db.CheckConstraint('primary_content_volume > 0', name='check_primary_content_volume_positive'),
    )

    @property
    def units(self):
        return self.product.units if self.product else None

    @property
    def packaging_cost(self):
        return sum((packaging.cost or 0) for packaging in self.packagings)

    @property
    def order_header_name(self):
        return f'{self.handle} (@{self.primary_content_volume}/{self.units})'

    def find_per_box_quantity(self, default_adjustment=None):
        from ..services import costing
        return costing.find_per_box_quantity(self, default_adjustment=default_adjustment)

    def production_cost_estimate(self, shipping_receptacle=None, quantity=None):
        from ..services import costing
        return costing.production_cost_estimate(self, shipping_receptacle=shipping_receptacle, quantity=quantity)

    def __str__(self):
        return f'{self.name} - {self.primary_content_volume}'

    def __repr__(self):
        return f'<ProductVariation {self.handle}>'
