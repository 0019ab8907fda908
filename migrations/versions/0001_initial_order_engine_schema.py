"""initial order engine schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def _active():
    return sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true())


def upgrade():
    # Reference data
    op.create_table(
        'buyer',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('handle', sa.String(length=64), nullable=False),
        sa.Column('handling_cost', sa.Float(), nullable=False),
        sa.Column('optional_cost', sa.Float(), nullable=False),
        sa.Column('daily_cost', sa.Float(), nullable=False),
        sa.Column('commission_percentage', sa.Float(), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('representative_phone', sa.String(length=32), nullable=True),
        _active(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.UniqueConstraint('handle'),
    )
    op.create_table(
        'shipping_organization',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('handle', sa.String(length=64), nullable=False),
        _active(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'shipping_method',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('shipping_organization_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('handle', sa.String(length=64), nullable=False),
        sa.Column('daily_cost', sa.Float(), nullable=False),
        sa.Column('per_shipping_receptacle_cost', sa.Float(), nullable=False),
        sa.Column('per_freight_unit_cost', sa.Float(), nullable=False),
        _active(),
        *_timestamps(),
        sa.CheckConstraint('per_shipping_receptacle_cost >= 0', name='check_per_receptacle_cost_non_negative'),
        sa.CheckConstraint('per_freight_unit_cost >= 0', name='check_per_freight_cost_non_negative'),
        sa.ForeignKeyConstraint(['shipping_organization_id'], ['shipping_organization.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.UniqueConstraint('handle'),
    )
    op.create_table(
        'buyer_shipping_method',
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('shipping_method_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.ForeignKeyConstraint(['shipping_method_id'], ['shipping_method.id']),
        sa.PrimaryKeyConstraint('buyer_id', 'shipping_method_id'),
    )
    op.create_table(
        'shipping_receptacle',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('handle', sa.String(length=64), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.Column('default_freight_bundle_quantity', sa.Integer(), nullable=False),
        sa.Column('interior_height', sa.Float(), nullable=False),
        sa.Column('interior_width', sa.Float(), nullable=False),
        sa.Column('interior_depth', sa.Float(), nullable=False),
        sa.Column('exterior_height', sa.Float(), nullable=False),
        sa.Column('exterior_width', sa.Float(), nullable=False),
        sa.Column('exterior_depth', sa.Float(), nullable=False),
        _active(),
        *_timestamps(),
        sa.CheckConstraint('default_freight_bundle_quantity > 0', name='check_freight_bundle_positive'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'material_category',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        _active(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'material',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('material_category_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        sa.Column('per', sa.Integer(), nullable=False),
        _active(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['material_category_id'], ['material_category.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'product',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('units', sa.String(length=32), nullable=False),
        sa.Column('exterior_height', sa.Float(), nullable=False),
        sa.Column('exterior_width', sa.Float(), nullable=False),
        sa.Column('exterior_depth', sa.Float(), nullable=False),
        _active(),
        *_timestamps(),
        sa.CheckConstraint(
            'exterior_height >= 0 AND exterior_width >= 0 AND exterior_depth >= 0',
            name='check_product_dimensions_non_negative',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'product_material',
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['material_id'], ['material.id']),
        sa.ForeignKeyConstraint(['product_id'], ['product.id']),
        sa.PrimaryKeyConstraint('product_id', 'material_id'),
    )
    op.create_table(
        'packaging',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('cost', sa.Float(), nullable=False),
        _active(),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_id'], ['product.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'production_zone',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        _active(),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'product_variation',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('default_shipping_receptacle_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('handle', sa.String(length=64), nullable=False),
        sa.Column('primary_content_volume', sa.Float(), nullable=False),
        sa.Column('default_per_box', sa.Integer(), nullable=True),
        sa.Column('spacing_volume_adjustment', sa.Float(), nullable=True),
        sa.Column('shelf_life', sa.Integer(), nullable=True),
        _active(),
        *_timestamps(),
        sa.CheckConstraint('primary_content_volume > 0', name='check_primary_content_volume_positive'),
        sa.ForeignKeyConstraint(['default_shipping_receptacle_id'], ['shipping_receptacle.id']),
        sa.ForeignKeyConstraint(['product_id'], ['product.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'product_variation_packaging',
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('packaging_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['packaging_id'], ['packaging.id']),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variation.id']),
        sa.PrimaryKeyConstraint('product_variation_id', 'packaging_id'),
    )
    op.create_table(
        'product_variation_production_zone',
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('production_zone_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variation.id']),
        sa.ForeignKeyConstraint(['production_zone_id'], ['production_zone.id']),
        sa.PrimaryKeyConstraint('product_variation_id', 'production_zone_id'),
    )

    # Supply side
    op.create_table(
        'product_inventory',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('manufacture_date', sa.Date(), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('quantity >= 0', name='check_inventory_quantity_non_negative'),
        sa.CheckConstraint('expiration_date > manufacture_date', name='check_expiration_after_manufacture'),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variation.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'product_variation_id', 'manufacture_date', 'expiration_date',
            name='uq_product_inventory_variation_dates',
        ),
    )
    with op.batch_alter_table('product_inventory', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_product_inventory_product_variation_id'), ['product_variation_id'], unique=False)

    op.create_table(
        'production_request',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('product_inventory_id', sa.Integer(), nullable=False),
        sa.Column('production_zone_id', sa.Integer(), nullable=False),
        sa.Column('shipping_receptacle_id', sa.Integer(), nullable=True),
        sa.Column('request_quantity', sa.Integer(), nullable=False),
        sa.Column('fulfilled_quantity', sa.Integer(), nullable=False),
        sa.Column('status', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['product_inventory_id'], ['product_inventory.id']),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variation.id']),
        sa.ForeignKeyConstraint(['production_zone_id'], ['production_zone.id']),
        sa.ForeignKeyConstraint(['shipping_receptacle_id'], ['shipping_receptacle.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('production_request', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_production_request_product_inventory_id'), ['product_inventory_id'], unique=False)

    # Demand side
    op.create_table(
        'order_category',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'payment_receipt',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('total', sa.Float(), nullable=False),
        sa.Column('deposit_total', sa.Float(), nullable=False),
        sa.Column('issue_date', sa.Date(), nullable=True),
        sa.Column('deadline_date', sa.Date(), nullable=True),
        sa.Column('deposit_date', sa.Date(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'order',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('buyer_id', sa.Integer(), nullable=False),
        sa.Column('product_variation_id', sa.Integer(), nullable=False),
        sa.Column('product_inventory_id', sa.Integer(), nullable=False),
        sa.Column('shipping_receptacle_id', sa.Integer(), nullable=False),
        sa.Column('shipping_method_id', sa.Integer(), nullable=False),
        sa.Column('payment_receipt_id', sa.Integer(), nullable=True),
        sa.Column('bundled_with_order_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.Integer(), nullable=False),
        sa.Column('item_quantity', sa.Integer(), nullable=False),
        sa.Column('receptacle_quantity', sa.Integer(), nullable=False),
        sa.Column('freight_quantity', sa.Integer(), nullable=False),
        sa.Column('shipping_cost', sa.Float(), nullable=False),
        sa.Column('materials_cost', sa.Float(), nullable=False),
        sa.Column('sale_price_per_item', sa.Float(), nullable=False),
        sa.Column('adjustment', sa.Float(), nullable=False),
        sa.Column('arrival_date', sa.Date(), nullable=False),
        sa.Column('shipping_date', sa.Date(), nullable=False),
        sa.Column('manufacture_date', sa.Date(), nullable=False),
        sa.Column('expiration_date', sa.Date(), nullable=False),
        sa.Column('add_buyer_optional_cost', sa.Boolean(), nullable=False),
        sa.Column('bundled_shipping_receptacle', sa.Boolean(), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            'item_quantity > 0 AND receptacle_quantity > 0 AND freight_quantity > 0',
            name='check_order_quantities_positive',
        ),
        sa.ForeignKeyConstraint(['bundled_with_order_id'], ['order.id']),
        sa.ForeignKeyConstraint(['buyer_id'], ['buyer.id']),
        sa.ForeignKeyConstraint(['payment_receipt_id'], ['payment_receipt.id']),
        sa.ForeignKeyConstraint(['product_inventory_id'], ['product_inventory.id']),
        sa.ForeignKeyConstraint(['product_variation_id'], ['product_variation.id']),
        sa.ForeignKeyConstraint(['shipping_method_id'], ['shipping_method.id']),
        sa.ForeignKeyConstraint(['shipping_receptacle_id'], ['shipping_receptacle.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('order', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_order_buyer_id'), ['buyer_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_order_product_inventory_id'), ['product_inventory_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_order_payment_receipt_id'), ['payment_receipt_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_order_shipping_date'), ['shipping_date'], unique=False)

    op.create_table(
        'order_order_category',
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('order_category_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['order_category_id'], ['order_category.id']),
        sa.ForeignKeyConstraint(['order_id'], ['order.id']),
        sa.PrimaryKeyConstraint('order_id', 'order_category_id'),
    )
    op.create_table(
        'order_template',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('identifier', sa.String(length=128), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['order_id'], ['order.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id'),
    )

    # Outbox
    op.create_table(
        'domain_event',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_name', sa.String(length=128), nullable=False),
        sa.Column('occurred_at', sa.DateTime(), nullable=True),
        sa.Column('channel', sa.String(length=128), nullable=True),
        sa.Column('action', sa.String(length=16), nullable=True),
        sa.Column('entity_type', sa.String(length=64), nullable=True),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('correlation_id', sa.String(length=128), nullable=True),
        sa.Column('source', sa.String(length=64), nullable=True),
        sa.Column('schema_version', sa.Integer(), nullable=True),
        sa.Column('properties', sa.JSON(), nullable=True),
        sa.Column('is_processed', sa.Boolean(), nullable=True),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.Column('delivery_attempts', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('domain_event', schema=None) as batch_op:
        for column in ('event_name', 'occurred_at', 'channel', 'entity_type', 'entity_id', 'correlation_id', 'is_processed'):
            batch_op.create_index(batch_op.f(f'ix_domain_event_{column}'), [column], unique=False)


def downgrade():
    op.drop_table('domain_event')
    op.drop_table('order_template')
    op.drop_table('order_order_category')
    op.drop_table('order')
    op.drop_table('payment_receipt')
    op.drop_table('order_category')
    op.drop_table('production_request')
    op.drop_table('product_inventory')
    op.drop_table('product_variation_production_zone')
    op.drop_table('product_variation_packaging')
    op.drop_table('product_variation')
    op.drop_table('production_zone')
    op.drop_table('packaging')
    op.drop_table('product_material')
    op.drop_table('product')
    op.drop_table('material')
    op.drop_table('material_category')
    op.drop_table('shipping_receptacle')
    op.drop_table('buyer_shipping_method')
    op.drop_table('shipping_method')
    op.drop_table('shipping_organization')
    op.drop_table('buyer')
