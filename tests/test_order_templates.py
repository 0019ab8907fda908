from datetime import date

import pytest

from wholesale.extensions import db
from wholesale.models import Buyer, Order, OrderCategory, OrderTemplate, ProductInventory
from wholesale.models.types import OrderStatus
from wholesale.services.errors import TemplateInvariantError
from wholesale.services.inventory_buckets import update_bucket
from wholesale.services.order_lifecycle import create_order, update_order
from wholesale.services.order_templates import (
    attach_template,
    copy_to_template,
    create_order_from_template,
    derive_order_attributes,
    destroy_template,
    find_associable_template,
    list_templates,
)


@pytest.fixture
def categories(app_context):
    standing = OrderCategory(name='Standing order', color='#198754')
    rush = OrderCategory(name='Rush', color='#dc3545')
    db.session.add_all([standing, rush])
    db.session.commit()
    return standing, rush


@pytest.fixture
def template(order_attributes, categories):
    standing, _ = categories
    order = create_order(
        order_attributes(is_order_template=True, order_category_ids=[standing.id]),
        template_identifier='Weekly harbor run',
        template_notes='Mondays',
    )
    return order.order_template


class TestCopyToTemplate:
    def test_copy_is_an_estimate_template_with_same_categories(self, order_attributes, categories):
        standing, rush = categories
        order = create_order(order_attributes(item_quantity=12, receptacle_quantity=1,
                                              order_category_ids=[standing.id, rush.id]))
        update_bucket(order.product_inventory, quantity=12)
        db.session.commit()
        update_order(order, {'status': 'shipped'})

        copied = copy_to_template(order, identifier='Harbor standard', notes='copied')

        assert copied.identifier == 'Harbor standard'
        assert copied.order_id != order.id
        assert copied.order.status == OrderStatus.ESTIMATE
        assert sorted(category.id for category in copied.order.order_categories) == [standing.id, rush.id]
        assert db.session.get(ProductInventory, order.product_inventory_id).quantity == 0
        assert order.order_template is None

    def test_overrides_apply_to_the_copy(self, order_attributes):
        order = create_order(order_attributes())
        copied = copy_to_template(order, overrides={'item_quantity': 60, 'receptacle_quantity': 6})
        assert copied.item_quantity == 60
        assert order.item_quantity == 100


class TestDeriveOrder:
    def test_dates_keep_their_offsets(self, template):
        attributes = derive_order_attributes(template, {'shipping_date': '2026-12-07'})

        assert attributes['shipping_date'] == date(2026, 12, 7)
        assert attributes['arrival_date'] == date(2026, 12, 9)
        assert attributes['manufacture_date'] == date(2026, 12, 4)
        assert attributes['expiration_date'] == date(2027, 1, 3)
        assert attributes['is_order_template'] is False
        assert attributes['bundled_with_order_id'] is None
        assert 'product_inventory_id' not in attributes

    def test_derived_order_is_real_and_gets_its_own_bucket(self, template, categories):
        standing, _ = categories
        order = create_order_from_template(template, {'shipping_date': '2026-12-07', 'item_quantity': 40,
                                                      'receptacle_quantity': 4})

        assert not order.is_template
        assert order.item_quantity == 40
        assert order.product_inventory_id != template.order.product_inventory_id
        assert order.product_inventory.manufacture_date == date(2026, 12, 4)
        assert [category.id for category in order.order_categories] == [standing.id]
        assert order.id in [real.id for real in Order.non_template()]

    def test_order_derived_from_a_shipped_template_is_an_estimate(self, order_attributes):
        order = create_order(order_attributes(item_quantity=10, receptacle_quantity=1))
        update_bucket(order.product_inventory, quantity=100)
        db.session.commit()
        update_order(order, {'status': 'shipped'})
        update_order(order, {'is_order_template': True})
        shipped_bucket_id = order.product_inventory_id

        derived = create_order_from_template(order.order_template, {'shipping_date': '2026-12-01'})

        assert derived.status == OrderStatus.ESTIMATE
        assert derived.product_inventory.quantity == 0
        assert db.session.get(ProductInventory, shipped_bucket_id).quantity == 90

    def test_derived_order_is_associated_back_to_its_template(self, template):
        order = create_order_from_template(template, {'shipping_date': '2026-12-07'})
        assert find_associable_template(order).id == template.id


class TestAssociableTemplate:
    def test_own_template_wins(self, template):
        assert find_associable_template(template.order) is template

    def test_category_set_must_match_exactly(self, template, order_attributes, categories):
        standing, rush = categories
        plain = create_order(order_attributes())
        both = create_order(order_attributes(order_category_ids=[standing.id, rush.id]))
        matching = create_order(order_attributes(order_category_ids=[standing.id]))

        assert find_associable_template(plain) is None
        assert find_associable_template(both) is None
        assert find_associable_template(matching).id == template.id

    def test_different_buyer_does_not_match(self, template, order_attributes, categories):
        standing, _ = categories
        other = Buyer(name='Dockside Deli', handle='dockside')
        db.session.add(other)
        db.session.commit()
        order = create_order(order_attributes(buyer_id=other.id, order_category_ids=[standing.id]))
        assert find_associable_template(order) is None


class TestTemplateInvariants:
    def test_second_template_for_an_order_is_rejected(self, template):
        with pytest.raises(TemplateInvariantError) as excinfo:
            attach_template(template.order)
        assert 'order_id' in excinfo.value.errors

    def test_template_needs_an_order(self, app_context):
        with pytest.raises(TemplateInvariantError):
            attach_template(None)

    def test_list_templates(self, template):
        assert [listed.id for listed in list_templates()] == [template.id]
        assert list_templates()[0].to_dict()['identifier'] == 'Weekly harbor run'

    def test_destroy_template_removes_wrapped_order(self, template):
        order_id = template.order_id
        snapshot = destroy_template(template)

        assert snapshot['id'] == order_id
        assert OrderTemplate.query.count() == 0
        assert db.session.get(Order, order_id) is None
