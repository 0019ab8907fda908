from datetime import date

import pytest

from wholesale.extensions import db
from wholesale.models import OrderCategory


@pytest.fixture
def order_payload(order_attributes):
    def _build(**overrides):
        return {
            key: value.isoformat() if isinstance(value, date) else value
            for key, value in order_attributes(**overrides).items()
        }

    return _build


def _create(client, payload):
    response = client.post('/api/orders', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


class TestOrderRoutes:
    def test_create_and_show(self, client, order_payload):
        created = _create(client, order_payload())
        assert created['shipping_cost'] == 60.0
        assert created['status'] == 'estimate'
        assert created['manufacture_date'] == '2026-10-30'

        response = client.get(f"/api/orders/{created['id']}")
        data = response.get_json()['data']
        assert response.status_code == 200
        assert data['revenue'] == 400.0
        assert data['expenses'] == 560.0
        assert data['total'] == -160.0
        assert data['label'].startswith('harbor 2026-11-02')

    def test_invalid_create_is_422_with_field_errors(self, client, order_payload):
        response = client.post('/api/orders', json=order_payload(item_quantity=-3, arrival_date='soon'))
        body = response.get_json()

        assert response.status_code == 422
        assert body['success'] is False
        assert body['errors']['arrival_date'] == ['must be a date (YYYY-MM-DD)']

    def test_scalar_category_ids_is_422(self, client, order_payload):
        response = client.post('/api/orders', json=order_payload(order_category_ids=3))

        assert response.status_code == 422
        assert response.get_json()['errors']['order_category_ids'] == ['must be a list of ids']

    def test_form_category_ids_keep_every_value(self, client, order_payload):
        categories = [OrderCategory(name=f'Route {number}', color='#0d6efd') for number in range(12)]
        db.session.add_all(categories)
        db.session.commit()
        payload = {key: str(value) for key, value in order_payload().items()}
        payload['order_category_ids'] = [str(categories[1].id), str(categories[11].id)]

        response = client.post('/api/orders', data=payload)

        assert response.status_code == 201, response.get_json()
        assert response.get_json()['data']['order_category_ids'] == [categories[1].id, categories[11].id]

    def test_missing_order_is_404(self, client, app_context):
        assert client.get('/api/orders/41').status_code == 404
        assert client.patch('/api/orders/41', json={}).status_code == 404
        assert client.delete('/api/orders/41').status_code == 404

    def test_shipping_without_stock_is_422(self, client, order_payload):
        created = _create(client, order_payload())
        response = client.patch(f"/api/orders/{created['id']}", json={'status': 'shipped'})
        assert response.status_code == 422
        assert 'quantity' in response.get_json()['errors']

    def test_update_and_delete(self, client, order_payload):
        created = _create(client, order_payload())

        response = client.patch(f"/api/orders/{created['id']}", json={'note': 'gate 4', 'status': 'confirmed'})
        assert response.status_code == 200
        assert response.get_json()['data']['note'] == 'gate 4'

        response = client.delete(f"/api/orders/{created['id']}")
        assert response.status_code == 200
        assert response.get_json()['data']['status'] == 'confirmed'
        assert client.get(f"/api/orders/{created['id']}").status_code == 404


class TestTemplateRoutes:
    def test_copy_list_derive_and_delete(self, client, order_payload):
        created = _create(client, order_payload())

        response = client.post(f"/api/orders/{created['id']}/template", json={'identifier': 'Harbor weekly'})
        assert response.status_code == 201
        template = response.get_json()['data']
        assert template['shipping_arrival_difference'] == 2

        listed = client.get('/api/templates').get_json()['data']
        assert [entry['id'] for entry in listed] == [template['id']]

        response = client.post(f"/api/templates/{template['id']}/orders", json={'shipping_date': '2026-11-09'})
        assert response.status_code == 201
        derived = response.get_json()['data']
        assert derived['arrival_date'] == '2026-11-11'
        assert derived['order_template_id'] is None

        response = client.delete(f"/api/templates/{template['id']}")
        assert response.status_code == 200
        assert client.get('/api/templates').get_json()['data'] == []

    def test_missing_template_is_404(self, client, app_context):
        assert client.post('/api/templates/9/orders', json={}).status_code == 404


class TestProductionRoutes:
    def test_request_lifecycle_moves_bucket_stock(self, client, order_payload):
        created = _create(client, order_payload())
        bucket_id = created['product_inventory_id']

        response = client.post('/api/production/requests', json={'product_inventory_id': bucket_id, 'request_quantity': 100})
        assert response.status_code == 201
        request_id = response.get_json()['data']['id']

        response = client.patch(f'/api/production/requests/{request_id}', json={'fulfilled_quantity': 30})
        assert response.status_code == 200
        assert response.get_json()['data']['quantity'] == -70

        bucket = client.get(f'/api/production/buckets/{bucket_id}').get_json()['data']
        assert bucket['quantity'] == 30
        assert bucket['label'] == '10/30 +30d'
        assert bucket['freight_quantity'] == 0

        assert client.delete(f'/api/production/requests/{request_id}').status_code == 200

    def test_convert_for_date(self, client, order_payload):
        _create(client, order_payload(item_quantity=20, receptacle_quantity=2))

        response = client.post('/api/production/convert', json={'date': '2026-11-02'})
        assert response.status_code == 200
        assert [entry['request_quantity'] for entry in response.get_json()['data']] == [20]

    def test_convert_requires_a_date(self, client, app_context):
        response = client.post('/api/production/convert', json={})
        assert response.status_code == 422
        assert response.get_json()['errors'] == {'date': ["can't be blank"]}

    def test_convert_reports_each_bad_field_under_its_own_key(self, client, app_context):
        response = client.post('/api/production/convert', json={'date': '2026-11-02', 'product_id': 'abc'})
        errors = response.get_json()['errors']

        assert response.status_code == 422
        assert set(errors) == {'product_id'}

        response = client.post('/api/production/convert', json={'date': 'soon', 'product_id': 'abc'})
        assert set(response.get_json()['errors']) == {'date', 'product_id'}

    def test_convert_bucket(self, client, order_payload):
        created = _create(client, order_payload(item_quantity=20, receptacle_quantity=2))
        bucket_id = created['product_inventory_id']

        response = client.post(f'/api/production/buckets/{bucket_id}/convert')
        assert response.get_json()['data']['request_quantity'] == 20

        response = client.post(f'/api/production/buckets/{bucket_id}/convert')
        assert response.get_json()['data'] is None

    def test_missing_bucket_is_404(self, client, app_context):
        assert client.get('/api/production/buckets/77').status_code == 404
