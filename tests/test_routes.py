"""
Tests for the API routes (Flask endpoints).
These tests verify HTTP request/response handling, authentication, and route logic.
"""
import pytest
import json
from unittest.mock import Mock, patch
from datetime import datetime

from orderqueue import create_app
from orderqueue.models import Order, OrderStatus, User, db
from orderqueue.auth.utils import hash_password
from orderqueue.queue_lock import QueueLockTimeout


@pytest.fixture
def app():
    """Create Flask application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SECRET_KEY': 'test-secret-key',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def mock_admin_user():
    """Create a mock admin user for authentication."""
    user = Mock()
    user.id = 1
    user.username = "test_admin"
    user.is_admin = True
    user.is_active = True
    return user


@pytest.fixture(autouse=True)
def setup_auth(mock_admin_user):
    """Automatically patch authentication for all tests."""
    with patch('orderqueue.auth.utils.get_current_user', return_value=mock_admin_user):
        yield


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def post_order(client, **body):
    payload = {'product_a_quantity': 0, 'product_b_quantity': 10}
    payload.update(body)
    return client.post('/api/orders', json=payload)


# ==============================================================================
# ORDER TESTS
# ==============================================================================

class TestCreateOrder:
    """Tests for POST /api/orders."""

    def test_create_order(self, client):
        response = post_order(client, notes="first")

        assert response.status_code == 201
        data = json.loads(response.data)
        assert data['status'] == 'success'
        assert data['total_days'] == 1
        assert data['days_in_front'] == 0
        assert data['estimated_completion_date'] is not None

        order = db.session.get(Order, data['order_id'])
        assert order.user_id == 1
        assert order.notes == "first"

    def test_second_order_queues_behind_first(self, client):
        first = json.loads(post_order(client).data)
        second = json.loads(post_order(client).data)

        assert second['days_in_front'] == 1
        assert second['estimated_completion_date'] > first['estimated_completion_date']

    def test_no_body(self, client):
        response = client.post('/api/orders', data='not json', content_type='text/plain')

        assert response.status_code == 400

    def test_empty_order_rejected(self, client):
        response = post_order(client, product_b_quantity=0)

        assert response.status_code == 400
        assert 'At least one' in json.loads(response.data)['error']

    def test_non_integer_quantity_rejected(self, client):
        response = post_order(client, product_b_quantity="ten")

        assert response.status_code == 400
        assert Order.query.count() == 0

    def test_lock_timeout_is_conflict(self, client):
        with patch('orderqueue.api.routes.CreateOrderCommand') as mock_command:
            mock_command.return_value.execute.side_effect = QueueLockTimeout("Queue busy")
            response = post_order(client)

        assert response.status_code == 409

    def test_unexpected_error(self, client):
        with patch('orderqueue.api.routes.CreateOrderCommand') as mock_command:
            mock_command.return_value.execute.side_effect = Exception("boom")
            response = post_order(client)

        assert response.status_code == 500
        assert 'error' in json.loads(response.data)


class TestEstimate:
    """Tests for POST /api/orders/estimate."""

    def test_estimate_does_not_persist(self, client):
        response = client.post('/api/orders/estimate', json={'product_a_quantity': 16})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['days'] == 1
        assert data['total_minutes'] == 480
        assert data['daily_capacity'] == 480
        assert Order.query.count() == 0

    def test_estimate_rejects_bad_capacity(self, client):
        response = client.post('/api/orders/estimate', json={'product_a_quantity': 1, 'daily_capacity': 0})

        assert response.status_code == 400


class TestListOrders:
    """Tests for GET /api/orders, /api/orders/summary and /api/orders/<id>."""

    def test_list_defaults_to_pending(self, client):
        post_order(client)
        post_order(client)

        data = json.loads(client.get('/api/orders').data)

        assert data['status'] == 'pending'
        assert data['total_count'] == 2
        assert data['orders'][0]['id'] > data['orders'][1]['id']

    def test_list_by_status(self, client):
        order_id = json.loads(post_order(client).data)['order_id']
        client.put(f'/api/orders/{order_id}/status', json={'status': 'canceled'})

        assert json.loads(client.get('/api/orders?status=canceled').data)['total_count'] == 1
        assert json.loads(client.get('/api/orders').data)['total_count'] == 0

    def test_list_unknown_status(self, client):
        assert client.get('/api/orders?status=lost').status_code == 400

    def test_summary(self, client):
        post_order(client)

        data = json.loads(client.get('/api/orders/summary').data)

        assert data['counts']['pending'] == 1
        assert data['counts']['completed'] == 0

    def test_get_order(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.get(f'/api/orders/{order_id}')

        assert response.status_code == 200
        assert json.loads(response.data)['id'] == order_id

    def test_get_missing_order(self, client):
        assert client.get('/api/orders/999').status_code == 404


class TestUpdateStatus:
    """Tests for PUT /api/orders/<id>/status."""

    def test_valid_transition(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.put(f'/api/orders/{order_id}/status', json={'status': 'in_progress'})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['from_status'] == 'pending'
        assert data['to_status'] == 'in_progress'
        assert data['queue_recalculated'] is True

    def test_invalid_transition(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.put(f'/api/orders/{order_id}/status', json={'status': 'completed'})

        assert response.status_code == 400
        assert 'Cannot change order status' in json.loads(response.data)['error']

    def test_missing_status(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.put(f'/api/orders/{order_id}/status', json={'notes': 'x'})

        assert response.status_code == 400

    def test_missing_order(self, client):
        response = client.put('/api/orders/999/status', json={'status': 'in_progress'})

        assert response.status_code == 404


class TestEditOrder:
    """Tests for PUT /api/orders/<id>."""

    def test_edit_quantities(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.put(f'/api/orders/{order_id}', json={'product_b_quantity': 20})

        assert response.status_code == 200
        assert json.loads(response.data)['total_days'] == 2

    def test_edit_non_pending(self, client):
        order_id = json.loads(post_order(client).data)['order_id']
        client.put(f'/api/orders/{order_id}/status', json={'status': 'in_progress'})

        response = client.put(f'/api/orders/{order_id}', json={'notes': 'late'})

        assert response.status_code == 400
        assert 'Only pending orders' in json.loads(response.data)['error']

    def test_negative_quantity(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.put(f'/api/orders/{order_id}', json={'product_a_quantity': -1})

        assert response.status_code == 400

    def test_edit_lock_timeout_is_conflict(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        with patch('orderqueue.api.routes.EditOrderCommand') as mock_command:
            mock_command.return_value.execute.side_effect = QueueLockTimeout("Queue busy")
            response = client.put(f'/api/orders/{order_id}', json={'product_b_quantity': 20})

        assert response.status_code == 409


# ==============================================================================
# QUEUE TESTS
# ==============================================================================

class TestQueue:
    """Tests for the /api/queue endpoints."""

    def test_queue_lists_active_orders_in_fifo_order(self, client):
        ids = [json.loads(post_order(client).data)['order_id'] for _ in range(3)]
        client.put(f'/api/orders/{ids[1]}/status', json={'status': 'canceled'})

        data = json.loads(client.get('/api/queue').data)

        assert [o['id'] for o in data['orders']] == [ids[0], ids[2]]
        assert [o['position'] for o in data['orders']] == [1, 2]
        assert data['total_days'] == 2

    def test_preview(self, client):
        post_order(client)

        response = client.get('/api/queue/preview?reference_date=2024-01-01&show_all=true')

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['total_orders'] == 1
        assert data['orders'][0]['computed_completion_date'] == '2024-01-02'

    def test_preview_bad_date(self, client):
        assert client.get('/api/queue/preview?reference_date=01-01-2024').status_code == 400

    def test_recalculate(self, client):
        order_id = json.loads(post_order(client).data)['order_id']

        response = client.post('/api/queue/recalculate', json={'reference_date': '2024-01-05'})

        assert response.status_code == 200
        data = json.loads(response.data)
        assert data['updated'] == 1
        assert db.session.get(Order, order_id).estimated_completion_date.isoformat() == '2024-01-08'

    def test_recalculate_requires_admin(self, client, mock_admin_user):
        mock_admin_user.is_admin = False

        response = client.post('/api/queue/recalculate')

        assert response.status_code == 403


# ==============================================================================
# SETTINGS TESTS
# ==============================================================================

class TestSettings:
    """Tests for the /api/settings endpoints."""

    def test_defaults(self, client):
        data = json.loads(client.get('/api/settings').data)

        assert data['product_a_name'] == 'Product A'
        assert data['product_a_time'] == 30
        assert data['product_b_time'] == 45
        assert data['daily_capacity'] == 480

    def test_update_and_apply_to_new_orders(self, client):
        existing_id = json.loads(post_order(client).data)['order_id']

        response = client.put('/api/settings', json={'product_b_name': 'Gadget', 'product_b_time': 96})
        assert response.status_code == 200
        assert json.loads(response.data)['settings']['product_a_name'] == 'Product A'

        new_id = json.loads(post_order(client).data)['order_id']
        assert db.session.get(Order, existing_id).production_time_b == 45
        assert db.session.get(Order, new_id).production_time_b == 96
        assert db.session.get(Order, new_id).product_b_name == 'Gadget'
        assert db.session.get(Order, new_id).total_days == 2

    def test_invalid_time(self, client):
        response = client.put('/api/settings', json={'product_a_time': 0})

        assert response.status_code == 400

    def test_blank_name(self, client):
        response = client.put('/api/settings', json={'product_a_name': '  '})

        assert response.status_code == 400


# ==============================================================================
# REPORT TESTS
# ==============================================================================

class TestReports:
    """Tests for GET /api/reports."""

    def _complete(self, client, completed_at):
        order_id = json.loads(post_order(client).data)['order_id']
        client.put(f'/api/orders/{order_id}/status', json={'status': 'in_progress'})
        client.put(f'/api/orders/{order_id}/status', json={'status': 'completed'})
        order = db.session.get(Order, order_id)
        order.completed_at = completed_at
        db.session.commit()
        return order_id

    def test_report(self, client):
        inside = self._complete(client, datetime(2024, 1, 10, 8, 0))
        self._complete(client, datetime(2024, 2, 10, 8, 0))

        data = json.loads(client.get('/api/reports?start_date=2024-01-01&end_date=2024-01-31').data)

        assert [o['id'] for o in data['orders']] == [inside]
        assert data['summary']['total_orders'] == 1
        assert data['summary']['total_product_b'] == 10
        assert data['start_date'] == '2024-01-01'

    def test_csv(self, client):
        self._complete(client, datetime(2024, 1, 10, 8, 0))

        response = client.get('/api/reports?format=csv')

        assert response.status_code == 200
        assert response.mimetype == 'text/csv'
        assert response.data.decode().startswith('id,created_at')

    def test_bad_range(self, client):
        response = client.get('/api/reports?start_date=2024-02-01&end_date=2024-01-01')

        assert response.status_code == 400

    def test_bad_date(self, client):
        assert client.get('/api/reports?start_date=yesterday').status_code == 400


# ==============================================================================
# AUTH AND HEALTH TESTS
# ==============================================================================

class TestAuth:
    """Tests for authentication enforcement and the auth blueprint."""

    def test_routes_require_login(self, client):
        with patch('orderqueue.auth.utils.get_current_user', return_value=None):
            response = client.get('/api/queue')

        assert response.status_code == 401

    def test_login(self, client):
        db.session.add(User(username='planner', password_hash=hash_password('secret123')))
        db.session.commit()

        response = client.post('/api/auth/login', json={'username': 'planner', 'password': 'secret123'})

        assert response.status_code == 200
        assert json.loads(response.data)['user']['username'] == 'planner'

    def test_login_wrong_password(self, client):
        db.session.add(User(username='planner', password_hash=hash_password('secret123')))
        db.session.commit()

        response = client.post('/api/auth/login', json={'username': 'planner', 'password': 'nope'})

        assert response.status_code == 401

    def test_register(self, client):
        response = client.post('/api/auth/register', json={'username': 'new', 'password': 'longenough'})

        assert response.status_code == 201
        assert User.query.filter_by(username='new').first().is_admin is False


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client):
        data = json.loads(client.get('/health').data)

        assert data['status'] == 'ok'
        assert data['queue_lock']['is_locked'] is False
