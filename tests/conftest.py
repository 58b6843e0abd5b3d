"""
Pytest configuration and fixtures for Washline backend tests
"""
import pytest
from datetime import datetime, timedelta

from washline import create_app, db
from washline import lifecycle
from washline.auth import hash_password, generate_token
from washline.models import User

TEST_PASSWORD = 'secret123'


def future_pickup(days=2):
    """(date, time) strings for a pickup ``days`` from now"""
    at = datetime.now() + timedelta(days=days)
    return at.strftime('%Y-%m-%d'), '10:00'


@pytest.fixture(scope='function')
def app():
    """Create application instance for testing"""
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def user_factory(app):
    """Factory for creating users"""
    counter = {'n': 0}

    def _create_user(**kwargs):
        counter['n'] += 1
        defaults = {
            'name': 'Test User {}'.format(counter['n']),
            'email': 'user{}@example.com'.format(counter['n']),
            'phone': '0171000{:04d}'.format(counter['n']),
            'address': {'street': '12 Lake Rd', 'city': 'Dhaka', 'postal_code': '1205'},
            'role': 'customer',
            'is_active': True,
        }
        password = kwargs.pop('password', TEST_PASSWORD)
        defaults.update(kwargs)

        user = User(password_hash=hash_password(password), **defaults)
        db.session.add(user)
        db.session.commit()
        return user

    return _create_user


@pytest.fixture
def test_customer(user_factory):
    return user_factory(name='Rahim Uddin', email='customer@example.com', phone='01712345678')


@pytest.fixture
def other_customer(user_factory):
    return user_factory(name='Karim Ahmed', email='other@example.com', phone='01812345678')


@pytest.fixture
def test_admin(user_factory):
    return user_factory(name='Admin', email='admin@example.com', phone='01912345678', role='admin')


def _headers(user):
    return {
        'Authorization': 'Bearer {}'.format(generate_token(user)),
        'Content-Type': 'application/json'
    }


@pytest.fixture
def auth_headers(test_customer):
    """Auth headers with JWT token for the customer"""
    return _headers(test_customer)


@pytest.fixture
def other_headers(other_customer):
    return _headers(other_customer)


@pytest.fixture
def admin_headers(test_admin):
    return _headers(test_admin)


@pytest.fixture
def order_factory(test_customer):
    """Factory for creating orders; defaults to 2 shirts washed for the customer"""
    def _create_order(user=None, **kwargs):
        pickup_date, pickup_time = future_pickup()
        defaults = {
            'user_id': (user or test_customer).id,
            'pickup_date': pickup_date,
            'pickup_time': pickup_time,
            'address': '12 Lake Rd, Dhaka 1205',
            'services': ['Washing'],
            'items': [{'type': 'Shirt', 'quantity': 2}],
        }
        defaults.update(kwargs)

        order = lifecycle.build_order(**defaults)
        db.session.commit()
        return order

    return _create_order


@pytest.fixture
def test_order(order_factory):
    return order_factory()
