"""
Application factory, middleware and CLI tests for Washline
"""
import json

import pytest

from washline import create_app, db
from washline.config import _database_url
from washline.models import User


class TestCreateApp:

    def test_production_requires_secrets(self, monkeypatch):
        monkeypatch.delenv('JWT_SECRET', raising=False)
        monkeypatch.delenv('SECRET_KEY', raising=False)
        from washline.config import ProductionConfig
        monkeypatch.setattr(ProductionConfig, 'JWT_SECRET_KEY', '')
        monkeypatch.setattr(ProductionConfig, 'SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')

        with pytest.raises(RuntimeError):
            create_app('production')

    def test_postgres_url_rewritten(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgres://u:p@h/db')
        assert _database_url('sqlite:///x.db') == 'postgresql://u:p@h/db'

    def test_database_url_default(self, monkeypatch):
        monkeypatch.delenv('DATABASE_URL', raising=False)
        assert _database_url('sqlite:///x.db') == 'sqlite:///x.db'


class TestHttpSurface:

    def test_health(self, client):
        response = client.get('/api/health')

        assert response.status_code == 200
        assert json.loads(response.data)['status'] == 'healthy'

    def test_request_id_echoed(self, client):
        response = client.get('/api/health', headers={'X-Request-ID': 'abc-123'})
        assert response.headers['X-Request-ID'] == 'abc-123'

    def test_request_id_generated(self, client):
        assert client.get('/api/health').headers.get('X-Request-ID')

    def test_oversized_request_id_replaced(self, client):
        response = client.get('/api/health', headers={'X-Request-ID': 'x' * 500})

        request_id = response.headers['X-Request-ID']
        assert request_id != 'x' * 500
        assert len(request_id) == 32

    def test_security_headers(self, client):
        response = client.get('/api/health')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nope')

        assert response.status_code == 404
        assert 'message' in json.loads(response.data)


class TestCreateAdminCommand:

    def test_creates_admin(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-admin', '--name', 'Root', '--email', 'Root@Example.com',
            '--password', 'secret123', '--phone', '01799999999',
        ])

        assert result.exit_code == 0
        user = User.query.filter_by(email='root@example.com').one()
        assert user.role == 'admin'

    def test_promotes_existing_user(self, app, test_customer):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            'create-admin', '--name', 'x', '--email', test_customer.email,
            '--password', 'ignored1', '--phone', '01799999999',
        ])

        assert result.exit_code == 0
        assert 'Promoted' in result.output
        db.session.refresh(test_customer)
        assert test_customer.role == 'admin'
