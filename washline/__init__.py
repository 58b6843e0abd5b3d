"""
Washline laundry pickup API
"""
import logging
import os
import secrets

import click
from flask import Flask, jsonify
from flask_cors import CORS

from washline.extensions import db, limiter

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from washline.config import config
    app.config.from_object(config.get(config_name, config['default']))

    from washline.middleware import RequestIdMiddleware, configure_logging
    configure_logging(app.config['LOG_LEVEL'])

    _check_secrets(app, config_name)
    _init_sentry(app)

    # Initialize extensions
    db.init_app(app)
    limiter.init_app(app)
    CORS(app, resources={r"/api/*": {"origins": app.config['CORS_ORIGINS']}})
    app.wsgi_app = RequestIdMiddleware(app.wsgi_app)

    from washline.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from washline.routes import (
        auth_bp, orders_bp, ratings_bp, claims_bp, notifications_bp, admin_bp,
    )
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(orders_bp, url_prefix='/api/orders')
    app.register_blueprint(ratings_bp, url_prefix='/api/ratings')
    app.register_blueprint(claims_bp, url_prefix='/api/claims')
    app.register_blueprint(notifications_bp, url_prefix='/api/notifications')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    @app.route('/api/health')
    @limiter.exempt
    def health():
        return jsonify({'status': 'healthy', 'service': 'washline-api'}), 200

    @app.after_request
    def set_security_headers(response):
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if config_name == 'production':
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    _register_cli(app)

    # Create all tables on startup
    with app.app_context():
        from washline import models  # noqa: F401
        db.create_all()

    return app


def _check_secrets(app, config_name):
    """Fail fast when signing secrets are missing outside development/testing"""
    if app.config.get('JWT_SECRET_KEY') and app.config.get('SECRET_KEY'):
        return

    if config_name not in ('development', 'testing', 'default'):
        raise RuntimeError(
            "JWT_SECRET and SECRET_KEY must be set when FLASK_ENV={}".format(config_name)
        )

    # Throwaway secrets for development; tokens will not survive restarts.
    if not app.config.get('JWT_SECRET_KEY'):
        app.config['JWT_SECRET_KEY'] = 'dev-only-' + secrets.token_hex(32)
        logger.warning("JWT_SECRET is not set; using a random development value.")
    if not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = 'dev-only-' + secrets.token_hex(16)


def _init_sentry(app):
    """Sentry error monitoring (optional -- only active when SENTRY_DSN is set)"""
    dsn = app.config.get('SENTRY_DSN')
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
    )


def _register_cli(app):
    @app.cli.command("create-admin")
    @click.option("--name", required=True)
    @click.option("--email", required=True)
    @click.option("--password", required=True)
    @click.option("--phone", required=True)
    def create_admin(name, email, password, phone):
        """Create an admin account, or promote an existing user by email."""
        from washline.auth import hash_password
        from washline.models import User

        email = email.lower().strip()
        user = User.query.filter_by(email=email).first()
        if user:
            user.role = 'admin'
            user.is_active = True
            db.session.commit()
            click.echo("Promoted {} to admin.".format(email))
            return

        user = User(
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            phone=phone,
            address={'street': '', 'city': '', 'postal_code': ''},
            role='admin',
        )
        db.session.add(user)
        db.session.commit()
        click.echo("Created admin {}.".format(email))
