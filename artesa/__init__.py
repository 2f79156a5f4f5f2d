"""
La Artesa Auth Service Package

FLOW OVERVIEW
- create_app(test_config=None)
  • Build Flask app, apply config (test or env-based), configure logging, init extensions (DB, Mail).
  • Register blueprints: main (/), api (/api), auth (/api/auth), password_reset (/api/password).
  • Register request metrics hooks, global error handlers and CLI maintenance commands.
"""

__version__ = '1.0.0'

import logging
import time

import click
from flask import Flask, g, request

from .config import Config
from .models import db, PasswordReset
from .routes import auth_bp, password_reset_bp, main_bp, api_bp
from .utils.email_service import mail


def configure_logging(app):
    """Apply LOG_LEVEL to the app logger and the package loggers"""
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
    )
    app.logger.setLevel(level)
    logging.getLogger('artesa').setLevel(level)


def register_request_metrics(app):
    """Record per-endpoint request counts and latency"""
    from .utils.prom_metrics import observe_request

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def record_request(response):
        started = g.pop('request_started', None)
        if started is not None:
            endpoint = request.endpoint or 'unknown'
            observe_request(endpoint, response.status_code, time.perf_counter() - started)
        return response


def register_commands(app):
    """Flask CLI maintenance commands"""
    from .utils.token_revocation import cleanup_expired_tokens

    @app.cli.command('init-db')
    def init_db_command():
        """Create all database tables."""
        db.create_all()
        click.echo('Database tables created')

    @app.cli.command('cleanup-tokens')
    def cleanup_tokens_command():
        """Delete expired password reset tokens and revocations."""
        resets = PasswordReset.cleanup_expired()
        revoked = cleanup_expired_tokens()
        click.echo(f'Removed {resets} expired reset token(s) and {revoked} expired revocation(s)')


def create_app(test_config=None):
    """Application factory pattern for production deployment"""
    app = Flask(__name__)

    # Configuration
    if test_config:
        # Use test configuration if provided
        app.config.from_object(Config())
        app.config.update(test_config)
    else:
        # Use environment-based configuration
        app.config.from_object(Config())

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    mail.init_app(app)

    # Register blueprints
    app.register_blueprint(main_bp)
    app.register_blueprint(api_bp, url_prefix='/api')
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(password_reset_bp, url_prefix='/api/password')

    register_request_metrics(app)
    register_commands(app)

    # Register error handlers
    from .utils.error_handlers import register_error_handlers
    register_error_handlers(app)

    return app
