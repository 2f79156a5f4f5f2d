#!/usr/bin/env python3
"""
La Artesa auth service entry point.

This module creates the Flask application via `create_app` and eagerly
initializes an in-memory database when one is configured. When executed
directly, it runs the development server. In production, a WSGI server should
import `app` from this module.

Environment variables of interest:
- APP_ENV: development, production or testing.
- DATABASE_URL or DB_HOST/DB_USER/DB_PASSWORD/DB_DATABASE/DB_PORT/DB_SSL.
- JWT_SECRET, SMTP_*, RECAPTCHA_*, FRONTEND_URL: consumed by `create_app`.
"""

import os
from artesa import create_app
from artesa.models import db

app = create_app()

if app.config['SQLALCHEMY_DATABASE_URI'] == 'sqlite:///:memory:':
    app.logger.info("Running with in-memory database")
    with app.app_context():
        db.create_all()

if __name__ == '__main__':
    app.run(debug=app.config.get('APP_ENV') == 'development',
            host='0.0.0.0',
            port=int(os.getenv('PORT', 5000)))
