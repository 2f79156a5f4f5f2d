"""
Test configuration and shared fixtures for La Artesa auth tests.

This file contains:
- Centralized test configuration
- Shared fixtures used across multiple test files
- Common test utilities
"""

import pytest
from datetime import datetime, timedelta
from artesa import create_app
from artesa.models import db, User, PasswordReset, Roles
from artesa.utils.auth_utils import hash_password


TEST_PASSWORD = 'TestPass123'

# Centralized test configuration
TEST_CONFIG = {
    'TESTING': True,
    'APP_ENV': 'testing',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SECRET_KEY': 'test-secret-key',
    'JWT_SECRET_KEY': 'test-jwt-secret-key',
    'JWT_ACCESS_TOKEN_EXPIRES': 3600,
    'PASSWORD_RESET_TOKEN_EXPIRES': 3600,
    'BCRYPT_LOG_ROUNDS': 4,
    'MAIL_SERVER': 'localhost',
    'MAIL_PORT': 587,
    'MAIL_USE_TLS': False,
    'MAIL_USE_SSL': False,
    'MAIL_USERNAME': 'test@example.com',
    'MAIL_PASSWORD': 'test-password',
    'MAIL_DEFAULT_SENDER': 'no-reply@laartesa.com',
    'MAIL_SUPPRESS_SEND': True,
    'FRONTEND_URL': 'https://app.laartesa.test',
    'RECAPTCHA_ENABLED': False,
    'RECAPTCHA_BYPASS': False,
    'RECAPTCHA_SECRET_KEY': None,
    'RECAPTCHA_MIN_SCORE': 0.5,
    'LOGIN_MAX_ATTEMPTS': 5,
    'LOGIN_ATTEMPT_WINDOW': 900,
    'LOG_LEVEL': 'WARNING',
}


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    app = create_app(TEST_CONFIG)
    return app


@pytest.fixture
def client(app):
    """Create a test client for the app."""
    return app.test_client()


@pytest.fixture
def app_context(app):
    """Create an application context for database operations."""
    with app.app_context():
        yield


@pytest.fixture
def db_session(app_context):
    """Create a database session and clean up after tests."""
    db.create_all()
    yield db.session
    db.session.remove()
    db.drop_all()


@pytest.fixture
def test_user(db_session):
    """Create an active test user."""
    user = User(
        name='Panadería Test',
        mail='test@example.com',
        password=hash_password(TEST_PASSWORD)
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def inactive_user(db_session):
    """Create an inactive test user."""
    user = User(
        name='Cliente Inactivo',
        mail='inactive@example.com',
        password=hash_password(TEST_PASSWORD),
        is_active=False
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def admin_user(db_session):
    """Create an administrator."""
    user = User(
        name='Administrador',
        mail='admin@example.com',
        password=hash_password(TEST_PASSWORD),
        rol_id=Roles.ADMIN
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def password_reset_token(db_session, test_user):
    """Create a live password reset token."""
    return PasswordReset.create_token(test_user.id)


@pytest.fixture
def expired_password_reset_token(db_session, test_user):
    """Create an expired password reset token."""
    token = PasswordReset(test_user.id, expires_at=datetime.utcnow() - timedelta(hours=2))
    db_session.add(token)
    db_session.commit()
    return token


@pytest.fixture
def used_password_reset_token(db_session, test_user):
    """Create a used password reset token."""
    token = PasswordReset(test_user.id)
    token.used = True
    db_session.add(token)
    db_session.commit()
    return token


def login(client, mail='test@example.com', password=TEST_PASSWORD):
    """Log in through the API and return the response"""
    return client.post('/api/auth/login', json={'mail': mail, 'password': password})


def bearer(token):
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def auth_headers(client, test_user):
    """Authorization header for the active test user."""
    response = login(client)
    assert response.status_code == 200
    return bearer(response.get_json()['token'])
