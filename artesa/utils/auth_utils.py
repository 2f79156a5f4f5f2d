"""
Authentication Utilities

FLOW OVERVIEW
- hash_password / verify_password
  • bcrypt hashing; verification also accepts legacy plaintext rows.
- create_user / authenticate_user
  • Registration with bcrypt hash; login that upgrades legacy plaintext passwords.
- generate_jwt_token / decode_jwt_token / verify_jwt_token
  • HS256 access tokens with {sub, role, iat, exp}.
- LoginAttemptTracker
  • Per-process failed login counter (5 per 15 minutes by default).
- token_required / role_required
  • Route decorators for Bearer authentication and role checks.
"""

import hmac
import logging
import time
from datetime import datetime, timezone
from functools import wraps

import bcrypt
import jwt
from flask import current_app, g, has_app_context, jsonify, request

from ..models import db, User, Roles

logger = logging.getLogger(__name__)

BCRYPT_PREFIXES = ('$2a$', '$2b$', '$2y$')


def _bcrypt_rounds():
    if has_app_context():
        return int(current_app.config.get('BCRYPT_LOG_ROUNDS', 12))
    return 12


def hash_password(password):
    """Hash a password using bcrypt"""
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def is_bcrypt_hash(value):
    """True when a stored password is already a bcrypt hash"""
    return bool(value) and value.startswith(BCRYPT_PREFIXES)


def verify_password(password, password_hash):
    """Verify a password against its stored value"""
    if not isinstance(password, str) or not isinstance(password_hash, str) or not password_hash:
        return False
    if is_bcrypt_hash(password_hash):
        try:
            return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
        except ValueError:
            return False
    # Legacy rows stored before bcrypt was introduced
    return hmac.compare_digest(password.encode('utf-8'), password_hash.encode('utf-8'))


def create_user(name, mail, password, rol_id=Roles.USER):
    """Create a new user with hashed password (caller commits)"""
    if not password or not password.strip():
        raise ValueError("Password cannot be empty")

    user = User(name=name, mail=mail, password=hash_password(password), rol_id=rol_id)
    db.session.add(user)
    db.session.flush()  # Flush to get the user.id
    return user


def authenticate_user(mail, password):
    """Authenticate user with mail and password, migrating legacy hashes"""
    user = User.query.filter_by(mail=mail).first()
    if user is None or not user.is_active:
        return None

    if not verify_password(password, user.password):
        return None

    if not is_bcrypt_hash(user.password):
        user.update_password(hash_password(password))
        db.session.commit()
        logger.info(f"Migrated legacy password to bcrypt for user {user.id}")

    return user


def generate_jwt_token(user, expires_in=None):
    """Generate a JWT token for user authentication"""
    if expires_in is None:
        expires_in = current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES', 3600)
    now = time.time()
    payload = {
        'sub': str(user.id),
        'role': user.rol_id,
        'iat': now,
        'exp': int(now + expires_in),
    }
    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm='HS256')


def decode_jwt_token(token):
    """Decode a JWT token, raising jwt exceptions when invalid"""
    return jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])


def verify_jwt_token(token):
    """Verify and decode a JWT token"""
    try:
        return decode_jwt_token(token)
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def _utc_from_timestamp(timestamp):
    """Naive UTC datetime, comparable with the utcnow() columns"""
    return datetime.fromtimestamp(timestamp, timezone.utc).replace(tzinfo=None)


def get_client_ip():
    """Best-effort client address behind a proxy"""
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr


class LoginAttemptTracker:
    """Counts failed logins per mail within a sliding window."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def _attempts(self):
        if not hasattr(current_app, 'login_attempts'):
            current_app.login_attempts = {}
        return current_app.login_attempts

    def check(self, mail):
        """
        Check whether a mail may attempt to log in.

        Returns:
            Tuple of (is_allowed, seconds_remaining)
        """
        attempts = self._attempts()
        entry = attempts.get(mail)
        if not entry:
            return True, 0

        max_attempts = current_app.config.get('LOGIN_MAX_ATTEMPTS', 5)
        window = current_app.config.get('LOGIN_ATTEMPT_WINDOW', 900)
        if entry['count'] < max_attempts:
            return True, 0

        remaining = int(window - (time.time() - entry['timestamp']))
        if remaining > 0:
            self.logger.warning(f"Login blocked for {mail}: {entry['count']} failed attempts")
            return False, remaining

        # Window passed
        attempts.pop(mail, None)
        return True, 0

    def record_failure(self, mail):
        attempts = self._attempts()
        self._prune(attempts)
        entry = attempts.setdefault(mail, {'count': 0, 'timestamp': time.time()})
        entry['count'] += 1
        entry['timestamp'] = time.time()

    def _prune(self, attempts):
        """Drop entries whose window has passed"""
        cutoff = time.time() - current_app.config.get('LOGIN_ATTEMPT_WINDOW', 900)
        for stale in [m for m, entry in attempts.items() if entry['timestamp'] <= cutoff]:
            attempts.pop(stale, None)

    def reset(self, mail):
        self._attempts().pop(mail, None)


def _auth_error(message, status_code, code=None):
    body = {'status': 'error', 'message': message}
    if code:
        body['code'] = code
    return jsonify(body), status_code


def token_required(f):
    """Decorator requiring a valid, unrevoked Bearer token"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        from .token_revocation import is_token_revoked

        auth_header = request.headers.get('Authorization', '')
        parts = auth_header.split(' ', 1)
        token = parts[1].strip() if len(parts) == 2 and parts[0].lower() == 'bearer' else ''
        if not token:
            return _auth_error('Se requiere un token de acceso', 403)

        try:
            payload = decode_jwt_token(token)
        except jwt.ExpiredSignatureError:
            return _auth_error('Token expirado', 401)
        except jwt.InvalidTokenError:
            return _auth_error('Token inválido', 401)

        try:
            user_id = int(payload.get('sub'))
        except (TypeError, ValueError):
            return _auth_error('Token inválido', 401)

        issued_at = _utc_from_timestamp(payload.get('iat', 0))
        if is_token_revoked(token, user_id=user_id, issued_at=issued_at):
            logger.warning(f"Revoked token presented from {get_client_ip()}")
            return _auth_error(
                'La sesión ha expirado o ha sido revocada. Por favor, inicie sesión nuevamente.',
                401, code='TOKEN_REVOKED'
            )

        user = db.session.get(User, user_id)
        if user is None or not user.is_active:
            return _auth_error('Token inválido', 401)

        g.current_user = user
        g.token = token
        g.token_payload = payload
        g.token_expiry = _utc_from_timestamp(payload['exp'])
        return f(*args, **kwargs)
    return decorated_function


def role_required(*roles):
    """Decorator restricting a token_required route to the given roles"""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = g.get('current_user')
            if user is None:
                return _auth_error('Se requiere autenticación', 403)
            if user.rol_id not in roles:
                return _auth_error('No tiene permisos para realizar esta acción', 403)
            return f(*args, **kwargs)
        return decorated_function
    return decorator


# Global instances
login_attempts = LoginAttemptTracker()
