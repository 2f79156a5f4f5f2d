"""
Password Reset Model

FLOW OVERVIEW
- PasswordReset.create_token(user_id)
  • Invalidate every unused token of the user, then store a fresh 64-hex token
    that expires after PASSWORD_RESET_TOKEN_EXPIRES seconds.
- PasswordReset.find_by_token(token)
  • Exact match that is neither used nor expired; None otherwise.
- PasswordReset.mark_as_used(token)
  • Single-use invalidation after a successful password update; a token that
    is already used cannot be claimed again.
- PasswordReset.cleanup_expired()
  • Maintenance: delete rows past their expiry.
"""

import logging
from datetime import datetime, timedelta
from flask import current_app
from .database import db
from .utils import generate_password_reset_token, token_fragment

logger = logging.getLogger(__name__)


class PasswordReset(db.Model):
    """Password reset token for password recovery"""
    __tablename__ = 'password_resets'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    token = db.Column(db.String(64), unique=True, nullable=False)
    used = db.Column(db.Boolean, nullable=False, default=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __init__(self, user_id, token=None, expires_at=None):
        """Initialize a new password reset token"""
        self.user_id = user_id
        self.token = token or generate_password_reset_token()
        if expires_at is None:
            lifetime = current_app.config.get('PASSWORD_RESET_TOKEN_EXPIRES', 3600)
            expires_at = datetime.utcnow() + timedelta(seconds=lifetime)
        self.expires_at = expires_at
        self.used = False

    def is_valid(self):
        """Check if token is valid and not expired"""
        return not self.used and datetime.utcnow() < self.expires_at

    @classmethod
    def create_token(cls, user_id, token=None, expires_at=None):
        """Store a new reset token, deactivating previous unused ones"""
        logger.debug(f"Creating password reset token for user {user_id}")

        deactivated = cls.query.filter_by(user_id=user_id, used=False).update(
            {'used': True}, synchronize_session=False
        )
        if deactivated:
            logger.debug(f"Deactivated {deactivated} previous reset token(s) for user {user_id}")

        reset = cls(user_id, token=token, expires_at=expires_at)
        db.session.add(reset)
        db.session.commit()

        logger.info(f"Password reset token {reset.id} created for user {user_id}, expires {reset.expires_at.isoformat()}")
        return reset

    @classmethod
    def find_by_token(cls, token):
        """Return the reset row for an unused, unexpired token or None"""
        if not token:
            return None

        reset = cls.query.filter(
            cls.token == token,
            cls.used.is_(False),
            cls.expires_at > datetime.utcnow(),
        ).first()

        if reset is None:
            logger.warning(f"Reset token not found or expired: {token_fragment(token)}")
            return None

        logger.debug(f"Valid reset token {reset.id} found for user {reset.user_id}")
        return reset

    @classmethod
    def mark_as_used(cls, token, commit=True):
        """Mark a token as used; returns the row, or None when unknown or already used"""
        reset = cls.query.filter_by(token=token).first()
        if reset is None:
            logger.warning(f"Reset token not found while marking as used: {token_fragment(token)}")
            return None

        # Conditional update so two concurrent resets cannot both consume the token
        claimed = cls.query.filter_by(id=reset.id, used=False).update({'used': True})
        if not claimed:
            logger.warning(f"Reset token already used: {token_fragment(token)}")
            return None

        if commit:
            db.session.commit()

        logger.info(f"Reset token {reset.id} marked as used for user {reset.user_id}")
        return reset

    @classmethod
    def cleanup_expired(cls):
        """Delete expired tokens, returning how many were removed"""
        removed = cls.query.filter(cls.expires_at < datetime.utcnow()).delete(synchronize_session=False)
        db.session.commit()
        if removed:
            logger.info(f"Removed {removed} expired password reset token(s)")
        return removed
