"""
Revoked Token Model

Stores SHA-256 digests of revoked JWTs, plus per-user "revoke everything
issued before" markers written by logout-all and admin revocation.
"""

from datetime import datetime
from .database import db


class RevokedToken(db.Model):
    """Revoked JWT digest or per-user revocation marker"""
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    token_hash = db.Column(db.String(128), unique=True, nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    revoked_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    revocation_reason = db.Column(db.String(50))
    revoke_all_before = db.Column(db.DateTime)

    @staticmethod
    def marker_for(user_id):
        """Stable token_hash of the per-user revoke-all marker"""
        return f'all_tokens_{user_id}'

    def is_active(self):
        return datetime.utcnow() < self.expires_at
