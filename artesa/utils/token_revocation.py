"""
Token Revocation

FLOW OVERVIEW
- revoke_token(token, user_id, expires_at)
  • Store the SHA-256 digest of a JWT until it would have expired anyway.
- revoke_all_user_tokens(user_id, reason)
  • Upsert the per-user marker; tokens issued before it stop working.
- is_token_revoked(token, user_id, issued_at)
  • Digest match or marker hit; database errors count as "not revoked".
- cleanup_expired_tokens()
  • Delete revocations whose lifetime has passed.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError

from ..models import db, RevokedToken
from ..models.utils import hash_token

logger = logging.getLogger(__name__)

REVOKE_ALL_LIFETIME = timedelta(days=30)


def is_token_revoked(token, user_id=None, issued_at=None):
    """Check whether a token was revoked individually or by a revoke-all marker"""
    now = datetime.utcnow()
    try:
        revoked = RevokedToken.query.filter(
            RevokedToken.token_hash == hash_token(token),
            RevokedToken.expires_at > now,
        ).first()
        if revoked is not None:
            return True

        if user_id is None or issued_at is None:
            return False

        marker = RevokedToken.query.filter(
            RevokedToken.token_hash == RevokedToken.marker_for(user_id),
            RevokedToken.expires_at > now,
        ).first()
        return bool(marker and marker.revoke_all_before and issued_at <= marker.revoke_all_before)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Token revocation check failed: {e}")
        return False


def revoke_token(token, user_id, expires_at, reason='user_logout'):
    """Revoke a single token; returns True on success"""
    token_hash = hash_token(token)
    try:
        if RevokedToken.query.filter_by(token_hash=token_hash).first() is None:
            db.session.add(RevokedToken(
                token_hash=token_hash,
                user_id=user_id,
                expires_at=expires_at,
                revocation_reason=reason,
            ))
            db.session.commit()
        logger.info(f"Token revoked for user {user_id} ({reason})")
        return True
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to revoke token for user {user_id}: {e}")
        return False


def revoke_all_user_tokens(user_id, reason='security_measure'):
    """Revoke every token issued to a user up to now; returns True on success"""
    now = datetime.utcnow()
    marker_hash = RevokedToken.marker_for(user_id)
    try:
        marker = RevokedToken.query.filter_by(token_hash=marker_hash).first()
        if marker is None:
            marker = RevokedToken(token_hash=marker_hash, user_id=user_id)
            db.session.add(marker)
        marker.revoked_at = now
        marker.expires_at = now + REVOKE_ALL_LIFETIME
        marker.revocation_reason = reason
        marker.revoke_all_before = now
        db.session.commit()
        logger.info(f"All tokens revoked for user {user_id} ({reason})")
        return True
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to revoke all tokens for user {user_id}: {e}")
        return False


def cleanup_expired_tokens():
    """Remove expired revocations, returning the number deleted"""
    removed = RevokedToken.query.filter(
        RevokedToken.expires_at < datetime.utcnow()
    ).delete(synchronize_session=False)
    db.session.commit()
    if removed:
        logger.info(f"Removed {removed} expired revoked token(s)")
    return removed
