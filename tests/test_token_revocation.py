"""
Token revocation tests: single-token revocation, revoke-all markers and cleanup.
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from artesa.models import RevokedToken
from artesa.models.utils import hash_token
from artesa.utils.auth_utils import generate_jwt_token
from artesa.utils.token_revocation import (
    is_token_revoked, revoke_token, revoke_all_user_tokens, cleanup_expired_tokens
)


pytestmark = pytest.mark.timeout(30)


def in_an_hour():
    return datetime.utcnow() + timedelta(hours=1)


class TestSingleTokenRevocation:
    """revoke_token / is_token_revoked"""

    def test_unrevoked_token(self, test_user):
        token = generate_jwt_token(test_user)
        assert is_token_revoked(token) is False

    def test_revoke_token(self, test_user):
        token = generate_jwt_token(test_user)
        assert revoke_token(token, test_user.id, in_an_hour()) is True
        assert is_token_revoked(token) is True

    def test_only_digest_is_stored(self, test_user):
        token = generate_jwt_token(test_user)
        revoke_token(token, test_user.id, in_an_hour())

        row = RevokedToken.query.one()
        assert row.token_hash == hash_token(token)
        assert token not in row.token_hash
        assert row.revocation_reason == 'user_logout'

    def test_revoking_twice_is_idempotent(self, test_user):
        token = generate_jwt_token(test_user)
        assert revoke_token(token, test_user.id, in_an_hour())
        assert revoke_token(token, test_user.id, in_an_hour())
        assert RevokedToken.query.count() == 1

    def test_expired_revocation_no_longer_matches(self, test_user):
        token = generate_jwt_token(test_user)
        revoke_token(token, test_user.id, datetime.utcnow() - timedelta(seconds=1))
        assert is_token_revoked(token) is False

    def test_database_error_counts_as_not_revoked(self, test_user):
        token = generate_jwt_token(test_user)
        with patch.object(RevokedToken, 'query') as query:
            query.filter.side_effect = OperationalError('SELECT', {}, Exception('db down'))
            assert is_token_revoked(token) is False


class TestRevokeAll:
    """Per-user revoke-all markers"""

    def test_tokens_issued_before_marker_are_revoked(self, test_user):
        token = generate_jwt_token(test_user)
        issued_at = datetime.utcnow() - timedelta(seconds=1)

        assert revoke_all_user_tokens(test_user.id) is True
        assert is_token_revoked(token, user_id=test_user.id, issued_at=issued_at) is True

    def test_tokens_issued_after_marker_survive(self, test_user):
        revoke_all_user_tokens(test_user.id)
        token = generate_jwt_token(test_user)
        issued_at = datetime.utcnow() + timedelta(seconds=1)

        assert is_token_revoked(token, user_id=test_user.id, issued_at=issued_at) is False

    def test_marker_needs_user_and_issue_time(self, test_user):
        token = generate_jwt_token(test_user)
        revoke_all_user_tokens(test_user.id)
        assert is_token_revoked(token) is False

    def test_marker_does_not_affect_other_users(self, test_user, admin_user):
        revoke_all_user_tokens(test_user.id)
        token = generate_jwt_token(admin_user)
        issued_at = datetime.utcnow() - timedelta(seconds=1)
        assert is_token_revoked(token, user_id=admin_user.id, issued_at=issued_at) is False

    def test_marker_is_reused(self, test_user):
        revoke_all_user_tokens(test_user.id, reason='user_logout_all')
        first = RevokedToken.query.filter_by(token_hash=RevokedToken.marker_for(test_user.id)).one()
        first_before = first.revoke_all_before

        revoke_all_user_tokens(test_user.id, reason='password_reset')
        markers = RevokedToken.query.filter_by(token_hash=RevokedToken.marker_for(test_user.id)).all()

        assert len(markers) == 1
        assert markers[0].revocation_reason == 'password_reset'
        assert markers[0].revoke_all_before >= first_before

    def test_marker_lifetime(self, test_user):
        revoke_all_user_tokens(test_user.id)
        marker = RevokedToken.query.one()
        assert marker.expires_at - marker.revoked_at == timedelta(days=30)
        assert marker.is_active()


class TestCleanup:
    """cleanup_expired_tokens"""

    def test_cleanup_removes_expired_rows(self, test_user):
        live = generate_jwt_token(test_user, expires_in=60)
        stale = generate_jwt_token(test_user, expires_in=30)
        revoke_token(live, test_user.id, in_an_hour())
        revoke_token(stale, test_user.id, datetime.utcnow() - timedelta(minutes=1))

        assert cleanup_expired_tokens() == 1
        assert RevokedToken.query.one().token_hash == hash_token(live)

    def test_cleanup_with_nothing_to_do(self, db_session):
        assert cleanup_expired_tokens() == 0
