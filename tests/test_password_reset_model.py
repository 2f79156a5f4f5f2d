"""
Password reset token lifecycle tests.

Covers token format, one live token per user, expiry, single use and cleanup.
"""

import re
import pytest
from datetime import datetime, timedelta
from artesa.models import db, PasswordReset


pytestmark = pytest.mark.timeout(30)

HEX64 = re.compile(r'^[0-9a-f]{64}$')


class TestTokenCreation:
    """Creating reset tokens"""

    def test_token_is_64_hex_characters(self, test_user):
        reset = PasswordReset.create_token(test_user.id)
        assert HEX64.match(reset.token)

    def test_token_expires_after_one_hour(self, test_user):
        before = datetime.utcnow()
        reset = PasswordReset.create_token(test_user.id)
        lifetime = reset.expires_at - before
        assert timedelta(minutes=59) < lifetime <= timedelta(hours=1, seconds=5)

    def test_new_token_deactivates_previous_ones(self, test_user):
        first = PasswordReset.create_token(test_user.id)
        second = PasswordReset.create_token(test_user.id)

        db.session.refresh(first)
        assert first.used is True
        assert second.used is False
        assert PasswordReset.find_by_token(first.token) is None
        assert PasswordReset.find_by_token(second.token).id == second.id

    def test_tokens_are_unique(self, test_user):
        tokens = {PasswordReset.create_token(test_user.id).token for _ in range(5)}
        assert len(tokens) == 5

    def test_explicit_token_and_expiry(self, test_user):
        expires = datetime.utcnow() + timedelta(minutes=5)
        reset = PasswordReset.create_token(test_user.id, token='a' * 64, expires_at=expires)
        assert reset.token == 'a' * 64
        assert reset.expires_at == expires


class TestTokenLookup:
    """find_by_token semantics"""

    def test_find_valid_token(self, password_reset_token):
        found = PasswordReset.find_by_token(password_reset_token.token)
        assert found is not None
        assert found.user_id == password_reset_token.user_id

    def test_expired_token_not_found(self, expired_password_reset_token):
        assert expired_password_reset_token.is_valid() is False
        assert PasswordReset.find_by_token(expired_password_reset_token.token) is None

    def test_used_token_not_found(self, used_password_reset_token):
        assert PasswordReset.find_by_token(used_password_reset_token.token) is None

    def test_unknown_and_empty_tokens(self, db_session):
        assert PasswordReset.find_by_token('f' * 64) is None
        assert PasswordReset.find_by_token('') is None
        assert PasswordReset.find_by_token(None) is None

    def test_lookup_is_exact_match(self, password_reset_token):
        assert PasswordReset.find_by_token(password_reset_token.token[:-1]) is None


class TestMarkAsUsed:
    """Single-use invalidation"""

    def test_mark_as_used(self, password_reset_token):
        token = password_reset_token.token
        marked = PasswordReset.mark_as_used(token)

        assert marked is not None
        assert marked.used is True
        assert PasswordReset.find_by_token(token) is None

    def test_mark_as_used_twice_fails(self, password_reset_token):
        token = password_reset_token.token
        assert PasswordReset.mark_as_used(token) is not None
        assert PasswordReset.mark_as_used(token) is None

    def test_mark_unknown_token(self, db_session):
        assert PasswordReset.mark_as_used('0' * 64) is None


class TestCleanup:
    """Expired token maintenance"""

    def test_cleanup_removes_only_expired(self, password_reset_token, expired_password_reset_token):
        live_id = password_reset_token.id
        removed = PasswordReset.cleanup_expired()

        assert removed == 1
        remaining = [r.id for r in PasswordReset.query.all()]
        assert remaining == [live_id]
