"""
Model Utilities

This module contains utility functions for the models package.
"""

import hashlib
import secrets


def generate_password_reset_token():
    """Generate a 32-byte password reset token as 64 hex characters"""
    return secrets.token_hex(32)


def hash_token(token):
    """SHA-256 hex digest used to store bearer tokens without keeping them"""
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def token_fragment(token, length=10):
    """Loggable prefix of a secret token"""
    if not token:
        return 'undefined'
    return token[:length] + '...'
