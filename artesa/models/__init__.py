"""
Database Models Package

FLOW OVERVIEW
- Centralizes SQLAlchemy DB instance and model imports for convenient usage.
- Exposes: db, Roles, User, LoginHistory, PasswordReset, RevokedToken, AuditEvent.
"""

from .database import db
from .user import Roles, User, LoginHistory
from .password_reset import PasswordReset
from .revoked_token import RevokedToken
from .audit_event import AuditEvent

__all__ = [
    'db',
    'Roles',
    'User',
    'LoginHistory',
    'PasswordReset',
    'RevokedToken',
    'AuditEvent'
]
