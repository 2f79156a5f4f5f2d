"""
Security Audit Trail

record_security_event() persists an AuditEvent after redacting sensitive
detail keys. Persistence errors are logged and never abort the request that
triggered the event.
"""

import json
import logging

from sqlalchemy.exc import SQLAlchemyError

from ..models import db, AuditEvent

logger = logging.getLogger(__name__)

SEVERITY_LEVELS = ('INFO', 'WARNING', 'ERROR', 'CRITICAL')

SENSITIVE_FIELDS = ('password', 'newPassword', 'token', 'secret', 'cvv', 'card_number')


def sanitize_audit_data(data):
    """Copy of `data` with sensitive values redacted"""
    sanitized = dict(data or {})
    for field in SENSITIVE_FIELDS:
        if field not in sanitized:
            continue
        value = sanitized[field]
        if field == 'card_number' and isinstance(value, str):
            sanitized[field] = f'****{value[-4:]}'
        else:
            sanitized[field] = '[REDACTED]'
    return sanitized


def record_security_event(action, user_id=None, ip_address=None, details=None, severity='INFO'):
    """Persist a security audit event; returns its id or None on failure"""
    if severity not in SEVERITY_LEVELS:
        severity = 'INFO'

    event = AuditEvent(
        action_type=action,
        user_id=user_id,
        ip_address=ip_address,
        details=json.dumps(sanitize_audit_data(details), default=str),
        severity=severity,
    )
    try:
        db.session.add(event)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to record audit event {action}: {e}")
        return None

    logger.info(f"Audit event {event.id} recorded: {action} ({severity})")
    return event.id
