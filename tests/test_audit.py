"""
Security audit trail tests.
"""

import pytest
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from artesa.models import db, AuditEvent
from artesa.utils.audit import record_security_event, sanitize_audit_data


pytestmark = pytest.mark.timeout(30)


def test_sanitize_redacts_sensitive_fields():
    sanitized = sanitize_audit_data({
        'mail': 'test@example.com',
        'password': 'ClaveSegura1',
        'newPassword': 'NuevaClave2024',
        'token': 'abc',
        'card_number': '4111111111111111',
    })

    assert sanitized == {
        'mail': 'test@example.com',
        'password': '[REDACTED]',
        'newPassword': '[REDACTED]',
        'token': '[REDACTED]',
        'card_number': '****1111',
    }


def test_sanitize_does_not_mutate_input():
    details = {'password': 'x'}
    sanitize_audit_data(details)
    assert details == {'password': 'x'}


def test_sanitize_handles_none():
    assert sanitize_audit_data(None) == {}


def test_record_security_event(test_user):
    event_id = record_security_event(
        'PASSWORD_RESET_REQUESTED',
        user_id=test_user.id,
        ip_address='10.0.0.1',
        details={'mail': 'test@example.com', 'token': 'secret-value'},
    )

    event = db.session.get(AuditEvent, event_id)
    assert event.action_type == 'PASSWORD_RESET_REQUESTED'
    assert event.severity == 'INFO'
    assert event.get_details() == {'mail': 'test@example.com', 'token': '[REDACTED]'}
    assert event.to_dict()['ip_address'] == '10.0.0.1'


def test_unknown_severity_falls_back_to_info(db_session):
    event_id = record_security_event('SOMETHING', severity='LOUD')
    assert db.session.get(AuditEvent, event_id).severity == 'INFO'


def test_persistence_failure_returns_none(db_session):
    with patch.object(db.session, 'commit',
                      side_effect=OperationalError('INSERT', {}, Exception('db down'))):
        assert record_security_event('PASSWORD_RESET_COMPLETED') is None


def test_invalid_details_json():
    assert AuditEvent(action_type='X', details='{broken').get_details() == {}
