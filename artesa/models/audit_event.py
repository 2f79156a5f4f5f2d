"""
Audit Event Model

Security-relevant events (password reset requested/completed, session
revocations) with sensitive detail keys already redacted.
"""

import json
from datetime import datetime
from .database import db


class AuditEvent(db.Model):
    """Security audit trail entry"""
    __tablename__ = 'audit_events'

    id = db.Column(db.Integer, primary_key=True)
    action_type = db.Column(db.String(50), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    ip_address = db.Column(db.String(45))
    details = db.Column(db.Text)
    severity = db.Column(db.String(10), nullable=False, default='INFO')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def get_details(self):
        """Decode the stored JSON details"""
        if not self.details:
            return {}
        try:
            return json.loads(self.details)
        except ValueError:
            return {}

    def to_dict(self):
        return {
            'id': self.id,
            'action_type': self.action_type,
            'user_id': self.user_id,
            'ip_address': self.ip_address,
            'details': self.get_details(),
            'severity': self.severity,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
