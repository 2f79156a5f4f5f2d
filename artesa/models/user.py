"""
User Models

This module contains the User and LoginHistory models plus the role constants
stored in `users.rol_id`.
"""

from datetime import datetime
from .database import db


class Roles:
    """Role identifiers stored in users.rol_id"""
    ADMIN = 1
    USER = 2

    NAMES = {
        ADMIN: 'admin',
        USER: 'user',
    }

    @classmethod
    def name_of(cls, rol_id):
        return cls.NAMES.get(rol_id, 'unknown')


class User(db.Model):
    """Application user authenticated by mail and password"""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    mail = db.Column(db.String(254), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    rol_id = db.Column(db.Integer, nullable=False, default=Roles.USER)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    password_resets = db.relationship('PasswordReset', backref='user', lazy=True,
                                      cascade='all, delete-orphan')
    login_history = db.relationship('LoginHistory', backref='user', lazy=True,
                                    cascade='all, delete-orphan')

    def __init__(self, name, mail, password, rol_id=Roles.USER, is_active=True):
        """Initialize a new user after validating mail and name"""
        # Import validators here to avoid circular imports
        from ..utils.validators import validate_email, validate_name

        email_validation = validate_email(mail)
        if not email_validation.is_valid:
            raise ValueError(email_validation.error_message)

        name_validation = validate_name(name)
        if not name_validation.is_valid:
            raise ValueError(name_validation.error_message)

        if not password:
            raise ValueError("Password hash cannot be empty")

        self.mail = email_validation.sanitized_value
        # Escaping is the caller's concern; store the trimmed value as given
        self.name = name.strip()
        self.password = password
        self.rol_id = rol_id
        self.is_active = is_active

    @property
    def role_name(self):
        return Roles.name_of(self.rol_id)

    def is_admin(self):
        return self.rol_id == Roles.ADMIN

    def update_password(self, password_hash):
        """Replace the stored password hash (caller commits)"""
        self.password = password_hash
        self.updated_at = datetime.utcnow()

    def to_dict(self):
        """Minimal public representation returned by the API"""
        return {
            'id': self.id,
            'name': self.name,
            'mail': self.mail,
            'role': self.rol_id,
        }

    def __repr__(self):
        return f'<User {self.id} {self.mail}>'


class LoginHistory(db.Model):
    """One row per successful login"""
    __tablename__ = 'login_history'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    login_timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    ip_address = db.Column(db.String(45))
