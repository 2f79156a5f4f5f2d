"""
Input Validation and Security Utilities

FLOW OVERVIEW
- validate_email(email)
  • RFC-like syntax checks and basic security checks; returns sanitized lowercased value.
- validate_password_strength(password)
  • Enforce length, character variety, no spaces, and a small denylist.
- validate_name(name)
  • Trim, enforce 2..50 characters, and HTML-escape.
- validate_reset_token(token)
  • Enforce the 64 hexadecimal character reset token format.
- sanitize_input(input, max_length)
  • Trim, bound length, normalize, and remove null bytes.
"""

import html
import re
from typing import Optional
from dataclasses import dataclass


@dataclass
class ValidationResult:
    """Result of validation operation"""
    is_valid: bool
    error_message: Optional[str] = None
    sanitized_value: Optional[str] = None


class InputValidator:
    """Validation rules for account and password-reset inputs"""

    # RFC 5322 compliant email regex (simplified but secure)
    EMAIL_PATTERN = re.compile(
        r'^[a-zA-Z0-9.!#$%&\'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$'
    )

    RESET_TOKEN_PATTERN = re.compile(r'^[0-9a-fA-F]{64}$')

    XSS_PATTERNS = [
        r'<script[^>]*>.*?</script>',
        r'javascript:',
        r'on\w+\s*=',
        r'<iframe[^>]*>',
        r'data:text/html',
        r'vbscript:',
    ]

    PASSWORD_MIN_LENGTH = 8
    PASSWORD_MAX_LENGTH = 100
    COMMON_PASSWORDS = {'Password123', 'Password1', '12345678'}

    NAME_MIN_LENGTH = 2
    NAME_MAX_LENGTH = 50

    @classmethod
    def validate_email(cls, email: str) -> ValidationResult:
        """
        Validate email address with security checks

        Args:
            email: Email address to validate

        Returns:
            ValidationResult with validation status and sanitized value
        """
        if not email or not isinstance(email, str):
            return ValidationResult(False, "El correo electrónico es requerido")

        email = email.strip()
        if email == "":
            return ValidationResult(False, "El correo electrónico es requerido")

        # Length validation (RFC 5321 limits)
        if len(email) > 254:
            return ValidationResult(False, "El correo electrónico es demasiado largo")

        if not cls.EMAIL_PATTERN.match(email) or email.count('@') != 1:
            return ValidationResult(False, "El formato del correo electrónico no es válido")

        local_part, domain = email.split('@')
        if len(local_part) > 64:
            return ValidationResult(False, "El formato del correo electrónico no es válido")

        if local_part.startswith('.') or local_part.endswith('.') or '..' in local_part:
            return ValidationResult(False, "El formato del correo electrónico no es válido")

        if '.' not in domain or '..' in domain:
            return ValidationResult(False, "El formato del correo electrónico no es válido")

        if cls._contains_xss(email):
            return ValidationResult(False, "El correo electrónico contiene caracteres inválidos")

        return ValidationResult(True, sanitized_value=email.lower())

    @classmethod
    def validate_password_strength(cls, password: str) -> ValidationResult:
        """
        Validate password strength requirements

        Args:
            password: Password to validate

        Returns:
            ValidationResult with validation status
        """
        if not password or not isinstance(password, str):
            return ValidationResult(False, "La contraseña es requerida")

        if len(password) < cls.PASSWORD_MIN_LENGTH:
            return ValidationResult(False, f"La contraseña debe tener al menos {cls.PASSWORD_MIN_LENGTH} caracteres")

        if len(password) > cls.PASSWORD_MAX_LENGTH:
            return ValidationResult(False, f"La contraseña no puede tener más de {cls.PASSWORD_MAX_LENGTH} caracteres")

        if any(c.isspace() for c in password):
            return ValidationResult(False, "La contraseña no puede contener espacios")

        if not any(c.isupper() for c in password):
            return ValidationResult(False, "La contraseña debe tener al menos una mayúscula")

        if not any(c.islower() for c in password):
            return ValidationResult(False, "La contraseña debe tener al menos una minúscula")

        if not any(c.isdigit() for c in password):
            return ValidationResult(False, "La contraseña debe tener al menos un número")

        if password in cls.COMMON_PASSWORDS:
            return ValidationResult(False, "La contraseña es demasiado común")

        return ValidationResult(True)

    @classmethod
    def validate_name(cls, name: str) -> ValidationResult:
        """Validate a display name and return its HTML-escaped form"""
        if not name or not isinstance(name, str) or not name.strip():
            return ValidationResult(False, "El nombre es requerido")

        name = name.strip()
        if not cls.NAME_MIN_LENGTH <= len(name) <= cls.NAME_MAX_LENGTH:
            return ValidationResult(
                False,
                f"El nombre debe tener entre {cls.NAME_MIN_LENGTH} y {cls.NAME_MAX_LENGTH} caracteres"
            )

        return ValidationResult(True, sanitized_value=html.escape(name))

    @classmethod
    def validate_reset_token(cls, token: str) -> ValidationResult:
        """Validate the shape of a password reset token"""
        if not token or not isinstance(token, str):
            return ValidationResult(False, "El token es requerido")

        token = token.strip()
        if not cls.RESET_TOKEN_PATTERN.match(token):
            return ValidationResult(False, "Token inválido")

        return ValidationResult(True, sanitized_value=token.lower())

    @classmethod
    def sanitize_input(cls, input_string: str, max_length: int = 1000) -> str:
        """
        Sanitize user input to prevent injection attacks

        Args:
            input_string: Input string to sanitize
            max_length: Maximum allowed length

        Returns:
            Sanitized string
        """
        if not input_string:
            return ""

        sanitized = str(input_string).strip()

        if len(sanitized) > max_length:
            sanitized = sanitized[:max_length]

        # Remove null bytes
        sanitized = sanitized.replace('\x00', '')

        # Normalize line endings
        sanitized = sanitized.replace('\r\n', '\n').replace('\r', '\n')

        return sanitized

    @classmethod
    def _contains_xss(cls, text: str) -> bool:
        """Check if text contains XSS patterns"""
        for pattern in cls.XSS_PATTERNS:
            if re.search(pattern, text, re.IGNORECASE):
                return True
        return False


# Convenience functions for common validations
def validate_email(email: str) -> ValidationResult:
    """Validate email address"""
    return InputValidator.validate_email(email)


def validate_password_strength(password: str) -> ValidationResult:
    """Validate password strength"""
    return InputValidator.validate_password_strength(password)


def validate_name(name: str) -> ValidationResult:
    """Validate display name"""
    return InputValidator.validate_name(name)


def validate_reset_token(token: str) -> ValidationResult:
    """Validate password reset token format"""
    return InputValidator.validate_reset_token(token)


def sanitize_input(input_string: str, max_length: int = 1000) -> str:
    """Sanitize user input"""
    return InputValidator.sanitize_input(input_string, max_length)
