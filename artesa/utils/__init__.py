"""
Utilities Package

This package contains utility functions and helper modules.
"""

from . import auth_utils
from . import validators
from . import error_handlers
from . import recaptcha
from . import token_revocation

__all__ = [
    'auth_utils',
    'validators',
    'error_handlers',
    'recaptcha',
    'token_revocation'
]
