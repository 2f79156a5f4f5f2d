"""
API Utilities Module

FLOW OVERVIEW
- APIRequestValidator
  • validate_json_request → parse/validate JSON and return (ok, data, error).
  • get_recaptcha_token → read the reCAPTCHA token from body or header.
- APIResponseFormatter
  • success / failure → consistent `{success, message}` and `{success, errorCode, message}` payloads.
  • server_error → generic unexpected error payload.
"""

import logging
from typing import Dict, Any, Tuple, Optional
from flask import request


class APIRequestValidator:
    """Handles common request validation logic."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def validate_json_request(self, client_ip: str = None) -> Tuple[bool, Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """
        Validate and parse JSON request.

        Args:
            client_ip: Client IP for logging

        Returns:
            Tuple of (is_valid, data, error_response)
        """
        data = request.get_json(silent=True)

        if data is None:
            self.logger.warning(f"Missing or invalid JSON body from {client_ip}")
            return False, None, APIResponseFormatter.failure(
                'INVALID_JSON', 'El cuerpo de la solicitud debe ser JSON válido.'
            )

        if not isinstance(data, dict):
            self.logger.warning(f"Invalid data type from {client_ip}: {type(data)}")
            return False, None, APIResponseFormatter.failure(
                'INVALID_DATA_TYPE', 'El cuerpo de la solicitud debe ser un objeto JSON.'
            )

        return True, data, None

    @staticmethod
    def get_recaptcha_token(data: Dict[str, Any]) -> Optional[str]:
        """reCAPTCHA token from the JSON body or X-Recaptcha-Token header"""
        token = data.get('recaptchaToken') if data else None
        if not token:
            token = request.headers.get('X-Recaptcha-Token')
        return token


class APIResponseFormatter:
    """Handles response formatting."""

    @staticmethod
    def success(message: str, **extra: Any) -> Dict[str, Any]:
        response = {'success': True, 'message': message}
        response.update(extra)
        return response

    @staticmethod
    def failure(error_code: str, message: str, **extra: Any) -> Dict[str, Any]:
        response = {'success': False, 'errorCode': error_code, 'message': message}
        response.update(extra)
        return response

    @staticmethod
    def server_error(message: str = 'Error interno del servidor') -> Dict[str, Any]:
        return APIResponseFormatter.failure('INTERNAL_SERVER_ERROR', message)


# Global instances
request_validator = APIRequestValidator()
response_formatter = APIResponseFormatter()
