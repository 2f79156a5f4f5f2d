"""
Error Handlers

This module registers JSON error handlers for the whole application.
"""

import logging
from flask import jsonify

logger = logging.getLogger(__name__)


def error_response(message, status_code):
    """JSON error body used by the global handlers"""
    return jsonify({'status': 'error', 'message': message}), status_code


def register_error_handlers(app):
    """Register error handlers with the Flask app"""

    @app.errorhandler(400)
    def bad_request(error):
        return error_response('Solicitud inválida', 400)

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Recurso no encontrado', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Método no permitido', 405)

    @app.errorhandler(500)
    def internal_error(error):
        from ..models import db
        db.session.rollback()
        logger.error(f"Unhandled server error: {error}")
        return error_response('Error interno del servidor', 500)
