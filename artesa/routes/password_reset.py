"""
Password Reset Routes

FLOW OVERVIEW
- /api/password/request-reset [POST]
  • reCAPTCHA gate → look up active user → create token → email link.
  • Always answers with the same generic message so accounts cannot be enumerated.
- /api/password/validate/<token> [GET]
  • Report whether a reset link is still usable.
- /api/password/reset [POST]
  • reCAPTCHA gate → token + password checks → bcrypt hash → consume token → revoke sessions.
"""

import logging
import smtplib

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..models import db, User, PasswordReset
from ..models.utils import token_fragment
from ..utils.api_utils import request_validator, response_formatter
from ..utils.audit import record_security_event
from ..utils.auth_utils import get_client_ip, hash_password
from ..utils.email_service import send_password_reset_email
from ..utils.prom_metrics import observe_password_reset
from ..utils.recaptcha import validate_recaptcha, recaptcha_failed_response
from ..utils.token_revocation import revoke_all_user_tokens
from ..utils.validators import validate_email, validate_password_strength, validate_reset_token

password_reset_bp = Blueprint('password_reset', __name__)
logger = logging.getLogger(__name__)

GENERIC_REQUEST_MESSAGE = 'Si el correo existe, recibirás instrucciones para restablecer tu contraseña'
INVALID_TOKEN_MESSAGE = 'Token inválido o expirado'


def _is_development():
    return current_app.config.get('APP_ENV', 'development') == 'development'


@password_reset_bp.route('/request-reset', methods=['POST'])
def request_reset():
    """Start a password reset for the given mail"""
    client_ip = get_client_ip()
    ok, data, error = request_validator.validate_json_request(client_ip)
    if not ok:
        return jsonify(error), 400

    if not validate_recaptcha(request_validator.get_recaptcha_token(data), client_ip):
        observe_password_reset('request', 'recaptcha_failed')
        return recaptcha_failed_response()

    email_validation = validate_email(data.get('mail'))
    if not email_validation.is_valid:
        return jsonify(response_formatter.failure('INVALID_EMAIL', email_validation.error_message)), 400
    mail = email_validation.sanitized_value

    try:
        user = User.query.filter_by(mail=mail).first()
        if user is None or not user.is_active:
            logger.info(f"Password reset requested for unknown or inactive mail from {client_ip}")
            observe_password_reset('request', 'unknown_account')
            return jsonify(response_formatter.success(GENERIC_REQUEST_MESSAGE)), 200

        reset = PasswordReset.create_token(user.id)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Password reset request failed: {e}")
        return jsonify(response_formatter.server_error(
            'Error al procesar la solicitud de recuperación de contraseña'
        )), 500

    if _is_development():
        logger.debug(f"Reset token generated for testing: {reset.token}")

    email_sent = True
    try:
        send_password_reset_email(user.mail, reset.token)
    except (smtplib.SMTPException, OSError) as e:
        email_sent = False
        logger.error(f"Failed to send password reset email to user {user.id}: {e}")
        observe_password_reset('request', 'email_failed')
        if _is_development():
            return jsonify(response_formatter.success(
                'Token generado (modo desarrollo)', token=reset.token
            )), 200

    record_security_event(
        'PASSWORD_RESET_REQUESTED',
        user_id=user.id,
        ip_address=client_ip,
        details={'mail': user.mail, 'reset_id': reset.id, 'email_sent': email_sent}
    )
    if email_sent:
        observe_password_reset('request', 'sent')

    # Same answer as for unknown accounts, whether or not the email went out

    response = response_formatter.success(GENERIC_REQUEST_MESSAGE)
    if _is_development():
        response['token'] = reset.token
    return jsonify(response), 200


@password_reset_bp.route('/validate/<token>', methods=['GET'])
def validate_token(token):
    """Tell the frontend whether a reset link can still be used"""
    token_validation = validate_reset_token(token)
    if not token_validation.is_valid:
        return jsonify({'success': False, 'valid': False, 'message': token_validation.error_message}), 400

    reset = PasswordReset.find_by_token(token_validation.sanitized_value)
    if reset is None:
        return jsonify({'success': False, 'valid': False, 'message': INVALID_TOKEN_MESSAGE}), 400

    return jsonify({
        'success': True,
        'valid': True,
        'expires_at': reset.expires_at.isoformat()
    }), 200


@password_reset_bp.route('/reset', methods=['POST'])
def reset_password():
    """Set a new password using a reset token"""
    client_ip = get_client_ip()
    ok, data, error = request_validator.validate_json_request(client_ip)
    if not ok:
        return jsonify(error), 400

    if not validate_recaptcha(request_validator.get_recaptcha_token(data), client_ip):
        observe_password_reset('reset', 'recaptcha_failed')
        return recaptcha_failed_response()

    token_validation = validate_reset_token(data.get('token'))
    if not token_validation.is_valid:
        return jsonify(response_formatter.failure('INVALID_TOKEN', token_validation.error_message)), 400
    token = token_validation.sanitized_value

    new_password = data.get('newPassword')
    password_validation = validate_password_strength(new_password)
    if not password_validation.is_valid:
        return jsonify(response_formatter.failure('WEAK_PASSWORD', password_validation.error_message)), 400

    try:
        reset = PasswordReset.find_by_token(token)
        if reset is None:
            observe_password_reset('reset', 'invalid_token')
            return jsonify(response_formatter.failure('INVALID_TOKEN', INVALID_TOKEN_MESSAGE)), 400

        user = db.session.get(User, reset.user_id)
        if user is None or not user.is_active:
            logger.warning(f"Reset token {token_fragment(token)} belongs to a missing or inactive user")
            observe_password_reset('reset', 'invalid_token')
            return jsonify(response_formatter.failure('INVALID_TOKEN', INVALID_TOKEN_MESSAGE)), 400

        if PasswordReset.mark_as_used(token, commit=False) is None:
            db.session.rollback()
            observe_password_reset('reset', 'invalid_token')
            return jsonify(response_formatter.failure('INVALID_TOKEN', INVALID_TOKEN_MESSAGE)), 400

        user.update_password(hash_password(new_password))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Password reset failed for token {token_fragment(token)}: {e}")
        return jsonify(response_formatter.server_error('Error al restablecer la contraseña')), 500

    # Sessions opened with the old password stop working
    revoke_all_user_tokens(user.id, reason='password_reset')

    record_security_event(
        'PASSWORD_RESET_COMPLETED',
        user_id=user.id,
        ip_address=client_ip,
        details={'mail': user.mail, 'reset_id': reset.id}
    )
    observe_password_reset('reset', 'completed')
    logger.info(f"Password updated through reset for user {user.id}")

    return jsonify(response_formatter.success('Contraseña actualizada exitosamente')), 200
