"""
Authentication Routes

FLOW OVERVIEW
- /api/auth/register [POST]
  • reCAPTCHA gate → validate name/mail/password → create user → JWT.
- /api/auth/login [POST]
  • reCAPTCHA gate → attempt throttle → bcrypt check (legacy migration) → JWT + login history.
- /api/auth/me [GET]
  • Bearer auth; current user profile.
- /api/auth/logout [POST]
  • Bearer auth; revoke the presented token.
- /api/auth/logout/all [POST]
  • Bearer auth; revoke every token issued to the caller so far.
- /api/auth/admin/revoke/<user_id> [POST]
  • Admin only; revoke every token of another user.
"""

import logging

from flask import Blueprint, g, jsonify
from sqlalchemy.exc import SQLAlchemyError

from ..models import db, User, LoginHistory, Roles
from ..utils.api_utils import request_validator
from ..utils.audit import record_security_event
from ..utils.auth_utils import (
    create_user, authenticate_user, generate_jwt_token, get_client_ip,
    login_attempts, token_required, role_required
)
from ..utils.prom_metrics import observe_login
from ..utils.recaptcha import validate_recaptcha, recaptcha_failed_response
from ..utils.token_revocation import revoke_token, revoke_all_user_tokens
from ..utils.validators import validate_email, validate_password_strength, validate_name

auth_bp = Blueprint('auth', __name__)
logger = logging.getLogger(__name__)


def _session_payload(user):
    return {
        'token': generate_jwt_token(user),
        'user': {
            'id': user.id,
            'name': user.name,
            'role': user.rol_id
        }
    }


@auth_bp.route('/register', methods=['POST'])
def register():
    """User registration endpoint"""
    client_ip = get_client_ip()
    ok, data, error = request_validator.validate_json_request(client_ip)
    if not ok:
        return jsonify(error), 400

    if not validate_recaptcha(request_validator.get_recaptcha_token(data), client_ip):
        return recaptcha_failed_response()

    email_validation = validate_email(data.get('mail'))
    password_validation = validate_password_strength(data.get('password'))
    name_validation = validate_name(data.get('name'))

    errors = {}
    if not email_validation.is_valid:
        errors['mail'] = email_validation.error_message
    if not password_validation.is_valid:
        errors['password'] = password_validation.error_message
    if not name_validation.is_valid:
        errors['name'] = name_validation.error_message
    if errors:
        return jsonify({'success': False, 'errors': errors}), 400

    mail = email_validation.sanitized_value
    if User.query.filter_by(mail=mail).first():
        return jsonify({'success': False, 'message': 'El correo electrónico ya está registrado'}), 400

    try:
        user = create_user(name_validation.sanitized_value, mail, data['password'])
        db.session.commit()
    except ValueError as e:
        db.session.rollback()
        return jsonify({'success': False, 'message': str(e)}), 400
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Registration failed for {mail}: {e}")
        return jsonify({'success': False, 'message': 'Error interno del servidor'}), 500

    record_security_event('USER_REGISTERED', user_id=user.id, ip_address=client_ip, details={'mail': mail})
    logger.info(f"User {user.id} registered")
    return jsonify(_session_payload(user)), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    """User login endpoint"""
    client_ip = get_client_ip()
    ok, data, error = request_validator.validate_json_request(client_ip)
    if not ok:
        return jsonify(error), 400

    mail_value = data.get('mail')
    password = data.get('password')
    if not isinstance(mail_value, str) or not isinstance(password, str) or not mail_value or not password:
        return jsonify({
            'success': False,
            'message': 'El correo electrónico y la contraseña son requeridos'
        }), 400

    if not validate_recaptcha(request_validator.get_recaptcha_token(data), client_ip):
        observe_login('recaptcha_failed')
        return recaptcha_failed_response()

    email_validation = validate_email(mail_value)
    if not email_validation.is_valid:
        return jsonify({'success': False, 'message': email_validation.error_message}), 400
    mail = email_validation.sanitized_value

    allowed, seconds_left = login_attempts.check(mail)
    if not allowed:
        observe_login('throttled')
        return jsonify({
            'status': 'error',
            'message': f'Demasiados intentos fallidos. Por favor, espere {seconds_left} segundos.'
        }), 429

    try:
        user = authenticate_user(mail, password)
        if user is None:
            login_attempts.record_failure(mail)
            observe_login('invalid_credentials')
            return jsonify({'success': False, 'message': 'Credenciales inválidas'}), 401

        login_attempts.reset(mail)
        db.session.add(LoginHistory(user_id=user.id, ip_address=client_ip))
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Login failed for {mail}: {e}")
        return jsonify({'success': False, 'message': 'Error interno del servidor'}), 500

    observe_login('success')
    logger.info(f"User {user.id} logged in from {client_ip}")
    return jsonify(_session_payload(user)), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def me():
    """Current user profile"""
    user = g.current_user
    profile = user.to_dict()
    profile['role_name'] = user.role_name
    return jsonify({'success': True, 'user': profile}), 200


@auth_bp.route('/logout', methods=['POST'])
@token_required
def logout():
    """Revoke the presented token"""
    user = g.current_user
    if revoke_token(g.token, user.id, g.token_expiry):
        logger.info(f"User {user.id} logged out")
        return jsonify({'success': True, 'message': 'Sesión cerrada exitosamente'}), 200

    logger.warning(f"Token revocation failed during logout for user {user.id}")
    return jsonify({
        'success': False,
        'message': 'Error al cerrar sesión, pero el cliente puede continuar con el proceso de logout'
    }), 500


@auth_bp.route('/logout/all', methods=['POST'])
@token_required
def logout_all():
    """Revoke every token issued to the caller"""
    user = g.current_user
    if revoke_all_user_tokens(user.id, reason='user_requested'):
        record_security_event('SESSIONS_REVOKED', user_id=user.id, ip_address=get_client_ip(),
                              details={'reason': 'user_requested'})
        return jsonify({
            'success': True,
            'message': 'Todas las sesiones han sido cerradas exitosamente'
        }), 200

    return jsonify({'success': False, 'message': 'Error al cerrar todas las sesiones'}), 500


@auth_bp.route('/admin/revoke/<int:user_id>', methods=['POST'])
@token_required
@role_required(Roles.ADMIN)
def admin_revoke_user_tokens(user_id):
    """Administrative revocation of another user's sessions"""
    admin = g.current_user
    if db.session.get(User, user_id) is None:
        return jsonify({'success': False, 'message': 'Usuario no encontrado'}), 404

    if revoke_all_user_tokens(user_id, reason='admin_revoked'):
        record_security_event('SESSIONS_REVOKED', user_id=user_id, ip_address=get_client_ip(),
                              details={'reason': 'admin_revoked', 'admin_id': admin.id},
                              severity='WARNING')
        logger.info(f"Admin {admin.id} revoked tokens of user {user_id}")
        return jsonify({'success': True, 'message': 'Tokens revocados exitosamente'}), 200

    return jsonify({'success': False, 'message': 'Error al revocar tokens'}), 500
