"""
reCAPTCHA Verification

FLOW OVERVIEW
- validate_recaptcha(token, remote_ip)
  • Short-circuits on disabled/bypass/test-token configuration.
  • Otherwise calls Google siteverify; v3 responses must reach RECAPTCHA_MIN_SCORE,
    v2 responses only need success.
  • Network errors pass only in development.
- recaptcha_failed_response()
  • JSON body + status used by routes when verification fails.
"""

import logging

import requests
from flask import current_app, jsonify

from ..models.utils import token_fragment
from .prom_metrics import observe_recaptcha

logger = logging.getLogger(__name__)

DEVELOPMENT_TEST_TOKEN = 'development-test-token'


def _verdict(result, reason):
    observe_recaptcha(result, reason)
    return result


def validate_recaptcha(token, remote_ip=None):
    """
    Validate a reCAPTCHA token produced by the frontend.

    Args:
        token: Token returned by the reCAPTCHA widget
        remote_ip: Client address forwarded to Google

    Returns:
        bool: whether the submission may proceed
    """
    config = current_app.config
    env = config.get('APP_ENV', 'development')

    if not config.get('RECAPTCHA_ENABLED', False):
        logger.info("reCAPTCHA disabled by configuration, skipping validation")
        return _verdict(True, 'disabled')

    if env == 'development' and token == DEVELOPMENT_TEST_TOKEN:
        logger.info(f"Accepting development test token from {remote_ip}")
        return _verdict(True, 'test_token')

    if config.get('RECAPTCHA_BYPASS', False):
        logger.info(f"reCAPTCHA bypass enabled by configuration for {remote_ip}")
        return _verdict(True, 'bypass')

    secret = config.get('RECAPTCHA_SECRET_KEY')
    if not secret:
        logger.warning("RECAPTCHA_SECRET_KEY not configured while reCAPTCHA is enabled")
        return _verdict(env != 'production', 'missing_secret')

    if not token:
        logger.warning("reCAPTCHA token not provided")
        return _verdict(False, 'missing_token')

    try:
        logger.debug(f"Verifying reCAPTCHA token {token_fragment(token)} for {remote_ip}")
        response = requests.post(
            config.get('RECAPTCHA_VERIFY_URL', 'https://www.google.com/recaptcha/api/siteverify'),
            data={'secret': secret, 'response': token, 'remoteip': remote_ip},
            timeout=config.get('RECAPTCHA_TIMEOUT', 5),
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"reCAPTCHA verification request failed: {e}")
        if env == 'development':
            logger.info("Allowing reCAPTCHA failure in development environment")
            return _verdict(True, 'dev_network_error')
        return _verdict(False, 'network_error')

    logger.debug(
        f"reCAPTCHA response: success={data.get('success')} score={data.get('score')} "
        f"action={data.get('action')} errors={data.get('error-codes')}"
    )

    # reCAPTCHA v3 responses carry a score
    if data.get('success') and data.get('score') is not None:
        min_score = config.get('RECAPTCHA_MIN_SCORE', 0.5)
        is_valid = float(data['score']) >= min_score
        logger.info(f"reCAPTCHA v3 verification: valid={is_valid} score={data['score']} min={min_score}")
        return _verdict(is_valid, 'v3_score' if is_valid else 'low_score')

    is_valid = bool(data.get('success'))
    logger.info(f"reCAPTCHA v2 verification: valid={is_valid} errors={data.get('error-codes')}")
    return _verdict(is_valid, 'v2' if is_valid else 'rejected')


def recaptcha_failed_response():
    """Standard response for a failed reCAPTCHA check"""
    return jsonify({
        'success': False,
        'errorCode': 'RECAPTCHA_FAILED',
        'message': 'Verificación de seguridad fallida. Por favor, intente nuevamente.'
    }), 400
