"""
Main Routes

FLOW OVERVIEW
- /health [GET]
  • JSON health check including a database round trip.
"""

import logging
from datetime import datetime

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..models import db

main_bp = Blueprint('main', __name__)
logger = logging.getLogger(__name__)


@main_bp.route('/health')
def health():
    """Health check endpoint"""
    try:
        db.session.execute(text('SELECT 1'))
        database = 'ok'
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database health check failed: {e}")
        database = 'unavailable'

    status_code = 200 if database == 'ok' else 503
    return jsonify({
        'status': 'healthy' if status_code == 200 else 'degraded',
        'database': database,
        'timestamp': datetime.utcnow().isoformat()
    }), status_code
