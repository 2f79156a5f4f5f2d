"""
API Routes

FLOW OVERVIEW
- /api/status [GET]
  • Service name, version and environment.
- /api/metrics [GET]
  • Prometheus text exposition.
"""

from flask import Blueprint, Response, current_app, jsonify

from .. import __version__
from ..utils.prom_metrics import metrics_latest, CONTENT_TYPE_LATEST

api_bp = Blueprint('api', __name__)


@api_bp.route('/status')
def api_status():
    """API status endpoint"""
    return jsonify({
        'status': 'operational',
        'service': 'la-artesa-auth',
        'version': __version__,
        'environment': current_app.config.get('APP_ENV', 'development')
    })


@api_bp.route('/metrics')
def metrics():
    """Prometheus metrics endpoint"""
    return Response(metrics_latest(), mimetype=CONTENT_TYPE_LATEST)
