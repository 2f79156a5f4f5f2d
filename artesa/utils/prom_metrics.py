"""
Prometheus metrics registration and helpers.

Exports:
- observe_request(...): record HTTP request metrics
- observe_password_reset(...): record reset requests and completions
- observe_login(...): record login outcomes
- observe_recaptcha(...): record reCAPTCHA verdicts
- metrics_latest(): return text exposition from correct registry (handles multiprocess)
- CONTENT_TYPE_LATEST: correct Prometheus content type
"""

import os
from prometheus_client import Counter, Histogram, CollectorRegistry, generate_latest, CONTENT_TYPE_LATEST
from prometheus_client import multiprocess


REQUEST_COUNTER = Counter(
    'artesa_http_requests_total', 'Total HTTP requests', ['endpoint', 'status']
)

REQUEST_LATENCY = Histogram(
    'artesa_http_request_latency_seconds', 'HTTP request latency seconds', ['endpoint']
)

PASSWORD_RESET_EVENTS = Counter(
    'artesa_password_reset_events_total', 'Password reset lifecycle events', ['stage', 'outcome']
)

LOGIN_ATTEMPTS = Counter(
    'artesa_login_attempts_total', 'Login attempts by outcome', ['outcome']
)

RECAPTCHA_VERDICTS = Counter(
    'artesa_recaptcha_verdicts_total', 'reCAPTCHA verification verdicts', ['result', 'reason']
)


def observe_request(endpoint: str, status: int, latency_seconds: float) -> None:
    REQUEST_COUNTER.labels(endpoint=endpoint, status=str(status)).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency_seconds)


def observe_password_reset(stage: str, outcome: str) -> None:
    PASSWORD_RESET_EVENTS.labels(stage=stage, outcome=outcome).inc()


def observe_login(outcome: str) -> None:
    LOGIN_ATTEMPTS.labels(outcome=outcome).inc()


def observe_recaptcha(result: bool, reason: str) -> None:
    RECAPTCHA_VERDICTS.labels(result='pass' if result else 'fail', reason=reason).inc()


def metrics_latest() -> bytes:
    """Return the Prometheus text exposition, multiprocess-aware if configured."""
    prom_mp_dir = os.getenv('PROMETHEUS_MULTIPROC_DIR')
    if prom_mp_dir:
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        return generate_latest(registry)
    # Default registry
    return generate_latest()
