"""
Flask application factory for CineReview.

    from cinereview.app import create_app
    app = create_app()

Blueprints are mounted under /api; /health and /api/metrics are served by
the app itself.
"""

import os
import time
from typing import Any, Dict, Optional

from flask import Flask, Response, jsonify, request

import cinereview.secret_helper as secret_helper
from cinereview.config import Config
from cinereview.errors import register_error_handlers
from cinereview.logging_config import get_logger
from cinereview.logging_middleware import init_logging_middleware
from cinereview.metrics import get_metrics, http_request_duration_seconds, http_requests_total
from cinereview.models import db
from cinereview.routes import BLUEPRINTS

logger = get_logger(__name__)


def _init_request_metrics(app: Flask):

    @app.before_request
    def before_request_metrics():
        """Store request start time for duration tracking."""
        request._start_time = time.time()

    @app.after_request
    def after_request_metrics(response):
        """Track HTTP request metrics after each request."""
        if hasattr(request, '_start_time'):
            duration = time.time() - request._start_time
            # Endpoint names keep label cardinality bounded
            endpoint = request.endpoint or 'unmatched'
            http_requests_total.labels(
                method=request.method, endpoint=endpoint, status=response.status_code
            ).inc()
            http_request_duration_seconds.labels(
                method=request.method, endpoint=endpoint
            ).observe(duration)
        return response


def init_db(app: Flask):
    """Create database tables that do not exist yet."""
    with app.app_context():
        db.create_all()
    logger.info("database_initialized", database=app.config['SQLALCHEMY_DATABASE_URI'].split(':', 1)[0])


def create_app(config_overrides: Optional[Dict[str, Any]] = None, config_object=Config) -> Flask:
    """
    Build a configured Flask application.

    Args:
        config_overrides: Values applied on top of `config_object`
        config_object: Config class to load (TestConfig in tests)

    Returns:
        Flask application with tables created
    """
    app = Flask(__name__)
    app.config.from_object(config_object)
    # Keep payload keys in the order the serializers build them
    app.json.sort_keys = False
    if config_overrides:
        app.config.update(config_overrides)

    if not app.config.get('TESTING') and secret_helper.inject_secret_key():
        app.config['SECRET_KEY'] = os.environ['SECRET_KEY']

    init_logging_middleware(app)
    _init_request_metrics(app)
    register_error_handlers(app)

    db.init_app(app)

    for blueprint, url_prefix in BLUEPRINTS:
        app.register_blueprint(blueprint, url_prefix=url_prefix)

    @app.route('/health')
    def health():
        """Health check endpoint for deployment monitoring."""
        return jsonify({"status": "healthy", "service": "cinereview"}), 200

    @app.route('/api/metrics')
    def metrics():
        """Prometheus metrics endpoint."""
        metrics_output, content_type = get_metrics()
        return Response(metrics_output, mimetype=content_type)

    init_db(app)
    return app
