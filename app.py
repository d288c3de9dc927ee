# app.py
"""
Flask Application Factory for the Site Builder public front end

This application factory wires:
- Logging (optionally to the systemd journal)
- Published site viewer (slug resolution and runtime bootstrap)
- JSON error handling and health checks
- Security headers and request timing middleware
"""

import os
import logging
from datetime import datetime

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config.settings import get_config
from middleware.security import security_headers
from routes.site import init_site_viewer


def setup_logging(app: Flask) -> None:
    """
    Configure application logging

    Log level comes from LOG_LEVEL; LOG_TO_JOURNAL adds a systemd journal
    handler when python-systemd is installed.
    """
    app.logger.handlers.clear()

    formatter = logging.Formatter(
        fmt='%(asctime)s %(name)-20s %(levelname)-8s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    log_level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    app.logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(log_level)
    app.logger.addHandler(stream_handler)

    if app.config.get('LOG_TO_JOURNAL'):
        try:
            from systemd import journal
            journal_handler = journal.JournalHandler()
            journal_handler.setFormatter(logging.Formatter('%(name)s[%(process)d]: %(levelname)s %(message)s'))
            journal_handler.setLevel(log_level)
            app.logger.addHandler(journal_handler)
        except ImportError:
            app.logger.warning("systemd.journal not available, logging to stream only")

    if not app.debug:
        logging.getLogger('werkzeug').setLevel(logging.WARNING)


def configure_error_handlers(app: Flask) -> None:
    """JSON error responses for everything outside the site viewer"""

    @app.errorhandler(400)
    def bad_request(error):
        app.logger.warning(f"Bad request from {request.remote_addr}: {error}")
        return jsonify({
            'error': 'Bad Request',
            'message': 'Invalid request format or parameters',
            'status_code': 400
        }), 400

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': 'The requested resource was not found',
            'status_code': 404
        }), 404

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred',
            'status_code': 500
        }), 500

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return e

        app.logger.error(f"Unhandled exception: {e}", exc_info=True)
        return jsonify({
            'error': 'Internal Server Error',
            'message': 'An unexpected error occurred',
            'status_code': 500
        }), 500


def configure_health_checks(app: Flask) -> None:

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'healthy',
            'timestamp': datetime.utcnow().isoformat(),
            'version': app.config.get('VERSION', '1.0.0')
        })


def configure_request_middleware(app: Flask) -> None:

    @app.before_request
    def before_request():
        g.start_time = datetime.utcnow()

    @app.after_request
    def after_request(response):
        response = security_headers(response)

        if hasattr(g, 'start_time'):
            duration = (datetime.utcnow() - g.start_time).total_seconds() * 1000
            if duration > app.config.get('SLOW_REQUEST_THRESHOLD', 1000):
                app.logger.warning(f"Slow request ({duration:.0f}ms): {request.method} {request.path}")

        return response


def create_app(config_name: str = None, bootstrapper=None) -> Flask:
    """
    Flask application factory

    Args:
        config_name: Configuration environment ('development', 'testing', 'production')
        bootstrapper: Optional SiteBootstrapper replacing the API-backed default

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__, static_folder='static')

    config_name = config_name or os.environ.get('FLASK_ENV', 'production')
    app.config.from_object(get_config(config_name))

    if config_name == 'production':
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    setup_logging(app)
    app.logger.info(f"Starting Site Builder front end in {config_name} mode")

    configure_health_checks(app)
    init_site_viewer(app, bootstrapper)
    configure_error_handlers(app)
    configure_request_middleware(app)

    app.logger.info("Flask application factory completed successfully")
    return app


if __name__ == '__main__':
    app = create_app('development')
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 5000)), debug=True)
