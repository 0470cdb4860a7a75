"""Flask JSON API for Workroom."""

import logging
import threading
from flask import Flask, jsonify
from .blueprints.api import api_bp
from ..core.config import AppConfig, get_config
from ..core.session import Workspace
from ..core.exceptions import WorkroomError


def create_app(app_config: AppConfig = None, overrides=None):
    """
    Create and configure the Flask application.

    Args:
        app_config: Workroom configuration. If None, uses global config.
        overrides: Flask configuration values

    Returns:
        Configured Flask application
    """
    app_config = app_config or get_config()

    app = Flask(__name__)
    app.config.update({
        'SECRET_KEY': app_config.web.secret_key,
        'JSON_SORT_KEYS': False,
    })
    if overrides:
        app.config.update(overrides)

    # One interactive user per server process; routes hold the lock while they
    # select and act so concurrent requests cannot swap the selection
    app.extensions['workroom'] = Workspace(app_config)
    app.extensions['workroom_lock'] = threading.Lock()

    app.register_blueprint(api_bp, url_prefix='/api')

    if not app.debug:
        app.logger.setLevel(logging.INFO)
        app.logger.info('Workroom API startup')

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'API endpoint not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(WorkroomError)
    def workroom_error(error):
        app.logger.error(f'Workroom Error: {error}', exc_info=True)
        return jsonify({
            'error': 'Application error',
            'message': str(error)
        }), 400

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f'Server Error: {error}', exc_info=True)
        return jsonify({
            'error': 'Internal server error',
            'message': 'An unexpected error occurred'
        }), 500

    return app
