"""
GymPro - Application Factory

This module provides the Flask application factory pattern for creating
and configuring the application instance.
"""

import logging
import os

from flask import Flask
from gympro.extensions import db, login_manager
from gympro.config import Config
from gympro.log import configure_logging

logger = logging.getLogger(__name__)


def create_app(config_class=Config, data_service=None):
    """Create and configure the Flask application.

    Args:
        config_class: Configuration class to use (default: Config)
        data_service: Remote Data Service to use instead of the one
            named by ``DATA_BACKEND``

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app)

    from gympro.auth.session import current_access_token, get_session_store
    from gympro.backend import EXTENSION_KEY, make_data_service

    if data_service is None:
        data_service = make_data_service(app.config, token_provider=current_access_token)
    app.extensions[EXTENSION_KEY] = data_service

    # Initialize extensions
    login_manager.init_app(app)

    @login_manager.request_loader
    def load_identity(_request):
        return get_session_store().identity

    # Every path goes through the route guard first
    from gympro.routing import install_route_guard
    install_route_guard(app)

    # Register blueprints
    from gympro.auth import auth_bp
    from gympro.admin import admin_bp
    from gympro.member import member_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')
    app.register_blueprint(member_bp, url_prefix='/member')

    @app.context_processor
    def inject_session_flags():
        """Inject ``is_admin`` into templates from the session store."""
        return dict(is_admin=get_session_store().is_admin)

    @app.template_filter('datefmt')
    def datefmt_filter(value, fmt='%b %d, %Y'):
        if not value:
            return '-'
        return value.strftime(fmt)

    if app.config.get('DATA_BACKEND') == 'sql':
        _init_sql_backend(app)

    logger.info("GymPro started with the '%s' data backend", app.config.get('DATA_BACKEND'))
    return app


def _init_sql_backend(app):
    """Create the local tables."""
    db.init_app(app)
    import gympro.models  # noqa: F401

    with app.app_context():
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///') \
                and ':memory:' not in app.config['SQLALCHEMY_DATABASE_URI']:
            os.makedirs(os.path.join(Config.basedir, 'instance'), exist_ok=True)
        db.create_all()
