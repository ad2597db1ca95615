"""
LibRoom - Library Room and Tour Reservation Service
Flask application factory and initialization
"""

import os
import time
import click
import logging
from flask import Flask, g, request
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf, limiter

# Import database functions
from database import close_db, init_db

from utils.api_response import api_success, api_error
from utils.exceptions import ReservationError
from utils.messages import MESSAGES


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_name == 'production':
        config[config_name].validate()

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)
    # Initialize rate limiting
    limiter.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.auth.routes import auth_bp
    from blueprints.library import library_bp
    from blueprints.api.routes import api_bp
    from blueprints.users.routes import users_bp

    # Register blueprints
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(users_bp, url_prefix='/api/users')
    app.register_blueprint(library_bp, url_prefix='/api')
    app.register_blueprint(api_bp, url_prefix='/api')

    # Set default route
    @app.route('/')
    def index():
        """Service banner."""
        return api_success(data={
            'app': app.config.get('APP_NAME', 'LibRoom'),
            'version': app.config.get('APP_VERSION', '1.0.0'),
        })


def register_error_handlers(app):
    """Register JSON error handlers."""

    @app.errorhandler(ReservationError)
    def reservation_error(error):
        """Handle reservation domain errors."""
        app.logger.info('%s: %s', type(error).__name__, error.message)
        return api_error(error.message, status=error.status_code, **error.payload)

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        return api_error(MESSAGES['permission_denied'], status=403)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(MESSAGES['not_found'], status=404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error(MESSAGES['method_not_allowed'], status=405)

    @app.errorhandler(413)
    def request_too_large_error(error):
        """Handle uploads over MAX_CONTENT_LENGTH."""
        return api_error(MESSAGES['file_too_large'], status=413)

    @app.errorhandler(429)
    def rate_limit_error(error):
        """Handle Flask-Limiter rejections."""
        app.logger.warning('Rate limit exceeded on %s: %s', request.path, error.description)
        payload = {}
        current = limiter.current_limit
        if current is not None:
            payload['retry_after'] = max(int(current.reset_at - time.time()), 1)
        return api_error(MESSAGES['too_many_requests'], status=429, **payload)

    @app.errorhandler(HTTPException)
    def http_error(error):
        """Handle remaining HTTP errors (e.g. CSRF failures)."""
        return api_error(error.description or MESSAGES['invalid_payload'], status=error.code)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        app.logger.error('Unhandled error: %s', getattr(error, 'original_exception', error),
                         exc_info=True)
        return api_error(MESSAGES['server_error'], status=500)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('email')
    @click.option('--full-name', default=None, help='Display name')
    @click.option('--role', type=click.Choice(['admin', 'user']), default='admin')
    @click.password_option()
    def create_user_command(username, email, full_name, role, password):
        """Create a new user."""
        import sqlite3
        from models.user import create_user
        from utils.validators import validate_password

        is_valid, error = validate_password(password)
        if not is_valid:
            click.echo(error, err=True)
            return

        with app.app_context():
            try:
                user_id = create_user(
                    username=username,
                    email=email,
                    password=password,
                    full_name=full_name,
                    role=role
                )
                click.echo(f'User created successfully! ID: {user_id}')
            except sqlite3.IntegrityError as e:
                click.echo(f'Error creating user: {str(e)}', err=True)


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/libroom.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('LibRoom startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
