import os
from datetime import timedelta
from flask import Flask, render_template
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate, upgrade
from dotenv import load_dotenv

# Load environment variables (override=True ensures .env values take precedence)
load_dotenv(override=True)

# Initialize extensions
db = SQLAlchemy()
migrate = Migrate()

# Required in production; development falls back to local defaults
REQUIRED_PRODUCTION_SETTINGS = ('DATABASE_URL', 'SECRET_KEY', 'ADMIN_PASSWORD')


def is_production():
    return os.environ.get('RAILWAY_ENVIRONMENT') is not None


def create_app(config_name=None):
    """Application factory pattern."""
    app = Flask(__name__)
    testing = config_name == 'testing'

    if is_production() and not testing:
        missing = [name for name in REQUIRED_PRODUCTION_SETTINGS if not os.environ.get(name)]
        if missing:
            raise RuntimeError(f"Missing required configuration: {', '.join(missing)}")

    # Configuration
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-me')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///dev.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False

    # Session configuration - 30 day persistent sessions
    app.config['PERMANENT_SESSION_LIFETIME'] = timedelta(days=30)
    app.config['SESSION_COOKIE_SECURE'] = is_production()  # HTTPS only in production
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    # Admin password for simple auth
    app.config['ADMIN_PASSWORD'] = os.environ.get('ADMIN_PASSWORD', 'food-admin-dev')
    app.config['APP_URL'] = os.environ.get('APP_URL', 'http://localhost:5000')

    # Photo storage (Cloudflare R2, S3 compatible)
    app.config['R2_BUCKET_NAME'] = os.environ.get('R2_BUCKET_NAME')
    app.config['R2_ACCOUNT_ID'] = os.environ.get('R2_ACCOUNT_ID')
    app.config['R2_ACCESS_KEY_ID'] = os.environ.get('R2_ACCESS_KEY_ID')
    app.config['R2_SECRET_ACCESS_KEY'] = os.environ.get('R2_SECRET_ACCESS_KEY')
    app.config['R2_PUBLIC_DOMAIN'] = os.environ.get('R2_PUBLIC_DOMAIN')

    # Geocoding (Nominatim requires an identifying User-Agent)
    app.config['GEOCODING_URL'] = os.environ.get(
        'GEOCODING_URL', 'https://nominatim.openstreetmap.org/search'
    )
    app.config['GEOCODING_USER_AGENT'] = os.environ.get(
        'GEOCODING_USER_AGENT', 'food-reviews/1.0 (admin geocoding)'
    )

    # Contact form email relay
    app.config['BREVO_API_KEY'] = os.environ.get('BREVO_API_KEY')
    app.config['CONTACT_EMAIL'] = os.environ.get('CONTACT_EMAIL')

    # Fix for postgres:// vs postgresql:// (some providers use older postgres:// format)
    if app.config['SQLALCHEMY_DATABASE_URI'].startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = app.config['SQLALCHEMY_DATABASE_URI'].replace(
            'postgres://', 'postgresql://', 1
        )

    if testing:
        app.config['TESTING'] = True
        app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
        app.config['ADMIN_PASSWORD'] = 'test-password'
        app.config['BREVO_API_KEY'] = None
        app.config['CONTACT_EMAIL'] = 'owner@example.com'
        for key in ('R2_BUCKET_NAME', 'R2_ACCOUNT_ID', 'R2_ACCESS_KEY_ID', 'R2_SECRET_ACCESS_KEY'):
            app.config[key] = None

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so they're known to Flask-Migrate
    from food_reviews import models

    # Services are constructed once per app and handed to the routes explicitly
    from food_reviews.services import build_services
    build_services(app)

    # Register blueprints
    from food_reviews.routes.main import main_bp
    from food_reviews.routes.admin import admin_bp
    from food_reviews.routes.api import api_bp
    app.register_blueprint(main_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(api_bp)

    from food_reviews.utils.maps import maps_url
    app.jinja_env.globals['maps_url'] = maps_url

    @app.errorhandler(404)
    def not_found(error):
        return render_template('not_found.html'), 404

    @app.cli.command('init-db')
    def init_db():
        """Create all tables (local development without migrations)."""
        db.create_all()
        print('Database tables created.')

    @app.cli.command('cleanup-rate-limits')
    def cleanup_rate_limits():
        """Delete rate limit records older than an hour."""
        deleted = models.RateLimit.cleanup_old_records()
        print(f'Deleted {deleted} rate limit records.')

    # Auto-run migrations in production (Railway)
    migrations_dir = os.path.join(os.path.dirname(app.root_path), 'migrations')
    if is_production() and not testing and os.path.isdir(migrations_dir):
        with app.app_context():
            upgrade(directory=migrations_dir)

    return app
