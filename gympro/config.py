"""
Configuration settings for the GymPro web application
"""
import os


class Config:
    """Flask application configuration"""

    # Flask secret key for the signed session cookie
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production-12345'

    # Which Remote Data Service adapter to use: 'sql' (local) or 'supabase'
    DATA_BACKEND = os.environ.get('DATA_BACKEND') or 'sql'

    # Local SQL backend
    basedir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'gympro.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Hosted backend
    SUPABASE_URL = os.environ.get('SUPABASE_URL') or 'http://localhost:54321'
    SUPABASE_ANON_KEY = os.environ.get('SUPABASE_ANON_KEY') or ''
    DATA_SERVICE_TIMEOUT = float(os.environ.get('DATA_SERVICE_TIMEOUT') or 10.0)

    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

    # Application settings
    DEFAULT_PLAN_NAME = 'Mensal'
    RECENT_PAYMENTS_LIMIT = 5


class TestConfig(Config):
    """Testing configuration"""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    DATA_BACKEND = 'sql'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'DEBUG'
