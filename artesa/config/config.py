"""
Application Configuration

FLOW OVERVIEW
- Config.__init__
  • Reads APP_ENV to select which .env file to load (dev/prod). Testing bypasses file load.
- Properties expose configuration values, defaulting to sensible development-safe defaults.
- SQLALCHEMY_DATABASE_URI prefers DATABASE_URL, then the DB_* PostgreSQL variables.
"""

import os
from urllib.parse import quote_plus
from dotenv import load_dotenv


def _env_flag(name, default='false'):
    return os.getenv(name, default).strip().lower() == 'true'


class Config:
    """Base configuration class"""

    def __init__(self):
        # Load environment variables based on APP_ENV
        env_file = os.getenv('APP_ENV', 'development')
        if env_file == 'testing':
            # For testing, don't load config files, use environment variables directly
            pass
        elif env_file == 'production':
            load_dotenv('config.prod.env')
        else:
            load_dotenv('config.env')  # Default to development

    @property
    def APP_ENV(self):
        """Deployment environment: development, production or testing"""
        return os.getenv('APP_ENV', 'development')

    @property
    def SECRET_KEY(self):
        """Application secret key"""
        return os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """Database connection URI"""
        url = os.getenv('DATABASE_URL')
        if url:
            return url

        host = os.getenv('DB_HOST')
        if not host:
            return 'sqlite:///:memory:'

        user = quote_plus(os.getenv('DB_USER', 'postgres'))
        password = quote_plus(os.getenv('DB_PASSWORD', ''))
        port = os.getenv('DB_PORT', '5432')
        database = os.getenv('DB_DATABASE', 'artesa')
        uri = f'postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}'
        if _env_flag('DB_SSL'):
            uri += '?sslmode=require'
        return uri

    @property
    def SQLALCHEMY_TRACK_MODIFICATIONS(self):
        """SQLAlchemy track modifications setting"""
        return False

    @property
    def SQLALCHEMY_ENGINE_OPTIONS(self):
        """Connection pool settings"""
        return {
            'pool_pre_ping': True,
        }

    @property
    def MAIL_SERVER(self):
        """SMTP server hostname"""
        return os.getenv('SMTP_HOST', 'localhost')

    @property
    def MAIL_PORT(self):
        """SMTP server port"""
        return int(os.getenv('SMTP_PORT', 587))

    @property
    def MAIL_USE_TLS(self):
        """Whether to use STARTTLS for mail"""
        return not _env_flag('SMTP_SECURE') and _env_flag('SMTP_STARTTLS', 'true')

    @property
    def MAIL_USE_SSL(self):
        """Whether to use implicit SSL for mail"""
        return _env_flag('SMTP_SECURE')

    @property
    def MAIL_USERNAME(self):
        """SMTP username"""
        return os.getenv('SMTP_USER')

    @property
    def MAIL_PASSWORD(self):
        """SMTP password"""
        return os.getenv('SMTP_PASS')

    @property
    def MAIL_DEFAULT_SENDER(self):
        """Default sender email address"""
        return os.getenv('SMTP_FROM', 'no-reply@laartesa.com')

    @property
    def FRONTEND_URL(self):
        """Base URL of the single-page frontend, used in emailed links"""
        return os.getenv('FRONTEND_URL', 'http://localhost:5173').rstrip('/')

    @property
    def JWT_SECRET_KEY(self):
        """JWT secret key"""
        return os.getenv('JWT_SECRET', os.getenv('JWT_SECRET_KEY', 'jwt-secret-key-change-in-production'))

    @property
    def JWT_ACCESS_TOKEN_EXPIRES(self):
        """JWT access token expiration time in seconds"""
        return int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 3600))

    @property
    def PASSWORD_RESET_TOKEN_EXPIRES(self):
        """Password reset token lifetime in seconds"""
        return int(os.getenv('PASSWORD_RESET_TOKEN_EXPIRES', 3600))

    @property
    def BCRYPT_LOG_ROUNDS(self):
        """bcrypt cost factor"""
        return int(os.getenv('BCRYPT_LOG_ROUNDS', 12))

    @property
    def RECAPTCHA_ENABLED(self):
        """Whether reCAPTCHA verification gates sensitive forms"""
        return _env_flag('RECAPTCHA_ENABLED')

    @property
    def RECAPTCHA_BYPASS(self):
        """Explicit operator bypass of reCAPTCHA"""
        return _env_flag('RECAPTCHA_BYPASS')

    @property
    def RECAPTCHA_SECRET_KEY(self):
        """reCAPTCHA server-side secret"""
        return os.getenv('RECAPTCHA_SECRET_KEY')

    @property
    def RECAPTCHA_MIN_SCORE(self):
        """Minimum accepted reCAPTCHA v3 score"""
        return float(os.getenv('RECAPTCHA_MIN_SCORE', '0.5'))

    @property
    def RECAPTCHA_VERIFY_URL(self):
        """Google siteverify endpoint"""
        return os.getenv('RECAPTCHA_VERIFY_URL', 'https://www.google.com/recaptcha/api/siteverify')

    @property
    def RECAPTCHA_TIMEOUT(self):
        """Timeout in seconds for the siteverify call"""
        return float(os.getenv('RECAPTCHA_TIMEOUT', '5'))

    @property
    def LOGIN_MAX_ATTEMPTS(self):
        """Failed logins allowed per window"""
        return int(os.getenv('LOGIN_MAX_ATTEMPTS', 5))

    @property
    def LOGIN_ATTEMPT_WINDOW(self):
        """Failed-login window in seconds"""
        return int(os.getenv('LOGIN_ATTEMPT_WINDOW', 900))

    @property
    def LOG_LEVEL(self):
        """Root log level for the application logger"""
        return os.getenv('LOG_LEVEL', 'INFO').upper()
