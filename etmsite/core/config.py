import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv(override=True)


def _split(value):
    return tuple(item.strip() for item in value.split(',') if item.strip())


class Config:
    """
    Base configuration for the site API.
    Deployments provide secrets and paths via environment variables.
    """
    SECRET_KEY = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')

    # Development mode (adds exception text to 500 responses)
    DEBUG_MODE = os.getenv('DEBUG_MODE', '0') == '1'
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Database
    DB_DIR = os.getenv('DB_DIR', os.path.join(os.getcwd(), 'databases'))
    DATABASE_URL = os.getenv('DATABASE_URL') or 'sqlite:///' + os.path.join(DB_DIR, 'etmsite.db')

    # Authentication
    TOKEN_LIFETIME = int(os.getenv('TOKEN_LIFETIME', str(24 * 60 * 60)))  # seconds
    LOGIN_DELAY_RANGE = (0.1, 0.5)  # seconds, applied on failed logins

    # Uploads
    UPLOAD_DIR = os.getenv('UPLOAD_DIR', os.path.join(os.getcwd(), 'uploads'))
    UPLOAD_URL_PREFIX = os.getenv('UPLOAD_URL_PREFIX', 'uploads/')
    MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MB
    ALLOWED_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'webp', 'svg')
    ALLOWED_MIME_TYPES = (
        'image/jpeg',
        'image/png',
        'image/gif',
        'image/webp',
        'image/svg+xml',
    )

    # CORS (allowed origins)
    CORS_ORIGINS = _split(os.getenv('CORS_ORIGINS', 'https://etm-murmansk.ru,http://localhost'))

    # Listing
    DEFAULT_LIST_LIMIT = 100
    MAX_LIST_LIMIT = 1000


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of the runtime configuration.

    Built once when the app starts and handed to every service, so request
    handling never reads mutable globals.
    """
    secret_key: str
    debug_mode: bool
    token_lifetime: int
    login_delay_range: tuple
    upload_dir: str
    upload_url_prefix: str
    max_file_size: int
    allowed_extensions: tuple
    allowed_mime_types: tuple
    cors_origins: tuple
    default_list_limit: int
    max_list_limit: int

    @classmethod
    def from_mapping(cls, config):
        """Build settings from a Flask config (or any mapping with upper-case keys)."""
        def get(key):
            return config.get(key, getattr(Config, key))

        origins = get('CORS_ORIGINS')
        if isinstance(origins, str):
            origins = _split(origins)

        return cls(
            secret_key=get('SECRET_KEY'),
            debug_mode=bool(get('DEBUG_MODE')),
            token_lifetime=int(get('TOKEN_LIFETIME')),
            login_delay_range=tuple(get('LOGIN_DELAY_RANGE')),
            upload_dir=get('UPLOAD_DIR'),
            upload_url_prefix=get('UPLOAD_URL_PREFIX'),
            max_file_size=int(get('MAX_FILE_SIZE')),
            allowed_extensions=tuple(ext.lower() for ext in get('ALLOWED_EXTENSIONS')),
            allowed_mime_types=tuple(get('ALLOWED_MIME_TYPES')),
            cors_origins=tuple(origins),
            default_list_limit=int(get('DEFAULT_LIST_LIMIT')),
            max_list_limit=int(get('MAX_LIST_LIMIT')),
        )
