"""
Flask extension wiring the API services into an application.

Usage:
    from flask import Flask
    from etmsite import EtmSite

    app = Flask(__name__)
    EtmSite(app)
"""

import logging
import os

from flask import jsonify
from flask_cors import CORS
from sqlalchemy.engine import make_url

from . import cli
from .core.config import Config, Settings
from .core.database import Database, utcnow
from .core.logging_service import LoggingService, configure_logging
from .modules.api import api_bp, build_router
from .modules.auth import AuthService, CredentialStore, TokenStore
from .modules.records import RESOURCE_SPECS, RecordResource
from .modules.uploads import UploadService

logger = logging.getLogger(__name__)

CONFIG_KEYS = (
    'SECRET_KEY', 'DEBUG_MODE', 'LOG_LEVEL', 'DB_DIR', 'DATABASE_URL',
    'TOKEN_LIFETIME', 'LOGIN_DELAY_RANGE',
    'UPLOAD_DIR', 'UPLOAD_URL_PREFIX', 'MAX_FILE_SIZE', 'ALLOWED_EXTENSIONS', 'ALLOWED_MIME_TYPES',
    'CORS_ORIGINS', 'DEFAULT_LIST_LIMIT', 'MAX_LIST_LIMIT',
)


class EtmSite:
    """Owns the per-app database handle and the services built on it"""

    def __init__(self, app=None, clock=utcnow):
        self.clock = clock
        self.db = None
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in CONFIG_KEYS:
            app.config.setdefault(key, getattr(Config, key))
        app.config.setdefault('SQLALCHEMY_DATABASE_URI', app.config['DATABASE_URL'])
        app.config.setdefault('AUTO_CREATE_TABLES', True)
        if not app.config.get('SECRET_KEY'):
            app.config['SECRET_KEY'] = Config.SECRET_KEY

        configure_logging(app)
        self.settings = Settings.from_mapping(app.config)
        self._setup_database_dir(app.config['SQLALCHEMY_DATABASE_URI'])

        self.db = Database(app)
        self.log = LoggingService(self.db)
        self.credentials = CredentialStore(self.db)
        self.tokens = TokenStore(self.db)
        self.auth = AuthService(self.credentials, self.tokens, self.settings, log=self.log, clock=self.clock)
        self.resources = {
            spec.name: RecordResource(spec, self.db, self.settings, log=self.log)
            for spec in RESOURCE_SPECS
        }
        self.uploads = UploadService(self.settings, log=self.log, clock=self.clock)
        self.router = build_router(self.auth, self.resources, self.uploads)

        CORS(
            app,
            resources={r'/api/*': {'origins': list(self.settings.cors_origins)}},
            methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
            allow_headers=['Content-Type', 'Authorization'],
            max_age=86400,
        )

        app.register_blueprint(api_bp)
        app.add_url_rule('/health', 'health', self.health)

        cli.init_app(app)

        app.extensions['etmsite'] = self

        if app.config['AUTO_CREATE_TABLES']:
            with app.app_context():
                self.db.create_all()

        logger.info(f"etmsite initialised with modules: {', '.join(self.get_registered_modules())}")

    @staticmethod
    def _setup_database_dir(uri):
        """Create the parent directory of a file-backed SQLite database"""
        url = make_url(uri)
        if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
            parent = os.path.dirname(os.path.abspath(url.database))
            os.makedirs(parent, exist_ok=True)

    def health(self):
        database = self.db.ping()
        return jsonify({'status': 'ok', 'database': database}), 200 if database else 503

    def get_registered_modules(self):
        return ['auth', 'records', 'uploads', 'api']
