"""
Storage Handle
==============

Table definitions and the per-application database handle.

The handle is constructed once by the app factory and passed to every
store and service; the engine and its connection pool live and die with it.
"""

import logging
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Integer, MetaData, String, Table, Text,
    func, inspect, select, text,
)
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def utcnow():
    """Naive UTC timestamp, the format every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


metadata = MetaData()

admins = Table(
    'admins', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('login', String(64), nullable=False, unique=True),
    Column('password_hash', String(255), nullable=False),
    Column('created_at', DateTime, nullable=False, default=utcnow),
)

auth_tokens = Table(
    'auth_tokens', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('admin_id', Integer, ForeignKey('admins.id', ondelete='CASCADE'), nullable=False, index=True),
    Column('token', String(64), nullable=False, unique=True),
    Column('expires_at', DateTime, nullable=False, index=True),
    Column('created_at', DateTime, nullable=False, default=utcnow),
)

projects = Table(
    'projects', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('title', String(255), nullable=False),
    Column('year', Integer, nullable=False),
    Column('category', String(255), nullable=False),
    Column('client', String(255), nullable=False, default=''),
    Column('location', String(255), nullable=False, default=''),
    Column('description', Text, nullable=False, default=''),
    Column('image_url', String(500), nullable=False, default=''),
    Column('tags', Text, nullable=False, default='[]'),
    Column('sort_order', Integer, nullable=False, default=0),
    Column('created_at', DateTime, nullable=False, default=utcnow),
    Column('updated_at', DateTime, nullable=False, default=utcnow, onupdate=utcnow),
)

partners = Table(
    'partners', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('name', String(255), nullable=False),
    Column('logo_url', String(500), nullable=False),
    Column('website', String(500), nullable=False, default=''),
    Column('description', Text, nullable=False, default=''),
    Column('sort_order', Integer, nullable=False, default=1),
    Column('created_at', DateTime, nullable=False, default=utcnow),
    Column('updated_at', DateTime, nullable=False, default=utcnow, onupdate=utcnow),
)

certificates = Table(
    'certificates', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('title', String(255), nullable=False),
    Column('number', String(255), nullable=False),
    Column('issued_date', Date, nullable=True),
    Column('expiry_date', Date, nullable=True),
    Column('image_url', String(500), nullable=False),
    Column('pdf_url', String(500), nullable=False, default=''),
    Column('description', Text, nullable=False, default=''),
    Column('sort_order', Integer, nullable=False, default=1),
    Column('created_at', DateTime, nullable=False, default=utcnow),
    Column('updated_at', DateTime, nullable=False, default=utcnow, onupdate=utcnow),
)

app_logs = Table(
    'app_logs', metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('timestamp', DateTime, nullable=False, default=utcnow, index=True),
    Column('level', String(16), nullable=False, index=True),
    Column('source', String(64), nullable=False, index=True),
    Column('message', Text, nullable=False),
    Column('details', Text),
    Column('ip_address', String(64)),
    Column('user_agent', String(255)),
    Column('request_path', String(255)),
    Column('user_id', String(64)),
)

TABLES = ('admins', 'auth_tokens', 'projects', 'partners', 'certificates', 'app_logs')


class Database:
    """Per-application storage handle wrapping a Flask-SQLAlchemy instance.

    Every write helper runs a single statement and commits it; on failure the
    session is rolled back and the SQLAlchemy error propagates.
    """

    def __init__(self, app=None):
        self.sa = SQLAlchemy(metadata=metadata, session_options={'autoflush': False})
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        self.sa.init_app(app)

    @property
    def session(self):
        return self.sa.session

    def fetch_one(self, statement):
        """Return the first row as a dict, or None"""
        row = self.session.execute(statement).mappings().first()
        return dict(row) if row else None

    def fetch_all(self, statement):
        return [dict(row) for row in self.session.execute(statement).mappings().all()]

    def scalar(self, statement):
        return self.session.execute(statement).scalar()

    def count(self, table):
        return self.scalar(select(func.count()).select_from(table))

    def write(self, statement):
        """Execute one mutating statement and commit it"""
        try:
            result = self.session.execute(statement)
            self.session.commit()
            return result
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def rollback(self):
        self.session.rollback()

    def create_all(self):
        self.sa.create_all()

    def existing_tables(self):
        """Names of the known tables that are present in the database"""
        present = set(inspect(self.sa.engine).get_table_names())
        return [name for name in TABLES if name in present]

    def ping(self):
        """Return True when the database answers a trivial query"""
        try:
            self.session.execute(text('SELECT 1'))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database ping failed: {e}")
            self.session.rollback()
            return False

    def dispose(self):
        """Close every pooled connection held by the engine"""
        self.sa.engine.dispose()
