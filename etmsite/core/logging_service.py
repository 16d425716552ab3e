"""
Centralized logging service for the site API.
Mirrors security and error events into the app_logs table so they survive
container rebuilds, falling back to the stdlib logger when the write fails.
"""

import json
import logging
import traceback
from datetime import timedelta

from flask import request, has_request_context
from sqlalchemy import delete, insert
from sqlalchemy.exc import SQLAlchemyError

from .database import app_logs, utcnow

logger = logging.getLogger(__name__)


def configure_logging(app):
    """Set the app logger level from LOG_LEVEL and make sure records reach stdout"""
    level = app.config.get('LOG_LEVEL', 'INFO')
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    app.logger.setLevel(level)
    logging.getLogger('etmsite').setLevel(level)
    if not logging.getLogger().handlers:
        logging.basicConfig(format='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s')


class LoggingService:
    """Persistent application log bound to one database handle"""

    def __init__(self, db):
        self.db = db

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        user_agent = (request.headers.get('User-Agent') or '')[:255]
        return ip_address, user_agent, request.path

    def log(self, level, source, message, details=None, user_id=None):
        """
        Log a message to the database

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (auth, records, upload, ...)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
            user_id: Optional administrator identifier
        """
        level = level.upper()
        logging.getLogger(f'etmsite.{source}').log(logging.getLevelName(level), message)

        ip_address, user_agent, request_path = self._get_request_context()
        if isinstance(details, dict):
            details = json.dumps(details, ensure_ascii=False, default=str)

        try:
            self.db.write(insert(app_logs).values(
                timestamp=utcnow(),
                level=level,
                source=source,
                message=message,
                details=details,
                ip_address=ip_address,
                user_agent=user_agent,
                request_path=request_path,
                user_id=str(user_id) if user_id is not None else None,
            ))
        except SQLAlchemyError as e:
            logger.warning(f"Logging service error: {e}")
            if details:
                logger.warning(f"Details: {details}")

    def info(self, source, message, details=None, user_id=None):
        self.log('INFO', source, message, details, user_id)

    def warning(self, source, message, details=None, user_id=None):
        self.log('WARNING', source, message, details, user_id)

    def error(self, source, message, details=None, user_id=None):
        self.log('ERROR', source, message, details, user_id)

    def log_security_event(self, message, details=None, user_id=None):
        """Log security-related events (failed logins, revoked tokens)"""
        self.warning('security', message, details, user_id)

    def log_error_with_traceback(self, source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc(),
        }
        if details:
            error_details['additional_details'] = details

        self.error(source, f"Exception occurred: {type(error).__name__}", error_details)

    def cleanup_old_logs(self, days_to_keep=30):
        """Clean up old log entries, returning how many rows were removed"""
        cutoff = utcnow() - timedelta(days=days_to_keep)
        result = self.db.write(delete(app_logs).where(app_logs.c.timestamp < cutoff))
        return result.rowcount
