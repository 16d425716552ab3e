"""
Auth Service
============

Bearer-token authentication for the admin API.

- Tokens are opaque: 256 random bits rendered as 64 hex characters
- The token table is the only source of truth; nothing is embedded in the token
- Expiry slides forward on every successful check
- Failed logins wait a random 100-500ms before answering
"""

import logging
import random
import re
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timedelta

from ...core.database import utcnow
from ...core.errors import InvalidCredentials, Unauthenticated, ValidationError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
EXPIRES_FORMAT = '%Y-%m-%d %H:%M:%S'

_BEARER_RE = re.compile(r'^Bearer\s+(.+)$', re.IGNORECASE)


def extract_bearer(header):
    """Return the token from an ``Authorization: Bearer <token>`` header, or None"""
    if not header:
        return None
    match = _BEARER_RE.match(header.strip())
    return match.group(1).strip() if match else None


@dataclass(frozen=True)
class LoginResult:
    token: str
    expires_at: datetime
    admin_id: int
    login: str

    def to_dict(self):
        return {
            'success': True,
            'token': self.token,
            'expires_at': self.expires_at.strftime(EXPIRES_FORMAT),
            'login': self.login,
        }


class AuthService:
    """Verifies credentials and issues, validates, renews and revokes tokens"""

    def __init__(self, credentials, tokens, settings, log=None, clock=utcnow, sleep=time.sleep):
        self.credentials = credentials
        self.tokens = tokens
        self.settings = settings
        self.log = log
        self.clock = clock
        self.sleep = sleep
        self._random = random.SystemRandom()

    @property
    def lifetime(self):
        return timedelta(seconds=self.settings.token_lifetime)

    def _failed_login_delay(self):
        low, high = self.settings.login_delay_range
        self.sleep(self._random.uniform(low, high))

    def login(self, login, password):
        """Exchange a login/password pair for a fresh token"""
        login = (login or '').strip() if isinstance(login, str) else ''
        password = password if isinstance(password, str) else ''
        if not login or not password:
            raise ValidationError('Логин и пароль обязательны', status_code=400)

        admin = self.credentials.get_admin_by_login(login)
        if not admin or not self.credentials.verify_password(password, admin['password_hash']):
            self._failed_login_delay()
            if self.log:
                self.log.log_security_event('Failed admin login', {'login': login})
            raise InvalidCredentials()

        now = self.clock()
        removed = self.tokens.delete_expired_tokens(now, admin_id=admin['id'])
        if removed:
            logger.debug(f"Removed {removed} expired tokens for admin {admin['id']}")

        token = secrets.token_hex(TOKEN_BYTES)
        expires_at = now + self.lifetime
        self.tokens.save_token(admin['id'], token, expires_at)

        if self.log:
            self.log.info('auth', 'Admin logged in', user_id=admin['id'])

        return LoginResult(token=token, expires_at=expires_at, admin_id=admin['id'], login=login)

    def logout(self, token):
        """Revoke *token*. Unknown or missing tokens are not an error."""
        if not token:
            return False
        removed = self.tokens.delete_token(token)
        if removed and self.log:
            self.log.info('auth', 'Admin logged out')
        return removed

    def check(self, token):
        """Return the admin id for a live token and push its expiry forward.

        Raises Unauthenticated when the token is unknown or its expiry is not
        strictly after the current time.
        """
        if not token:
            raise Unauthenticated('Токен недействителен')

        row = self.tokens.get_token(token)
        now = self.clock()
        if not row or not row['expires_at'] > now:
            raise Unauthenticated('Токен недействителен')

        self.tokens.extend_token(token, now + self.lifetime)
        return row['admin_id']

    def require_auth(self, token):
        """Gate for mutating operations: admin id, or the 401 authorization error"""
        try:
            return self.check(token)
        except Unauthenticated:
            raise Unauthenticated('Требуется авторизация') from None

    def purge_expired(self):
        """Delete every expired token (maintenance command)"""
        return self.tokens.delete_expired_tokens(self.clock())
