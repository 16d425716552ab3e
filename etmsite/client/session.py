"""
Admin Session
=============

Login state for admin tooling built on APIClient.

The server is the authority on token validity; the local copy is dropped only
when the server explicitly rejects it, never because the network was down.
"""

import logging
import threading

from .api_client import APIClientError

logger = logging.getLogger(__name__)

KEEPALIVE_INTERVAL = 30 * 60  # seconds


class SessionRequired(Exception):
    """No usable session; callers should send the user to the login screen"""


class AuthSession:

    def __init__(self, client):
        self.client = client
        self.storage = client.storage

    def login(self, login, password):
        """Exchange credentials for a token and persist it. Raises APIClientError."""
        try:
            data = self.client.send('POST', 'auth/login', json={'login': login, 'password': password})
        except APIClientError as e:
            logger.info(f"Login failed for {login}: {e.message}")
            raise

        if not data.get('success') or not data.get('token'):
            raise APIClientError(data.get('error') or 'Ошибка входа', payload=data)

        self.storage.save(data['token'], data.get('expires_at'))
        return data

    def logout(self):
        """Revoke the token on the server if possible, then forget it locally"""
        if self.storage.token:
            try:
                self.client.send('POST', 'auth/logout')
            except APIClientError as e:
                logger.warning(f"Logout request failed: {e.message}")
        self.storage.clear()
        self.client.clear_cache()

    def is_authenticated(self):
        return bool(self.storage.token)

    def check_session(self):
        """Ask the server to validate (and extend) the stored token"""
        if not self.storage.token:
            return False
        try:
            self.client.send('GET', 'auth/check')
        except APIClientError as e:
            if e.status_code is not None and e.status_code >= 400:
                self.storage.clear()
            else:
                logger.warning(f"Session check inconclusive: {e.message}")
            return False
        return True

    def require_session(self):
        if not self.is_authenticated():
            raise SessionRequired()
        return self.storage.token


class KeepAlive:
    """Calls ``session.check_session()`` on a fixed interval until stopped"""

    def __init__(self, session, interval=KEEPALIVE_INTERVAL):
        self.session = session
        self.interval = interval
        self._timer = None
        self._lock = threading.Lock()
        self._running = False

    @property
    def running(self):
        return self._running

    def _schedule(self):
        self._timer = threading.Timer(self.interval, self._tick)
        self._timer.daemon = True
        self._timer.start()

    def _tick(self):
        with self._lock:
            if not self._running:
                return
        self.session.check_session()
        with self._lock:
            if self._running:
                self._schedule()

    def start(self):
        with self._lock:
            if self._running:
                return
            self._running = True
            self._schedule()

    def stop(self):
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
