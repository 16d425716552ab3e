"""
API Client
==========

HTTP client for the /api endpoints used by admin tooling.

- Attaches the stored bearer token to every request
- Retries network failures and 5xx answers with linear backoff (never 401)
- Caches GET responses per URL for a short TTL; any write to a resource
  drops that resource's cached entries
- Reports failures through a ``notify(kind, message)`` callback
"""

import logging
import os
import time

import requests

from .storage import MemoryTokenStorage

logger = logging.getLogger(__name__)

NOTIFY_MESSAGES = {
    'network': 'Ошибка сети. Проверьте подключение.',
    'unauthorized': 'Сессия истекла. Войдите снова.',
    'not_found': 'Ресурс не найден.',
    'server': 'Ошибка сервера. Попробуйте позже.',
}


class APIClientError(Exception):
    """A failed API call. ``status_code`` is None for network failures."""

    def __init__(self, message, status_code=None, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    @property
    def kind(self):
        if self.status_code is None:
            return 'network'
        if self.status_code == 401:
            return 'unauthorized'
        if self.status_code == 404:
            return 'not_found'
        if self.status_code >= 500:
            return 'server'
        return 'error'


def log_notification(kind, message):
    logger.warning(f"[{kind}] {message}")


class APIClient:

    def __init__(self, base_url, storage=None, retries=2, retry_delay=1.0, cache_ttl=60.0,
                 timeout=15, notify=None, session=None, sleep=time.sleep, clock=time.monotonic):
        self.base_url = base_url.rstrip('/') + '/'
        self.storage = storage if storage is not None else MemoryTokenStorage()
        self.retries = retries
        self.retry_delay = retry_delay
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self.notify = notify or log_notification
        self.session = session or requests.Session()
        self.sleep = sleep
        self.clock = clock
        self._cache = {}

    # ===== Helpers =====

    def build_url(self, endpoint):
        return self.base_url + endpoint.lstrip('/')

    def _auth_headers(self):
        token = self.storage.token
        return {'Authorization': f'Bearer {token}'} if token else {}

    @staticmethod
    def _resource(endpoint):
        return endpoint.strip('/').split('/', 1)[0]

    @staticmethod
    def _decode(response):
        if response.status_code == 204 or not response.content:
            return {'success': True}
        try:
            return response.json()
        except ValueError:
            preview = response.text[:200].strip()
            raise APIClientError(
                f"Сервер вернул не JSON (HTTP {response.status_code}): {preview or '<empty>'}",
                status_code=response.status_code,
            )

    def _send(self, method, url, **kwargs):
        """One HTTP exchange. Raises APIClientError for transport or HTTP failures."""
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise APIClientError(str(e)) from e

        if response.ok:
            return self._decode(response)

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        message = payload.get('error') if isinstance(payload, dict) else None
        raise APIClientError(
            message or f"HTTP {response.status_code}",
            status_code=response.status_code,
            payload=payload if isinstance(payload, dict) else None,
        )

    def _request_with_retry(self, method, url, **kwargs):
        last_error = None
        for attempt in range(self.retries + 1):
            try:
                return self._send(method, url, **kwargs)
            except APIClientError as e:
                last_error = e
                retryable = e.status_code is None or e.status_code >= 500
                if not retryable or attempt == self.retries:
                    break
                self.sleep(self.retry_delay * (attempt + 1))
        raise last_error

    def _handle_error(self, method, endpoint, error):
        logger.error(f"[API {method}] {endpoint}: {error}")
        # The token is only dropped by AuthSession.check_session
        message = NOTIFY_MESSAGES.get(error.kind, f"Ошибка: {error.message}")
        self.notify(error.kind, message)

    def send(self, method, endpoint, **kwargs):
        """Single attempt with the stored token; no retries, cache or notifications"""
        headers = dict(kwargs.pop('headers', None) or {})
        headers.update(self._auth_headers())
        return self._send(method, self.build_url(endpoint), headers=headers, **kwargs)

    def request(self, method, endpoint, **kwargs):
        url = self.build_url(endpoint)
        headers = dict(kwargs.pop('headers', None) or {})
        headers.update(self._auth_headers())
        try:
            data = self._request_with_retry(method, url, headers=headers, **kwargs)
        except APIClientError as e:
            self._handle_error(method, endpoint, e)
            raise
        if method != 'GET':
            self.invalidate_cache(endpoint)
        return data

    # ===== Cache =====

    def _cache_key(self, endpoint, params):
        return requests.Request('GET', self.build_url(endpoint), params=params).prepare().url

    def invalidate_cache(self, endpoint):
        resource = self._resource(endpoint)
        prefix = self.build_url(resource)
        for key in [k for k in self._cache if k == prefix or k.startswith((prefix + '/', prefix + '?'))]:
            del self._cache[key]

    def clear_cache(self):
        self._cache.clear()

    # ===== Verbs =====

    def get(self, endpoint, params=None, use_cache=False):
        key = self._cache_key(endpoint, params)
        if use_cache and key in self._cache:
            stored_at, data = self._cache[key]
            if self.clock() - stored_at < self.cache_ttl:
                return data
            del self._cache[key]

        data = self.request('GET', endpoint, params=params)
        if use_cache:
            self._cache[key] = (self.clock(), data)
        return data

    def post(self, endpoint, data=None):
        return self.request('POST', endpoint, json=data if data is not None else {})

    def put(self, endpoint, record_id, data):
        return self.request('PUT', f"{endpoint}/{record_id}", json=data)

    def delete(self, endpoint, record_id):
        return self.request('DELETE', f"{endpoint}/{record_id}")

    def upload_file(self, path):
        """Upload one image from disk; returns the server payload with its url"""
        with open(path, 'rb') as f:
            content = f.read()
        return self.request('POST', 'upload', files={'file': (os.path.basename(path), content)})
