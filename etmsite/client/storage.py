"""Local persistence for the admin session token."""

import json
import logging
import os

logger = logging.getLogger(__name__)


class TokenStorage:
    """Stores ``token`` and ``expires_at`` in a small JSON file"""

    def __init__(self, path):
        self.path = os.path.expanduser(path) if path else path

    def load(self):
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable token file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def save(self, token, expires_at=None):
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump({'token': token, 'expires_at': expires_at}, f)

    def clear(self):
        if os.path.exists(self.path):
            os.remove(self.path)

    @property
    def token(self):
        return self.load().get('token')

    @property
    def expires_at(self):
        return self.load().get('expires_at')


class MemoryTokenStorage(TokenStorage):
    """Process-local storage for scripts that should not touch the disk"""

    def __init__(self):
        super().__init__(path=None)
        self._data = {}

    def load(self):
        return dict(self._data)

    def save(self, token, expires_at=None):
        self._data = {'token': token, 'expires_at': expires_at}

    def clear(self):
        self._data = {}
