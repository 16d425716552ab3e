"""
etmsite Client
==============

Python counterpart of the admin panel's browser client.

Usage:
    from etmsite.client import APIClient, AuthSession, TokenStorage

    client = APIClient('https://etm-murmansk.ru/api/', storage=TokenStorage('~/.etmsite/token.json'))
    session = AuthSession(client)
    session.login('admin', 'secret')
    client.post('projects', {...})
"""

from .api_client import APIClient, APIClientError
from .session import AuthSession, KeepAlive, SessionRequired
from .storage import MemoryTokenStorage, TokenStorage

__all__ = [
    'APIClient', 'APIClientError', 'AuthSession', 'KeepAlive', 'SessionRequired',
    'TokenStorage', 'MemoryTokenStorage',
]
