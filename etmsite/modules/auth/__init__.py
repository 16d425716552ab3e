"""
etmsite Auth Module

Provides administrator authentication for the admin API:
- Credential storage with salted password hashes
- Opaque bearer tokens with sliding 24h expiry
- Login / logout / check entry points used by the API router
"""

from .database import CredentialStore, TokenStore
from .service import AuthService, LoginResult, extract_bearer

__all__ = ['CredentialStore', 'TokenStore', 'AuthService', 'LoginResult', 'extract_bearer']
