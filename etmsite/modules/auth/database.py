from sqlalchemy import delete, func, insert, select, update
from werkzeug.security import check_password_hash, generate_password_hash

from ...core.database import admins, auth_tokens


class CredentialStore:
    """Administrator logins and salted password hashes"""

    def __init__(self, db):
        self.db = db

    @staticmethod
    def hash_password(password):
        """Salted hash (werkzeug default method)"""
        return generate_password_hash(password)

    @staticmethod
    def verify_password(password, password_hash):
        """Constant-time comparison against the stored salted hash"""
        return check_password_hash(password_hash, password)

    def get_admin_by_login(self, login):
        """Get administrator by login"""
        return self.db.fetch_one(select(admins).where(admins.c.login == login))

    def get_admin_by_id(self, admin_id):
        return self.db.fetch_one(select(admins).where(admins.c.id == admin_id))

    def create_admin(self, login, password):
        """Create an administrator, returning the new id"""
        result = self.db.write(insert(admins).values(
            login=login,
            password_hash=self.hash_password(password),
        ))
        return result.inserted_primary_key[0]

    def set_password(self, login, password):
        """Replace the password hash. Returns True when the admin exists."""
        result = self.db.write(
            update(admins)
            .where(admins.c.login == login)
            .values(password_hash=self.hash_password(password))
        )
        return result.rowcount > 0


class TokenStore:
    """Issued bearer tokens with absolute expiry timestamps"""

    def __init__(self, db):
        self.db = db

    def save_token(self, admin_id, token, expires_at):
        self.db.write(insert(auth_tokens).values(
            admin_id=admin_id,
            token=token,
            expires_at=expires_at,
        ))

    def get_token(self, token):
        """Get token row (admin_id, expires_at) regardless of expiry"""
        return self.db.fetch_one(
            select(auth_tokens.c.admin_id, auth_tokens.c.token, auth_tokens.c.expires_at)
            .where(auth_tokens.c.token == token)
        )

    def extend_token(self, token, expires_at):
        result = self.db.write(
            update(auth_tokens)
            .where(auth_tokens.c.token == token)
            .values(expires_at=expires_at)
        )
        return result.rowcount > 0

    def delete_token(self, token):
        result = self.db.write(delete(auth_tokens).where(auth_tokens.c.token == token))
        return result.rowcount > 0

    def delete_expired_tokens(self, now, admin_id=None):
        """Delete tokens whose expiry has passed, optionally for one admin only"""
        statement = delete(auth_tokens).where(auth_tokens.c.expires_at <= now)
        if admin_id is not None:
            statement = statement.where(auth_tokens.c.admin_id == admin_id)
        return self.db.write(statement).rowcount

    def count_tokens(self, admin_id=None):
        statement = select(func.count()).select_from(auth_tokens)
        if admin_id is not None:
            statement = statement.where(auth_tokens.c.admin_id == admin_id)
        return self.db.scalar(statement)
