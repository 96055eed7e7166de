"""
Purpose: Auth Flow. Sign in and registration against the remote account table.
Returns a User on success; every failure is an Eli5Error whose text the auth
form shows inline. Persisting the returned User is the caller's job.
"""

from __future__ import annotations

from ..config.logging import get_logger
from ..errors import AlreadyExists, InvalidCredentials, NotFound
from ..interfaces import RemoteStore
from ..models import User
from .security import DefaultSecurity

logger = get_logger(__name__)


class AuthService:
    def __init__(self, remote: RemoteStore, security: DefaultSecurity | None = None):
        self.remote = remote
        self.security = security or DefaultSecurity()

    def sign_in(self, email: str, password: str) -> User:
        self.security.validate_credentials(email, password)
        normalized = self.security.normalize_email(email)

        account = self.remote.find_account(normalized)
        if account is None:
            logger.warning("sign_in_unknown_email")
            raise NotFound("No account found with this email.")

        if not self.security.verify_password(password, account["password_hash"]):
            logger.warning("sign_in_bad_password", user_id=account["id"])
            raise InvalidCredentials("Incorrect password.")

        logger.info("user_signed_in", user_id=account["id"])
        return User.from_record(account)

    def register(self, name: str, email: str, password: str) -> User:
        self.security.validate_credentials(email, password)
        clean_name = self.security.validate_name(name)
        normalized = self.security.normalize_email(email)

        if self.remote.find_account(normalized) is not None:
            raise AlreadyExists("This email is already registered. Try signing in!")

        created = self.remote.create_account(
            email=normalized,
            name=clean_name,
            password_hash=self.security.hash_password(password),
        )
        logger.info("user_registered", user_id=created["id"])
        return User.from_record(created)
