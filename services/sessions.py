"""Credential checks and session token issuance."""

from __future__ import annotations

import logging
from datetime import timedelta
from functools import lru_cache
from typing import NamedTuple

from flask_jwt_extended import create_access_token
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from models import ACCOUNT_ROLES, Account
from models.profile import ProfileMixin

from .errors import InvalidCredentialsError, PersistenceError
from .provisioning import normalize_email
from .store import AccountStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_TTL = timedelta(hours=24)


class Session(NamedTuple):
    token: str
    user: dict


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Checked against when the account is unknown so both paths cost a hash.
    return generate_password_hash("unused-placeholder-password")


class SessionIssuer:
    """Verifies credentials and mints signed, time-bounded session tokens."""

    def __init__(self, store: AccountStore, expires_delta: timedelta | None = None):
        self.store = store
        self.expires_delta = expires_delta or DEFAULT_SESSION_TTL

    def authenticate(
        self, email: str, password: str, role: str | None = None
    ) -> Session:
        """Return a session for valid credentials.

        With ``role`` the account must have been registered under that role.
        Every credential failure raises the same ``InvalidCredentialsError``.
        """

        email = normalize_email(email)
        password = "" if password is None else str(password)
        if role is not None:
            role = str(role).strip().lower() or None

        account = self._find_account(email, role)
        if account is None:
            check_password_hash(_dummy_hash(), password)
            logger.info("Failed login for %s", email)
            raise InvalidCredentialsError()
        if not account.check_password(password):
            logger.info("Failed login for %s", email)
            raise InvalidCredentialsError()

        profile = self.load_profile(account)
        return self.issue(account, profile)

    def load_profile(self, account: Account) -> ProfileMixin:
        """Return the account's profile; its absence is an integrity violation."""

        try:
            profile = self.store.find_profile(account.role, account.id)
        except SQLAlchemyError as error:
            self.store.session.rollback()
            logger.exception("Profile lookup failed for account id=%s", account.id)
            raise PersistenceError("Failed to get user profile.") from error
        if profile is None:
            logger.error(
                "Account id=%s has no %s profile row", account.id, account.role
            )
            raise PersistenceError("Failed to get user profile.")
        return profile

    def issue(self, account: Account, profile: ProfileMixin) -> Session:
        snapshot = profile.snapshot()
        token = create_access_token(
            identity=str(account.id),
            additional_claims={
                "email": account.email,
                "role": account.role,
                "profile": snapshot,
            },
            expires_delta=self.expires_delta,
        )
        user = {
            "id": account.id,
            "email": account.email,
            "role": account.role,
            "profile": snapshot,
        }
        return Session(token, user)

    def _find_account(self, email: str, role: str | None) -> Account | None:
        if not email:
            return None
        if role is not None and role not in ACCOUNT_ROLES:
            return None
        try:
            if role is None:
                return self.store.find_account_by_email(email)
            return self.store.find_account_by_email_and_role(email, role)
        except SQLAlchemyError as error:
            self.store.session.rollback()
            logger.exception("Account lookup failed during login")
            raise PersistenceError("Database error.") from error
