"""Keyed access to accounts and their role profiles."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models import Account, profile_model_for
from models.profile import ProfileMixin


@contextmanager
def transaction(session: Session) -> Iterator[Session]:
    """Commit the work done inside the block, or roll all of it back."""

    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise


class AccountStore:
    """Credential store and role profile store over one SQLAlchemy session.

    Writes only flush; committing is left to :func:`transaction` so an account
    and its profile land together or not at all.
    """

    def __init__(self, session: Session):
        self.session = session

    # Accounts -----------------------------------------------------------

    def find_account_by_email(self, email: str) -> Account | None:
        statement = select(Account).where(func.lower(Account.email) == email.lower())
        return self.session.scalars(statement).first()

    def find_account_by_email_and_role(self, email: str, role: str) -> Account | None:
        statement = select(Account).where(
            func.lower(Account.email) == email.lower(),
            Account.role == role,
        )
        return self.session.scalars(statement).first()

    def insert_account(self, email: str, password_hash: str, role: str) -> Account:
        account = Account(email=email, password_hash=password_hash, role=role)
        self.session.add(account)
        self.session.flush()
        return account

    # Profiles -----------------------------------------------------------

    def insert_profile(self, account: Account, role: str, attrs: dict) -> ProfileMixin:
        model = profile_model_for(role)
        profile = model(user_id=account.id, **attrs)
        self.session.add(profile)
        self.session.flush()
        return profile

    def find_profile(self, role: str, account_id: int) -> ProfileMixin | None:
        model = profile_model_for(role)
        return self.session.scalars(select(model).filter_by(user_id=account_id)).first()

    def list_profiles(self, role: str, approved: bool | None = None) -> list[ProfileMixin]:
        """Return profiles of ``role`` joined to their accounts, newest first."""

        model = profile_model_for(role)
        statement = select(model).join(Account, Account.id == model.user_id)
        if approved is not None:
            statement = statement.where(model.is_approved.is_(approved))
        statement = statement.order_by(Account.created_at.desc(), Account.id.desc())
        return list(self.session.scalars(statement))

    def set_ngo_approval(self, account_id: int, approved: bool) -> ProfileMixin | None:
        return self._set_approval("ngo", account_id, approved)

    def set_campaigner_approval(
        self, account_id: int, approved: bool
    ) -> ProfileMixin | None:
        return self._set_approval("campaigner", account_id, approved)

    def _set_approval(
        self, role: str, account_id: int, approved: bool
    ) -> ProfileMixin | None:
        with transaction(self.session):
            profile = self.find_profile(role, account_id)
            if profile is None:
                return None
            profile.is_approved = approved
        return profile
