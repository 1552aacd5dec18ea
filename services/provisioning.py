"""Account provisioning: one account plus its role profile, created together."""

from __future__ import annotations

import hmac
import logging
import re
from typing import Mapping, NamedTuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from models import ACCOUNT_ROLES, Account, profile_model_for
from models.profile import ProfileMixin
from storage.abstract_storage import AbstractStorage
from storage.uploads import build_stored_name
from utils.request_validation import parse_bool

from .errors import (
    AuthorizationError,
    ConflictError,
    PersistenceError,
    ValidationError,
)
from .store import AccountStore, transaction

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Provisioned(NamedTuple):
    account: Account
    profile: ProfileMixin


def normalize_email(raw_email: object) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return str(raw_email or "").strip().lower()


class ProvisioningService:
    """Creates an account and its matching profile as one unit of work."""

    def __init__(
        self,
        store: AccountStore,
        storage: AbstractStorage,
        admin_access_code: str | None,
    ):
        self.store = store
        self.storage = storage
        self.admin_access_code = admin_access_code or ""

    def register(
        self,
        role: str,
        credentials: Mapping[str, object],
        attributes: Mapping[str, object],
        access_code: str | None = None,
        document: FileStorage | None = None,
    ) -> Provisioned:
        """Register a new account of ``role`` and return it with its profile.

        Raises ``ValidationError`` for bad input, ``AuthorizationError`` for a
        wrong admin access code, ``ConflictError`` when the email is taken and
        ``PersistenceError`` when the store fails. Nothing is persisted when
        any of them is raised.
        """

        role = str(role or "").strip().lower()
        if role not in ACCOUNT_ROLES:
            raise ValidationError(
                "Role must be one of: {}.".format(", ".join(ACCOUNT_ROLES))
            )
        if role == "admin":
            self._check_access_code(access_code)

        email = normalize_email(credentials.get("email"))
        raw_password = credentials.get("password")
        password = "" if raw_password is None else str(raw_password)
        if not email or not password.strip():
            raise ValidationError("Email and password are required.")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Email address is not valid.")

        model = profile_model_for(role)
        attrs = self._profile_attributes(model, attributes)
        if role == "admin":
            attrs["access_code"] = generate_password_hash(str(access_code))
        if document is not None and model.DOCUMENT_FIELD is None:
            raise ValidationError(f"{role} signup does not accept a document upload.")

        try:
            existing = self.store.find_account_by_email(email)
        except SQLAlchemyError as error:
            self.store.session.rollback()
            logger.exception("Account lookup failed during signup")
            raise PersistenceError("Database error.") from error
        if existing is not None:
            raise ConflictError()

        password_hash = generate_password_hash(password)

        reference = None
        if document is not None:
            reference = self._store_document(model, document)
            attrs[model.DOCUMENT_FIELD] = reference

        try:
            with transaction(self.store.session):
                account = self.store.insert_account(email, password_hash, role)
                profile = self.store.insert_profile(account, role, attrs)
        except IntegrityError as error:
            self._discard(reference)
            if self._email_taken(email):
                logger.info("Concurrent signup lost the race for %s", email)
                raise ConflictError() from error
            logger.exception("Integrity violation while creating %s account", role)
            raise PersistenceError(f"Failed to create {role} profile.") from error
        except SQLAlchemyError as error:
            self._discard(reference)
            logger.exception("Store failure while creating %s account", role)
            raise PersistenceError(f"Failed to create {role} profile.") from error
        except Exception:
            self._discard(reference)
            raise

        logger.info("Provisioned %s account id=%s", role, account.id)
        return Provisioned(account, profile)

    def _check_access_code(self, access_code: str | None) -> None:
        supplied = str(access_code or "").encode()
        expected = self.admin_access_code.encode()
        if not expected or not hmac.compare_digest(supplied, expected):
            logger.warning("Rejected admin signup with an invalid access code")
            raise AuthorizationError("Invalid access code.")

    @staticmethod
    def _profile_attributes(
        model: type[ProfileMixin], attributes: Mapping[str, object]
    ) -> dict:
        values: dict[str, object] = {}
        missing: list[str] = []

        for field in model.FIELDS:
            raw = next(
                (attributes.get(key) for key in field.aliases if attributes.get(key) is not None),
                None,
            )
            if field.kind == "bool":
                value = parse_bool(raw)
                if raw is not None and value is None:
                    raise ValidationError(f"{field.snapshot_key} must be a boolean.")
                values[field.name] = bool(value)
                continue

            text = str(raw).strip() if raw is not None else ""
            if field.required and not text:
                missing.append(field.snapshot_key)
            values[field.name] = text or None

        if missing:
            raise ValidationError(
                "Missing required fields: {}.".format(", ".join(missing))
            )
        return values

    def _store_document(self, model: type[ProfileMixin], document: FileStorage) -> str:
        stored_name = build_stored_name(model.UPLOAD_FIELD or "document", document.filename)
        try:
            return self.storage.save(document, stored_name)
        except OSError as error:
            logger.exception("Could not store uploaded %s", model.UPLOAD_FIELD)
            raise PersistenceError("Failed to store uploaded file.") from error

    def _discard(self, reference: str | None) -> None:
        if reference is None:
            return
        try:
            self.storage.delete(reference)
        except OSError:
            logger.warning("Could not remove orphaned upload %s", reference)

    def _email_taken(self, email: str) -> bool:
        try:
            return self.store.find_account_by_email(email) is not None
        except SQLAlchemyError:
            self.store.session.rollback()
            return False
