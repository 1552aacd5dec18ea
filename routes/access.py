"""Helpers resolving the authenticated account behind a request."""

from __future__ import annotations

from flask_jwt_extended import get_jwt_identity
from werkzeug.exceptions import Forbidden, NotFound

from models import db
from models.account import Account


def current_account() -> Account | None:
    try:
        identity = get_jwt_identity()
    except RuntimeError:
        return None
    if identity is None:
        return None
    try:
        account_id = int(identity)
    except (TypeError, ValueError):
        return None
    return db.session.get(Account, account_id)


def require_account() -> Account:
    account = current_account()
    if account is None:
        raise NotFound("User not found.")
    return account


def require_role(*roles: str) -> Account:
    account = require_account()
    if account.role not in roles:
        raise Forbidden("Not authorized for this action.")
    return account
