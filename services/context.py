"""Per-application wiring of the account services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask import Flask, current_app

from models import db
from storage.local_storage import LocalStorage
from storage.uploads import UploadPolicy

from .provisioning import ProvisioningService
from .sessions import DEFAULT_SESSION_TTL, SessionIssuer
from .store import AccountStore

EXTENSION_KEY = "charity"


@dataclass
class AppServices:
    store: AccountStore
    storage: LocalStorage
    uploads: UploadPolicy
    provisioning: ProvisioningService
    sessions: SessionIssuer


def build_services(app: Flask) -> AppServices:
    """Construct the services from ``app.config`` and attach them to ``app``."""

    store = AccountStore(db.session)
    storage = LocalStorage(app.config["UPLOAD_DIR"])
    expires = app.config.get("JWT_ACCESS_TOKEN_EXPIRES") or DEFAULT_SESSION_TTL
    if not isinstance(expires, timedelta):
        expires = timedelta(seconds=int(expires))

    services = AppServices(
        store=store,
        storage=storage,
        uploads=UploadPolicy.from_config(app.config),
        provisioning=ProvisioningService(
            store, storage, app.config.get("ADMIN_ACCESS_CODE")
        ),
        sessions=SessionIssuer(store, expires),
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> AppServices:
    return current_app.extensions[EXTENSION_KEY]
