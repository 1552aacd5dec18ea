"""Database initialization and model exports."""

import sqlite3

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import event
from sqlalchemy.engine import Engine


db = SQLAlchemy()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Turn on foreign key enforcement so profile rows cascade with accounts."""

    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Import models to register them with SQLAlchemy metadata.
from .account import ACCOUNT_ROLES, Account  # noqa: E402,F401
from .profile import (  # noqa: E402,F401
    PROFILE_MODELS,
    AdminProfile,
    CampaignerProfile,
    DonorProfile,
    NgoProfile,
    profile_model_for,
)
from .campaign import Campaign  # noqa: E402,F401

__all__ = [
    "db",
    "ACCOUNT_ROLES",
    "Account",
    "PROFILE_MODELS",
    "DonorProfile",
    "NgoProfile",
    "CampaignerProfile",
    "AdminProfile",
    "profile_model_for",
    "Campaign",
]
