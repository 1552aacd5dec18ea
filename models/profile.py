"""Role profile models.

Every account owns exactly one profile row, stored in the table of the variant
matching the account's role. The four variants share :class:`ProfileMixin`
and are looked up through :data:`PROFILE_MODELS`, so callers never branch on
the role themselves.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import declared_attr

from . import db


@dataclass(frozen=True)
class ProfileField:
    """Describes one role attribute accepted at signup.

    ``aliases`` are the request keys the value may arrive under; the first
    one is also the key used in the profile snapshot.
    """

    name: str
    aliases: tuple[str, ...]
    required: bool = False
    kind: str = "str"

    @property
    def snapshot_key(self) -> str:
        return self.aliases[0]


class ProfileMixin:
    """Columns and behaviour shared by every profile variant."""

    ROLE: str = ""
    FIELDS: tuple[ProfileField, ...] = ()
    DOCUMENT_FIELD: str | None = None
    UPLOAD_FIELD: str | None = None
    APPROVABLE = False

    id = db.Column(db.Integer, primary_key=True)

    @declared_attr
    def user_id(cls):
        return db.Column(
            db.Integer,
            db.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )

    @declared_attr
    def account(cls):
        return db.relationship(
            "Account",
            backref=db.backref(
                f"{cls.ROLE}_profile",
                uselist=False,
                cascade="all, delete-orphan",
                passive_deletes=True,
            ),
        )

    def snapshot(self) -> dict:
        """Return the role-specific view of this profile embedded in tokens."""

        data = {
            field.snapshot_key: getattr(self, field.name)
            for field in self.FIELDS
        }
        if self.DOCUMENT_FIELD:
            data[_camel(self.DOCUMENT_FIELD)] = getattr(self, self.DOCUMENT_FIELD)
        if self.APPROVABLE:
            data["approved"] = bool(self.is_approved)
        return data

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<{type(self).__name__} user_id={self.user_id}>"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class DonorProfile(ProfileMixin, db.Model):
    __tablename__ = "donors"

    ROLE = "donor"
    FIELDS = (
        ProfileField("full_name", ("fullName", "full_name"), required=True),
        ProfileField("phone", ("phone",)),
        ProfileField("tax_id", ("taxId", "tax_id", "panCard")),
    )

    full_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    tax_id = db.Column(db.String(64), nullable=True)


class NgoProfile(ProfileMixin, db.Model):
    __tablename__ = "ngos"

    ROLE = "ngo"
    FIELDS = (
        ProfileField("org_name", ("orgName", "org_name", "ngoName"), required=True),
        ProfileField("phone", ("phone",)),
        ProfileField("state", ("state",), required=True),
        ProfileField("city", ("city",), required=True),
        ProfileField("website", ("website",)),
        ProfileField(
            "registration_number",
            ("registrationNumber", "registration_number"),
            required=True,
        ),
        ProfileField("tax_ids", ("taxIds", "tax_ids", "panTan")),
    )
    DOCUMENT_FIELD = "certificate_ref"
    UPLOAD_FIELD = "certificate"
    APPROVABLE = True

    org_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=True)
    state = db.Column(db.String(120), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    website = db.Column(db.String(255), nullable=True)
    registration_number = db.Column(db.String(120), nullable=False)
    certificate_ref = db.Column(db.String(512), nullable=True)
    tax_ids = db.Column(db.String(120), nullable=True)
    is_approved = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.false()
    )


class CampaignerProfile(ProfileMixin, db.Model):
    __tablename__ = "campaigners"

    ROLE = "campaigner"
    FIELDS = (
        ProfileField("full_name", ("fullName", "full_name"), required=True),
        ProfileField("phone", ("phone",), required=True),
        ProfileField("city", ("city",), required=True),
        ProfileField("state", ("state",), required=True),
        ProfileField("tax_id", ("taxId", "tax_id", "panNumber"), required=True),
        ProfileField("id_type", ("idType", "id_type"), required=True),
    )
    DOCUMENT_FIELD = "id_document_ref"
    UPLOAD_FIELD = "govtId"
    APPROVABLE = True

    full_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False)
    city = db.Column(db.String(120), nullable=False)
    state = db.Column(db.String(120), nullable=False)
    tax_id = db.Column(db.String(64), nullable=False)
    id_type = db.Column(db.String(64), nullable=False)
    id_document_ref = db.Column(db.String(512), nullable=True)
    is_approved = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.false()
    )


class AdminProfile(ProfileMixin, db.Model):
    __tablename__ = "admins"

    ROLE = "admin"
    FIELDS = (
        ProfileField(
            "two_factor_enabled",
            ("twoFactorEnabled", "two_factor_enabled", "enable2FA"),
            kind="bool",
        ),
    )

    access_code = db.Column(db.String(255), nullable=False)
    two_factor_enabled = db.Column(
        db.Boolean, nullable=False, default=False, server_default=db.false()
    )


PROFILE_MODELS: dict[str, type[ProfileMixin]] = {
    model.ROLE: model
    for model in (DonorProfile, NgoProfile, CampaignerProfile, AdminProfile)
}


def profile_model_for(role: str) -> type[ProfileMixin]:
    """Return the profile variant for ``role``; raises ``KeyError`` if unknown."""

    return PROFILE_MODELS[role]
