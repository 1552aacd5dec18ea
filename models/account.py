"""Account model definition."""

from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from . import db


ACCOUNT_ROLES = ("donor", "ngo", "campaigner", "admin")


class Account(db.Model):
    """The login identity shared by every role: email, password hash and role tag."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(*ACCOUNT_ROLES, name="account_role"),
        nullable=False,
        index=True,
    )
    is_verified = db.Column(
        db.Boolean,
        nullable=False,
        default=False,
        server_default=db.false(),
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def set_password(self, password: str) -> None:
        """Hash and store the password."""

        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password_hash(self.password_hash, password)

    @property
    def profile(self):
        """Return the profile row of the variant selected by ``role``."""

        return getattr(self, f"{self.role}_profile", None)

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Account {self.email} role={self.role}>"
