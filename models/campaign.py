"""Campaign model definition."""

from datetime import datetime
from decimal import Decimal

from . import db


ORGANIZER_TYPES = ("ngo", "campaigner")


class Campaign(db.Model):
    """A fundraising campaign run by an NGO or an individual campaigner."""

    __tablename__ = "campaigns"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    target_amount = db.Column(db.Numeric(10, 2), nullable=False)
    raised_amount = db.Column(
        db.Numeric(10, 2), nullable=False, default=0, server_default=db.text("0")
    )
    category = db.Column(db.String(120), nullable=False)
    location = db.Column(db.String(255), nullable=True)
    image_url = db.Column(db.String(512), nullable=True)
    start_date = db.Column(db.Date, nullable=True)
    end_date = db.Column(db.Date, nullable=True)
    organizer_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organizer_type = db.Column(
        db.Enum(*ORGANIZER_TYPES, name="organizer_type"), nullable=False
    )
    is_active = db.Column(
        db.Boolean, nullable=False, default=True, server_default=db.true()
    )
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    organizer = db.relationship(
        "Account",
        backref=db.backref("campaigns", lazy="dynamic", passive_deletes=True),
    )

    @property
    def organizer_name(self) -> str | None:
        profile = self.organizer.profile if self.organizer else None
        if profile is None:
            return None
        return getattr(profile, "org_name", None) or getattr(profile, "full_name", None)

    def to_dict(self) -> dict:
        """Serialize the campaign to a dictionary."""

        def _amount(value):
            return float(value) if isinstance(value, Decimal) else value

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "target_amount": _amount(self.target_amount),
            "raised_amount": _amount(self.raised_amount),
            "category": self.category,
            "location": self.location,
            "image_url": self.image_url,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "organizer_id": self.organizer_id,
            "organizer_type": self.organizer_type,
            "organizer_name": self.organizer_name,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<Campaign id={self.id} organizer_id={self.organizer_id}>"
