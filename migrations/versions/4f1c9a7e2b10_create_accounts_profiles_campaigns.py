"""Create accounts, role profile, and campaign tables."""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "4f1c9a7e2b10"
down_revision = None
branch_labels = None
depends_on = None


ACCOUNT_ROLE_ENUM = "account_role"
ORGANIZER_TYPE_ENUM = "organizer_type"


def _profile_columns():
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id"),
    ]


def upgrade() -> None:
    """Create the schema."""

    account_role = sa.Enum(
        "donor", "ngo", "campaigner", "admin", name=ACCOUNT_ROLE_ENUM
    )
    organizer_type = sa.Enum("ngo", "campaigner", name=ORGANIZER_TYPE_ENUM)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", account_role, nullable=False),
        sa.Column(
            "is_verified", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)

    op.create_table(
        "donors",
        *_profile_columns(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("tax_id", sa.String(length=64), nullable=True),
    )

    op.create_table(
        "ngos",
        *_profile_columns(),
        sa.Column("org_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("state", sa.String(length=120), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("registration_number", sa.String(length=120), nullable=False),
        sa.Column("certificate_ref", sa.String(length=512), nullable=True),
        sa.Column("tax_ids", sa.String(length=120), nullable=True),
        sa.Column(
            "is_approved", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
    )

    op.create_table(
        "campaigners",
        *_profile_columns(),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=False),
        sa.Column("city", sa.String(length=120), nullable=False),
        sa.Column("state", sa.String(length=120), nullable=False),
        sa.Column("tax_id", sa.String(length=64), nullable=False),
        sa.Column("id_type", sa.String(length=64), nullable=False),
        sa.Column("id_document_ref", sa.String(length=512), nullable=True),
        sa.Column(
            "is_approved", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
    )

    op.create_table(
        "admins",
        *_profile_columns(),
        sa.Column("access_code", sa.String(length=255), nullable=False),
        sa.Column(
            "two_factor_enabled",
            sa.Boolean(),
            nullable=False,
            server_default=sa.false(),
        ),
    )

    op.create_table(
        "campaigns",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("target_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "raised_amount",
            sa.Numeric(10, 2),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("image_url", sa.String(length=512), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("organizer_id", sa.Integer(), nullable=False),
        sa.Column("organizer_type", organizer_type, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["organizer_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_campaigns_organizer_id"), "campaigns", ["organizer_id"], unique=False
    )


def downgrade() -> None:
    """Drop the schema."""

    op.drop_index(op.f("ix_campaigns_organizer_id"), table_name="campaigns")
    op.drop_table("campaigns")
    for table in ("admins", "campaigners", "ngos", "donors"):
        op.drop_table(table)
    op.drop_index(op.f("ix_users_role"), table_name="users")
    op.drop_table("users")
    op.execute(f"DROP TYPE IF EXISTS {ORGANIZER_TYPE_ENUM}")
    op.execute(f"DROP TYPE IF EXISTS {ACCOUNT_ROLE_ENUM}")
