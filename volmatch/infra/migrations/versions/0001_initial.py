from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("role", sa.String(length=16), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False, unique=True),
        sa.Column("email", sa.String(length=255), nullable=False, unique=True),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("pronouns", sa.Text()),
        sa.Column("location", sa.Text()),
        sa.Column("email_verified", sa.Boolean(), server_default=sa.false()),
        sa.Column("matching_profile", sa.JSON()),
        sa.Column("age", sa.Integer()),
        sa.Column("school", sa.Text()),
        sa.Column("skills", sa.JSON()),
        sa.Column("interests", sa.JSON()),
        sa.Column("resume_url", sa.Text()),
        sa.Column("volunteer_form_url", sa.Text()),
        sa.Column("pitch_video_url", sa.Text()),
        sa.Column("profile_photo", sa.Text()),
        sa.Column("social_links", sa.JSON()),
        sa.Column("needed_skills", sa.JSON()),
        sa.Column("needed_interests", sa.JSON()),
        sa.Column("organization_description", sa.Text()),
        sa.Column("website", sa.Text()),
        sa.Column("organization_logo", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_users_role", "users", ["role"])
    op.create_table(
        "opportunities",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("nonprofit_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.Text()),
        sa.Column("location", sa.Text()),
        sa.Column("work_mode", sa.String(length=32)),
        sa.Column("estimated_hours", sa.Float()),
        sa.Column("deadline", sa.Date()),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="open"),
        sa.Column("skills_required", sa.JSON()),
        sa.Column("keywords", sa.JSON()),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_opportunities_nonprofit_id", "opportunities", ["nonprofit_id"])
    op.create_index("ix_opportunities_category", "opportunities", ["category"])
    op.create_index("ix_opportunities_status", "opportunities", ["status"])
    op.create_table(
        "applications",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("volunteer_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "opportunity_id", sa.BigInteger(), sa.ForeignKey("opportunities.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="applied"),
        sa.Column("created_at", sa.DateTime(timezone=True)),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        sa.UniqueConstraint("volunteer_id", "opportunity_id", name="uq_application_pair"),
    )
    op.create_index("ix_applications_volunteer_id", "applications", ["volunteer_id"])
    op.create_index("ix_applications_opportunity_id", "applications", ["opportunity_id"])
    op.create_table(
        "audit_log",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("at", sa.DateTime(timezone=True)),
        sa.Column("user_id", sa.BigInteger()),
        sa.Column("action", sa.Text()),
        sa.Column("payload", sa.JSON()),
    )


def downgrade() -> None:
    op.drop_table("audit_log")
    op.drop_table("applications")
    op.drop_table("opportunities")
    op.drop_table("users")
