"""registrations and validation job queue

Revision ID: 202610160900
Revises:
Create Date: 2026-10-16 09:00:00
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "202610160900"
down_revision = None
branch_labels = None
depends_on = None

def _has_table(bind, name: str) -> bool:
    insp = sa.inspect(bind)
    return insp.has_table(name)

def upgrade():
    bind = op.get_bind()

    if not _has_table(bind, "registrations"):
        op.create_table(
            "registrations",
            sa.Column("id", sa.String(128), primary_key=True),
            sa.Column("email", sa.Text(), nullable=True),
            sa.Column("name", sa.Text(), nullable=True),
            sa.Column("roll_number", sa.String(64), nullable=True),
            sa.Column("resume_status", sa.String(32), nullable=False, server_default="NoResume"),
            sa.Column("resume_url", sa.Text(), nullable=True),
            sa.Column("resume_attempts", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("last_rejection_reason", sa.Text(), nullable=True),
            sa.Column("resume_ai_reason", sa.Text(), nullable=True),
            sa.Column("resume_ai_confidence", sa.Float(), nullable=True),
            sa.Column("resume_score", sa.Integer(), nullable=True),
            sa.Column("processing_started_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("processing_completed_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        )
        op.create_index("ix_registrations_resume_status", "registrations", ["resume_status"])

    if not _has_table(bind, "validation_jobs"):
        op.create_table(
            "validation_jobs",
            sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
            sa.Column("queue", sa.String(64), nullable=False),
            sa.Column("candidate_id", sa.String(128), nullable=False),
            sa.Column("resume_url", sa.Text(), nullable=False),
            sa.Column("status", sa.String(16), nullable=False, server_default="queued"),
            sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("max_attempts", sa.Integer(), nullable=False),
            sa.Column("last_error", sa.Text(), nullable=True),
            sa.Column("available_at", sa.DateTime(timezone=True), nullable=False),
            sa.Column("locked_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
            sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        )
        op.create_index("ix_validation_jobs_claim", "validation_jobs", ["queue", "status", "available_at"])

def downgrade():
    op.drop_index("ix_validation_jobs_claim", table_name="validation_jobs")
    op.drop_table("validation_jobs")
    op.drop_index("ix_registrations_resume_status", table_name="registrations")
    op.drop_table("registrations")
