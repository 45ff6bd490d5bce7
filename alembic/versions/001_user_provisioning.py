"""
============================================================
TARJETA CRC (Class / Responsibilities / Collaborators)
============================================================
Class: 001_user_provisioning (Alembic Migration)

Responsibilities:
  - Crear el esquema del servicio de alta de usuarios:
      auth_principals (identity provider)
      users           (profile store)
      activity_logs   (activity log sink)
  - Expresar las reglas de coherencia del perfil como CHECK constraints.

Collaborators:
  - PostgreSQL 14+
  - infrastructure/repositories/postgres/* (usa este esquema como contrato)

Policy:
  - Migración BASELINE.
  - Convención de nombres:
      pk_<tabla> / uq_<tabla>_<col> / ix_<tabla>_<col>
      fk_<tabla>_<col>__<ref_tabla> / ck_<tabla>_<regla>
============================================================
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_user_provisioning"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("now()"),
        nullable=False,
    )


def upgrade() -> None:
    # =========================================================
    # 1) IDENTITY PROVIDER (auth_principals)
    # =========================================================
    op.create_table(
        "auth_principals",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        sa.Column("email_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_auth_principals"),
        sa.UniqueConstraint("email", name="uq_auth_principals_email"),
    )

    # =========================================================
    # 2) PROFILE STORE (users)
    # =========================================================
    op.create_table(
        "users",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("phone_number", sa.String(50), nullable=True),
        sa.Column("office_id", sa.String(100), nullable=True),
        sa.Column(
            "is_lead", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("reporting_to_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("status", sa.String(50), nullable=False),
        sa.Column("approval_status", sa.String(50), nullable=False),
        sa.Column("added_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("added_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approved_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("approved_time", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
        # El perfil vive y muere con su principal.
        sa.ForeignKeyConstraint(
            ["id"],
            ["auth_principals.id"],
            name="fk_users_id__auth_principals",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["reporting_to_id"],
            ["users.id"],
            name="fk_users_reporting_to_id__users",
            ondelete="SET NULL",
        ),
        sa.CheckConstraint(
            "role IN ('director','manager','employee')", name="ck_users_role"
        ),
        sa.CheckConstraint(
            "status IN ('active','inactive','pending_approval')",
            name="ck_users_status",
        ),
        sa.CheckConstraint(
            "approval_status IN ('approved','pending')",
            name="ck_users_approval_status",
        ),
        sa.CheckConstraint(
            "NOT is_lead OR role = 'employee'", name="ck_users_lead_is_employee"
        ),
        sa.CheckConstraint(
            "role = 'director' OR office_id IS NOT NULL",
            name="ck_users_office_required",
        ),
        # approved <=> active + aprobador + fecha; pending <=> sin aprobador.
        sa.CheckConstraint(
            "(approval_status = 'approved' AND status = 'active' "
            "AND approved_by IS NOT NULL AND approved_time IS NOT NULL) "
            "OR (approval_status = 'pending' AND status <> 'active' "
            "AND approved_by IS NULL AND approved_time IS NULL)",
            name="ck_users_approval_coherent",
        ),
    )
    op.create_index("ix_users_office_id", "users", ["office_id"])
    op.create_index("ix_users_reporting_to_id", "users", ["reporting_to_id"])

    # =========================================================
    # 3) ACTIVITY LOG (activity_logs)
    # =========================================================
    op.create_table(
        "activity_logs",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("activity_type", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("entity_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("entity_type", sa.String(50), nullable=True),
        sa.Column(
            "new_data",
            postgresql.JSONB,
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_activity_logs"),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("users")
    op.drop_table("auth_principals")
