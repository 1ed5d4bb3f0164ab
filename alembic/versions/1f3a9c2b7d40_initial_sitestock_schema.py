"""Initial sitestock schema.

Revision ID: 1f3a9c2b7d40
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "1f3a9c2b7d40"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("Admin", "Site_Engineer", name="user_role")
project_status = sa.Enum("PENDING", "ONGOING", "COMPLETED", name="project_status")
project_material_status = sa.Enum("NOT_USED", "ACTIVE", "COMPLETED", name="project_material_status")
material_request_type = sa.Enum("GLOBAL", "PROJECT", "PROJECT_MATERIAL", name="material_request_type")
material_request_status = sa.Enum("PENDING", "APPROVED", "REJECTED", name="material_request_status")
notification_type = sa.Enum("INFO", "SUCCESS", "ERROR", name="notification_type")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=200), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True, unique=True),
        sa.Column("username", sa.String(length=80), nullable=True, unique=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_company_id", "users", ["company_id"])

    op.create_table(
        "engineers",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("emp_id", sa.String(length=40), nullable=False),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("phone", sa.String(length=10), nullable=False),
        sa.Column("alternate_phone", sa.String(length=10), nullable=True),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("profile_image", sa.String(length=500), nullable=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "emp_id", name="uq_engineers_company_emp_id"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_code", sa.String(length=40), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("client_name", sa.String(length=200), nullable=False),
        sa.Column("project_type", sa.String(length=80), nullable=False),
        sa.Column("budget", sa.Numeric(14, 2), nullable=True),
        sa.Column("quotation_amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", project_status, nullable=False),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "project_code", name="uq_projects_company_code"),
    )
    op.create_index("ix_projects_company_id", "projects", ["company_id"])

    op.create_table(
        "project_assignments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_assignments_project_user"),
    )

    op.create_table(
        "project_expenses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("amount > 0", name="ck_project_expenses_amount_positive"),
    )

    op.create_table(
        "project_files",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("storage_key", sa.String(length=500), nullable=False, unique=True),
        sa.Column("url", sa.String(length=600), nullable=False),
        sa.Column("content_type", sa.String(length=120), nullable=True),
        sa.Column("size_bytes", sa.BigInteger(), nullable=False),
        sa.Column("uploaded_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "materials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("material_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("unit", sa.String(length=40), nullable=False),
        sa.Column("default_rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("vendor", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_materials_company_id", "materials", ["company_id"])

    op.create_table(
        "project_materials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("materials.id"), nullable=False),
        sa.Column("assigned", sa.Numeric(12, 3), nullable=False),
        sa.Column("used", sa.Numeric(12, 3), nullable=False),
        sa.Column("status", project_material_status, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("project_id", "material_id", name="uq_project_materials_project_material"),
        sa.CheckConstraint("assigned >= 0", name="ck_project_materials_assigned_non_negative"),
        sa.CheckConstraint("used >= 0", name="ck_project_materials_used_non_negative"),
    )

    op.create_table(
        "material_usages",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("materials.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("usage_date", sa.Date(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity > 0", name="ck_material_usages_quantity_positive"),
    )
    op.create_index(
        "ix_material_usages_project_material",
        "material_usages",
        ["project_id", "material_id"],
    )

    op.create_table(
        "material_requests",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("request_code", sa.String(length=20), nullable=False, unique=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("category", sa.String(length=120), nullable=False),
        sa.Column("unit", sa.String(length=40), nullable=False),
        sa.Column("default_rate", sa.Numeric(12, 2), nullable=False),
        sa.Column("vendor", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("type", material_request_type, nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("material_id", sa.Integer(), sa.ForeignKey("materials.id"), nullable=True),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=True),
        sa.Column("status", material_request_status, nullable=False),
        sa.Column("request_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("review_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("approval_notes", sa.Text(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "type = 'GLOBAL' OR (project_id IS NOT NULL AND quantity IS NOT NULL)",
            name="ck_material_request_allocation_fields",
        ),
        sa.CheckConstraint(
            "type != 'PROJECT_MATERIAL' OR material_id IS NOT NULL",
            name="ck_material_request_existing_material",
        ),
    )
    op.create_index("ix_material_requests_employee_id", "material_requests", ["employee_id"])
    op.create_index("ix_material_requests_status", "material_requests", ["status"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("recipient_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", notification_type, nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_recipient_read", "notifications", ["recipient_id", "read"])

    op.create_table(
        "labours",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_labours_company_id", "labours", ["company_id"])

    op.create_table(
        "labour_payments",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("labour_id", sa.Integer(), sa.ForeignKey("labours.id"), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("paid_on", sa.Date(), nullable=False),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_labour_payments_amount_positive"),
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Integer(), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("contractor_name", sa.String(length=200), nullable=False),
        sa.Column("contact_number", sa.String(length=20), nullable=False),
        sa.Column("contract_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("work_status", sa.String(length=40), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_contracts_project_id", "contracts", ["project_id"])


def downgrade() -> None:
    op.drop_index("ix_contracts_project_id", table_name="contracts")
    op.drop_table("contracts")
    op.drop_table("labour_payments")
    op.drop_index("ix_labours_company_id", table_name="labours")
    op.drop_table("labours")
    op.drop_index("ix_notifications_recipient_read", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_material_requests_status", table_name="material_requests")
    op.drop_index("ix_material_requests_employee_id", table_name="material_requests")
    op.drop_table("material_requests")
    op.drop_index("ix_material_usages_project_material", table_name="material_usages")
    op.drop_table("material_usages")
    op.drop_table("project_materials")
    op.drop_index("ix_materials_company_id", table_name="materials")
    op.drop_table("materials")
    op.drop_table("project_files")
    op.drop_table("project_expenses")
    op.drop_table("project_assignments")
    op.drop_index("ix_projects_company_id", table_name="projects")
    op.drop_table("projects")
    op.drop_table("engineers")
    op.drop_index("ix_users_company_id", table_name="users")
    op.drop_table("users")
    op.drop_table("companies")

    bind = op.get_bind()
    for enum_type in (
        notification_type,
        material_request_status,
        material_request_type,
        project_material_status,
        project_status,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
