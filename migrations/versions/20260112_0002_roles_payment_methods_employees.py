"""roles, payment methods, employees

Revision ID: 20260112_0002
Revises: 20260105_0001
Create Date: 2026-01-12
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20260112_0002"
down_revision = "20260105_0001"
branch_labels = None
depends_on = None

GENDERS = ("MALE", "FEMALE", "OTHER")


def _named_catalog(table):
    op.create_table(
        table,
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], name=f"fk_{table}_company_id_companies", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name=f"pk_{table}"),
        sa.UniqueConstraint("company_id", "name", name=f"uq_{table}_company_id_name"),
    )
    op.create_index(f"ix_{table}_company_id", table, ["company_id"])


def upgrade():
    _named_catalog("roles")
    _named_catalog("payment_methods")

    op.create_table(
        "employees",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=False),
        sa.Column("department_id", sa.String(36), nullable=False),
        sa.Column("role_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(160), nullable=False),
        sa.Column("pan_no", sa.String(32), nullable=True),
        sa.Column("gender", sa.Enum(*GENDERS, name="gender"), nullable=False),
        sa.Column("disability", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("date_of_joining_ad", sa.Date(), nullable=True),
        sa.Column("date_of_joining_bs", sa.String(10), nullable=True),
        sa.Column("life_insurance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("health_insurance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("house_insurance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["company_id"], ["companies.id"], name="fk_employees_company_id_companies", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"], name="fk_employees_department_id_departments", ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="fk_employees_role_id_roles", ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id", name="pk_employees"),
        sa.UniqueConstraint("company_id", "pan_no", name="uq_employees_company_id_pan_no"),
    )
    op.create_index("ix_employees_company_id", "employees", ["company_id"])
    op.create_index("ix_employees_department_id", "employees", ["department_id"])
    op.create_index("ix_employees_role_id", "employees", ["role_id"])


def downgrade():
    op.drop_index("ix_employees_role_id", table_name="employees")
    op.drop_index("ix_employees_department_id", table_name="employees")
    op.drop_index("ix_employees_company_id", table_name="employees")
    op.drop_table("employees")
    sa.Enum(name="gender").drop(op.get_bind(), checkfirst=True)
    for table in ("payment_methods", "roles"):
        op.drop_index(f"ix_{table}_company_id", table_name=table)
        op.drop_table(table)
