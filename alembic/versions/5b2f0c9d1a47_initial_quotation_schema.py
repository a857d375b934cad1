"""initial quotation schema

Revision ID: 5b2f0c9d1a47
Revises:
Create Date: 2026-10-18 10:02:14.318204

Users, role assignments, refresh tokens, raw materials, quotations and
their material lines. Enum columns are stored as VARCHAR holding the
enum value ("Tipo A", "Centímetros", ...).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b2f0c9d1a47'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("email", sa.String(), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"])

    op.create_table(
        "auth_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("token_hash", sa.String(), nullable=False),
        sa.Column("token_type", sa.String(), nullable=True),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_auth_tokens_id", "auth_tokens", ["id"])

    op.create_table(
        "user_roles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("role", sa.String(length=5), nullable=False),
    )
    op.create_index("ix_user_roles_id", "user_roles", ["id"])

    op.create_table(
        "raw_materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("unit", sa.String(length=11), nullable=False),
        sa.Column("cost", sa.Float(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_raw_materials_id", "raw_materials", ["id"])
    op.create_index("ix_raw_materials_user_id", "raw_materials", ["user_id"])

    op.create_table(
        "quotations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quote_number", sa.String(), nullable=False, unique=True),
        sa.Column("product_name", sa.String(), nullable=False),
        sa.Column("product_type", sa.String(length=6), nullable=False),
        sa.Column("validity_days", sa.Integer(), nullable=False),
        sa.Column("total_cost", sa.Float(), nullable=False),
        sa.Column("sale_price", sa.Float(), nullable=False),
        sa.Column("profit_margin", sa.Float(), nullable=False),
        sa.Column("margin_percentage", sa.Float(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_quotations_id", "quotations", ["id"])
    op.create_index("ix_quotations_user_id", "quotations", ["user_id"])

    op.create_table(
        "quotation_materials",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("quotation_id", sa.Integer(), sa.ForeignKey("quotations.id"), nullable=False),
        sa.Column("raw_material_id", sa.Integer(), sa.ForeignKey("raw_materials.id"), nullable=False),
        sa.Column("percentage", sa.Float(), nullable=False),
        sa.Column("cost", sa.Float(), nullable=False),
    )
    op.create_index("ix_quotation_materials_id", "quotation_materials", ["id"])
    op.create_index("ix_quotation_materials_quotation_id", "quotation_materials", ["quotation_id"])


def downgrade() -> None:
    op.drop_table("quotation_materials")
    op.drop_table("quotations")
    op.drop_table("raw_materials")
    op.drop_table("user_roles")
    op.drop_table("auth_tokens")
    op.drop_table("users")
