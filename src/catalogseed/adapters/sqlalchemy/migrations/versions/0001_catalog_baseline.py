"""Catalog baseline: products, categories, links and source items.

Revision ID: 0001_catalog_baseline
Revises:
Create Date: 2026-10-19 00:00:00

"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_catalog_baseline"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "product",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price", sa.String(length=40), nullable=False),
        sa.Column("url_key", sa.String(), nullable=True),
        sa.Column("type_id", sa.String(length=7), nullable=False),
        sa.Column("attribute_set", sa.String(), nullable=False),
        sa.Column("visibility", sa.String(length=11), nullable=False),
        sa.Column("status", sa.String(length=8), nullable=False),
        sa.Column("custom_attributes", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_product"),
        sa.UniqueConstraint("sku", name="uq_product_sku"),
    )
    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_category"),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["category.id"],
            name="fk_category_parent_id_category",
        ),
    )
    op.create_index("ix_category_name", "category", ["name"])
    op.create_table(
        "product_category",
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("product_id", "category_id", name="pk_product_category"),
        sa.ForeignKeyConstraint(
            ["product_id"],
            ["product.id"],
            name="fk_product_category_product_id_product",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["category_id"],
            ["category.id"],
            name="fk_product_category_category_id_category",
            ondelete="CASCADE",
        ),
    )
    op.create_table(
        "source_item",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("source_code", sa.String(length=64), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=12), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_source_item"),
        sa.UniqueConstraint("sku", "source_code", name="uq_source_item_sku_source_code"),
    )


def downgrade() -> None:
    op.drop_table("source_item")
    op.drop_table("product_category")
    op.drop_index("ix_category_name", table_name="category")
    op.drop_table("category")
    op.drop_table("product")
