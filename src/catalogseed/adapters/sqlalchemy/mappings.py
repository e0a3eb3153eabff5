"""SQLAlchemy mapping metadata for the catalog domain model."""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from functools import cache
from typing import Any, cast

from sqlalchemy import (
    Column,
    Dialect,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from catalogseed.domain.model import (
    AttributeValue,
    Category,
    Product,
    ProductStatus,
    ProductType,
    SourceItem,
    StockStatus,
    Visibility,
)

log = logging.getLogger(__name__)


class DecimalString(TypeDecorator[Decimal]):
    """Exact decimal storage that does not depend on the backend's numeric type."""

    impl = String(40)
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: Dialect) -> Decimal | None:
        _ = dialect
        if value is None:
            return None
        return Decimal(value)


class AttributeMapType(TypeDecorator[dict[str, AttributeValue]]):
    """Typed JSON encoding for custom product attributes."""

    impl = Text
    cache_ok = True

    def process_bind_param(
        self, value: dict[str, AttributeValue] | None, dialect: Dialect
    ) -> str | None:
        _ = dialect
        if value is None:
            return None
        payload = {name: _encode_attribute(item) for name, item in sorted(value.items())}
        return json.dumps(payload)

    def process_result_value(
        self, value: str | None, dialect: Dialect
    ) -> dict[str, AttributeValue]:
        _ = dialect
        if value is None:
            return {}
        loaded = json.loads(value)
        if not isinstance(loaded, dict):
            return {}
        items = cast(dict[str, Any], loaded)
        return {name: _decode_attribute(item) for name, item in items.items()}


def _encode_attribute(value: AttributeValue) -> dict[str, str]:
    if isinstance(value, bool):
        return {"type": "bool", "value": "true" if value else "false"}
    if isinstance(value, int):
        return {"type": "int", "value": str(value)}
    if isinstance(value, Decimal):
        return {"type": "decimal", "value": str(value)}
    return {"type": "str", "value": value}


def _decode_attribute(item: dict[str, str]) -> AttributeValue:
    kind = item.get("type")
    raw = item.get("value", "")
    if kind == "bool":
        return raw == "true"
    if kind == "int":
        return int(raw)
    if kind == "decimal":
        return Decimal(raw)
    return raw


def _enum_column_type(enum_cls: type[Any], name: str) -> Enum:
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [member.value for member in members],
        validate_strings=True,
    )


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Catalog tables --------------------------------------------------------------

product_table = Table(
    "product",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sku", String(64), nullable=False, unique=True),
    Column("name", String, nullable=False),
    Column("price", DecimalString(), nullable=False),
    Column("url_key", String, nullable=True),
    Column("type_id", _enum_column_type(ProductType, "product_type"), nullable=False),
    Column("attribute_set", String, nullable=False),
    Column("visibility", _enum_column_type(Visibility, "visibility"), nullable=False),
    Column("status", _enum_column_type(ProductStatus, "product_status"), nullable=False),
    Column("custom_attributes", AttributeMapType(), nullable=False),
)

category_table = Table(
    "category",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False, index=True),
    Column("parent_id", Integer, ForeignKey("category.id"), nullable=True),
)

product_category_table = Table(
    "product_category",
    mapper_registry.metadata,
    Column(
        "product_id",
        Integer,
        ForeignKey("product.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("category.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)

source_item_table = Table(
    "source_item",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("sku", String(64), nullable=False),
    Column("source_code", String(64), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("status", _enum_column_type(StockStatus, "stock_status"), nullable=False),
    UniqueConstraint("sku", "source_code", name="uq_source_item_sku_source_code"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Product, product_table)
    mapper_registry.map_imperatively(Category, category_table)
    mapper_registry.map_imperatively(
        SourceItem,
        source_item_table,
        properties={"_row_id": source_item_table.c.id},
    )

    configure_mappers()
    return mapper_registry

