"""Build a ``Product`` from a ``SeedSpec`` in one constructor call."""

from __future__ import annotations

import re
import unicodedata
from decimal import Decimal, InvalidOperation
from enum import StrEnum
from typing import TYPE_CHECKING

from catalogseed.domain.errors import CreationError
from catalogseed.domain.model import Product, ProductStatus, ProductType, Visibility

if TYPE_CHECKING:
    from catalogseed.domain.model import AttributeValue, SeedSpec

_NON_SLUG = re.compile(r"[^a-z0-9]+")

PRODUCT_FIELDS = frozenset(
    {"name", "price", "url_key", "type_id", "attribute_set", "visibility", "status"}
)


def slugify(value: str) -> str:
    """Return a lowercase ASCII url key for ``value``."""

    folded = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_SLUG.sub("-", folded.lower()).strip("-")


def _text(attributes: dict[str, AttributeValue], name: str) -> str | None:
    value = attributes.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise CreationError(f"Attribute {name!r} must be a string")
    stripped = value.strip()
    return stripped or None


def _price(value: AttributeValue | None) -> Decimal:
    if value is None:
        return Decimal(0)
    if isinstance(value, bool):
        raise CreationError("Attribute 'price' must be a decimal number")
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise CreationError(f"Attribute 'price' is not a number: {value!r}") from exc
    if not price.is_finite() or price < 0:
        raise CreationError(f"Attribute 'price' must be a non-negative number: {value!r}")
    return price


def _choice[TEnum: StrEnum](enum_cls: type[TEnum], raw: str | None, default: TEnum) -> TEnum:
    if raw is None:
        return default
    try:
        return enum_cls(raw.lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise CreationError(f"Unsupported {enum_cls.__name__} {raw!r} (expected {allowed})") from exc


def build_product(spec: SeedSpec) -> Product:
    """Map the seed attributes onto a new, unpersisted product.

    Known attribute names become product fields; the rest are kept as custom
    attributes. Raises ``CreationError`` when the attributes do not describe a
    valid product.
    """

    attributes = dict(spec.attributes)
    name = _text(attributes, "name")
    if name is None:
        raise CreationError(f"Seed {spec.key!r} has no 'name' attribute")
    url_key = _text(attributes, "url_key") or slugify(name)
    if not url_key:
        raise CreationError(f"Cannot derive a url key from name {name!r}")

    return Product(
        sku=spec.key,
        name=name,
        price=_price(attributes.get("price")),
        url_key=url_key,
        type_id=_choice(ProductType, _text(attributes, "type_id"), ProductType.SIMPLE),
        attribute_set=_text(attributes, "attribute_set") or "Default",
        visibility=_choice(Visibility, _text(attributes, "visibility"), Visibility.BOTH),
        status=_choice(ProductStatus, _text(attributes, "status"), ProductStatus.ENABLED),
        custom_attributes={
            key: value for key, value in attributes.items() if key not in PRODUCT_FIELDS
        },
    )
