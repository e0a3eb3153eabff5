"""Seed file loading.

A seed file is TOML with one ``[[product]]`` table per seed::

    [[product]]
    sku = "2002"
    categories = ["Men"]

    [product.attributes]
    name = "Simple Product Example"
    price = "99.99"

    [product.inventory]
    source = "default"
    quantity = 150

TOML floats are converted to ``Decimal`` through their string form so prices
keep the digits that were written.
"""

from __future__ import annotations

import tomllib
from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    field_validator,
)

from catalogseed.domain.model import DEFAULT_SOURCE_CODE, InventorySpec, SeedSpec

from .errors import SeedFileError

if TYPE_CHECKING:
    from pathlib import Path

    from catalogseed.domain.model import AttributeValue

DEFAULT_SEED_SPECS: tuple[SeedSpec, ...] = (
    SeedSpec(
        key="2002",
        attributes={
            "name": "Simple Product Example",
            "url_key": "refactored-product",
            "price": Decimal("99.99"),
            "attribute_set": "Default",
        },
        inventory=InventorySpec(source_code=DEFAULT_SOURCE_CODE, quantity=150),
        category_names=("Men",),
    ),
)


class SeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class InventoryModel(SeedBaseModel):
    source: str = DEFAULT_SOURCE_CODE
    quantity: StrictInt = Field(ge=0)
    in_stock: StrictBool = True


class ProductModel(SeedBaseModel):
    sku: str
    attributes: dict[str, StrictBool | StrictInt | float | str] = Field(default_factory=dict)
    categories: list[str] = Field(default_factory=list[str])
    inventory: InventoryModel

    @field_validator("sku", mode="before")
    @classmethod
    def _coerce_numeric_sku(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_spec(self) -> SeedSpec:
        attributes: dict[str, AttributeValue] = {
            name: Decimal(str(value)) if isinstance(value, float) else value
            for name, value in self.attributes.items()
        }
        return SeedSpec(
            key=self.sku,
            attributes=attributes,
            category_names=tuple(self.categories),
            inventory=InventorySpec(
                source_code=self.inventory.source,
                quantity=self.inventory.quantity,
                in_stock=self.inventory.in_stock,
            ),
        )


class SeedFileModel(SeedBaseModel):
    product: list[ProductModel] = Field(min_length=1)


def parse_seed_document(text: str, *, origin: str = "<string>") -> tuple[SeedSpec, ...]:
    """Parse TOML seed text into seed specs."""

    try:
        document = tomllib.loads(text)
        model = SeedFileModel.model_validate(document)
        specs = tuple(product.to_spec() for product in model.product)
    except tomllib.TOMLDecodeError as exc:
        raise SeedFileError(f"{origin}: invalid TOML: {exc}") from exc
    except ValidationError as exc:
        raise SeedFileError(f"{origin}: invalid seed definition: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise SeedFileError(f"{origin}: {exc}") from exc

    keys = [spec.key for spec in specs]
    duplicates = sorted({key for key in keys if keys.count(key) > 1})
    if duplicates:
        raise SeedFileError(f"{origin}: duplicate product keys: {', '.join(duplicates)}")
    return specs


def load_seed_file(path: Path) -> tuple[SeedSpec, ...]:
    """Read and parse the seed file at ``path``."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SeedFileError(f"Cannot read seed file {path}: {exc}") from exc
    return parse_seed_document(text, origin=str(path))
