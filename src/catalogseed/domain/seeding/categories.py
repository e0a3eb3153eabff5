"""Turn resolved category names into the id set to assign."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogseed.domain.model import CategoryMatchPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence


@dataclass(slots=True)
class CategorySelection:
    category_ids: list[int] = field(default_factory=list[int])
    warnings: list[str] = field(default_factory=list[str])


def select_categories(
    names: Sequence[str],
    resolved: Mapping[str, tuple[int, ...]],
    *,
    policy: CategoryMatchPolicy = CategoryMatchPolicy.ALL,
) -> CategorySelection:
    """Pick category ids for ``names`` in request order.

    Unknown names are skipped with a warning. Names matching several
    categories are warned about and handled according to ``policy``.
    """

    selection = CategorySelection()
    seen: set[int] = set()
    for name in names:
        ids = tuple(sorted(resolved.get(name, ())))
        if not ids:
            selection.warnings.append(f"category not found: {name}")
            continue
        if len(ids) > 1:
            selection.warnings.append(
                f"category name is ambiguous: {name} matches {len(ids)} categories"
            )
            if policy is CategoryMatchPolicy.SKIP:
                continue
            if policy is CategoryMatchPolicy.FIRST:
                ids = ids[:1]
        for category_id in ids:
            if category_id not in seen:
                seen.add(category_id)
                selection.category_ids.append(category_id)
    return selection
