"""Catalog of selectable items.

A ``Catalog`` is an immutable, ordered collection of ``Item`` values keyed by
their unique ``value``. It is injected into each controller so that several
widgets can run side by side with different catalogs.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a catalog or a preset is malformed."""


@dataclass(frozen=True)
class Item:
    value: str
    label: str
    description: str | None = None


class Catalog:
    """Ordered, read-only set of items with unique values."""

    def __init__(self, items: Iterable[Item]) -> None:
        self._items: tuple[Item, ...] = tuple(items)
        self._by_value: dict[str, Item] = {}
        for item in self._items:
            if not item.value:
                raise CatalogError(f"Catalog item has an empty value: {item!r}")
            if item.value in self._by_value:
                raise CatalogError(f"Duplicate catalog value: {item.value!r}")
            self._by_value[item.value] = item

    @classmethod
    def from_dicts(cls, entries: Iterable[dict[str, Any]]) -> Catalog:
        """Build a catalog from ``{"value", "label", "description"?}`` mappings."""
        items: list[Item] = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise CatalogError(f"Catalog entry {index} is not an object")
            value = entry.get("value")
            if not isinstance(value, str):
                raise CatalogError(f"Catalog entry {index} has no string 'value'")
            label = entry.get("label", value)
            if not isinstance(label, str):
                raise CatalogError(f"Catalog entry {index} has a non-string 'label'")
            description = entry.get("description")
            if description is not None and not isinstance(description, str):
                raise CatalogError(f"Catalog entry {index} has a non-string 'description'")
            items.append(Item(value=value, label=label, description=description))
        return cls(items)

    @property
    def items(self) -> tuple[Item, ...]:
        return self._items

    def get(self, value: str) -> Item | None:
        return self._by_value.get(value)

    def resolve(self, values: Iterable[str]) -> list[Item]:
        """Map *values* to catalog items, raising on unknown values."""
        resolved: list[Item] = []
        for value in values:
            item = self._by_value.get(value)
            if item is None:
                raise CatalogError(f"Unknown catalog value: {value!r}")
            resolved.append(item)
        return resolved

    def __contains__(self, key: object) -> bool:
        if isinstance(key, Item):
            return self._by_value.get(key.value) == key
        return key in self._by_value

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Catalog({[item.value for item in self._items]!r})"


def load_catalog(path: str | Path) -> Catalog:
    """Load a catalog from a JSON file holding a list of item objects."""
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc

    if not isinstance(raw, list):
        raise CatalogError(f"Catalog {path} must contain a JSON list")

    catalog = Catalog.from_dicts(raw)
    logger.debug("Loaded %d catalog items from %s", len(catalog), path)
    return catalog


# Demo catalog used when no catalog file is given
FRAMEWORKS = Catalog(
    [
        Item(value="next.js", label="Next.js"),
        Item(value="sveltekit", label="SvelteKit"),
        Item(value="nuxt.js", label="Nuxt.js"),
        Item(value="remix", label="Remix"),
        Item(value="astro", label="Astro"),
        Item(value="wordpress", label="WordPress"),
        Item(value="express.js", label="Express.js"),
        Item(value="nest.js", label="Nest.js"),
    ]
)

FRAMEWORKS_PRESET: tuple[str, ...] = ("astro",)
