"""Selection store and the selectable-list filter."""

from __future__ import annotations

from typing import Iterable

from chipselect.catalog import Catalog, Item


class SelectionStore:
    """Ordered set of chosen items.

    Insertion order is chip order. Values are unique and always belong to
    the catalog; ineligible adds and removes are no-ops that return ``False``.
    """

    def __init__(self, catalog: Catalog, initial: Iterable[Item] = ()) -> None:
        self._catalog = catalog
        self._items: list[Item] = []
        for item in initial:
            self.add(item)

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._items)

    def add(self, item: Item) -> bool:
        if item not in self._catalog or self.contains(item.value):
            return False
        self._items.append(item)
        return True

    def remove(self, item: Item) -> bool:
        for i, existing in enumerate(self._items):
            if existing.value == item.value:
                del self._items[i]
                return True
        return False

    def clear(self) -> bool:
        if not self._items:
            return False
        self._items.clear()
        return True

    def contains(self, value: str) -> bool:
        return any(item.value == value for item in self._items)

    def index_of(self, value: str) -> int:
        for i, item in enumerate(self._items):
            if item.value == value:
                return i
        return -1

    def __len__(self) -> int:
        return len(self._items)


def selectable_items(catalog: Catalog, selected: Iterable[Item]) -> tuple[Item, ...]:
    """Catalog items not present in *selected*, in catalog order.

    Pending query text does not narrow this list.
    """
    chosen = {item.value for item in selected}
    return tuple(item for item in catalog if item.value not in chosen)
