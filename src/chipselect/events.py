"""Inbound events consumed by the multi-select controller."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from chipselect.catalog import Item


@dataclass(frozen=True)
class Focus:
    """The text input gained focus."""


@dataclass(frozen=True)
class Blur:
    """The text input lost focus."""


@dataclass(frozen=True)
class TextChange:
    text: str


@dataclass(frozen=True)
class KeyPress:
    """A key pressed while the widget owns focus.

    ``key`` is a key id such as ``"backspace"`` or ``"shift+tab"``.
    """

    key: str


@dataclass(frozen=True)
class PointerSelect:
    item: Item


@dataclass(frozen=True)
class PointerRemove:
    item: Item


@dataclass(frozen=True)
class FocusChip:
    """Keyboard focus moved onto the chip for ``item``."""

    item: Item


@dataclass(frozen=True)
class ClearAll:
    """Remove every chip."""


Event = Union[Focus, Blur, TextChange, KeyPress, PointerSelect, PointerRemove, FocusChip, ClearAll]
