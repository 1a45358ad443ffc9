"""Interaction controller: the multi-select state machine.

The controller owns the selection, the pending query text, the chip
highlight and the focus/panel flags. Every inbound event goes through
:meth:`MultiSelectController.handle`, which runs to completion and returns a
fresh immutable :class:`MultiSelectState`. The machine is total: events that
do not apply in the current state are absorbed without changing it.

Backspace on an empty field is a two-stage action. The first press arms
removal by highlighting the last chip, the second removes the highlighted
chip. Escape first clears a highlight and only then blurs the input.

The highlight is tracked by the chip's ``value`` and exposed as a position,
so a chip that shifts position between arming and confirming is never
mistaken for another one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from chipselect.catalog import Catalog, Item
from chipselect.events import (
    Blur,
    ClearAll,
    Event,
    Focus,
    FocusChip,
    KeyPress,
    PointerRemove,
    PointerSelect,
    TextChange,
)
from chipselect.keys import Key
from chipselect.selection import SelectionStore, selectable_items
from chipselect.utils import get_segmenter

logger = logging.getLogger(__name__)

_SHIFT_TAB = Key.shift(Key.tab)

_segmenter = get_segmenter()


@dataclass(frozen=True)
class MultiSelectState:
    """Render state published after every event."""

    selected: tuple[Item, ...]
    selectable: tuple[Item, ...]
    pending_text: str
    highlight_index: int
    panel_open: bool
    focused_chip: str | None
    active_option: int

    @property
    def highlighted(self) -> Item | None:
        if self.highlight_index == -1:
            return None
        return self.selected[self.highlight_index]

    @property
    def active_item(self) -> Item | None:
        if not self.selectable:
            return None
        return self.selectable[self.active_option]

    @property
    def selected_values(self) -> list[str]:
        return [item.value for item in self.selected]


class MultiSelectController:
    """State machine behind a single multi-select widget."""

    def __init__(self, catalog: Catalog, preset: Iterable[str] = ()) -> None:
        self._catalog = catalog
        self._store = SelectionStore(catalog, catalog.resolve(preset))
        self._pending_text = ""
        self._highlighted: str | None = None
        self._panel_open = False
        self._focused_chip: str | None = None
        self._active_option = 0
        self._state = self._snapshot()

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def state(self) -> MultiSelectState:
        return self._state

    def handle(self, event: Event) -> MultiSelectState:
        """Apply *event* and return the resulting state."""
        if isinstance(event, Focus):
            self._focus_input()
        elif isinstance(event, Blur):
            self._panel_open = False
        elif isinstance(event, TextChange):
            self._pending_text = event.text
        elif isinstance(event, KeyPress):
            self._handle_key(event.key)
        elif isinstance(event, PointerSelect):
            self._add(event.item)
        elif isinstance(event, PointerRemove):
            self._remove(event.item)
        elif isinstance(event, FocusChip):
            self._focus_chip(event.item.value)
        elif isinstance(event, ClearAll):
            if self._store.clear():
                self._highlighted = None
            self._focus_input()

        self._state = self._snapshot()
        logger.debug(
            "%r -> selected=%s text=%r highlight=%d open=%s chip=%s option=%d",
            event,
            self._state.selected_values,
            self._state.pending_text,
            self._state.highlight_index,
            self._state.panel_open,
            self._state.focused_chip,
            self._state.active_option,
        )
        return self._state

    # -- keys ---------------------------------------------------------------

    def _handle_key(self, key: str) -> None:
        if key == Key.backspace:
            self._backspace()
        elif key == Key.escape:
            self._escape()
        elif self._focused_chip is not None:
            self._handle_chip_key(key)
        elif not self._panel_open:
            return
        elif key == Key.enter:
            options = selectable_items(self._catalog, self._store.items)
            if options:
                self._add(options[self._clamped_option(len(options))])
        elif key == Key.up:
            self._active_option = max(0, self._active_option - 1)
        elif key == Key.down:
            options = selectable_items(self._catalog, self._store.items)
            self._active_option = self._clamped_option(len(options), self._active_option + 1)
        elif key == _SHIFT_TAB:
            if len(self._store):
                self._focus_chip(self._store.items[-1].value)
        elif key == Key.tab:
            self._panel_open = False

    def _handle_chip_key(self, key: str) -> None:
        chip = self._focused_chip
        index = self._store.index_of(chip) if chip is not None else -1
        if index == -1:
            self._focused_chip = None
            return

        if key == Key.enter:
            self._remove(self._store.items[index])
        elif key == Key.tab:
            if index + 1 < len(self._store):
                self._focused_chip = self._store.items[index + 1].value
            else:
                self._focus_input()
        elif key == _SHIFT_TAB and index > 0:
            self._focused_chip = self._store.items[index - 1].value

    def _backspace(self) -> None:
        if self._pending_text:
            graphemes = _segmenter.segment(self._pending_text)
            self._pending_text = "".join(graphemes[:-1])
            return

        if self._highlighted is not None:
            item = self._catalog.get(self._highlighted)
            self._highlighted = None
            if item is not None:
                self._remove(item)
        elif len(self._store):
            self._highlighted = self._store.items[-1].value

    def _escape(self) -> None:
        if self._highlighted is not None:
            self._highlighted = None
        else:
            self._panel_open = False
            self._focused_chip = None

    # -- transitions --------------------------------------------------------

    def _add(self, item: Item) -> None:
        if not self._store.add(item):
            return
        self._pending_text = ""
        self._highlighted = None

    def _remove(self, item: Item) -> None:
        if self._store.remove(item):
            self._highlighted = None
        self._focus_input()

    def _focus_input(self) -> None:
        if not self._panel_open:
            self._active_option = 0
        self._panel_open = True
        self._focused_chip = None

    def _focus_chip(self, value: str) -> None:
        if not self._store.contains(value):
            return
        self._focused_chip = value
        self._panel_open = False

    def _clamped_option(self, count: int, index: int | None = None) -> int:
        if count == 0:
            return 0
        wanted = self._active_option if index is None else index
        return max(0, min(wanted, count - 1))

    def _snapshot(self) -> MultiSelectState:
        selected = self._store.items
        selectable = selectable_items(self._catalog, selected)
        self._active_option = self._clamped_option(len(selectable))
        highlight_index = (
            self._store.index_of(self._highlighted)
            if self._highlighted is not None
            else -1
        )
        return MultiSelectState(
            selected=selected,
            selectable=selectable,
            pending_text=self._pending_text,
            highlight_index=highlight_index,
            panel_open=self._panel_open,
            focused_chip=self._focused_chip,
            active_option=self._active_option,
        )
