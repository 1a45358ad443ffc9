"""MultiSelect component: chips, a query field and a suggestion panel."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Protocol

from chipselect.catalog import Item
from chipselect.components.input import Input
from chipselect.controller import MultiSelectController, MultiSelectState
from chipselect.events import Blur, Event, Focus, KeyPress, PointerRemove, PointerSelect, TextChange
from chipselect.keybindings import KeybindingsManager, MultiSelectAction, get_keybindings
from chipselect.keys import Key, is_key_release
from chipselect.utils import truncate_to_width, visible_width


REMOVE_MARK = "×"

# Widget actions forwarded to the controller as key presses
_ACTION_KEYS: list[tuple[MultiSelectAction, str]] = [
    ("cancel", Key.escape),
    ("confirm", Key.enter),
    ("optionUp", Key.up),
    ("optionDown", Key.down),
    ("focusPrevious", Key.shift(Key.tab)),
    ("focusNext", Key.tab),
]


def _normalize_to_single_line(text: str) -> str:
    return re.sub(r"[\r\n]+", " ", text).strip()


class MultiSelectTheme(Protocol):
    chip: Callable[[str], str]
    highlighted_chip: Callable[[str], str]
    focused_chip: Callable[[str], str]
    placeholder: Callable[[str], str]
    selected_text: Callable[[str], str]
    description: Callable[[str], str]
    scroll_info: Callable[[str], str]


def _sgr(open_code: str, close_code: str) -> Callable[[str], str]:
    return lambda text: f"\x1b[{open_code}m{text}\x1b[{close_code}m"


@dataclass
class DefaultMultiSelectTheme:
    """ANSI styling used by the command-line app."""

    chip: Callable[[str], str] = _sgr("100", "49")
    highlighted_chip: Callable[[str], str] = _sgr("7", "27")
    focused_chip: Callable[[str], str] = _sgr("4;100", "24;49")
    placeholder: Callable[[str], str] = _sgr("2", "22")
    selected_text: Callable[[str], str] = _sgr("36", "39")
    description: Callable[[str], str] = _sgr("2", "22")
    scroll_info: Callable[[str], str] = _sgr("2", "22")


class MultiSelect:
    """Multi-select widget rendering controller state as terminal lines.

    Raw terminal input is translated into controller events: chip and
    suggestion keys become ``KeyPress`` events, everything else edits the
    query field and is reported as ``TextChange``.
    """

    def __init__(
        self,
        controller: MultiSelectController,
        theme: MultiSelectTheme,
        max_visible: int = 5,
        placeholder: str = "Select items...",
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self._controller = controller
        self._theme = theme
        self._max_visible = max(1, max_visible)
        self._keybindings = keybindings
        self._input = Input(placeholder=placeholder, keybindings=keybindings)
        self._input.placeholder_style = theme.placeholder

        self.on_change: Callable[[MultiSelectState], None] | None = None
        self.on_exit: Callable[[], None] | None = None

    @property
    def state(self) -> MultiSelectState:
        return self._controller.state

    @property
    def controller(self) -> MultiSelectController:
        return self._controller

    # -- events -------------------------------------------------------------

    def dispatch(self, event: Event) -> MultiSelectState:
        previous = self._controller.state
        state = self._controller.handle(event)
        if self._input.get_value() != state.pending_text:
            self._input.set_value(state.pending_text)
        if state != previous and self.on_change:
            self.on_change(state)
        return state

    def focus(self) -> MultiSelectState:
        return self.dispatch(Focus())

    def blur(self) -> MultiSelectState:
        return self.dispatch(Blur())

    def select(self, item: Item) -> MultiSelectState:
        return self.dispatch(PointerSelect(item))

    def remove(self, item: Item) -> MultiSelectState:
        return self.dispatch(PointerRemove(item))

    def handle_input(self, data: str) -> None:
        if is_key_release(data):
            return

        kb = self._keybindings or get_keybindings()
        state = self._controller.state

        if kb.matches(data, "exit"):
            if self.on_exit:
                self.on_exit()
            return

        # Focus has left the widget: only focus keys bring it back
        if not state.panel_open and state.focused_chip is None:
            if kb.matches(data, "cancel"):
                if self.on_exit:
                    self.on_exit()
            elif any(kb.matches(data, a) for a in ("confirm", "focusNext", "focusPrevious")):
                self.focus()
            return

        if kb.matches(data, "removeChip") and not state.pending_text:
            self.dispatch(KeyPress(Key.backspace))
            return

        for action, key in _ACTION_KEYS:
            if kb.matches(data, action):
                self.dispatch(KeyPress(key))
                return

        if state.focused_chip is not None:
            return

        before = self._input.get_value()
        self._input.handle_input(data)
        after = self._input.get_value()
        if after != before:
            self.dispatch(TextChange(after))

    # -- rendering ----------------------------------------------------------

    def render(self, width: int) -> list[str]:
        state = self._controller.state
        lines = self._render_chips(state, width)

        self._input.focused = state.panel_open
        lines.extend(self._input.render(width))

        if state.panel_open and state.selectable:
            lines.extend(self._render_options(state, width))

        return lines

    def _render_chips(self, state: MultiSelectState, width: int) -> list[str]:
        lines: list[str] = []
        current = ""
        current_width = 0

        for index, item in enumerate(state.selected):
            text = truncate_to_width(f" {item.label} {REMOVE_MARK} ", max(1, width), "…")
            if index == state.highlight_index:
                token = self._theme.highlighted_chip(text)
            elif item.value == state.focused_chip:
                token = self._theme.focused_chip(text)
            else:
                token = self._theme.chip(text)

            token_width = visible_width(text)
            gap = 1 if current else 0
            if current and current_width + gap + token_width > width:
                lines.append(current)
                current, current_width, gap = "", 0, 0
            current += " " * gap + token
            current_width += gap + token_width

        if current:
            lines.append(current)
        return lines

    def _render_options(self, state: MultiSelectState, width: int) -> list[str]:
        lines: list[str] = []
        items = state.selectable
        active = state.active_option

        # Calculate visible range with scrolling
        start_index = max(
            0,
            min(active - self._max_visible // 2, len(items) - self._max_visible),
        )
        end_index = min(start_index + self._max_visible, len(items))

        for i in range(start_index, end_index):
            item = items[i]
            is_active = i == active
            prefix = "→ " if is_active else "  "
            desc_single = (
                _normalize_to_single_line(item.description) if item.description else None
            )

            if desc_single and width > 40:
                max_value_width = min(30, width - len(prefix) - 4)
                label = truncate_to_width(item.label, max_value_width, "")
                spacing = " " * max(1, 32 - visible_width(label))
                remaining_width = width - len(prefix) - visible_width(label) - len(spacing) - 2
                if remaining_width > 10:
                    desc = truncate_to_width(desc_single, remaining_width, "")
                    if is_active:
                        lines.append(self._theme.selected_text(f"{prefix}{label}{spacing}{desc}"))
                    else:
                        lines.append(prefix + label + self._theme.description(spacing + desc))
                    continue

            label = truncate_to_width(item.label, width - len(prefix) - 2, "")
            line = prefix + label
            lines.append(self._theme.selected_text(line) if is_active else line)

        # Add scroll indicators if needed
        if start_index > 0 or end_index < len(items):
            scroll_text = f"  ({active + 1}/{len(items)})"
            lines.append(self._theme.scroll_info(truncate_to_width(scroll_text, width - 2, "")))

        return lines
