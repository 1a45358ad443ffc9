"""Input component - single-line query field with horizontal scrolling."""

from __future__ import annotations

from typing import Callable

from chipselect.keybindings import KeybindingsManager, get_keybindings
from chipselect.utils import (
    get_segmenter,
    is_punctuation_char,
    is_whitespace_char,
    truncate_to_width,
    visible_width,
)

_segmenter = get_segmenter()

_PASTE_START = "\x1b[200~"
_PASTE_END = "\x1b[201~"


class Input:
    """Single-line text field editing the pending query text.

    Chip and suggestion keys are routed by the owning widget; this component
    only edits text and moves the cursor.
    """

    def __init__(
        self,
        placeholder: str = "",
        keybindings: KeybindingsManager | None = None,
    ) -> None:
        self._value: str = ""
        self._cursor: int = 0
        self._keybindings = keybindings

        self.placeholder = placeholder
        self.placeholder_style: Callable[[str], str] = lambda text: text

        # Focusable interface
        self.focused: bool = False

        # Bracketed paste mode
        self._paste_buffer: str = ""
        self._is_in_paste: bool = False

    def get_value(self) -> str:
        return self._value

    def set_value(self, value: str) -> None:
        self._value = value
        self._cursor = min(self._cursor, len(value))

    @property
    def cursor(self) -> int:
        return self._cursor

    def handle_input(self, data: str) -> None:
        # Handle bracketed paste
        if _PASTE_START in data:
            self._is_in_paste = True
            self._paste_buffer = ""
            data = data.replace(_PASTE_START, "")

        if self._is_in_paste:
            self._paste_buffer += data
            end_index = self._paste_buffer.find(_PASTE_END)
            if end_index != -1:
                paste_content = self._paste_buffer[:end_index]
                self._handle_paste(paste_content)
                self._is_in_paste = False
                remaining = self._paste_buffer[end_index + len(_PASTE_END):]
                self._paste_buffer = ""
                if remaining:
                    self.handle_input(remaining)
            return

        kb = self._keybindings or get_keybindings()

        if kb.matches(data, "deleteCharBackward"):
            self._handle_backspace()
            return

        if kb.matches(data, "deleteCharForward"):
            self._handle_forward_delete()
            return

        if kb.matches(data, "deleteWordBackward"):
            self._delete_word_backwards()
            return

        if kb.matches(data, "deleteToLineStart"):
            self._value = self._value[self._cursor :]
            self._cursor = 0
            return

        if kb.matches(data, "deleteToLineEnd"):
            self._value = self._value[: self._cursor]
            return

        if kb.matches(data, "cursorLeft"):
            if self._cursor > 0:
                graphemes = _segmenter.segment(self._value[: self._cursor])
                self._cursor -= len(graphemes[-1]) if graphemes else 1
            return

        if kb.matches(data, "cursorRight"):
            if self._cursor < len(self._value):
                graphemes = _segmenter.segment(self._value[self._cursor :])
                self._cursor += len(graphemes[0]) if graphemes else 1
            return

        if kb.matches(data, "cursorLineStart"):
            self._cursor = 0
            return

        if kb.matches(data, "cursorLineEnd"):
            self._cursor = len(self._value)
            return

        # Regular character input
        has_control = any(
            ord(ch) < 32 or ord(ch) == 0x7F or (0x80 <= ord(ch) <= 0x9F)
            for ch in data
        )
        if not has_control:
            self._insert_text(data)

    def _insert_text(self, text: str) -> None:
        self._value = self._value[: self._cursor] + text + self._value[self._cursor :]
        self._cursor += len(text)

    def _handle_backspace(self) -> None:
        if self._cursor > 0:
            graphemes = _segmenter.segment(self._value[: self._cursor])
            gl = len(graphemes[-1]) if graphemes else 1
            self._value = self._value[: self._cursor - gl] + self._value[self._cursor :]
            self._cursor -= gl

    def _handle_forward_delete(self) -> None:
        if self._cursor < len(self._value):
            graphemes = _segmenter.segment(self._value[self._cursor :])
            gl = len(graphemes[0]) if graphemes else 1
            self._value = self._value[: self._cursor] + self._value[self._cursor + gl :]

    def _delete_word_backwards(self) -> None:
        if self._cursor == 0:
            return
        graphemes = _segmenter.segment(self._value[: self._cursor])
        delete_from = self._cursor

        # Skip trailing whitespace
        while graphemes and is_whitespace_char(graphemes[-1]):
            delete_from -= len(graphemes.pop())

        if graphemes:
            if is_punctuation_char(graphemes[-1]):
                while graphemes and is_punctuation_char(graphemes[-1]):
                    delete_from -= len(graphemes.pop())
            else:
                while (
                    graphemes
                    and not is_whitespace_char(graphemes[-1])
                    and not is_punctuation_char(graphemes[-1])
                ):
                    delete_from -= len(graphemes.pop())

        self._value = self._value[:delete_from] + self._value[self._cursor :]
        self._cursor = delete_from

    def _handle_paste(self, pasted_text: str) -> None:
        clean_text = pasted_text.replace("\r\n", "").replace("\r", "").replace("\n", "")
        self._insert_text(clean_text)

    def render(self, width: int) -> list[str]:
        prompt = "> "
        available_width = width - len(prompt)

        if available_width <= 0:
            return [prompt]

        if not self._value and not self.focused and self.placeholder:
            text = truncate_to_width(self.placeholder, available_width, "")
            return [prompt + self.placeholder_style(text)]

        visible_text = self._value
        cursor_display = self._cursor

        if visible_width(self._value) >= available_width:
            scroll_width = (
                available_width - 1
                if self._cursor == len(self._value)
                else available_width
            )
            half_width = scroll_width // 2

            if self._cursor < half_width:
                visible_text = self._value[:scroll_width]
            elif self._cursor > len(self._value) - half_width:
                start = max(0, len(self._value) - scroll_width)
                visible_text = self._value[start:]
                cursor_display = self._cursor - start
            else:
                start = self._cursor - half_width
                visible_text = self._value[start : start + scroll_width]
                cursor_display = half_width

        if not self.focused:
            return [prompt + visible_text]

        # Build line with a reverse-video cursor
        after_cursor_text = visible_text[cursor_display:]
        graphemes = _segmenter.segment(after_cursor_text) if after_cursor_text else []
        at_cursor = graphemes[0] if graphemes else " "

        before_cursor = visible_text[:cursor_display]
        after_cursor = visible_text[cursor_display + len(at_cursor) :]
        text_with_cursor = f"{before_cursor}\x1b[7m{at_cursor}\x1b[27m{after_cursor}"

        padding = " " * max(0, available_width - visible_width(text_with_cursor))
        return [prompt + text_with_cursor + padding]
