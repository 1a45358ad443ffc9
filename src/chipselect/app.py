"""Inline terminal app driving a single ``MultiSelect`` widget.

The widget is drawn in place below the cursor. Each frame moves the cursor
back to the first line of the previous frame, clears to the end of the
screen and writes the new lines. Renders requested while handling one
input event are coalesced into a single frame on the next loop tick.
"""

from __future__ import annotations

import asyncio
import logging

from chipselect.components.multi_select import MultiSelect
from chipselect.controller import MultiSelectState
from chipselect.terminal import Terminal

logger = logging.getLogger(__name__)


class MultiSelectApp:
    """Runs a ``MultiSelect`` against a ``Terminal`` until the user exits."""

    def __init__(
        self,
        terminal: Terminal,
        widget: MultiSelect,
        autofocus: bool = True,
    ) -> None:
        self.terminal = terminal
        self._widget = widget
        self._autofocus = autofocus

        self._previous_line_count: int = 0
        self._render_requested: bool = False
        self._stopped: bool = True
        self._done: asyncio.Event | None = None

        widget.on_change = lambda _state: self.request_render()
        widget.on_exit = self.stop

    @property
    def widget(self) -> MultiSelect:
        return self._widget

    async def run(self) -> MultiSelectState:
        """Start the app and wait until the exit binding stops it."""
        self._done = asyncio.Event()
        self.start()
        try:
            await self._done.wait()
        finally:
            self.stop()
        return self._widget.state

    def start(self) -> None:
        self._stopped = False
        self.terminal.start(self.handle_input, self.request_render)
        self.terminal.hide_cursor()
        if self._autofocus:
            self._widget.focus()
        self.request_render()
        logger.debug("App started (%d columns)", self.terminal.columns)

    def stop(self) -> None:
        """Draw a final frame with the panel closed and restore the terminal."""
        if self._stopped:
            return
        self._widget.blur()
        self.do_render()
        self._stopped = True

        self.terminal.write("\r\n")
        self.terminal.show_cursor()
        self.terminal.stop()
        if self._done is not None:
            self._done.set()
        logger.debug("App stopped with selection %s", self._widget.state.selected_values)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> None:
        if self._stopped:
            return
        self._widget.handle_input(data)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def request_render(self) -> None:
        """Schedule a render on the next event-loop tick."""
        if self._render_requested:
            return
        self._render_requested = True
        try:
            loop = asyncio.get_running_loop()
            loop.call_soon(self._do_render_tick)
        except RuntimeError:
            # No running event loop -- render synchronously
            self._do_render_tick()

    def _do_render_tick(self) -> None:
        self._render_requested = False
        if self._stopped:
            return
        self.do_render()

    def do_render(self) -> None:
        lines = self._widget.render(self.terminal.columns)

        # The cursor rests on the last line of the previous frame
        if self._previous_line_count > 1:
            self.terminal.move_by(-(self._previous_line_count - 1))
        self.terminal.write("\r")
        self.terminal.clear_from_cursor()
        self.terminal.write("\r\n".join(lines))

        self._previous_line_count = len(lines)
