"""Terminal I/O for the inline multi-select.

The widget is drawn below the shell prompt instead of on an alternate
screen, so the terminal only needs raw input, bracketed paste, cursor
visibility and relative cursor moves. ``Terminal`` is the surface
``MultiSelectApp`` draws through; ``ProcessTerminal`` implements it on the
process's stdin and stdout.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
import re
import signal
import sys
import termios
import tty
from typing import Callable, Protocol, TextIO

from chipselect.stdin_buffer import BRACKETED_PASTE_END, BRACKETED_PASTE_START, StdinBuffer

logger = logging.getLogger(__name__)

_ENTER_MODES = "\x1b[?2004h\x1b[?u"  # bracketed paste on, query kitty keyboard flags
_LEAVE_MODES = "\x1b[?2004l"
_KITTY_PUSH = "\x1b[>1u"
_KITTY_POP = "\x1b[<u"
_KITTY_REPLY_RE = re.compile(r"^\x1b\[\?\d+u$")

# Sent to the widget when stdin closes so the exit binding ends the session
_EOF_KEY = "\x04"

_DEFAULT_COLUMNS = 80


class Terminal(Protocol):
    """What the inline app needs from a terminal."""

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None: ...

    def stop(self) -> None: ...

    def write(self, data: str) -> None: ...

    @property
    def columns(self) -> int: ...

    def move_by(self, lines: int) -> None: ...

    def hide_cursor(self) -> None: ...

    def show_cursor(self) -> None: ...

    def clear_from_cursor(self) -> None: ...


class ProcessTerminal:
    """Raw-mode terminal on stdin/stdout, read from the running event loop.

    Input is decoded incrementally, so a multi-byte character split across
    two reads still arrives whole, then passed through a ``StdinBuffer`` that
    reassembles escape sequences. A kitty keyboard reply to the start-up
    query turns on disambiguated keys (``shift+tab``, ``alt+backspace``) and
    is not forwarded as input.
    """

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = StdinBuffer()
        self._saved_mode: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._kitty = False
        self._on_input: Callable[[str], None] | None = None
        self._on_resize: Callable[[], None] | None = None

    @property
    def columns(self) -> int:
        try:
            width = os.get_terminal_size(self._stdout.fileno()).columns
        except (ValueError, OSError):
            return _DEFAULT_COLUMNS
        return width or _DEFAULT_COLUMNS

    def start(
        self,
        on_input: Callable[[str], None],
        on_resize: Callable[[], None],
    ) -> None:
        """Switch stdin to raw mode and start delivering keys to *on_input*.

        Must be called with an asyncio event loop running.
        """
        self._on_input = on_input
        self._on_resize = on_resize

        fd = self._stdin.fileno()
        self._saved_mode = termios.tcgetattr(fd)
        tty.setraw(fd)

        self._buffer.on_data(self._handle_sequence)
        self._buffer.on_paste(
            lambda text: self._deliver(BRACKETED_PASTE_START + text + BRACKETED_PASTE_END)
        )

        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(fd, self._read)
        self._loop.add_signal_handler(signal.SIGWINCH, self._resized)

        self.write(_ENTER_MODES)
        logger.debug("Terminal started on fd %d", fd)

    def stop(self) -> None:
        """Undo everything ``start`` changed. Safe to call more than once."""
        if self._saved_mode is None:
            return

        self.write((_KITTY_POP if self._kitty else "") + _LEAVE_MODES)
        self._kitty = False

        fd = self._stdin.fileno()
        if self._loop is not None and not self._loop.is_closed():
            self._loop.remove_reader(fd)
            self._loop.remove_signal_handler(signal.SIGWINCH)
        self._loop = None
        self._buffer.clear()

        termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_mode)
        self._saved_mode = None
        self._on_input = None
        self._on_resize = None
        logger.debug("Terminal restored")

    def write(self, data: str) -> None:
        self._stdout.write(data)
        self._stdout.flush()

    def move_by(self, lines: int) -> None:
        """Move the cursor *lines* rows down, or up when negative."""
        if lines:
            self.write(f"\x1b[{abs(lines)}{'B' if lines > 0 else 'A'}")

    def hide_cursor(self) -> None:
        self.write("\x1b[?25l")

    def show_cursor(self) -> None:
        self.write("\x1b[?25h")

    def clear_from_cursor(self) -> None:
        self.write("\x1b[0J")

    # -- input --------------------------------------------------------------

    def _read(self) -> None:
        try:
            raw = os.read(self._stdin.fileno(), 1024)
        except BlockingIOError:
            return
        except OSError:
            logger.exception("Reading stdin failed")
            raw = b""

        if not raw:
            logger.debug("stdin closed")
            if self._loop is not None:
                self._loop.remove_reader(self._stdin.fileno())
            self._deliver(_EOF_KEY)
            return

        text = self._decoder.decode(raw)
        if text:
            self._buffer.process(text)

    def _handle_sequence(self, data: str) -> None:
        if not self._kitty and _KITTY_REPLY_RE.match(data):
            self._kitty = True
            self.write(_KITTY_PUSH)
            logger.debug("Kitty keyboard protocol enabled")
            return
        self._deliver(data)

    def _deliver(self, data: str) -> None:
        if self._on_input is not None:
            self._on_input(data)

    def _resized(self) -> None:
        if self._on_resize is not None:
            self._on_resize()
