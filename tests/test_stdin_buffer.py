"""Tests for chipselect.stdin_buffer.StdinBuffer."""

from __future__ import annotations

import asyncio

import pytest

from chipselect.stdin_buffer import (
    BRACKETED_PASTE_END,
    BRACKETED_PASTE_START,
    ESC,
    StdinBuffer,
    _extract_complete_sequences,
    _is_complete_sequence,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class Collector:
    """Collects emitted data/paste events for assertions."""

    def __init__(self) -> None:
        self.data: list[str] = []
        self.pastes: list[str] = []

    def on_data(self, d: str) -> None:
        self.data.append(d)

    def on_paste(self, d: str) -> None:
        self.pastes.append(d)


def make_buffer(timeout: float = 0.01) -> tuple[StdinBuffer, Collector]:
    buf = StdinBuffer(timeout=timeout)
    col = Collector()
    buf.on_data(col.on_data)
    buf.on_paste(col.on_paste)
    return buf, col


# ---------------------------------------------------------------------------
# _is_complete_sequence
# ---------------------------------------------------------------------------


class TestIsCompleteSequence:
    def test_non_escape(self) -> None:
        assert _is_complete_sequence("a") == "not-escape"

    def test_lone_esc_is_incomplete(self) -> None:
        assert _is_complete_sequence(ESC) == "incomplete"

    def test_meta_key_is_complete(self) -> None:
        assert _is_complete_sequence(f"{ESC}\x7f") == "complete"
        assert _is_complete_sequence(f"{ESC}b") == "complete"

    def test_csi(self) -> None:
        assert _is_complete_sequence(f"{ESC}[") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[1;5") == "incomplete"
        assert _is_complete_sequence(f"{ESC}[1;5A") == "complete"
        assert _is_complete_sequence(f"{ESC}[Z") == "complete"
        assert _is_complete_sequence(f"{ESC}[99;5u") == "complete"

    def test_osc(self) -> None:
        assert _is_complete_sequence(f"{ESC}]0;title") == "incomplete"
        assert _is_complete_sequence(f"{ESC}]0;title\x07") == "complete"
        assert _is_complete_sequence(f"{ESC}]0;title{ESC}\\") == "complete"

    def test_ss3(self) -> None:
        assert _is_complete_sequence(f"{ESC}O") == "incomplete"
        assert _is_complete_sequence(f"{ESC}OA") == "complete"


class TestExtractCompleteSequences:
    def test_mixed_input(self) -> None:
        sequences, rest = _extract_complete_sequences(f"a{ESC}[Ab")
        assert sequences == ["a", f"{ESC}[A", "b"]
        assert rest == ""

    def test_trailing_partial_sequence(self) -> None:
        sequences, rest = _extract_complete_sequences(f"x{ESC}[1;")
        assert sequences == ["x"]
        assert rest == f"{ESC}[1;"


# ---------------------------------------------------------------------------
# process() without an event loop
# ---------------------------------------------------------------------------


class TestProcess:
    def test_plain_characters_emitted_one_by_one(self) -> None:
        buf, col = make_buffer()
        buf.process("rem")
        assert col.data == ["r", "e", "m"]

    def test_backspace_burst_is_split(self) -> None:
        buf, col = make_buffer()
        buf.process("\x7f\x7f")
        assert col.data == ["\x7f", "\x7f"]

    def test_escape_sequences_kept_whole(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{ESC}[Z{ESC}[B\r")
        assert col.data == [f"{ESC}[Z", f"{ESC}[B", "\r"]

    def test_lone_escape_flushed_without_loop(self) -> None:
        buf, col = make_buffer()
        buf.process(ESC)
        assert col.data == [ESC]
        assert buf.get_buffer() == ""


class TestBracketedPaste:
    def test_paste_emitted_separately(self) -> None:
        buf, col = make_buffer()
        buf.process(f"x{BRACKETED_PASTE_START}astro{BRACKETED_PASTE_END}y")
        assert col.data == ["x", "y"]
        assert col.pastes == ["astro"]

    def test_paste_across_chunks(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}next")
        assert col.pastes == []
        buf.process(f".js{BRACKETED_PASTE_END}")
        assert col.pastes == ["next.js"]

    def test_paste_content_is_not_parsed_as_keys(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{BRACKETED_PASTE_START}\x7f\x1b[A{BRACKETED_PASTE_END}")
        assert col.data == []
        assert col.pastes == ["\x7f\x1b[A"]


class TestFlushAndClear:
    def test_flush_empty(self) -> None:
        buf = StdinBuffer()
        assert buf.flush() == []

    @pytest.mark.asyncio
    async def test_flush_returns_partial(self) -> None:
        buf, col = make_buffer()
        buf.process(f"{ESC}[")
        assert buf.flush() == [f"{ESC}["]
        assert buf.get_buffer() == ""
        assert col.data == []

    @pytest.mark.asyncio
    async def test_clear_discards_partial(self) -> None:
        buf, col = make_buffer()
        buf.process(ESC)
        buf.clear()
        assert buf.get_buffer() == ""
        await asyncio.sleep(0.03)
        assert col.data == []


# ---------------------------------------------------------------------------
# Timeout flush behaviour (requires event loop)
# ---------------------------------------------------------------------------


class TestTimeoutFlush:
    @pytest.mark.asyncio
    async def test_split_sequence_is_joined(self) -> None:
        buf, col = make_buffer()
        buf.process(ESC)
        assert col.data == []
        buf.process("[Z")
        assert col.data == [f"{ESC}[Z"]

    @pytest.mark.asyncio
    async def test_lone_escape_flushed_on_timeout(self) -> None:
        buf, col = make_buffer(timeout=0.02)
        buf.process(ESC)
        assert col.data == []
        await asyncio.sleep(0.05)
        assert col.data == [ESC]

    @pytest.mark.asyncio
    async def test_timeout_cancelled_on_new_data(self) -> None:
        buf, col = make_buffer(timeout=0.05)
        buf.process(ESC)
        buf.process("[A")
        await asyncio.sleep(0.08)
        assert col.data == [f"{ESC}[A"]
