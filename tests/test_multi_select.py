"""Tests for the MultiSelect component."""

from __future__ import annotations

from chipselect.catalog import FRAMEWORKS, Catalog, Item
from chipselect.components.multi_select import MultiSelect
from chipselect.controller import MultiSelectController, MultiSelectState
from chipselect.keybindings import KeybindingsManager

# Raw escape codes for key sequences
KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_ENTER = "\r"
KEY_ESCAPE = "\x1b"
KEY_BACKSPACE = "\x7f"
KEY_TAB = "\t"
KEY_SHIFT_TAB = "\x1b[Z"
CTRL_C = "\x03"


# ---------------------------------------------------------------------------
# A simple theme that marks chip states for testing
# ---------------------------------------------------------------------------


class _PlainTheme:
    """Theme that leaves text unstyled except for chip state markers."""

    @staticmethod
    def chip(text: str) -> str:
        return text

    @staticmethod
    def highlighted_chip(text: str) -> str:
        return f"[{text}]"

    @staticmethod
    def focused_chip(text: str) -> str:
        return f"<{text}>"

    @staticmethod
    def placeholder(text: str) -> str:
        return text

    @staticmethod
    def selected_text(text: str) -> str:
        return text

    @staticmethod
    def description(text: str) -> str:
        return text

    @staticmethod
    def scroll_info(text: str) -> str:
        return text


def _make_widget(
    *preset: str,
    catalog: Catalog = FRAMEWORKS,
    max_visible: int = 5,
    keybindings: KeybindingsManager | None = None,
) -> MultiSelect:
    controller = MultiSelectController(catalog, preset)
    return MultiSelect(
        controller,
        _PlainTheme(),
        max_visible=max_visible,
        placeholder="Select frameworks...",
        keybindings=keybindings,
    )


def _type(widget: MultiSelect, text: str) -> None:
    for ch in text:
        widget.handle_input(ch)


class TestMultiSelectRender:
    def test_unfocused_shows_chips_and_placeholder(self) -> None:
        widget = _make_widget("astro")
        assert widget.render(80) == [" Astro × ", "> Select frameworks..."]

    def test_focused_shows_suggestions(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        lines = widget.render(80)
        assert len(lines) == 8
        assert lines[0] == " Astro × "
        assert lines[1].startswith("> \x1b[7m \x1b[27m")
        assert lines[2:7] == [
            "→ Next.js",
            "  SvelteKit",
            "  Nuxt.js",
            "  Remix",
            "  WordPress",
        ]
        assert lines[7] == "  (1/7)"

    def test_suggestions_scroll_with_active_option(self) -> None:
        widget = _make_widget("astro", max_visible=3)
        widget.focus()
        for _ in range(5):
            widget.handle_input(KEY_DOWN)
        lines = widget.render(80)
        assert lines[2:5] == ["  WordPress", "→ Express.js", "  Nest.js"]
        assert lines[5] == "  (6/7)"

    def test_no_scroll_indicator_when_all_fit(self) -> None:
        widget = _make_widget("astro", max_visible=10)
        widget.focus()
        lines = widget.render(80)
        assert len(lines) == 2 + 7
        assert not any("/7)" in line for line in lines)

    def test_panel_hidden_when_nothing_selectable(self) -> None:
        catalog = Catalog([Item("a", "A")])
        widget = _make_widget("a", catalog=catalog)
        widget.focus()
        assert len(widget.render(80)) == 2

    def test_no_chip_line_when_selection_empty(self) -> None:
        widget = _make_widget()
        assert widget.render(80) == ["> Select frameworks..."]

    def test_chips_wrap_to_width(self) -> None:
        widget = _make_widget("next.js", "sveltekit", "nuxt.js")
        lines = widget.render(25)
        assert lines[0] == " Next.js ×   SvelteKit × "
        assert lines[1] == " Nuxt.js × "
        assert lines[2].startswith("> ")

    def test_highlighted_chip_is_marked(self) -> None:
        widget = _make_widget("astro", "remix")
        widget.focus()
        widget.handle_input(KEY_BACKSPACE)
        assert widget.render(80)[0] == " Astro ×  [ Remix × ]"

    def test_focused_chip_is_marked(self) -> None:
        widget = _make_widget("astro", "remix")
        widget.focus()
        widget.handle_input(KEY_SHIFT_TAB)
        lines = widget.render(80)
        assert lines[0] == " Astro ×  < Remix × >"
        assert len(lines) == 2

    def test_description_column(self) -> None:
        catalog = Catalog([Item("py", "Python", "A language")])
        widget = _make_widget(catalog=catalog)
        widget.focus()
        lines = widget.render(80)
        assert lines[-1] == "→ Python" + " " * 26 + "A language"

    def test_description_dropped_when_narrow(self) -> None:
        catalog = Catalog([Item("py", "Python", "A language")])
        widget = _make_widget(catalog=catalog)
        widget.focus()
        assert widget.render(30)[-1] == "→ Python"


class TestMultiSelectTyping:
    def test_typing_updates_pending_text(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        _type(widget, "rea")
        assert widget.state.pending_text == "rea"
        assert widget.render(80)[1].startswith("> rea")

    def test_typing_does_not_filter_suggestions(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        _type(widget, "rem")
        assert len(widget.state.selectable) == 7

    def test_backspace_edits_text_before_chips(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        _type(widget, "re")
        widget.handle_input(KEY_BACKSPACE)
        assert widget.state.pending_text == "r"
        assert widget.state.highlight_index == -1

    def test_paste_becomes_pending_text(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        widget.handle_input("\x1b[200~remix\x1b[201~")
        assert widget.state.pending_text == "remix"


class TestMultiSelectKeys:
    def test_backspace_arms_then_removes(self) -> None:
        widget = _make_widget("next.js", "sveltekit", "nuxt.js")
        widget.focus()
        widget.handle_input(KEY_BACKSPACE)
        assert widget.state.highlight_index == 2
        widget.handle_input(KEY_BACKSPACE)
        assert widget.state.selected_values == ["next.js", "sveltekit"]
        assert widget.state.highlight_index == -1

    def test_down_and_enter_add_option(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        widget.handle_input(KEY_DOWN)
        widget.handle_input(KEY_DOWN)
        widget.handle_input(KEY_UP)
        widget.handle_input(KEY_ENTER)
        assert widget.state.selected_values == ["astro", "sveltekit"]

    def test_enter_clears_typed_text(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        _type(widget, "re")
        widget.handle_input(KEY_ENTER)
        assert widget.state.pending_text == ""
        assert not widget.render(80)[1].startswith("> re")
        _type(widget, "x")
        assert widget.state.pending_text == "x"

    def test_escape_clears_highlight_then_blurs(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        widget.handle_input(KEY_BACKSPACE)
        widget.handle_input(KEY_ESCAPE)
        assert widget.state.highlight_index == -1
        assert widget.state.panel_open is True
        widget.handle_input(KEY_ESCAPE)
        assert widget.state.panel_open is False

    def test_chip_navigation_ignores_typing(self) -> None:
        widget = _make_widget("astro", "remix")
        widget.focus()
        widget.handle_input(KEY_SHIFT_TAB)
        widget.handle_input(KEY_SHIFT_TAB)
        assert widget.state.focused_chip == "astro"
        _type(widget, "x")
        assert widget.state.pending_text == ""
        widget.handle_input(KEY_ENTER)
        assert widget.state.selected_values == ["remix"]
        assert widget.state.panel_open is True

    def test_key_release_is_ignored(self) -> None:
        widget = _make_widget("astro")
        widget.focus()
        widget.handle_input("\x1b[127;1:3u")
        assert widget.state.highlight_index == -1

    def test_custom_confirm_binding(self) -> None:
        kb = KeybindingsManager({"confirm": "ctrl+o"})
        widget = _make_widget("astro", keybindings=kb)
        widget.focus()
        widget.handle_input(KEY_ENTER)
        assert widget.state.selected_values == ["astro"]
        widget.handle_input("\x0f")
        assert widget.state.selected_values == ["astro", "next.js"]


class TestMultiSelectBlurred:
    def test_printable_keys_ignored(self) -> None:
        widget = _make_widget("astro")
        _type(widget, "abc")
        assert widget.state.pending_text == ""
        assert widget.state.panel_open is False

    def test_enter_and_tab_refocus(self) -> None:
        for key in (KEY_ENTER, KEY_TAB, KEY_SHIFT_TAB):
            widget = _make_widget("astro")
            widget.handle_input(key)
            assert widget.state.panel_open is True
            assert widget.state.selected_values == ["astro"]

    def test_backspace_does_nothing(self) -> None:
        widget = _make_widget("astro")
        widget.handle_input(KEY_BACKSPACE)
        assert widget.state.highlight_index == -1

    def test_escape_exits(self) -> None:
        widget = _make_widget("astro")
        exits: list[bool] = []
        widget.on_exit = lambda: exits.append(True)
        widget.handle_input(KEY_ESCAPE)
        assert exits == [True]


class TestMultiSelectCallbacks:
    def test_on_change_fires_on_state_change(self) -> None:
        widget = _make_widget("astro")
        seen: list[MultiSelectState] = []
        widget.on_change = seen.append
        widget.focus()
        widget.focus()
        assert len(seen) == 1
        assert seen[0].panel_open is True

    def test_exit_key_calls_on_exit(self) -> None:
        widget = _make_widget("astro")
        exits: list[bool] = []
        widget.on_exit = lambda: exits.append(True)
        widget.focus()
        widget.handle_input(CTRL_C)
        assert exits == [True]

    def test_pointer_helpers(self) -> None:
        widget = _make_widget("astro")
        remix = FRAMEWORKS.get("remix")
        astro = FRAMEWORKS.get("astro")
        assert remix is not None and astro is not None
        widget.select(remix)
        assert widget.state.selected_values == ["astro", "remix"]
        state = widget.remove(astro)
        assert state.selected_values == ["remix"]
        assert state.panel_open is True
