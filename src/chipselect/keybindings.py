"""Multi-select keybindings manager."""

from __future__ import annotations

from typing import Literal

from chipselect.keys import KeyId, matches_key

MultiSelectAction = Literal[
    # Chips and suggestions
    "removeChip",
    "cancel",
    "confirm",
    "optionUp",
    "optionDown",
    "focusPrevious",
    "focusNext",
    "exit",
    # Cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
]

KeybindingsConfig = dict[MultiSelectAction, KeyId | list[KeyId]]

DEFAULT_KEYBINDINGS: dict[MultiSelectAction, KeyId | list[KeyId]] = {
    # Chips and suggestions
    "removeChip": "backspace",
    "cancel": "escape",
    "confirm": "enter",
    "optionUp": ["up", "ctrl+p"],
    "optionDown": ["down", "ctrl+n"],
    "focusPrevious": "shift+tab",
    "focusNext": "tab",
    "exit": ["ctrl+c", "ctrl+d"],
    # Cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": "delete",
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
}


class KeybindingsManager:
    """Maps actions to the keys bound to them."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._action_to_keys: dict[MultiSelectAction, list[KeyId]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._action_to_keys.clear()

        # Start with defaults
        for action, keys in DEFAULT_KEYBINDINGS.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

        # Override with user config
        for action, keys in config.items():
            key_array = keys if isinstance(keys, list) else [keys]
            self._action_to_keys[action] = list(key_array)

    def matches(self, data: str, action: MultiSelectAction) -> bool:
        """Check if input matches a specific action."""
        keys = self._action_to_keys.get(action)
        if not keys:
            return False
        for key in keys:
            if matches_key(data, key):
                return True
        return False

    def get_keys(self, action: MultiSelectAction) -> list[KeyId]:
        """Get keys bound to an action."""
        return self._action_to_keys.get(action, [])

    def set_config(self, config: KeybindingsConfig) -> None:
        """Update configuration."""
        self._build_maps(config)


_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
