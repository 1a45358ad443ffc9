"""chipselect: multi-select input with removable chips."""

# Catalog
from chipselect.catalog import FRAMEWORKS, FRAMEWORKS_PRESET, Catalog, CatalogError, Item, load_catalog

# Components
from chipselect.components import DefaultMultiSelectTheme, Input, MultiSelect, MultiSelectTheme

# State machine
from chipselect.controller import MultiSelectController, MultiSelectState

# Inbound events
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

# Keybindings
from chipselect.keybindings import (
    DEFAULT_KEYBINDINGS,
    KeybindingsManager,
    MultiSelectAction,
    get_keybindings,
    set_keybindings,
)

# Keyboard input handling
from chipselect.keys import Key, KeyId, matches_key, parse_key

# Selection
from chipselect.selection import SelectionStore, selectable_items

__all__ = [
    # Catalog
    "Catalog",
    "CatalogError",
    "FRAMEWORKS",
    "FRAMEWORKS_PRESET",
    "Item",
    "load_catalog",
    # Components
    "DefaultMultiSelectTheme",
    "Input",
    "MultiSelect",
    "MultiSelectTheme",
    # State machine
    "MultiSelectController",
    "MultiSelectState",
    # Events
    "Blur",
    "ClearAll",
    "Event",
    "Focus",
    "FocusChip",
    "KeyPress",
    "PointerRemove",
    "PointerSelect",
    "TextChange",
    # Keybindings
    "DEFAULT_KEYBINDINGS",
    "KeybindingsManager",
    "MultiSelectAction",
    "get_keybindings",
    "set_keybindings",
    # Keys
    "Key",
    "KeyId",
    "matches_key",
    "parse_key",
    # Selection
    "SelectionStore",
    "selectable_items",
]
