"""Terminal components."""

from chipselect.components.input import Input
from chipselect.components.multi_select import (
    DefaultMultiSelectTheme,
    MultiSelect,
    MultiSelectTheme,
)

__all__ = [
    "DefaultMultiSelectTheme",
    "Input",
    "MultiSelect",
    "MultiSelectTheme",
]
