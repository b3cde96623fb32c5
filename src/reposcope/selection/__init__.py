"""Result selection through fzf or a numbered terminal prompt."""

from .basic import BasicSelector
from .picker import InteractiveSelector

__all__ = [
    "BasicSelector",
    "InteractiveSelector",
]
