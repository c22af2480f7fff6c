"""Controller layer: collage state and user interaction, free of Qt."""

from .assignment import SwapManager
from .gestures import GestureInterpreter, GestureState
from .session import CollageSession

__all__ = [
    "CollageSession",
    "GestureInterpreter",
    "GestureState",
    "SwapManager",
]
