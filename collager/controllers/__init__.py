"""Controller layer for decoupling collage state management from widgets."""

from .history import HistoryStore
from .session import (
    CollageSessionController,
    LayoutProvider,
    LoadTicket,
)

__all__ = [
    "CollageSessionController",
    "HistoryStore",
    "LayoutProvider",
    "LoadTicket",
]
