"""Card collection, persistence and rendering for the Kanban board."""

from .models import Card, CardStatus, BoardState, STATUSES
from .storage import CardStore, LocalStorage, KanbanError, StorageError
from .kanban import KanbanBoard
from .render import render, print_board

__all__ = [
    "Card",
    "CardStatus",
    "BoardState",
    "STATUSES",
    "CardStore",
    "LocalStorage",
    "KanbanError",
    "StorageError",
    "KanbanBoard",
    "render",
    "print_board",
]
