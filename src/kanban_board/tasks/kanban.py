"""
Kanban board: card mutations on top of CardStore.

Usage:
    from kanban_board.tasks import KanbanBoard, CardStatus

    board = KanbanBoard(store)

    # Create a card
    card = board.create("Buy milk", status=CardStatus.TODO)

    # Move it
    board.move(card.id, CardStatus.DOING)

    # Delete it
    board.delete(card.id)
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Dict, List, Optional, Union

from .models import BoardState, Card, CardStatus, STATUSES
from .storage import CardStore

logger = logging.getLogger(__name__)

CLEAR_ALL_PROMPT = "Are you sure you want to delete all cards?"

StatusLike = Union[CardStatus, str]


class KanbanBoard:
    """
    Kanban board over a persisted card collection.

    Supports:
    - Creating/editing/deleting cards
    - Moving cards between the three columns
    - Clearing the whole board after confirmation
    - Saving the full collection after every change

    Invalid input (blank title, unknown id, move to the same column) is a
    silent no-op: the method returns None/False and nothing is saved.
    """

    def __init__(self, store: CardStore, state: Optional[BoardState] = None):
        self.store = store
        self.state = state if state is not None else store.load()
        self._lock = threading.Lock()

    @property
    def cards(self) -> List[Card]:
        """Cards in insertion order (a copy of the list)."""
        return list(self.state.cards)

    def _save(self) -> None:
        self.store.save(self.state)

    def get_card(self, card_id: str) -> Optional[Card]:
        """Get a card by id."""
        return self.state.find(card_id)

    def create(
        self,
        title: str,
        description: str = "",
        status: StatusLike = CardStatus.TODO,
    ) -> Optional[Card]:
        """
        Create a card.

        Args:
            title: Card title, required after trimming
            description: Optional description
            status: Target column

        Returns:
            The new Card, or None when the title is blank

        Raises:
            ValueError: unknown status for a non-blank title
        """
        if not title.strip():
            return None
        status = CardStatus(status)

        with self._lock:
            card = Card.create(title, description, status, taken=self.state.ids())
            self.state.cards.append(card)
            self._save()

        logger.info(f"[BOARD] create | id={card.id} status={card.status.value}")
        return card

    def edit(self, card_id: str, title: str, description: str = "") -> Optional[Card]:
        """Update title and description in place; None for blank title or unknown id."""
        if not title.strip():
            return None

        with self._lock:
            card = self.state.find(card_id)
            if card is None:
                return None
            card.title = title.strip()
            card.description = description.strip()
            self._save()

        logger.info(f"[BOARD] edit | id={card_id}")
        return card

    def move(self, card_id: str, new_status: StatusLike) -> Optional[Card]:
        """
        Move a card to another column.

        Returns:
            The moved Card, or None if the card is unknown or already there
        """
        new_status = CardStatus(new_status)

        with self._lock:
            card = self.state.find(card_id)
            if card is None or card.status == new_status:
                return None
            old_status = card.status
            card.status = new_status
            self._save()

        logger.info(f"[BOARD] move | id={card_id} {old_status.value} -> {new_status.value}")
        return card

    def delete(self, card_id: str) -> bool:
        """Delete a card; False if it does not exist."""
        with self._lock:
            card = self.state.find(card_id)
            if card is None:
                return False
            self.state.cards.remove(card)
            self._save()

        logger.info(f"[BOARD] delete | id={card_id}")
        return True

    def clear_all(self, confirm: Callable[[str], bool]) -> bool:
        """
        Delete every card after the user confirms.

        An empty board returns False without asking.
        """
        if not self.state.cards:
            return False
        if not confirm(CLEAR_ALL_PROMPT):
            return False

        with self._lock:
            count = len(self.state.cards)
            self.state.cards.clear()
            self._save()

        logger.info(f"[BOARD] clear_all | removed={count}")
        return True

    def cards_by_status(self, status: StatusLike) -> List[Card]:
        """Cards in one column, in insertion order."""
        status = CardStatus(status)
        return [c for c in self.state.cards if c.status == status]

    def column_counts(self) -> Dict[CardStatus, int]:
        counts = {status: 0 for status in STATUSES}
        for card in self.state.cards:
            counts[card.status] += 1
        return counts

    def reload(self) -> None:
        """Re-read the collection from storage."""
        with self._lock:
            self.state = self.store.load()
