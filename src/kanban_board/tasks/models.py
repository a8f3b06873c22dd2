"""
Card models for the Kanban board.

Data model shared by the store, the board and the renderers.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class CardStatus(str, Enum):
    """Card status (one per Kanban column)."""
    TODO = "todo"
    DOING = "doing"
    DONE = "done"

    @property
    def label(self) -> str:
        return COLUMN_TITLES[self]


COLUMN_TITLES = {
    CardStatus.TODO: "To Do",
    CardStatus.DOING: "Doing",
    CardStatus.DONE: "Done",
}

# Column order on the board
STATUSES = (CardStatus.TODO, CardStatus.DOING, CardStatus.DONE)


def iso_now() -> str:
    """UTC timestamp in the form 2026-10-19T08:15:02.123Z."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_card_id(taken: Iterable[str] = ()) -> str:
    """Generate a card id from the current time, skipping ids already in use."""
    taken = set(taken)
    stamp = int(time.time() * 1000)
    while f"card-{stamp}" in taken:
        stamp += 1
    return f"card-{stamp}"


def _text(value: Any) -> str:
    """Stored optional text; None is empty, other non-strings are stringified."""
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass
class Card:
    """A single task card."""
    id: str
    title: str
    description: str = ""
    status: CardStatus = CardStatus.TODO
    created_at: str = field(default_factory=iso_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Card:
        """
        Build a card from its persisted record.

        Raises:
            ValueError: the record has no usable id/title or an unknown status
        """
        card_id = data.get("id")
        title = data.get("title")
        if not isinstance(card_id, str) or not isinstance(title, str):
            raise ValueError(f"card record needs string id and title: {data!r}")
        status = data.get("status") or CardStatus.TODO.value
        if not isinstance(status, str):
            raise ValueError(f"card status must be a string: {status!r}")
        return cls(
            id=card_id,
            title=title,
            description=_text(data.get("description")),
            status=CardStatus(status),
            created_at=_text(data.get("createdAt")),
        )

    @classmethod
    def create(
        cls,
        title: str,
        description: str = "",
        status: CardStatus = CardStatus.TODO,
        taken: Iterable[str] = (),
    ) -> Card:
        """Create a new card with a fresh id and creation time."""
        return cls(
            id=new_card_id(taken),
            title=title.strip(),
            description=description.strip(),
            status=CardStatus(status),
        )

    def __str__(self) -> str:
        return f"[{self.id}] {self.title} ({self.status.value})"


@dataclass
class BoardState:
    """The ordered card collection (insertion order)."""
    cards: List[Card] = field(default_factory=list)

    def find(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def ids(self) -> List[str]:
        return [card.id for card in self.cards]

    def to_list(self) -> List[Dict[str, Any]]:
        return [card.to_dict() for card in self.cards]

    def __len__(self) -> int:
        return len(self.cards)


def seed_cards() -> List[Card]:
    """Cards shown on a board that has nothing persisted yet."""
    return [
        Card(
            id="card-welcome",
            title="Welcome to your board",
            description=(
                "Click a card to edit it, drag it to another column to change "
                "its status, or use + to add a new one."
            ),
            status=CardStatus.TODO,
        )
    ]
