"""
Interaction layer: user gestures -> board operations -> re-render.

BoardController holds the edit-modal state machine and the drag-and-drop
markers. It does not draw anything itself; every change of the board is
followed by a call to ``on_render`` with a fresh BoardView.

    closed --click_add(status)--> open(create) --save/cancel--> closed
    closed --click_card(id)-----> open(edit)   --save/delete/cancel--> closed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Set

from .tasks.kanban import KanbanBoard
from .tasks.models import Card, CardStatus
from .tasks.render import BoardView, render

logger = logging.getLogger(__name__)

DELETE_CARD_PROMPT = "Delete this card?"


class ModalMode(str, Enum):
    CLOSED = "closed"
    CREATE = "create"
    EDIT = "edit"


@dataclass
class ModalState:
    """What the edit dialog currently shows."""
    mode: ModalMode = ModalMode.CLOSED
    heading: str = ""
    title: str = ""
    description: str = ""
    target_status: Optional[CardStatus] = None
    card_id: Optional[str] = None
    focus: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.mode != ModalMode.CLOSED

    @property
    def delete_visible(self) -> bool:
        return self.mode == ModalMode.EDIT


@dataclass
class DragState:
    """Transfer payload and visual markers of a drag gesture."""
    payload: Optional[str] = None
    dragging: Optional[str] = None
    drag_over: Set[CardStatus] = field(default_factory=set)


class BoardController:
    """
    Wires gestures to KanbanBoard operations.

    Args:
        board: The board to mutate
        confirm: Asks the user a yes/no question (delete, clear all)
        on_render: Receives the new BoardView after every change
    """

    def __init__(
        self,
        board: KanbanBoard,
        confirm: Callable[[str], bool],
        on_render: Optional[Callable[[BoardView], None]] = None,
    ):
        self.board = board
        self.confirm = confirm
        self.on_render = on_render
        self.modal = ModalState()
        self.drag = DragState()

    def refresh(self) -> BoardView:
        view = render(self.board.cards)
        if self.on_render is not None:
            self.on_render(view)
        return view

    # ---- modal ----

    def click_add(self, status) -> None:
        """Open the dialog in create mode for a column."""
        self.modal = ModalState(
            mode=ModalMode.CREATE,
            heading="Add Card",
            target_status=CardStatus(status),
            focus="title",
        )

    def click_card(self, card_id: str) -> bool:
        """Open the dialog in edit mode; False if the card is gone."""
        card = self.board.get_card(card_id)
        if card is None:
            return False
        self.modal = ModalState(
            mode=ModalMode.EDIT,
            heading="Edit Card",
            title=card.title,
            description=card.description or "",
            target_status=card.status,
            card_id=card.id,
            focus="title",
        )
        return True

    def set_fields(self, title: Optional[str] = None, description: Optional[str] = None) -> None:
        if title is not None:
            self.modal.title = title
        if description is not None:
            self.modal.description = description

    def close(self) -> None:
        self.modal = ModalState()

    cancel = close

    def backdrop_click(self) -> None:
        self.close()

    def save(self) -> Optional[Card]:
        """
        Validate the dialog and create or update the card.

        A blank title keeps the dialog open and puts focus back on the title.
        """
        if not self.modal.is_open:
            return None
        if not self.modal.title.strip():
            self.modal.focus = "title"
            return None

        if self.modal.mode == ModalMode.EDIT:
            card = self.board.edit(self.modal.card_id, self.modal.title, self.modal.description)
        else:
            card = self.board.create(self.modal.title, self.modal.description, self.modal.target_status)

        self.close()
        self.refresh()
        return card

    def delete(self) -> bool:
        """Delete the card being edited after confirmation."""
        if self.modal.mode != ModalMode.EDIT:
            return False
        if not self.confirm(DELETE_CARD_PROMPT):
            return False

        deleted = self.board.delete(self.modal.card_id)
        self.close()
        self.refresh()
        return deleted

    def key_press(self, key: str, ctrl: bool = False) -> None:
        """Escape closes the dialog, Ctrl+Enter saves it."""
        if key == "Escape":
            self.close()
        elif key == "Enter" and ctrl and self.modal.is_open:
            self.save()

    def click_clear_all(self) -> bool:
        cleared = self.board.clear_all(self.confirm)
        if cleared:
            self.refresh()
        return cleared

    # ---- drag and drop ----

    def drag_start(self, card_id: str) -> None:
        self.drag.payload = card_id
        self.drag.dragging = card_id

    def drag_over(self, status) -> bool:
        """Mark the column; returns True as the default browser handling is suppressed."""
        self.drag.drag_over.add(CardStatus(status))
        return True

    def drag_leave(self, status) -> None:
        self.drag.drag_over.discard(CardStatus(status))

    def drop(self, status, payload: Optional[str] = None) -> Optional[Card]:
        """Move the dragged card into the column it was dropped on."""
        status = CardStatus(status)
        self.drag.drag_over.discard(status)

        card_id = payload if payload is not None else self.drag.payload
        if not card_id:
            return None
        card = self.board.get_card(card_id)
        if card is None or card.status == status:
            return None

        moved = self.board.move(card_id, status)
        self.refresh()
        logger.debug(f"[UI] drop | id={card_id} status={status.value}")
        return moved

    def drag_end(self) -> None:
        self.drag = DragState()
