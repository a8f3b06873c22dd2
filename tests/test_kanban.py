"""
Tests for tasks/kanban.py and tasks/models.py - card model and board mutations.
"""

import pytest
from unittest.mock import MagicMock

from kanban_board.tasks.models import (
    BoardState,
    Card,
    CardStatus,
    iso_now,
    new_card_id,
)
from kanban_board.tasks.kanban import KanbanBoard, CLEAR_ALL_PROMPT
from kanban_board.tasks.storage import CardStore


class TestCardModel:
    """Tests for Card model."""

    def test_card_creation(self):
        """Test creating a card."""
        card = Card.create("  Buy milk  ", "  two litres ", CardStatus.DOING)

        assert card.title == "Buy milk"
        assert card.description == "two litres"
        assert card.status == CardStatus.DOING
        assert card.id.startswith("card-")
        assert card.created_at.endswith("Z")

    def test_card_id_skips_taken(self):
        """Test that generated ids never collide with existing ones."""
        first = new_card_id()
        second = new_card_id([first])
        third = new_card_id([first, second])

        assert len({first, second, third}) == 3

    def test_iso_now_format(self):
        """Test timestamp format with milliseconds and Z suffix."""
        stamp = iso_now()

        assert stamp.endswith("Z")
        assert "T" in stamp
        assert len(stamp.split(".")[1]) == 4  # 3 digits + Z

    def test_card_to_dict(self):
        """Test the persisted record keys."""
        card = Card(id="card-1", title="Test", created_at="2026-01-01T00:00:00.000Z")
        data = card.to_dict()

        assert data == {
            "id": "card-1",
            "title": "Test",
            "description": "",
            "status": "todo",
            "createdAt": "2026-01-01T00:00:00.000Z",
        }

    def test_card_from_dict(self):
        """Test creating card from a record."""
        card = Card.from_dict({"id": "card-9", "title": "Ship", "status": "done"})

        assert card.id == "card-9"
        assert card.status == CardStatus.DONE
        assert card.description == ""
        assert card.created_at == ""

    def test_card_from_dict_rejects_unknown_status(self):
        with pytest.raises(ValueError):
            Card.from_dict({"id": "card-9", "title": "Ship", "status": "blocked"})

    def test_card_from_dict_requires_id_and_title(self):
        with pytest.raises(ValueError):
            Card.from_dict({"title": "No id"})
        with pytest.raises(ValueError):
            Card.from_dict({"id": "card-1"})

    def test_card_str(self):
        """Test card string representation."""
        card = Card(id="card-1", title="Test card")

        assert "card-1" in str(card)
        assert "Test card" in str(card)

    def test_board_state_find(self):
        state = BoardState([Card(id="a", title="A"), Card(id="b", title="B")])

        assert state.find("b").title == "B"
        assert state.find("zzz") is None
        assert state.ids() == ["a", "b"]


class TestKanbanBoard:
    """Tests for KanbanBoard class."""

    def test_board_creation_from_empty_storage(self, store):
        """A board with nothing persisted starts with the seed card."""
        board = KanbanBoard(store)

        assert len(board.cards) == 1
        assert board.cards[0].id == "card-welcome"

    def test_create(self, board):
        """Test creating a card on the board."""
        card = board.create("Test card", "details", CardStatus.DOING)

        assert card is not None
        assert board.get_card(card.id) is card
        assert card.status == CardStatus.DOING

    def test_create_defaults_to_todo(self, board):
        card = board.create("Test card")

        assert card.status == CardStatus.TODO

    def test_create_accepts_status_string(self, board):
        card = board.create("Test card", status="done")

        assert card.status == CardStatus.DONE

    def test_create_unknown_status(self, board):
        with pytest.raises(ValueError):
            board.create("Test card", status="blocked")

    @pytest.mark.parametrize("title", ["", "   ", "\t\n"])
    def test_create_blank_title_is_noop(self, board, title):
        """Blank titles leave the collection unchanged and save nothing."""
        board.store = MagicMock(wraps=board.store)

        assert board.create(title, "desc") is None
        assert board.cards == []
        board.store.save.assert_not_called()

    def test_create_blank_title_with_unknown_status_is_noop(self, board):
        """A blank title wins over status validation: nothing happens."""
        board.store = MagicMock(wraps=board.store)

        assert board.create("  ", status="bogus") is None
        assert board.cards == []
        board.store.save.assert_not_called()

    def test_create_appends_in_insertion_order(self, board):
        first = board.create("First")
        second = board.create("Second")
        third = board.create("Third")

        assert [c.id for c in board.cards] == [first.id, second.id, third.id]
        assert len({first.id, second.id, third.id}) == 3

    def test_edit(self, board):
        card = board.create("Old", "old desc")

        updated = board.edit(card.id, "  New  ", " new desc ")

        assert updated is card
        assert card.title == "New"
        assert card.description == "new desc"

    def test_edit_keeps_id_and_created_at(self, board):
        card = board.create("Old")
        card_id, created = card.id, card.created_at

        board.edit(card.id, "New")

        assert card.id == card_id
        assert card.created_at == created

    def test_edit_blank_title_is_noop(self, board):
        card = board.create("Keep me", "desc")

        assert board.edit(card.id, "  ", "changed") is None
        assert card.title == "Keep me"
        assert card.description == "desc"

    def test_edit_unknown_card(self, board):
        assert board.edit("card-missing", "Title") is None

    def test_move(self, board):
        card = board.create("Test")

        moved = board.move(card.id, CardStatus.DOING)

        assert moved is card
        assert board.get_card(card.id).status == CardStatus.DOING

    def test_move_to_same_status_does_not_save(self, board):
        """Moving to the current column is a no-op with no storage write."""
        card = board.create("Test")
        board.store = MagicMock(wraps=board.store)

        assert board.move(card.id, CardStatus.TODO) is None
        board.store.save.assert_not_called()
        assert card.status == CardStatus.TODO

    def test_move_unknown_card(self, board):
        board.store = MagicMock(wraps=board.store)

        assert board.move("card-missing", CardStatus.DONE) is None
        board.store.save.assert_not_called()

    def test_delete(self, board):
        card = board.create("To delete")

        assert board.delete(card.id) is True
        assert board.get_card(card.id) is None

    def test_delete_unknown_card(self, board):
        board.create("Stays")
        before = [c.to_dict() for c in board.cards]
        board.store = MagicMock(wraps=board.store)

        assert board.delete("card-missing") is False
        assert [c.to_dict() for c in board.cards] == before
        board.store.save.assert_not_called()

    def test_clear_all(self, board):
        board.create("One")
        board.create("Two")
        confirm = MagicMock(return_value=True)

        assert board.clear_all(confirm) is True
        assert board.cards == []
        confirm.assert_called_once_with(CLEAR_ALL_PROMPT)

    def test_clear_all_declined(self, board):
        board.create("One")

        assert board.clear_all(lambda message: False) is False
        assert len(board.cards) == 1

    def test_clear_all_empty_board_skips_prompt(self, board):
        """Clearing an empty board never asks the user."""
        confirm = MagicMock(return_value=True)

        assert board.clear_all(confirm) is False
        confirm.assert_not_called()

    def test_cards_by_status(self, board):
        board.create("Task 1")
        doing = board.create("Task 2", status=CardStatus.DOING)

        assert [c.id for c in board.cards_by_status(CardStatus.DOING)] == [doing.id]
        assert len(board.cards_by_status("todo")) == 1

    def test_column_counts(self, board):
        board.create("Task 1")
        board.create("Task 2")
        board.create("Task 3", status=CardStatus.DONE)

        counts = board.column_counts()

        assert counts[CardStatus.TODO] == 2
        assert counts[CardStatus.DOING] == 0
        assert counts[CardStatus.DONE] == 1

    def test_cards_returns_copy(self, board):
        board.create("Task")

        board.cards.clear()

        assert len(board.cards) == 1


class TestKanbanBoardPersistence:
    """The persisted collection always matches the in-memory one."""

    def _persisted(self, board):
        return [c.to_dict() for c in CardStore(board.store.storage, board.store.key).load().cards]

    def test_every_operation_round_trips(self, board):
        card = board.create("Persisted", "desc")
        assert self._persisted(board) == [c.to_dict() for c in board.cards]

        board.edit(card.id, "Renamed", "new")
        assert self._persisted(board) == [c.to_dict() for c in board.cards]

        board.move(card.id, CardStatus.DONE)
        assert self._persisted(board) == [c.to_dict() for c in board.cards]

        other = board.create("Second")
        board.delete(card.id)
        assert self._persisted(board) == [c.to_dict() for c in board.cards]
        assert [c["id"] for c in self._persisted(board)] == [other.id]

        board.clear_all(lambda message: True)
        assert self._persisted(board) == []

    def test_scenario_create_move_delete(self, board):
        """Create, move to doing and delete a card on an empty board."""
        card = board.create("Buy milk", "", "todo")
        assert [(c.title, c.status) for c in board.cards] == [("Buy milk", CardStatus.TODO)]

        board.move(card.id, "doing")
        assert board.get_card(card.id).status == CardStatus.DOING

        board.delete(card.id)
        assert board.cards == []
        assert self._persisted(board) == []

    def test_new_board_instance_loads_existing_data(self, board):
        board.create("Persistent card")

        reloaded = KanbanBoard(board.store)

        assert len(reloaded.cards) == 1
        assert reloaded.cards[0].title == "Persistent card"

    def test_cleared_board_stays_empty_after_reload(self, board):
        """An emptied board does not bring back the seed card."""
        board.create("Temp")
        board.clear_all(lambda message: True)

        board.reload()

        assert board.cards == []
