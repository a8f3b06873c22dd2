"""
Card persistence.

LocalStorage is a small key-value store kept in one JSON file (the desktop
counterpart of a browser's localStorage). CardStore keeps the whole card
collection under a single key as a JSON array.

Usage:
    from kanban_board.tasks.storage import LocalStorage, CardStore

    store = CardStore(LocalStorage(data_dir / "local_storage.json"))
    state = store.load()
    store.save(state)
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from .models import BoardState, Card, seed_cards

logger = logging.getLogger(__name__)

STORAGE_KEY = "kanban-cards"
STORAGE_FILE = "local_storage.json"


class KanbanError(Exception):
    """Base error for the Kanban board."""
    pass


class StorageError(KanbanError):
    """Persisted storage could not be written."""
    pass


class LocalStorage:
    """String key-value store backed by a JSON object file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"[STORE] unreadable storage file | path={self.path} error={e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"[STORE] storage file is not an object | path={self.path}")
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=str(self.path.parent), delete=False
            ) as f:
                tmp_name = f.name
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})

    def keys(self) -> List[str]:
        return list(self._read())


class CardStore:
    """Loads and saves the card collection under one storage key."""

    def __init__(self, storage: LocalStorage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key

    @classmethod
    def in_dir(cls, data_dir: Path, key: str = STORAGE_KEY) -> CardStore:
        return cls(LocalStorage(Path(data_dir) / STORAGE_FILE), key)

    def load(self) -> BoardState:
        """
        Read the persisted collection.

        Falls back to the seed cards when nothing usable is stored: missing
        key, unparseable JSON, a falsy value or a non-array value. An empty
        array is kept as an empty board.
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            logger.debug(f"[STORE] load | key={self.key} empty, using seed")
            return BoardState(seed_cards())

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"[STORE] load | key={self.key} corrupt, using seed error={e}")
            return BoardState(seed_cards())

        if isinstance(data, list):
            return BoardState(self._cards_from_list(data))
        if not data:
            return BoardState(seed_cards())

        logger.warning(f"[STORE] load | key={self.key} not a list, using seed")
        return BoardState(seed_cards())

    def _cards_from_list(self, records: list) -> List[Card]:
        cards: List[Card] = []
        seen = set()
        for record in records:
            if not isinstance(record, dict):
                logger.warning(f"[STORE] skipped non-object record | value={record!r}")
                continue
            try:
                card = Card.from_dict(record)
            except ValueError as e:
                logger.warning(f"[STORE] skipped card record | error={e}")
                continue
            if card.id in seen:
                logger.warning(f"[STORE] skipped duplicate card id | id={card.id}")
                continue
            seen.add(card.id)
            cards.append(card)
        return cards

    def save(self, state: BoardState) -> None:
        """Overwrite the persisted collection with the full current one."""
        payload = json.dumps(state.to_list(), ensure_ascii=False)
        self.storage.set_item(self.key, payload)
        logger.debug(f"[STORE] save | key={self.key} cards={len(state)}")
