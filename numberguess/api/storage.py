"""
Typed accessors over the state_items key-value table.
Each Item owns one key and converts between the stored JSON and an engine record.
"""

import json
from typing import Any, Callable, Generic, TypeVar

from sqlalchemy.orm import Session

from numberguess.engine.state import Admin, GameState

from .models import StateItem

T = TypeVar("T")


class RecordNotFound(LookupError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"No record stored under {key!r}")


class Item(Generic[T]):
    """A single stored record addressed by a fixed key."""

    def __init__(
        self,
        key: str,
        to_dict: Callable[[T], dict[str, Any]],
        from_dict: Callable[[dict[str, Any]], T],
    ):
        self.key = key
        self._to_dict = to_dict
        self._from_dict = from_dict

    def _row(self, db: Session, lock: bool = False) -> StateItem | None:
        query = db.query(StateItem).filter(StateItem.key == self.key)
        if lock:
            # Row lock on Postgres; SQLite ignores it, see begin_write in main
            query = query.with_for_update(nowait=False)
        return query.first()

    def may_load(self, db: Session, lock: bool = False) -> T | None:
        row = self._row(db, lock)
        if row is None:
            return None
        raw = json.loads(row.value) if isinstance(row.value, str) else row.value
        return self._from_dict(raw if isinstance(raw, dict) else {})

    def load(self, db: Session, lock: bool = False) -> T:
        value = self.may_load(db, lock)
        if value is None:
            raise RecordNotFound(self.key)
        return value

    def exists(self, db: Session) -> bool:
        return self._row(db) is not None

    def save(self, db: Session, value: T) -> None:
        """Stage the record on the session; the caller commits."""
        encoded = json.dumps(self._to_dict(value))
        row = self._row(db)
        if row is None:
            db.add(StateItem(key=self.key, value=encoded))
        else:
            row.value = encoded


def _identity(data: dict[str, Any]) -> dict[str, Any]:
    return dict(data)


ADMIN = Item("admin", Admin.to_dict, Admin.from_dict)
GAME_STATE = Item("game_state", GameState.to_dict, GameState.from_dict)
CONTRACT_INFO = Item("contract_info", _identity, _identity)
