"""
Game state representation.
The engine never mutates a state it was handed; transitions work on copies.
Includes JSON serialization for the host's key-value store.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from numberguess.engine import SENTINEL_TARGET

# Callers are opaque tokens compared only for equality
Identity = str


class Status(str, Enum):
    """Round lifecycle tag."""

    STARTED = "started"
    FINISHED = "finished"


def _parse_status(value: Any) -> "Status":
    """
    Parse a status from its stored form.
    Accepts "started"/"finished" and the tagged form {"started": {}}.
    Missing or unknown values read as finished (no playable round).
    """
    if isinstance(value, dict) and len(value) == 1:
        value = next(iter(value))
    if isinstance(value, str):
        try:
            return Status(value.lower())
        except ValueError:
            pass
    return Status.FINISHED


def _int(v: Any, default: int | None) -> int | None:
    try:
        return int(v) if v is not None else default
    except (TypeError, ValueError):
        return default


@dataclass
class Admin:
    """The single owning identity, fixed at instantiation."""
    owner: Identity

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Admin":
        if not isinstance(data, dict):
            data = {}
        return cls(owner=str(data.get("owner") or ""))


@dataclass(eq=False)
class Player:
    """A participant's entry in the current round."""
    address: Identity
    guess: int

    def __eq__(self, other: object) -> bool:
        # Identity only: the guess does not distinguish two entries
        if not isinstance(other, Player):
            return NotImplemented
        return self.address == other.address

    def __hash__(self) -> int:
        return hash(self.address)

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "guess": self.guess}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Player":
        if not isinstance(data, dict):
            data = {}
        guess = data.get("guess", data.get("choosed_number"))
        return cls(
            address=str(data.get("address") or ""),
            guess=_int(guess, 0),
        )


@dataclass
class GameState:
    """The singleton round record."""
    # Submission order; at most one entry per address
    participants: list[Player] = field(default_factory=list)
    # Scored against every guess; SENTINEL_TARGET before the first reset
    target_number: int | None = SENTINEL_TARGET
    status: Status = Status.FINISHED
    # Distance between target and the winning guess (valid after end_game)
    winning_margin: int = 0
    winner: Identity | None = None

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    def has_participant(self, address: Identity) -> bool:
        return any(p.address == address for p in self.participants)

    @property
    def is_finished(self) -> bool:
        return self.status == Status.FINISHED

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a dictionary for JSON serialization."""
        return {
            "participants": [p.to_dict() for p in self.participants],
            "target_number": self.target_number,
            "status": self.status.value,
            "winning_margin": self.winning_margin,
            "winner": self.winner,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """
        Create GameState from a dictionary.
        Also reads records using the older field names
        (random_number, num_diff, choosed_number).
        """
        if not isinstance(data, dict):
            data = {}
        participants = data.get("participants") or []
        if not isinstance(participants, list):
            participants = []
        target = data["target_number"] if "target_number" in data else data.get("random_number")
        margin = data["winning_margin"] if "winning_margin" in data else data.get("num_diff")
        winner = data.get("winner")
        return cls(
            participants=[Player.from_dict(p) for p in participants if isinstance(p, dict)],
            target_number=_int(target, None),
            status=_parse_status(data.get("status")),
            winning_margin=_int(margin, 0),
            winner=str(winner) if winner is not None else None,
        )

    def to_json(self, indent: int | None = None) -> str:
        """Serialize GameState to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "GameState":
        """Deserialize GameState from a JSON string."""
        return cls.from_dict(json.loads(json_str))
