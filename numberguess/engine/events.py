"""
Game events for UI hooks and logging.
Events describe what happened during action processing.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

INSTANTIATED = "instantiated"
GAME_RESET = "game_reset"
NUMBER_CHOSEN = "number_chosen"
GAME_ENDED = "game_ended"


# ===== Event Factory Functions =====

def instantiated(owner: str, name: str | None = None) -> GameEvent:
    return GameEvent(INSTANTIATED, {
        "method": "instantiate",
        "owner": owner,
        "name": name,
    })


def game_reset(sender: str) -> GameEvent:
    # The drawn target stays in state; it is not echoed here
    return GameEvent(GAME_RESET, {
        "method": "restartGame",
        "sender": sender,
    })


def number_chosen(sender: str, guess: int) -> GameEvent:
    return GameEvent(NUMBER_CHOSEN, {
        "method": "chooseNumber",
        "sender": sender,
        "guess": guess,
    })


def game_ended(
    sender: str,
    winner: str | None,
    winning_margin: int,
    participant_count: int,
) -> GameEvent:
    """Emitted when end_game resolves a winner."""
    return GameEvent(GAME_ENDED, {
        "method": "endGame",
        "sender": sender,
        "winner": winner,
        "winning_margin": winning_margin,
        "participant_count": participant_count,
    })
