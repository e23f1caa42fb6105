"""
Action definitions for the game.
Actions are immutable, deterministic instructions.
"""

from dataclasses import dataclass, field

from numberguess.engine.state import Identity

CHOOSE_NUMBER = "choose_number"
RESET_GAME = "reset_game"
END_GAME = "end_game"

ACTION_TYPES = (CHOOSE_NUMBER, RESET_GAME, END_GAME)


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type, the calling identity, and a payload."""
    type: str  # one of ACTION_TYPES
    caller: Identity
    payload: dict = field(default_factory=dict)


def choose_number(caller: Identity, guess: int) -> Action:
    """
    Submit a guess for the current round.
    Example: choose_number("alice", 42)
    """
    return Action(type=CHOOSE_NUMBER, caller=caller, payload={"guess": guess})


def reset_game(caller: Identity) -> Action:
    """
    Start a fresh round (admin only).
    The target is drawn from the number source handed to apply_action, not carried here.
    """
    return Action(type=RESET_GAME, caller=caller)


def end_game(caller: Identity) -> Action:
    """Close the round and resolve the winner (admin only)."""
    return Action(type=END_GAME, caller=caller)
