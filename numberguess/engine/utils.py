"""
Utility functions for the game engine.
"""

import random
from typing import Protocol

from numberguess.engine import GUESS_MAX, GUESS_MIN, SENTINEL_TARGET
from numberguess.engine.admin import initialize_admin
from numberguess.engine.events import GameEvent, instantiated
from numberguess.engine.state import Admin, GameState, Identity, Status


class NumberSource(Protocol):
    """Uniform integer source handed to the engine for target draws."""

    def next_in_range(self, low: int, high: int) -> int:
        """Return an integer in [low, high], both inclusive."""
        ...


class SystemNumberSource:
    """Draws from OS entropy."""

    def __init__(self):
        self._rng = random.SystemRandom()

    def next_in_range(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)


class SeededNumberSource:
    """Reproducible draws for development and replays."""

    def __init__(self, seed: int):
        self.seed = seed
        self._rng = random.Random(seed)

    def next_in_range(self, low: int, high: int) -> int:
        return self._rng.randint(low, high)


def is_valid_number(value: object) -> bool:
    """True for an int (not bool) within GUESS_MIN..GUESS_MAX."""
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return GUESS_MIN <= value <= GUESS_MAX


def margin(target_number: int, guess: int) -> int:
    """Absolute distance between the target and a guess."""
    return abs(target_number - guess)


def initialize_game_state() -> GameState:
    """
    Create the state a freshly instantiated game starts in:
    finished, no participants, sentinel target, no winner.
    """
    return GameState(
        participants=[],
        target_number=SENTINEL_TARGET,
        status=Status.FINISHED,
        winning_margin=0,
        winner=None,
    )


def instantiate(
    caller: Identity,
    name: str | None = None,
) -> tuple[Admin, GameState, list[GameEvent]]:
    """
    Produce the two singleton records for a new deployment.

    Args:
        caller: Identity that becomes the admin owner
        name: Optional display name, recorded on the event only

    Returns:
        Tuple of (admin, initial_state, events); the host persists both records
    """
    admin = initialize_admin(caller)
    state = initialize_game_state()
    return admin, state, [instantiated(caller, name)]


def print_game_state(state: GameState, admin: Admin | None = None) -> None:
    """Pretty-print the current round."""
    print(f"\n{'='*60}")
    header = f"Status: {state.status.value} | Target: {state.target_number}"
    if admin is not None:
        header += f" | Admin: {admin.owner}"
    print(header)
    print(f"{'='*60}")

    if state.participants:
        for player in state.participants:
            line = f"  - {player.address}: {player.guess}"
            if state.target_number is not None:
                line += f" (margin {margin(state.target_number, player.guess)})"
            print(line)
    else:
        print("  - No participants")

    if state.winner is not None:
        print(f"\nWinner: {state.winner} (margin {state.winning_margin})")
    print()
