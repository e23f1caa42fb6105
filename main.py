"""
Main entry point for the Guess-the-Number Round Engine.
Demonstrates core functionality with a simple simulated round.
"""

from numberguess.engine.actions import choose_number, end_game, reset_game
from numberguess.engine.errors import ContractError
from numberguess.engine.reducer import apply_action
from numberguess.engine.utils import instantiate, print_game_state


class FixedNumberSource:
    """Always draws the same target so the demo is repeatable."""

    def __init__(self, value: int):
        self.value = value

    def next_in_range(self, low: int, high: int) -> int:
        return self.value


def main():
    print("Guess-the-Number Round Engine")
    print("=" * 60)

    admin, state, events = instantiate("admin", name="demo")
    print("\n[INITIAL STATE]")
    print_game_state(state, admin)

    # ===== SCENARIO 1: Admin starts a round =====
    print("[SCENARIO 1: Reset]")
    state, events = apply_action(state, admin, reset_game("admin"), FixedNumberSource(42))
    print(f"✓ Round started. Events: {[e.type for e in events]}")

    # ===== SCENARIO 2: Guesses, including rejected ones =====
    print("\n[SCENARIO 2: Guesses]")
    attempts = [
        ("alice", 40),
        ("bob", 50),
        ("carol", 44),
        ("mallory", 101),  # out of range
        ("alice", 41),  # duplicate
    ]
    for caller, guess in attempts:
        try:
            state, _ = apply_action(state, admin, choose_number(caller, guess))
            print(f"✓ {caller} guessed {guess}")
        except ContractError as e:
            print(f"✗ {caller} guessed {guess}: {e}")

    # ===== SCENARIO 3: Only the admin may end the round =====
    print("\n[SCENARIO 3: End game]")
    try:
        apply_action(state, admin, end_game("mallory"))
    except ContractError as e:
        print(f"✗ mallory cannot end the game: {e}")

    state, events = apply_action(state, admin, end_game("admin"))
    print(f"✓ Round ended. Event payload: {events[0].payload}")
    print_game_state(state, admin)

    # alice and carol are both 2 away from 42; alice guessed first
    print(f"Winner: {state.winner} with margin {state.winning_margin}")


if __name__ == "__main__":
    main()
