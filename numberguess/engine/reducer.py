"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
Every check runs before the copy is touched, so a rejected action leaves no trace.
"""

from numberguess.engine import GUESS_MAX, GUESS_MIN
from numberguess.engine.actions import Action, CHOOSE_NUMBER, END_GAME, RESET_GAME
from numberguess.engine.admin import authorize
from numberguess.engine.errors import (
    DuplicateParticipant,
    GuessOutOfRange,
    NoParticipants,
    RoundFinished,
)
from numberguess.engine.events import GameEvent, game_ended, game_reset, number_chosen
from numberguess.engine.state import Admin, GameState, Identity, Player, Status
from numberguess.engine.utils import NumberSource, is_valid_number, margin


def apply_action(
    state: GameState,
    admin: Admin,
    action: Action,
    rng: NumberSource | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    Args:
        state: Current game state (not modified)
        admin: Admin record used to authorize privileged actions
        action: Action to apply
        rng: Number source for reset_game target draws

    Returns:
        Tuple of (new_state, events) where events describe what happened

    Raises:
        ContractError subclasses for rejected actions
        ValueError for unknown action types or a reset without a number source
    """
    if action.type == CHOOSE_NUMBER:
        return _handle_choose_number(state, action)

    elif action.type == RESET_GAME:
        return _handle_reset_game(state, admin, action, rng)

    elif action.type == END_GAME:
        return _handle_end_game(state, admin, action)

    raise ValueError(f"Unknown action type: {action.type}")


def validate_choose_number(state: GameState, caller: Identity, guess: object) -> None:
    """
    Validates:
    - Round is not finished
    - Guess is an integer within GUESS_MIN..GUESS_MAX
    - Caller has not already guessed this round
    """
    if state.is_finished:
        raise RoundFinished()
    if not is_valid_number(guess):
        raise GuessOutOfRange(
            f"Number is out of range: {guess!r} (expected {GUESS_MIN}..{GUESS_MAX})")
    if state.has_participant(caller):
        raise DuplicateParticipant()


def _handle_choose_number(
    state: GameState,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    guess = action.payload.get("guess")
    validate_choose_number(state, action.caller, guess)

    new_state = state.copy()
    new_state.participants.append(Player(address=action.caller, guess=guess))
    return new_state, [number_chosen(action.caller, guess)]


def _handle_reset_game(
    state: GameState,
    admin: Admin,
    action: Action,
    rng: NumberSource | None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Start a fresh round. Legal from either status; an unfinished round is discarded.
    """
    authorize(admin, action.caller)
    if rng is None:
        raise ValueError("reset_game requires a number source")

    target = rng.next_in_range(GUESS_MIN, GUESS_MAX)
    if not is_valid_number(target):
        raise ValueError(
            f"Number source returned {target!r}, outside {GUESS_MIN}..{GUESS_MAX}")

    new_state = GameState(
        participants=[],
        target_number=target,
        status=Status.STARTED,
        winning_margin=0,
        winner=None,
    )
    return new_state, [game_reset(action.caller)]


def resolve_winner(participants: list[Player], target_number: int) -> tuple[Identity, int]:
    """
    Pick the participant closest to the target.

    Scans in submission order and only replaces the current best on a strictly
    smaller margin, so ties go to the earliest submission.

    Returns:
        Tuple of (winner_address, winning_margin)
    """
    if not participants:
        raise NoParticipants()

    first = participants[0]
    best_margin, best_address = margin(target_number, first.guess), first.address
    for player in participants[1:]:
        diff = margin(target_number, player.guess)
        if diff < best_margin:
            best_margin, best_address = diff, player.address
    return best_address, best_margin


def _handle_end_game(
    state: GameState,
    admin: Admin,
    action: Action,
) -> tuple[GameState, list[GameEvent]]:
    """
    Close the round and record the winner. Participants and target are kept.
    Callable on a finished round too: it re-resolves against the kept participants.
    """
    authorize(admin, action.caller)
    target = state.target_number if state.target_number is not None else 0
    winner, winning_margin = resolve_winner(state.participants, target)

    new_state = state.copy()
    new_state.winner = winner
    new_state.winning_margin = winning_margin
    new_state.status = Status.FINISHED
    return new_state, [
        game_ended(action.caller, winner, winning_margin, len(new_state.participants))
    ]


def replay_from_actions(
    initial_state: GameState,
    admin: Admin,
    actions: list[Action],
    rng: NumberSource | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    Event sourcing: state is derived from action log. A seeded number source
    reproduces the same targets.

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state.copy()
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, admin, action, rng)
        all_events.extend(events)

    return current_state, all_events
