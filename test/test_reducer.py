"""
Round lifecycle and winner resolution.
"""

import random

import pytest

from numberguess.engine import GUESS_MAX, GUESS_MIN
from numberguess.engine.actions import Action, choose_number, end_game, reset_game
from numberguess.engine.errors import (
    ContractError,
    DuplicateParticipant,
    GuessOutOfRange,
    NoParticipants,
    RoundFinished,
    Unauthorized,
)
from numberguess.engine.events import GAME_ENDED, GAME_RESET, NUMBER_CHOSEN
from numberguess.engine.reducer import apply_action, replay_from_actions, resolve_winner
from numberguess.engine.state import Player, Status
from numberguess.engine.utils import SeededNumberSource, margin

from conftest import FixedNumberSource


def _play(admin, state, guesses):
    for caller, guess in guesses:
        state, _ = apply_action(state, admin, choose_number(caller, guess))
    return state


# ===== Initial state =====

def test_initial_state_is_finished_and_empty(records):
    admin, state = records
    assert admin.owner == "admin"
    assert state.status == Status.FINISHED
    assert state.participants == []
    assert state.target_number == 0
    assert state.winner is None
    assert state.winning_margin == 0


def test_choose_number_rejected_before_first_reset(records):
    admin, state = records
    with pytest.raises(RoundFinished):
        apply_action(state, admin, choose_number("alice", 10))


# ===== reset_game =====

def test_reset_starts_round_with_drawn_target(records, fixed_source):
    admin, state = records
    new_state, events = apply_action(state, admin, reset_game("admin"), fixed_source)
    assert new_state.status == Status.STARTED
    assert new_state.target_number == 42
    assert new_state.participants == []
    assert new_state.winner is None
    assert new_state.winning_margin == 0
    assert fixed_source.calls == [(GUESS_MIN, GUESS_MAX)]
    assert [e.type for e in events] == [GAME_RESET]
    assert events[0].payload == {"method": "restartGame", "sender": "admin"}
    # input untouched
    assert state.status == Status.FINISHED


def test_reset_by_non_admin_is_unauthorized(records, fixed_source):
    admin, state = records
    before = state.to_dict()
    with pytest.raises(Unauthorized):
        apply_action(state, admin, reset_game("mallory"), fixed_source)
    assert fixed_source.calls == []
    assert state.to_dict() == before


def test_reset_discards_round_in_progress(started):
    admin, state = started
    state = _play(admin, state, [("alice", 10), ("bob", 20)])
    state, _ = apply_action(state, admin, end_game("admin"))
    assert state.winner == "bob"

    state, _ = apply_action(state, admin, reset_game("admin"), FixedNumberSource(7))
    assert state.participants == []
    assert state.winner is None
    assert state.winning_margin == 0
    assert state.target_number == 7
    assert state.status == Status.STARTED


def test_reset_from_started_is_allowed(started):
    admin, state = started
    state = _play(admin, state, [("alice", 10)])
    state, _ = apply_action(state, admin, reset_game("admin"), FixedNumberSource(3))
    assert state.status == Status.STARTED
    assert state.participants == []


def test_reset_without_number_source_is_a_programmer_error(records):
    admin, state = records
    with pytest.raises(ValueError) as exc_info:
        apply_action(state, admin, reset_game("admin"))
    assert not isinstance(exc_info.value, ContractError)


def test_reset_rejects_draw_outside_range(records):
    admin, state = records
    with pytest.raises(ValueError):
        apply_action(state, admin, reset_game("admin"), FixedNumberSource(101))


def test_seeded_source_targets_stay_in_range(records):
    admin, state = records
    source = SeededNumberSource(1234)
    for _ in range(200):
        state, _ = apply_action(state, admin, reset_game("admin"), source)
        assert GUESS_MIN <= state.target_number <= GUESS_MAX


# ===== choose_number =====

def test_choose_number_appends_in_submission_order(started):
    admin, state = started
    state, events = apply_action(state, admin, choose_number("alice", 40))
    state, _ = apply_action(state, admin, choose_number("bob", 50))
    assert [(p.address, p.guess) for p in state.participants] == [("alice", 40), ("bob", 50)]
    assert events[0].type == NUMBER_CHOSEN
    assert events[0].payload == {"method": "chooseNumber", "sender": "alice", "guess": 40}


def test_every_guess_in_range_is_accepted(started):
    admin, state = started
    for guess in range(GUESS_MIN, GUESS_MAX + 1):
        new_state, _ = apply_action(state, admin, choose_number(f"p{guess}", guess))
        assert new_state.participants[-1].guess == guess


@pytest.mark.parametrize("guess", [101, 122, 255, 1000, -1, True, "42", 4.0, None])
def test_out_of_range_guess_is_rejected(started, guess):
    admin, state = started
    with pytest.raises(GuessOutOfRange):
        apply_action(state, admin, choose_number("alice", guess))


def test_duplicate_participant_is_rejected(started):
    admin, state = started
    state = _play(admin, state, [("alice", 40)])
    with pytest.raises(DuplicateParticipant):
        apply_action(state, admin, choose_number("alice", 41))
    assert len(state.participants) == 1
    assert state.participants[0].guess == 40


def test_finished_round_rejects_any_guess(started):
    admin, state = started
    state = _play(admin, state, [("alice", 40)])
    state, _ = apply_action(state, admin, end_game("admin"))
    for caller, guess in [("bob", 5), ("admin", 42), ("alice", 40), ("carol", 101)]:
        with pytest.raises(RoundFinished):
            apply_action(state, admin, choose_number(caller, guess))


def test_admin_may_also_guess(started):
    admin, state = started
    state, _ = apply_action(state, admin, choose_number("admin", 42))
    assert state.has_participant("admin")


def test_rejected_guess_leaves_state_unchanged(started):
    admin, state = started
    state = _play(admin, state, [("alice", 40)])
    before = state.to_dict()
    with pytest.raises(GuessOutOfRange):
        apply_action(state, admin, choose_number("bob", 101))
    assert state.to_dict() == before


# ===== end_game =====

def test_example_round_tie_goes_to_earliest(started):
    admin, state = started
    state = _play(admin, state, [("alice", 40), ("bob", 50), ("carol", 44)])
    state, events = apply_action(state, admin, end_game("admin"))
    assert state.winner == "alice"
    assert state.winning_margin == 2
    assert state.status == Status.FINISHED
    # the guess list and target survive the end of the round
    assert [p.address for p in state.participants] == ["alice", "bob", "carol"]
    assert state.target_number == 42
    assert events[0].type == GAME_ENDED
    assert events[0].payload == {
        "method": "endGame",
        "sender": "admin",
        "winner": "alice",
        "winning_margin": 2,
        "participant_count": 3,
    }


def test_strictly_closer_later_guess_wins(started):
    admin, state = started
    state = _play(admin, state, [("alice", 0), ("bob", 100), ("carol", 43)])
    state, _ = apply_action(state, admin, end_game("admin"))
    assert state.winner == "carol"
    assert state.winning_margin == 1


def test_exact_guess_has_zero_margin(started):
    admin, state = started
    state = _play(admin, state, [("alice", 41), ("bob", 42), ("carol", 42)])
    state, _ = apply_action(state, admin, end_game("admin"))
    assert state.winner == "bob"
    assert state.winning_margin == 0


def test_end_game_by_non_admin_is_unauthorized(started):
    admin, state = started
    state = _play(admin, state, [("alice", 40)])
    with pytest.raises(Unauthorized):
        apply_action(state, admin, end_game("notCreator"))
    assert state.status == Status.STARTED
    assert state.winner is None


def test_end_game_with_no_participants(started, records):
    admin, state = started
    with pytest.raises(NoParticipants):
        apply_action(state, admin, end_game("admin"))
    assert state.status == Status.STARTED

    admin, fresh = records
    with pytest.raises(NoParticipants):
        apply_action(fresh, admin, end_game("admin"))


def test_unauthorized_checked_before_empty_round(started):
    admin, state = started
    with pytest.raises(Unauthorized):
        apply_action(state, admin, end_game("mallory"))


def test_end_game_on_finished_round_re_resolves(started):
    admin, state = started
    state = _play(admin, state, [("alice", 30), ("bob", 45)])
    first, _ = apply_action(state, admin, end_game("admin"))
    second, events = apply_action(first, admin, end_game("admin"))
    assert second.to_dict() == first.to_dict()
    assert events[0].payload["winner"] == "bob"


def test_resolve_winner_matches_brute_force():
    rng = random.Random(99)
    for _ in range(300):
        target = rng.randint(GUESS_MIN, GUESS_MAX)
        players = [
            Player(address=f"p{i}", guess=rng.randint(GUESS_MIN, GUESS_MAX))
            for i in range(rng.randint(1, 12))
        ]
        winner, winning_margin = resolve_winner(players, target)
        margins = [margin(target, p.guess) for p in players]
        best = min(margins)
        assert winning_margin == best
        assert winner == players[margins.index(best)].address
        assert all(winning_margin <= m for m in margins)


def test_resolve_winner_empty():
    with pytest.raises(NoParticipants):
        resolve_winner([], 50)


# ===== Dispatch and replay =====

def test_unknown_action_type(records):
    admin, state = records
    with pytest.raises(ValueError):
        apply_action(state, admin, Action(type="transfer", caller="admin"))


def test_admin_never_changes(started):
    admin, state = started
    owner = admin.owner
    actions = [
        choose_number("alice", 1),
        end_game("admin"),
        reset_game("admin"),
        choose_number("bob", 2),
        end_game("admin"),
    ]
    replay_from_actions(state, admin, actions, FixedNumberSource(10))
    assert admin.owner == owner


def test_replay_with_same_seed_is_reproducible(records):
    admin, state = records
    actions = [
        reset_game("admin"),
        choose_number("alice", 10),
        choose_number("bob", 90),
        choose_number("carol", 55),
        end_game("admin"),
    ]
    first, first_events = replay_from_actions(state, admin, actions, SeededNumberSource(7))
    second, second_events = replay_from_actions(state, admin, actions, SeededNumberSource(7))
    assert first.to_dict() == second.to_dict()
    assert [e.to_dict() for e in first_events] == [e.to_dict() for e in second_events]
    assert [e.type for e in first_events] == [
        GAME_RESET, NUMBER_CHOSEN, NUMBER_CHOSEN, NUMBER_CHOSEN, GAME_ENDED,
    ]
    assert first.status == Status.FINISHED
    assert first.winner in {"alice", "bob", "carol"}
