"""
Read-only queries over the game records.
Nothing here mutates state or requires authorization.
"""

from dataclasses import dataclass
from typing import Any

from numberguess.engine.actions import ACTION_TYPES, Action, CHOOSE_NUMBER, END_GAME, RESET_GAME
from numberguess.engine.admin import authorize
from numberguess.engine.errors import ContractError
from numberguess.engine.reducer import resolve_winner, validate_choose_number
from numberguess.engine.state import Admin, GameState, Identity


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error, "code": self.code}


def get_round_info(state: GameState) -> GameState:
    """Current round, as a copy the caller may freely modify."""
    return state.copy()


def get_admin_info(admin: Admin) -> Admin:
    return Admin(owner=admin.owner)


# ===== Action Validation =====

def validate_action(state: GameState, admin: Admin, action: Action) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with error message and code.
    A reset is judged on authorization alone; the target draw cannot fail validation.
    """
    try:
        if action.type == CHOOSE_NUMBER:
            validate_choose_number(state, action.caller, action.payload.get("guess"))
        elif action.type == RESET_GAME:
            authorize(admin, action.caller)
        elif action.type == END_GAME:
            authorize(admin, action.caller)
            resolve_winner(state.participants, state.target_number or 0)
        else:
            return ValidationResult(False, f"Unknown action type: {action.type}", "unknown_action")
    except ContractError as e:
        return ValidationResult(False, e.message, e.code)
    return ValidationResult(True)


def get_available_actions(state: GameState, admin: Admin, caller: Identity) -> list[str]:
    """
    Action types the caller could perform right now.
    choose_number is offered when some guess would be accepted.
    """
    available = []
    for action_type in ACTION_TYPES:
        if action_type == CHOOSE_NUMBER:
            probe = Action(type=CHOOSE_NUMBER, caller=caller, payload={"guess": 0})
        else:
            probe = Action(type=action_type, caller=caller)
        if validate_action(state, admin, probe).valid:
            available.append(action_type)
    return available
