"""
Typed validation failures raised by the engine.
All are recoverable: the host surfaces them to the caller and persists nothing.
"""


class ContractError(ValueError):
    """Base class for every expected rejection of an operation."""
    code = "contract_error"
    http_status = 400
    default_message = "Operation rejected"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(ContractError):
    """Caller is not the admin owner."""
    code = "unauthorized"
    http_status = 403
    default_message = "Unauthorized"


class RoundFinished(ContractError):
    """Guess submitted while the round is finished."""
    code = "round_finished"
    http_status = 409
    default_message = "Game is finished"


class GuessOutOfRange(ContractError):
    code = "guess_out_of_range"
    http_status = 400
    default_message = "Number is out of range"


class DuplicateParticipant(ContractError):
    code = "duplicate_participant"
    http_status = 409
    default_message = "Player already is participating in this game"


class NoParticipants(ContractError):
    """End game requested with nobody to score."""
    code = "no_participants"
    http_status = 409
    default_message = "Game has no participants"
