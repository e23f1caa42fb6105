"""
Wire messages for the instantiate/execute/query entry points.
Execute and query messages are externally tagged: exactly one variant key is set,
e.g. {"choose_number": {"number": 42}} or {"get_game_info": {}}.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from numberguess.engine.actions import Action, choose_number, end_game, reset_game


class Empty(BaseModel):
    model_config = ConfigDict(extra="forbid")


class InstantiateMsg(BaseModel):
    name: str


class ChooseNumberMsg(BaseModel):
    model_config = ConfigDict(extra="forbid")

    # Unsigned byte on the wire; the engine enforces the playable range
    number: int = Field(ge=0, le=255)


def _exactly_one(model: BaseModel, fields: tuple[str, ...]) -> None:
    chosen = [name for name in fields if getattr(model, name) is not None]
    if len(chosen) != 1:
        raise ValueError(f"Expected exactly one of {', '.join(fields)}; got {chosen or 'none'}")


class ExecuteMsg(BaseModel):
    model_config = ConfigDict(extra="forbid")

    choose_number: ChooseNumberMsg | None = None
    reset_game: Empty | None = None
    end_game: Empty | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> "ExecuteMsg":
        _exactly_one(self, ("choose_number", "reset_game", "end_game"))
        return self

    def to_action(self, caller: str) -> Action:
        if self.choose_number is not None:
            return choose_number(caller, self.choose_number.number)
        if self.reset_game is not None:
            return reset_game(caller)
        return end_game(caller)


class QueryMsg(BaseModel):
    model_config = ConfigDict(extra="forbid")

    get_game_info: Empty | None = None
    get_admin_info: Empty | None = None

    @model_validator(mode="after")
    def _one_variant(self) -> "QueryMsg":
        _exactly_one(self, ("get_game_info", "get_admin_info"))
        return self


# ===== Response shapes =====

class AdminOut(BaseModel):
    owner: str


class PlayerOut(BaseModel):
    address: str
    guess: int


class GameStateOut(BaseModel):
    participants: list[PlayerOut]
    # Unbounded: stored records are echoed as-is, same as POST /query
    target_number: int | None = None
    status: str  # "started" | "finished"
    winning_margin: int = 0
    winner: str | None = None


class ResultGameInfo(BaseModel):
    result: GameStateOut


class ResultAdmin(BaseModel):
    result: AdminOut
