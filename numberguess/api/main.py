"""
FastAPI backend for the number guessing game.
Hosts the engine: authenticates callers, loads and saves the singleton records,
and serializes state-changing calls: one at a time per process, plus a
row lock (Postgres) or an immediate write transaction (SQLite) across processes.
"""

import logging
import threading
import uuid
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .database import get_db, init_db
from .models import Player
from .auth import (
    create_access_token,
    get_current_player,
    hash_password,
    validate_username,
    verify_password,
)
from .messages import ExecuteMsg, InstantiateMsg, QueryMsg, ResultAdmin, ResultGameInfo
from .storage import ADMIN, CONTRACT_INFO, GAME_STATE, RecordNotFound

from numberguess.config import CONTRACT_NAME, CONTRACT_VERSION, CORS_ORIGINS, RANDOM_SEED
from numberguess.engine.actions import END_GAME, RESET_GAME
from numberguess.engine.errors import ContractError
from numberguess.engine.queries import get_admin_info, get_available_actions, get_round_info
from numberguess.engine.reducer import apply_action
from numberguess.engine.state import Admin, GameState
from numberguess.engine.utils import (
    NumberSource,
    SeededNumberSource,
    SystemNumberSource,
    instantiate as instantiate_records,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Number Guess API",
    description="Backend API for a single-round guess-the-number game",
    version=CONTRACT_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path so 500s can be traced to the failing endpoint."""
    try:
        response = await call_next(request)
        if response.status_code >= 500:
            logger.error(f"[500] {request.method} {request.url.path}")
        return response
    except Exception:
        logger.error(f"[500] {request.method} {request.url.path} (exception)")
        raise


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


_number_source: NumberSource = (
    SeededNumberSource(RANDOM_SEED) if RANDOM_SEED is not None else SystemNumberSource()
)


def get_number_source() -> NumberSource:
    """Dependency supplying the target draw source (overridden in tests)."""
    return _number_source


# ===== Pydantic Models =====

class RegisterRequest(BaseModel):
    username: str
    password: str


class LoginRequest(BaseModel):
    username: str
    password: str


# ===== Helper Functions =====

def _player_out(player: Player) -> dict[str, Any]:
    return {"id": player.id, "username": player.username}


def _contract_error(exc: ContractError) -> HTTPException:
    return HTTPException(
        status_code=exc.http_status,
        detail={"code": exc.code, "message": exc.message},
    )


# Held for the whole load -> apply -> save -> commit of a state-changing call
_execute_lock = threading.Lock()


def begin_write(db: Session) -> None:
    """Take the database write lock up front on SQLite, which ignores FOR UPDATE."""
    if db.get_bind().dialect.name != "sqlite":
        return
    raw = db.connection().connection.dbapi_connection
    if not raw.in_transaction:
        db.execute(text("BEGIN IMMEDIATE"))


def load_records(db: Session, lock: bool = False) -> tuple[GameState, Admin]:
    """Load the game and admin records; 409 if the game was never instantiated."""
    try:
        state = GAME_STATE.load(db, lock=lock)
        admin = ADMIN.load(db)
    except RecordNotFound:
        raise HTTPException(status_code=409, detail="Game not instantiated")
    return state, admin


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info(f"{CONTRACT_NAME} {CONTRACT_VERSION} ready")


# ===== API Endpoints =====

@app.get("/")
def root():
    return {"message": "Number Guess API", "version": CONTRACT_VERSION}


# ----- Auth -----

@app.post("/auth/register")
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """Register with a username (unique, no spaces/special) and password."""
    if not validate_username(request.username):
        raise HTTPException(
            status_code=400,
            detail="Username must be 2–32 characters, letters numbers and underscore only",
        )
    if db.query(Player).filter(Player.username == request.username).first():
        raise HTTPException(status_code=400, detail="Username already taken")
    player = Player(
        id=str(uuid.uuid4()),
        username=request.username,
        password_hash=hash_password(request.password),
    )
    db.add(player)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Username already taken")
    return {"access_token": create_access_token(player.id), "player": _player_out(player)}


@app.post("/auth/login")
def login(request: LoginRequest, db: Session = Depends(get_db)):
    player = db.query(Player).filter(Player.username == request.username).first()
    if not player or not verify_password(request.password, player.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"access_token": create_access_token(player.id), "player": _player_out(player)}


@app.get("/auth/me")
def auth_me(player: Player = Depends(get_current_player)):
    return _player_out(player)


# ----- Game lifecycle -----

@app.post("/instantiate")
def instantiate(
    msg: InstantiateMsg,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Create the admin and game records. The caller becomes the admin; allowed once."""
    if ADMIN.exists(db):
        raise HTTPException(status_code=409, detail="Game already instantiated")
    admin, state, events = instantiate_records(player.username, msg.name)
    ADMIN.save(db, admin)
    GAME_STATE.save(db, state)
    CONTRACT_INFO.save(db, {"contract": CONTRACT_NAME, "version": CONTRACT_VERSION})
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Game already instantiated")
    logger.info(f"Game instantiated by {admin.owner}")
    return {
        "admin": admin.to_dict(),
        "state": state.to_dict(),
        "events": [e.to_dict() for e in events],
    }


@app.post("/execute")
def execute(
    msg: ExecuteMsg,
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
    rng: NumberSource = Depends(get_number_source),
):
    """Apply choose_number, reset_game or end_game on behalf of the authenticated player."""
    action = msg.to_action(player.username)
    with _execute_lock:
        begin_write(db)
        state, admin = load_records(db, lock=True)
        try:
            new_state, events = apply_action(state, admin, action, rng)
        except ContractError as e:
            db.rollback()
            logger.warning(f"Rejected {action.type} from {player.username}: {e.code}")
            raise _contract_error(e)

        GAME_STATE.save(db, new_state)
        db.commit()

    if action.type == RESET_GAME:
        logger.info(f"Round started by {player.username}")
    elif action.type == END_GAME:
        logger.info(
            f"Round ended: winner={new_state.winner} margin={new_state.winning_margin} "
            f"participants={len(new_state.participants)}"
        )
    return {
        "state": new_state.to_dict(),
        "events": [e.to_dict() for e in events],
    }


# ----- Queries (no authentication) -----

@app.post("/query")
def query(msg: QueryMsg, db: Session = Depends(get_db)):
    state, admin = load_records(db)
    if msg.get_game_info is not None:
        return {"result": get_round_info(state).to_dict()}
    return {"result": get_admin_info(admin).to_dict()}


@app.get("/game", response_model=ResultGameInfo)
def get_game_info(db: Session = Depends(get_db)):
    state, _ = load_records(db)
    return {"result": get_round_info(state).to_dict()}


@app.get("/admin", response_model=ResultAdmin)
def get_admin(db: Session = Depends(get_db)):
    _, admin = load_records(db)
    return {"result": get_admin_info(admin).to_dict()}


@app.get("/game/available-actions")
def available_actions(
    player: Player = Depends(get_current_player),
    db: Session = Depends(get_db),
):
    """Action types the authenticated player could perform right now."""
    state, admin = load_records(db)
    return {
        "caller": player.username,
        "status": state.status.value,
        "actions": get_available_actions(state, admin, player.username),
    }


@app.get("/contract-info")
def contract_info(db: Session = Depends(get_db)):
    info = CONTRACT_INFO.may_load(db)
    if info is None:
        raise HTTPException(status_code=409, detail="Game not instantiated")
    return info
