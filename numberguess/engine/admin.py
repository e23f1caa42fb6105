"""
Admin registry: the single owning identity and the check that gates
privileged operations (reset_game, end_game).
"""

from numberguess.engine.errors import Unauthorized
from numberguess.engine.state import Admin, Identity


def initialize_admin(caller: Identity) -> Admin:
    """Create the admin record. Called exactly once, when the game is instantiated."""
    return Admin(owner=caller)


def is_admin(admin: Admin, caller: Identity) -> bool:
    return caller == admin.owner


def authorize(admin: Admin, caller: Identity) -> None:
    """Raise Unauthorized unless caller is the owner."""
    if not is_admin(admin, caller):
        raise Unauthorized()
