"""
Dependencies shared by the career routers.

Every action request follows the same cycle: load the slot, apply one action,
save, answer with the ActionResponse envelope. Rejected actions are saved too
so their alert survives.

Sync endpoints run in a threadpool; the whole cycle holds `save_lock` so
overlapping requests never interleave a load and a save.
"""
import threading
from typing import Callable

from sqlalchemy.orm import Session

from soundempire.core.config import settings
from soundempire.schemas.actions import ActionResponse
from soundempire.schemas.career import CareerState
from soundempire.services.career import ActionResult
from soundempire.services.persistence import load_state, save_state
from soundempire.services.rng import RandomSource

_rng = RandomSource(settings.RNG_SEED)

# Re-entrant so a router can hold it across run_action plus its own writes.
save_lock = threading.RLock()


def get_rng() -> RandomSource:
    return _rng


def get_slot() -> str:
    return settings.SAVE_SLOT


def run_action(
    db: Session,
    slot: str,
    rng: RandomSource,
    action: Callable[[CareerState], ActionResult],
) -> tuple[ActionResult, ActionResponse]:
    with save_lock:
        state = load_state(db, slot, rng)
        result = action(state)
        save_state(db, slot, result.state)
    return result, ActionResponse.from_result(result)
