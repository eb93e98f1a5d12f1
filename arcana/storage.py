"""In-memory draw sessions. Nothing outlives the process.

The registry holds at most ``config.MAX_SESSIONS`` sessions; starting one more
evicts the least recently used.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Optional

from arcana import config
from arcana.draw import DrawSession
from arcana.gesture import ShufflePad
from arcana.utils.rng import create_seed

log = logging.getLogger("arcana.storage")

_SESSIONS: "OrderedDict[str, DrawSession]" = OrderedDict()


class SessionNotFound(RuntimeError):
    pass


def new_session(
    seed: Optional[str] = None,
    variant_key: Optional[str] = None,
    spread_key: Optional[str] = None,
    manual: bool = False,
) -> str:
    sid = str(uuid.uuid4())
    _SESSIONS[sid] = DrawSession(
        seed=create_seed() if seed is None else seed,
        variant_key=variant_key or config.DEFAULT_VARIANT,
        spread_key=spread_key or config.DEFAULT_SPREAD,
        manual=manual,
        history_limit=config.HISTORY_LIMIT,
    )
    while len(_SESSIONS) > config.MAX_SESSIONS:
        evicted, _ = _SESSIONS.popitem(last=False)
        log.info("evicted session %s", evicted)
    return sid


def load_session(session_id: str) -> DrawSession:
    try:
        session = _SESSIONS[session_id]
    except KeyError:
        raise SessionNotFound(session_id) from None
    _SESSIONS.move_to_end(session_id)
    return session


def save_session(session_id: str, session: DrawSession) -> None:
    if session_id not in _SESSIONS:
        raise SessionNotFound(session_id)
    _SESSIONS[session_id] = session
    _SESSIONS.move_to_end(session_id)


def drop_session(session_id: str) -> None:
    if _SESSIONS.pop(session_id, None) is None:
        raise SessionNotFound(session_id)


def session_count() -> int:
    return len(_SESSIONS)


def bind_pad(session_id: str) -> ShufflePad:
    """Shuffle pad whose seed drafts land in the stored session.

    The pad is live only for sessions in manual mode.
    """
    session = load_session(session_id)

    def on_seed_draft(signature: str, energy: float) -> None:
        save_session(session_id, load_session(session_id).seed_draft(signature, energy))

    return ShufflePad(on_seed_draft=on_seed_draft, active=session.manual)
