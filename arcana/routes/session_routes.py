"""FastAPI routes for draw sessions with deterministic shuffling."""

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from ..deck import DeckError, get_cards, get_spread, get_variant
from ..draw import ConfigurationError, DrawSession
from ..gesture import GestureError
from ..models import (
    Assignment,
    DrawRequest,
    DrawResponse,
    GestureRequest,
    HistoryItem,
    HistoryResponse,
    RevealResponse,
    SessionResponse,
    SessionStartRequest,
)
from ..storage import SessionNotFound, bind_pad, drop_session, load_session, new_session, save_session

log = logging.getLogger("arcana.session_routes")

router = APIRouter(prefix="/session", tags=["session"])


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def _load(session_id: str) -> DrawSession:
    try:
        return load_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")


def _session_response(session_id: str, s: DrawSession) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        seed=s.seed,
        seed_display=s.seed_display,
        variant=s.variant_key,
        spread=s.spread_key,
        manual=s.manual,
        signature=s.signature,
        energy=s.energy,
        energy_display=s.energy_display,
        effective_seed=s.effective_seed,
    )


@router.post("/start", response_model=SessionResponse)
def start_session(req: SessionStartRequest) -> SessionResponse:
    """Start a new drawing session."""
    try:
        if req.variant:
            get_variant(req.variant)
        if req.spread:
            get_spread(req.spread)
    except DeckError as e:
        raise HTTPException(status_code=400, detail=str(e))

    sid = new_session(seed=req.seed, variant_key=req.variant, spread_key=req.spread, manual=req.manual)
    return _session_response(sid, load_session(sid))


@router.post("/{session_id}/gesture", response_model=SessionResponse)
def record_gesture(session_id: str, req: GestureRequest) -> SessionResponse:
    """Replay one complete drag gesture and fold it into the session seed."""
    s = _load(session_id)
    if not s.manual:
        raise HTTPException(status_code=409, detail="Gestures only apply to sessions in manual mode")
    if not req.points:
        s = s.reset()
        save_session(session_id, s)
        return _session_response(session_id, s)

    pad = bind_pad(session_id)
    first, rest = req.points[0], req.points[1:]
    try:
        pad.pointer_down(first.x, first.y, first.t)
        for p in rest:
            pad.pointer_move(p.x, p.y, p.t)
    except GestureError as e:
        raise HTTPException(status_code=400, detail=str(e))
    pad.pointer_up()

    s = load_session(session_id).with_gesture(pad.trace)
    save_session(session_id, s)
    return _session_response(session_id, s)


@router.post("/{session_id}/gesture/reset", response_model=SessionResponse)
def reset_gesture(session_id: str) -> SessionResponse:
    s = _load(session_id).reset()
    save_session(session_id, s)
    return _session_response(session_id, s)


@router.post("/{session_id}/randomize", response_model=SessionResponse)
def randomize(session_id: str) -> SessionResponse:
    s = _load(session_id).randomize()
    save_session(session_id, s)
    return _session_response(session_id, s)


@router.post("/{session_id}/draw", response_model=DrawResponse)
def draw_for_session(session_id: str, req: DrawRequest) -> DrawResponse:
    """Shuffle with the effective seed and fill the spread."""
    s = _load(session_id)
    try:
        if req.variant:
            get_variant(req.variant)
        spread = get_spread(req.spread or s.spread_key)
    except DeckError as e:
        raise HTTPException(status_code=400, detail=str(e))
    s = s.configure(variant_key=req.variant, spread_key=req.spread)

    reveal_start = req.reveal_start if req.reveal_start is not None else monotonic_ms()
    try:
        s = s.perform_draw(get_cards(), spread["cards"], reveal_start)
    except ConfigurationError as e:
        log.warning("draw rejected for session %s: %s", session_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    save_session(session_id, s)

    return DrawResponse(
        session_id=session_id,
        effective_seed=s.history[0].seed,
        spread=s.spread_key,
        variant=s.variant_key,
        active_card_id=s.active_card_id,
        assignments=[
            Assignment(
                order=a.order,
                slot_id=a.slot["id"],
                slot_label=a.slot["label"],
                card=a.card,
                reveal_at=s.reveal_at[a.card["id"]],
            )
            for a in s.assignments
        ],
    )


@router.get("/{session_id}/reveals", response_model=RevealResponse)
def reveals(session_id: str, now: Optional[float] = Query(None, description="Monotonic clock reading in ms")) -> RevealResponse:
    s = _load(session_id)
    now = now if now is not None else monotonic_ms()
    s = s.advance(now)
    save_session(session_id, s)
    return RevealResponse(
        session_id=session_id,
        now=now,
        states={card_id: state.value for card_id, state in s.reveals.items()},
    )


@router.get("/{session_id}/history", response_model=HistoryResponse)
def history(session_id: str) -> HistoryResponse:
    s = _load(session_id)
    return HistoryResponse(
        session_id=session_id,
        history=[HistoryItem(seed=h.seed, spread=h.spread, variant=h.variant, at=h.at) for h in s.history],
    )


@router.delete("/{session_id}")
def delete_session(session_id: str):
    try:
        drop_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    return {"ok": True}
