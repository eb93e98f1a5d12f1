"""FastAPI routes for the 78-card deck, spreads and deck variants.

Endpoints:
- GET /deck
- GET /deck/cards/{card_id}
- GET /deck/spreads
- GET /deck/variants
- POST /deck/shuffle
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from ..deck import DeckError, get_card, get_cards, get_deck, get_spreads, get_variants
from ..models import DeckVariant, ShuffleRequest, ShuffleResponse, Spread
from ..utils.rng import shuffle_with_seed

router = APIRouter(prefix="/deck", tags=["deck"])


@router.get("")
def deck() -> Dict[str, Any]:
    d = get_deck()
    return {
        "deck_id": d.get("deck_id"),
        "schema_version": d.get("schema_version"),
        "suits": d.get("suits"),
        "card_count": len(d.get("cards", [])),
        "cards": d.get("cards", []),
    }


@router.get("/cards/{card_id}")
def card(card_id: str) -> Dict[str, Any]:
    try:
        c = get_card(card_id)
    except DeckError:
        raise HTTPException(status_code=404, detail=f"Unknown card_id: {card_id}")
    return {"card": c}


@router.get("/spreads")
def spreads() -> Dict[str, Any]:
    return {"spreads": [Spread(**s).model_dump() for s in get_spreads()]}


@router.get("/variants")
def variants() -> Dict[str, Any]:
    return {"variants": [DeckVariant(**v).model_dump() for v in get_variants()]}


@router.post("/shuffle", response_model=ShuffleResponse)
def shuffle(req: ShuffleRequest) -> ShuffleResponse:
    """Shuffle the full deck with a seed; pure, no session involved."""
    ids = [c["id"] for c in get_cards()]
    return ShuffleResponse(seed=req.seed, card_ids=shuffle_with_seed(ids, req.seed))
