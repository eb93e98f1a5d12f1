"""Tarot de Marseille deck (78 cards), spreads and deck variants.

- Loads JSON data from arcana/data/
- Provides: get_deck(), get_cards(), get_card(card_id), get_spreads(),
  get_spread(key), get_variants(), get_variant(key)

No external deps.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional


DATA_DIR = Path(__file__).resolve().parent / "data"
DECK_PATH = DATA_DIR / "tarot78.json"
SPREADS_PATH = DATA_DIR / "spreads.json"
VARIANTS_PATH = DATA_DIR / "variants.json"

DECK_SIZE = 78


class DeckError(RuntimeError):
    pass


def _load_json(path: Path) -> Dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise DeckError(f"Data file not found at: {path}") from e

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise DeckError(f"Invalid JSON in {path}: {e}") from e


_CACHE: Dict[Path, Dict[str, Any]] = {}


def _cached(path: Path) -> Dict[str, Any]:
    if path not in _CACHE:
        _CACHE[path] = _load_json(path)
    return _CACHE[path]


def get_deck() -> Dict[str, Any]:
    data = _cached(DECK_PATH)
    if not isinstance(data.get("cards"), list) or len(data["cards"]) != DECK_SIZE:
        raise DeckError(f"Deck data must contain exactly {DECK_SIZE} cards.")
    return data


def get_cards() -> List[Dict[str, Any]]:
    return list(get_deck()["cards"])


def get_card(card_id: str) -> Dict[str, Any]:
    for c in get_deck()["cards"]:
        if c.get("id") == card_id:
            return c
    raise DeckError(f"Unknown card id: {card_id}")


def get_spreads() -> List[Dict[str, Any]]:
    return list(_cached(SPREADS_PATH)["spreads"])


def get_spread(key: str) -> Dict[str, Any]:
    for s in get_spreads():
        if s.get("key") == key:
            return s
    raise DeckError(f"Unknown spread: {key}")


def get_variants() -> List[Dict[str, Any]]:
    return list(_cached(VARIANTS_PATH)["variants"])


def get_variant(key: str) -> Dict[str, Any]:
    for v in get_variants():
        if v.get("key") == key:
            return v
    raise DeckError(f"Unknown deck variant: {key}")


def validate_deck() -> None:
    data = get_deck()
    ids = [c.get("id") for c in data["cards"]]
    if len(ids) != len(set(ids)):
        raise DeckError("Duplicate card ids detected.")

    suits = {s["id"] for s in data.get("suits", [])}
    for c in data["cards"]:
        arcana = c.get("arcana")
        if arcana == "major":
            if c.get("suit") is not None:
                raise DeckError(f"Major arcanum {c.get('id')} must not carry a suit")
        elif arcana == "minor":
            if c.get("suit") not in suits:
                raise DeckError(f"Card {c.get('id')} has unknown suit {c.get('suit')}")
            n = c.get("number")
            if not isinstance(n, int) or n < 1 or n > 14:
                raise DeckError(f"Card {c.get('id')} has invalid number {n}")
        else:
            raise DeckError(f"Card {c.get('id')} has unknown arcana {arcana}")


def describe_card(card: Dict[str, Any]) -> str:
    suit = suit_name(card.get("suit"))
    return f"{card['name']} ({suit})" if suit else card["name"]


def suit_name(suit_id: Optional[str]) -> Optional[str]:
    if not suit_id:
        return None
    for s in get_deck().get("suits", []):
        if s.get("id") == suit_id:
            return s.get("name")
    return suit_id
