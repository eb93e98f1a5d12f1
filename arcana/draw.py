"""Draw session: effective seed, spread assignment and reveal schedule."""

from __future__ import annotations

import enum
import logging
import math
import random
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from arcana.gesture import GesturePoint, GestureTrace
from arcana.utils.rng import create_seed, shuffle_with_seed

log = logging.getLogger("arcana.draw")

REVEAL_STAGGER_MS = 16
DEFAULT_HISTORY_LIMIT = 7


class ConfigurationError(RuntimeError):
    """The spread cannot be filled from the given card collection."""


class RevealState(str, enum.Enum):
    HIDDEN = "hidden"
    REVEALED = "revealed"


@dataclass(frozen=True)
class DrawnAssignment:
    slot: Dict[str, Any]
    card: Dict[str, Any]
    order: int


@dataclass(frozen=True)
class HistoryEntry:
    seed: str
    spread: str
    variant: str
    at: datetime


def round_energy(energy: float) -> int:
    # Half-up rounding, not Python's banker's rounding
    return int(math.floor(energy + 0.5))


def effective_seed(base_seed: str, signature: str, energy: float, variant_key: str) -> str:
    if not signature:
        return f"{base_seed}-{variant_key}"
    return f"{base_seed}-{signature}-{round_energy(energy)}"


def draw(cards: Sequence[Dict[str, Any]], slots: Sequence[Dict[str, Any]], seed: str) -> List[DrawnAssignment]:
    """Shuffle the whole collection once and fill the slots in order.

    Raises:
        ConfigurationError: no slots, fewer cards than slots, or duplicate
            card ids. Checked before any shuffling happens.
    """
    if not slots:
        raise ConfigurationError("Spread has no slots.")
    if len(cards) < len(slots):
        raise ConfigurationError(
            f"Spread needs {len(slots)} cards but the collection has {len(cards)}."
        )
    ids = [c["id"] for c in cards]
    if len(ids) != len(set(ids)):
        raise ConfigurationError("Card collection has duplicate ids.")

    shuffled = shuffle_with_seed(cards, seed)
    return [
        DrawnAssignment(slot=slot, card=shuffled[index], order=index)
        for index, slot in enumerate(slots)
    ]


def schedule_reveals(
    assignments: Sequence[DrawnAssignment],
    reveal_start: float,
    slots: Sequence[Dict[str, Any]],
) -> Dict[str, float]:
    """Map card id to the monotonic timestamp (ms) at which it turns face up."""
    delays = {s["id"]: float(s.get("face_up_delay", 0)) for s in slots}
    schedule: Dict[str, float] = {}
    for a in assignments:
        delay = delays.get(a.slot["id"], float(a.slot.get("face_up_delay", 0)))
        schedule[a.card["id"]] = reveal_start + delay * 1000 + a.order * REVEAL_STAGGER_MS
    return schedule


def reveal_state(current: RevealState, reveal_at: float, now: float) -> RevealState:
    if current is RevealState.REVEALED or now >= reveal_at:
        return RevealState.REVEALED
    return RevealState.HIDDEN


def advance_reveals(
    states: Mapping[str, RevealState],
    schedule: Mapping[str, float],
    now: float,
) -> Dict[str, RevealState]:
    return {
        card_id: reveal_state(states.get(card_id, RevealState.HIDDEN), at, now)
        for card_id, at in schedule.items()
    }


@dataclass(frozen=True)
class DrawSession:
    """State of one drawing table.

    Every update returns a new session; nothing is mutated in place. The
    gesture, energy and effective seed are derived fresh on each update.
    """

    seed: str
    variant_key: str
    spread_key: str
    manual: bool = False
    gesture: GestureTrace = field(default_factory=GestureTrace)
    signature: str = ""
    energy: float = 0.0
    assignments: Tuple[DrawnAssignment, ...] = ()
    reveal_at: Dict[str, float] = field(default_factory=dict)
    reveals: Dict[str, RevealState] = field(default_factory=dict)
    history: Tuple[HistoryEntry, ...] = ()
    history_limit: int = DEFAULT_HISTORY_LIMIT

    @property
    def effective_seed(self) -> str:
        return effective_seed(self.seed, self.signature, self.energy, self.variant_key)

    def configure(
        self,
        variant_key: Optional[str] = None,
        spread_key: Optional[str] = None,
        manual: Optional[bool] = None,
    ) -> "DrawSession":
        return replace(
            self,
            variant_key=variant_key or self.variant_key,
            spread_key=spread_key or self.spread_key,
            manual=self.manual if manual is None else manual,
        )

    # -- gesture ------------------------------------------------------------

    def begin(self, point: GesturePoint) -> "DrawSession":
        return replace(self, gesture=self.gesture.begin(point))

    def extend(self, point: GesturePoint) -> "DrawSession":
        return replace(self, gesture=self.gesture.extend(point))

    def end(self) -> "DrawSession":
        gesture = self.gesture.end()
        signature = gesture.signature
        return replace(
            self,
            gesture=gesture,
            signature=signature,
            energy=gesture.energy if signature else 0.0,
        )

    def with_gesture(self, gesture: GestureTrace) -> "DrawSession":
        return replace(self, gesture=gesture)

    def seed_draft(self, signature: str, energy: float) -> "DrawSession":
        return replace(self, signature=signature, energy=energy)

    def reset(self) -> "DrawSession":
        return replace(self, gesture=GestureTrace(), signature="", energy=0.0)

    def randomize(self, rng: Optional[random.Random] = None) -> "DrawSession":
        return replace(self.reset(), seed=create_seed(rng))

    # -- drawing ------------------------------------------------------------

    def perform_draw(
        self,
        cards: Sequence[Dict[str, Any]],
        slots: Sequence[Dict[str, Any]],
        reveal_start: float,
        at: Optional[datetime] = None,
    ) -> "DrawSession":
        seed = self.effective_seed
        assignments = draw(cards, slots, seed)
        schedule = schedule_reveals(assignments, reveal_start, slots)
        entry = HistoryEntry(
            seed=seed,
            spread=self.spread_key,
            variant=self.variant_key,
            at=at or datetime.now(timezone.utc),
        )
        log.info("drew %d cards for spread %s with seed %r",
                 len(assignments), self.spread_key, seed)
        return replace(
            self,
            assignments=tuple(assignments),
            reveal_at=schedule,
            reveals={card_id: RevealState.HIDDEN for card_id in schedule},
            history=((entry,) + self.history)[: self.history_limit],
        )

    def advance(self, now: float) -> "DrawSession":
        return replace(self, reveals=advance_reveals(self.reveals, self.reveal_at, now))

    @property
    def active_card_id(self) -> Optional[str]:
        return self.assignments[0].card["id"] if self.assignments else None

    # -- display ------------------------------------------------------------

    @property
    def seed_display(self) -> str:
        if self.manual and self.signature:
            return f"{self.seed} · signature {self.signature}"
        return self.seed

    @property
    def energy_display(self) -> str:
        return str(round_energy(self.gesture.energy)).zfill(3)
