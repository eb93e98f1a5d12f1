"""Drag gesture capture: bounded trace, energy and signature.

A gesture runs from pointer-down to pointer-up (or pointer-leave). The captured
points are folded into a short base-36 signature and an energy value that the
draw session mixes into its seed.

``GestureTrace`` is an immutable value; every update returns a new trace.
``ShufflePad`` is the event-facing controller holding the current value, the
single-flight frame throttle and the ``on_seed_draft`` callback.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional, Sequence, Tuple

from arcana.utils.rng import MASK32, imul

log = logging.getLogger("arcana.gesture")

TRACE_LIMIT = 260
ENERGY_SCALE = 0.25
# Bound on local pointer coordinates, either axis
COORD_LIMIT = 1e6


class GestureError(ValueError):
    pass


@dataclass(frozen=True)
class GesturePoint:
    x: float
    y: float
    t: float

    def __post_init__(self):
        for name in ("x", "y", "t"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise GestureError(f"{name} must be finite, got {value!r}")
        if abs(self.x) > COORD_LIMIT or abs(self.y) > COORD_LIMIT:
            raise GestureError(f"point ({self.x}, {self.y}) is outside +/-{COORD_LIMIT:g}")


def trace_signature(points: Sequence[GesturePoint]) -> str:
    """Fold a drag trace into a base-36 signature ("" for an empty trace)."""
    if not points:
        return ""
    acc = 0
    for i, p in enumerate(points):
        mixed = int(p.x * 9973) ^ int(p.y * 8123)
        acc = (acc + imul(mixed, i + 31)) & MASK32
        acc = (acc + imul(int(p.t) & 0xFFFF, 97)) & MASK32
    return to_base36(acc)


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append("0123456789abcdefghijklmnopqrstuvwxyz"[rem])
    return "".join(reversed(digits))


def segment_energy(prev: GesturePoint, curr: GesturePoint) -> float:
    return math.hypot(curr.x - prev.x, curr.y - prev.y) * ENERGY_SCALE


@dataclass(frozen=True)
class GestureTrace:
    """Snapshot of one gesture: retained points, energy and drag status."""

    points: Tuple[GesturePoint, ...] = ()
    energy: float = 0.0
    dragging: bool = False

    def begin(self, point: GesturePoint) -> "GestureTrace":
        return GestureTrace(points=(point,), energy=0.0, dragging=True)

    def extend(self, point: GesturePoint) -> "GestureTrace":
        if self.points and point.t < self.points[-1].t:
            raise GestureError(
                f"timestamp {point.t} is earlier than the previous point ({self.points[-1].t})"
            )
        points = self.points + (point,)
        if len(points) > TRACE_LIMIT:
            points = points[-TRACE_LIMIT:]
        energy = self.energy
        if len(points) >= 2:
            energy += segment_energy(points[-2], points[-1])
        return replace(self, points=points, energy=energy)

    def end(self) -> "GestureTrace":
        # Points stay until the next begin
        return replace(self, dragging=False)

    def reset(self) -> "GestureTrace":
        return GestureTrace()

    @property
    def signature(self) -> str:
        return trace_signature(self.points)

    @classmethod
    def from_points(cls, points: Iterable[GesturePoint]) -> "GestureTrace":
        """Replay a whole gesture: begin on the first point, extend with the rest."""
        trace = cls()
        for index, point in enumerate(points):
            trace = trace.begin(point) if index == 0 else trace.extend(point)
        return trace.end()


@dataclass
class FrameThrottle:
    """Single-flight recompute request, drained by the next frame tick."""

    pending: bool = False
    latest: Optional[Tuple[float, float]] = None

    def request(self, x: float, y: float) -> bool:
        """Record the pointer; returns True only when a new request was queued."""
        self.latest = (x, y)
        if self.pending:
            return False
        self.pending = True
        return True

    def tick(self, recompute: Callable[[float, float], None]) -> bool:
        if not self.pending or self.latest is None:
            return False
        x, y = self.latest
        self.pending = False
        recompute(x, y)
        return True


SeedDraftCallback = Callable[[str, float], None]


@dataclass
class ShufflePad:
    """Pointer-event controller for the manual shuffle surface."""

    on_seed_draft: SeedDraftCallback
    active: bool = True
    trace: GestureTrace = field(default_factory=GestureTrace)
    throttle: FrameThrottle = field(default_factory=FrameThrottle)
    last_signature: str = ""

    def pointer_down(self, x: float, y: float, t: float) -> None:
        if not self.active:
            return
        self.trace = self.trace.begin(GesturePoint(x, y, t))
        self.throttle.request(x, y)

    def pointer_move(self, x: float, y: float, t: float) -> None:
        if not self.active or not self.trace.dragging:
            return
        self.trace = self.trace.extend(GesturePoint(x, y, t))
        self.throttle.request(x, y)

    def pointer_up(self) -> None:
        if not self.trace.dragging:
            return
        self.trace = self.trace.end()
        self._emit()

    # Leaving the surface finalizes the gesture the same way as releasing it
    pointer_leave = pointer_up

    def reset(self) -> None:
        self.trace = self.trace.reset()
        self.throttle = FrameThrottle()
        self.last_signature = ""
        self.on_seed_draft("", 0)

    def tick(self, recompute: Callable[[float, float], None]) -> bool:
        return self.throttle.tick(recompute)

    @property
    def energy(self) -> float:
        return self.trace.energy

    def _emit(self) -> None:
        signature = self.trace.signature
        self.last_signature = signature
        energy = self.trace.energy if signature else 0
        log.debug("gesture finished: %d points, signature=%r energy=%.2f",
                  len(self.trace.points), signature, energy)
        self.on_seed_draft(signature, energy)
