from datetime import datetime
from pydantic import BaseModel, Field, model_validator
from typing import Dict, List, Optional, Literal

from arcana.gesture import COORD_LIMIT

Arcana = Literal["major", "minor"]
RevealStateName = Literal["hidden", "revealed"]


class Card(BaseModel):
    id: str
    name: str
    arcana: Arcana
    suit: Optional[str] = None
    number: int
    keywords: List[str] = Field(default_factory=list)


class SpreadSlot(BaseModel):
    id: str
    label: str
    position: List[float]
    rotation: List[float]
    face_up_delay: float = Field(..., ge=0)


class Spread(BaseModel):
    key: str
    label: str
    description: str = ""
    cards: List[SpreadSlot]


class DeckVariant(BaseModel):
    key: str
    label: str
    description: str = ""
    icon: str = ""
    palette: Dict[str, object] = Field(default_factory=dict)


class ShuffleRequest(BaseModel):
    seed: str = Field(..., description="Any text, possibly empty")


class ShuffleResponse(BaseModel):
    seed: str
    card_ids: List[str]


class SessionStartRequest(BaseModel):
    seed: Optional[str] = Field(None, description="Base seed; a fresh one is created when omitted")
    variant: Optional[str] = None
    spread: Optional[str] = None
    manual: bool = False


class GesturePointIn(BaseModel):
    x: float = Field(..., ge=-COORD_LIMIT, le=COORD_LIMIT, allow_inf_nan=False)
    y: float = Field(..., ge=-COORD_LIMIT, le=COORD_LIMIT, allow_inf_nan=False)
    t: float = Field(..., allow_inf_nan=False, description="Monotonic timestamp in milliseconds")


class GestureRequest(BaseModel):
    points: List[GesturePointIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def timestamps_non_decreasing(self) -> "GestureRequest":
        for prev, curr in zip(self.points, self.points[1:]):
            if curr.t < prev.t:
                raise ValueError(f"point timestamps must not go backwards ({prev.t} then {curr.t})")
        return self


class DrawRequest(BaseModel):
    spread: Optional[str] = None
    variant: Optional[str] = None
    reveal_start: Optional[float] = Field(None, description="Monotonic clock reading in ms")


class Assignment(BaseModel):
    order: int
    slot_id: str
    slot_label: str
    card: Card
    reveal_at: float


class HistoryItem(BaseModel):
    seed: str
    spread: str
    variant: str
    at: datetime


class SessionResponse(BaseModel):
    session_id: str
    seed: str
    seed_display: str
    variant: str
    spread: str
    manual: bool
    signature: str
    energy: float
    energy_display: str
    effective_seed: str


class DrawResponse(BaseModel):
    session_id: str
    effective_seed: str
    spread: str
    variant: str
    active_card_id: Optional[str] = None
    assignments: List[Assignment]


class RevealResponse(BaseModel):
    session_id: str
    now: float
    states: Dict[str, RevealStateName]


class HistoryResponse(BaseModel):
    session_id: str
    history: List[HistoryItem]
