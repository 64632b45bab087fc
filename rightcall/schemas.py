"""
Pydantic request/response schemas for the RightCall API.

Third-party JSON never reaches the engine directly: request bodies are
validated here and converted to the core dataclasses in ``main.py``.
"""

from __future__ import annotations

import math
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator

SideLiteral = Literal["home", "away"]
ResultLiteral = Literal["home", "away", "pending", "missing"]


# ---------------------------------------------------------------------------
# Slate games
# ---------------------------------------------------------------------------

class SlateGameIn(BaseModel):
    """One scheduled game, labelled by team abbreviation."""

    id: str = Field(..., min_length=1)
    home: str = Field(..., min_length=1, description='e.g. "BUF"')
    away: str = Field(..., min_length=1, description='e.g. "NYJ"')


class PricedGameIn(SlateGameIn):
    """Slate game with the American prices the picks were made against."""

    home_american: Optional[float] = Field(None, description="Omit to use the default price")
    away_american: Optional[float] = Field(None, description="Omit to use the default price")

    @field_validator("home_american", "away_american")
    @classmethod
    def validate_american_odds(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        if not math.isfinite(v):
            raise ValueError("American odds must be finite")
        if v == 0:
            raise ValueError("American odds cannot be 0")
        return v


# ---------------------------------------------------------------------------
# Odds
# ---------------------------------------------------------------------------

class MarketPriceOut(BaseModel):
    home_american: int
    away_american: int


class OddsBoardResponse(BaseModel):
    """Structure for GET /api/odds/nfl, keyed "AWAY@HOME"."""
    odds: Dict[str, MarketPriceOut]


# ---------------------------------------------------------------------------
# Scoreboard
# ---------------------------------------------------------------------------

class TeamScoreOut(BaseModel):
    abbr: str
    name: Optional[str]
    score: int

    class Config:
        from_attributes = True


class ScoreboardGameOut(BaseModel):
    id: str
    start: Optional[str]
    status: Optional[str]
    completed: bool
    home: TeamScoreOut
    away: TeamScoreOut

    class Config:
        from_attributes = True


class ScoreboardResponse(BaseModel):
    query: str
    games: list[ScoreboardGameOut]


class RightWrongOut(BaseModel):
    right: int
    wrong: int


class SlateGameOut(BaseModel):
    """A scoreboard game with its consensus prices and pick payoffs."""

    id: str
    home: str
    away: str
    start: Optional[str] = None
    home_american: int
    away_american: int
    priced: bool
    p_home: float
    p_away: float
    home_points: RightWrongOut
    away_points: RightWrongOut


class SlateResponse(BaseModel):
    query: str
    games: list[SlateGameOut]


# ---------------------------------------------------------------------------
# Settlement
# ---------------------------------------------------------------------------

class SettleRequest(BaseModel):
    """
    Payload for POST /api/settle.

    Identify the scoreboard either by ``date`` or by ``year`` + ``week``
    (+ ``seasontype``).  With neither, today's date is used.
    """

    date: Optional[str] = Field(None, pattern=r"^\d{8}$", description="YYYYMMDD")
    year: Optional[int] = Field(None, ge=2000, le=2100)
    week: Optional[int] = Field(None, ge=1, le=18)
    seasontype: int = Field(2, ge=1, le=3, description="1 = pre, 2 = regular, 3 = post")
    slate: list[SlateGameIn] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "example": {
                "year": 2025,
                "week": 6,
                "seasontype": 2,
                "slate": [{"id": "401772734", "home": "BUF", "away": "NYJ"}],
            }
        }
    }


class SettleResponse(BaseModel):
    query: str
    results: Dict[str, ResultLiteral]


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

class RatingApplyRequest(BaseModel):
    """
    Payload for POST /api/ratings/apply.

    ``results`` is normally the body of a previous /api/settle call.  Picks
    are locked before results are attached; the slate is rejected until
    every picked game has a final result.
    """

    participant: str = Field(..., min_length=1, max_length=80)
    slate_id: str = Field(..., min_length=1, max_length=80)
    games: list[PricedGameIn] = Field(..., min_length=1)
    picks: Dict[str, Optional[SideLiteral]] = Field(default_factory=dict)
    results: Dict[str, ResultLiteral] = Field(default_factory=dict)


class RatingApplyResponse(BaseModel):
    participant: str
    slate_id: str
    applied: bool
    delta: int
    rating_before: int
    rating_after: int
    display_points: int
    picks_settled: int
    picks_won: int


class RatingApplicationOut(BaseModel):
    slate_id: str
    delta: int
    picks_settled: int
    picks_won: int
    display_points: int
    rating_before: int
    rating_after: int

    class Config:
        from_attributes = True


class ParticipantRatingResponse(BaseModel):
    participant: str
    rating: int
    applications: list[RatingApplicationOut]
