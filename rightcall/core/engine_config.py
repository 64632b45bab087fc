"""Engine-level configuration: every scoring and rating constant in one place.

Nowhere else in the codebase should the points scale, the Elo K or the
default market price be hard-coded.  Routes and services take an
:class:`EngineConfig` and pass its fields to the pure functions in
:mod:`rightcall.core`.

Typical usage::

    from rightcall.core.engine_config import EngineConfig

    cfg = EngineConfig.from_env()

    # Override a single constant for an experiment:
    from dataclasses import replace
    strict_cfg = replace(cfg, pick_cap=25)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Final

from dotenv import load_dotenv

from rightcall.core.rating import BASE_RATING, DEFAULT_K, DEFAULT_PICK_CAP
from rightcall.core.scoring import DEFAULT_POINTS_SCALE

#: Price assumed for a side when no bookmaker quotes it (a pick'em at -110/-110).
DEFAULT_AMERICAN_PRICE: Final[int] = -110


@dataclass(frozen=True)
class EngineConfig:
    """Immutable configuration bundle for scoring and rating.

    Attributes:
        points_scale: ``P0``, the magnitude of right/wrong display points.
        elo_k: Sensitivity constant of the rating update.
        pick_cap: Maximum absolute rating delta from one pick.
        base_rating: Rating given to a participant on first use.
        default_price: American price used for a side with no market quote.
    """

    points_scale: float = DEFAULT_POINTS_SCALE
    elo_k: float = DEFAULT_K
    pick_cap: float = DEFAULT_PICK_CAP
    base_rating: int = BASE_RATING
    default_price: int = DEFAULT_AMERICAN_PRICE

    def __post_init__(self) -> None:
        if self.points_scale <= 0:
            raise ValueError(f"points_scale must be positive, got {self.points_scale!r}")
        if self.elo_k <= 0:
            raise ValueError(f"elo_k must be positive, got {self.elo_k!r}")
        if self.pick_cap < 0:
            raise ValueError(f"pick_cap must be non-negative, got {self.pick_cap!r}")
        if self.default_price == 0:
            raise ValueError("default_price cannot be 0")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build from environment variables (``.env`` is loaded first)."""
        load_dotenv()
        return cls(
            points_scale=float(os.getenv("POINTS_SCALE", str(DEFAULT_POINTS_SCALE))),
            elo_k=float(os.getenv("ELO_K", str(DEFAULT_K))),
            pick_cap=float(os.getenv("ELO_PICK_CAP", str(DEFAULT_PICK_CAP))),
            base_rating=int(os.getenv("BASE_RATING", str(BASE_RATING))),
            default_price=int(os.getenv("DEFAULT_AMERICAN_PRICE", str(DEFAULT_AMERICAN_PRICE))),
        )
