"""Right/wrong display points for a single pick.

All functions here are **pure**.

A correct pick on a heavy underdog pays close to the full scale ``P0``; a
correct pick on a heavy favourite pays close to nothing.  The penalty for a
wrong pick mirrors this: missing on an "obvious" favourite costs the most.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from rightcall.core.odds_math import check_probability, round_half_up

#: Baseline magnitude of points per pick.
DEFAULT_POINTS_SCALE: Final[int] = 20


@dataclass(frozen=True)
class RightWrongPoints:
    """Payoff shown next to a side before it is picked."""

    right: int
    wrong: int


def right_wrong_points(p: float, p0: float = DEFAULT_POINTS_SCALE) -> RightWrongPoints:
    """Points for being right / wrong on a side with fair win probability ``p``.

    ``right = round(p0 * (1 - p))`` and ``wrong = -round(p0 * p)``.

    Examples::

        right_wrong_points(0.5)   → RightWrongPoints(right=10, wrong=-10)
        right_wrong_points(0.8)   → RightWrongPoints(right=4,  wrong=-16)
    """
    check_probability(p)
    return RightWrongPoints(
        right=round_half_up(p0 * (1.0 - p)),
        wrong=-round_half_up(p0 * p),
    )


def display_points(outcome: int, p: float, p0: float = DEFAULT_POINTS_SCALE) -> int:
    """Realised display payoff of a settled pick: ``round(p0 * (outcome - p))``."""
    if outcome not in (0, 1):
        raise ValueError(f"outcome must be 0 or 1, got {outcome!r}")
    check_probability(p)
    return round_half_up(p0 * (outcome - p))
