"""Bounded Elo-style rating delta for a settled pick.

Pure.  Summing deltas across a slate and writing the result to a stored
rating is the ledger's job (:mod:`rightcall.services.rating_ledger`).
"""

from __future__ import annotations

import math
from typing import Final

from rightcall.core.odds_math import check_probability, round_half_up

#: Sensitivity constant K.
DEFAULT_K: Final[float] = 30.0

#: Per-pick cap on the absolute delta.
DEFAULT_PICK_CAP: Final[float] = 40.0

#: Rating assigned to a participant on first use.
BASE_RATING: Final[int] = 1200


def rating_delta(
    k: float,
    outcome: int,
    p: float,
    cap: float = DEFAULT_PICK_CAP,
) -> int:
    """Compute ``round(clamp(k * (outcome - p), -cap, cap))``.

    Args:
        k: Sensitivity constant.
        outcome: 1 if the pick won, 0 if it lost.
        p: Fair probability that the pick would win.
        cap: Maximum absolute delta for one pick.

    Returns:
        Integer delta with ``|delta| <= cap``.  Non-negative for a win,
        non-positive for a loss.

    Raises:
        ValueError: If ``outcome`` is not 0 or 1, ``p`` is outside ``[0, 1]``
            or ``cap`` is negative.

    Examples::

        rating_delta(30, 1, 0.3) → 21
        rating_delta(30, 0, 0.9) → -27
    """
    if outcome not in (0, 1):
        raise ValueError(f"outcome must be 0 or 1, got {outcome!r}")
    if cap < 0:
        raise ValueError(f"cap must be non-negative, got {cap!r}")
    check_probability(p)
    raw = k * (outcome - p)
    capped = max(-cap, min(cap, raw))
    # A fractional cap must not be exceeded by rounding.
    limit = math.floor(cap)
    return max(-limit, min(limit, round_half_up(capped)))
