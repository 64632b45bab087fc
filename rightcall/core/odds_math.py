"""Fundamental odds mathematics: the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services or routes.

The three pillars exposed are:

1. **Odds conversion**: American odds → raw implied probability.
2. **Vig removal**: proportional two-way normalisation to a fair pair.
3. **Price aggregation**: median of many bookmaker quotes for one side.

Design decisions
----------------
* Prices arrive from The Odds API as numbers but may be strings, ``None``
  or non-finite.  :func:`parse_price` is the boundary filter; everything
  downstream of it may assume a finite, nonzero float.
* A zero American price has no meaning (no stake/payout ratio) and is
  treated as malformed rather than mapped to probability 1.0.
* Vig removal is proportional normalisation.  Both sides of a two-way
  moneyline carry the same margin structure in the books we aggregate,
  and the median across books already damps single-book outliers.
* Rounding is half-up (``floor(x + 0.5)``) so that ``-107.5`` becomes
  ``-107`` and ``12.5`` becomes ``13``.  Python's built-in :func:`round`
  rounds half to even and would disagree with the published point tables.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Final, Iterable, List, Optional

import numpy as np

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: Stake/payout base of the American convention.
_AMERICAN_BASE: Final[float] = 100.0

#: Tolerance used when asserting the unit-sum invariant of a fair pair.
UNIT_SUM_TOL: Final[float] = 1e-9


# ---------------------------------------------------------------------------
# Rounding
# ---------------------------------------------------------------------------


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity.

    Examples::

        round_half_up(12.5)   → 13
        round_half_up(-107.5) → -107
        round_half_up(-26.5)  → -26
    """
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def check_probability(p: float) -> None:
    """Raise ``ValueError`` unless ``p`` is a probability in ``[0, 1]``."""
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Probability {p!r} must be in [0, 1]")


# ---------------------------------------------------------------------------
# Boundary parsing
# ---------------------------------------------------------------------------


def parse_price(raw: object) -> Optional[float]:
    """Parse a raw quote into a usable American price, or ``None``.

    Accepts ints, floats and numeric strings.  Rejects ``None``, booleans,
    unparsable strings, NaN, ±inf and zero.  Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        price = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price == 0.0:
        return None
    return price


# ---------------------------------------------------------------------------
# Odds conversion
# ---------------------------------------------------------------------------


def implied_prob(american: int | float) -> float:
    """Raw implied probability from American odds (vig-inclusive).

    This is the bookmaker's *stated* probability and includes the overround
    (vig).  For fair probabilities use :func:`devig_two_way`.

    Args:
        american: American odds.  Sign convention: negative = favourite
            (risk more than you win), positive = underdog (win more than
            you risk).

    Returns:
        Raw implied probability in ``(0, 1)``.  Two-outcome markets will
        sum to > 1.0 due to the bookmaker's margin.

    Raises:
        ValueError: If ``american`` is zero or not finite.  Callers are
            expected to have filtered such quotes with :func:`parse_price`.

    Examples::

        implied_prob(-160) → 0.6154
        implied_prob(+140) → 0.4167
    """
    a = float(american)
    if not math.isfinite(a) or a == 0.0:
        raise ValueError(
            f"Invalid American odds {american!r}: must be finite and nonzero. "
            "Filter quotes with parse_price() before converting."
        )
    if a >= 0:
        return _AMERICAN_BASE / (a + _AMERICAN_BASE)
    return -a / (-a + _AMERICAN_BASE)


# ---------------------------------------------------------------------------
# Vig removal
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FairProbabilityPair:
    """No-vig home/away probabilities summing to one."""

    p_home: float
    p_away: float

    def for_side(self, side: str) -> float:
        """Probability for ``"home"`` or ``"away"``."""
        if side == "home":
            return self.p_home
        if side == "away":
            return self.p_away
        raise ValueError(f"Unknown side {side!r}; expected 'home' or 'away'")

    @property
    def overround_free(self) -> bool:
        return abs(self.p_home + self.p_away - 1.0) <= UNIT_SUM_TOL


def devig_two_way(p_home_raw: float, p_away_raw: float) -> FairProbabilityPair:
    """Normalise two raw implied probabilities to a fair distribution.

    ``p_home = p_home_raw / (p_home_raw + p_away_raw)`` and likewise for the
    away side.  Relative ordering of the inputs is preserved.

    Raises:
        ValueError: If the two raw probabilities do not sum to a positive
            number.  Validate before calling.
    """
    total = p_home_raw + p_away_raw
    if not total > 0.0:
        raise ValueError(
            f"Cannot devig pair ({p_home_raw!r}, {p_away_raw!r}): sum must be > 0"
        )
    return FairProbabilityPair(p_home=p_home_raw / total, p_away=p_away_raw / total)


def fair_probabilities(home_price: int | float, away_price: int | float) -> FairProbabilityPair:
    """American prices for both sides → fair pair."""
    return devig_two_way(implied_prob(home_price), implied_prob(away_price))


# ---------------------------------------------------------------------------
# Price aggregation
# ---------------------------------------------------------------------------


def median(values: Iterable[float]) -> float:
    """Median; the mean of the two central values for even-length input.

    Raises:
        ValueError: On an empty collection.
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        raise ValueError("median of an empty collection is undefined")
    return float(np.median(arr))


def aggregate_prices(raw_prices: Iterable[object]) -> Optional[int]:
    """Representative American price for one side of a matchup.

    Malformed quotes (see :func:`parse_price`) are discarded silently.  The
    median of what remains is rounded half-up to an integer.

    Returns:
        The representative price, or ``None`` when no valid quote remains.
        A matchup with ``None`` on either side must be dropped.

    Examples::

        aggregate_prices([-110, -120, -105])   → -110
        aggregate_prices([-110, -105])         → -107   (mean -107.5)
        aggregate_prices(["-110", None, "x"])  → -110
        aggregate_prices([float("nan")])       → None
    """
    prices: List[float] = [p for p in (parse_price(r) for r in raw_prices) if p is not None]
    if not prices:
        return None
    return round_half_up(median(prices))
