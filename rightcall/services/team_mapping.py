"""
Mapping from The Odds API NFL team names to scoreboard abbreviations.
This is the single source of truth for team-label normalization.

Settlement matches slate games to scoreboard records by exact label, so
both upstreams must be folded onto the same abbreviation set before any
comparison happens.
"""

from __future__ import annotations

import logging
from typing import Optional

from rapidfuzz import fuzz, process, utils

logger = logging.getLogger(__name__)

# Full franchise name (as The Odds API reports it) → abbreviation.
TEAM_ABBR: dict[str, str] = {
    "Arizona Cardinals": "ARI", "Atlanta Falcons": "ATL", "Baltimore Ravens": "BAL",
    "Buffalo Bills": "BUF", "Carolina Panthers": "CAR", "Chicago Bears": "CHI",
    "Cincinnati Bengals": "CIN", "Cleveland Browns": "CLE", "Dallas Cowboys": "DAL",
    "Denver Broncos": "DEN", "Detroit Lions": "DET", "Green Bay Packers": "GB",
    "Houston Texans": "HOU", "Indianapolis Colts": "IND", "Jacksonville Jaguars": "JAX",
    "Kansas City Chiefs": "KC", "Las Vegas Raiders": "LV", "Los Angeles Chargers": "LAC",
    "Los Angeles Rams": "LAR", "Miami Dolphins": "MIA", "Minnesota Vikings": "MIN",
    "New England Patriots": "NE", "New Orleans Saints": "NO", "New York Giants": "NYG",
    "New York Jets": "NYJ", "Philadelphia Eagles": "PHI", "Pittsburgh Steelers": "PIT",
    "San Francisco 49ers": "SF", "Seattle Seahawks": "SEA", "Tampa Bay Buccaneers": "TB",
    "Tennessee Titans": "TEN", "Washington Commanders": "WAS",
}

# Scoreboard abbreviations that differ from TEAM_ABBR values.
ABBR_ALIASES: dict[str, str] = {
    "WSH": "WAS",
    "JAC": "JAX",
    "LA": "LAR",
    "OAK": "LV",
    "SD": "LAC",
}

_KNOWN_ABBRS = frozenset(TEAM_ABBR.values())

# Threshold 90 catches case, punctuation and spacing variants
# ("san francisco 49ers", "Tampa Bay  Buccaneers") while two franchises
# sharing a city ("New York Jets" / "New York Giants") never cross-match.
_FUZZY_CUTOFF = 90


def normalize_abbr(abbr: Optional[str]) -> str:
    """Fold a scoreboard abbreviation onto the canonical set.  Unknown → as-is."""
    code = (abbr or "").strip().upper()
    return ABBR_ALIASES.get(code, code)


def team_abbr(name: Optional[str]) -> Optional[str]:
    """
    Abbreviation for a full team name, or None if no confident match.

    Strategy 1: exact lookup.
    Strategy 2: already an abbreviation (e.g. a feed that reports "BUF").
    Strategy 3: fuzzy token-sort match against the known franchise names.
    """
    name = (name or "").strip()
    if not name:
        return None

    if name in TEAM_ABBR:
        return TEAM_ABBR[name]

    code = normalize_abbr(name)
    if code in _KNOWN_ABBRS:
        return code

    result = process.extractOne(
        name, list(TEAM_ABBR.keys()), scorer=fuzz.token_sort_ratio,
        processor=utils.default_process, score_cutoff=_FUZZY_CUTOFF,
    )
    if result:
        logger.debug("Fuzzy matched '%s' to '%s' with score %.1f", name, result[0], result[1])
        return TEAM_ABBR[result[0]]

    logger.warning("Unmapped team name: '%s'", name)
    return None
