"""Core mathematics and configuration for the RightCall pick'em engine.

This package contains pure building blocks:

- ``odds_math``    : American odds → implied probability, devig, median aggregation
- ``scoring``      : right/wrong display points
- ``rating``       : bounded Elo-style rating delta
- ``settlement``   : matchup → home / away / pending / missing classification
- ``picks``        : Open → Locked → Settled pick lifecycle and slate totals
- ``engine_config``: scoring and rating constants

Nothing in this package imports from ``rightcall.services`` or ``rightcall.models``.
All modules are side-effect-free and unit-testable in isolation.
"""
