"""
Level function.

    level(xp) = floor(sqrt(xp / LEVEL_XP_UNIT)) + 1

so level ``n`` starts at ``LEVEL_XP_UNIT × (n - 1)²`` xp (0, 100, 400, 900, ...
with the default unit).  The level is never stored independently of xp:
every xp change re-derives it from here.
"""

from __future__ import annotations

import math
from pydantic import BaseModel, ConfigDict

from repforge.core.config import settings


def _unit(xp_unit: int | None) -> int:
    return settings.LEVEL_XP_UNIT if xp_unit is None else xp_unit


def level_for_xp(xp: int, xp_unit: int | None = None) -> int:
    """Return the level reached with *xp* cumulative experience points.

    Uses integer arithmetic (``isqrt(xp // unit)`` equals
    ``floor(sqrt(xp / unit))`` for non-negative integers) so the result
    is exact however large xp grows.
    """
    if xp < 0:
        raise ValueError(f"xp must be >= 0, got {xp}")
    return math.isqrt(int(xp) // _unit(xp_unit)) + 1


def xp_for_level(level: int, xp_unit: int | None = None) -> int:
    """Minimum xp of *level* (inverse of :func:`level_for_xp`)."""
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    return _unit(xp_unit) * (level - 1) ** 2


class LevelProgress(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: int
    xp_into_level: int
    xp_for_next_level: int


def level_progress(xp: int, xp_unit: int | None = None) -> LevelProgress:
    """Current level, xp earned inside it and xp still missing for the next one."""
    level = level_for_xp(xp, xp_unit)
    start = xp_for_level(level, xp_unit)
    nxt = xp_for_level(level + 1, xp_unit)
    return LevelProgress(level=level, xp_into_level=xp - start, xp_for_next_level=nxt - xp)
