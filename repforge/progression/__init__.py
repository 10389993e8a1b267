"""Progression core: completion deltas, the level function and ledger reconciliation."""

from repforge.progression.deltas import CompletionDelta, compute_delta
from repforge.progression.leveling import level_for_xp, level_progress, xp_for_level

__all__ = ["CompletionDelta", "compute_delta", "level_for_xp", "level_progress", "xp_for_level"]
