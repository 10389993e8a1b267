"""
Completion deltas, the contribution of one completion to the account.

A delta is a pure function of a completion's content::

    xp       = XP_PER_COMPLETED_SET × (number of completed sets)
    weight   = Σ weight × reps   over completed sets with weight > 0 and reps > 0
    duration = actual_duration   (minutes; not derived from the sets)

Sets that are completed but carry no weight (bodyweight, cardio) still
earn xp.  Weights are kept to WEIGHT_DECIMALS places (grams) so that
adding and removing the same completion restores a total exactly.  Because the function is deterministic, an update can be
applied as ``delta(new) - delta(old)`` and a delete as ``-delta(old)``.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Union

from pydantic import BaseModel, ConfigDict

from repforge.core.config import settings
from repforge.schemas.completion import CompletionContent


WEIGHT_DECIMALS = 3


def round_weight(weight: float) -> float:
    return round(weight, WEIGHT_DECIMALS)


class CompletionDelta(BaseModel):
    """(xp, weight, duration) contribution of a completion.  Signed: a
    withdrawal or a correction can be negative.
    """

    model_config = ConfigDict(frozen=True)

    xp: int = 0
    weight: float = 0.0
    duration: int = 0

    def __add__(self, other: CompletionDelta) -> CompletionDelta:
        return CompletionDelta(xp=self.xp + other.xp, weight=round_weight(self.weight + other.weight),
                               duration=self.duration + other.duration)

    def __sub__(self, other: CompletionDelta) -> CompletionDelta:
        return self + (-other)

    def __neg__(self) -> CompletionDelta:
        return CompletionDelta(xp=-self.xp, weight=-self.weight, duration=-self.duration)

    @property
    def is_zero(self) -> bool:
        return self.xp == 0 and self.weight == 0 and self.duration == 0


ZERO_DELTA = CompletionDelta()

ContentLike = Union[CompletionContent, Mapping[str, Any]]


def count_completed_sets(content: CompletionContent) -> int:
    return sum(1 for exercise in content.exercises for s in exercise.sets if s.completed)


def compute_weight(content: CompletionContent) -> float:
    return round_weight(sum(
        s.weight * s.reps
        for exercise in content.exercises
        for s in exercise.sets
        if s.completed and s.weight > 0 and s.reps > 0
    ))


def compute_delta(content: ContentLike, xp_per_set: int | None = None) -> CompletionDelta:
    """Compute the delta of a completion.

    Args:
        content: A :class:`CompletionContent` or a raw mapping with the
            same shape (validated on the way in).
        xp_per_set: Override for ``settings.XP_PER_COMPLETED_SET``.

    Raises:
        pydantic.ValidationError: If a raw mapping is malformed.
    """
    if not isinstance(content, CompletionContent):
        content = CompletionContent.model_validate(content)
    per_set = settings.XP_PER_COMPLETED_SET if xp_per_set is None else xp_per_set

    return CompletionDelta(xp=per_set * count_completed_sets(content), weight=compute_weight(content),
                           duration=content.actual_duration, )


def sum_deltas(deltas: Iterable[CompletionDelta]) -> CompletionDelta:
    total = ZERO_DELTA
    for d in deltas:
        total = total + d
    return total
