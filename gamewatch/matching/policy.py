"""Auto-grab decision rules."""

from typing import Iterable, Optional, Protocol, TypeVar


class _Scored(Protocol):
    score: int
    seeders: Optional[int]


T = TypeVar("T", bound=_Scored)


def should_auto_grab(
    score: int, seeders: Optional[int], min_score: int, min_seeders: int
) -> bool:
    """True when both thresholds are met. Unknown seeders count as zero."""
    return score >= min_score and (seeders or 0) >= min_seeders


def select_first_qualifying(
    candidates: Iterable[T], min_score: int, min_seeders: int
) -> Optional[T]:
    """First candidate, in the given order, that clears both thresholds.

    This is first-fit, not best-fit: with scores ``[80, 120, 150]`` and a
    minimum of 100 the 120 candidate is chosen.
    """
    for candidate in candidates:
        if should_auto_grab(candidate.score, candidate.seeders, min_score, min_seeders):
            return candidate
    return None
