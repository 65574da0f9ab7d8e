from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.enums import PerformanceRating
from ..model import TaskTally


class PerformanceScorer(ABC):
    """Scorer interface (Strategy Pattern for performance)."""

    @abstractmethod
    def score(self, tally: TaskTally) -> int:
        raise NotImplementedError

    def rating(self, score: int) -> PerformanceRating:
        if score >= 85:
            return PerformanceRating.EXCELLENT
        if score >= 70:
            return PerformanceRating.GOOD
        if score >= 50:
            return PerformanceRating.AVERAGE
        return PerformanceRating.NEEDS_IMPROVEMENT
