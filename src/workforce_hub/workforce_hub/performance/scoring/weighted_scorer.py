from __future__ import annotations

from ...common.datetime_utils import round_half_up
from ..model import TaskTally
from .base import PerformanceScorer


class WeightedPerformanceScorer(PerformanceScorer):
    """High-priority work 50%, punctuality 30%, volume 20%.

    Ten high-priority tasks or twenty tasks in a month saturate their parts.
    """

    def __init__(self, *, high_target: int = 10, volume_target: int = 20):
        self._high_target = high_target
        self._volume_target = volume_target

    def score(self, tally: TaskTally) -> int:
        high_part = min(tally.high / self._high_target, 1) * 50
        punctuality_part = tally.on_time_rate * 30
        volume_part = min(tally.total / self._volume_target, 1) * 20
        return int(round_half_up(high_part + punctuality_part + volume_part))
