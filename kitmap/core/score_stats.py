"""Score Statistics: mean/median/high/low over a variable-size score list.

Invariants:
    - Empty input returns a summary with every statistic None (never raises)
    - Median is sorted(scores)[n // 2]: for even n this is the upper of the two
      middle values, never their average
    - Input order never affects the result
"""

from dataclasses import dataclass
from typing import Iterable

from kitmap.core.domain_types import round_half_up


@dataclass(frozen=True)
class ScoreSummary:
    count: int
    avg: float | None
    median: float | None
    highest: float | None
    lowest: float | None

    def rounded(self, decimals: int) -> "ScoreSummary":
        def _r(v: float | None) -> float | None:
            return None if v is None else round_half_up(v, decimals)
        return ScoreSummary(
            count=self.count,
            avg=_r(self.avg),
            median=_r(self.median),
            highest=_r(self.highest),
            lowest=_r(self.lowest),
        )


def summarize_scores(scores: Iterable[float | None]) -> ScoreSummary:
    """Summarize the non-null scores."""
    present = sorted(s for s in scores if s is not None)
    if not present:
        return ScoreSummary(count=0, avg=None, median=None, highest=None, lowest=None)
    return ScoreSummary(
        count=len(present),
        avg=sum(present) / len(present),
        median=present[len(present) // 2],
        highest=present[-1],
        lowest=present[0],
    )
