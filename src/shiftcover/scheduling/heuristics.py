"""Ranking strategies used while building candidate schedules.

Each heuristic turns an eligible employee into a sort key; the lowest key
wins. Every key ends with the employee's name and id so that ranking is a
total order and generation stays deterministic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from shiftcover.domain.models import Employee
from shiftcover.domain.policies import Heuristic


@dataclass(frozen=True)
class RankingCandidate:
    """Facts about one eligible employee for one unmet demand.

    Attributes:
        employee: The employee being ranked.
        continues: True if the assignment extends a shift ending right here.
        assigned_minutes: Minutes already scheduled this week (fixed included).
        prior_minutes: ``assigned_minutes`` without the shift being extended.
        proposed_start: Start minute of the resulting shift.
        usual_start: Average start minute of the employee's other shifts.
    """

    employee: Employee
    continues: bool
    assigned_minutes: int
    prior_minutes: int
    proposed_start: int
    usual_start: Optional[float] = None

    @property
    def tie_breaker(self) -> tuple[str, str]:
        return (self.employee.name, self.employee.id)


class RankingStrategy(ABC):
    """Abstract base class for heuristic ranking."""

    heuristic: Heuristic

    @abstractmethod
    def sort_key(self, candidate: RankingCandidate) -> tuple:
        """Sort key for a candidate; lower ranks first."""
        pass

    def pick(self, candidates: list[RankingCandidate]) -> Optional[RankingCandidate]:
        """Best candidate, or None if there is nobody to choose from."""
        if not candidates:
            return None
        return min(candidates, key=self.sort_key)


@dataclass
class BalancedRanking(RankingStrategy):
    """Prefer whoever has the fewest hours so far."""

    heuristic: Heuristic = Heuristic.BALANCED

    def sort_key(self, candidate: RankingCandidate) -> tuple:
        return (
            candidate.prior_minutes,
            not candidate.continues,
            candidate.assigned_minutes,
        ) + candidate.tie_breaker


@dataclass
class CostOptimizedRanking(RankingStrategy):
    """Prefer the lowest hourly wage; unknown wages rank last."""

    heuristic: Heuristic = Heuristic.COST_OPTIMIZED

    def sort_key(self, candidate: RankingCandidate) -> tuple:
        wage = candidate.employee.hourly_wage
        return (
            float("inf") if wage is None else wage,
            not candidate.continues,
            candidate.assigned_minutes,
        ) + candidate.tie_breaker


@dataclass
class ContinuityRanking(RankingStrategy):
    """Prefer extending a running shift over starting a new one."""

    heuristic: Heuristic = Heuristic.CONTINUITY

    def sort_key(self, candidate: RankingCandidate) -> tuple:
        return (
            not candidate.continues,
            candidate.assigned_minutes,
        ) + candidate.tie_breaker


@dataclass
class ConsistentStartsRanking(RankingStrategy):
    """Prefer employees whose usual start time matches this shift."""

    heuristic: Heuristic = Heuristic.CONSISTENT_STARTS

    def sort_key(self, candidate: RankingCandidate) -> tuple:
        if candidate.usual_start is None:
            deviation = 0.0
        else:
            deviation = abs(candidate.proposed_start - candidate.usual_start)
        return (
            not candidate.continues,
            deviation,
            candidate.assigned_minutes,
        ) + candidate.tie_breaker


_STRATEGIES = {
    Heuristic.BALANCED: BalancedRanking,
    Heuristic.COST_OPTIMIZED: CostOptimizedRanking,
    Heuristic.CONTINUITY: ContinuityRanking,
    Heuristic.CONSISTENT_STARTS: ConsistentStartsRanking,
}


def strategy_for(heuristic: Heuristic) -> RankingStrategy:
    """Ranking strategy implementing ``heuristic``."""
    return _STRATEGIES[heuristic]()
