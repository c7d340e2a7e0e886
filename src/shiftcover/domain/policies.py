"""Policy definitions for schedule generation.

This module contains the knobs that shape generation and scoring: the
heuristic roster, the hard limits applied while building candidates and the
weights the scorer uses. They are kept separate from the engine so that
policies can be tested and tuned independently.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Heuristic(Enum):
    """Candidate construction strategies, each producing one option."""

    BALANCED = "balanced"  # Spread hours evenly
    COST_OPTIMIZED = "cost_optimized"  # Cheapest eligible employee first
    CONTINUITY = "continuity"  # Prefer extending existing shifts
    CONSISTENT_STARTS = "consistent_starts"  # Keep each person's start time stable

    @property
    def label(self) -> str:
        """Human-readable option name."""
        return _HEURISTIC_LABELS[self]


_HEURISTIC_LABELS = {
    Heuristic.BALANCED: "Balanced",
    Heuristic.COST_OPTIMIZED: "Cost-Optimized",
    Heuristic.CONTINUITY: "Continuity",
    Heuristic.CONSISTENT_STARTS: "Consistent Starts",
}

DEFAULT_HEURISTICS = (
    Heuristic.BALANCED,
    Heuristic.COST_OPTIMIZED,
    Heuristic.CONTINUITY,
    Heuristic.CONSISTENT_STARTS,
)

MAX_OPTIONS = 5


@dataclass(frozen=True)
class ScoringWeights:
    """Fixed per-unit weights used by the scorer.

    Attributes:
        covered_bucket: Reward per fully covered bucket.
        gap_bucket: Penalty per bucket with unmet demand.
        critical_gap_multiplier: Multiplier on ``gap_bucket`` when nobody fills it.
        missing_headcount: Penalty per missing person per bucket.
        role_gap: Extra penalty per bucket missing a qualified role.
        conflict: Penalty per overlapping shift pair.
        availability: Penalty per shift outside availability.
        rest_violation: Penalty per short rest gap.
        overtime_per_hour: Penalty per hour above the weekly maximum.
        per_shift: Fragmentation penalty per shift.
        labor_cost_per_unit: Penalty per unit of wage cost (wage x hours).
        fairness_per_hour_spread: Penalty per hour between the most and least
            scheduled active employee.
    """

    covered_bucket: int = 10
    gap_bucket: int = 40
    critical_gap_multiplier: int = 2
    missing_headcount: int = 15
    role_gap: int = 20
    conflict: int = 250
    availability: int = 60
    rest_violation: int = 30
    overtime_per_hour: int = 20
    per_shift: int = 4
    labor_cost_per_unit: float = 0.05
    fairness_per_hour_spread: float = 2.0


@dataclass(frozen=True)
class ScheduleGenerationConstraints:
    """Configuration for one generation run.

    Attributes:
        bucket_minutes: Width of coverage buckets; must divide a day.
        max_weekly_hours: Weekly hour budget per employee.
        min_rest_hours: Minimum rest between two shifts of one employee.
        max_shift_hours: Longest allowed single shift (None = no cap).
        freeze_published_shifts: Treat published shifts as fixed occupancy.
        allow_availability_fallback: Let the fallback pass ignore availability.
        overtime_warning_threshold_hours: Overtime within this excess is INFO.
        requested_option_count: How many options the caller wants (capped at 5).
        heuristics: Heuristics to run, in roster order.
        coverage_weight: Group weight for the coverage term.
        labor_cost_weight: Group weight for the labor cost term.
        fairness_weight: Group weight for the hours-spread term.
        scoring: Per-unit scoring weights.
    """

    bucket_minutes: int = 30
    max_weekly_hours: float = 40.0
    min_rest_hours: float = 10.0
    max_shift_hours: Optional[float] = None
    freeze_published_shifts: bool = True
    allow_availability_fallback: bool = False
    overtime_warning_threshold_hours: float = 2.0
    requested_option_count: int = MAX_OPTIONS
    heuristics: tuple[Heuristic, ...] = DEFAULT_HEURISTICS
    coverage_weight: float = 1.0
    labor_cost_weight: float = 1.0
    fairness_weight: float = 1.0
    scoring: ScoringWeights = field(default_factory=ScoringWeights)

    @property
    def max_weekly_minutes(self) -> int:
        return int(round(self.max_weekly_hours * 60))

    @property
    def min_rest_minutes(self) -> int:
        return int(round(self.min_rest_hours * 60))

    @property
    def max_shift_minutes(self) -> Optional[int]:
        if self.max_shift_hours is None:
            return None
        return int(round(self.max_shift_hours * 60))

    @property
    def overtime_threshold_minutes(self) -> int:
        return int(round(self.overtime_warning_threshold_hours * 60))

    @property
    def option_limit(self) -> int:
        """Number of options to return, between 1 and ``MAX_OPTIONS``."""
        return min(MAX_OPTIONS, max(1, self.requested_option_count))
