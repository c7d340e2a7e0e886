"""Scheduling engine for generating weekly schedule options.

``Scheduler`` lives in ``shiftcover.scheduling.scheduler`` and is re-exported
from the top-level ``shiftcover`` package.
"""

from shiftcover.scheduling.availability import AvailabilityResolver, is_available
from shiftcover.scheduling.candidate_generator import (
    CandidateGenerator,
    GenerationPlan,
    generate,
)
from shiftcover.scheduling.coverage import (
    BucketDemand,
    bucket_demands,
    bucketize,
    match_coverage,
)
from shiftcover.scheduling.heuristics import RankingStrategy, strategy_for
from shiftcover.scheduling.publishing import expand_to_month, to_planned_shifts

__all__ = [
    # Availability
    "AvailabilityResolver",
    "is_available",
    # Coverage
    "BucketDemand",
    "bucket_demands",
    "bucketize",
    "match_coverage",
    # Generation
    "CandidateGenerator",
    "GenerationPlan",
    "RankingStrategy",
    "generate",
    "strategy_for",
    # Publishing
    "expand_to_month",
    "to_planned_shifts",
]
