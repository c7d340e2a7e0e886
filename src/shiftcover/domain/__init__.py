"""Domain models and business rules for scheduling."""

from shiftcover.domain.errors import (
    GenerationTimeoutError,
    InvalidInputError,
    PublishingError,
    SchedulingError,
)
from shiftcover.domain.models import (
    CoverageBucketState,
    CoverageRequirement,
    Employee,
    EmployeeAvailabilityContext,
    EmployeeAvailabilityOverride,
    EmployeeAvailabilityWindow,
    EmployeeRole,
    EmployeeUnavailableDate,
    PlannedShift,
    PlannedShiftStatus,
    ScheduleDraftShift,
    ScheduleDraftWarning,
    ScheduleOption,
    SchedulingGeneratorInput,
    WarningKind,
    WarningSeverity,
)
from shiftcover.domain.policies import (
    Heuristic,
    ScheduleGenerationConstraints,
    ScoringWeights,
)

__all__ = [
    # Models
    "CoverageBucketState",
    "CoverageRequirement",
    "Employee",
    "EmployeeAvailabilityContext",
    "EmployeeAvailabilityOverride",
    "EmployeeAvailabilityWindow",
    "EmployeeRole",
    "EmployeeUnavailableDate",
    "PlannedShift",
    "PlannedShiftStatus",
    "ScheduleDraftShift",
    "ScheduleDraftWarning",
    "ScheduleOption",
    "SchedulingGeneratorInput",
    "WarningKind",
    "WarningSeverity",
    # Policies
    "Heuristic",
    "ScheduleGenerationConstraints",
    "ScoringWeights",
    # Errors
    "GenerationTimeoutError",
    "InvalidInputError",
    "PublishingError",
    "SchedulingError",
]
