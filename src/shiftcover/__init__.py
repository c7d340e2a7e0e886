"""Coverage-driven weekly schedule generation.

Example:
    >>> from shiftcover import generate_options
    >>> options = generate_options(generator_input)
    >>> best = options[0]
"""

from shiftcover.domain import (
    CoverageBucketState,
    CoverageRequirement,
    Employee,
    EmployeeAvailabilityContext,
    EmployeeAvailabilityOverride,
    EmployeeAvailabilityWindow,
    EmployeeRole,
    EmployeeUnavailableDate,
    GenerationTimeoutError,
    Heuristic,
    InvalidInputError,
    PlannedShift,
    PlannedShiftStatus,
    PublishingError,
    ScheduleDraftShift,
    ScheduleDraftWarning,
    ScheduleGenerationConstraints,
    ScheduleOption,
    SchedulingError,
    SchedulingGeneratorInput,
    ScoringWeights,
    WarningKind,
    WarningSeverity,
)
from shiftcover.scheduling.scheduler import Scheduler, generate_options

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "Scheduler",
    "generate_options",
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
