"""Validation module for checking input and scoring schedules."""

from shiftcover.validation.input_validator import validate_generator_input
from shiftcover.validation.validator import Evaluation, ScheduleEvaluator, evaluate

__all__ = [
    "Evaluation",
    "ScheduleEvaluator",
    "evaluate",
    "validate_generator_input",
]
