"""Exceptions raised by the scheduling engine.

Only caller mistakes are exceptions. Weak schedules (gaps, conflicts,
overtime) are reported as warnings on the produced options instead.
"""


class SchedulingError(Exception):
    """Base class for all scheduling engine errors."""


class InvalidInputError(SchedulingError):
    """The generator input is malformed and no generation was attempted.

    Attributes:
        problems: Human-readable description of every problem found.
    """

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        summary = "; ".join(self.problems) if self.problems else "invalid input"
        super().__init__(f"Invalid scheduling input: {summary}")


class GenerationTimeoutError(SchedulingError):
    """Option generation did not finish within the caller's time budget."""


class PublishingError(SchedulingError):
    """A draft shift cannot be converted into a planned shift record."""
