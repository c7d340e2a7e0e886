"""Main scheduler interface.

This module provides the high-level Scheduler class that orchestrates input
validation, one candidate generation pass per heuristic, evaluation and
ranking into a short list of schedule options.
"""

import logging
import uuid
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Optional

from shiftcover.domain.errors import GenerationTimeoutError, InvalidInputError
from shiftcover.domain.models import (
    ScheduleDraftShift,
    ScheduleOption,
    SchedulingGeneratorInput,
)
from shiftcover.domain.policies import Heuristic
from shiftcover.scheduling.candidate_generator import CandidateGenerator, GenerationPlan
from shiftcover.validation.input_validator import validate_generator_input
from shiftcover.validation.validator import Evaluation, ScheduleEvaluator

logger = logging.getLogger(__name__)

OPTION_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "shiftcover/schedule-option")


@dataclass
class _RankedOption:
    option: ScheduleOption
    roster_index: int

    @property
    def sort_key(self) -> tuple:
        return (-self.option.score, self.option.warnings_count, self.roster_index)


def option_id(shop_id: str, week_start, heuristic: Heuristic) -> str:
    """Stable identifier for the option a heuristic produces for a week."""
    key = f"{shop_id}|{week_start.isoformat()}|{heuristic.value}"
    return str(uuid.uuid5(OPTION_ID_NAMESPACE, key))


def shift_signature(shifts: list[ScheduleDraftShift]) -> frozenset:
    """Identity of a shift set, ignoring ids and presentation fields."""
    return frozenset(
        (s.employee_id, s.day_of_week, s.start_minutes, s.end_minutes) for s in shifts
    )


class Scheduler:
    """High-level scheduler for generating ranked weekly schedule options.

    The Scheduler validates the input, runs one greedy pass per configured
    heuristic, scores every candidate and returns the best distinct ones.

    Example:
        >>> scheduler = Scheduler()
        >>> options = scheduler.generate_options(generator_input)
        >>> best = options[0]
        >>> print(best.name, best.score, best.warnings_count)
    """

    def __init__(self, max_workers: int = 1):
        """Initialize scheduler.

        Args:
            max_workers: Heuristic passes run on a thread pool when above 1.
        """
        self.max_workers = max(1, max_workers)

    def generate_options(
        self,
        generator_input: SchedulingGeneratorInput,
        strict: bool = False,
        timeout: Optional[float] = None,
    ) -> list[ScheduleOption]:
        """Generate ranked schedule options for one shop-week.

        Args:
            generator_input: Snapshot of everything generation needs.
            strict: Reject empty employee or requirement lists instead of
                returning no options.
            timeout: Seconds allowed for all heuristic passes together.

        Returns:
            At most ``min(5, requested_option_count)`` options, best first.
            Empty when there is nothing to schedule or nobody to schedule.

        Raises:
            InvalidInputError: If the input is malformed.
            GenerationTimeoutError: If ``timeout`` elapsed before all passes finished.
        """
        validate_generator_input(generator_input, strict=strict)

        plan = GenerationPlan.from_input(generator_input)
        if not plan.requirements or not plan.employees:
            if strict:
                raise InvalidInputError(
                    ["no coverage requirements or active employees for this shop and week"]
                )
            logger.info(
                "Nothing to schedule for shop %s week of %s", plan.shop_id, plan.week_start
            )
            return []

        constraints = plan.constraints
        heuristics = list(dict.fromkeys(constraints.heuristics))
        candidates = self._run_passes(plan, heuristics, timeout)

        evaluator = ScheduleEvaluator(constraints)
        ranked = []
        for index, (heuristic, shifts) in enumerate(zip(heuristics, candidates)):
            evaluation = evaluator.evaluate(
                shifts,
                plan.requirements,
                plan.resolver.context,
                week_start=plan.week_start,
                employees=plan.employees,
                fixed_shifts=plan.fixed_shifts,
            )
            ranked.append(
                _RankedOption(
                    option=self._build_option(plan, heuristic, shifts, evaluation),
                    roster_index=index,
                )
            )

        ranked.sort(key=lambda r: r.sort_key)
        options = []
        seen = set()
        for entry in ranked:
            signature = shift_signature(list(entry.option.shifts))
            if signature in seen:
                logger.debug("Dropping duplicate option %s", entry.option.name)
                continue
            seen.add(signature)
            options.append(entry.option)

        options = options[: constraints.option_limit]
        logger.info(
            "Generated %d options for shop %s week of %s (best score %d)",
            len(options),
            plan.shop_id,
            plan.week_start,
            options[0].score,
        )
        return options

    def _run_passes(
        self,
        plan: GenerationPlan,
        heuristics: list[Heuristic],
        timeout: Optional[float],
    ) -> list[list[ScheduleDraftShift]]:
        """Run every heuristic pass, returning results in roster order."""
        generator = CandidateGenerator(plan)
        if self.max_workers == 1 and timeout is None:
            return [generator.generate(h) for h in heuristics]

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = [executor.submit(generator.generate, h) for h in heuristics]
            _, pending = wait(futures, timeout=timeout)
            if pending:
                for future in pending:
                    future.cancel()
                raise GenerationTimeoutError(
                    f"option generation exceeded {timeout} seconds"
                )
            return [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False)

    @staticmethod
    def _build_option(
        plan: GenerationPlan,
        heuristic: Heuristic,
        shifts: list[ScheduleDraftShift],
        evaluation: Evaluation,
    ) -> ScheduleOption:
        return ScheduleOption(
            id=option_id(plan.shop_id, plan.week_start, heuristic),
            name=heuristic.label,
            heuristic=heuristic,
            shifts=tuple(shifts),
            score=evaluation.score,
            warnings=tuple(evaluation.warnings),
        )


def generate_options(
    generator_input: SchedulingGeneratorInput,
    strict: bool = False,
    timeout: Optional[float] = None,
) -> list[ScheduleOption]:
    """Generate ranked schedule options with a default Scheduler."""
    return Scheduler().generate_options(generator_input, strict=strict, timeout=timeout)
