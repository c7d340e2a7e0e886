"""Debug text output for schedule option analysis.

This module creates text-based output to compare generated options:
- Score, shift count and hours per option
- Per-employee weekly timelines
- Warnings grouped by kind
- Coverage per bucket against requirements
"""

from collections import defaultdict
from pathlib import Path
from typing import Iterable, Optional, Union

from shiftcover.domain.calendar import DAYS_PER_WEEK, short_day_name, time_label
from shiftcover.domain.models import (
    CoverageRequirement,
    Employee,
    ScheduleOption,
    WarningKind,
)
from shiftcover.scheduling.coverage import bucketize


class DebugGenerator:
    """Generates debug text output for generated schedule options.

    Creates human-readable text showing:
    - An overview table of every option
    - Each option's shifts by employee and day
    - Warnings and coverage histograms
    """

    def __init__(self, bucket_minutes: int = 30):
        self.bucket_minutes = bucket_minutes

    def generate(
        self,
        options: list[ScheduleOption],
        employees_by_id: dict[str, Employee],
        output_path: Union[str, Path],
        requirements: Iterable[CoverageRequirement] = (),
    ) -> str:
        """Generate debug text output and save to file.

        Args:
            options: Ranked schedule options.
            employees_by_id: Dict mapping employee IDs to Employee objects.
            output_path: Path to save the text file.
            requirements: Requirements used for the coverage section.

        Returns:
            The generated text content.
        """
        content = self._generate_content(options, employees_by_id, list(requirements))
        Path(output_path).write_text(content)
        return content

    def generate_to_string(
        self,
        options: list[ScheduleOption],
        employees_by_id: dict[str, Employee],
        requirements: Iterable[CoverageRequirement] = (),
    ) -> str:
        """Generate debug text output and return as string."""
        return self._generate_content(options, employees_by_id, list(requirements))

    def _generate_content(
        self,
        options: list[ScheduleOption],
        employees_by_id: dict[str, Employee],
        requirements: list[CoverageRequirement],
    ) -> str:
        """Generate the full debug content."""
        lines = []

        # Header
        lines.append("=" * 80)
        lines.append(f"SCHEDULE OPTIONS - {len(options)} generated")
        lines.append("=" * 80)
        lines.append("")

        if not options:
            lines.append("No options: nothing to schedule for this shop and week.")
            return "\n".join(lines)

        lines.append(f"{'#':>3} {'Option':<20} {'Score':>8} {'Shifts':>7} {'Hours':>7} {'Warnings':>9}")
        lines.append("-" * 80)
        for i, option in enumerate(options, 1):
            lines.append(
                f"{i:>3} {option.name:<20} {option.score:>8} {option.total_shift_count:>7} "
                f"{option.total_hours:>7.1f} {option.warnings_count:>9}"
            )
        lines.append("")

        for i, option in enumerate(options, 1):
            lines.extend(self._option_section(i, option, employees_by_id, requirements))

        lines.append("=" * 80)
        lines.append("END OF DEBUG OUTPUT")
        lines.append("=" * 80)

        return "\n".join(lines)

    def _option_section(
        self,
        index: int,
        option: ScheduleOption,
        employees_by_id: dict[str, Employee],
        requirements: list[CoverageRequirement],
    ) -> list[str]:
        lines = []
        lines.append("-" * 80)
        lines.append(f"OPTION {index}: {option.name} (score {option.score})")
        lines.append("-" * 80)

        # Per-employee week
        by_employee = defaultdict(list)
        for shift in option.shifts:
            by_employee[shift.employee_id].append(shift)

        for employee_id in sorted(by_employee, key=lambda e: self._name(e, employees_by_id)):
            shifts = by_employee[employee_id]
            hours = sum(s.duration_minutes for s in shifts) / 60
            name = self._name(employee_id, employees_by_id)[:20]
            cells = []
            for shift in shifts:
                cells.append(
                    f"{short_day_name(shift.day_of_week)} "
                    f"{time_label(shift.start_minutes)}-{time_label(shift.end_minutes)}"
                )
            lines.append(f"  {name:<20} {hours:>5.1f}h  " + ", ".join(cells))
        lines.append("")

        # Warnings
        if option.warnings:
            lines.append("  Warnings:")
            for kind in WarningKind:
                kind_warnings = option.warnings_by_kind(kind)
                if not kind_warnings:
                    continue
                lines.append(f"    {kind.value} ({len(kind_warnings)})")
                for warning in kind_warnings:
                    lines.append(f"      {warning.severity.name:<8} {warning.message}")
        else:
            lines.append("  No warnings.")
        lines.append("")

        if requirements:
            lines.extend(self._coverage_lines(option, employees_by_id, requirements))
        return lines

    def _coverage_lines(
        self,
        option: ScheduleOption,
        employees_by_id: dict[str, Employee],
        requirements: list[CoverageRequirement],
    ) -> list[str]:
        """Bucket histogram: '#' for filled headcount, '.' for unmet."""
        lines = ["  Coverage:"]
        roles = {e.id: e.role for e in employees_by_id.values()}
        buckets = bucketize(requirements, self.bucket_minutes, option.shifts, roles)
        for day in range(DAYS_PER_WEEK):
            for bucket in buckets.get(day, []):
                bar = "#" * bucket.filled + "." * bucket.unmet
                lines.append(
                    f"    {short_day_name(day)} {time_label(bucket.bucket_start_minutes)}: "
                    f"{bar:<12} ({bucket.filled}/{bucket.needed})"
                )
        lines.append("")
        return lines

    @staticmethod
    def _name(employee_id: Optional[str], employees_by_id: dict[str, Employee]) -> str:
        if employee_id is None:
            return "(open)"
        employee = employees_by_id.get(employee_id)
        return employee.name if employee else employee_id
