"""Command-line interface for the shiftcover scheduling engine."""

import argparse
import logging
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from shiftcover.domain.calendar import normalized_week_start
from shiftcover.domain.errors import SchedulingError
from shiftcover.domain.models import (
    CoverageRequirement,
    Employee,
    EmployeeAvailabilityContext,
    EmployeeAvailabilityWindow,
    EmployeeRole,
    EmployeeUnavailableDate,
    ScheduleOption,
    SchedulingGeneratorInput,
)
from shiftcover.io.json_io import load_generator_input, options_to_json
from shiftcover.output.debug_generator import DebugGenerator
from shiftcover.output.pdf_generator import PDFGenerator
from shiftcover.scheduling.scheduler import Scheduler

logger = logging.getLogger(__name__)


def create_sample_input(
    employee_count: int = 6,
    week_of: Optional[date] = None,
    time_zone: str = "UTC",
) -> SchedulingGeneratorInput:
    """Create a sample shop-week for demos.

    Args:
        employee_count: Number of employees to create.
        week_of: Any date in the week to schedule. Defaults to next week.
        time_zone: Shop-local IANA zone.
    """
    if week_of is None:
        week_of = date.today() + timedelta(days=7)
    monday = normalized_week_start(week_of, time_zone).date()
    shop_id = "demo-shop"

    names = [
        "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
        "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
    ]

    employees = []
    windows = []
    for i in range(employee_count):
        name = names[i % len(names)]
        if i >= len(names):
            name = f"{name}{i // len(names) + 1}"

        if i == 0:
            role = EmployeeRole.MANAGER
        elif i % 4 == 1:
            role = EmployeeRole.SHIFT_LEAD
        else:
            role = EmployeeRole.EMPLOYEE

        employee = Employee(
            id=f"E{i + 1:03d}",
            name=name,
            role=role,
            hourly_wage=15.0 + (i % 5) * 1.5,
        )
        employees.append(employee)

        for day in range(7):
            # Vary availability slightly
            if i % 3 == 0:
                start, end = 6 * 60, 15 * 60  # Early: 6 AM - 3 PM
            elif i % 3 == 1:
                start, end = 11 * 60, 22 * 60  # Late: 11 AM - 10 PM
            else:
                start, end = 6 * 60, 22 * 60  # Full day

            # Some employees have days off
            if i % 4 == 0 and day == 6:
                continue
            if i % 5 == 2 and day == 2:
                continue

            windows.append(
                EmployeeAvailabilityWindow(
                    employee_id=employee.id,
                    day_of_week=day,
                    start_minutes=start,
                    end_minutes=end,
                    shop_id=shop_id,
                )
            )

    requirements = []
    for day in range(7):
        weekend = day >= 5
        requirements.append(
            CoverageRequirement(
                shop_id=shop_id,
                week_start_date=monday,
                day_of_week=day,
                start_minutes=7 * 60,
                end_minutes=14 * 60,
                headcount=3 if weekend else 2,
            )
        )
        requirements.append(
            CoverageRequirement(
                shop_id=shop_id,
                week_start_date=monday,
                day_of_week=day,
                start_minutes=14 * 60,
                end_minutes=21 * 60,
                headcount=2,
            )
        )
        requirements.append(
            CoverageRequirement(
                shop_id=shop_id,
                week_start_date=monday,
                day_of_week=day,
                start_minutes=11 * 60,
                end_minutes=15 * 60,
                headcount=1,
                role_requirement=EmployeeRole.SHIFT_LEAD,
                notes="Lunch rush lead",
            )
        )

    blackouts = []
    if employee_count > 1:
        blackouts.append(
            EmployeeUnavailableDate(
                employee_id=employees[1].id,
                date=monday + timedelta(days=3),
                reason="Appointment",
            )
        )

    return SchedulingGeneratorInput(
        shop_id=shop_id,
        week_start_date=monday,
        time_zone=time_zone,
        coverage_requirements=tuple(requirements),
        employees=tuple(employees),
        availability_context=EmployeeAvailabilityContext(
            shop_id=shop_id,
            weekly_windows=tuple(windows),
            unavailable_dates=tuple(blackouts),
        ),
    )


def print_summary(options: list[ScheduleOption]) -> None:
    """Print a short ranking of options to stdout."""
    if not options:
        print("No options generated: nothing to schedule.")
        return

    print(f"\n{len(options)} option(s) generated")
    for rank, option in enumerate(options, 1):
        print(
            f"  {rank}. {option.name:<18} score={option.score:>6}  "
            f"shifts={option.total_shift_count:>3}  hours={option.total_hours:>6.1f}  "
            f"warnings={option.warnings_count}"
        )
        for warning in option.warnings[:3]:
            print(f"       - {warning}")
        if option.warnings_count > 3:
            print(f"       ... and {option.warnings_count - 3} more warnings")


def write_outputs(
    options: list[ScheduleOption],
    generator_input: SchedulingGeneratorInput,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
    as_json: bool = False,
) -> None:
    """Write the requested renderings of the options."""
    employees_by_id = {e.id: e for e in generator_input.employees}
    monday = normalized_week_start(
        generator_input.week_start_date, generator_input.time_zone
    ).date()

    if as_json:
        print(options_to_json(options, employees_by_id))
    else:
        print_summary(options)

    if report_path:
        DebugGenerator(generator_input.constraints.bucket_minutes).generate(
            options,
            employees_by_id,
            report_path,
            requirements=generator_input.coverage_requirements,
        )
        logger.info("Wrote report to %s", report_path)

    if pdf_path:
        PDFGenerator().generate(options, employees_by_id, monday, pdf_path)
        logger.info("Wrote PDF to %s", pdf_path)


def run_demo(
    employee_count: int = 6,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
    workers: int = 1,
) -> None:
    """Run option generation on a sample shop-week."""
    print(f"Generating demo options for {employee_count} employees...")
    generator_input = create_sample_input(employee_count)
    options = Scheduler(max_workers=workers).generate_options(generator_input)
    write_outputs(options, generator_input, pdf_path, report_path)


def run_generate(
    input_path: str,
    pdf_path: Optional[str] = None,
    report_path: Optional[str] = None,
    as_json: bool = False,
    workers: int = 1,
    timeout: Optional[float] = None,
) -> None:
    """Generate options for a JSON payload."""
    generator_input = load_generator_input(Path(input_path))
    options = Scheduler(max_workers=workers).generate_options(
        generator_input, timeout=timeout
    )
    write_outputs(options, generator_input, pdf_path, report_path, as_json)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="shiftcover - coverage-driven weekly schedule generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo                           Generate options for a sample week
  %(prog)s demo --count 10 --pdf week.pdf Sample week with 10 employees as PDF
  %(prog)s generate --input week.json     Generate options for a JSON payload
  %(prog)s generate --input week.json --json --report report.txt
        """,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Generate options for a sample week")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=6,
        help="Number of employees to generate (default: 6)",
    )

    # Generate command
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate options for a JSON input file"
    )
    generate_parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Path to the JSON input payload",
    )
    generate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print options as JSON instead of a summary",
    )
    generate_parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Time limit in seconds for all heuristic passes",
    )

    for sub in (demo_parser, generate_parser):
        sub.add_argument(
            "--pdf", "-o",
            type=str,
            help="Output PDF file path",
        )
        sub.add_argument(
            "--report", "-r",
            type=str,
            help="Output text report path",
        )
        sub.add_argument(
            "--workers", "-w",
            type=int,
            default=1,
            help="Run heuristic passes on this many threads (default: 1)",
        )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "demo":
            run_demo(args.count, args.pdf, args.report, args.workers)
            return 0
        elif args.command == "generate":
            run_generate(
                args.input,
                args.pdf,
                args.report,
                args.json,
                args.workers,
                args.timeout,
            )
            return 0
        else:
            parser.print_help()
            return 1
    except SchedulingError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
