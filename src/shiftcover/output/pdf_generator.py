"""PDF generation for schedule options.

This module creates printable PDFs showing:
- A weekly grid per option with one row per employee
- Shift times colored per employee
- A warnings summary for each option
"""

import hashlib
from datetime import date, timedelta
from io import BytesIO
from pathlib import Path
from typing import Union

from shiftcover.domain.calendar import DAY_NAMES, DAYS_PER_WEEK, time_label
from shiftcover.domain.models import (
    Employee,
    ScheduleDraftShift,
    ScheduleOption,
    WarningSeverity,
)

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "header": (0.85, 0.88, 0.95),
    "grid": (0.7, 0.7, 0.7),
    "off_shift": (0.97, 0.97, 0.97),
    WarningSeverity.INFO: (0.4, 0.6, 0.8),  # Blue
    WarningSeverity.WARNING: (0.9, 0.6, 0.2),  # Orange
    WarningSeverity.CRITICAL: (0.8, 0.2, 0.2),  # Red
}


def seed_color(seed: str) -> tuple[float, float, float]:
    """Stable pastel color for a shift's color seed."""
    digest = hashlib.sha1(seed.encode("utf-8")).digest()
    return tuple(0.55 + 0.4 * (b / 255) for b in digest[:3])


class PDFGenerator:
    """Generates printable PDF schedules for generated options.

    Example:
        >>> generator = PDFGenerator()
        >>> generator.generate(options, employees_by_id, date(2024, 1, 15), "week.pdf")
    """

    def __init__(
        self,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        options: list[ScheduleOption],
        employees_by_id: dict[str, Employee],
        week_start: date,
        output_path: Union[str, Path],
        include_warnings: bool = True,
    ) -> None:
        """Generate PDF schedule and save to file.

        Args:
            options: Options to render, one grid each.
            employees_by_id: Dict mapping employee IDs to Employee objects.
            week_start: Monday of the scheduled week.
            output_path: Path to save the PDF.
            include_warnings: Whether to include a warnings page per option.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        c = canvas.Canvas(str(output_path), pagesize=landscape(letter))
        self._draw_options(c, options, employees_by_id, week_start, include_warnings)
        c.save()

    def generate_to_buffer(
        self,
        options: list[ScheduleOption],
        employees_by_id: dict[str, Employee],
        week_start: date,
        include_warnings: bool = True,
    ) -> BytesIO:
        """Generate PDF and return as bytes buffer.

        Args:
            options: Options to render, one grid each.
            employees_by_id: Dict mapping employee IDs to Employee objects.
            week_start: Monday of the scheduled week.
            include_warnings: Whether to include a warnings page per option.

        Returns:
            BytesIO buffer containing PDF data.
        """
        try:
            from reportlab.lib.pagesizes import letter, landscape
            from reportlab.pdfgen import canvas
        except ImportError:
            raise ImportError(
                "reportlab is required for PDF generation. "
                "Install with: pip install reportlab"
            )

        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=landscape(letter))
        self._draw_options(c, options, employees_by_id, week_start, include_warnings)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw_options(
        self,
        c,
        options: list[ScheduleOption],
        employees_by_id: dict[str, Employee],
        week_start: date,
        include_warnings: bool,
    ) -> None:
        if not options:
            c.setFont("Helvetica-Bold", 16)
            c.drawString(
                self.margin,
                self.page_height - self.margin - 20,
                f"No schedule options for the week of {week_start.isoformat()}",
            )
            c.showPage()
            return

        for rank, option in enumerate(options, 1):
            self._draw_week_pages(c, rank, option, employees_by_id, week_start)
            if include_warnings and option.warnings:
                self._draw_warnings_page(c, rank, option)

    def _draw_week_pages(
        self,
        c,
        rank: int,
        option: ScheduleOption,
        employees_by_id: dict[str, Employee],
        week_start: date,
    ) -> None:
        """Draw the weekly grid, paginated by employee rows."""
        by_employee: dict[str, list[ScheduleDraftShift]] = {}
        for shift in option.shifts:
            by_employee.setdefault(shift.employee_id or "", []).append(shift)
        employee_ids = sorted(
            by_employee,
            key=lambda e: (employees_by_id[e].name if e in employees_by_id else e, e),
        )

        row_height = 28
        header_height = 60
        footer_height = 30
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height) - 1)

        name_width = 120
        day_width = (self.page_width - 2 * self.margin - name_width) / DAYS_PER_WEEK
        total_pages = max(1, (len(employee_ids) + rows_per_page - 1) // rows_per_page)

        for page in range(total_pages):
            page_ids = employee_ids[page * rows_per_page : (page + 1) * rows_per_page]
            self._draw_header(c, rank, option, week_start, header_height)

            # Day header row
            y = self.page_height - self.margin - header_height - row_height
            c.setFillColorRGB(*COLORS["header"])
            c.rect(self.margin, y, self.page_width - 2 * self.margin, row_height, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica-Bold", 9)
            c.drawString(self.margin + 4, y + 10, "Employee")
            for day in range(DAYS_PER_WEEK):
                x = self.margin + name_width + day * day_width
                label = f"{DAY_NAMES[day][:3]} {(week_start + timedelta(days=day)).strftime('%m/%d')}"
                c.drawCentredString(x + day_width / 2, y + 10, label)

            for employee_id in page_ids:
                y -= row_height
                self._draw_employee_row(
                    c,
                    employee_id,
                    by_employee[employee_id],
                    employees_by_id,
                    y,
                    row_height,
                    name_width,
                    day_width,
                )

            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_header(
        self,
        c,
        rank: int,
        option: ScheduleOption,
        week_start: date,
        header_height: float,
    ) -> None:
        """Draw page header with option name and week."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Option {rank}: {option.name} - week of {week_start.strftime('%B %d, %Y')}",
        )

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"Score {option.score} | {option.total_shift_count} shifts | "
            f"{option.total_hours:.1f} hours | {option.warnings_count} warnings",
        )

    def _draw_employee_row(
        self,
        c,
        employee_id: str,
        shifts: list[ScheduleDraftShift],
        employees_by_id: dict[str, Employee],
        y: float,
        height: float,
        name_width: float,
        day_width: float,
    ) -> None:
        """Draw one employee's week."""
        employee = employees_by_id.get(employee_id)
        name = employee.name if employee else (employee_id or "(open)")

        c.setStrokeColorRGB(*COLORS["grid"])
        c.setLineWidth(0.5)
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 9)
        c.drawString(self.margin + 4, y + height / 2 - 3, name[:20])

        for day in range(DAYS_PER_WEEK):
            x = self.margin + name_width + day * day_width
            day_shifts = [s for s in shifts if s.day_of_week == day]
            if day_shifts:
                c.setFillColorRGB(*seed_color(day_shifts[0].color_seed))
            else:
                c.setFillColorRGB(*COLORS["off_shift"])
            c.rect(x, y, day_width, height, fill=1, stroke=1)

            c.setFillColorRGB(0, 0, 0)
            c.setFont("Helvetica", 7)
            for i, shift in enumerate(day_shifts[:2]):
                label = f"{time_label(shift.start_minutes)}-{time_label(shift.end_minutes)}"
                c.drawCentredString(x + day_width / 2, y + height - 10 - i * 9, label)

    def _draw_warnings_page(self, c, rank: int, option: ScheduleOption) -> None:
        """Draw the list of warnings for an option."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 20,
            f"Option {rank}: {option.name} - warnings",
        )

        y = self.page_height - self.margin - 50
        c.setFont("Helvetica", 9)
        for warning in option.warnings:
            if y < self.margin + 20:
                c.showPage()
                c.setFont("Helvetica", 9)
                y = self.page_height - self.margin - 20
            c.setFillColorRGB(*COLORS[warning.severity])
            c.rect(self.margin, y - 2, 8, 8, fill=1, stroke=0)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(
                self.margin + 14,
                y,
                f"{warning.severity.name:<8} {warning.kind.value}: {warning.message}"[:140],
            )
            y -= 13

        c.showPage()
