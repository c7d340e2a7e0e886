"""Tests for the command-line interface."""

import json
from datetime import date

import pytest

from shiftcover.cli import create_sample_input, main
from shiftcover.domain.models import EmployeeRole


@pytest.fixture
def payload_path(tmp_path):
    payload = {
        "shop_id": "shop-1",
        "week_start_date": "2024-01-15",
        "time_zone": "UTC",
        "employees": [{"id": "E1", "name": "Alice"}, {"id": "E2", "name": "Bob"}],
        "coverage_requirements": [
            {"day_of_week": 0, "start": "07:00", "end": "13:00", "headcount": 2}
        ],
        "availability": {
            "weekly_windows": [
                {"employee_id": "E1", "day_of_week": 0, "start": "06:00", "end": "18:00"},
                {"employee_id": "E2", "day_of_week": 0, "start": "06:00", "end": "18:00"},
            ]
        },
    }
    path = tmp_path / "week.json"
    path.write_text(json.dumps(payload))
    return path


class TestSampleInput:
    """Tests for the demo input builder."""

    def test_sample_week(self):
        generator_input = create_sample_input(6, week_of=date(2024, 1, 17))

        assert generator_input.week_start_date == date(2024, 1, 15)
        assert len(generator_input.employees) == 6
        assert generator_input.employees[0].role == EmployeeRole.MANAGER
        assert len(generator_input.coverage_requirements) == 21
        assert generator_input.availability_context.unavailable_dates

    def test_many_employees_have_unique_ids(self):
        generator_input = create_sample_input(20, week_of=date(2024, 1, 15))
        ids = [e.id for e in generator_input.employees]
        assert len(set(ids)) == 20


class TestMain:
    """Tests for main()."""

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_demo(self, capsys, tmp_path):
        report = tmp_path / "report.txt"

        assert main(["demo", "--count", "4", "--report", str(report)]) == 0

        out = capsys.readouterr().out
        assert "option(s) generated" in out
        assert "SCHEDULE OPTIONS" in report.read_text()

    def test_generate_json(self, capsys, payload_path):
        assert main(["generate", "--input", str(payload_path), "--json"]) == 0

        decoded = json.loads(capsys.readouterr().out)
        best = decoded["options"][0]
        assert best["score"] == 112
        assert [s["employee_name"] for s in best["shifts"]] == ["Alice", "Bob"]

    def test_generate_pdf(self, payload_path, tmp_path):
        pytest.importorskip("reportlab")
        pdf = tmp_path / "week.pdf"

        assert main(["generate", "--input", str(payload_path), "--pdf", str(pdf)]) == 0
        assert pdf.read_bytes().startswith(b"%PDF")

    def test_invalid_payload_exits_with_error(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"week_start_date": "2024-01-15"}))

        assert main(["generate", "--input", str(path)]) == 2
        assert "missing field 'shop_id'" in capsys.readouterr().err

    def test_wrongly_typed_wage_exits_with_error(self, capsys, payload_path):
        payload = json.loads(payload_path.read_text())
        payload["employees"][0]["hourly_wage"] = "15.5"
        payload_path.write_text(json.dumps(payload))

        assert main(["generate", "--input", str(payload_path)]) == 2
        assert "hourly_wage" in capsys.readouterr().err
