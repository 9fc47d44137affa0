import json
from datetime import datetime, timezone

import pytest
from openpyxl import load_workbook

from config import make_sheet_name
from detectors import SequentialIdGenerator, ViolationDetector
from parsers import DriverLogParser
from report_to_excel import CATEGORY_COLUMNS, VIOLATION_COLUMNS, ReportExcelExporter, main


@pytest.fixture
def report(generic_text, motive_text):
    parser = DriverLogParser(known_drivers=[], name_corrections={})
    logs = [parser.parse_document(generic_text, "smith.txt"), parser.parse_document(motive_text, "tremblay.txt")]
    detector = ViolationDetector(
        id_generator=SequentialIdGenerator(),
        clock=lambda: datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc),
    )
    return detector.analyze(logs)


@pytest.fixture
def exporter(tmp_path):
    return ReportExcelExporter(output_folder=str(tmp_path))


def write_report_json(report, path):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report.model_dump(mode="json"), f)
    return path


class TestSheetNames:
    @pytest.mark.parametrize("category,expected", [
        ("Notes/Remarks Present", "Notes-Remarks Present"),
        ("Odometer Mismatch (Date Change)", "Odometer Mismatch (Date Change)"),
        ("Location Change Without Driving", "Location Change Without Driving"),
        ("Stationary While Driving", "Stationary While Driving"),
    ])
    def test_make_sheet_name(self, category, expected):
        assert make_sheet_name(category) == expected

    def test_names_fit_excel_limit(self):
        assert len(make_sheet_name("x" * 40)) == 31
        assert make_sheet_name("a:b?c*d[e]f\\g") == "a-b-c-d-e-f-g"


class TestFrames:
    def test_violations_frame(self, exporter, report):
        frame = exporter.violations_frame(report)
        assert list(frame.columns) == VIOLATION_COLUMNS
        assert len(frame) == 5
        assert list(frame["ID"]) == ["V0001", "V0002", "V0003", "V0004", "V0005"]

    def test_category_frame(self, exporter, report):
        frame = exporter.category_frame(report, "Stationary While Driving")
        assert list(frame.columns) == CATEGORY_COLUMNS
        assert list(frame["Time"]) == ["08:00", "16:00"]

    def test_summary_frame_lists_every_category(self, exporter, report):
        frame = exporter.summary_frame(report)
        metrics = dict(zip(frame["Metric"], frame["Value"]))

        assert metrics["Total Violations"] == 5
        assert metrics["Total Log Entries"] == 8
        assert metrics["Total Driving Time"] == "18.75 hours"
        assert metrics["Date Range"] == "03/15/2024 to 2024-03-16"
        assert metrics["Odometer Jump"] == 0
        assert metrics["Stationary While Driving"] == 2


class TestCreateExcelFile:
    def test_workbook_layout(self, exporter, report, tmp_path):
        path = exporter.create_excel_file(report, "audit.xlsx")
        assert path == str(tmp_path / "audit.xlsx")

        workbook = load_workbook(path)
        assert workbook.sheetnames == [
            "Summary",
            "Violations",
            "Notes-Remarks Present",
            "Stationary While Driving",
            "Driving Hours Exceeded",
            "Unidentified Driving Event",
        ]

        violations = workbook["Violations"]
        assert [cell.value for cell in violations[1]] == VIOLATION_COLUMNS
        assert violations.max_row == 6
        assert violations.freeze_panes == "A2"

        assert workbook["Stationary While Driving"].max_row == 3
        assert workbook["Summary"]["A2"].value == "Generated At"

    def test_column_width_capped(self, exporter, report):
        workbook = load_workbook(exporter.create_excel_file(report, "audit.xlsx"))
        sheet = workbook["Violations"]
        widths = [sheet.column_dimensions[letter].width for letter in "ABCDEFGHIJKLM"]
        assert max(widths) <= 60

    def test_empty_report_has_only_fixed_sheets(self, exporter):
        empty = ViolationDetector().analyze([])
        workbook = load_workbook(exporter.create_excel_file(empty, "empty.xlsx"))

        assert workbook.sheetnames == ["Summary", "Violations"]
        assert workbook["Violations"].max_row == 1

    def test_default_filename_uses_prefix(self, exporter, report):
        path = exporter.create_excel_file(report)
        assert path.endswith(".xlsx")
        assert exporter.report_prefix in path


class TestSavedReports:
    def test_load_report_round_trip(self, exporter, report, tmp_path):
        path = write_report_json(report, tmp_path / "violation_report_1.json")
        loaded = exporter.load_report(path)

        assert loaded.total_violations == report.total_violations
        assert [v.id for v in loaded.violations] == [v.id for v in report.violations]
        assert loaded.violations_by_category == report.violations_by_category

    def test_invalid_json(self, exporter, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            exporter.load_report(path)

    def test_not_a_report(self, exporter, tmp_path):
        path = tmp_path / "other.json"
        path.write_text(json.dumps({"merchant": "Gas Station"}), encoding="utf-8")
        with pytest.raises(ValueError, match="not a violation report"):
            exporter.load_report(path)

    def test_convert_single_file(self, exporter, report, tmp_path):
        path = write_report_json(report, tmp_path / "violation_report_1.json")
        excel_path = exporter.convert_single_file(path)

        assert excel_path == str(tmp_path / "violation_report_1.xlsx")
        assert "Driving Hours Exceeded" in load_workbook(excel_path).sheetnames

    def test_convert_all_skips_bad_files(self, exporter, report, tmp_path):
        write_report_json(report, tmp_path / "violation_report_1.json")
        (tmp_path / "broken.json").write_text("[]", encoding="utf-8")

        excel_files = exporter.convert_all_report_files()
        assert excel_files == [str(tmp_path / "violation_report_1.xlsx")]

    def test_convert_latest_without_reports(self, exporter):
        with pytest.raises(FileNotFoundError):
            exporter.convert_latest_report()


class TestMain:
    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUTPUT_FOLDER", str(tmp_path))
        assert main(["missing.json"]) == 1

    def test_unknown_argument(self, tmp_path, monkeypatch):
        monkeypatch.setenv("OUTPUT_FOLDER", str(tmp_path))
        assert main(["--sideways"]) == 1

    def test_latest(self, tmp_path, monkeypatch, report):
        monkeypatch.setenv("OUTPUT_FOLDER", str(tmp_path))
        write_report_json(report, tmp_path / "violation_report_1.json")

        assert main(["--latest"]) == 0
        assert (tmp_path / "violation_report_1.xlsx").exists()
