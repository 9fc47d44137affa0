"""
Violation Report to Excel Converter

Writes an AnalysisReport to an Excel workbook:
- "Summary" sheet with totals and the count per violation category
- "Violations" sheet with every violation, one row each
- one sheet per violation category that occurs in the report

Can be used from the pipeline (main.py) or on its own to convert report
JSON files saved earlier:

    python report_to_excel.py              # latest report JSON
    python report_to_excel.py --all        # every report JSON
    python report_to_excel.py report.json  # one file from the output folder
"""

import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pandas as pd
from dotenv import load_dotenv
from pydantic import ValidationError

from config import EXCEL_FORMATTING, get_settings, make_sheet_name
from schemas.report_schema import AnalysisReport, Violation

VIOLATION_COLUMNS = [
    "ID", "Category", "Severity", "Date", "Time", "Description",
    "Current Odometer", "Previous Odometer", "Odometer Diff",
    "Duration", "Status", "Location", "Notes",
]

CATEGORY_COLUMNS = [
    "ID", "Severity", "Date", "Time", "Description",
    "Current Odometer", "Previous Odometer", "Diff",
    "Duration", "Status", "Notes",
]


def _violation_row(violation: Violation) -> dict:
    details = violation.details
    return {
        "ID": violation.id,
        "Category": violation.category,
        "Severity": violation.severity,
        "Date": violation.date,
        "Time": violation.time,
        "Description": violation.description,
        "Current Odometer": details.current_odometer,
        "Previous Odometer": details.previous_odometer,
        "Odometer Diff": details.odometer_diff,
        "Diff": details.odometer_diff,
        "Duration": details.duration,
        "Status": details.status,
        "Location": details.current_location or details.previous_location,
        "Notes": details.notes,
    }


class ReportExcelExporter:
    """
    Converts analysis reports to formatted Excel workbooks.

    This class handles:
    - Flattening violations into DataFrames
    - Writing the summary, violations and per-category sheets
    - Loading report JSON files written by the pipeline
    """

    def __init__(self, output_folder: Optional[str] = None):
        """Initialize the exporter with configuration."""
        settings = get_settings()
        self.output_folder = output_folder or settings["output_folder"]
        self.report_prefix = settings["report_prefix"]

        Path(self.output_folder).mkdir(parents=True, exist_ok=True)

    # -------------------------------------------------------------------------
    # DataFrames
    # -------------------------------------------------------------------------

    def summary_frame(self, report: AnalysisReport) -> pd.DataFrame:
        summary = report.summary
        rows = [
            ("Generated At", report.generated_at.isoformat()),
            ("Total Violations", report.total_violations),
            ("Total Log Entries", summary.total_entries),
            ("Total Driving Time", f"{summary.total_driving_minutes / 60:.2f} hours"),
            ("Date Range", f"{summary.date_range.start} to {summary.date_range.end}"),
            ("Logs Analyzed", len(report.parsed_logs)),
            ("Documents Failed", len(report.errors)),
        ]
        rows.extend(report.violations_by_category.items())
        return pd.DataFrame(rows, columns=["Metric", "Value"])

    def violations_frame(self, report: AnalysisReport) -> pd.DataFrame:
        rows = [_violation_row(v) for v in report.violations]
        return pd.DataFrame(rows, columns=VIOLATION_COLUMNS)

    def category_frame(self, report: AnalysisReport, category: str) -> pd.DataFrame:
        rows = [_violation_row(v) for v in report.violations_for(category)]
        return pd.DataFrame(rows, columns=CATEGORY_COLUMNS)

    # -------------------------------------------------------------------------
    # Workbook
    # -------------------------------------------------------------------------

    def create_excel_file(self, report: AnalysisReport, output_filename: Optional[str] = None) -> str:
        """
        Create a formatted Excel file from a report.

        Args:
            report: The analysis report
            output_filename: Optional custom filename

        Returns:
            Path to created Excel file
        """
        if not output_filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            output_filename = f"{self.report_prefix}_{timestamp}.xlsx"

        output_path = Path(self.output_folder) / output_filename

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self.summary_frame(report).to_excel(writer, sheet_name="Summary", index=False)
            self.violations_frame(report).to_excel(writer, sheet_name="Violations", index=False)

            for category in report.categories_present():
                self.category_frame(report, category).to_excel(
                    writer, sheet_name=make_sheet_name(category), index=False
                )

            for sheet in writer.sheets.values():
                self._format_sheet(sheet)

        return str(output_path)

    def _format_sheet(self, sheet) -> None:
        """Auto-size columns (capped) and freeze the header row."""
        max_width = EXCEL_FORMATTING["max_column_width"]

        for column in sheet.columns:
            column_letter = column[0].column_letter
            max_length = max(
                (len(str(cell.value)) for cell in column if cell.value is not None),
                default=0,
            )
            sheet.column_dimensions[column_letter].width = min(max_length + 2, max_width)

        if EXCEL_FORMATTING["freeze_header_row"]:
            sheet.freeze_panes = "A2"

    # -------------------------------------------------------------------------
    # Saved reports
    # -------------------------------------------------------------------------

    def find_report_files(self, pattern: Optional[str] = None) -> List[Path]:
        """Report JSON files in the output folder, newest first."""
        output_path = Path(self.output_folder)
        if not output_path.exists():
            return []

        glob = f"*{pattern}*.json" if pattern else "*.json"
        return sorted(output_path.glob(glob), key=lambda x: x.stat().st_mtime, reverse=True)

    def load_report(self, json_file: Path) -> AnalysisReport:
        """
        Load and validate a report JSON file.

        Raises:
            ValueError: when the file is not a valid report
        """
        try:
            with open(json_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON format: {e}") from e

        try:
            return AnalysisReport.model_validate(data)
        except ValidationError as e:
            raise ValueError(f"{Path(json_file).name} is not a violation report: {e}") from e

    def convert_single_file(self, json_file: Path, excel_filename: Optional[str] = None) -> str:
        """Convert one report JSON file to Excel."""
        print(f"📄 Converting: {json_file.name}")

        report = self.load_report(json_file)
        print(f"   ✓ Loaded {report.total_violations} violations from {len(report.parsed_logs)} logs")

        excel_path = self.create_excel_file(report, excel_filename or f"{json_file.stem}.xlsx")
        print(f"   ✓ Excel created: {Path(excel_path).name}")
        return excel_path

    def convert_all_report_files(self) -> List[str]:
        """Convert every report JSON in the output folder."""
        json_files = self.find_report_files()
        if not json_files:
            print("❌ No report JSON files found in the output folder")
            return []

        print(f"📁 Found {len(json_files)} report files")

        excel_files = []
        for i, json_file in enumerate(json_files, 1):
            print(f"\n[{i}/{len(json_files)}] ", end="")
            try:
                excel_files.append(self.convert_single_file(json_file))
            except ValueError as e:
                print(f"   ❌ Failed to convert {json_file.name}: {e}")
        return excel_files

    def convert_latest_report(self) -> str:
        """Convert the most recently written report JSON."""
        json_files = self.find_report_files()
        if not json_files:
            raise FileNotFoundError("No report JSON files found in the output folder")

        latest = json_files[0]  # newest first
        print(f"🕒 Converting latest report: {latest.name}")
        return self.convert_single_file(latest)


def main(argv: Optional[List[str]] = None) -> int:
    """Command line usage: [--all | --latest | filename.json]"""
    argv = sys.argv[1:] if argv is None else argv

    load_dotenv()
    print("📊 Violation Report to Excel Converter")
    print("=" * 40)

    exporter = ReportExcelExporter()
    arg = argv[0] if argv else "--latest"

    try:
        if arg == "--all":
            excel_files = exporter.convert_all_report_files()
            print(f"\n✅ Converted {len(excel_files)} files")
        elif arg == "--latest":
            excel_file = exporter.convert_latest_report()
            print(f"\n✅ Latest report converted: {Path(excel_file).name}")
        elif arg.endswith(".json"):
            json_path = Path(exporter.output_folder) / arg
            if not json_path.exists():
                print(f"❌ Report file not found: {arg}")
                return 1
            excel_file = exporter.convert_single_file(json_path)
            print(f"\n✅ File converted: {Path(excel_file).name}")
        else:
            print(f"❌ Unknown argument: {arg}")
            print("Usage: python report_to_excel.py [--all|--latest|filename.json]")
            return 1
    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
