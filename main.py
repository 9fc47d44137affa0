"""
ELD Driver Log Audit Pipeline

This is the main script that orchestrates the entire audit:
1. Finds driver log documents in the logs/ folder (or takes paths given
   on the command line)
2. Extracts the text of each document (text, PDF or image)
3. Parses each document into a ParsedLog, several documents at a time
4. Runs the violation rules over the whole batch
5. Exports the report to JSON and Excel

A document that cannot be read is reported and skipped; it never stops
the rest of the batch.
"""

import argparse
import json
import logging
import sys
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from config import get_settings
from detectors import ViolationDetector
from extractors import DocumentTextExtractor, TextExtractionError
from parsers import DriverLogParser
from report_to_excel import ReportExcelExporter
from schemas import AnalysisReport, DocumentError, ParsedLog

logger = logging.getLogger(__name__)


class LogAuditPipeline:
    """
    Main pipeline class that handles the entire process.

    This class coordinates all the different steps:
    - Document discovery and text extraction
    - Parsing, one worker per document
    - Violation detection over the full batch
    - JSON and Excel export
    """

    def __init__(self, logs_folder: Optional[str] = None, output_folder: Optional[str] = None,
                 max_workers: Optional[int] = None, extractor: Optional[DocumentTextExtractor] = None,
                 parser: Optional[DriverLogParser] = None, detector: Optional[ViolationDetector] = None):
        """Initialize the pipeline; unset options come from environment variables."""
        settings = get_settings()

        self.logs_folder = logs_folder or settings["logs_folder"]
        self.output_folder = output_folder or settings["output_folder"]
        self.max_workers = settings["max_workers"] if max_workers is None else max_workers
        self.report_prefix = settings["report_prefix"]

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

        self.extractor = extractor or DocumentTextExtractor()
        self.parser = parser or DriverLogParser()
        self.detector = detector or ViolationDetector()

        Path(self.output_folder).mkdir(parents=True, exist_ok=True)

    def process_document(self, path: Path) -> ParsedLog:
        """
        Extract and parse a single document.

        Raises:
            TextExtractionError: when the document yields no text
        """
        text = self.extractor.extract_text(path)
        return self.parser.parse_document(text, source_file=Path(path).name)

    def _process_safely(self, path: Path) -> Tuple[Optional[ParsedLog], Optional[DocumentError]]:
        try:
            return self.process_document(path), None
        except TextExtractionError as e:
            logger.warning("Skipping %s: %s", Path(path).name, e)
            return None, DocumentError(source_file=Path(path).name, reason=str(e))

    def process_documents(self, paths: List[Path]) -> Tuple[List[ParsedLog], List[DocumentError]]:
        """
        Extract and parse documents concurrently.

        Returns:
            (parsed logs, per-document errors), both in input order
        """
        logs: List[ParsedLog] = []
        errors: List[DocumentError] = []

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            # map() keeps results in input order
            for path, (log, error) in zip(paths, executor.map(self._process_safely, paths)):
                if error is not None:
                    print(f"  ⚠️  {Path(path).name}: {error.reason}")
                    errors.append(error)
                else:
                    print(f"  ✓ {Path(path).name}: {len(log.entries)} entries ({log.format}, {log.country})")
                    logs.append(log)

        return logs, errors

    def analyze_documents(self, paths: List[Path]) -> AnalysisReport:
        """Parse every document and analyze the successful ones together."""
        logs, errors = self.process_documents(paths)
        report = self.detector.analyze(logs)
        report.errors = errors
        return report

    def export_to_json(self, report: AnalysisReport, filename: Optional[str] = None) -> str:
        """
        Export the report to a JSON file.

        Args:
            report: The analysis report
            filename: Optional custom filename

        Returns:
            Path to the created JSON file
        """
        if not filename:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{self.report_prefix}_{timestamp}.json"

        output_path = Path(self.output_folder) / filename

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(report.model_dump(mode="json"), f, indent=2, ensure_ascii=False)

        return str(output_path)

    def run_pipeline(self, paths: Optional[List[Path]] = None, export_excel: bool = True) -> Optional[AnalysisReport]:
        """
        Run the complete audit.

        Args:
            paths: Documents to audit; defaults to everything in the logs folder
            export_excel: Also write the Excel workbook

        Returns:
            The report, or None when there was nothing to process
        """
        print("🚀 Starting Driver Log Audit")
        print("=" * 50)

        if paths is None:
            paths = self.extractor.find_documents(self.logs_folder)
        if not paths:
            print("❌ No driver log documents found!")
            print(f"   Please add documents to: {self.logs_folder}")
            return None

        print(f"📁 Found {len(paths)} documents")

        report = self.analyze_documents([Path(p) for p in paths])

        print(f"\n💾 Exporting report...")
        json_path = self.export_to_json(report)
        print(f"✓ JSON report: {json_path}")

        if export_excel:
            excel_path = ReportExcelExporter(self.output_folder).create_excel_file(
                report, f"{Path(json_path).stem}.xlsx"
            )
            print(f"✓ Excel report: {excel_path}")

        self.print_summary(report)
        return report

    def print_summary(self, report: AnalysisReport) -> None:
        summary = report.summary

        print(f"\n📊 Audit Summary")
        print("=" * 50)
        print(f"Logs analyzed: {len(report.parsed_logs)}")
        print(f"Documents failed: {len(report.errors)}")
        print(f"Total log entries: {summary.total_entries}")
        print(f"Total driving time: {summary.total_driving_minutes / 60:.2f} hours")
        print(f"Date range: {summary.date_range.start} to {summary.date_range.end}")
        print(f"Total violations: {report.total_violations}")
        for category, count in report.violations_by_category.items():
            if count:
                print(f"  - {category}: {count}")

        if report.total_violations == 0 and report.parsed_logs:
            print("\n🎉 No violations found!")


def build_arg_parser() -> argparse.ArgumentParser:
    arg_parser = argparse.ArgumentParser(
        description="Audit ELD driver logs for hours-of-service and data-integrity violations."
    )
    arg_parser.add_argument("documents", nargs="*", help="Documents to audit (default: the logs folder)")
    arg_parser.add_argument("--logs-folder", help="Folder with driver log documents")
    arg_parser.add_argument("--output-folder", help="Folder for JSON and Excel reports")
    arg_parser.add_argument("--workers", type=int, help="Documents parsed in parallel")
    arg_parser.add_argument("--no-excel", action="store_true", help="Skip the Excel export")
    return arg_parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point of the script.

    Returns:
        Process exit code
    """
    load_dotenv()
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=get_settings()["log_level"],
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        pipeline = LogAuditPipeline(
            logs_folder=args.logs_folder,
            output_folder=args.output_folder,
            max_workers=args.workers,
        )
        report = pipeline.run_pipeline(
            paths=[Path(d) for d in args.documents] or None,
            export_excel=not args.no_excel,
        )

    except KeyboardInterrupt:
        print("\n\n⏹️  Audit stopped by user (Ctrl+C)")
        return 130

    except (FileNotFoundError, ValueError) as e:
        print(f"\n❌ Error: {e}")
        print("\nTroubleshooting tips:")
        print("1. Check that your .env file is configured correctly")
        print("2. Ensure the logs folder exists and contains .txt, .pdf or image files")
        print("3. Image documents need GOOGLE_APPLICATION_CREDENTIALS set")
        return 1

    return 0 if report is not None else 1


if __name__ == "__main__":
    sys.exit(main())
