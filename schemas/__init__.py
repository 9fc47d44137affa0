"""
Schemas package for driver log data.

Pydantic models describing what the parser produces (ParsedLog, LogEntry)
and what the violation detector reports (Violation, AnalysisReport).
"""

from .driver_log_schema import Country, LogEntry, LogFormat, ParsedLog
from .report_schema import (
    AnalysisReport,
    DateRange,
    DocumentError,
    ReportSummary,
    Severity,
    Violation,
    ViolationCategory,
    ViolationDetails,
)

__all__ = [
    "Country",
    "LogEntry",
    "LogFormat",
    "ParsedLog",
    "AnalysisReport",
    "DateRange",
    "DocumentError",
    "ReportSummary",
    "Severity",
    "Violation",
    "ViolationCategory",
    "ViolationDetails",
]
