"""
Report Schema - Violations and the final analysis report.

Violations are created by the rule checks in detectors/ and never change
afterwards, so they are frozen models.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .driver_log_schema import ParsedLog


class Severity(str, Enum):
    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"


class ViolationCategory(str, Enum):
    """The seven fixed kinds of violation, in report order."""
    ODOMETER_JUMP = "Odometer Jump"
    ODOMETER_MISMATCH = "Odometer Mismatch (Date Change)"
    LOCATION_CHANGE = "Location Change Without Driving"
    STATIONARY_DRIVING = "Stationary While Driving"
    HOURS_EXCEEDED = "Driving Hours Exceeded"
    UNIDENTIFIED_DRIVING = "Unidentified Driving Event"
    NOTES_PRESENT = "Notes/Remarks Present"


class ViolationDetails(BaseModel):
    """Category-specific facts behind a violation. Unused fields stay None."""

    model_config = ConfigDict(frozen=True)

    current_odometer: Optional[float] = None
    previous_odometer: Optional[float] = None
    odometer_diff: Optional[float] = None
    current_location: Optional[str] = None
    previous_location: Optional[str] = None
    duration: Optional[str] = None
    status: Optional[str] = None
    total_driving_hours: Optional[float] = None
    allowed_hours: Optional[int] = None
    notes: Optional[str] = None


class Violation(BaseModel):
    """One detected anomaly."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    id: str = Field(..., description="Unique within a report")
    category: ViolationCategory
    severity: Severity
    date: str = ""
    time: str = ""
    description: str
    details: ViolationDetails = Field(default_factory=ViolationDetails)


class DateRange(BaseModel):
    start: str = "Unknown"
    end: str = "Unknown"


class ReportSummary(BaseModel):
    total_entries: int = 0
    total_driving_minutes: int = 0
    date_range: DateRange = Field(default_factory=DateRange)


class DocumentError(BaseModel):
    """A document that could not be turned into text."""
    source_file: str
    reason: str


class AnalysisReport(BaseModel):
    """
    The terminal artifact of a run.

    violations_by_category always holds all seven categories, and its
    values add up to total_violations.
    """

    generated_at: datetime
    total_violations: int = 0
    violations_by_category: Dict[str, int] = Field(default_factory=dict)
    violations: List[Violation] = Field(default_factory=list)
    parsed_logs: List[ParsedLog] = Field(default_factory=list)
    summary: ReportSummary = Field(default_factory=ReportSummary)
    errors: List[DocumentError] = Field(default_factory=list)

    def violations_for(self, category: str) -> List[Violation]:
        """Violations of one category, in report order."""
        category = ViolationCategory(category).value
        return [v for v in self.violations if v.category == category]

    def categories_present(self) -> List[str]:
        """Categories that occur in the report, in first-appearance order."""
        seen = []
        for violation in self.violations:
            if violation.category not in seen:
                seen.append(violation.category)
        return seen
