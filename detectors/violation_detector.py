"""
Violation Detector - Runs the compliance rules over parsed driver logs.

Seven independent checks run on every log, always in the same order:
1. Odometer jump while not driving
2. Location change without driving
3. Stationary while driving
4. Daily driving hours exceeded
5. Odometer mismatch at a date change
6. Unidentified driving events (Motive)
7. Notes / remarks present (informational)

The order of logs, entries and checks is the order of the report, so two
runs over the same input produce the same violations (apart from ids and
the generation timestamp).
"""

import logging
import uuid
from collections import OrderedDict
from datetime import date, datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from config import (
    NOTES_SEPARATOR, ODOMETER_JUMP_CRITICAL_DELTA, STATIONARY_MIN_MINUTES,
    UNKNOWN_DATE, get_allowed_driving_hours,
)
from normalize import is_driving, parse_log_date
from schemas.driver_log_schema import LogEntry, LogFormat, ParsedLog
from schemas.report_schema import (
    AnalysisReport, DateRange, ReportSummary, Severity, Violation,
    ViolationCategory, ViolationDetails,
)

logger = logging.getLogger(__name__)

IdGenerator = Callable[[], str]


def random_id() -> str:
    """Default violation id: 9 random hex characters."""
    return uuid.uuid4().hex[:9]


class SequentialIdGenerator:
    """Deterministic ids (V0001, V0002, ...) for repeatable reports."""

    def __init__(self, prefix: str = "V", width: int = 4):
        self.prefix = prefix
        self.width = width
        self.counter = 0

    def __call__(self) -> str:
        self.counter += 1
        return f"{self.prefix}{self.counter:0{self.width}d}"


# =============================================================================
# Ordering helpers
# =============================================================================

def log_sort_key(log: ParsedLog) -> Tuple[int, date]:
    """Calendar order by log date; unparsable dates go last."""
    parsed = parse_log_date(log.log_date)
    if parsed is None:
        return (1, date.min)
    return (0, parsed)


def sort_logs(logs: List[ParsedLog]) -> None:
    """Sort logs by date and each log's entries by time, in place."""
    logs.sort(key=log_sort_key)
    for log in logs:
        # Empty times sort first
        log.entries.sort(key=lambda entry: entry.time or "")


def find_previous_entry_with_duration(entries: List[LogEntry], current_index: int) -> Optional[LogEntry]:
    """
    Nearest earlier entry with a real duration.

    The duration text must be non-empty and worth more than zero minutes.
    """
    for i in range(current_index - 1, -1, -1):
        entry = entries[i]
        if entry.duration and entry.duration_minutes > 0:
            return entry
    return None


def find_previous_entry_with_odometer(entries: List[LogEntry], current_index: int) -> Optional[LogEntry]:
    """Nearest earlier entry with a known odometer reading."""
    for i in range(current_index - 1, -1, -1):
        if entries[i].odometer is not None:
            return entries[i]
    return None


# =============================================================================
# Rule checks
# =============================================================================

def check_odometer_jump(entries: List[LogEntry], new_id: IdGenerator = random_id) -> List[Violation]:
    """Distance gained while the reference status was not Driving."""
    violations = []

    for i, current in enumerate(entries):
        if current.odometer is None:
            continue

        reference = find_previous_entry_with_duration(entries, i)
        if reference is None or reference.odometer is None:
            continue

        diff = current.odometer - reference.odometer
        if diff > 0 and not is_driving(reference.status):
            violations.append(Violation(
                id=new_id(),
                category=ViolationCategory.ODOMETER_JUMP,
                severity=Severity.CRITICAL if diff > ODOMETER_JUMP_CRITICAL_DELTA else Severity.MAJOR,
                date=current.date,
                time=current.time,
                description=(
                    f'Odometer changed by {diff:.1f} miles but status was '
                    f'"{reference.status}" (not Driving)'
                ),
                details=ViolationDetails(
                    current_odometer=current.odometer,
                    previous_odometer=reference.odometer,
                    odometer_diff=diff,
                    duration=reference.duration,
                    status=reference.status,
                ),
            ))

    return violations


def check_location_change(entries: List[LogEntry], new_id: IdGenerator = random_id) -> List[Violation]:
    """The location moved but the last timed status was not Driving."""
    violations = []

    for i in range(1, len(entries)):
        current = entries[i]
        previous = entries[i - 1]

        if not current.location or not previous.location:
            continue
        if current.location.strip().lower() == previous.location.strip().lower():
            continue

        reference = find_previous_entry_with_duration(entries, i)
        if reference is not None and not is_driving(reference.status):
            violations.append(Violation(
                id=new_id(),
                category=ViolationCategory.LOCATION_CHANGE,
                severity=Severity.MAJOR,
                date=current.date,
                time=current.time,
                description=(
                    f'Location changed from "{previous.location}" to '
                    f'"{current.location}" without driving status'
                ),
                details=ViolationDetails(
                    current_location=current.location,
                    previous_location=previous.location,
                    status=reference.status,
                    duration=reference.duration,
                ),
            ))

    return violations


def check_stationary_while_driving(entries: List[LogEntry], new_id: IdGenerator = random_id) -> List[Violation]:
    """Driving for a while, but the odometer did not move."""
    violations = []

    for i, entry in enumerate(entries):
        if not is_driving(entry.status) or entry.duration_minutes < STATIONARY_MIN_MINUTES:
            continue
        if entry.odometer is None:
            continue

        previous = find_previous_entry_with_odometer(entries, i)
        if previous is not None and previous.odometer == entry.odometer:
            violations.append(Violation(
                id=new_id(),
                category=ViolationCategory.STATIONARY_DRIVING,
                severity=Severity.MAJOR,
                date=entry.date,
                time=entry.time,
                description=f'Status is "Driving" for {entry.duration} but odometer unchanged',
                details=ViolationDetails(
                    current_odometer=entry.odometer,
                    previous_odometer=previous.odometer,
                    duration=entry.duration,
                    status=entry.status,
                ),
            ))

    return violations


def check_driving_hours_exceeded(log: ParsedLog, new_id: IdGenerator = random_id) -> List[Violation]:
    """One violation per date whose driving total is over the daily limit."""
    violations = []
    max_hours = get_allowed_driving_hours(log.country)

    minutes_by_date: Dict[str, int] = OrderedDict()
    for entry in log.entries:
        minutes_by_date.setdefault(entry.date, 0)
        if is_driving(entry.status):
            minutes_by_date[entry.date] += entry.duration_minutes

    for entry_date, total_minutes in minutes_by_date.items():
        if total_minutes <= max_hours * 60:
            continue

        total_hours = total_minutes / 60
        violations.append(Violation(
            id=new_id(),
            category=ViolationCategory.HOURS_EXCEEDED,
            severity=Severity.CRITICAL,
            date=entry_date,
            time="",
            description=(
                f"Total driving time {total_hours:.2f} hours exceeds "
                f"{max_hours} hour limit for {log.country}"
            ),
            details=ViolationDetails(
                total_driving_hours=total_hours,
                allowed_hours=max_hours,
            ),
        ))

    return violations


def check_odometer_at_date_change(entries: List[LogEntry], new_id: IdGenerator = random_id) -> List[Violation]:
    """
    The last reading of one day must match the first reading of the next.

    Dates are compared in calendar order. Dates that do not parse, or that
    have no odometer readings, take no part in the comparison.
    """
    violations = []

    # Keyed by calendar day; the first spelling seen is used for display
    readings: Dict[date, List[LogEntry]] = OrderedDict()
    labels: Dict[date, str] = {}
    for entry in entries:
        day = parse_log_date(entry.date)
        if entry.odometer is None or day is None:
            continue
        readings.setdefault(day, []).append(entry)
        labels.setdefault(day, entry.date)

    ordered_days = sorted(readings)

    for previous_day, current_day in zip(ordered_days, ordered_days[1:]):
        previous_date = labels[previous_day]
        current_date = labels[current_day]
        last_reading = readings[previous_day][-1]
        first_reading = readings[current_day][0]
        diff = first_reading.odometer - last_reading.odometer

        if diff != 0:
            violations.append(Violation(
                id=new_id(),
                category=ViolationCategory.ODOMETER_MISMATCH,
                severity=Severity.MAJOR,
                date=current_date,
                time=first_reading.time,
                description=(
                    f"Odometer differs by {diff:.1f} miles at date change "
                    f"from {previous_date} to {current_date}"
                ),
                details=ViolationDetails(
                    current_odometer=first_reading.odometer,
                    previous_odometer=last_reading.odometer,
                    odometer_diff=diff,
                ),
            ))

    return violations


def check_unidentified_driving_events(log: ParsedLog, new_id: IdGenerator = random_id) -> List[Violation]:
    """Driving the Motive device could not attribute to the driver."""
    violations = []

    if log.format != LogFormat.MOTIVE or not log.unidentified_events:
        return violations

    for event in log.unidentified_events:
        if not is_driving(event.status):
            continue
        violations.append(Violation(
            id=new_id(),
            category=ViolationCategory.UNIDENTIFIED_DRIVING,
            severity=Severity.CRITICAL,
            date=event.date or log.log_date,
            time=event.time,
            description="Unidentified driving event detected in Motive logs",
            details=ViolationDetails(
                current_odometer=event.odometer,
                duration=event.duration,
                current_location=event.location,
            ),
        ))

    return violations


def check_notes_and_remarks(entries: List[LogEntry], new_id: IdGenerator = random_id) -> List[Violation]:
    """Flag entries carrying free-text notes for manual review."""
    violations = []

    for entry in entries:
        texts = [
            value.strip()
            for value in (entry.notes, entry.remarks, entry.comments)
            if value and value.strip()
        ]
        if not texts:
            continue

        violations.append(Violation(
            id=new_id(),
            category=ViolationCategory.NOTES_PRESENT,
            severity=Severity.MINOR,
            date=entry.date,
            time=entry.time,
            description="Entry has notes, remarks, or comments that may need review",
            details=ViolationDetails(
                notes=NOTES_SEPARATOR.join(texts),
                status=entry.status,
                duration=entry.duration,
            ),
        ))

    return violations


# =============================================================================
# Detector
# =============================================================================

class ViolationDetector:
    """
    Analyzes a batch of parsed logs and builds the AnalysisReport.

    Ids and the report timestamp come from injected callables so tests can
    make them deterministic.
    """

    def __init__(self, id_generator: Optional[IdGenerator] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.id_generator = id_generator or random_id
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def check_log(self, log: ParsedLog) -> List[Violation]:
        """Run the seven checks on one (already sorted) log, in order."""
        new_id = self.id_generator
        violations = []
        violations.extend(check_odometer_jump(log.entries, new_id))
        violations.extend(check_location_change(log.entries, new_id))
        violations.extend(check_stationary_while_driving(log.entries, new_id))
        violations.extend(check_driving_hours_exceeded(log, new_id))
        violations.extend(check_odometer_at_date_change(log.entries, new_id))
        violations.extend(check_unidentified_driving_events(log, new_id))
        violations.extend(check_notes_and_remarks(log.entries, new_id))
        return violations

    def analyze(self, logs: List[ParsedLog]) -> AnalysisReport:
        """
        Analyze every log and aggregate the results.

        Args:
            logs: Parsed logs; the list and each log's entries are sorted in place

        Returns:
            AnalysisReport for the whole batch
        """
        sort_logs(logs)

        all_violations: List[Violation] = []
        for log in logs:
            found = self.check_log(log)
            logger.debug(
                "%s (%s): %d violations",
                log.source_file or log.driver_name, log.log_date, len(found),
            )
            all_violations.extend(found)

        violations_by_category = OrderedDict((category.value, 0) for category in ViolationCategory)
        for violation in all_violations:
            violations_by_category[violation.category] += 1

        logger.info("Analyzed %d logs, %d violations", len(logs), len(all_violations))

        return AnalysisReport(
            generated_at=self.clock(),
            total_violations=len(all_violations),
            violations_by_category=dict(violations_by_category),
            violations=all_violations,
            parsed_logs=logs,
            summary=self._build_summary(logs),
        )

    def _build_summary(self, logs: List[ParsedLog]) -> ReportSummary:
        """Entry and driving totals plus the span of log dates."""
        total_entries = sum(len(log.entries) for log in logs)
        total_driving_minutes = sum(log.get_driving_minutes() for log in logs)

        dated = [log for log in logs if parse_log_date(log.log_date) is not None]
        if dated:
            # logs are already in calendar order
            date_range = DateRange(start=dated[0].log_date, end=dated[-1].log_date)
        else:
            date_range = DateRange(start=UNKNOWN_DATE, end=UNKNOWN_DATE)

        return ReportSummary(
            total_entries=total_entries,
            total_driving_minutes=total_driving_minutes,
            date_range=date_range,
        )


def analyze_driver_logs(logs: List[ParsedLog], id_generator: Optional[IdGenerator] = None) -> AnalysisReport:
    """
    Convenience function to analyze a batch of logs.

    Args:
        logs: Parsed logs (sorted in place)
        id_generator: Optional violation id factory

    Returns:
        AnalysisReport
    """
    return ViolationDetector(id_generator=id_generator).analyze(logs)
