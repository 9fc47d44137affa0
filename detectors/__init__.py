"""
Detectors package - compliance and data-integrity rules for driver logs.

Consumes ParsedLog objects and produces an AnalysisReport.
"""

from .violation_detector import (
    SequentialIdGenerator,
    ViolationDetector,
    analyze_driver_logs,
    check_driving_hours_exceeded,
    check_location_change,
    check_notes_and_remarks,
    check_odometer_at_date_change,
    check_odometer_jump,
    check_stationary_while_driving,
    check_unidentified_driving_events,
    find_previous_entry_with_duration,
    find_previous_entry_with_odometer,
    log_sort_key,
    random_id,
    sort_logs,
)

__all__ = [
    "SequentialIdGenerator",
    "ViolationDetector",
    "analyze_driver_logs",
    "check_driving_hours_exceeded",
    "check_location_change",
    "check_notes_and_remarks",
    "check_odometer_at_date_change",
    "check_odometer_jump",
    "check_stationary_while_driving",
    "check_unidentified_driving_events",
    "find_previous_entry_with_duration",
    "find_previous_entry_with_odometer",
    "log_sort_key",
    "random_id",
    "sort_logs",
]
