"""
Configuration file for the ELD Driver Log Auditor

This file contains every pattern, vocabulary and threshold used by the
parser and the violation rules. Tuning a rule means editing a table here,
not touching the control flow in parsers/ or detectors/.

Runtime settings (folders, worker count, log level) come from environment
variables, loaded from a .env file by the entry points.
"""

import os
import re
from typing import List, Dict, Any

# =============================================================================
# DRIVER INFORMATION
# =============================================================================

# Known drivers for the fleet. When filled in, extracted driver names are
# fuzzy-matched against this roster. Leave empty to keep names as extracted.
KNOWN_DRIVERS: List[str] = [
    # "John Smith",
    # "Maria Garcia",
]

# Common text-extraction mistakes for driver names (original -> corrected)
DRIVER_NAME_CORRECTIONS: Dict[str, str] = {
    # "Jon Smith": "John Smith",
}

CONFIDENCE_THRESHOLDS = {
    "driver_name_fuzzy_match": 0.8,  # How similar names need to be (0-1)
}

UNKNOWN_DRIVER = "Unknown Driver"
UNKNOWN_DATE = "Unknown"

# =============================================================================
# FORMAT & JURISDICTION DETECTION
# =============================================================================

# Checked in order, first hit wins. Motive must stay ahead of Samsara.
FORMAT_KEYWORDS = [
    ("Motive", ["motive", "keeptruckin"]),
    ("Samsara", ["samsara"]),
]

CANADIAN_INDICATORS = [
    "canada", "ontario", "quebec", "british columbia", "alberta", "manitoba",
    "saskatchewan", "nova scotia", "new brunswick", "newfoundland", "pei",
    "yukon", "nunavut", "nwt",
]

USA_INDICATORS = [
    "usa", "united states", "california", "texas", "florida", "new york",
    "illinois", "pennsylvania", "ohio", "georgia", "michigan", "arizona",
    "washington", "oregon", "nevada",
]

# =============================================================================
# DUTY STATUS VOCABULARY
# =============================================================================

# Order matters: the first keyword found on a line becomes the entry status.
STATUS_KEYWORDS = [
    "driving", "on duty", "off duty", "sleeper",
    "on-duty", "off-duty", "personal", "yard move",
]

DRIVING_STATUS = "driving"

# =============================================================================
# PARSING PATTERNS
# =============================================================================

# Document date patterns, tried in order; the first one found anywhere wins
DATE_PATTERNS = [
    re.compile(r'(\d{1,2}/\d{1,2}/\d{4})'),                      # 3/15/2024
    re.compile(r'(\d{4}-\d{2}-\d{2})'),                          # 2024-03-15
    re.compile(r'(\d{1,2}-\d{1,2}-\d{4})'),                      # 3-15-2024
    re.compile(
        r'((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]* \d{1,2},? \d{4})',
        re.IGNORECASE,
    ),                                                           # Mar 15, 2024
]

# Formats accepted when turning a date string into a calendar date
DATE_FORMATS = [
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%m-%d-%Y",
    "%b %d, %Y",
    "%b %d %Y",
]

# Month names are cut to their first three letters before parsing, so
# "March", "Sept" and "Sept." all read as %b
MONTH_NAME_PREFIX = re.compile(r'^([A-Za-z]{3})[A-Za-z]*\.?')

PATTERNS = {
    # "Driver: John Smith" / "Name John Smith"; the label is case-insensitive,
    # the name itself must be two capitalized words
    "driver_name": re.compile(r'(?i:driver|name)[:\s]+([A-Z][a-z]+\s+[A-Z][a-z]+)'),

    # Entry line pieces
    "line_split": re.compile(r'\n|\r\n?'),
    "field_split": re.compile(r'\s{2,}|\t'),
    "time": re.compile(r'(\d{1,2}:\d{2}(?::\d{2})?(?:\s*[AP]M)?)', re.IGNORECASE),
    "odometer": re.compile(r'(\d{4,}(?:\.\d+)?)'),
    "duration": re.compile(r'(\d+:\d+(?::\d+)?)'),
    "city_state": re.compile(r'([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?,\s*[A-Z]{2})'),
    "coordinates": re.compile(r'(\d+\.\d+,\s*-?\d+\.\d+)'),
    "odometer_cleanup": re.compile(r'[^0-9.]'),
}

# Filled with a field label ("notes", "remarks", "comments")
NOTE_PATTERN_TEMPLATE = r'{field}[:\s]+([^|]+)'
NOTE_FIELDS = ["notes", "remarks", "comments"]

MIN_FIELDS_PER_ROW = 2

# Duration formats, tried in this order
DURATION_PATTERNS = {
    "clock": re.compile(r'(\d+):(\d+)'),                                  # 1:30, 01:30:00
    "hours_minutes": re.compile(r'(\d+)\s*h(?:ours?)?\s*(\d+)?\s*m?', re.IGNORECASE),  # 1h 30m
    "minutes": re.compile(r'(\d+)\s*(?:min|minutes?)', re.IGNORECASE),    # 90 min
}

# Motive unidentified-driving section markers
UNIDENTIFIED_MARKERS = ("unidentified", "event")

# =============================================================================
# VIOLATION RULES
# =============================================================================

# Daily driving limit in hours, per jurisdiction
MAX_DRIVING_HOURS = {
    "USA": 11,
    "Canada": 13,
}
DEFAULT_MAX_DRIVING_HOURS = 11

# Odometer jump above this distance is Critical, otherwise Major
ODOMETER_JUMP_CRITICAL_DELTA = 50

# Driving intervals shorter than this are too short to expect movement
STATIONARY_MIN_MINUTES = 10

NOTES_SEPARATOR = " | "

# =============================================================================
# INPUT & EXPORT SETTINGS
# =============================================================================

SUPPORTED_EXTENSIONS = {
    "text": {".txt", ".text", ".log"},
    "pdf": {".pdf"},
    "image": {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".webp"},
}

EXCEL_FORMATTING = {
    "max_column_width": 60,
    "max_sheet_name_length": 31,   # Excel limit
    "freeze_header_row": True,
}

# Characters Excel refuses in sheet names
INVALID_SHEET_CHARACTERS = re.compile(r'[\\*?:/\[\]]')

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_allowed_driving_hours(country: str) -> int:
    """
    Get the daily driving limit for a jurisdiction.

    Args:
        country: "USA", "Canada" or anything else

    Returns:
        Allowed driving hours per day
    """
    return MAX_DRIVING_HOURS.get(country, DEFAULT_MAX_DRIVING_HOURS)


def make_sheet_name(category: str) -> str:
    """Turn a full category name into a legal Excel sheet name."""
    name = INVALID_SHEET_CHARACTERS.sub("-", category)
    return name[:EXCEL_FORMATTING["max_sheet_name_length"]]


def get_settings() -> Dict[str, Any]:
    """
    Read runtime settings from environment variables.

    Call load_dotenv() before this if settings live in a .env file.
    """
    return {
        "logs_folder": os.getenv("LOGS_FOLDER", "logs"),
        "output_folder": os.getenv("OUTPUT_FOLDER", "output"),
        "max_workers": int(os.getenv("MAX_WORKERS", "4")),
        "report_prefix": os.getenv("REPORT_FILENAME_PREFIX", "violation_report"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
    }
