"""
Driver Log Parser - Extracts structured duty-status data from ELD log text.

This file contains the logic to take the raw text of one ELD document
(Motive, Samsara or a generic export) and turn it into a ParsedLog.

How it works:
- The whole text is scanned once for document-level facts: vendor format,
  jurisdiction, log date and driver name
- Every line mentioning a duty status becomes a LogEntry
- Motive documents may carry an "unidentified events" section, which is
  read separately
- Nothing here raises on messy input: a field that cannot be found is left
  empty (or None for the odometer)
"""

import logging
import re
from typing import List, Optional

from fuzzywuzzy import fuzz, process

from config import (
    CANADIAN_INDICATORS, USA_INDICATORS, FORMAT_KEYWORDS, STATUS_KEYWORDS,
    DATE_PATTERNS, PATTERNS, NOTE_PATTERN_TEMPLATE, NOTE_FIELDS,
    MIN_FIELDS_PER_ROW, UNIDENTIFIED_MARKERS,
    KNOWN_DRIVERS, DRIVER_NAME_CORRECTIONS, CONFIDENCE_THRESHOLDS,
    UNKNOWN_DRIVER, UNKNOWN_DATE,
)
from normalize import parse_odometer
from schemas.driver_log_schema import Country, LogEntry, LogFormat, ParsedLog

logger = logging.getLogger(__name__)


class DriverLogParser:
    """
    Parses ELD document text into a ParsedLog.

    The parser holds no per-document state, so one instance can be shared
    by several worker threads.
    """

    def __init__(self, known_drivers: Optional[List[str]] = None,
                 name_corrections: Optional[dict] = None):
        """
        Initialize the parser.

        Args:
            known_drivers: Driver roster for fuzzy name matching
                (defaults to KNOWN_DRIVERS from config)
            name_corrections: Exact name fixes, applied before fuzzy matching
                (defaults to DRIVER_NAME_CORRECTIONS from config)
        """
        self.known_drivers = KNOWN_DRIVERS if known_drivers is None else known_drivers
        self.name_corrections = DRIVER_NAME_CORRECTIONS if name_corrections is None else name_corrections

        self.note_patterns = {
            field: re.compile(NOTE_PATTERN_TEMPLATE.format(field=field), re.IGNORECASE)
            for field in NOTE_FIELDS
        }

    def parse_document(self, text: str, source_file: str = "") -> ParsedLog:
        """
        Main method to parse an entire document.

        Args:
            text: Full document text (pages joined by newlines)
            source_file: Name of the original document, kept for traceability

        Returns:
            ParsedLog with document facts and all recovered entries
        """
        text = text or ""

        log_format = self.detect_format(text)
        country = self.detect_country(text)
        log_date = self.extract_document_date(text)
        driver_name = self.extract_driver_name(text)

        entries = self.extract_log_entries(text)
        unidentified = (
            self.extract_unidentified_events(text)
            if log_format == LogFormat.MOTIVE
            else []
        )

        # Entries are read line by line before the date is known for sure
        for entry in entries:
            entry.date = log_date

        logger.debug(
            "Parsed %s: format=%s country=%s date=%s entries=%d unidentified=%d",
            source_file or "<text>", log_format.value, country.value, log_date,
            len(entries), len(unidentified),
        )

        return ParsedLog(
            driver_name=driver_name,
            log_date=log_date,
            country=Country.USA if country == Country.UNKNOWN else country,
            format=log_format,
            entries=entries,
            unidentified_events=unidentified,
            source_file=source_file,
        )

    # -------------------------------------------------------------------------
    # Document-level facts
    # -------------------------------------------------------------------------

    def detect_format(self, text: str) -> LogFormat:
        """Identify the ELD vendor from keywords. Motive wins over Samsara."""
        lower_text = text.lower()
        for format_name, keywords in FORMAT_KEYWORDS:
            if any(keyword in lower_text for keyword in keywords):
                return LogFormat(format_name)
        return LogFormat.GENERIC

    def detect_country(self, text: str) -> Country:
        """
        Find the jurisdiction from province/state names.

        Canadian names are checked first. Returns Country.UNKNOWN when
        nothing matches; parse_document turns that into USA.
        """
        lower_text = text.lower()
        for indicator in CANADIAN_INDICATORS:
            if indicator in lower_text:
                return Country.CANADA
        for indicator in USA_INDICATORS:
            if indicator in lower_text:
                return Country.USA
        return Country.UNKNOWN

    def extract_document_date(self, text: str) -> str:
        """Return the first date found, trying patterns in priority order."""
        for pattern in DATE_PATTERNS:
            match = pattern.search(text)
            if match:
                return match.group(1)
        return UNKNOWN_DATE

    def extract_driver_name(self, text: str) -> str:
        """Read the labeled driver name, corrected against the known roster."""
        match = PATTERNS["driver_name"].search(text)
        if not match:
            return UNKNOWN_DRIVER
        return self._correct_and_match_driver_name(match.group(1))

    def _correct_and_match_driver_name(self, name: str) -> str:
        """Apply corrections and fuzzy matching to driver names."""
        for mistake, correction in self.name_corrections.items():
            if mistake.lower() == name.lower() and correction:
                logger.debug("Corrected driver '%s' to '%s'", name, correction)
                return correction

        if self.known_drivers:
            match_result = process.extractOne(name, self.known_drivers, scorer=fuzz.ratio)
            threshold = CONFIDENCE_THRESHOLDS["driver_name_fuzzy_match"] * 100
            if match_result and match_result[1] >= threshold:
                if match_result[0] != name:
                    logger.debug(
                        "Fuzzy matched driver '%s' to '%s' (score: %s)",
                        name, match_result[0], match_result[1],
                    )
                return match_result[0]

        return name

    # -------------------------------------------------------------------------
    # Entry extraction
    # -------------------------------------------------------------------------

    def extract_log_entries(self, text: str) -> List[LogEntry]:
        """
        Turn every duty-status line into a LogEntry.

        A line qualifies when it mentions a duty status and splits into at
        least two fields (on tabs or runs of 2+ spaces).
        """
        entries = []
        for line in PATTERNS["line_split"].split(text):
            status = self._find_status(line)
            if not status:
                continue

            parts = PATTERNS["field_split"].split(line)
            if len(parts) < MIN_FIELDS_PER_ROW:
                continue

            entries.append(self._build_entry(line, status, parts))
        return entries

    def extract_unidentified_events(self, text: str) -> List[LogEntry]:
        """
        Read driving lines from the unidentified-events section.

        The section starts at the first line mentioning "unidentified";
        every driving line after it counts as unidentified driving.
        """
        lower_text = text.lower()
        if not all(marker in lower_text for marker in UNIDENTIFIED_MARKERS):
            return []

        events = []
        in_section = False
        for line in PATTERNS["line_split"].split(text):
            lower_line = line.lower()
            if "unidentified" in lower_line:
                in_section = True
                continue
            if in_section and "driving" in lower_line:
                parts = PATTERNS["field_split"].split(line)
                events.append(self._build_entry(line, "Driving", parts))
        return events

    def _find_status(self, line: str) -> str:
        """First status keyword on the line, with its first letter capitalized."""
        lower_line = line.lower()
        for keyword in STATUS_KEYWORDS:
            if keyword in lower_line:
                return keyword[0].upper() + keyword[1:]
        return ""

    def _build_entry(self, line: str, status: str, parts: List[str]) -> LogEntry:
        """Extract every per-line field into a LogEntry (date left empty)."""
        time_match = PATTERNS["time"].search(line)
        odometer_match = PATTERNS["odometer"].search(line)

        return LogEntry(
            time=time_match.group(1) if time_match else "",
            status=status,
            duration=self._extract_duration(line),
            odometer=parse_odometer(odometer_match.group(1)) if odometer_match else None,
            location=self._extract_location(line),
            notes=self._extract_note(line, "notes"),
            remarks=self._extract_note(line, "remarks"),
            comments=self._extract_note(line, "comments"),
            raw_row=parts,
        )

    def _extract_duration(self, line: str) -> str:
        """
        Pick the duration token.

        Clock times look like durations too, so when a line has two or more
        H:MM tokens the second one is the duration.
        """
        tokens = PATTERNS["duration"].findall(line)
        if len(tokens) > 1:
            return tokens[1]
        if tokens:
            return tokens[0]
        return ""

    def _extract_location(self, line: str) -> str:
        """City, ST first; a decimal coordinate pair second."""
        match = PATTERNS["city_state"].search(line)
        if match:
            return match.group(1)

        match = PATTERNS["coordinates"].search(line)
        if match:
            return match.group(1)

        return ""

    def _extract_note(self, line: str, field: str) -> str:
        """Text after a notes/remarks/comments label, up to the next '|'."""
        match = self.note_patterns[field].search(line)
        return match.group(1).strip() if match else ""


def parse_log_text(text: str, source_file: str = "") -> ParsedLog:
    """
    Convenience function to parse one document's text.

    Args:
        text: Document text
        source_file: Optional document name

    Returns:
        ParsedLog object
    """
    return DriverLogParser().parse_document(text, source_file)
