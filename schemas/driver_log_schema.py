"""
Driver Log Schema - Defines the structure of a parsed ELD driver log.

A document yields one ParsedLog. Each duty-status line found in the text
becomes one LogEntry. Pydantic validates types and keeps the few
invariants the rule checks depend on:
- duration_minutes is always computed from duration, never stored
- every LogEntry field except date is read-only after creation
- odometer is either a non-negative number or None (unknown)
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from normalize import is_driving, parse_duration_to_minutes


class Country(str, Enum):
    """Jurisdiction whose hours-of-service limits apply."""
    USA = "USA"
    CANADA = "Canada"
    UNKNOWN = "Unknown"


class LogFormat(str, Enum):
    """ELD vendor layout the text came from."""
    MOTIVE = "Motive"
    SAMSARA = "Samsara"
    GENERIC = "Generic"


class LogEntry(BaseModel):
    """
    One duty-status line recovered from the document text.

    Only `date` may change after creation: entries start without a date
    and receive the document date once the whole text has been read.
    """

    date: str = Field("", description="Calendar date of the entry, back-filled from the log date")
    time: str = Field("", frozen=True, description="Clock time as written (e.g. 08:15 AM)")
    status: str = Field("", frozen=True, description="Duty status, canonical casing (e.g. Driving, Off duty)")
    duration: str = Field("", frozen=True, description="Duration exactly as written")
    odometer: Optional[float] = Field(None, ge=0, frozen=True, description="Odometer reading, None when unknown")
    location: str = Field("", frozen=True, description="City, ST or coordinate pair")
    notes: str = Field("", frozen=True)
    remarks: str = Field("", frozen=True)
    comments: str = Field("", frozen=True)
    raw_row: List[str] = Field(default_factory=list, frozen=True, description="Original tokenized line")

    @computed_field
    @property
    def duration_minutes(self) -> int:
        """Whole minutes derived from `duration`."""
        return parse_duration_to_minutes(self.duration)


class ParsedLog(BaseModel):
    """
    Everything extracted from a single document.

    The violation detector only ever reorders `entries` in place.
    """

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    driver_name: str = Field("Unknown Driver", description="Driver name from the labeled field")
    log_date: str = Field("Unknown", description="Document-level date, as written")
    country: Country = Field(Country.USA, description="Jurisdiction (Unknown resolves to USA)")
    format: LogFormat = Field(LogFormat.GENERIC, description="Source ELD format")
    entries: List[LogEntry] = Field(default_factory=list)
    unidentified_events: List[LogEntry] = Field(
        default_factory=list,
        description="Driving the device could not attribute to a driver (Motive only)",
    )
    source_file: str = Field("", description="Original document filename, when known")

    @field_validator('driver_name')
    @classmethod
    def clean_driver_name(cls, v):
        """Collapse stray whitespace inside the name"""
        if v:
            return ' '.join(v.split())
        return v

    def get_driving_minutes(self) -> int:
        """Total minutes of entries whose status is Driving."""
        return sum(
            entry.duration_minutes
            for entry in self.entries
            if is_driving(entry.status)
        )
