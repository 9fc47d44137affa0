"""
Parsers package for ELD driver log text.

Takes the raw text of a driver log document and converts it into a
ParsedLog (see schemas/).
"""

from .driver_log_parser import DriverLogParser, parse_log_text

__all__ = ["DriverLogParser", "parse_log_text"]
