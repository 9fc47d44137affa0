import pytest

from schemas import LogEntry, ParsedLog


GENERIC_LOG_TEXT = """DAILY LOG
Driver: John Smith
Date: 03/15/2024
Carrier: Acme Freight, Texas

08:00 AM  Off Duty  0:30  Dallas, TX  104500
08:30 AM  Driving  4:00  Dallas, TX
12:30 PM  On Duty  0:45  Waco, TX  104780  Notes: fuel stop
"""

MOTIVE_LOG_TEXT = """Motive ELD Report
Driver: Jean Tremblay
Date: 2024-03-16
Home terminal: Toronto, Ontario

06:00  Off Duty  2:00  Toronto, ON  250100
08:00  Driving  7:30  Toronto, ON  250100
15:30  On Duty  0:30  Kingston, ON  250400
16:00  Driving  6:00  Kingston, ON  250400

Unidentified Driving Events
21:00  Driving  1:15  251000
"""

NO_DUTY_TEXT = """Quarterly fuel receipt
Total: 45.2 gallons
Thank you for your business
"""


def make_entry(time="", status="Off Duty", duration="", odometer=None, location="",
               date="03/15/2024", notes="", remarks="", comments=""):
    """Helper to build a LogEntry with only the fields a test cares about."""
    return LogEntry(
        date=date,
        time=time,
        status=status,
        duration=duration,
        odometer=odometer,
        location=location,
        notes=notes,
        remarks=remarks,
        comments=comments,
    )


def make_log(entries=None, log_date="03/15/2024", country="USA", format="Generic",
             unidentified_events=None, driver_name="John Smith"):
    return ParsedLog(
        driver_name=driver_name,
        log_date=log_date,
        country=country,
        format=format,
        entries=entries or [],
        unidentified_events=unidentified_events or [],
    )


@pytest.fixture
def generic_text():
    return GENERIC_LOG_TEXT


@pytest.fixture
def motive_text():
    return MOTIVE_LOG_TEXT


@pytest.fixture
def no_duty_text():
    return NO_DUTY_TEXT
