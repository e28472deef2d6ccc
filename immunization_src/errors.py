"""Exceptions raised by the immunization scheduler.

Clinically non-compliant doses are never errors; they come back as
``invalid`` records. These exceptions are reserved for caller-side
precondition violations.
"""


class ScheduleError(ValueError):
    """Base class for scheduler input errors."""


class InvalidInputError(ScheduleError):
    """Birth date or history entry is missing or malformed."""


class UnknownVaccineError(ScheduleError):
    """History names a vaccine identifier the catalog does not define."""

    def __init__(self, vaccine_id: str):
        self.vaccine_id = vaccine_id
        super().__init__(f"Unknown vaccine identifier: {vaccine_id!r}")
