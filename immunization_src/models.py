"""Data models for immunization scheduling.

This module defines:
- DoseStatus: Lifecycle state of a scheduled or recorded dose
- DoseRule: One row of the dosing rule catalog (immutable)
- VaccineInfo: Display metadata for a vaccine
- AdministeredDose: A dose the child already received (input)
- ScheduledDoseRecord: One line of the computed schedule (output)
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from .errors import InvalidInputError


class DoseStatus(str, Enum):
    """Lifecycle state of a dose in the computed schedule."""
    UPCOMING = "upcoming"      # Scheduled after today
    DUE = "due"                # Scheduled for today
    OVERDUE = "overdue"        # Scheduled date already passed
    COMPLETED = "completed"    # Historical dose that counts toward the series
    INVALID = "invalid"        # Historical dose that does not count


class ScheduleMode(str, Enum):
    """Which entry point produced a schedule."""
    STANDARD = "standard"      # Nominal timeline from birth
    CATCHUP = "catchup"        # Validated history plus compressed projection


def parse_date(value, field_name: str = "date") -> date:
    """Coerce a date, datetime or ISO string (YYYY-MM-DD) to a date.

    Raises:
        InvalidInputError: If the value is missing or cannot be parsed.
    """
    if value is None or value == "":
        raise InvalidInputError(f"{field_name} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidInputError(f"{field_name} is not a valid ISO date: {value!r}")
    raise InvalidInputError(f"{field_name} must be a date, got {type(value).__name__}")


@dataclass(frozen=True)
class DoseRule:
    """Clinical constraints for one dose of one vaccine series.

    Ages and intervals are measured from birth and from the previous dose.
    When ``min_age_months`` is set it overrides ``min_age_weeks`` (used for
    "on or after the 1st birthday" style rules). When ``max_age_weeks`` is set,
    a dose that would land at or after birth + max age closes the series.
    """
    vaccine_id: str
    dose_number: int
    standard_age_months: int
    min_age_weeks: int
    min_age_months: int | None = None
    min_interval_weeks: int | None = None
    min_interval_months: int | None = None
    max_age_weeks: int | None = None
    min_weeks_from_first_dose: int | None = None  # Span from dose 1, on top of the interval
    standard_schedule: bool = True  # False for alternate brands and non-default series lengths

    @property
    def has_min_interval(self) -> bool:
        return bool(self.min_interval_weeks or self.min_interval_months)


@dataclass(frozen=True)
class VaccineInfo:
    """Display metadata for a vaccine (CDC VIS based)."""
    id: str
    name: str
    description: str
    common_side_effects: tuple[str, ...] = ()
    serious_side_effects: tuple[str, ...] = ()


@dataclass(frozen=True)
class AdministeredDose:
    """A dose recorded in the child's history.

    ``dose_number`` is what the caller claims. Once a dose is validated
    its real position in the series replaces it.
    """
    vaccine_id: str
    dose_number: int
    date_given: date

    def to_dict(self) -> dict:
        return {
            "vaccine_id": self.vaccine_id,
            "dose_number": self.dose_number,
            "date_given": self.date_given.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AdministeredDose":
        """Build from a JSON-style mapping.

        Accepts ``vaccine_id``/``vaccineId``, ``dose_number``/``doseNumber``
        and ``date_given``/``dateGiven`` keys.
        """
        if not isinstance(data, dict):
            raise InvalidInputError(f"History entry must be a mapping, got {type(data).__name__}")

        vaccine_id = data.get("vaccine_id") or data.get("vaccineId")
        if not vaccine_id or not isinstance(vaccine_id, str):
            raise InvalidInputError(f"History entry is missing vaccine_id: {data!r}")

        raw_number = data.get("dose_number", data.get("doseNumber", 0))
        try:
            dose_number = int(raw_number or 0)
        except (TypeError, ValueError):
            raise InvalidInputError(f"dose_number is not an integer: {raw_number!r}")

        date_given = parse_date(
            data.get("date_given") or data.get("dateGiven"),
            field_name="date_given",
        )
        return cls(vaccine_id=vaccine_id, dose_number=dose_number, date_given=date_given)


@dataclass(frozen=True)
class ScheduledDoseRecord:
    """One dose in the computed schedule, historical or projected."""
    vaccine_id: str
    vaccine_name: str
    dose_number: int
    scheduled_date: date
    age_label: str
    status: DoseStatus

    @property
    def is_historical(self) -> bool:
        return self.status in (DoseStatus.COMPLETED, DoseStatus.INVALID)

    def to_dict(self) -> dict:
        return {
            "vaccine_id": self.vaccine_id,
            "vaccine_name": self.vaccine_name,
            "dose_number": self.dose_number,
            "scheduled_date": self.scheduled_date.isoformat(),
            "age_label": self.age_label,
            "status": self.status.value,
        }
