"""Immunization Scheduler.

Computes a child's immunization timeline from a date of birth and the
doses already given: validates recorded doses, decides how many doses each
series needs, and projects a compressed catch-up plan for the rest.
"""

from .errors import InvalidInputError, ScheduleError, UnknownVaccineError
from .models import (
    AdministeredDose,
    DoseRule,
    DoseStatus,
    ScheduleMode,
    ScheduledDoseRecord,
    VaccineInfo,
)
from .scheduler import (
    ImmunizationScheduler,
    compute_catchup_schedule,
    compute_standard_schedule,
)

__all__ = [
    "InvalidInputError",
    "ScheduleError",
    "UnknownVaccineError",
    "AdministeredDose",
    "DoseRule",
    "DoseStatus",
    "ScheduleMode",
    "ScheduledDoseRecord",
    "VaccineInfo",
    "ImmunizationScheduler",
    "compute_catchup_schedule",
    "compute_standard_schedule",
]
