"""Dose validator.

Classifies each administered dose of one series as valid (counts toward
progression) or invalid (clinically non-compliant, reported but not
counted).

Doses are walked in the order they were given, not by the dose number the
caller entered. Each dose is checked against the next unconsumed rule:
1. No rule left → invalid
2. Given before the minimum age → invalid
3. Given before the minimum interval from the last valid dose → invalid
4. Given before the minimum span from the first valid dose → invalid
5. Otherwise valid; its dose number is its position in the series

The running state is an explicit SeriesState value threaded through
``step()``, so each step can be tested on its own.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Sequence

from ..models import AdministeredDose, DoseRule, DoseStatus, ScheduledDoseRecord
from .schedule_criteria import (
    first_dose_span_date,
    get_age_label,
    min_age_date,
    min_interval_date,
)
from .vaccine_data import get_vaccine_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesState:
    """Running state of one series while walking its history."""
    valid_count: int = 0
    first_valid_date: date | None = None
    last_valid_date: date | None = None
    valid_dates: tuple[date, ...] = ()

    def advance(self, given: date) -> "SeriesState":
        """State after one more valid dose."""
        return SeriesState(
            valid_count=self.valid_count + 1,
            first_valid_date=self.first_valid_date or given,
            last_valid_date=given,
            valid_dates=self.valid_dates + (given,),
        )


@dataclass
class ValidationResult:
    """Output of validating one series' history."""
    records: list[ScheduledDoseRecord] = field(default_factory=list)
    state: SeriesState = field(default_factory=SeriesState)

    @property
    def valid_count(self) -> int:
        return self.state.valid_count

    @property
    def first_valid_date(self) -> date | None:
        return self.state.first_valid_date

    @property
    def last_valid_date(self) -> date | None:
        return self.state.last_valid_date


class DoseValidator:
    """Validate administered doses against a series' rule list."""

    def __init__(
        self,
        birth_date: date,
        min_age_overrides: Mapping[str, int] | None = None,
    ):
        """Initialize the validator.

        Args:
            birth_date: Child's date of birth.
            min_age_overrides: Minimum age in weeks per vaccine identifier,
                replacing the rule's week minimum (clinical group members).
        """
        self.birth_date = birth_date
        self.min_age_overrides = dict(min_age_overrides or {})

    def check_dose(
        self,
        rule: DoseRule,
        state: SeriesState,
        dose: AdministeredDose,
    ) -> str | None:
        """Check one dose against its rule slot.

        Returns:
            None if the dose is valid, otherwise the reason it is not.
        """
        given = dose.date_given

        age_floor = min_age_date(
            rule, self.birth_date, self.min_age_overrides.get(dose.vaccine_id)
        )
        if given < age_floor:
            return f"given before minimum age ({age_floor.isoformat()})"

        interval_floor = min_interval_date(rule, state.last_valid_date)
        if interval_floor is not None and given < interval_floor:
            return f"given before minimum interval ({interval_floor.isoformat()})"

        span_floor = first_dose_span_date(rule, state.first_valid_date)
        if span_floor is not None and given < span_floor:
            return f"given before minimum span from dose 1 ({span_floor.isoformat()})"

        return None

    def step(
        self,
        rules: Sequence[DoseRule],
        state: SeriesState,
        dose: AdministeredDose,
    ) -> tuple[SeriesState, ScheduledDoseRecord]:
        """Validate one dose and return the new state with its record."""
        if state.valid_count >= len(rules):
            reason = "no remaining dose in series"
        else:
            reason = self.check_dose(rules[state.valid_count], state, dose)

        if reason is not None:
            logger.debug(
                f"{dose.vaccine_id} given {dose.date_given} invalid: {reason}"
            )
            return state, ScheduledDoseRecord(
                vaccine_id=dose.vaccine_id,
                vaccine_name=get_vaccine_name(dose.vaccine_id),
                dose_number=dose.dose_number,
                scheduled_date=dose.date_given,
                age_label="",
                status=DoseStatus.INVALID,
            )

        rule = rules[state.valid_count]
        state = state.advance(dose.date_given)
        logger.debug(
            f"{dose.vaccine_id} given {dose.date_given} valid as dose {state.valid_count}"
        )
        return state, ScheduledDoseRecord(
            vaccine_id=dose.vaccine_id,
            vaccine_name=get_vaccine_name(dose.vaccine_id),
            dose_number=state.valid_count,
            scheduled_date=dose.date_given,
            age_label=get_age_label(rule.standard_age_months),
            status=DoseStatus.COMPLETED,
        )

    def validate(
        self,
        rules: Sequence[DoseRule],
        doses: Iterable[AdministeredDose],
    ) -> ValidationResult:
        """Validate a series' history in chronological order.

        Args:
            rules: Ordered rule list for the series.
            doses: Administered doses in any order.

        Returns:
            ValidationResult with one record per dose and the final state.
        """
        result = ValidationResult()
        state = SeriesState()
        for dose in sorted(doses, key=lambda d: d.date_given):
            state, record = self.step(rules, state, dose)
            result.records.append(record)
        result.state = state
        return result
