"""Schedule assembler.

Two entry points:
- Standard (newborn) schedule: every default-presentation rule dated at
  birth + standard age. History only marks matching doses completed.
- Catch-up schedule: for each vaccine family, validate the history,
  resolve the series length, project the remaining doses, then merge.

Both are pure functions of (birth date, today, history, rule catalog).
Nothing is cached between calls.
"""

import logging
from datetime import date
from operator import attrgetter
from typing import Iterable, Sequence

from .config import Config
from .errors import InvalidInputError, UnknownVaccineError
from .models import (
    AdministeredDose,
    DoseRule,
    DoseStatus,
    ScheduledDoseRecord,
    parse_date,
)
from .rules.combo_vaccines import expand_combination_dose, is_combo_vaccine
from .rules.families import (
    VaccineFamily,
    family_for,
    group_for,
    series_vaccine_id,
)
from .rules.projection import ProjectionEngine
from .rules.schedule_criteria import add_months, classify_status, get_age_label
from .rules.series_resolver import ResolverContext, is_rule_prefix, resolve_series
from .rules.validator import DoseValidator
from .rules.vaccine_data import VACCINE_RULES, get_vaccine_name

logger = logging.getLogger(__name__)


class ImmunizationScheduler:
    """Compute standard and catch-up immunization schedules.

    Example:
        scheduler = ImmunizationScheduler()
        records = scheduler.catchup_schedule(
            birth_date=date(2023, 5, 1),
            history=[AdministeredDose("HepB", 1, date(2023, 5, 1))],
            today=date(2026, 10, 19),
        )
    """

    def __init__(
        self,
        rules: Sequence[DoseRule] = VACCINE_RULES,
        strict: bool | None = None,
    ):
        """Initialize the scheduler.

        Args:
            rules: Rule catalog. Never mutated.
            strict: Reject unknown vaccines in history (True) or ignore them
                with a warning (False). Defaults to Config.STRICT_HISTORY.
        """
        self.rules = tuple(rules)
        self.strict = Config.is_strict_history() if strict is None else strict

        by_vaccine: dict[str, list[DoseRule]] = {}
        for rule in self.rules:
            by_vaccine.setdefault(rule.vaccine_id, []).append(rule)
        self._rules_by_vaccine = {
            vaccine_id: tuple(sorted(series, key=attrgetter("dose_number")))
            for vaccine_id, series in by_vaccine.items()
        }

        # Families in catalog order of first appearance
        self._families: list[VaccineFamily] = []
        for vaccine_id in self._rules_by_vaccine:
            family = family_for(vaccine_id)
            if family is not None and family not in self._families:
                self._families.append(family)

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def standard_schedule(
        self,
        birth_date,
        history: Iterable | None = None,
        today: date | None = None,
    ) -> list[ScheduledDoseRecord]:
        """Nominal schedule: each dose at birth + its standard age.

        Args:
            birth_date: Child's date of birth (date or ISO string).
            history: Optional administered doses; a dose with the same
                vaccine and dose number marks the slot completed.
            today: Reference date for status (defaults to Config.get_today()).

        Returns:
            Records sorted by scheduled date.
        """
        birth_date = parse_date(birth_date, field_name="birth_date")
        today = parse_date(today, field_name="today") if today else Config.get_today()
        doses = self._prepare_history(history or [], birth_date)
        given = {(d.vaccine_id, d.dose_number) for d in doses}

        records = []
        for rule in self.rules:
            if not rule.standard_schedule:
                continue
            scheduled = add_months(birth_date, rule.standard_age_months)
            if (rule.vaccine_id, rule.dose_number) in given:
                status = DoseStatus.COMPLETED
            else:
                status = classify_status(scheduled, today)
            records.append(ScheduledDoseRecord(
                vaccine_id=rule.vaccine_id,
                vaccine_name=get_vaccine_name(rule.vaccine_id),
                dose_number=rule.dose_number,
                scheduled_date=scheduled,
                age_label=get_age_label(rule.standard_age_months),
                status=status,
            ))

        return sorted(records, key=attrgetter("scheduled_date"))

    def catchup_schedule(
        self,
        birth_date,
        history: Iterable,
        today: date | None = None,
    ) -> list[ScheduledDoseRecord]:
        """Catch-up schedule: validated history plus compressed projection.

        Args:
            birth_date: Child's date of birth (date or ISO string).
            history: Administered doses (AdministeredDose or mappings), any order.
            today: Reference date (defaults to Config.get_today()).

        Returns:
            Historical and projected records sorted by date. Ties keep
            per-family emission order.
        """
        birth_date = parse_date(birth_date, field_name="birth_date")
        today = parse_date(today, field_name="today") if today else Config.get_today()
        doses = self._prepare_history(history or [], birth_date)

        by_family: dict[VaccineFamily, list[AdministeredDose]] = {}
        for dose in doses:
            by_family.setdefault(family_for(dose.vaccine_id), []).append(dose)

        records = []
        for family in self._families:
            records.extend(
                self.schedule_family(family, by_family.get(family, []), birth_date, today)
            )

        return sorted(records, key=attrgetter("scheduled_date"))

    # -------------------------------------------------------------------------
    # Per-family pipeline
    # -------------------------------------------------------------------------

    def schedule_family(
        self,
        family: VaccineFamily,
        doses: list[AdministeredDose],
        birth_date: date,
        today: date,
    ) -> list[ScheduledDoseRecord]:
        """Validate, resolve and project one family.

        History is validated against the nominal rules first. If the
        resolver changes rule content (not just the length), the history is
        validated again against the effective rules so the recorded doses
        meet the same floors the projection uses.
        """
        series_id = series_vaccine_id(family, [d.vaccine_id for d in doses])
        rules = self._rules_by_vaccine.get(series_id, ())
        if not rules:
            return []

        group = group_for(family)
        validator = DoseValidator(
            birth_date,
            min_age_overrides=group.min_age_overrides if group else None,
        )

        validation = validator.validate(rules, doses)
        effective = resolve_series(
            family, rules, ResolverContext(birth_date, today, validation.state)
        )

        if not is_rule_prefix(effective, rules):
            validation = validator.validate(effective, doses)
            effective = resolve_series(
                family, rules, ResolverContext(birth_date, today, validation.state)
            )
            logger.debug(
                f"{family.value}: revalidated history against {len(effective)}-dose series"
            )

        engine = ProjectionEngine(birth_date, today)
        projected = engine.project(
            vaccine_id=series_id,
            rules=effective,
            start_index=validation.valid_count,
            prior_date=validation.last_valid_date,
            first_dose_date=validation.first_valid_date,
            family=family,
        )
        return validation.records + projected

    # -------------------------------------------------------------------------
    # History preparation
    # -------------------------------------------------------------------------

    def _prepare_history(self, history: Iterable, birth_date: date) -> list[AdministeredDose]:
        """Normalize history: parse mappings, expand combinations, check ids."""
        doses = []
        for entry in history:
            dose = entry if isinstance(entry, AdministeredDose) else AdministeredDose.from_dict(entry)

            if dose.date_given < birth_date:
                raise InvalidInputError(
                    f"{dose.vaccine_id} dose dated {dose.date_given} is before "
                    f"birth date {birth_date}"
                )

            if self._is_schedulable(dose.vaccine_id):
                doses.append(dose)
            elif is_combo_vaccine(dose.vaccine_id):
                components = expand_combination_dose(dose.vaccine_id, dose.date_given)
                doses.extend(c for c in components if self._is_schedulable(c.vaccine_id))
            elif self.strict:
                raise UnknownVaccineError(dose.vaccine_id)
            else:
                logger.warning(
                    f"Ignoring history entry with unknown vaccine '{dose.vaccine_id}' "
                    f"given {dose.date_given}"
                )
        return doses

    def _is_schedulable(self, vaccine_id: str) -> bool:
        """Catalogued and assigned to a series family."""
        return vaccine_id in self._rules_by_vaccine and family_for(vaccine_id) is not None


def compute_standard_schedule(
    birth_date,
    history: Iterable | None = None,
    today: date | None = None,
) -> list[ScheduledDoseRecord]:
    """Standard (newborn) schedule with the default catalog."""
    return ImmunizationScheduler().standard_schedule(birth_date, history, today)


def compute_catchup_schedule(
    birth_date,
    history: Iterable,
    today: date | None = None,
) -> list[ScheduledDoseRecord]:
    """Catch-up schedule with the default catalog."""
    return ImmunizationScheduler().catchup_schedule(birth_date, history, today)
