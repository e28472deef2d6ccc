"""Projection engine.

Computes dates for every remaining dose of a series, not just the next
appointment. For each remaining rule:
1. earliest = later of (birth + minimum age) and (prior dose + minimum interval)
2. apply the span from dose 1, if the rule has one
3. apply the family's projection hook, if any: IPV dose 3 picks its interval
   by age, and a DTaP dose 4, Hib or PCV dose landing past the final-dose
   age ends the series the same way a recorded dose would
4. a date in the past is clamped to today, so overdue catch-up doses
   collapse onto the current date
5. a date at or after birth + maximum age closes the series: this dose
   and every later one are dropped
6. the scheduled date becomes the prior date for the next dose
"""

import logging
from datetime import date
from typing import Callable, Sequence

from ..models import DoseRule, ScheduledDoseRecord
from .families import VaccineFamily
from .schedule_criteria import (
    DTAP_FINAL_DOSE_SKIP_AFTER,
    DTAP_FINAL_DOSE_SKIP_MONTHS,
    HIB_FINAL_DOSE_MONTHS,
    IPV_FINAL_DOSE_AGE_MONTHS,
    IPV_FINAL_INTERVAL_WEEKS,
    PCV_FINAL_DOSE_MONTHS,
    add_weeks,
    classify_status,
    first_dose_span_date,
    get_age_label,
    is_on_or_after_age,
    max_age_date,
    min_age_date,
    min_interval_date,
)
from .vaccine_data import get_vaccine_name

logger = logging.getLogger(__name__)


class ProjectionEngine:
    """Project the remaining doses of a series for one child."""

    def __init__(self, birth_date: date, today: date):
        self.birth_date = birth_date
        self.today = today

    def earliest_date(
        self,
        rule: DoseRule,
        prior_date: date | None,
        first_dose_date: date | None,
    ) -> date:
        """Earliest date a dose is allowed, before clamping to today."""
        earliest = min_age_date(rule, self.birth_date)

        interval_floor = min_interval_date(rule, prior_date)
        if interval_floor is not None and interval_floor > earliest:
            earliest = interval_floor

        span_floor = first_dose_span_date(rule, first_dose_date)
        if span_floor is not None and span_floor > earliest:
            earliest = span_floor

        return earliest

    def schedulable_date(self, earliest: date) -> date:
        """Clamp a past eligibility date to today."""
        return max(earliest, self.today)

    def project(
        self,
        vaccine_id: str,
        rules: Sequence[DoseRule],
        start_index: int,
        prior_date: date | None,
        first_dose_date: date | None,
        family: VaccineFamily | None = None,
    ) -> list[ScheduledDoseRecord]:
        """Project every remaining dose from ``start_index`` on.

        Args:
            vaccine_id: Identifier projected doses are reported under.
            rules: Effective rule list for the series.
            start_index: Index of the first dose still needed (valid count).
            prior_date: Date of the last valid dose, if any.
            first_dose_date: Date of the first valid dose, if any.
            family: Family of the series, selects the projection hook.

        Returns:
            One record per projected dose, in dose order.
        """
        hook = PROJECTION_HOOKS.get(family)
        records = []

        for index in range(start_index, len(rules)):
            rule = rules[index]
            earliest = self.earliest_date(rule, prior_date, first_dose_date)

            final = False
            if hook is not None:
                earliest, final = hook(self, rule, earliest, prior_date)

            scheduled = self.schedulable_date(earliest)

            cutoff = max_age_date(rule, self.birth_date)
            if cutoff is not None and scheduled >= cutoff:
                logger.debug(
                    f"{vaccine_id} dose {index + 1} on {scheduled} is past maximum "
                    f"age ({cutoff}); series closed"
                )
                break

            records.append(ScheduledDoseRecord(
                vaccine_id=vaccine_id,
                vaccine_name=get_vaccine_name(vaccine_id),
                dose_number=index + 1,
                scheduled_date=scheduled,
                age_label=get_age_label(rule.standard_age_months),
                status=classify_status(scheduled, self.today),
            ))

            prior_date = scheduled
            if first_dose_date is None:
                first_dose_date = scheduled
            if final:
                break

        return records


# =============================================================================
# PROJECTION HOOKS
# =============================================================================

ProjectionHook = Callable[[ProjectionEngine, DoseRule, date, date | None], tuple[date, bool]]


def ipv_third_dose(
    engine: ProjectionEngine,
    rule: DoseRule,
    earliest: date,
    prior_date: date | None,
) -> tuple[date, bool]:
    """IPV dose 3: 4 weeks while under 4 years, else 6 months and final.

    Returns:
        (earliest date, whether this dose ends the series)
    """
    if rule.dose_number != 3:
        return earliest, False

    if not is_on_or_after_age(
        engine.birth_date, engine.schedulable_date(earliest), IPV_FINAL_DOSE_AGE_MONTHS
    ):
        return earliest, False

    if prior_date is not None:
        earliest = max(earliest, add_weeks(prior_date, IPV_FINAL_INTERVAL_WEEKS))
    return earliest, True


def _scheduled_at_or_after(engine: ProjectionEngine, earliest: date, months: int) -> bool:
    return is_on_or_after_age(engine.birth_date, engine.schedulable_date(earliest), months)


def dtap_fourth_dose(
    engine: ProjectionEngine,
    rule: DoseRule,
    earliest: date,
    prior_date: date | None,
) -> tuple[date, bool]:
    """DTaP dose 4 on or after the 4th birthday: no dose 5."""
    if rule.dose_number != DTAP_FINAL_DOSE_SKIP_AFTER:
        return earliest, False
    return earliest, _scheduled_at_or_after(engine, earliest, DTAP_FINAL_DOSE_SKIP_MONTHS)


def hib_final_dose(
    engine: ProjectionEngine,
    rule: DoseRule,
    earliest: date,
    prior_date: date | None,
) -> tuple[date, bool]:
    """Any Hib dose on or after 15 months completes the series."""
    return earliest, _scheduled_at_or_after(engine, earliest, HIB_FINAL_DOSE_MONTHS)


def pcv_final_dose(
    engine: ProjectionEngine,
    rule: DoseRule,
    earliest: date,
    prior_date: date | None,
) -> tuple[date, bool]:
    """Any PCV dose on or after 24 months completes the series."""
    return earliest, _scheduled_at_or_after(engine, earliest, PCV_FINAL_DOSE_MONTHS)


PROJECTION_HOOKS: dict[VaccineFamily, ProjectionHook] = {
    VaccineFamily.DTAP: dtap_fourth_dose,
    VaccineFamily.IPV: ipv_third_dose,
    VaccineFamily.HIB: hib_final_dose,
    VaccineFamily.PCV: pcv_final_dose,
}
