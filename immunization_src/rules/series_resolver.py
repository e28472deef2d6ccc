"""Series-length resolver.

Decides how many doses (and which rules) a child's series actually needs.
Each family has its own resolver function, looked up in SERIES_RESOLVERS;
families without branching use the nominal rule list.

Decisions use the validated, chronological history: age at the first
valid dose (or today when unvaccinated), the dates of later valid doses,
and the interval between doses 1 and 2. Age boundaries are half-open:
"age >= X months" means on or after the X-month birthday.

Branching tables:
- Hib: >=60m none, >=15m 1 dose, >=12m dose 1 + booster, >=7m 2 doses + booster
- PCV: >=60m none, >=24m 1 dose, >=12m dose 1 + booster
- HPV: dose 1 before 15 years → 2 doses, 24 weeks apart; otherwise 3 doses
- MenB: dose 2 less than 6 months after dose 1 → 3 doses
- Influenza: >=9 years → 1 dose; otherwise 2 (2 valid doses satisfy it)

Final-dose skips (series already complete per the catch-up tables):
- DTaP: dose 4 at >= 4 years → no dose 5
- IPV: dose 3 at >= 4 years and >= 6 months after dose 2 → no dose 4
- Hib: any valid dose at >= 15 months → no further doses
- PCV: any valid dose at >= 24 months → no further doses
- MenACWY: dose 1 at >= 16 years → no booster

When an age collapse and a final-dose skip both apply, the shorter
series wins. The skip only ever drops doses that were not yet given.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Sequence

from ..models import DoseRule
from .families import VaccineFamily
from .schedule_criteria import (
    DTAP_FINAL_DOSE_SKIP_AFTER,
    DTAP_FINAL_DOSE_SKIP_MONTHS,
    HIB_FINAL_DOSE_MONTHS,
    HIB_NOT_INDICATED_MONTHS,
    HIB_SINGLE_DOSE_MONTHS,
    HIB_THREE_DOSE_MONTHS,
    HIB_TWO_DOSE_MONTHS,
    HPV_THREE_DOSE_AGE_MONTHS,
    HPV_TWO_DOSE_INTERVAL_WEEKS,
    INFLUENZA_PRIOR_DOSES_REQUIRED,
    INFLUENZA_SINGLE_DOSE_AGE_MONTHS,
    IPV_FINAL_DOSE_AGE_MONTHS,
    IPV_FINAL_DOSE_SKIP_AFTER,
    IPV_FINAL_INTERVAL_WEEKS,
    MENACWY_BOOSTER_SKIP_MONTHS,
    MENB_SECOND_DOSE_INTERVAL_MONTHS,
    PCV_FINAL_DOSE_MONTHS,
    PCV_NOT_INDICATED_MONTHS,
    PCV_SINGLE_DOSE_MONTHS,
    PCV_TWO_DOSE_MONTHS,
    add_months,
    add_weeks,
    is_on_or_after_age,
)
from .validator import SeriesState

logger = logging.getLogger(__name__)

Rules = tuple[DoseRule, ...]


@dataclass(frozen=True)
class ResolverContext:
    """Inputs a resolver may branch on."""
    birth_date: date
    today: date
    state: SeriesState

    @property
    def reference_date(self) -> date:
        """Date the child's starting age is measured at."""
        return self.state.first_valid_date or self.today

    def started_at_or_after(self, months: int) -> bool:
        return is_on_or_after_age(self.birth_date, self.reference_date, months)

    def valid_dose_date(self, dose_number: int) -> date | None:
        if dose_number < 1 or dose_number > len(self.state.valid_dates):
            return None
        return self.state.valid_dates[dose_number - 1]


Resolver = Callable[[Rules, ResolverContext], Rules]


# =============================================================================
# SHARED PATTERNS
# =============================================================================

def _skip_after_dose(
    rules: Rules,
    ctx: ResolverContext,
    after_dose: int,
    months: int,
) -> Rules:
    """Drop doses after ``after_dose`` if it was given at or after ``months``."""
    if ctx.state.valid_count != after_dose or len(rules) <= after_dose:
        return rules
    given = ctx.valid_dose_date(after_dose)
    if is_on_or_after_age(ctx.birth_date, given, months):
        return rules[:after_dose]
    return rules


def _complete_if_last_dose_at(rules: Rules, ctx: ResolverContext, months: int) -> Rules:
    """Series is complete once any valid dose was given at or after ``months``."""
    last = ctx.state.last_valid_date
    if last is None or ctx.state.valid_count >= len(rules):
        return rules
    if is_on_or_after_age(ctx.birth_date, last, months):
        return rules[:ctx.state.valid_count]
    return rules


# =============================================================================
# FAMILY RESOLVERS
# =============================================================================

def resolve_nominal(rules: Rules, ctx: ResolverContext) -> Rules:
    """Fixed-length series: the catalog's rule list as is."""
    return rules


def resolve_hib(rules: Rules, ctx: ResolverContext) -> Rules:
    """Hib: series length by age at dose 1, then final-dose skip."""
    booster = rules[-1]
    if ctx.started_at_or_after(HIB_NOT_INDICATED_MONTHS):
        effective = ()
    elif ctx.started_at_or_after(HIB_SINGLE_DOSE_MONTHS):
        effective = rules[:1]
    elif ctx.started_at_or_after(HIB_TWO_DOSE_MONTHS):
        effective = (rules[0], booster)
    elif ctx.started_at_or_after(HIB_THREE_DOSE_MONTHS):
        effective = (rules[0], rules[1], booster)
    else:
        effective = rules
    return _complete_if_last_dose_at(effective, ctx, HIB_FINAL_DOSE_MONTHS)


def resolve_pcv(rules: Rules, ctx: ResolverContext) -> Rules:
    """PCV: series length by age at dose 1, then final-dose skip."""
    booster = rules[-1]
    if ctx.started_at_or_after(PCV_NOT_INDICATED_MONTHS):
        effective = ()
    elif ctx.started_at_or_after(PCV_SINGLE_DOSE_MONTHS):
        effective = rules[:1]
    elif ctx.started_at_or_after(PCV_TWO_DOSE_MONTHS):
        effective = (rules[0], booster)
    else:
        effective = rules
    return _complete_if_last_dose_at(effective, ctx, PCV_FINAL_DOSE_MONTHS)


def resolve_dtap(rules: Rules, ctx: ResolverContext) -> Rules:
    """DTaP: dose 5 not needed if dose 4 given at >= 4 years."""
    return _skip_after_dose(rules, ctx, DTAP_FINAL_DOSE_SKIP_AFTER, DTAP_FINAL_DOSE_SKIP_MONTHS)


def resolve_ipv(rules: Rules, ctx: ResolverContext) -> Rules:
    """IPV: dose 4 not needed if dose 3 at >= 4 years and >= 6 months after dose 2."""
    if ctx.state.valid_count != IPV_FINAL_DOSE_SKIP_AFTER or len(rules) <= IPV_FINAL_DOSE_SKIP_AFTER:
        return rules
    dose_2 = ctx.valid_dose_date(2)
    dose_3 = ctx.valid_dose_date(3)
    if (
        is_on_or_after_age(ctx.birth_date, dose_3, IPV_FINAL_DOSE_AGE_MONTHS)
        and dose_3 >= add_weeks(dose_2, IPV_FINAL_INTERVAL_WEEKS)
    ):
        return rules[:IPV_FINAL_DOSE_SKIP_AFTER]
    return rules


def resolve_hpv(rules: Rules, ctx: ResolverContext) -> Rules:
    """HPV: 2 doses (24 weeks apart) if started before 15 years, else 3."""
    if ctx.started_at_or_after(HPV_THREE_DOSE_AGE_MONTHS):
        return rules
    second = replace(
        rules[1],
        min_interval_weeks=HPV_TWO_DOSE_INTERVAL_WEEKS,
        min_interval_months=None,
    )
    return (rules[0], second)


def resolve_menb(rules: Rules, ctx: ResolverContext) -> Rules:
    """MenB: a dose 2 given under 6 months after dose 1 triggers dose 3.

    Until dose 2 is given, it is projected at the full 6-month interval so
    the plan never needs a third dose.
    """
    dose_1 = ctx.valid_dose_date(1)
    dose_2 = ctx.valid_dose_date(2)
    if dose_1 is not None and dose_2 is not None:
        if dose_2 < add_months(dose_1, MENB_SECOND_DOSE_INTERVAL_MONTHS):
            return rules[:3]
        return rules[:2]

    second = replace(
        rules[1],
        min_interval_weeks=None,
        min_interval_months=MENB_SECOND_DOSE_INTERVAL_MONTHS,
    )
    return (rules[0], second)


def resolve_menacwy(rules: Rules, ctx: ResolverContext) -> Rules:
    """MenACWY: no booster if dose 1 given (or starting) at >= 16 years."""
    if ctx.started_at_or_after(MENACWY_BOOSTER_SKIP_MONTHS):
        return rules[:1]
    return rules


def resolve_influenza(rules: Rules, ctx: ResolverContext) -> Rules:
    """Influenza group: 1 dose from 9 years, otherwise 2 lifetime doses."""
    if ctx.started_at_or_after(INFLUENZA_SINGLE_DOSE_AGE_MONTHS):
        return rules[:1]
    return rules[:INFLUENZA_PRIOR_DOSES_REQUIRED]


SERIES_RESOLVERS: dict[VaccineFamily, Resolver] = {
    VaccineFamily.HIB: resolve_hib,
    VaccineFamily.PCV: resolve_pcv,
    VaccineFamily.DTAP: resolve_dtap,
    VaccineFamily.IPV: resolve_ipv,
    VaccineFamily.HPV: resolve_hpv,
    VaccineFamily.MENB: resolve_menb,
    VaccineFamily.MENACWY: resolve_menacwy,
    VaccineFamily.INFLUENZA: resolve_influenza,
}


def resolve_series(
    family: VaccineFamily,
    rules: Sequence[DoseRule],
    ctx: ResolverContext,
) -> Rules:
    """Get the effective rule list for a family.

    Args:
        family: Vaccine family being scheduled.
        rules: Nominal rule list for the family's series vaccine.
        ctx: Birth date, today, and validated series state.

    Returns:
        Effective rules; may be shorter, longer-interval, or empty.
    """
    rules = tuple(rules)
    if not rules:
        return rules
    resolver = SERIES_RESOLVERS.get(family, resolve_nominal)
    effective = resolver(rules, ctx)
    if len(effective) != len(rules):
        logger.debug(
            f"{family.value}: {len(effective)} of {len(rules)} doses apply "
            f"(valid so far: {ctx.state.valid_count})"
        )
    return effective


def is_rule_prefix(effective: Sequence[DoseRule], rules: Sequence[DoseRule]) -> bool:
    """True if effective is the nominal rule list cut short (same rules, same order)."""
    return tuple(effective) == tuple(rules[:len(effective)])
