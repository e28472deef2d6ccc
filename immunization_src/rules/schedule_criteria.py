"""Scheduling criteria: clinical thresholds and date arithmetic.

Every component (validator, resolver, projection) does date math through
the helpers in this module so they never drift apart:
- weeks are added with timedelta
- months are added with dateutil's relativedelta, which is calendar
  correct and clamps month-end overflow (Jan 31 + 1 month = Feb 28/29)
- "age >= N months" means date >= birth + N months

Reference: CDC Child and Adolescent Catch-up Immunization Schedule, 2026
"""

from datetime import date, timedelta

from dateutil.relativedelta import relativedelta

from ..models import DoseRule, DoseStatus


# =============================================================================
# CLINICAL THRESHOLDS (months of age unless noted)
# =============================================================================

# Hib: series length by age at dose 1
HIB_NOT_INDICATED_MONTHS = 60    # >= 5 years: not recommended for healthy children
HIB_SINGLE_DOSE_MONTHS = 15      # 15-59 months: 1 dose
HIB_TWO_DOSE_MONTHS = 12         # 12-14 months: dose 1 + booster
HIB_THREE_DOSE_MONTHS = 7        # 7-11 months: 2 doses + booster
HIB_FINAL_DOSE_MONTHS = 15       # Any dose at >= 15 months completes the series

# PCV: series length by age at dose 1
PCV_NOT_INDICATED_MONTHS = 60
PCV_SINGLE_DOSE_MONTHS = 24      # 24-59 months: 1 dose
PCV_TWO_DOSE_MONTHS = 12         # 12-23 months: dose 1 + booster
PCV_FINAL_DOSE_MONTHS = 24       # Any dose at >= 24 months completes the series

# DTaP: dose 5 not needed if dose 4 given at >= 4 years
DTAP_FINAL_DOSE_SKIP_MONTHS = 48
DTAP_FINAL_DOSE_SKIP_AFTER = 4

# IPV: dose 4 not needed if dose 3 given at >= 4 years and >= 6 months after dose 2
IPV_FINAL_DOSE_AGE_MONTHS = 48
IPV_SHORT_INTERVAL_WEEKS = 4
IPV_FINAL_INTERVAL_WEEKS = 26
IPV_FINAL_DOSE_SKIP_AFTER = 3

# HPV: 2-dose series if dose 1 before the 15th birthday
HPV_THREE_DOSE_AGE_MONTHS = 180
HPV_TWO_DOSE_INTERVAL_WEEKS = 24

# MenB: dose 2 less than 6 months after dose 1 requires a dose 3
MENB_SECOND_DOSE_INTERVAL_MONTHS = 6

# MenACWY: no booster needed if dose 1 given at >= 16 years
MENACWY_BOOSTER_SKIP_MONTHS = 192

# Influenza: 1 dose from 9 years; younger children need 2 lifetime doses
INFLUENZA_SINGLE_DOSE_AGE_MONTHS = 108
INFLUENZA_PRIOR_DOSES_REQUIRED = 2


# Display labels for standard ages
AGE_LABELS = {
    0: "At birth",
    1: "1 month",
    2: "2 months",
    4: "4 months",
    6: "6 months",
    12: "12 months",
    15: "15 months",
    18: "18 months",
    24: "24 months",
    48: "4 years",
}


# =============================================================================
# DATE ARITHMETIC
# =============================================================================

def add_weeks(start: date, weeks: int) -> date:
    """Add whole weeks to a date."""
    return start + timedelta(weeks=weeks)


def add_months(start: date, months: int) -> date:
    """Add calendar months to a date (month-end clamped)."""
    return start + relativedelta(months=months)


def is_on_or_after_age(birth_date: date, on_date: date, months: int) -> bool:
    """Check if on_date falls on or after the child's N-month birthday."""
    return on_date >= add_months(birth_date, months)


def min_age_date(rule: DoseRule, birth_date: date, override_weeks: int | None = None) -> date:
    """Earliest date the child is old enough for a dose.

    An exact-month minimum (e.g., "on or after the 1st birthday") takes
    precedence over the week-based one. ``override_weeks`` replaces the
    rule's week minimum (clinical group members with their own floor).
    """
    if rule.min_age_months is not None:
        return add_months(birth_date, rule.min_age_months)
    if override_weeks is not None:
        return add_weeks(birth_date, override_weeks)
    return add_weeks(birth_date, rule.min_age_weeks)


def min_interval_date(rule: DoseRule, prior_date: date | None) -> date | None:
    """Earliest date allowed by the rule's interval from the prior dose.

    Returns None if there is no prior dose or the rule has no interval.
    """
    if prior_date is None or not rule.has_min_interval:
        return None
    if rule.min_interval_months:
        return add_months(prior_date, rule.min_interval_months)
    return add_weeks(prior_date, rule.min_interval_weeks)


def first_dose_span_date(rule: DoseRule, first_dose_date: date | None) -> date | None:
    """Earliest date allowed by the rule's span from dose 1, if any."""
    if first_dose_date is None or not rule.min_weeks_from_first_dose:
        return None
    return add_weeks(first_dose_date, rule.min_weeks_from_first_dose)


def max_age_date(rule: DoseRule, birth_date: date) -> date | None:
    """Date at which the dose can no longer be given, if the rule has one."""
    if rule.max_age_weeks is None:
        return None
    return add_weeks(birth_date, rule.max_age_weeks)


# =============================================================================
# LABELS AND STATUS
# =============================================================================

def get_age_label(months: int) -> str:
    """Human-readable label for a standard age in months."""
    if months in AGE_LABELS:
        return AGE_LABELS[months]
    if months <= 24:
        return f"{months} months"
    years, remainder = divmod(months, 12)
    if remainder == 0:
        return f"{years} years"
    return f"{years} years {remainder} month{'s' if remainder > 1 else ''}"


def classify_status(scheduled_date: date, today: date) -> DoseStatus:
    """Classify a not-yet-given dose relative to today."""
    if scheduled_date < today:
        return DoseStatus.OVERDUE
    if scheduled_date == today:
        return DoseStatus.DUE
    return DoseStatus.UPCOMING
