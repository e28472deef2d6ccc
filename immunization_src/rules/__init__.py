"""Immunization scheduling rules engine.

This package provides deterministic scheduling logic based on the CDC
child and adolescent immunization and catch-up schedules.

Architecture:
    Rule Catalog → Dose Validator → Series Resolver → Projection → Schedule

The catalog is static reference data. The validator decides which recorded
doses count, the resolver decides how many doses this child needs, and the
projection engine dates the doses still missing.
"""

from .vaccine_data import (
    VACCINE_INFO,
    VACCINE_RULES,
    RULES_BY_VACCINE,
    get_rules,
    get_vaccine_name,
    is_known_vaccine,
)
from .combo_vaccines import (
    COMBO_VACCINES,
    ComboComponent,
    ComboVaccine,
    expand_combination_dose,
    is_combo_vaccine,
)
from .families import (
    CLINICAL_GROUPS,
    ClinicalGroup,
    VaccineFamily,
    family_for,
    group_for,
    series_vaccine_id,
)
from .schedule_criteria import classify_status, get_age_label
from .validator import DoseValidator, SeriesState, ValidationResult
from .series_resolver import ResolverContext, resolve_series
from .projection import ProjectionEngine

__all__ = [
    # Catalog
    "VACCINE_INFO",
    "VACCINE_RULES",
    "RULES_BY_VACCINE",
    "get_rules",
    "get_vaccine_name",
    "is_known_vaccine",
    # Combination vaccines
    "COMBO_VACCINES",
    "ComboComponent",
    "ComboVaccine",
    "expand_combination_dose",
    "is_combo_vaccine",
    # Families
    "CLINICAL_GROUPS",
    "ClinicalGroup",
    "VaccineFamily",
    "family_for",
    "group_for",
    "series_vaccine_id",
    # Engine
    "classify_status",
    "get_age_label",
    "DoseValidator",
    "SeriesState",
    "ValidationResult",
    "ResolverContext",
    "resolve_series",
    "ProjectionEngine",
]
