"""Tests for the series-length resolver.

Scenarios follow the CDC catch-up tables: age at first dose and the dates
of valid doses decide how many doses a child still needs.
"""

import pytest
from datetime import date

from immunization_src.rules.families import VaccineFamily
from immunization_src.rules.schedule_criteria import add_months, add_weeks
from immunization_src.rules.series_resolver import (
    SERIES_RESOLVERS,
    ResolverContext,
    is_rule_prefix,
    resolve_series,
)
from immunization_src.rules.validator import SeriesState
from immunization_src.rules.vaccine_data import get_rules


BIRTH = date(2024, 1, 1)


def state_with(*given):
    """Series state after the given valid doses."""
    state = SeriesState()
    for day in given:
        state = state.advance(day)
    return state


def at(months, weeks=0):
    """Date at an age of N months (plus weeks) for BIRTH."""
    return add_weeks(add_months(BIRTH, months), weeks)


def resolve(family, vaccine_id, *given, today=None, birth=BIRTH):
    ctx = ResolverContext(
        birth_date=birth,
        today=today or date(2026, 10, 19),
        state=state_with(*given),
    )
    return resolve_series(family, get_rules(vaccine_id), ctx)


# =============================================================================
# Tests: Context
# =============================================================================

class TestResolverContext:
    """Test the inputs resolvers branch on."""

    def test_reference_date_is_first_dose(self):
        ctx = ResolverContext(BIRTH, date(2026, 10, 19), state_with(at(2), at(4)))
        assert ctx.reference_date == at(2)
        assert ctx.valid_dose_date(2) == at(4)
        assert ctx.valid_dose_date(3) is None
        assert ctx.valid_dose_date(0) is None

    def test_reference_date_is_today_when_unvaccinated(self):
        ctx = ResolverContext(BIRTH, date(2026, 10, 19), SeriesState())
        assert ctx.reference_date == date(2026, 10, 19)

    def test_started_at_or_after(self):
        ctx = ResolverContext(BIRTH, date(2026, 10, 19), state_with(at(12)))
        assert ctx.started_at_or_after(12)
        assert not ctx.started_at_or_after(13)


# =============================================================================
# Tests: Hib
# =============================================================================

class TestHib:
    """Hib series length by age at dose 1."""

    @pytest.mark.parametrize("first_dose_months,expected_doses", [
        (2, 4),
        (7, 3),
        (11, 3),
        (12, 2),
        (14, 2),
        (15, 1),
        (30, 1),
        (60, 0),
    ])
    def test_length_by_age_at_first_dose(self, first_dose_months, expected_doses):
        effective = resolve(VaccineFamily.HIB, "Hib", at(first_dose_months))
        assert len(effective) == expected_doses

    def test_first_dose_at_14_months_gets_booster(self):
        effective = resolve(VaccineFamily.HIB, "Hib", at(14))
        rules = get_rules("Hib")
        assert effective == (rules[0], rules[-1])
        assert not is_rule_prefix(effective, rules)

    @pytest.mark.parametrize("today_months,expected_doses", [
        (3, 4),
        (9, 3),
        (13, 2),
        (20, 1),
        (61, 0),
    ])
    def test_unvaccinated_uses_current_age(self, today_months, expected_doses):
        effective = resolve(VaccineFamily.HIB, "Hib", today=at(today_months))
        assert len(effective) == expected_doses

    def test_dose_at_15_months_completes_series(self):
        effective = resolve(VaccineFamily.HIB, "Hib", at(2), at(16))
        assert len(effective) == 2
        assert is_rule_prefix(effective, get_rules("Hib"))

    def test_age_collapse_and_final_dose_skip_combined(self):
        """Started at 8 months (3-dose series), dose 2 at 15.5 months ends it."""
        effective = resolve(VaccineFamily.HIB, "Hib", at(8), at(15, 2))
        assert len(effective) == 2

    def test_dose_before_15_months_does_not_complete(self):
        effective = resolve(VaccineFamily.HIB, "Hib", at(2), at(4))
        assert len(effective) == 4


# =============================================================================
# Tests: PCV
# =============================================================================

class TestPCV:
    """PCV series length by age at dose 1."""

    @pytest.mark.parametrize("first_dose_months,expected_doses", [
        (2, 4),
        (12, 2),
        (23, 2),
        (24, 1),
        (60, 0),
    ])
    def test_length_by_age_at_first_dose(self, first_dose_months, expected_doses):
        effective = resolve(VaccineFamily.PCV, "PCV", at(first_dose_months))
        assert len(effective) == expected_doses

    def test_dose_at_24_months_completes_series(self):
        effective = resolve(VaccineFamily.PCV, "PCV", at(3), at(25))
        assert len(effective) == 2


# =============================================================================
# Tests: DTaP and IPV Final-Dose Skips
# =============================================================================

class TestFinalDoseSkips:
    """A late final dose completes DTaP and IPV early."""

    def test_dtap_dose_4_at_4_years(self):
        effective = resolve(VaccineFamily.DTAP, "DTaP", at(2), at(4), at(6), at(48))
        assert len(effective) == 4

    def test_dtap_dose_4_before_4_years(self):
        effective = resolve(VaccineFamily.DTAP, "DTaP", at(2), at(4), at(6), at(47))
        assert len(effective) == 5

    def test_dtap_skip_needs_exactly_four_doses(self):
        effective = resolve(VaccineFamily.DTAP, "DTaP", at(50))
        assert len(effective) == 5

    def test_ipv_dose_3_at_4_years_six_months_after_dose_2(self):
        effective = resolve(VaccineFamily.IPV, "IPV", at(2), at(30), at(49))
        assert len(effective) == 3

    def test_ipv_dose_3_at_4_years_too_soon_after_dose_2(self):
        effective = resolve(VaccineFamily.IPV, "IPV", at(2), at(47), at(49))
        assert len(effective) == 4

    def test_ipv_dose_3_before_4_years(self):
        effective = resolve(VaccineFamily.IPV, "IPV", at(2), at(4), at(6))
        assert len(effective) == 4


# =============================================================================
# Tests: Adolescent Series
# =============================================================================

class TestHPV:
    """HPV: 2 doses if started before 15 years, otherwise 3."""

    def test_started_at_11_years(self):
        birth = date(2014, 1, 1)
        effective = resolve(VaccineFamily.HPV, "HPV", date(2025, 3, 1), birth=birth)
        assert len(effective) == 2
        assert effective[1].min_interval_weeks == 24
        assert not is_rule_prefix(effective, get_rules("HPV"))

    def test_started_at_15_years(self):
        birth = date(2008, 1, 1)
        effective = resolve(VaccineFamily.HPV, "HPV", date(2023, 1, 1), birth=birth)
        assert effective == get_rules("HPV")

    def test_unvaccinated_at_16(self):
        effective = resolve(VaccineFamily.HPV, "HPV", birth=date(2010, 6, 1))
        assert len(effective) == 3

    def test_catalog_rule_not_mutated(self):
        resolve(VaccineFamily.HPV, "HPV", date(2025, 3, 1), birth=date(2014, 1, 1))
        assert get_rules("HPV")[1].min_interval_weeks == 4


class TestMenB:
    """MenB: dose 2 under 6 months after dose 1 needs dose 3."""

    BIRTH = date(2008, 1, 1)

    def test_early_second_dose_needs_third(self):
        effective = resolve(
            VaccineFamily.MENB, "MenB", date(2024, 3, 1), date(2024, 6, 1), birth=self.BIRTH
        )
        assert len(effective) == 3

    def test_six_months_apart_is_complete(self):
        effective = resolve(
            VaccineFamily.MENB, "MenB", date(2024, 3, 1), date(2024, 9, 1), birth=self.BIRTH
        )
        assert len(effective) == 2

    def test_second_dose_projected_at_six_months(self):
        effective = resolve(VaccineFamily.MENB, "MenB", date(2024, 3, 1), birth=self.BIRTH)
        assert len(effective) == 2
        assert effective[1].min_interval_months == 6
        assert effective[1].min_interval_weeks is None


class TestMenACWY:
    """MenACWY: no booster when dose 1 is at 16 years or later."""

    def test_first_dose_at_11(self):
        effective = resolve(
            VaccineFamily.MENACWY, "MCV4", date(2021, 3, 1), birth=date(2010, 1, 1)
        )
        assert len(effective) == 2

    def test_first_dose_at_16(self):
        effective = resolve(
            VaccineFamily.MENACWY, "MCV4", date(2026, 1, 1), birth=date(2010, 1, 1)
        )
        assert len(effective) == 1

    def test_unvaccinated_at_17(self):
        effective = resolve(VaccineFamily.MENACWY, "MCV4", birth=date(2009, 6, 1))
        assert len(effective) == 1


class TestInfluenza:
    """Influenza: 1 dose from 9 years, otherwise 2."""

    def test_first_dose_at_10_years(self):
        effective = resolve(
            VaccineFamily.INFLUENZA, "Influenza", date(2025, 10, 1), birth=date(2015, 1, 1)
        )
        assert len(effective) == 1

    def test_first_dose_at_2_years(self):
        effective = resolve(VaccineFamily.INFLUENZA, "Influenza", at(24))
        assert len(effective) == 2

    def test_unvaccinated_at_5(self):
        effective = resolve(VaccineFamily.INFLUENZA, "Influenza", birth=date(2021, 6, 1))
        assert len(effective) == 2


# =============================================================================
# Tests: Dispatch
# =============================================================================

class TestDispatch:
    """Test family lookup and helpers."""

    @pytest.mark.parametrize("family,vaccine_id", [
        (VaccineFamily.HEPB, "HepB"),
        (VaccineFamily.MMR, "MMR"),
        (VaccineFamily.HEPA, "HepA"),
        (VaccineFamily.TDAP, "Tdap"),
        (VaccineFamily.ROTAVIRUS, "Rotavirus"),
    ])
    def test_nominal_families(self, family, vaccine_id):
        assert family not in SERIES_RESOLVERS
        assert resolve(family, vaccine_id, at(2)) == get_rules(vaccine_id)

    def test_empty_rules(self):
        ctx = ResolverContext(BIRTH, date(2026, 10, 19), SeriesState())
        assert resolve_series(VaccineFamily.HIB, (), ctx) == ()

    def test_is_rule_prefix(self):
        rules = get_rules("DTaP")
        assert is_rule_prefix(rules, rules)
        assert is_rule_prefix(rules[:4], rules)
        assert is_rule_prefix((), rules)
        assert not is_rule_prefix((rules[0], rules[2]), rules)
