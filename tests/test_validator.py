"""Tests for the dose validator.

Each test is a recorded history with a known count of valid doses.
"""

import pytest
from datetime import date

from immunization_src.models import AdministeredDose, DoseStatus
from immunization_src.rules.families import CLINICAL_GROUPS
from immunization_src.rules.schedule_criteria import add_weeks
from immunization_src.rules.validator import DoseValidator, SeriesState
from immunization_src.rules.vaccine_data import get_rules


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def birth_date():
    return date(2026, 1, 1)


@pytest.fixture
def validator(birth_date):
    return DoseValidator(birth_date)


def dose(vaccine_id, dose_number, given):
    return AdministeredDose(vaccine_id, dose_number, given)


# =============================================================================
# Tests: SeriesState
# =============================================================================

class TestSeriesState:
    """Test the running validation state."""

    def test_initial_state(self):
        state = SeriesState()
        assert state.valid_count == 0
        assert state.first_valid_date is None
        assert state.last_valid_date is None

    def test_advance(self):
        state = SeriesState().advance(date(2026, 3, 1)).advance(date(2026, 5, 1))
        assert state.valid_count == 2
        assert state.first_valid_date == date(2026, 3, 1)
        assert state.last_valid_date == date(2026, 5, 1)
        assert state.valid_dates == (date(2026, 3, 1), date(2026, 5, 1))


# =============================================================================
# Tests: Single Step
# =============================================================================

class TestStep:
    """Test validating one dose at a time."""

    def test_valid_first_dose(self, validator):
        state, record = validator.step(
            get_rules("DTaP"), SeriesState(), dose("DTaP", 1, date(2026, 3, 1))
        )
        assert state.valid_count == 1
        assert record.status == DoseStatus.COMPLETED
        assert record.dose_number == 1
        assert record.age_label == "2 months"
        assert record.scheduled_date == date(2026, 3, 1)

    def test_before_minimum_age(self, validator):
        """DTaP given at 9 days old does not count."""
        state, record = validator.step(
            get_rules("DTaP"), SeriesState(), dose("DTaP", 1, date(2026, 1, 10))
        )
        assert state == SeriesState()
        assert record.status == DoseStatus.INVALID
        assert record.dose_number == 1
        assert record.age_label == ""

    def test_exactly_at_minimum_age(self, validator, birth_date):
        given = add_weeks(birth_date, 6)
        state, record = validator.step(get_rules("DTaP"), SeriesState(), dose("DTaP", 1, given))
        assert record.status == DoseStatus.COMPLETED

    def test_check_dose_reason(self, validator):
        reason = validator.check_dose(
            get_rules("DTaP")[0], SeriesState(), dose("DTaP", 1, date(2026, 1, 10))
        )
        assert "minimum age" in reason

    def test_no_remaining_slot(self):
        validator = DoseValidator(date(2010, 1, 1))
        state = SeriesState().advance(date(2021, 1, 1))
        new_state, record = validator.step(
            get_rules("Tdap"), state, dose("Tdap", 2, date(2022, 1, 1))
        )
        assert new_state is state
        assert record.status == DoseStatus.INVALID
        assert record.dose_number == 2


# =============================================================================
# Tests: Full History
# =============================================================================

class TestValidate:
    """Test validating a complete series history."""

    def test_empty_history(self, validator):
        result = validator.validate(get_rules("HepB"), [])
        assert result.records == []
        assert result.valid_count == 0
        assert result.last_valid_date is None

    def test_processed_in_date_order(self, validator):
        """Dose numbers come from chronology, not from what was entered."""
        result = validator.validate(get_rules("HepB"), [
            dose("HepB", 1, date(2026, 3, 1)),
            dose("HepB", 2, date(2026, 1, 1)),
        ])
        assert [r.scheduled_date for r in result.records] == [date(2026, 1, 1), date(2026, 3, 1)]
        assert [r.dose_number for r in result.records] == [1, 2]
        assert all(r.status == DoseStatus.COMPLETED for r in result.records)

    def test_interval_violation_does_not_consume_slot(self, validator):
        """A dose 19 days after dose 1 is invalid; the next one fills slot 2."""
        result = validator.validate(get_rules("DTaP"), [
            dose("DTaP", 1, date(2026, 3, 1)),
            dose("DTaP", 2, date(2026, 3, 20)),
            dose("DTaP", 3, date(2026, 4, 1)),
        ])
        statuses = [r.status for r in result.records]
        assert statuses == [DoseStatus.COMPLETED, DoseStatus.INVALID, DoseStatus.COMPLETED]
        assert result.records[1].dose_number == 2   # as entered
        assert result.records[2].dose_number == 2   # position in series
        assert result.valid_count == 2
        assert result.first_valid_date == date(2026, 3, 1)
        assert result.last_valid_date == date(2026, 4, 1)

    def test_interval_measured_from_last_valid_dose(self, validator):
        result = validator.validate(get_rules("DTaP"), [
            dose("DTaP", 1, date(2026, 3, 1)),
            dose("DTaP", 2, date(2026, 3, 20)),   # invalid
            dose("DTaP", 3, date(2026, 3, 30)),   # 29 days after dose 1
        ])
        assert result.valid_count == 2

    def test_span_from_first_dose(self):
        """HPV dose 3 needs 12 weeks after dose 2 and 24 weeks after dose 1."""
        validator = DoseValidator(date(2008, 1, 1))
        result = validator.validate(get_rules("HPV"), [
            dose("HPV", 1, date(2023, 6, 1)),
            dose("HPV", 2, date(2023, 7, 1)),
            dose("HPV", 3, date(2023, 10, 1)),
            dose("HPV", 3, date(2023, 11, 20)),
        ])
        statuses = [r.status for r in result.records]
        assert statuses == [
            DoseStatus.COMPLETED,
            DoseStatus.COMPLETED,
            DoseStatus.INVALID,
            DoseStatus.COMPLETED,
        ]
        assert result.valid_count == 3

    def test_extra_doses_are_invalid(self):
        validator = DoseValidator(date(2010, 1, 1))
        result = validator.validate(get_rules("Tdap"), [
            dose("Tdap", 1, date(2021, 1, 1)),
            dose("Tdap", 1, date(2022, 1, 1)),
        ])
        assert result.valid_count == 1
        assert result.records[1].status == DoseStatus.INVALID

    def test_valid_doses_numbered_consecutively(self, validator):
        result = validator.validate(get_rules("HepB"), [
            dose("HepB", 1, date(2026, 1, 1)),
            dose("HepB", 2, date(2026, 1, 15)),   # before 4 weeks of age
            dose("HepB", 2, date(2026, 2, 1)),
            dose("HepB", 3, date(2026, 7, 1)),
        ])
        valid = [r.dose_number for r in result.records if r.status == DoseStatus.COMPLETED]
        assert valid == [1, 2, 3]

    def test_input_order_does_not_matter(self, validator):
        doses = [
            dose("HepB", 1, date(2026, 1, 1)),
            dose("HepB", 2, date(2026, 2, 1)),
            dose("HepB", 3, date(2026, 7, 1)),
        ]
        forward = validator.validate(get_rules("HepB"), doses)
        backward = validator.validate(get_rules("HepB"), list(reversed(doses)))
        assert forward.records == backward.records


# =============================================================================
# Tests: Clinical Group Minimum Ages
# =============================================================================

class TestGroupMinimumAge:
    """Influenza members share one series but keep their own minimum age."""

    @pytest.fixture
    def flu_validator(self):
        overrides = CLINICAL_GROUPS["influenza"].min_age_overrides
        return DoseValidator(date(2024, 1, 1), min_age_overrides=overrides)

    def test_laiv_under_two_is_invalid(self, flu_validator):
        result = flu_validator.validate(
            get_rules("Influenza"), [dose("InfluenzaLAIV", 1, date(2025, 1, 15))]
        )
        assert result.valid_count == 0
        assert result.records[0].vaccine_id == "InfluenzaLAIV"
        assert result.records[0].status == DoseStatus.INVALID

    def test_iiv_same_day_is_valid(self, flu_validator):
        result = flu_validator.validate(
            get_rules("Influenza"), [dose("Influenza", 1, date(2025, 1, 15))]
        )
        assert result.valid_count == 1

    def test_members_share_progression(self, flu_validator):
        result = flu_validator.validate(get_rules("Influenza"), [
            dose("Influenza", 1, date(2025, 9, 1)),
            dose("InfluenzaLAIV", 1, date(2026, 1, 15)),
        ])
        assert result.valid_count == 2
        assert [r.vaccine_id for r in result.records] == ["Influenza", "InfluenzaLAIV"]
        assert [r.dose_number for r in result.records] == [1, 2]
