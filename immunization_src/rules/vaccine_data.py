"""Vaccine reference data: display metadata and dosing rules.

CDC Birth-18 Years Immunization Schedule 2026.

Rule columns:
- standard_age_months: recommended age in months (0 = birth)
- min_age_weeks / min_age_months: minimum age for the dose
- min_interval_weeks / min_interval_months: minimum interval from previous dose
- max_age_weeks: dose not given at or after this age (closes the series)

Both tables are read-only. Series-length branching (Hib, PCV, HPV, MenB,
influenza...) lives in series_resolver, not here.
"""

from types import MappingProxyType

from ..models import DoseRule, VaccineInfo


# =============================================================================
# VACCINE METADATA (CDC VIS side-effect text)
# =============================================================================

VACCINE_INFO = MappingProxyType({
    "HepB": VaccineInfo(
        id="HepB",
        name="Hepatitis B",
        description="Prevents infection caused by the hepatitis B virus (HBV).",
        common_side_effects=(
            "Soreness or redness at injection site",
            "Low-grade fever",
            "Fatigue",
        ),
        serious_side_effects=("Severe allergic reaction (anaphylaxis)",),
    ),
    "DTaP": VaccineInfo(
        id="DTaP",
        name="DTaP",
        description=(
            "Combination vaccine that protects against diphtheria, tetanus, "
            "and pertussis (whooping cough)."
        ),
        common_side_effects=(
            "Redness, swelling, or pain at injection site",
            "Mild fever (below 101°F / 38.3°C)",
            "Fussiness or decreased appetite",
            "Drowsiness",
        ),
        serious_side_effects=(
            "High fever (above 105°F / 40.5°C)",
            "Crying for more than 3 hours",
            "Seizure",
            "Severe allergic reaction",
        ),
    ),
    "IPV": VaccineInfo(
        id="IPV",
        name="IPV",
        description="Inactivated poliovirus vaccine; prevents poliomyelitis.",
        common_side_effects=("Redness or pain at injection site", "Low-grade fever"),
        serious_side_effects=("Severe allergic reaction (anaphylaxis)",),
    ),
    "MMR": VaccineInfo(
        id="MMR",
        name="MMR",
        description="Combination vaccine that protects against measles, mumps, and rubella.",
        common_side_effects=(
            "Soreness at injection site",
            "Mild rash or fever 7-12 days after vaccination",
            "Joint pain or stiffness (mainly in adults)",
            "Mild lymph node swelling",
        ),
        serious_side_effects=(
            "Severe allergic reaction",
            "Thrombocytopenic purpura (low platelet count)",
            "Febrile seizure",
        ),
    ),
    "Varicella": VaccineInfo(
        id="Varicella",
        name="Varicella",
        description="Prevents chickenpox caused by the varicella-zoster virus.",
        common_side_effects=(
            "Soreness or redness at injection site",
            "Low-grade fever",
            "Mild chickenpox-like rash after vaccination",
        ),
        serious_side_effects=(
            "Severe allergic reaction",
            "Pneumonia",
            "Encephalitis (very rare)",
        ),
    ),
    "Hib": VaccineInfo(
        id="Hib",
        name="Hib",
        description=(
            "Prevents meningitis, pneumonia, and epiglottitis caused by "
            "Haemophilus influenzae type b."
        ),
        common_side_effects=(
            "Redness, swelling, or pain at injection site",
            "Fever",
            "Fussiness",
        ),
        serious_side_effects=("Severe allergic reaction",),
    ),
    "PCV": VaccineInfo(
        id="PCV",
        name="PCV15/PCV20",
        description=(
            "Prevents pneumonia, meningitis, and bacteremia caused by "
            "Streptococcus pneumoniae."
        ),
        common_side_effects=(
            "Redness, swelling, or pain at injection site",
            "Fever",
            "Fussiness or decreased appetite",
            "Drowsiness",
        ),
        serious_side_effects=("Severe allergic reaction",),
    ),
    "HepA": VaccineInfo(
        id="HepA",
        name="Hepatitis A",
        description="Prevents infection caused by the hepatitis A virus (HAV).",
        common_side_effects=(
            "Soreness or redness at injection site",
            "Headache",
            "Loss of appetite",
            "Fatigue",
        ),
        serious_side_effects=("Severe allergic reaction (anaphylaxis)",),
    ),
    "Rotavirus": VaccineInfo(
        id="Rotavirus",
        name="RotaTeq (RV5)",
        description=(
            "Prevents severe diarrhea and vomiting caused by rotavirus "
            "(RotaTeq, 3-dose series)."
        ),
        common_side_effects=("Fussiness or irritability", "Temporary diarrhea or vomiting"),
        serious_side_effects=("Intussusception / bowel obstruction (very rare)",),
    ),
    "RotarixHRV": VaccineInfo(
        id="RotarixHRV",
        name="Rotarix (HRV)",
        description=(
            "Prevents severe diarrhea and vomiting caused by rotavirus "
            "(Rotarix, 2-dose series)."
        ),
        common_side_effects=("Fussiness or irritability", "Temporary diarrhea or vomiting"),
        serious_side_effects=("Intussusception / bowel obstruction (very rare)",),
    ),
    "Influenza": VaccineInfo(
        id="Influenza",
        name="Influenza (IIV, inactivated)",
        description=(
            "Inactivated influenza vaccine (injectable). Minimum age: 6 months. "
            "Children 6 months-8 years need 2 doses (>=4 weeks apart) if they have "
            "received fewer than 2 prior influenza vaccine doses; otherwise 1 dose. "
            "Children 9 years and older need 1 dose annually."
        ),
        common_side_effects=(
            "Soreness, redness, or swelling at injection site",
            "Low-grade fever",
            "Headache or fatigue",
            "Muscle aches",
        ),
        serious_side_effects=(
            "Severe allergic reaction (anaphylaxis)",
            "Guillain-Barre syndrome (very rare)",
        ),
    ),
    "InfluenzaLAIV": VaccineInfo(
        id="InfluenzaLAIV",
        name="Influenza (LAIV, live attenuated)",
        description=(
            "Live attenuated influenza vaccine (nasal spray). Minimum age: 2 years. "
            "Same series rules as IIV. Not for immunocompromised patients."
        ),
        common_side_effects=(
            "Runny nose or nasal congestion",
            "Low-grade fever",
            "Headache or sore throat",
            "Muscle aches",
        ),
        serious_side_effects=(
            "Severe allergic reaction (anaphylaxis)",
            "Wheezing (not recommended under 2 years)",
        ),
    ),
    "InfluenzaRIV": VaccineInfo(
        id="InfluenzaRIV",
        name="Influenza (RIV, recombinant)",
        description=(
            "Recombinant influenza vaccine (injectable, egg-free). "
            "Minimum age: 18 years. 1 dose annually."
        ),
        common_side_effects=(
            "Soreness, redness, or swelling at injection site",
            "Headache or fatigue",
            "Muscle aches",
            "Low-grade fever",
        ),
        serious_side_effects=(
            "Severe allergic reaction (anaphylaxis)",
            "Guillain-Barre syndrome (very rare)",
        ),
    ),
    "Tdap": VaccineInfo(
        id="Tdap",
        name="Tdap",
        description=(
            "Adolescent/adult booster protecting against tetanus, diphtheria, "
            "and pertussis (whooping cough)."
        ),
        common_side_effects=(
            "Pain, redness, or swelling at injection site",
            "Mild fever",
            "Headache",
            "Fatigue",
            "Nausea or stomach upset",
        ),
        serious_side_effects=(
            "Severe allergic reaction (anaphylaxis)",
            "Shoulder injury related to vaccine administration (SIRVA)",
        ),
    ),
    "MCV4": VaccineInfo(
        id="MCV4",
        name="MenACWY",
        description=(
            "Prevents meningococcal disease caused by Neisseria meningitidis "
            "serogroups A, C, W, and Y."
        ),
        common_side_effects=(
            "Pain, redness, or swelling at injection site",
            "Mild fever",
            "Headache",
            "Fatigue",
        ),
        serious_side_effects=(
            "Severe allergic reaction (anaphylaxis)",
            "Guillain-Barre syndrome (very rare)",
        ),
    ),
    "HPV": VaccineInfo(
        id="HPV",
        name="HPV",
        description=(
            "Prevents infection by human papillomavirus strains that cause "
            "cervical cancer, genital warts, and other HPV-related cancers."
        ),
        common_side_effects=(
            "Pain, redness, or swelling at injection site",
            "Dizziness or fainting (sit for 15 min after vaccination)",
            "Headache",
            "Nausea",
            "Mild fever",
        ),
        serious_side_effects=("Severe allergic reaction (anaphylaxis)",),
    ),
    "MenB": VaccineInfo(
        id="MenB",
        name="MenB",
        description="Prevents meningococcal disease caused by Neisseria meningitidis serogroup B.",
        common_side_effects=(
            "Pain, redness, or swelling at injection site",
            "Fatigue",
            "Headache",
            "Muscle or joint pain",
            "Fever or chills",
            "Nausea",
        ),
        serious_side_effects=("Severe allergic reaction (anaphylaxis)",),
    ),
})


# =============================================================================
# DOSING RULES
# =============================================================================

VACCINE_RULES: tuple[DoseRule, ...] = (
    # Hepatitis B (HepB)
    DoseRule("HepB", 1, standard_age_months=0, min_age_weeks=0),
    DoseRule("HepB", 2, standard_age_months=2, min_age_weeks=4, min_interval_weeks=4),
    DoseRule("HepB", 3, standard_age_months=6, min_age_weeks=24, min_interval_weeks=8),

    # DTaP - approved only for children < 7 years (< 364 weeks); Tdap at 7+
    DoseRule("DTaP", 1, standard_age_months=2, min_age_weeks=6, max_age_weeks=364),
    DoseRule("DTaP", 2, standard_age_months=4, min_age_weeks=10, min_interval_weeks=4, max_age_weeks=364),
    DoseRule("DTaP", 3, standard_age_months=6, min_age_weeks=14, min_interval_weeks=4, max_age_weeks=364),
    DoseRule("DTaP", 4, standard_age_months=15, min_age_weeks=52, min_interval_weeks=24, max_age_weeks=364),
    DoseRule("DTaP", 5, standard_age_months=48, min_age_weeks=192, min_interval_weeks=24, max_age_weeks=364),

    # IPV - dose 3 interval is age-dependent (projection):
    #   4 weeks while < 4 years; 26 weeks at >= 4 years, and dose 3 is then final
    DoseRule("IPV", 1, standard_age_months=2, min_age_weeks=6),
    DoseRule("IPV", 2, standard_age_months=4, min_age_weeks=10, min_interval_weeks=4),
    DoseRule("IPV", 3, standard_age_months=6, min_age_weeks=14, min_interval_weeks=4),
    DoseRule("IPV", 4, standard_age_months=48, min_age_weeks=208, min_interval_weeks=26),

    # MMR - dose 1 on or after the 1st birthday (calendar date, not 52 weeks)
    DoseRule("MMR", 1, standard_age_months=12, min_age_weeks=52, min_age_months=12),
    DoseRule("MMR", 2, standard_age_months=48, min_age_weeks=192, min_interval_weeks=4),

    # Varicella - dose 1 on or after the 1st birthday
    DoseRule("Varicella", 1, standard_age_months=12, min_age_weeks=52, min_age_months=12),
    DoseRule("Varicella", 2, standard_age_months=48, min_age_weeks=192, min_interval_weeks=12),

    # Hib - not recommended for healthy children >= 5 years (260 weeks)
    DoseRule("Hib", 1, standard_age_months=2, min_age_weeks=6, max_age_weeks=260),
    DoseRule("Hib", 2, standard_age_months=4, min_age_weeks=10, min_interval_weeks=4, max_age_weeks=260),
    DoseRule("Hib", 3, standard_age_months=6, min_age_weeks=14, min_interval_weeks=4, max_age_weeks=260),
    DoseRule("Hib", 4, standard_age_months=12, min_age_weeks=52, min_interval_weeks=8, max_age_weeks=260),

    # PCV - not recommended for healthy children >= 5 years (260 weeks)
    DoseRule("PCV", 1, standard_age_months=2, min_age_weeks=6, max_age_weeks=260),
    DoseRule("PCV", 2, standard_age_months=4, min_age_weeks=10, min_interval_weeks=4, max_age_weeks=260),
    DoseRule("PCV", 3, standard_age_months=6, min_age_weeks=14, min_interval_weeks=4, max_age_weeks=260),
    DoseRule("PCV", 4, standard_age_months=12, min_age_weeks=52, min_interval_weeks=8, max_age_weeks=260),

    # Hepatitis A (HepA)
    DoseRule("HepA", 1, standard_age_months=12, min_age_weeks=52),
    DoseRule("HepA", 2, standard_age_months=18, min_age_weeks=78, min_interval_weeks=26),

    # Rotavirus (RotaTeq, RV5) - must start by 14w6d, complete by 8 months (32w)
    DoseRule("Rotavirus", 1, standard_age_months=2, min_age_weeks=6, max_age_weeks=15),
    DoseRule("Rotavirus", 2, standard_age_months=4, min_age_weeks=10, min_interval_weeks=4, max_age_weeks=32),
    DoseRule("Rotavirus", 3, standard_age_months=6, min_age_weeks=14, min_interval_weeks=4, max_age_weeks=32),

    # Rotavirus (Rotarix, HRV) - same start window, complete by 6 months (24w)
    DoseRule("RotarixHRV", 1, standard_age_months=2, min_age_weeks=6, max_age_weeks=15,
             standard_schedule=False),
    DoseRule("RotarixHRV", 2, standard_age_months=4, min_age_weeks=10, min_interval_weeks=4,
             max_age_weeks=24, standard_schedule=False),

    # Tdap - adolescent booster at 11-12 years; catch-up for ages 7-18
    DoseRule("Tdap", 1, standard_age_months=132, min_age_weeks=364, max_age_weeks=936),

    # MenACWY (MCV4) - dose 1 at 11-12 years, booster at 16 years
    DoseRule("MCV4", 1, standard_age_months=132, min_age_weeks=572),
    DoseRule("MCV4", 2, standard_age_months=192, min_age_weeks=832, min_interval_weeks=8),

    # HPV - 3-dose intervals; the 2-dose (< 15 years) variant is built by the resolver
    DoseRule("HPV", 1, standard_age_months=132, min_age_weeks=468),
    DoseRule("HPV", 2, standard_age_months=138, min_age_weeks=468, min_interval_weeks=4),
    DoseRule("HPV", 3, standard_age_months=144, min_age_weeks=468, min_interval_weeks=12,
             min_weeks_from_first_dose=24, standard_schedule=False),

    # MenB - 2 doses at 16-23 years; dose 3 only when dose 2 came < 6 months after dose 1
    DoseRule("MenB", 1, standard_age_months=192, min_age_weeks=832),
    DoseRule("MenB", 2, standard_age_months=193, min_age_weeks=832, min_interval_weeks=4),
    DoseRule("MenB", 3, standard_age_months=197, min_age_weeks=832, min_interval_months=4,
             standard_schedule=False),

    # Influenza IIV (inactivated) - minimum age 6 months (26 weeks)
    DoseRule("Influenza", 1, standard_age_months=6, min_age_weeks=26),
    DoseRule("Influenza", 2, standard_age_months=7, min_age_weeks=26, min_interval_weeks=4),

    # Influenza LAIV (nasal spray) - minimum age 2 years (104 weeks)
    DoseRule("InfluenzaLAIV", 1, standard_age_months=24, min_age_weeks=104, standard_schedule=False),
    DoseRule("InfluenzaLAIV", 2, standard_age_months=25, min_age_weeks=104, min_interval_weeks=4,
             standard_schedule=False),

    # Influenza RIV (recombinant) - minimum age 18 years (936 weeks)
    DoseRule("InfluenzaRIV", 1, standard_age_months=216, min_age_weeks=936, standard_schedule=False),
    DoseRule("InfluenzaRIV", 2, standard_age_months=217, min_age_weeks=936, min_interval_weeks=4,
             standard_schedule=False),
)


def _index_rules(rules: tuple[DoseRule, ...]) -> MappingProxyType:
    by_vaccine: dict[str, tuple[DoseRule, ...]] = {}
    for rule in rules:
        by_vaccine[rule.vaccine_id] = by_vaccine.get(rule.vaccine_id, ()) + (rule,)
    return MappingProxyType({
        vaccine_id: tuple(sorted(series, key=lambda r: r.dose_number))
        for vaccine_id, series in by_vaccine.items()
    })


RULES_BY_VACCINE = _index_rules(VACCINE_RULES)


def get_rules(vaccine_id: str) -> tuple[DoseRule, ...]:
    """Get the ordered rule list for a vaccine (empty if unknown)."""
    return RULES_BY_VACCINE.get(vaccine_id, ())


def is_known_vaccine(vaccine_id: str) -> bool:
    """Check if a vaccine identifier exists in the rule catalog."""
    return vaccine_id in RULES_BY_VACCINE


def get_vaccine_name(vaccine_id: str) -> str:
    """Get the display name for a vaccine, falling back to the identifier."""
    info = VACCINE_INFO.get(vaccine_id)
    return info.name if info else vaccine_id
