"""Vaccine families and clinical groups.

A family is the unit the scheduler works on: one validation pass, one
series-length decision, one projection. Most families hold a single
vaccine identifier. Clinical groups put several identifiers in one family:

- influenza: IIV, LAIV and RIV share one progression pool. Each member
  keeps its own minimum age, and doses are reported under the member
  actually given. Projections use the primary member (IIV).
- rotavirus: RotaTeq and Rotarix are alternate brands. A history made
  only of Rotarix doses follows the 2-dose Rotarix series; anything else
  (including no history) follows the 3-dose RotaTeq series.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class VaccineFamily(str, Enum):
    """Vaccine families with their own series-length logic."""
    HEPB = "hepb"
    DTAP = "dtap"
    IPV = "ipv"
    MMR = "mmr"
    VARICELLA = "varicella"
    HIB = "hib"
    PCV = "pcv"
    HEPA = "hepa"
    ROTAVIRUS = "rotavirus"
    TDAP = "tdap"
    MENACWY = "menacwy"
    HPV = "hpv"
    MENB = "menb"
    INFLUENZA = "influenza"


@dataclass(frozen=True)
class ClinicalGroup:
    """Several vaccine identifiers tracked as one series."""
    name: str
    family: VaccineFamily
    primary: str
    # member id -> its own minimum age in weeks (None = use the rule's)
    members: Mapping[str, int | None]
    # True: one shared rule list; False: alternate brands with their own rules
    shared_series: bool = True

    @property
    def min_age_overrides(self) -> dict[str, int]:
        return {
            member: weeks for member, weeks in self.members.items()
            if weeks is not None
        }


CLINICAL_GROUPS = MappingProxyType({
    "influenza": ClinicalGroup(
        name="influenza",
        family=VaccineFamily.INFLUENZA,
        primary="Influenza",
        members=MappingProxyType({
            "Influenza": 26,        # IIV: 6 months
            "InfluenzaLAIV": 104,   # LAIV: 2 years
            "InfluenzaRIV": 936,    # RIV: 18 years
        }),
        shared_series=True,
    ),
    "rotavirus": ClinicalGroup(
        name="rotavirus",
        family=VaccineFamily.ROTAVIRUS,
        primary="Rotavirus",
        members=MappingProxyType({
            "Rotavirus": None,
            "RotarixHRV": None,
        }),
        shared_series=False,
    ),
})


FAMILY_BY_VACCINE = MappingProxyType({
    "HepB": VaccineFamily.HEPB,
    "DTaP": VaccineFamily.DTAP,
    "IPV": VaccineFamily.IPV,
    "MMR": VaccineFamily.MMR,
    "Varicella": VaccineFamily.VARICELLA,
    "Hib": VaccineFamily.HIB,
    "PCV": VaccineFamily.PCV,
    "HepA": VaccineFamily.HEPA,
    "Rotavirus": VaccineFamily.ROTAVIRUS,
    "RotarixHRV": VaccineFamily.ROTAVIRUS,
    "Tdap": VaccineFamily.TDAP,
    "MCV4": VaccineFamily.MENACWY,
    "HPV": VaccineFamily.HPV,
    "MenB": VaccineFamily.MENB,
    "Influenza": VaccineFamily.INFLUENZA,
    "InfluenzaLAIV": VaccineFamily.INFLUENZA,
    "InfluenzaRIV": VaccineFamily.INFLUENZA,
})

_GROUP_BY_FAMILY = MappingProxyType({
    group.family: group for group in CLINICAL_GROUPS.values()
})


def family_for(vaccine_id: str) -> VaccineFamily | None:
    """Get the family a vaccine identifier belongs to."""
    return FAMILY_BY_VACCINE.get(vaccine_id)


def group_for(family: VaccineFamily) -> ClinicalGroup | None:
    """Get the clinical group for a family, if it has one."""
    return _GROUP_BY_FAMILY.get(family)


def family_vaccine_ids(family: VaccineFamily) -> list[str]:
    """All vaccine identifiers in a family, in catalog order."""
    return [vid for vid, fam in FAMILY_BY_VACCINE.items() if fam == family]


def series_vaccine_id(family: VaccineFamily, administered_ids: Iterable[str]) -> str:
    """Pick the vaccine whose rule list drives this family's series.

    Args:
        family: The vaccine family.
        administered_ids: Identifiers of doses in the child's history.

    Returns:
        The vaccine identifier whose rules apply (and under which
        projected doses are reported).
    """
    group = group_for(family)
    if group is None:
        return family_vaccine_ids(family)[0]

    if group.shared_series:
        return group.primary

    brands = set(administered_ids)
    if len(brands) == 1:
        return brands.pop()
    return group.primary
