"""Combination vaccines available in the US (2026).

A single administration of a combination product counts as one dose of
each component vaccine. History entries that name a combination are
expanded into component doses before validation.
"""

from dataclasses import dataclass
from datetime import date
from types import MappingProxyType

from ..models import AdministeredDose


@dataclass(frozen=True)
class ComboComponent:
    """One component of a combination vaccine."""
    vaccine_id: str
    default_dose: int


@dataclass(frozen=True)
class ComboVaccine:
    """A CDC-approved combination product."""
    id: str
    name: str   # Full name shown in pickers
    tag: str    # Short tag shown in history lists
    components: tuple[ComboComponent, ...]


COMBO_VACCINES = MappingProxyType({
    "vaxelis": ComboVaccine(
        id="vaxelis",
        name="Vaxelis - DTaP-IPV-Hib-HepB",
        tag="Vaxelis",
        components=(
            ComboComponent("DTaP", 1),
            ComboComponent("IPV", 1),
            ComboComponent("Hib", 1),
            ComboComponent("HepB", 2),  # HepB dose 1 typically given at birth
        ),
    ),
    "pentacel": ComboVaccine(
        id="pentacel",
        name="Pentacel - DTaP-IPV-Hib",
        tag="Pentacel",
        components=(
            ComboComponent("DTaP", 1),
            ComboComponent("IPV", 1),
            ComboComponent("Hib", 1),
        ),
    ),
    "pediarix": ComboVaccine(
        id="pediarix",
        name="Pediarix - DTaP-IPV-HepB",
        tag="Pediarix",
        components=(
            ComboComponent("DTaP", 1),
            ComboComponent("IPV", 1),
            ComboComponent("HepB", 2),
        ),
    ),
    "kinrix": ComboVaccine(
        id="kinrix",
        name="Kinrix - DTaP-IPV (4-6 yr booster)",
        tag="Kinrix",
        components=(
            ComboComponent("DTaP", 5),
            ComboComponent("IPV", 4),
        ),
    ),
    "quadracel": ComboVaccine(
        id="quadracel",
        name="Quadracel - DTaP-IPV (4-6 yr booster)",
        tag="Quadracel",
        components=(
            ComboComponent("DTaP", 5),
            ComboComponent("IPV", 4),
        ),
    ),
    "proquad": ComboVaccine(
        id="proquad",
        name="ProQuad - MMRV",
        tag="ProQuad",
        components=(
            ComboComponent("MMR", 1),
            ComboComponent("Varicella", 1),
        ),
    ),
    "twinrix": ComboVaccine(
        id="twinrix",
        name="Twinrix - HepA-HepB (18 yr+)",
        tag="Twinrix",
        components=(
            ComboComponent("HepA", 1),
            ComboComponent("HepB", 1),
        ),
    ),
})


def is_combo_vaccine(vaccine_id: str) -> bool:
    """Check if an identifier names a combination product (case-insensitive)."""
    return vaccine_id.lower() in COMBO_VACCINES


def expand_combination_dose(
    combo_id: str,
    date_given: date,
    dose_numbers: dict[str, int] | None = None,
) -> list[AdministeredDose]:
    """Expand one combination administration into component doses.

    Args:
        combo_id: Combination identifier (e.g., "vaxelis").
        date_given: Administration date shared by every component.
        dose_numbers: Optional claimed dose number per component; defaults
            to each component's typical position in its series.

    Returns:
        One AdministeredDose per component, in component order.

    Raises:
        KeyError: If combo_id is not a known combination.
    """
    combo = COMBO_VACCINES[combo_id.lower()]
    dose_numbers = dose_numbers or {}
    return [
        AdministeredDose(
            vaccine_id=component.vaccine_id,
            dose_number=dose_numbers.get(component.vaccine_id, component.default_dose),
            date_given=date_given,
        )
        for component in combo.components
    ]
