"""Pricing setup catalog.

The fixed set of line items a builder is asked to price during pricing setup.
Every row carries a stable ``key`` that is persisted on the saved pricing
item, so re-opening the form is an exact key lookup.
"""

from __future__ import annotations

from dataclasses import dataclass

from estimatepro.estimate.applicability import CONDITION_LABELS, Condition
from estimatepro.models import PriceType


@dataclass(frozen=True)
class CatalogRow:
    key: str
    item_name: str
    applicability: str
    price_type: PriceType
    section: str


def _row(key: str, name: str, condition: Condition, price_type: PriceType, section: str) -> CatalogRow:
    return CatalogRow(key, name, CONDITION_LABELS[condition], price_type, section)


FIXED = PriceType.FIXED
SQM = PriceType.SQM
PERCENTAGE = PriceType.PERCENTAGE

PRICING_CATALOG: tuple[CatalogRow, ...] = (
    # Preparation
    _row("demolition", "Demolition & strip out", Condition.ALL, FIXED, "Preparation"),
    _row("rubbish_removal", "Rubbish removal / skip bin", Condition.ALL, FIXED, "Preparation"),
    _row("waterproofing", "Waterproofing", Condition.ALL, SQM, "Preparation"),
    _row("screeding", "Floor screeding", Condition.ALL, SQM, "Preparation"),
    # Tiling
    _row("tiling_budget", "Tiling (labour)", Condition.BUDGET, SQM, "Tiling"),
    _row("tiling_standard", "Tiling (labour)", Condition.STANDARD, SQM, "Tiling"),
    _row("tiling_premium", "Tiling (labour)", Condition.PREMIUM, SQM, "Tiling"),
    _row("tiles_material", "Tiles (material)", Condition.ALL, SQM, "Tiling"),
    # Plumbing & electrical
    _row("plumbing_same_layout", "Plumbing (same layout)", Condition.SAME_LAYOUT, FIXED, "Trades"),
    _row("toilet_relocation", "Toilet relocation", Condition.TOILET_MOVES, FIXED, "Trades"),
    _row("electrical", "Electrical", Condition.ALL, FIXED, "Trades"),
    _row("wall_knock_shift", "Wall knock/shift labour", Condition.WALL_CHANGES, FIXED, "Trades"),
    _row("carpentry", "Carpentry & framing", Condition.ALL, FIXED, "Trades"),
    # Fit-off
    _row("vanity_install", "Vanity installation", Condition.ALL, FIXED, "Fit-off"),
    _row("shower_screen", "Shower screen", Condition.ALL, FIXED, "Fit-off"),
    _row("fixtures_fit_off", "Fixtures fit-off", Condition.ALL, FIXED, "Fit-off"),
    _row("painting", "Painting", Condition.ALL, FIXED, "Fit-off"),
    _row("cleaning", "Final clean", Condition.ALL, FIXED, "Fit-off"),
    # Margins
    _row("project_management", "Project management", Condition.ALL, PERCENTAGE, "Margins"),
    _row("apartment_access", "Apartment access fee", Condition.APARTMENT, PERCENTAGE, "Margins"),
)

CATALOG_BY_KEY: dict[str, CatalogRow] = {row.key: row for row in PRICING_CATALOG}
