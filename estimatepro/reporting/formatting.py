"""Presentation formatting for quotes and estimates (en-AU).

Computed values keep full precision; rounding to cents happens here.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from estimatepro.core.coerce import round_half_up, to_number
from estimatepro.estimate.engine import NOT_INCLUDED, is_tiles_material_item
from estimatepro.models import (
    CalculatedAreas,
    PriceType,
    QuoteLineItem,
    SurveyResponse,
)

PROJECT_MANAGEMENT_LABEL = (
    "Project Management - All labour, project management & administration costs"
)
ACCESS_FEE_LABEL = "Access/difficult site"
NOT_SPECIFIED = "Not specified"

_PROJECT_MANAGEMENT_WORDS = ("builder", "labour", "project management", "administration")

TILING_DESCRIPTIONS = {
    "budget": "Budget - floor plus splash zones",
    "standard": "Standard - feature walls + wet areas",
    "premium": "Premium - floor to ceiling",
}


def format_currency(amount: Any, symbol: str = "$") -> str:
    """Format as AUD: ``$1,234.50``; negatives as ``-$12.00``."""
    value = round_half_up(amount)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_date(value: date | datetime | None = None) -> str:
    """Long en-AU date, e.g. ``19 October 2026``."""
    value = value or datetime.now()
    return f"{value.day} {value:%B %Y}"


def format_area(value: Any) -> str:
    return f"{to_number(value):.2f} m²"


def format_measurement(value: float | None) -> str:
    return f"{value:g}" if value else "-"


def tiling_description(tiling_level: str) -> str:
    if not tiling_level:
        return NOT_SPECIFIED
    return TILING_DESCRIPTIONS.get(tiling_level.lower(), tiling_level)


def tiles_included_text(tiles_supply: str) -> str:
    return {"yes_include": "Yes", "no_supply_own": "No"}.get(tiles_supply, tiles_supply or NOT_SPECIFIED)


def toilet_relocation_text(toilet_location: str) -> str:
    return {"same_location": "No", "change_location": "Yes"}.get(
        toilet_location, toilet_location or NOT_SPECIFIED
    )


def wall_changes_text(wall_changes: str) -> str:
    return {"yes": "Yes", "no": "No"}.get(wall_changes, wall_changes or NOT_SPECIFIED)


def property_type_text(bathroom_type: str) -> str:
    if not bathroom_type:
        return NOT_SPECIFIED
    lowered = bathroom_type.lower()
    if "apartment" in lowered:
        return "Apartment (access fee applies)"
    if "house" in lowered or "unit" in lowered:
        return "House/Unit"
    return bathroom_type


def job_summary(survey: SurveyResponse, areas: CalculatedAreas) -> list[tuple[str, str]]:
    """Label/value pairs describing the job, in display order."""
    if areas.floor_area or areas.wall_area:
        calculated = (
            f"Floor area: {format_area(areas.floor_area)}, "
            f"Wall area: {format_area(areas.wall_area)}, "
            f"Total area: {format_area(areas.total_area)}"
        )
    else:
        calculated = f"Total area: {format_area(areas.total_area)}"
    return [
        (
            "Bathroom measurements",
            f"Floor length: {format_measurement(survey.floor_length)} m, "
            f"Floor width: {format_measurement(survey.floor_width)} m, "
            f"Wall height: {format_measurement(survey.wall_height)} m",
        ),
        ("Calculated measurements", calculated),
        ("Tiling option", tiling_description(survey.tiling_level)),
        ("Tiles to be included", tiles_included_text(survey.tiles_supply)),
        ("Toilet location change", toilet_relocation_text(survey.toilet_location)),
        ("Wall changes", wall_changes_text(survey.wall_changes)),
        ("Property type", property_type_text(survey.bathroom_type)),
    ]


def item_type_label(price_type: PriceType) -> str:
    if price_type == PriceType.SQM:
        return "per m²"
    if price_type == PriceType.PERCENTAGE:
        return "Percentage"
    return "Fixed"


def quote_table_rows(rows: list[QuoteLineItem], survey: SurveyResponse) -> list[tuple[str, str, str, str]]:
    """Itemised quote rows as (item, type, quantity, amount) display strings.

    Builder labour / project management percentages are shown as a single
    project management line; apartment percentages as an access fee. Tile
    material is shown as not included when the client supplies their own.
    """
    table = []
    for row in rows:
        name = row.item_name.lower()
        if row.price_type == PriceType.PERCENTAGE:
            if any(word in name for word in _PROJECT_MANAGEMENT_WORDS):
                table.append((PROJECT_MANAGEMENT_LABEL, "Fixed", "-", format_currency(row.editable_amount)))
                continue
            if "apartment" in row.applicability.lower():
                table.append((ACCESS_FEE_LABEL, "Percentage", "-", format_currency(row.editable_amount)))
                continue
            quantity = f"{to_number(row.markup_percent):g}%"
        elif is_tiles_material_item(row.item_name) and not survey.includes_tiles:
            table.append((row.item_name, item_type_label(row.price_type), NOT_INCLUDED, format_currency(0)))
            continue
        else:
            quantity = row.quantity_label or "-"
        table.append(
            (row.item_name, item_type_label(row.price_type), quantity, format_currency(row.editable_amount))
        )
    return table


def quote_filename(client_name: str, issued: date | datetime | None = None) -> str:
    issued = issued or datetime.now()
    safe_name = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in client_name.strip()) or "Client"
    return f"Quote_{safe_name}_{issued:%Y-%m-%d}.pdf"
