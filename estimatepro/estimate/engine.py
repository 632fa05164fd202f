"""Estimate engine.

Combines a builder's pricing profile with a client survey into line items and
a low/high estimate range:

1. Keep active rules whose applicability is satisfied by the survey; rules for
   wall knock/shift work are dropped entirely unless the client is changing
   walls.
2. Price fixed and per-m2 rules. Tiling rules use the area tiled at the
   client's tiling level; other per-m2 rules use their stored quantity. Tile
   material is zeroed ("Not Included") when the client supplies their own.
3. Sum those into the subtotal, then price each percentage rule against that
   subtotal. Percentage rules never compound on each other.
4. base = subtotal + percentage totals; high = base x 1.30.

Currency rounding is left to presentation; totals keep full float precision.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TypeVar

from estimatepro.config import EstimateConfig
from estimatepro.estimate.applicability import applies
from estimatepro.estimate.areas import compute_areas
from estimatepro.models import (
    CalculatedAreas,
    EstimateLineItem,
    EstimateResult,
    FixedRule,
    PercentageRule,
    PriceType,
    PricingItem,
    PricingProfile,
    SqmRule,
    SurveyResponse,
)

NOT_INCLUDED = "Not Included"

WALL_CHANGE_MARKERS = ("wall knock", "wall shift", "knock/shift")

_Named = TypeVar("_Named")


def is_wall_change_item(item_name: str | None) -> bool:
    """Rule prices wall knock/shift work."""
    name = (item_name or "").lower()
    return any(marker in name for marker in WALL_CHANGE_MARKERS)


def is_tiles_material_item(item_name: str | None) -> bool:
    """Rule prices the tiles themselves rather than the tiling labour."""
    name = (item_name or "").lower()
    return "tiles" in name and "material" in name


def is_tiling_item(item_name: str | None) -> bool:
    name = (item_name or "").lower()
    return "tiling" in name or "tiles" in name


def filter_wall_change_items(
    items: Iterable[_Named], wall_changes: str | None
) -> list[_Named]:
    """Drop wall knock/shift rows unless the client answered "yes" to wall changes."""
    if (wall_changes or "").strip().lower() == "yes":
        return list(items)
    return [item for item in items if not is_wall_change_item(getattr(item, "item_name", ""))]


def _format_area(area: float) -> str:
    return f"{area:.2f} m²"


def _format_percent(percent: float) -> str:
    return f"{percent:g}%"


def _price_line(
    item: PricingItem,
    rule: FixedRule | SqmRule,
    survey: SurveyResponse,
    areas: CalculatedAreas,
) -> EstimateLineItem:
    """Price one fixed or per-m2 rule."""
    if isinstance(rule, SqmRule):
        if is_tiling_item(item.item_name):
            quantity = areas.tiled_area(survey.tiling_level)
        else:
            quantity = rule.quantity or 0.0
        line = EstimateLineItem(
            item_name=item.item_name,
            price_type=PriceType.SQM,
            applicability=item.applicability,
            quantity=quantity,
            quantity_label=_format_area(quantity),
            unit_price=rule.unit_price,
            total=quantity * rule.unit_price,
        )
    else:
        line = EstimateLineItem(
            item_name=item.item_name,
            price_type=PriceType.FIXED,
            applicability=item.applicability,
            quantity=1.0,
            unit_price=rule.amount,
            total=rule.amount,
        )

    if is_tiles_material_item(item.item_name) and not survey.includes_tiles:
        line.total = 0.0
        line.included = False
        line.quantity_label = NOT_INCLUDED
    return line


def applicable_items(profile: PricingProfile, survey: SurveyResponse) -> list[PricingItem]:
    """Active rules that apply to this survey, in profile order."""
    items = [
        item
        for item in profile.pricing_items
        if item.is_active and applies(item.applicability, survey)
    ]
    return filter_wall_change_items(items, survey.wall_changes)


def compute_estimate(
    profile: PricingProfile,
    survey: SurveyResponse,
    config: EstimateConfig | None = None,
) -> EstimateResult:
    """Evaluate a pricing profile against a survey response.

    Args:
        profile: Builder's pricing mode and ordered pricing rules
        survey: Client survey answers and raw measurements
        config: Area coverage and high multiplier settings (defaults apply)

    Returns:
        EstimateResult with line items in profile order, base and high estimate
    """
    config = config or EstimateConfig()
    areas = compute_areas(survey, config)
    rules = [
        (item, item.to_rule(profile.pricing_mode))
        for item in applicable_items(profile, survey)
    ]

    lines: list[EstimateLineItem | None] = [None] * len(rules)
    subtotal = 0.0
    for index, (item, rule) in enumerate(rules):
        if isinstance(rule, PercentageRule):
            continue
        line = _price_line(item, rule, survey, areas)
        subtotal += line.total
        lines[index] = line

    percentage_total = 0.0
    for index, (item, rule) in enumerate(rules):
        if not isinstance(rule, PercentageRule):
            continue
        total = subtotal * (rule.markup_percent / 100)
        percentage_total += total
        lines[index] = EstimateLineItem(
            item_name=item.item_name,
            price_type=PriceType.PERCENTAGE,
            applicability=item.applicability,
            quantity=1.0,
            quantity_label=_format_percent(rule.markup_percent),
            unit_price=rule.markup_percent,
            total=total,
        )

    base_estimate = subtotal + percentage_total
    return EstimateResult(
        line_items=[line for line in lines if line is not None],
        base_estimate=base_estimate,
        high_estimate=base_estimate * config.high_multiplier,
    )


def derive_estimate_range(
    line_items: Sequence[EstimateLineItem],
    wall_changes: str | None,
    high_multiplier: float | None = None,
) -> EstimateResult:
    """Re-derive the displayed range from stored line items.

    Used when a lead is opened: the stored items are filtered for wall
    changes again and summed.
    """
    multiplier = EstimateConfig().high_multiplier if high_multiplier is None else high_multiplier
    kept = filter_wall_change_items(line_items, wall_changes)
    base_estimate = sum(line.total for line in kept)
    return EstimateResult(
        line_items=kept,
        base_estimate=base_estimate,
        high_estimate=base_estimate * multiplier,
    )
