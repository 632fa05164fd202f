"""Bathroom area calculations.

Areas are always recomputed from the raw survey measurements; stored values
are never treated as the source of truth.
"""

from __future__ import annotations

from estimatepro.config import EstimateConfig
from estimatepro.models import CalculatedAreas, SurveyResponse


def compute_areas(
    survey: SurveyResponse, config: EstimateConfig | None = None
) -> CalculatedAreas:
    """Derive floor, wall, total and per-tiling-level areas.

    floorArea = length x width
    wallArea  = 2 x (length x height) + 2 x (width x height)
    totalArea = floorArea + wallArea

    Tiled areas add the configured share of the wall area to the floor area.
    When the client entered a total area directly (no dimensions) only
    ``total_area`` is known and tiled areas fall back to it.
    """
    config = config or EstimateConfig()

    length = survey.floor_length or 0.0
    width = survey.floor_width or 0.0
    height = survey.wall_height or 0.0

    if not (length or width or height):
        return CalculatedAreas(total_area=survey.total_area or 0.0)

    floor_area = length * width
    wall_area = 2 * (length * height) + 2 * (width * height)

    return CalculatedAreas(
        floor_area=floor_area,
        wall_area=wall_area,
        total_area=floor_area + wall_area,
        budget_area=floor_area + wall_area * config.budget_wall_coverage,
        standard_area=floor_area + wall_area * config.standard_wall_coverage,
        premium_area=floor_area + wall_area * config.premium_wall_coverage,
    )
