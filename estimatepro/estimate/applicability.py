"""Applicability conditions for pricing rules.

Builders describe when a rule applies with free text ("If client selects lives
in apartment"). The text is mapped onto a closed set of condition codes, each
evaluated against typed survey fields, so matching happens once at parse time
instead of on every evaluation.
"""

from __future__ import annotations

import re
from enum import Enum

from estimatepro.models import SurveyResponse, TilesSupply, ToiletLocation


class Condition(str, Enum):
    """When a pricing rule contributes to an estimate."""

    ALL = "all"
    BUDGET = "budget"
    STANDARD = "standard"
    PREMIUM = "premium"
    SAME_LAYOUT = "same_layout"
    TOILET_MOVES = "toilet_moves"
    TILES_INCLUDED = "tiles_included"
    APARTMENT = "apartment"
    WALL_CHANGES = "wall_changes"


# Canonical option labels offered in pricing setup
CONDITION_LABELS: dict[Condition, str] = {
    Condition.ALL: "All estimates",
    Condition.BUDGET: "Budget",
    Condition.STANDARD: "Standard",
    Condition.PREMIUM: "Premium",
    Condition.SAME_LAYOUT: "If customer selects same layout",
    Condition.TOILET_MOVES: "If customer selects toilet will change",
    Condition.TILES_INCLUDED: "If customer selects yes for tiles",
    Condition.APARTMENT: "If client selects lives in apartment",
    Condition.WALL_CHANGES: "If client selects yes to wall layout change",
}

_WORD = re.compile(r"[a-z]+")


def parse_condition(applicability: str | None) -> Condition:
    """Map free applicability text onto a condition code.

    Matching is case-insensitive keyword matching. Text that names no known
    condition is treated as "All estimates".
    """
    text = (applicability or "").strip().lower()
    if not text:
        return Condition.ALL

    for condition in Condition:
        if text == condition.value or text == CONDITION_LABELS[condition].lower():
            return condition

    words = set(_WORD.findall(text))

    if "apartment" in text:
        return Condition.APARTMENT
    if "wall" in words or "knock" in text or "shift" in words:
        return Condition.WALL_CHANGES
    if "toilet" in words and ("change" in text or "move" in text):
        return Condition.TOILET_MOVES
    if "same" in words:
        return Condition.SAME_LAYOUT
    # "Premium tiles" names a tiling level, not tile supply
    for tier in (Condition.BUDGET, Condition.STANDARD, Condition.PREMIUM):
        if tier.value in words:
            return tier
    if "tiles" in words or "tile" in words:
        return Condition.TILES_INCLUDED
    return Condition.ALL


def condition_applies(condition: Condition, survey: SurveyResponse) -> bool:
    """Evaluate a condition code against a survey response."""
    if condition == Condition.ALL:
        return True
    if condition in (Condition.BUDGET, Condition.STANDARD, Condition.PREMIUM):
        return survey.tiling_level.lower() == condition.value
    if condition == Condition.SAME_LAYOUT:
        return survey.toilet_location == ToiletLocation.SAME_LOCATION.value
    if condition == Condition.TOILET_MOVES:
        return survey.toilet_location == ToiletLocation.CHANGE_LOCATION.value
    if condition == Condition.TILES_INCLUDED:
        return survey.tiles_supply == TilesSupply.YES_INCLUDE.value
    if condition == Condition.APARTMENT:
        return "apartment" in survey.bathroom_type.lower()
    if condition == Condition.WALL_CHANGES:
        return survey.has_wall_changes
    return True


def applies(applicability: str | None, survey: SurveyResponse) -> bool:
    """True when a rule with this applicability text applies to the survey."""
    return condition_applies(parse_condition(applicability), survey)


def condition_label(applicability: str | None) -> str:
    """Normalise applicability text to its canonical option label."""
    return CONDITION_LABELS[parse_condition(applicability)]
