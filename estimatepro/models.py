"""EstiMate Pro pydantic models for type-safe data exchange.

Wire format is camelCase (``itemName``, ``priceType`` ...); Python code uses
snake_case attributes. All numeric inputs are coerced leniently so that a
malformed builder or client entry becomes 0 instead of a validation error.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from estimatepro.core.coerce import to_number, to_optional_number, to_text


class CamelModel(BaseModel):
    """Base model serialising to camelCase while accepting either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PriceType(str, Enum):
    """How a pricing rule turns into a line amount."""

    FIXED = "fixed"  # flat amount
    SQM = "sqm"  # amount x area
    PERCENTAGE = "percentage"  # percent of the non-percentage subtotal


class PricingMode(str, Enum):
    """Which configured amount is authoritative for fixed/sqm rules."""

    FINAL = "final"  # finalPrice
    BASE = "base"  # baseCost


class TilingLevel(str, Enum):
    BUDGET = "Budget"
    STANDARD = "Standard"
    PREMIUM = "Premium"


class TilesSupply(str, Enum):
    YES_INCLUDE = "yes_include"
    NO_SUPPLY_OWN = "no_supply_own"


class ToiletLocation(str, Enum):
    SAME_LOCATION = "same_location"
    CHANGE_LOCATION = "change_location"


class WallChanges(str, Enum):
    YES = "yes"
    NO = "no"


class LeadStatus(str, Enum):
    """Builder-managed lead pipeline states."""

    NEW = "New"
    CONTACTED = "Contacted"
    SITE_VISIT_DONE = "Site Visit Done"
    QUOTE_SENT = "Quote Sent"
    QUOTE_ACCEPTED = "Quote Accepted"
    QUOTE_UNSUCCESSFUL = "Quote Unsuccessful"
    CLIENT_NOT_INTERESTED = "Client Not Interested"
    CLIENT_UNCONTACTABLE = "Client Uncontactable"


class SubscriptionStatus(str, Enum):
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    INACTIVE = "inactive"


class BuilderRole(str, Enum):
    BUILDER = "builder"
    ADMIN = "admin"


# ============================================================================
# Pricing rules
# ============================================================================


class FixedRule(BaseModel):
    """Flat amount."""

    kind: Literal["fixed"] = "fixed"
    amount: float = 0.0


class SqmRule(BaseModel):
    """Rate per square metre; quantity is resolved against the survey."""

    kind: Literal["sqm"] = "sqm"
    unit_price: float = 0.0
    quantity: float | None = None


class PercentageRule(BaseModel):
    """Percentage of the non-percentage subtotal."""

    kind: Literal["percentage"] = "percentage"
    markup_percent: float = 0.0


PricingRule = Annotated[
    Union[FixedRule, SqmRule, PercentageRule], Field(discriminator="kind")
]


class PricingItem(CamelModel):
    """One configurable pricing rule row as persisted for a builder."""

    key: str | None = None  # stable catalog identifier, when known
    item_name: str = ""
    applicability: str = "All estimates"
    price_type: PriceType = PriceType.FIXED
    final_price: float | None = None
    base_cost: float | None = None
    markup_percent: float | None = None
    quantity: float | None = None
    is_active: bool = True

    @field_validator("item_name", "applicability", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(v)

    @field_validator("final_price", "base_cost", "markup_percent", "quantity", mode="before")
    @classmethod
    def _coerce_numbers(cls, v: Any) -> float | None:
        return to_optional_number(v)

    @field_validator("price_type", mode="before")
    @classmethod
    def _coerce_price_type(cls, v: Any) -> str:
        value = to_text(getattr(v, "value", v)).lower()
        if value in {"sqm", "per_sqm", "m2"}:
            return PriceType.SQM.value
        if value in {"percentage", "percent", "%"}:
            return PriceType.PERCENTAGE.value
        return PriceType.FIXED.value

    @field_validator("is_active", mode="before")
    @classmethod
    def _coerce_active(cls, v: Any) -> bool:
        # Only an explicit false disables a rule
        return v is not False

    def price(self, mode: PricingMode = PricingMode.FINAL) -> float:
        """Configured amount for fixed/sqm rules under the given pricing mode."""
        if mode == PricingMode.BASE:
            value = self.base_cost if self.base_cost is not None else self.final_price
        else:
            value = self.final_price if self.final_price is not None else self.base_cost
        return to_number(value)

    def to_rule(self, mode: PricingMode = PricingMode.FINAL) -> FixedRule | SqmRule | PercentageRule:
        """Return the variant-specific rule for this row's price type."""
        if self.price_type == PriceType.PERCENTAGE:
            return PercentageRule(markup_percent=to_number(self.markup_percent))
        if self.price_type == PriceType.SQM:
            return SqmRule(unit_price=self.price(mode), quantity=self.quantity)
        return FixedRule(amount=self.price(mode))


class PricingProfile(CamelModel):
    """A builder's ordered pricing table."""

    pricing_mode: PricingMode = PricingMode.FINAL
    pricing_items: list[PricingItem] = Field(default_factory=list)

    @field_validator("pricing_mode", mode="before")
    @classmethod
    def _coerce_mode(cls, v: Any) -> str:
        return PricingMode.BASE.value if to_text(getattr(v, "value", v)) == "base" else PricingMode.FINAL.value


# ============================================================================
# Survey
# ============================================================================


class CalculatedAreas(CamelModel):
    """Areas derived from the raw survey measurements (square metres)."""

    floor_area: float = 0.0
    wall_area: float = 0.0
    total_area: float = 0.0
    budget_area: float | None = None
    standard_area: float | None = None
    premium_area: float | None = None

    def tiled_area(self, tiling_level: str | None) -> float:
        """Area tiled at the given level, falling back to the total area."""
        level = to_text(tiling_level).lower() or "standard"
        area = getattr(self, f"{level}_area", None) if level in {"budget", "standard", "premium"} else None
        return area if area else self.total_area


class SurveyResponse(CamelModel):
    """One client submission of the public survey."""

    client_name: str = ""
    client_phone: str = ""
    client_email: str = ""
    client_suburb: str = ""

    floor_length: float | None = None
    floor_width: float | None = None
    wall_height: float | None = None
    total_area: float | None = None  # entered directly instead of dimensions

    bathroom_type: str = ""
    tiling_level: str = ""
    tiles_supply: str = ""
    toilet_location: str = ""
    wall_changes: str = ""
    home_age_category: str = ""
    design_style: str = ""
    photo_urls: list[str] = Field(default_factory=list)

    @field_validator(
        "client_name",
        "client_phone",
        "client_email",
        "client_suburb",
        "bathroom_type",
        "tiling_level",
        "tiles_supply",
        "toilet_location",
        "wall_changes",
        "home_age_category",
        "design_style",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(getattr(v, "value", v))

    @field_validator("floor_length", "floor_width", "wall_height", "total_area", mode="before")
    @classmethod
    def _coerce_measurement(cls, v: Any) -> float | None:
        number = to_optional_number(v)
        return None if number is None else max(number, 0.0)

    @property
    def includes_tiles(self) -> bool:
        return self.tiles_supply == TilesSupply.YES_INCLUDE.value

    @property
    def has_wall_changes(self) -> bool:
        return self.wall_changes.lower() == WallChanges.YES.value


# ============================================================================
# Estimate output
# ============================================================================


class EstimateLineItem(CamelModel):
    """One applicable pricing rule evaluated against a survey."""

    item_name: str
    price_type: PriceType
    applicability: str = ""
    quantity: float = 0.0
    quantity_label: str = "-"
    unit_price: float = 0.0  # markup percent for percentage rows
    total: float = 0.0
    included: bool = True


class EstimateResult(CamelModel):
    line_items: list[EstimateLineItem] = Field(default_factory=list)
    base_estimate: float = 0.0
    high_estimate: float = 0.0


# ============================================================================
# Quote composition
# ============================================================================


class QuoteLineItem(CamelModel):
    """Builder-editable quote row seeded from an estimate line or added by hand."""

    item_name: str = ""
    price_type: PriceType = PriceType.FIXED
    applicability: str = ""
    quantity: float | None = None
    quantity_label: str = "-"
    unit_price: float | None = None
    markup_percent: float | None = None
    total: float = 0.0
    editable_amount: float = 0.0
    is_custom: bool = False

    @field_validator("editable_amount", "total", mode="before")
    @classmethod
    def _coerce_amount(cls, v: Any) -> float:
        return to_number(v)

    @field_validator("quantity", "unit_price", "markup_percent", mode="before")
    @classmethod
    def _coerce_optional(cls, v: Any) -> float | None:
        return to_optional_number(v)

    @field_validator("item_name", "applicability", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return to_text(v)


class QuoteState(CamelModel):
    line_items: list[QuoteLineItem] = Field(default_factory=list)
    terms: str = ""


class QuoteTotals(CamelModel):
    line_items: list[QuoteLineItem] = Field(default_factory=list)
    subtotal: float = 0.0
    gst: float = 0.0
    total: float = 0.0


class BuilderIdentity(CamelModel):
    """Builder details printed on a client quote."""

    business_name: str = ""
    contact_name: str = ""
    abn: str = ""
    email: str = ""
    phone: str = ""

    @property
    def display_name(self) -> str:
        return self.business_name or self.contact_name or "Builder"


class QuoteDocument(CamelModel):
    """Everything the PDF exporter needs for one client quote."""

    builder: BuilderIdentity
    survey: SurveyResponse
    areas: CalculatedAreas
    totals: QuoteTotals
    terms: str = ""
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QuoteOperation(CamelModel):
    """One builder edit applied to a quote state.

    ``edit_amount`` overrides a row's amount, ``add_custom`` appends a blank
    custom row, ``edit_custom`` changes one field of a custom row and
    ``remove_custom`` deletes a custom row.
    """

    op: Literal["edit_amount", "add_custom", "edit_custom", "remove_custom"]
    index: int | None = None
    field: str | None = None
    value: Any = None


class PricingSetupRow(CamelModel):
    """One catalog row of the pricing setup form with its seeded value."""

    key: str
    item_name: str = ""
    applicability: str = ""
    price_type: PriceType = PriceType.FIXED
    section: str = ""
    value: float | None = None  # markup percent for percentage rows
    is_active: bool = True

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> float | None:
        return to_optional_number(v)

    @field_validator("is_active", mode="before")
    @classmethod
    def _coerce_active(cls, v: Any) -> bool:
        return v is not False
