"""Quote composition.

A quote starts as a copy of a lead's estimate line items which the builder can
then adjust: override any row's amount, or add, edit and remove custom rows.
Every edit is a pure transition ``QuoteState -> QuoteState``; the previous
state is never mutated.

Custom rows are always derived from their own fields:

- fixed:      amount = unit price
- sqm:        amount = quantity x unit price
- percentage: amount = markup% of the sum of every other row's amount
  (custom percentage rows are excluded, so they never compound)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from estimatepro.core.coerce import round_half_up, to_number, to_text
from estimatepro.estimate import GST_RATE
from estimatepro.estimate.engine import filter_wall_change_items
from estimatepro.models import (
    EstimateLineItem,
    PriceType,
    QuoteLineItem,
    QuoteOperation,
    QuoteState,
    QuoteTotals,
)

# Wire and attribute spellings accepted by edit_custom_field
CUSTOM_FIELDS = {
    "itemName": "item_name",
    "item_name": "item_name",
    "priceType": "price_type",
    "price_type": "price_type",
    "quantity": "quantity",
    "unitPrice": "unit_price",
    "unit_price": "unit_price",
    "markupPercent": "markup_percent",
    "markup_percent": "markup_percent",
}

# Numeric fields each price type keeps when a custom row switches type
_KEPT_ON_SWITCH: dict[PriceType, set[str]] = {
    PriceType.FIXED: {"unit_price"},
    PriceType.SQM: {"quantity", "unit_price"},
    PriceType.PERCENTAGE: {"markup_percent"},
}


def _copy(state: QuoteState) -> QuoteState:
    return state.model_copy(
        update={"line_items": [row.model_copy() for row in state.line_items]}
    )


def _parse_price_type(value: Any) -> PriceType:
    text = to_text(getattr(value, "value", value)).lower()
    try:
        return PriceType(text)
    except ValueError:
        return PriceType.FIXED


def initialize_quote(
    line_items: Iterable[EstimateLineItem],
    wall_changes: str | None,
    terms: str = "",
) -> QuoteState:
    """Seed a quote from stored estimate line items.

    Wall knock/shift rows are filtered again so a quote never carries wall
    work the client did not ask for. Each row's editable amount starts at its
    estimate total.
    """
    rows = []
    for line in filter_wall_change_items(line_items, wall_changes):
        is_percentage = line.price_type == PriceType.PERCENTAGE
        rows.append(
            QuoteLineItem(
                item_name=line.item_name,
                price_type=line.price_type,
                applicability=line.applicability,
                quantity=line.quantity,
                quantity_label=line.quantity_label,
                unit_price=None if is_percentage else line.unit_price,
                markup_percent=line.unit_price if is_percentage else None,
                total=line.total,
                editable_amount=line.total,
            )
        )
    return QuoteState(line_items=rows, terms=terms)


def edit_amount(state: QuoteState, index: int, value: Any) -> QuoteState:
    """Override one row's amount; malformed input becomes 0.

    Custom percentage rows follow the new amounts of the other rows. A
    custom row's own amount is left as typed until its fields change again.
    """
    new_state = _copy(state)
    if not 0 <= index < len(new_state.line_items):
        return new_state
    row = new_state.line_items[index]
    row.editable_amount = to_number(value)
    if row.is_custom:
        return new_state
    return _recompute_percentages(new_state)


def add_custom_item(state: QuoteState) -> QuoteState:
    """Append a blank fixed-price custom row."""
    new_state = _copy(state)
    new_state.line_items.append(
        QuoteLineItem(
            item_name="",
            price_type=PriceType.FIXED,
            unit_price=0.0,
            editable_amount=0.0,
            is_custom=True,
        )
    )
    return new_state


def edit_custom_field(state: QuoteState, index: int, field: str, value: Any) -> QuoteState:
    """Change one field of a custom row and recompute all custom rows.

    Switching the price type clears the numeric fields the new type does not
    use. Non-custom rows, unknown fields and out-of-range indexes are ignored.
    """
    new_state = _copy(state)
    attribute = CUSTOM_FIELDS.get(field)
    if attribute is None or not 0 <= index < len(new_state.line_items):
        return new_state
    row = new_state.line_items[index]
    if not row.is_custom:
        return new_state

    if attribute == "price_type":
        price_type = _parse_price_type(value)
        kept = _KEPT_ON_SWITCH[price_type]
        for name in ("quantity", "unit_price", "markup_percent"):
            if name not in kept:
                setattr(row, name, None)
        row.price_type = price_type
    elif attribute == "item_name":
        row.item_name = to_text(value)
    else:
        setattr(row, attribute, to_number(value))

    return recompute(new_state)


def remove_custom_item(state: QuoteState, index: int) -> QuoteState:
    """Delete a custom row; estimate rows cannot be removed."""
    new_state = _copy(state)
    if 0 <= index < len(new_state.line_items) and new_state.line_items[index].is_custom:
        del new_state.line_items[index]
    return recompute(new_state)


def _is_custom_percentage(row: QuoteLineItem) -> bool:
    return row.is_custom and row.price_type == PriceType.PERCENTAGE


def _recompute_percentages(state: QuoteState) -> QuoteState:
    base_subtotal = sum(
        row.editable_amount for row in state.line_items if not _is_custom_percentage(row)
    )
    for row in state.line_items:
        if _is_custom_percentage(row):
            percent = to_number(row.markup_percent)
            row.editable_amount = base_subtotal * (percent / 100)
            row.total = row.editable_amount
            row.quantity_label = f"{percent:g}%"
    return state


def recompute(state: QuoteState) -> QuoteState:
    """Re-derive every custom row's amount from its fields.

    Fixed and sqm rows are settled first so that percentage rows see the
    final base subtotal.
    """
    new_state = _copy(state)
    for row in new_state.line_items:
        if not row.is_custom:
            continue
        if row.price_type == PriceType.SQM:
            quantity = to_number(row.quantity)
            row.editable_amount = quantity * to_number(row.unit_price)
            row.quantity_label = f"{quantity:.2f} m²"
        elif row.price_type == PriceType.FIXED:
            row.editable_amount = to_number(row.unit_price)
            row.quantity_label = "-"
        else:
            continue
        row.total = row.editable_amount
    return _recompute_percentages(new_state)


def compute_totals(state: QuoteState, gst_rate: float = GST_RATE) -> QuoteTotals:
    """Subtotal, GST and total over all rows.

    GST is rounded half-up to the cent; subtotal and total keep full precision.
    """
    subtotal = sum(to_number(row.editable_amount) for row in state.line_items)
    gst = round_half_up(subtotal * gst_rate)
    return QuoteTotals(
        line_items=[row.model_copy() for row in state.line_items],
        subtotal=subtotal,
        gst=gst,
        total=subtotal + gst,
    )


def apply_operation(state: QuoteState, operation: QuoteOperation) -> QuoteState:
    """Dispatch one builder edit to its transition function."""
    index = operation.index if operation.index is not None else -1
    if operation.op == "edit_amount":
        return edit_amount(state, index, operation.value)
    if operation.op == "add_custom":
        return add_custom_item(state)
    if operation.op == "edit_custom":
        return edit_custom_field(state, index, operation.field or "", operation.value)
    return remove_custom_item(state, index)


def apply_operations(state: QuoteState, operations: Iterable[QuoteOperation]) -> QuoteState:
    for operation in operations:
        state = apply_operation(state, operation)
    return state
