"""Unit tests for quote composition.

Every edit is a pure transition; custom percentage rows are derived from the
other rows and never compound.
"""

from __future__ import annotations

import pytest

from estimatepro.estimate.quote import (
    add_custom_item,
    apply_operations,
    compute_totals,
    edit_amount,
    edit_custom_field,
    initialize_quote,
    recompute,
    remove_custom_item,
)
from estimatepro.models import (
    EstimateLineItem,
    PriceType,
    QuoteLineItem,
    QuoteOperation,
    QuoteState,
)


@pytest.fixture
def estimate_lines() -> list[EstimateLineItem]:
    return [
        EstimateLineItem(item_name="Demolition", price_type="fixed", quantity=1, unit_price=600, total=600),
        EstimateLineItem(
            item_name="Tiling (labour)",
            price_type="sqm",
            quantity=4,
            quantity_label="4.00 m²",
            unit_price=100,
            total=400,
        ),
    ]


@pytest.fixture
def state(estimate_lines) -> QuoteState:
    return initialize_quote(estimate_lines, "no", terms="Payment within 7 days")


def _with_custom_percentage(state: QuoteState, percent) -> QuoteState:
    state = add_custom_item(state)
    index = len(state.line_items) - 1
    state = edit_custom_field(state, index, "priceType", "percentage")
    return edit_custom_field(state, index, "markupPercent", percent)


class TestInitializeQuote:
    def test_editable_amount_starts_at_total(self, state):
        assert [row.editable_amount for row in state.line_items] == [600.0, 400.0]
        assert state.terms == "Payment within 7 days"
        assert not any(row.is_custom for row in state.line_items)

    def test_wall_rows_are_filtered(self, estimate_lines):
        lines = estimate_lines + [
            EstimateLineItem(item_name="Wall knock/shift labour", price_type="fixed", total=800)
        ]

        assert len(initialize_quote(lines, "no").line_items) == 2
        assert len(initialize_quote(lines, "yes").line_items) == 3

    def test_percentage_rows_carry_markup(self):
        lines = [
            EstimateLineItem(
                item_name="Project management", price_type="percentage", unit_price=12, total=120
            )
        ]

        row = initialize_quote(lines, "no").line_items[0]

        assert row.markup_percent == 12.0
        assert row.unit_price is None
        assert row.editable_amount == 120.0


class TestEditAmount:
    def test_overrides_amount(self, state):
        new_state = edit_amount(state, 0, "750")

        assert new_state.line_items[0].editable_amount == 750.0

    def test_malformed_value_becomes_zero(self, state):
        assert edit_amount(state, 1, "abc").line_items[1].editable_amount == 0.0

    def test_out_of_range_is_a_no_op(self, state):
        assert edit_amount(state, 5, 100) == state
        assert edit_amount(state, -1, 100) == state

    def test_previous_state_is_not_mutated(self, state):
        edit_amount(state, 0, 999)

        assert state.line_items[0].editable_amount == 600.0

    def test_custom_percentage_follows_edited_rows(self, state):
        state = _with_custom_percentage(state, 15)
        assert state.line_items[2].editable_amount == pytest.approx(150.0)

        state = edit_amount(state, 0, 1600)

        assert state.line_items[2].editable_amount == pytest.approx(300.0)


class TestCustomRows:
    def test_add_custom_item(self, state):
        new_state = add_custom_item(state)

        row = new_state.line_items[-1]
        assert row.is_custom
        assert row.price_type == PriceType.FIXED
        assert row.unit_price == 0.0
        assert row.editable_amount == 0.0
        assert len(state.line_items) == 2

    def test_fixed_custom_amount_is_unit_price(self, state):
        state = add_custom_item(state)
        state = edit_custom_field(state, 2, "itemName", "  Extra shelf ")
        state = edit_custom_field(state, 2, "unitPrice", "250")

        row = state.line_items[2]
        assert row.item_name == "Extra shelf"
        assert row.editable_amount == 250.0

    def test_fixed_custom_malformed_price_is_zero(self, state):
        state = add_custom_item(state)
        state = edit_custom_field(state, 2, "unitPrice", "abc")

        assert state.line_items[2].editable_amount == 0.0

    def test_sqm_custom_amount(self, state):
        state = add_custom_item(state)
        state = edit_custom_field(state, 2, "priceType", "sqm")
        state = edit_custom_field(state, 2, "quantity", 4)
        state = edit_custom_field(state, 2, "unitPrice", 25)

        row = state.line_items[2]
        assert row.editable_amount == 100.0
        assert row.quantity_label == "4.00 m²"

    def test_switching_type_clears_unused_fields(self, state):
        state = add_custom_item(state)
        state = edit_custom_field(state, 2, "priceType", "sqm")
        state = edit_custom_field(state, 2, "quantity", 4)
        state = edit_custom_field(state, 2, "unitPrice", 25)

        as_percentage = edit_custom_field(state, 2, "priceType", "percentage")
        as_fixed = edit_custom_field(state, 2, "priceType", "fixed")

        assert as_percentage.line_items[2].quantity is None
        assert as_percentage.line_items[2].unit_price is None
        assert as_fixed.line_items[2].quantity is None
        assert as_fixed.line_items[2].unit_price == 25.0
        assert as_fixed.line_items[2].editable_amount == 25.0

    def test_invalid_price_type_becomes_fixed(self, state):
        state = add_custom_item(state)

        assert edit_custom_field(state, 2, "priceType", "hourly").line_items[2].price_type == PriceType.FIXED

    def test_estimate_rows_cannot_be_edited_as_custom(self, state):
        assert edit_custom_field(state, 0, "unitPrice", 1) == state

    def test_unknown_field_is_ignored(self, state):
        state = add_custom_item(state)

        assert edit_custom_field(state, 2, "isCustom", False) == state

    def test_remove_custom_item(self, state):
        state = add_custom_item(state)

        assert len(remove_custom_item(state, 2).line_items) == 2

    def test_estimate_rows_cannot_be_removed(self, state):
        assert len(remove_custom_item(state, 0).line_items) == 2


class TestCustomPercentages:
    """Custom percentage rows price off every row except other custom percentages."""

    def test_percentage_of_other_rows(self, state):
        state = _with_custom_percentage(state, 15)

        assert state.line_items[2].editable_amount == pytest.approx(150.0)
        assert state.line_items[2].quantity_label == "15%"

    def test_percentages_never_compound(self, state):
        state = _with_custom_percentage(state, 15)
        state = _with_custom_percentage(state, 10)

        assert state.line_items[2].editable_amount == pytest.approx(150.0)
        assert state.line_items[3].editable_amount == pytest.approx(100.0)

    def test_removing_one_percentage_keeps_the_other(self, state):
        state = _with_custom_percentage(state, 15)
        state = _with_custom_percentage(state, 10)

        state = remove_custom_item(state, 3)

        assert len(state.line_items) == 3
        assert state.line_items[2].editable_amount == pytest.approx(150.0)

    def test_recompute_is_idempotent(self, state):
        state = _with_custom_percentage(state, 15)

        assert recompute(recompute(state)) == recompute(state)


class TestComputeTotals:
    def test_subtotal_gst_total(self, state):
        state = _with_custom_percentage(state, 15)

        totals = compute_totals(state)

        assert totals.subtotal == pytest.approx(1150.0)
        assert totals.gst == 115.0
        assert totals.total == pytest.approx(1265.0)
        assert len(totals.line_items) == 3

    def test_gst_is_rounded_half_up_to_cents(self):
        state = QuoteState(line_items=[QuoteLineItem(item_name="Job", editable_amount=1234.56)])

        totals = compute_totals(state)

        assert totals.subtotal == 1234.56
        assert totals.gst == 123.46
        assert totals.total == 1234.56 + 123.46

    def test_custom_gst_rate(self, state):
        assert compute_totals(state, gst_rate=0.15).gst == 150.0

    def test_empty_quote(self):
        totals = compute_totals(QuoteState())

        assert (totals.subtotal, totals.gst, totals.total) == (0.0, 0.0, 0.0)


class TestApplyOperations:
    def test_operations_apply_in_order(self, state):
        operations = [
            QuoteOperation(op="add_custom"),
            QuoteOperation(op="edit_custom", index=2, field="priceType", value="percentage"),
            QuoteOperation(op="edit_custom", index=2, field="markupPercent", value=10),
            QuoteOperation(op="edit_amount", index=1, value=900),
        ]

        new_state = apply_operations(state, operations)

        assert [row.editable_amount for row in new_state.line_items] == pytest.approx([600.0, 900.0, 150.0])

    def test_operations_accept_camel_case_payload(self, state):
        operation = QuoteOperation.model_validate({"op": "remove_custom", "index": 0})

        assert apply_operations(state, [operation]) == recompute(state)
