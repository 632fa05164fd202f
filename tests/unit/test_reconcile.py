"""Unit tests for pricing setup reconciliation."""

from __future__ import annotations

from estimatepro.estimate.catalog import CATALOG_BY_KEY, PRICING_CATALOG
from estimatepro.estimate.reconcile import (
    applicability_matches,
    find_stored_item,
    merge_setup_items,
    names_match,
    reconcile_catalog,
    setup_rows_to_items,
)
from estimatepro.models import PriceType, PricingItem, PricingMode, PricingSetupRow


def _rows_by_key(items):
    return {row.key: row for row in reconcile_catalog(items)}


class TestCatalog:
    def test_keys_are_unique(self):
        keys = [row.key for row in PRICING_CATALOG]

        assert len(keys) == len(set(keys))
        assert set(CATALOG_BY_KEY) == set(keys)

    def test_margin_rows_are_percentages(self):
        assert CATALOG_BY_KEY["project_management"].price_type == PriceType.PERCENTAGE
        assert CATALOG_BY_KEY["apartment_access"].price_type == PriceType.PERCENTAGE


class TestMatching:
    def test_names_match_exact_and_substring(self):
        assert names_match("Electrical", "electrical")
        assert names_match("Demolition", "Demolition & strip out")
        assert names_match("Electrical work", "Electrical")
        assert not names_match("", "Electrical")
        assert not names_match("Painting", "Electrical")

    def test_blank_applicability_means_all_estimates(self):
        assert applicability_matches("", "All estimates")
        assert applicability_matches("budget", "Budget")
        assert not applicability_matches("Budget", "Standard")

    def test_key_lookup_wins_over_name(self):
        renamed = PricingItem(key="toilet_relocation", item_name="Move the loo", final_price=1200)

        assert find_stored_item(CATALOG_BY_KEY["toilet_relocation"], [renamed]) is renamed

    def test_items_keyed_to_another_row_are_not_borrowed(self):
        keyed = PricingItem(
            key="tiling_standard",
            item_name="Tiling (labour)",
            applicability="Budget",
            price_type="sqm",
            final_price=70,
        )

        assert find_stored_item(CATALOG_BY_KEY["tiling_budget"], [keyed]) is None


class TestReconcileCatalog:
    def test_empty_profile_gives_blank_active_rows(self):
        rows = reconcile_catalog([])

        assert len(rows) == len(PRICING_CATALOG)
        assert all(row.value is None and row.is_active for row in rows)
        assert [row.key for row in rows] == [row.key for row in PRICING_CATALOG]

    def test_legacy_items_match_loosely(self):
        rows = _rows_by_key(
            [
                PricingItem(item_name="tiling (labour)", applicability="budget", price_type="sqm", final_price=65),
                PricingItem(item_name="Electrical work", applicability="", final_price=450),
            ]
        )

        assert rows["tiling_budget"].value == 65.0
        assert rows["tiling_standard"].value is None
        assert rows["electrical"].value == 450.0

    def test_price_type_must_match(self):
        rows = _rows_by_key([PricingItem(item_name="Electrical", price_type="percentage", markup_percent=5)])

        assert rows["electrical"].value is None

    def test_percentage_rows_seed_markup(self):
        rows = _rows_by_key(
            [PricingItem(item_name="Project management", price_type="percentage", markup_percent=12)]
        )

        assert rows["project_management"].value == 12.0

    def test_first_matching_item_wins(self):
        rows = _rows_by_key(
            [
                PricingItem(item_name="Electrical", final_price=100),
                PricingItem(item_name="Electrical", final_price=200),
            ]
        )

        assert rows["electrical"].value == 100.0

    def test_base_cost_used_when_no_final_price(self):
        rows = _rows_by_key([PricingItem(item_name="Painting", base_cost=300)])

        assert rows["painting"].value == 300.0

    def test_inactive_state_is_carried(self):
        rows = _rows_by_key([PricingItem(item_name="Painting", final_price=300, is_active=False)])

        assert rows["painting"].is_active is False


class TestSetupRowsToItems:
    def test_rows_become_keyed_items(self):
        items = setup_rows_to_items(
            [
                PricingSetupRow(key="electrical", value=450),
                PricingSetupRow(key="project_management", value="12"),
                PricingSetupRow(key="painting", value=""),
                PricingSetupRow(key="not_a_row", value=10),
            ]
        )

        assert [item.key for item in items] == ["electrical", "project_management"]
        assert items[0].item_name == "Electrical"
        assert items[0].final_price == 450.0
        assert items[1].markup_percent == 12.0
        assert items[1].final_price is None

    def test_base_mode_stores_base_cost(self):
        items = setup_rows_to_items([PricingSetupRow(key="electrical", value=300)], PricingMode.BASE)

        assert items[0].base_cost == 300.0
        assert items[0].final_price is None

    def test_names_come_from_catalog(self):
        items = setup_rows_to_items([PricingSetupRow(key="electrical", item_name="Hacked", value=1)])

        assert items[0].item_name == "Electrical"


class TestMergeSetupItems:
    def test_catalog_items_replaced_freeform_kept(self):
        existing = [
            PricingItem(item_name="Base Default", final_price=5000),
            PricingItem(item_name="Electrical", final_price=300),
            PricingItem(item_name="Heated towel rail", final_price=650),
        ]

        merged = merge_setup_items(existing, [PricingSetupRow(key="electrical", value=450)])

        assert [item.item_name for item in merged] == ["Base Default", "Heated towel rail", "Electrical"]
        assert merged[-1].final_price == 450.0
        assert merged[-1].key == "electrical"

    def test_saved_form_reloads_exactly(self):
        rows = [PricingSetupRow(key="tiling_premium", value=120), PricingSetupRow(key="cleaning", value=250)]

        reloaded = _rows_by_key(merge_setup_items([], rows))

        assert reloaded["tiling_premium"].value == 120.0
        assert reloaded["cleaning"].value == 250.0
        assert reloaded["tiling_budget"].value is None
