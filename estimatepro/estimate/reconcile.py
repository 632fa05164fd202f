"""Pricing setup reconciliation.

Maps the pricing setup catalog onto a builder's stored pricing items so
previously entered prices repopulate the form, and turns submitted form rows
back into pricing items.

Stored items saved through the form carry the catalog ``key`` and are found by
exact lookup. Items saved before keys existed fall back to loose matching:
the first item whose name matches (exact or substring either way, ignoring
case), whose applicability matches (ignoring case, blank meaning "All
estimates") and whose price type matches.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from estimatepro.core.coerce import to_text
from estimatepro.estimate.catalog import CATALOG_BY_KEY, PRICING_CATALOG, CatalogRow
from estimatepro.models import (
    PriceType,
    PricingItem,
    PricingMode,
    PricingSetupRow,
)

DEFAULT_APPLICABILITY = "All estimates"


def names_match(stored: str | None, expected: str | None) -> bool:
    a = to_text(stored).lower()
    b = to_text(expected).lower()
    if not a or not b:
        return False
    return a == b or a in b or b in a


def applicability_matches(stored: str | None, expected: str | None) -> bool:
    a = to_text(stored) or DEFAULT_APPLICABILITY
    b = to_text(expected) or DEFAULT_APPLICABILITY
    return a == b or a.lower() == b.lower()


def find_stored_item(row: CatalogRow, items: Sequence[PricingItem]) -> PricingItem | None:
    """Stored item representing a catalog row, or None."""
    for item in items:
        if item.key == row.key:
            return item
    for item in items:
        # Items keyed to another catalog row are never borrowed
        if item.key and item.key != row.key:
            continue
        if (
            names_match(item.item_name, row.item_name)
            and applicability_matches(item.applicability, row.applicability)
            and item.price_type == row.price_type
        ):
            return item
    return None


def _seed_value(row: CatalogRow, item: PricingItem) -> float | None:
    if row.price_type == PriceType.PERCENTAGE:
        return item.markup_percent
    return item.final_price if item.final_price is not None else item.base_cost


def reconcile_catalog(
    items: Sequence[PricingItem],
    catalog: Iterable[CatalogRow] = PRICING_CATALOG,
) -> list[PricingSetupRow]:
    """Build the pricing setup form, seeding each row from stored items.

    Rows with no stored counterpart start blank and active.
    """
    rows = []
    for row in catalog:
        item = find_stored_item(row, items)
        rows.append(
            PricingSetupRow(
                key=row.key,
                item_name=row.item_name,
                applicability=row.applicability,
                price_type=row.price_type,
                section=row.section,
                value=_seed_value(row, item) if item else None,
                is_active=item.is_active if item else True,
            )
        )
    return rows


def setup_rows_to_items(
    rows: Iterable[PricingSetupRow],
    mode: PricingMode = PricingMode.FINAL,
) -> list[PricingItem]:
    """Turn submitted form rows into keyed pricing items.

    Unknown keys and rows left blank are skipped. Names, applicability and
    price types always come from the catalog, never from the form.
    """
    items = []
    for form_row in rows:
        row = CATALOG_BY_KEY.get(form_row.key)
        if row is None or form_row.value is None:
            continue
        item = PricingItem(
            key=row.key,
            item_name=row.item_name,
            applicability=row.applicability,
            price_type=row.price_type,
            is_active=form_row.is_active,
        )
        if row.price_type == PriceType.PERCENTAGE:
            item.markup_percent = form_row.value
        elif mode == PricingMode.BASE:
            item.base_cost = form_row.value
        else:
            item.final_price = form_row.value
        items.append(item)
    return items


def merge_setup_items(
    existing: Sequence[PricingItem],
    rows: Iterable[PricingSetupRow],
    mode: PricingMode = PricingMode.FINAL,
) -> list[PricingItem]:
    """Replace the catalog-backed part of a pricing table with submitted rows.

    Stored items that represent a catalog row (by key or loose match) are
    dropped and replaced. Every other item, including the leading base
    default row, keeps its place ahead of the catalog items.
    """
    superseded = set()
    for row in PRICING_CATALOG:
        item = find_stored_item(row, existing)
        if item is not None:
            superseded.add(id(item))
    kept = [item for item in existing if id(item) not in superseded]
    return kept + setup_rows_to_items(rows, mode)
