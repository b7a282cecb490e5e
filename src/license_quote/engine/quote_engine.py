"""
Quote Engine - Core quotation logic with traceability.

Computes, for a selection state:
- Effective per-license price of each item (display price)
- Effective license count of each item
- Line totals, with combo pricing overriding the sum of sub-options
- Subtotal, IVA and grand total across enabled items

The engine keeps no state between calls: identical inputs always produce
identical results and the inputs are never modified.
"""
import logging
from typing import Optional

from .combo_matcher import combined_quantity, matching_combo_rule
from .models import (
    Catalog,
    ComboRule,
    ItemSelection,
    LicenseItem,
    QuoteLine,
    QuoteTotals,
    SelectionState,
    SubOption,
    SubOptionLine,
)

logger = logging.getLogger(__name__)

TAX_RATE = 0.19  # IVA


class QuoteEngine:
    """
    Resolves item prices, license counts and quote totals for one catalog.

    Resolution order for an item:
    1. No sub-options (or none of them selected): item price × item quantity
    2. Selected sub-options trigger a combo rule: combo price × combined quantity
    3. Otherwise: each selected sub-option priced on its own quantity
    """

    def __init__(self, catalog: Catalog, tax_rate: float = TAX_RATE):
        self.catalog = catalog
        self.tax_rate = tax_rate

    def _selected_options(self, item: LicenseItem, selection: ItemSelection) -> list[SubOption]:
        """Selected sub-options in catalog order; unknown ids are ignored."""
        return [
            option for option in item.sub_options
            if selection.is_selected(option.sub_option_id)
        ]

    def _active_combo(self, item: LicenseItem, selection: ItemSelection) -> Optional[ComboRule]:
        if not self._selected_options(item, selection):
            return None
        return matching_combo_rule(self.catalog, item, selection.selected_sub_option_ids)

    def price_of(self, selection: ItemSelection) -> float:
        """
        Get the per-license price shown for an item.

        Without a combo, several selected sub-options stack their unit
        prices; the money total is still computed per sub-option.
        """
        item = self.catalog.find_item(selection.item_id)
        if item is None:
            return 0.0

        options = self._selected_options(item, selection)
        if not options:
            return item.unit_price

        rule = self._active_combo(item, selection)
        if rule is not None:
            return rule.combo_unit_price

        return sum(option.unit_price for option in options)

    def quantity_of(self, selection: ItemSelection) -> int:
        """Get the effective license count for an item."""
        item = self.catalog.find_item(selection.item_id)
        if item is None:
            return 0

        options = self._selected_options(item, selection)
        if not options:
            return selection.quantity

        rule = self._active_combo(item, selection)
        if rule is not None:
            return combined_quantity(self.catalog, rule, selection)

        return sum(
            self.catalog.sub_option_quantity(selection, option.sub_option_id)
            for option in options
        )

    def line_total(self, selection: ItemSelection) -> float:
        """Get the money total contributed by an item, ignoring enabled."""
        line = self._calculate_line(selection)
        return line.line_total if line else 0.0

    def calculate(self, state: SelectionState) -> QuoteTotals:
        """
        Calculate the quote for all enabled items.

        Args:
            state: Current selection state

        Returns:
            QuoteTotals with lines, trace and exact (unrounded) figures
        """
        result = QuoteTotals(
            subtotal=0.0,
            tax=0.0,
            total=0.0,
            total_licenses=0,
            tax_rate=self.tax_rate,
            catalog_hash=self.catalog.catalog_hash,
        )

        enabled = state.enabled_items()
        result.add_trace("Selection", "Enabled items", str(len(enabled)))

        for selection in enabled:
            line = self._calculate_line(selection)
            if line is None:
                logger.debug("Skipping unknown item %s", selection.item_id)
                result.add_trace("Item Lookup", f"Unknown item {selection.item_id} skipped")
                continue

            result.lines.append(line)
            result.subtotal += line.line_total
            result.total_licenses += line.quantity

        result.tax = result.subtotal * self.tax_rate
        result.total = result.subtotal + result.tax

        result.add_trace("Subtotal", f"{len(result.lines)} line(s)", f"{result.subtotal:.2f}")
        result.add_trace("Tax", f"IVA {self.tax_rate:.0%}", f"{result.tax:.2f}")
        result.add_trace("Total", "Subtotal + tax", f"{result.total:.2f}")

        return result

    def _calculate_line(self, selection: ItemSelection) -> Optional[QuoteLine]:
        """Calculate a single item line with trace."""
        item = self.catalog.find_item(selection.item_id)
        if item is None:
            return None

        line = QuoteLine(
            item_id=item.item_id,
            name=item.name,
            unit_price=self.price_of(selection),
            quantity=self.quantity_of(selection),
            line_total=0.0,
        )

        options = self._selected_options(item, selection)
        if not options:
            line.line_total = selection.quantity * item.unit_price
            line.add_trace("Item Pricing", f"{selection.quantity} × {item.unit_price:.2f}", f"{line.line_total:.2f}")
            return line

        rule = self._active_combo(item, selection)
        if rule is not None:
            line.combo_rule_id = rule.rule_id
            line.line_total = line.quantity * rule.combo_unit_price
            logger.debug("Combo %s active on %s", rule.rule_id, item.item_id)
            line.add_trace("Combo Applied", f"{rule.name or rule.rule_id} ({rule.quantity_rule} of trigger quantities)", str(line.quantity))
            line.add_trace("Extension", f"{line.quantity} × {rule.combo_unit_price:.2f}", f"{line.line_total:.2f}")
            return line

        for option in options:
            quantity = self.catalog.sub_option_quantity(selection, option.sub_option_id)
            sub_line = SubOptionLine(
                sub_option_id=option.sub_option_id,
                name=option.name,
                quantity=quantity,
                unit_price=option.unit_price,
                line_total=quantity * option.unit_price,
            )
            line.sub_lines.append(sub_line)
            line.line_total += sub_line.line_total
            line.add_trace("Sub-option", f"{option.name}: {quantity} × {option.unit_price:.2f}", f"{sub_line.line_total:.2f}")

        return line


def price_of(catalog: Catalog, selection: ItemSelection) -> float:
    """Display price per license for one item."""
    return QuoteEngine(catalog).price_of(selection)


def quantity_of(catalog: Catalog, selection: ItemSelection) -> int:
    """Effective license count for one item."""
    return QuoteEngine(catalog).quantity_of(selection)


def line_total(catalog: Catalog, selection: ItemSelection) -> float:
    """Money total for one item."""
    return QuoteEngine(catalog).line_total(selection)


def compute_quote(catalog: Catalog, state: SelectionState, tax_rate: float = TAX_RATE) -> QuoteTotals:
    """Compute subtotal, tax, total and license count for a selection."""
    return QuoteEngine(catalog, tax_rate=tax_rate).calculate(state)
