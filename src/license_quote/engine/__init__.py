"""Engine subpackage - catalog model, selection transitions and quote logic."""
from .quote_engine import QuoteEngine, compute_quote, price_of, quantity_of, line_total
from .models import Catalog, LicenseItem, SubOption, ComboRule, ItemSelection, SelectionState, QuoteTotals
from .selection import (
    initial_selection,
    normalize_selection,
    set_item_enabled,
    set_item_quantity,
    toggle_sub_option,
    select_only_sub_option,
    set_sub_option_quantity,
    set_combo_quantity,
)

__all__ = [
    'QuoteEngine', 'compute_quote', 'price_of', 'quantity_of', 'line_total',
    'Catalog', 'LicenseItem', 'SubOption', 'ComboRule', 'ItemSelection', 'SelectionState', 'QuoteTotals',
    'initial_selection', 'normalize_selection', 'set_item_enabled', 'set_item_quantity', 'toggle_sub_option',
    'select_only_sub_option', 'set_sub_option_quantity', 'set_combo_quantity',
]
