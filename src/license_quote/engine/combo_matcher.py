"""
Combo Matcher - Matches combo pricing rules against a sub-option selection.

Used by the quote engine to decide whether an item is priced as a bundle
instead of summing its selected sub-options.
"""
import logging
from typing import Iterable, Optional

from .models import Catalog, ComboRule, ItemSelection, LicenseItem, SubOption

logger = logging.getLogger(__name__)


def find_sub_option(item: Optional[LicenseItem], sub_option_id: str) -> Optional[SubOption]:
    """Get a sub-option of item by id, or None when either is unknown."""
    if item is None:
        return None
    return item.find_sub_option(sub_option_id)


def matching_combo_rule(
    catalog: Catalog,
    item: LicenseItem,
    selected_ids: Iterable[str]
) -> Optional[ComboRule]:
    """
    Find the combo rule activated by selected_ids on this item.

    A rule matches only when its whole trigger set is selected; partial
    matches never activate it. When several rules match, the lowest priority
    value wins, then the largest trigger set.
    """
    selected = frozenset(selected_ids)
    matched = [
        rule for rule in catalog.combo_rules_for(item.item_id)
        if rule.is_triggered_by(selected)
    ]
    if not matched:
        return None

    matched.sort(key=lambda r: (r.priority, -len(r.trigger_sub_option_ids)))
    return matched[0]


def apply_quantity_rule(rule: ComboRule, quantities: Iterable[int]) -> int:
    """Combine the trigger sub-options' license counts per the rule."""
    quantities = list(quantities)

    if rule.quantity_rule == 'max':
        return max(quantities)
    elif rule.quantity_rule == 'min':
        return min(quantities)
    elif rule.quantity_rule == 'sum':
        return sum(quantities)

    raise ValueError(f"Unknown quantity rule '{rule.quantity_rule}' on combo {rule.rule_id}")


def combined_quantity(catalog: Catalog, rule: ComboRule, selection: ItemSelection) -> int:
    """License count of an active combo, from its trigger sub-options."""
    quantities = [
        catalog.sub_option_quantity(selection, sub_option_id)
        for sub_option_id in sorted(rule.trigger_sub_option_ids)
    ]
    return apply_quantity_rule(rule, quantities)
