"""
Selection state transitions.

Every user action (enable an item, toggle a sub-option, change a quantity)
is a pure function: it takes the catalog and the current SelectionState and
returns a new SelectionState. Invalid input is normalised, never rejected:
quantities are clamped into their bounds and unknown ids leave the state
unchanged.
"""
import logging
import math
from dataclasses import replace
from typing import Any

from .combo_matcher import find_sub_option, matching_combo_rule
from .models import Catalog, ItemSelection, SelectionState

logger = logging.getLogger(__name__)


def clamp_quantity(value: Any, minimum: int, maximum: int) -> int:
    """
    Coerce a requested license count into [minimum, maximum].

    Numeric strings and floats are truncated to whole licenses. None,
    booleans, NaN and anything non-numeric fall back to minimum; infinities
    go to the nearest bound.
    """
    if value is None or isinstance(value, bool):
        return minimum

    if isinstance(value, int):
        number = value
    else:
        if isinstance(value, str):
            value = value.strip()
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            logger.debug("Non-numeric quantity %r, using minimum %s", value, minimum)
            return minimum
        if math.isnan(number):
            return minimum
        if math.isinf(number):
            return maximum if number > 0 else minimum
        number = int(number)

    return max(minimum, min(maximum, number))


def initial_selection(catalog: Catalog) -> SelectionState:
    """
    Build the session-start state.

    Every item is disabled, default sub-options are pre-selected and all
    quantities start at their defaults (or minimums).
    """
    items = []
    for item in catalog.items:
        quantities = {}
        for option in item.sub_options:
            minimum, maximum = catalog.sub_option_bounds(option.sub_option_id)
            requested = option.default_quantity if option.default_quantity is not None else minimum
            quantities[option.sub_option_id] = clamp_quantity(requested, minimum, maximum)

        requested = item.default_quantity if item.default_quantity is not None else item.min_quantity
        items.append(ItemSelection(
            item_id=item.item_id,
            enabled=False,
            quantity=clamp_quantity(requested, item.min_quantity, item.max_quantity),
            selected_sub_option_ids=item.default_sub_option_ids,
            sub_option_quantities=quantities,
        ))

    return SelectionState(items=tuple(items))


def normalize_selection(catalog: Catalog, state: SelectionState) -> SelectionState:
    """
    Bring an externally supplied state in line with the catalog.

    Items are reordered to catalog order and missing ones take their
    session-start defaults. Unknown items and sub-option ids are dropped and
    every quantity is clamped into its bounds.
    """
    defaults = initial_selection(catalog)
    items = []
    for item in catalog.items:
        selection = state.item(item.item_id) or defaults.item(item.item_id)
        known = {option.sub_option_id for option in item.sub_options}

        quantities = {}
        for option in item.sub_options:
            sub_option_id = option.sub_option_id
            minimum, maximum = catalog.sub_option_bounds(sub_option_id)
            requested = selection.sub_option_quantities.get(sub_option_id)
            if requested is None:
                requested = defaults.item(item.item_id).sub_option_quantities[sub_option_id]
            quantities[sub_option_id] = clamp_quantity(requested, minimum, maximum)

        items.append(ItemSelection(
            item_id=item.item_id,
            enabled=bool(selection.enabled),
            quantity=clamp_quantity(selection.quantity, item.min_quantity, item.max_quantity),
            selected_sub_option_ids=selection.selected_sub_option_ids & known,
            sub_option_quantities=quantities,
        ))

    return SelectionState(items=tuple(items))


def set_item_enabled(catalog: Catalog, state: SelectionState, item_id: str, enabled: bool) -> SelectionState:
    """Include or exclude an item from the quote; its other choices are kept."""
    selection = state.item(item_id)
    if selection is None or catalog.find_item(item_id) is None:
        logger.debug("Ignoring enable for unknown item %s", item_id)
        return state
    return state.with_item(replace(selection, enabled=bool(enabled)))


def set_item_quantity(catalog: Catalog, state: SelectionState, item_id: str, value: Any) -> SelectionState:
    """Set the license count of an item, clamped into its bounds."""
    selection = state.item(item_id)
    item = catalog.find_item(item_id)
    if selection is None or item is None:
        logger.debug("Ignoring quantity for unknown item %s", item_id)
        return state

    quantity = clamp_quantity(value, item.min_quantity, item.max_quantity)
    return state.with_item(replace(selection, quantity=quantity))


def toggle_sub_option(catalog: Catalog, state: SelectionState, item_id: str, sub_option_id: str) -> SelectionState:
    """
    Select a sub-option if it is not selected, otherwise deselect it.

    Any number of sub-options may be selected at once; combo rules are
    evaluated against whatever set results.
    """
    selection = state.item(item_id)
    if selection is None or find_sub_option(catalog.find_item(item_id), sub_option_id) is None:
        logger.debug("Ignoring toggle of %s on %s", sub_option_id, item_id)
        return state

    selected = selection.selected_sub_option_ids ^ {sub_option_id}
    return state.with_item(replace(selection, selected_sub_option_ids=selected))


def select_only_sub_option(catalog: Catalog, state: SelectionState, item_id: str, sub_option_id: str) -> SelectionState:
    """
    Leave exactly one sub-option selected.

    This is how the combined view backs out of a combo: removing one of the
    bundled options keeps only the other.
    """
    selection = state.item(item_id)
    if selection is None or find_sub_option(catalog.find_item(item_id), sub_option_id) is None:
        logger.debug("Ignoring select-only of %s on %s", sub_option_id, item_id)
        return state

    return state.with_item(replace(selection, selected_sub_option_ids=frozenset({sub_option_id})))


def set_sub_option_quantity(
    catalog: Catalog,
    state: SelectionState,
    item_id: str,
    sub_option_id: str,
    value: Any
) -> SelectionState:
    """Set the license count of one sub-option, clamped into [its minimum, shared maximum]."""
    selection = state.item(item_id)
    if selection is None or find_sub_option(catalog.find_item(item_id), sub_option_id) is None:
        logger.debug("Ignoring quantity of %s on %s", sub_option_id, item_id)
        return state

    minimum, maximum = catalog.sub_option_bounds(sub_option_id)
    quantity = clamp_quantity(value, minimum, maximum)
    return state.with_item(selection.with_sub_option_quantity(sub_option_id, quantity))


def set_combo_quantity(catalog: Catalog, state: SelectionState, item_id: str, value: Any) -> SelectionState:
    """
    Set one shared license count on every sub-option of the active combo.

    The value is clamped into the combo's own bounds, then each trigger
    sub-option is clamped into its bounds. Without an active combo the state
    is returned unchanged.
    """
    selection = state.item(item_id)
    item = catalog.find_item(item_id)
    if selection is None or item is None:
        return state

    rule = matching_combo_rule(catalog, item, selection.selected_sub_option_ids)
    if rule is None:
        logger.debug("No active combo on %s, ignoring combined quantity", item_id)
        return state

    shared = clamp_quantity(value, rule.min_quantity, rule.max_quantity)
    for sub_option_id in sorted(rule.trigger_sub_option_ids):
        state = set_sub_option_quantity(catalog, state, item_id, sub_option_id, shared)
    return state
