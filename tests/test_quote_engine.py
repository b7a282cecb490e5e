"""
Quote engine behaviour against the shipped catalog.

cert1 = GitHub Enterprise (21/license, 50..130)
cert2 = GitHub Copilot (Enterprise 39, Business 19)
cert3 = GitHub Advance Security (Code 30 min 30, Secret 19 min 50, bundle 49)
"""
import pytest

from license_quote.engine import (
    compute_quote,
    line_total,
    price_of,
    quantity_of,
    select_only_sub_option,
    set_item_enabled,
    set_item_quantity,
    set_sub_option_quantity,
    toggle_sub_option,
)


def enable(catalog, state, *item_ids):
    for item_id in item_ids:
        state = set_item_enabled(catalog, state, item_id, True)
    return state


def with_security_bundle(catalog, state):
    """cert3 enabled with both Code Security and Secret Security selected."""
    state = enable(catalog, state, "cert3")
    return toggle_sub_option(catalog, state, "cert3", "secret-security")


def test_initial_quote_is_empty(catalog, state):
    totals = compute_quote(catalog, state)
    assert totals.subtotal == 0
    assert totals.tax == 0
    assert totals.total == 0
    assert totals.total_licenses == 0
    assert totals.lines == []


def test_enterprise_without_sub_options(catalog, state):
    """Scenario: 50 Enterprise licenses at 21."""
    state = enable(catalog, state, "cert1")
    totals = compute_quote(catalog, state)

    assert totals.subtotal == 1050
    assert totals.total_licenses == 50
    assert totals.lines[0].unit_price == 21
    assert totals.tax == pytest.approx(199.5)
    assert totals.total == pytest.approx(1249.5)


def test_single_sub_option(catalog, state):
    """Scenario: Copilot Enterprise alone, 20 × 39."""
    state = enable(catalog, state, "cert2")
    selection = state.item("cert2")

    assert price_of(catalog, selection) == 39
    assert quantity_of(catalog, selection) == 20
    assert line_total(catalog, selection) == 780
    assert compute_quote(catalog, state).subtotal == 780


def test_combo_activates_with_both_triggers(catalog, state):
    """Scenario: Code + Secret Security bundle, max(30, 50) × 49."""
    state = with_security_bundle(catalog, state)
    selection = state.item("cert3")

    assert price_of(catalog, selection) == 49
    assert quantity_of(catalog, selection) == 50
    assert line_total(catalog, selection) == 2450

    line = compute_quote(catalog, state).lines[0]
    assert line.combo_rule_id == "GHAS-BUNDLE"
    assert line.sub_lines == []


def test_combo_uses_clamped_sub_option_quantity(catalog, state):
    state = with_security_bundle(catalog, state)
    state = set_sub_option_quantity(catalog, state, "cert3", "code-security", 200)
    selection = state.item("cert3")

    assert selection.sub_option_quantities["code-security"] == 130
    assert quantity_of(catalog, selection) == 130
    assert line_total(catalog, selection) == 130 * 49


def test_partial_combo_never_activates(catalog, state):
    """Only Secret Security selected: priced on its own."""
    state = enable(catalog, state, "cert3")
    state = select_only_sub_option(catalog, state, "cert3", "secret-security")
    selection = state.item("cert3")

    assert price_of(catalog, selection) == 19
    assert quantity_of(catalog, selection) == 50
    assert line_total(catalog, selection) == 950
    assert compute_quote(catalog, state).lines[0].combo_rule_id is None


def test_combo_independent_of_selection_order(catalog, state):
    state = enable(catalog, state, "cert3")

    # code-security is pre-selected: add secret
    first = toggle_sub_option(catalog, state, "cert3", "secret-security")

    # clear, then select secret before code
    second = toggle_sub_option(catalog, state, "cert3", "code-security")
    second = toggle_sub_option(catalog, second, "cert3", "secret-security")
    second = toggle_sub_option(catalog, second, "cert3", "code-security")

    assert first.item("cert3").selected_sub_option_ids == second.item("cert3").selected_sub_option_ids
    assert compute_quote(catalog, first).subtotal == compute_quote(catalog, second).subtotal == 2450


def test_two_items_with_combo(catalog, state):
    """Scenario: Enterprise 1050 + bundle 2450."""
    state = enable(catalog, state, "cert1")
    state = with_security_bundle(catalog, state)
    totals = compute_quote(catalog, state)

    assert totals.subtotal == 3500
    assert totals.tax == pytest.approx(665)
    assert totals.total == pytest.approx(4165)
    assert totals.total_licenses == 100
    assert [line.item_id for line in totals.lines] == ["cert1", "cert3"]


def test_deselecting_from_combo_reverts_to_sum_pricing(catalog, state):
    """Scenario: toggling off Secret Security leaves Code Security priced alone."""
    state = with_security_bundle(catalog, state)
    state = toggle_sub_option(catalog, state, "cert3", "secret-security")
    selection = state.item("cert3")

    assert selection.selected_sub_option_ids == {"code-security"}
    assert price_of(catalog, selection) == 30
    assert quantity_of(catalog, selection) == 30
    assert line_total(catalog, selection) == 900


def test_multi_select_without_combo_stacks_display_price(catalog, state):
    """Display price stacks unit prices; money total stays per sub-option."""
    state = enable(catalog, state, "cert2")
    state = toggle_sub_option(catalog, state, "cert2", "copilot-business")
    state = set_sub_option_quantity(catalog, state, "cert2", "copilot-business", 60)
    selection = state.item("cert2")

    assert price_of(catalog, selection) == 39 + 19
    assert quantity_of(catalog, selection) == 20 + 60
    assert line_total(catalog, selection) == 20 * 39 + 60 * 19

    line = compute_quote(catalog, state).lines[0]
    assert [sub.sub_option_id for sub in line.sub_lines] == ["copilot-enterprise", "copilot-business"]
    assert line.line_total != line.unit_price * line.quantity


def test_no_sub_option_selected_falls_back_to_item(catalog, state):
    state = enable(catalog, state, "cert2")
    state = toggle_sub_option(catalog, state, "cert2", "copilot-enterprise")
    state = set_item_quantity(catalog, state, "cert2", 25)
    selection = state.item("cert2")

    assert selection.selected_sub_option_ids == frozenset()
    assert price_of(catalog, selection) == 45
    assert quantity_of(catalog, selection) == 25
    assert line_total(catalog, selection) == 25 * 45


def test_item_quantity_ignored_when_sub_options_selected(catalog, state):
    state = enable(catalog, state, "cert2")
    state = set_item_quantity(catalog, state, "cert2", 130)
    selection = state.item("cert2")

    assert quantity_of(catalog, selection) == 20
    assert line_total(catalog, selection) == 780


def test_disabled_item_contributes_nothing(catalog, state):
    state = enable(catalog, state, "cert1")
    state = with_security_bundle(catalog, state)
    state = set_sub_option_quantity(catalog, state, "cert3", "secret-security", 120)
    state = set_item_enabled(catalog, state, "cert3", False)
    totals = compute_quote(catalog, state)

    assert totals.subtotal == 1050
    assert totals.total_licenses == 50
    assert len(totals.lines) == 1

    # choices survive being disabled
    assert state.item("cert3").selected_sub_option_ids == {"code-security", "secret-security"}


def test_total_is_subtotal_plus_tax(catalog, state):
    state = enable(catalog, state, "cert1", "cert2", "cert3")
    state = set_item_quantity(catalog, state, "cert1", 77)
    totals = compute_quote(catalog, state)

    assert totals.tax == totals.subtotal * 0.19
    assert totals.total == totals.subtotal + totals.tax


def test_custom_tax_rate(catalog, state):
    state = enable(catalog, state, "cert1")
    totals = compute_quote(catalog, state, tax_rate=0.0)
    assert totals.tax == 0
    assert totals.total == 1050


def test_compute_quote_is_pure(catalog, state):
    state = enable(catalog, state, "cert1")
    state = with_security_bundle(catalog, state)
    snapshot = state

    first = compute_quote(catalog, state)
    second = compute_quote(catalog, state)

    assert first == second
    assert state == snapshot
    assert state.item("cert3").sub_option_quantities == {"code-security": 30, "secret-security": 50}


def test_quote_carries_catalog_hash_and_trace(engine, catalog, state):
    state = enable(catalog, state, "cert1")
    totals = engine.calculate(state)

    assert totals.catalog_hash == catalog.catalog_hash
    assert "Total" in totals.get_trace_text()
    assert "50 × 21.00" in totals.lines[0].get_trace_text()
    assert totals.to_summary_dict() == {
        "subtotal": totals.subtotal,
        "tax": totals.tax,
        "total": totals.total,
        "totalLicenses": 50,
    }


def test_unknown_item_in_state_is_skipped(engine, catalog, state):
    from license_quote.engine import ItemSelection, SelectionState

    state = SelectionState(items=state.items + (ItemSelection(item_id="ghost", enabled=True, quantity=10),))
    totals = engine.calculate(state)

    assert totals.subtotal == 0
    assert engine.price_of(state.item("ghost")) == 0
    assert engine.quantity_of(state.item("ghost")) == 0
