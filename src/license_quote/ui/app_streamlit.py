"""
Streamlit UI for the License Quote Calculator.

Features:
- License cards with enable toggle and quantity controls
- Sub-option selection with per-option license counts
- Combined view when a bundle price applies
- Live quote summary with IVA, email gate and CSV export
"""
import streamlit as st
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from license_quote.config.logging_config import setup_logging
from license_quote.config.settings import get_settings
from license_quote.data.build_catalog import load_catalog
from license_quote.engine import (
    QuoteEngine,
    initial_selection,
    select_only_sub_option,
    set_combo_quantity,
    set_item_enabled,
    set_item_quantity,
    set_sub_option_quantity,
    toggle_sub_option,
)
from license_quote.engine.combo_matcher import combined_quantity, matching_combo_rule
from license_quote.services.display import can_submit, email_error, format_price, quote_display, quote_to_frame


st.set_page_config(
    page_title="License Quote Calculator",
    layout="wide",
)


@st.cache_resource
def get_engine():
    """Get cached engine instance."""
    setup_logging()
    settings = get_settings()
    return QuoteEngine(load_catalog(settings), tax_rate=settings.tax_rate)


try:
    engine = get_engine()
    catalog = engine.catalog
except Exception as e:
    st.error(f"System Error: {e}")
    st.stop()


if 'selection' not in st.session_state:
    st.session_state.selection = initial_selection(catalog)


def apply(transition, *args):
    """Replace the session selection with the result of a transition."""
    st.session_state.selection = transition(catalog, st.session_state.selection, *args)


def apply_widget(transition, widget_key, *args):
    """Apply a transition using the widget's current value as the last argument."""
    apply(transition, *args, st.session_state[widget_key])


# ============================================================================
# HEADER
# ============================================================================
st.title("License Quote Calculator")
st.caption("Select the licenses you need and get a detailed quote")

col1, col2 = st.columns([1.8, 1.2], gap="large")


# ============================================================================
# LICENSE SELECTION
# ============================================================================
with col1:
    st.subheader("Select your licenses")

    for item in catalog.items:
        selection = st.session_state.selection.item(item.item_id)

        with st.container(border=True):
            st.checkbox(
                f"**{item.name}**",
                value=selection.enabled,
                key=f"enabled_{item.item_id}",
                on_change=apply_widget,
                args=(set_item_enabled, f"enabled_{item.item_id}", item.item_id),
            )
            st.caption(item.description)

            if not selection.enabled:
                continue

            rule = None
            if item.has_sub_options and selection.selected_sub_option_ids:
                rule = matching_combo_rule(catalog, item, selection.selected_sub_option_ids)

            if not item.has_sub_options:
                st.number_input(
                    "Licenses",
                    min_value=item.min_quantity,
                    max_value=item.max_quantity,
                    value=selection.quantity,
                    step=1,
                    key=f"qty_{item.item_id}",
                    on_change=apply_widget,
                    args=(set_item_quantity, f"qty_{item.item_id}", item.item_id),
                )
                st.markdown(f"**Total:** {format_price(engine.line_total(selection))}")

            elif rule is not None:
                # Combined view
                st.markdown(f"##### {rule.name or rule.rule_id}")
                st.caption(f"{format_price(rule.combo_unit_price)} / license")

                keep_cols = st.columns(len(rule.trigger_sub_option_ids))
                for keep_col, sub_option_id in zip(keep_cols, sorted(rule.trigger_sub_option_ids)):
                    option = item.find_sub_option(sub_option_id)
                    keep_col.button(
                        f"Only {option.name}",
                        key=f"only_{item.item_id}_{sub_option_id}",
                        on_click=apply,
                        args=(select_only_sub_option, item.item_id, sub_option_id),
                        use_container_width=True,
                    )

                st.number_input(
                    "Licenses",
                    min_value=rule.min_quantity,
                    max_value=rule.max_quantity,
                    value=combined_quantity(catalog, rule, selection),
                    step=1,
                    key=f"combo_qty_{item.item_id}",
                    on_change=apply_widget,
                    args=(set_combo_quantity, f"combo_qty_{item.item_id}", item.item_id),
                )
                st.markdown(f"**Total:** {format_price(engine.line_total(selection))}")

            else:
                for option in item.sub_options:
                    selected = selection.is_selected(option.sub_option_id)
                    st.checkbox(
                        f"{option.name} ({format_price(option.unit_price)} / license)",
                        value=selected,
                        key=f"opt_{item.item_id}_{option.sub_option_id}",
                        on_change=apply,
                        args=(toggle_sub_option, item.item_id, option.sub_option_id),
                    )
                    if selected:
                        minimum, maximum = catalog.sub_option_bounds(option.sub_option_id)
                        quantity = catalog.sub_option_quantity(selection, option.sub_option_id)
                        key = f"opt_qty_{item.item_id}_{option.sub_option_id}"
                        st.number_input(
                            f"{option.name} licenses",
                            min_value=minimum,
                            max_value=maximum,
                            value=quantity,
                            step=1,
                            key=key,
                            on_change=apply_widget,
                            args=(set_sub_option_quantity, key, item.item_id, option.sub_option_id),
                        )
                        st.caption(f"Total: {format_price(quantity * option.unit_price)}")


# ============================================================================
# QUOTE SUMMARY
# ============================================================================
with col2:
    st.subheader("Quote Summary")

    with st.container(border=True):
        totals = engine.calculate(st.session_state.selection)
        display = quote_display(totals)

        if not totals.lines:
            st.info("No licenses selected")
            st.caption("Enable a license to begin building a quote.")
        else:
            for line in display["lines"]:
                st.markdown(f"**{line['name']}**")
                if line["sub_lines"]:
                    for sub in line["sub_lines"]:
                        st.caption(f"{sub['name']}: {sub['licenses']} licenses × {sub['unit_price']} = {sub['line_total']}")
                else:
                    st.caption(f"{line['licenses']} licenses × {line['unit_price']} = {line['line_total']}")

            st.divider()

            m1, m2 = st.columns(2)
            m1.metric("Total", display["total"])
            m2.metric("Licenses", display["total_licenses"])

            st.caption(f"**Subtotal:** {display['subtotal']}")
            st.caption(f"**{display['tax_label']}:** {display['tax']}")

            st.divider()

            email = st.text_input("Enter your email to get the quote", placeholder="name@example.com")
            error = email_error(email)
            if error:
                st.error(error)

            btn_col1, btn_col2 = st.columns(2)
            with btn_col1:
                if st.button("Get Quote", type="primary", disabled=not can_submit(email), use_container_width=True):
                    st.success(f"Quote for {display['total_licenses']} licenses ready: {display['total']}")
            with btn_col2:
                st.download_button(
                    "📥 CSV",
                    data=quote_to_frame(totals).to_csv(index=False),
                    file_name="license_quote.csv",
                    mime="text/csv",
                    disabled=not can_submit(email),
                    use_container_width=True,
                )

            if st.button("🗑️ Reset", use_container_width=True):
                # Widget keys would otherwise keep their old values
                for key in list(st.session_state.keys()):
                    del st.session_state[key]
                st.session_state.selection = initial_selection(catalog)
                st.rerun()

    with st.expander("🔍 Calculation Details"):
        st.text(totals.get_trace_text())
        for line in totals.lines:
            st.caption(f"**{line.name}**")
            st.text(line.get_trace_text())
