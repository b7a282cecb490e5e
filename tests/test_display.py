"""Display formatting, email gate and CSV export."""
import pytest

from license_quote.engine import compute_quote, set_item_enabled, toggle_sub_option
from license_quote.services.display import (
    EMAIL_ERROR,
    can_submit,
    email_error,
    format_price,
    quote_display,
    quote_to_frame,
)


@pytest.mark.parametrize("amount, expected", [
    (0, "$ 0"),
    (21, "$ 21"),
    (1050, "$ 1.050"),
    (199.5, "$ 200"),
    (4165.5, "$ 4.166"),
    (1234567, "$ 1.234.567"),
    (-1500, "-$ 1.500"),
])
def test_format_price(amount, expected):
    assert format_price(amount) == expected


def test_format_price_symbol():
    assert format_price(2450, symbol="COP") == "COP 2.450"


def test_format_price_uses_configured_symbol(monkeypatch, catalog, state):
    from license_quote.config import settings as settings_module

    monkeypatch.setattr(settings_module, "_settings", settings_module.Settings(
        catalog_dir=settings_module.get_package_root() / 'data' / 'catalog',
        currency_symbol="COP",
    ))
    state = set_item_enabled(catalog, state, "cert1", True)

    assert format_price(1050) == "COP 1.050"
    assert quote_display(compute_quote(catalog, state))["total"] == "COP 1.250"


def test_currency_symbol_from_environment(monkeypatch):
    from license_quote.config.settings import Settings

    monkeypatch.setenv("LICENSE_QUOTE_CURRENCY_SYMBOL", "COP$")
    assert Settings.load().currency_symbol == "COP$"


@pytest.mark.parametrize("email", ["ana@example.com", "a.b@sub.domain.co", "x@y.z"])
def test_valid_email(email):
    assert email_error(email) is None
    assert can_submit(email)


@pytest.mark.parametrize("email", ["ana", "ana@example", "@example.com", "ana @example.com", "ana@@example.com"])
def test_invalid_email(email):
    assert email_error(email) == EMAIL_ERROR
    assert not can_submit(email)


def test_empty_email_shows_no_error_but_blocks_submit():
    assert email_error("") is None
    assert email_error(None) is None
    assert not can_submit("")


def test_quote_display(catalog, state):
    state = set_item_enabled(catalog, state, "cert1", True)
    display = quote_display(compute_quote(catalog, state))

    assert display["subtotal"] == "$ 1.050"
    assert display["tax"] == "$ 200"
    assert display["total"] == "$ 1.250"
    assert display["tax_label"] == "IVA (19%)"
    assert display["total_licenses"] == 50
    assert display["lines"][0]["unit_price"] == "$ 21"


def test_quote_to_frame(catalog, state):
    state = set_item_enabled(catalog, state, "cert1", True)
    state = set_item_enabled(catalog, state, "cert2", True)
    state = toggle_sub_option(catalog, state, "cert2", "copilot-business")
    state = set_item_enabled(catalog, state, "cert3", True)
    state = toggle_sub_option(catalog, state, "cert3", "secret-security")

    df = quote_to_frame(compute_quote(catalog, state))

    assert list(df.columns) == ["Item", "Option", "Licenses", "Unit Price", "Line Total"]
    assert len(df) == 4
    assert df["Line Total"].sum() == 1050 + 780 + 380 + 2450
    assert df.iloc[-1]["Option"] == "GHAS-BUNDLE"


def test_quote_to_frame_empty(catalog, state):
    df = quote_to_frame(compute_quote(catalog, state))
    assert df.empty
    assert list(df.columns) == ["Item", "Option", "Licenses", "Unit Price", "Line Total"]
