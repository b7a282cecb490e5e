import pytest
import sys
import os

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from license_quote.config.settings import Settings
from license_quote.data.build_catalog import load_catalog
from license_quote.engine import QuoteEngine, initial_selection


@pytest.fixture(scope="session")
def catalog():
    """The catalog shipped with the package."""
    return load_catalog(Settings.load())


@pytest.fixture
def engine(catalog):
    return QuoteEngine(catalog)


@pytest.fixture
def state(catalog):
    """Fresh session-start selection."""
    return initial_selection(catalog)
