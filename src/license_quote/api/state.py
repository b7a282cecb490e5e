"""Shared API state: catalog and engine are built once per process."""
from ..config.settings import get_settings
from ..data.build_catalog import load_catalog
from ..engine import QuoteEngine

settings = get_settings()
catalog = load_catalog(settings)
engine = QuoteEngine(catalog, tax_rate=settings.tax_rate)
