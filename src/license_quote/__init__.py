"""
License Quote Package

Quotation engine for software license bundles.
Resolves per-item price and license count from a selection, applies combo
pricing for sub-option bundles, and totals the quote with IVA.
"""

__version__ = "1.0.0"
