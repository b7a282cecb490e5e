"""
Catalog Builder - Loads license items, sub-options and combo rules from CSV.

The three definition files live in the configured catalog directory:
- items.csv: purchasable license items and their quantity bounds
- sub_options.csv: tiers/modules offered under an item
- combo_rules.csv: bundle prices triggered by a set of sub-options

Definition problems raise CatalogError at load time; nothing downstream
has to defend against a malformed catalog.
"""
import hashlib
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.models import Catalog, ComboRule, LicenseItem, SubOption

logger = logging.getLogger(__name__)

ITEM_COLUMNS = ['item_id', 'name', 'unit_price', 'min_quantity', 'max_quantity']
SUB_OPTION_COLUMNS = ['item_id', 'sub_option_id', 'name', 'unit_price']
COMBO_RULE_COLUMNS = ['rule_id', 'item_id', 'trigger_sub_option_ids', 'combo_unit_price']

TRIGGER_SEPARATOR = '|'


class CatalogError(ValueError):
    """Raised when the catalog definition files are missing or inconsistent."""


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def _read_definitions(path: Path, required_columns: list[str]) -> pd.DataFrame:
    """Read a definition CSV as stripped strings, checking required columns."""
    if not path.exists():
        raise CatalogError(f"{path.name} not found at {path}.")

    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except pd.errors.EmptyDataError:
        raise CatalogError(f"{path.name} is empty.")
    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise CatalogError(f"{path.name} is missing columns: {', '.join(missing)}")

    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()
    return df


def _number(row: pd.Series, column: str, source: str, cast=float, default=None):
    """Parse a numeric cell; blank cells give default."""
    raw = row.get(column, '')
    if raw == '':
        if default is None:
            raise CatalogError(f"{source}: '{column}' is required")
        return default
    try:
        value = float(raw)
        if not math.isfinite(value):
            raise ValueError(raw)
        return int(value) if cast is int else cast(value)
    except (ValueError, OverflowError):
        raise CatalogError(f"{source}: '{column}' must be numeric, got '{raw}'")


def _optional_int(row: pd.Series, column: str, source: str) -> Optional[int]:
    if row.get(column, '') == '':
        return None
    return _number(row, column, source, cast=int)


def _flag(row: pd.Series, column: str) -> bool:
    return row.get(column, '').lower() in ('true', '1', 'yes', 'y')


def _build_sub_options(df: pd.DataFrame, default_min: int) -> dict[str, list[tuple[SubOption, bool]]]:
    """Group sub-options by item id, keeping file order."""
    by_item: dict[str, list[tuple[SubOption, bool]]] = {}
    seen = set()

    for _, row in df.iterrows():
        sub_option_id = row['sub_option_id']
        source = f"sub_options.csv [{sub_option_id}]"

        if not sub_option_id:
            raise CatalogError("sub_options.csv: blank sub_option_id")
        if sub_option_id in seen:
            raise CatalogError(f"{source}: duplicate sub_option_id")
        seen.add(sub_option_id)

        option = SubOption(
            sub_option_id=sub_option_id,
            name=row['name'],
            unit_price=_number(row, 'unit_price', source),
            min_quantity=_number(row, 'min_quantity', source, cast=int, default=default_min),
            default_quantity=_optional_int(row, 'default_quantity', source),
        )
        if option.unit_price < 0:
            raise CatalogError(f"{source}: unit_price cannot be negative")

        by_item.setdefault(row['item_id'], []).append((option, _flag(row, 'default_selected')))

    return by_item


def _build_items(df: pd.DataFrame, sub_options: dict) -> list[LicenseItem]:
    items = []
    seen = set()

    for _, row in df.iterrows():
        item_id = row['item_id']
        source = f"items.csv [{item_id}]"

        if not item_id:
            raise CatalogError("items.csv: blank item_id")
        if item_id in seen:
            raise CatalogError(f"{source}: duplicate item_id")
        seen.add(item_id)

        options = sub_options.get(item_id, [])
        item = LicenseItem(
            item_id=item_id,
            name=row['name'],
            description=row.get('description', ''),
            unit_price=_number(row, 'unit_price', source),
            min_quantity=_number(row, 'min_quantity', source, cast=int),
            max_quantity=_number(row, 'max_quantity', source, cast=int),
            default_quantity=_optional_int(row, 'default_quantity', source),
            sub_options=tuple(option for option, _ in options),
            default_sub_option_ids=frozenset(
                option.sub_option_id for option, selected in options if selected
            ),
        )

        if item.unit_price < 0:
            raise CatalogError(f"{source}: unit_price cannot be negative")
        if item.min_quantity > item.max_quantity:
            raise CatalogError(f"{source}: min_quantity {item.min_quantity} exceeds max_quantity {item.max_quantity}")
        items.append(item)

    orphans = set(sub_options) - seen
    if orphans:
        raise CatalogError(f"sub_options.csv references unknown items: {', '.join(sorted(orphans))}")

    return items


def _build_combo_rules(df: pd.DataFrame, items: list[LicenseItem], settings: Settings) -> list[ComboRule]:
    items_by_id = {item.item_id: item for item in items}
    rules = []
    seen = set()

    for _, row in df.iterrows():
        rule_id = row['rule_id']
        source = f"combo_rules.csv [{rule_id}]"

        if rule_id in seen:
            raise CatalogError(f"{source}: duplicate rule_id")
        seen.add(rule_id)

        item = items_by_id.get(row['item_id'])
        if item is None:
            raise CatalogError(f"{source}: unknown item '{row['item_id']}'")

        triggers = frozenset(
            t.strip() for t in row['trigger_sub_option_ids'].split(TRIGGER_SEPARATOR) if t.strip()
        )
        unknown = [t for t in sorted(triggers) if item.find_sub_option(t) is None]
        if unknown:
            raise CatalogError(f"{source}: {item.item_id} has no sub-options {', '.join(unknown)}")

        try:
            rule = ComboRule(
                rule_id=rule_id,
                item_id=item.item_id,
                name=row.get('name', ''),
                trigger_sub_option_ids=triggers,
                combo_unit_price=_number(row, 'combo_unit_price', source),
                quantity_rule=row.get('quantity_rule', '') or 'max',
                min_quantity=_number(row, 'min_quantity', source, cast=int, default=settings.default_sub_option_min),
                max_quantity=_number(row, 'max_quantity', source, cast=int, default=settings.sub_option_max_quantity),
                priority=_number(row, 'priority', source, cast=int, default=50),
            )
        except ValueError as e:
            if isinstance(e, CatalogError):
                raise
            raise CatalogError(f"{source}: {e}") from e

        if rule.min_quantity > rule.max_quantity:
            raise CatalogError(f"{source}: min_quantity {rule.min_quantity} exceeds max_quantity {rule.max_quantity}")
        rules.append(rule)

    return rules


def load_catalog(settings: Optional[Settings] = None) -> Catalog:
    """
    Build the immutable catalog from the definition CSVs.

    Args:
        settings: Optional settings override

    Returns:
        Catalog with a short content hash of the three files
    """
    settings = settings or get_settings()

    items_df = _read_definitions(settings.items_csv, ITEM_COLUMNS)
    sub_options_df = _read_definitions(settings.sub_options_csv, SUB_OPTION_COLUMNS)

    # Combo rules are optional
    if settings.combo_rules_csv.exists():
        combo_df = _read_definitions(settings.combo_rules_csv, COMBO_RULE_COLUMNS)
    else:
        combo_df = pd.DataFrame(columns=COMBO_RULE_COLUMNS)

    sub_options = _build_sub_options(sub_options_df, settings.default_sub_option_min)
    items = _build_items(items_df, sub_options)
    rules = _build_combo_rules(combo_df, items, settings)

    digest = hashlib.sha256("".join(
        get_file_hash(p) for p in (settings.items_csv, settings.sub_options_csv, settings.combo_rules_csv)
    ).encode()).hexdigest()[:12]

    catalog = Catalog(
        items=tuple(items),
        combo_rules=tuple(rules),
        sub_option_max_quantity=settings.sub_option_max_quantity,
        default_sub_option_min=settings.default_sub_option_min,
        catalog_hash=digest,
    )
    logger.info(
        "Loaded catalog %s: %d items, %d sub-options, %d combo rules",
        digest, len(items), sum(len(i.sub_options) for i in items), len(rules)
    )
    return catalog


def build_catalog_report(settings: Optional[Settings] = None) -> dict:
    """
    Load the catalog and summarise it for the check script.

    Returns:
        Report dictionary with status, file hashes, metrics, warnings, errors
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {},
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    for key, path in (("items", settings.items_csv),
                      ("sub_options", settings.sub_options_csv),
                      ("combo_rules", settings.combo_rules_csv)):
        report["input_files"][key] = {"path": str(path), "hash": get_file_hash(path)}

    try:
        catalog = load_catalog(settings)
    except CatalogError as e:
        report["errors"].append(str(e))
        report["status"] = "failed"
        return report

    report["catalog_hash"] = catalog.catalog_hash
    report["metrics"] = {
        "item_count": len(catalog.items),
        "sub_option_count": sum(len(item.sub_options) for item in catalog.items),
        "combo_rule_count": len(catalog.combo_rules),
    }

    for item in catalog.items:
        if item.default_quantity is not None and not item.min_quantity <= item.default_quantity <= item.max_quantity:
            report["warnings"].append(
                f"{item.item_id}: default_quantity {item.default_quantity} outside "
                f"[{item.min_quantity}, {item.max_quantity}], will be clamped"
            )
        if item.has_sub_options and not item.default_sub_option_ids:
            report["warnings"].append(f"{item.item_id}: no sub-option is pre-selected")
        for option in item.sub_options:
            minimum, maximum = catalog.sub_option_bounds(option.sub_option_id)
            if option.default_quantity is not None and not minimum <= option.default_quantity <= maximum:
                report["warnings"].append(
                    f"{option.sub_option_id}: default_quantity {option.default_quantity} outside "
                    f"[{minimum}, {maximum}], will be clamped"
                )

    if not settings.combo_rules_csv.exists():
        report["warnings"].append("combo_rules.csv not found - no combo pricing")

    report["status"] = "success"
    return report


if __name__ == "__main__":
    print(build_catalog_report())
