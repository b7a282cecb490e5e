"""
Data models for the quote engine.

Uses dataclasses for structured, type-safe data representation.
Catalog definitions and the selection state are frozen: every user action
produces a new SelectionState instead of mutating the current one.
"""
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping, Optional


DEFAULT_SUB_OPTION_MIN = 20
SUB_OPTION_MAX_QUANTITY = 130
QUANTITY_RULES = ('max', 'min', 'sum')


# ============================================================================
# CATALOG DEFINITIONS
# ============================================================================

@dataclass(frozen=True)
class SubOption:
    """An alternative tier or module under a license item."""
    sub_option_id: str
    name: str
    unit_price: float
    min_quantity: int = DEFAULT_SUB_OPTION_MIN
    default_quantity: Optional[int] = None


@dataclass(frozen=True)
class LicenseItem:
    """A purchasable product in the catalog."""
    item_id: str
    name: str
    unit_price: float
    min_quantity: int
    max_quantity: int
    description: str = ""
    default_quantity: Optional[int] = None
    sub_options: tuple[SubOption, ...] = ()
    default_sub_option_ids: frozenset[str] = frozenset()

    @property
    def has_sub_options(self) -> bool:
        return len(self.sub_options) > 0

    def find_sub_option(self, sub_option_id: str) -> Optional[SubOption]:
        """Get a sub-option by id, or None if this item does not offer it."""
        for option in self.sub_options:
            if option.sub_option_id == sub_option_id:
                return option
        return None


@dataclass(frozen=True)
class ComboRule:
    """
    Price override applied when every trigger sub-option of an item is selected.

    The combined license count is derived from the trigger sub-options'
    quantities with quantity_rule ("max", "min" or "sum").
    """
    rule_id: str
    item_id: str
    trigger_sub_option_ids: frozenset[str]
    combo_unit_price: float
    name: str = ""
    quantity_rule: str = "max"
    min_quantity: int = DEFAULT_SUB_OPTION_MIN
    max_quantity: int = SUB_OPTION_MAX_QUANTITY
    priority: int = 50  # lower = higher priority

    def __post_init__(self):
        object.__setattr__(self, 'trigger_sub_option_ids', frozenset(self.trigger_sub_option_ids))
        if not self.trigger_sub_option_ids:
            raise ValueError(f"Combo rule {self.rule_id} has no trigger sub-options")
        if self.quantity_rule not in QUANTITY_RULES:
            raise ValueError(
                f"Combo rule {self.rule_id} has unknown quantity rule '{self.quantity_rule}'. "
                f"Expected one of {QUANTITY_RULES}"
            )

    def is_triggered_by(self, selected_ids: Iterable[str]) -> bool:
        """True when the full trigger set is contained in selected_ids."""
        return self.trigger_sub_option_ids <= frozenset(selected_ids)


@dataclass(frozen=True)
class Catalog:
    """
    Immutable set of license items and combo rules.

    Sub-option minimums are collected into a single lookup table keyed by
    sub-option id; the maximum is shared by every sub-option.
    """
    items: tuple[LicenseItem, ...]
    combo_rules: tuple[ComboRule, ...] = ()
    sub_option_max_quantity: int = SUB_OPTION_MAX_QUANTITY
    default_sub_option_min: int = DEFAULT_SUB_OPTION_MIN
    catalog_hash: Optional[str] = None
    sub_option_minimums: Mapping[str, int] = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        minimums = {
            option.sub_option_id: option.min_quantity
            for item in self.items
            for option in item.sub_options
        }
        object.__setattr__(self, 'sub_option_minimums', MappingProxyType(minimums))

    def find_item(self, item_id: str) -> Optional[LicenseItem]:
        for item in self.items:
            if item.item_id == item_id:
                return item
        return None

    def combo_rules_for(self, item_id: str) -> list[ComboRule]:
        return [rule for rule in self.combo_rules if rule.item_id == item_id]

    def sub_option_bounds(self, sub_option_id: str) -> tuple[int, int]:
        """Get the inclusive (min, max) license bounds for a sub-option."""
        minimum = self.sub_option_minimums.get(sub_option_id, self.default_sub_option_min)
        return minimum, self.sub_option_max_quantity

    def sub_option_quantity(self, selection: 'ItemSelection', sub_option_id: str) -> int:
        """
        Get the license count for a sub-option, always defined.

        Unset quantities resolve to the sub-option's minimum.
        """
        stored = selection.sub_option_quantities.get(sub_option_id)
        if stored is None:
            return self.sub_option_bounds(sub_option_id)[0]
        return stored


# ============================================================================
# SELECTION STATE
# ============================================================================

@dataclass(frozen=True)
class ItemSelection:
    """The user's current choices for one license item."""
    item_id: str
    enabled: bool = False
    quantity: int = 0
    selected_sub_option_ids: frozenset[str] = frozenset()
    sub_option_quantities: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'selected_sub_option_ids', frozenset(self.selected_sub_option_ids))
        object.__setattr__(self, 'sub_option_quantities', MappingProxyType(dict(self.sub_option_quantities)))

    def is_selected(self, sub_option_id: str) -> bool:
        return sub_option_id in self.selected_sub_option_ids

    def with_sub_option_quantity(self, sub_option_id: str, quantity: int) -> 'ItemSelection':
        quantities = dict(self.sub_option_quantities)
        quantities[sub_option_id] = quantity
        return replace(self, sub_option_quantities=quantities)


@dataclass(frozen=True)
class SelectionState:
    """Selection for a whole quote session, one ItemSelection per catalog item."""
    items: tuple[ItemSelection, ...] = ()

    def item(self, item_id: str) -> Optional[ItemSelection]:
        for selection in self.items:
            if selection.item_id == item_id:
                return selection
        return None

    def enabled_items(self) -> list[ItemSelection]:
        return [selection for selection in self.items if selection.enabled]

    def with_item(self, updated: ItemSelection) -> 'SelectionState':
        """Return a new state with the matching ItemSelection replaced."""
        return SelectionState(items=tuple(
            updated if selection.item_id == updated.item_id else selection
            for selection in self.items
        ))


# ============================================================================
# QUOTE RESULTS
# ============================================================================

@dataclass
class TraceStep:
    """A single step in the quote resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class SubOptionLine:
    """Money breakdown for one selected sub-option."""
    sub_option_id: str
    name: str
    quantity: int
    unit_price: float
    line_total: float


@dataclass
class QuoteLine:
    """A single enabled item in a quote result."""
    item_id: str
    name: str
    unit_price: float  # display price per license
    quantity: int
    line_total: float
    combo_rule_id: Optional[str] = None
    sub_lines: list[SubOptionLine] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"→ {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"→ {t.step}: {t.description}")
        return "\n".join(lines)


@dataclass
class QuoteTotals:
    """Complete result of a quote calculation."""
    subtotal: float
    tax: float
    total: float
    total_licenses: int
    tax_rate: float
    lines: list[QuoteLine] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    # Metadata
    catalog_hash: Optional[str] = None

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the quote-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def get_trace_text(self) -> str:
        """Get human-readable quote trace as formatted text."""
        lines = []
        for t in self.trace:
            if t.value:
                lines.append(f"• {t.step}: {t.description} = {t.value}")
            else:
                lines.append(f"• {t.step}: {t.description}")
        return "\n".join(lines)

    def to_summary_dict(self) -> dict:
        """The four headline figures consumed by the presentation layer."""
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "totalLicenses": self.total_licenses,
        }
