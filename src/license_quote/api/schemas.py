"""
Pydantic models shared by the API routers.

The selection travels with every request; the server keeps no session.
"""
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..engine import Catalog, ItemSelection, QuoteTotals, SelectionState, normalize_selection
from ..services.display import quote_display

# Raw user input; anything non-numeric falls back to the minimum
QuantityInput = Union[int, float, str, None]


class ItemSelectionModel(BaseModel):
    """Choices for one license item."""
    item_id: str
    enabled: bool = False
    quantity: QuantityInput = None
    selected_sub_option_ids: list[str] = Field(default_factory=list)
    sub_option_quantities: dict[str, QuantityInput] = Field(default_factory=dict)


class SelectionModel(BaseModel):
    """Selection state for a whole quote session."""
    items: list[ItemSelectionModel] = Field(default_factory=list)

    def to_state(self, catalog: Catalog) -> SelectionState:
        """Convert to an engine state, normalised against the catalog."""
        state = SelectionState(items=tuple(
            ItemSelection(
                item_id=item.item_id,
                enabled=item.enabled,
                quantity=item.quantity,
                selected_sub_option_ids=frozenset(item.selected_sub_option_ids),
                sub_option_quantities=item.sub_option_quantities,
            )
            for item in self.items
        ))
        return normalize_selection(catalog, state)

    @classmethod
    def from_state(cls, catalog: Catalog, state: SelectionState) -> 'SelectionModel':
        items = []
        for selection in state.items:
            definition = catalog.find_item(selection.item_id)
            order = [o.sub_option_id for o in definition.sub_options] if definition else []
            items.append(ItemSelectionModel(
                item_id=selection.item_id,
                enabled=selection.enabled,
                quantity=selection.quantity,
                selected_sub_option_ids=[s for s in order if selection.is_selected(s)],
                sub_option_quantities=dict(selection.sub_option_quantities),
            ))
        return cls(items=items)


class QuoteResponse(BaseModel):
    """Exact figures plus their display strings."""
    subtotal: float
    tax: float
    total: float
    total_licenses: int
    catalog_hash: Optional[str] = None
    display: dict

    @classmethod
    def from_totals(cls, totals: QuoteTotals) -> 'QuoteResponse':
        return cls(
            subtotal=totals.subtotal,
            tax=totals.tax,
            total=totals.total,
            total_licenses=totals.total_licenses,
            catalog_hash=totals.catalog_hash,
            display=quote_display(totals),
        )


class SelectionResponse(BaseModel):
    """New selection after an action, with the recomputed quote."""
    selection: SelectionModel
    quote: QuoteResponse


class QuoteRequest(BaseModel):
    selection: SelectionModel


class SubmitRequest(BaseModel):
    selection: SelectionModel
    email: str


class EnableRequest(BaseModel):
    selection: SelectionModel
    item_id: str
    enabled: bool


class ItemQuantityRequest(BaseModel):
    selection: SelectionModel
    item_id: str
    value: QuantityInput = None


class SubOptionRequest(BaseModel):
    selection: SelectionModel
    item_id: str
    sub_option_id: str


class SubOptionQuantityRequest(BaseModel):
    selection: SelectionModel
    item_id: str
    sub_option_id: str
    value: QuantityInput = None
