"""
Selection API - FastAPI router for selection state transitions.

Each endpoint takes the current selection and one user action, and returns
the new selection with the recomputed quote.
"""
import logging

from fastapi import APIRouter

from ..engine import (
    SelectionState,
    initial_selection,
    select_only_sub_option,
    set_combo_quantity,
    set_item_enabled,
    set_item_quantity,
    set_sub_option_quantity,
    toggle_sub_option,
)
from .schemas import (
    EnableRequest,
    ItemQuantityRequest,
    QuoteResponse,
    SelectionModel,
    SelectionResponse,
    SubOptionQuantityRequest,
    SubOptionRequest,
)
from .state import catalog, engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/selection", tags=["selection"])


def _respond(state: SelectionState) -> SelectionResponse:
    return SelectionResponse(
        selection=SelectionModel.from_state(catalog, state),
        quote=QuoteResponse.from_totals(engine.calculate(state)),
    )


@router.get("/initial", response_model=SelectionResponse)
async def get_initial_selection():
    """Session-start selection: everything disabled, defaults pre-selected."""
    return _respond(initial_selection(catalog))


@router.post("/enable", response_model=SelectionResponse)
async def enable_item(req: EnableRequest):
    """Include or exclude an item from the quote."""
    state = req.selection.to_state(catalog)
    return _respond(set_item_enabled(catalog, state, req.item_id, req.enabled))


@router.post("/quantity", response_model=SelectionResponse)
async def change_item_quantity(req: ItemQuantityRequest):
    """Set an item's license count (clamped)."""
    state = req.selection.to_state(catalog)
    return _respond(set_item_quantity(catalog, state, req.item_id, req.value))


@router.post("/toggle", response_model=SelectionResponse)
async def toggle_option(req: SubOptionRequest):
    """Select or deselect a sub-option."""
    state = req.selection.to_state(catalog)
    return _respond(toggle_sub_option(catalog, state, req.item_id, req.sub_option_id))


@router.post("/select-only", response_model=SelectionResponse)
async def select_only_option(req: SubOptionRequest):
    """Keep exactly one sub-option selected (combined view)."""
    state = req.selection.to_state(catalog)
    return _respond(select_only_sub_option(catalog, state, req.item_id, req.sub_option_id))


@router.post("/sub-option-quantity", response_model=SelectionResponse)
async def change_sub_option_quantity(req: SubOptionQuantityRequest):
    """Set a sub-option's license count (clamped)."""
    state = req.selection.to_state(catalog)
    return _respond(set_sub_option_quantity(catalog, state, req.item_id, req.sub_option_id, req.value))


@router.post("/combo-quantity", response_model=SelectionResponse)
async def change_combo_quantity(req: ItemQuantityRequest):
    """Set the shared license count of an active combo."""
    state = req.selection.to_state(catalog)
    return _respond(set_combo_quantity(catalog, state, req.item_id, req.value))
