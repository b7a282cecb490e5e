import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.logging_config import setup_logging
from ..engine import Catalog
from ..services.display import EMAIL_ERROR, can_submit
from .schemas import QuoteRequest, QuoteResponse, SubmitRequest
from .selection_api import router as selection_router
from .state import catalog, engine

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title="License Quote API",
    description="Quotation engine for software license bundles",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(selection_router)


def catalog_to_dict(catalog: Catalog) -> dict:
    """JSON view of the catalog definitions, with resolved bounds."""
    items = []
    for item in catalog.items:
        items.append({
            "item_id": item.item_id,
            "name": item.name,
            "description": item.description,
            "unit_price": item.unit_price,
            "min_quantity": item.min_quantity,
            "max_quantity": item.max_quantity,
            "sub_options": [
                {
                    "sub_option_id": option.sub_option_id,
                    "name": option.name,
                    "unit_price": option.unit_price,
                    "min_quantity": catalog.sub_option_bounds(option.sub_option_id)[0],
                    "max_quantity": catalog.sub_option_bounds(option.sub_option_id)[1],
                }
                for option in item.sub_options
            ],
        })

    return {
        "catalog_hash": catalog.catalog_hash,
        "items": items,
        "combo_rules": [
            {
                "rule_id": rule.rule_id,
                "item_id": rule.item_id,
                "name": rule.name,
                "trigger_sub_option_ids": sorted(rule.trigger_sub_option_ids),
                "combo_unit_price": rule.combo_unit_price,
                "quantity_rule": rule.quantity_rule,
                "min_quantity": rule.min_quantity,
                "max_quantity": rule.max_quantity,
            }
            for rule in catalog.combo_rules
        ],
    }


@app.get("/")
async def root():
    return {"status": "online", "message": "License Quote API Active"}


@app.get("/catalog")
async def get_catalog():
    return catalog_to_dict(catalog)


@app.post("/quote", response_model=QuoteResponse)
async def calculate_quote(req: QuoteRequest):
    try:
        totals = engine.calculate(req.selection.to_state(catalog))
        return QuoteResponse.from_totals(totals)
    except Exception as e:
        logger.exception("Quote calculation failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/quote/submit")
async def submit_quote(req: SubmitRequest):
    """Gate the quote on a well-formed email; nothing is stored or sent."""
    if not can_submit(req.email):
        raise HTTPException(status_code=422, detail=EMAIL_ERROR)

    totals = engine.calculate(req.selection.to_state(catalog))
    logger.info("Quote requested: %d licenses, total %.2f", totals.total_licenses, totals.total)
    return {
        "email": req.email,
        "quote": QuoteResponse.from_totals(totals),
    }
