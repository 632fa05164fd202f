"""Pricing profile routes.

Routes:
- GET /api/builders/pricing        - Pricing mode and ordered pricing items
- PUT /api/builders/pricing        - Replace the pricing table
- GET /api/builders/pricing/setup  - Catalog form seeded from stored prices
- PUT /api/builders/pricing/setup  - Save catalog form rows
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException

from estimatepro.db.connection import get_session
from estimatepro.db.repository import get_builder, load_pricing_profile, save_pricing_profile
from estimatepro.estimate.reconcile import merge_setup_items, reconcile_catalog
from estimatepro.models import PricingProfile
from estimatepro.web.dependencies import CurrentBuilder, require_builder
from estimatepro.web.models import PricingSetupResponse, PricingSetupUpdate

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/builders/pricing", tags=["pricing"])


@router.get("", response_model=PricingProfile)
async def get_pricing(current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        return await load_pricing_profile(session, builder)


@router.put("", response_model=PricingProfile)
async def put_pricing(profile: PricingProfile, current: CurrentBuilder = Depends(require_builder)):
    """Replace the ordered pricing table. Rows without a name are dropped."""
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        saved = await save_pricing_profile(session, builder, profile)

    logger.info("pricing_profile_saved", builder_id=str(current.id), items=len(saved.pricing_items))
    return saved


@router.get("/setup", response_model=PricingSetupResponse)
async def get_pricing_setup(current: CurrentBuilder = Depends(require_builder)):
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        profile = await load_pricing_profile(session, builder)

    return PricingSetupResponse(
        pricing_mode=profile.pricing_mode,
        rows=reconcile_catalog(profile.pricing_items),
    )


@router.put("/setup", response_model=PricingSetupResponse)
async def put_pricing_setup(payload: PricingSetupUpdate, current: CurrentBuilder = Depends(require_builder)):
    """Save catalog rows as keyed pricing items, keeping freeform rows."""
    async with get_session() as session:
        builder = await get_builder(session, current.id)
        if builder is None:
            raise HTTPException(status_code=404, detail="Builder not found")
        profile = await load_pricing_profile(session, builder)
        mode = payload.pricing_mode or profile.pricing_mode
        items = merge_setup_items(profile.pricing_items, payload.rows, mode)
        saved = await save_pricing_profile(
            session, builder, PricingProfile(pricing_mode=mode, pricing_items=items)
        )

    logger.info("pricing_setup_saved", builder_id=str(current.id), items=len(saved.pricing_items))
    return PricingSetupResponse(
        pricing_mode=saved.pricing_mode,
        rows=reconcile_catalog(saved.pricing_items),
    )
