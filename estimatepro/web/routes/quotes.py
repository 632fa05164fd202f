"""Quote routes.

Quotes are not persisted: the client holds the QuoteState and sends it back
with each batch of edits.

Routes:
- GET  /api/leads/{id}/quote      - Quote seeded from the lead's estimate
- POST /api/quotes/recompute      - Apply edits to a quote state
- POST /api/leads/{id}/quote/pdf  - Download the quote as PDF
"""

from __future__ import annotations

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from estimatepro.config import get_config
from estimatepro.db.connection import get_session
from estimatepro.db.repository import get_builder, get_lead
from estimatepro.estimate.quote import apply_operations, compute_totals
from estimatepro.leads.service import build_quote_document, lead_quote
from estimatepro.reporting.formatting import quote_filename
from estimatepro.reporting.pdf_export import generate_quote_pdf
from estimatepro.web.dependencies import CurrentBuilder, require_builder
from estimatepro.web.models import QuotePdfRequest, QuoteResponse, RecomputeRequest

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["quotes"])


@router.get("/api/leads/{lead_id}/quote", response_model=QuoteResponse)
async def get_quote(lead_id: UUID, current: CurrentBuilder = Depends(require_builder)):
    config = get_config()
    async with get_session() as session:
        lead = await get_lead(session, lead_id, current.id)
    if lead is None:
        raise HTTPException(status_code=404, detail="Lead not found")

    state = lead_quote(lead, config.quote.default_terms)
    return QuoteResponse(state=state, totals=compute_totals(state, config.quote.gst_rate))


@router.post("/api/quotes/recompute", response_model=QuoteResponse)
async def recompute_quote(payload: RecomputeRequest, current: CurrentBuilder = Depends(require_builder)):
    """Apply the operations in order and return the new state with totals."""
    state = apply_operations(payload.state, payload.operations)
    return QuoteResponse(state=state, totals=compute_totals(state, get_config().quote.gst_rate))


@router.post("/api/leads/{lead_id}/quote/pdf")
async def export_quote_pdf(
    lead_id: UUID,
    payload: QuotePdfRequest,
    current: CurrentBuilder = Depends(require_builder),
):
    config = get_config()
    async with get_session() as session:
        lead = await get_lead(session, lead_id, current.id)
        builder = await get_builder(session, current.id)
    if lead is None or builder is None:
        raise HTTPException(status_code=404, detail="Lead not found")

    document = build_quote_document(builder, lead, payload.state, config)
    buffer = generate_quote_pdf(document, config.quote.gst_rate)
    filename = quote_filename(document.survey.client_name, document.issued_at)

    logger.info("quote_exported", lead_id=str(lead_id), total=document.totals.total)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
