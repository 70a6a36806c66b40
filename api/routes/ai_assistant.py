"""
AI assistant routes: summaries, eligibility, chat and proposal improvement.

Provider failures never surface as errors here. The assistant returns
deterministic content and the response carries ``degraded``/``degradedReason``.
"""

import logging
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import TenderDB
from core.dependencies import (
    get_ai_assistant,
    get_company_profile,
    get_db,
    get_tender_or_404,
    read_json_body,
    require_user,
)
from core.outcome import degradation_fields
from services.ai.prompts import MAX_CHAT_HISTORY
from services.eligibility import calculate_eligibility_score, incomplete_profile_verdict, tender_not_found_verdict

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/summarize")
async def summarize_tender(request: Request, db: Session = Depends(get_db)):
    body = await read_json_body(request)
    tender_id = body.get('tenderId')
    if not tender_id:
        raise HTTPException(status_code=400, detail="tenderId is required")

    tender = get_tender_or_404(db, tender_id)
    outcome = get_ai_assistant(request).summarize(tender.to_dict())
    return JSONResponse({"summary": outcome.value, **degradation_fields(outcome)})


@router.post("/api/checkEligibility")
async def check_eligibility(request: Request, db: Session = Depends(get_db)):
    """AI narrative of which tender requirements the caller meets."""
    body = await read_json_body(request)
    tender_id = body.get('tenderId')
    if not tender_id:
        raise HTTPException(status_code=400, detail="tenderId is required")

    current_user = require_user(request, db)
    tender = get_tender_or_404(db, tender_id)
    company = get_company_profile(db, current_user.id)
    if not company:
        raise HTTPException(status_code=400, detail="Company profile not found. Please complete your profile first.")

    outcome = get_ai_assistant(request).check_eligibility(tender.to_dict(), company.to_dict(), current_user.id)
    return JSONResponse({"eligibility": outcome.value, **degradation_fields(outcome)})


@router.post("/api/eligibilitySummary")
async def eligibility_summary(request: Request, db: Session = Depends(get_db)):
    """Heuristic scores keyed by tender id; no LLM involved."""
    current_user = require_user(request, db)
    body = await read_json_body(request)
    tender_ids = body.get('tenderIds')
    if not isinstance(tender_ids, list) or not tender_ids:
        raise HTTPException(status_code=400, detail="tenderIds array is required")

    company = get_company_profile(db, current_user.id)
    tender_ids = [str(tender_id) for tender_id in tender_ids]

    if not company:
        verdict = incomplete_profile_verdict()
        return JSONResponse({tender_id: verdict.to_dict() for tender_id in tender_ids})

    tenders = {
        tender.id: tender
        for tender in db.query(TenderDB).filter(TenderDB.id.in_(tender_ids)).all()
    }
    profile = company.to_dict()

    summaries = {}
    for tender_id in tender_ids:
        tender = tenders.get(tender_id)
        if not tender:
            summaries[tender_id] = tender_not_found_verdict().to_dict()
            continue
        summaries[tender_id] = calculate_eligibility_score(tender.to_dict(), profile).to_dict()

    return JSONResponse(summaries)


@router.post("/api/chatAssistant")
async def chat_assistant(request: Request, db: Session = Depends(get_db)):
    body = await read_json_body(request)
    tender_id = body.get('tenderId')
    user_message = str(body.get('userMessage') or '').strip()
    if not tender_id or not user_message:
        raise HTTPException(status_code=400, detail="tenderId and userMessage are required")

    current_user = require_user(request, db)
    tender = get_tender_or_404(db, tender_id)
    company = get_company_profile(db, current_user.id)

    chat_history = body.get('chatHistory') or []
    if not isinstance(chat_history, list):
        chat_history = []

    outcome = get_ai_assistant(request).chat(
        tender.to_dict(),
        company.to_dict() if company else None,
        user_message,
        proposal_content=body.get('proposalContent') or "",
        chat_history=[m for m in chat_history if isinstance(m, dict)][-MAX_CHAT_HISTORY:],
        user_id=current_user.id,
    )
    return JSONResponse({"response": outcome.value, **degradation_fields(outcome)})


@router.post("/api/improveProposal")
async def improve_proposal(request: Request, db: Session = Depends(get_db)):
    body = await read_json_body(request)
    tender_id = body.get('tenderId')
    proposal_content = str(body.get('proposalContent') or '')
    if not tender_id or not proposal_content.strip():
        raise HTTPException(status_code=400, detail="tenderId and proposalContent are required")

    current_user = require_user(request, db)
    tender = get_tender_or_404(db, tender_id)
    company = get_company_profile(db, current_user.id)

    outcome = get_ai_assistant(request).improve_proposal(
        tender.to_dict(),
        company.to_dict() if company else None,
        proposal_content,
        user_id=current_user.id,
    )
    return JSONResponse({**outcome.value, **degradation_fields(outcome)})
