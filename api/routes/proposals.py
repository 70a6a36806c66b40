"""
Proposal routes: listing, drafting, versioning and deletion.
"""

import logging
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import desc
from sqlalchemy.orm import Session

from database import ProposalDB, ProposalVersionDB
from core.dependencies import (
    get_ai_assistant,
    get_company_profile,
    get_db,
    get_tender_or_404,
    read_json_body,
    require_user,
)
from core.outcome import degradation_fields

logger = logging.getLogger(__name__)

router = APIRouter()


def get_owned_proposal(db: Session, proposal_id: str, user_id: str) -> ProposalDB:
    """Load a proposal, answering 404 when missing and 403 for another user's."""
    proposal = db.query(ProposalDB).filter(ProposalDB.id == proposal_id).first()
    if not proposal:
        raise HTTPException(status_code=404, detail="Proposal not found")
    if proposal.user_id != user_id:
        logger.warning(f"User {user_id} denied access to proposal {proposal_id}")
        raise HTTPException(status_code=403, detail="Access denied")
    return proposal


def add_version_snapshot(db: Session, proposal: ProposalDB, user_id: str, summary: str) -> ProposalVersionDB:
    snapshot = ProposalVersionDB(
        proposal_id=proposal.id,
        version=proposal.version,
        content=proposal.content or "",
        changes_summary=summary,
        created_by=user_id,
    )
    db.add(snapshot)
    return snapshot


@router.get("/api/proposals")
async def list_proposals(request: Request, db: Session = Depends(get_db)):
    current_user = require_user(request, db)
    proposals = (
        db.query(ProposalDB)
        .filter(ProposalDB.user_id == current_user.id)
        .order_by(desc(ProposalDB.updated_at))
        .all()
    )
    return JSONResponse([proposal.to_frontend_format() for proposal in proposals])


@router.get("/api/proposals/{proposal_id}")
async def get_proposal(proposal_id: str, request: Request, db: Session = Depends(get_db)):
    current_user = require_user(request, db)
    proposal = get_owned_proposal(db, proposal_id, current_user.id)
    return JSONResponse(proposal.to_frontend_format())


@router.delete("/api/proposals/{proposal_id}")
async def delete_proposal(proposal_id: str, request: Request, db: Session = Depends(get_db)):
    """Delete a draft. Submitted proposals are immutable."""
    current_user = require_user(request, db)
    proposal = get_owned_proposal(db, proposal_id, current_user.id)

    if proposal.is_submitted:
        raise HTTPException(status_code=400, detail="Only draft proposals can be deleted")

    db.delete(proposal)
    db.commit()
    logger.info(f"Deleted draft proposal {proposal_id}")
    return JSONResponse({"success": True})


@router.get("/api/versions/{proposal_id}")
async def list_versions(proposal_id: str, request: Request, db: Session = Depends(get_db)):
    current_user = require_user(request, db)
    proposal = get_owned_proposal(db, proposal_id, current_user.id)
    return JSONResponse([version.to_frontend_format() for version in proposal.versions])


@router.post("/api/saveDraft")
async def save_draft(request: Request, db: Session = Depends(get_db)):
    """Replace draft content and append a version snapshot."""
    current_user = require_user(request, db)
    body = await read_json_body(request)
    proposal_id = body.get('proposalId')
    content = body.get('content')

    if not proposal_id or content is None:
        raise HTTPException(status_code=400, detail="proposalId and content are required")

    proposal = db.query(ProposalDB).filter(
        ProposalDB.id == proposal_id,
        ProposalDB.user_id == current_user.id,
    ).first()
    if not proposal:
        raise HTTPException(status_code=404, detail="Proposal not found")
    if proposal.is_submitted:
        raise HTTPException(status_code=400, detail="Submitted proposals cannot be edited")

    proposal.content = str(content)
    proposal.version = (proposal.version or 1) + 1
    add_version_snapshot(db, proposal, current_user.id, body.get('changesSummary') or "Draft saved")
    db.commit()

    return JSONResponse({"success": True, "version": proposal.version})


@router.post("/api/generateProposal")
async def generate_proposal(request: Request, db: Session = Depends(get_db)):
    """Create a new draft proposal from the tender and the caller's profile."""
    current_user = require_user(request, db)
    body = await read_json_body(request)
    tender_id = body.get('tenderId')

    if not tender_id:
        raise HTTPException(status_code=400, detail="tenderId is required")

    tender = get_tender_or_404(db, tender_id)
    company = get_company_profile(db, current_user.id)
    if not company:
        raise HTTPException(status_code=400, detail="Complete your company profile first to generate proposals")

    outcome = get_ai_assistant(request).generate_proposal(tender.to_dict(), company.to_dict(), current_user.id)

    proposal = ProposalDB(
        user_id=current_user.id,
        tender_id=tender.id,
        title=tender.title,
        content=outcome.value,
        status="draft",
        version=1,
    )
    db.add(proposal)
    db.flush()
    add_version_snapshot(db, proposal, current_user.id, "Initial AI-generated draft")
    db.commit()
    logger.info(f"Generated proposal {proposal.id} for tender {tender.id}")

    return JSONResponse({"proposalId": proposal.id, **degradation_fields(outcome)})
