"""
Attestation history with on-demand ledger verification.
"""

import logging
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy import desc
from sqlalchemy.orm import Session

from database import AttestationDB
from core.dependencies import get_attestation_client, get_db, require_user
from services.attestation import AttestationError

logger = logging.getLogger(__name__)

router = APIRouter()


def refresh_verification(db: Session, attestations, client) -> int:
    """Mark confirmed receipts whose note checks out on the indexer as verified."""
    if not client.is_available:
        return 0

    verified = 0
    for attestation in attestations:
        if attestation.is_placeholder or attestation.status == "verified":
            continue
        if client.verify_attestation(attestation.tx_id, attestation.proposal_id):
            attestation.status = "verified"
            verified += 1

    if verified:
        db.commit()
        logger.info(f"Verified {verified} attestation(s) on-chain")
    return verified


@router.get("/api/attestations")
async def list_attestations(request: Request, db: Session = Depends(get_db)):
    current_user = require_user(request, db)
    client = get_attestation_client(request)

    attestations = (
        db.query(AttestationDB)
        .filter(AttestationDB.user_id == current_user.id)
        .order_by(desc(AttestationDB.submitted_at))
        .all()
    )
    refresh_verification(db, attestations, client)

    results = []
    for attestation in attestations:
        data = attestation.to_frontend_format()
        data["explorerUrl"] = None if attestation.is_placeholder else client.explorer_url(attestation.tx_id)
        results.append(data)
    return JSONResponse(results)


@router.get("/api/attestations/onchain")
async def list_onchain_attestations(request: Request, db: Session = Depends(get_db)):
    """Attestation notes for the caller read straight from the indexer."""
    current_user = require_user(request, db)
    client = get_attestation_client(request)

    if not client.is_available:
        raise HTTPException(status_code=503, detail="Algorand attestation is not configured")
    try:
        return JSONResponse(client.get_user_attestations(current_user.id))
    except AttestationError as e:
        raise HTTPException(status_code=502, detail=str(e))
