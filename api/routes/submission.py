"""
Proposal submission with on-ledger attestation.
"""

import logging
from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from database import AttestationDB
from core.dependencies import get_attestation_client, get_db, read_json_body, require_user
from core.outcome import degradation_fields
from services.attestation import PLACEHOLDER_PREFIX, record_submission
from api.routes.proposals import get_owned_proposal

logger = logging.getLogger(__name__)

router = APIRouter()


def _explorer_url(client, tx_id):
    if not tx_id or tx_id.startswith(PLACEHOLDER_PREFIX):
        return None
    return client.explorer_url(tx_id)


@router.post("/api/submitProposal")
async def submit_proposal(request: Request, db: Session = Depends(get_db)):
    """
    Submit a draft and anchor it on Algorand.

    Ledger failures never fail the request: the proposal is submitted with a
    placeholder TxID and the response is flagged as degraded.
    """
    current_user = require_user(request, db)
    body = await read_json_body(request)
    proposal_id = body.get('proposalId')

    if not proposal_id:
        raise HTTPException(status_code=400, detail="proposalId is required")

    proposal = get_owned_proposal(db, proposal_id, current_user.id)
    client = get_attestation_client(request)

    if proposal.is_submitted:
        # Resubmission is idempotent: report the existing receipt
        attestation = (
            db.query(AttestationDB)
            .filter(AttestationDB.proposal_id == proposal.id)
            .order_by(AttestationDB.created_at)
            .first()
        )
        logger.info(f"Proposal {proposal.id} already submitted with TxID {proposal.blockchain_tx_id}")
        return JSONResponse({
            "txId": proposal.blockchain_tx_id,
            "status": "submitted",
            "blockchainStatus": attestation.status if attestation else "pending",
            "blockchainError": (attestation.attestation_metadata or {}).get("blockchain_error") if attestation else None,
            "explorerUrl": _explorer_url(client, proposal.blockchain_tx_id),
            "alreadySubmitted": True,
            "degraded": False,
        })

    outcome, attestation = record_submission(db, proposal, current_user.id, client)

    return JSONResponse({
        "txId": attestation.tx_id,
        "status": "submitted",
        "blockchainStatus": attestation.status,
        "blockchainError": (attestation.attestation_metadata or {}).get("blockchain_error"),
        "explorerUrl": _explorer_url(client, attestation.tx_id),
        "alreadySubmitted": False,
        **degradation_fields(outcome),
    })
