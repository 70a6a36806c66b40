"""Proposal submission: flip status, attest on-ledger, record the receipt."""

import logging
import secrets
import string
from datetime import datetime
from typing import Tuple

from sqlalchemy.orm import Session

from core.outcome import Degraded, Ok
from database import PLACEHOLDER_TX_PREFIX, AttestationDB, ProposalDB
from .algorand_client import AttestationClient, AttestationError

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = PLACEHOLDER_TX_PREFIX
_PLACEHOLDER_ALPHABET = string.ascii_uppercase + string.digits


def placeholder_tx_id() -> str:
    """Locally generated stand-in used when the ledger is unreachable."""
    return PLACEHOLDER_PREFIX + "".join(secrets.choice(_PLACEHOLDER_ALPHABET) for _ in range(12))


def attest_proposal(client: AttestationClient, proposal_id: str, tender_title: str, user_id: str):
    try:
        return Ok(client.create_attestation(proposal_id, tender_title, user_id))
    except AttestationError as e:
        tx_id = placeholder_tx_id()
        logger.warning(f"Falling back to placeholder TxID {tx_id} for proposal {proposal_id}: {e}")
        return Degraded({"txId": tx_id}, str(e))


def record_submission(
    db: Session,
    proposal: ProposalDB,
    user_id: str,
    client: AttestationClient,
) -> Tuple[object, AttestationDB]:
    """
    Submit a draft proposal.

    The status change and the attestation row are committed together. A
    failed ledger call still submits the proposal, with a placeholder tx id
    and a ``pending`` attestation.
    """
    tender = proposal.tender
    tender_title = tender.title if tender else proposal.title
    agency = (tender.agency if tender else None) or "Unknown Agency"

    logger.info(f"Attempting Algorand attestation for proposal {proposal.id}")
    outcome = attest_proposal(client, proposal.id, tender_title, user_id)
    tx_id = outcome.value["txId"]
    blockchain_error = None if isinstance(outcome, Ok) else outcome.cause
    now = datetime.utcnow()

    proposal.status = "submitted"
    proposal.submission_date = now
    proposal.blockchain_tx_id = tx_id

    attestation = AttestationDB(
        user_id=user_id,
        proposal_id=proposal.id,
        tender_title=tender_title,
        agency=agency,
        tx_id=tx_id,
        status="confirmed" if blockchain_error is None else "pending",
        attestation_metadata={
            "proposal_id": proposal.id,
            "tender_id": proposal.tender_id,
            "submission_timestamp": now.isoformat(),
            "blockchain_error": blockchain_error,
            "confirmed_round": outcome.value.get("confirmedRound"),
        },
        submitted_at=now,
    )
    db.add(attestation)
    db.commit()
    db.refresh(proposal)
    db.refresh(attestation)

    logger.info(f"Proposal {proposal.id} submitted with TxID {tx_id} ({attestation.status})")
    return outcome, attestation
