"""Blockchain attestation package."""

from .algorand_client import (
    ATTESTATION_NOTE_TYPE,
    AttestationClient,
    AttestationError,
    decode_note,
    encode_attestation_note,
)
from .submission import PLACEHOLDER_PREFIX, placeholder_tx_id, record_submission

__all__ = [
    "ATTESTATION_NOTE_TYPE",
    "AttestationClient",
    "AttestationError",
    "PLACEHOLDER_PREFIX",
    "decode_note",
    "encode_attestation_note",
    "placeholder_tx_id",
    "record_submission",
]
