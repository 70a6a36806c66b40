"""
Algorand attestation client.

A submission receipt is a zero-amount payment from the admin wallet to
itself whose note carries a JSON payload tagged ``proposal_attestation``.
"""

import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from algosdk import account, mnemonic, transaction
from algosdk.error import AlgodHTTPError, IndexerHTTPError
from algosdk.v2client import algod, indexer

logger = logging.getLogger(__name__)

ATTESTATION_NOTE_TYPE = "proposal_attestation"


class AttestationError(Exception):
    """Raised when the ledger could not record or return an attestation."""
    pass


def encode_attestation_note(proposal_id: str, tender_title: str, user_id: str,
                            timestamp: Optional[str] = None) -> Dict[str, Any]:
    return {
        "type": ATTESTATION_NOTE_TYPE,
        "proposalId": proposal_id,
        "tenderTitle": tender_title,
        "userId": user_id,
        "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
    }


def decode_note(note: Optional[str]) -> Optional[Dict[str, Any]]:
    """Decode an indexer ``note`` field (base64 JSON). None if it is not JSON."""
    if not note:
        return None
    try:
        decoded = json.loads(base64.b64decode(note).decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return None
    return decoded if isinstance(decoded, dict) else None


class AttestationClient:
    """
    Thin wrapper over the algod and indexer clients.

    Constructed once at startup from settings; ``is_available`` is False when
    no admin mnemonic is configured or it cannot be decoded.
    """

    def __init__(
        self,
        algod_url: str,
        indexer_url: str,
        api_token: str = "",
        admin_mnemonic: Optional[str] = None,
        confirmation_rounds: int = 5,
    ):
        self.algod_url = algod_url
        self.confirmation_rounds = confirmation_rounds
        self.algod_client = algod.AlgodClient(api_token, algod_url)
        self.indexer_client = indexer.IndexerClient(api_token, indexer_url)
        self._private_key: Optional[str] = None
        self.admin_address: Optional[str] = None

        if admin_mnemonic:
            try:
                self._private_key = mnemonic.to_private_key(admin_mnemonic.strip())
                self.admin_address = account.address_from_private_key(self._private_key)
                logger.info(f"✓ Algorand attestation account loaded: {self.admin_address}")
            except Exception as e:
                logger.error(f"⚠ Invalid ADMIN_WALLET_MNEMONIC, attestations disabled: {e}")
                self._private_key = None
                self.admin_address = None
        else:
            logger.warning("⚠ ADMIN_WALLET_MNEMONIC not set, attestations will use placeholder ids")

    @classmethod
    def from_settings(cls, settings) -> "AttestationClient":
        return cls(
            algod_url=settings.algod_url,
            indexer_url=settings.indexer_url,
            api_token=settings.algod_api_token,
            admin_mnemonic=settings.admin_wallet_mnemonic,
            confirmation_rounds=settings.attestation_confirmation_rounds,
        )

    @property
    def is_available(self) -> bool:
        return self._private_key is not None

    @property
    def network(self) -> str:
        return "mainnet" if "mainnet" in self.algod_url else "testnet"

    def explorer_url(self, tx_id: str) -> str:
        if self.network == "mainnet":
            return f"https://explorer.perawallet.app/tx/{tx_id}"
        return f"https://testnet.explorer.perawallet.app/tx/{tx_id}"

    def _require_available(self) -> None:
        if not self.is_available:
            raise AttestationError("Algorand client is not available")

    def create_attestation(self, proposal_id: str, tender_title: str, user_id: str) -> Dict[str, Any]:
        """
        Submit the attestation transaction and wait for it to confirm.

        Returns:
            {"txId", "confirmedRound", "sender", "note"}

        Raises:
            AttestationError: If signing, submission or confirmation fails
        """
        self._require_available()
        note = encode_attestation_note(proposal_id, tender_title, user_id)

        try:
            params = self.algod_client.suggested_params()
            txn = transaction.PaymentTxn(
                sender=self.admin_address,
                sp=params,
                receiver=self.admin_address,
                amt=0,
                note=json.dumps(note).encode("utf-8"),
            )
            signed_txn = txn.sign(self._private_key)
            tx_id = self.algod_client.send_transaction(signed_txn)
            logger.info(f"Algorand attestation submitted: {tx_id}")

            confirmed = transaction.wait_for_confirmation(self.algod_client, tx_id, self.confirmation_rounds)
        except AlgodHTTPError as e:
            logger.error(f"Algod rejected attestation for proposal {proposal_id}: {e}")
            raise AttestationError(f"Algod error: {e}")
        except Exception as e:
            logger.error(f"Error creating attestation transaction for proposal {proposal_id}: {e}")
            raise AttestationError(f"Failed to create attestation: {e}")

        return {
            "txId": tx_id,
            "confirmedRound": confirmed.get("confirmed-round"),
            "sender": self.admin_address,
            "note": note,
        }

    def get_transaction(self, tx_id: str) -> Dict[str, Any]:
        try:
            response = self.indexer_client.transaction(tx_id)
        except IndexerHTTPError as e:
            raise AttestationError(f"Transaction lookup failed: {e}")
        except Exception as e:
            raise AttestationError(f"Indexer unavailable: {e}")
        return response.get("transaction") or {}

    def verify_attestation(self, tx_id: str, proposal_id: Optional[str] = None) -> bool:
        """True when the transaction exists and its note is an attestation (for ``proposal_id`` if given)."""
        if not tx_id:
            return False
        try:
            txn = self.get_transaction(tx_id)
        except AttestationError as e:
            logger.warning(f"Could not verify attestation {tx_id}: {e}")
            return False

        note = decode_note(txn.get("note"))
        if not note or note.get("type") != ATTESTATION_NOTE_TYPE:
            return False
        if proposal_id is not None and note.get("proposalId") != proposal_id:
            return False
        return True

    def get_user_attestations(self, user_id: str, limit: int = 100) -> List[Dict[str, Any]]:
        """Attestation notes recorded on-ledger by the admin wallet for one user."""
        self._require_available()
        try:
            response = self.indexer_client.search_transactions(
                address=self.admin_address,
                txn_type="pay",
                limit=limit,
            )
        except Exception as e:
            logger.error(f"Error fetching attestations for user {user_id}: {e}")
            raise AttestationError(f"Failed to fetch attestations: {e}")

        attestations = []
        for txn in response.get("transactions", []):
            note = decode_note(txn.get("note"))
            if not note or note.get("type") != ATTESTATION_NOTE_TYPE or note.get("userId") != user_id:
                continue
            attestations.append({
                "txId": txn.get("id"),
                "confirmedRound": txn.get("confirmed-round"),
                "roundTime": txn.get("round-time"),
                "note": note,
                "explorerUrl": self.explorer_url(txn.get("id", "")),
            })
        return attestations

