#!/usr/bin/env python3
"""
Generate a new Algorand account for signing proposal attestations.

Prints the address and the 25-word mnemonic to put in ADMIN_WALLET_MNEMONIC.
Fund the address from the TestNet dispenser before submitting proposals:
https://bank.testnet.algorand.network/

Usage:
    python scripts/generate_admin_wallet.py
"""

from __future__ import annotations

import logging

from algosdk import account, mnemonic

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


def generate_wallet() -> tuple[str, str]:
    """Return ``(address, mnemonic_phrase)`` for a freshly generated account."""
    private_key, address = account.generate_account()
    return address, mnemonic.from_private_key(private_key)


def main():
    address, phrase = generate_wallet()
    logger.info("=" * 60)
    logger.info(f"Address:  {address}")
    logger.info(f"Mnemonic: {phrase}")
    logger.info("=" * 60)
    logger.info("Add to .env:")
    logger.info(f'ADMIN_WALLET_MNEMONIC="{phrase}"')
    logger.info("Keep the mnemonic secret; anyone holding it controls the account.")


if __name__ == "__main__":
    main()
