"""
Application settings loaded from the environment.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the Tenderly API."""

    # LLM providers
    openai_api_key: Optional[str] = None
    openai_model: str = "o3-mini"
    anthropic_api_key: Optional[str] = None
    claude_model: str = "claude-3-5-sonnet-20241022"

    # Translation
    translation_api_key: Optional[str] = None
    translation_model: str = "gpt-4o-mini"

    # Algorand attestation
    algod_url: str = "https://testnet-api.algonode.cloud"
    indexer_url: str = "https://testnet-idx.algonode.cloud"
    algod_api_token: str = ""
    admin_wallet_mnemonic: Optional[str] = None
    attestation_confirmation_rounds: int = 5

    # Sessions
    session_expire_days: int = 7

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        openai_key = os.getenv("OPENAI_API_KEY") or None
        return cls(
            openai_api_key=openai_key,
            openai_model=os.getenv("OPENAI_MODEL", cls.openai_model),
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
            claude_model=os.getenv("CLAUDE_MODEL", cls.claude_model),
            translation_api_key=os.getenv("TRANSLATION_API_KEY") or openai_key,
            translation_model=os.getenv("TRANSLATION_MODEL", cls.translation_model),
            algod_url=os.getenv("ALGOD_URL", cls.algod_url),
            indexer_url=os.getenv("INDEXER_URL", cls.indexer_url),
            algod_api_token=os.getenv("ALGOD_API_TOKEN", cls.algod_api_token),
            admin_wallet_mnemonic=os.getenv("ADMIN_WALLET_MNEMONIC") or None,
            attestation_confirmation_rounds=_int_env(
                "ATTESTATION_CONFIRMATION_ROUNDS", cls.attestation_confirmation_rounds
            ),
            session_expire_days=_int_env("SESSION_EXPIRE_DAYS", cls.session_expire_days),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
