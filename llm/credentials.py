from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from .client import MissingCredentialError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "Rirekisho Builder"
LOCAL_KEY_PATH = Path.home() / ".rirekisho_builder_key"
ENV_KEYS = {
    "openai": "OPENAI_API_KEY",
    "huggingface": "HF_TOKEN",
}


def load_api_key() -> Optional[str]:
    try:
        import keyring  # type: ignore

        return keyring.get_password(KEYRING_SERVICE, "api_key")
    except Exception as exc:
        logger.debug("keyring unavailable, using local key file: %s", exc)
        if LOCAL_KEY_PATH.exists():
            return LOCAL_KEY_PATH.read_text().strip() or None
    return None


def save_api_key(key: str) -> None:
    try:
        import keyring  # type: ignore

        keyring.set_password(KEYRING_SERVICE, "api_key", key)
        return
    except Exception as exc:
        logger.debug("keyring unavailable, writing local key file: %s", exc)
    LOCAL_KEY_PATH.write_text(key)


def clear_api_key() -> str:
    try:
        import keyring  # type: ignore

        keyring.delete_password(KEYRING_SERVICE, "api_key")
    except Exception as exc:
        logger.debug("No key removed from keyring: %s", exc)
    if LOCAL_KEY_PATH.exists():
        LOCAL_KEY_PATH.unlink()
    return ""


def resolve_api_key(provider: str, explicit: Optional[str] = None) -> str:
    """
    Pick the key to use: the one typed by the user, then the provider's
    environment variable, then the stored key.
    """
    if explicit and explicit.strip():
        return explicit.strip()
    normalized = "huggingface" if "hugging" in provider.lower() else "openai"
    from_env = os.getenv(ENV_KEYS[normalized], "").strip()
    if from_env:
        return from_env
    stored = load_api_key()
    if stored:
        return stored
    raise MissingCredentialError(
        f"No API key for {provider}. Enter one or set {ENV_KEYS[normalized]}."
    )
