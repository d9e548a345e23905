"""Wallet loading for transaction signing."""

import json
from pathlib import Path

import structlog
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..core.errors import ConfigError

logger = structlog.get_logger(__name__)


def load_keystore_account(keystore_path: str, password: str) -> LocalAccount:
    """Decrypt a JSON keystore (geth/clef format) into a local account.

    Args:
        keystore_path: Path to the encrypted keystore file
        password: Keystore password

    Returns:
        Decrypted signing account
    """
    path = Path(keystore_path)
    if not path.exists():
        raise ConfigError(f"Keystore file not found: {keystore_path}")

    try:
        keystore = json.loads(path.read_text(encoding="utf-8"))
        private_key = Account.decrypt(keystore, password)
    except (json.JSONDecodeError, ValueError) as e:
        raise ConfigError(f"Failed to decrypt keystore {keystore_path}: {e}") from e

    return Account.from_key(private_key)


def load_private_key_account(private_key: str) -> LocalAccount:
    """Build a local account from a hex private key."""
    try:
        return Account.from_key(private_key.strip())
    except Exception as e:
        # Never include the key itself in the message
        raise ConfigError("Invalid private key") from e


def load_wallet(settings) -> LocalAccount:
    """Load the signing wallet from settings.

    A keystore file takes precedence over a raw private key.

    Args:
        settings: Application settings

    Returns:
        Signing account used for every transaction of the run

    Raises:
        ConfigError: If no usable wallet source is configured
    """
    if settings.keystore_path:
        if settings.keystore_password is None:
            raise ConfigError("keystore_password is required with keystore_path")
        account = load_keystore_account(
            settings.keystore_path, settings.keystore_password.get_secret_value()
        )
        logger.info("Wallet loaded from keystore", address=account.address)
        return account

    if settings.private_key is not None:
        account = load_private_key_account(settings.private_key.get_secret_value())
        logger.info("Wallet loaded from private key", address=account.address)
        return account

    raise ConfigError(
        "No wallet configured. Set one of: private_key, or keystore_path with keystore_password"
    )
