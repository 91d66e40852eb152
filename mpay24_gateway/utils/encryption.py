"""
Encryption utilities for gateway secrets stored in the database.

Uses Fernet symmetric encryption from the cryptography library, with a key
derived from the MPAY24_ENCRYPTION_KEY passphrase.
"""
import os
import base64
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from mpay24_gateway.core.exceptions import GatewayConfigurationError


ENCRYPTION_KEY_PASSPHRASE = os.getenv(
    "MPAY24_ENCRYPTION_KEY",
    "mpay24-gateway-default-key-CHANGE-IN-PRODUCTION",
)

SALT = b"mpay24_gateway_salt_2022"


def get_encryption_key() -> bytes:
    """
    Derive the Fernet key from the passphrase.

    Returns:
        32-byte urlsafe base64 Fernet key
    """
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=SALT,
        iterations=100000,
    )
    return base64.urlsafe_b64encode(kdf.derive(ENCRYPTION_KEY_PASSPHRASE.encode()))


def encrypt_value(value: str) -> str:
    """Encrypt a single string value."""
    if not value:
        return ""

    fernet = Fernet(get_encryption_key())
    return fernet.encrypt(value.encode()).decode()


def decrypt_value(encrypted_value: str) -> str:
    """
    Decrypt a value produced by ``encrypt_value``.

    Raises:
        GatewayConfigurationError: the value was encrypted with another key
    """
    if not encrypted_value:
        return ""

    fernet = Fernet(get_encryption_key())
    try:
        return fernet.decrypt(encrypted_value.encode()).decode()
    except InvalidToken:
        raise GatewayConfigurationError(
            "Stored gateway secret cannot be decrypted; check MPAY24_ENCRYPTION_KEY"
        )
