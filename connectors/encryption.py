"""
Token encryption — encrypt / decrypt connection records at rest.

Uses Fernet (AES-128-CBC + HMAC-SHA256) from the ``cryptography`` library,
wrapped in ``MultiFernet`` so keys can be rotated: the first key encrypts,
every key is tried for decryption.  Keys come from
``config.token_encryption_keys`` (env var: ``TOKEN_ENCRYPTION_KEYS``).

If no key is configured, encryption is **disabled** and records are stored
as plaintext (with a startup warning).  Generate a key with::

    python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
"""

from __future__ import annotations

import logging
from typing import List, Optional

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

logger = logging.getLogger(__name__)

CIPHERTEXT_PREFIX = "enc:v1:"


class TokenCipher:
    """Encrypts values before they reach the database."""

    def __init__(self, keys: Optional[List[str]] = None):
        clean_keys = [k.strip() for k in keys or [] if k and k.strip()]
        self._fernet: Optional[MultiFernet] = None
        if not clean_keys:
            logger.warning(
                "TOKEN_ENCRYPTION_KEYS not set; connection records will be stored as plaintext."
            )
            return
        self._fernet = MultiFernet([Fernet(k.encode()) for k in clean_keys])
        logger.info("Token encryption enabled (%d key(s))", len(clean_keys))

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def encrypt(self, plaintext: str) -> str:
        """Return prefixed ciphertext, or the plaintext when encryption is off."""
        if self._fernet is None:
            return plaintext
        token = self._fernet.encrypt(plaintext.encode()).decode()
        return f"{CIPHERTEXT_PREFIX}{token}"

    def decrypt(self, stored: str) -> str:
        """
        Decrypt a stored value.

        Values without the prefix were written while encryption was disabled
        and are returned unchanged.  Raises ``ValueError`` when a value is
        encrypted but cannot be decrypted with the configured keys.
        """
        if not stored.startswith(CIPHERTEXT_PREFIX):
            return stored
        if self._fernet is None:
            raise ValueError("Encrypted value found but TOKEN_ENCRYPTION_KEYS are not configured")
        try:
            return self._fernet.decrypt(stored[len(CIPHERTEXT_PREFIX):].encode()).decode()
        except InvalidToken as exc:
            raise ValueError("Invalid token or wrong encryption keys") from exc
