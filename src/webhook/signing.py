"""HMAC-SHA256 payload signing for outbound webhooks.

The signature covers the exact bytes placed on the wire and is sent as
``X-Hub-Signature-256: sha256=<hex>``, the same scheme WhatsApp uses for
its own inbound webhooks.
"""

from __future__ import annotations

import hashlib
import hmac

from src.webhook.errors import SignError

SIGNATURE_HEADER = "X-Hub-Signature-256"
_PREFIX = "sha256="


def sign(body: bytes, secret: str | bytes) -> str:
    """Return the hex HMAC-SHA256 of ``body`` keyed with ``secret``."""
    try:
        if isinstance(secret, str):
            key = secret.encode()
        elif isinstance(secret, (bytes, bytearray, memoryview)):
            key = bytes(secret)
        else:
            raise TypeError(f"secret must be str or bytes, not {type(secret).__name__}")
        return hmac.new(key, body, hashlib.sha256).hexdigest()
    except (TypeError, ValueError) as exc:
        raise SignError(exc) from exc


def signature_header(body: bytes, secret: str | bytes) -> str:
    return f"{_PREFIX}{sign(body, secret)}"


def verify_signature(body: bytes, secret: str | bytes, header: str) -> bool:
    """Check a ``sha256=<hex>`` header against ``body``.

    Constant-time comparison via hmac.compare_digest.
    """
    if not header.startswith(_PREFIX):
        return False
    try:
        expected = sign(body, secret)
    except SignError:
        return False
    return hmac.compare_digest(header[len(_PREFIX):], expected)
