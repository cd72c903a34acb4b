"""
Signature validation for dtconn webhook payloads.

The monitoring platform sends a JWT in the x-dt-signature header, signed
with the shared secret using HMAC-SHA256 (HS256). Only the token's integrity
and algorithm are checked; its claims are not interpreted and may be empty.
"""

import logging
from typing import Any, Dict, Optional

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# Claims are opaque to the relay, only the MAC is verified
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_aud": False,
    "verify_iat": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}


def verify_signature(token: str, secret: str) -> bool:
    """
    Validate a dtconn signature token.

    Malformed tokens, unexpected algorithms and wrong secrets all yield the
    same result. Nothing from the token is logged.

    Args:
        token: Value of the x-dt-signature header
        secret: Shared signing secret

    Returns:
        True if signature is valid, False otherwise
    """
    try:
        jwt.decode(token, secret, algorithms=[ALGORITHM], options=_DECODE_OPTIONS)
        return True
    except JWTError:
        logger.error("Invalid signature")
        return False


def compute_signature(secret: str, claims: Optional[Dict[str, Any]] = None) -> str:
    """
    Compute a dtconn signature token for testing purposes.

    Args:
        secret: Shared signing secret
        claims: Optional token claims (empty by default)

    Returns:
        HS256-signed JWT
    """
    return jwt.encode(claims or {}, secret, algorithm=ALGORITHM)
