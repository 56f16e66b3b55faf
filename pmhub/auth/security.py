"""JWT token utilities.

Token issuance (login / refresh) is owned by the identity service.
This module only handles token *decoding* for stateless validation.
Token creation helpers live in ``tests/helpers/token_factory.py``
and must never be imported from production code.

Token revocation
~~~~~~~~~~~~~~~~
Access tokens are short-lived (30 min). Individual tokens can be revoked
before expiry through the Redis deny-list in
:mod:`pmhub.auth.token_revocation`, keyed on the ``jti`` claim.
"""

from typing import Any

from jose import jwt

from pmhub.config import get_settings


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT token. Raises JWTError on failure."""
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
