"""Verification of identity-provider tokens.

The identity provider issues signed JWTs whose ``sub`` claim is the caller's
stable user id. This module only checks the signature, expiry and audience;
issuing tokens in production belongs to the provider.
"""
from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from linkup.core.errors import UnauthorizedError
from linkup.core.settings import settings


def decode_access_token(token: str) -> dict[str, Any]:
    """Return the verified claims of ``token``.

    Raises:
        UnauthorizedError: If the token is malformed, expired, signed with the
            wrong key or missing a subject.
    """
    options = {"verify_aud": settings.jwt_audience is not None}
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience,
            options=options,
        )
    except JWTError as err:
        raise UnauthorizedError() from err

    subject = claims.get("sub")
    if not subject or not isinstance(subject, str):
        raise UnauthorizedError()
    return claims


def create_access_token(subject: str, extra_claims: dict[str, Any] | None = None) -> str:
    """Create a token the way the identity provider would (development and tests)."""
    to_encode: dict[str, Any] = {"sub": subject}
    if extra_claims:
        to_encode.update(extra_claims)
    to_encode["exp"] = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    if settings.jwt_audience is not None:
        to_encode.setdefault("aud", settings.jwt_audience)
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt
