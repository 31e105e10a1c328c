"""Session token issuance and verification (signed JWT)."""

from datetime import datetime, timedelta, UTC

import jwt
from pydantic import ValidationError as PydanticValidationError

from saasboard.config import get_settings
from saasboard.errors import ExpiredToken, InvalidToken
from saasboard.schemas.auth import SessionClaims


def issue_token(claims: SessionClaims) -> str:
    """Create a signed JWT carrying the given identity claims."""
    settings = get_settings()
    now = datetime.now(UTC)
    payload = {
        "sub": str(claims.user_id),
        "email": claims.email,
        "role": claims.role.value,
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expire_days),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_token(token: str) -> SessionClaims:
    """Check signature and expiry and return the embedded claims unchanged.

    Raises ExpiredToken past ``exp`` and InvalidToken for anything else that
    does not check out (bad signature, garbage, missing or malformed claims).
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError:
        raise ExpiredToken()
    except jwt.InvalidTokenError:
        raise InvalidToken()

    try:
        return SessionClaims(user_id=payload["sub"], email=payload.get("email"), role=payload.get("role"))
    except PydanticValidationError:
        raise InvalidToken("Malformed token payload")
