"""
Caller identity from identity-provider tokens.

Tokens are issued elsewhere; this service only verifies them.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from airbooking.core.config import Settings

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CallerIdentity:
    user_id: int
    email: Optional[str] = None


class InvalidTokenError(Exception):
    """Raised when a bearer token does not yield a usable identity"""
    pass


def create_access_token(settings: Settings, user_id: int, email: Optional[str] = None,
                        expires_in: timedelta = timedelta(hours=1)) -> str:
    """Mint a token the way the identity provider does (dev tooling and tests)"""
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        'sub': str(user_id),
        'user_id': user_id,
        'iat': now,
        'exp': now + expires_in,
    }
    if email:
        payload['email'] = email
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_identity(token: str, settings: Settings) -> CallerIdentity:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.PyJWTError as e:
        raise InvalidTokenError(str(e)) from e

    raw_id = payload.get('user_id', payload.get('sub'))
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError):
        raise InvalidTokenError("token has no user id")
    if user_id <= 0:
        raise InvalidTokenError("token has no user id")

    email = payload.get('email')
    return CallerIdentity(user_id=user_id, email=email.strip() if isinstance(email, str) and email.strip() else None)


async def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CallerIdentity:
    """FastAPI dependency; 401 before any validation or write"""
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        identity = decode_identity(credentials.credentials, request.app.state.settings)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Rate limiter keys on this
    request.state.user_id = identity.user_id
    return identity
