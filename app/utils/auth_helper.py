import os
from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError

from app.models.principal import Principal

ALGORITHM = "HS256"

bearer_scheme_optional = HTTPBearer(auto_error=False)


def decode_principal(token: str) -> Principal:
    """Turn a bearer token into a Principal, resolving the role once here."""
    payload = jwt.decode(token, os.getenv("JWT_SECRET"), algorithms=[ALGORITHM])

    if not payload.get("sub"):
        raise JWTError("Token has no subject")

    return Principal.from_claims(payload)


def get_current_principal_optional(
    token: HTTPAuthorizationCredentials = Depends(bearer_scheme_optional),
) -> Optional[Principal]:
    if not token:
        return None

    try:
        return decode_principal(token.credentials)
    except JWTError:
        return None


bearer_scheme_required = HTTPBearer(auto_error=True)


def get_current_principal(
    token: HTTPAuthorizationCredentials = Depends(bearer_scheme_required),
) -> Principal:
    try:
        return decode_principal(token.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
