# voteledger/security.py
# Caller identity for the HTTP layer. The token subject is the principal
# (account address); the core only compares principals.
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import Settings

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict, settings: Settings, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    minutes = settings.access_token_expire_minutes if expires_minutes is None else expires_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_principal(token: str, settings: Settings) -> str:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")
    principal = payload.get("sub")
    if not principal:
        raise HTTPException(status_code=401, detail="Token has no subject.")
    return principal


def get_caller(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated.", headers={"WWW-Authenticate": "Bearer"})
    return decode_principal(credentials.credentials, request.app.state.settings)
