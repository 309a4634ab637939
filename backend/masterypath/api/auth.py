"""Bearer-token dependency resolving the caller's learner identity."""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from masterypath.core.config import ALGORITHM, SECRET_KEY

_bearer = HTTPBearer(auto_error=False)


# ------------------------------------------------------------------
# JWT helpers
# ------------------------------------------------------------------
def create_access_token(learner_id: str, expires_minutes: int = 60) -> str:
    """Issued by the session collaborator in production; used here by tests and tooling."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    return jwt.encode({"sub": learner_id, "exp": expire}, SECRET_KEY, algorithm=ALGORITHM)


def _decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")


# ------------------------------------------------------------------
# Dependency: learner id from Bearer token
# ------------------------------------------------------------------
def get_current_learner(credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> str:
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    claims = _decode_token(credentials.credentials)
    learner_id = claims.get("sub")
    if not learner_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token has no subject")
    return str(learner_id)
