from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError

from edufiles.core.config import JWT_SECRET_KEY, JWT_ALGORITHM


# =====================================================
# Bearer scheme (tokens are issued by the auth service)
# =====================================================

bearer_scheme = HTTPBearer()


# =====================================================
# Verify JWT token
# =====================================================

def verify_token(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> dict:
    """
    Verify JWT access token.

    - Returns the payload when valid
    - Raises HTTP 401 when the token is invalid or expired
    """

    try:
        payload = jwt.decode(
            credentials.credentials,
            JWT_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # Minimal payload check
    if "sub" not in payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    return payload


def get_owner_id(payload: dict = Depends(verify_token)) -> str:
    return str(payload.get("user_id") or payload["sub"])
