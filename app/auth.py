import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from .config import JWT_ALGORITHM, SECRET_KEY
from .database import get_db
from .models import Admin

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminPrincipal:
    """Verified admin identity. store_id always comes from here, never from the request"""

    admin_id: str
    store_id: str


def decode_admin_token(token: str) -> dict:
    """
    Verify an admin bearer token issued by the auth service.

    Raises:
        HTTPException: 401 when the signature, expiry or claims are invalid
    """
    try:
        payload = jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"Admin token rejected: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e

    if not payload.get("sub"):
        logger.warning(f"Admin token missing subject. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")
    return payload


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> AdminPrincipal:
    """Get the authenticated admin and their store from the bearer token"""

    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = decode_admin_token(credentials.credentials)

    admin = db.query(Admin).filter(Admin.id == payload["sub"]).first()
    if not admin:
        logger.warning(f"Token subject {payload['sub']} is not a known admin")
        raise HTTPException(status_code=401, detail="Authentication failed")

    # A token minted for another store is stale, not a way to switch tenants
    claimed_store = payload.get("store_id")
    if claimed_store and claimed_store != admin.store_id:
        logger.warning(f"Admin {admin.id} presented a token for store {claimed_store}")
        raise HTTPException(status_code=401, detail="Authentication failed")

    logger.debug(f"Admin authenticated: {admin.email}")
    return AdminPrincipal(admin_id=admin.id, store_id=admin.store_id)
