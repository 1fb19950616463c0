# ============================================================================
# FILE: app/api/dependencies.py
# Authentication dependencies for the admin dashboard
# ============================================================================
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from uuid import UUID

from app.config.database import get_db
from app.models.admin_user import AdminUser
from app.services.auth.auth_service import AuthService

# ============================================================================
# Security Schemes
# ============================================================================

jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter the admin JWT access token"
)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ============================================================================
# JWT Authentication Dependencies
# ============================================================================

async def get_current_admin(
        credentials: HTTPAuthorizationCredentials = Depends(jwt_security),
        db: Session = Depends(get_db)
) -> AdminUser:
    """
    Dependency for admin-only routes.

    Raises:
        HTTPException 401: If token is invalid or the admin no longer exists
    """
    payload = AuthService.decode_access_token(credentials.credentials)
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    try:
        admin_id = UUID(payload["sub"])
    except (KeyError, ValueError):
        raise _unauthorized("Invalid user ID in token")

    admin = db.query(AdminUser).filter(AdminUser.id == admin_id).first()
    if not admin or not admin.is_active:
        raise _unauthorized("Admin account not found or inactive")

    return admin
