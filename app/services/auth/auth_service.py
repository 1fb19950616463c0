# ============================================================================
# FILE: app/services/auth/auth_service.py
# Admin login and JWT handling
# ============================================================================
from datetime import datetime, timedelta, timezone
from typing import Optional
import logging

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.models.admin_user import AdminUser

logger = logging.getLogger(__name__)


class AuthService:

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> Optional[AdminUser]:
        """Return the admin when the credentials match, None otherwise"""
        admin = db.query(AdminUser).filter(
            AdminUser.username == username,
            AdminUser.is_active == True
        ).first()

        if not admin or not admin.verify_password(password):
            logger.warning(f"Failed admin login for {username!r}")
            return None

        admin.last_login_at = datetime.now(timezone.utc)
        db.commit()
        return admin

    @staticmethod
    def create_access_token(admin: AdminUser, expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT access token.

        Args:
            admin: Authenticated admin user
            expires_delta: Optional custom expiration time

        Returns:
            Encoded JWT token string
        """
        settings = get_settings()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))

        to_encode = {
            "sub": str(admin.id),
            "username": admin.username,
            "exp": expire,
            "iat": now,
            "type": "access",
        }
        return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

    @staticmethod
    def decode_access_token(token: str) -> Optional[dict]:
        """Decoded payload for a valid access token, None otherwise"""
        settings = get_settings()
        try:
            payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        except JWTError as e:
            logger.info(f"Rejected access token: {e}")
            return None

        if payload.get("type") != "access" or not payload.get("sub"):
            return None
        return payload
