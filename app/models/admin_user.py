# ============================================================================
# FILE: app/models/admin_user.py
# Dashboard administrator account
# ============================================================================
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from sqlalchemy.sql import func
from passlib.context import CryptContext
import uuid
from app.models.base import Base

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


class AdminUser(Base):
    __tablename__ = "admin_users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(100), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    def set_password(self, password: str):
        self.hashed_password = pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        return pwd_context.verify(password, self.hashed_password)
