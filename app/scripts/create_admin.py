# ===== app/scripts/create_admin.py =====
"""
Create (or reset the password of) a dashboard admin.

    python -m app.scripts.create_admin <username> <password>

Falls back to ADMIN_USERNAME / ADMIN_PASSWORD from the environment.
"""
import os
import sys
from sqlalchemy.orm import Session
from app.config.database import SessionLocal
from app.models.admin_user import AdminUser


def create_admin(db: Session, username: str, password: str) -> AdminUser:
    admin = db.query(AdminUser).filter(AdminUser.username == username).first()
    if admin:
        print(f"Admin user already exists, resetting password: {username}")
    else:
        admin = AdminUser(username=username, is_active=True)
        db.add(admin)

    admin.set_password(password)
    db.commit()
    return admin


def main():
    args = sys.argv[1:]
    username = args[0] if len(args) > 0 else os.getenv("ADMIN_USERNAME")
    password = args[1] if len(args) > 1 else os.getenv("ADMIN_PASSWORD")

    if not username or not password:
        print("Usage: python -m app.scripts.create_admin <username> <password>")
        sys.exit(1)
    if len(password) < 8:
        print("Password must be at least 8 characters")
        sys.exit(1)

    db = SessionLocal()
    try:
        create_admin(db, username, password)
        print(f"✅ Admin user ready: {username}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
