"""Create the first admin account.

Usage: ADMIN_EMAIL=... ADMIN_PASSWORD=... python create_admin.py
"""
import os

from app.core.security import hash_password
from app.db.session import SessionLocal
from app.models.enums import UserRole
from app.models.user import User
from app.models.room import Room  # noqa: F401
from app.models.booking import Booking  # noqa: F401

email = os.getenv("ADMIN_EMAIL", "admin@example.com")
password = os.getenv("ADMIN_PASSWORD", "admin123")

db = SessionLocal()
try:
    existing_admin = db.query(User).filter(User.email == email).first()
    if existing_admin:
        print("Admin account already exists!")
    else:
        admin = User(
            name="Admin",
            email=email,
            password_hash=hash_password(password),
            role=UserRole.ADMIN,
        )
        db.add(admin)
        db.commit()
        print("Admin account created successfully!")
finally:
    db.close()
