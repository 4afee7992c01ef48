# services/user_service.py
from datetime import datetime

from sqlalchemy.orm import Session
from core.logging import logger
from models import User


def get_or_create_user(db: Session, email: str) -> User:
    """Look up the signed-in user by email, creating the row on first login."""
    email = (email or "").strip().lower()
    if not email:
        raise ValueError("email is required")

    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(email=email)
        db.add(user)
        logger.info("Created user email=%s", email)

    user.last_login_at = datetime.utcnow()
    db.commit()
    db.refresh(user)
    return user
