"""
Launch waitlist sign-ups.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import AlreadyOnWaitlist, PersistenceError
from models import WaitlistSignup

logger = logging.getLogger(__name__)


def join(db: Session, email: str) -> int:
    """Add `email` to the waitlist and return its position (total sign-ups)."""
    email = email.strip().lower()
    try:
        db.add(WaitlistSignup(email=email, status="active"))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise AlreadyOnWaitlist() from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Waitlist signup failed: %s", exc)
        raise PersistenceError("Failed to join waitlist. Please try again.") from exc

    position = db.execute(select(func.count()).select_from(WaitlistSignup)).scalar()
    logger.info("Waitlist signup #%d", position)
    return position
