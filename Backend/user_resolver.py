"""
Maps a request identity to an application-level user row, creating it on
first use. Authenticated accounts are keyed by e-mail; guests by username.
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from errors import UserCreationFailed, ValidationError
from models import User

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 50


@dataclass(frozen=True)
class Anonymous:
    """No (verified) authentication session on the request."""


@dataclass(frozen=True)
class Authenticated:
    email: str


Identity = Union[Anonymous, Authenticated]


def _clean_name(requested_display_name: Optional[str]) -> Optional[str]:
    name = (requested_display_name or "").strip()
    if len(name) > MAX_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at most {MAX_USERNAME_LENGTH} characters")
    return name or None


def resolve(db: Session, identity: Identity, requested_display_name: Optional[str] = None) -> int:
    """Return the user id for `identity`, creating the row if needed."""
    name = _clean_name(requested_display_name)
    if isinstance(identity, Authenticated):
        return _resolve_account(db, identity.email, name)
    return _find_or_create_guest(db, name)


def _find_account(db: Session, email: str) -> Optional[int]:
    row = db.execute(
        text("SELECT id FROM users WHERE email = :email AND is_guest = :is_guest"),
        {"email": email, "is_guest": False},
    ).fetchone()
    return row[0] if row else None


def _resolve_account(db: Session, email: str, name: Optional[str]) -> int:
    try:
        user_id = _find_account(db, email)
        if user_id is not None:
            return user_id

        label = name or email
        user = User(username=label, display_name=label, email=email, is_guest=False)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Another request created the account first.
            db.rollback()
            user_id = _find_account(db, email)
            if user_id is None:
                raise
            return user_id

        logger.info("Created account user %d for %s", user.id, email)
        return user.id
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("User creation failed for %s: %s", email, exc)
        raise UserCreationFailed() from exc


def _find_or_create_guest(db: Session, name: Optional[str]) -> int:
    """Single-statement upsert keyed by guest_key, so racing requests share one row."""
    username = name or f"guest_{uuid.uuid4().hex[:12]}"
    try:
        row = db.execute(
            text(
                """
                INSERT INTO users (username, display_name, is_guest, guest_key)
                VALUES (:username, :username, :is_guest, :username)
                ON CONFLICT (guest_key)
                DO UPDATE SET guest_key = excluded.guest_key
                RETURNING id
                """
            ),
            {"username": username, "is_guest": True},
        ).fetchone()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Guest user creation failed for %r: %s", username, exc)
        raise UserCreationFailed("Failed to create guest user") from exc

    return row[0]
