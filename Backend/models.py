"""
SQLAlchemy ORM models for WordCraft.
Tables: users, games, leaderboard, leaderboard_state, waitlist
"""

from datetime import datetime, timezone

from sqlalchemy import (
    JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, func
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    """A player: an authenticated account or a guest."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=False)
    email = Column(String(320), unique=True, nullable=True)
    display_name = Column(String(255), nullable=False)
    is_guest = Column(Boolean, nullable=False, default=False)
    # Only guests carry a key; NULLs never collide, so accounts are unconstrained here.
    guest_key = Column(String(255), unique=True, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    games = relationship("Game", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', guest={self.is_guest})>"


class Game(Base):
    """One scored writing attempt. Append-only."""

    __tablename__ = "games"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    prompt_text = Column(Text, nullable=False)
    user_response = Column(Text, nullable=False)
    writing_style = Column(String(50), nullable=False)
    overall_score = Column(Integer, nullable=False)
    style_specific_score = Column(Integer, nullable=False)
    clarity_score = Column(Integer, nullable=False)
    structure_score = Column(Integer, nullable=False)
    word_choice_score = Column(Integer, nullable=False)
    grammar_score = Column(Integer, nullable=False)
    strengths = Column(JSON, nullable=False, default=list)
    weaknesses = Column(JSON, nullable=False, default=list)
    style_specific_tips = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    user = relationship("User", back_populates="games")

    def __repr__(self):
        return f"<Game(id={self.id}, user_id={self.user_id}, style='{self.writing_style}', score={self.overall_score})>"


class Leaderboard(Base):
    """Aggregated best performance per (user, writing style). Rebuilt by refresh."""

    __tablename__ = "leaderboard"
    __table_args__ = (UniqueConstraint("user_id", "writing_style", name="uq_leaderboard_user_style"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    username = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=False)
    writing_style = Column(String(50), nullable=False)
    best_score = Column(Integer, nullable=False)
    best_style_score = Column(Integer, nullable=False)
    total_games = Column(Integer, nullable=False)
    avg_score = Column(Float, nullable=False)
    style_rank = Column(Integer, nullable=True)
    overall_rank = Column(Integer, nullable=True)
    best_achieved_at = Column(DateTime(timezone=True), nullable=False)
    last_played = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return (
            f"<Leaderboard(user_id={self.user_id}, style='{self.writing_style}', "
            f"best_score={self.best_score}, style_rank={self.style_rank})>"
        )


class LeaderboardState(Base):
    """Single row describing the last leaderboard refresh."""

    __tablename__ = "leaderboard_state"

    id = Column(Integer, primary_key=True)
    last_game_id = Column(Integer, nullable=True)
    refreshed_at = Column(DateTime(timezone=True), nullable=False)


class WaitlistSignup(Base):
    """An e-mail address waiting for launch."""

    __tablename__ = "waitlist"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, nullable=False)
    status = Column(String(20), nullable=False, default="active")
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self):
        return f"<WaitlistSignup(id={self.id}, email='{self.email}')>"
