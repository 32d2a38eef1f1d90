"""
SQLAlchemy engine, session factory and the request-scoped session dependency.
"""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

import config
from models import Base

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """Pool settings for PostgreSQL; SQLite only needs cross-thread access."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_size": 20, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(config.DATABASE_URL, **_engine_options(config.DATABASE_URL))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables():
    """Create all tables if they don't already exist."""
    Base.metadata.create_all(bind=engine)
    logger.info("✓ Database tables ensured")


def create_indexes():
    """Create read-path indexes (idempotent — uses IF NOT EXISTS)."""
    indexes = [
        "CREATE INDEX IF NOT EXISTS idx_games_user_id       ON games (user_id)",
        "CREATE INDEX IF NOT EXISTS idx_games_style_score   ON games (writing_style, overall_score DESC)",
        "CREATE INDEX IF NOT EXISTS idx_lb_style_best       ON leaderboard (writing_style, best_score DESC, best_achieved_at)",
        "CREATE INDEX IF NOT EXISTS idx_lb_best             ON leaderboard (best_score DESC, best_achieved_at)",
        "CREATE INDEX IF NOT EXISTS idx_lb_username         ON leaderboard (username)",
    ]
    with engine.connect() as conn:
        for stmt in indexes:
            conn.execute(text(stmt))
        conn.commit()
    logger.info("✓ Database indexes ensured")


def get_db():
    """Yield a session and always close it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
