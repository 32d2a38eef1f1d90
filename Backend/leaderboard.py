"""
Leaderboard read model: rebuild from the games table, ranked queries, and
the merge of a not-yet-persisted session result into a ranked list.

Ranking order everywhere is best score descending, then whoever first
reached that score.
"""

import logging
import threading
from typing import Optional

from sqlalchemy import DateTime, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
from cache import cache_get, cache_invalidate_prefix, cache_set
from errors import InvalidLimit, RefreshError, ScoreOutOfRange
from game_recorder import round_score
from models import LeaderboardState, utcnow
from schemas import LeaderboardEntry
from writing_styles import normalize_style

logger = logging.getLogger(__name__)

ALL_STYLES = "all"
CACHE_PREFIX = "leaderboard:"
REFRESH_LOCK_KEY = 734_001

_refresh_lock = threading.Lock()

_REBUILD_SQL = text(
    """
    INSERT INTO leaderboard (
        user_id, username, display_name, writing_style, best_score, best_style_score,
        total_games, avg_score, style_rank, overall_rank, best_achieved_at, last_played
    )
    SELECT
        a.user_id,
        u.username,
        u.display_name,
        a.writing_style,
        a.best_score,
        a.best_style_score,
        a.total_games,
        a.avg_score,
        RANK() OVER (
            PARTITION BY a.writing_style
            ORDER BY a.best_score DESC, MIN(b.created_at) ASC
        ),
        RANK() OVER (ORDER BY a.best_score DESC, MIN(b.created_at) ASC),
        MIN(b.created_at),
        a.last_played
    FROM (
        SELECT
            user_id,
            writing_style,
            MAX(overall_score) AS best_score,
            MAX(style_specific_score) AS best_style_score,
            COUNT(*) AS total_games,
            ROUND(AVG(overall_score), 1) AS avg_score,
            MAX(created_at) AS last_played
        FROM games
        WHERE id <= :max_game_id
        GROUP BY user_id, writing_style
    ) a
    -- the games that reached the best score; the earliest one breaks ties
    JOIN games b
      ON b.user_id = a.user_id
     AND b.writing_style = a.writing_style
     AND b.overall_score = a.best_score
     AND b.id <= :max_game_id
    JOIN users u ON u.id = a.user_id
    GROUP BY
        a.user_id, u.username, u.display_name, a.writing_style, a.best_score,
        a.best_style_score, a.total_games, a.avg_score, a.last_played
    """
)

_ENTRY_COLUMNS = (
    "username, display_name, writing_style, best_score, best_style_score, "
    "total_games, avg_score, last_played"
)

_BY_STYLE_SQL = text(
    f"""
    SELECT {_ENTRY_COLUMNS}
    FROM leaderboard
    WHERE writing_style = :style
    ORDER BY best_score DESC, best_achieved_at ASC, user_id ASC
    LIMIT :limit
    """
).columns(last_played=DateTime(timezone=True))

# Each username's single best (user, style) row.
_OVERALL_SQL = text(
    f"""
    SELECT {_ENTRY_COLUMNS}
    FROM (
        SELECT l.*,
               ROW_NUMBER() OVER (
                   PARTITION BY l.username
                   ORDER BY l.best_score DESC, l.best_achieved_at ASC, l.user_id ASC
               ) AS pick
        FROM leaderboard l
    ) best
    WHERE pick = 1
    ORDER BY best_score DESC, best_achieved_at ASC, user_id ASC
    LIMIT :limit
    """
).columns(last_played=DateTime(timezone=True))


# ── Refresh ──────────────────────────────────────────────────────

def refresh(db: Session):
    """
    Rebuild the read model from every game row in one transaction.

    Serialized per process, and across processes on PostgreSQL, so
    concurrent or redundant calls leave the same result.
    """
    with _refresh_lock:
        try:
            if db.get_bind().dialect.name == "postgresql":
                db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": REFRESH_LOCK_KEY})

            max_game_id = db.execute(text("SELECT MAX(id) FROM games")).scalar()
            db.execute(text("DELETE FROM leaderboard"))
            if max_game_id is not None:
                db.execute(_REBUILD_SQL, {"max_game_id": max_game_id})

            state = db.get(LeaderboardState, 1)
            if state is None:
                state = LeaderboardState(id=1)
                db.add(state)
            state.last_game_id = max_game_id
            state.refreshed_at = utcnow()
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Leaderboard refresh failed: %s", exc)
            raise RefreshError() from exc

    cache_invalidate_prefix(CACHE_PREFIX)
    logger.info("Leaderboard refreshed (last game id=%s)", max_game_id)


def is_stale(db: Session) -> bool:
    """True when a game was inserted after the last refresh."""
    refreshed = db.execute(text("SELECT last_game_id FROM leaderboard_state WHERE id = 1")).fetchone()
    latest = db.execute(text("SELECT MAX(id) FROM games")).scalar()
    if refreshed is None:
        return latest is not None
    return latest != refreshed[0]


# ── Query ────────────────────────────────────────────────────────

def validate_limit(limit) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidLimit()
    return limit


def query(db: Session, style_filter: Optional[str] = None,
          limit: int = config.DEFAULT_LEADERBOARD_LIMIT) -> list[LeaderboardEntry]:
    """Top `limit` entries for one style, or one best entry per username for "all"."""
    limit = validate_limit(limit)
    style = ALL_STYLES if style_filter in (None, "", ALL_STYLES) else normalize_style(style_filter)

    cache_key = f"{CACHE_PREFIX}{style}:{limit}"
    cached = cache_get(cache_key)
    if cached is not None:
        return [LeaderboardEntry(**item) for item in cached]

    if style == ALL_STYLES:
        rows = db.execute(_OVERALL_SQL, {"limit": limit}).mappings().all()
    else:
        rows = db.execute(_BY_STYLE_SQL, {"style": style, "limit": limit}).mappings().all()

    entries = [LeaderboardEntry(rank=idx + 1, **row) for idx, row in enumerate(rows)]
    cache_set(cache_key, [entry.model_dump(mode="json") for entry in entries])
    return entries


# ── Provisional session entry ────────────────────────────────────

def provisional_entry(username: str, score: float, writing_style: str,
                      style_score: Optional[float] = None) -> LeaderboardEntry:
    """Build the entry for a result the read model may not contain yet."""
    for value in (score, style_score):
        if value is not None and not 0 <= value <= 100:
            raise ScoreOutOfRange()
    best = round_score(score)
    return LeaderboardEntry(
        username=username,
        display_name=username,
        writing_style=writing_style,
        best_score=best,
        best_style_score=round_score(style_score) if style_score is not None else best,
        total_games=1,
        avg_score=float(best),
        is_current_user=True,
    )


def _renumber(entries: list[LeaderboardEntry]) -> list[LeaderboardEntry]:
    return [entry.model_copy(update={"rank": idx}) for idx, entry in enumerate(entries, start=1)]


def merge_provisional(entries: list[LeaderboardEntry],
                      provisional: Optional[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """
    Return a new ranked list with `provisional` placed by score.

    The provisional result is the newest play, so it sits after every entry
    with an equal or higher score. When the same username is already listed,
    only the better of the two is kept and it is flagged as the current user.
    """
    merged = list(entries)
    if provisional is None:
        return _renumber(merged)

    existing = next((i for i, e in enumerate(merged) if e.username == provisional.username), None)
    if existing is not None:
        if merged[existing].best_score >= provisional.best_score:
            merged[existing] = merged[existing].model_copy(update={"is_current_user": True})
            return _renumber(merged)
        del merged[existing]

    position = next(
        (i for i, e in enumerate(merged) if e.best_score < provisional.best_score),
        len(merged),
    )
    merged.insert(position, provisional.model_copy(update={"is_current_user": True}))
    return _renumber(merged)
