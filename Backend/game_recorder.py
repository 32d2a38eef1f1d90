"""
Persists one scored writing attempt.
"""

import logging
import math
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from errors import MissingFields, PersistenceError, ScoreOutOfRange
from models import Game
from schemas import ScoreReport
from writing_styles import normalize_style

logger = logging.getLogger(__name__)


def round_score(value: float) -> int:
    """Round half up (82.5 -> 83), the way the scores are displayed."""
    return int(math.floor(value + 0.5))


def validate(prompt_text: str, user_response: str, writing_style: str, report: ScoreReport) -> str:
    """
    Check a submission without touching storage and return its canonical style.

    Rejects blank text fields, unknown styles, and any of the six scores
    outside [0, 100].
    """
    if not (prompt_text or "").strip() or not (user_response or "").strip():
        raise MissingFields()
    style = normalize_style(writing_style)

    bad = report.out_of_range()
    if bad:
        raise ScoreOutOfRange(f"Invalid score values: {', '.join(bad)}")
    return style


def record(
    db: Session,
    user_id: int,
    prompt_text: str,
    user_response: str,
    writing_style: str,
    report: ScoreReport,
) -> tuple[int, datetime]:
    """Validate and insert one game row, returning (game id, created at)."""
    style = validate(prompt_text, user_response, writing_style, report)

    scores = {name: round_score(value) for name, value in report.scores().items()}
    game = Game(
        user_id=user_id,
        prompt_text=prompt_text,
        user_response=user_response,
        writing_style=style,
        overall_score=scores["overall_score"],
        style_specific_score=scores["style_specific_score"],
        clarity_score=scores["clarity"],
        structure_score=scores["structure"],
        word_choice_score=scores["word_choice"],
        grammar_score=scores["grammar"],
        strengths=list(report.strengths),
        weaknesses=list(report.weaknesses),
        style_specific_tips=list(report.style_specific_tips),
    )

    try:
        db.add(game)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Game save failed for user %d: %s", user_id, exc)
        raise PersistenceError() from exc

    logger.info("Game %d saved for user %d (%s, score=%d)",
                game.id, user_id, style, scores["overall_score"])
    return game.id, game.created_at
