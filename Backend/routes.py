"""
WordCraft API routes.

Endpoints:
  POST /api/generate-prompt   — AI-generated prompt for a writing style
  POST /api/analyze-writing   — Score a response against the style rubric
  POST /api/save-game         — Persist a scored attempt (guest or account)
  GET  /api/leaderboard       — Ranked best scores, per style or overall
  POST /api/leaderboard       — Rebuild the leaderboard read model
  POST /api/waitlist          — Join the launch waitlist
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import config
import database
import game_recorder
import leaderboard
import user_resolver
import waitlist
from auth import get_identity
from database import get_db
from errors import MissingFields, PersistenceError, WordCraftError
from gemini_client import GeminiClient, get_gemini_client
from limiter import GENERATION_LIMIT, READ_LIMIT, SAVE_LIMIT, limiter
from prompt_generator import PromptGenerator
from schemas import (
    AnalyzeWritingRequest,
    AnalyzeWritingResponse,
    GeneratePromptRequest,
    GeneratePromptResponse,
    LeaderboardResponse,
    MessageResponse,
    SaveGameRequest,
    SaveGameResponse,
    WaitlistRequest,
    WaitlistResponse,
)
from scoring_client import ScoringClient
from user_resolver import Identity
from writing_styles import normalize_style

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["WordCraft"])


# ── Dependencies ─────────────────────────────────────────────────

def get_prompt_generator(gemini: GeminiClient = Depends(get_gemini_client)) -> PromptGenerator:
    return PromptGenerator(gemini)


def get_scoring_client(gemini: GeminiClient = Depends(get_gemini_client)) -> ScoringClient:
    return ScoringClient(gemini)


def refresh_in_background():
    """Post-save refresh with its own session; failures are logged, never raised."""
    db = database.SessionLocal()
    try:
        leaderboard.refresh(db)
    except Exception:
        logger.exception("Background leaderboard refresh failed, read model stays stale until the next refresh")
    finally:
        db.close()


# ── 1. Generate Prompt ───────────────────────────────────────────

@router.post("/generate-prompt", response_model=GeneratePromptResponse)
@limiter.limit(GENERATION_LIMIT)
def generate_prompt(
    request: Request,
    payload: GeneratePromptRequest,
    generator: PromptGenerator = Depends(get_prompt_generator),
):
    """Generate a 1-2 sentence prompt; with allowFallback, never fails upstream."""
    style = normalize_style(payload.writing_style)
    if payload.allow_fallback:
        prompt, used_fallback = generator.generate_with_fallback(style)
    else:
        prompt, used_fallback = generator.generate(style), False
    return GeneratePromptResponse(prompt=prompt, style=style, fallback=used_fallback)


# ── 2. Analyze Writing ───────────────────────────────────────────

@router.post("/analyze-writing", response_model=AnalyzeWritingResponse)
@limiter.limit(GENERATION_LIMIT)
def analyze_writing(
    request: Request,
    payload: AnalyzeWritingRequest,
    scorer: ScoringClient = Depends(get_scoring_client),
):
    """Score the response and echo the inputs back with the report."""
    if not all(value.strip() for value in (payload.user_response, payload.writing_style, payload.prompt)):
        raise MissingFields()
    style = normalize_style(payload.writing_style)
    user_response = payload.user_response.strip()

    if payload.allow_fallback:
        report, used_fallback = scorer.evaluate_with_fallback(style, payload.prompt, user_response)
    else:
        report, used_fallback = scorer.evaluate(style, payload.prompt, user_response), False

    return AnalyzeWritingResponse(
        **report.model_dump(),
        writing_style=style,
        user_response=user_response,
        prompt=payload.prompt,
        fallback=used_fallback,
    )


# ── 3. Save Game ─────────────────────────────────────────────────

@router.post("/save-game", response_model=SaveGameResponse)
@limiter.limit(SAVE_LIMIT)
def save_game(
    request: Request,
    payload: SaveGameRequest,
    background_tasks: BackgroundTasks,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
):
    """
    Save one analysed attempt.

    Steps:
      1. Validate the submission (nothing is written if this fails)
      2. Resolve the account or find-or-create the guest user
      3. Insert the game row
      4. Schedule a leaderboard refresh after the response is sent
    """
    game_recorder.validate(payload.prompt_text, payload.user_response,
                           payload.writing_style, payload.analysis_result)
    try:
        user_id = user_resolver.resolve(db, identity, payload.username)
        game_id, saved_at = game_recorder.record(
            db,
            user_id,
            payload.prompt_text,
            payload.user_response,
            payload.writing_style,
            payload.analysis_result,
        )
    except WordCraftError:
        raise
    except Exception as exc:
        db.rollback()
        logger.error("save_game failed: %s", exc)
        raise PersistenceError() from exc

    background_tasks.add_task(refresh_in_background)
    return SaveGameResponse(game_id=game_id, user_id=user_id, saved_at=saved_at)


# ── 4. Get Leaderboard ───────────────────────────────────────────

@router.get("/leaderboard", response_model=LeaderboardResponse)
@limiter.limit(READ_LIMIT)
def get_leaderboard(
    request: Request,
    style: str = Query(leaderboard.ALL_STYLES),
    limit: int = Query(config.DEFAULT_LEADERBOARD_LIMIT),
    current_username: Optional[str] = Query(None, alias="currentUsername"),
    current_score: Optional[float] = Query(None, alias="currentScore"),
    current_style: Optional[str] = Query(None, alias="currentStyle"),
    db: Session = Depends(get_db),
):
    """Ranked entries, optionally with the caller's session result merged in."""
    style = style.strip().lower()
    style_label = leaderboard.ALL_STYLES if style in ("", leaderboard.ALL_STYLES) else normalize_style(style)
    try:
        entries = leaderboard.query(db, style_label, limit)
        stale = leaderboard.is_stale(db)
    except SQLAlchemyError as exc:
        logger.error("get_leaderboard failed: %s", exc)
        raise PersistenceError("Failed to fetch leaderboard data") from exc

    if current_username and current_username.strip() and current_score is not None:
        if style_label != leaderboard.ALL_STYLES:
            entry_style = style_label
        else:
            entry_style = normalize_style(current_style) if current_style else leaderboard.ALL_STYLES
        provisional = leaderboard.provisional_entry(current_username.strip(), current_score, entry_style)
        entries = leaderboard.merge_provisional(entries, provisional)

    return LeaderboardResponse(data=entries, style=style_label, total=len(entries), stale=stale)


# ── 5. Refresh Leaderboard ───────────────────────────────────────

@router.post("/leaderboard", response_model=MessageResponse)
@limiter.limit(GENERATION_LIMIT)
def refresh_leaderboard(request: Request, db: Session = Depends(get_db)):
    """Rebuild the read model from all games."""
    leaderboard.refresh(db)
    return MessageResponse(message="Leaderboard refreshed successfully")


# ── 6. Waitlist ──────────────────────────────────────────────────

@router.post("/waitlist", response_model=WaitlistResponse)
@limiter.limit(SAVE_LIMIT)
def join_waitlist(request: Request, payload: WaitlistRequest, db: Session = Depends(get_db)):
    position = waitlist.join(db, payload.email)
    return WaitlistResponse(position=position)
