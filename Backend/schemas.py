"""
Pydantic schemas for request validation and response serialization.

Request/response bodies of the writing endpoints use camelCase on the wire;
leaderboard entries keep the snake_case column names of the read model.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Score report ─────────────────────────────────────────────────

class Metrics(CamelModel):
    clarity: float
    structure: float
    word_choice: float
    grammar: float


class ScoreReport(CamelModel):
    """Structured result of evaluating one writing submission."""

    overall_score: float
    metrics: Metrics
    style_specific_score: float
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    style_specific_tips: list[str] = Field(default_factory=list)

    def scores(self) -> dict:
        """The six numeric scores keyed by field name."""
        return {
            "overall_score": self.overall_score,
            "style_specific_score": self.style_specific_score,
            "clarity": self.metrics.clarity,
            "structure": self.metrics.structure,
            "word_choice": self.metrics.word_choice,
            "grammar": self.metrics.grammar,
        }

    def out_of_range(self) -> list[str]:
        """Names of the scores that fall outside [0, 100]."""
        return [name for name, value in self.scores().items() if not 0 <= value <= 100]


class EvaluationReply(ScoreReport):
    """What the scoring service must return: every list present and non-empty."""

    strengths: list[str] = Field(..., min_length=1)
    weaknesses: list[str] = Field(..., min_length=1)
    style_specific_tips: list[str] = Field(..., min_length=1)


# ── Request Schemas ──────────────────────────────────────────────

class GeneratePromptRequest(CamelModel):
    writing_style: str
    allow_fallback: bool = False


class AnalyzeWritingRequest(CamelModel):
    user_response: str
    writing_style: str
    prompt: str
    allow_fallback: bool = False


class SaveGameRequest(CamelModel):
    """Request body for saving one analysed attempt."""

    username: Optional[str] = None
    prompt_text: str
    user_response: str
    writing_style: str
    analysis_result: ScoreReport


class WaitlistRequest(BaseModel):
    email: str = Field(..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ── Response Schemas ─────────────────────────────────────────────

class GeneratePromptResponse(BaseModel):
    prompt: str
    style: str
    fallback: bool = False


class AnalyzeWritingResponse(ScoreReport):
    """Score report merged with the echoed inputs."""

    writing_style: str
    user_response: str
    prompt: str
    fallback: bool = False


class SaveGameResponse(CamelModel):
    success: bool = True
    game_id: int
    user_id: int
    saved_at: datetime
    message: str = "Game result saved successfully"


class LeaderboardEntry(BaseModel):
    """A single entry in the leaderboard response."""

    username: str
    display_name: str
    writing_style: str
    best_score: int
    best_style_score: int
    total_games: int
    avg_score: float
    rank: int = 0
    last_played: Optional[datetime] = None
    is_current_user: bool = False


class LeaderboardResponse(BaseModel):
    success: bool = True
    data: list[LeaderboardEntry]
    style: str
    total: int
    stale: bool = False


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class WaitlistResponse(BaseModel):
    success: bool = True
    position: int
    message: str = "Successfully joined the waitlist!"


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
