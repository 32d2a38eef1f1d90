"""
Application error hierarchy. Each class carries the HTTP status the API
boundary answers with; the handlers in app.py render them as {"error": ...}.
"""

from typing import Optional


class WordCraftError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# ── Client-correctable (4xx) ─────────────────────────────────────

class ValidationError(WordCraftError):
    status_code = 400
    default_message = "Invalid request"


class MissingFields(ValidationError):
    default_message = "Missing required fields"


class InvalidStyle(ValidationError):
    default_message = "Invalid writing style"


class InvalidLimit(ValidationError):
    default_message = "Limit must be a positive integer"


class ScoreOutOfRange(ValidationError):
    default_message = "Invalid score values"


class AlreadyOnWaitlist(WordCraftError):
    status_code = 409
    default_message = "You're already on our waitlist! We'll notify you when WordCraft launches."


# ── Text generation service ──────────────────────────────────────

class UpstreamError(WordCraftError):
    default_message = "Text generation service unavailable"


class MalformedResponse(UpstreamError):
    default_message = "Failed to parse analysis JSON"


class EmptyResult(UpstreamError):
    default_message = "Text generation service returned no content"


# ── Storage ──────────────────────────────────────────────────────

class PersistenceError(WordCraftError):
    default_message = "Failed to save game result"


class UserCreationFailed(PersistenceError):
    default_message = "Failed to create user"


class RefreshError(PersistenceError):
    default_message = "Failed to refresh leaderboard"
