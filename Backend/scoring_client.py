"""
Scores a writing sample against its style's rubric via the text generation
service and parses the constrained JSON reply into a ScoreReport.
"""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError as SchemaError

from errors import MalformedResponse, MissingFields, UpstreamError
from gemini_client import GeminiClient
from schemas import EvaluationReply, Metrics, ScoreReport
from writing_styles import ANALYSIS_CRITERIA, normalize_style

logger = logging.getLogger(__name__)

EVALUATION_TEMPLATE = """You are an expert writing instructor and evaluator for WordCraft, an AI-powered writing skills enhancement platform.

About WordCraft & Your Role:
- Users select a writing style and receive a custom prompt
- They write a response (typically 100-300 words) to demonstrate their skills
- You provide detailed, fair, and constructive analysis to help them improve

EVALUATION STYLE: {style}
Focus Areas: {criteria}
Special Attention: {focus}

STRICT EVALUATION GUIDELINES:
- Be fair but discerning - not everyone deserves 90+
- Score 0-100 where:
  * 90-100: Exceptional, publication-ready quality
  * 80-89: Strong, skilled writing with minor areas for improvement
  * 70-79: Good attempt, demonstrates competence but needs refinement
  * 60-69: Basic understanding shown, significant improvement needed
  * 50-59: Weak attempt, major deficiencies in multiple areas
  * Below 50: Poor quality, substantial problems throughout

SCORING CRITERIA:
- Clarity: Is the message clear and easy to understand?
- Structure: Is the writing well-organized and logical?
- Word Choice: Are words precise, appropriate, and varied?
- Grammar: Are there errors in grammar, punctuation, spelling?
- Style-Specific: Does it excel in the chosen writing style's requirements?

Respond ONLY with valid JSON in this exact format (no other text):

{{
  "overallScore": [number from 0-100],
  "metrics": {{
    "clarity": [number from 0-100],
    "structure": [number from 0-100],
    "wordChoice": [number from 0-100],
    "grammar": [number from 0-100]
  }},
  "styleSpecificScore": [number from 0-100],
  "strengths": ["specific strength 1", "specific strength 2", "specific strength 3"],
  "weaknesses": ["specific weakness 1", "specific weakness 2"],
  "styleSpecificTips": ["actionable tip 1", "actionable tip 2", "actionable tip 3"]
}}"""

SUBMISSION_TEMPLATE = (
    'Original Prompt: "{prompt}"\n\n'
    'Writer\'s Response: "{response}"\n\n'
    "Please analyze this {style} writing response and provide detailed, strict, "
    "and fair feedback in the specified JSON format."
)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ``` or ```json fence, if any."""
    text = text.strip()
    if not text.startswith("```"):
        return text
    parts = text.split("```")
    body = parts[1] if len(parts) > 1 else text
    if body.lower().startswith("json"):
        body = body[4:]
    return body.strip()


def parse_json_reply(text: str) -> Optional[Any]:
    """Parse JSON from a reply that may be fenced or wrapped in prose."""
    if not text:
        return None
    candidate = strip_code_fence(text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass

    start, end = candidate.find("{"), candidate.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        return json.loads(candidate[start:end + 1])
    except json.JSONDecodeError:
        return None


def fallback_score_report(writing_style: str) -> ScoreReport:
    """Static default scores shown when the evaluation service fails."""
    return ScoreReport(
        overall_score=75,
        metrics=Metrics(clarity=75, structure=75, word_choice=75, grammar=80),
        style_specific_score=75,
        strengths=[
            "Good attempt at the writing task",
            "Shows understanding of the prompt",
            "Demonstrates effort and engagement",
        ],
        weaknesses=[
            "Could benefit from more detailed analysis",
            "May need refinement in style-specific elements",
        ],
        style_specific_tips=[
            f"Focus on {writing_style}-specific techniques",
            "Practice more exercises in this style",
            "Consider studying examples of excellent writing",
        ],
    )


class ScoringClient:
    def __init__(self, gemini: GeminiClient):
        self.gemini = gemini

    def evaluate(self, writing_style: str, prompt: str, user_response: str) -> ScoreReport:
        """Score `user_response` to `prompt` under the rubric of `writing_style`.

        Raises InvalidStyle or MissingFields before any outbound call,
        UpstreamError when the service fails, and MalformedResponse when its
        reply is not a complete, in-range score report.
        """
        style = normalize_style(writing_style)
        if not (prompt or "").strip() or not (user_response or "").strip():
            raise MissingFields()

        rubric = ANALYSIS_CRITERIA[style]
        text = self.gemini.generate_text(
            [
                EVALUATION_TEMPLATE.format(style=style.upper(), **rubric),
                SUBMISSION_TEMPLATE.format(prompt=prompt.strip(), response=user_response.strip(), style=style),
            ],
            temperature=0.3,
        )
        return self._parse_report(text)

    def evaluate_with_fallback(self, writing_style: str, prompt: str, user_response: str):
        """Like evaluate, but answers (fallback report, True) on upstream failure."""
        try:
            return self.evaluate(writing_style, prompt, user_response), False
        except UpstreamError as exc:
            logger.warning("Evaluation failed (%s), using fallback scores", exc.message)
            return fallback_score_report(normalize_style(writing_style)), True

    @staticmethod
    def _parse_report(text: str) -> ScoreReport:
        data = parse_json_reply(text)
        if not isinstance(data, dict):
            logger.error("Analysis reply is not a JSON object. First 500 chars: %s", (text or "")[:500])
            raise MalformedResponse()

        try:
            reply = EvaluationReply.model_validate(data)
        except SchemaError as exc:
            logger.error("Analysis reply does not match the score schema: %s", exc)
            raise MalformedResponse() from exc

        report = ScoreReport.model_validate(reply.model_dump())
        bad = report.out_of_range()
        if bad:
            logger.error("Analysis reply has out-of-range scores: %s", ", ".join(bad))
            raise MalformedResponse()
        return report
