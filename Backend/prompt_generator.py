"""
Generates a short, style-specific writing prompt via the text generation service.
"""

import logging

from errors import EmptyResult, UpstreamError
from gemini_client import GeminiClient
from writing_styles import FALLBACK_PROMPTS, PROMPT_INSTRUCTIONS, normalize_style

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are a writing instructor creating prompts for WordCraft, an AI-powered writing skills enhancement platform.

About WordCraft:
- Users select a writing style (Professional, Creative, Marketing, or Academic)
- They receive a custom prompt tailored to that style
- Users write a response to your prompt (typically 100-300 words)
- Their response gets analyzed for clarity, structure, word choice, grammar, and style-specific criteria

Your task: {instruction}

Important guidelines:
- The prompt should encourage a response that can be meaningfully analyzed
- Make it specific enough to guide the writer but open enough for creativity
- Aim for prompts that would result in 100-300 word responses
- Keep the prompt concise (1-2 sentences) but engaging and clear
- Do not include instructions about word count or format - just the prompt itself

Return only the prompt itself with no additional commentary or explanation."""


class PromptGenerator:
    def __init__(self, gemini: GeminiClient):
        self.gemini = gemini

    def generate(self, writing_style: str) -> str:
        style = normalize_style(writing_style)
        text = self.gemini.generate_text(
            [PROMPT_TEMPLATE.format(instruction=PROMPT_INSTRUCTIONS[style])],
            temperature=0.9,
        )
        prompt = text.strip().strip('"').strip()
        if not prompt:
            raise EmptyResult()
        return prompt

    def generate_with_fallback(self, writing_style: str):
        """Return (prompt, used_fallback); the style's static prompt on upstream failure."""
        style = normalize_style(writing_style)
        try:
            return self.generate(style), False
        except UpstreamError as exc:
            logger.warning("Prompt generation failed (%s), using fallback prompt", exc.message)
            return FALLBACK_PROMPTS[style], True
