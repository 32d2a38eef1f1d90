"""
The four writing styles and the per-style text used to prompt and score.
"""

from errors import InvalidStyle

PROFESSIONAL = "professional"
CREATIVE = "creative"
MARKETING = "marketing"
ACADEMIC = "academic"

WRITING_STYLES = (PROFESSIONAL, CREATIVE, MARKETING, ACADEMIC)

PROMPT_INSTRUCTIONS = {
    PROFESSIONAL: (
        "Generate a professional writing prompt that would be suitable for business communication, "
        "reports, or formal correspondence. The prompt should challenge the writer to use clear, "
        "concise language and proper business etiquette."
    ),
    CREATIVE: (
        "Generate a creative writing prompt that encourages imagination, storytelling, and artistic "
        "expression. The prompt should inspire vivid descriptions, character development, or "
        "innovative narrative techniques."
    ),
    MARKETING: (
        "Generate a marketing writing prompt that focuses on persuasive content, brand messaging, or "
        "customer engagement. The prompt should challenge the writer to create compelling, "
        "action-oriented content."
    ),
    ACADEMIC: (
        "Generate an academic writing prompt that requires research-based arguments, critical "
        "analysis, or scholarly discussion. The prompt should challenge the writer to use formal "
        "language and evidence-based reasoning."
    ),
}

ANALYSIS_CRITERIA = {
    PROFESSIONAL: {
        "criteria": "clarity, conciseness, professional tone, business appropriateness, structure, "
                    "and formal language usage",
        "focus": "business communication standards, professional etiquette, and workplace-appropriate language",
    },
    CREATIVE: {
        "criteria": "creativity, imagination, narrative flow, character development, descriptive "
                    "language, and artistic expression",
        "focus": "storytelling techniques, literary devices, and creative word choice",
    },
    MARKETING: {
        "criteria": "persuasiveness, audience engagement, call-to-action effectiveness, brand voice, "
                    "and compelling messaging",
        "focus": "marketing effectiveness, audience appeal, and conversion potential",
    },
    ACADEMIC: {
        "criteria": "formal tone, logical argumentation, evidence-based reasoning, scholarly language, "
                    "and research depth",
        "focus": "academic writing conventions, critical analysis, and scholarly discourse",
    },
}

FALLBACK_PROMPTS = {
    PROFESSIONAL: (
        "Write a memo to your team announcing a change to the weekly meeting schedule, "
        "explaining the reason and what you need from each person."
    ),
    CREATIVE: (
        "Describe the moment a lighthouse keeper notices a ship that should not exist "
        "sailing toward the rocks at dawn."
    ),
    MARKETING: (
        "Write a product announcement for a reusable water bottle that keeps drinks cold "
        "for 48 hours, aimed at busy commuters."
    ),
    ACADEMIC: (
        "Argue whether remote work improves or harms long-term productivity, "
        "supporting your position with evidence and addressing one counterargument."
    ),
}


def normalize_style(value) -> str:
    """Return the canonical lower-case style tag or raise InvalidStyle."""
    style = (value or "").strip().lower() if isinstance(value, str) else ""
    if style not in WRITING_STYLES:
        raise InvalidStyle()
    return style
