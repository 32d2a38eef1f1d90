from schemas import Metrics, ScoreReport


class FakeGemini:
    """Stands in for GeminiClient: replays canned replies or raises."""

    def __init__(self, replies=None, error=None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    def generate_text(self, parts, temperature=0.8):
        self.calls.append(parts)
        if self.error is not None:
            raise self.error
        return self.replies.pop(0)


def make_report(overall=82, style=79, clarity=80, structure=85, word_choice=75, grammar=90):
    return ScoreReport(
        overall_score=overall,
        metrics=Metrics(clarity=clarity, structure=structure, word_choice=word_choice, grammar=grammar),
        style_specific_score=style,
        strengths=["Strong hook", "Clear call to action", "Concise"],
        weaknesses=["Generic closing", "Passive voice"],
        style_specific_tips=["Name the audience", "Add urgency", "Quantify benefits"],
    )
