import pytest
import requests

import gemini_client
from errors import EmptyResult, InvalidStyle, UpstreamError
from gemini_client import GeminiClient
from helpers import FakeGemini
from prompt_generator import PromptGenerator
from writing_styles import FALLBACK_PROMPTS


class _Resp:
    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self):
        if 400 <= self.status_code:
            raise requests.exceptions.HTTPError(response=self)

    def json(self):
        return self._payload


def _candidate(text):
    return {"candidates": [{"finishReason": "STOP", "content": {"parts": [{"text": text}]}}]}


def test_generate_returns_upstream_text(monkeypatch):
    calls = []

    def fake_post(url, params=None, json=None, timeout=None):
        calls.append({"url": url, "params": params, "json": json, "timeout": timeout})
        return _Resp(200, _candidate("  Describe a city that only exists at night.  "))

    monkeypatch.setattr(gemini_client.requests, "post", fake_post)
    generator = PromptGenerator(GeminiClient(api_key="test-key", timeout=3, max_retries=1))

    prompt, used_fallback = generator.generate_with_fallback("creative")

    assert prompt == "Describe a city that only exists at night."
    assert prompt != FALLBACK_PROMPTS["creative"]
    assert used_fallback is False
    assert calls[0]["timeout"] == 3
    assert calls[0]["params"] == {"key": "test-key"}
    assert "creative writing prompt" in calls[0]["json"]["contents"][0]["parts"][0]["text"]


def test_timeout_falls_back_to_static_prompt(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.Timeout("read timed out")

    monkeypatch.setattr(gemini_client.requests, "post", fake_post)
    generator = PromptGenerator(GeminiClient(api_key="test-key", max_retries=3))

    prompt, used_fallback = generator.generate_with_fallback("creative")

    assert prompt == FALLBACK_PROMPTS["creative"]
    assert used_fallback is True


def test_retryable_status_is_retried(monkeypatch):
    responses = [_Resp(503, {}), _Resp(200, _candidate("Pitch a four-day work week to your CEO."))]
    monkeypatch.setattr(gemini_client.requests, "post", lambda *a, **kw: responses.pop(0))
    monkeypatch.setattr(gemini_client.time, "sleep", lambda seconds: None)

    prompt = PromptGenerator(GeminiClient(api_key="test-key", max_retries=2)).generate("professional")

    assert prompt == "Pitch a four-day work week to your CEO."


def test_non_retryable_status_raises_upstream_error(monkeypatch):
    monkeypatch.setattr(gemini_client.requests, "post", lambda *a, **kw: _Resp(400, {}))

    with pytest.raises(UpstreamError):
        PromptGenerator(GeminiClient(api_key="test-key", max_retries=3)).generate("academic")


def test_missing_api_key_raises_upstream_error():
    with pytest.raises(UpstreamError):
        GeminiClient(api_key="").generate_text(["hello"])


def test_blank_reply_raises_empty_result():
    with pytest.raises(EmptyResult):
        PromptGenerator(FakeGemini(replies=["   "])).generate("marketing")


def test_invalid_style_is_rejected():
    gemini = FakeGemini(replies=["unused"])

    with pytest.raises(InvalidStyle):
        PromptGenerator(gemini).generate_with_fallback("poetry")
    assert gemini.calls == []
