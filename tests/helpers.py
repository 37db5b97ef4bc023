"""Shared test helpers: mock Gemini responses and mock providers."""

from unittest.mock import MagicMock

from raggedy.agent.provider import ModelCallResult
from raggedy.agent.usage import TokenUsage


def _make_usage_metadata(
    prompt: int = 100, candidates: int = 20, cached: int | None = None, thoughts: int | None = None,
):
    meta = MagicMock()
    meta.prompt_token_count = prompt
    meta.candidates_token_count = candidates
    meta.cached_content_token_count = cached
    meta.thoughts_token_count = thoughts
    return meta


def _make_text_response(text: str, prompt_tokens: int = 100, output_tokens: int = 20):
    """Create a mock Gemini response with text content."""
    part = MagicMock()
    part.text = text
    part.function_call = None

    content = MagicMock()
    content.role = "model"
    content.parts = [part]

    candidate = MagicMock()
    candidate.content = content

    response = MagicMock()
    response.candidates = [candidate]
    response.function_calls = None
    response.text = text
    response.usage_metadata = _make_usage_metadata(prompt_tokens, output_tokens)
    return response


def _make_fn_call_response(name: str, args: dict):
    """Create a mock Gemini response with a function call."""
    fn_call = MagicMock()
    fn_call.name = name
    fn_call.args = args

    fn_part = MagicMock()
    fn_part.function_call = fn_call

    content = MagicMock()
    content.role = "model"
    content.parts = [fn_part]

    candidate = MagicMock()
    candidate.content = content

    response = MagicMock()
    response.candidates = [candidate]
    response.function_calls = [fn_call]
    response.text = None
    response.usage_metadata = _make_usage_metadata(50, 10)
    return response


def _make_call_result(text: str, model: str = "gemini-2.5-flash", cost: float = 0.001) -> ModelCallResult:
    return ModelCallResult(
        text=text,
        model=model,
        usage=TokenUsage(input_tokens=1000, output_tokens=100),
        elapsed=0.5,
        cost=cost,
    )


def _make_mock_provider(*texts: str) -> MagicMock:
    """Mock GenerationProvider returning one ModelCallResult per call, in order."""
    provider = MagicMock()
    provider.model = "gemini-2.5-flash"
    provider.generate = MagicMock(side_effect=[_make_call_result(t) for t in texts])
    return provider
