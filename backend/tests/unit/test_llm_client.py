"""Tests for model reply parsing and the unconfigured client."""

import pytest

from wanderlog.exceptions import ModelUnavailable
from wanderlog.services.llm_client import LLMClient, extract_json_payload

PAYLOAD = '{"title": "Kyoto in Autumn", "highlights": ["Fushimi Inari"]}'


def test_plain_json() -> None:
    assert extract_json_payload(PAYLOAD)["title"] == "Kyoto in Autumn"


def test_json_fence_parses_like_plain() -> None:
    fenced = f"Here you go:\n```json\n{PAYLOAD}\n```\nEnjoy!"
    assert extract_json_payload(fenced) == extract_json_payload(PAYLOAD)


def test_unlabelled_fence_parses_like_plain() -> None:
    fenced = f"```\n{PAYLOAD}\n```"
    assert extract_json_payload(fenced) == extract_json_payload(PAYLOAD)


def test_json_fence_preferred_over_other_fences() -> None:
    text = f"```python\nprint('hi')\n```\n```json\n{PAYLOAD}\n```"
    assert extract_json_payload(text)["title"] == "Kyoto in Autumn"


def test_array_payload() -> None:
    assert extract_json_payload('[{"destination": "Lisbon"}]') == [{"destination": "Lisbon"}]


def test_prose_raises_value_error() -> None:
    with pytest.raises(ValueError):
        extract_json_payload("I could not come up with anything, sorry.")


def test_provider_selection() -> None:
    assert LLMClient(provider="auto", anthropic_api_key="", openai_api_key="sk-test").provider == "openai"
    assert LLMClient(provider="auto", anthropic_api_key="sk-ant", openai_api_key="sk-test").provider == "anthropic"
    assert LLMClient(provider="openai", anthropic_api_key="sk-ant", openai_api_key="").is_configured is False


@pytest.mark.asyncio
async def test_unconfigured_client_raises_model_unavailable() -> None:
    client = LLMClient(provider="anthropic", anthropic_api_key="", openai_api_key="")
    assert client.is_configured is False
    with pytest.raises(ModelUnavailable):
        await client.complete("system", "user")
