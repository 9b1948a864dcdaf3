"""Tests for HTTP-based adapters."""

import asyncio
import json
from types import SimpleNamespace

import pytest

from nutrition_dashboard.adapters.openai_vision_client import (
    OpenAIVisionClient,
    VisionResponseError,
)


class _FakeResponses:
    def __init__(self, output_text: str, status: str = "completed") -> None:
        self.output_text = output_text
        self.status = status
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        return SimpleNamespace(
            output_text=self.output_text,
            status=self.status,
            incomplete_details=SimpleNamespace(reason="max_output_tokens"),
        )


class _FakeOpenAI:
    def __init__(self, output_text: str, status: str = "completed") -> None:
        self.responses = _FakeResponses(output_text, status)
        self.closed = False

    async def close(self) -> None:
        self.closed = True


def _extract(client: OpenAIVisionClient, reasoning_effort: str | None) -> object:
    return asyncio.run(
        client.extract(
            model="gpt-5.2",
            reasoning_effort=reasoning_effort,
            store=False,
            image_data_url="data:image/jpeg;base64,ZmFrZQ==",
            schema={"type": "object"},
            prompt="Read the label",
        )
    )


def test_openai_vision_client_parses_output() -> None:
    fake = _FakeOpenAI(json.dumps({"product_name": "Oat Bar"}))
    client = OpenAIVisionClient(client=fake)

    result = _extract(client, "high")

    assert result == {"product_name": "Oat Bar"}
    payload = fake.responses.last_payload
    assert payload is not None
    assert payload["reasoning"] == {"effort": "high"}
    assert payload["store"] is False
    assert payload["text"]["format"]["name"] == "scan_analysis"
    assert payload["text"]["format"]["strict"] is True
    image_part = payload["input"][0]["content"][1]
    assert image_part["type"] == "input_image"
    assert image_part["detail"] == "high"


def test_openai_vision_client_uses_configured_detail() -> None:
    fake = _FakeOpenAI(json.dumps({}))

    _extract(OpenAIVisionClient(client=fake, image_detail="low"), None)

    payload = fake.responses.last_payload
    assert payload is not None
    assert "reasoning" not in payload
    assert payload["input"][0]["content"][1]["detail"] == "low"


@pytest.mark.parametrize("output_text", ["", "not json", "[1, 2]"])
def test_openai_vision_client_rejects_unusable_output(output_text: str) -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI(output_text))

    with pytest.raises(VisionResponseError):
        _extract(client, "medium")


def test_openai_vision_client_rejects_incomplete_response() -> None:
    client = OpenAIVisionClient(client=_FakeOpenAI("{}", status="incomplete"))

    with pytest.raises(VisionResponseError, match="max_output_tokens"):
        _extract(client, "medium")


def test_openai_vision_client_close() -> None:
    fake = _FakeOpenAI("{}")

    asyncio.run(OpenAIVisionClient(client=fake).close())

    assert fake.closed
