"""OpenAI Responses API client for nutrition label analysis."""

import json
import logging
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrition_dashboard.services.scans import VisionClient

logger = logging.getLogger(__name__)

SCHEMA_NAME = "scan_analysis"


class VisionResponseError(RuntimeError):
    """Raised when the model does not return a usable label analysis."""


@dataclass
class OpenAIVisionClient(VisionClient):
    """Vision client that reads label photos through the Responses API.

    Label text is small, so images are sent at high detail unless configured
    otherwise.
    """

    client: AsyncOpenAI
    image_detail: str = "high"

    @classmethod
    def create(cls, api_key: str) -> "OpenAIVisionClient":
        """Create an OpenAI vision client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return the label analysis as a dict matching schema."""
        request_payload: dict[str, object] = {
            "model": model,
            "input": [_label_message(prompt, image_data_url, self.image_detail)],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": SCHEMA_NAME,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        if getattr(response, "status", None) == "incomplete":
            details = getattr(response, "incomplete_details", None)
            reason = getattr(details, "reason", None) or "unknown"
            raise VisionResponseError(f"Label analysis incomplete: {reason}")
        output_text = response.output_text
        if not output_text:
            raise VisionResponseError("OpenAI returned an empty analysis")
        try:
            analysis = json.loads(output_text)
        except json.JSONDecodeError as exc:
            raise VisionResponseError("OpenAI returned malformed analysis") from exc
        if not isinstance(analysis, dict):
            raise VisionResponseError("OpenAI analysis is not an object")
        logger.debug(
            "Label analysis received",
            extra={"model": model, "product_name": analysis.get("product_name")},
        )
        return analysis

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()


def _label_message(prompt: str, image_data_url: str, detail: str) -> dict[str, object]:
    return {
        "role": "user",
        "content": [
            {"type": "input_text", "text": prompt},
            {"type": "input_image", "image_url": image_data_url, "detail": detail},
        ],
    }
