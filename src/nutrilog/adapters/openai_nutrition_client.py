"""OpenAI Responses API client for nutrition generation."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrilog.errors import InferenceError
from nutrilog.services.inference import NutritionModelClient


@dataclass
class OpenAINutritionClient(NutritionModelClient):
    """Nutrition model client backed by OpenAI structured outputs."""

    client: AsyncOpenAI
    reasoning_effort: str | None = None
    store: bool = False

    @classmethod
    def create(
        cls, api_key: str, reasoning_effort: str | None = None, store: bool = False
    ) -> "OpenAINutritionClient":
        """Create an OpenAI nutrition client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key),
            reasoning_effort=reasoning_effort,
            store=store,
        )

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Call OpenAI Responses API with a strict JSON schema."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": system_prompt,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": prompt}],
                }
            ],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
            "store": self.store,
        }
        if self.reasoning_effort:
            request_payload["reasoning"] = {"effort": self.reasoning_effort}

        response = await self.client.responses.create(**request_payload)
        output_text = response.output_text
        if not output_text:
            raise InferenceError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
