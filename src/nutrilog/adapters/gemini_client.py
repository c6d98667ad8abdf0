"""Gemini generateContent client for nutrition generation."""

import json
from dataclasses import dataclass

import httpx

from nutrilog.errors import InferenceError
from nutrilog.services.inference import NutritionModelClient


@dataclass
class HttpxGeminiClient(NutritionModelClient):
    """HTTPX-backed client for the Gemini REST API."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxGeminiClient":
        """Create a Gemini client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        prompt: str,
        schema: dict[str, object],
        schema_name: str,
    ) -> dict[str, object]:
        """Call generateContent with a JSON response schema."""
        url = f"{self.base_url}/models/{model}:generateContent"
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": to_gemini_schema(schema),
            },
        }
        response = await self.http_client.post(
            url,
            params={"key": self.api_key},
            json=payload,
            timeout=30,
        )
        if response.status_code != httpx.codes.OK:
            raise InferenceError(
                f"Gemini {schema_name} request failed with status "
                f"{response.status_code}"
            )
        text = _candidate_text(response.json())
        if not text:
            raise InferenceError(f"Gemini returned no {schema_name} content")
        return json.loads(text)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def to_gemini_schema(schema: dict[str, object]) -> dict[str, object]:
    """Convert a JSON schema to Gemini's OpenAPI subset."""
    converted: dict[str, object] = {}
    for key, value in schema.items():
        if key in {"additionalProperties", "minimum", "maximum"}:
            continue
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties" and isinstance(value, dict):
            converted[key] = {
                name: to_gemini_schema(prop) for name, prop in value.items()
            }
        else:
            converted[key] = value
    return converted


def _candidate_text(payload: dict[str, object]) -> str | None:
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return None
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    if not parts:
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None
