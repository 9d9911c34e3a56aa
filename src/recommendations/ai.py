"""AI-generated recommendations via the Gemini API."""

import logging
from typing import Protocol

import httpx

from config import settings

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

AI_FALLBACK_MESSAGE = "Could not generate AI recommendations at this time."

PROMPT_TEMPLATE = (
    "Based on the following SEO report for {url}, provide actionable and concise "
    "optimization suggestions for improving its search engine ranking and user "
    "experience. Focus on practical advice. Structure your response as a numbered "
    "list of recommendations. If the current recommendations array already has "
    "items, you can expand on them or add new ones. Only provide the list, no "
    "introductory or concluding sentences. Do not mention the API key or any "
    "internal technical details. Here is the SEO report in JSON format: {report}"
)


class AIRecommender(Protocol):
    """Turns a serialized report into free-text suggestions."""

    async def recommend(self, url: str, report_json: str) -> str: ...


def parse_recommendations(text: str) -> list[str]:
    """Split model output into one suggestion per non-blank line."""
    return [line for line in text.splitlines() if line.strip()]


class GeminiRecommender:
    """Calls Gemini `generateContent` with the report as prompt context."""

    def __init__(
        self,
        api_key: str,
        model: str = settings.gemini_model,
        timeout: float = settings.ai_timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.transport = transport

    async def recommend(self, url: str, report_json: str) -> str:
        """
        Ask Gemini for suggestions.

        Args:
            url: Audited URL
            report_json: The report serialized as JSON

        Returns:
            Raw response text

        Raises:
            httpx.HTTPError: on transport failure or non-2xx status
            ValueError: if the response carries no text
        """
        payload = {
            "contents": [
                {"parts": [{"text": PROMPT_TEMPLATE.format(url=url, report=report_json)}]}
            ],
            "generationConfig": {"temperature": 0.4},
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                GEMINI_ENDPOINT.format(model=self.model),
                params={"key": self.api_key},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()

        try:
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError):
            raise ValueError(f"Unexpected Gemini response: {str(data)[:200]}")
        if not text.strip():
            raise ValueError("Gemini returned an empty response")
        return text


def build_recommender() -> AIRecommender | None:
    """Return a Gemini recommender if an API key is configured."""
    if not settings.gemini_api_key:
        logger.warning("GEMINI_API_KEY not configured, AI recommendations disabled")
        return None
    return GeminiRecommender(api_key=settings.gemini_api_key)
