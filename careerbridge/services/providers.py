"""
Model provider clients.

Each provider turns one prompt into one ``ModelResponse``. The gateway above them
decides prompts, schemas and fallbacks; providers only talk to the remote API and
wrap every failure in ``ProviderError``.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional, Protocol

import structlog
from azure.ai.inference import ChatCompletionsClient
from azure.ai.inference.models import SystemMessage, UserMessage
from azure.core.credentials import AzureKeyCredential
from google import genai
from google.genai import types

from careerbridge.config import Settings
from careerbridge.errors import ProviderError
from careerbridge.models import GroundingChunk, ModelResponse

logger = structlog.get_logger(__name__)


class ModelProvider(Protocol):
    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        response_schema: Optional[Dict[str, Any]] = None,
        web_search: bool = False,
    ) -> ModelResponse: ...


class GitHubModelsProvider:
    """GitHub Models through the Azure AI Inference client, with model fallbacks.

    GitHub Models has no web-search tool, so responses never carry grounding chunks.
    Structured output is requested by embedding the schema in the prompt.
    """

    def __init__(self, token: Optional[str], endpoint: str, candidates: Optional[List[str]] = None):
        if not token:
            raise ValueError("GITHUB_TOKEN environment variable is required")
        self.client = ChatCompletionsClient(
            endpoint=endpoint,
            credential=AzureKeyCredential(token),
        )
        self.candidates = list(candidates or [])

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        response_schema: Optional[Dict[str, Any]] = None,
        web_search: bool = False,
    ) -> ModelResponse:
        if response_schema is not None:
            system = "You are an expert career coach. Provide responses in valid JSON format only."
            prompt = (
                f"{prompt}\n\nRespond with a JSON object matching this schema:\n"
                f"{json.dumps(response_schema, indent=2)}\n\n"
                "Return ONLY the JSON response, no additional text."
            )
        else:
            system = "You are an expert career coach for international students in France."

        text = await asyncio.to_thread(self._complete, system, prompt, model)
        return ModelResponse(text=text)

    def _complete(self, system: str, prompt: str, model: str) -> Optional[str]:
        models = [model] + [m for m in self.candidates if m != model]
        last_error: Exception | None = None
        for candidate_model in models:
            try:
                response = self.client.complete(
                    messages=[SystemMessage(system), UserMessage(prompt)],
                    model=candidate_model,
                )
            except Exception as e:
                # Unavailable models fall through to the next candidate
                error_text = str(e).lower()
                if "unavailable model" in error_text or "unavailable_model" in error_text or "unknown model" in error_text:
                    logger.warning("Model unavailable, trying next candidate", model=candidate_model)
                    last_error = e
                    continue
                raise ProviderError(f"Error calling GitHub Models API: {e}") from e

            if not response or not response.choices or not response.choices[0].message:
                return None
            return response.choices[0].message.content

        raise ProviderError(
            "Error calling GitHub Models API: none of the candidate models are available. "
            f"Tried: {', '.join(models)}. Last error: {last_error}"
        )


class GeminiProvider:
    """Google Gemini through the google-genai async client.

    Supports Google Search grounding and native JSON schema output.
    """

    def __init__(self, api_key: Optional[str]):
        if not api_key:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        self.client = genai.Client(api_key=api_key)

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        response_schema: Optional[Dict[str, Any]] = None,
        web_search: bool = False,
    ) -> ModelResponse:
        config_kwargs: Dict[str, Any] = {}
        if web_search:
            config_kwargs["tools"] = [types.Tool(google_search=types.GoogleSearch())]
        if response_schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = response_schema

        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=types.GenerateContentConfig(**config_kwargs) if config_kwargs else None,
            )
        except Exception as e:
            raise ProviderError(f"Error calling Gemini API: {e}") from e

        return ModelResponse(text=response.text, grounding_chunks=self._grounding_chunks(response))

    @staticmethod
    def _grounding_chunks(response) -> List[GroundingChunk]:
        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return []
        metadata = getattr(candidates[0], "grounding_metadata", None)
        chunks = getattr(metadata, "grounding_chunks", None) or []
        result = []
        for chunk in chunks:
            web = getattr(chunk, "web", None)
            if web is None:
                continue
            result.append(GroundingChunk(title=getattr(web, "title", None), uri=getattr(web, "uri", None)))
        return result


def build_provider(settings: Settings) -> ModelProvider:
    """Construct the provider selected by ``settings.provider``."""
    if settings.provider == "gemini":
        return GeminiProvider(settings.gemini_api_key)
    return GitHubModelsProvider(
        token=settings.github_token,
        endpoint=settings.github_model_endpoint,
        candidates=settings.github_model_candidates,
    )
