"""
Unit tests for model providers (no network: SDK clients are replaced by mocks).
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from careerbridge.config import Settings
from careerbridge.errors import ProviderError
from careerbridge.services.providers import (
    GeminiProvider,
    GitHubModelsProvider,
    build_provider,
)


def _chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestBuildProvider:
    def test_github_requires_token(self):
        with pytest.raises(ValueError, match="GITHUB_TOKEN"):
            build_provider(Settings(provider="github"))

    def test_gemini_requires_key(self):
        with pytest.raises(ValueError, match="GEMINI_API_KEY"):
            build_provider(Settings(provider="gemini"))

    def test_builds_selected_provider(self):
        assert isinstance(build_provider(Settings(provider="github", github_token="t")), GitHubModelsProvider)
        assert isinstance(build_provider(Settings(provider="gemini", gemini_api_key="k")), GeminiProvider)


class TestGitHubModelsProvider:
    def _provider(self, candidates=None):
        provider = GitHubModelsProvider("token", "https://models.example", candidates)
        provider.client = MagicMock()
        return provider

    @pytest.mark.asyncio
    async def test_returns_message_content(self):
        provider = self._provider()
        provider.client.complete.return_value = _chat_response("Bonjour")

        response = await provider.generate("Hi", model="openai/gpt-4o-mini")

        assert response.text == "Bonjour"
        assert response.grounding_chunks == []
        assert provider.client.complete.call_args.kwargs["model"] == "openai/gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_schema_is_embedded_in_prompt(self):
        provider = self._provider()
        provider.client.complete.return_value = _chat_response("{}")

        await provider.generate("Analyze", model="m", response_schema={"type": "OBJECT"})

        user_message = provider.client.complete.call_args.kwargs["messages"][1]
        assert '"type": "OBJECT"' in user_message.content

    @pytest.mark.asyncio
    async def test_falls_back_on_unavailable_model(self):
        provider = self._provider(candidates=["backup-model"])
        provider.client.complete.side_effect = [
            Exception("Unavailable model: openai/gpt-5"),
            _chat_response("ok"),
        ]

        response = await provider.generate("Hi", model="openai/gpt-5")

        assert response.text == "ok"
        models = [c.kwargs["model"] for c in provider.client.complete.call_args_list]
        assert models == ["openai/gpt-5", "backup-model"]

    @pytest.mark.asyncio
    async def test_other_errors_raise_provider_error(self):
        provider = self._provider(candidates=["backup-model"])
        provider.client.complete.side_effect = Exception("401 Unauthorized")

        with pytest.raises(ProviderError, match="401"):
            await provider.generate("Hi", model="m")
        assert provider.client.complete.call_count == 1

    @pytest.mark.asyncio
    async def test_all_candidates_unavailable(self):
        provider = self._provider(candidates=["b"])
        provider.client.complete.side_effect = Exception("unknown model")

        with pytest.raises(ProviderError, match="none of the candidate models"):
            await provider.generate("Hi", model="a")

    @pytest.mark.asyncio
    async def test_empty_choices_give_empty_text(self):
        provider = self._provider()
        provider.client.complete.return_value = SimpleNamespace(choices=[])

        response = await provider.generate("Hi", model="m")

        assert response.text is None


class TestGeminiProvider:
    def _provider(self, response=None, error=None):
        provider = GeminiProvider("key")
        provider.client = MagicMock()
        provider.client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=error)
        return provider

    @pytest.mark.asyncio
    async def test_extracts_grounding_chunks(self):
        response = SimpleNamespace(
            text="Offers",
            candidates=[
                SimpleNamespace(
                    grounding_metadata=SimpleNamespace(
                        grounding_chunks=[
                            SimpleNamespace(web=SimpleNamespace(title="Apec", uri="https://www.apec.fr/1")),
                            SimpleNamespace(web=None),
                            SimpleNamespace(web=SimpleNamespace(title=None, uri="https://fr.indeed.com/2")),
                        ]
                    )
                )
            ],
        )
        provider = self._provider(response)

        result = await provider.generate("Find jobs", model="flash", web_search=True)

        assert result.text == "Offers"
        assert [(c.title, c.uri) for c in result.grounding_chunks] == [
            ("Apec", "https://www.apec.fr/1"),
            (None, "https://fr.indeed.com/2"),
        ]
        config = provider.client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.tools

    @pytest.mark.asyncio
    async def test_no_metadata(self):
        provider = self._provider(SimpleNamespace(text=None, candidates=None))

        result = await provider.generate("Q", model="flash")

        assert result.text is None
        assert result.grounding_chunks == []
        assert provider.client.aio.models.generate_content.call_args.kwargs["config"] is None

    @pytest.mark.asyncio
    async def test_schema_requests_json(self):
        provider = self._provider(SimpleNamespace(text="{}", candidates=[]))

        await provider.generate("Q", model="pro", response_schema={"type": "OBJECT", "properties": {}})

        config = provider.client.aio.models.generate_content.call_args.kwargs["config"]
        assert config.response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_sdk_errors_become_provider_errors(self):
        provider = self._provider(error=RuntimeError("quota exceeded"))

        with pytest.raises(ProviderError, match="quota exceeded"):
            await provider.generate("Q", model="flash")
