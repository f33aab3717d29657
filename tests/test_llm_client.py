"""Tests for the upstream client wrappers (LangChain models mocked)."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from shopbot.src.core.llm_client import CompletionClient, ConfigurationError, EmbeddingClient, UpstreamError, _attribution_headers

_REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


class TestCompletionClient:
    async def test_returns_message_content_and_forwards_sampling(self, make_settings):
        llm = Mock()
        llm.ainvoke = AsyncMock(return_value=SimpleNamespace(content='{"answer": "hi"}'))
        client = CompletionClient(make_settings(MAX_TOKENS=123), llm=llm)

        text = await client.complete("system", "hello", temperature=0.0)

        assert text == '{"answer": "hi"}'
        messages = llm.ainvoke.await_args.args[0]
        assert [m.content for m in messages] == ["system", "hello"]
        assert llm.ainvoke.await_args.kwargs == {"temperature": 0.0, "max_tokens": 123}

    async def test_list_content_is_joined(self, make_settings):
        llm = Mock()
        llm.ainvoke = AsyncMock(return_value=SimpleNamespace(content=[{"type": "text", "text": "a"}, "b"]))

        assert await CompletionClient(make_settings(), llm=llm).complete("s", "u", temperature=0.7) == "ab"

    async def test_status_error_becomes_upstream_error(self, make_settings):
        response = httpx.Response(429, request=_REQUEST)
        llm = Mock()
        llm.ainvoke = AsyncMock(side_effect=openai.APIStatusError("rate limited", response=response, body={"error": "slow down"}))

        with pytest.raises(UpstreamError) as exc_info:
            await CompletionClient(make_settings(), llm=llm).complete("s", "u", temperature=0.0)

        assert exc_info.value.status_code == 429
        assert exc_info.value.body == {"error": "slow down"}

    async def test_connection_error_becomes_upstream_error(self, make_settings):
        llm = Mock()
        llm.ainvoke = AsyncMock(side_effect=openai.APITimeoutError(request=_REQUEST))

        with pytest.raises(UpstreamError) as exc_info:
            await CompletionClient(make_settings(), llm=llm).complete("s", "u", temperature=0.0)

        assert exc_info.value.status_code is None

    async def test_missing_key_raises_configuration_error(self, make_settings):
        with pytest.raises(ConfigurationError):
            await CompletionClient(make_settings(OPENROUTER_API_KEY=None)).complete("s", "u", temperature=0.0)


class TestEmbeddingClient:
    async def test_vectors_in_input_order(self, make_settings):
        model = Mock()
        model.aembed_documents = AsyncMock(return_value=[[0.1, 0.2], [0.3, 0.4]])

        vectors = await EmbeddingClient(make_settings(), model=model).embed(["a", "b"])

        assert vectors == [[0.1, 0.2], [0.3, 0.4]]
        model.aembed_documents.assert_awaited_once_with(["a", "b"])

    async def test_failure_degrades_to_none(self, make_settings):
        model = Mock()
        model.aembed_documents = AsyncMock(side_effect=RuntimeError("upstream down"))

        assert await EmbeddingClient(make_settings(), model=model).embed(["a", "b", "c"]) == [None, None, None]

    async def test_short_response_is_padded(self, make_settings):
        model = Mock()
        model.aembed_documents = AsyncMock(return_value=[[1.0]])

        assert await EmbeddingClient(make_settings(), model=model).embed(["a", "b"]) == [[1.0], None]

    async def test_missing_key_degrades_to_none(self, make_settings):
        assert await EmbeddingClient(make_settings(OPENROUTER_API_KEY=None)).embed(["a"]) == [None]

    async def test_empty_input_makes_no_call(self, make_settings):
        model = Mock()
        model.aembed_documents = AsyncMock()

        assert await EmbeddingClient(make_settings(), model=model).embed([]) == []
        model.aembed_documents.assert_not_awaited()


def test_attribution_headers_use_first_allowed_origin(make_settings):
    headers = _attribution_headers(make_settings(ALLOWED_ORIGINS="https://shop.example, http://other", APP_TITLE="Baan Suan Bot"))

    assert headers == {"HTTP-Referer": "https://shop.example", "X-Title": "Baan Suan Bot"}
