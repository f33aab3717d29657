"""HTTP tests for the FastAPI surface (chat, health, images, CORS)."""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from shopbot.src.api.app import create_app, normalize_origin, origin_regex
from shopbot.src.api.static import resolve_image_path, sniff_content_type
from shopbot.src.core.chat_engine import ChatEngine
from shopbot.src.core.knowledge_base import KnowledgeBase
from shopbot.src.core.llm_client import UpstreamError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def build_client(make_settings, completer):
    """Factory returning an ``AsyncClient`` bound to a fresh app."""

    def _build(**overrides) -> AsyncClient:
        cfg = make_settings(**overrides)
        engine = ChatEngine(KnowledgeBase(cfg.KB_PATH), completer, cfg=cfg)
        app = create_app(app_settings=cfg, engine=engine)
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    return _build


class TestChatEndpoint:
    async def test_reply_with_images(self, build_client, completer):
        completer.complete.return_value = '{"answer": "Pad Thai 89 THB"}'

        async with build_client() as client:
            response = await client.post("/chat", json={"message": "menu?"})

        assert response.status_code == 200
        assert response.json() == {"reply": "Pad Thai 89 THB", "images": ["/images/khaosoi.gif"]}

    async def test_reply_without_images_omits_key(self, build_client):
        async with build_client() as client:
            response = await client.post("/chat", json={"message": "What time do you open?"})

        assert response.status_code == 200
        assert response.json() == {"reply": "10:00-20:00"}

    @pytest.mark.parametrize("body", [{"message": ""}, {"message": "   "}, {}, {"message": 42}])
    async def test_blank_or_invalid_message_is_400(self, build_client, body):
        async with build_client() as client:
            response = await client.post("/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}

    async def test_missing_key_is_500_before_message_check(self, build_client, completer):
        async with build_client(OPENROUTER_API_KEY=None) as client:
            response = await client.post("/chat", json={"message": ""})

        assert response.status_code == 500
        assert response.json() == {"error": "Missing OPENROUTER_API_KEY"}
        completer.complete.assert_not_awaited()

    async def test_upstream_failure_is_502_with_body(self, build_client, completer):
        completer.complete.side_effect = UpstreamError("Upstream returned 429", status_code=429, body={"error": {"message": "rate limited"}})

        async with build_client() as client:
            response = await client.post("/chat", json={"message": "menu"})

        assert response.status_code == 502
        assert response.json() == {"error": "Upstream returned 429", "upstream": {"error": {"message": "rate limited"}}}

    async def test_unexpected_error_is_500(self, build_client, completer):
        completer.complete.side_effect = RuntimeError("boom")

        async with build_client() as client:
            response = await client.post("/chat", json={"message": "menu"})

        assert response.status_code == 500
        assert response.json() == {"error": "boom"}


class TestHealthEndpoint:
    async def test_reports_knowledge_state(self, build_client):
        async with build_client() as client:
            await client.post("/chat", json={"message": "menu"})
            response = await client.get("/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "ok"
        assert body["retrieval"] == "lexical"
        assert body["knowledge_base"]["loaded"] is True
        assert body["knowledge_base"]["chunks"] == 5
        assert body["knowledge_base"]["shop_name"] == "Baan Suan Kitchen"
        assert body["knowledge_base"]["loaded_at"] is not None


class TestImagesEndpoint:
    async def test_content_type_from_extension(self, build_client, tmp_path):
        images = tmp_path / "images"
        images.mkdir()
        (images / "dish.jpg").write_bytes(b"\xff\xd8\xff\xe0" + b"\x00" * 16)

        async with build_client() as client:
            response = await client.get("/images/dish.jpg")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"

    async def test_content_type_sniffed_without_extension(self, build_client, tmp_path):
        images = tmp_path / "images"
        images.mkdir()
        (images / "dish").write_bytes(PNG_BYTES)

        async with build_client() as client:
            response = await client.get("/images/dish")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content == PNG_BYTES

    async def test_missing_image_is_404(self, build_client):
        async with build_client() as client:
            response = await client.get("/images/nothing.png")

        assert response.status_code == 404

    def test_path_traversal_is_rejected(self, tmp_path):
        images = tmp_path / "images"
        images.mkdir()
        (tmp_path / "secret.txt").write_text("nope")

        assert resolve_image_path(images, "../secret.txt") is None

    @pytest.mark.parametrize(
        ("head", "expected"),
        [
            (b"\xff\xd8\xff\xdb", "image/jpeg"),
            (PNG_BYTES, "image/png"),
            (b"GIF89a\x01\x00", "image/gif"),
            (b"RIFF\x24\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"RIFF\x24\x00\x00\x00WAVEfmt ", None),
            (b"plain text", None),
        ],
    )
    def test_magic_bytes(self, head, expected):
        assert sniff_content_type(head) == expected


class TestCors:
    def test_normalize_origin(self):
        assert normalize_origin("https://Shop.Example/") == "shop.example"
        assert normalize_origin("shop.example") == "shop.example"

    def test_no_configured_origins_means_no_regex(self):
        assert origin_regex([]) is None
        assert origin_regex(["  ", "/"]) is None

    @pytest.mark.parametrize("origin", ["https://shop.example", "http://shop.example"])
    async def test_allowed_origin_over_either_scheme(self, build_client, origin):
        async with build_client(ALLOWED_ORIGINS="https://shop.example/") as client:
            response = await client.get("/health", headers={"Origin": origin})

        assert response.headers["access-control-allow-origin"] == origin

    async def test_unknown_origin_gets_no_cors_header(self, build_client):
        async with build_client(ALLOWED_ORIGINS="https://shop.example") as client:
            response = await client.get("/health", headers={"Origin": "https://evil.example"})

        assert "access-control-allow-origin" not in response.headers

    async def test_request_without_origin_is_served(self, build_client):
        async with build_client(ALLOWED_ORIGINS="https://shop.example") as client:
            response = await client.get("/health")

        assert response.status_code == 200
