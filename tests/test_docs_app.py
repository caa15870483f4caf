"""
Documentation ASGI app (docs_app.py)
"""

import json

import pytest

from conftest import call_asgi
from sigapi import DocContext, DocsApp, OpenAPIConfig, Settings
from sigapi.docs_app import generate_redoc_html, generate_swagger_html

from sample_api import make_router


@pytest.fixture
def app():
    docs = DocContext(Settings(openapi=OpenAPIConfig(title="Todo API", version="1.0.0")))
    make_router(docs)
    return DocsApp(docs)


class TestHtml:

    def test_swagger_points_at_document(self):
        html = generate_swagger_html(OpenAPIConfig(title="Todo API"))
        assert "<title>Todo API - API Documentation</title>" in html
        assert "url: '/openapi.json'" in html

    def test_swagger_dark_theme_and_config(self):
        html = generate_swagger_html(OpenAPIConfig(
            swagger_ui_theme="dark",
            swagger_ui_config={"tryItOutEnabled": True, "filter": "todo", "depth": 3},
        ))
        assert "invert(88%)" in html
        assert "tryItOutEnabled: true" in html
        assert "filter: 'todo'" in html
        assert "depth: 3" in html

    def test_redoc(self):
        html = generate_redoc_html(OpenAPIConfig(title="Todo API", openapi_json_path="/spec.json"))
        assert "spec-url='/spec.json'" in html
        assert "Todo API - API Reference" in html


class TestDocsApp:

    @pytest.mark.asyncio
    async def test_document_json(self, app):
        status, headers, body = await call_asgi(app, "/openapi.json")
        assert status == 200
        assert headers[b"content-type"] == b"application/json"
        document = json.loads(body)
        assert document["info"] == {"title": "Todo API", "version": "1.0.0"}
        assert "/todos/{id}" in document["paths"]

    @pytest.mark.asyncio
    async def test_document_is_cached(self, app):
        _, _, first = await call_asgi(app, "/openapi.json")
        _, _, second = await call_asgi(app, "/openapi.json")
        assert first == second

    @pytest.mark.asyncio
    async def test_swagger_page(self, app):
        status, headers, body = await call_asgi(app, "/docs")
        assert status == 200
        assert headers[b"content-type"].startswith(b"text/html")
        assert b"swagger-ui" in body

    @pytest.mark.asyncio
    async def test_redoc_page(self, app):
        status, _, body = await call_asgi(app, "/redoc")
        assert status == 200
        assert b"<redoc" in body

    @pytest.mark.asyncio
    async def test_not_found(self, app):
        status, _, body = await call_asgi(app, "/todos")
        assert status == 404
        assert json.loads(body) == {"error": "Not found"}

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, app):
        status, headers, _ = await call_asgi(app, "/openapi.json", method="POST")
        assert status == 405
        assert headers[b"allow"] == b"GET, HEAD"

    @pytest.mark.asyncio
    async def test_head_has_no_body(self, app):
        status, headers, body = await call_asgi(app, "/openapi.json", method="HEAD")
        assert status == 200
        assert body == b""
        assert int(headers[b"content-length"]) > 0

    @pytest.mark.asyncio
    async def test_custom_paths(self):
        docs = DocContext()
        app = DocsApp(docs, config=OpenAPIConfig(openapi_json_path="/spec.json", docs_path="/ui"))
        status, _, _ = await call_asgi(app, "/spec.json")
        assert status == 200
        status, _, body = await call_asgi(app, "/ui")
        assert status == 200
        assert b"url: '/spec.json'" in body

    @pytest.mark.asyncio
    async def test_lifespan(self, app):
        messages = iter([{"type": "lifespan.startup"}, {"type": "lifespan.shutdown"}])
        sent = []

        async def receive():
            return next(messages)

        async def send(message):
            sent.append(message["type"])

        await app({"type": "lifespan"}, receive, send)
        assert sent == ["lifespan.startup.complete", "lifespan.shutdown.complete"]
