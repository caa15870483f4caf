"""
Documentation endpoints.

``DocsApp`` is a small ASGI application serving the built document and two
browsable renderings of it:

    GET /openapi.json   OpenAPI document (JSON)
    GET /docs           Swagger UI
    GET /redoc          ReDoc

Paths come from ``OpenAPIConfig``. Mount it beside your own application or
run it directly (``sigapi serve``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import OpenAPIConfig
from .context import DocContext, default_context
from .registry import Initializer

logger = logging.getLogger("sigapi.docs")


# ─── Swagger UI HTML ─────────────────────────────────────────────────────────

_SWAGGER_UI_VERSION = "5.18.2"

_SWAGGER_UI_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title} - API Documentation</title>
    <link rel="stylesheet"
          href="https://cdn.jsdelivr.net/npm/swagger-ui-dist@{version}/swagger-ui.css">
    <style>
        html {{ box-sizing: border-box; overflow-y: scroll; }}
        body {{ margin: 0; background: #fafafa; }}
        .topbar {{ display: none !important; }}
        {extra_css}
    </style>
</head>
<body>
    <div id="swagger-ui"></div>
    <script src="https://cdn.jsdelivr.net/npm/swagger-ui-dist@{version}/swagger-ui-bundle.js">
    </script>
    <script>
        window.onload = () => {{
            window.ui = SwaggerUIBundle({{
                url: '{spec_url}',
                dom_id: '#swagger-ui',
                deepLinking: true,
                docExpansion: 'list',
                defaultModelsExpandDepth: 1,
                {extra_config}
            }});
        }};
    </script>
</body>
</html>"""

_DARK_CSS = """
        body { background: #1a1a2e; }
        .swagger-ui { filter: invert(88%) hue-rotate(180deg); }
        """


def _js_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f"'{value}'"
    return str(value)


def generate_swagger_html(config: OpenAPIConfig) -> str:
    """Render the Swagger UI page pointing at ``config.openapi_json_path``."""
    extra_config = ",\n                ".join(
        f"{key}: {_js_value(value)}" for key, value in config.swagger_ui_config.items()
    )
    return _SWAGGER_UI_HTML.format(
        title=config.title,
        version=_SWAGGER_UI_VERSION,
        spec_url=config.openapi_json_path,
        extra_css=_DARK_CSS if config.swagger_ui_theme == "dark" else "",
        extra_config=extra_config,
    )


# ─── ReDoc HTML ───────────────────────────────────────────────────────────────

_REDOC_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{title} - API Reference</title>
    <style>
        body {{ margin: 0; padding: 0; }}
    </style>
</head>
<body>
    <redoc spec-url='{spec_url}' expand-responses="200,201"></redoc>
    <script src="https://cdn.redoc.ly/redoc/latest/bundles/redoc.standalone.js"></script>
</body>
</html>"""


def generate_redoc_html(config: OpenAPIConfig) -> str:
    """Render the ReDoc page."""
    return _REDOC_HTML.format(
        title=config.title,
        spec_url=config.openapi_json_path,
    )


# ─── ASGI app ────────────────────────────────────────────────────────────────

Headers = List[Tuple[bytes, bytes]]


class DocsApp:
    """
    ASGI app serving the OpenAPI document.

    Args:
        context: Documentation context to build from (default context if omitted)
        initializer: Document metadata initializer; the context's config by default
        config: Endpoint paths and UI options; the context's config by default
    """

    def __init__(
        self,
        context: Optional[DocContext] = None,
        initializer: Optional[Initializer] = None,
        config: Optional[OpenAPIConfig] = None,
    ):
        self.context = context or default_context()
        self.initializer = initializer
        self.config = config or self.context.openapi_config

    def routes(self) -> Dict[str, Callable[[], Tuple[int, str, bytes]]]:
        return {
            self.config.openapi_json_path: self._document,
            self.config.docs_path: self._swagger,
            self.config.redoc_path: self._redoc,
        }

    def _document(self) -> Tuple[int, str, bytes]:
        document = self.context.build(self.initializer)
        return 200, "application/json", document.to_json(indent=None).encode("utf-8")

    def _swagger(self) -> Tuple[int, str, bytes]:
        return 200, "text/html; charset=utf-8", generate_swagger_html(self.config).encode("utf-8")

    def _redoc(self) -> Tuple[int, str, bytes]:
        return 200, "text/html; charset=utf-8", generate_redoc_html(self.config).encode("utf-8")

    async def __call__(self, scope: dict, receive: Callable, send: Callable):
        scope_type = scope["type"]
        if scope_type == "http":
            await self.handle_http(scope, receive, send)
        elif scope_type == "lifespan":
            await self.handle_lifespan(scope, receive, send)

    async def handle_http(self, scope: dict, receive: Callable, send: Callable):
        path = scope.get("path", "/")
        method = scope.get("method", "GET")

        route = self.routes().get(path)
        if route is None:
            status, content_type, body = 404, "application/json", b'{"error": "Not found"}'
        elif method not in ("GET", "HEAD"):
            status, content_type, body = 405, "application/json", b'{"error": "Method not allowed"}'
        else:
            status, content_type, body = route()

        logger.debug("%s %s -> %d", method, path, status)

        headers: Headers = [
            (b"content-type", content_type.encode("latin-1")),
            (b"content-length", str(len(body)).encode("latin-1")),
        ]
        if status == 405:
            headers.append((b"allow", b"GET, HEAD"))

        await send({
            "type": "http.response.start",
            "status": status,
            "headers": headers,
        })
        await send({
            "type": "http.response.body",
            "body": b"" if method == "HEAD" else body,
            "more_body": False,
        })

    async def handle_lifespan(self, scope: dict, receive: Callable, send: Callable):
        """Handle ASGI lifespan events."""
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                break
