"""
Development proxy: lets a local UI call the deployed backend without knowing
the shared secret. Every request is forwarded with the secret header added.
Run: python -m gavdash.dev_proxy
"""

import logging

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from gavdash.config import DevProxySettings
from gavdash.dependencies import SECRET_HEADER

logger = logging.getLogger(__name__)

FORWARDED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]
DROPPED_HEADERS = {"host", "content-length"}


def create_proxy_app(
    settings: DevProxySettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or DevProxySettings()
    app = FastAPI(title="Gavdash dev proxy")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=FORWARDED_METHODS + ["OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.options("/{path:path}")
    async def preflight(path: str):
        return Response(status_code=204)

    @app.api_route("/{path:path}", methods=FORWARDED_METHODS)
    async def forward(path: str, request: Request):
        target = f"{settings.backend_base.rstrip('/')}/{path}"
        if request.url.query:
            target = f"{target}?{request.url.query}"

        headers = {k: v for k, v in request.headers.items() if k.lower() not in DROPPED_HEADERS}
        headers[SECRET_HEADER] = settings.dev_secret

        body = None
        if request.method not in ("GET", "HEAD"):
            body = await request.body()

        try:
            async with httpx.AsyncClient(timeout=settings.proxy_timeout_seconds, transport=transport) as client:
                upstream = await client.request(request.method, target, headers=headers, content=body)
        except httpx.HTTPError as e:
            logger.warning("Proxy error on %s %s: %r", request.method, target, e)
            return PlainTextResponse(f"Proxy error: {str(e) or type(e).__name__}", status_code=502)

        return Response(
            content=upstream.content,
            status_code=upstream.status_code,
            media_type=upstream.headers.get("content-type"),
        )

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    proxy_settings = DevProxySettings()
    logger.info("Dev proxy on http://localhost:%d -> %s", proxy_settings.port, proxy_settings.backend_base)
    uvicorn.run(create_proxy_app(proxy_settings), host="0.0.0.0", port=proxy_settings.port)
