import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from gavdash.config import Settings, get_settings, reload_settings

reload_settings()
from gavdash.admin.api import router as debug_router
from gavdash.database import close_pool
from gavdash.errors import AuthError, PersistenceError, UpstreamFetchError
from gavdash.modules.adversus.client import AdversusClient
from gavdash.modules.events.buffer import EventBuffer
from gavdash.modules.events.store import ensure_schema
from gavdash.modules.leads.api import router as leads_router
from gavdash.modules.webhook import router as webhook_router

DEMO_AGENTS = [
    {"id": 1, "name": "Simon", "sales": 25, "spe": 1.4},
    {"id": 2, "name": "Ulla", "sales": 30, "spe": 1.6},
    {"id": 3, "name": "Patrick", "sales": 20, "spe": 1.2},
]

public_router = APIRouter()


@public_router.get("/")
async def root():
    return {"message": "Velkommen til Gavdash API"}


@public_router.get("/health")
@public_router.get("/api/v1/health")
async def health(request: Request):
    return {
        "status": "ok",
        "ts": datetime.now(timezone.utc).isoformat(),
        "environment": request.app.state.settings.environment,
    }


@public_router.get("/api/agents")
async def agents():
    """Static agent list used by the dashboard while the sales feed is wired up."""
    return DEMO_AGENTS


async def _auth_error(request: Request, exc: AuthError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=401, content={"ok": False, "error": exc.message})


async def _upstream_error(request: Request, exc: UpstreamFetchError):
    return JSONResponse(status_code=502, content={"ok": False, **exc.to_dict()})


async def _persistence_error(request: Request, exc: PersistenceError):
    return JSONResponse(status_code=503, content={"ok": False, "error": str(exc)})


async def _not_found(request: Request, exc):
    return JSONResponse(status_code=404, content={"error": "Not found"})


def create_app(settings: Settings | None = None, adversus_client=None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_client = app.state.adversus is None
        if owns_client:
            app.state.adversus = AdversusClient.from_settings(settings)
        if settings.database_url:
            await ensure_schema()
        yield
        if owns_client:
            await app.state.adversus.aclose()
        await close_pool()

    app = FastAPI(
        title="Gavdash API",
        description="Adversus webhook receiver and dashboard backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.events = EventBuffer(settings.debug_buffer_size)
    app.state.adversus = adversus_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthError, _auth_error)
    app.add_exception_handler(UpstreamFetchError, _upstream_error)
    app.add_exception_handler(PersistenceError, _persistence_error)
    app.add_exception_handler(404, _not_found)

    app.include_router(public_router, tags=["public"])
    app.include_router(webhook_router, prefix="/webhook", tags=["webhook"])
    app.include_router(debug_router, prefix="/debug", tags=["debug"])
    app.include_router(leads_router, prefix="/api", tags=["dashboard"])
    return app


app = create_app()
