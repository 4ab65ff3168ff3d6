import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from storefront.config import APP_VERSION, Settings, validate_security_posture
from storefront.core.async_tasks import drain_background_tasks
from storefront.database import build_engine, build_session_factory, init_db
from storefront.services.telegram_service import TelegramNotifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Startup: create tables
    await init_db(app.state.engine)
    notifier: TelegramNotifier = app.state.notifier
    logger.info(
        "Storefront %s started (env=%s, telegram=%s)",
        APP_VERSION,
        app.state.settings.environment,
        "on" if notifier.enabled else "off",
    )

    yield

    # Shutdown: let pending notifications finish, then dispose the pool
    await drain_background_tasks()
    await app.state.engine.dispose()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application around an explicit Settings object.

    Everything request handlers need (settings, engine, session factory,
    notifier) hangs off ``app.state``; nothing reads the environment after
    this point.
    """
    settings = settings or Settings()
    validate_security_posture(settings)

    app = FastAPI(
        title="Storefront API",
        description="Construction-materials storefront: products, orders and craftsmen",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.notifier = TelegramNotifier.from_settings(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)

    from storefront.api import API_PREFIX, API_ROUTERS

    for router in API_ROUTERS:
        app.include_router(router, prefix=API_PREFIX)

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "name": "Storefront API",
            "version": APP_VERSION,
            "docs": "/docs",
            "health": f"{API_PREFIX}/health",
        }

    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.storefront_host, port=settings.storefront_port)


if __name__ == "__main__":
    main()
