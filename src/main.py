from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from src.api.router import router
from src.config import settings
from src.core.exceptions import register_exception_handlers
from src.core.logging import configure_logging
from src.services.backends import close_client

STATIC_DIR = Path(__file__).parent / "static"

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "app_started",
        app=settings.app_name,
        endpoints=len(settings.fal_endpoints),
        credential_configured=bool(settings.fal_api_key),
    )
    yield
    await close_client()
    logger.info("app_stopped", app=settings.app_name)


def create_app() -> FastAPI:
    configure_logging(settings.log_level, json_output=not settings.debug)

    application = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)
    application.include_router(router)

    @application.get("/", include_in_schema=False)
    async def index() -> FileResponse:
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host=settings.host, port=settings.port, log_level=settings.log_level)
