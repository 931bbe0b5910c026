import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_client import make_asgi_app

from api.v1.endpoints import categories, pages
from core.config import settings
from core.exceptions import KnowledgeBrowserException, ValidationError
from core.logging import setup_logging
from services.pipeline.content_handler import ContentHandler

DESCRIPTION = "Categorizes, summarizes and indexes every page the browser loads"


def create_app(content_handler: Optional[ContentHandler] = None) -> FastAPI:
    """
    Build the API.  Pass ``content_handler`` to reuse pre-built components
    (tests do); otherwise they are constructed from ``settings`` at startup.
    """

    # ------------------------------------------------------------------
    # App lifecycle
    # ------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = content_handler is None
        try:
            logger.info("Initializing application...")
            handler = content_handler or ContentHandler.from_settings(settings)
            app.state.content_handler = handler

            if not handler.ready and await handler.initialize():
                logger.info("Content handler initialized successfully")

            yield

            logger.info("Shutting down application...")
            if owned:
                await handler.cleanup()

        except Exception as e:
            logger.exception(f"Application lifecycle error: {str(e)}")
            raise

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=DESCRIPTION,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.ALLOWED_HOSTS,
    )

    app.include_router(pages.router, prefix="/api/v1", tags=["pages"])
    app.include_router(categories.router, prefix="/api/v1", tags=["categories"])

    @app.middleware("http")
    async def add_timing_header(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=ValidationError(errors=jsonable_errors(exc)).to_dict(),
        )

    @app.exception_handler(KnowledgeBrowserException)
    async def knowledge_browser_exception_handler(
        request: Request, exc: KnowledgeBrowserException
    ):
        logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {str(exc)}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "status": 500,
                }
            },
        )

    app.mount("/metrics", make_asgi_app())

    @app.get("/health")
    async def health_check(request: Request):
        handler: ContentHandler = request.app.state.content_handler
        return {
            "status": "healthy",
            "llm_ready": handler.ready,
            "timestamp": time.time(),
        }

    @app.get("/")
    async def root():
        return {
            "name": settings.PROJECT_NAME,
            "version": "1.0.0",
            "description": DESCRIPTION,
            "docs_url": "/docs",
            "health_check": "/health",
        }

    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    # pydantic error entries may carry the raw exception under "ctx"
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


setup_logging(settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
    )
