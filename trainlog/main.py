from fastapi import FastAPI, Request
from loguru import logger

from trainlog import __version__
from trainlog.api.pmc import router as pmc_router
from trainlog.core.logger import setup_logger
from trainlog.core.settings import settings


def create_app() -> FastAPI:
    """Build the FastAPI application with logging configured from settings."""
    setup_logger(settings)

    app = FastAPI(title="trainlog", version=__version__)
    app.include_router(pmc_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all HTTP requests."""
        logger.debug(f"Request: {request.method} {request.url.path}")
        response = await call_next(request)
        logger.debug(f"Response: {response.status_code} for {request.method} {request.url.path}")
        return response

    logger.info("FastAPI application initialized")
    return app


app = create_app()
