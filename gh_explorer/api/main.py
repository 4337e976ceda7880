from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..core.exceptions import GHExplorerException, get_status_code
from ..core.logging_config import setup_logging
from ..services.fetch_service import RepositoryFetcher, build_fetcher
from .routers import admin_cache, events, rate_limit, repositories, stats

# Load environment variables from .env file
load_dotenv()

logger = setup_logging(logger_name="gh_explorer")


def create_app(fetcher: RepositoryFetcher | None = None) -> FastAPI:
    """
    Build the API application

    Args:
        fetcher: Pre-built fetcher (tests); the default one is built at startup
            and closed at shutdown
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.fetcher is None
        if owned:
            app.state.fetcher = build_fetcher()
            logger.info("Repository fetcher started")
        try:
            yield
        finally:
            if owned:
                await app.state.fetcher.aclose()
                app.state.fetcher = None

    app = FastAPI(title="gh-explorer", lifespan=lifespan)
    app.state.fetcher = fetcher

    # Exception handler for custom exceptions
    @app.exception_handler(GHExplorerException)
    async def gh_explorer_exception_handler(request: Request, exc: GHExplorerException):
        """Handle custom gh-explorer exceptions"""
        return JSONResponse(status_code=get_status_code(exc), content=exc.to_dict())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(repositories.router, tags=["Repositories"])
    app.include_router(rate_limit.router, tags=["Rate limit"])
    app.include_router(stats.router, prefix="/stats", tags=["Stats"])
    app.include_router(admin_cache.router, prefix="/admin/cache", tags=["Admin"])
    app.include_router(events.router, prefix="/events", tags=["Events"])
    return app


app = create_app()
