# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import api_router
from storefront.api.responses import fail
from storefront.data.database import Database
from storefront.data.seed import seed
from storefront.domain.errors import AppError
from storefront.services.cache_service import CacheService
from storefront.utils.logging import get_logger
from storefront.utils.settings import CORS_ORIGINS, DATABASE_URL, REDIS_URL

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path"))
        messages.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return "; ".join(messages) or "Invalid request"


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=fail(exc.message))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=fail(_validation_message(exc)))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} failed")
        return JSONResponse(status_code=500, content=fail("Internal server error", error=str(exc)))


def create_app(database: Database | None = None, cache: CacheService | None = None) -> FastAPI:
    """
    Builds the app. Database and cache are created in the lifespan unless
    given; only the ones created here are closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_obj = database or Database(DATABASE_URL)
        cache_obj = cache or CacheService(REDIS_URL)

        db_obj.create_all()
        session = db_obj.session()
        try:
            seed(session)
        finally:
            session.close()

        app.state.database = db_obj
        app.state.cache = cache_obj
        logger.info("Storefront backend started")

        yield

        if cache is None:
            cache_obj.close()
        if database is None:
            db_obj.dispose()
        logger.info("Storefront backend stopped")

    app = FastAPI(
        title="Storefront Backend",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        # browsers reject credentials with a wildcard origin
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
