from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

import dotenv
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

dotenv.load_dotenv()

# Import after environment is loaded
from calllogs import router as calllogs_router  # noqa: E402
from core import settings  # noqa: E402
from core.store import DataStore, StoreUnavailableError, open_store  # noqa: E402
from records import router as records_router  # noqa: E402
from records import service as records_service  # noqa: E402
from users import router as users_router  # noqa: E402

logger = logging.getLogger(__name__)


def create_app(store: DataStore | None = None) -> FastAPI:
    """
    Build the gateway. Pass `store` to inject a ready backend (tests do);
    otherwise one is opened from the environment on startup, or on the
    first request when the host skips the lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # One store per process; an injected store stays owned by the caller.
        owned = store is None
        if owned:
            app.state.store = await open_store()
            logger.info("store_opened provider=%s", settings.db_provider())
        try:
            yield
        finally:
            if owned:
                await app.state.store.close()
                app.state.store = None

    app = FastAPI(title="supabase-gateway", lifespan=lifespan)
    app.state.store = store
    app.state.store_lock = asyncio.Lock()

    # Any origin may call the gateway; credentials stay off with the wildcard.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(records_router.router, tags=["records"])
    app.include_router(calllogs_router.router, tags=["calllogs"])
    app.include_router(users_router.router, tags=["users"])

    @app.exception_handler(StoreUnavailableError)
    async def store_unavailable(_: Request, exc: StoreUnavailableError):
        logger.error("store_unavailable message=%s", exc)
        return records_service.server_error(exc)

    @app.get("/")
    def root() -> dict:
        return {"message": "Supabase Express API is running", "status": "healthy"}

    return app


app = create_app()


def run() -> None:
    logging.basicConfig(
        level=settings.log_level(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if settings.is_serverless():
        # The serverless host imports `app` from api/index.py instead.
        logger.info("serverless_mode listener=disabled")
        return

    port = settings.port()
    logger.info("server_starting port=%s", port)
    uvicorn.run(app, host=settings.host(), port=port)


if __name__ == "__main__":
    run()
