import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes.home import router as home_router
from config.settings import settings
from events.bus import UserEventBus
from services.sandbox_manager import SandboxManager
from services.sandbox_store import SQLModelEntityStore
from utils.database import get_engine, init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

DESCRIPTION = """
Per-user sandbox organizations.

Every user gets a private sandbox organization when the account is created.
It is removed, with all of its projects and elements, when the account is
deleted.

## Authentication

`GET /` requires an API key via the `X-API-Key` header and redirects to the
caller's sandbox organization.
"""


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = init_db(get_engine())
    bus = UserEventBus()
    manager = SandboxManager(
        bus=bus,
        store=SQLModelEntityStore(engine),
        retroactive=settings.SANDBOX_RETROACTIVE,
        clear_user_link=settings.SANDBOX_CLEAR_USER_LINK,
    )
    app.state.event_bus = bus
    app.state.sandbox_manager = manager

    await manager.start()
    try:
        yield
    finally:
        await bus.drain()
        manager.stop()


app = FastAPI(
    title="Sandbox API",
    description=DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoints (public - no authentication required)
@app.get("/ping", tags=["Health"])
def ping():
    """Simple ping endpoint to check if API is responding. No authentication required."""
    return {"message": "pong"}


@app.get("/health", tags=["Health"])
def health():
    """Health check endpoint with basic status information. No authentication required."""
    return {
        "status": "healthy",
        "service": "Sandbox API",
        "version": "1.0.0",
        "sandbox_listeners": app.state.sandbox_manager.started if hasattr(app.state, "sandbox_manager") else False,
    }


# Register routers
app.include_router(home_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host=settings.API_HOST, port=settings.API_PORT)
