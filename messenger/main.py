import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

from messenger.api.conversations.router import router as conversations_router
from messenger.api.friends.router import router as friends_router
from messenger.api.groups.router import router as groups_router
from messenger.api.health.router import router as health_router
from messenger.api.messages.router import router as messages_router
from messenger.api.mutes.router import router as mutes_router
from messenger.api.search.router import router as search_router
from messenger.api.typing.router import router as typing_router
from messenger.api.users.router import router as users_router
from messenger.core.config import settings
from messenger.core.errors import ServiceError, Unavailable
from messenger.database.database import init_db
from messenger.presence.typing_store import TypingStore

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.AUTO_CREATE_TABLES:
        init_db()
    app.state.typing_store = TypingStore(ttl=settings.TYPING_TTL_SECONDS)
    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield
    app.state.typing_store.clear()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Friendships, conversations and group messaging API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(conversations_router)
app.include_router(friends_router)
app.include_router(groups_router)
app.include_router(health_router)
app.include_router(messages_router)
app.include_router(mutes_router)
app.include_router(search_router)
app.include_router(typing_router)
app.include_router(users_router)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "kind": exc.kind.value,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(OperationalError)
async def storage_error_handler(request: Request, exc: OperationalError):
    logger.error(f"Storage unavailable: {str(exc)}")
    return await service_error_handler(request, Unavailable())


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "status_code": 500
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level="info",
    )
