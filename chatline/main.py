import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatline.config import Settings, get_settings
from chatline.database.connection import close_mongo_connection, connect_to_mongo, mongo_db_dependency
from chatline.errors import ChatError, StorageError
from chatline.logging_config import setup_logging
from chatline.realtime.presence import PresenceRegistry
from chatline.repositories.message_repository import MessageRepository
from chatline.routers.messages import router as messages_router
from chatline.routers.presence import router as presence_router
from chatline.routers.realtime import router as realtime_router
from chatline.utils.uploads import build_uploader
from chatline.utils.websocket_manager import ConnectionManager


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):

    db = await connect_to_mongo(app.state.settings)
    try:
        await MessageRepository(db).ensure_indexes()
    except StorageError:
        logger.warning("Could not create message indexes; continuing without them")
    try:
        yield
    finally:
        await close_mongo_connection()


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError):
        return _failure(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _failure(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return _failure(400, message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _failure(500, "Internal server error")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="chatline messaging core", lifespan=lifespan)
    app.state.settings = settings
    app.state.presence = PresenceRegistry()
    app.state.connections = ConnectionManager(app.state.presence)
    app.state.uploader = build_uploader(settings)

    register_exception_handlers(app)
    app.include_router(messages_router)
    app.include_router(presence_router)
    app.include_router(realtime_router)

    @app.get("/health")
    async def health(db: AsyncIOMotorDatabase = Depends(mongo_db_dependency)):
        try:
            await db.command("ping")
        except PyMongoError:
            return _failure(503, "Database unreachable")
        return {"success": True, "online_users": len(app.state.presence)}

    return app


app = create_app()
