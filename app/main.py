from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import api
from app.api import include_routers
from app.core.config import settings
from app.core.logging import setup_logging
from app.database import init_databases, close_databases
from app.middleware.error_handler import ErrorHandlerMiddleware, create_http_exception_handler
from app.middleware.logging_middleware import LoggingMiddleware
from app.services.presence_monitor import get_presence_monitor


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    await init_databases()
    monitor = get_presence_monitor()
    if settings.presence_monitor_enabled:
        await monitor.start()
    yield
    # Shutdown
    await monitor.stop()
    await close_databases()


app = FastAPI(lifespan=lifespan)
app.add_middleware(ErrorHandlerMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_exception_handler(StarletteHTTPException, create_http_exception_handler())

# Include routers
include_routers(app, "api", api.__path__)


@app.get("/")
async def root():
    return {"message": "Chat room backend"}
