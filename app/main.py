import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings, init_db, close_db
from app.deps import init_services
from app.exceptions import register_exception_handlers
from app.routes import register_routes
from app.token import NEW_ACCESS_TOKEN_HEADER, NEW_REFRESH_TOKEN_HEADER
from app.utils.auto_routing import get_module

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    init_services()
    logger.info("%s started (%s)", settings.APP_NAME, settings.ENV)
    yield
    await close_db()
    logger.info("Application shutdown complete.")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan, debug=settings.DEBUG)
register_exception_handlers(app)
register_routes(app)


@app.get("/")
async def home():
    return {"app": settings.APP_NAME, "env": settings.ENV, "routes": get_module()}


allow_origins = ["*"]
if settings.DEBUG:
    allow_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "refresh-token"],
    expose_headers=[NEW_ACCESS_TOKEN_HEADER, NEW_REFRESH_TOKEN_HEADER],
)
