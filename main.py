import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.exceptions import ShopException
from routers import router as api_router

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from db import ensure_indexes

    logger.info("Starting up %s...", settings.APP_NAME)
    await ensure_indexes()
    yield
    logger.info("Shutting down %s...", settings.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    description="API cho shop thời trang",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,    # cho phép cookie
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ShopException)
async def shop_exception_handler(request: Request, exc: ShopException):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code},
        headers=exc.headers,
    )


app.include_router(api_router)

@app.get("/")
async def root():
    return {"message": "Fashion Shop API đang chạy!"}
