"""FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse

from cli.logging_config import setup_logging
from errors import BrewlogError
from web.deps import get_config
from web.routes import auth_config, proxy

logger = structlog.get_logger()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_config = get_config().logging
    setup_logging(json_mode=True, level=log_config.level)
    logger.info("web.startup")
    yield
    logger.info("web.shutdown")


app = FastAPI(
    title="Brewlog",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def cors(request: Request, call_next):
    """Answer preflights before routing; stamp CORS headers on everything else."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(BrewlogError)
async def brewlog_error_handler(request: Request, exc: BrewlogError):
    if exc.status_code >= 500:
        logger.error("web.error", path=request.url.path, status=exc.status_code, error=exc.message)
    else:
        logger.info("web.error", path=request.url.path, status=exc.status_code, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(proxy.router)
app.include_router(auth_config.router)


@app.get("/api/health")
async def health():
    return {"status": "ok"}
