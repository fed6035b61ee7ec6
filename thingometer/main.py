"""FastAPI application"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from thingometer import __version__
from thingometer.api.admin_routes import router as admin_router
from thingometer.api.coordinator_routes import router as coordinator_router
from thingometer.api.routes import router
from thingometer.config import get_settings
from thingometer.db.database import init_database
from thingometer.errors import ThingometerError
from thingometer.logger import setup_logger

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    setup_logger()
    logger.info("=" * 60)
    logger.info("Thingometer starting...")
    logger.info("=" * 60)

    try:
        await init_database()
        logger.success("Database initialised")
    except Exception as e:
        logger.error(f"Database initialisation failed: {e}")
        raise

    if not settings.admin_password:
        logger.warning("ADMIN_PASSWORD is not set; admin and coordinator routes will reject every request")

    logger.success("Startup complete")
    logger.info(f"API docs: http://{settings.server_host}:{settings.server_port}/docs")

    yield

    logger.info("Thingometer shutting down...")


app = FastAPI(
    title="Thingometer",
    description="Parade and contest judging: signups, running order, scoring and winners",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ThingometerError)
async def thingometer_error_handler(request: Request, exc: ThingometerError):
    """Domain errors -> {"error": message} with the error's status"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies and parameters are 400s"""
    logger.warning(f"{request.method} {request.url.path}: invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_errors(exc)},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


app.include_router(router, prefix="/api", tags=["public"])
app.include_router(admin_router, prefix="/api", tags=["admin"])
app.include_router(coordinator_router, prefix="/api", tags=["coordinator"])


@app.get("/")
async def root():
    return {
        "message": "Thingometer",
        "version": __version__,
        "docs": "/docs",
        "api_prefix": "/api",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "thingometer.main:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=True,
        log_level="info",
    )
