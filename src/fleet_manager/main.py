import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from src.fleet_manager.analytics.routes import analytics_router
from src.fleet_manager.config import get_settings
from src.fleet_manager.database.database import Base, DatabaseManager, engine
from src.fleet_manager.health_check.routes import health_router
from src.fleet_manager.logging_config import setup_logging

# Registers the ORM tables on Base.metadata
from src.fleet_manager.vehicles import models  # noqa: F401

setup_logging()
logger = logging.getLogger(__name__)
settings = get_settings()
PROJECT_NAME = settings.PROJECT_NAME
FastAPI_API_KEY_HEADER = settings.FASTAPI_API_KEY_HEADER
ALL_CORS_ORIGINS = settings.all_cors_origins


async def init_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# Custom OpenAPI schema to include API key security
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=PROJECT_NAME,
        version="0.1.0",
        description="Vehicle and fleet analytics with API key security",
        routes=app.routes,
    )

    if "components" not in openapi_schema:
        openapi_schema["components"] = {}

    openapi_schema["components"]["securitySchemes"] = {
        "APIKeyHeader": {
            "type": "apiKey",
            "in": "header",
            "name": FastAPI_API_KEY_HEADER,
        }
    }

    for path in openapi_schema["paths"].values():
        for method in path.values():
            method.setdefault("security", []).append({"APIKeyHeader": []})

    app.openapi_schema = openapi_schema
    return app.openapi_schema


@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    try:
        await DatabaseManager.connect()
        await init_db()
        logger.info("Startup complete")
        yield
        logger.info("Shutting down...")
    except Exception as e:
        logger.error(f"Startup failed: {str(e)}")
        raise
    finally:
        await DatabaseManager.disconnect()
        logger.info("Shutdown complete")


app = FastAPI(title=PROJECT_NAME, version="0.1.0", lifespan=lifespan)
app.openapi = custom_openapi  # type: ignore[method-assign]


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    return JSONResponse(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        content={
            "detail": "Database connection error. Please try again later.",
            "error": str(exc),
        },
    )


# Request DTOs built through Depends() raise outside FastAPI's own validation
@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
        content={
            "detail": [
                {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
                for error in exc.errors()
            ]
        },
    )


# Set all CORS enabled origins
if ALL_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALL_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# API Routes
api_router = APIRouter(prefix="/api")
api_router.include_router(analytics_router)
app.include_router(api_router)
app.include_router(health_router)
