# backend/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from typing import Optional
from contextlib import asynccontextmanager
import logging

from config import ServerConfig
from database import build_engine, build_session_factory, init_db
from errors import SalonError
from rpc import router as rpc_router

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """Build an API instance that owns its engine and session factory"""
    config = config or ServerConfig.from_env()

    engine = build_engine(config.database_url)
    init_db(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        logger.info("Starting Salon Manager API...")
        yield
        # Shutdown
        logger.info("Shutting down Salon Manager API...")
        engine.dispose()

    app = FastAPI(
        title="Salon Manager API",
        version=API_VERSION,
        description="Customers, services, appointments and service history for a beauty salon",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SalonError)
    async def salon_error_handler(request: Request, exc: SalonError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.code, "detail": exc.message},
        )

    @app.get("/")
    async def root():
        return {"message": "Salon Manager API", "version": API_VERSION}

    app.include_router(rpc_router)
    return app


def main():
    config = ServerConfig.from_env()
    logging.basicConfig(level=config.log_level)

    from server import create_server

    create_server(config).serve()


if __name__ == "__main__":
    main()
