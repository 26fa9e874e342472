# =======================================================================================
# checkpoint/main.py - FastAPI Application Entry Point
# =======================================================================================
import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import config
from .container import Container, build_container
from .api.routes.scan import router as scan_router
from .api.routes.logs import router as logs_router
from .api.routes.reports import router as reports_router
from .api.routes.employees import router as employees_router
from .api.routes.auth import router as auth_router
from .models.schemas import HealthResponse
from .utils.exceptions import (
    AuthenticationError, LocalStorageError, NotFoundError, RemoteUnavailableError, ValidationError,
)

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(AuthenticationError)
    async def authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"detail": str(exc)})

    @app.exception_handler(RemoteUnavailableError)
    async def remote_unavailable(request: Request, exc: RemoteUnavailableError):
        # Only reachable from calls that have no local counterpart, e.g. login
        logger.warning("Remote service unavailable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Remote service unavailable, try again later"},
        )

    @app.exception_handler(LocalStorageError)
    async def local_storage_error(request: Request, exc: LocalStorageError):
        logger.error("Request failed on both backends: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": "Storage temporarily unavailable, please try again"},
        )


def create_app(container: Optional[Container] = None) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="Laptop Checkpoint API",
        version="1.0.0",
        description="Entry/exit tracking for laptops carried through a building checkpoint",
        debug=config.API_DEBUG,
    )
    app.state.container = container or build_container()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(scan_router, prefix="/api", tags=["scan"])
    app.include_router(logs_router, prefix="/api", tags=["logs"])
    app.include_router(reports_router, prefix="/api", tags=["reports"])
    app.include_router(employees_router, prefix="/api", tags=["employees"])
    app.include_router(auth_router, prefix="/api", tags=["auth"])

    _register_error_handlers(app)

    @app.get("/api/health", response_model=HealthResponse, tags=["health"])
    def api_health():
        wiring: Container = app.state.container
        try:
            wiring.db.get_document("app_settings")
            return HealthResponse(
                status="ok", local_storage_available=True, remote_url=wiring.api_client.base_url
            )
        except LocalStorageError as e:
            return HealthResponse(
                status="error",
                local_storage_available=False,
                remote_url=wiring.api_client.base_url,
                message=str(e),
            )

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.container.aclose()
        logger.info("Laptop checkpoint API stopped")

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    run()
