# =======================================================================================
# checkpoint/api/dependencies.py - FastAPI Dependencies
# =======================================================================================
from fastapi import Request
from ..clients.api_client import ApiClient
from ..container import Container
from ..services.checkpoint_service import CheckpointService
from ..services.fallback import FallbackCoordinator

def get_container(request: Request) -> Container:
    """Dependency to get the wiring built by create_app."""
    return request.app.state.container

def get_coordinator(request: Request) -> FallbackCoordinator:
    return get_container(request).coordinator

def get_checkpoint_service(request: Request) -> CheckpointService:
    return get_container(request).checkpoint_service

def get_api_client(request: Request) -> ApiClient:
    return get_container(request).api_client
