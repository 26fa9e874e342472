# =======================================================================================
# checkpoint/services/__init__.py - Services Package
# =======================================================================================
from .fallback import FallbackCoordinator
from .checkpoint_service import CheckpointService
from . import report_service

__all__ = ["FallbackCoordinator", "CheckpointService", "report_service"]
