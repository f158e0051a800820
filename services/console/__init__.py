from .app import app, create_app
from .errors import (
    TailorConsoleError,
    ConfigurationMissing,
    MissingInput,
    StageFailed,
    UploadFailed,
    TailorFailed,
    ExportFailed,
)
from .tailor_client import (
    BaseTailorClient,
    HttpTailorClient,
    SimulatedTailorClient,
    ServiceResponse,
    get_tailor_client,
)
from .orchestrator import WorkflowOrchestrator, get_orchestrator

__all__ = [
    "app",
    "create_app",
    "TailorConsoleError",
    "ConfigurationMissing",
    "MissingInput",
    "StageFailed",
    "UploadFailed",
    "TailorFailed",
    "ExportFailed",
    "BaseTailorClient",
    "HttpTailorClient",
    "SimulatedTailorClient",
    "ServiceResponse",
    "get_tailor_client",
    "WorkflowOrchestrator",
    "get_orchestrator",
]
