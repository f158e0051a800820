"""
Workflow orchestrator for the Upload → Tailor → Export pipeline.

Owns the single WorkflowState of the session and is its only writer:
1. Submit the resume document and obtain a handle
2. Request a tailoring pass with the handle and job description inputs
3. Export the tailored text and keep the download location

Each stage runs only after the previous one succeeded. The first failure
ends the run; whatever was already obtained stays in the state. Observers
get deep-copied snapshots through subscribe().
"""

import logging
from typing import Callable, List, Optional

from shared.schemas.resume import (
    ResumeDocument,
    TailoringInputs,
    ExportArtifact,
)
from shared.schemas.workflow import WorkflowPhase, WorkflowState, WorkflowErrorInfo
from .config import ConsoleConfig, get_config
from .errors import TailorConsoleError
from .tailor_client import BaseTailorClient, get_tailor_client

logger = logging.getLogger(__name__)

StateListener = Callable[[WorkflowState], None]


class WorkflowOrchestrator:
    """
    Runs the three tailoring service stages in strict sequence.

    At most one run is in flight: run_workflow() is a no-op while busy.
    The busy flag is set before the first await, so the check holds for
    any number of callers on the same event loop.
    """

    def __init__(
        self,
        client: BaseTailorClient,
        export_filename: str = "tailored_resume.docx",
        export_title: str = "TAILORED RESUME",
    ):
        """
        Initialize the orchestrator.

        Args:
            client: Tailoring service client providing the stage adapters
            export_filename: Filename sent with every export request
            export_title: Document title sent with every export request
        """
        self.client = client
        self.export_filename = export_filename
        self.export_title = export_title
        self._state = WorkflowState()
        self._listeners: List[StateListener] = []

    # ========================================================================
    # State access
    # ========================================================================

    @property
    def state(self) -> WorkflowState:
        """Read-only snapshot of the current state."""
        return self._state.model_copy(deep=True)

    @property
    def busy(self) -> bool:
        return self._state.busy

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a listener for state changes.

        The listener is called with a snapshot after every transition.
        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("State listener failed")

    # ========================================================================
    # Run
    # ========================================================================

    async def run_workflow(
        self,
        document: Optional[ResumeDocument],
        inputs: Optional[TailoringInputs] = None,
    ) -> Optional[ExportArtifact]:
        """
        Run Upload → Tailor → Export once.

        Args:
            document: Resume to submit (None means nothing was selected)
            inputs: Job description and company inputs for tailoring

        Returns:
            The export artifact, or None if a run was already in flight.

        Raises:
            TailorConsoleError: The stage error that ended the run. The state
                is already back to idle with the error recorded.
        """
        if self._state.busy:
            logger.warning(f"Workflow already running ({self._state.phase.value}); ignoring new run")
            return None

        inputs = inputs or TailoringInputs()
        self._state.begin()
        self._publish()
        logger.info("Workflow started")

        try:
            # Stage 1: Submit
            logger.info("Stage 1: Submitting resume...")
            handle = await self.client.submit(document)
            self._state.handle = handle

            # Stage 2: Tailor
            self._state.advance(WorkflowPhase.TAILORING)
            self._publish()
            logger.info("Stage 2: Tailoring resume...")
            result = await self.client.tailor(handle, inputs)
            self._state.result = result

            # Stage 3: Export
            self._state.advance(WorkflowPhase.EXPORTING)
            self._publish()
            logger.info("Stage 3: Exporting tailored resume...")
            artifact = await self.client.export(
                result.tailored_text,
                self.export_filename,
                self.export_title,
            )
            self._state.artifact = artifact

        except TailorConsoleError as e:
            logger.error(
                f"Workflow failed at {self._state.phase.value}: {e.kind} "
                f"(status={getattr(e, 'status_code', None)}, detail={getattr(e, 'detail', None)})"
            )
            self._state.complete(error=WorkflowErrorInfo.from_exception(e))
            self._publish()
            raise

        except Exception:
            # Session must return to idle on any error
            logger.exception(f"Unexpected error at {self._state.phase.value}")
            self._state.complete(error=WorkflowErrorInfo(kind="unexpected", message="Error"))
            self._publish()
            raise

        self._state.complete()
        self._publish()
        logger.info(f"Workflow completed: {artifact.download_url}")
        return artifact

    # ========================================================================
    # Session controls
    # ========================================================================

    def acknowledge_error(self) -> bool:
        """Clear the pending error. Returns True if there was one."""
        if self._state.error is None:
            return False
        self._state.error = None
        self._publish()
        return True

    def reset(self) -> bool:
        """Forget handle, results and error. Refused while a run is in flight."""
        if self._state.busy:
            logger.warning("Cannot reset while a workflow is running")
            return False
        self._state = WorkflowState()
        self._publish()
        logger.info("Workflow session reset")
        return True


# ============================================================================
# Public API
# ============================================================================

_orchestrator: Optional[WorkflowOrchestrator] = None


def get_orchestrator(config: Optional[ConsoleConfig] = None) -> WorkflowOrchestrator:
    """Get or create the process-wide orchestrator."""
    global _orchestrator

    if _orchestrator is None:
        config = config or get_config()
        _orchestrator = WorkflowOrchestrator(
            get_tailor_client(config),
            export_filename=config.export_filename,
            export_title=config.export_title,
        )

    return _orchestrator


def shutdown_orchestrator() -> None:
    """Drop the process-wide orchestrator."""
    global _orchestrator
    _orchestrator = None
