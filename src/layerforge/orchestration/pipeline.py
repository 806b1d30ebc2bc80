"""
layerforge.orchestration.pipeline - Layer Build Pipeline
==========================================================

The orchestrator. It runs one layer build from request to published version:

    ┌──────────┐   ┌───────────┐   ┌─────────┐   ┌─────────┐
    │ VALIDATE │ → │ WORKSPACE │ → │ INSTALL │ → │ CLEANUP │
    └──────────┘   └───────────┘   └─────────┘   └─────────┘
                                                      │
              ┌──────────┐   ┌────────┐   ┌─────────┐ │
              │ REGISTER │ ← │ UPLOAD │ ← │ ARCHIVE │ ←┘
              └──────────┘   └────────┘   └─────────┘

Execution Rules:
    1. Stages run strictly in order; none overlaps another.
    2. Every stage produces a StageOutcome. The orchestrator checks
       ``outcome.succeeded`` after each one and returns at the first
       failure; later stages never start.
    3. Nothing is rolled back. Packages installed before a failing one stay
       on disk until teardown; an uploaded object whose registration failed
       stays in the bucket.
    4. The workspace is torn down in ``finally``, best-effort.
    5. ``run()`` never raises. Every failure, expected or not, becomes a
       PipelineResult with a status code and an ErrorDetail.

Status Codes:
    200 on success, 500 on any failure. InvalidRequestError maps to 400
    only when ``distinguish_client_errors`` is enabled.

Usage:
    >>> pipeline = LayerPipeline(workspaces, installer, archiver, publisher)
    >>> result = await pipeline.run({"packages": "lodash", "layerName": "utils"})
    >>> result.status_code
    200
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, Optional, Type, Union

import structlog

from layerforge.core.enums import PipelineStage
from layerforge.core.exceptions import (
    ArchiveError,
    InstallationError,
    InvalidRequestError,
    LayerForgeError,
    WorkspaceError,
)
from layerforge.core.models import (
    LayerRequest,
    PipelineResult,
    StageOutcome,
    Workspace,
)
from layerforge.infrastructure.archive import ArchiveBuilder
from layerforge.infrastructure.workspace import WorkspaceManager
from layerforge.integrations.installer.base import PackageInstaller
from layerforge.orchestration.publisher import ArtifactPublisher


logger = structlog.get_logger()


# =============================================================================
# Stage → Error Type Mapping
# =============================================================================
# An unexpected exception inside a stage is wrapped in that stage's error
# type so the failure response still names the right stage. Install, upload
# and register translate their own errors.
# =============================================================================
STAGE_ERRORS: dict[PipelineStage, Type[LayerForgeError]] = {
    PipelineStage.VALIDATE: InvalidRequestError,
    PipelineStage.WORKSPACE: WorkspaceError,
    PipelineStage.ARCHIVE: ArchiveError,
}


class LayerPipeline:
    """Runs the install → archive → upload → register pipeline.

    Attributes:
        _workspaces: Creates and removes per-run workspaces.
        _installer: Installs each package spec.
        _archiver: Zips the installed tree.
        _publisher: Uploads the archive and registers the version.
        _distinguish_client_errors: Answer invalid requests with 400.
    """

    def __init__(
        self,
        workspace_manager: WorkspaceManager,
        installer: PackageInstaller,
        archive_builder: ArchiveBuilder,
        publisher: ArtifactPublisher,
        distinguish_client_errors: bool = False,
    ) -> None:
        self._workspaces = workspace_manager
        self._installer = installer
        self._archiver = archive_builder
        self._publisher = publisher
        self._distinguish_client_errors = distinguish_client_errors
        self._logger = logger.bind(component="layer_pipeline")

    # =========================================================================
    # Main Entry Point
    # =========================================================================

    async def run(self, request: Union[LayerRequest, dict[str, Any]]) -> PipelineResult:
        """Build and publish one layer version.

        Args:
            request: A LayerRequest, or a raw invocation event
                (``{"packages": "...", "layerName": "..."}``) to validate.

        Returns:
            The PipelineResult. Never raises.
        """
        stages: list[StageOutcome] = []
        self._logger.info("request_received", request=_describe(request))

        # --- Validate (no side effects before this succeeds) ---
        outcome = await self._run_stage(PipelineStage.VALIDATE, self._validate, request)
        stages.append(outcome)
        if not outcome.succeeded:
            return self._failure(outcome, stages)
        layer_request: LayerRequest = outcome.value

        log = self._logger.bind(layer_name=layer_request.layer_name)
        log.info("layer_build_started", packages=layer_request.packages)

        # --- Workspace ---
        outcome = await self._run_stage(
            PipelineStage.WORKSPACE, self._workspaces.prepare, layer_request.layer_name
        )
        stages.append(outcome)
        if not outcome.succeeded:
            return self._failure(outcome, stages)
        workspace: Workspace = outcome.value

        try:
            return await self._build(layer_request, workspace, stages)
        finally:
            await self._workspaces.teardown(workspace)

    async def _build(
        self,
        request: LayerRequest,
        workspace: Workspace,
        stages: list[StageOutcome],
    ) -> PipelineResult:
        # --- Install, one spec at a time, in request order ---
        outcome = await self._run_stage(PipelineStage.INSTALL, self._install_all, request, workspace)
        stages.append(outcome)
        if not outcome.succeeded:
            return self._failure(outcome, stages)

        # --- Drop the private installer cache before zipping ---
        outcome = await self._run_stage(PipelineStage.CLEANUP, self._workspaces.clear_cache, workspace)
        stages.append(outcome)

        # --- Archive ---
        outcome = await self._run_stage(
            PipelineStage.ARCHIVE, self._archiver.build, workspace.layer_dir, workspace.archive_path
        )
        stages.append(outcome)
        if not outcome.succeeded:
            return self._failure(outcome, stages)

        # --- Upload ---
        outcome = await self._run_stage(
            PipelineStage.UPLOAD, self._publisher.upload, workspace.archive_path, request.layer_name
        )
        stages.append(outcome)
        if not outcome.succeeded:
            return self._failure(outcome, stages)
        stored = outcome.value

        # --- Register ---
        outcome = await self._run_stage(
            PipelineStage.REGISTER, self._publisher.register, request.layer_name, request.packages, stored
        )
        stages.append(outcome)
        if not outcome.succeeded:
            return self._failure(outcome, stages)

        self._logger.info(
            "pipeline_completed",
            layer_name=request.layer_name,
            version=outcome.value.version,
            duration_seconds=round(sum(s.duration_seconds for s in stages), 3),
        )
        return PipelineResult(status_code=200, layer_version=outcome.value, stages=stages)

    # =========================================================================
    # Stage Bodies
    # =========================================================================

    @staticmethod
    async def _validate(request: Union[LayerRequest, dict[str, Any]]) -> LayerRequest:
        if isinstance(request, LayerRequest):
            return request
        return LayerRequest.from_event(request)

    async def _install_all(self, request: LayerRequest, workspace: Workspace) -> list[str]:
        installed: list[str] = []
        for spec in request.packages:
            self._logger.info("package_install_started", spec=spec, installer=self._installer.name)
            try:
                result = await self._installer.install(spec, workspace)
            except LayerForgeError:
                raise
            except Exception as e:
                raise InstallationError(
                    message=f"Failed to install '{spec}': {e}",
                    spec=spec,
                    details={"cause": type(e).__name__},
                ) from e
            result.raise_for_status()
            self._logger.info(
                "package_installed",
                spec=spec,
                duration_seconds=round(result.duration_seconds, 3),
            )
            installed.append(spec)
        return installed

    # =========================================================================
    # Internal Helpers
    # =========================================================================

    async def _run_stage(
        self,
        stage: PipelineStage,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
    ) -> StageOutcome:
        """Run one stage body and turn its result or error into a StageOutcome."""
        started = time.monotonic()
        try:
            value = await func(*args)
        except LayerForgeError as e:
            return StageOutcome.fail(stage, e, duration=time.monotonic() - started)
        except Exception as e:
            self._logger.exception("stage_crashed", stage=stage.value)
            return StageOutcome.fail(
                stage,
                _wrap_unexpected(stage, e),
                duration=time.monotonic() - started,
            )
        return StageOutcome.ok(stage, value, duration=time.monotonic() - started)

    def _failure(self, outcome: StageOutcome, stages: list[StageOutcome]) -> PipelineResult:
        error = outcome.error
        status = 500
        if self._distinguish_client_errors and outcome.stage == PipelineStage.VALIDATE:
            status = 400

        self._logger.error(
            "pipeline_failed",
            stage=outcome.stage.value,
            error_type=error.error_type if error else None,
            error_code=error.error_code if error else None,
            error=error.message if error else None,
            status_code=status,
        )
        return PipelineResult(status_code=status, error=error, stages=stages)


def _wrap_unexpected(stage: PipelineStage, error: Exception) -> LayerForgeError:
    message = f"{type(error).__name__}: {error}"
    details = {"cause": type(error).__name__}
    error_type = STAGE_ERRORS.get(stage, LayerForgeError)
    return error_type(message=message, details=details)


def _describe(request: Union[LayerRequest, dict[str, Any], Any]) -> Optional[dict[str, Any]]:
    if isinstance(request, LayerRequest):
        return {"packages": request.packages, "layerName": request.layer_name}
    if isinstance(request, dict):
        return {k: request.get(k) for k in ("packages", "layerName")}
    return None
