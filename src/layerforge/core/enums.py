"""
layerforge.core.enums - Type-Safe Enumerations
================================================

Enumerations shared across LayerForge. Like every enum in the package they
inherit from both ``str`` and ``Enum`` so they serialize cleanly to JSON and
compare equal to their plain string values.

Pipeline Mapping:
    ┌──────────────────────────────────────────────────────────────────┐
    │  VALIDATE → WORKSPACE → INSTALL → CLEANUP → ARCHIVE              │
    │                                    → UPLOAD → REGISTER           │
    └──────────────────────────────────────────────────────────────────┘
"""

from enum import Enum


# =============================================================================
# Pipeline Stage Enumeration
# =============================================================================
# Every StageOutcome and every LayerForgeError is tagged with one of these,
# so a failure response always says which stage stopped the pipeline.
# =============================================================================
class PipelineStage(str, Enum):
    """The ordered stages of a layer build.

    Execution Order:
        1. VALIDATE:  Parse and check the incoming request
        2. WORKSPACE: Create the private working directory and manifest
        3. INSTALL:   Run the package installer once per spec
        4. CLEANUP:   Drop the private installer cache (best-effort)
        5. ARCHIVE:   Zip the installed tree to disk
        6. UPLOAD:    Stream the archive to blob storage
        7. REGISTER:  Publish a new layer version referencing the object

    Usage:
        >>> PipelineStage.INSTALL == "install"
        True
    """

    VALIDATE = "validate"
    WORKSPACE = "workspace"
    INSTALL = "install"
    CLEANUP = "cleanup"
    ARCHIVE = "archive"
    UPLOAD = "upload"
    REGISTER = "register"


# =============================================================================
# Backend Enumeration
# =============================================================================
class Backend(str, Enum):
    """Which implementation family backs the blob store and the registry.

    AWS uses S3 and Lambda through boto3; MEMORY keeps everything in-process
    for local runs and tests.
    """

    AWS = "aws"
    MEMORY = "memory"
