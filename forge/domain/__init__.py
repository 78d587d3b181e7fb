# -----------------------------------------------------------------------------
# DOMAIN LAYER
# -----------------------------------------------------------------------------
# Contains the Scaffolding Instructions (Pydantic models) that define the
# contract between template files, module scripts and the Orchestrator.
# -----------------------------------------------------------------------------

from .models import (
    EnvironmentSpec,
    ExecutionRecord,
    Manifest,
    MigrationEntry,
    MigrationReport,
    ModuleDescriptor,
    ModuleRef,
    RunSummary,
)

__all__ = [
    "EnvironmentSpec",
    "ExecutionRecord",
    "Manifest",
    "MigrationEntry",
    "MigrationReport",
    "ModuleDescriptor",
    "ModuleRef",
    "RunSummary",
]
