# -----------------------------------------------------------------------------
# CORE LAYER
# -----------------------------------------------------------------------------
# The business logic of the Forge:
# - TemplateStore: Manifest loading
# - ModuleRegistry: Module discovery
# - EnvironmentValidator: Pre-flight checks
# - ModuleRunner: Module execution
# - Orchestrator: Scaffolding pipeline
# - ModuleMigrator: Monolith to modules extraction
# -----------------------------------------------------------------------------

from .migrator import DEFAULT_MIGRATION_MAP, ModuleMigrator
from .orchestrator import Orchestrator, Phase
from .registry import ModuleRegistry
from .runner import ModuleRunner
from .templates import TemplateStore
from .validator import EnvironmentValidator

__all__ = [
    "DEFAULT_MIGRATION_MAP", "ModuleMigrator",
    "Orchestrator", "Phase",
    "ModuleRegistry",
    "ModuleRunner",
    "TemplateStore",
    "EnvironmentValidator",
]
