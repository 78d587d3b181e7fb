# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# FORGE ERRORS - FAILURE TAXONOMY
# -----------------------------------------------------------------------------
# Every fatal condition in the Forge is one of these. Components raise them;
# only the CLI catches them, prints the halt panel and exits with exit_code.
#
# Per-entry extraction failures in the Migrator are NOT errors: they are
# counted in the MigrationReport and the run continues.
# -----------------------------------------------------------------------------

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from forge.domain.models import ExecutionRecord


class ForgeError(Exception):
    """Base class for all fatal Forge conditions."""

    exit_code: int = 1


class EnvironmentCheckError(ForgeError):
    """
    Raised when a required directory or external command is missing.

    Reported before any filesystem mutation happens.
    """

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = missing or []


class ManifestError(ForgeError):
    """Raised when a template is unknown or its manifest is invalid."""

    def __init__(
        self, message: str, template: str, available: list[str] | None = None
    ) -> None:
        super().__init__(message)
        self.template = template
        self.available = available or []


class DiscoveryError(ForgeError):
    """Raised when required manifest modules could not be resolved."""

    def __init__(self, message: str, unresolved: list[str]) -> None:
        super().__init__(message)
        self.unresolved = unresolved


class DependencyError(ForgeError):
    """Raised when a module declares a dependency that does not resolve."""

    def __init__(self, message: str, module: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.module = module
        self.missing = missing or []


class ModuleExecutionError(ForgeError):
    """
    Raised when a module process exits non-zero.

    The exit code of the module becomes the exit code of the Forge.
    """

    def __init__(self, message: str, record: ExecutionRecord) -> None:
        super().__init__(message)
        self.record = record
        self.exit_code = record.exit_code if record.exit_code > 0 else 1


class MigrationError(ForgeError):
    """Raised when the legacy source script for a migration is missing."""

    pass
