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
# THE VALIDATOR - PRE-FLIGHT CHECKS
# -----------------------------------------------------------------------------
# Responsibility: Confirm the Forge can run before anything touches disk.
#
# Checks:
# - Required directories exist (modules, templates, lib)
# - Required external commands are on PATH (node, git by default)
# - Each scheduled module file still exists and looks like a module
#
# All environment problems are collected and reported together.
# -----------------------------------------------------------------------------

from pathlib import Path

from rich.console import Console

from forge.config import Settings
from forge.domain.models import ModuleDescriptor
from forge.errors import DependencyError, EnvironmentCheckError
from forge.infra.process import which

console = Console()


class EnvironmentValidator:
    """Pre-flight checks for directories, tools and module files."""

    def __init__(self, settings: Settings, debug: bool = False) -> None:
        self._settings = settings
        self._debug = debug or settings.debug

    def validate_directory(self, path: Path, label: str) -> bool:
        if not Path(path).is_dir():
            console.print(f"[red][VALIDATOR] {label} not found: {path}[/red]")
            return False
        if self._debug:
            console.print(f"[dim][VALIDATOR] {label} validated: {path}[/dim]")
        return True

    def validate_command(self, command: str, label: str | None = None) -> bool:
        label = label or command
        location = which(command)
        if not location:
            console.print(f"[red][VALIDATOR] {label} not found: {command}[/red]")
            console.print(f"[cyan][VALIDATOR] Please install {label} and try again[/cyan]")
            return False
        if self._debug:
            console.print(f"[dim][VALIDATOR] {label} found: {location}[/dim]")
        return True

    def validate_environment(self) -> None:
        """
        Run every environment check.

        Raises:
            EnvironmentCheckError: Listing every missing directory and command.
        """
        console.print("[magenta][VALIDATOR] Validating environment...[/magenta]")
        missing: list[str] = []

        directories = [
            (self._settings.modules_dir, "Modules directory"),
            (self._settings.templates_dir, "Templates directory"),
            (self._settings.lib_dir, "Library directory"),
        ]
        for path, label in directories:
            if not self.validate_directory(path, label):
                missing.append(str(path))

        for command in self._settings.required_commands:
            if not self.validate_command(command):
                missing.append(command)

        if missing:
            raise EnvironmentCheckError(
                f"Environment validation failed, missing: {', '.join(missing)}",
                missing=missing,
            )

        console.print("[green][VALIDATOR] Environment validation completed[/green]")

    def validate_module_file(self, descriptor: ModuleDescriptor) -> None:
        """
        Check that a discovered module file is still usable.

        Raises:
            DependencyError: If the file disappeared after discovery.
        """
        path = descriptor.path
        if not path.is_file():
            raise DependencyError(
                f"Module file not found: {path}", module=descriptor.name
            )

        if path.suffix == ".sh":
            text = path.read_text(encoding="utf-8", errors="replace")
            if "setup_" not in text:
                console.print(
                    f"[yellow][VALIDATOR] Module may not have setup function: {path}[/yellow]"
                )
