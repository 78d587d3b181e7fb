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
# THE ORCHESTRATOR - SCAFFOLDING PIPELINE
# -----------------------------------------------------------------------------
# Responsibility: Turn a template name into a scaffolded project.
# Connects: Validator -> TemplateStore -> Registry -> Runner
#
# State machine:
#   INIT -> VALIDATE_ENVIRONMENT -> LOAD_MANIFEST -> DISCOVER_MODULES
#        -> VALIDATE_DEPENDENCIES -> EXECUTE_MODULES -> SUMMARIZE -> DONE
#   Any ForgeError moves the run to FAILED and is re-raised.
#
# Guarantees:
# - Nothing executes unless every required module and every declared
#   dependency resolves.
# - Modules run strictly in manifest order, one at a time.
# - The first module (bootstrap) runs in the starting directory and must
#   create <project_name>/; every later module runs inside it.
# - The first module failure stops the run. Files already written stay.
# -----------------------------------------------------------------------------

from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.panel import Panel

from forge.config import Settings
from forge.core.registry import ModuleRegistry
from forge.core.runner import ModuleRunner
from forge.core.templates import TemplateStore
from forge.core.validator import EnvironmentValidator
from forge.domain.models import Manifest, ModuleDescriptor, RunSummary
from forge.errors import (
    DependencyError,
    DiscoveryError,
    EnvironmentCheckError,
    ForgeError,
)

console = Console()

NEXT_STEPS = [
    "cd {project}",
    "cp frontend/.env.local.example frontend/.env.local",
    "Edit environment variables",
    "cd supabase && supabase start",
    "cd frontend && pnpm install && pnpm dev",
]


class Phase(str, Enum):
    """Orchestration state."""

    INIT = "init"
    VALIDATE_ENVIRONMENT = "validate_environment"
    LOAD_MANIFEST = "load_manifest"
    DISCOVER_MODULES = "discover_modules"
    VALIDATE_DEPENDENCIES = "validate_dependencies"
    EXECUTE_MODULES = "execute_modules"
    SUMMARIZE = "summarize"
    DONE = "done"
    FAILED = "failed"


class Orchestrator:
    """
    Runs one template against one project name.

    Collaborators are injectable so tests can substitute any of them.
    """

    def __init__(
        self,
        settings: Settings,
        project_name: str,
        template: str,
        debug: bool = False,
        runner: ModuleRunner | None = None,
        registry: ModuleRegistry | None = None,
        templates: TemplateStore | None = None,
        validator: EnvironmentValidator | None = None,
        workdir: Path | None = None,
    ) -> None:
        self._settings = settings
        self.project_name = project_name
        self.template = template
        self.debug = debug or settings.debug

        self._runner = runner or ModuleRunner(settings, debug=self.debug)
        self._registry = registry or ModuleRegistry(settings.modules_dir, settings.categories)
        self._templates = templates or TemplateStore(settings.templates_dir)
        self._validator = validator or EnvironmentValidator(settings, debug=self.debug)

        # Captured once; never re-read from the process afterwards
        self._start_dir = Path(workdir) if workdir else Path.cwd()

        self.phase = Phase.INIT
        self.manifest: Manifest | None = None
        self.modules: list[ModuleDescriptor] = []
        self.summary = RunSummary(project_name=project_name, template=template)

    # --- Pipeline ------------------------------------------------------------

    def run(self) -> RunSummary:
        """
        Execute the full pipeline.

        Returns:
            RunSummary of the completed run.

        Raises:
            ForgeError: Any fatal condition; phase is left at FAILED.
        """
        try:
            self.show_banner()
            self.validate_environment()
            self.load_manifest()
            self.discover_modules()
            self.validate_dependencies()
            self.execute_modules()
            self.summarize()
        except ForgeError:
            self.phase = Phase.FAILED
            raise
        self.phase = Phase.DONE
        return self.summary

    def show_banner(self) -> None:
        console.print(
            Panel(
                f"Project: [bold]{self.project_name}[/bold]\n"
                f"Template: [bold]{self.template}[/bold]\n"
                f"Modules: {self._settings.modules_dir}",
                title="SaaS Template Generator",
                border_style="cyan",
            )
        )

    def validate_environment(self) -> None:
        self.phase = Phase.VALIDATE_ENVIRONMENT
        self._validator.validate_environment()

    def load_manifest(self) -> Manifest:
        self.phase = Phase.LOAD_MANIFEST
        self.manifest = self._templates.load(self.template)
        return self.manifest

    def discover_modules(self) -> list[ModuleDescriptor]:
        """
        Resolve every manifest module, in manifest order.

        Unresolved names are warned about as they are found; required ones
        fail the run once the pass completes.

        Raises:
            DiscoveryError: If any required module did not resolve.
        """
        self.phase = Phase.DISCOVER_MODULES
        assert self.manifest is not None, "load_manifest() must run first"
        console.print("[magenta][FORGE] Discovering available modules...[/magenta]")

        resolved: list[ModuleDescriptor] = []
        unresolved: list[str] = []
        for ref in self.manifest.modules:
            descriptor = self._registry.find(ref.name)
            if descriptor:
                resolved.append(descriptor)
                console.print(f"[cyan][FORGE] Found module: {ref.name} ({descriptor.path})[/cyan]")
            elif ref.optional:
                self.summary.skipped.append(ref.name)
                console.print(f"[yellow][FORGE] Optional module not found, skipping: {ref.name}[/yellow]")
            else:
                unresolved.append(ref.name)
                console.print(f"[yellow][FORGE] Module not found: {ref.name}[/yellow]")

        self.modules = resolved
        self.summary.discovered = [d.name for d in resolved]

        if unresolved:
            raise DiscoveryError(
                f"Required modules not found: {', '.join(unresolved)}",
                unresolved=unresolved,
            )

        console.print(f"[green][FORGE] Discovered {len(resolved)} modules[/green]")
        return resolved

    def validate_dependencies(self) -> None:
        """
        Confirm every declared dependency resolves.

        Order is not changed: a dependency that is scheduled after its
        dependent only produces a warning.

        Raises:
            DependencyError: On the first module with unresolved dependencies.
        """
        self.phase = Phase.VALIDATE_DEPENDENCIES
        console.print("[magenta][FORGE] Validating module dependencies...[/magenta]")

        position = {d.name: i for i, d in enumerate(self.modules)}
        for index, descriptor in enumerate(self.modules):
            self._validator.validate_module_file(descriptor)

            missing = [dep for dep in descriptor.dependencies if self._registry.find(dep) is None]
            if missing:
                console.print(
                    f"[red][FORGE] Missing dependency: {', '.join(missing)} "
                    f"(required by {descriptor.name})[/red]"
                )
                raise DependencyError(
                    f"Module '{descriptor.name}' depends on missing modules: {', '.join(missing)}",
                    module=descriptor.name,
                    missing=missing,
                )

            for dep in descriptor.dependencies:
                if position.get(dep, -1) > index:
                    console.print(
                        f"[yellow][FORGE] {descriptor.name} depends on {dep}, "
                        f"which runs later in this template[/yellow]"
                    )

        console.print("[green][FORGE] All modules validated[/green]")

    def execute_modules(self) -> None:
        """
        Run the resolved modules in order.

        Raises:
            ModuleExecutionError: First module failure (propagated from the runner).
            EnvironmentCheckError: Bootstrap module did not create the project directory.
        """
        self.phase = Phase.EXECUTE_MODULES
        assert self.manifest is not None, "load_manifest() must run first"
        console.print("[magenta][FORGE] Executing modules in sequence...[/magenta]")

        workdir = self._start_dir
        for index, descriptor in enumerate(self.modules):
            console.print(f"[cyan][FORGE] Executing module: {descriptor.name}[/cyan]")
            record = self._runner.run(
                descriptor,
                workdir=workdir,
                project_name=self.project_name,
                manifest_path=self.manifest.source,
            )
            self.summary.records.append(record)
            console.print(f"[green][FORGE] Module completed: {descriptor.name}[/green]")

            if index == 0:
                workdir = self._enter_project_dir(workdir)

        if self.summary.executed:
            console.print(
                f"[green][FORGE] All {self.summary.executed} modules executed successfully[/green]"
            )
        else:
            console.print("[yellow][FORGE] No modules were executed[/yellow]")

    def _enter_project_dir(self, workdir: Path) -> Path:
        project_dir = workdir / self.project_name
        if not project_dir.is_dir():
            console.print(f"[red][FORGE] Project directory not created: {project_dir}[/red]")
            raise EnvironmentCheckError(
                f"Project directory not created: {project_dir}",
                missing=[str(project_dir)],
            )
        self.summary.project_dir = project_dir
        console.print(f"[cyan][FORGE] Working directory is now: {project_dir}[/cyan]")
        return project_dir

    def summarize(self) -> RunSummary:
        self.phase = Phase.SUMMARIZE
        assert self.manifest is not None, "load_manifest() must run first"

        lines = [
            f"Project created: [bold]{self.project_name}[/bold]",
            f"Template used: [bold]{self.template}[/bold]",
            f"Modules executed: {self.summary.executed}/{len(self.summary.discovered)}",
        ]
        if self.summary.skipped:
            lines.append(f"Skipped optional modules: {', '.join(self.summary.skipped)}")
        if self.manifest.features:
            lines.append("")
            lines.append("Features:")
            lines += [f"  - {feature}" for feature in self.manifest.features]
        if self.manifest.environment.required_vars:
            lines.append("")
            lines.append("Configure these variables in the generated project:")
            lines += [f"  - {var}" for var in self.manifest.environment.required_vars]
        lines.append("")
        lines.append("Next Steps:")
        lines += [
            f"  {i}. {step.format(project=self.project_name)}"
            for i, step in enumerate(NEXT_STEPS, start=1)
        ]

        console.print(
            Panel(
                "\n".join(lines),
                title="SaaS Template Generation Complete",
                border_style="green",
            )
        )
        return self.summary
