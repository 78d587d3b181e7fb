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
# THE RUNNER - MODULE EXECUTION
# -----------------------------------------------------------------------------
# Responsibility: Execute one module script as an isolated child process in
# an explicit working directory and record the outcome.
#
# Contract:
# - argv: <module> <project_name>
# - env:  PROJECT_NAME, TEMPLATE_CONFIG, DEBUG, FORGE_LIB_DIR (over the inherited env)
# - Blocks until the child exits. No retries, no timeout.
# - Non-zero exit -> ModuleExecutionError carrying the ExecutionRecord.
#
# Output relay: --dev shows every line; otherwise known package-manager noise
# is dropped before it reaches the console. The record always keeps all lines,
# and on failure its last lines are replayed unfiltered.
# -----------------------------------------------------------------------------

import re
import time
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from forge.config import Settings
from forge.domain.models import ExecutionRecord, ModuleDescriptor
from forge.errors import ModuleExecutionError
from forge.infra.process import ProcessLaunchError, build_command, stream_process

console = Console()

LAUNCH_FAILURE_EXIT_CODE = 127

# Output lines replayed unfiltered when a module fails
FAILURE_TAIL_LINES = 20


class ModuleRunner:
    """Runs module scripts one at a time."""

    def __init__(self, settings: Settings, debug: bool = False) -> None:
        self._debug = debug or settings.debug
        self._noise = [re.compile(p) for p in settings.noisy_patterns]
        self._lib_dir = settings.lib_dir

    @property
    def debug(self) -> bool:
        return self._debug

    def is_noise(self, line: str) -> bool:
        return any(p.search(line) for p in self._noise)

    def _relay(self, name: str, line: str) -> None:
        if not self._debug and self.is_noise(line):
            return
        console.print(f"[dim]  {escape(f'[{name}]')}[/dim] {escape(line)}", highlight=False)

    def _replay_tail(self, name: str, lines: list[str]) -> None:
        tail = [line for line in lines if line.strip()][-FAILURE_TAIL_LINES:]
        if not tail:
            return
        console.print(f"[red][RUNNER] Last output from {escape(name)}:[/red]")
        for line in tail:
            console.print(f"[red]  {escape(f'[{name}]')}[/red] {escape(line)}", highlight=False)

    def run(
        self,
        descriptor: ModuleDescriptor,
        workdir: Path,
        project_name: str,
        manifest_path: Path | None = None,
    ) -> ExecutionRecord:
        """
        Execute a module and wait for it to finish.

        Args:
            descriptor: The resolved module.
            workdir: Directory the module runs in.
            project_name: Single positional argument passed to the module.
            manifest_path: Active template file, exported as TEMPLATE_CONFIG.

        Returns:
            ExecutionRecord for a successful run.

        Raises:
            ModuleExecutionError: If the module exits non-zero or cannot start.
        """
        env = {
            "PROJECT_NAME": project_name,
            "TEMPLATE_CONFIG": str(manifest_path) if manifest_path else "",
            "DEBUG": "1" if self._debug else "0",
            "FORGE_LIB_DIR": str(self._lib_dir),
        }

        if self._debug:
            console.print(
                f"[dim][RUNNER] {descriptor.path} {project_name} (cwd: {workdir})[/dim]"
            )

        start = time.monotonic()
        try:
            cmd = build_command(descriptor.path, project_name)
            exit_code, output = stream_process(
                cmd,
                cwd=workdir,
                env=env,
                on_line=lambda line: self._relay(descriptor.name, line),
            )
        except (ProcessLaunchError, OSError) as e:
            record = ExecutionRecord(
                name=descriptor.name,
                exit_code=LAUNCH_FAILURE_EXIT_CODE,
                output=[str(e)],
                duration_seconds=time.monotonic() - start,
            )
            console.print(f"[red][RUNNER] Module could not start: {descriptor.name} ({e})[/red]")
            raise ModuleExecutionError(
                f"Module '{descriptor.name}' could not start: {e}", record
            ) from e

        record = ExecutionRecord(
            name=descriptor.name,
            exit_code=exit_code,
            output=output,
            duration_seconds=time.monotonic() - start,
        )

        if exit_code != 0:
            console.print(
                f"[red][RUNNER] Module failed with exit code {exit_code}: {descriptor.name}[/red]"
            )
            if not self._debug:
                self._replay_tail(descriptor.name, output)
            raise ModuleExecutionError(
                f"Module '{descriptor.name}' failed with exit code {exit_code}", record
            )

        if self._debug:
            console.print(
                f"[dim][RUNNER] Module completed successfully: {descriptor.name} "
                f"({record.duration_seconds:.1f}s)[/dim]"
            )
        return record
