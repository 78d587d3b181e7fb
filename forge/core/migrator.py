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
# THE MIGRATOR - MONOLITH TO MODULES
# -----------------------------------------------------------------------------
# Responsibility: One-shot split of the legacy monolithic setup script into
# standalone module files under modules/<category>/.
#
# The legacy script embeds every module as a heredoc inside a printer
# function:
#
#   print_module_02_content() {
#   cat << 'MODULE_EOF'
#   ...module body...
#   MODULE_EOF
#   }
#
# Only the lines strictly between the heredoc markers are kept; each body is
# wrapped in the standard module header (metadata + logging fallback) and
# footer (main wrapper + ERR trap) and written executable.
#
# A missing source is fatal. A function that yields nothing is counted as a
# failure and the run moves on to the next entry.
# -----------------------------------------------------------------------------

import re
from enum import Enum
from pathlib import Path

import yaml
from pydantic import ValidationError
from rich.console import Console

from forge.domain.models import MigrationEntry, MigrationReport
from forge.errors import MigrationError

console = Console()

BLOCK_START = "cat << 'MODULE_EOF'"
BLOCK_END = "MODULE_EOF"
STANDARD_CATEGORIES = ["core", "features", "advanced"]
DEFAULT_AUTHOR = "SaaS Template Team"
DEFAULT_PROJECT_NAME = "lean-saas-app"

DEFAULT_MIGRATION_MAP = [
    MigrationEntry(
        function="print_module_01_content",
        path="core/project-structure.sh",
        title="Project Structure Setup",
        description="Creates basic project directory structure",
        entrypoint="setup_project_structure",
    ),
    MigrationEntry(
        function="print_module_02_content",
        path="core/frontend-setup.sh",
        title="Frontend Setup",
        description="Sets up Next.js frontend with dependencies",
        entrypoint="setup_frontend",
    ),
    MigrationEntry(
        function="print_module_03_content",
        path="core/supabase-setup.sh",
        title="Supabase Setup",
        description="Configures Supabase database and auth",
        entrypoint="setup_supabase",
    ),
    MigrationEntry(
        function="print_module_04_content",
        path="features/auth-system.sh",
        title="Authentication System",
        description="Sets up authentication with Supabase",
    ),
    MigrationEntry(
        function="print_module_05_content",
        path="features/ui-components.sh",
        title="UI Components",
        description="Creates base UI component library",
    ),
    MigrationEntry(
        function="print_module_06_content",
        path="features/payment-system.sh",
        title="Payment System",
        description="Integrates Stripe payment processing",
    ),
    MigrationEntry(
        function="print_module_07_content",
        path="features/dashboard-setup.sh",
        title="Dashboard Setup",
        description="Creates dashboard pages and layouts",
        entrypoint="setup_dashboard",
    ),
    MigrationEntry(
        function="print_module_08_content",
        path="advanced/email-system.sh",
        title="Email System",
        description="Sets up email with Resend and templates",
    ),
    MigrationEntry(
        function="print_module_09_content",
        path="advanced/dev-tools.sh",
        title="Development Tools",
        description="Configures testing, CI/CD, and Docker",
    ),
]


class ExtractState(str, Enum):
    OUTSIDE = "outside"
    IN_FUNCTION = "in_function"
    IN_BLOCK = "in_block"
    DONE = "done"


def load_mapping(path: Path) -> list[MigrationEntry]:
    """
    Load a migration map from YAML.

    Expected shape: a list of mappings with function/path/title/description
    (entrypoint and version optional), or a mapping with a `modules` list.

    Raises:
        MigrationError: If the file is missing or invalid.
    """
    if not path.is_file():
        raise MigrationError(f"Mapping file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
        if isinstance(data, dict):
            data = data.get("modules", [])
        return [MigrationEntry(**item) for item in data]
    except (yaml.YAMLError, ValidationError, TypeError) as e:
        raise MigrationError(f"Invalid mapping file {path}: {e}") from e


class ModuleMigrator:
    """Extracts heredoc-embedded modules from a legacy script."""

    def __init__(
        self,
        source: Path,
        output_dir: Path,
        mapping: list[MigrationEntry] | None = None,
    ) -> None:
        self._source = Path(source)
        self._output_dir = Path(output_dir)
        self._mapping = list(mapping) if mapping is not None else list(DEFAULT_MIGRATION_MAP)
        self._lines: list[str] | None = None

    @property
    def mapping(self) -> list[MigrationEntry]:
        return list(self._mapping)

    def _source_lines(self) -> list[str]:
        if self._lines is None:
            if not self._source.is_file():
                raise MigrationError(f"Old script not found: {self._source}")
            self._lines = self._source.read_text(encoding="utf-8").splitlines()
        return self._lines

    def validate_source(self) -> list[str]:
        """
        Check the source exists and report mapped functions it lacks.

        Returns:
            Names of mapped functions with no definition in the source.

        Raises:
            MigrationError: If the source script does not exist.
        """
        console.print(f"[cyan][MIGRATOR] Validating old script: {self._source}[/cyan]")
        lines = self._source_lines()

        missing = [
            entry.function
            for entry in self._mapping
            if not any(self._function_start(entry.function).match(line) for line in lines)
        ]
        if missing:
            console.print(
                f"[yellow][MIGRATOR] Missing functions in old script: {' '.join(missing)}[/yellow]"
            )
        else:
            console.print("[green][MIGRATOR] All expected functions found in old script[/green]")
        return missing

    def prepare_layout(self) -> None:
        """Create the category directories for the new module tree."""
        categories = list(STANDARD_CATEGORIES)
        categories += [e.category for e in self._mapping if e.category and e.category not in categories]
        for category in categories:
            (self._output_dir / category).mkdir(parents=True, exist_ok=True)
        console.print(f"[green][MIGRATOR] Directory structure created: {self._output_dir}[/green]")

    @staticmethod
    def _function_start(function: str) -> re.Pattern:
        return re.compile(rf"^{re.escape(function)}\s*\(\)\s*\{{")

    def extract(self, function: str) -> list[str]:
        """
        Extract the heredoc body of one printer function.

        Assumes markers are neither nested nor repeated inside one function.

        Args:
            function: Name of the printer function in the source.

        Returns:
            Body lines between the markers (empty if not found).
        """
        start = self._function_start(function)
        state = ExtractState.OUTSIDE
        body: list[str] = []

        for line in self._source_lines():
            if state is ExtractState.OUTSIDE:
                if start.match(line):
                    state = ExtractState.IN_FUNCTION
            elif state is ExtractState.IN_FUNCTION:
                if line.startswith(BLOCK_START):
                    state = ExtractState.IN_BLOCK
            elif state is ExtractState.IN_BLOCK:
                if line.startswith(BLOCK_END):
                    state = ExtractState.DONE
                    break
                body.append(line)

        if state is not ExtractState.DONE:
            # An unterminated block is treated as no content
            return []
        return body

    def render_header(self, entry: MigrationEntry) -> str:
        return f"""#!/bin/bash
# modules/{entry.path}
# Module: {entry.title}
# Version: {entry.version}
# Description: {entry.description}
# Depends: none
# Author: {DEFAULT_AUTHOR}

set -e

# Module configuration
MODULE_NAME="{entry.name}"
MODULE_VERSION="{entry.version}"
PROJECT_NAME=${{1:-"{DEFAULT_PROJECT_NAME}"}}

# Import shared utilities if available
if [[ -f "$(dirname "$0")/../../lib/logger.sh" ]]; then
    source "$(dirname "$0")/../../lib/logger.sh"
else
    # Fallback logging functions
    log_info() {{ echo -e "\\033[0;34mℹ️  $1\\033[0m"; }}
    log_success() {{ echo -e "\\033[0;32m✅ $1\\033[0m"; }}
    log_warning() {{ echo -e "\\033[1;33m⚠️  $1\\033[0m"; }}
    log_error() {{ echo -e "\\033[0;31m❌ $1\\033[0m"; }}
    log_step() {{ echo -e "\\033[0;35m🚀 $1\\033[0m"; }}
fi

# ==============================================================================
# MODULE FUNCTIONS
# ==============================================================================

"""

    def render_footer(self, entry: MigrationEntry) -> str:
        return f"""
# ==============================================================================
# MAIN EXECUTION
# ==============================================================================

main() {{
    log_step "Starting {entry.name}"
    {entry.setup_function} "$@"
    log_success "{entry.name} completed!"
}}

# Error handling
trap 'log_error "Module failed at line $LINENO"' ERR

# Execute main function
main "$@"
"""

    def migrate_entry(self, entry: MigrationEntry) -> Path | None:
        """
        Migrate one function into its module file.

        Returns:
            Path of the written module, or None if nothing was extracted.
        """
        console.print(f"[cyan][MIGRATOR] Migrating: {entry.function} -> {entry.path}[/cyan]")
        body = self.extract(entry.function)
        if not body:
            console.print(f"[red][MIGRATOR] Failed to extract content for {entry.function}[/red]")
            return None

        target = self._output_dir / entry.path
        target.parent.mkdir(parents=True, exist_ok=True)
        content = self.render_header(entry) + "\n".join(body) + "\n" + self.render_footer(entry)
        target.write_text(content, encoding="utf-8")
        target.chmod(0o755)

        console.print(f"[green][MIGRATOR] Created module: {target} ({len(body)} lines)[/green]")
        return target

    def migrate_all(self) -> MigrationReport:
        """Attempt every mapped entry and report the aggregate outcome."""
        console.print("[cyan][MIGRATOR] Starting migration of all modules...[/cyan]")
        report = MigrationReport(total=len(self._mapping))

        for entry in self._mapping:
            created = self.migrate_entry(entry)
            if created:
                report.created.append(created)
            else:
                report.failed.append(entry.function)

        console.print(f"[cyan][MIGRATOR] Migration complete: {report.ratio} modules migrated[/cyan]")
        if report.complete:
            console.print("[green][MIGRATOR] All modules migrated successfully![/green]")
        else:
            console.print(
                f"[yellow][MIGRATOR] Some modules failed to migrate: {', '.join(report.failed)}[/yellow]"
            )
        return report

    def write_index(self) -> Path:
        """Write modules/index.md describing the migrated modules by category."""
        lines = ["# SaaS Setup Modules", ""]
        categories: dict[str, list[MigrationEntry]] = {}
        for entry in self._mapping:
            categories.setdefault(entry.category or "root", []).append(entry)

        for category, entries in categories.items():
            lines.append(f"## {category.title()} Modules")
            lines.append("")
            lines += [f"- **{e.name}** - {e.description}" for e in entries]
            lines.append("")

        lines += [
            "## Usage",
            "",
            "```bash",
            "# Run an individual module",
            "./modules/core/project-structure.sh my-project",
            "",
            "# Or through the orchestrator",
            "saas-setup my-project lean-saas",
            "```",
            "",
        ]

        self._output_dir.mkdir(parents=True, exist_ok=True)
        index = self._output_dir / "index.md"
        index.write_text("\n".join(lines), encoding="utf-8")
        console.print(f"[green][MIGRATOR] Module index created: {index}[/green]")
        return index

    def run(self) -> MigrationReport:
        """Full migration: validate, lay out, migrate, index."""
        self.validate_source()
        self.prepare_layout()
        report = self.migrate_all()
        self.write_index()
        return report
