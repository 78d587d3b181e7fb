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
# FORGE CLI - COMMAND INTERFACE
# -----------------------------------------------------------------------------
# Responsibility: The operator-facing entry points.
#
# saas-setup [PROJECT_NAME] [TEMPLATE]
#   --help / -h          usage
#   --list-templates     template names + descriptions
#   --list-modules       modules by category + descriptions
#   --validate           environment checks only
#   --dev                verbose mode (all module output, debug lines)
#
# saas-migrate [--source FILE] [--output DIR] [--mapping FILE]
#
# Informational commands only read the filesystem. Every ForgeError ends in
# the SYSTEM HALT panel and a non-zero exit code.
# -----------------------------------------------------------------------------

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.tree import Tree

from forge import __version__
from forge.config import Settings, load_settings
from forge.core.migrator import DEFAULT_MIGRATION_MAP, ModuleMigrator, load_mapping
from forge.core.orchestrator import Orchestrator
from forge.core.registry import ModuleRegistry
from forge.core.templates import TemplateStore
from forge.errors import ForgeError, ManifestError

console = Console()

HELP_TEXT = f"""[bold]SaaS Template Generator v{__version__}[/bold]

[bold]USAGE:[/bold]
    saas-setup [PROJECT_NAME] [TEMPLATE]

[bold]PARAMETERS:[/bold]
    PROJECT_NAME    Name of the project to create (default: lean-saas-app)
    TEMPLATE        Template to use (default: lean-saas)

[bold]EXAMPLES:[/bold]
    saas-setup my-startup                  # Use default lean-saas template
    saas-setup my-app full-saas            # Use full-saas template

[bold]AVAILABLE COMMANDS:[/bold]
    saas-setup --list-templates            # List available templates
    saas-setup --list-modules              # List available modules
    saas-setup --validate                  # Validate environment only
    saas-setup --help                      # Show this help

[bold]DEVELOPMENT:[/bold]
    saas-setup --dev [PROJECT_NAME] [TEMPLATE]   # Verbose logging

[bold]ENVIRONMENT:[/bold]
    FORGE_MODULES_DIR, FORGE_TEMPLATES_DIR, FORGE_REQUIRED_COMMANDS, DEBUG
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="saas-setup", add_help=False)
    parser.add_argument("project", nargs="?")
    parser.add_argument("template", nargs="?")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("--list-templates", action="store_true")
    parser.add_argument("--list-modules", action="store_true")
    parser.add_argument("--validate", action="store_true")
    parser.add_argument("--dev", action="store_true")
    parser.add_argument("--modules-dir", type=Path)
    parser.add_argument("--templates-dir", type=Path)
    return parser


def halt(error: ForgeError) -> None:
    """Render a fatal error."""
    console.print(
        Panel(
            f"[bold red]{escape(str(error))}[/bold red]",
            title="SYSTEM HALT",
            border_style="red",
        )
    )


def list_templates(settings: Settings) -> None:
    store = TemplateStore(settings.templates_dir)
    console.print("[cyan][TEMPLATES] Available templates:[/cyan]")
    for manifest in store.load_all():
        # Templates are selected by file name, not by their `name:` field
        console.print(f"  - [bold]{manifest.source.stem}[/bold]: {escape(manifest.description)}")


def list_modules(settings: Settings) -> None:
    registry = ModuleRegistry(settings.modules_dir, settings.categories)
    tree = Tree(f"[bold cyan]{settings.modules_dir}[/bold cyan]")
    for category, modules in registry.by_category().items():
        branch = tree.add(f"[bold]{category}/[/bold]")
        for descriptor in modules:
            branch.add(f"{descriptor.name} [dim]v{descriptor.version}[/dim]: {escape(descriptor.description)}")
    console.print(Panel(tree, title="Available modules", border_style="cyan"))


def main(argv: list[str] | None = None) -> int:
    """
    Orchestrator entry point.

    Returns:
        Process exit code.
    """
    load_dotenv()
    args = build_parser().parse_args(argv)

    overrides = {}
    if args.modules_dir:
        overrides["modules_dir"] = args.modules_dir
    if args.templates_dir:
        overrides["templates_dir"] = args.templates_dir
    if args.dev:
        overrides["debug"] = True
    settings = load_settings(**overrides)

    if args.help:
        console.print(HELP_TEXT)
        return 0
    if args.list_templates:
        list_templates(settings)
        return 0
    if args.list_modules:
        list_modules(settings)
        return 0

    default_project = settings.dev_project if args.dev else settings.default_project
    project_name = args.project or default_project
    template = args.template or settings.default_template

    try:
        if args.validate:
            orchestrator = Orchestrator(settings, project_name, template)
            orchestrator.show_banner()
            orchestrator.validate_environment()
            console.print("[green][FORGE] Environment is valid[/green]")
            return 0

        Orchestrator(settings, project_name, template, debug=settings.debug).run()
        return 0

    except ManifestError as e:
        halt(e)
        if e.available:
            console.print("[cyan][TEMPLATES] Available templates:[/cyan]")
            for name in e.available:
                console.print(f"  - {name}")
        return e.exit_code

    except ForgeError as e:
        halt(e)
        return e.exit_code


def migrate_main(argv: list[str] | None = None) -> int:
    """Migration utility entry point."""
    parser = argparse.ArgumentParser(
        prog="saas-migrate",
        description=(
            "Extract modules from the legacy monolithic setup script and write "
            "them as independent module files."
        ),
    )
    parser.add_argument("--source", type=Path, default=Path("setup-saas.sh"))
    parser.add_argument("--output", type=Path, default=Path("setup-system/modules"))
    parser.add_argument("--mapping", type=Path, help="YAML function -> module map")
    args = parser.parse_args(argv)

    console.print("[cyan][MIGRATOR] Starting SaaS module migration[/cyan]")
    try:
        mapping = load_mapping(args.mapping) if args.mapping else DEFAULT_MIGRATION_MAP
        report = ModuleMigrator(args.source, args.output, mapping).run()
    except ForgeError as e:
        halt(e)
        return e.exit_code

    tree = Tree(f"[bold cyan]{args.output}[/bold cyan]")
    for path in report.created:
        tree.add(str(path))
    console.print(Panel(tree, title=f"Migrated {report.ratio} modules", border_style="green"))
    return 0


if __name__ == "__main__":
    sys.exit(main())
