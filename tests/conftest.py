"""
Pytest configuration and fixtures for Forge tests.
"""

import os
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from forge.config import Settings

# Keep the developer's DEBUG setting out of the tests
os.environ.pop("DEBUG", None)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at empty modules/templates/lib directories under tmp_path."""
    modules_dir = tmp_path / "modules"
    templates_dir = tmp_path / "templates"
    for category in ("core", "features", "advanced"):
        (modules_dir / category).mkdir(parents=True)
    templates_dir.mkdir()
    (tmp_path / "lib").mkdir()
    return Settings(
        modules_dir=modules_dir,
        templates_dir=templates_dir,
        lib_dir=tmp_path / "lib",
        required_commands=["sh"],
    )


@pytest.fixture
def workdir(tmp_path):
    """Directory the orchestrator starts in."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def trace_file(tmp_path):
    """File every test module appends its name to, in execution order."""
    return tmp_path / "trace.log"


@pytest.fixture
def write_module(settings, trace_file):
    """
    Factory writing a /bin/sh module script.

    Every module records `<name> <cwd>` to trace_file before running `body`.
    """

    def _write(
        name: str,
        category: str = "core",
        depends: str = "none",
        body: str = "",
        description: str | None = None,
        filename: str | None = None,
    ) -> Path:
        path = settings.modules_dir / category / (filename or f"{name}.sh")
        path.write_text(
            "#!/bin/sh\n"
            f"# Module: {name.title()}\n"
            "# Version: 1.2.3\n"
            f"# Description: {description or f'Test module {name}'}\n"
            f"# Depends: {depends}\n"
            "\n"
            f"setup_{name.replace('-', '_')}() {{\n"
            f'    echo "{name} $(pwd -P)" >> "{trace_file}"\n'
            f"    {body or ':'}\n"
            "}\n"
            "\n"
            f"setup_{name.replace('-', '_')} \"$@\"\n"
        )
        return path

    return _write


@pytest.fixture
def write_template(settings):
    """Factory writing templates/<name>.yaml."""

    def _write(name: str, text: str) -> Path:
        path = settings.templates_dir / f"{name}.yaml"
        path.write_text(text)
        return path

    return _write


@pytest.fixture
def bootstrap_module(write_module):
    """A project-structure module that creates the project directory."""
    return write_module("project-structure", body='mkdir -p "$1"')


@pytest.fixture
def read_trace(trace_file):
    """Return [(module_name, physical_cwd), ...] recorded so far."""

    def _read() -> list[tuple[str, str]]:
        if not trace_file.exists():
            return []
        return [tuple(line.split(" ", 1)) for line in trace_file.read_text().splitlines()]

    return _read
