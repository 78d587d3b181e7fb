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
# TEMPLATE STORE - MANIFEST LOADING
# -----------------------------------------------------------------------------
# Responsibility: Load template manifests (templates/<name>.yaml) into
# validated, immutable Manifest objects.
#
# An unknown template is fatal and carries the list of valid names so the
# operator can pick one.
# -----------------------------------------------------------------------------

from pathlib import Path

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from yaml import YAMLError

from forge.domain.models import Manifest
from forge.errors import ManifestError

console = Console()

TEMPLATE_SUFFIX = ".yaml"


class TemplateStore:
    """Read-only access to the manifests in a templates directory."""

    def __init__(self, templates_dir: Path) -> None:
        self._dir = Path(templates_dir)

    @property
    def directory(self) -> Path:
        return self._dir

    def _iter_files(self):
        if not self._dir.is_dir():
            return
        for path in sorted(self._dir.glob(f"*{TEMPLATE_SUFFIX}")):
            if path.is_file():
                yield path

    def names(self) -> list[str]:
        """Names of all templates on disk, sorted."""
        return [path.stem for path in self._iter_files()]

    def path_for(self, name: str) -> Path:
        return self._dir / f"{name}{TEMPLATE_SUFFIX}"

    def load(self, name: str) -> Manifest:
        """
        Load and validate one template manifest.

        Args:
            name: Template name (file stem).

        Returns:
            The validated Manifest.

        Raises:
            ManifestError: Unknown template, unreadable YAML or schema violation.
        """
        path = self.path_for(name)
        if not path.is_file():
            raise ManifestError(
                f"Template '{name}' not found at: {path}",
                template=name,
                available=self.names(),
            )

        console.print(f"[cyan][TEMPLATES] Loading template configuration: {path}[/cyan]")
        return self._load_file(path, name)

    def _load_file(self, path: Path, name: str) -> Manifest:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except YAMLError as e:
            raise ManifestError(
                f"Invalid YAML in template '{name}': {e}", template=name
            ) from e

        if not isinstance(data, dict):
            raise ManifestError(
                f"Template '{name}' must be a mapping, got {type(data).__name__}",
                template=name,
            )

        data.setdefault("name", name)
        data["source"] = path
        try:
            return Manifest(**data)
        except ValidationError as e:
            raise ManifestError(f"Invalid template '{name}': {e}", template=name) from e

    def load_all(self) -> list[Manifest]:
        """
        Load every manifest for listing.

        Broken manifests are reported and skipped rather than failing the
        listing.
        """
        manifests: list[Manifest] = []
        for path in self._iter_files():
            try:
                manifests.append(self._load_file(path, path.stem))
            except ManifestError as e:
                console.print(f"[yellow][TEMPLATES] Skipping {path.name}: {escape(str(e))}[/yellow]")
        return manifests
