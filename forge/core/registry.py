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
# MODULE REGISTRY - DISCOVERY
# -----------------------------------------------------------------------------
# Responsibility: Resolve a module name to a script on disk.
#
# Layout scanned:
#   modules/<category>/<name>.sh   (or .py, optionally NN- prefixed)
#
# Each script describes itself with header comments:
#   # Module: Frontend Setup
#   # Version: 2.0.0
#   # Description: Sets up Next.js frontend with dependencies
#   # Depends: project-structure
#
# Resolution is deterministic: categories in configured order (then any
# others alphabetically), files sorted by name, exact name before substring.
# The registry never writes to disk.
# -----------------------------------------------------------------------------

import re
from collections import OrderedDict
from pathlib import Path

from rich.console import Console

from forge.domain.models import ModuleDescriptor

console = Console()

MODULE_SUFFIXES = (".sh", ".py")

_ORDER_PREFIX = re.compile(r"^\d+[-_]")
_HEADER_LINE = re.compile(r"^#\s*([A-Za-z][A-Za-z ]*?)\s*:\s*(.*)$")
_HEADER_SCAN_LINES = 40


def module_name_for(path: Path) -> str:
    """Module name from a file name: stem without any numeric order prefix."""
    return _ORDER_PREFIX.sub("", path.stem)


def parse_dependencies(raw: str) -> list[str]:
    """Split a `Depends:` value. `none` (any case) means no dependencies."""
    names = [part for part in re.split(r"[\s,]+", raw.strip()) if part]
    return [n for n in names if n.lower() != "none"]


def read_header(path: Path) -> dict[str, str]:
    """
    Read `# Key: value` metadata from the top of a module script.

    Only the leading comment block is considered; the first key wins.
    """
    header: dict[str, str] = {}
    with open(path, encoding="utf-8", errors="replace") as f:
        for index, line in enumerate(f):
            if index >= _HEADER_SCAN_LINES:
                break
            line = line.strip()
            if not line or line.startswith("#!"):
                continue
            if not line.startswith("#"):
                break
            match = _HEADER_LINE.match(line)
            if match:
                header.setdefault(match.group(1).strip().lower(), match.group(2).strip())
    return header


def describe(path: Path, category: str) -> ModuleDescriptor:
    """Build a ModuleDescriptor from a script's header metadata."""
    header = read_header(path)
    title = header.get("module", "")
    description = header.get("description") or title or "No description available"
    return ModuleDescriptor(
        name=module_name_for(path),
        category=category,
        title=title,
        description=description,
        version=header.get("version") or "1.0.0",
        author=header.get("author") or None,
        dependencies=parse_dependencies(header.get("depends", "")),
        path=path,
    )


class ModuleRegistry:
    """
    Registry of module scripts found under the modules directory.

    The scan happens lazily on first access and is cached; call refresh()
    after modules are added on disk.
    """

    def __init__(self, modules_dir: Path, categories: list[str] | None = None) -> None:
        self._dir = Path(modules_dir)
        self._categories = list(categories or [])
        self._modules: list[ModuleDescriptor] | None = None

    @property
    def directory(self) -> Path:
        return self._dir

    def category_dirs(self) -> list[Path]:
        """Category directories in search order."""
        if not self._dir.is_dir():
            return []
        present = {p.name: p for p in self._dir.iterdir() if p.is_dir()}
        ordered = [present[c] for c in self._categories if c in present]
        ordered += [present[n] for n in sorted(present) if n not in self._categories]
        return ordered

    def refresh(self) -> None:
        self._modules = None

    def scan(self) -> list[ModuleDescriptor]:
        """All module descriptors in discovery order."""
        if self._modules is None:
            self._modules = self._scan()
        return list(self._modules)

    def _scan(self) -> list[ModuleDescriptor]:
        modules: list[ModuleDescriptor] = []
        for category_dir in self.category_dirs():
            seen: set[str] = set()
            for path in sorted(category_dir.iterdir()):
                if not path.is_file() or path.suffix not in MODULE_SUFFIXES:
                    continue
                descriptor = describe(path, category_dir.name)
                if descriptor.name in seen:
                    console.print(
                        f"[yellow][REGISTRY] Duplicate module '{descriptor.name}' in "
                        f"{category_dir.name}/, ignoring {path.name}[/yellow]"
                    )
                    continue
                seen.add(descriptor.name)
                modules.append(descriptor)
        return modules

    def find(self, name: str) -> ModuleDescriptor | None:
        """
        Resolve a module name.

        Exact name matches win over substring matches across every category.

        Args:
            name: Module name as written in a manifest or Depends header.

        Returns:
            The matching descriptor, or None if nothing matches.
        """
        modules = self.scan()
        for descriptor in modules:
            if descriptor.name == name:
                return descriptor
        for descriptor in modules:
            if name in descriptor.path.stem:
                return descriptor
        return None

    def by_category(self) -> "OrderedDict[str, list[ModuleDescriptor]]":
        """Descriptors grouped by category, in discovery order."""
        grouped: OrderedDict[str, list[ModuleDescriptor]] = OrderedDict()
        for category_dir in self.category_dirs():
            grouped[category_dir.name] = []
        for descriptor in self.scan():
            grouped[descriptor.category].append(descriptor)
        return grouped
