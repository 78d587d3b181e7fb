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
# DOMAIN MODELS - SCAFFOLDING INSTRUCTIONS
# -----------------------------------------------------------------------------
# These Pydantic models define the contract between the template files on disk
# and the Orchestrator that executes them.
#
# Manifest          - one template YAML (ordered module list + metadata)
# ModuleDescriptor  - one discovered module script (header metadata + path)
# ExecutionRecord   - the outcome of running one module
# MigrationEntry    - one function -> module file mapping for the Migrator
#
# Invalid manifests are rejected at load time, before any module runs.
# -----------------------------------------------------------------------------

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, Field, field_validator


class ModuleRef(BaseModel):
    """
    A reference from a manifest to a module by name.

    Written in YAML either as a bare string (required module) or as a
    mapping with `name` and `optional`.
    """

    name: str = Field(..., min_length=1, description="Module name to resolve")
    optional: bool = Field(
        False, description="Skip with a warning instead of failing when unresolved"
    )

    class Config:
        str_strip_whitespace = True
        frozen = True


class EnvironmentSpec(BaseModel):
    """Configuration keys the generated project expects at runtime."""

    required_vars: list[str] = Field(default_factory=list)

    class Config:
        frozen = True


class Manifest(BaseModel):
    """
    A scaffolding template: an ordered list of modules plus metadata.

    Module order is authoritative. Dependencies declared by modules are
    checked for existence but never used to reorder execution.
    """

    name: str = Field(..., min_length=1, description="Template identifier")
    description: str = Field("", description="One-line summary shown in listings")
    version: str = Field("1.0.0")
    author: str | None = None
    modules: list[ModuleRef] = Field(..., min_length=1)
    features: list[str] = Field(default_factory=list)
    options: dict[str, bool | int | float | str] = Field(default_factory=dict)
    environment: EnvironmentSpec = Field(default_factory=EnvironmentSpec)
    source: Path | None = Field(None, description="File the manifest was loaded from")

    @field_validator("modules", mode="before")
    @classmethod
    def _coerce_module_refs(cls, value):
        if not isinstance(value, list):
            return value
        return [{"name": item} if isinstance(item, str) else item for item in value]

    @property
    def module_names(self) -> list[str]:
        return [ref.name for ref in self.modules]

    class Config:
        str_strip_whitespace = True
        frozen = True


class ModuleDescriptor(BaseModel):
    """A module script discovered on disk, described by its header comments."""

    name: str
    category: str
    title: str = ""
    description: str = "No description available"
    version: str = "1.0.0"
    author: str | None = None
    dependencies: list[str] = Field(default_factory=list)
    path: Path

    class Config:
        frozen = True


@dataclass
class ExecutionRecord:
    """Outcome of a single module run."""

    name: str
    exit_code: int
    output: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass
class RunSummary:
    """Aggregate result of an orchestration run."""

    project_name: str
    template: str
    project_dir: Path | None = None
    discovered: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    records: list[ExecutionRecord] = field(default_factory=list)

    @property
    def executed(self) -> int:
        return sum(1 for r in self.records if r.succeeded)


class MigrationEntry(BaseModel):
    """
    Migration instruction: which legacy function becomes which module file.

    `path` is relative to the output modules directory, e.g.
    `core/frontend-setup.sh`. Category and name are derived from it.
    """

    function: str = Field(..., min_length=1, pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    path: str = Field(..., min_length=1)
    title: str
    description: str = ""
    entrypoint: str | None = None
    version: str = "2.0.0"

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).stem

    @property
    def category(self) -> str:
        parent = PurePosixPath(self.path).parent
        return "" if str(parent) == "." else str(parent)

    @property
    def setup_function(self) -> str:
        return self.entrypoint or f"setup_{self.name.replace('-', '_')}"

    class Config:
        str_strip_whitespace = True


@dataclass
class MigrationReport:
    """Aggregate outcome of a migration run."""

    total: int = 0
    created: list[Path] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.created)

    @property
    def ratio(self) -> str:
        return f"{self.succeeded}/{self.total}"

    @property
    def complete(self) -> bool:
        return self.succeeded == self.total
