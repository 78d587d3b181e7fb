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
# FORGE CONFIGURATION
# -----------------------------------------------------------------------------
# Responsibility: Resolve where templates and modules live, which external
# commands are mandatory, and which module output lines count as noise.
#
# Sources (highest wins):
# 1. Process environment (FORGE_* variables, DEBUG)
# 2. .env file (loaded by the CLI via python-dotenv)
# 3. Defaults relative to the repository root
# -----------------------------------------------------------------------------

import os
from pathlib import Path

from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_CATEGORIES = ["core", "features", "advanced"]
DEFAULT_REQUIRED_COMMANDS = ["node", "git"]

# Package-manager chatter that is dropped from relayed output unless --dev
DEFAULT_NOISY_PATTERNS = [
    r"^\s*$",
    r"^\s*npm (WARN|notice)\b",
    r"^\s*WARN\b",
    r"^\s*warning\b.*\bdeprecated\b",
    r"^\s*Progress: resolved",
]


class Settings(BaseModel):
    """Runtime configuration for the Forge."""

    modules_dir: Path = PROJECT_ROOT / "modules"
    templates_dir: Path = PROJECT_ROOT / "templates"
    lib_dir: Path = PROJECT_ROOT / "lib"
    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    required_commands: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_COMMANDS)
    )
    noisy_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_NOISY_PATTERNS))
    default_project: str = "lean-saas-app"
    dev_project: str = "dev-saas-app"
    default_template: str = "lean-saas"
    debug: bool = False


def _env_list(name: str) -> list[str] | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in ("1", "true", "yes", "on")


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment.

    Args:
        **overrides: Explicit values that take precedence over the environment.

    Returns:
        A validated Settings instance.
    """
    values: dict = {}

    if os.getenv("FORGE_MODULES_DIR"):
        values["modules_dir"] = Path(os.environ["FORGE_MODULES_DIR"])
    if os.getenv("FORGE_TEMPLATES_DIR"):
        values["templates_dir"] = Path(os.environ["FORGE_TEMPLATES_DIR"])
    if os.getenv("FORGE_LIB_DIR"):
        values["lib_dir"] = Path(os.environ["FORGE_LIB_DIR"])

    commands = _env_list("FORGE_REQUIRED_COMMANDS")
    if commands is not None:
        values["required_commands"] = commands

    values["debug"] = _env_flag("DEBUG")
    values.update(overrides)

    return Settings(**values)
