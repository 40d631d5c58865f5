"""
AIOS Tool Path Configuration

Resolves the project root and the tool directories searched by the resolver.

Resolution Order:
1. Explicit project root argument
2. Environment variable (AIOS_PROJECT_ROOT)
3. Marker walk-up (nearest parent containing .aios-core/)
4. Start directory

Directory layout (overridable in .aios-core/core-config.yaml under 'tools:'):
    .aios-core/tools                 core framework tools
    common/tools                     shared tools
    expansion-packs/<pack>/tools     per expansion pack tools
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from aios_core.exceptions import ConfigError
from aios_core.logging_config import get_logger

logger = get_logger(__name__)


ENV_PROJECT_ROOT = "AIOS_PROJECT_ROOT"
CORE_MARKER = ".aios-core"
CONFIG_FILE = "core-config.yaml"

DEFAULT_CORE_DIR = ".aios-core/tools"
DEFAULT_COMMON_DIR = "common/tools"
DEFAULT_EXPANSION_PACKS_DIR = "expansion-packs"

# Scope name used for unscoped resolution
CORE_SCOPE = "core"


def is_plain_name(name: str) -> bool:
    """True for a single path component (no separators, not . or ..)."""
    return bool(name) and "/" not in name and "\\" not in name and name not in (".", "..")


@dataclass(frozen=True)
class ToolPaths:
    """Container for resolved tool directories."""

    project_root: Path
    core: Path
    common: Path
    expansion_packs: Path
    strategy: str = "explicit"

    @classmethod
    def for_root(cls, project_root: Path, strategy: str = "explicit") -> "ToolPaths":
        """Build paths for a project root, applying core-config.yaml overrides."""
        root = Path(project_root)
        overrides = load_tool_config(root)
        return cls(
            project_root=root,
            core=root / overrides.get("core_dir", DEFAULT_CORE_DIR),
            common=root / overrides.get("common_dir", DEFAULT_COMMON_DIR),
            expansion_packs=root / overrides.get("expansion_packs_dir", DEFAULT_EXPANSION_PACKS_DIR),
            strategy=strategy,
        )

    @classmethod
    def discover(cls, start: Optional[Path] = None) -> "ToolPaths":
        """Discover the project root from the environment or the directory tree.

        Args:
            start: Starting directory for the walk-up. Defaults to cwd.

        Returns:
            ToolPaths for the discovered root.
        """
        env_root = os.environ.get(ENV_PROJECT_ROOT)
        if env_root:
            logger.debug(f"Resolved project root from {ENV_PROJECT_ROOT}: {env_root}")
            return cls.for_root(Path(env_root), strategy="env_variable")

        start_path = Path(start) if start else Path.cwd()
        current = start_path.resolve()
        while True:
            if (current / CORE_MARKER).is_dir():
                logger.debug(f"Resolved project root by marker walk-up: {current}")
                return cls.for_root(current, strategy="marker_walkup")
            if current == current.parent:
                break
            current = current.parent

        logger.debug(f"No {CORE_MARKER}/ found above {start_path}; using it as project root")
        return cls.for_root(start_path, strategy="start_directory")

    def pack_tools(self, expansion_pack: str) -> Path:
        """Get the tools directory of an expansion pack.

        Raises:
            ConfigError: The name is not a single directory name
        """
        if not is_plain_name(expansion_pack):
            raise ConfigError(
                f"Invalid expansion pack name '{expansion_pack}'",
                config_key="expansion_pack",
                remediation="Use the directory name of a pack under expansion-packs/",
            )
        return self.expansion_packs / expansion_pack / "tools"

    def search_roots(self, expansion_pack: Optional[str] = None) -> List[Path]:
        """Ordered search roots for a scope.

        Scoped: expansion pack, common, core. Unscoped: common, core.
        """
        roots = []
        if expansion_pack:
            roots.append(self.pack_tools(expansion_pack))
        roots.extend([self.common, self.core])
        return roots

    def expansion_pack_names(self) -> List[str]:
        """Names of expansion packs that ship a tools directory."""
        if not self.expansion_packs.is_dir():
            return []
        return sorted(
            entry.name for entry in self.expansion_packs.iterdir()
            if entry.is_dir() and (entry / "tools").is_dir()
        )

    def all_roots(self) -> List[Path]:
        """Every tool directory: core, common, then each expansion pack."""
        roots = [self.core, self.common]
        roots.extend(self.pack_tools(name) for name in self.expansion_pack_names())
        return roots


def load_tool_config(project_root: Path) -> Dict[str, Any]:
    """Read the 'tools:' section of .aios-core/core-config.yaml.

    Returns:
        Directory overrides, empty when the file or section is absent.
    """
    config_path = Path(project_root) / CORE_MARKER / CONFIG_FILE
    if not config_path.exists():
        return {}

    try:
        config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in {config_path}",
            config_key="tools",
            details=str(e),
        ) from e

    if not isinstance(config, dict):
        raise ConfigError(
            f"{config_path} must contain a mapping",
            config_key="tools",
        )

    tools = config.get("tools") or {}
    if not isinstance(tools, dict):
        raise ConfigError(
            "'tools' in core-config.yaml must be a mapping of directory overrides",
            config_key="tools",
        )

    return {
        key: str(value) for key, value in tools.items()
        if key in ("core_dir", "common_dir", "expansion_packs_dir") and value
    }
