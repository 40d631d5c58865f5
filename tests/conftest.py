"""Shared fixtures for AIOS tool resolver tests."""

import shutil
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SIMPLE_TOOL_YAML = """
tool:
  id: test-simple
  type: mcp
  name: Test Simple Tool
  version: 1.0.0
  description: Simple v1.0 tool for testing
  commands:
    - search
    - fetch
  mcp_specific:
    server_command: npx -y test-simple-server
    transport: stdio
"""

COMPLEX_TOOL_YAML = """
tool:
  schema_version: 2.0
  id: test-complex
  type: mcp
  name: Test Complex Tool
  version: 1.0.0
  description: Complex v2.0 tool with executable knowledge
  knowledge_strategy: executable
  commands:
    - create_item
  executable_knowledge:
    validators:
      - id: validate-create-item
        validates: create_item
        language: javascript
        function: |
          function validateCommand(args) {
            return { valid: true, errors: [] };
          }
  mcp_specific:
    server_command: npx -y test-complex-server
    transport: stdio
"""


@pytest.fixture(autouse=True)
def reset_default_resolver():
    """Isolate the process-wide resolver, its cache and search paths."""
    from aios_core.tools.resolver import reset_resolver

    reset_resolver()
    yield
    reset_resolver()


@pytest.fixture
def project_dir(tmp_path):
    """A writable copy of the fixture project layout."""
    target = tmp_path / "project"
    shutil.copytree(FIXTURES_DIR / "project", target)
    return target


@pytest.fixture
def tool_paths(project_dir):
    """ToolPaths for the fixture project."""
    from aios_core.config import ToolPaths

    return ToolPaths.for_root(project_dir)


@pytest.fixture
def resolver(tool_paths):
    """A resolver over the fixture project with its own cache."""
    from aios_core.tools import ToolResolver

    return ToolResolver(tool_paths)


@pytest.fixture
def tools_dir(tmp_path):
    """An empty tool directory."""
    path = tmp_path / "tools"
    path.mkdir()
    return path


@pytest.fixture
def write_tool():
    """Write a tool document into a directory."""
    def _write(directory: Path, name: str, content: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def simple_tool_yaml():
    return SIMPLE_TOOL_YAML


@pytest.fixture
def complex_tool_yaml():
    return COMPLEX_TOOL_YAML
