"""
AIOS Agent Tool Dependencies

Reads the YAML block of agent markdown files and resolves the tools an agent
declares under dependencies.tools. Agents written before tool dependencies
existed have no such field and resolve to no tools.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from aios_core.exceptions import AIOSError
from aios_core.tools.models import ToolDefinition
from aios_core.tools.resolver import ToolResolver

YAML_BLOCK = re.compile(r"```ya?ml[\r\n]+([\s\S]*?)[\r\n]+```")


def load_agent_config(path: Path) -> Dict[str, Any]:
    """Parse the first fenced YAML block of an agent markdown file.

    Raises:
        AIOSError: No YAML block, invalid YAML, or a non-mapping block
    """
    path = Path(path)
    content = path.read_text(encoding="utf-8")

    match = YAML_BLOCK.search(content)
    if not match:
        raise AIOSError(
            f"No YAML block found in {path.name}",
            remediation="Wrap the agent definition in a ```yaml fenced block",
        )

    try:
        config = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise AIOSError(f"Invalid YAML block in {path.name}", details=str(e)) from e

    if not isinstance(config, dict):
        raise AIOSError(f"YAML block in {path.name} must be a mapping")
    return config


def get_agent_tools(agent_config: Dict[str, Any]) -> Optional[List[str]]:
    """Tool ids from dependencies.tools, or None when the agent declares none."""
    dependencies = agent_config.get("dependencies")
    if not isinstance(dependencies, dict):
        return None
    tools = dependencies.get("tools")
    if not tools:
        return None
    if isinstance(tools, str):
        return [tools]
    return [str(tool) for tool in tools]


async def resolve_agent_tools(
    resolver: ToolResolver,
    agent_config: Dict[str, Any],
    expansion_pack: Optional[str] = None
) -> Dict[str, ToolDefinition]:
    """Resolve every tool an agent depends on.

    Returns:
        Tools keyed by id; empty for agents without tool dependencies

    Raises:
        ToolNotFoundError, ToolParseError, ToolSchemaError: as resolve_tool
    """
    tool_ids = get_agent_tools(agent_config) or []
    tools = await resolver.resolve_many(tool_ids, expansion_pack)
    return dict(zip(tool_ids, tools))
