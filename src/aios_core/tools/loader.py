"""
AIOS Tool Document Loader

Locates tool definition documents across ordered search roots and parses
their YAML. The first root that holds '<tool-id>.yaml' (or '.yml') wins, so
override semantics come purely from root ordering.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml

from aios_core.config import is_plain_name
from aios_core.exceptions import ToolNotFoundError, ToolParseError
from aios_core.logging_config import get_logger

logger = get_logger(__name__)

# Checked in this order within a root
TOOL_EXTENSIONS = (".yaml", ".yml")

# Top-level key wrapping the definition
ENVELOPE_KEY = "tool"

PathLike = Union[str, Path]


def find_document(search_roots: Iterable[PathLike], tool_id: str) -> Optional[Path]:
    """Find the first document for a tool id.

    Args:
        search_roots: Directories in priority order
        tool_id: Tool identifier (file name without extension)

    Returns:
        Path to the document, or None if no root has it
    """
    if not is_plain_name(tool_id):
        return None

    for root in search_roots:
        root = Path(root)
        if not root.is_dir():
            continue
        for extension in TOOL_EXTENSIONS:
            candidate = root / f"{tool_id}{extension}"
            if candidate.is_file():
                return candidate
    return None


def locate(search_roots: Iterable[PathLike], tool_id: str) -> Path:
    """Locate a tool document, raising ToolNotFoundError when absent."""
    roots = [Path(root) for root in search_roots]
    path = find_document(roots, tool_id)
    if path is None:
        raise ToolNotFoundError(tool_id, searched_paths=roots)
    return path


def parse(
    raw_content: str,
    tool_id: Optional[str] = None,
    path: Optional[PathLike] = None
) -> Dict[str, Any]:
    """Parse a tool document and unwrap its 'tool:' envelope.

    Documents without the envelope are accepted as a bare mapping.

    Raises:
        ToolParseError: Invalid YAML, or content that is not a mapping
    """
    label = tool_id or (Path(path).stem if path else "<unknown>")

    try:
        data = yaml.safe_load(raw_content)
    except yaml.YAMLError as e:
        raise ToolParseError(
            f"Invalid YAML in tool definition '{label}'",
            tool_id=tool_id,
            path=path,
            details=str(e),
        ) from e

    if data is None:
        raise ToolParseError(f"Tool definition '{label}' is empty", tool_id=tool_id, path=path)

    if not isinstance(data, dict):
        raise ToolParseError(
            f"Tool definition '{label}' must be a mapping, got {type(data).__name__}",
            tool_id=tool_id,
            path=path,
        )

    if ENVELOPE_KEY in data:
        body = data[ENVELOPE_KEY]
        if not isinstance(body, dict):
            raise ToolParseError(
                f"'{ENVELOPE_KEY}:' in tool definition '{label}' must contain a mapping",
                tool_id=tool_id,
                path=path,
            )
        return body

    return data


async def load_document(path: Path, tool_id: Optional[str] = None) -> Dict[str, Any]:
    """Read and parse a located document without blocking the event loop."""
    try:
        raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ToolParseError(
            f"Cannot read tool definition '{tool_id or path.stem}'",
            tool_id=tool_id,
            path=path,
            details=str(e),
        ) from e

    logger.debug(f"Loaded {path} ({len(raw)} bytes)")
    return parse(raw, tool_id=tool_id, path=path)


def list_documents(search_roots: Iterable[PathLike]) -> List[str]:
    """List every tool id discoverable in the roots, without parsing."""
    ids = set()
    for root in search_roots:
        root = Path(root)
        if not root.is_dir():
            continue
        for extension in TOOL_EXTENSIONS:
            ids.update(p.stem for p in root.glob(f"*{extension}") if p.is_file())
    return sorted(ids)
