"""
AIOS Tool Resolver

Resolves tool ids to validated ToolDefinitions with scoped search and caching.

Search order:
    resolve_tool(id, expansion_pack="pack")  expansion-packs/pack/tools, common/tools, .aios-core/tools
    resolve_tool(id)                         common/tools, .aios-core/tools

Resolved tools are cached per (scope, id), where scope is "core" for unscoped
resolution or the expansion pack name. A cache hit returns the same object.
Concurrent misses on one key share a single load.

Usage:
    from aios_core.tools import resolve_tool, ToolValidationHelper

    tool = await resolve_tool("clickup")
    helper = ToolValidationHelper(tool.executable_knowledge)
    result = await helper.validate("create_item", {"list_id": "123"})
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from aios_core.config import CORE_SCOPE, ToolPaths
from aios_core.exceptions import AIOSError
from aios_core.logging_config import get_logger
from aios_core.tools import loader, schema
from aios_core.tools.models import ToolDefinition

logger = get_logger(__name__)

CacheKey = Tuple[str, str]


class ToolCache:
    """Resolved tools keyed by (scope, tool id), plus in-flight loads."""

    def __init__(self):
        self._entries: Dict[CacheKey, ToolDefinition] = {}
        self._in_flight: Dict[CacheKey, "asyncio.Task[ToolDefinition]"] = {}

    def get(self, key: CacheKey) -> Optional[ToolDefinition]:
        return self._entries.get(key)

    def set(self, key: CacheKey, tool: ToolDefinition) -> None:
        self._entries[key] = tool

    def in_flight(self, key: CacheKey) -> Optional["asyncio.Task[ToolDefinition]"]:
        return self._in_flight.get(key)

    def begin(self, key: CacheKey, task: "asyncio.Task[ToolDefinition]") -> None:
        self._in_flight[key] = task

    def settle(self, key: CacheKey, task: "asyncio.Task[ToolDefinition]") -> None:
        """Record a finished load. Failures are not cached."""
        if self._in_flight.get(key) is not task:
            # Cleared while loading
            return
        del self._in_flight[key]
        if task.cancelled() or task.exception() is not None:
            return
        self._entries[key] = task.result()

    def clear(self) -> None:
        self._entries.clear()
        self._in_flight.clear()

    @property
    def size(self) -> int:
        return len(self._entries)

    def keys(self) -> List[str]:
        return [f"{scope}:{tool_id}" for scope, tool_id in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries


class ToolResolver:
    """
    Resolves tool definitions across core, common and expansion pack directories.

    Search paths are derived from a ToolPaths (discovered from the project root
    on first use) unless explicit roots are installed with set_search_paths().
    """

    def __init__(
        self,
        paths: Optional[ToolPaths] = None,
        cache: Optional[ToolCache] = None
    ):
        """
        Initialize the resolver.

        Args:
            paths: Tool directories. Discovered from cwd/AIOS_PROJECT_ROOT if omitted.
            cache: Cache to use. A private cache is created if omitted.
        """
        self._paths = paths
        self.cache = cache if cache is not None else ToolCache()
        self._search_paths: Optional[List[Path]] = None

    @property
    def paths(self) -> ToolPaths:
        if self._paths is None:
            self._paths = ToolPaths.discover()
        return self._paths

    # -- search path configuration -------------------------------------

    def set_search_paths(self, roots: Sequence[Union[str, Path]]) -> None:
        """Replace the derived search roots with explicit ones, in priority order."""
        self._search_paths = [Path(root) for root in roots]
        logger.debug(f"Search paths set to: {', '.join(str(p) for p in self._search_paths)}")

    def reset_search_paths(self) -> None:
        """Restore the search roots derived from the project layout."""
        self._search_paths = None

    def search_roots(self, expansion_pack: Optional[str] = None) -> List[Path]:
        """Ordered roots searched for a scope."""
        if self._search_paths is not None:
            return list(self._search_paths)
        return self.paths.search_roots(expansion_pack)

    # -- resolution ----------------------------------------------------

    async def resolve_tool(
        self,
        tool_id: str,
        expansion_pack: Optional[str] = None
    ) -> ToolDefinition:
        """Resolve a tool by id.

        Args:
            tool_id: Tool identifier (document file name without extension)
            expansion_pack: Expansion pack whose tools take precedence

        Returns:
            The cached or freshly loaded ToolDefinition

        Raises:
            ToolNotFoundError: No search root holds the tool
            ToolParseError: The document is not valid YAML
            ToolSchemaError: The document fails schema validation
        """
        key = (expansion_pack or CORE_SCOPE, tool_id)

        tool = self.cache.get(key)
        if tool is not None:
            logger.debug(f"Cache hit: {key[0]}:{tool_id}")
            return tool

        task = self.cache.in_flight(key)
        if task is None:
            logger.debug(f"Cache miss: {key[0]}:{tool_id}")
            task = asyncio.ensure_future(self._load(tool_id, expansion_pack))
            self.cache.begin(key, task)
            task.add_done_callback(lambda done: self.cache.settle(key, done))
        else:
            logger.debug(f"Joining in-flight load: {key[0]}:{tool_id}")

        # Shielded so one cancelled caller does not cancel the shared load
        return await asyncio.shield(task)

    async def _load(self, tool_id: str, expansion_pack: Optional[str]) -> ToolDefinition:
        scope = expansion_pack or CORE_SCOPE
        try:
            path = await asyncio.to_thread(loader.locate, self.search_roots(expansion_pack), tool_id)
            logger.debug(f"Located '{tool_id}' at {path}")
            document = await loader.load_document(path, tool_id)
            schema_version = schema.classify(document, tool_id)
            tool = schema.validate(
                document,
                schema_version,
                tool_id=tool_id,
                path=path,
                scope=scope,
            )
        except AIOSError as e:
            logger.warning(f"Failed to resolve tool '{tool_id}' ({scope}): {e.message}")
            raise

        logger.debug(f"Resolved '{tool_id}' ({scope}) as schema v{tool.schema_version}")
        return tool

    async def resolve_many(
        self,
        tool_ids: Sequence[str],
        expansion_pack: Optional[str] = None
    ) -> List[ToolDefinition]:
        """Resolve several tools concurrently, preserving input order."""
        return list(await asyncio.gather(
            *(self.resolve_tool(tool_id, expansion_pack) for tool_id in tool_ids)
        ))

    async def tool_exists(self, tool_id: str, expansion_pack: Optional[str] = None) -> bool:
        """Check whether a tool document exists, without loading it."""
        roots = self.search_roots(expansion_pack)
        return await asyncio.to_thread(loader.find_document, roots, tool_id) is not None

    def list_available_tools(self) -> List[str]:
        """Every tool id discoverable across all search roots, unparsed."""
        if self._search_paths is not None:
            roots = self._search_paths
        else:
            roots = self.paths.all_roots()
        return loader.list_documents(roots)

    # -- cache controls ------------------------------------------------

    def clear_cache(self) -> None:
        """Evict every cached tool."""
        self.cache.clear()

    def get_cache_stats(self) -> Dict[str, Any]:
        """Cache size and keys ("scope:id")."""
        return {"size": self.cache.size, "keys": self.cache.keys()}


# Default resolver instance
_resolver: Optional[ToolResolver] = None


def get_resolver(paths: Optional[ToolPaths] = None, force_reload: bool = False) -> ToolResolver:
    """
    Get the process-wide resolver.

    Args:
        paths: Tool directories for a new resolver (optional)
        force_reload: Replace the existing resolver

    Returns:
        ToolResolver instance.
    """
    global _resolver

    if _resolver is None or force_reload:
        _resolver = ToolResolver(paths)

    return _resolver


def reset_resolver() -> None:
    """Drop the process-wide resolver, its cache and search paths (for testing)."""
    global _resolver
    _resolver = None


# Convenience functions
async def resolve_tool(tool_id: str, expansion_pack: Optional[str] = None) -> ToolDefinition:
    """Resolve a tool with the process-wide resolver."""
    return await get_resolver().resolve_tool(tool_id, expansion_pack)


async def tool_exists(tool_id: str, expansion_pack: Optional[str] = None) -> bool:
    """Check tool existence with the process-wide resolver."""
    return await get_resolver().tool_exists(tool_id, expansion_pack)


def list_available_tools() -> List[str]:
    """List tools with the process-wide resolver."""
    return get_resolver().list_available_tools()


def clear_cache() -> None:
    """Clear the process-wide resolver cache."""
    get_resolver().clear_cache()


def get_cache_stats() -> Dict[str, Any]:
    """Cache stats of the process-wide resolver."""
    return get_resolver().get_cache_stats()


def set_search_paths(roots: Sequence[Union[str, Path]]) -> None:
    """Set explicit search roots on the process-wide resolver."""
    get_resolver().set_search_paths(roots)


def reset_search_paths() -> None:
    """Restore derived search roots on the process-wide resolver."""
    get_resolver().reset_search_paths()
