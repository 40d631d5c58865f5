"""
AIOS Tool Resolution

Locates, classifies, caches and validates tool definitions.
"""

from aios_core.tools.models import (
    CommandHealthCheck,
    ExecutableKnowledge,
    ExecutableToolDefinition,
    FunctionHealthCheck,
    HttpHealthCheck,
    KnowledgeStrategy,
    SimpleToolDefinition,
    ToolDefinition,
    ToolType,
    ValidatorSpec,
)
from aios_core.tools.resolver import (
    ToolCache,
    ToolResolver,
    clear_cache,
    get_cache_stats,
    get_resolver,
    list_available_tools,
    reset_resolver,
    reset_search_paths,
    resolve_tool,
    set_search_paths,
    tool_exists,
)
from aios_core.tools.validation import (
    CallableValidatorRunner,
    OperationResult,
    ToolValidationHelper,
    ValidationResult,
    ValidatorRunner,
)

__all__ = [
    # Models
    "ToolDefinition",
    "SimpleToolDefinition",
    "ExecutableToolDefinition",
    "ExecutableKnowledge",
    "ValidatorSpec",
    "ToolType",
    "KnowledgeStrategy",
    "CommandHealthCheck",
    "HttpHealthCheck",
    "FunctionHealthCheck",
    # Resolver
    "ToolResolver",
    "ToolCache",
    "get_resolver",
    "reset_resolver",
    "resolve_tool",
    "tool_exists",
    "list_available_tools",
    "clear_cache",
    "get_cache_stats",
    "set_search_paths",
    "reset_search_paths",
    # Validation
    "ToolValidationHelper",
    "ValidationResult",
    "OperationResult",
    "ValidatorRunner",
    "CallableValidatorRunner",
]
