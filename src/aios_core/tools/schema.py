"""
AIOS Tool Schema Detection and Validation

Classifies tool documents as schema v1 or v2 and validates required fields.

Detection:
- An explicit 'schema_version' wins ("2.0", 2.0 and 2 all mean 2)
- Otherwise any v2 marker section (executable_knowledge, api_complexity,
  anti_patterns) means v2
- Otherwise v1, so documents written before the version field keep working
"""

import math
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from aios_core.config import CORE_SCOPE
from aios_core.exceptions import ToolSchemaError
from aios_core.logging_config import get_logger
from aios_core.tools.models import TOOL_MODELS, KnowledgeStrategy, ToolDefinition

logger = get_logger(__name__)

REQUIRED_FIELDS = ("id", "type", "name", "version", "description")

V2_MARKERS = ("executable_knowledge", "api_complexity", "anti_patterns")

SUPPORTED_VERSIONS = (1, 2)

DEFAULT_STRATEGY = {
    1: KnowledgeStrategy.DECLARATIVE,
    2: KnowledgeStrategy.EXECUTABLE,
}


def _has_content(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (dict, list, tuple, str)):
        return len(value) > 0
    return True


def normalize_version(value: Any, tool_id: Optional[str] = None) -> int:
    """Normalize a declared schema_version to 1 or 2.

    Decimal declarations are truncated ("2.0" -> 2).

    Raises:
        ToolSchemaError: Value is not a number or not a supported version
    """
    if isinstance(value, bool):
        number = None
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = None

    if number is not None and not math.isfinite(number):
        number = None

    version = int(number) if number is not None else None
    if version not in SUPPORTED_VERSIONS:
        raise ToolSchemaError(
            f"Tool '{tool_id or '<unknown>'}' declares unsupported schema_version {value!r}",
            tool_id=tool_id,
            remediation="Set schema_version to 1 or 2, or remove it to auto-detect",
        )
    return version


def classify(document: Dict[str, Any], tool_id: Optional[str] = None) -> int:
    """Determine the schema version of a parsed document."""
    declared = document.get("schema_version")
    if declared is not None:
        return normalize_version(declared, tool_id or document.get("id"))

    for marker in V2_MARKERS:
        if _has_content(document.get(marker)):
            return 2
    return 1


def missing_required_fields(document: Dict[str, Any]) -> List[str]:
    """Every required field that is absent or empty."""
    missing = []
    for field_name in REQUIRED_FIELDS:
        value = document.get(field_name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field_name)
    return missing


def validate(
    document: Dict[str, Any],
    schema_version: int,
    tool_id: Optional[str] = None,
    path: Optional[Path] = None,
    scope: str = CORE_SCOPE
) -> ToolDefinition:
    """Validate a parsed document against its schema version.

    Args:
        document: Unwrapped tool document
        schema_version: Result of classify()
        tool_id: Identifier the caller asked for; must match the document id
        path: Source document, for error messages and source_path
        scope: Resolution scope recorded on the tool

    Returns:
        SimpleToolDefinition (v1) or ExecutableToolDefinition (v2)

    Raises:
        ToolSchemaError: Missing required fields, id mismatch, or invalid values
    """
    label = tool_id or document.get("id") or (path.stem if path else "<unknown>")

    missing = missing_required_fields(document)
    if missing:
        raise ToolSchemaError(
            f"Tool '{label}' is missing required field(s): {', '.join(missing)}",
            tool_id=tool_id,
            missing_fields=missing,
            path=path,
        )

    if tool_id is not None and str(document["id"]) != tool_id:
        raise ToolSchemaError(
            f"Tool document {path or label} declares id '{document['id']}', expected '{tool_id}'",
            tool_id=tool_id,
            path=path,
            remediation=f"Rename the file or set 'id: {tool_id}'",
        )

    data = dict(document)
    data["schema_version"] = schema_version
    data["scope"] = scope
    if path is not None:
        data["source_path"] = path

    if schema_version == 1 and "executable_knowledge" in data:
        knowledge = data.pop("executable_knowledge")
        if _has_content(knowledge):
            logger.warning(
                f"Tool '{label}' declares schema_version 1; ignoring its executable_knowledge"
            )

    default_strategy = DEFAULT_STRATEGY[schema_version]
    strategy = data.get("knowledge_strategy")
    if strategy is None:
        data.pop("knowledge_strategy", None)
    elif strategy != default_strategy.value:
        logger.warning(
            f"Tool '{label}' is schema v{schema_version} but declares "
            f"knowledge_strategy '{strategy}'; using '{default_strategy.value}'"
        )
        data["knowledge_strategy"] = default_strategy

    model = TOOL_MODELS[schema_version]
    try:
        return model.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in e.errors()})
        raise ToolSchemaError(
            f"Tool '{label}' has invalid field(s): {', '.join(fields)}",
            tool_id=tool_id,
            path=path,
            details=str(e),
        ) from e
