"""
AIOS Tool Definition Schemas

Pydantic models for resolved tool definitions.

Two schema versions are supported:
- v1 (SimpleToolDefinition): declarative tools, never carry executable knowledge
- v2 (ExecutableToolDefinition): may embed validators and helpers

Fields the resolver does not interpret (commands, mcp_specific, api_complexity,
anti_patterns, ...) are kept as extra fields and passed through untouched.
"""

from enum import Enum
from pathlib import Path
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ToolType(str, Enum):
    """How a tool is invoked."""

    CLI = "cli"
    LOCAL = "local"
    MCP = "mcp"


class KnowledgeStrategy(str, Enum):
    """How a tool's usage knowledge is expressed."""

    DECLARATIVE = "declarative"  # v1
    EXECUTABLE = "executable"  # v2


class ValidatorSpec(BaseModel):
    """A per-command validator embedded in a v2 tool."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str = Field(description="Validator id, unique within the tool")
    validates: str = Field(description="Command this validator applies to")
    language: Optional[str] = Field(
        default=None,
        examples=["javascript", "python"],
    )
    function: Optional[str] = Field(
        default=None,
        description="Validator source; opaque to the resolver",
    )


class ExecutableKnowledge(BaseModel):
    """Executable knowledge of a v2 tool.

    Absent, null and empty lists are equivalent for both validators and helpers.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    validators: List[ValidatorSpec] = Field(default_factory=list)
    helpers: List[Any] = Field(default_factory=list)

    @field_validator("validators", "helpers", mode="before")
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class CommandHealthCheck(BaseModel):
    """Health check that runs a shell command."""

    model_config = ConfigDict(frozen=True, extra="allow")

    method: Literal["command"]
    command: str
    expected_output: Optional[str] = None
    timeout: Optional[int] = Field(default=None, ge=0, description="Milliseconds")


class HttpHealthCheck(BaseModel):
    """Health check that calls an HTTP endpoint."""

    model_config = ConfigDict(frozen=True, extra="allow")

    method: Literal["http"]
    endpoint: str
    expected_status: int = 200


class FunctionHealthCheck(BaseModel):
    """Health check implemented as an embedded function."""

    model_config = ConfigDict(frozen=True, extra="allow")

    method: Literal["function"]
    function: str


HealthCheck = Annotated[
    Union[CommandHealthCheck, HttpHealthCheck, FunctionHealthCheck],
    Field(discriminator="method"),
]


class BaseToolDefinition(BaseModel):
    """Fields shared by every tool definition."""

    model_config = ConfigDict(frozen=True, extra="allow")

    # Core fields (required in every schema version)
    id: str
    type: ToolType
    name: str
    version: str
    description: str

    commands: List[Any] = Field(default_factory=list)
    health_check: Optional[HealthCheck] = None

    # Resolution metadata
    source_path: Optional[Path] = Field(
        default=None,
        description="Document the tool was loaded from",
    )
    scope: str = Field(
        default="core",
        description="'core' or the expansion pack the tool was resolved for",
    )

    @field_validator("version", "name", "description", "id", mode="before")
    @classmethod
    def scalar_as_string(cls, value: Any) -> Any:
        # YAML reads `version: 1.0` as a float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("commands", mode="before")
    @classmethod
    def commands_none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class SimpleToolDefinition(BaseToolDefinition):
    """Schema v1 tool: declarative knowledge only."""

    schema_version: Literal[1] = 1
    knowledge_strategy: KnowledgeStrategy = KnowledgeStrategy.DECLARATIVE

    @model_validator(mode="before")
    @classmethod
    def reject_executable_knowledge(cls, data: Any) -> Any:
        if isinstance(data, dict) and "executable_knowledge" in data:
            raise ValueError("schema v1 tools cannot carry executable_knowledge")
        return data

    @property
    def executable_knowledge(self) -> None:
        return None


class ExecutableToolDefinition(BaseToolDefinition):
    """Schema v2 tool: may embed validators and helpers."""

    schema_version: Literal[2] = 2
    knowledge_strategy: KnowledgeStrategy = KnowledgeStrategy.EXECUTABLE
    executable_knowledge: Optional[ExecutableKnowledge] = None


ToolDefinition = Union[SimpleToolDefinition, ExecutableToolDefinition]

TOOL_MODELS = {
    1: SimpleToolDefinition,
    2: ExecutableToolDefinition,
}
