"""
AIOS Tool Validation Helper

Validates proposed tool commands against the validators embedded in a v2
tool's executable_knowledge.

Tools without validators (v1 tools, v2 tools with validators absent, null
or empty) auto-pass every command. Running an embedded validator is
delegated to a ValidatorRunner; the helper never executes validator source
itself and never raises.
"""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from aios_core.exceptions import ValidatorRunnerError
from aios_core.logging_config import get_logger
from aios_core.tools.models import ExecutableKnowledge, ValidatorSpec

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Outcome of validating one command."""

    valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def passed(cls) -> "ValidationResult":
        return cls(valid=True, errors=[])

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}

    def __bool__(self) -> bool:
        return self.valid


@dataclass
class OperationResult:
    """A command paired with its validation result (see validate_batch)."""

    command: str
    result: ValidationResult

    def to_dict(self) -> Dict[str, Any]:
        return {"command": self.command, "result": self.result.to_dict()}


def _error_list(errors: Any) -> List[str]:
    if not errors:
        return []
    if isinstance(errors, str):
        return [errors]
    return [str(e) for e in errors]


def coerce_result(outcome: Any) -> ValidationResult:
    """Convert a validator's return value into a ValidationResult.

    Accepts a ValidationResult, a bool, a (valid, errors) tuple or a
    {"valid": ..., "errors": [...]} mapping.
    """
    if isinstance(outcome, ValidationResult):
        return outcome
    if isinstance(outcome, bool):
        return ValidationResult(valid=outcome)
    if isinstance(outcome, tuple) and len(outcome) == 2:
        valid, errors = outcome
        return ValidationResult(valid=bool(valid), errors=_error_list(errors))
    if isinstance(outcome, Mapping) and "valid" in outcome:
        return ValidationResult(
            valid=bool(outcome["valid"]),
            errors=_error_list(outcome.get("errors")),
        )
    raise ValidatorRunnerError(f"Unsupported validator result type: {type(outcome).__name__}")


class ValidatorRunner(ABC):
    """Executes embedded validators on behalf of ToolValidationHelper."""

    @abstractmethod
    async def run(self, validator: ValidatorSpec, args: Dict[str, Any]) -> ValidationResult:
        """Run a validator against command arguments.

        Args:
            validator: The matching validator
            args: Arguments of the proposed command

        Returns:
            ValidationResult from the validator
        """
        pass


ValidatorFunction = Callable[[Dict[str, Any]], Union[Any, Awaitable[Any]]]


class CallableValidatorRunner(ValidatorRunner):
    """Runs validators through Python callables registered by validator id."""

    def __init__(self, functions: Optional[Dict[str, ValidatorFunction]] = None):
        self._functions: Dict[str, ValidatorFunction] = dict(functions or {})

    def register(self, validator_id: str, function: ValidatorFunction) -> None:
        self._functions[validator_id] = function

    def __contains__(self, validator_id: str) -> bool:
        return validator_id in self._functions

    async def run(self, validator: ValidatorSpec, args: Dict[str, Any]) -> ValidationResult:
        function = self._functions.get(validator.id)
        if function is None:
            raise ValidatorRunnerError(
                f"No implementation registered for validator '{validator.id}'",
                validator_id=validator.id,
            )

        outcome = function(args)
        if inspect.isawaitable(outcome):
            outcome = await outcome
        return coerce_result(outcome)


def collect_validators(executable_knowledge: Any) -> List[ValidatorSpec]:
    """Extract usable validators from any shape of executable_knowledge.

    None, non-mappings, missing/null/empty validators all yield []. Entries
    that are not mappings or lack 'validates' are skipped.
    """
    if executable_knowledge is None:
        return []
    if isinstance(executable_knowledge, ExecutableKnowledge):
        return list(executable_knowledge.validators)
    if not isinstance(executable_knowledge, Mapping):
        logger.debug(f"Ignoring executable_knowledge of type {type(executable_knowledge).__name__}")
        return []

    entries = executable_knowledge.get("validators")
    if not isinstance(entries, (list, tuple)):
        return []

    validators = []
    for entry in entries:
        if isinstance(entry, ValidatorSpec):
            validators.append(entry)
            continue
        if not isinstance(entry, Mapping) or not entry.get("validates"):
            logger.debug(f"Skipping malformed validator entry: {entry!r}")
            continue
        try:
            validators.append(ValidatorSpec.model_validate(dict(entry)))
        except PydanticValidationError as e:
            logger.debug(f"Skipping invalid validator entry {entry!r}: {e}")
    return validators


class ToolValidationHelper:
    """
    Validates commands against a tool's embedded validators.

    Construction accepts the executable_knowledge of a resolved tool in any
    shape, including None, and never fails.
    """

    def __init__(
        self,
        executable_knowledge: Any = None,
        runner: Optional[ValidatorRunner] = None
    ):
        """
        Initialize the helper.

        Args:
            executable_knowledge: ExecutableKnowledge, raw mapping, or None
            runner: Executes matching validators. Without a runner, commands
                that declare a validator fail validation.
        """
        self.runner = runner
        self.validators = collect_validators(executable_knowledge)

    @property
    def has_validators(self) -> bool:
        return bool(self.validators)

    def validator_for(self, command: Optional[str]) -> Optional[ValidatorSpec]:
        """First validator declared for a command, if any."""
        for validator in self.validators:
            if validator.validates == command:
                return validator
        return None

    async def validate(self, command: str, args: Optional[Mapping[str, Any]] = None) -> ValidationResult:
        """Validate a proposed command.

        Args:
            command: Command name, matched against each validator's 'validates'
            args: Command arguments passed to the validator

        Returns:
            ValidationResult. Commands without a validator auto-pass.
        """
        validator = self.validator_for(command)
        if validator is None:
            return ValidationResult.passed()

        if self.runner is None:
            logger.warning(f"Validator '{validator.id}' matches '{command}' but no runner is configured")
            return ValidationResult(
                valid=False,
                errors=[
                    f"Validator '{validator.id}' for command '{command}' cannot run: "
                    "no validator runner configured"
                ],
            )

        logger.debug(f"Running validator '{validator.id}' for command '{command}'")
        try:
            outcome = await self.runner.run(validator, dict(args or {}))
            return coerce_result(outcome)
        except Exception as e:
            logger.exception(f"Validator '{validator.id}' failed for command '{command}'")
            return ValidationResult(
                valid=False,
                errors=[f"Validator '{validator.id}' raised an error: {e}"],
            )

    async def validate_batch(self, operations: Sequence[Mapping[str, Any]]) -> List[OperationResult]:
        """Validate operations in order. Failures are reported, never raised.

        Args:
            operations: Mappings with 'command' and optional 'args'

        Returns:
            One OperationResult per operation, in input order
        """
        results = []
        for operation in operations:
            command = operation.get("command")
            result = await self.validate(command, operation.get("args"))
            results.append(OperationResult(command=command, result=result))
        return results
