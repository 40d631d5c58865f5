"""Tests for the tool validation helper."""

import asyncio
import logging
import time

import pytest

CREATE_ITEM_VALIDATOR = {
    "id": "validate-create-item",
    "validates": "create_item",
    "language": "javascript",
    "function": "function validateCommand(args) { return { valid: true, errors: [] }; }",
}


def require_list_id(args):
    if not args.get("list_id"):
        return {"valid": False, "errors": ["list_id is required"]}
    return {"valid": True, "errors": []}


class TestNoValidators:
    """Test helpers without usable validators auto-pass."""

    @pytest.mark.parametrize("knowledge", [
        None,
        {},
        {"validators": None},
        {"validators": []},
        {"helpers": [{"id": "h"}]},
    ])
    @pytest.mark.asyncio
    async def test_absent_null_and_empty_are_equivalent(self, knowledge):
        """Test every 'no validators' shape passes any command."""
        from aios_core.tools import ToolValidationHelper

        helper = ToolValidationHelper(knowledge)
        result = await helper.validate("any_command", {"x": 1})

        assert helper.has_validators is False
        assert result.valid is True
        assert result.errors == []

    @pytest.mark.parametrize("knowledge", ["not a mapping", 42, ["validators"], {"validators": "nope"}])
    def test_malformed_knowledge_never_fails_construction(self, knowledge):
        """Test construction tolerates any shape."""
        from aios_core.tools import ToolValidationHelper

        assert ToolValidationHelper(knowledge).validators == []

    def test_malformed_entries_skipped(self):
        """Test entries without 'validates' are ignored."""
        from aios_core.tools import ToolValidationHelper

        helper = ToolValidationHelper({"validators": [
            "junk",
            {"id": "no-target"},
            CREATE_ITEM_VALIDATOR,
        ]})
        assert [v.id for v in helper.validators] == ["validate-create-item"]

    @pytest.mark.asyncio
    async def test_v1_tool_executable_knowledge(self, resolver):
        """Test a resolved v1 tool's executable_knowledge passes everything."""
        from aios_core.tools import ToolValidationHelper

        tool = await resolver.resolve_tool("ffmpeg")
        helper = ToolValidationHelper(tool.executable_knowledge)

        assert (await helper.validate("convert", {})).valid is True


class TestValidatorMatching:
    """Test validators are matched and run."""

    @pytest.mark.asyncio
    async def test_unmatched_command_passes(self):
        """Test commands without a validator auto-pass."""
        from aios_core.tools import ToolValidationHelper

        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]})
        result = await helper.validate("delete_item", {})
        assert result.valid is True

    @pytest.mark.asyncio
    async def test_matching_validator_runs(self):
        """Test the matching validator decides the result."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        runner = CallableValidatorRunner({"validate-create-item": require_list_id})
        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]}, runner=runner)

        failed = await helper.validate("create_item", {"name": "x"})
        passed = await helper.validate("create_item", {"list_id": "123"})

        assert failed.valid is False
        assert failed.errors == ["list_id is required"]
        assert passed.valid is True

    @pytest.mark.asyncio
    async def test_first_matching_validator_wins(self):
        """Test only the first validator for a command runs."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        runner = CallableValidatorRunner({
            "first": lambda args: True,
            "second": lambda args: False,
        })
        helper = ToolValidationHelper({"validators": [
            {"id": "first", "validates": "create_item"},
            {"id": "second", "validates": "create_item"},
        ]}, runner=runner)

        assert (await helper.validate("create_item", {})).valid is True

    @pytest.mark.asyncio
    async def test_async_validator(self):
        """Test coroutine validators are awaited."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        async def slow_validator(args):
            await asyncio.sleep(0)
            return False, ["rejected"]

        runner = CallableValidatorRunner()
        runner.register("validate-create-item", slow_validator)
        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]}, runner=runner)

        result = await helper.validate("create_item", {})
        assert result.valid is False
        assert result.errors == ["rejected"]

    @pytest.mark.asyncio
    async def test_single_error_string_kept_whole(self):
        """Test a validator reporting one error string is not split into characters."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        runner = CallableValidatorRunner({"validate-create-item": lambda args: (False, "list_id is required")})
        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]}, runner=runner)

        result = await helper.validate("create_item", {})
        assert result.errors == ["list_id is required"]

    @pytest.mark.asyncio
    async def test_accepts_model_knowledge(self, resolver):
        """Test ExecutableKnowledge from a resolved v2 tool is accepted."""
        from aios_core.tools import ToolValidationHelper

        tool = await resolver.resolve_tool("clickup")
        helper = ToolValidationHelper(tool.executable_knowledge)

        assert helper.validator_for("update_item").id == "validate-update-item"
        assert helper.validator_for("get_item") is None


class TestFailClosed:
    """Test failures are reported as invalid results, never raised."""

    @pytest.mark.asyncio
    async def test_no_runner_fails_matching_command(self, caplog):
        """Test a matching validator without a runner fails validation."""
        from aios_core.tools import ToolValidationHelper

        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]})
        with caplog.at_level(logging.WARNING, logger="aios_core"):
            result = await helper.validate("create_item", {"list_id": "1"})

        assert result.valid is False
        assert "no validator runner configured" in result.errors[0]
        assert "validate-create-item" in caplog.text

    @pytest.mark.asyncio
    async def test_runner_exception_becomes_error(self):
        """Test a raising validator yields an invalid result."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        def broken(args):
            raise KeyError("list_id")

        runner = CallableValidatorRunner({"validate-create-item": broken})
        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]}, runner=runner)

        result = await helper.validate("create_item", {})
        assert result.valid is False
        assert "validate-create-item" in result.errors[0]

    @pytest.mark.asyncio
    async def test_unregistered_validator(self):
        """Test a runner without the validator's implementation fails closed."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        helper = ToolValidationHelper(
            {"validators": [CREATE_ITEM_VALIDATOR]},
            runner=CallableValidatorRunner(),
        )
        result = await helper.validate("create_item", {})
        assert result.valid is False
        assert "No implementation registered" in result.errors[0]

    @pytest.mark.asyncio
    async def test_unsupported_return_value(self):
        """Test a validator returning an unknown shape fails closed."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        runner = CallableValidatorRunner({"validate-create-item": lambda args: "yes"})
        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]}, runner=runner)

        assert (await helper.validate("create_item", {})).valid is False


class TestCoerceResult:
    """Test validator return value conversion."""

    @pytest.mark.parametrize("outcome,valid,errors", [
        (True, True, []),
        (False, False, []),
        ((False, ["a", "b"]), False, ["a", "b"]),
        ((True, None), True, []),
        ({"valid": False, "errors": ["bad"]}, False, ["bad"]),
        ({"valid": True}, True, []),
        ((False, "list_id is required"), False, ["list_id is required"]),
        ({"valid": False, "errors": "bad"}, False, ["bad"]),
    ])
    def test_supported_shapes(self, outcome, valid, errors):
        """Test each supported return shape."""
        from aios_core.tools.validation import coerce_result

        result = coerce_result(outcome)
        assert result.valid is valid
        assert result.errors == errors

    def test_result_passthrough(self):
        """Test a ValidationResult is returned unchanged."""
        from aios_core.tools import ValidationResult
        from aios_core.tools.validation import coerce_result

        result = ValidationResult(valid=False, errors=["x"])
        assert coerce_result(result) is result

    @pytest.mark.parametrize("outcome", [None, "yes", 1, {"errors": []}, (True,)])
    def test_unsupported_shapes(self, outcome):
        """Test unknown shapes raise ValidatorRunnerError."""
        from aios_core.exceptions import ValidatorRunnerError
        from aios_core.tools.validation import coerce_result

        with pytest.raises(ValidatorRunnerError):
            coerce_result(outcome)

    def test_result_truthiness_and_dict(self):
        """Test ValidationResult helpers."""
        from aios_core.tools import ValidationResult

        assert ValidationResult.passed()
        assert not ValidationResult(valid=False, errors=["e"])
        assert ValidationResult(valid=False, errors=["e"]).to_dict() == {"valid": False, "errors": ["e"]}


class TestBatch:
    """Test batch validation."""

    @pytest.mark.asyncio
    async def test_batch_preserves_order(self):
        """Test results pair each operation with its own outcome, in order."""
        from aios_core.tools import CallableValidatorRunner, ToolValidationHelper

        runner = CallableValidatorRunner({"validate-create-item": require_list_id})
        helper = ToolValidationHelper({"validators": [CREATE_ITEM_VALIDATOR]}, runner=runner)

        results = await helper.validate_batch([
            {"command": "create_item", "args": {"list_id": "1"}},
            {"command": "create_item", "args": {}},
            {"command": "get_item"},
        ])

        assert [r.command for r in results] == ["create_item", "create_item", "get_item"]
        assert [r.result.valid for r in results] == [True, False, True]
        assert results[1].to_dict() == {
            "command": "create_item",
            "result": {"valid": False, "errors": ["list_id is required"]},
        }

    @pytest.mark.asyncio
    async def test_empty_batch(self):
        """Test an empty batch returns no results."""
        from aios_core.tools import ToolValidationHelper

        assert await ToolValidationHelper().validate_batch([]) == []


class TestPerformance:
    """Test validation overhead."""

    @pytest.mark.asyncio
    async def test_auto_pass_is_fast(self):
        """Test 100 auto-pass validations complete within 5ms combined."""
        from aios_core.tools import ToolValidationHelper

        helper = ToolValidationHelper(None)
        start = time.perf_counter()
        for _ in range(100):
            await helper.validate("any_command", {})
        elapsed = time.perf_counter() - start

        assert elapsed < 0.005
