"""Sequential execution of provider tool calls against registered actions."""

import logging

from lifepa.errors import (
    LifePAError,
    ProtocolError,
    UnknownToolError,
    ValidationError,
    describe_error,
)
from lifepa.models import ExecutionResult, ToolCall
from lifepa.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class FunctionExecutor:
    def __init__(self, registry: ToolRegistry) -> None:
        self.registry = registry

    async def execute(self, call: ToolCall) -> ExecutionResult:
        tool = self.registry.get(call.name)
        if tool is None:
            err = UnknownToolError(call.name)
            logger.warning("unknown tool requested name=%s", call.name)
            return ExecutionResult(
                tool_call=call, success=False, message=err.user_message, error=str(err)
            )

        logger.info("executing tool name=%s", call.name)
        try:
            outcome = await tool.handler(dict(call.parameters or {}))
        except ValidationError as exc:
            logger.info("tool %s rejected parameters: %s", call.name, exc)
            return ExecutionResult(
                tool_call=call,
                success=False,
                message=f"Failed to execute {call.name}: {exc.user_message}",
                error=str(exc),
            )
        except LifePAError as exc:
            logger.warning("tool %s failed: %s", call.name, exc)
            return ExecutionResult(
                tool_call=call,
                success=False,
                message=f"Failed to execute {call.name}: {exc.user_message}",
                error=str(exc),
            )
        except Exception as exc:
            logger.exception("tool %s raised", call.name)
            return ExecutionResult(
                tool_call=call,
                success=False,
                message=f"Failed to execute {call.name}: {describe_error(exc)}",
                error=type(exc).__name__,
            )

        if not isinstance(outcome, dict):
            err = ProtocolError(f"{call.name} returned {type(outcome).__name__}, expected dict")
            logger.error("tool %s returned a malformed result", call.name)
            return ExecutionResult(
                tool_call=call,
                success=False,
                message=f"Failed to execute {call.name}: {err.user_message}",
                error=str(err),
            )
        return ExecutionResult(
            tool_call=call,
            success=True,
            message=str(outcome.get("message", "")),
            data=outcome.get("data"),
            action=outcome.get("action"),
        )

    async def execute_tool_calls(self, calls: list[ToolCall]) -> list[ExecutionResult]:
        """Run ``calls`` one at a time, in order, collecting every result."""
        results: list[ExecutionResult] = []
        for call in calls:
            results.append(await self.execute(call))
        return results
