"""Tool invoker: scope enforcement, argument validation, execution and diffs."""

import logging
import time

from typing import Any, Dict

from .ai.agent import Agent
from .errors import SchemaError, ScopeError, ToolExecutionError
from .tools.diff import CONTEXT_LINES, create_diff
from .tools.output import ToolOutput
from .tools.registry import Tool, ToolCall, ToolRegistry, ToolResult, validate_arguments

logger = logging.getLogger(__name__)

SUMMARY_LIMIT = 60


def _format_value(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def _summarize_arguments(arguments: Dict[str, Any]) -> str:
    summary = ", ".join(
        _format_value(value) for value in arguments.values() if value not in ("", [], {})
    )
    if len(summary) > SUMMARY_LIMIT:
        summary = summary[: SUMMARY_LIMIT - 3] + "..."
    return summary


class ToolInvoker:
    def __init__(self, registry: ToolRegistry, context_lines: int = CONTEXT_LINES):
        self.registry = registry
        self.context_lines = context_lines

    def _resolve(self, call: ToolCall, agent: Agent) -> Tool:
        if not agent.allows(call.tool_name):
            raise ScopeError(
                f"Tool '{call.tool_name}' is not available to the {agent.name} agent."
            )
        tool = self.registry.get(call.tool_name)
        if tool is None:
            raise ScopeError(f"Unknown tool: {call.tool_name}")
        return tool

    def invoke(self, call: ToolCall, agent: Agent) -> ToolResult:
        """
        Runs `call` on behalf of `agent`.

        Never raises: scope and schema violations are rejected before the tool
        runs, and any failure of the tool itself becomes a failed result.
        """
        try:
            tool = self._resolve(call, agent)
            arguments = validate_arguments(tool.parameters, call.arguments)
        except (ScopeError, SchemaError) as e:
            logger.warning("Rejected call to %s: %s", call.tool_name, e)
            return ToolResult.failure(call.tool_name, e)

        summary = _summarize_arguments(arguments)
        logger.info("Executing tool: %s(%s)", tool.name, summary)
        t0 = time.monotonic()

        try:
            output = tool.execute(arguments)
        except ToolExecutionError as e:
            result = ToolResult.failure(tool.name, e, summary=summary)
        except Exception as e:
            logger.error("Tool %s failed: %s", tool.name, e, exc_info=True)
            result = ToolResult.failure(
                tool.name, f"Unexpected error: {e}", kind=ToolExecutionError.kind, summary=summary
            )
        else:
            result = self._normalize(tool, summary, output)

        elapsed = time.monotonic() - t0
        logger.info(
            "Tool %s: %.1fs -> %s", tool.name, elapsed, "ok" if result.success else result.error_kind
        )
        return result

    def _normalize(self, tool: Tool, summary: str, output: Any) -> ToolResult:
        if isinstance(output, ToolOutput):
            diffs = tuple(
                create_diff(change.path, change.before, change.after, self.context_lines)
                for change in output.changes
            )
            return ToolResult(
                success=True,
                tool_name=tool.name,
                title=output.title,
                summary=output.summary,
                output=output.details or "",
                diffs=diffs,
            )

        if output is None:
            text = ""
        elif isinstance(output, (list, tuple)):
            text = "\n".join(str(item) for item in output)
        else:
            text = str(output)
        return ToolResult(
            success=True, tool_name=tool.name, title=tool.name, summary=summary, output=text
        )
