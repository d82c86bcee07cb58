"""
Formatting boundary between routed results and the terminal.

`format_*` functions return plain text; `ResultReporter.render` builds the
rich renderables shown by the interactive loop.
"""

from typing import List, Mapping, Tuple

from rich.console import Group, RenderableType
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from .ai.agent import DEFAULT_AGENT_TABLE, Agent
from .router import TurnOutcome
from .tools.diff import ChangeType, DiffLine, FileDiff
from .tools.registry import ToolRegistry, ToolResult

_PREFIXES = {
    ChangeType.CONTEXT: "     ",
    ChangeType.ADDITION: "    +",
    ChangeType.REMOVAL: "    -",
}

_STYLES = {
    ChangeType.CONTEXT: "dim",
    ChangeType.ADDITION: "green",
    ChangeType.REMOVAL: "red",
}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def format_diff_line(line: DiffLine) -> str:
    return f"    {line.line_number:4}{_PREFIXES[line.change_type]} {line.text}"


def format_diff_header(diff: FileDiff) -> str:
    return (
        f"  ⎿  Updated {diff.file_path} with {_plural(diff.additions, 'addition')} "
        f"and {_plural(diff.removals, 'removal')}"
    )


def format_diff(diff: FileDiff) -> str:
    lines = [format_diff_header(diff)]
    lines.extend(format_diff_line(line) for line in diff.lines)
    return "\n".join(lines)


def format_error(result: ToolResult) -> str:
    return f"Error [{result.error_kind or 'error'}]: {result.error}"


def _result_lines(result: ToolResult) -> List[Tuple[str, str]]:
    """The (line, style) pairs describing a successful tool result."""
    lines = [(f"⏺ {result.title}({result.summary})", "bold")]
    for diff in result.diffs:
        lines.append((format_diff_header(diff), ""))
        lines.extend((format_diff_line(line), _STYLES[line.change_type]) for line in diff.lines)

    if result.output:
        # Structured tool output is a one-line outcome under the header
        if result.diffs or result.title != result.tool_name:
            lines.append((f"  ⎿  {result.output}", ""))
        else:
            lines.append((result.output, ""))
    return lines


def format_result(result: ToolResult) -> str:
    if not result.success:
        return format_error(result)

    # Conversation replies have no tool attached
    if not result.tool_name:
        return result.output

    return "\n".join(line for line, _style in _result_lines(result))


def format_route(outcome: TurnOutcome) -> str:
    if outcome.route == "direct" and outcome.tool_call is not None:
        return f"Direct Command: {outcome.text.split()[0]}"
    if outcome.intent is not None and outcome.agent is not None:
        return f"Intent: {outcome.intent.category} → [{outcome.agent.name}]"
    return ""


def format_help(
    registry: ToolRegistry, agent_table: Mapping[str, Agent] = DEFAULT_AGENT_TABLE
) -> str:
    lines = [
        "Ada - AI Assistant with Intent Routing",
        "",
        "Direct Commands: type a common system command (ls, git, cargo, ...) to run it directly.",
        "",
        "Other requests are routed to specialized agents:",
    ]
    for agent in agent_table.values():
        lines.append("")
        lines.append(f"{agent.name} Agent:")
        if not agent.tools:
            lines.append("  • Answers general questions and provides assistance")
        for name in agent.tools:
            tool = registry.get(name)
            description = tool.description.splitlines()[0] if tool and tool.description else ""
            lines.append(f"  • {name} - {description}")

    lines += [
        "",
        "Commands:",
        "  /help - Show this help message",
        "  /exit - Leave the assistant",
        "",
        "Examples:",
        '  • "search for TODO comments in src"',
        '  • "edit pyproject.toml and add an httpx dependency"',
        "  • \"what's the git status?\"",
        '  • "what is a context manager?"',
    ]
    return "\n".join(lines)


class ResultReporter:
    def __init__(
        self,
        registry: ToolRegistry,
        agent_table: Mapping[str, Agent] = DEFAULT_AGENT_TABLE,
        show_intent: bool = True,
    ):
        self.registry = registry
        self.agent_table = agent_table
        self.show_intent = show_intent

    def format(self, outcome: TurnOutcome) -> str:
        if outcome.route == "help":
            return format_help(self.registry, self.agent_table)

        body = format_result(outcome.result)
        header = format_route(outcome) if self.show_intent else ""
        return f"{header}\n\n{body}" if header else body

    def render(self, outcome: TurnOutcome) -> RenderableType:
        if outcome.route == "help":
            return Text(format_help(self.registry, self.agent_table))

        parts: List[RenderableType] = []
        header = format_route(outcome) if self.show_intent else ""
        if header:
            parts.append(Text(header, style="bold cyan"))
        parts.append(self._render_result(outcome.result))
        return Group(*parts)

    def _render_result(self, result: ToolResult) -> RenderableType:
        if not result.success:
            return Panel(
                Text(result.error or ""),
                title=f"Error [{result.error_kind or 'error'}]",
                border_style="red",
            )

        if not result.tool_name:
            return Markdown(result.output)

        text = Text()
        for index, (line, style) in enumerate(_result_lines(result)):
            if index:
                text.append("\n")
            text.append(line, style=style)
        return text
