import logging

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple

from .classifier import GENERAL

logger = logging.getLogger(__name__)

PRESERVE_OUTPUT = "When tools return formatted output, preserve it exactly."


@dataclass(frozen=True)
class Agent:
    """A named, bounded subset of the tool catalog."""

    category: str
    name: str
    tools: Tuple[str, ...] = ()
    system_prompt: str = ""

    def allows(self, tool_name: str) -> bool:
        return tool_name in self.tools


# Used for whitelisted shell input that bypasses classification
DIRECT_AGENT = Agent("direct", "Direct Command", ("execute", "git"))

DEFAULT_AGENTS = (
    Agent(
        "code-search",
        "Code Search",
        ("grep", "glob", "search_directory", "read_file"),
        "You are a code search specialist. Help users find and analyze code using "
        "grep, glob patterns, and search tools. " + PRESERVE_OUTPUT,
    ),
    Agent(
        "file-ops",
        "File Operations",
        ("read_file", "edit", "write_files", "file_ops", "list_directory", "tree"),
        "You are a file operations specialist. Help users read, edit, write, and "
        "manage files. When editing, use the exact text currently in the file as "
        "the string to replace. " + PRESERVE_OUTPUT,
    ),
    Agent(
        "git",
        "Git Operations",
        ("git", "read_file"),
        "You are a git operations specialist. Help users with git commands and "
        "repository management. " + PRESERVE_OUTPUT,
    ),
    Agent(
        "shell",
        "Shell Execution",
        ("execute",),
        "You are a shell command specialist. Help users execute commands safely. "
        + PRESERVE_OUTPUT,
    ),
    Agent(
        "web",
        "Web Fetching",
        ("webfetch",),
        "You are a web fetching specialist. Help users retrieve content from URLs. "
        + PRESERVE_OUTPUT,
    ),
    Agent(
        GENERAL,
        "General Assistant",
        (),
        "You are Ada, a helpful AI assistant running in a terminal. Answer "
        "questions and provide assistance.",
    ),
)


def build_agent_table(agents: Iterable[Agent]) -> Mapping[str, Agent]:
    """Builds a read-only category -> agent table."""
    table = {}
    for agent in agents:
        if agent.category in table:
            raise ValueError(f"Duplicate agent for category '{agent.category}'.")
        table[agent.category] = agent

    if GENERAL not in table:
        raise ValueError(f"An agent table must define the '{GENERAL}' agent.")
    return MappingProxyType(table)


DEFAULT_AGENT_TABLE = build_agent_table(DEFAULT_AGENTS)


def select_agent(category: str, table: Mapping[str, Agent] = DEFAULT_AGENT_TABLE) -> Agent:
    agent = table.get(category)
    if agent is None:
        # Unreachable through the classifier, which only returns known categories
        logger.warning("No agent for category %r, using %s", category, GENERAL)
        return table[GENERAL]
    return agent
