"""
The fixed tool catalog: registry, schemas, diffs and the built-in tools.
"""

from .diff import ChangeType, DiffLine, FileDiff, apply_diff, create_diff
from .output import FileChange, ToolOutput
from .registry import (
    TOOL_CATEGORIES,
    Tool,
    ToolCall,
    ToolRegistry,
    ToolResult,
    tool,
    validate_arguments,
)
from .filesystem import edit, file_ops, list_directory, read_file, tree, write_files
from .search import glob, grep, search_directory
from .shell import execute, git
from .web import webfetch

BUILTIN_TOOLS = (
    read_file,
    edit,
    write_files,
    file_ops,
    list_directory,
    tree,
    grep,
    glob,
    search_directory,
    git,
    execute,
    webfetch,
)


def default_registry() -> ToolRegistry:
    """Builds the read-only registry holding every built-in tool."""
    return ToolRegistry.from_functions(BUILTIN_TOOLS)


__all__ = [
    "BUILTIN_TOOLS",
    "ChangeType",
    "DiffLine",
    "FileChange",
    "FileDiff",
    "TOOL_CATEGORIES",
    "Tool",
    "ToolCall",
    "ToolOutput",
    "ToolRegistry",
    "ToolResult",
    "apply_diff",
    "create_diff",
    "default_registry",
    "tool",
    "validate_arguments",
]
