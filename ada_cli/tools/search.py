import fnmatch
import os
import re

from typing import List, Optional

from ..errors import ToolExecutionError
from .registry import tool
from .walker import walk_files


def _grep_file(path: str, regex: re.Pattern, results: List[str]):
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.rstrip("\r\n")
                if regex.search(line):
                    results.append(f"{path}:{line_number}: {line}")
    except UnicodeDecodeError:
        # Binary files are not searched
        return


@tool(
    category="code-search",
    params={
        "pattern": {"description": "The regex pattern to search for"},
        "path": {"description": "File or directory to search in (default: current directory)"},
        "case_insensitive": {"description": "Case insensitive search (default: false)"},
    },
)
def grep(pattern: str, path: str = ".", case_insensitive: bool = False) -> List[str]:
    """Search for a regex pattern in file contents."""
    try:
        regex = re.compile(pattern, re.IGNORECASE if case_insensitive else 0)
    except re.error as e:
        raise ToolExecutionError(f"Invalid regex pattern: {e}") from e

    if not os.path.exists(path):
        raise ToolExecutionError(f"Failed to access {path}: no such file or directory")

    results: List[str] = []
    try:
        if os.path.isfile(path):
            _grep_file(path, regex, results)
        else:
            for file_path in walk_files(path):
                _grep_file(file_path, regex, results)
    except OSError as e:
        raise ToolExecutionError(f"Failed to search {path}: {e}") from e

    return results or ["No matches found"]


def _glob_matches(relpath: str, pattern: str) -> bool:
    relpath = relpath.replace(os.sep, "/")
    if fnmatch.fnmatch(relpath, pattern):
        return True
    # "**/" also matches files at the top level
    return pattern.startswith("**/") and fnmatch.fnmatch(relpath, pattern[3:])


@tool(
    category="code-search",
    params={
        "pattern": {"description": "The glob pattern to match (e.g., '*.py', '**/*.toml')"},
        "path": {"description": "Directory to search in (default: current directory)"},
    },
)
def glob(pattern: str, path: str = ".") -> List[str]:
    """Find files matching a glob pattern (e.g., '*.py', '**/*.toml', 'src/**/*.py')."""
    if not os.path.isdir(path):
        raise ToolExecutionError(f"'{path}' is not a directory.")

    results = [
        file_path
        for file_path in walk_files(path)
        if _glob_matches(os.path.relpath(file_path, path), pattern)
    ]
    return results or ["No files matched the pattern"]


@tool(
    category="code-search",
    params={
        "directory": {"description": "The directory to search in"},
        "pattern": {
            "description": "Optional text the file name must contain (e.g., '.py', 'config')"
        },
    },
)
def search_directory(directory: str, pattern: Optional[str] = None) -> List[str]:
    """Search for files in a directory, optionally filtering by file name."""
    if not os.path.isdir(directory):
        raise ToolExecutionError(f"'{directory}' is not a directory.")

    results = [
        file_path
        for file_path in walk_files(directory)
        if pattern is None or pattern in os.path.basename(file_path)
    ]
    return results or ["No files found"]
