import os
import shutil

from typing import Dict, List, Optional

from ..errors import ToolExecutionError
from .output import FileChange, ToolOutput
from .registry import tool
from .walker import walk

FILE_SIZE_LIMIT = 40000
DEFAULT_TREE_DEPTH = 3


def _read_text(path: str) -> str:
    # newline="" keeps line endings untouched so diffs and rewrites are exact
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _write_text(path: str, content: str):
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


@tool(
    category="file-ops",
    params={"file_path": {"description": "The path to the file to read"}},
)
def read_file(file_path: str) -> str:
    """Read the contents of a file from the filesystem, with line numbers."""
    if not os.path.isfile(file_path):
        raise ToolExecutionError(f"'{file_path}' is not a file.")
    try:
        with open(file_path, "r", encoding="utf-8", errors="ignore") as f:
            # Add a limit to avoid huge files blowing up the output
            content = f.read(FILE_SIZE_LIMIT)
    except OSError as e:
        raise ToolExecutionError(f"Failed to read {file_path}: {e}") from e

    numbered = "\n".join(
        f"{index:6}→{line}" for index, line in enumerate(content.splitlines(), start=1)
    )
    if len(content) == FILE_SIZE_LIMIT:
        numbered += "\n... (file content truncated)"
    return numbered


@tool(
    category="file-ops",
    mutating=True,
    params={
        "file_path": {"description": "The path to the file to edit"},
        "old_string": {"description": "The exact string to find and replace"},
        "new_string": {"description": "The new string to replace with"},
        "replace_all": {
            "description": "If true, replace all occurrences. If false, only replace the first one."
        },
    },
)
def edit(file_path: str, old_string: str, new_string: str, replace_all: bool = False) -> ToolOutput:
    """Replace text in a file by finding and replacing exact strings."""
    if not old_string:
        raise ToolExecutionError("The string to replace must not be empty.")

    try:
        old_content = _read_text(file_path)
    except (OSError, UnicodeDecodeError) as e:
        raise ToolExecutionError(f"Failed to read {file_path}: {e}") from e

    if old_string not in old_content:
        raise ToolExecutionError(f"String not found in file: '{old_string}'")

    count = -1 if replace_all else 1
    new_content = old_content.replace(old_string, new_string, count)

    try:
        _write_text(file_path, new_content)
    except OSError as e:
        raise ToolExecutionError(f"Failed to write {file_path}: {e}") from e

    return ToolOutput(
        title="Edit",
        summary=file_path,
        changes=[FileChange(file_path, old_content, new_content)],
    )


@tool(
    category="file-ops",
    mutating=True,
    params={
        "files": {
            "description": "Array of files to write",
            "items": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "File path"},
                    "content": {"type": "string", "description": "File content"},
                },
                "required": ["path", "content"],
            },
        }
    },
)
def write_files(files: List[Dict[str, str]]) -> ToolOutput:
    """Write content to one or more files at once, creating parent directories as needed."""
    # Check every target before writing any of them
    changes = []
    for file in files:
        path, content = file["path"], file["content"]
        if os.path.isdir(path):
            raise ToolExecutionError(f"Cannot write {path}: it is a directory.")

        parent = os.path.dirname(path)
        try:
            if parent:
                os.makedirs(parent, exist_ok=True)
        except OSError as e:
            raise ToolExecutionError(f"Failed to create directory {parent}: {e}") from e

        old_content = ""
        if os.path.isfile(path):
            try:
                old_content = _read_text(path)
            except (OSError, UnicodeDecodeError):
                old_content = ""
        changes.append(FileChange(path, old_content, content))

    written = []
    for change in changes:
        try:
            _write_text(change.path, change.after)
        except OSError as e:
            message = f"Failed to write {change.path}: {e}"
            if written:
                message += f" Already written: {', '.join(written)}."
            raise ToolExecutionError(message) from e
        written.append(change.path)

    return ToolOutput(
        title="WriteFile",
        summary=", ".join(written),
        changes=changes,
    )


@tool(
    category="file-ops",
    mutating=True,
    params={
        "operation": {
            "description": "Operation to perform",
            "enum": ["delete", "move", "copy"],
        },
        "source": {"description": "Source file or directory path"},
        "destination": {"description": "Destination path (required for move and copy)"},
    },
)
def file_ops(operation: str, source: str, destination: Optional[str] = None) -> ToolOutput:
    """Perform file operations: delete, move (rename) or copy."""
    if operation == "delete":
        if not os.path.lexists(source):
            raise ToolExecutionError(f"Failed to access {source}: no such file or directory")
        is_dir = os.path.isdir(source) and not os.path.islink(source)
        try:
            if is_dir:
                shutil.rmtree(source)
            else:
                os.remove(source)
        except OSError as e:
            raise ToolExecutionError(f"Failed to delete {source}: {e}") from e

        item_type = "directory" if is_dir else "file"
        return ToolOutput("Delete", source, details=f"Deleted {item_type} {source}")

    if not destination:
        raise ToolExecutionError(f"Destination required for {operation} operation")

    if operation == "move":
        try:
            shutil.move(source, destination)
        except OSError as e:
            raise ToolExecutionError(f"Failed to move {source}: {e}") from e
        return ToolOutput("Move", source, details=f"Moved {source} to {destination}")

    if operation == "copy":
        if os.path.isdir(source):
            raise ToolExecutionError("Copying directories is not supported")

        old_content = ""
        if os.path.isfile(destination):
            try:
                old_content = _read_text(destination)
            except (OSError, UnicodeDecodeError):
                old_content = ""

        try:
            shutil.copyfile(source, destination)
            new_content = _read_text(destination)
        except (OSError, UnicodeDecodeError) as e:
            raise ToolExecutionError(f"Failed to copy {source}: {e}") from e

        # Only show a diff when something was overwritten
        if not old_content:
            return ToolOutput("Copy", destination, details=f"Copied {source} to {destination}")
        return ToolOutput(
            "Copy", destination, changes=[FileChange(destination, old_content, new_content)]
        )

    raise ToolExecutionError(
        f"Unknown operation: {operation}. Use 'delete', 'move', or 'copy'"
    )


@tool(
    category="file-ops",
    params={
        "path": {"description": "Directory path to list (default: current directory)"},
        "show_hidden": {"description": "Show hidden files (default: false)"},
    },
)
def list_directory(path: str = ".", show_hidden: bool = False) -> List[str]:
    """List files and directories in a given path."""
    try:
        entries = list(os.scandir(path))
    except OSError as e:
        raise ToolExecutionError(f"Failed to read directory {path}: {e}") from e

    results = []
    for entry in entries:
        if not show_hidden and entry.name.startswith("."):
            continue
        if entry.is_dir(follow_symlinks=False):
            entry_type = "DIR "
        elif entry.is_symlink():
            entry_type = "LINK"
        else:
            entry_type = "FILE"
        results.append(f"{entry_type} {entry.name}")

    return sorted(results) or ["Empty directory"]


@tool(
    category="file-ops",
    params={
        "path": {"description": "Directory path to display (default: current directory)"},
        "max_depth": {"description": "Maximum depth to traverse (default: 3)"},
    },
)
def tree(path: str = ".", max_depth: int = DEFAULT_TREE_DEPTH) -> str:
    """Display directory structure as a tree."""
    if not os.path.isdir(path):
        raise ToolExecutionError(f"'{path}' is not a directory.")

    lines = [path]
    entries = sorted(
        walk(path, max_depth=max_depth),
        key=lambda entry: os.path.relpath(entry[0], path).split(os.sep),
    )
    for entry_path, depth, is_dir in entries:
        indent = "  " * (depth - 1)
        prefix = "📁 " if is_dir else "📄 "
        lines.append(f"{indent}├─ {prefix}{os.path.basename(entry_path)}")
    return "\n".join(lines)
