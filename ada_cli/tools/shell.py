import subprocess

from typing import List, Optional

from ..errors import ToolExecutionError
from .registry import tool

COMMAND_TIMEOUT = 60


def _run(argv, shell: bool = False, cwd: Optional[str] = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        argv,
        shell=shell,
        cwd=cwd,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=COMMAND_TIMEOUT,  # Add a timeout to prevent hanging
    )


def _combine(stdout: str, stderr: str, stderr_label: str = "") -> str:
    parts = []
    if stdout:
        parts.append(stdout.rstrip("\n"))
    if stderr:
        parts.append(stderr_label + stderr.rstrip("\n"))
    return "\n".join(parts)


@tool(
    category="shell",
    params={
        "command": {"description": "The shell command to execute"},
        "working_dir": {"description": "Optional working directory for the command"},
    },
)
def execute(command: str, working_dir: Optional[str] = None) -> str:
    """Execute a shell command and return its output."""
    try:
        result = _run(command, shell=True, cwd=working_dir)
    except subprocess.TimeoutExpired as e:
        raise ToolExecutionError(
            f"Command timed out after {COMMAND_TIMEOUT} seconds."
        ) from e
    except OSError as e:
        raise ToolExecutionError(f"Failed to execute command: {e}") from e

    output = _combine(result.stdout, result.stderr, stderr_label="STDERR:\n")
    if result.returncode != 0:
        message = f"Command failed with exit code {result.returncode}."
        raise ToolExecutionError(f"{message}\n{output}" if output else message)

    return output or "Command executed successfully (no output)"


@tool(
    category="git",
    params={
        "operation": {
            "description": "Git operation to perform (status, diff, log, add, commit, etc.)"
        },
        "args": {"description": "Additional arguments for the git command"},
    },
)
def git(operation: str, args: Optional[List[str]] = None) -> str:
    """Execute git operations (status, diff, log, add, commit, etc.)."""
    argv = ["git", operation, *(args or [])]
    try:
        result = _run(argv)
    except subprocess.TimeoutExpired as e:
        raise ToolExecutionError(
            f"git {operation} timed out after {COMMAND_TIMEOUT} seconds."
        ) from e
    except OSError as e:
        raise ToolExecutionError(f"Failed to execute git: {e}") from e

    if result.returncode != 0:
        raise ToolExecutionError(f"Git command failed:\n{result.stdout}{result.stderr}".rstrip())

    return _combine(result.stdout, result.stderr) or "Command completed successfully"
