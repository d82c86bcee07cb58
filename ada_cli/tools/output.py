from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class FileChange:
    """The content of a file before and after a tool mutated it."""

    path: str
    before: str
    after: str


@dataclass
class ToolOutput:
    """
    Structured output for tools that want more than plain text.

    Mutating tools report their file changes here; the invoker turns them
    into diffs.
    """

    title: str
    summary: str
    details: Optional[str] = None
    changes: List[FileChange] = field(default_factory=list)
