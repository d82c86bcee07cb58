"""
Line-level diffs between the before/after content of a mutated file.

Everything here is pure: it works on strings and never touches the
filesystem.
"""

import difflib

from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

# Unchanged lines shown around each change
CONTEXT_LINES = 2


class ChangeType(str, Enum):
    CONTEXT = "context"
    ADDITION = "addition"
    REMOVAL = "removal"


@dataclass(frozen=True)
class DiffLine:
    line_number: int
    change_type: ChangeType
    # The full line, including its line ending
    content: str

    @property
    def text(self) -> str:
        return self.content.rstrip("\r\n")


@dataclass(frozen=True)
class FileDiff:
    file_path: str
    additions: int
    removals: int
    # Every line of the file, in order
    changes: Tuple[DiffLine, ...]
    # Only the changed lines and their surrounding context
    lines: Tuple[DiffLine, ...]

    @property
    def has_changes(self) -> bool:
        return bool(self.additions or self.removals)


def filter_context_lines(
    changes: Sequence[DiffLine], context: int = CONTEXT_LINES
) -> Tuple[DiffLine, ...]:
    keep = set()
    for index, line in enumerate(changes):
        if line.change_type is not ChangeType.CONTEXT:
            keep.update(range(max(0, index - context), min(len(changes), index + context + 1)))
    return tuple(changes[index] for index in sorted(keep))


def create_diff(
    file_path: str, old_content: str, new_content: str, context_lines: int = CONTEXT_LINES
) -> FileDiff:
    """
    Computes the line diff between two versions of a file.

    Line numbers refer to the new content: removed lines carry the number of
    the line that now takes their place.
    """
    old_lines = old_content.splitlines(keepends=True)
    new_lines = new_content.splitlines(keepends=True)
    matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    additions = 0
    removals = 0
    changes = []
    current_line = 1

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for line in new_lines[j1:j2]:
                changes.append(DiffLine(current_line, ChangeType.CONTEXT, line))
                current_line += 1
            continue

        # "replace", "delete" and "insert" all list removals before additions
        for line in old_lines[i1:i2]:
            changes.append(DiffLine(current_line, ChangeType.REMOVAL, line))
            removals += 1
        for line in new_lines[j1:j2]:
            changes.append(DiffLine(current_line, ChangeType.ADDITION, line))
            additions += 1
            current_line += 1

    return FileDiff(
        file_path=file_path,
        additions=additions,
        removals=removals,
        changes=tuple(changes),
        lines=filter_context_lines(changes, context_lines),
    )


def apply_diff(old_content: str, diff: FileDiff) -> str:
    """Replays a diff on top of the content it was computed from."""
    old_lines = old_content.splitlines(keepends=True)
    result = []
    position = 0

    for line in diff.changes:
        if line.change_type is ChangeType.ADDITION:
            result.append(line.content)
            continue

        if position >= len(old_lines) or old_lines[position] != line.content:
            raise ValueError(
                f"Diff does not apply to {diff.file_path} at line {line.line_number}."
            )
        if line.change_type is ChangeType.CONTEXT:
            result.append(line.content)
        position += 1

    if position != len(old_lines):
        raise ValueError(f"Diff does not cover all of {diff.file_path}.")

    return "".join(result)
