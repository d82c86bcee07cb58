import logging
import re
import shlex
import shutil

from typing import Callable, Iterable, List, Optional

from .tools.registry import ToolCall

logger = logging.getLogger(__name__)

# Well-known, low-risk executables that are run without asking the model
DIRECT_COMMANDS = frozenset(
    [
        "ls", "cat", "pwd", "echo", "date", "whoami", "which", "head", "tail",
        "git", "cargo", "npm", "yarn", "pnpm", "python", "python3", "node",
        "docker", "kubectl", "make", "grep", "find", "tree", "du", "df",
        "ps", "top", "uname", "hostname", "curl", "wget", "ping",
    ]
)

# Input starting with one of these is a question, never a command
QUESTION_WORDS = frozenset(
    [
        "what", "how", "why", "when", "where", "who", "which", "can", "could",
        "would", "should", "is", "are", "do", "does",
    ]
)

# Commands whose names double as English words ("find all TODO comments")
PROSE_PRONE_COMMANDS = frozenset(["find", "which", "make", "top", "date", "echo", "tree", "head", "tail"])

_PLAIN_WORD = re.compile(r"[A-Za-z]+[?!.,]?")
_SHELL_OPERATOR = re.compile(r"[();<>|&]+")


def _looks_like_prose(arguments: List[str]) -> bool:
    """Two or more arguments that are all plain words read as a sentence."""
    return len(arguments) >= 2 and all(_PLAIN_WORD.fullmatch(arg) for arg in arguments)


def _has_shell_operators(text: str) -> bool:
    lexer = shlex.shlex(text, posix=True, punctuation_chars=True)
    lexer.whitespace_split = True
    try:
        return any(_SHELL_OPERATOR.fullmatch(token) for token in lexer)
    except ValueError:
        # Unbalanced quotes: only the shell can make sense of it
        return True


class DirectCommandMatcher:
    """
    Recognizes raw shell input by its first token.

    Only an exact, case-sensitive match of the first whitespace-separated
    token counts, and only when the executable is on PATH. Questions and
    sentences that merely start with a command name are left to the intent
    classifier.
    """

    def __init__(
        self,
        whitelist: Iterable[str] = DIRECT_COMMANDS,
        which: Callable[[str], Optional[str]] = shutil.which,
    ):
        self.whitelist = frozenset(whitelist)
        self.which = which

    def match(self, text: str) -> Optional[ToolCall]:
        tokens = text.split()
        if not tokens or tokens[0].lower() in QUESTION_WORDS:
            return None
        if tokens[0] not in self.whitelist:
            return None

        command = tokens[0]
        if command in PROSE_PRONE_COMMANDS and _looks_like_prose(tokens[1:]):
            logger.debug("%r reads as a sentence, not running it directly", text)
            return None

        if not self.which(command):
            logger.debug("Whitelisted command %r is not installed", command)
            return None

        if command == "git" and not _has_shell_operators(text):
            return self._git_call(text)
        return ToolCall("execute", {"command": text.strip()})

    def _git_call(self, text: str) -> ToolCall:
        parts = shlex.split(text)
        operation = parts[1] if len(parts) > 1 else "status"
        return ToolCall("git", {"operation": operation, "args": parts[2:]})
