"""
The boundary between the router and the language model.

Everything the core needs from the model goes through `Oracle`, so routing can
be exercised with deterministic stubs. `LLMOracle` is the real implementation
on top of aisuite.
"""

import json
import logging

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..errors import OracleError
from ..tools.registry import ToolCall
from .agent import Agent
from .llm import LLMClient, LLMCompletionResponse

logger = logging.getLogger(__name__)

CLASSIFIER_PROMPT = """
You are an intent classifier. Analyze the user's request and classify it into ONE of these categories:
- code-search: searching code, finding functions/classes, grepping content, using regex
- file-ops: reading, editing, writing, moving, copying, deleting files, listing directories, showing file trees
- git: git operations like status, diff, log, commit, branch operations
- shell: running shell commands, executing scripts
- web: fetching web content, downloading from URLs
- general: general questions, help, or requests that don't fit above categories

Your response must be a JSON object that conforms to the provided schema.
"""

TOOL_SELECTION_RULES = """
Handle the request with exactly one call to one of the available tools, extracting
its arguments from the request. If no tool fits, answer briefly in plain text instead.
"""


@dataclass(frozen=True)
class OracleDecision:
    """Either a tool call to make or a plain reply, never both."""

    tool_call: Optional[ToolCall] = None
    reply: Optional[str] = None


class Oracle(ABC):
    @abstractmethod
    def classify(self, text: str, categories: Sequence[str], cwd: Optional[str] = None) -> str:
        """Returns the category label for `text`."""

    @abstractmethod
    def select_tool(
        self, text: str, agent: Agent, tools: List[Dict], cwd: Optional[str] = None
    ) -> OracleDecision:
        """Picks one of `tools` (LLM specs) and extracts its arguments."""

    @abstractmethod
    def converse(self, text: str, agent: Agent, cwd: Optional[str] = None) -> str:
        """Answers as `agent`, without any tool access."""


def _with_context(text: str, cwd: Optional[str]) -> str:
    if not cwd:
        return text
    return f"Current directory: {cwd}\n\n{text}"


def _classification_schema(categories: Sequence[str]) -> Dict:
    return {
        "name": "intent_classification",
        "schema": {
            "type": "object",
            "properties": {
                "category": {
                    "type": "string",
                    "description": "The single category that best fits the request.",
                    "enum": list(categories),
                }
            },
            "required": ["category"],
        },
    }


class LLMOracle(Oracle):
    def __init__(self, config: Dict):
        self.config = config
        self.llm = LLMClient(self.config["provider_configs"])

    @property
    def model(self) -> str:
        return f"{self.config['provider']}:{self.config['model']}"

    def _complete(self, system_prompt: str, user_message: str, **kwargs) -> LLMCompletionResponse:
        messages = [
            LLMClient.format_system_message(system_prompt),
            LLMClient.format_user_message(user_message),
        ]
        if self.config.get("max_tokens"):
            kwargs.setdefault("max_tokens", self.config["max_tokens"])
        try:
            return self.llm.completion(model=self.model, messages=messages, **kwargs)
        except Exception as e:
            # Provider libraries raise their own exception types
            raise OracleError(f"Language model request failed: {e}") from e

    def classify(self, text: str, categories: Sequence[str], cwd: Optional[str] = None) -> str:
        response = self._complete(
            CLASSIFIER_PROMPT,
            _with_context(text, cwd),
            response_format={
                "type": "json_schema",
                "json_schema": _classification_schema(categories),
            },
        )
        content = (response.content or "").strip()
        if not content:
            raise OracleError("The language model returned an empty classification.")

        try:
            data = json.loads(content)
        except json.JSONDecodeError:
            # Some providers ignore the response format and answer with the bare label
            return content

        if isinstance(data, dict) and isinstance(data.get("category"), str):
            return data["category"]
        raise OracleError(f"Unusable classification: {content}")

    def select_tool(
        self, text: str, agent: Agent, tools: List[Dict], cwd: Optional[str] = None
    ) -> OracleDecision:
        response = self._complete(
            agent.system_prompt + "\n" + TOOL_SELECTION_RULES,
            _with_context(text, cwd),
            tools=tools,
        )

        if response.tool_calls:
            function = response.tool_calls[0].get("function", {})
            name = function.get("name")
            if not name:
                raise OracleError("The language model requested a tool without a name.")
            try:
                arguments = json.loads(function.get("arguments") or "{}")
            except json.JSONDecodeError as e:
                raise OracleError(f"Malformed arguments for tool '{name}': {e}") from e
            logger.info("Oracle selected %s(%s)", name, arguments)
            return OracleDecision(tool_call=ToolCall(name, arguments))

        if response.content:
            return OracleDecision(reply=response.content)
        raise OracleError("The language model returned neither a tool call nor a reply.")

    def converse(self, text: str, agent: Agent, cwd: Optional[str] = None) -> str:
        response = self._complete(agent.system_prompt, _with_context(text, cwd))
        if not response.content:
            raise OracleError("The language model returned an empty reply.")
        return response.content
