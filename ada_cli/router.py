import logging

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Mapping, Optional

from .ai.agent import DEFAULT_AGENT_TABLE, DIRECT_AGENT, Agent, select_agent
from .ai.classifier import Intent, IntentClassifier
from .ai.oracle import Oracle
from .errors import OracleError
from .invoker import ToolInvoker
from .matcher import DirectCommandMatcher
from .tools.registry import ToolCall, ToolRegistry, ToolResult

logger = logging.getLogger(__name__)

HELP_COMMAND = "/help"


def _oracle_failure(error: Exception) -> ToolResult:
    return ToolResult.failure(
        "", f"Language model error: {type(error).__name__}: {error}", kind=OracleError.kind
    )


class TurnState(Enum):
    IDLE = "idle"
    MATCHING = "matching"
    DIRECT_CALL = "direct_call"
    CLASSIFYING = "classifying"
    SELECTING = "selecting"
    INVOKING = "invoking"
    REPORTING = "reporting"


@dataclass
class TurnOutcome:
    """Everything the interface needs to show the result of one turn."""

    text: str
    route: str  # "direct" | "agent" | "help"
    result: ToolResult
    intent: Optional[Intent] = None
    agent: Optional[Agent] = None
    tool_call: Optional[ToolCall] = None
    states: List[TurnState] = field(default_factory=list)


class Router:
    """
    Routes one line of input to a tool and returns its result.

    Whitelisted shell input goes straight to the direct agent. Anything else
    is classified, mapped to an agent, and handed to the oracle to pick one of
    that agent's tools. No state is kept between turns.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        oracle: Oracle,
        agent_table: Mapping[str, Agent] = DEFAULT_AGENT_TABLE,
        matcher: Optional[DirectCommandMatcher] = None,
        cwd: Optional[str] = None,
    ):
        self.registry = registry
        self.oracle = oracle
        self.agent_table = agent_table
        self.matcher = matcher
        self.cwd = cwd
        self.classifier = IntentClassifier(oracle)
        self.invoker = ToolInvoker(registry)

    def handle(self, text: str) -> TurnOutcome:
        text = text.strip()
        states = [TurnState.IDLE]

        if text == HELP_COMMAND:
            states.append(TurnState.REPORTING)
            return TurnOutcome(text, "help", ToolResult(success=True), states=states)

        states.append(TurnState.MATCHING)
        if not text:
            states.append(TurnState.REPORTING)
            return TurnOutcome(
                text, "agent", ToolResult.failure("", "Nothing to do.", kind="input"), states=states
            )

        call = self.matcher.match(text) if self.matcher else None
        if call is not None:
            logger.info("Direct command: %s", call)
            states += [TurnState.DIRECT_CALL, TurnState.INVOKING]
            result = self.invoker.invoke(call, DIRECT_AGENT)
            states.append(TurnState.REPORTING)
            return TurnOutcome(
                text, "direct", result, agent=DIRECT_AGENT, tool_call=call, states=states
            )

        states.append(TurnState.CLASSIFYING)
        intent = self.classifier.classify(text, self.cwd)
        if intent.is_fallback:
            states.append(TurnState.REPORTING)
            result = ToolResult.failure(
                "", f"Unable to classify request: {intent.fallback_reason}", kind=OracleError.kind
            )
            return TurnOutcome(text, "agent", result, intent=intent, states=states)

        states.append(TurnState.SELECTING)
        agent = select_agent(intent.category, self.agent_table)
        outcome = TurnOutcome(text, "agent", ToolResult(success=True), intent, agent, states=states)

        if not agent.tools:
            outcome.result = self._converse(text, agent)
        else:
            self._run_agent(outcome)

        states.append(TurnState.REPORTING)
        return outcome

    def _converse(self, text: str, agent: Agent) -> ToolResult:
        try:
            reply = self.oracle.converse(text, agent, self.cwd)
        except OracleError as e:
            logger.warning("Conversation failed: %s", e)
            return ToolResult.failure("", e)
        except Exception as e:
            logger.error("Oracle raised during conversation", exc_info=True)
            return _oracle_failure(e)
        return ToolResult(success=True, output=reply)

    def _run_agent(self, outcome: TurnOutcome):
        agent = outcome.agent
        tools = self.registry.get_tools(agent.tools)
        try:
            decision = self.oracle.select_tool(outcome.text, agent, tools, self.cwd)
        except OracleError as e:
            logger.warning("Tool selection failed: %s", e)
            outcome.result = ToolResult.failure("", e)
            return
        except Exception as e:
            logger.error("Oracle raised during tool selection", exc_info=True)
            outcome.result = _oracle_failure(e)
            return

        if decision.tool_call is None:
            outcome.result = ToolResult(success=True, output=decision.reply or "")
            return

        outcome.tool_call = decision.tool_call
        outcome.states.append(TurnState.INVOKING)
        outcome.result = self.invoker.invoke(decision.tool_call, agent)
