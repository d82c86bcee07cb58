"""
The `ai` package holds the model-facing side of routing: the intent
classifier, the agent table and the oracle that talks to the LLM.
"""

from .agent import DEFAULT_AGENT_TABLE, DIRECT_AGENT, Agent, build_agent_table, select_agent
from .classifier import GENERAL, INTENT_CATEGORIES, Intent, IntentClassifier
from .oracle import LLMOracle, Oracle, OracleDecision


__all__ = [
    "Agent",
    "DEFAULT_AGENT_TABLE",
    "DIRECT_AGENT",
    "GENERAL",
    "INTENT_CATEGORIES",
    "Intent",
    "IntentClassifier",
    "LLMOracle",
    "Oracle",
    "OracleDecision",
    "build_agent_table",
    "select_agent",
]
