import logging

from dataclasses import dataclass
from typing import Optional, Sequence

from ..errors import OracleError

logger = logging.getLogger(__name__)

GENERAL = "general"
INTENT_CATEGORIES = ("code-search", "file-ops", "git", "shell", "web", GENERAL)

# Labels the model tends to answer with instead of the canonical ones
_ALIASES = {
    "execution": "shell",
    "execute": "shell",
    "command": "shell",
}


@dataclass(frozen=True)
class Intent:
    category: str
    text: str
    # Set when the oracle failed and the category is the closed fallback
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.fallback_reason is not None


def normalize_category(raw, categories: Sequence[str] = INTENT_CATEGORIES) -> str:
    """Maps an oracle answer onto one of `categories`, or `general`."""
    if not isinstance(raw, str):
        return GENERAL

    label = raw.strip().strip(".\"'`").lower().replace("_", "-").replace(" ", "-")
    label = _ALIASES.get(label, label)
    return label if label in categories else GENERAL


class IntentClassifier:
    """Classifies free text into exactly one intent category."""

    def __init__(self, oracle, categories: Sequence[str] = INTENT_CATEGORIES):
        if GENERAL not in categories:
            raise ValueError(f"The '{GENERAL}' category is required as the fallback.")
        self.oracle = oracle
        self.categories = tuple(categories)

    def classify(self, text: str, cwd: Optional[str] = None) -> Intent:
        try:
            raw = self.oracle.classify(text, self.categories, cwd)
        except OracleError as e:
            # Fail closed: general has no tool access
            logger.warning("Classification failed, falling back to %s: %s", GENERAL, e)
            return Intent(GENERAL, text, fallback_reason=str(e))
        except Exception as e:
            logger.error("Oracle raised while classifying %r", text, exc_info=True)
            return Intent(GENERAL, text, fallback_reason=f"{type(e).__name__}: {e}")

        category = normalize_category(raw, self.categories)
        logger.info("Classified %r as %s (oracle said %r)", text, category, raw)
        return Intent(category, text)
