"""AI Agents package."""

from moneyflow.agents.ai_agents import (
    FALLBACK_INSIGHT,
    CommentaryAgent,
    CommentaryInput,
    CommentaryUnavailableError,
    Sentiment,
    SpendingInsight,
    parse_insight,
    prepare_data_for_ai,
)

__all__ = [
    "FALLBACK_INSIGHT",
    "CommentaryAgent",
    "CommentaryInput",
    "CommentaryUnavailableError",
    "Sentiment",
    "SpendingInsight",
    "parse_insight",
    "prepare_data_for_ai",
]
