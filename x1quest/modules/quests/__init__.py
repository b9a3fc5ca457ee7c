"""
Quests Module - Black Box Interface

Purpose: Select pending quests and complete them in paced batches
Interface: list_pending(), complete_all()
Hidden: Pacing, skip rules, per-quest failure recording
"""

from .orchestrator import (
    QuestOrchestrator,
    QuestPredicate,
    complete_quest_request,
    is_daily_pending,
    is_social_pending,
)

__all__ = [
    "QuestOrchestrator",
    "QuestPredicate",
    "complete_quest_request",
    "is_daily_pending",
    "is_social_pending",
]
