import asyncio
import logging
from typing import Any, Awaitable, Callable, Iterable, List, Union

from ..api.models import BatchResult, Quest, RequestSpec
from ..executor.request_executor import RequestExecutor

logger = logging.getLogger(__name__)

QuestPredicate = Callable[[Quest], bool]


def is_daily_pending(quest: Quest) -> bool:
    """Active daily quest not yet completed today."""
    return quest.periodicity == "daily" and quest.is_active and not quest.is_completed_today


def is_social_pending(quest: Quest) -> bool:
    """Active social quest never completed."""
    return quest.category == "social" and quest.is_active and not quest.is_completed


def complete_quest_request(quest_id: Union[int, str]) -> RequestSpec:
    """Request that marks one quest as completed."""
    return RequestSpec(method="POST", path="/quests", params={"quest_id": quest_id})


class QuestOrchestrator:
    def __init__(
        self,
        executor: RequestExecutor,
        pacing: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize quest orchestrator.

        Args:
            executor: Request executor used for every completion call
            pacing: Seconds to pause between consecutive completion calls
            sleep: Awaitable delay, replaceable in tests
        """
        self.executor = executor
        self.pacing = pacing
        self.sleep = sleep

    @staticmethod
    def list_pending(quests: Iterable[Quest], predicate: QuestPredicate) -> List[Quest]:
        """
        Filter quests, preserving the order the service returned them in.

        Args:
            quests: Quests as listed by the service
            predicate: Selects the quests to keep

        Returns:
            Matching quests
        """
        return [quest for quest in quests if predicate(quest)]

    async def complete_all(self, quests: List[Quest]) -> List[BatchResult]:
        """
        Complete quests one at a time.

        Args:
            quests: Quests to complete, in order

        Returns:
            One BatchResult per quest, in input order

        Logic:
        1. Skip quests the service already counts as completed
        2. Pause between consecutive completion calls (never in parallel)
        3. Record failures and keep going
        """
        results: List[BatchResult] = []
        calls_made = 0

        for quest in quests:
            if quest.already_completed:
                logger.info(f"Skipping quest {quest.id} ({quest.title}): already completed")
                results.append(BatchResult.skipped(quest))
                continue

            if calls_made:
                await self.sleep(self.pacing)
            calls_made += 1

            result = await self.executor.execute(complete_quest_request(quest.id))
            if result.ok:
                logger.info(f"Completed quest {quest.id} ({quest.title}) +{quest.reward}")
                results.append(BatchResult.succeeded(quest, result.data))
            else:
                logger.warning(f"Quest {quest.id} ({quest.title}) failed: {result.error}")
                results.append(BatchResult.failed(quest, result.error))

        return results
