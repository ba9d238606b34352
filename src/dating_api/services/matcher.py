import logging
from typing import AsyncContextManager, Optional, Protocol

from dating_api.db.db import run_with_timeout
from dating_api.models.swipe_model import Match, SwipeLedger, SwipeOutcome, SwipeResult

logger = logging.getLogger(__name__)


class Ledger(Protocol):
    async def load_ledger_pair(self, user_id1: int, user_id2: int) -> dict[int, SwipeLedger]: ...

    async def persist_ledger(self, ledger: SwipeLedger) -> None: ...

    async def create_match(self, user_id1: int, user_id2: int) -> Match: ...


class LedgerStore(Protocol):
    def transaction(self) -> AsyncContextManager[Ledger]: ...


def decide_outcome(swiper: SwipeLedger, target_id: int, liked: bool) -> SwipeOutcome:
    if not liked:
        return SwipeOutcome.PASS
    if target_id in swiper.swiped_yes_by:
        return SwipeOutcome.MATCH
    return SwipeOutcome.PENDING_LIKE


class SwipeMatcher:
    """Records a swipe and detects mutual likes.

    Reading both ledgers, deciding, and writing the result happen in one
    store transaction. Nothing is retried here: ``SwipeRequestInvalid``,
    ``DatabaseError`` and ``QueryTimedOut`` reach the caller as raised.
    """

    def __init__(self, store: LedgerStore, timeout: float):
        self.store = store
        self.timeout = timeout

    async def swipe(
        self, swiper_id: int, target_id: int, liked: bool, timeout: Optional[float] = None
    ) -> SwipeResult:
        logger.info(f"Swiping profile: swiper={swiper_id} swiped={target_id} liked={liked}")
        result = await run_with_timeout(
            self._swipe(swiper_id, target_id, liked),
            self.timeout if timeout is None else timeout,
        )
        logger.info(f"Swiping profile complete: swiper={swiper_id} matched={result.matched}")
        return result

    async def _swipe(self, swiper_id: int, target_id: int, liked: bool) -> SwipeResult:
        async with self.store.transaction() as ledger:
            ledgers = await ledger.load_ledger_pair(swiper_id, target_id)
            swiper, target = ledgers[swiper_id], ledgers[target_id]

            outcome = decide_outcome(swiper, target_id, liked)
            swiper.swiped_on.add(target_id)

            if outcome is SwipeOutcome.MATCH:
                logger.info("Swiped yes and matched, updating profiles")
                # The target's ledger is left as is: the like being consumed
                # lives in the swiper's swiped_yes_by.
                swiper.swiped_yes_by.discard(target_id)
                await ledger.persist_ledger(swiper)
                match = await ledger.create_match(swiper_id, target_id)
                return SwipeResult(matched=True, match_id=match.id)

            if outcome is SwipeOutcome.PENDING_LIKE:
                logger.info("Swiped yes but no match, updating profiles")
                target.swiped_yes_by.add(swiper_id)
                await ledger.persist_ledger(swiper)
                await ledger.persist_ledger(target)
                return SwipeResult(matched=False)

            await ledger.persist_ledger(swiper)
            return SwipeResult(matched=False)
