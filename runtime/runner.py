import asyncio
from typing import List, Optional
import structlog
from battlespace.engine import Engine, Order
from battlespace.model import GameLog, SimulationState
from .eventlog import EventLog

logger = structlog.get_logger()

PAUSED_POLL_S = 0.1

class TickRunner:
    """Async driver that runs the engine on a speed-scaled tick cadence."""

    def __init__(self, engine: Engine, tick_ms: int = 1000):
        self.engine = engine
        self.tick_ms = tick_ms
        self._orders: asyncio.Queue[List[Order]] = asyncio.Queue()
        self.events = EventLog()
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()

    @property
    def sleep_s(self) -> float:
        """Seconds until the next tick; re-read every iteration so speed changes apply at once."""
        speed = self.engine.state.speed
        if speed <= 0:
            return PAUSED_POLL_S
        return (self.tick_ms / 1000.0) / speed

    @property
    def running(self) -> bool:
        return self._task is not None

    async def start(self):
        """Start the tick loop."""
        if self._task:
            return
        logger.info("Tick loop starting", tick_ms=self.tick_ms, speed=self.engine.state.speed)
        self._task = asyncio.create_task(self._loop())

    async def stop(self):
        """Stop the tick loop gracefully."""
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Tick loop stopped", tick=self.engine.state.tick)

    def _drain(self) -> List[Order]:
        batched: List[Order] = []
        while not self._orders.empty():
            try:
                batched += self._orders.get_nowait()
            except asyncio.QueueEmpty:
                break
        return batched

    async def tick_once(self) -> List[GameLog]:
        """Apply pending orders and, if the game is live, advance one tick."""
        batched = self._drain()
        async with self._lock:
            if batched:
                logger.debug("Applying orders", count=len(batched))
                self.engine.apply_orders(batched)
            entries = self.engine.apply_pending()
            state = self.engine.state
            if state.speed > 0 and state.hq is not None:
                entries += self.engine.step()

        if entries:
            logger.debug("Tick produced journal entries", tick=self.engine.state.tick, count=len(entries))
        self.events.append_many(entries)
        return entries

    async def _loop(self):
        """Main tick loop - batch orders, step engine, record journal."""
        while True:
            await self.tick_once()
            await asyncio.sleep(self.sleep_s)

    async def enqueue_orders(self, orders: List[Order]):
        """Queue orders to be applied on next tick."""
        logger.debug("Enqueuing orders", count=len(orders))
        await self._orders.put(orders)

    async def execute(self, orders: List[Order]) -> List[GameLog]:
        """Apply orders right away, between ticks, and return their journal entries."""
        async with self._lock:
            self.engine.apply_orders(orders)
            entries = self.engine.apply_pending()
        self.events.append_many(entries)
        return entries

    async def snapshot(self) -> SimulationState:
        """Get current state under the engine lock."""
        async with self._lock:
            return self.engine.snapshot()
