"""Per-origin pacing: minimum spacing between requests to one hostname."""
import asyncio
import time
from typing import Awaitable, Callable, Dict, Optional

from ..config import PacingConfig, get_config
from ..logger import get_logger

logger = get_logger(__name__)


class OriginPacer:
    """Tracks the last request time per hostname.

    Entries are created on first use and overwritten afterwards; they are
    never evicted for the life of the process.
    """

    def __init__(
        self,
        config: Optional[PacingConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.config = config or get_config().pacing
        self._clock = clock
        self._sleep = sleep
        self._last_request: Dict[str, float] = {}

    def delay_for(self, hostname: str) -> float:
        """Seconds the caller must wait before sending to ``hostname``."""
        last = self._last_request.get(hostname)
        if last is None:
            return 0.0
        elapsed = self._clock() - last
        return max(0.0, self.config.min_interval_seconds - elapsed)

    def record_request(self, hostname: str, at: Optional[float] = None) -> None:
        self._last_request[hostname] = self._clock() if at is None else at

    async def wait(self, hostname: str, extra_delay: float = 0.0) -> float:
        """Reserve the next slot for ``hostname`` and sleep until it opens.

        ``extra_delay`` (the humanization pause) is added after the pacing
        delay. The slot is recorded at the resulting dispatch time before
        sleeping, so a second caller racing for the same host computes its
        delay against this reservation.

        Returns the total seconds slept.
        """
        delay = self.delay_for(hostname)
        total = delay + max(0.0, extra_delay)
        self.record_request(hostname, at=self._clock() + total)
        if delay > 0:
            logger.debug(f"Pacing: waiting {delay * 1000:.0f}ms for {hostname}")
        if total > 0:
            await self._sleep(total)
        return total
