"""Call admission control: shared burst + sustained quotas for both tools."""
import math
import time
from collections import deque
from typing import Callable, Deque, Optional

from ..config import AdmissionConfig, AdmissionDecision, get_config
from ..logger import get_logger

logger = get_logger(__name__)


class AdmissionController:
    """Sliding-window quota gate.

    Two independent windows are enforced over the same call history: a short
    burst window and a longer sustained window. ``check`` never suspends, so
    concurrent tool calls interleave only between whole checks.
    """

    def __init__(
        self,
        config: Optional[AdmissionConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or get_config().admission
        self._clock = clock
        self._calls: Deque[float] = deque()

    @property
    def call_count(self) -> int:
        return len(self._calls)

    def _prune(self, now: float) -> None:
        window = self.config.sustained_window_seconds
        while self._calls and now - self._calls[0] >= window:
            self._calls.popleft()

    def check(self) -> AdmissionDecision:
        """Admit or deny one tool call, recording it when admitted."""
        cfg = self.config
        now = self._clock()
        self._prune(now)

        recent = [t for t in self._calls if now - t < cfg.burst_window_seconds]

        if len(recent) >= cfg.burst_limit:
            wait_seconds = math.ceil(cfg.burst_window_seconds - (now - recent[0]))
            logger.info(f"Burst limit hit ({len(recent)} calls), retry in {wait_seconds}s")
            return AdmissionDecision(
                limited=True,
                message=(
                    f"🛑 **Burst Limit Reached**: {cfg.burst_limit} calls in "
                    f"{_fmt_number(cfg.burst_window_seconds)} seconds. Please wait "
                    f"{max(wait_seconds, 1)} seconds before making more requests. "
                    "This prevents overwhelming websites and ensures reliable service."
                ),
            )

        if len(self._calls) >= cfg.max_calls_per_window:
            oldest = self._calls[0]
            reset_minutes = math.ceil(
                (cfg.sustained_window_seconds - (now - oldest)) / 60
            )
            logger.info(f"Sustained limit hit ({len(self._calls)} calls), reset in {reset_minutes}m")
            return AdmissionDecision(
                limited=True,
                message=(
                    f"🛑 **Rate Limit Reached**: {cfg.max_calls_per_window} calls in "
                    f"{_fmt_number(cfg.sustained_window_seconds / 60)} minutes. Please wait "
                    f"{max(reset_minutes, 1)} minute(s) for the limit to reset. This ensures "
                    "responsible web scraping and prevents server overload."
                ),
            )

        self._calls.append(now)

        remaining = cfg.max_calls_per_window - len(self._calls)
        burst_count = len(recent) + 1
        burst_remaining = cfg.burst_limit - burst_count

        if remaining <= cfg.warning_threshold:
            return AdmissionDecision(
                warning=(
                    f"⚠️ **{remaining} calls remaining** in this "
                    f"{_fmt_number(cfg.sustained_window_seconds / 60)}-minute window."
                )
            )

        if burst_remaining <= cfg.warning_threshold:
            return AdmissionDecision(
                warning=(
                    f"⚠️ **{burst_remaining} quick calls remaining** - "
                    "Consider spacing out requests."
                )
            )

        return AdmissionDecision()


def _fmt_number(value: float) -> str:
    """Render 30.0 as "30" and 2.5 as "2.5"."""
    return str(int(value)) if float(value).is_integer() else str(value)
