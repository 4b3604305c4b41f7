"""Process-wide automatic-trading switch."""

from __future__ import annotations

import threading

import structlog

logger = structlog.get_logger()


class AutomaticTradingSwitch:
    """
    Thread-safe enabled/paused flag shared by every periodic task.

    `pause()` and `resume()` are atomic test-and-set operations: each returns True only for
    the caller that actually changed the state.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._lock = threading.Lock()
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def pause(self, reason: str = "") -> bool:
        with self._lock:
            if not self._enabled:
                return False
            self._enabled = False
        logger.warning("automatic_trading_paused", reason=reason)
        return True

    def resume(self, reason: str = "") -> bool:
        with self._lock:
            if self._enabled:
                return False
            self._enabled = True
        logger.info("automatic_trading_resumed", reason=reason)
        return True
