"""
Gesture Throttle
=================

Rate-limits how often a per-frame classification may change the active
shape. The classifier runs on every camera frame and is noisy while the
hand moves between poses; without a gate the particle cloud would flap
between targets.

This is a value debounce, not a queue: values seen between two emissions
are dropped, never buffered.
"""

import time
import logging
import threading
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET = object()


def _now_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class ThrottleGateConfig:
    """Throttle gate configuration."""
    min_interval_ms: float = 100.0  # Minimum time between emitted changes

    @classmethod
    def from_dict(cls, config: dict) -> "ThrottleGateConfig":
        """Create config from dictionary (the ``recognition`` section)."""
        return cls(min_interval_ms=float(config.get("throttle_ms", 100.0)))


class ThrottleGate(Generic[T]):
    """
    Holds the last emitted value until ``min_interval_ms`` has elapsed
    since that emission, then adopts whatever value is latest.

    A gate built with an initial value starts its clock at construction.
    A gate built without one adopts the first value it sees immediately.

    Example:
        >>> gate = ThrottleGate(ThrottleGateConfig(min_interval_ms=100))
        >>>
        >>> while running:
        ...     raw = classifier.classify(hand).gesture
        ...     stable = gate.update(raw)
        ...     engine.set_target(shape_for_gesture(stable))
    """

    def __init__(
        self,
        config: Optional[ThrottleGateConfig] = None,
        initial_value: Any = _UNSET,
        start_ms: Optional[float] = None,
    ):
        self.config = config or ThrottleGateConfig()
        self._value: Any = None
        self._last_emit_ms: Optional[float] = None
        self._suppressed = 0

        if initial_value is not _UNSET:
            self._value = initial_value
            self._last_emit_ms = _now_ms() if start_ms is None else start_ms

    def update(
        self,
        latest: T,
        min_interval_ms: Optional[float] = None,
        now_ms: Optional[float] = None,
    ) -> T:
        """
        Offer the latest raw value and get the value currently in force.

        Args:
            latest: Newest raw value (e.g. this frame's gesture)
            min_interval_ms: Override the configured interval for this call
            now_ms: Current time in milliseconds (monotonic clock by default)

        Returns:
            The emitted value
        """
        now = _now_ms() if now_ms is None else now_ms
        interval = self.config.min_interval_ms if min_interval_ms is None else min_interval_ms

        if self._last_emit_ms is None or now - self._last_emit_ms >= interval:
            if latest != self._value:
                logger.debug("Throttle emitted %s -> %s (%d suppressed)",
                             self._value, latest, self._suppressed)
            self._value = latest
            self._last_emit_ms = now
            self._suppressed = 0
        elif latest != self._value:
            self._suppressed += 1

        return self._value

    @property
    def value(self) -> Optional[T]:
        """Value currently in force (None before the first emission)."""
        return self._value

    @property
    def has_value(self) -> bool:
        return self._last_emit_ms is not None

    def time_since_emit_ms(self, now_ms: Optional[float] = None) -> float:
        """Milliseconds since the last emission (inf before the first)."""
        if self._last_emit_ms is None:
            return float("inf")
        now = _now_ms() if now_ms is None else now_ms
        return now - self._last_emit_ms

    def reset(self) -> None:
        """Forget the emitted value; the next update is adopted immediately."""
        self._value = None
        self._last_emit_ms = None
        self._suppressed = 0


class LatestResultSlot(Generic[T]):
    """
    Single-slot, most-recent-wins handoff between threads.

    A producer (e.g. a recognition thread) overwrites the slot; the render
    loop reads whatever is newest. Nothing is queued, so a slow consumer
    simply skips stale results.
    """

    def __init__(self, default: Optional[T] = None):
        self._lock = threading.Lock()
        self._value: Optional[T] = default
        self._version = 0

    def put(self, value: T) -> None:
        """Overwrite the slot."""
        with self._lock:
            self._value = value
            self._version += 1

    def take(self) -> Optional[T]:
        """Most recent value (the default if nothing was put yet)."""
        with self._lock:
            return self._value

    @property
    def version(self) -> int:
        """Number of puts so far; lets a consumer notice fresh values."""
        with self._lock:
            return self._version
