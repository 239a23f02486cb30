"""
Performance Monitoring Module
==============================

Frame rate and per-stage timing for the render loop
(capture, detection, recognition, morph, render).
"""

import time
import logging
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

STAGES = ("capture", "detection", "recognition", "morph", "render")


class Timer:
    """
    High-precision timer, usable as a context manager or decorator.

    Example:
        >>> with Timer("hello") as t:
        ...     library.points(ShapeId.HELLO)
        >>> print(f"Took {t.elapsed_ms:.2f}ms")
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._elapsed: float = 0.0

    def start(self) -> "Timer":
        self._start_time = time.perf_counter()
        self._end_time = None
        return self

    def stop(self) -> float:
        """Stop the timer and return elapsed seconds."""
        self._end_time = time.perf_counter()
        if self._start_time is not None:
            self._elapsed = self._end_time - self._start_time
        return self._elapsed

    @property
    def elapsed(self) -> float:
        """Elapsed seconds (running total while the timer is live)."""
        if self._start_time is None:
            return 0.0
        if self._end_time is None:
            return time.perf_counter() - self._start_time
        return self._elapsed

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False

    @staticmethod
    def decorate(name: str = ""):
        """Decorator factory that logs a function's duration at DEBUG."""
        def decorator(func: Callable):
            def wrapper(*args, **kwargs):
                with Timer(name or func.__name__) as t:
                    result = func(*args, **kwargs)
                logger.debug("%s: %.2fms", t.name, t.elapsed_ms)
                return result
            return wrapper
        return decorator


@dataclass
class PerformanceMetrics:
    """Snapshot of the loop's performance."""
    fps: float = 0.0
    frame_time_ms: float = 0.0
    stage_times_ms: Dict[str, float] = field(default_factory=dict)
    total_frames: int = 0
    slow_frames: int = 0


class PerformanceMonitor:
    """
    Rolling frame-rate and stage-latency statistics.

    A frame slower than ``1 / target_fps`` counts as slow.

    Example:
        >>> monitor = PerformanceMonitor(target_fps=60)
        >>> monitor.start()
        >>> while running:
        ...     monitor.frame_start()
        ...     with monitor.measure("morph"):
        ...         engine.tick()
        ...     monitor.frame_complete()
    """

    def __init__(self, window_size: int = 60, target_fps: float = 60.0):
        """
        Args:
            window_size: Number of frames in the rolling average
            target_fps: Frame rate the loop aims for
        """
        self.window_size = window_size
        self.target_fps = target_fps
        self._frame_times: deque = deque(maxlen=window_size)
        self._stage_times: Dict[str, deque] = {}
        self._frame_start: Optional[float] = None
        self._total_frames = 0
        self._slow_frames = 0
        self._lock = threading.Lock()

    def start(self) -> None:
        """Reset counters."""
        with self._lock:
            self._total_frames = 0
            self._slow_frames = 0
            self._frame_times.clear()
            self._stage_times.clear()
        logger.info("Performance monitor started (target %.0f FPS)", self.target_fps)

    def stop(self) -> None:
        logger.info("Performance monitor stopped. Total frames: %d, slow: %d",
                    self._total_frames, self._slow_frames)

    def frame_start(self) -> None:
        self._frame_start = time.perf_counter()

    def frame_complete(self) -> None:
        """Close the frame opened by ``frame_start``."""
        if self._frame_start is None:
            return
        self.record_frame(time.perf_counter() - self._frame_start)
        self._frame_start = None

    def record_frame(self, frame_time: float) -> None:
        """Record one frame's duration in seconds."""
        with self._lock:
            self._frame_times.append(frame_time)
            self._total_frames += 1
            if self.target_fps > 0 and frame_time > 1.0 / self.target_fps:
                self._slow_frames += 1

    @contextmanager
    def measure(self, stage: str):
        """Time a block under ``stage``."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_stage(stage, time.perf_counter() - start)

    def record_stage(self, stage: str, elapsed: float) -> None:
        """Record a stage duration in seconds (e.g. from a worker thread)."""
        with self._lock:
            if stage not in self._stage_times:
                self._stage_times[stage] = deque(maxlen=self.window_size)
            self._stage_times[stage].append(elapsed)

    @property
    def fps(self) -> float:
        """Rolling average FPS."""
        with self._lock:
            if not self._frame_times:
                return 0.0
            avg = sum(self._frame_times) / len(self._frame_times)
            return 1.0 / avg if avg > 0 else 0.0

    @property
    def frame_time_ms(self) -> float:
        with self._lock:
            if not self._frame_times:
                return 0.0
            return sum(self._frame_times) / len(self._frame_times) * 1000

    def stage_time_ms(self, stage: str) -> float:
        """Average duration of a stage in milliseconds (0 if never measured)."""
        with self._lock:
            times = self._stage_times.get(stage)
            if not times:
                return 0.0
            return sum(times) / len(times) * 1000

    @property
    def is_meeting_target(self) -> bool:
        return self.fps >= self.target_fps

    def get_metrics(self) -> PerformanceMetrics:
        with self._lock:
            stages = list(self._stage_times)
        return PerformanceMetrics(
            fps=self.fps,
            frame_time_ms=self.frame_time_ms,
            stage_times_ms={s: self.stage_time_ms(s) for s in stages},
            total_frames=self._total_frames,
            slow_frames=self._slow_frames,
        )

    def get_report(self) -> str:
        """Formatted multi-line report."""
        metrics = self.get_metrics()
        status = "OK" if self.is_meeting_target else "BELOW TARGET"

        ordered = [s for s in STAGES if s in metrics.stage_times_ms]
        ordered += sorted(s for s in metrics.stage_times_ms if s not in STAGES)
        stage_lines = "".join(f"  {s.capitalize()}: {metrics.stage_times_ms[s]:.2f}ms\n"
                              for s in ordered) or "  (none)\n"

        return (
            f"Performance Report [{status}]\n"
            f"{'=' * 40}\n"
            f"FPS: {metrics.fps:.1f} (target: >={self.target_fps:.0f})\n"
            f"Frame time: {metrics.frame_time_ms:.1f}ms\n"
            f"\nPer-Stage Breakdown:\n"
            f"{stage_lines}"
            f"\nFrame Stats:\n"
            f"  Total: {metrics.total_frames}\n"
            f"  Slow: {metrics.slow_frames} "
            f"({100 * metrics.slow_frames / max(1, metrics.total_frames):.1f}%)\n"
        )
