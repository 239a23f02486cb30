"""
Gesture Particle Morph - Main Application
==========================================

Entry point: webcam -> MediaPipe hand landmarks -> gesture -> particle shape.
Orchestrates capture, detection, the shape controller and the renderer.
"""

import argparse
import logging
import signal
import sys
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from control.shape_controller import ShapeController
from detection.hand_detector import HandDetector, HandDetectorConfig
from detection.landmarks import HandLandmarks
from particles.morph_engine import MorphEngine, MorphEngineConfig
from particles.rotation import RotationConfig, RotationController
from particles.shape_library import ShapeLibrary, ShapeLibraryConfig
from recognition.gesture_classifier import GestureClassifier, GestureClassifierConfig
from recognition.gesture_throttle import LatestResultSlot, ThrottleGateConfig
from utils.config import load_config
from utils.logger import setup_logging
from utils.performance import PerformanceMonitor
from utils.visualization import HudInfo, ParticleRenderer, RendererConfig

logger = logging.getLogger(__name__)


@dataclass
class CameraSettings:
    """Webcam capture settings."""
    device_id: int = 0
    width: int = 1280
    height: int = 720
    mirror: bool = True

    @classmethod
    def from_dict(cls, config: dict) -> "CameraSettings":
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 1280),
            height=config.get("height", 720),
            mirror=config.get("mirror", True),
        )


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraSettings
    mediapipe: HandDetectorConfig
    recognition: GestureClassifierConfig
    throttle: ThrottleGateConfig
    shapes: ShapeLibraryConfig
    engine: MorphEngineConfig
    rotation: RotationConfig
    renderer: RendererConfig
    threaded_recognition: bool = False
    target_fps: float = 60.0
    report_interval_s: float = 10.0


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from a (defaults-merged) configuration dictionary."""
    particles = config_dict.get("particles", {})
    animation = config_dict.get("animation", {})
    recognition = config_dict.get("recognition", {})
    performance = config_dict.get("performance", {})

    return AppConfig(
        camera=CameraSettings.from_dict(config_dict.get("camera", {})),
        mediapipe=HandDetectorConfig.from_dict(config_dict.get("mediapipe", {})),
        recognition=GestureClassifierConfig.from_dict(recognition),
        throttle=ThrottleGateConfig.from_dict(recognition),
        shapes=ShapeLibraryConfig.from_dict(config_dict.get("shapes", {}),
                                            particle_count=particles.get("count", 10000)),
        engine=MorphEngineConfig.from_dict(particles, animation),
        rotation=RotationConfig.from_dict(animation),
        renderer=RendererConfig.from_dict(config_dict.get("visualization", {}), particles),
        threaded_recognition=recognition.get("threaded", False),
        target_fps=performance.get("target_fps", 60.0),
        report_interval_s=performance.get("report_interval_s", 10.0),
    )


class CameraSource:
    """cv2.VideoCapture wrapper returning BGR frames (mirrored if configured)."""

    def __init__(self, settings: CameraSettings):
        self.settings = settings
        self._cap: Optional[cv2.VideoCapture] = None

    def open(self) -> bool:
        self._cap = cv2.VideoCapture(self.settings.device_id)
        if not self._cap.isOpened():
            logger.error("Cannot open camera %s", self.settings.device_id)
            self._cap = None
            return False
        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.settings.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.settings.height)
        logger.info("Camera %s opened (%dx%d requested)", self.settings.device_id,
                    self.settings.width, self.settings.height)
        return True

    def read(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok:
            return None
        return cv2.flip(frame, 1) if self.settings.mirror else frame

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None


class RecognitionWorker(threading.Thread):
    """
    Captures and detects off the render thread.

    Each result is ``(frame, hand)`` written to a LatestResultSlot; the
    render loop consumes whatever is newest.
    """

    def __init__(self, camera: CameraSource, detector: HandDetector,
                 slot: LatestResultSlot, monitor: PerformanceMonitor):
        super().__init__(name="recognition", daemon=True)
        self.camera = camera
        self.detector = detector
        self.slot = slot
        self.monitor = monitor
        self._stop_event = threading.Event()

    def run(self) -> None:
        while not self._stop_event.is_set():
            frame = self.camera.read()
            if frame is None:
                time.sleep(0.01)
                continue
            start = time.perf_counter()
            hand = self.detector.detect(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB),
                                        int(time.monotonic() * 1000))
            self.monitor.record_stage("detection", time.perf_counter() - start)
            self.slot.put((frame, hand))

    def stop(self) -> None:
        self._stop_event.set()


class ParticleApp:
    """
    Gesture-driven particle morph application.

    Keyboard:
        q / ESC  quit
        p        log a performance report
        h        toggle HUD
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.camera = CameraSource(config.camera)
        self.detector = HandDetector(config.mediapipe)
        self.library = ShapeLibrary(config.shapes)
        self.engine = MorphEngine(config.engine, self.library)
        self.controller = ShapeController(
            GestureClassifier(config.recognition),
            self.engine,
            RotationController(config.rotation),
            config.throttle,
        )
        self.renderer = ParticleRenderer(config.renderer)
        self.performance = PerformanceMonitor(target_fps=config.target_fps)

        self._slot: LatestResultSlot[Tuple[np.ndarray, Optional[HandLandmarks]]] = \
            LatestResultSlot((None, None))
        self._worker: Optional[RecognitionWorker] = None
        self._running = False

    def start(self) -> bool:
        """Open the camera, start detection and generate the shapes."""
        logger.info("Starting particle morph...")

        failures = self.library.preload()
        if failures:
            logger.warning("%d shape(s) will fall back to the sphere: %s", len(failures),
                           ", ".join(s.value for s in failures))

        if not self.detector.start():
            logger.error("Failed to start hand detector")
            return False

        if not self.camera.open():
            self.detector.stop()
            return False

        if self.config.threaded_recognition:
            self._worker = RecognitionWorker(self.camera, self.detector, self._slot,
                                             self.performance)
            self._worker.start()
            logger.info("Recognition running on a worker thread")

        self.performance.start()
        self._running = True
        return True

    def stop(self) -> None:
        logger.info("Stopping particle morph...")
        self._running = False

        if self._worker is not None:
            self._worker.stop()
            self._worker.join(timeout=1.0)
            self._worker = None

        self.camera.close()
        self.detector.stop()
        self.performance.stop()
        self.renderer.close()

    def run(self) -> int:
        """Run until quit; returns the process exit status."""
        if not self.start():
            return 1

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self._main_loop()
        finally:
            self.stop()
            logger.info("\n%s", self.performance.get_report())
        return 0

    def _next_input(self) -> Tuple[Optional[np.ndarray], Optional[HandLandmarks]]:
        if self._worker is not None:
            return self._slot.take()

        with self.performance.measure("capture"):
            frame = self.camera.read()
        if frame is None:
            return None, None

        with self.performance.measure("detection"):
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            hand = self.detector.detect(rgb, int(time.monotonic() * 1000))
        return frame, hand

    def _main_loop(self) -> None:
        last_report = time.monotonic()

        while self._running:
            self.performance.frame_start()

            frame, hand = self._next_input()

            with self.performance.measure("recognition"):
                status = self.controller.update(hand)

            with self.performance.measure("morph"):
                self.controller.tick()

            with self.performance.measure("render"):
                preview = None
                if frame is not None and self.renderer.config.show_preview:
                    preview = frame.copy()
                    if hand is not None:
                        self.detector.draw_landmarks(preview, hand)

                image = self.renderer.render(
                    self.engine.position_buffer,
                    self.engine.color_buffer,
                    self.controller.rotation.angles,
                    HudInfo(label=status.label, gesture=status.gesture.value,
                            fps=self.performance.fps, hand_present=status.hand_present),
                    preview,
                )
                key = self.renderer.show(image)

            self.performance.frame_complete()

            if key in (ord("q"), 27):
                self._running = False
            elif key == ord("p"):
                logger.info("\n%s", self.performance.get_report())
            elif key == ord("h"):
                self.renderer.config.show_hud = not self.renderer.config.show_hud

            now = time.monotonic()
            if self.config.report_interval_s and now - last_report >= self.config.report_interval_s:
                logger.debug("FPS %.1f, frame %.1fms", self.performance.fps,
                             self.performance.frame_time_ms)
                last_report = now

    def _signal_handler(self, signum, frame) -> None:
        logger.info("Received signal %s, shutting down...", signum)
        self._running = False


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Gesture-driven particle morph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Gestures:
  thumbs-up      scatter blast
  index          "Hello"
  peace          "Gemini"
  three-fingers  "නියමයි"
  fist           "ආයුබෝවන්"
  open palm      sphere (steer with your hand)

Keyboard Controls:
  q/ESC          Quit
  p              Log performance report
  h              Toggle HUD
        """,
    )
    parser.add_argument("--config", "-c", default=None,
                        help="Path to configuration file (default: config/config.yaml)")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--threaded", action="store_true",
                        help="Run capture and detection on a worker thread")
    parser.add_argument("--particles", type=int, default=None, help="Override particle count")
    parser.add_argument("--font", default=None,
                        help="TrueType font for text shapes (needed for Sinhala)")

    args = parser.parse_args()

    # Console logging before the config is read, reconfigured right after
    setup_logging("DEBUG" if args.debug else "INFO")
    config_dict = load_config(args.config)

    log_cfg = config_dict.get("logging", {})
    setup_logging(
        "DEBUG" if args.debug else log_cfg.get("level", "INFO"),
        log_cfg.get("file"),
        log_cfg.get("max_size_mb", 10),
        log_cfg.get("backup_count", 3),
    )

    if args.particles is not None:
        config_dict["particles"]["count"] = args.particles
    if args.font is not None:
        config_dict["shapes"]["font_path"] = args.font
    if args.threaded:
        config_dict["recognition"]["threaded"] = True

    app = ParticleApp(create_app_config(config_dict))
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
