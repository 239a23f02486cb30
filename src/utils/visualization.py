"""
Visualization Module
=====================

Software point renderer for the particle cloud, built on OpenCV and numpy.

Each frame the cloud is rotated, projected through a perspective camera
looking down -z and splatted additively into a float canvas. A slowly
turning starfield sits behind it, and a HUD shows the current gesture
label, frame rate and an optional camera preview.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

_NEAR_PLANE = 0.1


@dataclass
class RendererConfig:
    """Renderer settings (``visualization`` + ``particles`` sections)."""
    window_name: str = "Particle Morph"
    width: int = 1280
    height: int = 720
    camera_distance: float = 100.0
    fov: float = 75.0               # Vertical field of view in degrees
    point_size: float = 1.2         # Particle size in scene units
    opacity: float = 0.9
    show_hud: bool = True
    show_preview: bool = True
    preview_scale: float = 0.25

    starfield_count: int = 2000
    starfield_range: float = 400.0
    starfield_opacity: float = 0.4
    starfield_speed_y: float = 0.0005
    starfield_speed_x: float = 0.0002

    # BGR
    hud_color: Tuple[int, int, int] = (255, 255, 255)
    accent_color: Tuple[int, int, int] = (255, 255, 0)

    @classmethod
    def from_dict(cls, config: dict, particles: Optional[dict] = None) -> "RendererConfig":
        """Create config from the ``visualization`` (and ``particles``) sections."""
        particles = particles or {}
        return cls(
            window_name=config.get("window_name", "Particle Morph"),
            width=config.get("width", 1280),
            height=config.get("height", 720),
            camera_distance=config.get("camera_distance", 100.0),
            fov=config.get("fov", 75.0),
            point_size=particles.get("size", 1.2),
            opacity=particles.get("opacity", 0.9),
            show_hud=config.get("show_hud", True),
            show_preview=config.get("show_preview", True),
            preview_scale=config.get("preview_scale", 0.25),
            starfield_count=config.get("starfield_count", 2000),
            starfield_range=config.get("starfield_range", 400.0),
            starfield_opacity=config.get("starfield_opacity", 0.4),
            starfield_speed_y=config.get("starfield_speed_y", 0.0005),
            starfield_speed_x=config.get("starfield_speed_x", 0.0002),
        )


@dataclass
class HudInfo:
    """What the HUD shows for one frame."""
    label: str = "STANDBY"
    gesture: str = "none"
    fps: float = 0.0
    hand_present: bool = False
    extra: Dict[str, str] = field(default_factory=dict)


def rotation_matrix(rx: float, ry: float) -> np.ndarray:
    """Rotation about x then y, applied to row vectors as ``points @ R.T``."""
    cx, sx = np.cos(rx), np.sin(rx)
    cy, sy = np.cos(ry), np.sin(ry)
    rot_x = np.array([[1, 0, 0], [0, cx, -sx], [0, sx, cx]], dtype=np.float32)
    rot_y = np.array([[cy, 0, sy], [0, 1, 0], [-sy, 0, cy]], dtype=np.float32)
    return rot_x @ rot_y


def hud_text(text: str) -> str:
    """Reduce a label to what the Hershey font can draw.

    Non-ASCII runs are dropped, so "නියමයි (Great)" shows as "(Great)".
    """
    cleaned = text.encode("ascii", "ignore").decode("ascii").strip()
    return " ".join(cleaned.split())


class Starfield:
    """Background stars that turn slowly about y and x."""

    def __init__(self, count: int, spread: float, rng: Optional[np.random.Generator] = None):
        rng = rng or np.random.default_rng()
        self.points = ((rng.random((count, 3)) - 0.5) * spread).astype(np.float32)
        self.rotation_x = 0.0
        self.rotation_y = 0.0

    def advance(self, speed_x: float, speed_y: float) -> None:
        self.rotation_x += speed_x
        self.rotation_y += speed_y


class ParticleRenderer:
    """
    Renders particle buffers into BGR frames and shows them in a window.

    Example:
        >>> renderer = ParticleRenderer(RendererConfig())
        >>> while running:
        ...     engine.tick()
        ...     frame = renderer.render(engine.position_buffer, engine.color_buffer,
        ...                             rotation.angles, HudInfo(label="Hello"))
        ...     key = renderer.show(frame)
    """

    def __init__(self, config: Optional[RendererConfig] = None,
                 rng: Optional[np.random.Generator] = None):
        self.config = config or RendererConfig()
        self.starfield = Starfield(self.config.starfield_count, self.config.starfield_range, rng)
        self._font = cv2.FONT_HERSHEY_SIMPLEX
        self._window_open = False

    @property
    def focal_length(self) -> float:
        """Pixels per scene unit at unit depth."""
        return (self.config.height / 2.0) / np.tan(np.radians(self.config.fov) / 2.0)

    def project(
        self,
        points: np.ndarray,
        rotation: Tuple[float, float] = (0.0, 0.0),
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Rotate and project scene points to pixel coordinates.

        Args:
            points: (N, 3) or flat (3N,) scene positions
            rotation: (about x, about y) in radians

        Returns:
            (columns, rows, visible mask); columns/rows are int arrays of
            length N, only meaningful where the mask is True
        """
        pts = np.asarray(points, dtype=np.float32).reshape(-1, 3)
        rotated = pts @ rotation_matrix(*rotation).T

        depth = self.config.camera_distance - rotated[:, 2]
        in_front = depth > _NEAR_PLANE
        safe_depth = np.where(in_front, depth, 1.0)

        f = self.focal_length
        cols = np.round(self.config.width / 2.0 + rotated[:, 0] * f / safe_depth).astype(np.int64)
        rows = np.round(self.config.height / 2.0 - rotated[:, 1] * f / safe_depth).astype(np.int64)

        visible = (in_front & (cols >= 0) & (cols < self.config.width)
                   & (rows >= 0) & (rows < self.config.height))
        return cols, rows, visible

    def _splat(self, canvas: np.ndarray, points: np.ndarray, colors: np.ndarray,
               rotation: Tuple[float, float], intensity: float) -> None:
        cols, rows, visible = self.project(points, rotation)
        if not visible.any():
            return
        np.add.at(canvas, (rows[visible], cols[visible]), colors[visible] * intensity)

    def render(
        self,
        positions: np.ndarray,
        colors: np.ndarray,
        rotation: Tuple[float, float] = (0.0, 0.0),
        hud: Optional[HudInfo] = None,
        preview: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Draw one frame.

        Args:
            positions: Particle positions, (N, 3) or flat (3N,)
            colors: Particle RGB colours in [0, 1], same layout
            rotation: Cloud rotation (about x, about y)
            hud: Overlay text, skipped when None or HUD disabled
            preview: BGR camera frame for the corner inset

        Returns:
            BGR uint8 image of ``height`` x ``width``
        """
        cfg = self.config
        canvas = np.zeros((cfg.height, cfg.width, 3), dtype=np.float32)

        self.starfield.advance(cfg.starfield_speed_x, cfg.starfield_speed_y)
        stars = self.starfield.points
        self._splat(canvas, stars, np.ones_like(stars),
                    (self.starfield.rotation_x, self.starfield.rotation_y), cfg.starfield_opacity)

        rgb = np.asarray(colors, dtype=np.float32).reshape(-1, 3)
        self._splat(canvas, positions, rgb, rotation, cfg.opacity)

        # Widen single-pixel splats to roughly the particle's on-screen size
        radius_px = cfg.point_size * self.focal_length / cfg.camera_distance / 2.0
        if radius_px > 0.5:
            canvas = cv2.GaussianBlur(canvas, (0, 0), sigmaX=radius_px / 2.0)
            canvas *= 1.0 + radius_px

        image = (np.clip(canvas, 0.0, 1.0) * 255).astype(np.uint8)
        image = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

        if preview is not None and cfg.show_preview:
            self.draw_preview(image, preview)
        if hud is not None and cfg.show_hud:
            self.draw_hud(image, hud)
        return image

    def draw_hud(self, image: np.ndarray, hud: HudInfo) -> np.ndarray:
        """Gesture label centred at the top, status lines top-left."""
        height, width = image.shape[:2]

        label = hud_text(hud.label) or hud.gesture.upper()
        scale, thickness = 1.4, 3
        (tw, th), _ = cv2.getTextSize(label, self._font, scale, thickness)
        org = ((width - tw) // 2, 30 + th)
        cv2.putText(image, label, (org[0] + 2, org[1] + 2), self._font, scale, (0, 0, 0),
                    thickness + 2, cv2.LINE_AA)
        cv2.putText(image, label, org, self._font, scale, self.config.accent_color,
                    thickness, cv2.LINE_AA)

        lines = [
            f"FPS: {hud.fps:.1f}",
            f"Gesture: {hud.gesture}",
            "Hand: detected" if hud.hand_present else "Hand: none",
        ]
        lines += [f"{k}: {v}" for k, v in hud.extra.items()]

        y = height - 20 * len(lines) - 10
        for line in lines:
            cv2.putText(image, line, (20, y), self._font, 0.5, self.config.hud_color, 1,
                        cv2.LINE_AA)
            y += 20
        return image

    def draw_preview(self, image: np.ndarray, frame: np.ndarray) -> np.ndarray:
        """Paste a scaled camera frame into the bottom-right corner."""
        height, width = image.shape[:2]
        pw = max(1, int(width * self.config.preview_scale))
        ph = max(1, int(frame.shape[0] * pw / max(1, frame.shape[1])))
        if ph >= height or pw >= width:
            return image

        small = cv2.resize(frame, (pw, ph), interpolation=cv2.INTER_AREA)
        if small.ndim == 2:
            small = cv2.cvtColor(small, cv2.COLOR_GRAY2BGR)

        y0, x0 = height - ph - 10, width - pw - 10
        image[y0:y0 + ph, x0:x0 + pw] = small
        cv2.rectangle(image, (x0 - 1, y0 - 1), (x0 + pw, y0 + ph), self.config.hud_color, 1)
        return image

    def show(self, image: np.ndarray) -> int:
        """Display a frame; returns the pressed key (255 when none)."""
        cv2.imshow(self.config.window_name, image)
        self._window_open = True
        return cv2.waitKey(1) & 0xFF

    def close(self) -> None:
        if self._window_open:
            cv2.destroyWindow(self.config.window_name)
            self._window_open = False
